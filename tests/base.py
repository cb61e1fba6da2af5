"""
Shared fixtures for app-level tests: a fresh app on in-memory SQLite per test.

No app context stays pushed while requests run, so each test client gets its
own request-scoped Flask-Login user.
"""
import unittest

from app import create_app, db
from app.core.auth import reset_rate_limits

TEST_CONFIG = {
    "TESTING": True,
    "SECRET_KEY": "test-secret",
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "WTF_CSRF_ENABLED": False,
    # Fast hashing for tests
    "PASSWORD_HASH_METHOD": "pbkdf2:sha256:1000",
    "DEMO_ACCOUNT_ENABLED": True,
}


def _create_test_app(**overrides):
    return create_app(dict(TEST_CONFIG, **overrides))


class AppTestCase(unittest.TestCase):
    config_overrides = {}

    def setUp(self):
        self.app = _create_test_app(**self.config_overrides)
        with self.app.app_context():
            db.create_all()
        reset_rate_limits()
        self.client = self.app.test_client()

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()

    def signup(self, username, password="meowmeow", email=None, client=None):
        client = client or self.client
        return client.post("/auth/signup", json={
            "username": username,
            "email": email or f"{username.lower()}@meowtodo.dev",
            "password": password,
        })

    def signin(self, username, password="meowmeow", client=None):
        client = client or self.client
        return client.post("/auth/signin", json={"identifier": username, "password": password})

    def user_client(self, username, password="meowmeow"):
        """A new test client for a freshly registered, signed-in user."""
        client = self.app.test_client()
        r = self.signup(username, password, client=client)
        self.assertEqual(r.status_code, 201, r.get_json())
        r = self.signin(username, password, client=client)
        self.assertEqual(r.status_code, 200, r.get_json())
        client.user = r.get_json()
        return client

    def add_todo(self, client, title, **fields):
        r = client.post("/todos", json=dict(title=title, **fields))
        self.assertEqual(r.status_code, 201, r.get_json())
        return r.get_json()

    def befriend(self, client, username):
        r = client.post("/friends", json={"username": username})
        self.assertEqual(r.status_code, 200, r.get_json())
