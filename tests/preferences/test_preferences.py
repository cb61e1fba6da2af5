"""
Tests for the cookie-backed preference store.
"""
import unittest
from unittest.mock import patch

from app.projects.todo.core.preferences import parse_bool, pick_updates, read_preferences
from tests.base import AppTestCase


class TestPreferenceParsing(unittest.TestCase):

    def test_defaults_when_absent(self):
        self.assertEqual(read_preferences({}), {"sortByDueDate": True, "hideCompletedUser": False})

    def test_garbled_values_fall_back_to_defaults(self):
        cookies = {"preference_sortByDueDate": "maybe", "preference_hideCompletedUser": ""}
        self.assertEqual(read_preferences(cookies), {"sortByDueDate": True, "hideCompletedUser": False})

    def test_parse_bool(self):
        self.assertTrue(parse_bool("TRUE", False))
        self.assertFalse(parse_bool("false", True))
        self.assertTrue(parse_bool(None, True))

    def test_pick_updates_keeps_known_booleans_only(self):
        updates = pick_updates({"sortByDueDate": False, "hideCompletedUser": "true", "theme": True})
        self.assertEqual(updates, {"sortByDueDate": False})


class TestPreferenceRoutes(AppTestCase):

    def test_get_returns_defaults_without_session(self):
        r = self.client.get("/preferences")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.get_json(), {"sortByDueDate": True, "hideCompletedUser": False})

    def test_post_then_get_round_trip(self):
        r = self.client.post("/preferences", json={"sortByDueDate": False, "hideCompletedUser": True})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.get_json()["message"], "Preferences saved")
        self.assertEqual(self.client.get("/preferences").get_json(), {"sortByDueDate": False, "hideCompletedUser": True})

    def test_partial_update_keeps_other_value(self):
        self.client.post("/preferences", json={"hideCompletedUser": True})
        self.client.post("/preferences", json={"sortByDueDate": False})
        self.assertEqual(self.client.get("/preferences").get_json(), {"sortByDueDate": False, "hideCompletedUser": True})

    def test_non_boolean_values_are_ignored(self):
        r = self.client.post("/preferences", json={"sortByDueDate": "false"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.headers.getlist("Set-Cookie"), [])
        self.assertTrue(self.client.get("/preferences").get_json()["sortByDueDate"])

    def test_cookies_are_session_cookies_by_default(self):
        r = self.client.post("/preferences", json={"sortByDueDate": False})
        cookie = r.headers.get("Set-Cookie")
        self.assertIn("preference_sortByDueDate=false", cookie)
        self.assertIn("HttpOnly", cookie)
        self.assertIn("SameSite=Lax", cookie)
        self.assertNotIn("Max-Age", cookie)

    def test_invalid_body_returns_400(self):
        r = self.client.post("/preferences", json=[True])
        self.assertEqual(r.status_code, 400)

    def test_write_failure_returns_500(self):
        with patch("app.routes.preferences.write_preferences", side_effect=RuntimeError("boom")):
            r = self.client.post("/preferences", json={"sortByDueDate": False})
        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.get_json(), {"error": "Failed to save preferences"})


class TestPersistentPreferenceCookies(AppTestCase):
    config_overrides = {"PREFERENCE_COOKIE_MAX_AGE": 31536000}

    def test_cookie_has_one_year_max_age(self):
        r = self.client.post("/preferences", json={"hideCompletedUser": True})
        self.assertIn("Max-Age=31536000", r.headers.get("Set-Cookie"))


if __name__ == "__main__":
    unittest.main()
