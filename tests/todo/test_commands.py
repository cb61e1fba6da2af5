"""
Tests for the `flask meowtodo` CLI group.
"""
import unittest

from app.models import User
from tests.base import AppTestCase


class TestMeowtodoCommands(AppTestCase):

    def setUp(self):
        super().setUp()
        self.runner = self.app.test_cli_runner()

    def test_create_demo_user_is_idempotent(self):
        first = self.runner.invoke(args=["meowtodo", "create-demo-user"])
        self.assertEqual(first.exit_code, 0, first.output)
        self.assertIn("Demo account ready: DemoUser", first.output)

        second = self.runner.invoke(args=["meowtodo", "create-demo-user"])
        self.assertEqual(second.exit_code, 0, second.output)
        self.assertEqual(first.output, second.output)

        with self.app.app_context():
            self.assertEqual(User.query.filter_by(username="DemoUser").count(), 1)

    def test_stats_counts(self):
        alice = self.user_client("alice")
        done = self.add_todo(alice, "Feed the cat")
        self.add_todo(alice, "Buy litter")
        alice.patch(f"/todos/{done['id']}", json={"completed": True})
        bob = self.user_client("bob")
        self.befriend(bob, "alice")

        result = self.runner.invoke(args=["meowtodo", "stats"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Users: 2", result.output)
        self.assertIn("Todos: 2 (1 completed)", result.output)
        self.assertIn("Friendships: 1", result.output)

    def test_stats_on_empty_database(self):
        result = self.runner.invoke(args=["meowtodo", "stats"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Users: 0", result.output)
        self.assertIn("Todos: 0 (0 completed)", result.output)


if __name__ == "__main__":
    unittest.main()
