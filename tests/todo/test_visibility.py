"""
Unit tests for the task view partition/filter/sort logic.

Run (with venv activated):
  python -m unittest tests.todo.test_visibility -v
  pytest tests/todo/ -v
"""
import unittest

from app.projects.todo.core.visibility import (
    VIEW_FINISHED,
    VIEW_FRIENDS,
    build_task_views,
    completed_todos,
    filter_completed,
    partition_todos,
    sort_todos,
    toggle_view,
)

ME = 1
FRIEND = 2


def _todo(id, owner=ME, completed=False, due=None, created="2024-01-01T00:00:00"):
    return {
        "id": id,
        "title": f"Task {id}",
        "completed": completed,
        "dueDate": due,
        "createdAt": created,
        "user": {"id": owner, "username": f"user{owner}"},
    }


def _ids(todos):
    return [t["id"] for t in todos]


class TestPartition(unittest.TestCase):

    def test_splits_by_owner_preserving_order(self):
        todos = [_todo(1), _todo(2, owner=FRIEND), _todo(3), _todo(4, owner=3)]
        mine, theirs = partition_todos(todos, ME)
        self.assertEqual(_ids(mine), [1, 3])
        self.assertEqual(_ids(theirs), [2, 4])

    def test_completed_subset(self):
        mine = [_todo(1, completed=True), _todo(2), _todo(3, completed=True)]
        self.assertEqual(_ids(completed_todos(mine)), [1, 3])

    def test_filter_completed_off_keeps_everything(self):
        todos = [_todo(1, completed=True), _todo(2)]
        self.assertEqual(_ids(filter_completed(todos, False)), [1, 2])
        self.assertEqual(_ids(filter_completed(todos, True)), [2])


class TestSort(unittest.TestCase):

    def test_due_date_ascending_nulls_last(self):
        todos = [
            _todo(1, due=None),
            _todo(2, due="2024-03-01"),
            _todo(3, due=None),
            _todo(4, due="2024-01-01"),
        ]
        result = sort_todos(todos, sort_by_due_date=True)
        self.assertEqual([t["dueDate"] for t in result], ["2024-01-01", "2024-03-01", None, None])
        # Undated entries keep their original relative order
        self.assertEqual(_ids(result), [4, 2, 1, 3])

    def test_due_date_ties_are_stable(self):
        todos = [_todo(1, due="2024-02-01"), _todo(2, due="2024-02-01"), _todo(3, due="2024-01-15")]
        self.assertEqual(_ids(sort_todos(todos, True)), [3, 1, 2])

    def test_created_at_newest_first(self):
        todos = [
            _todo(1, created="2024-01-01T08:00:00"),
            _todo(2, created="2024-01-03T08:00:00"),
            _todo(3, created="2024-01-02T08:00:00.123456"),
        ]
        self.assertEqual(_ids(sort_todos(todos, sort_by_due_date=False)), [2, 3, 1])

    def test_created_at_ties_are_stable(self):
        todos = [_todo(1), _todo(2), _todo(3)]
        self.assertEqual(_ids(sort_todos(todos, sort_by_due_date=False)), [1, 2, 3])

    def test_does_not_mutate_input(self):
        todos = [_todo(1, due="2024-03-01"), _todo(2, due="2024-01-01")]
        sort_todos(todos, True)
        self.assertEqual(_ids(todos), [1, 2])


class TestBuildTaskViews(unittest.TestCase):

    def setUp(self):
        self.todos = [
            _todo(1, completed=True, due="2024-02-01"),
            _todo(2, due="2024-01-01"),
            _todo(3, owner=FRIEND, completed=True, due="2024-03-01"),
            _todo(4, owner=FRIEND, due=None),
        ]

    def test_friends_view(self):
        views = build_task_views(self.todos, ME, sort_by_due_date=True, hide_completed=False)
        self.assertEqual(set(views), {"myTasks", "friendsTasks"})
        self.assertEqual(_ids(views["myTasks"]), [2, 1])
        self.assertEqual(_ids(views["friendsTasks"]), [3, 4])

    def test_hide_completed_only_applies_to_my_tasks(self):
        views = build_task_views(self.todos, ME, hide_completed=True)
        self.assertEqual(_ids(views["myTasks"]), [2])
        # The friend's completed todo is still shown
        self.assertIn(3, _ids(views["friendsTasks"]))

    def test_finished_view_forces_hide_completed(self):
        views = build_task_views(self.todos, ME, hide_completed=False, view=VIEW_FINISHED)
        self.assertEqual(set(views), {"myTasks", "finishedTasks"})
        self.assertEqual(_ids(views["myTasks"]), [2])
        self.assertEqual(_ids(views["finishedTasks"]), [1])

    def test_unknown_view_raises(self):
        with self.assertRaises(ValueError):
            build_task_views(self.todos, ME, view="everyone")

    def test_toggle_view(self):
        self.assertEqual(toggle_view(VIEW_FRIENDS), VIEW_FINISHED)
        self.assertEqual(toggle_view(VIEW_FINISHED), VIEW_FRIENDS)


if __name__ == "__main__":
    unittest.main()
