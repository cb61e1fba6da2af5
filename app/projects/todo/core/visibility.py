"""
Split, filter and sort the todos a viewer can see into the named task views.

Works on serialized todos (dicts shaped like TodoItem.to_dict()), so the
server and the API client share one implementation.
"""
from datetime import date, datetime

VIEW_FRIENDS = "friends"
VIEW_FINISHED = "finished"
VIEWS = (VIEW_FRIENDS, VIEW_FINISHED)

VIEW_KEYS = {
    VIEW_FRIENDS: "friendsTasks",
    VIEW_FINISHED: "finishedTasks",
}


def owner_id(todo):
    user = todo.get("user") or {}
    return user.get("id")


def _as_date(value):
    """dueDate as a date, or None. Accepts date, datetime or ISO strings."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _as_datetime(value):
    if value is None or value == "":
        return datetime.min
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).replace(tzinfo=None)


def partition_todos(todos, viewer_id):
    """Return (mine, theirs) preserving input order."""
    mine, theirs = [], []
    for todo in todos:
        if owner_id(todo) == viewer_id:
            mine.append(todo)
        else:
            theirs.append(todo)
    return mine, theirs


def completed_todos(todos):
    return [t for t in todos if t.get("completed")]


def filter_completed(todos, hide_completed):
    if not hide_completed:
        return list(todos)
    return [t for t in todos if not t.get("completed")]


def _due_date_key(todo):
    due = _as_date(todo.get("dueDate"))
    # Entries without a due date go after every dated entry
    return (due is None, due or date.min)


def sort_todos(todos, sort_by_due_date=True):
    """
    Sort by dueDate ascending with undated entries last, or by createdAt
    newest first. Both orders are stable.
    """
    if sort_by_due_date:
        return sorted(todos, key=_due_date_key)
    return sorted(todos, key=lambda t: _as_datetime(t.get("createdAt")), reverse=True)


def effective_hide_completed(view, hide_completed):
    """The Finished view always hides completed items from My Tasks."""
    if view == VIEW_FINISHED:
        return True
    return hide_completed


def toggle_view(view):
    return VIEW_FRIENDS if view == VIEW_FINISHED else VIEW_FINISHED


def build_task_views(todos, viewer_id, sort_by_due_date=True, hide_completed=False, view=VIEW_FRIENDS):
    """
    Build {"myTasks": [...], "friendsTasks" | "finishedTasks": [...]}.

    hide_completed only ever applies to the viewer's own tasks; friends'
    completed tasks stay visible.
    """
    if view not in VIEWS:
        raise ValueError(f"Unknown view: {view}")

    mine, theirs = partition_todos(todos, viewer_id)
    hide = effective_hide_completed(view, hide_completed)

    views = {"myTasks": sort_todos(filter_completed(mine, hide), sort_by_due_date)}
    if view == VIEW_FINISHED:
        views[VIEW_KEYS[view]] = sort_todos(completed_todos(mine), sort_by_due_date)
    else:
        views[VIEW_KEYS[view]] = sort_todos(theirs, sort_by_due_date)
    return views
