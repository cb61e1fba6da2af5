"""
Todo store.

Every mutation looks the todo up by (id, owner) in one query, so a todo that
belongs to someone else is indistinguishable from one that does not exist.
"""
import logging
import math
from datetime import date, datetime

from sqlalchemy.orm import joinedload

from app import db
from app.core.errors import InvalidDueDate, NotFound, ValidationError
from app.projects.friends.services.friend_service import get_friend_ids
from app.projects.todo.models import TodoItem
from app.utils.logging import log_action

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200

_UNSET = object()


def parse_due_date(value):
    """
    Parse a dueDate from a request body.

    None and "" mean "no due date". Strings may be YYYY-MM-DD or a full ISO
    datetime, in which case only the date part is kept.

    Raises:
        InvalidDueDate: anything else
    """
    if value is None or value == '':
        return None
    if not isinstance(value, str):
        raise InvalidDueDate('Invalid dueDate format. Please use a string, null, or empty string.')

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
    except ValueError:
        raise InvalidDueDate()


def _clean_title(title, message):
    if not isinstance(title, str) or not title.strip():
        raise ValidationError(message)
    title = title.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f'Title must be {TITLE_MAX_LENGTH} characters or less')
    return title


def _clean_description(description):
    if description is None:
        return ''
    if not isinstance(description, str):
        raise ValidationError('Description must be a string')
    return description


def get_owned_todo(todo_id, owner_id):
    todo = TodoItem.query.filter_by(id=todo_id, user_id=owner_id).first()
    if todo is None:
        raise NotFound('Todo not found')
    return todo


def create_todo(owner, title, description=None, due_date=None):
    title = _clean_title(title, 'Title is required')
    todo = TodoItem(
        user_id=owner.id,
        title=title,
        description=_clean_description(description),
        due_date=parse_due_date(due_date),
    )
    db.session.add(todo)
    log_action('todo', 'Add', f"{owner.username} added todo: '{title}'", actor_id=owner.id)
    db.session.commit()
    return todo


def update_todo(todo_id, owner, fields):
    """
    Apply a partial update. Keys missing from fields are left untouched; an
    explicit null or empty dueDate clears it.
    """
    todo = get_owned_todo(todo_id, owner.id)

    title = fields.get('title', _UNSET)
    completed = fields.get('completed', _UNSET)
    description = fields.get('description', _UNSET)
    due_date = fields.get('dueDate', _UNSET)

    # Validate everything before touching the row
    if title is not _UNSET:
        title = _clean_title(title, 'Title cannot be empty')
    if completed is not _UNSET and not isinstance(completed, bool):
        raise ValidationError('completed must be true or false')
    if description is not _UNSET:
        description = _clean_description(description)
    if due_date is not _UNSET:
        due_date = parse_due_date(due_date)

    was_completed = todo.completed
    if title is not _UNSET:
        todo.title = title
    if completed is not _UNSET:
        todo.completed = completed
    if description is not _UNSET:
        todo.description = description
    if due_date is not _UNSET:
        todo.due_date = due_date
    todo.updated_at = datetime.utcnow()

    if completed is not _UNSET and completed != was_completed:
        category = 'Complete' if completed else 'Reactivate'
        status = 'completed' if completed else 'reactivated'
        log_action('todo', category, f"{owner.username} {status} todo: '{todo.title}'", actor_id=owner.id)
    db.session.commit()
    return todo


def delete_todo(todo_id, owner):
    todo = get_owned_todo(todo_id, owner.id)
    # Store title before deleting for the log
    todo_title = todo.title
    db.session.delete(todo)
    log_action('todo', 'Delete', f"{owner.username} deleted todo: '{todo_title}'", actor_id=owner.id)
    db.session.commit()


def visible_owner_ids(viewer_id):
    return [viewer_id] + get_friend_ids(viewer_id)


def _visible_query(viewer_id, owner_id=None):
    owner_ids = visible_owner_ids(viewer_id)
    if owner_id is not None:
        if owner_id not in owner_ids:
            # Not the viewer and not a friend: same answer as a missing user
            raise NotFound('User not found')
        owner_ids = [owner_id]
    return (
        TodoItem.query.options(joinedload(TodoItem.user))
        .filter(TodoItem.user_id.in_(owner_ids))
        .order_by(TodoItem.created_at.desc(), TodoItem.id.desc())
    )


def list_visible_todos(viewer_id, owner_id=None):
    """The viewer's todos plus every friend's todos, newest first."""
    return _visible_query(viewer_id, owner_id).all()


def paginate_visible_todos(viewer_id, page=1, limit=10, owner_id=None):
    query = _visible_query(viewer_id, owner_id)
    total = query.order_by(None).count()
    todos = query.offset((page - 1) * limit).limit(limit).all()
    return {
        'todos': todos,
        'totalCount': total,
        'currentPage': page,
        'totalPages': math.ceil(total / limit) if total else 0,
    }
