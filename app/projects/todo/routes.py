from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user

from app.core.errors import ValidationError
from app.projects.todo.core import visibility
from app.projects.todo.core.preferences import parse_bool, read_preferences
from app.projects.todo.services import todo_service

todo_bp = Blueprint('todo', __name__, url_prefix='/todos')


# --- Helper Functions ---

def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Invalid request body')
    return data


def _positive_int_arg(name, default):
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f'{name} must be a positive integer')
    if value < 1:
        raise ValidationError(f'{name} must be a positive integer')
    return value


def _owner_filter():
    """Optional ?userId= narrowing the listing to one visible owner."""
    raw = request.args.get('userId')
    if raw is None or raw == '':
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError('userId must be an integer')


@todo_bp.route('', methods=['GET'])
@login_required
def index():
    """The current user's todos and their friends' todos, newest first."""
    owner_id = _owner_filter()

    if 'page' not in request.args and 'limit' not in request.args:
        todos = todo_service.list_visible_todos(current_user.id, owner_id)
        return jsonify([todo.to_dict() for todo in todos])

    page = _positive_int_arg('page', 1)
    limit = _positive_int_arg('limit', current_app.config.get('TODOS_PAGE_SIZE', 10))
    limit = min(limit, current_app.config.get('TODOS_MAX_PAGE_SIZE', 100))

    result = todo_service.paginate_visible_todos(current_user.id, page, limit, owner_id)
    result['todos'] = [todo.to_dict() for todo in result['todos']]
    return jsonify(result)


@todo_bp.route('/views', methods=['GET'])
@login_required
def views():
    """My Tasks plus either Friends' Tasks or Finished Tasks."""
    view = request.args.get('view', visibility.VIEW_FRIENDS)
    if view not in visibility.VIEWS:
        raise ValidationError(f"view must be one of: {', '.join(visibility.VIEWS)}")

    preferences = read_preferences(request.cookies)
    sort_by_due_date = parse_bool(request.args.get('sortByDueDate'), preferences['sortByDueDate'])
    hide_completed = parse_bool(request.args.get('hideCompleted'), preferences['hideCompletedUser'])

    todos = [todo.to_dict() for todo in todo_service.list_visible_todos(current_user.id)]
    result = visibility.build_task_views(
        todos,
        current_user.id,
        sort_by_due_date=sort_by_due_date,
        hide_completed=hide_completed,
        view=view,
    )
    result['view'] = view
    result['preferences'] = {
        'sortByDueDate': sort_by_due_date,
        'hideCompletedUser': visibility.effective_hide_completed(view, hide_completed),
    }
    return jsonify(result)


@todo_bp.route('', methods=['POST'])
@login_required
def add():
    """Add a new todo item"""
    data = _json_body()
    todo = todo_service.create_todo(
        current_user,
        data.get('title'),
        description=data.get('description'),
        due_date=data.get('dueDate'),
    )
    return jsonify(todo.to_dict()), 201


@todo_bp.route('/<int:todo_id>', methods=['PATCH'])
@login_required
def update(todo_id):
    """Partially update a todo the current user owns"""
    data = _json_body()
    todo = todo_service.update_todo(todo_id, current_user, data)
    return jsonify(todo.to_dict())


@todo_bp.route('/<int:todo_id>', methods=['DELETE'])
@login_required
def delete(todo_id):
    """Delete a todo item"""
    todo_service.delete_todo(todo_id, current_user)
    return jsonify({'message': 'Todo deleted successfully'})
