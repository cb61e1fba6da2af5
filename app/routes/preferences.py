import logging

from flask import Blueprint, current_app, jsonify, request

from app.core.errors import ValidationError
from app.projects.todo.core.preferences import pick_updates, read_preferences, write_preferences

logger = logging.getLogger(__name__)

preferences_bp = Blueprint('preferences', __name__)


@preferences_bp.route('/preferences', methods=['GET'])
def get_preferences():
    return jsonify(read_preferences(request.cookies))


@preferences_bp.route('/preferences', methods=['POST'])
def save_preferences():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Invalid request body')

    updates = pick_updates(data)
    preferences = dict(read_preferences(request.cookies), **updates)
    response = jsonify({'message': 'Preferences saved', 'preferences': preferences})
    try:
        write_preferences(response, updates, max_age=current_app.config.get('PREFERENCE_COOKIE_MAX_AGE'))
    except Exception:
        logger.exception('Error saving preferences')
        return jsonify({'error': 'Failed to save preferences'}), 500
    return response
