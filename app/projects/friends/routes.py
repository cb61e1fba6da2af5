from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from app.core.errors import NotFound, ValidationError
from app.projects.friends.services import friend_service

friends_bp = Blueprint('friends', __name__)


@friends_bp.route('/friends', methods=['GET'])
@login_required
def list_friends():
    """Everyone the current user is friends with."""
    friends = friend_service.list_friends(current_user.id)
    return jsonify([friend.to_public_dict() for friend in friends])


@friends_bp.route('/friends', methods=['POST'])
@login_required
def add_friend():
    data = request.get_json(silent=True) or {}
    username = data.get('username') if isinstance(data, dict) else None
    if isinstance(username, str):
        username = username.strip()
    if not username:
        raise ValidationError('Username is required')

    friend_service.add_friend(current_user, username)
    return jsonify({'message': 'Friend added successfully'})


@friends_bp.route('/friends', methods=['DELETE'])
@login_required
def remove_friend():
    friend_id = request.args.get('friendId', '').strip()
    if not friend_id:
        raise ValidationError('Friend ID is required')
    try:
        friend_id = int(friend_id)
    except ValueError:
        raise NotFound('Friend not found')

    friend_service.remove_friend(current_user.id, friend_id)
    return jsonify({'message': 'Friend removed successfully'})


@friends_bp.route('/users', methods=['GET'])
@login_required
def list_users():
    """Directory for the add-friend picker."""
    term = request.args.get('q', '').strip()
    return jsonify(friend_service.search_users(current_user.id, term or None))
