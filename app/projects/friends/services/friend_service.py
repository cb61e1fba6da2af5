"""
Friends graph operations.

Friendship is a single canonical undirected edge per pair (see Friendship),
so adding or removing one is a single-row write committed together with its
audit entry.
"""
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from app import db
from app.core.errors import AlreadyFriends, NotFound, ValidationError
from app.models import User
from app.projects.friends.models import Friendship
from app.utils.logging import log_action

logger = logging.getLogger(__name__)


def _edge_query(user_id, other_id):
    low, high = Friendship.normalize(user_id, other_id)
    return Friendship.query.filter_by(user_low_id=low, user_high_id=high)


def are_friends(user_id, other_id):
    if user_id == other_id:
        return False
    return db.session.query(_edge_query(user_id, other_id).exists()).scalar()


def get_friend_ids(user_id):
    """Ids of everyone connected to user_id, whichever end of the edge they sit on."""
    edges = Friendship.query.filter(
        or_(Friendship.user_low_id == user_id, Friendship.user_high_id == user_id)
    ).all()
    return sorted({edge.other_id(user_id) for edge in edges})


def list_friends(user_id):
    friend_ids = get_friend_ids(user_id)
    if not friend_ids:
        return []
    return User.query.filter(User.id.in_(friend_ids)).order_by(User.username).all()


def add_friend(viewer, target_username):
    """
    Create a mutual friendship between viewer and the user named target_username.

    Raises:
        ValidationError: missing username, or viewer targets themself
        NotFound: no such user
        AlreadyFriends: the edge already exists
    """
    if not target_username:
        raise ValidationError("Username is required")

    friend = User.query.filter_by(username=target_username).first()
    if not friend:
        raise NotFound("User not found")
    if friend.id == viewer.id:
        raise ValidationError("You cannot add yourself as a friend")
    if are_friends(viewer.id, friend.id):
        raise AlreadyFriends()

    low, high = Friendship.normalize(viewer.id, friend.id)
    db.session.add(Friendship(user_low_id=low, user_high_id=high))
    log_action("friends", "Add", f"{viewer.username} added friend {friend.username}", actor_id=viewer.id)
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent request created the same edge first
        db.session.rollback()
        raise AlreadyFriends()

    logger.info(f"Friendship created: {viewer.id} <-> {friend.id}")
    return friend


def remove_friend(viewer_id, friend_id):
    """
    Remove the friendship between viewer_id and friend_id in both directions.

    Removing an edge that does not exist is a no-op.

    Raises:
        NotFound: either user record is missing
    """
    viewer = db.session.get(User, viewer_id)
    if not viewer:
        raise NotFound("Current user not found")
    friend = db.session.get(User, friend_id)
    if not friend:
        raise NotFound("Friend not found")

    removed = _edge_query(viewer.id, friend.id).delete(synchronize_session=False)
    if removed:
        log_action("friends", "Remove", f"{viewer.username} removed friend {friend.username}", actor_id=viewer.id)
    db.session.commit()
    return removed > 0


def search_users(viewer_id, term=None):
    """Every other user, optionally filtered by a username substring, flagged with isFriend."""
    query = User.query.filter(User.id != viewer_id)
    if term:
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        query = query.filter(User.username.ilike(f"%{escaped}%", escape="\\"))
    users = query.order_by(User.username).all()
    friend_ids = set(get_friend_ids(viewer_id))
    return [
        dict(user.to_public_dict(), isFriend=user.id in friend_ids)
        for user in users
    ]
