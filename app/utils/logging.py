"""
Logging utilities for tracking user activity across the site.
"""

from flask_login import current_user
from app.models import LogEntry
from app import db


def log_action(project, category, description, actor_id=None):
    """
    Record a user action in the audit log.

    The entry is added to the current session but not committed, so it lands
    in the same transaction as the change it describes.

    Args:
        project (str): The area of the site (e.g., 'auth', 'todo', 'friends')
        category (str): Short action label (e.g., 'Add', 'Login')
        description (str): Human-readable details
        actor_id (int, optional): Acting user. Defaults to the signed-in user,
                                  or None for anonymous actions.
    """
    if actor_id is None and current_user and current_user.is_authenticated:
        actor_id = current_user.id

    log_entry = LogEntry(
        project=project,
        category=category,
        actor_id=actor_id,
        description=description
    )
    db.session.add(log_entry)
    return log_entry
