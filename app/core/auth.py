from flask import Blueprint, current_app, jsonify, request
from flask_login import login_user, logout_user, current_user, login_required
from sqlalchemy.exc import IntegrityError
from app.models import User, db
from app.forms import SignupForm, SigninForm
from app.core.errors import (
    ValidationError,
    InvalidCredentials,
    DuplicateUsername,
    DuplicateEmail,
    NotFound,
    TooManyAttempts,
)
from app.utils.logging import log_action
import logging
import secrets
from datetime import datetime, timedelta
from collections import defaultdict

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

DEMO_USERNAME = "DemoUser"
DEMO_EMAIL = "demo@meowtodo.dev"

# Rate limiting for failed sign-ins (in-memory, per worker)
# Format: {identifier: [list of timestamps]}
_signin_rate_limit = defaultdict(list)
_signin_rate_limit_cleanup_time = datetime.utcnow()


def _check_rate_limit(identifier, max_attempts=5, window_minutes=15):
    """
    Check if identifier has exceeded the failed sign-in limit.

    Args:
        identifier: Username the attempts were made against
        max_attempts: Maximum failures allowed in time window
        window_minutes: Time window in minutes

    Returns:
        bool: True if within limit, False if exceeded
    """
    global _signin_rate_limit, _signin_rate_limit_cleanup_time

    cutoff_time = datetime.utcnow() - timedelta(minutes=window_minutes)

    # Cleanup old entries periodically (every 5 minutes)
    if datetime.utcnow() - _signin_rate_limit_cleanup_time > timedelta(minutes=5):
        for key in list(_signin_rate_limit.keys()):
            _signin_rate_limit[key] = [
                ts for ts in _signin_rate_limit[key] if ts > cutoff_time
            ]
            if not _signin_rate_limit[key]:
                del _signin_rate_limit[key]
        _signin_rate_limit_cleanup_time = datetime.utcnow()

    recent_attempts = [ts for ts in _signin_rate_limit.get(identifier, []) if ts > cutoff_time]
    return len(recent_attempts) < max_attempts


def _record_failed_attempt(identifier):
    _signin_rate_limit[identifier].append(datetime.utcnow())


def reset_rate_limits():
    """Forget all recorded sign-in failures."""
    _signin_rate_limit.clear()


def create_user(username, email, password):
    """
    Create a user with a hashed password.

    Raises:
        DuplicateUsername, DuplicateEmail: when either unique key is taken
    """
    email = email.lower()
    if User.query.filter_by(username=username).first():
        raise DuplicateUsername()
    if User.query.filter_by(email=email).first():
        raise DuplicateEmail()

    new_user = User(username=username, email=email)
    new_user.set_password(password)
    db.session.add(new_user)
    try:
        db.session.flush()
    except IntegrityError:
        # Lost a race against a concurrent sign-up
        db.session.rollback()
        raise DuplicateUsername()

    log_action("auth", "Register", f"Username: {new_user.username}", actor_id=new_user.id)
    db.session.commit()
    logger.info(f"User created: {new_user.id} ({new_user.username})")
    return new_user


def _require_json_object():
    """Forms read JSON bodies as key/value pairs; anything but an object is rejected."""
    if request.is_json and not isinstance(request.get_json(silent=True), dict):
        raise ValidationError("Invalid request body")


@auth_bp.route("/signup", methods=["POST"])
def signup():
    _require_json_object()
    form = SignupForm()
    if not form.validate_on_submit():
        raise ValidationError(form.first_error())

    user = create_user(form.username.data, form.email.data, form.password.data)
    return jsonify(user.to_dict()), 201


@auth_bp.route("/signin", methods=["POST"])
def signin():
    _require_json_object()
    form = SigninForm()
    if not form.validate_on_submit():
        raise ValidationError(form.first_error())

    identifier = form.identifier.data
    if not _check_rate_limit(
        identifier,
        max_attempts=current_app.config.get("SIGNIN_MAX_ATTEMPTS", 5),
        window_minutes=current_app.config.get("SIGNIN_WINDOW_MINUTES", 15),
    ):
        logger.warning(f"Sign-in rate limit exceeded for {identifier}")
        raise TooManyAttempts()

    user = User.query.filter_by(username=identifier).first()
    if not user or not user.check_password(form.password.data):
        _record_failed_attempt(identifier)
        # Log failed login attempt
        log_action("auth", "Failed Login", f"Failed sign-in attempt for username: {identifier}")
        db.session.commit()
        # Same error for unknown user and wrong password
        raise InvalidCredentials()

    login_user(user)
    log_action("auth", "Login", f"Successful sign-in for {user.username}", actor_id=user.id)
    db.session.commit()
    return jsonify(user.to_dict())


@auth_bp.route("/signout", methods=["POST"])
def signout():
    if current_user.is_authenticated:
        log_action("auth", "Logout", f"{current_user.username} signed out")
        db.session.commit()
    logout_user()
    return jsonify({"message": "Signed out"})


@auth_bp.route("/session")
@login_required
def session_info():
    return jsonify(current_user.to_dict())


def get_or_create_demo_user():
    """Return the shared demo account, creating it on first use."""
    user = User.query.filter_by(username=DEMO_USERNAME).first()
    if user:
        return user
    # Nobody signs in to the demo account with a password
    return create_user(DEMO_USERNAME, DEMO_EMAIL, secrets.token_urlsafe(32))


@auth_bp.route("/demo", methods=["POST"])
def demo_signin():
    if not current_app.config.get("DEMO_ACCOUNT_ENABLED"):
        raise NotFound("Demo account is disabled")

    user = get_or_create_demo_user()
    login_user(user)
    log_action("auth", "Demo Login", "Demo account sign-in", actor_id=user.id)
    db.session.commit()
    return jsonify(user.to_dict())
