"""
API error taxonomy and the JSON error handlers.

Every failure leaves the API as {"error": "<message>"} with the matching
status code. Ownership mismatches are reported as NotFound so that other
users' resources are never confirmed to exist.
"""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from app import db

logger = logging.getLogger(__name__)


class APIError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(APIError):
    status_code = 400
    message = "Invalid request"


class InvalidDueDate(ValidationError):
    message = "Invalid dueDate format. Please use a valid date string."


class Unauthorized(APIError):
    status_code = 401
    message = "Unauthorized"


class InvalidCredentials(Unauthorized):
    message = "Invalid username or password"


class NotFound(APIError):
    status_code = 404
    message = "Not found"


class Conflict(APIError):
    status_code = 409
    message = "Conflict"


class DuplicateUsername(Conflict):
    message = "Username already exists"


class DuplicateEmail(Conflict):
    message = "Email already registered"


class AlreadyFriends(Conflict):
    status_code = 400
    message = "Already friends with this user"


class TooManyAttempts(APIError):
    status_code = 429
    message = "Too many sign-in attempts. Please try again later."


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def handle_api_error(e):
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.exception("Unhandled error")
        db.session.rollback()
        return jsonify({"error": "Something went wrong. Please try again."}), 500
