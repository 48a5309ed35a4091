from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from utils.exceptions import ErrorKind, SessionError
from .cookies import clear_session_cookies

logger = logging.getLogger(__name__)

# Transport mapping for the session core's error kinds
KIND_STATUS = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.INVALID_REFRESH_TOKEN: 401,
    ErrorKind.CONFLICT: 409,
    ErrorKind.CONFIGURATION: 500,
    ErrorKind.INTERNAL: 500,
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # 400 Bad Request (generic)
    @app.errorhandler(400)
    def bad_request(e):
        message = getattr(e, "description", "Bad request")
        return error_response("BAD_REQUEST", message, 400)

    @app.errorhandler(401)
    def unauthorized(e):
        message = getattr(e, "description", "Unauthorized")
        return error_response("UNAUTHORIZED", message, 401)

    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        message = getattr(e, "description", None) or "Resource not found"
        return error_response("NOT_FOUND", message, 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response("METHOD_NOT_ALLOWED", "Method not allowed", 405)

    # 409 Conflict
    @app.errorhandler(409)
    def conflict(e):
        message = getattr(e, "description", "Conflict")
        return error_response("CONFLICT", message, 409)

    @app.errorhandler(413)
    def too_large(e):
        return error_response("PAYLOAD_TOO_LARGE", "Request body is too large", 413)

    # 422 Unprocessable Entity (validation)
    @app.errorhandler(422)
    def unprocessable(e):
        message = getattr(e, "description", "Unprocessable entity")
        return error_response("VALIDATION_ERROR", message, 422)

    @app.errorhandler(429)
    def too_many_requests(e):
        message = getattr(e, "description", "Too many requests")
        return error_response("RATE_LIMITED", message, 429)

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Validation failed", 422, details=err.messages)

    # Session core errors carry their kind; no message inspection needed
    @app.errorhandler(SessionError)
    def handle_session_error(err: SessionError):
        status = KIND_STATUS.get(err.kind, 500)
        if status >= 500:
            logger.error("Session error (%s): %s", err.kind.value, err.message)
        response, status = error_response(err.kind.value, err.message, status)
        if err.kind is ErrorKind.INVALID_REFRESH_TOKEN:
            clear_session_cookies(response)
        return response, status

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        logger.exception("Integrity error", exc_info=err)
        message = str(getattr(err, "orig", err)).lower()
        if "unique" in message:
            return error_response("CONFLICT", "Unique constraint violated.", 409)
        return error_response("BAD_REQUEST", "Integrity error.", 400)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        code = err.name.upper().replace(" ", "_") if err.name else "HTTP_ERROR"
        return error_response(code, err.description, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        details = None
        # In dev, include exception details to speed up debugging
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
