"""
Error kinds raised by the session/token core.

The transport layer dispatches on `kind` (see api/errors.py); it never has to
look at the message text to pick a status code.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    CONFIGURATION = "CONFIGURATION_ERROR"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL_ERROR"


class SessionError(Exception):
    """Base class: carries an ErrorKind and a client-safe message."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SessionError):
    kind = ErrorKind.VALIDATION
    default_message = "Invalid input"


class InvalidCredentials(SessionError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid credentials"


class InvalidRefreshToken(SessionError):
    kind = ErrorKind.INVALID_REFRESH_TOKEN
    default_message = "Invalid refresh token"


class ConfigurationError(SessionError):
    kind = ErrorKind.CONFIGURATION
    default_message = "Server is misconfigured"


class EmailAlreadyRegistered(SessionError):
    kind = ErrorKind.CONFLICT
    default_message = "User already exists"


class InternalError(SessionError):
    kind = ErrorKind.INTERNAL
