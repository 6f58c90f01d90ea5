"""
Error taxonomy for the credential core.

Every failure the core can report is one of the ``AuthError`` subclasses
below.  Each carries an ``ErrorKind`` tag so callers branch on ``exc.kind``
rather than on message text, plus the HTTP status and public message the
boundary layer renders.  Public messages never reveal internal detail
(e.g. whether an email is registered).
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "validation_error"
    USER_ALREADY_EXISTS = "user_already_exists"
    INVALID_CREDENTIALS = "invalid_credentials"
    MISSING_TOKEN = "missing_token"
    INVALID_TOKEN = "invalid_token"
    TOKEN_EXPIRED = "token_expired"
    HASHING_FAILURE = "hashing_failure"
    SIGNING_FAILURE = "signing_failure"
    DUPLICATE_KEY = "duplicate_key"


class AuthError(Exception):
    """Base class for all credential-core errors."""

    kind: ErrorKind
    status_code: int = 400
    public_message: str = "Request failed"

    def __init__(self, detail: Optional[str] = None) -> None:
        # ``detail`` is for logs only; it is never sent to clients.
        self.detail = detail or self.public_message
        super().__init__(self.detail)


class ConfigurationFault:
    """Marker for server-side misconfiguration, as opposed to caller mistakes."""


class ValidationError(AuthError):
    kind = ErrorKind.VALIDATION_ERROR
    status_code = 422
    public_message = "Invalid request"


class UserAlreadyExists(AuthError):
    kind = ErrorKind.USER_ALREADY_EXISTS
    status_code = 409
    public_message = "User already exists"


class InvalidCredentials(AuthError):
    """Unknown email *and* wrong password both raise this, with one message."""

    kind = ErrorKind.INVALID_CREDENTIALS
    status_code = 401
    public_message = "Invalid credentials"


class MissingToken(AuthError):
    kind = ErrorKind.MISSING_TOKEN
    status_code = 401
    public_message = "Token required"


class InvalidToken(AuthError):
    kind = ErrorKind.INVALID_TOKEN
    status_code = 403
    public_message = "Token is invalid"


class TokenExpired(AuthError):
    kind = ErrorKind.TOKEN_EXPIRED
    status_code = 403
    public_message = "Token has expired"


class HashingFailure(ConfigurationFault, AuthError):
    kind = ErrorKind.HASHING_FAILURE
    status_code = 500
    public_message = "Internal error"


class SigningFailure(ConfigurationFault, AuthError):
    kind = ErrorKind.SIGNING_FAILURE
    status_code = 500
    public_message = "Internal error"


class DuplicateKey(AuthError):
    """Raised by a credential store when an email is already taken."""

    kind = ErrorKind.DUPLICATE_KEY
    status_code = 409
    public_message = "User already exists"


def is_configuration_fault(exc: BaseException) -> bool:
    return isinstance(exc, ConfigurationFault)
