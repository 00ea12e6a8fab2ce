"""
Error types and classification shared by the collaborators and the session.

Only a *definitive* authentication failure (401, explicit auth marker, or a
token signature / expiry message) is allowed to end a session. Everything
else is an operational error that the caller may display.
"""

from __future__ import annotations

from typing import Any, Optional

INVALID_CREDENTIALS_MESSAGE = (
    "Invalid email or password. Please check your credentials and try again."
)
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"

_TOKEN_ERROR_MARKERS = (
    "invalid token: invalid signature",
    "token verification failed",
    "token has expired",
    "jwt expired",
)

_CREDENTIAL_ERROR_MARKERS = (
    "invalid credentials",
    "invalid password",
    "authentication failed",
)

_FRIENDLY_MESSAGES: dict[str, str] = {
    "401": "Please log in to continue",
    "403": "You do not have permission to perform this action",
    "404": "The requested resource was not found",
    "409": "This resource already exists",
    "500": "Server error. Please try again later",
    "503": "Service temporarily unavailable",
    "VALIDATION_ERROR": "Please check your input and try again",
    "UNAUTHORIZED": "Please log in to continue",
    "FORBIDDEN": "You do not have permission",
    "NOT_FOUND": "Resource not found",
    "TIMEOUT": "Request timed out. Please try again.",
    "NETWORK_ERROR": "Network error. Please check your connection.",
}


class BasilError(Exception):
    """Base class for all errors raised by basil_core."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ApiError(BasilError):
    """A failed call to the remote API (HTTP error status or transport failure)."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        is_auth_error: bool = False,
        details: Any = None,
    ):
        super().__init__(message)
        self.status = status
        self.code = code
        self.is_auth_error = is_auth_error
        self.details = details

    def __repr__(self) -> str:
        return f"ApiError(status={self.status!r}, code={self.code!r}, message={self.message!r})"


class LoginError(BasilError):
    """A login attempt failed. ``message`` is safe to show to the user."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


def is_token_error_message(message: str) -> bool:
    lower = message.lower()
    if any(marker in lower for marker in _TOKEN_ERROR_MARKERS):
        return True
    return "invalid token" in lower and "signature" in lower


def is_definitive_auth_error(error: BaseException) -> bool:
    """True only for errors that prove the credential itself is no longer valid."""
    status = getattr(error, "status", None)
    if isinstance(status, int) and not isinstance(status, bool) and status == 401:
        return True
    if getattr(error, "is_auth_error", False) is True:
        return True
    message = getattr(error, "message", None)
    if not isinstance(message, str):
        message = str(error)
    return is_token_error_message(message)


def login_error_message(error: BaseException) -> str:
    """Message for a failed login: generic for auth failures, raw otherwise."""
    message = getattr(error, "message", None)
    if not isinstance(message, str):
        message = str(error)
    lower = message.lower()
    if is_definitive_auth_error(error) or any(m in lower for m in _CREDENTIAL_ERROR_MARKERS):
        return INVALID_CREDENTIALS_MESSAGE
    return message or UNEXPECTED_ERROR_MESSAGE


def user_friendly_message(code: Optional[str | int], fallback: str = "") -> str:
    """Look up a display message by error code or HTTP status."""
    if code is not None and str(code) in _FRIENDLY_MESSAGES:
        return _FRIENDLY_MESSAGES[str(code)]
    return fallback or "An error occurred"
