"""Service error taxonomy.

Every failure a handler can surface is a ``ServiceError`` carrying the HTTP
status and the message shown to the caller.  Details meant for operators go
to the log, never into ``message``.
"""

from __future__ import annotations

from app.core.constants import (
    MSG_AUTH_FAILED,
    MSG_OTP_INVALID,
    MSG_OTP_EXPIRED,
    MSG_OTP_SEND_FAILED,
    MSG_SERVER_ERROR,
)


class ServiceError(Exception):
    """Base class for errors converted to ``{success: false, message}``."""

    status_code: int = 500
    default_message: str = MSG_SERVER_ERROR

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Required input is missing."""
    status_code = 400


class NotFoundError(ServiceError):
    """No profile matches the given email."""
    status_code = 404


class AuthenticationError(ServiceError):
    """Identity token could not be verified."""
    status_code = 500
    default_message = MSG_AUTH_FAILED


class InvalidOtpError(ServiceError):
    """No live OTP entry, or the code does not match."""
    status_code = 400
    default_message = MSG_OTP_INVALID


class ExpiredOtpError(ServiceError):
    """The OTP entry outlived its absolute expiry."""
    status_code = 400
    default_message = MSG_OTP_EXPIRED


class NotificationError(ServiceError):
    """The email transport rejected or timed out on the OTP message."""
    status_code = 500
    default_message = MSG_OTP_SEND_FAILED


class StoreError(ServiceError):
    """The user store failed."""
    status_code = 500
