"""One-time passcode registry and verification flow.

Codes are 6-digit TOTP values over a 600 s step derived from a fresh random
secret per request.  The step is a property of the code itself; each entry
also carries an absolute ``expires_at`` checked on verification and by the
periodic sweep.

``OtpRegistry`` is the only mutable OTP state.  It is an explicitly owned
object handed to the service and the sweep job, so it can be replaced by a
shared cache without touching the handlers.  All reads and writes go
through one ``threading.Lock``: request threads and the APScheduler thread
touch it concurrently.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Protocol

import pyotp

from app.core.constants import (
    MSG_EMAIL_AND_OTP_REQUIRED,
    MSG_EMAIL_REQUIRED,
    MSG_OTP_GENERIC,
    MSG_OTP_MISSING,
    MSG_OTP_SENT,
    MSG_USER_NOT_FOUND,
)
from app.core.errors import (
    ExpiredOtpError,
    InvalidOtpError,
    NotFoundError,
    NotificationError,
    ValidationError,
)
from app.models.otp import OtpEntry
from app.models.user import UserProfile
from app.services.users import UserDirectory

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OtpNotifier(Protocol):
    def send_otp(self, to_email: str, name: str | None, code: str) -> None: ...


class OtpRegistry:
    """Thread-safe email -> ``OtpEntry`` mapping, one live entry per email."""

    def __init__(self) -> None:
        self._entries: dict[str, OtpEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def put(self, entry: OtpEntry) -> None:
        """Store ``entry``, replacing any earlier one for the same email."""
        with self._lock:
            self._entries[entry.email] = entry

    def get(self, email: str) -> OtpEntry | None:
        with self._lock:
            return self._entries.get(email)

    def claim(self, entry: OtpEntry) -> bool:
        """Remove ``entry`` if it is still the live one for its email.

        Returns False when another caller already removed or replaced it.
        """
        with self._lock:
            if self._entries.get(entry.email) is not entry:
                return False
            del self._entries[entry.email]
            return True

    def sweep(self, now: datetime | None = None) -> int:
        """Drop every entry whose ``expires_at`` is before ``now``."""
        now = now or utcnow()
        with self._lock:
            expired = [
                email for email, entry in self._entries.items()
                if entry.is_expired(now)
            ]
            for email in expired:
                del self._entries[email]
        return len(expired)


class OtpService:
    """Issue and verify email OTPs for existing users."""

    def __init__(
        self,
        registry: OtpRegistry,
        directory: UserDirectory,
        notifier: OtpNotifier,
        *,
        digits: int = 6,
        ttl_seconds: int = 600,
        rollback_on_send_failure: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.registry = registry
        self.directory = directory
        self.notifier = notifier
        self.digits = digits
        self.ttl_seconds = ttl_seconds
        self.rollback_on_send_failure = rollback_on_send_failure
        self.clock = clock

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self.digits, interval=self.ttl_seconds)

    def issue(self, email: str | None) -> str:
        """Create an OTP for ``email`` and mail it.  Returns the client message.

        Unknown emails get the same success message with no entry created
        and nothing sent, so the response does not reveal whether an
        account exists.
        """
        if not email:
            raise ValidationError(MSG_EMAIL_REQUIRED)

        user = self.directory.find_by_email(email)
        if user is None:
            logger.info("otp_requested_for_unknown_email")
            return MSG_OTP_GENERIC

        now = self.clock()
        secret = pyotp.random_base32()
        code = self._totp(secret).at(now)
        entry = OtpEntry(
            email=email,
            secret=secret,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )
        self.registry.put(entry)

        try:
            self.notifier.send_otp(email, user.name, code)
        except NotificationError:
            if self.rollback_on_send_failure:
                self.registry.claim(entry)
            raise

        logger.info("otp_issued", extra={"user_id": str(user.id)})
        return MSG_OTP_SENT

    def verify(self, email: str | None, code: str | None) -> UserProfile:
        """Check ``code`` for ``email`` and return the signed-in profile.

        A wrong code leaves the entry in place so the user can retry until
        it expires.  A correct code consumes the entry; of two concurrent
        correct attempts only one wins the claim.
        """
        if not email or not code:
            raise ValidationError(MSG_EMAIL_AND_OTP_REQUIRED)

        entry = self.registry.get(email)
        if entry is None:
            raise InvalidOtpError(MSG_OTP_MISSING)

        now = self.clock()
        if entry.is_expired(now):
            self.registry.claim(entry)
            logger.info("otp_expired_on_verify")
            raise ExpiredOtpError()

        if not self._totp(entry.secret).verify(code.strip(), for_time=now):
            logger.info("otp_mismatch")
            raise InvalidOtpError()

        if not self.registry.claim(entry):
            # Consumed or replaced by a concurrent request
            raise InvalidOtpError(MSG_OTP_MISSING)

        user = self.directory.find_by_email(email)
        if user is None:
            raise NotFoundError(MSG_USER_NOT_FOUND)

        logger.info("otp_verified", extra={"user_id": str(user.id)})
        return user
