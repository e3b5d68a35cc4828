"""Process-wide service instances and their FastAPI dependency providers.

Each provider lazily builds its object from ``settings`` on first call and
returns the same instance afterwards.  Tests swap them through
``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends

from app.core.config import settings
from app.services.identity import GoogleIdentityVerifier
from app.services.notifier import SmtpNotifier
from app.services.otp import OtpRegistry, OtpService
from app.services.users import UserDirectory

_directory: UserDirectory | None = None
_registry: OtpRegistry | None = None
_verifier: GoogleIdentityVerifier | None = None
_notifier: SmtpNotifier | None = None


def get_user_directory() -> UserDirectory:
    global _directory
    if _directory is None:
        _directory = UserDirectory()
    return _directory


def get_otp_registry() -> OtpRegistry:
    """Return the registry shared by the handlers and the sweep job."""
    global _registry
    if _registry is None:
        _registry = OtpRegistry()
    return _registry


def get_identity_verifier() -> GoogleIdentityVerifier:
    global _verifier
    if _verifier is None:
        _verifier = GoogleIdentityVerifier(
            client_id=settings.GOOGLE_CLIENT_ID,
            timeout=settings.IDENTITY_TIMEOUT_SECONDS,
        )
    return _verifier


def get_notifier() -> SmtpNotifier:
    global _notifier
    if _notifier is None:
        _notifier = SmtpNotifier(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            sender=settings.EMAIL_FROM,
            brand=settings.BRAND_NAME,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_USE_TLS,
            timeout=settings.SMTP_TIMEOUT_SECONDS,
            valid_minutes=settings.OTP_TTL_SECONDS // 60,
        )
    return _notifier


def get_otp_service(
    registry: OtpRegistry = Depends(get_otp_registry),
    directory: UserDirectory = Depends(get_user_directory),
    notifier: SmtpNotifier = Depends(get_notifier),
) -> OtpService:
    return OtpService(
        registry,
        directory,
        notifier,
        digits=settings.OTP_DIGITS,
        ttl_seconds=settings.OTP_TTL_SECONDS,
        rollback_on_send_failure=settings.OTP_ROLLBACK_ON_SEND_FAILURE,
    )
