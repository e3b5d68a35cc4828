"""OTP email delivery over SMTP.

Builds a multipart message (plain text plus the branded HTML body) and
hands it to an SMTP server with a bounded socket timeout.  Any SMTP or
socket failure is logged and re-raised as ``NotificationError``.
"""

from __future__ import annotations

import html
import logging
import smtplib
from datetime import datetime, timezone
from email.message import EmailMessage

from app.core.constants import DEFAULT_GREETING_NAME
from app.core.errors import NotificationError

logger = logging.getLogger(__name__)


_HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #eee; border-radius: 10px; background-color: #f9f9f9;">
  <div style="text-align: center; margin-bottom: 20px;">
    <h2 style="color: #1e40af;">{brand}</h2>
  </div>
  <div style="background-color: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1);">
    <h3 style="margin-top: 0;">Your One-Time Password</h3>
    <p>Hello {name},</p>
    <p>Your verification code for {brand} is:</p>
    <div style="text-align: center; margin: 20px 0;">
      <div style="font-size: 24px; font-weight: bold; letter-spacing: 8px; padding: 15px; background-color: #f0f4ff; border-radius: 5px;">{code}</div>
    </div>
    <p>This code will expire in {minutes} minutes.</p>
    <p>If you didn't request this code, please ignore this email.</p>
  </div>
  <div style="text-align: center; margin-top: 20px; font-size: 12px; color: #666;">
    <p>&copy; {year} {brand}. All rights reserved.</p>
  </div>
</div>
"""

_TEXT_TEMPLATE = """\
Hello {name},

Your verification code for {brand} is: {code}

This code will expire in {minutes} minutes.
If you didn't request this code, please ignore this email.
"""


def build_otp_message(
    *,
    sender: str,
    to_email: str,
    name: str | None,
    code: str,
    brand: str,
    valid_minutes: int,
) -> EmailMessage:
    """Render the OTP email.  Empty names fall back to a generic greeting."""
    display_name = name or DEFAULT_GREETING_NAME
    year = datetime.now(timezone.utc).year

    message = EmailMessage()
    message["Subject"] = f"Your OTP for {brand}"
    message["From"] = sender
    message["To"] = to_email
    message.set_content(
        _TEXT_TEMPLATE.format(
            name=display_name, brand=brand, code=code, minutes=valid_minutes,
        )
    )
    message.add_alternative(
        _HTML_TEMPLATE.format(
            name=html.escape(display_name),
            brand=html.escape(brand),
            code=code,
            minutes=valid_minutes,
            year=year,
        ),
        subtype="html",
    )
    return message


class SmtpNotifier:
    """Send OTP codes through a configured SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        brand: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
        valid_minutes: int = 10,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.brand = brand
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.valid_minutes = valid_minutes

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self.host, port=self.port, timeout=self.timeout)

    def send_otp(self, to_email: str, name: str | None, code: str) -> None:
        message = build_otp_message(
            sender=self.sender,
            to_email=to_email,
            name=name,
            code=code,
            brand=self.brand,
            valid_minutes=self.valid_minutes,
        )
        try:
            with self._new_connection() as conn:
                if self.use_tls:
                    conn.starttls()
                if self.username:
                    conn.login(self.username, self.password)
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "otp_email_send_failed",
                extra={
                    "to_email": to_email,
                    "smtp_host": self.host,
                    "error_message": str(exc),
                },
            )
            raise NotificationError() from exc

        logger.info("otp_email_sent", extra={"to_email": to_email})
