"""Google ID token verification.

Tokens are checked with ``google.oauth2.id_token.verify_oauth2_token`` which
validates signature, issuer, expiry and audience.  Google's signing certs
are fetched through a shared ``requests`` session wrapped by CacheControl so
they are only re-downloaded when their HTTP cache headers say so.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any

import cachecontrol
import google.auth.exceptions
import google.auth.transport.requests
import google.oauth2.id_token
import requests

from app.core.errors import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityClaims:
    """Verified fields extracted from an ID token."""
    email: str
    name: str | None
    external_id: str


class _TimeoutRequest(google.auth.transport.requests.Request):
    """Transport that applies a fixed timeout to every cert fetch."""

    def __init__(self, session: requests.Session, timeout: float) -> None:
        super().__init__(session=session)
        self._timeout = timeout

    def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):  # type: ignore[override]
        return super().__call__(
            url,
            method=method,
            body=body,
            headers=headers,
            timeout=timeout or self._timeout,
            **kwargs,
        )


class GoogleIdentityVerifier:
    """Verify Google ID tokens issued for ``client_id``."""

    def __init__(self, client_id: str, timeout: float = 10.0) -> None:
        self.client_id = client_id
        self.timeout = timeout
        self._session: requests.Session | None = None
        self._lock = Lock()

    def _get_session(self) -> requests.Session:
        # Lock guards creation only; cert fetches run concurrently
        with self._lock:
            if self._session is None:
                self._session = cachecontrol.CacheControl(requests.session())
            return self._session

    def _decode(self, token: str) -> dict[str, Any]:
        request = _TimeoutRequest(self._get_session(), self.timeout)
        return google.oauth2.id_token.verify_oauth2_token(
            token, request, audience=self.client_id
        )

    def verify(self, token: str | None) -> IdentityClaims:
        """Return the verified claims or raise ``AuthenticationError``.

        The raised error never carries verification detail; that is
        logged here instead.
        """
        if not token:
            logger.warning("identity_token_missing")
            raise AuthenticationError()
        if not self.client_id:
            logger.error("identity_client_id_not_configured")
            raise AuthenticationError()

        try:
            idinfo = self._decode(token)
        except (ValueError, google.auth.exceptions.GoogleAuthError) as exc:
            logger.warning(
                "identity_token_rejected",
                extra={"error_message": str(exc)},
            )
            raise AuthenticationError() from exc
        except requests.RequestException as exc:
            logger.error(
                "identity_transport_failed",
                extra={"error_message": str(exc)},
            )
            raise AuthenticationError() from exc

        email = idinfo.get("email")
        if not email or idinfo.get("email_verified") is False:
            logger.warning(
                "identity_token_without_verified_email",
                extra={"sub": idinfo.get("sub")},
            )
            raise AuthenticationError()

        return IdentityClaims(
            email=email,
            name=idinfo.get("name"),
            external_id=str(idinfo.get("sub", "")),
        )
