"""Identity-token sign-in."""

from __future__ import annotations

import logging

from app.models.user import UserProfile
from app.services.identity import GoogleIdentityVerifier
from app.services.users import UserDirectory

logger = logging.getLogger(__name__)


def sign_in_with_identity(
    token: str | None,
    verifier: GoogleIdentityVerifier,
    directory: UserDirectory,
) -> UserProfile:
    """Verify ``token`` and return the matching profile, creating it if new.

    An existing profile is returned as stored; a newer name in the token
    never overwrites it.
    """
    claims = verifier.verify(token)

    user = directory.find_by_email(claims.email)
    if user is not None:
        return user

    logger.info("identity_signin_new_user")
    return directory.create_if_absent(
        claims.email,
        name=claims.name,
        external_id=claims.external_id,
    )
