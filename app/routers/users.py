"""Profile endpoints.

GET /check-email -- existence probe used by the sign-in screen.  It is
unauthenticated and therefore reveals whether an account exists.
POST /update-profile -- upserts allow-listed profile fields.
GET /profile -- fetches a profile by email.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from app.core.constants import MSG_EMAIL_REQUIRED, MSG_USER_NOT_FOUND
from app.core.errors import NotFoundError, ValidationError
from app.dependencies import get_user_directory
from app.models.user import EmailCheckResponse, ProfileUpdateRequest, UserResponse
from app.services.users import UserDirectory

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/check-email",
    response_model=EmailCheckResponse,
    response_model_exclude_unset=True,
)
def check_email(
    email: str | None = Query(default=None),
    directory: UserDirectory = Depends(get_user_directory),
) -> EmailCheckResponse:
    """Report whether a profile exists for ``email``."""
    if not email:
        return EmailCheckResponse(exists=False)

    user = directory.find_by_email(email)
    if user is None:
        return EmailCheckResponse(exists=False)

    return EmailCheckResponse(
        exists=True,
        user=user.to_projection(),
        profile_complete=user.profile_complete,
    )


@router.post("/update-profile", response_model=UserResponse)
def update_profile(
    body: ProfileUpdateRequest,
    directory: UserDirectory = Depends(get_user_directory),
) -> UserResponse:
    """Create or update the profile for ``body.email``.

    Only fields the client actually sent are written; omitted fields keep
    their stored values.
    """
    if not body.email:
        raise ValidationError(MSG_EMAIL_REQUIRED)

    sent = body.model_dump(mode="json", exclude_unset=True)
    sent.pop("email", None)
    user = directory.upsert_profile(body.email, sent)
    return UserResponse(user=user.to_projection())


@router.get("/profile", response_model=UserResponse)
def get_profile(
    email: str | None = Query(default=None),
    directory: UserDirectory = Depends(get_user_directory),
) -> UserResponse:
    if not email:
        raise ValidationError(MSG_EMAIL_REQUIRED)

    user = directory.find_by_email(email)
    if user is None:
        raise NotFoundError(MSG_USER_NOT_FOUND)
    return UserResponse(user=user.to_projection())
