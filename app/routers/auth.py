"""Sign-in endpoints.

POST /identity-signin -- Google ID token sign-in, creates the profile on
first use.
POST /request-otp -- mails a one-time code to an existing user.
POST /verify-otp -- exchanges a valid code for the user's profile.

Handlers are plain ``def`` so Starlette runs them on its thread pool; the
Google cert fetch and the SMTP send block.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.dependencies import (
    get_identity_verifier,
    get_otp_service,
    get_user_directory,
)
from app.models.user import (
    IdentitySignInRequest,
    MessageResponse,
    OtpRequest,
    OtpVerifyRequest,
    SignInResponse,
)
from app.services.auth import sign_in_with_identity
from app.services.identity import GoogleIdentityVerifier
from app.services.otp import OtpService
from app.services.users import UserDirectory

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/identity-signin", response_model=SignInResponse)
def identity_signin(
    body: IdentitySignInRequest,
    verifier: GoogleIdentityVerifier = Depends(get_identity_verifier),
    directory: UserDirectory = Depends(get_user_directory),
) -> SignInResponse:
    """Sign in with a Google ID token."""
    user = sign_in_with_identity(body.token, verifier, directory)
    return SignInResponse(
        user=user.to_projection(),
        profile_complete=user.profile_complete,
    )


@router.post("/request-otp", response_model=MessageResponse)
def request_otp(
    body: OtpRequest,
    service: OtpService = Depends(get_otp_service),
) -> MessageResponse:
    """Issue an OTP.

    The reply is identical whether or not the email belongs to an account.
    """
    message = service.issue(body.email)
    return MessageResponse(message=message)


@router.post("/verify-otp", response_model=SignInResponse)
def verify_otp(
    body: OtpVerifyRequest,
    service: OtpService = Depends(get_otp_service),
) -> SignInResponse:
    user = service.verify(body.email, body.otp)
    return SignInResponse(
        user=user.to_projection(),
        profile_complete=user.profile_complete,
    )
