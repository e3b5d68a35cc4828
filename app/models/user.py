"""Pydantic models for the ``users`` table and the user endpoints.

``UserProfile`` mirrors a stored row.  ``UserProjection`` is the only shape
ever returned to clients; it leaves out ``external_id`` and the timestamps.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.enums import UserRole


class UserProfile(BaseModel):
    """Full user record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str | None = None
    age: int | None = None
    role: UserRole | None = None
    phone: str | None = None
    experience: str | None = None
    specialization: str | None = None
    skills: list[str] = Field(default_factory=list)
    external_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("skills", mode="before")
    @classmethod
    def _null_skills_as_empty(cls, value: object) -> object:
        # Rows written before the column default existed may hold NULL
        return [] if value is None else value

    @property
    def profile_complete(self) -> bool:
        """Name, age and role are all set.  Derived, never stored."""
        return bool(self.name) and self.age is not None and self.role is not None

    def to_projection(self) -> "UserProjection":
        return UserProjection.model_validate(self.model_dump())


class UserProjection(BaseModel):
    """Public view of a profile."""
    id: UUID
    name: str | None = None
    email: str
    age: int | None = None
    role: UserRole | None = None
    phone: str | None = None
    experience: str | None = None
    specialization: str | None = None
    skills: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class IdentitySignInRequest(BaseModel):
    token: str | None = None


class ProfileUpdateRequest(BaseModel):
    """Body of /users/update-profile.

    Unknown keys are dropped at parse time; the service additionally writes
    only ``PROFILE_UPDATE_FIELDS`` that the caller actually sent.
    """
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    name: str | None = None
    age: int | None = None
    role: UserRole | None = None
    phone: str | None = None
    experience: str | None = None
    specialization: str | None = None
    skills: list[str] | None = None

    @field_validator("skills", mode="before")
    @classmethod
    def _clear_skills_to_empty(cls, value: object) -> object:
        # skills is a list column; an explicit null clears it
        return [] if value is None else value


class OtpRequest(BaseModel):
    email: str | None = None


class OtpVerifyRequest(BaseModel):
    email: str | None = None
    otp: str | None = None

    @field_validator("otp", mode="before")
    @classmethod
    def _otp_as_text(cls, value: object) -> object:
        # Some clients post the code as a JSON number
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    success: bool = True
    user: UserProjection


class SignInResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    user: UserProjection
    profile_complete: bool = Field(alias="profileComplete")


class EmailCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    exists: bool
    user: UserProjection | None = None
    profile_complete: bool | None = Field(default=None, alias="profileComplete")


class MessageResponse(BaseModel):
    success: bool = True
    message: str
