"""User directory backed by the Supabase ``users`` table.

Rows are keyed by the unique ``email`` column.  Writes go through PostgREST
upserts on that column so concurrent requests for the same email are
serialized by the database rather than by this process.

Any client or network failure is logged with its traceback and re-raised as
``StoreError`` so callers only ever see a generic server error.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from supabase import Client

from app.core.constants import PROFILE_UPDATE_FIELDS, USERS_TABLE
from app.core.errors import StoreError
from app.db.supabase import get_supabase
from app.models.user import UserProfile

logger = logging.getLogger(__name__)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def select_allowed_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Keep only allow-listed profile columns present in ``fields``.

    The allow-list drives the loop; keys of ``fields`` are never iterated,
    so ``id``, ``external_id`` and the timestamps can't sneak through.
    """
    return {name: fields[name] for name in PROFILE_UPDATE_FIELDS if name in fields}


class UserDirectory:
    """Find, create and update user profiles by email."""

    def __init__(self, client: Client | None = None) -> None:
        self._client = client

    @property
    def client(self) -> Client:
        return self._client if self._client is not None else get_supabase()

    def find_by_email(self, email: str) -> UserProfile | None:
        """Return the profile stored for ``email`` or None."""
        try:
            result = (
                self.client.table(USERS_TABLE)
                .select("*")
                .eq("email", email)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            logger.error("user_lookup_failed", extra={"email": email}, exc_info=True)
            raise StoreError() from exc

        rows = result.data or []
        if not rows:
            return None
        return UserProfile(**rows[0])

    def create_if_absent(
        self,
        email: str,
        name: str | None = None,
        external_id: str | None = None,
    ) -> UserProfile:
        """Insert a bare profile unless one already exists for ``email``.

        Existing rows are left untouched, so the first writer's ``name``
        wins even when two sign-ins race.
        """
        row: dict[str, Any] = {
            "email": email,
            "name": name,
            "external_id": external_id,
        }
        try:
            (
                self.client.table(USERS_TABLE)
                .upsert(row, on_conflict="email", ignore_duplicates=True)
                .execute()
            )
        except Exception as exc:
            logger.error("user_create_failed", extra={"email": email}, exc_info=True)
            raise StoreError() from exc

        profile = self.find_by_email(email)
        if profile is None:
            logger.error("user_create_not_visible", extra={"email": email})
            raise StoreError()
        logger.info("user_created_or_existing", extra={"user_id": str(profile.id)})
        return profile

    def upsert_profile(self, email: str, fields: dict[str, Any]) -> UserProfile:
        """Create-or-update the profile for ``email``.

        Only allow-listed keys from ``fields`` are written.  ``updated_at``
        is always refreshed.  Columns not in the payload keep their stored
        values.
        """
        row = select_allowed_fields(fields)
        row["email"] = email
        row["updated_at"] = _utcnow_iso()

        try:
            result = (
                self.client.table(USERS_TABLE)
                .upsert(row, on_conflict="email")
                .execute()
            )
        except Exception as exc:
            logger.error(
                "user_update_failed",
                extra={"email": email, "fields": sorted(row)},
                exc_info=True,
            )
            raise StoreError() from exc

        rows = result.data or []
        if rows:
            return UserProfile(**rows[0])

        # PostgREST may be configured to return minimal representations
        profile = self.find_by_email(email)
        if profile is None:
            raise StoreError()
        return profile

    def ping(self) -> bool:
        """Cheap connectivity probe used by /health."""
        result = self.client.table(USERS_TABLE).select("id").limit(1).execute()
        return result is not None
