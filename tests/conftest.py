"""Shared test fixtures.

Provides in-memory stand-ins for the user directory, notifier and clock, an
``OtpService`` wired to them, and a FastAPI ``TestClient`` whose
dependencies are overridden with those stand-ins.
"""

import os
from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import MagicMock, patch
from uuid import uuid4

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client.apps.googleusercontent.com")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.errors import NotificationError  # noqa: E402
from app.models.user import UserProfile  # noqa: E402
from app.services.otp import OtpRegistry, OtpService  # noqa: E402
from app.services.users import UserDirectory, select_allowed_fields  # noqa: E402

BASE_TIME = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeDirectory(UserDirectory):
    """Dict-backed directory with the same upsert semantics as the table."""

    def __init__(self) -> None:
        super().__init__(client=MagicMock())
        self.rows: dict[str, dict[str, Any]] = {}
        self._tick = BASE_TIME

    def _stamp(self) -> datetime:
        self._tick += timedelta(seconds=1)
        return self._tick

    def add(self, email: str, **fields: Any) -> UserProfile:
        now = self._stamp()
        row: dict[str, Any] = {
            "id": uuid4(),
            "email": email,
            "skills": [],
            "created_at": now,
            "updated_at": now,
        }
        row.update(fields)
        self.rows[email] = row
        return UserProfile(**row)

    def find_by_email(self, email: str) -> UserProfile | None:
        row = self.rows.get(email)
        return UserProfile(**row) if row else None

    def create_if_absent(
        self,
        email: str,
        name: str | None = None,
        external_id: str | None = None,
    ) -> UserProfile:
        if email not in self.rows:
            self.add(email, name=name, external_id=external_id)
        return UserProfile(**self.rows[email])

    def upsert_profile(self, email: str, fields: dict[str, Any]) -> UserProfile:
        if email not in self.rows:
            self.add(email)
        row = self.rows[email]
        row.update(select_allowed_fields(fields))
        row["updated_at"] = self._stamp()
        return UserProfile(**row)

    def ping(self) -> bool:
        return True


class FakeNotifier:
    """Records sent codes; can be told to fail."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str | None, str]] = []
        self.fail = False

    def send_otp(self, to_email: str, name: str | None, code: str) -> None:
        if self.fail:
            raise NotificationError()
        self.sent.append((to_email, name, code))

    @property
    def last_code(self) -> str:
        return self.sent[-1][2]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def registry() -> OtpRegistry:
    return OtpRegistry()


@pytest.fixture()
def otp_service(
    registry: OtpRegistry,
    directory: FakeDirectory,
    notifier: FakeNotifier,
    clock: FakeClock,
) -> OtpService:
    return OtpService(registry, directory, notifier, clock=clock)


@pytest.fixture()
def mock_verifier() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def test_client(
    directory: FakeDirectory,
    registry: OtpRegistry,
    notifier: FakeNotifier,
    otp_service: OtpService,
    mock_verifier: MagicMock,
) -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient wired to the in-memory fakes."""
    from app import dependencies
    from app.main import app

    app.dependency_overrides[dependencies.get_user_directory] = lambda: directory
    app.dependency_overrides[dependencies.get_otp_registry] = lambda: registry
    app.dependency_overrides[dependencies.get_notifier] = lambda: notifier
    app.dependency_overrides[dependencies.get_otp_service] = lambda: otp_service
    app.dependency_overrides[dependencies.get_identity_verifier] = lambda: mock_verifier

    with patch("app.main.start_scheduler"), patch("app.main.shutdown_scheduler"), \
            patch("app.main.setup_logging"):
        with TestClient(app, raise_server_exceptions=False) as client:
            yield client

    app.dependency_overrides.clear()
