"""Unit tests for configuration, Supabase client, health endpoints and logging."""

from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from app.services.otp import OtpRegistry
from tests.conftest import FakeDirectory


class TestSettings:
    """Settings loading via pydantic-settings."""

    def test_settings_loads_required_fields(self) -> None:
        """Given env vars are set, settings loads without error."""
        env_overrides = {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_KEY": "test-key-123",
            "GOOGLE_CLIENT_ID": "abc.apps.googleusercontent.com",
            "SMTP_PASSWORD": "app-password",
            "PORT": "8080",
        }
        with patch.dict("os.environ", env_overrides, clear=False):
            from app.core.config import Settings

            s = Settings()  # type: ignore[call-arg]
            assert s.SUPABASE_URL == "https://test.supabase.co"
            assert s.SUPABASE_KEY == "test-key-123"
            assert s.GOOGLE_CLIENT_ID == "abc.apps.googleusercontent.com"
            assert s.SMTP_PASSWORD == "app-password"
            assert s.PORT == 8080

    def test_settings_defaults(self) -> None:
        """Given minimal env vars, defaults are applied correctly."""
        env_overrides = {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_KEY": "test-key",
        }
        with patch.dict("os.environ", env_overrides, clear=False):
            from app.core.config import Settings

            s = Settings(_env_file=None)  # type: ignore[call-arg]
            assert s.OTP_DIGITS == 6
            assert s.OTP_TTL_SECONDS == 600
            assert s.OTP_SWEEP_INTERVAL_MINUTES == 5
            assert s.OTP_ROLLBACK_ON_SEND_FAILURE is False
            assert s.SMTP_HOST == "smtp.gmail.com"
            assert s.ALLOWED_ORIGINS == "*"
            assert s.LOG_LEVEL == "INFO"


class TestSupabaseClient:
    """Supabase singleton client."""

    def test_get_supabase_returns_client(self) -> None:
        """Given valid settings, get_supabase returns a Client."""
        mock_client = MagicMock()
        with patch("app.db.supabase.create_client", return_value=mock_client):
            # Reset singleton
            import app.db.supabase as supa_mod

            supa_mod._client = None
            client = supa_mod.get_supabase()
            assert client is mock_client
            supa_mod._client = None

    def test_get_supabase_is_singleton(self) -> None:
        """Given multiple calls, get_supabase returns the same instance."""
        mock_client = MagicMock()
        with patch("app.db.supabase.create_client", return_value=mock_client) as mock_create:
            import app.db.supabase as supa_mod

            supa_mod._client = None
            first = supa_mod.get_supabase()
            second = supa_mod.get_supabase()
            assert first is second
            mock_create.assert_called_once()
            supa_mod._client = None


class TestHealthEndpoint:
    """GET / and GET /health."""

    def test_root_banner(self, test_client: TestClient) -> None:
        response = test_client.get("/")
        assert response.status_code == 200
        assert "Auth Server is running" in response.text

    def test_health_connected(
        self, test_client: TestClient, registry: OtpRegistry
    ) -> None:
        """Given the store answers, /health returns database=connected."""
        response = test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["database"] == "connected"
        assert body["pending_otps"] == 0

    def test_health_disconnected(
        self, test_client: TestClient, directory: FakeDirectory
    ) -> None:
        """Given the store is unreachable, /health returns 503."""
        with patch.object(directory, "ping", side_effect=Exception("Connection refused")):
            response = test_client.get("/health")
        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "degraded"
        assert body["database"] == "disconnected"


class TestErrorHandling:
    """Unexpected failures never leak detail."""

    def test_unhandled_error_is_generic_500(
        self, test_client: TestClient, directory: FakeDirectory
    ) -> None:
        with patch.object(
            directory, "find_by_email", side_effect=KeyError("internal detail"),
        ):
            response = test_client.get("/api/users/profile", params={"email": "a@x.com"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}

    def test_malformed_body_is_400(self, test_client: TestClient) -> None:
        response = test_client.post(
            "/api/auth/request-otp",
            content=b"not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestLogging:
    """Structured logging configuration."""

    def test_setup_logging_configures_root_logger(self) -> None:
        """Given setup_logging is called, root logger has one handler."""
        import logging

        from app.core.logging import setup_logging

        setup_logging()
        root = logging.getLogger()
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert handler.formatter is not None
        fmt = handler.formatter._fmt
        assert "%(levelname)" in fmt
        assert "%(asctime)" in fmt
        assert "%(name)" in fmt
