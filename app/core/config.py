"""Application configuration via pydantic-settings.

Loads all settings from environment variables with sensible defaults.
A global `settings` singleton is available for import throughout the app.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase
    SUPABASE_URL: str
    SUPABASE_KEY: str
    SUPABASE_TIMEOUT_SECONDS: float = 10.0

    # Google identity
    GOOGLE_CLIENT_ID: str = ""
    IDENTITY_TIMEOUT_SECONDS: float = 10.0

    # Email transport
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT_SECONDS: float = 10.0
    EMAIL_FROM: str = "Civil With Karthik <noreply@civilwithkarthik.com>"
    BRAND_NAME: str = "Civil With Karthik"

    # OTP
    OTP_DIGITS: int = 6
    OTP_TTL_SECONDS: int = 600
    OTP_SWEEP_INTERVAL_MINUTES: int = 5
    OTP_ROLLBACK_ON_SEND_FAILURE: bool = False

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()  # type: ignore[call-arg]
