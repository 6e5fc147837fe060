from __future__ import annotations

from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    """
    App settings.

    Loads from environment variables and an optional local `.env` file.
    `.env` is gitignored.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    API_TITLE: str = "Taskhub API"
    API_VERSION: str = "0.1.0"

    # Database (Postgres via psycopg async driver)
    TASKHUB_DB_HOST: str
    TASKHUB_DB_PORT: int
    TASKHUB_DB_NAME: str
    TASKHUB_DB_USER: str
    TASKHUB_DB_PASSWORD: str
    # Managed Postgres tiers cap max_connections; keep the pool small.
    DB_POOL_SIZE: int = 5
    DB_POOL_TIMEOUT_S: float = 30.0

    # Resilient query executor: retries after the first attempt, linear backoff.
    DB_RETRY_ATTEMPTS: int = 2
    DB_RETRY_BASE_DELAY_S: float = 1.0

    # Auth (opaque bearer token sessions)
    AUTH_SESSION_TTL_DAYS: int = 7
    AUTH_PASSWORD_ITERATIONS: int = 210_000

    # Password reset (4-digit OTP delivered by email)
    PASSWORD_RESET_CODE_TTL_MINUTES: int = 10

    # Resend (transactional email). Unset key => reset codes cannot be delivered.
    RESEND_API_KEY: str | None = None
    RESEND_FROM: str = "Taskhub <onboarding@resend.dev>"
    RESEND_BASE_URL: str = "https://api.resend.com"
    RESEND_TIMEOUT_S: float = 10.0

    # Google OAuth (access token -> userinfo exchange)
    GOOGLE_USERINFO_URL: str = "https://www.googleapis.com/oauth2/v2/userinfo"
    GOOGLE_TIMEOUT_S: float = 10.0

    # CORS (browser UI on :3000 calling the API on :8000)
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"


settings = Settings()
