from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = REPO_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), env_file_encoding="utf-8", extra="ignore"
    )

    DEBUG: bool = False

    # CORS allow origins (comma-separated). Default empty (no cross-origin).
    CORS_ALLOW_ORIGINS: str = ""

    # Directions provider (Google Directions JSON API)
    GOOGLE_MAPS_API_KEY: str | None = None
    DIRECTIONS_API_BASE: str = "https://maps.googleapis.com/maps/api/directions/json"
    DIRECTIONS_TIMEOUT_SECONDS: float = 10.0
    DIRECTIONS_CONNECT_TIMEOUT_SECONDS: float = 5.0

    # Leg sequencing
    RATE_LIMIT_RETRY_DELAY_SECONDS: float = 1.0
    RATE_LIMIT_MAX_ATTEMPTS: int | None = None  # None keeps retrying until superseded
    ERRAND_MATCH_EPSILON: float = 0.00001
    ITINERARY_TIMEOUT_SECONDS: float = 120.0

    # Stop-ordering optimizer backend
    OPTIMIZER_URL: str = "http://localhost:8080/cpp"
    OPTIMIZER_TIMEOUT_SECONDS: float = 30.0

    # Observability
    SENTRY_DSN: str | None = None
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_RELEASE: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2

    @property
    def allow_origins(self) -> list[str]:
        s = (self.CORS_ALLOW_ORIGINS or "").strip()
        if s == "*":
            return ["*"]
        if s == "":
            return []
        return [part.strip() for part in s.split(",") if part.strip()]


settings = Settings()
