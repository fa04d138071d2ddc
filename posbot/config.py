"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Telegram
    telegram_bot_token: str
    staff_telegram_ids: Annotated[list[int], NoDecode] = []

    # Edge functions backend
    api_base_url: str
    api_anon_key: str = ""
    api_email: str = ""
    api_password: str = ""
    api_access_token: str = ""  # static token, skips password sign-in

    # Store used when the user has not picked one
    default_store_id: str = ""

    # Count workflow
    count_page_size: int = 50
    search_debounce_seconds: float = 0.5
    adjustment_delay_seconds: float = 0.1

    # HTTP
    request_timeout_seconds: float = 30.0
    draft_timeout_seconds: float = 10.0

    # Caches
    tenant_cache_ttl_seconds: int = 3600
    image_url_ttl_seconds: int = 6 * 24 * 3600  # signed URLs live 7 days

    # Application
    log_level: str = "INFO"

    # Monitoring (Sentry)
    sentry_dsn: str = ""
    environment: str = "production"

    # Paths
    db_path: Path = Path("data/posbot.db")

    @field_validator("staff_telegram_ids", mode="before")
    @classmethod
    def parse_staff_ids(cls, v: str | list[int] | int) -> list[int]:
        """Parse comma-separated string of IDs into list of integers."""
        if isinstance(v, list):
            return v
        if isinstance(v, int):
            return [v]
        if isinstance(v, str) and v.strip():
            return [int(id_.strip()) for id_ in v.split(",") if id_.strip()]
        return []

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_api_credentials(self) -> "Settings":
        """Ensure one authentication method is configured."""
        has_password = bool(self.api_email and self.api_password)
        if not has_password and not self.api_access_token:
            raise ValueError(
                "Either API_EMAIL and API_PASSWORD or "
                "API_ACCESS_TOKEN must be provided"
            )
        if bool(self.api_email) != bool(self.api_password):
            missing = "API_PASSWORD" if self.api_email else "API_EMAIL"
            raise ValueError(f"Password sign-in partially configured. Missing: {missing}.")
        return self

    @property
    def password_auth_enabled(self) -> bool:
        return bool(self.api_email and self.api_password)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
