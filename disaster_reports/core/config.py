"""Application configuration and settings management."""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="DISASTER_",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = "Disaster Reports"
    secret_key: str = "change-me"

    # Database
    database_url: str = "sqlite+aiosqlite:///./disaster_reports.db"

    # Security
    access_token_expire_minutes: int = 60 * 24
    allowed_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    session_cookie_secure: bool = False

    # Reports
    code_prefix: str = "QA"
    code_max_attempts: int = 3
    strict_status_transitions: bool = False

    # Geocoding
    geocoding_enabled: bool = True
    geocoding_url: str = "https://nominatim.openstreetmap.org/search"
    geocoding_country: str = "id"
    geocoding_timeout_seconds: float = 10.0
    geocoding_batch_delay_seconds: float = 1.0

    # Seed data
    seed_admin_username: str = "admin"
    seed_admin_password: str = "admin123"
    seed_admin_name: str = "Admin Dev"
    seed_sample_reports: bool = True

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: List[str] | str) -> List[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("code_prefix")
    @classmethod
    def _upper_prefix(cls, value: str) -> str:
        return value.strip().upper()


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()


settings = get_settings()
