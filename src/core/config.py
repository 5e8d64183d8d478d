"""Application configuration powered by environment variables."""
from __future__ import annotations

from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load variables from a local .env file if present.
load_dotenv()


class Settings(BaseSettings):
    """Strongly typed configuration for the callback service."""

    app_name: str = "SES Callbacks"
    environment: str = "development"
    api_version: str = "v1"
    database_url: str = "sqlite:///./ses_callbacks.db"
    mailer_dsn: str = "ses+api://default?region=us-east-1"
    log_level: str | None = None
    locale: str = "en"
    sns_verify_signatures: bool = False
    sns_allowed_topic_arns: List[str] = []
    sns_validate_subscribe_url: bool = True
    sns_http_timeout_seconds: int = 10

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    @field_validator("database_url", "mailer_dsn", mode="before")
    @classmethod
    def strip_wrapping_quotes(cls, value: str) -> str:
        """Allow quoted URLs in env files."""
        if isinstance(value, str):
            return value.strip().strip('"').strip("'")
        return value

    @field_validator("sns_allowed_topic_arns", mode="before")
    @classmethod
    def split_topic_arns(cls, value: str | List[str]) -> List[str]:
        """Allow comma separated topic ARNs in env files."""
        if isinstance(value, str):
            return [arn.strip() for arn in value.split(",") if arn.strip()]
        return value

    @field_validator("sns_http_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("sns_http_timeout_seconds must be positive")
        return value


@lru_cache()
def get_settings() -> Settings:
    """Return a cached Settings instance for reuse across the app."""

    return Settings()


settings = get_settings()
