import os
from functools import lru_cache
from typing import Annotated, Any, List

from fastapi import Request
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Always read .env from the project root
ENV_FILE = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env")


def normalize_database_url(url: str) -> str:
    """Point bare postgres URLs (Supabase, Heroku style) at the psycopg2 driver."""
    for scheme in ("postgres://", "postgresql://"):
        if url.startswith(scheme):
            return "postgresql+psycopg2://" + url[len(scheme):]
    return url


# ============================================================
# SETTINGS
# ============================================================

class Settings(BaseSettings):
    """Settings derived from environment variables (and .env)."""

    database_url: str = "sqlite:///./invoices.db"
    db_pool_size: int = 5
    db_pool_timeout: int = 30
    init_schema: bool = True

    # Comma separated in the environment: CORS_ORIGINS=https://a.test,https://b.test
    cors_origins: Annotated[List[str], NoDecode] = ["*"]

    log_level: str = "INFO"
    log_json: bool = False

    invoice_number_prefix: str = "OTT"
    invoice_number_offset: int = 99

    # When true an explicit amount of 0 is kept instead of quantity x rate
    honor_zero_amount: bool = False

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("database_url")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        return normalize_database_url(value.strip())

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [o.strip() for o in value.split(",") if o.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper()


def load_settings() -> Settings:
    """Build settings from the process environment; malformed values raise."""
    return Settings()


@lru_cache()
def get_settings() -> Settings:
    return load_settings()


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency: the settings the running app was built with."""
    return request.app.state.settings
