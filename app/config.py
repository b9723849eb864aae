"""Runtime configuration for the wordexpr query service."""
from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    app_env: str = "development"
    host: str = "0.0.0.0"
    port: int = 1234

    model_path: Optional[str] = None
    model_format: Literal["binary", "text"] = "binary"

    max_workers: int = 4
    query_timeout_seconds: float = 30.0
    log_level: str = "INFO"

    langfuse_host: Optional[str] = None
    langfuse_public_key: Optional[str] = None
    langfuse_secret_key: Optional[str] = None
    langfuse_dataset: str = "wordexpr_queries"
    telemetry_timeout_seconds: float = 2.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WORDEXPR_",
        env_ignore_empty=True,
        extra="ignore",
        protected_namespaces=(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor used across the codebase."""

    return Settings()  # type: ignore[arg-type]


settings = get_settings()
