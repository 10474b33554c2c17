"""Centralized settings for the run registry.

Uses pydantic-settings to load from environment variables (prefixed MLOPS_)
with defaults suitable for local development against SQLite.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Run registry settings loaded from environment variables."""

    # --- Database ---
    database_url: str = "sqlite:///mlops.db"
    database_echo: bool = False
    pool_pre_ping: bool = True
    sqlite_busy_timeout_s: float = 30.0

    # --- Registration ---
    register_max_attempts: int = 5  # retries of the version read-compute-write

    # --- Logging ---
    log_level: str = "INFO"
    log_format: str = "json"
    service_name: str = "mlops"

    model_config = {
        "env_prefix": "MLOPS_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
