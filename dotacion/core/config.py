# dotacion/core/config.py
"""
Centralized configuration for the dotación query service.

Settings are read once from the environment (and an optional .env file) and
passed explicitly into the application factory.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

# Hard ceiling for any result set, regardless of entry point or configuration.
MAX_ROWS = 50000


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Application settings."""

    environment: str = "production"
    database_url: str = "sqlite:///./dotacion.db"
    log_database_url: str = "sqlite:///./dotacion_logs.db"
    max_rows: int = MAX_ROWS
    verbose_errors: bool = False
    log_queries: bool = False
    log_requests: bool = True
    application_id: str = "dotacion"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    seed_sample_data: bool = False

    def __post_init__(self) -> None:
        # The configured cap can only tighten the global one
        self.max_rows = max(1, min(int(self.max_rows), MAX_ROWS))

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Load settings from environment variables."""
        load_dotenv(env_file or find_dotenv(usecwd=True))

        environment = os.getenv("APP_ENV", "production").strip().lower()
        is_dev = environment == "development"
        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

        return cls(
            environment=environment,
            database_url=os.getenv("DATABASE_URL", "sqlite:///./dotacion.db"),
            log_database_url=os.getenv("LOG_DATABASE_URL", "sqlite:///./dotacion_logs.db"),
            max_rows=int(os.getenv("MAX_ROWS", str(MAX_ROWS))),
            verbose_errors=_env_flag("VERBOSE_ERRORS", is_dev),
            log_queries=_env_flag("LOG_QUERIES", is_dev),
            log_requests=_env_flag("LOG_REQUESTS", True),
            application_id=os.getenv("APPLICATION_ID", "dotacion"),
            cors_origins=origins or ["*"],
            seed_sample_data=_env_flag("SEED_SAMPLE_DATA", False),
        )
