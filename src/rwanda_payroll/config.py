"""Configuration management for the payroll tax engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment.

    Tax rates are not settings. They live in a company TaxRateConfig that
    is passed to the calculator explicitly.
    """

    engine_version: str
    host: str
    port: int
    debug: bool
    log_level: str = "INFO"
    max_workers: int = 1  # threads used by PayrollEngine.calculate_run

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            engine_version=os.getenv("ENGINE_VERSION", "1.0.0"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            max_workers=int(os.getenv("PAYROLL_MAX_WORKERS", "1")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()


settings = get_settings()
