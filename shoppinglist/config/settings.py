"""Application settings for the shopping store.

Environment variables are loaded from a ``.env`` file using ``python-dotenv``
and exposed through a Pydantic settings object.
"""

from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# Load environment variables from a .env file if present
load_dotenv()

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_DB_PATH = os.path.join("data", "shopping.sqlite3")
DEFAULT_LOG_FILE = os.path.join("logs", "shopping.log")
DEFAULT_LOG_LEVEL = "INFO"
MEMORY_DB = ":memory:"


class Settings(BaseModel):
    """Immutable settings object used across the application."""

    db_path: str = DEFAULT_DB_PATH
    log_file: str = DEFAULT_LOG_FILE
    log_level: str = DEFAULT_LOG_LEVEL

    model_config = ConfigDict(frozen=True)

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v!r}")
        return level


def _build_settings() -> Settings:
    """Construct the ``Settings`` instance based on environment variables."""
    return Settings(
        db_path=os.getenv("SHOPPING_DB_PATH", DEFAULT_DB_PATH),
        log_file=os.getenv("SHOPPING_LOG_FILE", DEFAULT_LOG_FILE),
        log_level=os.getenv("SHOPPING_LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, built on first use."""
    return _build_settings()
