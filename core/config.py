"""Application configuration.

Settings are read from the environment. A ``.env`` file at the repository
root is loaded first if it exists.

Variables:
- HAYQC_DB_PATH: SQLite database file (default: hayqc.db in the repo root)
- HAYQC_LOG_LEVEL: Logging level name (default: INFO)
- HAYQC_LOG_JSON: "1"/"true" for JSON log lines (default: human-readable)
"""

import logging
import os
from functools import lru_cache
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv
REPO_ROOT = Path(__file__).resolve().parents[1]
env_path = REPO_ROOT / ".env"
if env_path.exists():
    load_dotenv(env_path)

from pydantic import BaseModel, Field


DEFAULT_DB_PATH = REPO_ROOT / "hayqc.db"

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Resolved application settings."""
    db_path: Path = Field(default=DEFAULT_DB_PATH, description="SQLite database file")
    log_level: int = Field(default=logging.INFO, description="Root logging level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")


def load_settings() -> Settings:
    """Build settings from the current environment.

    Raises:
        ValueError: If HAYQC_LOG_LEVEL is not a known logging level name
    """
    db_path = os.getenv("HAYQC_DB_PATH")
    level_name = os.getenv("HAYQC_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(
            f"HAYQC_LOG_LEVEL '{level_name}' is not a valid logging level"
        )

    return Settings(
        db_path=Path(db_path) if db_path else DEFAULT_DB_PATH,
        log_level=level,
        log_json=os.getenv("HAYQC_LOG_JSON", "").strip().lower() in _TRUTHY,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings (loaded once)."""
    return load_settings()
