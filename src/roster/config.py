"""Application settings for the student roster.

Values are read from the environment after loading a ``.env`` file from the
working directory, if there is one.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DB_PATH = Path("student_database.db")
DEFAULT_PREFERENCES_PATH = Path("theme_preferences.json")


@dataclass
class Settings:
    """Runtime settings."""

    database_path: Path = DEFAULT_DB_PATH
    pool_size: int = 5
    pool_timeout: float = 30.0
    preferences_path: Path = DEFAULT_PREFERENCES_PATH

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from ``ROSTER_*`` environment variables.

        Raises:
            ValueError: If a numeric variable does not parse or is not positive
        """
        load_dotenv()

        pool_size = int(os.environ.get("ROSTER_DB_POOL_SIZE", "5"))
        pool_timeout = float(os.environ.get("ROSTER_DB_TIMEOUT", "30.0"))
        if pool_size < 1:
            raise ValueError("ROSTER_DB_POOL_SIZE must be at least 1")
        if pool_timeout <= 0:
            raise ValueError("ROSTER_DB_TIMEOUT must be positive")

        return cls(
            database_path=Path(os.environ.get("ROSTER_DATABASE_PATH", str(DEFAULT_DB_PATH))),
            pool_size=pool_size,
            pool_timeout=pool_timeout,
            preferences_path=Path(
                os.environ.get("ROSTER_PREFERENCES_PATH", str(DEFAULT_PREFERENCES_PATH))
            ),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def set_settings(settings: Settings) -> None:
    global _settings
    _settings = settings


def reset_settings() -> None:
    global _settings
    _settings = None
