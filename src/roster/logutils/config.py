"""Logging configuration for the student roster.

Settings come from ``ROSTER_LOG_*`` environment variables layered over
defaults chosen per runtime environment (development, testing, CI, production).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

_TRUTHY = ("true", "1", "yes", "on")


class Environment(Enum):
    """Runtime environment the roster is running in."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"
    CI = "ci"


class LogOutput(Enum):
    """Where log records are written."""

    CONSOLE = "console"
    FILE = "file"
    BOTH = "both"
    JSON = "json"


@dataclass
class LogConfig:
    """Logging configuration container."""

    level: str = "INFO"
    output: LogOutput = LogOutput.CONSOLE
    json_format: bool = False
    use_rich: bool = True
    mask_sensitive: bool = True
    include_correlation_id: bool = True
    log_file: Path | None = None

    # Rotation: 5 MB per file
    max_file_size: int = 5 * 1024 * 1024
    backup_count: int = 3

    # e.g. {"roster.database.dao": "WARNING"}
    module_levels: dict[str, str] = field(default_factory=dict)

    # Static fields merged into every JSON record
    extra_fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> LogConfig:
        """Build a configuration from the environment.

        Environment variables:
            ROSTER_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
            ROSTER_LOG_OUTPUT: console, file, both or json
            ROSTER_LOG_JSON: emit JSON on the console (true/false)
            ROSTER_LOG_RICH: use the Rich console handler (true/false)
            ROSTER_LOG_MASK: mask sensitive values (true/false)
            ROSTER_LOG_FILE: path of the rotating log file
            ROSTER_LOG_MAX_SIZE: rotation size in bytes
            ROSTER_LOG_BACKUP_COUNT: rotated files to keep

        Returns:
            LogConfig for the detected environment with overrides applied
        """
        config = cls.for_environment(detect_environment())

        if level := os.getenv("ROSTER_LOG_LEVEL"):
            config.level = level.upper()

        if output := os.getenv("ROSTER_LOG_OUTPUT"):
            try:
                config.output = LogOutput(output.lower())
            except ValueError:
                pass

        if (json_format := os.getenv("ROSTER_LOG_JSON")) is not None:
            config.json_format = json_format.lower() in _TRUTHY

        if (use_rich := os.getenv("ROSTER_LOG_RICH")) is not None:
            config.use_rich = use_rich.lower() in _TRUTHY

        if (mask := os.getenv("ROSTER_LOG_MASK")) is not None:
            config.mask_sensitive = mask.lower() in _TRUTHY

        if log_file := os.getenv("ROSTER_LOG_FILE"):
            config.log_file = Path(log_file)

        config.max_file_size = _int_env("ROSTER_LOG_MAX_SIZE", config.max_file_size)
        config.backup_count = _int_env("ROSTER_LOG_BACKUP_COUNT", config.backup_count)

        return config

    @classmethod
    def for_environment(cls, env: Environment) -> LogConfig:
        """Defaults for an environment.

        Production writes JSON to both console and file; CI and tests use
        plain text on stderr; development gets the Rich console.
        """
        if env == Environment.PRODUCTION:
            return cls(level="INFO", output=LogOutput.BOTH, json_format=True, use_rich=False)

        if env == Environment.CI:
            return cls(level="INFO", use_rich=False)

        if env == Environment.TESTING:
            return cls(level="DEBUG", use_rich=False)

        return cls(level="DEBUG", use_rich=True)


def detect_environment() -> Environment:
    """Work out which environment the process runs in.

    ``CI``/``GITHUB_ACTIONS`` win, then ``ROSTER_ENV``, then a running pytest.
    """
    if os.getenv("CI") or os.getenv("GITHUB_ACTIONS"):
        return Environment.CI

    env_name = os.getenv("ROSTER_ENV", "").lower()
    if env_name in ("prod", "production"):
        return Environment.PRODUCTION
    if env_name in ("test", "testing"):
        return Environment.TESTING

    if os.getenv("PYTEST_CURRENT_TEST"):
        return Environment.TESTING

    return Environment.DEVELOPMENT


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


_config: LogConfig | None = None


def get_config() -> LogConfig:
    """Return the process-wide logging configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = LogConfig.from_env()
    return _config


def set_config(config: LogConfig) -> None:
    """Replace the process-wide logging configuration."""
    global _config
    _config = config


def reset_config() -> None:
    """Forget the current configuration; the next ``get_config`` re-reads the environment."""
    global _config
    _config = None
