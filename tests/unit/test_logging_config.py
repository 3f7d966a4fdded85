"""Tests for logging configuration."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from roster.logutils.config import (
    Environment,
    LogConfig,
    LogOutput,
    detect_environment,
    get_config,
    reset_config,
    set_config,
)

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def reset_global_config():
    reset_config()
    yield
    reset_config()


class TestLogConfig:
    def test_defaults(self):
        config = LogConfig()
        assert config.level == "INFO"
        assert config.output == LogOutput.CONSOLE
        assert config.json_format is False
        assert config.mask_sensitive is True
        assert config.log_file is None

    def test_production_defaults_write_json_everywhere(self):
        config = LogConfig.for_environment(Environment.PRODUCTION)
        assert config.output == LogOutput.BOTH
        assert config.json_format is True
        assert config.use_rich is False

    def test_testing_defaults_are_plain_debug(self):
        config = LogConfig.for_environment(Environment.TESTING)
        assert config.level == "DEBUG"
        assert config.use_rich is False


class TestEnvironmentDetection:
    @patch.dict(os.environ, {"CI": "true"})
    def test_ci_wins(self):
        assert detect_environment() == Environment.CI

    @patch.dict(os.environ, {"ROSTER_ENV": "production", "CI": "", "GITHUB_ACTIONS": ""})
    def test_explicit_production(self):
        assert detect_environment() == Environment.PRODUCTION

    @patch.dict(os.environ, {"ROSTER_ENV": "", "CI": "", "GITHUB_ACTIONS": ""})
    def test_pytest_is_testing(self):
        # PYTEST_CURRENT_TEST is set while a test runs
        assert detect_environment() == Environment.TESTING


class TestFromEnv:
    @patch.dict(
        os.environ,
        {
            "ROSTER_LOG_LEVEL": "warning",
            "ROSTER_LOG_OUTPUT": "both",
            "ROSTER_LOG_JSON": "yes",
            "ROSTER_LOG_FILE": "/tmp/roster-test.log",
            "ROSTER_LOG_BACKUP_COUNT": "7",
        },
    )
    def test_overrides(self):
        config = LogConfig.from_env()
        assert config.level == "WARNING"
        assert config.output == LogOutput.BOTH
        assert config.json_format is True
        assert config.log_file == Path("/tmp/roster-test.log")
        assert config.backup_count == 7

    @patch.dict(os.environ, {"ROSTER_LOG_OUTPUT": "nowhere", "ROSTER_LOG_MAX_SIZE": "big"})
    def test_invalid_values_keep_defaults(self):
        config = LogConfig.from_env()
        assert config.output == LogOutput.CONSOLE
        assert config.max_file_size == LogConfig().max_file_size

    @patch.dict(os.environ, {"ROSTER_LOG_MASK": "false"})
    def test_masking_can_be_disabled(self):
        assert LogConfig.from_env().mask_sensitive is False


class TestGlobalConfig:
    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_set_and_reset(self):
        custom = LogConfig(level="ERROR")
        set_config(custom)
        assert get_config() is custom
        reset_config()
        assert get_config() is not custom
