"""Logging for the student roster.

- Rich console output during development, plain text in CI and tests
- JSON records for files and production
- Correlation ids and operation names through ``contextvars``
- Masking of credentials, e-mail addresses and student codes

Usage:
    from roster.logutils import get_logger, with_context

    logger = get_logger(__name__)

    with with_context(operation="add_student"):
        logger.info("Student saved", extra={"extra_data": {"id": 7}})
"""

from .config import Environment, LogConfig, LogOutput, detect_environment, get_config, reset_config, set_config
from .context import (
    ContextManager,
    LogContext,
    clear_context,
    get_context,
    get_correlation_id,
    set_context,
    set_correlation_id,
    update_context,
    with_context,
)
from .formatters import CompactFormatter, JSONFormatter, StandardFormatter
from .handlers import BufferingHandler, RichConsoleHandler, SafeRotatingFileHandler, StreamHandlerWithFlush
from .logger import LoggerAdapter, configure_root_logger, get_logger, reset_logging, with_extra
from .masking import MASK, is_sensitive_key, mask_cui, mask_dict, mask_sensitive_string

__all__ = [
    "get_logger",
    "configure_root_logger",
    "reset_logging",
    "with_extra",
    "LoggerAdapter",
    "with_context",
    "get_context",
    "set_context",
    "clear_context",
    "get_correlation_id",
    "set_correlation_id",
    "update_context",
    "LogContext",
    "ContextManager",
    "LogConfig",
    "LogOutput",
    "Environment",
    "detect_environment",
    "get_config",
    "set_config",
    "reset_config",
    "JSONFormatter",
    "StandardFormatter",
    "CompactFormatter",
    "RichConsoleHandler",
    "SafeRotatingFileHandler",
    "BufferingHandler",
    "StreamHandlerWithFlush",
    "mask_sensitive_string",
    "mask_dict",
    "mask_cui",
    "is_sensitive_key",
    "MASK",
]
