"""Logger factory for the roster.

Every module asks for its logger with ``get_logger(__name__)``; the first call
for a name attaches handlers built from the active ``LogConfig``.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping

from .config import LogConfig, LogOutput, get_config
from .formatters import CompactFormatter, JSONFormatter, StandardFormatter
from .handlers import RichConsoleHandler, SafeRotatingFileHandler, StreamHandlerWithFlush

_configured_loggers: set[str] = set()
_root_configured = False


def get_logger(name: str | None = None, config: LogConfig | None = None) -> logging.Logger:
    """Return the named logger, configuring it on first use.

    Args:
        name: Logger name, usually ``__name__``
        config: Configuration to apply instead of the process-wide one

    Returns:
        The configured ``logging.Logger``
    """
    logger = logging.getLogger(name)
    key = name or "root"
    if key not in _configured_loggers:
        _configure_logger(logger, config or get_config())
        _configured_loggers.add(key)
    return logger


def _configure_logger(logger: logging.Logger, config: LogConfig) -> None:
    level = config.module_levels.get(logger.name, config.level)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    logger.handlers.clear()
    if logger.name != "root":
        logger.propagate = False

    for handler in _create_handlers(config):
        logger.addHandler(handler)


def _json_formatter(config: LogConfig) -> JSONFormatter:
    return JSONFormatter(
        mask_sensitive=config.mask_sensitive,
        include_context=config.include_correlation_id,
        extra_fields=config.extra_fields,
    )


def _create_handlers(config: LogConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []

    if config.output in (LogOutput.CONSOLE, LogOutput.BOTH):
        handler: logging.Handler
        if config.json_format:
            handler = StreamHandlerWithFlush(sys.stderr)
            handler.setFormatter(_json_formatter(config))
        elif config.use_rich:
            handler = RichConsoleHandler()
            handler.setFormatter(CompactFormatter(mask_sensitive=config.mask_sensitive, with_level=False))
        else:
            handler = StreamHandlerWithFlush(sys.stderr)
            handler.setFormatter(StandardFormatter(mask_sensitive=config.mask_sensitive))
        handlers.append(handler)

    if config.output == LogOutput.JSON:
        handler = StreamHandlerWithFlush(sys.stderr)
        handler.setFormatter(_json_formatter(config))
        handlers.append(handler)

    # File output is always JSON
    if config.output in (LogOutput.FILE, LogOutput.BOTH) and config.log_file:
        handler = SafeRotatingFileHandler(
            filename=config.log_file,
            max_bytes=config.max_file_size,
            backup_count=config.backup_count,
        )
        handler.setFormatter(_json_formatter(config))
        handlers.append(handler)

    return handlers


def configure_root_logger(config: LogConfig | None = None) -> None:
    """Configure the root logger once, at application start-up."""
    global _root_configured
    if _root_configured:
        return
    root_logger = logging.getLogger()
    _configure_logger(root_logger, config or get_config())
    _root_configured = True


def reset_logging() -> None:
    """Drop handlers from every logger configured here (tests, re-initialisation)."""
    global _root_configured
    for name in _configured_loggers:
        logging.getLogger(None if name == "root" else name).handlers.clear()
    if _root_configured:
        logging.getLogger().handlers.clear()
    _configured_loggers.clear()
    _root_configured = False


class LoggerAdapter(logging.LoggerAdapter):
    """Adds fixed structured fields to every record as ``extra_data``.

    Call-time ``extra={...}`` is merged over the adapter's fields.
    """

    def __init__(self, logger: logging.Logger, extra: dict[str, Any] | None = None) -> None:
        super().__init__(logger, extra or {})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        call_extra = kwargs.get("extra") or {}
        if "extra_data" in call_extra:
            call_extra = call_extra["extra_data"]
        kwargs["extra"] = {"extra_data": {**self.extra, **call_extra}}
        return msg, kwargs

    def info_with_data(self, msg: str, **data: Any) -> None:
        self.info(msg, extra=data)

    def warning_with_data(self, msg: str, **data: Any) -> None:
        self.warning(msg, extra=data)

    def error_with_data(self, msg: str, **data: Any) -> None:
        self.error(msg, extra=data)


def with_extra(logger: logging.Logger, **extra: Any) -> LoggerAdapter:
    """Wrap ``logger`` so every record carries ``extra`` as structured data."""
    return LoggerAdapter(logger, extra)
