"""Logging context carried across calls with ``contextvars``.

Each view-model operation runs inside a context naming the operation, so every
record it produces (repository, DAO, storage) carries the same correlation id.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any


def _new_correlation_id() -> str:
    return str(uuid.uuid4())


@dataclass
class LogContext:
    """Contextual fields attached to log records."""

    correlation_id: str = field(default_factory=_new_correlation_id)
    operation: str | None = None
    screen: str | None = None
    cui: str | None = None
    component: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flatten to a dict, leaving out unset optional fields."""
        result: dict[str, Any] = {"correlation_id": self.correlation_id}
        for name in ("operation", "screen", "cui", "component"):
            value = getattr(self, name)
            if value:
                result[name] = value
        result.update(self.extra)
        return result


_log_context: ContextVar[LogContext | None] = ContextVar("roster_log_context", default=None)


def get_context() -> LogContext:
    """Current context; one is created on first access."""
    ctx = _log_context.get()
    if ctx is None:
        ctx = LogContext()
        _log_context.set(ctx)
    return ctx


def set_context(context: LogContext) -> None:
    _log_context.set(context)


def clear_context() -> None:
    _log_context.set(None)


def get_correlation_id() -> str:
    return get_context().correlation_id


def set_correlation_id(correlation_id: str) -> None:
    get_context().correlation_id = correlation_id


def update_context(**kwargs: Any) -> None:
    """Set known fields on the current context; unknown keys go to ``extra``."""
    ctx = get_context()
    for key, value in kwargs.items():
        if key != "extra" and hasattr(ctx, key):
            setattr(ctx, key, value)
        else:
            ctx.extra[key] = value


class ContextManager:
    """Installs a fresh ``LogContext`` for the duration of a block."""

    def __init__(
        self,
        correlation_id: str | None = None,
        operation: str | None = None,
        screen: str | None = None,
        cui: str | None = None,
        component: str | None = None,
        **extra: Any,
    ) -> None:
        self.new_context = LogContext(
            correlation_id=correlation_id or _new_correlation_id(),
            operation=operation,
            screen=screen,
            cui=cui,
            component=component,
            extra=extra,
        )
        self._token: Token[LogContext | None] | None = None

    def __enter__(self) -> LogContext:
        self._token = _log_context.set(self.new_context)
        return self.new_context

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def with_context(
    correlation_id: str | None = None,
    operation: str | None = None,
    screen: str | None = None,
    cui: str | None = None,
    component: str | None = None,
    **extra: Any,
) -> ContextManager:
    """Scope a logging context.

    Usage:
        with with_context(operation="add_student", cui=student.cui):
            logger.info("Saving student")
    """
    return ContextManager(
        correlation_id=correlation_id,
        operation=operation,
        screen=screen,
        cui=cui,
        component=component,
        **extra,
    )
