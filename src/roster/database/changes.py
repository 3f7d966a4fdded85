"""Table change notifications.

The storage handle publishes a ``TableChange`` after every committed write.
Readers decide what to do with it; ``observe_query`` is the common choice of
re-running a query and emitting the full result again.
"""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional, TypeVar

from roster.logutils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

ChangeListener = Callable[["TableChange"], None]


@dataclass(frozen=True)
class TableChange:
    """A committed write to ``table``."""

    table: str
    operation: str  # "insert", "update" or "delete"
    row_id: Optional[int] = None


class ChangeNotifier:
    """Thread-safe registry of change listeners.

    Listeners run synchronously on the writer's thread, so they should only
    hand the event off (set a flag, schedule work) and return.
    """

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, change: TableChange) -> None:
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(change)
            except Exception:
                logger.exception(
                    "Change listener failed",
                    extra={"extra_data": {"table": change.table, "operation": change.operation}},
                )

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)


async def observe_query(notifier: ChangeNotifier, table: str, fetch: Callable[[], T]) -> AsyncIterator[T]:
    """Emit ``fetch()`` now and again after every change to ``table``.

    The sequence never ends on its own; cancel the consuming task or close the
    generator to stop it. Changes that arrive while a fetch is running are
    coalesced into a single re-fetch. ``fetch`` runs in a worker thread.
    """
    loop = asyncio.get_running_loop()
    changed = asyncio.Event()

    def on_change(change: TableChange) -> None:
        if change.table != table or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(changed.set)
        except RuntimeError:
            # Loop shut down between the check and the call
            pass

    unsubscribe = notifier.subscribe(on_change)
    try:
        while True:
            changed.clear()
            result = await asyncio.to_thread(fetch)
            yield result
            await changed.wait()
    finally:
        unsubscribe()
