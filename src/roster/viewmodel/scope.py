"""Event-loop scope that view-model work runs on.

The scope owns an asyncio loop on a daemon thread. View-models launch their
coroutines there and get a ``concurrent.futures.Future`` back, so callers on
any thread (Streamlit script runs, the CLI, tests) can wait for results.
Cancelling the scope cancels every job it still runs.
"""

from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Future
from typing import Any, Coroutine, TypeVar

from roster.logutils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ViewModelScope:
    """Runs view-model coroutines on a private event loop thread."""

    def __init__(self, name: str = "viewmodel-scope") -> None:
        self.name = name
        self._loop = asyncio.new_event_loop()
        self._jobs: set[Future] = set()
        self._lock = threading.Lock()
        self._cancelled = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self._loop.run_until_complete(self._loop.shutdown_asyncgens())
            self._loop.run_until_complete(self._loop.shutdown_default_executor())
            self._loop.close()
            logger.debug("Scope stopped", extra={"extra_data": {"scope": self.name}})

    @property
    def is_active(self) -> bool:
        return not self._cancelled

    @property
    def job_count(self) -> int:
        with self._lock:
            return len(self._jobs)

    def launch(self, coro: Coroutine[Any, Any, T]) -> Future[T]:
        """Schedule ``coro`` on the scope's loop.

        Raises:
            RuntimeError: If the scope has been cancelled
        """
        with self._lock:
            if self._cancelled:
                coro.close()
                raise RuntimeError(f"Scope {self.name} is cancelled")
            future = asyncio.run_coroutine_threadsafe(coro, self._loop)
            self._jobs.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._jobs.discard(future)

    def cancel(self, timeout: float = 5.0) -> None:
        """Cancel every job and stop the loop. Safe to call more than once."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            jobs = list(self._jobs)

        for job in jobs:
            job.cancel()
        logger.debug(
            "Cancelling scope",
            extra={"extra_data": {"scope": self.name, "jobs": len(jobs)}},
        )

        self._loop.call_soon_threadsafe(self._loop.stop)
        if threading.current_thread() is not self._thread:
            self._thread.join(timeout)
