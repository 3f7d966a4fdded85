"""Observable state holder for view-models."""

from __future__ import annotations

import dataclasses
import threading
from typing import Any, Callable, Generic, Optional, TypeVar

from roster.logutils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ObservableState(Generic[T]):
    """Current value plus change listeners.

    Listeners receive the current value when they subscribe and every new
    value after that. Assigning an equal value is not an update.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._listeners: list[Callable[[T], None]] = []
        self._condition = threading.Condition()

    @property
    def value(self) -> T:
        with self._condition:
            return self._value

    def set(self, value: T) -> None:
        with self._condition:
            listeners = self._assign(value)
        self._notify(listeners, value)

    def update(self, **changes: Any) -> T:
        """Replace fields of a dataclass value; returns the new value.

        Reading the current value and storing the new one is a single step
        under the state's lock.
        """
        with self._condition:
            new_value = dataclasses.replace(self._value, **changes)
            listeners = self._assign(new_value)
        self._notify(listeners, new_value)
        return new_value

    def _assign(self, value: T) -> list[Callable[[T], None]]:
        # caller holds _condition
        if value == self._value:
            return []
        self._value = value
        self._condition.notify_all()
        return list(self._listeners)

    @staticmethod
    def _notify(listeners: list[Callable[[T], None]], value: T) -> None:
        for listener in listeners:
            try:
                listener(value)
            except Exception:
                logger.exception("State listener failed")

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        with self._condition:
            self._listeners.append(listener)
            current = self._value
        listener(current)

        def unsubscribe() -> None:
            with self._condition:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def wait_for(self, predicate: Callable[[T], bool], timeout: Optional[float] = None) -> T:
        """Block until the value satisfies ``predicate``.

        Raises:
            TimeoutError: If it does not within ``timeout`` seconds
        """
        with self._condition:
            if not self._condition.wait_for(lambda: predicate(self._value), timeout=timeout):
                raise TimeoutError(f"State did not reach the expected value within {timeout}s")
            return self._value
