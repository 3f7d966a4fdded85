"""Theme preference store.

The store is the source of truth for the light/dark choice. It persists a
small JSON document and pushes every change to its subscribers.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Callable

from roster.logutils import get_logger

logger = get_logger(__name__)

DARK_THEME_KEY = "dark_theme"

ThemeListener = Callable[[bool], None]


class ThemePreferencesRepository:
    """Persisted ``dark_theme`` flag with a change stream.

    A missing or unreadable file reads as the light theme.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()
        self._listeners: list[ThemeListener] = []

    def is_dark_theme(self) -> bool:
        with self._lock:
            return self._read().get(DARK_THEME_KEY, False) is True

    def set_dark_theme(self, value: bool) -> None:
        """Persist the flag and notify subscribers if it changed.

        Subscribers are called before the lock is released, so they observe
        writes in the order they were stored.
        """
        with self._lock:
            data = self._read()
            previous = data.get(DARK_THEME_KEY, False) is True
            data[DARK_THEME_KEY] = bool(value)
            self._write(data)
            logger.info("Theme preference saved", extra={"extra_data": {"dark_theme": bool(value)}})
            if previous != bool(value):
                for listener in list(self._listeners):
                    listener(bool(value))

    def subscribe(self, listener: ThemeListener) -> Callable[[], None]:
        """Deliver the current value now and every change after; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)
            listener(self.is_dark_theme())

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(
                "Unreadable theme preferences, using defaults",
                extra={"extra_data": {"path": str(self.path), "error": str(e)}},
            )
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)
