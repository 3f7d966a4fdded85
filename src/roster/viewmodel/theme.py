"""View-model for the light/dark theme switch."""

from __future__ import annotations

import asyncio
from concurrent.futures import Future

from roster.preferences import ThemePreferencesRepository

from .scope import ViewModelScope
from .state import ObservableState


class ThemeViewModel:
    """Mirrors the stored theme flag and writes changes through to the store.

    ``is_dark_theme`` only ever changes in response to the store's change
    stream, so it reflects what was actually persisted.
    """

    def __init__(self, store: ThemePreferencesRepository, scope: ViewModelScope) -> None:
        self._store = store
        self._scope = scope
        self._is_dark_theme = ObservableState(False)
        self._unsubscribe = store.subscribe(self._is_dark_theme.set)

    @property
    def is_dark_theme(self) -> ObservableState[bool]:
        return self._is_dark_theme

    def toggle_theme(self) -> Future[None]:
        return self._scope.launch(self._write(not self._is_dark_theme.value))

    def set_theme(self, is_dark: bool) -> Future[None]:
        return self._scope.launch(self._write(is_dark))

    async def _write(self, is_dark: bool) -> None:
        await asyncio.to_thread(self._store.set_dark_theme, is_dark)

    def close(self) -> None:
        self._unsubscribe()
