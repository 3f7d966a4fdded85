"""Screen switching.

One tag in session state picks the screen. There is no history: every
screen's back action returns to home.
"""

from enum import Enum
from typing import MutableMapping


class Screen(str, Enum):
    HOME = "home"
    FORM = "form"
    LIST = "list"
    THEME = "theme"


class Navigator:
    """Reads and writes the current screen tag in ``store``."""

    KEY = "current_screen"

    def __init__(self, store: MutableMapping) -> None:
        self._store = store
        if self.KEY not in store:
            store[self.KEY] = Screen.HOME.value

    @property
    def current(self) -> Screen:
        try:
            return Screen(self._store[self.KEY])
        except ValueError:
            return Screen.HOME

    def navigate_to(self, screen: Screen) -> None:
        self._store[self.KEY] = Screen(screen).value

    def back(self) -> None:
        self.navigate_to(Screen.HOME)
