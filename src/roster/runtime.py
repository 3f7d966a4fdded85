"""Start-up wiring: storage handle, repository, scope and view-models."""

from __future__ import annotations

import weakref
from typing import Optional

from roster.config import Settings, get_settings
from roster.database import Database, StudentRepository
from roster.logutils import get_logger
from roster.preferences import ThemePreferencesRepository
from roster.viewmodel import StudentViewModel, ThemeViewModel, ViewModelScope

logger = get_logger(__name__)


class RosterRuntime:
    """Everything one user session needs, built explicitly and torn down together.

    Pass ``database`` to share one storage handle between sessions; the
    runtime then leaves closing it to the caller.
    """

    def __init__(self, settings: Optional[Settings] = None, database: Optional[Database] = None) -> None:
        self.settings = settings or get_settings()
        self._owns_database = database is None
        if database is None:
            database = Database.from_settings(self.settings)
            database.init_schema()
        self.database = database
        self.repository = StudentRepository.from_database(database)
        self.preferences = ThemePreferencesRepository(self.settings.preferences_path)
        self.scope = ViewModelScope()
        self.students = StudentViewModel(self.repository, self.scope)
        self.theme = ThemeViewModel(self.preferences, self.scope)
        logger.debug("Runtime started", extra={"extra_data": {"database": database.target}})

    def close(self) -> None:
        self.students.close()
        self.theme.close()
        self.scope.cancel()
        if self._owns_database:
            self.database.close()

    def __enter__(self) -> "RosterRuntime":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class SessionRuntime:
    """Holds one UI session's runtime and closes it when the session is discarded.

    Store the handle in per-session state and nowhere else: once that state is
    garbage collected the runtime's scope is cancelled and its list
    subscription leaves the shared ``Database.changes``.
    """

    def __init__(self, runtime: RosterRuntime) -> None:
        self.runtime = runtime
        self._finalizer = weakref.finalize(self, _close_session, runtime)

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def close(self) -> None:
        self._finalizer()


def _close_session(runtime: RosterRuntime) -> None:
    logger.info("Session ended, closing runtime")
    runtime.close()
