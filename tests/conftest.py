"""Pytest configuration and fixtures for the student roster tests."""

from pathlib import Path
from typing import Callable, Generator

import pytest

from roster.config import Settings, reset_settings
from roster.database import Database, Student, StudentDao, StudentRepository
from roster.preferences import ThemePreferencesRepository
from roster.viewmodel import StudentViewModel, ThemeViewModel, ViewModelScope

# Seconds a test waits for view-model state before failing
WAIT = 5.0


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no storage)")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite, view-models, CLI)")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Point every setting at the test's temporary directory."""
    monkeypatch.setenv("ROSTER_DATABASE_PATH", str(tmp_path / "settings.db"))
    monkeypatch.setenv("ROSTER_PREFERENCES_PATH", str(tmp_path / "settings_theme.json"))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_path=tmp_path / "roster.db",
        preferences_path=tmp_path / "theme.json",
    )


@pytest.fixture
def db(tmp_path: Path) -> Generator[Database, None, None]:
    """Initialized database in a temporary file."""
    database = Database(tmp_path / "roster.db")
    database.init_schema()
    yield database
    database.close()


@pytest.fixture
def dao(db: Database) -> StudentDao:
    return StudentDao(db)


@pytest.fixture
def repository(dao: StudentDao) -> StudentRepository:
    return StudentRepository(dao)


@pytest.fixture
def scope() -> Generator[ViewModelScope, None, None]:
    s = ViewModelScope(name="test-scope")
    yield s
    s.cancel()


@pytest.fixture
def student_vm(repository: StudentRepository, scope: ViewModelScope) -> Generator[StudentViewModel, None, None]:
    vm = StudentViewModel(repository, scope)
    vm.ui_state.wait_for(lambda s: not s.is_loading, timeout=WAIT)
    yield vm
    vm.close()


@pytest.fixture
def preferences(tmp_path: Path) -> ThemePreferencesRepository:
    return ThemePreferencesRepository(tmp_path / "theme.json")


@pytest.fixture
def theme_vm(preferences: ThemePreferencesRepository, scope: ViewModelScope) -> Generator[ThemeViewModel, None, None]:
    vm = ThemeViewModel(preferences, scope)
    yield vm
    vm.close()


@pytest.fixture
def make_student() -> Callable[..., Student]:
    """Factory for unsaved students with overridable fields."""

    def _make(cui: str = "A1", **overrides) -> Student:
        fields = {
            "cui": cui,
            "nombres": "Ana",
            "apellidos": "Lopez",
            "carrera_profesional": "CS",
        }
        fields.update(overrides)
        return Student(**fields)

    return _make
