"""Integration tests for ThemeViewModel and its preference store."""

import pytest

from roster.preferences import ThemePreferencesRepository
from roster.viewmodel import ThemeViewModel

WAIT = 5.0

pytestmark = pytest.mark.integration


class TestThemeViewModel:
    def test_defaults_to_light(self, theme_vm: ThemeViewModel):
        assert theme_vm.is_dark_theme.value is False

    def test_reads_stored_value(self, preferences: ThemePreferencesRepository, scope):
        preferences.set_dark_theme(True)
        vm = ThemeViewModel(preferences, scope)
        try:
            assert vm.is_dark_theme.value is True
        finally:
            vm.close()

    def test_toggle_writes_through(self, theme_vm: ThemeViewModel, preferences: ThemePreferencesRepository):
        theme_vm.toggle_theme().result(timeout=WAIT)
        assert preferences.is_dark_theme() is True
        assert theme_vm.is_dark_theme.value is True

        theme_vm.toggle_theme().result(timeout=WAIT)
        assert preferences.is_dark_theme() is False
        assert theme_vm.is_dark_theme.value is False

    def test_set_theme_is_idempotent(self, theme_vm: ThemeViewModel):
        seen = []
        theme_vm.is_dark_theme.subscribe(seen.append)
        theme_vm.set_theme(True).result(timeout=WAIT)
        theme_vm.set_theme(True).result(timeout=WAIT)
        assert seen == [False, True]

    def test_mirrors_writes_from_elsewhere(self, theme_vm: ThemeViewModel, preferences: ThemePreferencesRepository):
        preferences.set_dark_theme(True)
        assert theme_vm.is_dark_theme.wait_for(lambda dark: dark, timeout=WAIT) is True

    def test_mirror_matches_store_after_concurrent_writes(
        self, theme_vm: ThemeViewModel, preferences: ThemePreferencesRepository
    ):
        jobs = [theme_vm.set_theme(i % 2 == 0) for i in range(50)]
        for job in jobs:
            job.result(timeout=WAIT)
        assert theme_vm.is_dark_theme.value == preferences.is_dark_theme()

    def test_survives_restart(self, preferences: ThemePreferencesRepository, scope):
        first = ThemeViewModel(preferences, scope)
        first.set_theme(True).result(timeout=WAIT)
        first.close()

        second = ThemeViewModel(ThemePreferencesRepository(preferences.path), scope)
        try:
            assert second.is_dark_theme.value is True
        finally:
            second.close()

    def test_close_stops_mirroring(self, theme_vm: ThemeViewModel, preferences: ThemePreferencesRepository):
        theme_vm.close()
        preferences.set_dark_theme(True)
        assert theme_vm.is_dark_theme.value is False
