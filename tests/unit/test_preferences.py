"""Tests for the theme preference store."""

import json
import threading

import pytest

from roster.preferences import DARK_THEME_KEY, ThemePreferencesRepository

pytestmark = pytest.mark.unit


class TestThemePreferences:
    def test_missing_file_is_light(self, preferences):
        assert preferences.is_dark_theme() is False

    def test_write_through(self, preferences):
        preferences.set_dark_theme(True)
        assert json.loads(preferences.path.read_text()) == {DARK_THEME_KEY: True}
        assert ThemePreferencesRepository(preferences.path).is_dark_theme() is True

    def test_corrupt_file_is_light(self, tmp_path):
        path = tmp_path / "theme.json"
        path.write_text("{not json")
        assert ThemePreferencesRepository(path).is_dark_theme() is False

    def test_keeps_unrelated_keys(self, tmp_path):
        path = tmp_path / "theme.json"
        path.write_text(json.dumps({"font_scale": 1.2}))
        ThemePreferencesRepository(path).set_dark_theme(True)
        assert json.loads(path.read_text()) == {"font_scale": 1.2, DARK_THEME_KEY: True}

    def test_subscribe_gets_current_then_changes(self, preferences):
        seen = []
        unsubscribe = preferences.subscribe(seen.append)
        preferences.set_dark_theme(True)
        preferences.set_dark_theme(True)  # unchanged: no event
        preferences.set_dark_theme(False)
        unsubscribe()
        preferences.set_dark_theme(True)
        assert seen == [False, True, False]

    def test_concurrent_writers_deliver_in_store_order(self, preferences):
        seen = []
        preferences.subscribe(seen.append)

        def writer(value: bool):
            for _ in range(200):
                preferences.set_dark_theme(value)
                preferences.set_dark_theme(not value)

        threads = [threading.Thread(target=writer, args=(flag,)) for flag in (True, False)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert seen[-1] == preferences.is_dark_theme()
        # only real changes are delivered, so neighbours always differ
        assert all(a != b for a, b in zip(seen, seen[1:]))
