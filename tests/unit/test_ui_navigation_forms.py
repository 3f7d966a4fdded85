"""Tests for screen navigation and the student form."""

import pytest

from roster.ui.forms import FORM_FIELDS, build_student, empty_form, validate_student_form
from roster.ui.navigation import Navigator, Screen

pytestmark = pytest.mark.unit


class TestNavigator:
    def test_starts_at_home(self):
        store = {}
        assert Navigator(store).current == Screen.HOME
        assert store[Navigator.KEY] == "home"

    def test_keeps_existing_tag(self):
        assert Navigator({Navigator.KEY: "list"}).current == Screen.LIST

    def test_navigate_and_back(self):
        nav = Navigator({})
        nav.navigate_to(Screen.FORM)
        assert nav.current == Screen.FORM
        nav.navigate_to(Screen.THEME)
        nav.back()
        # no history: back always lands on home
        assert nav.current == Screen.HOME

    def test_unknown_tag_falls_back_to_home(self):
        assert Navigator({Navigator.KEY: "settings"}).current == Screen.HOME


class TestStudentForm:
    def test_all_blank(self):
        errors = validate_student_form(empty_form())
        assert set(errors) == {field for field, _ in FORM_FIELDS}
        assert errors["cui"] == "CUI is required"

    def test_whitespace_counts_as_blank(self):
        values = {"cui": "A1", "nombres": "  ", "apellidos": "Lopez", "carrera_profesional": "CS"}
        assert validate_student_form(values) == {"nombres": "Nombres is required"}

    def test_missing_keys_are_blank(self):
        assert "apellidos" in validate_student_form({"cui": "A1"})

    def test_valid_form_builds_student(self):
        values = {"cui": " A1 ", "nombres": "Ana", "apellidos": "Lopez", "carrera_profesional": "CS"}
        assert validate_student_form(values) == {}
        student = build_student(values)
        assert student.id is None
        assert student.cui == "A1"
        assert student.carrera_profesional == "CS"
