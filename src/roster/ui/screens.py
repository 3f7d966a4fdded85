"""Streamlit screens: home, student form, student list and theme settings.

Each screen renders from view-model state and wires its buttons to
view-model actions through widget callbacks, so the rerun that follows a
click already shows the result.
"""

from __future__ import annotations

import streamlit as st

from roster.viewmodel import StudentUiState, StudentViewModel, ThemeViewModel

from .forms import FORM_FIELDS, build_student, empty_form, validate_student_form
from .navigation import Navigator, Screen

# How long a screen waits for a fresh list before rendering what it has
LIST_WAIT_SECONDS = 5.0

DARK_CSS = """
<style>
.stApp { background-color: #121212; color: #e6e6e6; }
.stApp h1, .stApp h2, .stApp h3, .stApp label, .stApp p { color: #e6e6e6; }
</style>
"""


def _form_key(field: str) -> str:
    return f"form_{field}"


def apply_theme(theme: ThemeViewModel) -> None:
    if theme.is_dark_theme.value:
        st.markdown(DARK_CSS, unsafe_allow_html=True)


def render_back_button(navigator: Navigator, key: str) -> None:
    st.button("← Back", key=key, on_click=navigator.back)


# ==================== HOME ====================


def render_home(navigator: Navigator, students: StudentViewModel) -> None:
    st.title("🎓 Student Roster")
    count = len(students.ui_state.value.students)
    st.caption(f"{count} student{'s' if count != 1 else ''} registered")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.button("➕ Add student", use_container_width=True, on_click=navigator.navigate_to, args=(Screen.FORM,))
    with col2:
        st.button("📋 Student list", use_container_width=True, on_click=navigator.navigate_to, args=(Screen.LIST,))
    with col3:
        st.button("🌓 Theme", use_container_width=True, on_click=navigator.navigate_to, args=(Screen.THEME,))


# ==================== FORM ====================


def _submit_student_form(students: StudentViewModel) -> None:
    values = {field: st.session_state.get(_form_key(field), "") for field, _ in FORM_FIELDS}
    errors = validate_student_form(values)
    st.session_state.form_errors = errors
    if errors:
        return

    result = students.add_student(build_student(values)).result()
    if result.success:
        for field, value in empty_form().items():
            st.session_state[_form_key(field)] = value
        st.session_state.form_flash = ("success", "Student saved")
    else:
        st.session_state.form_flash = ("error", result.message)


def render_form(navigator: Navigator, students: StudentViewModel) -> None:
    render_back_button(navigator, key="form_back")
    st.header("Add student")

    errors = st.session_state.get("form_errors", {})
    for field, label in FORM_FIELDS:
        st.text_input(label, key=_form_key(field))
        if field in errors:
            st.error(errors[field])

    st.button("Save", type="primary", on_click=_submit_student_form, args=(students,))

    flash = st.session_state.pop("form_flash", None)
    if flash:
        kind, message = flash
        if kind == "success":
            st.success(message)
        else:
            st.error(message)


# ==================== LIST ====================


def _on_search_change(students: StudentViewModel) -> None:
    students.search_students(st.session_state.get("search_query", ""))


def _on_clear_search(students: StudentViewModel) -> None:
    st.session_state.search_query = ""
    students.clear_search()


def _current_list_state(students: StudentViewModel) -> StudentUiState:
    try:
        return students.ui_state.wait_for(lambda s: not s.is_loading, timeout=LIST_WAIT_SECONDS)
    except TimeoutError:
        return students.ui_state.value


def render_list(navigator: Navigator, students: StudentViewModel) -> None:
    render_back_button(navigator, key="list_back")
    st.header("Students")

    col1, col2 = st.columns([4, 1])
    with col1:
        st.text_input(
            "Search by CUI, names or program",
            key="search_query",
            on_change=_on_search_change,
            args=(students,),
        )
    with col2:
        st.button("Clear", use_container_width=True, on_click=_on_clear_search, args=(students,))

    state = _current_list_state(students)
    if state.is_loading:
        st.info("Loading students...")
    if state.error_message:
        st.error(state.error_message)

    if not state.students:
        st.info("No students match." if state.search_query else "No students yet.")
        return

    st.caption(f"{len(state.students)} shown")
    st.dataframe(
        [
            {
                "ID": s.id,
                "CUI": s.cui,
                "Nombres": s.nombres,
                "Apellidos": s.apellidos,
                "Carrera profesional": s.carrera_profesional,
            }
            for s in state.students
        ],
        hide_index=True,
        use_container_width=True,
    )


# ==================== THEME ====================


def _on_theme_toggle(theme: ThemeViewModel) -> None:
    theme.set_theme(bool(st.session_state.get("dark_theme_toggle"))).result()


def render_theme(navigator: Navigator, theme: ThemeViewModel) -> None:
    render_back_button(navigator, key="theme_back")
    st.header("Theme")
    st.toggle(
        "Dark theme",
        value=theme.is_dark_theme.value,
        key="dark_theme_toggle",
        on_change=_on_theme_toggle,
        args=(theme,),
    )
