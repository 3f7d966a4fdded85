"""Student Roster - Streamlit entry point.

Run with ``roster serve`` or ``streamlit run src/roster/ui/app.py``.
"""

import streamlit as st

from roster.config import get_settings
from roster.database import Database
from roster.logutils import configure_root_logger, get_logger
from roster.runtime import RosterRuntime, SessionRuntime
from roster.ui.navigation import Navigator, Screen
from roster.ui.screens import apply_theme, render_form, render_home, render_list, render_theme

logger = get_logger(__name__)


@st.cache_resource
def get_database() -> Database:
    """One storage handle per server process, shared by every session."""
    db = Database.from_settings(get_settings())
    db.init_schema()
    return db


def get_runtime() -> RosterRuntime:
    """Per-session view-models, created on the session's first run.

    The runtime is closed when Streamlit drops the session's state.
    """
    if "session_runtime" not in st.session_state:
        st.session_state.session_runtime = SessionRuntime(RosterRuntime(database=get_database()))
        logger.info("Session runtime created")
    return st.session_state.session_runtime.runtime


def main() -> None:
    configure_root_logger()
    st.set_page_config(page_title="Student Roster", page_icon="🎓", layout="centered")

    runtime = get_runtime()
    navigator = Navigator(st.session_state)
    apply_theme(runtime.theme)

    screen = navigator.current
    if screen == Screen.FORM:
        render_form(navigator, runtime.students)
    elif screen == Screen.LIST:
        render_list(navigator, runtime.students)
    elif screen == Screen.THEME:
        render_theme(navigator, runtime.theme)
    else:
        render_home(navigator, runtime.students)


if __name__ == "__main__":
    main()
