from typing import Optional

import streamlit as st

from cap_dashboard import CapTableState, DataLoader
from cap_dashboard.client import QueryClient, create_query_client
from cap_dashboard.config import get_settings
from cap_dashboard.exceptions import AuthenticationError, ConfigurationError
from cap_dashboard.logging_config import setup_logging
from cap_dashboard.session import AuthSession, SessionWatcher, sign_in, sign_out

# Page modules (aliased to avoid name collision with wrapper functions)
from views import (
    page_cap_table as page_cap_table_page,
    page_pitch_deck as page_pitch_deck_page,
    page_settings as page_settings_page,
)
from views.common import queue_notices

st.set_page_config(page_title="Cap Table Dashboard", page_icon="📊", layout="wide")

settings = get_settings()
setup_logging(settings.LOG_LEVEL)

# Sidebar navigation
PAGES = ["Cap Table", "Pitch Deck Analysis", "Settings"]
page = st.sidebar.radio("Navigate", PAGES)

# One query client per browser session; auth state lives on it.
if "query_client" not in st.session_state:
    try:
        st.session_state.query_client = create_query_client(settings)
    except ConfigurationError as e:  # pragma: no cover - UI error path
        st.error(f"**{e.title}**: {e.message}")
        st.stop()
client: QueryClient = st.session_state.query_client
loader = DataLoader(client, max_workers=settings.LOADER_MAX_WORKERS)

if "cap_table_state" not in st.session_state:
    state = CapTableState()
    queue_notices(loader.load(state).notices)
    st.session_state.cap_table_state = state


def sidebar_auth(session: Optional[AuthSession]):
    st.sidebar.markdown("### Account")
    if session is not None:
        st.sidebar.caption(f"Signed in as {session.email or session.user_id}")
        if st.sidebar.button("Log out"):
            sign_out(client.auth)
            st.rerun()
        return
    with st.sidebar.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        if st.form_submit_button("Log in"):
            try:
                sign_in(client.auth, email, password)
            except AuthenticationError as e:  # pragma: no cover - UI error path
                st.error(e.message)
            else:
                st.rerun()


def page_cap_table():
    page_cap_table_page.render(st.session_state.cap_table_state, loader, settings.CURRENCY_SYMBOL)


def page_pitch_deck(session: Optional[AuthSession]):
    page_pitch_deck_page.render(client, settings, session)


def page_settings(session: Optional[AuthSession]):
    page_settings_page.render(client, session)


with SessionWatcher(client.auth) as watcher:
    sidebar_auth(watcher.current)
    if page == "Cap Table":
        page_cap_table()
    elif page == "Pitch Deck Analysis":
        page_pitch_deck(watcher.current)
    elif page == "Settings":
        page_settings(watcher.current)
