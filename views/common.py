from __future__ import annotations
from typing import Iterable
import streamlit as st
from cap_dashboard.notices import Notice

PENDING_KEY = "pending_notices"


def show_notices(notices: Iterable[Notice]) -> None:
    lvl_to_fn = {"success": st.success, "info": st.info, "warning": st.warning, "error": st.error}
    for n in notices:
        text = f"**{n.title}**: {n.description}" if n.description else f"**{n.title}**"
        lvl_to_fn.get(n.level, st.write)(text)


def queue_notices(notices: Iterable[Notice]) -> None:
    st.session_state.setdefault(PENDING_KEY, []).extend(notices)


def flush_notices() -> None:
    pending = st.session_state.pop(PENDING_KEY, [])
    for n in pending:
        if n.level == "success":
            st.toast(f"{n.title}: {n.description}" if n.description else n.title, icon="✅")
    show_notices(n for n in pending if n.level != "success")
