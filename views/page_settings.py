from __future__ import annotations
from typing import Any, Callable, Optional
import pandas as pd
import streamlit as st
from cap_dashboard import company
from cap_dashboard.client import QueryClient
from cap_dashboard.exceptions import QueryError
from cap_dashboard.session import AuthSession


def _load(label: str, fn: Callable[[], Any], default: Any = None) -> Any:
    try:
        return fn()
    except QueryError as e:
        st.error(f"**Error loading {label}**: {e.message}")
        return default


def _record(data: Optional[dict], empty: str):
    if not data:
        st.caption(empty)
        return
    st.dataframe(pd.DataFrame([{"Field": k, "Value": "" if v is None else str(v)} for k, v in data.items()]), use_container_width=True, hide_index=True)


def render(client: QueryClient, session: Optional[AuthSession]):
    st.title("⚙️ Settings")

    company_data = _load("company data", lambda: company.fetch_company(client))
    company_id = company_data.get("id") if company_data else None
    user_id = session.user_id if session else None

    tabs = st.tabs(["Profile Details", "Company Info", "Additional Questions", "Social Media", "Users"])
    with tabs[0]:
        if user_id is None:
            st.info("Please log in to see your profile.")
        else:
            _record(_load("profile data", lambda: company.fetch_profile(client, user_id)), "No profile found.")
    with tabs[1]:
        _record(company_data, "No company configured yet.")
    with tabs[2]:
        _record(_load("additional questions", lambda: company.fetch_business_questions(client, company_id)), "No additional questions answered yet.")
    with tabs[3]:
        _record(_load("social media data", lambda: company.fetch_social_media(client, company_id)), "No social media profiles linked yet.")
    with tabs[4]:
        users = _load("users data", lambda: company.fetch_app_users(client, company_id), default=[])
        if users:
            st.dataframe(pd.DataFrame(users).drop(columns=["id"]), use_container_width=True, hide_index=True)
        else:
            st.caption("No users yet.")
