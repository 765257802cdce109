from __future__ import annotations
from typing import Any, Dict, List, Optional
from .client import QueryClient

APP_USER_COLUMNS = (
    "id, user_type, status, role, user_id, "
    "profiles:user_id (full_name, last_name, email:id (email))"
)


def fetch_company(client: QueryClient) -> Optional[Dict[str, Any]]:
    return client.select_one("companies")


def fetch_profile(client: QueryClient, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
    if not user_id:
        return None
    return client.select_one("profiles", filters={"id": user_id})


def fetch_business_questions(client: QueryClient, company_id: Optional[str]) -> Optional[Dict[str, Any]]:
    if not company_id:
        return None
    return client.select_one("business_questions", filters={"company_id": company_id})


def fetch_social_media(client: QueryClient, company_id: Optional[str]) -> Optional[Dict[str, Any]]:
    if not company_id:
        return None
    return client.select_one("social_media", filters={"company_id": company_id})


def app_user_row(row: Dict[str, Any]) -> Dict[str, Any]:
    profile = row.get("profiles") or {}
    email = profile.get("email") or {}
    if isinstance(email, list):
        email = email[0] if email else {}
    return {
        "id": row.get("id"),
        "user": profile.get("full_name") or "Unknown",
        "user_type": row.get("user_type"),
        "status": row.get("status"),
        "role": row.get("role"),
        "email": (email.get("email") if isinstance(email, dict) else None) or "N/A",
    }


def fetch_app_users(client: QueryClient, company_id: Optional[str]) -> List[Dict[str, Any]]:
    if not company_id:
        return []
    return [app_user_row(r) for r in client.select("app_users", APP_USER_COLUMNS, {"company_id": company_id})]
