"""
Pytest configuration and shared fixtures for the cap table dashboard tests.

FakeQueryClient stands in for cap_dashboard.client.QueryClient: tables are
plain lists of row dicts, filters are equality matches, and any table can be
made to fail with a QueryError.
"""
import copy
import itertools
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from cap_dashboard.exceptions import QueryError, StorageError


class FakeQueryClient:
    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = copy.deepcopy(tables or {})
        self.failing: Dict[str, str] = {}
        self.failing_stores: Dict[str, str] = {}
        self.calls: List[tuple] = []
        self.stored: Dict[str, bytes] = {}
        self._ids = itertools.count(1000)

    def fail(self, table: str, message: str = "boom") -> None:
        self.failing[table] = message

    def _check(self, table: str, operation: str) -> None:
        if table in self.failing:
            raise QueryError(self.failing[table], table=table, operation=operation)

    def select(self, table, columns="*", filters=None, limit=None):
        self.calls.append(("select", table, dict(filters or {})))
        self._check(table, "select")
        rows = [r for r in self.tables.get(table, []) if all(r.get(k) == v for k, v in (filters or {}).items())]
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    def select_one(self, table, columns="*", filters=None):
        rows = self.select(table, columns, filters, limit=1)
        return rows[0] if rows else None

    def insert(self, table, record):
        self.calls.append(("insert", table, dict(record)))
        self._check(table, "insert")
        row = dict(record)
        row.setdefault("id", str(next(self._ids)))
        self.tables.setdefault(table, []).append(row)
        return dict(row)

    def update(self, table, values, filters):
        self.calls.append(("update", table, dict(values)))
        self._check(table, "update")
        for row in self.tables.get(table, []):
            if all(row.get(k) == v for k, v in filters.items()):
                row.update(values)
                return dict(row)
        raise QueryError(f"No {table} row matched {filters}", table=table, operation="update")

    def store(self, bucket, key, data, content_type):
        self.calls.append(("store", bucket, key))
        if bucket in self.failing_stores:
            raise StorageError(self.failing_stores[bucket], bucket=bucket, key=key)
        self.stored[f"{bucket}/{key}"] = data
        return key

    def operations(self, kind: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == kind]


class FakeSubscription:
    def __init__(self, auth: "FakeAuth"):
        self._auth = auth
        self.unsubscribed = False

    def unsubscribe(self):
        self.unsubscribed = True
        self._auth.listeners = [cb for cb in self._auth.listeners if cb is not self.callback]


class FakeAuth:
    def __init__(self, session=None, password: str = "secret"):
        self.session = session
        self.password = password
        self.listeners: List[Any] = []
        self.subscriptions: List[FakeSubscription] = []

    def get_session(self):
        return self.session

    def on_auth_state_change(self, callback):
        sub = FakeSubscription(self)
        sub.callback = callback
        self.listeners.append(callback)
        self.subscriptions.append(sub)
        return sub

    def emit(self, event: str, session) -> None:
        self.session = session
        for cb in list(self.listeners):
            cb(event, session)

    def sign_in_with_password(self, credentials):
        if credentials.get("password") != self.password:
            raise RuntimeError("Invalid login credentials")
        session = make_supabase_session(email=credentials["email"])
        self.emit("SIGNED_IN", session)
        return SimpleNamespace(session=session, user=session.user)

    def sign_out(self):
        self.emit("SIGNED_OUT", None)


def make_supabase_session(token: str = "tok-123", user_id: str = "user-1", email: str = "founder@example.com"):
    return SimpleNamespace(access_token=token, user=SimpleNamespace(id=user_id, email=email))


# =============================================================================
# Sample store contents
# =============================================================================

def cap_table_rows() -> Dict[str, List[Dict[str, Any]]]:
    return {
        "shareholder_investments": [
            {"id": "sh-1", "name": "Alice Founder", "contact": "alice@example.com", "total_shares": 300, "total_invested": 3000},
            {"id": "sh-2", "name": "Bob Angel", "contact": "bob@example.com", "total_shares": 700, "total_invested": 70000},
        ],
        "funding_rounds": [
            {"id": "fr-1", "name": "Founding", "is_foundation": True, "valuation": 10000,
             "round_summaries": [{"total_shares": 1000, "total_capital": 10000}]},
            {"id": "fr-2", "name": "Founding II", "is_foundation": True, "valuation": 0, "round_summaries": []},
            {"id": "r-1", "name": "Seed", "is_foundation": False, "valuation": 2_000_000,
             "round_summaries": [{"total_shares": 5000, "total_capital": 12500}]},
            {"id": "r-2", "name": "Series A", "is_foundation": False, "valuation": 8_000_000,
             "round_summaries": [{"total_shares": 2000, "total_capital": 40000}]},
        ],
        "investments": [
            {"id": "inv-1", "round_id": "fr-1", "number_of_shares": 300, "share_price": 10, "capital_invested": 3000,
             "shareholders": {"id": "sh-1", "name": "Alice Founder"}, "share_classes": {"id": "sc-1", "name": "Common"}},
            {"id": "inv-2", "round_id": "fr-1", "number_of_shares": 700, "share_price": 10, "capital_invested": 7000,
             "shareholders": {"id": "sh-2", "name": "Bob Angel"}, "share_classes": None},
            {"id": "inv-3", "round_id": "r-1", "number_of_shares": 1000, "share_price": 2.5, "capital_invested": 2500,
             "shareholders": None, "share_classes": {"id": "sc-2", "name": "Preferred"}},
            {"id": "inv-4", "round_id": "r-2", "number_of_shares": 2000, "share_price": 20, "capital_invested": 40000,
             "shareholders": {"id": "sh-2", "name": "Bob Angel"}, "share_classes": {"id": "sc-2", "name": "Preferred"}},
        ],
        "esops": [
            {"id": "es-1", "name": "2024 Pool", "total_shares": 500, "vesting_period": "4 years", "created_at": "2024-03-01T10:00:00+00:00"},
        ],
        "loans": [
            {"id": "ln-1", "name": "Bridge", "amount": 50000, "interest_rate": 6.5, "term_months": 18, "created_at": "2024-05-10T08:30:00Z"},
        ],
        "share_classes": [
            {"id": "sc-1", "name": "Common"},
            {"id": "sc-2", "name": "Preferred"},
        ],
    }


@pytest.fixture
def fake_client():
    return FakeQueryClient(cap_table_rows())


@pytest.fixture
def empty_client():
    return FakeQueryClient({})


@pytest.fixture
def fake_auth():
    return FakeAuth(session=make_supabase_session())
