from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from .utils import _as_float, _parse_timestamp

UNKNOWN_SHAREHOLDER = "Unknown"
DEFAULT_SHARE_CLASS = "Common"


def _embedded(row: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    value = row.get(key)
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, dict) else None


@dataclass
class Shareholder:
    id: str
    name: str
    contact: str = ""
    total_shares: Optional[float] = None
    total_invested: float = 0.0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Shareholder":
        raw_shares = row.get("total_shares")
        return cls(
            id=str(row.get("id", "")),
            name=row.get("name") or "",
            contact=row.get("contact") or "",
            total_shares=None if raw_shares is None else _as_float(raw_shares),
            total_invested=_as_float(row.get("total_invested")),
        )


@dataclass
class RoundSummary:
    total_shares: float = 0.0
    total_capital: float = 0.0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "RoundSummary":
        return cls(total_shares=_as_float(row.get("total_shares")), total_capital=_as_float(row.get("total_capital")))


@dataclass
class FundingRound:
    id: str
    name: str
    is_foundation: bool = False
    valuation: float = 0.0
    summary: Optional[RoundSummary] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "FundingRound":
        summary_row = _embedded(row, "round_summaries")
        return cls(
            id=str(row.get("id", "")),
            name=row.get("name") or "Unnamed",
            is_foundation=bool(row.get("is_foundation")),
            valuation=_as_float(row.get("valuation")),
            summary=RoundSummary.from_row(summary_row) if summary_row is not None else None,
        )


@dataclass
class Investment:
    id: str
    number_of_shares: float = 0.0
    share_price: float = 0.0
    capital_invested: float = 0.0
    shareholder_id: Optional[str] = None
    shareholder_name: Optional[str] = None
    share_class_id: Optional[str] = None
    share_class_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Investment":
        holder = _embedded(row, "shareholders")
        share_class = _embedded(row, "share_classes")
        return cls(
            id=str(row.get("id", "")),
            number_of_shares=_as_float(row.get("number_of_shares")),
            share_price=_as_float(row.get("share_price")),
            capital_invested=_as_float(row.get("capital_invested")),
            shareholder_id=str(holder["id"]) if holder and holder.get("id") is not None else None,
            shareholder_name=holder.get("name") if holder else None,
            share_class_id=str(share_class["id"]) if share_class and share_class.get("id") is not None else None,
            share_class_name=share_class.get("name") if share_class else None,
        )

    @property
    def shareholder_label(self) -> str:
        return self.shareholder_name or UNKNOWN_SHAREHOLDER

    @property
    def share_class_label(self) -> str:
        return self.share_class_name or DEFAULT_SHARE_CLASS


@dataclass
class ShareClass:
    id: str
    name: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ShareClass":
        return cls(id=str(row.get("id", "")), name=row.get("name") or DEFAULT_SHARE_CLASS)


@dataclass
class Esop:
    id: str
    name: str
    total_shares: float = 0.0
    vesting_period: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Esop":
        vesting = row.get("vesting_period")
        return cls(
            id=str(row.get("id", "")),
            name=row.get("name") or "",
            total_shares=_as_float(row.get("total_shares")),
            vesting_period="" if vesting is None else str(vesting),
            created_at=_parse_timestamp(row.get("created_at")),
        )


@dataclass
class Loan:
    id: str
    name: str
    amount: float = 0.0
    interest_rate: float = 0.0
    term_months: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Loan":
        return cls(
            id=str(row.get("id", "")),
            name=row.get("name") or "",
            amount=_as_float(row.get("amount")),
            interest_rate=_as_float(row.get("interest_rate")),
            term_months=int(_as_float(row.get("term_months"))),
            created_at=_parse_timestamp(row.get("created_at")),
        )


def rows_to(cls, rows: Optional[List[Dict[str, Any]]]) -> list:
    return [cls.from_row(r) for r in (rows or [])]
