from __future__ import annotations
from datetime import datetime
from typing import Any, Optional


def _as_float(x: Any) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return 0.0


def _parse_timestamp(ts: Any) -> Optional[datetime]:
    if not ts or not isinstance(ts, str):
        return None
    try:
        return datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return None


def date_fmt(ts: Optional[datetime]) -> str:
    if ts is None:
        return "–"
    return ts.strftime("%m/%d/%Y")


def money_fmt(x: Any, decimals: int = 2, currency: str = "$") -> str:
    value = _as_float(x)
    if value != value:  # NaN
        value = 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}{currency}{abs(value):,.{decimals}f}"


def shares_fmt(x: Any) -> str:
    value = _as_float(x)
    if value != value:
        return "0"
    if value == int(value):
        return f"{int(value):,}"
    return f"{value:,.2f}"


def percent_fmt(x: float) -> str:
    return f"{x:.2f}%"


def plain_number(x: Any) -> str:
    """Render a number the way a browser stringifies it (2.0 -> "2", 2.5 -> "2.5")."""
    if isinstance(x, bool):
        return str(x).lower()
    if isinstance(x, int):
        return str(x)
    if isinstance(x, float):
        if x != x:
            return "NaN"
        if x == int(x):
            return str(int(x))
        return repr(x)
    return str(x)
