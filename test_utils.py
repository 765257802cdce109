from __future__ import annotations

import logging

from cap_dashboard.logging_config import setup_logging
from cap_dashboard.models import FundingRound, Investment, Shareholder
from cap_dashboard.utils import _as_float, _parse_timestamp, date_fmt, money_fmt, plain_number, shares_fmt


def test_number_formatting():
    assert money_fmt(2500) == "$2,500.00"
    assert money_fmt(-12.5) == "-$12.50"
    assert money_fmt("oops") == "$0.00"
    assert money_fmt(2_000_000, decimals=0) == "$2,000,000"
    assert shares_fmt(1000) == "1,000"
    assert shares_fmt(10.5) == "10.50"
    assert plain_number(2.0) == "2"
    assert plain_number(2.5) == "2.5"
    assert plain_number(300) == "300"


def test_coercion_and_dates():
    assert _as_float(None) == 0.0
    assert _as_float("3.5") == 3.5
    assert date_fmt(_parse_timestamp("2024-05-10T08:30:00Z")) == "05/10/2024"
    assert _parse_timestamp("not a date") is None
    assert date_fmt(None) == "–"


def test_rows_tolerate_missing_joins():
    inv = Investment.from_row({"id": 3, "number_of_shares": "1000", "share_price": None, "shareholders": []})
    assert inv.id == "3"
    assert inv.number_of_shares == 1000.0
    assert inv.share_price == 0.0
    assert inv.shareholder_label == "Unknown"
    assert inv.share_class_label == "Common"


def test_round_summary_from_embedded_list():
    with_summary = FundingRound.from_row({"id": "r", "round_summaries": [{"total_shares": 5, "total_capital": "10"}]})
    assert with_summary.summary.total_capital == 10.0
    assert FundingRound.from_row({"id": "r", "round_summaries": []}).summary is None
    assert Shareholder.from_row({"id": "s", "name": "A"}).total_shares is None


def test_setup_logging_is_idempotent():
    logger = setup_logging("debug")
    setup_logging("debug")
    assert logger.level == logging.DEBUG
    assert len([h for h in logger.handlers if getattr(h, "_cap_dashboard", False)]) == 1
