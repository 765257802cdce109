from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
import pandas as pd
from .models import Esop, FundingRound, Investment, Loan, RoundSummary, Shareholder
from .utils import date_fmt, money_fmt, percent_fmt, shares_fmt

ZERO_PERCENT = "0%"
FULL_PERCENT = "100%"
DETAIL_COLUMNS = ["Shareholder", "Number of Shares", "Share Price", "Share Class", "Capital Invested"]


def total_shares_sum(shareholders: Sequence[Shareholder]) -> float:
    return sum(s.total_shares or 0.0 for s in shareholders)


def ownership_percentage(shareholder: Shareholder, shareholders: Sequence[Shareholder]) -> str:
    if not shareholder.total_shares:
        return ZERO_PERCENT
    all_shares = total_shares_sum(shareholders)
    if all_shares == 0:
        return ZERO_PERCENT
    return percent_fmt(shareholder.total_shares / all_shares * 100.0)


def share_value(investment: Investment) -> float:
    return investment.number_of_shares * investment.share_price


def share_percentage(investment: Investment, summary: Optional[RoundSummary]) -> str:
    if summary is None or not summary.total_shares:
        return ZERO_PERCENT
    return percent_fmt(investment.number_of_shares / summary.total_shares * 100.0)


@dataclass
class RoundTotals:
    total_shares: float
    total_capital: float
    average_price: float
    percentage: str = FULL_PERCENT


def round_total_row(funding_round: FundingRound, investments: Sequence[Investment]) -> Optional[RoundTotals]:
    """Totals for the synthetic "Total" row, taken from the round summary.

    The loaded investments only decide whether the row is shown; the figures
    never come from them.
    """
    if not investments:
        return None
    summary = funding_round.summary or RoundSummary()
    average = summary.total_capital / summary.total_shares if summary.total_shares > 0 else 0.0
    return RoundTotals(total_shares=summary.total_shares, total_capital=summary.total_capital, average_price=average)


def summary_drift(funding_round: FundingRound, investments: Sequence[Investment]) -> Dict[str, float]:
    summary = funding_round.summary or RoundSummary()
    loaded_shares = sum(i.number_of_shares for i in investments)
    loaded_capital = sum(i.capital_invested for i in investments)
    return {
        "summary_shares": summary.total_shares,
        "loaded_shares": loaded_shares,
        "shares_drift": summary.total_shares - loaded_shares,
        "summary_capital": summary.total_capital,
        "loaded_capital": loaded_capital,
        "capital_drift": summary.total_capital - loaded_capital,
    }


def shareholder_dataframe(shareholders: Sequence[Shareholder], currency: str = "$") -> pd.DataFrame:
    rows = []
    for s in shareholders:
        rows.append({
            "Name": s.name,
            "Shares": shares_fmt(s.total_shares or 0.0),
            "Percentage": ownership_percentage(s, shareholders),
            "Invested": money_fmt(s.total_invested, currency=currency),
            "Contact": s.contact,
        })
    return pd.DataFrame(rows, columns=["Name", "Shares", "Percentage", "Invested", "Contact"])


def ownership_chart_frame(shareholders: Sequence[Shareholder]) -> pd.DataFrame:
    all_shares = total_shares_sum(shareholders)
    rows = []
    for s in sorted(shareholders, key=lambda s: s.total_shares or 0.0, reverse=True):
        pct = ((s.total_shares or 0.0) / all_shares * 100.0) if all_shares else 0.0
        rows.append({"Shareholder": s.name, "Shares": s.total_shares or 0.0, "Ownership %": round(pct, 4)})
    return pd.DataFrame(rows, columns=["Shareholder", "Shares", "Ownership %"])


def round_detail_dataframe(funding_round: FundingRound, investments: Sequence[Investment], currency: str = "$") -> pd.DataFrame:
    last_col = "Share Percentage" if funding_round.is_foundation else "Share Value"
    rows: List[Dict[str, str]] = []
    for inv in investments:
        if funding_round.is_foundation:
            last = share_percentage(inv, funding_round.summary)
        else:
            last = money_fmt(share_value(inv), currency=currency)
        rows.append({
            "Shareholder": inv.shareholder_label,
            "Number of Shares": shares_fmt(inv.number_of_shares),
            "Share Price": money_fmt(inv.share_price, currency=currency),
            "Share Class": inv.share_class_label,
            "Capital Invested": money_fmt(inv.capital_invested, currency=currency),
            last_col: last,
        })
    totals = round_total_row(funding_round, investments)
    if totals is not None:
        rows.append({
            "Shareholder": "Total",
            "Number of Shares": shares_fmt(totals.total_shares),
            "Share Price": money_fmt(totals.average_price, currency=currency),
            "Share Class": "",
            "Capital Invested": money_fmt(totals.total_capital, currency=currency),
            last_col: totals.percentage if funding_round.is_foundation else money_fmt(funding_round.valuation, 0, currency),
        })
    return pd.DataFrame(rows, columns=DETAIL_COLUMNS + [last_col])


def esop_dataframe(esops: Sequence[Esop]) -> pd.DataFrame:
    rows = [{
        "Name": e.name,
        "Total Shares": shares_fmt(e.total_shares),
        "Vesting Period": e.vesting_period,
        "Created": date_fmt(e.created_at),
    } for e in esops]
    return pd.DataFrame(rows, columns=["Name", "Total Shares", "Vesting Period", "Created"])


def loan_dataframe(loans: Sequence[Loan], currency: str = "$") -> pd.DataFrame:
    rows = [{
        "Name": ln.name,
        "Amount": money_fmt(ln.amount, currency=currency),
        "Interest Rate": percent_fmt(ln.interest_rate),
        "Term (Months)": ln.term_months,
        "Created": date_fmt(ln.created_at),
    } for ln in loans]
    return pd.DataFrame(rows, columns=["Name", "Amount", "Interest Rate", "Term (Months)", "Created"])
