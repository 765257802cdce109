"""Mutation commands for the cap table view.

Each command validates its input, writes one record and returns the id of the
row it created or updated. Commands never touch view state: the loader runs
them through ``DataLoader.execute``, which follows every successful command
with one refresh.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .client import QueryClient
from .exceptions import ValidationError


@dataclass(frozen=True)
class CommandResult:
    record_id: str
    title: str
    message: str = ""


def _require_name(value: Optional[str], what: str) -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError("Missing name", f"Please enter a {what} name.", field="name")
    return name


def _non_negative(value: Any, field_name: str, label: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid value", f"{label} must be a number.", field=field_name) from None
    if number != number or number < 0:
        raise ValidationError("Invalid value", f"{label} cannot be negative.", field=field_name)
    return number


def _require_id(value: Optional[str], title: str, message: str, field_name: str) -> str:
    if not value:
        raise ValidationError(title, message, field=field_name)
    return str(value)


class Command(ABC):
    @abstractmethod
    def run(self, client: QueryClient) -> CommandResult:
        """Validate, write, and return the affected record id."""


@dataclass
class AddShareholder(Command):
    name: str
    contact: str = ""

    def run(self, client: QueryClient) -> CommandResult:
        name = _require_name(self.name, "shareholder")
        row = client.insert("shareholders", {"name": name, "contact": (self.contact or "").strip()})
        return CommandResult(str(row["id"]), "Shareholder added", f"{name} has been added to the cap table")


@dataclass
class EditShareholder(Command):
    shareholder_id: str
    name: str
    contact: str = ""

    def run(self, client: QueryClient) -> CommandResult:
        sid = _require_id(self.shareholder_id, "No shareholder selected", "Please select a shareholder.", "shareholder_id")
        name = _require_name(self.name, "shareholder")
        row = client.update("shareholders", {"name": name, "contact": (self.contact or "").strip()}, {"id": sid})
        return CommandResult(str(row.get("id", sid)), "Shareholder updated", f"{name} has been updated")


@dataclass
class AddRound(Command):
    name: str
    valuation: float = 0.0
    is_foundation: bool = False

    def run(self, client: QueryClient) -> CommandResult:
        name = _require_name(self.name, "round")
        record = {
            "name": name,
            "valuation": _non_negative(self.valuation, "valuation", "Valuation"),
            "is_foundation": bool(self.is_foundation),
        }
        row = client.insert("funding_rounds", record)
        kind = "Foundation round" if self.is_foundation else "Round"
        return CommandResult(str(row["id"]), f"{kind} added", f"{name} has been created")


@dataclass
class AddShareClass(Command):
    name: str

    def run(self, client: QueryClient) -> CommandResult:
        name = _require_name(self.name, "share class")
        row = client.insert("share_classes", {"name": name})
        return CommandResult(str(row["id"]), "Share class added", f"{name} is now available")


def _investment_values(number_of_shares: Any, share_price: Any, capital_invested: Any) -> Dict[str, float]:
    shares = _non_negative(number_of_shares, "number_of_shares", "Number of shares")
    price = _non_negative(share_price, "share_price", "Share price")
    if capital_invested is None:
        capital = shares * price
    else:
        capital = _non_negative(capital_invested, "capital_invested", "Capital invested")
    return {"number_of_shares": shares, "share_price": price, "capital_invested": capital}


@dataclass
class AddInvestment(Command):
    round_id: Optional[str]
    shareholder_id: Optional[str]
    number_of_shares: float
    share_price: float
    share_class_id: Optional[str] = None
    capital_invested: Optional[float] = None

    def run(self, client: QueryClient) -> CommandResult:
        record: Dict[str, Any] = {
            "round_id": _require_id(self.round_id, "No round selected", "Please select or create a round first.", "round_id"),
            "shareholder_id": _require_id(self.shareholder_id, "No shareholder selected", "Please select a shareholder.", "shareholder_id"),
            "share_class_id": self.share_class_id or None,
        }
        record.update(_investment_values(self.number_of_shares, self.share_price, self.capital_invested))
        row = client.insert("investments", record)
        return CommandResult(str(row["id"]), "Investment added", "The investment has been recorded")


@dataclass
class EditInvestment(Command):
    investment_id: str
    number_of_shares: float
    share_price: float
    share_class_id: Optional[str] = None
    capital_invested: Optional[float] = None

    def run(self, client: QueryClient) -> CommandResult:
        iid = _require_id(self.investment_id, "No investment selected", "Please select an investment.", "investment_id")
        values: Dict[str, Any] = {"share_class_id": self.share_class_id or None}
        values.update(_investment_values(self.number_of_shares, self.share_price, self.capital_invested))
        row = client.update("investments", values, {"id": iid})
        return CommandResult(str(row.get("id", iid)), "Investment updated", "The investment has been updated")


@dataclass
class AddEsop(Command):
    name: str
    total_shares: float
    vesting_period: str = ""

    def run(self, client: QueryClient) -> CommandResult:
        name = _require_name(self.name, "ESOP")
        record = {
            "name": name,
            "total_shares": _non_negative(self.total_shares, "total_shares", "Total shares"),
            "vesting_period": (self.vesting_period or "").strip(),
        }
        row = client.insert("esops", record)
        return CommandResult(str(row["id"]), "ESOP added", f"{name} has been created")


@dataclass
class AddLoan(Command):
    name: str
    amount: float
    interest_rate: float = 0.0
    term_months: int = 0

    def run(self, client: QueryClient) -> CommandResult:
        name = _require_name(self.name, "loan")
        record = {
            "name": name,
            "amount": _non_negative(self.amount, "amount", "Amount"),
            "interest_rate": _non_negative(self.interest_rate, "interest_rate", "Interest rate"),
            "term_months": int(_non_negative(self.term_months, "term_months", "Term")),
        }
        row = client.insert("loans", record)
        return CommandResult(str(row["id"]), "Loan added", f"{name} has been recorded")
