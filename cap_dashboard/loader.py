"""Data loading for the cap table view.

The six collection reads are independent, so they run on a thread pool and
each result is written into the session state as soon as it arrives. The
combined outcome only decides which notice is shown; a failed collection keeps
its last-known value while the others are updated.
"""
from __future__ import annotations
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence, Tuple

from .client import QueryClient
from .exceptions import CapTableError
from .models import Esop, FundingRound, Investment, Loan, ShareClass, Shareholder, rows_to
from .notices import Notice
from .selector import FetchTicket, RoundSelector

if TYPE_CHECKING:
    from .commands import Command, CommandResult

logger = logging.getLogger(__name__)

FOUNDATION = "foundation"
REGULAR = "regular"

ROUND_COLUMNS = "*, round_summaries(*)"
INVESTMENT_COLUMNS = (
    "id, number_of_shares, share_price, capital_invested, "
    "shareholders:shareholder_id (id, name), "
    "share_classes:share_class_id (id, name)"
)


@dataclass
class CapTableState:
    shareholders: List[Shareholder] = field(default_factory=list)
    esops: List[Esop] = field(default_factory=list)
    loans: List[Loan] = field(default_factory=list)
    share_classes: List[ShareClass] = field(default_factory=list)
    foundation: RoundSelector = field(default_factory=lambda: RoundSelector(FOUNDATION))
    regular: RoundSelector = field(default_factory=lambda: RoundSelector(REGULAR))
    loaded_at: Optional[datetime] = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def shareholder_count(self) -> int:
        return len(self.shareholders)

    def selector(self, bucket: str) -> RoundSelector:
        if bucket == FOUNDATION:
            return self.foundation
        if bucket == REGULAR:
            return self.regular
        raise KeyError(f"Unknown round bucket '{bucket}'")


@dataclass
class LoadResult:
    notices: List[Notice] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def extend(self, other: "LoadResult") -> "LoadResult":
        self.notices.extend(other.notices)
        self.failed.extend(other.failed)
        return self


class DataLoader:
    def __init__(self, client: QueryClient, max_workers: int = 6):
        self.client = client
        self.max_workers = max_workers

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def fetch_shareholders(self) -> List[Shareholder]:
        return rows_to(Shareholder, self.client.select("shareholder_investments"))

    def fetch_rounds(self, is_foundation: bool) -> List[FundingRound]:
        return rows_to(FundingRound, self.client.select("funding_rounds", ROUND_COLUMNS, {"is_foundation": is_foundation}))

    def fetch_esops(self) -> List[Esop]:
        return rows_to(Esop, self.client.select("esops"))

    def fetch_loans(self) -> List[Loan]:
        return rows_to(Loan, self.client.select("loans"))

    def fetch_share_classes(self) -> List[ShareClass]:
        return rows_to(ShareClass, self.client.select("share_classes"))

    def fetch_round_investments(self, round_id: str) -> List[Investment]:
        return rows_to(Investment, self.client.select("investments", INVESTMENT_COLUMNS, {"round_id": round_id}))

    def _queries(self) -> Dict[str, Callable[[], list]]:
        return {
            "shareholders": self.fetch_shareholders,
            FOUNDATION: lambda: self.fetch_rounds(True),
            REGULAR: lambda: self.fetch_rounds(False),
            "esops": self.fetch_esops,
            "loans": self.fetch_loans,
            "share_classes": self.fetch_share_classes,
        }

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------
    def _apply(self, state: CapTableState, name: str, value: list) -> Optional[FetchTicket]:
        with state.lock:
            if name in (FOUNDATION, REGULAR):
                return state.selector(name).rounds_loaded(value)
            setattr(state, name, value)
        return None

    def _fan_out(self, state: CapTableState) -> Tuple[Dict[str, Exception], Dict[str, FetchTicket]]:
        errors: Dict[str, Exception] = {}
        tickets: Dict[str, FetchTicket] = {}
        t0 = time.monotonic()
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="captable") as pool:
            futures = {pool.submit(fn): name for name, fn in self._queries().items()}
            for future in as_completed(futures):
                name = futures[future]
                try:
                    ticket = self._apply(state, name, future.result())
                except CapTableError as e:
                    logger.error(f"Loading {name} failed: {e.message}")
                    errors[name] = e
                    continue
                if ticket is not None:
                    tickets[name] = ticket
        with state.lock:
            state.loaded_at = datetime.now(timezone.utc)
        logger.info(f"Fan-out finished in {(time.monotonic() - t0) * 1000:.0f}ms ({len(errors)} failed)")
        return errors, tickets

    def _resolve(self, state: CapTableState, tickets: Sequence[FetchTicket]) -> LoadResult:
        result = LoadResult()
        if not tickets:
            return result
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(tickets)), thread_name_prefix="investments") as pool:
            futures = {pool.submit(self.fetch_round_investments, t.round_id): t for t in tickets}
            for future in as_completed(futures):
                ticket = futures[future]
                selector = state.selector(ticket.bucket)
                try:
                    investments = future.result()
                except CapTableError as e:
                    with state.lock:
                        current = selector.investments_failed(ticket, e)
                    if current:
                        result.failed.append(f"{ticket.bucket}:{ticket.round_id}")
                        result.notices.append(Notice("error", "Error", "Could not load round details"))
                    continue
                with state.lock:
                    selector.investments_loaded(ticket, investments)
        return result

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def load(self, state: CapTableState) -> LoadResult:
        errors, tickets = self._fan_out(state)
        detail = self._resolve(state, list(tickets.values()))
        result = LoadResult(failed=list(errors))
        if errors:
            # one notice covers the round details as well
            result.notices.append(Notice("error", "Error loading data", "There was a problem loading the cap table data"))
            result.failed.extend(detail.failed)
            return result
        result.notices.append(Notice("success", "Data loaded", "Cap table data has been loaded successfully"))
        return result.extend(detail)

    def refresh(self, state: CapTableState) -> LoadResult:
        errors, tickets = self._fan_out(state)
        result = LoadResult(failed=list(errors))
        if not errors:
            with state.lock:
                for bucket in (FOUNDATION, REGULAR):
                    if bucket not in tickets:
                        ticket = state.selector(bucket).reload()
                        if ticket is not None:
                            tickets[bucket] = ticket
        detail = self._resolve(state, list(tickets.values()))
        if errors or detail.failed:
            result.notices.append(Notice("error", "Error", "Could not refresh cap table data"))
        else:
            result.notices.append(Notice("success", "Updated", "Cap table data has been refreshed"))
        result.failed.extend(detail.failed)
        return result

    def select_round(self, state: CapTableState, bucket: str, round_id: str) -> LoadResult:
        with state.lock:
            ticket = state.selector(bucket).select(round_id)
        if ticket is None:
            return LoadResult()
        return self._resolve(state, [ticket])

    def execute(self, state: CapTableState, command: "Command") -> Tuple[Optional["CommandResult"], LoadResult]:
        try:
            outcome = command.run(self.client)
        except CapTableError as e:
            logger.warning(f"{type(command).__name__} failed: {e.message}")
            return None, LoadResult(notices=[Notice.from_error(e)], failed=[type(command).__name__])
        result = self.refresh(state)
        result.notices.insert(0, Notice("success", outcome.title, outcome.message))
        return outcome, result
