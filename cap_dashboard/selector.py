"""Round selection as an explicit state machine.

One selector exists per round bucket (foundation, regular). When a round list
arrives with nothing selected, the first round is shown at once and its
investments are attached when they arrive. An explicit switch only replaces
the displayed round once the fetch for the latest requested round succeeds,
so a failed or superseded fetch never changes what is on screen.

    NO_ROUNDS_LOADED --rounds_loaded([r, ...])--> INVESTMENTS_LOADING (first round shown, no rows)
    NONE_SELECTED    --select(id)---------------> INVESTMENTS_LOADING
    INVESTMENTS_LOADING --investments_loaded----> INVESTMENTS_READY
    INVESTMENTS_LOADING --investments_failed----> INVESTMENTS_READY | NONE_SELECTED
    any              --select("select")---------> NONE_SELECTED | NO_ROUNDS_LOADED
"""
from __future__ import annotations
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence
from .models import FundingRound, Investment

logger = logging.getLogger(__name__)

NO_SELECTION = "select"


class SelectorState(str, Enum):
    NO_ROUNDS_LOADED = "no_rounds_loaded"
    NONE_SELECTED = "none_selected"
    INVESTMENTS_LOADING = "investments_loading"
    INVESTMENTS_READY = "investments_ready"


@dataclass(frozen=True)
class FetchTicket:
    bucket: str
    round_id: str
    seq: int


@dataclass
class SelectedRound:
    round: FundingRound
    investments: List[Investment] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.round.id


class RoundSelector:
    def __init__(self, bucket: str):
        self.bucket = bucket
        self.rounds: List[FundingRound] = []
        self.selected: Optional[SelectedRound] = None
        self._pending: Optional[FetchTicket] = None
        self._seq = itertools.count(1)

    @property
    def state(self) -> SelectorState:
        if self._pending is not None:
            return SelectorState.INVESTMENTS_LOADING
        if self.selected is not None:
            return SelectorState.INVESTMENTS_READY
        if self.rounds:
            return SelectorState.NONE_SELECTED
        return SelectorState.NO_ROUNDS_LOADED

    @property
    def pending(self) -> Optional[FetchTicket]:
        return self._pending

    @property
    def selected_round_id(self) -> str:
        if self._pending is not None:
            return self._pending.round_id
        return self.selected.id if self.selected is not None else NO_SELECTION

    @property
    def investments(self) -> List[Investment]:
        return list(self.selected.investments) if self.selected is not None else []

    def find(self, round_id: str) -> Optional[FundingRound]:
        return next((r for r in self.rounds if r.id == round_id), None)

    def _issue(self, round_id: str) -> FetchTicket:
        self._pending = FetchTicket(self.bucket, round_id, next(self._seq))
        return self._pending

    def rounds_loaded(self, rounds: Sequence[FundingRound]) -> Optional[FetchTicket]:
        self.rounds = list(rounds)
        if self.selected is not None:
            fresh = self.find(self.selected.id)
            if fresh is not None:
                self.selected.round = fresh
            else:
                logger.info(f"{self.bucket} round {self.selected.id} no longer listed, clearing selection")
                self.selected = None
        if self._pending is not None and self.find(self._pending.round_id) is None:
            self._pending = None
        if self.selected is None and self._pending is None and self.rounds:
            self.selected = SelectedRound(round=self.rounds[0])
            return self._issue(self.rounds[0].id)
        return None

    def select(self, round_id: str) -> Optional[FetchTicket]:
        if round_id == NO_SELECTION:
            self.selected = None
            self._pending = None
            return None
        if self.find(round_id) is None:
            logger.debug(f"Ignoring unknown {self.bucket} round {round_id}")
            return None
        if round_id == self.selected_round_id:
            return None
        return self._issue(round_id)

    def reload(self) -> Optional[FetchTicket]:
        if self._pending is not None:
            return self._issue(self._pending.round_id)
        if self.selected is not None:
            return self._issue(self.selected.id)
        return None

    def is_current(self, ticket: FetchTicket) -> bool:
        return self._pending is not None and self._pending == ticket

    def investments_loaded(self, ticket: FetchTicket, investments: Sequence[Investment]) -> bool:
        if not self.is_current(ticket):
            logger.debug(f"Discarding stale investments for {self.bucket} round {ticket.round_id}")
            return False
        funding_round = self.find(ticket.round_id)
        self._pending = None
        if funding_round is None:
            return False
        self.selected = SelectedRound(round=funding_round, investments=list(investments))
        return True

    def investments_failed(self, ticket: FetchTicket, error: Exception) -> bool:
        if not self.is_current(ticket):
            return False
        logger.warning(f"Investments fetch for {self.bucket} round {ticket.round_id} failed: {error}")
        self._pending = None
        return True
