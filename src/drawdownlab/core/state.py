"""
Engine state: idle, or awaiting a transfer for a pending year.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Union

from .buckets import LIQUID_INDEX
from .ledger import BucketLedger


def covers_expense(liquid: float, expense: float) -> bool:
    """Whether a liquid balance pays the expense, allowing float round-off."""
    return liquid >= expense or math.isclose(liquid, expense)


@dataclass(frozen=True)
class PendingYear:
    """
    A year whose returns are drawn but whose expense the liquid bucket cannot pay.

    Attributes:
        year: Year index the pending result will be committed under
        return_pcts: Return percentages sampled when the year was advanced
        return_amounts: Return amounts sampled when the year was advanced
        snapshot: Balances after returns, before withdrawal, plus any transfers since
        expense: Expense due for the year
        shortfall: ``expense - snapshot[liquid]``
    """

    year: int
    return_pcts: tuple[float, ...]
    return_amounts: tuple[float, ...]
    snapshot: BucketLedger
    expense: float
    shortfall: float

    @property
    def liquid_balance(self) -> float:
        return self.snapshot[LIQUID_INDEX]

    def is_covered(self) -> bool:
        return covers_expense(self.liquid_balance, self.expense)

    def with_snapshot(self, snapshot: BucketLedger) -> PendingYear:
        """Copy with a new snapshot and the shortfall recomputed."""
        return replace(
            self,
            snapshot=snapshot,
            shortfall=max(0.0, self.expense - snapshot[LIQUID_INDEX]),
        )


@dataclass(frozen=True)
class Idle:
    """No pending year; ``advance_year()`` may be called."""

    name = "idle"


@dataclass(frozen=True)
class AwaitingTransfer:
    """A pending year must be resolved by transfers before advancing."""

    pending: PendingYear
    name = "awaiting_transfer"


EngineState = Union[Idle, AwaitingTransfer]

IDLE = Idle()

__all__ = [
    "covers_expense",
    "PendingYear",
    "Idle",
    "AwaitingTransfer",
    "EngineState",
    "IDLE",
]
