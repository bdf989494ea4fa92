"""
Immutable bucket balance ledger.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from numbers import Integral

from .errors import InvalidTransferError


@dataclass(frozen=True)
class BucketLedger:
    """
    Current balance of every bucket, index-aligned with the bucket list.

    The ledger never holds a negative balance. All operations return a new
    ledger, so snapshots taken from it can be kept without copying.

    Attributes:
        balances: One non-negative balance per bucket
    """

    balances: tuple[float, ...]

    def __post_init__(self):
        values = tuple(float(b) for b in self.balances)
        for i, value in enumerate(values):
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"Bucket {i} balance must be finite and >= 0, got {value}")
        object.__setattr__(self, "balances", values)

    @classmethod
    def of(cls, balances: Iterable[float]) -> BucketLedger:
        return cls(tuple(balances))

    def __len__(self) -> int:
        return len(self.balances)

    def __getitem__(self, index: int) -> float:
        return self.balances[index]

    @property
    def total(self) -> float:
        return float(sum(self.balances))

    def apply_returns(
        self, return_pcts: Sequence[float]
    ) -> tuple[BucketLedger, tuple[float, ...]]:
        """
        Grow every bucket by its return percentage.

        Balances are clamped at zero (a return below -100% empties the bucket).

        Returns:
            Tuple of (new_ledger, return_amounts) where each amount is the
            signed change of the bucket balance
        """
        if len(return_pcts) != len(self.balances):
            raise ValueError(
                f"Expected {len(self.balances)} return percentages, got {len(return_pcts)}"
            )
        grown = tuple(
            max(0.0, bal * (1.0 + float(pct) / 100.0))
            for bal, pct in zip(self.balances, return_pcts)
        )
        amounts = tuple(new - old for new, old in zip(grown, self.balances))
        return BucketLedger(grown), amounts

    def withdraw_from(self, index: int, amount: float) -> BucketLedger:
        """Withdraw from a single bucket; the bucket must cover the amount."""
        if amount > self.balances[index]:
            raise ValueError(
                f"Bucket {index} holds {self.balances[index]:,.2f}, cannot withdraw {amount:,.2f}"
            )
        values = list(self.balances)
        values[index] = max(0.0, values[index] - amount)
        return BucketLedger(tuple(values))

    def withdraw_in_order(self, amount: float) -> tuple[BucketLedger, float]:
        """
        Withdraw ``amount`` walking the buckets in declared order.

        Each bucket gives ``min(remaining, balance)``. If the total balance is
        below the amount every bucket ends at exactly zero.

        Returns:
            Tuple of (new_ledger, amount_withdrawn)
        """
        if self.total < amount:
            return BucketLedger((0.0,) * len(self.balances)), self.total

        values = list(self.balances)
        remaining = amount
        for i, bal in enumerate(values):
            if remaining <= 0:
                break
            take = min(remaining, bal)
            values[i] = bal - take
            remaining -= take
        return BucketLedger(tuple(values)), amount

    def check_transfer(self, from_index: int, to_index: int, amount: float) -> None:
        """
        Validate a transfer without applying it.

        Raises:
            InvalidTransferError: For bad indices, amounts or insufficient funds
        """
        n = len(self.balances)
        for label, idx in (("source", from_index), ("destination", to_index)):
            if isinstance(idx, bool) or not isinstance(idx, Integral) or not 0 <= idx < n:
                raise InvalidTransferError(
                    f"{label.capitalize()} bucket index {idx!r} is out of range (0..{n - 1})"
                )
        if from_index == to_index:
            raise InvalidTransferError("Choose different source and destination buckets")
        try:
            amount = float(amount)
        except (TypeError, ValueError) as exc:
            raise InvalidTransferError(f"Transfer amount {amount!r} is not a number") from exc
        if not math.isfinite(amount) or amount <= 0:
            raise InvalidTransferError("Transfer amount must be > 0")
        if self.balances[from_index] < amount:
            raise InvalidTransferError(
                f"Not enough balance in bucket {from_index}: "
                f"{self.balances[from_index]:,.2f} < {amount:,.2f}"
            )

    def transfer(self, from_index: int, to_index: int, amount: float) -> BucketLedger:
        """Move ``amount`` from one bucket to another."""
        self.check_transfer(from_index, to_index, amount)
        return self.shift(from_index, to_index, float(amount))

    def shift(self, from_index: int, to_index: int, amount: float) -> BucketLedger:
        """
        Apply a transfer delta without the source-balance check.

        Used on pending snapshots, where the delta was already validated
        against the live ledger. The source is clamped at zero.
        """
        values = list(self.balances)
        values[from_index] = max(0.0, values[from_index] - amount)
        values[to_index] += amount
        return BucketLedger(tuple(values))


__all__ = ["BucketLedger"]
