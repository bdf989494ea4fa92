"""
Append-only ledger of committed simulation years.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True)
class HistoryRow:
    """
    Committed result of one simulation year.

    Attributes:
        year: 1-based year index, unique and strictly increasing in a store
        return_pcts: Return percentage sampled per bucket
        return_amounts: Signed amount gained or lost per bucket from returns
        ending_balances: Balance per bucket after the withdrawal
        total: Sum of ``ending_balances``
        expense: Expense due for the year
        withdrawn: Amount actually withdrawn (below ``expense`` only on depletion)
    """

    year: int
    return_pcts: tuple[float, ...]
    return_amounts: tuple[float, ...]
    ending_balances: tuple[float, ...]
    total: float
    expense: float
    withdrawn: float

    @classmethod
    def build(
        cls,
        year: int,
        return_pcts: Sequence[float],
        return_amounts: Sequence[float],
        ending_balances: Sequence[float],
        expense: float,
        withdrawn: float,
    ) -> HistoryRow:
        ending = tuple(float(v) for v in ending_balances)
        return cls(
            year=int(year),
            return_pcts=tuple(float(p) for p in return_pcts),
            return_amounts=tuple(float(a) for a in return_amounts),
            ending_balances=ending,
            total=float(sum(ending)),
            expense=float(expense),
            withdrawn=float(withdrawn),
        )

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "return_pcts": list(self.return_pcts),
            "return_amounts": list(self.return_amounts),
            "ending_balances": list(self.ending_balances),
            "total": self.total,
            "expense": self.expense,
            "withdrawn": self.withdrawn,
        }


class HistoryStore:
    """
    Ordered, append-only sequence of :class:`HistoryRow`.

    Rows are only ever appended; ``clear()`` exists for a fresh start.
    """

    def __init__(self):
        self._rows: list[HistoryRow] = []

    def append(self, row: HistoryRow) -> None:
        """
        Append a committed year.

        Raises:
            ValueError: If the year is not positive or not greater than the last year
        """
        if row.year < 1:
            raise ValueError(f"History year must be positive, got {row.year}")
        if self._rows and row.year <= self._rows[-1].year:
            raise ValueError(
                f"History year {row.year} must follow year {self._rows[-1].year}"
            )
        self._rows.append(row)

    def clear(self) -> None:
        self._rows = []

    @property
    def rows(self) -> tuple[HistoryRow, ...]:
        return tuple(self._rows)

    @property
    def last(self) -> HistoryRow | None:
        return self._rows[-1] if self._rows else None

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[HistoryRow]:
        return iter(tuple(self._rows))

    def __getitem__(self, index: int) -> HistoryRow:
        return self._rows[index]

    def totals(self) -> pd.Series:
        """Total corpus per committed year."""
        return pd.Series(
            [r.total for r in self._rows],
            index=pd.Index([r.year for r in self._rows], name="year"),
            name="total",
            dtype=float,
        )

    def to_frame(self, bucket_names: Sequence[str] | None = None) -> pd.DataFrame:
        """
        Tidy view of the history, one row per year and bucket.

        Args:
            bucket_names: Display names index-aligned with the buckets;
                defaults to ``bucket_0``, ``bucket_1``, ...

        Returns:
            DataFrame with columns year, bucket, return_pct, return_amount,
            ending_balance, total, expense
        """
        columns = [
            "year",
            "bucket",
            "return_pct",
            "return_amount",
            "ending_balance",
            "total",
            "expense",
        ]
        records = []
        for row in self._rows:
            names = (
                list(bucket_names)
                if bucket_names is not None
                else [f"bucket_{i}" for i in range(len(row.ending_balances))]
            )
            if len(names) != len(row.ending_balances):
                raise ValueError(
                    f"Got {len(names)} bucket names for {len(row.ending_balances)} buckets"
                )
            for name, pct, amount, balance in zip(
                names, row.return_pcts, row.return_amounts, row.ending_balances
            ):
                records.append(
                    {
                        "year": row.year,
                        "bucket": name,
                        "return_pct": pct,
                        "return_amount": amount,
                        "ending_balance": balance,
                        "total": row.total,
                        "expense": row.expense,
                    }
                )
        return pd.DataFrame.from_records(records, columns=columns)


__all__ = ["HistoryRow", "HistoryStore"]
