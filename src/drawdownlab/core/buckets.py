"""
Bucket definitions and the reference five-bucket portfolio.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .errors import ConfigurationError

# Index of the bucket that pays the yearly expense
LIQUID_INDEX = 0


@dataclass(frozen=True)
class Bucket:
    """
    Named investment category of the retirement portfolio.

    Attributes:
        name: Display name (e.g., 'Liquid Funds')
        allocation_pct: Share of the starting corpus, in percent
        avg_return_pct: Mean annual return, in percent
        volatility_pct: Annual standard deviation of the return, in percent
    """

    name: str
    allocation_pct: float
    avg_return_pct: float
    volatility_pct: float

    @classmethod
    def from_dict(cls, data: dict) -> Bucket:
        try:
            return cls(
                name=str(data["name"]),
                allocation_pct=float(data["allocation_pct"]),
                avg_return_pct=float(data["avg_return_pct"]),
                volatility_pct=float(data["volatility_pct"]),
            )
        except KeyError as exc:
            raise ConfigurationError(f"Bucket is missing field {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid bucket {data!r}: {exc}") from exc

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "allocation_pct": self.allocation_pct,
            "avg_return_pct": self.avg_return_pct,
            "volatility_pct": self.volatility_pct,
        }


DEFAULT_BUCKETS: tuple[Bucket, ...] = (
    Bucket("Liquid Funds", 10, 4, 1),
    Bucket("Debt Funds", 40, 7, 2),
    Bucket("Commodities (Gold/Silver)", 10, 8, 5),
    Bucket("Equity Large Cap", 25, 12, 15),
    Bucket("Equity Small/Mid Cap", 15, 16, 25),
)

# Order: Liquid, Debt, Gold, Large Cap, Small/Mid Cap
DEFAULT_CORRELATION_MATRIX = np.array(
    [
        [1.00, 0.40, 0.05, 0.05, 0.05],
        [0.40, 1.00, 0.15, 0.20, 0.20],
        [0.05, 0.15, 1.00, -0.20, -0.20],
        [0.05, 0.20, -0.20, 1.00, 0.90],
        [0.05, 0.20, -0.20, 0.90, 1.00],
    ]
)


def allocation_total(buckets: Sequence[Bucket]) -> float:
    """Sum of allocation percentages."""
    return float(sum(b.allocation_pct for b in buckets))


def validate_allocations(buckets: Sequence[Bucket]) -> None:
    """
    Check that allocations round (half up) to exactly 100 percent.

    Raises:
        ConfigurationError: If the rounded total is not 100
    """
    total = allocation_total(buckets)
    if math.floor(total + 0.5) != 100:
        raise ConfigurationError(
            f"Allocation % across buckets must total exactly 100 (got {total:g})"
        )


def initial_balances(buckets: Sequence[Bucket], corpus: float) -> tuple[float, ...]:
    """Split the starting corpus across buckets by allocation."""
    return tuple(corpus * b.allocation_pct / 100.0 for b in buckets)


__all__ = [
    "Bucket",
    "LIQUID_INDEX",
    "DEFAULT_BUCKETS",
    "DEFAULT_CORRELATION_MATRIX",
    "allocation_total",
    "validate_allocations",
    "initial_balances",
]
