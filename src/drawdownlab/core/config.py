"""
Simulation configuration for DrawdownLab.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np

from .buckets import (
    DEFAULT_BUCKETS,
    DEFAULT_CORRELATION_MATRIX,
    Bucket,
    validate_allocations,
)
from .errors import ConfigurationError
from .returns import cholesky

# Indian numbering: 1 lakh = 100,000
LAKH = 100_000


def to_lakh(amount: float) -> float:
    """Convert an absolute amount to lakh."""
    return amount / LAKH


def from_lakh(amount_lakh: float) -> float:
    """Convert an amount in lakh to absolute currency units."""
    return amount_lakh * LAKH


class WithdrawalMode(Enum):
    """How the yearly expense is funded."""

    AUTO = "auto"  # Draw from buckets in declared order
    MANUAL = "manual"  # Draw from the liquid bucket only, pause on shortfall

    @classmethod
    def parse(cls, value: WithdrawalMode | str) -> WithdrawalMode:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            choices = ", ".join(m.value for m in cls)
            raise ConfigurationError(
                f"Unknown withdrawal mode '{value}' (expected one of: {choices})"
            ) from exc


@dataclass(frozen=True)
class SimulationConfig:
    """
    Inputs of a drawdown run.

    Defaults reproduce the reference portfolio: 200 lakh corpus, 3 lakh
    first-year expense, 6% inflation and five buckets.

    Attributes:
        buckets: Bucket definitions; order matters (index 0 is the liquid bucket)
        starting_corpus: Total amount invested at start
        first_year_expense: Expense withdrawn in year 1
        inflation_rate: Annual expense growth as a fraction (0.06 = 6%)
        mode: Withdrawal mode (auto or manual)
        correlation_matrix: Bucket return correlations, index-aligned with buckets
    """

    buckets: tuple[Bucket, ...] = DEFAULT_BUCKETS
    starting_corpus: float = 200 * LAKH
    first_year_expense: float = 3 * LAKH
    inflation_rate: float = 0.06
    mode: WithdrawalMode = WithdrawalMode.AUTO
    correlation_matrix: np.ndarray = field(
        default_factory=lambda: DEFAULT_CORRELATION_MATRIX.copy(), compare=False
    )

    def __post_init__(self):
        # Normalise inputs without breaking immutability
        object.__setattr__(self, "buckets", tuple(self.buckets))
        object.__setattr__(self, "mode", WithdrawalMode.parse(self.mode))
        matrix = np.array(self.correlation_matrix, dtype=float)
        matrix.setflags(write=False)
        object.__setattr__(self, "correlation_matrix", matrix)

    @property
    def bucket_names(self) -> list[str]:
        return [b.name for b in self.buckets]

    @property
    def avg_returns(self) -> list[float]:
        return [b.avg_return_pct for b in self.buckets]

    @property
    def volatilities(self) -> list[float]:
        return [b.volatility_pct for b in self.buckets]

    def expense_for_year(self, years_completed: int) -> float:
        """Inflation-adjusted expense after ``years_completed`` committed years."""
        return self.first_year_expense * (1.0 + self.inflation_rate) ** years_completed

    def validate(self) -> None:
        """
        Validate the configuration before a run.

        Raises:
            ConfigurationError: For invalid buckets or scalar parameters
            DecompositionError: If the correlation matrix does not fit the buckets
        """
        if not self.buckets:
            raise ConfigurationError("At least one bucket is required")

        names = self.bucket_names
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(
                f"Bucket names must be unique; duplicated: {', '.join(duplicates)}"
            )

        for bucket in self.buckets:
            values = (bucket.allocation_pct, bucket.avg_return_pct, bucket.volatility_pct)
            if not all(math.isfinite(v) for v in values):
                raise ConfigurationError(f"Bucket '{bucket.name}' has non-finite values")
            if bucket.allocation_pct < 0:
                raise ConfigurationError(
                    f"Bucket '{bucket.name}': allocation_pct must be >= 0"
                )
            if bucket.volatility_pct < 0:
                raise ConfigurationError(
                    f"Bucket '{bucket.name}': volatility_pct must be >= 0"
                )

        validate_allocations(self.buckets)

        if not math.isfinite(self.starting_corpus) or self.starting_corpus < 0:
            raise ConfigurationError("starting_corpus must be a non-negative number")
        if not math.isfinite(self.first_year_expense) or self.first_year_expense < 0:
            raise ConfigurationError("first_year_expense must be a non-negative number")
        if not math.isfinite(self.inflation_rate) or self.inflation_rate <= -1.0:
            raise ConfigurationError("inflation_rate must be greater than -100%")

        cholesky(self.correlation_matrix, n=len(self.buckets))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimulationConfig:
        """
        Build a configuration from a JSON-compatible dictionary.

        Missing keys fall back to the defaults. Buckets are given as a list
        of ``{"name", "allocation_pct", "avg_return_pct", "volatility_pct"}``
        mappings and the matrix as nested lists.
        """
        kwargs: dict[str, Any] = {}
        if "buckets" in data:
            kwargs["buckets"] = tuple(Bucket.from_dict(b) for b in data["buckets"])
        for key in ("starting_corpus", "first_year_expense", "inflation_rate"):
            if key in data:
                try:
                    kwargs[key] = float(data[key])
                except (TypeError, ValueError) as exc:
                    raise ConfigurationError(f"'{key}' must be a number") from exc
        if "mode" in data:
            kwargs["mode"] = WithdrawalMode.parse(data["mode"])
        if "correlation_matrix" in data:
            kwargs["correlation_matrix"] = data["correlation_matrix"]
        elif "buckets" in kwargs and len(kwargs["buckets"]) != len(DEFAULT_BUCKETS):
            raise ConfigurationError(
                "correlation_matrix is required when the bucket count differs "
                f"from the default ({len(DEFAULT_BUCKETS)})"
            )
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "buckets": [b.to_dict() for b in self.buckets],
            "starting_corpus": self.starting_corpus,
            "first_year_expense": self.first_year_expense,
            "inflation_rate": self.inflation_rate,
            "mode": self.mode.value,
            "correlation_matrix": self.correlation_matrix.tolist(),
        }


__all__ = [
    "LAKH",
    "to_lakh",
    "from_lakh",
    "WithdrawalMode",
    "SimulationConfig",
]
