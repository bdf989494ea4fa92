"""
KPI utilities for drawdown analysis.

Functions here operate on plain numbers or on the pandas objects produced by
:class:`~drawdownlab.core.history.HistoryStore` (``totals()`` and
``to_frame()``).
"""

from __future__ import annotations

import math

import numpy as np
import pandas as pd


def liquid_runway_years(liquid_balance: float, expense: float) -> int | None:
    """
    Whole years the liquid bucket can pay at the given yearly expense.

    Inflation is ignored: this is the quick "Bucket 1 can support ~N years"
    estimate.

    Args:
        liquid_balance: Current balance of the liquid bucket
        expense: Current yearly expense

    Returns:
        ``floor(liquid_balance / expense)``, or ``None`` if expense <= 0
    """
    if expense <= 0:
        return None
    return int(math.floor(max(0.0, liquid_balance) / expense))


def max_drawdown(totals: pd.Series) -> float:
    """
    Worst peak-to-trough decline of the total corpus.

    Args:
        totals: Total corpus per year (e.g. ``HistoryStore.totals()``)

    Returns:
        Drawdown as a non-positive fraction (-0.25 means a 25% fall);
        0.0 for an empty series
    """
    if totals.empty:
        return 0.0
    values = totals.to_numpy(dtype=float)
    peaks = np.maximum.accumulate(values)
    # Years after a zero peak have nothing left to lose
    drawdown = np.divide(
        values - peaks, peaks, out=np.zeros_like(values), where=peaks > 0
    )
    return float(drawdown.min())


def depletion_year(totals: pd.Series) -> int | None:
    """
    First year in which the total corpus reached zero.

    Returns:
        Year index, or ``None`` if the corpus never ran out
    """
    depleted = totals[totals <= 0]
    if depleted.empty:
        return None
    return int(depleted.index[0])


def bucket_summary(tidy: pd.DataFrame) -> pd.DataFrame:
    """
    Per-bucket statistics of a tidy history frame.

    Args:
        tidy: DataFrame from ``HistoryStore.to_frame()``

    Returns:
        DataFrame indexed by bucket with mean_return_pct, std_return_pct,
        cumulative_return_amount and final_balance
    """
    columns = [
        "mean_return_pct",
        "std_return_pct",
        "cumulative_return_amount",
        "final_balance",
    ]
    if tidy.empty:
        return pd.DataFrame(columns=columns, index=pd.Index([], name="bucket"))

    grouped = tidy.sort_values("year").groupby("bucket", sort=False)
    summary = pd.DataFrame(
        {
            "mean_return_pct": grouped["return_pct"].mean(),
            "std_return_pct": grouped["return_pct"].std(ddof=0),
            "cumulative_return_amount": grouped["return_amount"].sum(),
            "final_balance": grouped["ending_balance"].last(),
        }
    )
    summary.index.name = "bucket"
    return summary[columns]


__all__ = [
    "liquid_runway_years",
    "max_drawdown",
    "depletion_year",
    "bucket_summary",
]
