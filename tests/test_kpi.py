"""
Tests for KPI utilities.
"""

import pandas as pd
import pytest

from drawdownlab.kpi import (
    bucket_summary,
    depletion_year,
    liquid_runway_years,
    max_drawdown,
)


class TestLiquidRunway:
    """Test the liquid bucket runway estimate."""

    def test_whole_years(self):
        assert liquid_runway_years(1_000_000, 300_000) == 3

    def test_short_bucket(self):
        assert liquid_runway_years(50_000, 100_000) == 0

    def test_zero_expense(self):
        assert liquid_runway_years(100.0, 0.0) is None


class TestDrawdown:
    """Test drawdown and depletion metrics."""

    def test_max_drawdown(self):
        totals = pd.Series([100.0, 120.0, 90.0, 130.0, 104.0], index=[1, 2, 3, 4, 5])

        assert max_drawdown(totals) == pytest.approx(-0.25)

    def test_max_drawdown_monotonic(self):
        assert max_drawdown(pd.Series([1.0, 2.0, 3.0])) == 0.0

    def test_max_drawdown_to_zero(self):
        assert max_drawdown(pd.Series([100.0, 0.0, 0.0])) == -1.0

    def test_max_drawdown_empty(self):
        assert max_drawdown(pd.Series([], dtype=float)) == 0.0

    def test_depletion_year(self):
        totals = pd.Series([50.0, 10.0, 0.0, 0.0], index=[1, 2, 3, 4])

        assert depletion_year(totals) == 3

    def test_never_depleted(self):
        assert depletion_year(pd.Series([5.0, 4.0], index=[1, 2])) is None


def test_bucket_summary():
    tidy = pd.DataFrame(
        {
            "year": [1, 1, 2, 2],
            "bucket": ["Liquid", "Equity", "Liquid", "Equity"],
            "return_pct": [4.0, 10.0, 6.0, -20.0],
            "return_amount": [40.0, 100.0, 62.0, -220.0],
            "ending_balance": [1040.0, 1100.0, 1102.0, 880.0],
        }
    )

    summary = bucket_summary(tidy)

    assert list(summary.index) == ["Liquid", "Equity"]
    assert summary.loc["Liquid", "mean_return_pct"] == pytest.approx(5.0)
    assert summary.loc["Equity", "std_return_pct"] == pytest.approx(15.0)
    assert summary.loc["Equity", "cumulative_return_amount"] == pytest.approx(-120.0)
    assert summary.loc["Liquid", "final_balance"] == 1102.0


def test_bucket_summary_empty():
    assert bucket_summary(pd.DataFrame()).empty
