"""
Unit tests for chart helpers.
"""

from __future__ import annotations

import importlib.util

import pandas as pd
import pytest

from drawdownlab import DrawdownSimulator, NumpyRandomSource, SimulationConfig

plotly_available = importlib.util.find_spec("plotly") is not None


def _skip_if_no_plotly():
    return pytest.mark.skipif(
        not plotly_available, reason="Plotly is required for chart tests"
    )


def _tidy(years=4):
    sim = DrawdownSimulator(SimulationConfig(mode="auto"), NumpyRandomSource(seed=17))
    sim.start()
    sim.run_years(years)
    return sim.history.to_frame(sim.config.bucket_names)


@_skip_if_no_plotly()
def test_bucket_balances_over_years_traces():
    from drawdownlab.charts import bucket_balances_over_years

    tidy = _tidy()
    fig, data = bucket_balances_over_years(tidy)

    # Five buckets plus the total line
    assert len(fig.data) == 6
    assert fig.data[-1].name == "Total Corpus"
    assert list(fig.data[-1].y) == list(tidy.drop_duplicates("year")["total"])
    assert data is tidy


@_skip_if_no_plotly()
def test_bucket_balances_without_total():
    from drawdownlab.charts import bucket_balances_over_years

    fig, _ = bucket_balances_over_years(_tidy(), show_total=False)

    assert len(fig.data) == 5


@_skip_if_no_plotly()
def test_empty_history_gives_annotated_figure():
    from drawdownlab.charts import bucket_balances_over_years, returns_heatmap

    empty = pd.DataFrame(columns=["year", "bucket", "ending_balance", "total"])

    fig, _ = bucket_balances_over_years(empty)
    assert len(fig.data) == 0
    assert fig.layout.annotations[0]["text"] == "No data yet"

    heat, _ = returns_heatmap(empty)
    assert len(heat.data) == 0


@_skip_if_no_plotly()
def test_returns_heatmap_keeps_bucket_order():
    from drawdownlab.charts import returns_heatmap

    tidy = _tidy(years=3)
    fig, pivot = returns_heatmap(tidy)

    assert list(pivot.index) == SimulationConfig().bucket_names
    assert list(pivot.columns) == [1, 2, 3]
    assert len(fig.data[0].z) == 5
    assert len(fig.data[0].z[0]) == 3


@_skip_if_no_plotly()
def test_save_chart_html(tmp_path):
    from drawdownlab.charts import bucket_balances_over_years, save_chart

    fig, _ = bucket_balances_over_years(_tidy(years=2))
    out = tmp_path / "chart.html"
    save_chart(fig, str(out))

    assert out.exists()
    with pytest.raises(ValueError, match="Unsupported format"):
        save_chart(fig, str(tmp_path / "chart.xyz"), format="xyz")
