"""
Chart functions for visualizing drawdown runs.

All chart functions take the tidy frame from ``HistoryStore.to_frame()`` and
return (figure, tidy_dataframe_used) for consistency.
"""

from __future__ import annotations

import pandas as pd

# Plotly imports with graceful fallback
try:
    import plotly.express as px
    import plotly.graph_objects as go

    PLOTLY_AVAILABLE = True
except ImportError:
    PLOTLY_AVAILABLE = False

TOTAL_COLOR = "#FFD700"


def _check_plotly() -> None:
    """Check if Plotly is available and raise helpful error if not."""
    if not PLOTLY_AVAILABLE:
        raise ImportError(
            "Plotly is required for chart functions. Install with:\n"
            "pip install plotly kaleido\n"
            "or\n"
            "pip install drawdownlab[viz]"
        )


def _empty_figure(title: str, message: str) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    fig.add_annotation(
        text=message,
        xref="paper",
        yref="paper",
        x=0.5,
        y=0.5,
        showarrow=False,
    )
    return fig


def bucket_balances_over_years(
    tidy: pd.DataFrame, show_total: bool = True
) -> tuple[go.Figure, pd.DataFrame]:
    """
    Plot the ending balance of every bucket per year, with the total corpus.

    **Args:**
        tidy: DataFrame from ``HistoryStore.to_frame(bucket_names)``
        show_total: Add a highlighted total-corpus line

    **Returns:**
        Tuple of (plotly_figure, tidy_dataframe_used)

    **Example:**
        ```python
        from drawdownlab.charts import bucket_balances_over_years

        tidy = sim.history.to_frame(sim.config.bucket_names)
        fig, data = bucket_balances_over_years(tidy)
        fig.show()
        ```
    """
    _check_plotly()

    title = "Bucket Balances Over Years"
    if tidy.empty:
        return _empty_figure(title, "No data yet"), tidy

    fig = px.line(
        tidy,
        x="year",
        y="ending_balance",
        color="bucket",
        markers=True,
        title=title,
        labels={"ending_balance": "Amount", "year": "Year", "bucket": "Bucket"},
    )

    if show_total:
        totals = tidy.drop_duplicates("year").sort_values("year")
        fig.add_trace(
            go.Scatter(
                x=totals["year"],
                y=totals["total"],
                name="Total Corpus",
                mode="lines+markers",
                line={"color": TOTAL_COLOR, "width": 4},
            )
        )

    fig.update_layout(hovermode="x unified", legend_title="Bucket")
    return fig, tidy


def returns_heatmap(tidy: pd.DataFrame) -> tuple[go.Figure, pd.DataFrame]:
    """
    Heatmap of the sampled return percentage per bucket and year.

    Negative years show in red, positive in green.

    **Returns:**
        Tuple of (plotly_figure, pivot_dataframe_used) where the pivot has
        buckets as rows and years as columns
    """
    _check_plotly()

    title = "Sampled Returns (%)"
    if tidy.empty:
        return _empty_figure(title, "No data yet"), tidy

    bucket_order = list(dict.fromkeys(tidy["bucket"]))
    pivot = tidy.pivot(index="bucket", columns="year", values="return_pct").reindex(
        bucket_order
    )

    fig = go.Figure(
        go.Heatmap(
            z=pivot.to_numpy(),
            x=[str(c) for c in pivot.columns],
            y=list(pivot.index),
            colorscale="RdYlGn",
            zmid=0,
            colorbar={"title": "Return %"},
        )
    )
    fig.update_layout(title=title, xaxis_title="Year", yaxis_title="Bucket")
    return fig, pivot


def save_chart(fig: go.Figure, filename: str, format: str = "html") -> None:
    """
    Save chart to file.

    Args:
        fig: Plotly figure
        filename: Output filename
        format: Output format ('html', 'png', 'pdf', 'svg')
    """
    _check_plotly()

    if format == "html":
        fig.write_html(filename)
    elif format in ("png", "pdf", "svg"):
        fig.write_image(filename, format=format)
    else:
        raise ValueError(f"Unsupported format: {format}")


__all__ = ["bucket_balances_over_years", "returns_heatmap", "save_chart"]
