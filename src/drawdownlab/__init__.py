"""
DrawdownLab - Retirement Bucket Drawdown Simulator

DrawdownLab simulates the year-by-year depletion of a multi-bucket retirement
portfolio. Each year every bucket earns a random return drawn from correlated
normal distributions, then the inflation-adjusted expense is withdrawn.

Key Features:
- **Correlated Returns**: Cholesky-correlated Box-Muller draws per bucket
- **Auto Mode**: The expense is drawn from buckets in declared order
- **Manual Mode**: Only the liquid bucket pays; a shortfall pauses the run
  until transfers between buckets cover it
- **Reproducible Runs**: Inject a seeded or fixed random source
- **Rich Visualizations**: Interactive charts with Plotly integration

Quick Start:
    ```python
    from drawdownlab import DrawdownSimulator, SimulationConfig, WithdrawalMode
    from drawdownlab.core.random_source import NumpyRandomSource

    sim = DrawdownSimulator(
        SimulationConfig(mode=WithdrawalMode.AUTO),
        random_source=NumpyRandomSource(seed=1),
    )
    sim.start()
    rows = sim.run_years(30)
    print(sim.history.totals())
    ```

License:
    This is a proof-of-concept for educational and research purposes.
"""

# Version information
__version__ = "0.1.0"
__author__ = "DrawdownLab Team"
__description__ = "Retirement bucket drawdown simulator"

from .core import (
    DEFAULT_BUCKETS,
    DEFAULT_CORRELATION_MATRIX,
    LAKH,
    LIQUID_INDEX,
    AwaitingTransfer,
    Bucket,
    BucketLedger,
    ConfigurationError,
    CorrelatedReturnGenerator,
    DecompositionError,
    DrawdownError,
    DrawdownSimulator,
    Event,
    FixedRandomSource,
    HistoryRow,
    HistoryStore,
    Idle,
    InvalidTransferError,
    NotStartedError,
    NumpyRandomSource,
    PendingYear,
    RandomSource,
    SimulationConfig,
    StateConflictError,
    WithdrawalMode,
    cholesky,
    from_lakh,
    to_lakh,
)

# Import KPI utilities
from .kpi import bucket_summary, depletion_year, liquid_runway_years, max_drawdown

# Import chart functions (optional - requires plotly)
from .charts import PLOTLY_AVAILABLE as CHARTS_AVAILABLE

# Define what gets imported with "from drawdownlab import *"
__all__ = [
    # Engine
    "DrawdownSimulator",
    "SimulationConfig",
    "WithdrawalMode",
    "Bucket",
    "BucketLedger",
    "HistoryRow",
    "HistoryStore",
    "PendingYear",
    "Idle",
    "AwaitingTransfer",
    "Event",
    "DEFAULT_BUCKETS",
    "DEFAULT_CORRELATION_MATRIX",
    "LIQUID_INDEX",
    "LAKH",
    "to_lakh",
    "from_lakh",
    # Randomness
    "RandomSource",
    "NumpyRandomSource",
    "FixedRandomSource",
    "CorrelatedReturnGenerator",
    "cholesky",
    # Errors
    "DrawdownError",
    "ConfigurationError",
    "NotStartedError",
    "StateConflictError",
    "InvalidTransferError",
    "DecompositionError",
    # KPI utilities
    "liquid_runway_years",
    "max_drawdown",
    "depletion_year",
    "bucket_summary",
    # Version info
    "__version__",
    "__author__",
    "__description__",
]

if CHARTS_AVAILABLE:
    from .charts import bucket_balances_over_years, returns_heatmap, save_chart

    __all__.extend(["bucket_balances_over_years", "returns_heatmap", "save_chart"])
