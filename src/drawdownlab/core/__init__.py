"""
Core module for DrawdownLab.

This module contains the simulation engine and its building blocks.
"""

from .buckets import (
    DEFAULT_BUCKETS,
    DEFAULT_CORRELATION_MATRIX,
    LIQUID_INDEX,
    Bucket,
    allocation_total,
    initial_balances,
    validate_allocations,
)
from .config import LAKH, SimulationConfig, WithdrawalMode, from_lakh, to_lakh
from .engine import DrawdownSimulator
from .errors import (
    ConfigurationError,
    DecompositionError,
    DrawdownError,
    InvalidTransferError,
    NotStartedError,
    StateConflictError,
)
from .events import Event
from .history import HistoryRow, HistoryStore
from .ledger import BucketLedger
from .random_source import FixedRandomSource, NumpyRandomSource, RandomSource
from .returns import CorrelatedReturnGenerator, cholesky, standard_normal
from .state import IDLE, AwaitingTransfer, EngineState, Idle, PendingYear

__all__ = [
    # Errors
    "DrawdownError",
    "ConfigurationError",
    "NotStartedError",
    "StateConflictError",
    "InvalidTransferError",
    "DecompositionError",
    # Buckets and configuration
    "Bucket",
    "LIQUID_INDEX",
    "DEFAULT_BUCKETS",
    "DEFAULT_CORRELATION_MATRIX",
    "allocation_total",
    "validate_allocations",
    "initial_balances",
    "SimulationConfig",
    "WithdrawalMode",
    "LAKH",
    "to_lakh",
    "from_lakh",
    # Randomness
    "RandomSource",
    "NumpyRandomSource",
    "FixedRandomSource",
    "CorrelatedReturnGenerator",
    "cholesky",
    "standard_normal",
    # Ledger, state and history
    "BucketLedger",
    "PendingYear",
    "Idle",
    "AwaitingTransfer",
    "EngineState",
    "IDLE",
    "HistoryRow",
    "HistoryStore",
    "Event",
    # Engine
    "DrawdownSimulator",
]
