"""
Drawdown simulation engine.

The engine owns the bucket ledger, the committed history and the engine state
(``Idle`` or ``AwaitingTransfer``). It is driven by four calls: ``start``,
``advance_year``, ``transfer`` and ``reset``. Each call either completes or
raises before touching any state.
"""

from __future__ import annotations

import logging
from typing import Any

from ..kpi import liquid_runway_years
from .buckets import LIQUID_INDEX, initial_balances
from .config import SimulationConfig, WithdrawalMode
from .errors import NotStartedError, StateConflictError
from .events import Event
from .history import HistoryRow, HistoryStore
from .ledger import BucketLedger
from .random_source import RandomSource
from .returns import CorrelatedReturnGenerator
from .state import IDLE, AwaitingTransfer, EngineState, PendingYear, covers_expense

logger = logging.getLogger(__name__)


class DrawdownSimulator:
    """
    Year-by-year retirement drawdown over a set of investment buckets.

    **Example:**
        ```python
        from drawdownlab import DrawdownSimulator, SimulationConfig, WithdrawalMode
        from drawdownlab.core.random_source import NumpyRandomSource

        sim = DrawdownSimulator(
            SimulationConfig(mode=WithdrawalMode.MANUAL),
            random_source=NumpyRandomSource(seed=42),
        )
        sim.start()
        result = sim.advance_year()
        if sim.pending is not None:
            # Liquid bucket is short: move money in from the debt bucket
            sim.transfer(1, 0, sim.pending.shortfall)
        ```

    Args:
        config: Simulation inputs; defaults to the reference portfolio
        random_source: Uniform source for return sampling; defaults to an
            unseeded numpy generator
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        random_source: RandomSource | None = None,
    ):
        self.config = config if config is not None else SimulationConfig()
        self.generator = CorrelatedReturnGenerator(random_source)
        self.history = HistoryStore()
        self._ledger: BucketLedger | None = None
        self._state: EngineState = IDLE
        self._years_completed = 0
        self._events: list[Event] = []

    # --- Read-only views -------------------------------------------------------
    @property
    def is_started(self) -> bool:
        return self._ledger is not None

    @property
    def ledger(self) -> BucketLedger | None:
        return self._ledger

    @property
    def balances(self) -> tuple[float, ...]:
        """Current balance per bucket (empty before ``start``)."""
        return self._ledger.balances if self._ledger is not None else ()

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def pending(self) -> PendingYear | None:
        """The pending year, or ``None`` when the engine is idle."""
        if isinstance(self._state, AwaitingTransfer):
            return self._state.pending
        return None

    @property
    def years_completed(self) -> int:
        return self._years_completed

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self._events)

    def current_expense(self) -> float:
        """Expense due for the next year to be committed."""
        return self.config.expense_for_year(self._years_completed)

    def liquid_runway(self) -> int | None:
        """Whole years the liquid bucket covers at the current expense."""
        ledger = self._require_started()
        return liquid_runway_years(ledger[LIQUID_INDEX], self.current_expense())

    # --- Operations ------------------------------------------------------------
    def start(self, config: SimulationConfig | None = None) -> tuple[float, ...]:
        """
        Initialise balances from the corpus and clear history and pending state.

        Args:
            config: Optional replacement configuration for this run

        Returns:
            Initial balances

        Raises:
            ConfigurationError: If allocations do not total 100% or inputs are invalid
            DecompositionError: If the correlation matrix does not fit the buckets
        """
        cfg = config if config is not None else self.config
        cfg.validate()

        self.config = cfg
        self._ledger = BucketLedger(initial_balances(cfg.buckets, cfg.starting_corpus))
        self.history.clear()
        self._state = IDLE
        self._years_completed = 0
        self._events = []
        self._record(
            0,
            "start",
            f"Started with corpus {cfg.starting_corpus:,.0f} across {len(cfg.buckets)} buckets",
            {"balances": list(self._ledger.balances), "mode": cfg.mode.value},
        )
        logger.info(
            "Simulation started: corpus=%.2f buckets=%d mode=%s",
            cfg.starting_corpus,
            len(cfg.buckets),
            cfg.mode.value,
        )
        return self._ledger.balances

    def advance_year(self) -> HistoryRow | PendingYear:
        """
        Simulate one year: sample returns, apply them, withdraw the expense.

        Returns:
            The committed :class:`HistoryRow`, or the :class:`PendingYear`
            created when the liquid bucket cannot cover the expense in manual mode

        Raises:
            NotStartedError: If ``start()`` has not been called
            StateConflictError: If a pending year awaits a transfer
        """
        ledger = self._require_started()
        if isinstance(self._state, AwaitingTransfer):
            raise StateConflictError(
                f"Year {self._state.pending.year} is pending a transfer of at least "
                f"{self._state.pending.shortfall:,.2f}; resolve it before advancing"
            )

        cfg = self.config
        year = self._years_completed + 1
        expense = cfg.expense_for_year(self._years_completed)

        return_pcts = tuple(
            float(p)
            for p in self.generator.sample(
                cfg.avg_returns, cfg.volatilities, cfg.correlation_matrix
            )
        )
        grown, return_amounts = ledger.apply_returns(return_pcts)
        logger.debug(
            "Year %d: returns=%s expense=%.2f", year, return_pcts, expense
        )

        if cfg.mode is WithdrawalMode.AUTO:
            final, withdrawn = grown.withdraw_in_order(expense)
            row = self._commit(year, return_pcts, return_amounts, final, expense, withdrawn)
            if withdrawn < expense:
                self._record(
                    year,
                    "depleted",
                    f"Portfolio depleted in year {year}: covered {withdrawn:,.2f} of {expense:,.2f}",
                    {"expense": expense, "withdrawn": withdrawn},
                )
                logger.warning(
                    "Portfolio depleted in year %d (expense %.2f, available %.2f)",
                    year,
                    expense,
                    withdrawn,
                )
            return row

        liquid = grown[LIQUID_INDEX]
        if covers_expense(liquid, expense):
            paid = min(expense, liquid)
            final = grown.withdraw_from(LIQUID_INDEX, paid)
            return self._commit(year, return_pcts, return_amounts, final, expense, paid)

        pending = PendingYear(
            year=year,
            return_pcts=return_pcts,
            return_amounts=return_amounts,
            snapshot=grown,
            expense=expense,
            shortfall=expense - liquid,
        )
        self._ledger = grown
        self._state = AwaitingTransfer(pending)
        self._record(
            year,
            "pending",
            f"Liquid bucket short by {pending.shortfall:,.2f} in year {year}",
            {"expense": expense, "shortfall": pending.shortfall},
        )
        logger.info(
            "Year %d pending: liquid %.2f < expense %.2f", year, liquid, expense
        )
        return pending

    def transfer(
        self, from_index: int, to_index: int, amount: float
    ) -> HistoryRow | None:
        """
        Move money between buckets.

        While a year is pending the same move is applied to its snapshot; once
        the snapshot's liquid bucket covers the expense the year is committed
        with the returns drawn when it was advanced.

        Args:
            from_index: Source bucket index
            to_index: Destination bucket index
            amount: Amount to move (> 0 and not above the source balance)

        Returns:
            The committed :class:`HistoryRow` if this transfer resolved the
            pending year, otherwise ``None``

        Raises:
            NotStartedError: If ``start()`` has not been called
            InvalidTransferError: For equal indices, bad amounts or insufficient funds
        """
        ledger = self._require_started()
        live = ledger.transfer(from_index, to_index, amount)
        amount = float(amount)
        year = self._years_completed

        if not isinstance(self._state, AwaitingTransfer):
            self._ledger = live
            self._record(
                year,
                "transfer",
                f"Moved {amount:,.2f} from bucket {from_index} to bucket {to_index}",
                {"from": from_index, "to": to_index, "amount": amount},
            )
            return None

        pending = self._state.pending
        snapshot = pending.snapshot.shift(from_index, to_index, amount)
        self._record(
            pending.year,
            "transfer",
            f"Moved {amount:,.2f} from bucket {from_index} to bucket {to_index}",
            {"from": from_index, "to": to_index, "amount": amount},
        )

        updated = pending.with_snapshot(snapshot)
        if updated.is_covered():
            # Within round-off of the expense counts as covered
            paid = min(pending.expense, updated.liquid_balance)
            final = snapshot.withdraw_from(LIQUID_INDEX, paid)
            row = self._commit(
                pending.year,
                pending.return_pcts,
                pending.return_amounts,
                final,
                pending.expense,
                paid,
            )
            self._record(
                pending.year,
                "resolved",
                f"Pending year {pending.year} resolved by transfer",
                {"expense": pending.expense},
            )
            logger.info("Pending year %d resolved", pending.year)
            return row

        self._ledger = live
        self._state = AwaitingTransfer(updated)
        logger.debug(
            "Year %d still pending, shortfall %.2f", updated.year, updated.shortfall
        )
        return None

    def reset(self) -> None:
        """Drop balances, history and any pending year."""
        self._ledger = None
        self.history.clear()
        self._state = IDLE
        self._years_completed = 0
        self._events = []
        self._record(0, "reset", "Simulation reset")
        logger.info("Simulation reset")

    def run_years(self, years: int) -> list[HistoryRow]:
        """
        Advance up to ``years`` years, stopping early at a pending year.

        Returns:
            Rows committed by this call
        """
        if years < 0:
            raise ValueError("years must be >= 0")
        committed: list[HistoryRow] = []
        for _ in range(years):
            result = self.advance_year()
            if isinstance(result, PendingYear):
                break
            committed.append(result)
        return committed

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable snapshot of the run for export."""
        pending = self.pending
        return {
            "config": self.config.to_dict(),
            "started": self.is_started,
            "state": self._state.name,
            "years_completed": self._years_completed,
            "balances": list(self.balances),
            "pending": (
                {
                    "year": pending.year,
                    "return_pcts": list(pending.return_pcts),
                    "return_amounts": list(pending.return_amounts),
                    "snapshot": list(pending.snapshot.balances),
                    "expense": pending.expense,
                    "shortfall": pending.shortfall,
                }
                if pending is not None
                else None
            ),
            "history": [row.to_dict() for row in self.history],
            "events": [event.to_dict() for event in self._events],
        }

    # --- Internals -------------------------------------------------------------
    def _require_started(self) -> BucketLedger:
        if self._ledger is None:
            raise NotStartedError("Start the simulation first")
        return self._ledger

    def _commit(
        self,
        year: int,
        return_pcts: tuple[float, ...],
        return_amounts: tuple[float, ...],
        final: BucketLedger,
        expense: float,
        withdrawn: float,
    ) -> HistoryRow:
        row = HistoryRow.build(
            year, return_pcts, return_amounts, final.balances, expense, withdrawn
        )
        self.history.append(row)
        self._ledger = final
        self._years_completed = year
        self._state = IDLE
        self._record(
            year,
            "commit",
            f"Year {year} committed, total {row.total:,.2f}",
            {"total": row.total, "expense": expense},
        )
        logger.info("Year %d committed: total=%.2f", year, row.total)
        return row

    def _record(self, year: int, kind: str, message: str, meta: dict | None = None):
        self._events.append(Event(year, kind, message, meta))


__all__ = ["DrawdownSimulator"]
