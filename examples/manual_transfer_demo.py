"""
Manual-mode walkthrough: advance years and top up the liquid bucket when short.
"""

from __future__ import annotations

from drawdownlab import (
    DrawdownSimulator,
    NumpyRandomSource,
    PendingYear,
    SimulationConfig,
    WithdrawalMode,
    to_lakh,
)
from drawdownlab.kpi import max_drawdown


def main(years: int = 25) -> None:
    sim = DrawdownSimulator(
        SimulationConfig(mode=WithdrawalMode.MANUAL),
        random_source=NumpyRandomSource(seed=2024),
    )
    sim.start()

    for _ in range(years):
        result = sim.advance_year()
        if isinstance(result, PendingYear):
            # Refill from the debt bucket: shortfall plus two more years of expense
            top_up = min(result.shortfall + 2 * result.expense, sim.balances[1])
            print(
                f"Year {result.year}: liquid short by {to_lakh(result.shortfall):.1f} lakh, "
                f"moving {to_lakh(top_up):.1f} lakh from debt"
            )
            if top_up <= 0 or sim.transfer(1, 0, top_up) is None:
                print("Debt bucket cannot cover the shortfall; stopping")
                break

    for row in sim.history:
        print(f"Year {row.year:>2}: total {to_lakh(row.total):8.1f} lakh")
    print(f"Max drawdown: {max_drawdown(sim.history.totals()):.1%}")


if __name__ == "__main__":
    main()
