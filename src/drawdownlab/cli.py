"""
Command-line interface for DrawdownLab.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

import numpy as np
import pandas as pd

from drawdownlab import __version__
from drawdownlab.core.config import SimulationConfig, WithdrawalMode, to_lakh
from drawdownlab.core.engine import DrawdownSimulator
from drawdownlab.core.errors import DrawdownError
from drawdownlab.core.random_source import NumpyRandomSource
from drawdownlab.kpi import depletion_year, max_drawdown

logger = logging.getLogger(__name__)


def _load_json(path: str) -> dict:
    """Load JSON from file path."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy scalars and arrays."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, np.generic):
            return obj.item()
        return super().default(obj)


def _save_json(path: str, data: dict) -> None:
    """Save data as JSON to file path."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, cls=NumpyEncoder)


def _load_config(args) -> SimulationConfig:
    cfg = _load_json(args.input) if getattr(args, "input", None) else {}
    if getattr(args, "mode", None):
        cfg["mode"] = args.mode
    return SimulationConfig.from_dict(cfg)


def _history_table(sim: DrawdownSimulator, lakh: bool) -> pd.DataFrame:
    scale = to_lakh if lakh else float
    records = []
    for row in sim.history:
        record = {"year": row.year}
        for name, pct, balance in zip(
            sim.config.bucket_names, row.return_pcts, row.ending_balances
        ):
            record[f"{name} %"] = round(pct, 2)
            record[name] = round(scale(balance), 2)
        record["expense"] = round(scale(row.expense), 2)
        record["total"] = round(scale(row.total), 2)
        records.append(record)
    return pd.DataFrame.from_records(records)


def cmd_example(args) -> int:
    """Print the default configuration as JSON."""
    json.dump(SimulationConfig().to_dict(), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


def cmd_validate(args) -> int:
    """Validate a configuration JSON."""
    try:
        cfg = _load_config(args)
        cfg.validate()
    except (OSError, ValueError, DrawdownError) as e:
        print(f"❌ Validation failed: {e}", file=sys.stderr)
        return 1

    print(
        f"✅ Validation passed: {len(cfg.buckets)} buckets, mode={cfg.mode.value}"
    )
    return 0


def cmd_run(args) -> int:
    """Run a drawdown simulation and print the yearly results."""
    try:
        cfg = _load_config(args)
        sim = DrawdownSimulator(cfg, random_source=NumpyRandomSource(args.seed))
        sim.start()
        sim.run_years(args.years)
    except (OSError, ValueError, DrawdownError) as e:
        print(f"Error running simulation: {e}", file=sys.stderr)
        return 1

    unit = " (lakh)" if args.lakh else ""
    table = _history_table(sim, args.lakh)
    if table.empty:
        print("No years committed")
    else:
        print(f"Balances / returns by year{unit}:")
        print(table.to_string(index=False))

    totals = sim.history.totals()
    print()
    print(f"Years committed: {sim.years_completed}")
    print(f"Max drawdown: {max_drawdown(totals):.2%}")
    depleted = depletion_year(totals)
    if depleted is not None:
        print(f"Portfolio depleted in year {depleted}")

    pending = sim.pending
    if pending is not None:
        shortfall = to_lakh(pending.shortfall) if args.lakh else pending.shortfall
        print(
            f"Pending: year {pending.year} needs a transfer into "
            f"'{cfg.bucket_names[0]}' of at least {shortfall:,.2f}{unit}"
        )

    if args.output:
        _save_json(args.output, sim.to_dict())
        logger.info("Results written to %s", args.output)
    return 0


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="drawdown", description="DrawdownLab - Retirement bucket drawdown simulator"
    )

    # Version argument
    parser.add_argument(
        "--version", action="version", version=f"DrawdownLab {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase log verbosity"
    )

    subparsers = parser.add_subparsers(
        dest="cmd", required=True, help="Available commands"
    )

    # Example command
    example_parser = subparsers.add_parser(
        "example", help="Print the default configuration JSON"
    )
    example_parser.set_defaults(func=cmd_example)

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Validate a configuration JSON"
    )
    validate_parser.add_argument(
        "-i", "--input", required=True, help="Input configuration JSON file"
    )
    validate_parser.set_defaults(func=cmd_validate)

    # Run command
    run_parser = subparsers.add_parser(
        "run", help="Run a drawdown simulation and optionally export JSON results"
    )
    run_parser.add_argument(
        "-i", "--input", help="Input configuration JSON file (default: built-in)"
    )
    run_parser.add_argument("-o", "--output", help="Output results JSON file")
    run_parser.add_argument(
        "--years", type=int, default=30, help="Number of years to simulate"
    )
    run_parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for a reproducible run"
    )
    run_parser.add_argument(
        "--mode",
        choices=[m.value for m in WithdrawalMode],
        help="Override the withdrawal mode from the configuration",
    )
    run_parser.add_argument(
        "--lakh", action="store_true", help="Show amounts in lakh (1 lakh = 100,000)"
    )
    run_parser.epilog = """
Modes:
  • auto: the expense is drawn from buckets in declared order
  • manual: only the first bucket pays; the run stops at the first year it
    cannot cover, reporting the shortfall to transfer in
    """
    run_parser.set_defaults(func=cmd_run)

    # Parse arguments and execute
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.WARNING - 10 * min(args.verbose, 2),
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
