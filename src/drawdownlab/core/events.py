"""
Event records for tracking simulation occurrences.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Optional


class Event(NamedTuple):
    """
    Year-stamped event record of a drawdown run.

    Attributes:
        year: Simulation year the event refers to (0 before the first commit)
        kind: Event type ('start', 'commit', 'pending', 'transfer', 'resolved',
            'depleted', 'reset')
        message: Human-readable description
        meta: Optional dictionary with additional event metadata
    """

    year: int
    kind: str
    message: str
    meta: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "kind": self.kind,
            "message": self.message,
            "meta": self.meta or {},
        }
