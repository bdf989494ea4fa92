"""
Random sources for return sampling.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class RandomSource(Protocol):
    """
    Contract for uniform random sources used by the return generator.

    Implementations return floats in ``[0, 1)``. The generator redraws exact
    zeros itself, so sources do not need to exclude them.
    """

    def uniform(self) -> float:
        """Return the next uniform sample."""
        ...


class NumpyRandomSource:
    """
    Uniform source backed by ``numpy.random.Generator``.

    Without a seed the generator is fed from system entropy and runs are not
    reproducible. Pass ``seed`` for repeatable simulations.
    """

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def uniform(self) -> float:
        return float(self._rng.random())

    def __repr__(self) -> str:
        return f"NumpyRandomSource(seed={self.seed})"


class FixedRandomSource:
    """
    Deterministic source replaying a fixed sequence of uniforms.

    Useful for tests that need to verify exact Box-Muller and Cholesky output.

    Args:
        values: Uniform samples to hand out, in order
        cycle: Restart from the first value once the sequence is exhausted
    """

    def __init__(self, values: Iterable[float], cycle: bool = False):
        self._values = [float(v) for v in values]
        if not self._values:
            raise ValueError("FixedRandomSource needs at least one value")
        self._cycle = cycle
        self._pos = 0

    @property
    def consumed(self) -> int:
        """Number of samples handed out so far."""
        return self._pos

    def uniform(self) -> float:
        if self._pos >= len(self._values) and not self._cycle:
            raise ValueError(
                f"FixedRandomSource exhausted after {len(self._values)} samples"
            )
        value = self._values[self._pos % len(self._values)]
        self._pos += 1
        return value


__all__ = ["RandomSource", "NumpyRandomSource", "FixedRandomSource"]
