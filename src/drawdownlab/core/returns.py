"""
Correlated annual return sampling.

Independent standard normals are drawn with the Box-Muller transform and
correlated through the Cholesky factor of the bucket correlation matrix.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from .errors import DecompositionError
from .random_source import NumpyRandomSource, RandomSource

# Float noise allowed under the square root and in zero-pivot residuals
_TOLERANCE = 1e-12


def _as_square_matrix(matrix, n: int | None = None) -> np.ndarray:
    try:
        a = np.asarray(matrix, dtype=float)
    except (TypeError, ValueError) as exc:
        raise DecompositionError(f"Correlation matrix is not numeric: {exc}") from exc

    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise DecompositionError(
            f"Correlation matrix must be square; got shape {a.shape}"
        )
    if n is not None and a.shape[0] != n:
        raise DecompositionError(
            f"Correlation matrix is {a.shape[0]}x{a.shape[0]} but there are {n} buckets"
        )
    if not np.all(np.isfinite(a)):
        raise DecompositionError("Correlation matrix contains non-finite values")
    if not np.allclose(a, a.T, atol=_TOLERANCE):
        raise DecompositionError("Correlation matrix must be symmetric")
    return a


def cholesky(matrix, n: int | None = None) -> np.ndarray:
    """
    Factor a symmetric positive semi-definite matrix.

    Returns the lower-triangular ``L`` with ``L @ L.T`` equal to ``matrix``.
    Unlike ``numpy.linalg.cholesky`` this accepts singular (semi-definite)
    matrices such as perfectly correlated buckets: a zero pivot is kept when
    the remaining column residual is zero as well.

    Args:
        matrix: Square array-like correlation matrix
        n: Expected dimension (bucket count), checked when given

    Returns:
        Lower-triangular numpy array

    Raises:
        DecompositionError: If the matrix is malformed or not positive
            semi-definite
    """
    a = _as_square_matrix(matrix, n)
    size = a.shape[0]
    lower = np.zeros((size, size))

    for i in range(size):
        for j in range(i + 1):
            s = float(np.dot(lower[i, :j], lower[j, :j]))
            if i == j:
                d = a[i, i] - s
                if d < -_TOLERANCE:
                    raise DecompositionError(
                        f"Correlation matrix is not positive semi-definite "
                        f"(pivot {i} = {d:.6g})"
                    )
                lower[i, j] = math.sqrt(max(d, 0.0))
            elif lower[j, j] == 0.0:
                residual = a[i, j] - s
                if abs(residual) > _TOLERANCE:
                    raise DecompositionError(
                        f"Correlation matrix is not positive semi-definite "
                        f"(zero pivot {j} with residual {residual:.6g} in row {i})"
                    )
                lower[i, j] = 0.0
            else:
                lower[i, j] = (a[i, j] - s) / lower[j, j]

    return lower


def standard_normal(source: RandomSource) -> float:
    """
    Draw one standard normal variate with the Box-Muller transform.

    Consumes two uniforms (more if a sample is exactly zero, which is redrawn
    to keep the logarithm finite).
    """
    u = 0.0
    while u == 0.0:
        u = source.uniform()
    v = 0.0
    while v == 0.0:
        v = source.uniform()
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)


class CorrelatedReturnGenerator:
    """
    Sampler of one correlated return percentage per bucket.

    **Example:**
        ```python
        from drawdownlab.core.random_source import NumpyRandomSource
        from drawdownlab.core.returns import CorrelatedReturnGenerator

        gen = CorrelatedReturnGenerator(NumpyRandomSource(seed=7))
        pcts = gen.sample([4, 12], [1, 15], [[1.0, 0.05], [0.05, 1.0]])
        ```

    Args:
        source: Uniform random source; defaults to an unseeded
            ``NumpyRandomSource``
    """

    def __init__(self, source: RandomSource | None = None):
        self.source = source if source is not None else NumpyRandomSource()

    def normals(self, n: int) -> np.ndarray:
        """Draw ``n`` independent standard normals."""
        return np.array([standard_normal(self.source) for _ in range(n)])

    def sample(
        self,
        avg_returns: Sequence[float],
        volatilities: Sequence[float],
        correlation_matrix,
    ) -> np.ndarray:
        """
        Sample return percentages for one year.

        Args:
            avg_returns: Mean annual return per bucket, in percent
            volatilities: Annual volatility per bucket, in percent
            correlation_matrix: Bucket correlation matrix (index-aligned)

        Returns:
            Array of return percentages, ``avg_i + (L @ z)_i * vol_i``

        Raises:
            DecompositionError: If the matrix cannot be factored for this
                bucket count
        """
        avg = np.asarray(avg_returns, dtype=float)
        vol = np.asarray(volatilities, dtype=float)
        if avg.shape != vol.shape:
            raise ValueError(
                f"avg_returns and volatilities differ in length: {avg.shape} vs {vol.shape}"
            )

        lower = cholesky(correlation_matrix, n=len(avg))
        z = self.normals(len(avg))
        correlated = lower @ z
        return avg + correlated * vol


__all__ = ["cholesky", "standard_normal", "CorrelatedReturnGenerator"]
