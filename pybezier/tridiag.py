"""
Direct solvers for tridiagonal and cyclic tridiagonal linear systems.

Both solvers work in O(n) per right-hand-side column: forward elimination
followed by back substitution. The right-hand side may be a vector of length
n or an (n, k) array, in which case the k columns are solved independently
(the spline fit solves the x, y and z coordinates in one call).

A vanishing pivot or a non-finite solution raises SingularSystemError instead
of letting NaNs reach the caller.
"""

from __future__ import annotations

from typing import Union

import numpy as np

from pybezier.exceptions import InvalidArgumentError, SingularSystemError
from pybezier.logging import LOG_DEBUG

ArrayLike = Union[np.ndarray, list, tuple]

# Pivots smaller than this (relative to the largest diagonal entry) are zero
PIVOT_TOL = 1e-13


def _as_band(values: ArrayLike, n: int, name: str) -> np.ndarray:
    band = np.asarray(values, dtype=float)
    if band.ndim == 0:
        band = np.full(n, float(band))
    if band.shape != (n,):
        raise InvalidArgumentError(name, f"must have shape ({n},)", band.shape)
    return band


def _check_solution(x: np.ndarray, n: int) -> np.ndarray:
    if not np.all(np.isfinite(x)):
        raise SingularSystemError(n, reason="non-finite solution")
    return x


def solve_tridiagonal(
    lower: ArrayLike,
    diag: ArrayLike,
    upper: ArrayLike,
    rhs: ArrayLike,
) -> np.ndarray:
    """Solve a tridiagonal system with the Thomas algorithm.

    Row i reads ``lower[i] * x[i-1] + diag[i] * x[i] + upper[i] * x[i+1] = rhs[i]``;
    ``lower[0]`` and ``upper[n-1]`` are ignored. Scalar bands are broadcast.

    Args:
        lower: Sub-diagonal, length n (or scalar).
        diag: Main diagonal, length n (or scalar).
        upper: Super-diagonal, length n (or scalar).
        rhs: Right-hand side, shape (n,) or (n, k).

    Returns:
        Solution with the same shape as ``rhs``.

    Raises:
        SingularSystemError: If a pivot vanishes or the result is not finite.
    """
    r = np.asarray(rhs, dtype=float)
    n = r.shape[0]
    if n == 0:
        raise InvalidArgumentError("rhs", "empty system")

    a = _as_band(lower, n, "lower")
    b = _as_band(diag, n, "diag")
    c = _as_band(upper, n, "upper")

    scale = float(np.max(np.abs(b)))
    if not np.isfinite(scale) or scale == 0.0:
        raise SingularSystemError(n, row=0, reason="zero or non-finite diagonal")
    tol = PIVOT_TOL * scale

    gam = np.zeros(n)
    x = np.empty_like(r)

    pivot = b[0]
    if abs(pivot) <= tol:
        raise SingularSystemError(n, row=0)
    x[0] = r[0] / pivot

    # Forward elimination
    for j in range(1, n):
        gam[j] = c[j - 1] / pivot
        pivot = b[j] - a[j] * gam[j]
        if abs(pivot) <= tol:
            raise SingularSystemError(n, row=j)
        x[j] = (r[j] - a[j] * x[j - 1]) / pivot

    # Back substitution
    for j in range(n - 2, -1, -1):
        x[j] -= gam[j + 1] * x[j + 1]

    return _check_solution(x, n)


def solve_cyclic_tridiagonal(
    lower: ArrayLike,
    diag: ArrayLike,
    upper: ArrayLike,
    rhs: ArrayLike,
) -> np.ndarray:
    """Solve a cyclic (periodic) tridiagonal system.

    Same layout as :func:`solve_tridiagonal`, except that ``lower[0]`` couples
    row 0 to x[n-1] and ``upper[n-1]`` couples row n-1 to x[0]. The corner
    entries are removed with a Sherman-Morrison rank-one correction, which
    costs two plain tridiagonal solves.

    Args:
        lower: Sub-diagonal including the corner ``lower[0]``.
        diag: Main diagonal.
        upper: Super-diagonal including the corner ``upper[n-1]``.
        rhs: Right-hand side, shape (n,) or (n, k).

    Returns:
        Solution with the same shape as ``rhs``.

    Raises:
        InvalidArgumentError: For systems with fewer than 3 rows.
        SingularSystemError: If the system (or its correction) is singular.
    """
    r = np.asarray(rhs, dtype=float)
    n = r.shape[0]
    if n < 3:
        raise InvalidArgumentError("rhs", "cyclic system needs at least 3 rows", n)

    a = _as_band(lower, n, "lower")
    b = _as_band(diag, n, "diag")
    c = _as_band(upper, n, "upper")

    beta = a[0]  # row 0, column n-1
    alpha = c[n - 1]  # row n-1, column 0

    gamma = -b[0]
    if gamma == 0.0:
        raise SingularSystemError(n, row=0)

    bb = b.copy()
    bb[0] = b[0] - gamma
    bb[n - 1] = b[n - 1] - alpha * beta / gamma

    x = solve_tridiagonal(a, bb, c, r)

    u = np.zeros(n)
    u[0] = gamma
    u[n - 1] = alpha
    z = solve_tridiagonal(a, bb, c, u)

    denom = 1.0 + z[0] + beta * z[n - 1] / gamma
    if abs(denom) <= PIVOT_TOL:
        raise SingularSystemError(n, reason="singular rank-one correction")

    fact = (x[0] + beta * x[n - 1] / gamma) / denom
    if r.ndim == 2:
        x = x - np.outer(z, fact)
    else:
        x = x - fact * z

    LOG_DEBUG(f"tridiag.solve_cyclic_tridiagonal: solved {n}x{n} system")
    return _check_solution(x, n)
