"""
Text file format for Bezier curves.

The first line holds the number of points and the number of columns, which is
either 3 or 9. With 3 columns every following line is a knot and the curve is
built as the cubic spline interpolant of the knots. With 9 columns every line
holds a knot, its incoming control vertex and its outgoing control vertex, and
the curve is built from those control polygons as given.

Example (9 columns)::

    2 9
    0 0 0   0 0 0   1 0 0
    3 0 0   2 0 0   3 0 0
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import numpy as np

from pybezier.config import ProjectionConfig, get_config
from pybezier.curve import BezierCurve
from pybezier.exceptions import CurveFileError, CurveFileNotFoundError, InvalidArgumentError
from pybezier.logging import LOG_INFO, timed

KNOT_COLUMNS = 3
FULL_COLUMNS = 9


def curve_from_rows(
    rows: np.ndarray,
    closed: bool = False,
    config: Optional[ProjectionConfig] = None,
) -> BezierCurve:
    """Build a curve from parsed rows, choosing the constructor by column count.

    Args:
        rows: Array of shape (n, 3) (knots) or (n, 9) (knot, in_cv, out_cv).
        closed: Treat the path as a closed loop.
        config: Newton projection settings for the new curve.

    Raises:
        InvalidArgumentError: If the rows are not numeric or have neither 3
            nor 9 columns.
    """
    try:
        rows = np.asarray(rows, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError("rows", f"not convertible to a float array: {e}")
    if rows.ndim != 2 or rows.shape[1] not in (KNOT_COLUMNS, FULL_COLUMNS):
        raise InvalidArgumentError("rows", "expected 3 or 9 columns", rows.shape)

    if rows.shape[1] == KNOT_COLUMNS:
        return BezierCurve(rows, closed=closed, config=config)
    return BezierCurve(
        rows[:, 0:3], in_cv=rows[:, 3:6], out_cv=rows[:, 6:9], closed=closed, config=config
    )


def _parse_header(line: str, path: str) -> tuple[int, int]:
    parts = line.split()
    if len(parts) != 2:
        raise CurveFileError(path, "header must contain the point and column counts", line=1)
    try:
        num_points, num_cols = int(parts[0]), int(parts[1])
    except ValueError:
        raise CurveFileError(path, f"non-integer header '{line.strip()}'", line=1)
    if num_cols not in (KNOT_COLUMNS, FULL_COLUMNS):
        raise CurveFileError(path, f"column count must be 3 or 9, got {num_cols}", line=1)
    if num_points < 0:
        raise CurveFileError(path, f"negative point count {num_points}", line=1)
    return num_points, num_cols


@timed
def read_curve(
    path: Union[str, Path],
    closed: bool = False,
    config: Optional[ProjectionConfig] = None,
) -> BezierCurve:
    """Create a BezierCurve from the data in ``path``.

    Args:
        path: Curve file.
        closed: Treat the path as a closed loop.
        config: Newton projection settings for the new curve.

    Returns:
        Interpolating curve for a 3-column file, explicit curve for 9 columns.

    Raises:
        CurveFileNotFoundError: If the file does not exist.
        CurveFileError: If the file is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise CurveFileNotFoundError(str(path))

    with open(path, "r") as f:
        header = f.readline()
        num_points, num_cols = _parse_header(header, str(path))
        try:
            rows = np.loadtxt(f, dtype=float, ndmin=2)
        except ValueError as e:
            raise CurveFileError(str(path), f"unreadable data rows: {e}")

    if rows.size == 0:
        rows = rows.reshape(0, num_cols)
    if rows.shape[1] != num_cols:
        raise CurveFileError(
            str(path), f"expected {num_cols} columns per row, got {rows.shape[1]}"
        )
    if rows.shape[0] != num_points:
        raise CurveFileError(
            str(path), f"header announces {num_points} points, found {rows.shape[0]}"
        )

    curve = curve_from_rows(rows, closed=closed, config=config)
    LOG_INFO(f"Read curve with {curve.num_points} points ({num_cols} columns) from {path}")
    return curve


def write_curve(
    curve: BezierCurve,
    path: Union[str, Path],
    precision: Optional[int] = None,
) -> None:
    """Write knots and control polygons of ``curve`` to ``path`` (9 columns)."""
    if precision is None:
        precision = get_config().config.io.precision

    rows = np.hstack((curve.points, curve.in_cv, curve.out_cv))
    np.savetxt(
        path,
        rows,
        fmt=f"%.{precision}g",
        header=f"{curve.num_points} {FULL_COLUMNS}",
        comments="",
    )
    LOG_INFO(f"Wrote curve with {curve.num_points} points to {path}")
