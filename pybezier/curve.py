"""
Piecewise cubic Bezier approximation of a 3D curve.

A curve is stored as three arrays of 3D locations: the knots ``points`` and,
for each knot, the control polygon vertex preceding it (``in_cv``) and the
one following it (``out_cv``). Segment i is the cubic Bezier with control
points ``points[i], out_cv[i], in_cv[i+1], points[i+1]`` (indices wrap for a
closed curve).

The curve can be built from explicit control polygons, or from knots only, in
which case the control vertices are derived so that the result is the C2
cubic spline interpolant of the knots (natural end conditions for an open
curve, periodic for a closed one).

Evaluation uses the Bernstein form of each segment. The closest point on one
segment is found with a Newton iteration that never raises on
non-convergence; cross-segment search is the job of BezierCurveTracker.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from pybezier.config import ProjectionConfig, get_config
from pybezier.exceptions import (
    DegenerateInputError,
    IndexOutOfRangeError,
    InvalidArgumentError,
)
from pybezier.logging import LOG_DEBUG, profile_scope
from pybezier.tridiag import solve_cyclic_tridiagonal, solve_tridiagonal

PointsLike = Union[np.ndarray, Sequence[Sequence[float]]]


def _as_points(values: PointsLike, name: str) -> np.ndarray:
    """Validate and copy an array of 3D locations."""
    try:
        arr = np.array(values, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(name, f"not convertible to a float array: {e}")
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise InvalidArgumentError(name, "must be a sequence of 3D points", arr.shape)
    if not np.all(np.isfinite(arr)):
        raise InvalidArgumentError(name, "contains non-finite values")
    return arr


def _as_location(loc) -> np.ndarray:
    arr = np.asarray(loc, dtype=float)
    if arr.shape != (3,):
        raise InvalidArgumentError("loc", "must be a 3D point", arr.shape)
    return arr


class BezierCurve:
    """Piecewise cubic Bezier curve in 3D.

    Example:
        curve = BezierCurve([[0, 0, 0], [1, 0, 0], [2, 1, 0]])
        p = curve.eval_segment(0, 0.5)
        q, t = curve.calc_closest_point([1, -1, 0], 0, 0.5)
    """

    def __init__(
        self,
        points: PointsLike,
        in_cv: Optional[PointsLike] = None,
        out_cv: Optional[PointsLike] = None,
        closed: bool = False,
        config: Optional[ProjectionConfig] = None,
    ):
        """Create a curve from knots, optionally with explicit control polygons.

        Args:
            points: Knots, shape (n, 3).
            in_cv: Incoming control vertices, shape (n, 3). Must be given
                together with ``out_cv``.
            out_cv: Outgoing control vertices, shape (n, 3).
            closed: Treat the path as a closed loop.
            config: Newton projection settings (default: global config).

        Raises:
            InvalidArgumentError: Malformed or mismatched arrays.
            DegenerateInputError: Too few knots for an interpolating curve.
            SingularSystemError: The spline fit could not be solved.
        """
        self._closed = bool(closed)
        self.config = config if config is not None else get_config().config.projection
        self.revision = 0

        if in_cv is None and out_cv is None:
            knots = _as_points(points, "points")
            if self._closed:
                knots = self._drop_closing_knot(knots)
            with profile_scope(f"spline fit ({len(knots)} knots)"):
                in_arr, out_arr = self._fit_control_points(knots, self._closed)
            self._set_arrays(knots, in_arr, out_arr)
        elif in_cv is None or out_cv is None:
            raise InvalidArgumentError(
                "in_cv" if in_cv is None else "out_cv",
                "in_cv and out_cv must be given together",
            )
        else:
            self._set_arrays(*self._check_explicit(points, in_cv, out_cv))

    # -------------------------------------------------------------------------
    # Construction helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_explicit(points, in_cv, out_cv) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        knots = _as_points(points, "points")
        in_arr = _as_points(in_cv, "in_cv")
        out_arr = _as_points(out_cv, "out_cv")
        if not len(knots) == len(in_arr) == len(out_arr):
            raise InvalidArgumentError(
                "points",
                "points, in_cv and out_cv must have the same length",
                (len(knots), len(in_arr), len(out_arr)),
            )
        if len(knots) < 2:
            raise InvalidArgumentError("points", "at least 2 knots are required", len(knots))
        return knots, in_arr, out_arr

    @staticmethod
    def _drop_closing_knot(knots: np.ndarray) -> np.ndarray:
        """Drop a trailing knot that repeats the first one."""
        if len(knots) > 1 and np.array_equal(knots[0], knots[-1]):
            LOG_DEBUG("BezierCurve: dropping closing knot equal to the first knot")
            return knots[:-1]
        return knots

    @staticmethod
    def _fit_control_points(knots: np.ndarray, closed: bool) -> Tuple[np.ndarray, np.ndarray]:
        """Derive in_cv/out_cv so that the curve is a C2 spline through the knots.

        With uniform parameterization, C1 continuity at knot i requires
        ``in_cv[i] = 2 P_i - out_cv[i]`` and C2 continuity gives
        ``A_{i-1} + 4 A_i + A_{i+1} = 4 P_i + 2 P_{i+1}`` for the out_cv values A.
        """
        n = len(knots)

        if closed:
            if n < 3:
                raise DegenerateInputError(n, required=3, closed=True)
            rhs = 4.0 * knots + 2.0 * np.roll(knots, -1, axis=0)
            out_cv = solve_cyclic_tridiagonal(1.0, 4.0, 1.0, rhs)
            in_cv = 2.0 * knots - out_cv
            return in_cv, out_cv

        if n < 2:
            raise DegenerateInputError(n, required=2)

        in_cv = np.empty_like(knots)
        out_cv = np.empty_like(knots)

        if n == 2:
            # Straight segment
            in_cv[0] = knots[0]
            out_cv[0] = (2.0 * knots[0] + knots[1]) / 3.0
            in_cv[1] = (knots[0] + 2.0 * knots[1]) / 3.0
            out_cv[1] = knots[1]
            return in_cv, out_cv

        # One unknown per segment; natural end conditions in the first and last rows
        m = n - 1
        diag = np.full(m, 4.0)
        diag[0] = 2.0
        diag[m - 1] = 3.5

        rhs = 4.0 * knots[:m] + 2.0 * knots[1:]
        rhs[0] = knots[0] + 2.0 * knots[1]
        rhs[m - 1] = (8.0 * knots[m - 1] + knots[m]) / 2.0

        a = solve_tridiagonal(1.0, diag, 1.0, rhs)

        out_cv[:m] = a
        out_cv[m] = knots[m]
        in_cv[0] = knots[0]
        in_cv[1:m] = 2.0 * knots[1:m] - a[1:m]
        in_cv[m] = (a[m - 1] + knots[m]) / 2.0
        return in_cv, out_cv

    def _set_arrays(self, knots: np.ndarray, in_cv: np.ndarray, out_cv: np.ndarray) -> None:
        self._points = knots
        self._in_cv = in_cv
        self._out_cv = out_cv
        for arr in (self._points, self._in_cv, self._out_cv):
            arr.flags.writeable = False

    def set_points(self, points: PointsLike, in_cv: PointsLike, out_cv: PointsLike) -> None:
        """Replace knots and control polygons in one step.

        All three arrays are validated before any of them is stored. The
        ``revision`` counter is bumped so that trackers can notice the change.
        """
        knots, in_arr, out_arr = self._check_explicit(points, in_cv, out_cv)
        self._set_arrays(knots, in_arr, out_arr)
        self.revision += 1
        LOG_DEBUG(f"BezierCurve.set_points: {len(knots)} knots, revision {self.revision}")

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def num_points(self) -> int:
        """Number of knots."""
        return len(self._points)

    @property
    def num_segments(self) -> int:
        """Number of Bezier segments (intervals)."""
        n = len(self._points)
        return n if self._closed else n - 1

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def points(self) -> np.ndarray:
        return self._points.copy()

    @property
    def in_cv(self) -> np.ndarray:
        return self._in_cv.copy()

    @property
    def out_cv(self) -> np.ndarray:
        return self._out_cv.copy()

    def get_point(self, i: int) -> np.ndarray:
        """Return knot ``i``."""
        return self._points[i].copy()

    def _check_segment(self, i: int) -> int:
        num_segments = self.num_segments
        if not 0 <= i < num_segments:
            raise IndexOutOfRangeError(i, num_segments)
        return int(i)

    def segment_control_points(self, i: int) -> np.ndarray:
        """Return the 4x3 control polygon of segment ``i``."""
        i = self._check_segment(i)
        j = (i + 1) % self.num_points
        return np.array([self._points[i], self._out_cv[i], self._in_cv[j], self._points[j]])

    def __repr__(self) -> str:
        return (
            f"BezierCurve(num_points={self.num_points}, "
            f"closed={self._closed}, revision={self.revision})"
        )

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def eval(self, t: float) -> np.ndarray:
        """Evaluate the curve at the global parameter ``t``.

        ``t`` is clamped to [0, 1], which is split uniformly among the
        segments. t=0 returns the first knot; t=1 returns the last knot of an
        open curve, or the first knot again (one full loop) of a closed one.
        """
        par = min(max(float(t), 0.0), 1.0)
        num_segments = self.num_segments
        epar = par * num_segments
        i = min(int(math.floor(epar)), num_segments - 1)
        return self.eval_segment(i, epar - i)

    def eval_segment(self, i: int, t: float) -> np.ndarray:
        """Evaluate segment ``i`` at local parameter ``t``.

        t=0 returns ``points[i]`` and t=1 the next knot. Values outside
        [0, 1] extrapolate the cubic.
        """
        p0, p1, p2, p3 = self.segment_control_points(i)
        omt = 1.0 - t
        t2 = t * t
        omt2 = omt * omt
        return omt * omt2 * p0 + 3.0 * t * omt2 * p1 + 3.0 * t2 * omt * p2 + t * t2 * p3

    def eval_d(self, i: int, t: float) -> np.ndarray:
        """First derivative (tangent vector) of segment ``i`` at ``t``."""
        p0, p1, p2, p3 = self.segment_control_points(i)
        omt = 1.0 - t
        return 3.0 * (omt * omt * (p1 - p0) + 2.0 * t * omt * (p2 - p1) + t * t * (p3 - p2))

    def eval_dd(self, i: int, t: float) -> np.ndarray:
        """Second derivative of segment ``i`` at ``t``."""
        p0, p1, p2, p3 = self.segment_control_points(i)
        return 6.0 * ((1.0 - t) * (p2 - 2.0 * p1 + p0) + t * (p3 - 2.0 * p2 + p1))

    def sample(self, num_per_segment: int = 20) -> np.ndarray:
        """Sample the whole curve, ``num_per_segment`` intervals per segment."""
        ts = np.linspace(0.0, 1.0, num_per_segment + 1)
        samples = [self.eval_segment(0, 0.0)]
        for i in range(self.num_segments):
            samples.extend(self.eval_segment(i, t) for t in ts[1:])
        return np.array(samples)

    # -------------------------------------------------------------------------
    # Closest point
    # -------------------------------------------------------------------------

    def calc_closest_point(self, loc, i: int, t: float) -> Tuple[np.ndarray, float]:
        """Closest point on segment ``i`` to ``loc``, by Newton iteration.

        Finds a root of g(t) = (C(t) - loc) . C'(t). The iteration stops as
        soon as the squared distance drops below ``sqr_dist_tol``, the residual
        is orthogonal to the tangent within ``cos_angle_tol``, or the parameter
        update is below ``param_tol``. After ``max_num_iters`` iterations the
        last iterate is returned; non-convergence is not an error.

        The parameter is not clamped: a result outside [0, 1] means the
        minimum lies beyond the segment ends.

        Args:
            loc: Query location (3D).
            i: Segment index.
            t: Initial guess for the local parameter.

        Returns:
            Tuple of (point on the curve, local parameter of that point).
        """
        i = self._check_segment(i)
        loc = _as_location(loc)
        cfg = self.config

        t = float(t)
        q = self.eval_segment(i, t)
        for _ in range(cfg.max_num_iters):
            vec = q - loc
            d2 = float(np.dot(vec, vec))
            if d2 < cfg.sqr_dist_tol:
                return q, t

            qd = self.eval_d(i, t)
            dot = float(np.dot(vec, qd))
            qd_len2 = float(np.dot(qd, qd))
            if qd_len2 > 0.0 and abs(dot) / math.sqrt(qd_len2 * d2) < cfg.cos_angle_tol:
                return q, t

            qdd = self.eval_dd(i, t)
            slope = qd_len2 + float(np.dot(vec, qdd))
            if slope == 0.0:
                LOG_DEBUG(f"BezierCurve.calc_closest_point: flat Newton step on segment {i}")
                return q, t

            dt = dot / slope
            t -= dt
            q = self.eval_segment(i, t)
            if abs(dt) < cfg.param_tol:
                return q, t

        LOG_DEBUG(
            f"BezierCurve.calc_closest_point: no convergence after "
            f"{cfg.max_num_iters} iterations on segment {i} (t={t:.6f})"
        )
        return q, t

    # -------------------------------------------------------------------------
    # File I/O
    # -------------------------------------------------------------------------

    def write(self, path: Union[str, Path], precision: Optional[int] = None) -> None:
        """Write knots and control polygons to ``path`` (9-column format)."""
        from pybezier.io import write_curve

        write_curve(self, path, precision=precision)

    @classmethod
    def read(
        cls,
        path: Union[str, Path],
        closed: bool = False,
        config: Optional[ProjectionConfig] = None,
    ) -> "BezierCurve":
        """Create a curve from a 3-column (knots) or 9-column file."""
        from pybezier.io import read_curve

        return read_curve(path, closed=closed, config=config)
