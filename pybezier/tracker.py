"""
Time-coherent closest-point tracker on a BezierCurve.

The tracker remembers the segment and local parameter of its last result and
uses them to seed the Newton projection of the next query. When the Newton
result falls outside its segment, the search walks to the neighbouring
segment instead of rescanning the whole curve. This assumes that successive
query locations are close to each other, e.g. a vehicle moving along the path
at one query per simulation step.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from pybezier.config import TrackerConfig, get_config
from pybezier.curve import BezierCurve, _as_location
from pybezier.logging import LOG_DEBUG, LOG_WARN

# Position codes returned by the closest-point queries
AT_START = -1
INTERIOR = 0
AT_END = 1

_UP = np.array([0.0, 0.0, 1.0])
_UP_ALT = np.array([0.0, 1.0, 0.0])


@dataclass
class TNBFrame:
    """Tangent-normal-binormal frame attached to a point on the curve."""

    origin: np.ndarray
    tangent: np.ndarray
    normal: np.ndarray
    binormal: np.ndarray

    @property
    def rotation(self) -> np.ndarray:
        """Rotation matrix with columns (tangent, normal, binormal)."""
        return np.column_stack((self.tangent, self.normal, self.binormal))


class BezierCurveTracker:
    """Closest-point tracker bound to one curve.

    Example:
        tracker = BezierCurveTracker(curve)
        tracker.reset(vehicle_position)
        for position in positions:
            point, code = tracker.calc_closest_point(position)
    """

    def __init__(self, curve: BezierCurve, config: Optional[TrackerConfig] = None):
        self.curve = curve
        self.config = config if config is not None else get_config().config.tracker
        self.current_interval = 0
        self.current_param = 0.0
        self._revision = curve.revision
        self._num_segments = curve.num_segments

    def __repr__(self) -> str:
        return (
            f"BezierCurveTracker(interval={self.current_interval}, "
            f"param={self.current_param:.4f}, curve={self.curve!r})"
        )

    def reset(self, loc) -> None:
        """Reinitialize the tracker at ``loc``.

        Picks the segment that starts at the knot nearest ``loc`` (the last
        segment for the final knot of an open curve) and sets the curve
        parameter to 0.5.
        """
        loc = _as_location(loc)
        points = self.curve.points
        closest_index = int(np.argmin(np.sum((points - loc) ** 2, axis=1)))

        self.current_interval = min(closest_index, self.curve.num_segments - 1)
        self.current_param = 0.5
        self._revision = self.curve.revision
        self._num_segments = self.curve.num_segments
        LOG_DEBUG(
            f"BezierCurveTracker.reset: nearest knot {closest_index}, "
            f"interval {self.current_interval}"
        )

    def _check_revision(self, loc: np.ndarray) -> None:
        """Re-seed from ``loc`` if the curve changed its segment layout."""
        if self._revision == self.curve.revision:
            return
        if self._num_segments != self.curve.num_segments:
            LOG_WARN(
                f"BezierCurveTracker: curve changed from {self._num_segments} to "
                f"{self.curve.num_segments} segments, resetting"
            )
            self.reset(loc)
        else:
            self._revision = self.curve.revision

    def calc_closest_point(self, loc) -> Tuple[np.ndarray, int]:
        """Closest point on the curve to ``loc``.

        Should be called with a continuous sequence of locations, since the
        previous result seeds the Newton iteration.

        Returns:
            Tuple of (point, code) where code is -1 if the point coincides
            with the first knot of an open curve, +1 if it coincides with the
            last knot, and 0 otherwise. Closed curves always report 0.
        """
        loc = _as_location(loc)
        self._check_revision(loc)

        curve = self.curve
        num_segments = curve.num_segments
        closed = curve.is_closed
        max_hops = self.config.max_segment_hops or num_segments

        last_at_min = False
        last_at_max = False
        hops = 0

        while True:
            point, t = curve.calc_closest_point(loc, self.current_interval, self.current_param)
            self.current_param = t

            if 0.0 <= t <= 1.0:
                return self._classify(point)

            if t < 0.0:
                if self.current_interval == 0 and not closed:
                    return self._snap_to_start()
                if last_at_max:
                    # Bounced between two segments; settle on their shared knot
                    self.current_param = 0.0
                    return self._classify(curve.get_point(self.current_interval))
                if hops == max_hops:
                    break
                self.current_interval = (self.current_interval - 1) % num_segments
                self.current_param = 1.0
                last_at_min = True
            else:
                if self.current_interval == num_segments - 1 and not closed:
                    return self._snap_to_end()
                if last_at_min:
                    self.current_param = 1.0
                    return self._classify(curve.eval_segment(self.current_interval, 1.0))
                if hops == max_hops:
                    break
                self.current_interval = (self.current_interval + 1) % num_segments
                self.current_param = 0.0
                last_at_max = True
            hops += 1

        # Walk budget exhausted; settle on the nearest end of the current segment
        LOG_DEBUG(f"BezierCurveTracker: segment walk stopped after {hops} hops")
        self.current_param = min(max(self.current_param, 0.0), 1.0)
        return self._classify(curve.eval_segment(self.current_interval, self.current_param))

    def _snap_to_start(self) -> Tuple[np.ndarray, int]:
        self.current_interval = 0
        self.current_param = 0.0
        return self.curve.get_point(0), AT_START

    def _snap_to_end(self) -> Tuple[np.ndarray, int]:
        self.current_interval = self.curve.num_segments - 1
        self.current_param = 1.0
        return self.curve.get_point(self.curve.num_points - 1), AT_END

    def _classify(self, point: np.ndarray) -> Tuple[np.ndarray, int]:
        """Snap results that coincide with an open curve's end knots."""
        curve = self.curve
        if curve.is_closed:
            return point, INTERIOR
        tol = curve.config.sqr_dist_tol
        if self.current_interval == 0:
            if self.current_param <= 0.0 or np.sum((point - curve.get_point(0)) ** 2) < tol:
                return self._snap_to_start()
        if self.current_interval == curve.num_segments - 1:
            last = curve.get_point(curve.num_points - 1)
            if self.current_param >= 1.0 or np.sum((point - last) ** 2) < tol:
                return self._snap_to_end()
        return point, INTERIOR

    def calc_closest_frame(self, loc) -> Tuple[TNBFrame, float, int]:
        """Closest point with its TNB frame and curvature.

        The frame has its tangent along C'(t) and, where the curvature is
        non-zero, its normal towards the center of curvature. At points of
        zero curvature the normal and binormal are not defined; the frame is
        then completed from the tangent alone, with the normal along
        ``up x tangent`` (up is +z, or +y for a vertical tangent).

        Returns:
            Tuple of (frame, curvature, code); code as in
            :meth:`calc_closest_point`. Curvature is non-negative.
        """
        point, code = self.calc_closest_point(loc)

        rp = self.curve.eval_d(self.current_interval, self.current_param)
        rpp = self.curve.eval_dd(self.current_interval, self.current_param)
        rp_rpp = np.cross(rp, rpp)
        rp_norm = float(np.linalg.norm(rp))
        rp_rpp_norm = float(np.linalg.norm(rp_rpp))

        if rp_norm == 0.0:
            LOG_WARN(
                f"BezierCurveTracker: zero tangent at interval {self.current_interval}, "
                f"param {self.current_param:.6f}"
            )
            return TNBFrame(point, np.array([1.0, 0.0, 0.0]), _UP_ALT.copy(), _UP.copy()), 0.0, code

        tangent = rp / rp_norm
        if rp_rpp_norm > self.config.zero_curvature_tol:
            binormal = rp_rpp / rp_rpp_norm
            normal = np.cross(binormal, tangent)
        else:
            up = _UP if abs(np.dot(tangent, _UP)) < 0.9 else _UP_ALT
            normal = np.cross(up, tangent)
            normal /= np.linalg.norm(normal)
            binormal = np.cross(tangent, normal)

        curvature = rp_rpp_norm / rp_norm ** 3
        return TNBFrame(point, tangent, normal, binormal), curvature, code
