"""
Tracking runner.

This module runs a tracker over a sequence of locations, one closest-point
query per location, the way a path-following controller calls it once per
simulation step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np

from pybezier.curve import BezierCurve
from pybezier.logging import LOG_INFO, LogContext, TimeTracker, log_with_context
from pybezier.tracker import AT_END, AT_START, BezierCurveTracker


@dataclass
class TrackingStep:
    """Result of one tracker query."""

    index: int
    location: np.ndarray
    point: np.ndarray
    code: int
    interval: int
    param: float
    distance: float
    curvature: Optional[float] = None
    tangent: Optional[np.ndarray] = None
    normal: Optional[np.ndarray] = None

    def to_dict(self) -> Dict:
        data = {
            "index": self.index,
            "location": self.location.tolist(),
            "point": self.point.tolist(),
            "code": self.code,
            "interval": self.interval,
            "param": self.param,
            "distance": self.distance,
        }
        if self.curvature is not None:
            data["curvature"] = self.curvature
            data["tangent"] = self.tangent.tolist()
            data["normal"] = self.normal.tolist()
        return data


@dataclass
class TrackingRun:
    """All steps of a tracking run plus timing statistics."""

    steps: List[TrackingStep] = field(default_factory=list)
    mean_ms: float = 0.0
    max_ms: float = 0.0

    @property
    def points(self) -> np.ndarray:
        return np.array([step.point for step in self.steps]).reshape(-1, 3)

    @property
    def reached_end(self) -> bool:
        return bool(self.steps) and self.steps[-1].code == AT_END

    def to_dict(self) -> Dict:
        return {
            "num_steps": len(self.steps),
            "reached_end": self.reached_end,
            "mean_ms": self.mean_ms,
            "max_ms": self.max_ms,
            "steps": [step.to_dict() for step in self.steps],
        }


def track_path(
    curve: BezierCurve,
    locations: Iterable,
    with_frame: bool = False,
    tracker: Optional[BezierCurveTracker] = None,
    name: str = "tracker",
) -> TrackingRun:
    """Run a tracker over ``locations``.

    Args:
        curve: Path to track.
        locations: Sequence of 3D query locations, spatially coherent.
        with_frame: Also compute the TNB frame and curvature at every step.
        tracker: Tracker to use (default: a new one reset at the first location).
        name: Label used in log messages.

    Returns:
        TrackingRun with one TrackingStep per location.
    """
    locs = np.asarray(list(locations), dtype=float).reshape(-1, 3)
    run = TrackingRun()
    if len(locs) == 0:
        return run

    if tracker is None:
        tracker = BezierCurveTracker(curve)
        tracker.reset(locs[0])

    timer = TimeTracker(name)
    with LogContext(tracker=name):
        for k, loc in enumerate(locs):
            curvature = tangent = normal = None
            with timer.measure():
                if with_frame:
                    frame, curvature, code = tracker.calc_closest_frame(loc)
                    point, tangent, normal = frame.origin, frame.tangent, frame.normal
                else:
                    point, code = tracker.calc_closest_point(loc)

            if code in (AT_START, AT_END):
                log_with_context(logging.DEBUG, f"step {k}: boundary code {code}")

            run.steps.append(TrackingStep(
                index=k,
                location=loc,
                point=np.asarray(point, dtype=float),
                code=code,
                interval=tracker.current_interval,
                param=tracker.current_param,
                distance=float(np.linalg.norm(point - loc)),
                curvature=curvature,
                tangent=tangent,
                normal=normal,
            ))

    run.mean_ms, run.max_ms, _ = timer.get_stats()
    LOG_INFO(
        f"Tracked {len(run.steps)} locations: mean {run.mean_ms:.3f} ms, "
        f"max {run.max_ms:.3f} ms"
    )
    timer.print_stats()
    return run
