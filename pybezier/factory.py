"""
Factory helpers for curves and trackers.

This module provides load_curve and create_tracker, which accept either a
curve file or an in-memory array so that callers (the CLI, controllers) do not
need to know which construction path applies.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import numpy as np

from pybezier.config import BezierConfig, get_config
from pybezier.curve import BezierCurve
from pybezier.io import curve_from_rows, read_curve
from pybezier.logging import LOG_DEBUG
from pybezier.tracker import BezierCurveTracker

CurveSource = Union[str, Path, np.ndarray, list, BezierCurve]


def load_curve(
    source: CurveSource,
    closed: bool = False,
    config: Optional[BezierConfig] = None,
) -> BezierCurve:
    """Return a curve for ``source``.

    Args:
        source: A BezierCurve (returned as is), a path to a curve file, or an
            array of rows with 3 (knots) or 9 (knot, in_cv, out_cv) columns.
        closed: Treat the path as a closed loop (ignored for BezierCurve).
        config: Configuration (default: global config).
    """
    if isinstance(source, BezierCurve):
        return source

    config = config or get_config().config
    if isinstance(source, (str, Path)):
        return read_curve(source, closed=closed, config=config.projection)

    return curve_from_rows(source, closed=closed, config=config.projection)


def create_tracker(
    source: CurveSource,
    closed: bool = False,
    location=None,
    config: Optional[BezierConfig] = None,
) -> BezierCurveTracker:
    """Create a tracker on ``source``, optionally reset at ``location``.

    Without a location the tracker is reset at the first knot.
    """
    config = config or get_config().config
    curve = load_curve(source, closed=closed, config=config)
    tracker = BezierCurveTracker(curve, config=config.tracker)

    if location is None:
        location = curve.get_point(0)
    tracker.reset(location)
    LOG_DEBUG(f"create_tracker: {tracker!r}")
    return tracker
