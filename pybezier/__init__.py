"""
pybezier - Piecewise cubic Bezier paths with time-coherent closest-point tracking.

This package provides:
- BezierCurve: a 3D piecewise cubic Bezier curve, built from explicit control
  polygons or as the C2 spline interpolant of a set of knots
- BezierCurveTracker: a closest-point tracker that uses time coherence to
  seed its Newton search, with TNB frame and curvature queries

Basic Usage:
    from pybezier import BezierCurve, BezierCurveTracker

    curve = BezierCurve([[0, 0, 0], [1, 0, 0], [2, 1, 0]])
    tracker = BezierCurveTracker(curve)
    tracker.reset(vehicle_position)
    point, code = tracker.calc_closest_point(vehicle_position)

For more control:
    from pybezier.config import BezierConfig, ConfigManager
    from pybezier.logging import LOG_INFO, TimeTracker
    from pybezier.exceptions import SingularSystemError
"""

from __future__ import annotations

__version__ = "0.1.0"

# =============================================================================
# Core API
# =============================================================================

from pybezier.curve import BezierCurve

from pybezier.tracker import (
    BezierCurveTracker,
    TNBFrame,
    AT_START,
    AT_END,
    INTERIOR,
)

from pybezier.tridiag import (
    solve_tridiagonal,
    solve_cyclic_tridiagonal,
)

from pybezier.io import (
    read_curve,
    write_curve,
    curve_from_rows,
)

from pybezier.config import (
    create_default_config,
    load_config,
    BezierConfig,
    ProjectionConfig,
    TrackerConfig,
    ConfigManager,
    get_config,
    init_config,
)

from pybezier.factory import (
    load_curve,
    create_tracker,
)

from pybezier.runner import (
    TrackingRun,
    TrackingStep,
    track_path,
)

# =============================================================================
# Logging
# =============================================================================

from pybezier.logging import (
    LOG_DEBUG,
    LOG_INFO,
    LOG_WARN,
    LOG_ERROR,
    TimeTracker,
    profile_scope,
    setup_logging,
    LogContext,
    timed,
)

# =============================================================================
# Exceptions
# =============================================================================

from pybezier.exceptions import (
    BezierError,
    InvalidArgumentError,
    DegenerateInputError,
    SingularSystemError,
    IndexOutOfRangeError,
    ConfigurationError,
    ConfigNotFoundError,
    ConfigValidationError,
    DataError,
    CurveFileError,
    CurveFileNotFoundError,
)

__all__ = [
    "__version__",
    # Core
    "BezierCurve",
    "BezierCurveTracker",
    "TNBFrame",
    "AT_START",
    "AT_END",
    "INTERIOR",
    "solve_tridiagonal",
    "solve_cyclic_tridiagonal",
    # I/O
    "read_curve",
    "write_curve",
    "curve_from_rows",
    # Config
    "create_default_config",
    "load_config",
    "BezierConfig",
    "ProjectionConfig",
    "TrackerConfig",
    "ConfigManager",
    "get_config",
    "init_config",
    # Factory
    "load_curve",
    "create_tracker",
    # Runner
    "TrackingRun",
    "TrackingStep",
    "track_path",
    # Logging
    "LOG_DEBUG",
    "LOG_INFO",
    "LOG_WARN",
    "LOG_ERROR",
    "TimeTracker",
    "profile_scope",
    "setup_logging",
    "LogContext",
    "timed",
    # Exceptions
    "BezierError",
    "InvalidArgumentError",
    "DegenerateInputError",
    "SingularSystemError",
    "IndexOutOfRangeError",
    "ConfigurationError",
    "ConfigNotFoundError",
    "ConfigValidationError",
    "DataError",
    "CurveFileError",
    "CurveFileNotFoundError",
]
