"""
Pytest configuration and fixtures for pybezier tests.

This module provides shared fixtures for testing:
- Configuration fixtures
- Knot sets and curves
- Trackers
- Temporary files
"""

from __future__ import annotations

from pathlib import Path
from typing import List

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def bezier_config():
    """Create typed default configuration."""
    from pybezier.config import BezierConfig

    return BezierConfig()


@pytest.fixture
def projection_config():
    """Default Newton projection settings."""
    from pybezier.config import ProjectionConfig

    return ProjectionConfig()


@pytest.fixture
def tracker_config():
    """Default tracker settings."""
    from pybezier.config import TrackerConfig

    return TrackerConfig()


# =============================================================================
# Knot Fixtures
# =============================================================================


@pytest.fixture
def corner_knots() -> List[List[float]]:
    """Three knots turning left."""
    return [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 1.0, 0.0]]


@pytest.fixture
def wavy_knots() -> np.ndarray:
    """Seven knots of a planar s-shaped road."""
    x = np.arange(7, dtype=float) * 2.0
    y = np.array([0.0, 0.8, 1.5, 1.0, -0.5, -1.2, -0.4])
    return np.column_stack((x, y, np.zeros_like(x)))


@pytest.fixture
def helix_knots() -> np.ndarray:
    """Knots on a rising helix."""
    s = np.linspace(0.0, 3.0 * np.pi, 10)
    return np.column_stack((3.0 * np.cos(s), 3.0 * np.sin(s), 0.5 * s))


@pytest.fixture
def loop_knots() -> np.ndarray:
    """Eight knots on a closed ellipse."""
    s = np.linspace(0.0, 2.0 * np.pi, 8, endpoint=False)
    return np.column_stack((10.0 * np.cos(s), 6.0 * np.sin(s), np.zeros_like(s)))


# =============================================================================
# Curve Fixtures
# =============================================================================


@pytest.fixture
def corner_curve(corner_knots, projection_config):
    """Interpolating curve through the corner knots."""
    from pybezier import BezierCurve

    return BezierCurve(corner_knots, config=projection_config)


@pytest.fixture
def wavy_curve(wavy_knots, projection_config):
    """Interpolating open curve through the wavy knots."""
    from pybezier import BezierCurve

    return BezierCurve(wavy_knots, config=projection_config)


@pytest.fixture
def loop_curve(loop_knots, projection_config):
    """Closed interpolating curve."""
    from pybezier import BezierCurve

    return BezierCurve(loop_knots, closed=True, config=projection_config)


@pytest.fixture
def straight_curve(projection_config):
    """Explicit straight curve along x with control points at thirds."""
    from pybezier import BezierCurve

    points = [[0.0, 0.0, 0.0], [3.0, 0.0, 0.0], [6.0, 0.0, 0.0]]
    in_cv = [[-1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [5.0, 0.0, 0.0]]
    out_cv = [[1.0, 0.0, 0.0], [4.0, 0.0, 0.0], [7.0, 0.0, 0.0]]
    return BezierCurve(points, in_cv, out_cv, config=projection_config)


# =============================================================================
# Tracker Fixtures
# =============================================================================


@pytest.fixture
def wavy_tracker(wavy_curve, tracker_config):
    """Tracker on the wavy curve, reset at its first knot."""
    from pybezier import BezierCurveTracker

    tracker = BezierCurveTracker(wavy_curve, config=tracker_config)
    tracker.reset(wavy_curve.get_point(0))
    return tracker


# =============================================================================
# Temporary Files Fixtures
# =============================================================================


@pytest.fixture
def temp_config_file(tmp_path) -> Path:
    """Create a temporary configuration file."""
    import yaml

    config = {
        "projection": {
            "max_num_iters": 80,
            "param_tol": 1e-7,
        },
        "tracker": {
            "max_segment_hops": 3,
        },
    }

    config_path = tmp_path / "test_config.yml"
    with open(config_path, "w") as f:
        yaml.dump(config, f)

    return config_path


@pytest.fixture
def knots_file(tmp_path, wavy_knots) -> Path:
    """3-column curve file with the wavy knots."""
    path = tmp_path / "knots.txt"
    with open(path, "w") as f:
        f.write(f"{len(wavy_knots)} 3\n")
        for p in wavy_knots:
            f.write(f"{p[0]} {p[1]} {p[2]}\n")
    return path


@pytest.fixture
def locations_file(tmp_path, wavy_curve) -> Path:
    """Query locations slightly off the wavy curve, in travel order."""
    ts = np.linspace(0.0, 1.0, 60)
    locs = np.array([wavy_curve.eval(t) for t in ts]) + np.array([0.0, 0.05, 0.0])
    path = tmp_path / "locations.txt"
    np.savetxt(path, locs)
    return path


# =============================================================================
# Marker Registrations
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
