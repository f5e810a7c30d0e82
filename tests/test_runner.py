"""
Tests for the tracking runner.
"""

from __future__ import annotations

import json

import numpy as np
import pytest

from pybezier import BezierCurveTracker
from pybezier.runner import TrackingRun, track_path
from pybezier.tracker import AT_END, AT_START, INTERIOR


@pytest.fixture
def on_curve_locations(wavy_curve):
    return np.array([wavy_curve.eval(t) for t in np.linspace(0.0, 1.0, 30)])


class TestTrackPath:
    """Tests for track_path."""

    def test_one_step_per_location(self, wavy_curve, on_curve_locations):
        run = track_path(wavy_curve, on_curve_locations)
        assert len(run.steps) == 30
        assert run.points.shape == (30, 3)
        assert [step.index for step in run.steps] == list(range(30))

    def test_steps_follow_curve(self, wavy_curve, on_curve_locations):
        run = track_path(wavy_curve, on_curve_locations)
        assert all(step.distance < 1e-2 for step in run.steps)
        assert run.steps[0].code == AT_START
        assert run.steps[-1].code == AT_END
        assert all(step.code == INTERIOR for step in run.steps[1:-1])
        assert run.reached_end
        intervals = [step.interval for step in run.steps]
        assert intervals == sorted(intervals)

    def test_timing_stats(self, wavy_curve, on_curve_locations):
        run = track_path(wavy_curve, on_curve_locations)
        assert run.max_ms >= run.mean_ms >= 0.0

    def test_with_frame(self, wavy_curve, on_curve_locations):
        run = track_path(wavy_curve, on_curve_locations, with_frame=True)
        for step in run.steps:
            assert step.curvature is not None and step.curvature >= 0.0
            assert np.linalg.norm(step.tangent) == pytest.approx(1.0)
            assert np.dot(step.tangent, step.normal) == pytest.approx(0.0, abs=1e-10)

    def test_given_tracker_is_used(self, wavy_curve, on_curve_locations):
        tracker = BezierCurveTracker(wavy_curve)
        tracker.reset(on_curve_locations[0])
        run = track_path(wavy_curve, on_curve_locations[:10], tracker=tracker)
        assert tracker.current_interval == run.steps[-1].interval
        assert tracker.current_param == run.steps[-1].param

    def test_empty_locations(self, wavy_curve):
        run = track_path(wavy_curve, [])
        assert run.steps == []
        assert not run.reached_end
        assert run.points.shape == (0, 3)

    def test_from_file_locations(self, wavy_curve, locations_file):
        locs = np.loadtxt(locations_file)
        run = track_path(wavy_curve, locs)
        assert len(run.steps) == len(locs)
        assert max(step.distance for step in run.steps[1:-1]) < 0.06


class TestSerialization:
    """Tests for run/step serialization."""

    def test_to_dict_is_json(self, wavy_curve, on_curve_locations):
        run = track_path(wavy_curve, on_curve_locations, with_frame=True)
        data = json.loads(json.dumps(run.to_dict()))
        assert data["num_steps"] == 30
        assert data["reached_end"] is True
        assert set(data["steps"][0]) >= {"location", "point", "code", "curvature", "tangent", "normal"}

    def test_step_without_frame(self, wavy_curve, on_curve_locations):
        run = track_path(wavy_curve, on_curve_locations[:3])
        assert "curvature" not in run.steps[0].to_dict()

    def test_empty_run(self):
        assert TrackingRun().to_dict()["num_steps"] == 0
