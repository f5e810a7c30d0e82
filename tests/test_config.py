"""
Tests for configuration management.
"""

from __future__ import annotations

import pytest

from pybezier.config import (
    BezierConfig,
    ConfigManager,
    ProjectionConfig,
    TrackerConfig,
    create_default_config,
    load_config,
)
from pybezier.exceptions import ConfigNotFoundError, ConfigValidationError


class TestCreateDefaultConfig:
    """Tests for create_default_config function."""

    def test_default_projection(self):
        config = create_default_config()
        assert config["projection"]["max_num_iters"] == 50
        assert config["projection"]["sqr_dist_tol"] == 1e-4
        assert config["projection"]["cos_angle_tol"] == 1e-4
        assert config["projection"]["param_tol"] == 1e-5

    def test_default_tracker(self):
        config = create_default_config()
        assert config["tracker"]["max_segment_hops"] == 0


class TestBezierConfig:
    """Tests for BezierConfig dataclass."""

    def test_round_trip_dict(self):
        """from_dict(to_dict()) should reproduce the configuration."""
        config = BezierConfig()
        config.projection.max_num_iters = 7
        config.tracker.zero_curvature_tol = 1e-3
        again = BezierConfig.from_dict(config.to_dict())
        assert again == config

    def test_from_partial_dict(self):
        """Missing keys should fall back to defaults."""
        config = BezierConfig.from_dict({"projection": {"param_tol": 1e-8}})
        assert config.projection.param_tol == 1e-8
        assert config.projection.max_num_iters == 50
        assert config.io.precision == 12

    def test_validation_passes_for_defaults(self):
        BezierConfig().validate()

    def test_validation_fails_for_zero_iterations(self):
        config = BezierConfig()
        config.projection.max_num_iters = 0
        with pytest.raises(ConfigValidationError) as excinfo:
            config.validate()
        assert "max_num_iters" in str(excinfo.value)


class TestSectionValidation:
    """Tests for the per-section validate methods."""

    @pytest.mark.parametrize("name", ["sqr_dist_tol", "cos_angle_tol", "param_tol"])
    def test_non_positive_tolerance(self, name):
        config = ProjectionConfig(**{name: 0.0})
        with pytest.raises(ConfigValidationError):
            config.validate()

    def test_cos_angle_tol_below_one(self):
        with pytest.raises(ConfigValidationError):
            ProjectionConfig(cos_angle_tol=1.0).validate()

    def test_negative_hops(self):
        with pytest.raises(ConfigValidationError):
            TrackerConfig(max_segment_hops=-1).validate()


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_load_defaults(self):
        manager = ConfigManager()
        config = manager.load()
        assert config.projection.max_num_iters == 50

    def test_load_from_file(self, temp_config_file):
        manager = ConfigManager(temp_config_file)
        config = manager.load()
        assert config.projection.max_num_iters == 80
        assert config.projection.param_tol == 1e-7
        assert config.projection.sqr_dist_tol == 1e-4
        assert config.tracker.max_segment_hops == 3

    def test_file_not_found(self, tmp_path):
        manager = ConfigManager(tmp_path / "nonexistent.yml")
        with pytest.raises(ConfigNotFoundError):
            manager.load()

    def test_env_override_multi_word_key(self, monkeypatch):
        """Keys containing underscores should be set in their section."""
        monkeypatch.setenv("PYBEZIER_PROJECTION_MAX_NUM_ITERS", "120")
        manager = ConfigManager()
        config = manager.load()
        assert manager.get("projection.max_num_iters") == 120
        assert config.projection.max_num_iters == 120

    def test_env_override_beats_file(self, monkeypatch, temp_config_file):
        monkeypatch.setenv("PYBEZIER_TRACKER_MAX_SEGMENT_HOPS", "1")
        config = ConfigManager(temp_config_file).load()
        assert config.tracker.max_segment_hops == 1

    def test_log_variables_ignored(self, monkeypatch):
        monkeypatch.setenv("PYBEZIER_LOG_LEVEL", "DEBUG")
        manager = ConfigManager()
        manager.load()
        assert manager.get("log") is None
        assert manager.get("log_level") is None

    def test_get_missing_value_with_default(self):
        manager = ConfigManager()
        manager.load()
        assert manager.get("nonexistent.key", "default") == "default"

    def test_config_property_loads_lazily(self):
        manager = ConfigManager()
        assert manager.config.tracker.zero_curvature_tol == 1e-6


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_file(self, temp_config_file):
        config = load_config(temp_config_file)
        assert config["projection"]["max_num_iters"] == 80

    def test_load_nonexistent_file(self, tmp_path):
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "nonexistent.yml")

    def test_invalid_file_values(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("projection:\n  param_tol: -1.0\n")
        with pytest.raises(ConfigValidationError):
            load_config(path)
