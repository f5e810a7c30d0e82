"""
Configuration management for pybezier.

This module provides:
- ProjectionConfig: Newton closest-point solver tolerances
- TrackerConfig: Tracker walk and frame settings
- IOConfig: Curve file output settings
- BezierConfig: Typed aggregate of the sections above
- ConfigManager: Central configuration management with environment support
- create_default_config: Factory function for the default configuration
- load_config: Load configuration from YAML files
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from pybezier.exceptions import ConfigNotFoundError, ConfigValidationError


# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class ProjectionConfig:
    """Stopping criteria of the per-segment Newton projection."""

    max_num_iters: int = 50
    sqr_dist_tol: float = 1e-4
    cos_angle_tol: float = 1e-4
    param_tol: float = 1e-5

    def validate(self) -> None:
        """Validate projection configuration."""
        if self.max_num_iters < 1:
            raise ConfigValidationError(
                "projection.max_num_iters", "must be >= 1", self.max_num_iters
            )
        for name in ("sqr_dist_tol", "cos_angle_tol", "param_tol"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigValidationError(f"projection.{name}", "must be > 0", value)
        if self.cos_angle_tol >= 1:
            raise ConfigValidationError(
                "projection.cos_angle_tol", "must be < 1", self.cos_angle_tol
            )


@dataclass
class TrackerConfig:
    """Tracker configuration."""

    zero_curvature_tol: float = 1e-6
    # 0 means one pass over all segments
    max_segment_hops: int = 0

    def validate(self) -> None:
        """Validate tracker configuration."""
        if self.zero_curvature_tol < 0:
            raise ConfigValidationError(
                "tracker.zero_curvature_tol", "must be >= 0", self.zero_curvature_tol
            )
        if self.max_segment_hops < 0:
            raise ConfigValidationError(
                "tracker.max_segment_hops", "must be >= 0", self.max_segment_hops
            )


@dataclass
class IOConfig:
    """Curve file configuration."""

    precision: int = 12

    def validate(self) -> None:
        if not 1 <= self.precision <= 17:
            raise ConfigValidationError("io.precision", "must be in [1, 17]", self.precision)


@dataclass
class BezierConfig:
    """Complete pybezier configuration."""

    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    io: IOConfig = field(default_factory=IOConfig)

    def validate(self) -> None:
        """Validate all configuration settings."""
        self.projection.validate()
        self.tracker.validate()
        self.io.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return {
            "projection": {
                "max_num_iters": self.projection.max_num_iters,
                "sqr_dist_tol": self.projection.sqr_dist_tol,
                "cos_angle_tol": self.projection.cos_angle_tol,
                "param_tol": self.projection.param_tol,
            },
            "tracker": {
                "zero_curvature_tol": self.tracker.zero_curvature_tol,
                "max_segment_hops": self.tracker.max_segment_hops,
            },
            "io": {
                "precision": self.io.precision,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BezierConfig":
        """Create BezierConfig from dictionary."""
        projection_data = data.get("projection", {})
        tracker_data = data.get("tracker", {})
        io_data = data.get("io", {})

        return cls(
            projection=ProjectionConfig(
                max_num_iters=int(projection_data.get("max_num_iters", 50)),
                sqr_dist_tol=float(projection_data.get("sqr_dist_tol", 1e-4)),
                cos_angle_tol=float(projection_data.get("cos_angle_tol", 1e-4)),
                param_tol=float(projection_data.get("param_tol", 1e-5)),
            ),
            tracker=TrackerConfig(
                zero_curvature_tol=float(tracker_data.get("zero_curvature_tol", 1e-6)),
                max_segment_hops=int(tracker_data.get("max_segment_hops", 0)),
            ),
            io=IOConfig(
                precision=int(io_data.get("precision", 12)),
            ),
        )


# =============================================================================
# Configuration Manager
# =============================================================================


class ConfigManager:
    """Central configuration management with environment variable support.

    Environment variables take precedence over config files.
    Config files take precedence over defaults.

    Environment variable format: PYBEZIER_<SECTION>_<KEY>
    Example: PYBEZIER_PROJECTION_MAX_NUM_ITERS=80
    """

    ENV_PREFIX = "PYBEZIER"
    # Variables under the prefix that belong to other subsystems
    RESERVED_ENV = ("LOG_LEVEL", "LOG_FORMAT", "LOG_FILE")

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to YAML configuration file.
        """
        self._config: Optional[BezierConfig] = None
        self._config_path = Path(config_path) if config_path else None
        self._raw_config: Dict[str, Any] = {}

    def load(self, validate: bool = True) -> BezierConfig:
        """Load and return configuration.

        Args:
            validate: Whether to validate configuration after loading.

        Returns:
            Loaded BezierConfig instance.
        """
        self._raw_config = create_default_config()

        if self._config_path:
            self._load_from_file(self._config_path)

        self._load_from_env()

        self._config = BezierConfig.from_dict(self._raw_config)

        if validate:
            self._config.validate()

        return self._config

    def _load_from_file(self, path: Path) -> None:
        """Load configuration from YAML file."""
        if not path.exists():
            raise ConfigNotFoundError(str(path))

        with open(path, "r") as f:
            file_config = yaml.safe_load(f)

        if file_config:
            self._deep_update(self._raw_config, file_config)

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        for key, value in os.environ.items():
            if not key.startswith(f"{self.ENV_PREFIX}_"):
                continue
            suffix = key[len(self.ENV_PREFIX) + 1 :]
            if suffix in self.RESERVED_ENV:
                continue
            self._set_nested_value(suffix.lower(), value)

    def _set_nested_value(self, key: str, value: str) -> None:
        """Set a configuration value from an environment variable suffix.

        The first underscore-separated part selects a section when one with
        that name exists; the remainder (underscores kept) is the key.
        """
        section, _, rest = key.partition("_")
        target = self._raw_config.get(section)
        if rest and isinstance(target, dict):
            target[rest] = self._parse_value(value)
        else:
            self._raw_config[key] = self._parse_value(value)

    @staticmethod
    def _parse_value(value: str) -> Any:
        """Parse string value to appropriate Python type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    @staticmethod
    def _deep_update(base: dict, update: dict) -> dict:
        """Deep merge update into base dictionary."""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                ConfigManager._deep_update(base[key], value)
            else:
                base[key] = value
        return base

    @property
    def config(self) -> BezierConfig:
        """Get current configuration (loads if not already loaded)."""
        if self._config is None:
            self.load()
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dotted key path.

        Args:
            key: Dotted key path (e.g., "projection.param_tol").
            default: Default value if key not found.

        Returns:
            Configuration value or default.
        """
        parts = key.split(".")
        value = self._raw_config

        for part in parts:
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value


# =============================================================================
# Factory Functions
# =============================================================================


def create_default_config() -> Dict[str, Any]:
    """Create default configuration dictionary."""
    return BezierConfig().to_dict()


def load_config(path: Union[str, Path], validate: bool = True) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML configuration file.
        validate: Whether to validate configuration.

    Returns:
        Configuration dictionary.
    """
    manager = ConfigManager(path)
    config = manager.load(validate=validate)
    return config.to_dict()


_global_config: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get global configuration manager instance."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager()
    return _global_config


def init_config(path: Optional[Union[str, Path]] = None) -> ConfigManager:
    """Initialize global configuration from file.

    Args:
        path: Optional path to configuration file.

    Returns:
        Initialized ConfigManager instance.
    """
    global _global_config
    _global_config = ConfigManager(path)
    _global_config.load()
    return _global_config
