"""
pybezier Exception Hierarchy.

This module defines all custom exceptions used in the pybezier package.
Every error raised by the package derives from BezierError, so callers can
catch the whole family with a single except clause while still being able to
target construction, solver, indexing, configuration and file errors
individually.

Note that the Newton closest-point solver never raises on non-convergence:
it returns its best iterate after the iteration budget is spent.
"""

from typing import Any, Optional


class BezierError(Exception):
    """Base exception for all pybezier errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Construction Errors
# =============================================================================


class InvalidArgumentError(BezierError):
    """Malformed curve construction input."""

    def __init__(self, argument: str, reason: str, value: Any = None):
        details = {"argument": argument, "reason": reason}
        if value is not None:
            details["value"] = str(value)
        super().__init__(
            f"Invalid argument '{argument}': {reason}",
            details=details,
        )


class DegenerateInputError(InvalidArgumentError):
    """Too few knots to define the requested curve."""

    def __init__(self, num_points: int, required: int, closed: bool = False):
        kind = "closed" if closed else "open"
        super().__init__(
            "points",
            f"an interpolating {kind} curve needs at least {required} knots, got {num_points}",
            value=num_points,
        )
        self.num_points = num_points
        self.required = required


class SingularSystemError(BezierError):
    """The spline-fit linear system is singular."""

    def __init__(self, size: int, row: Optional[int] = None, reason: str = "zero pivot"):
        details = {"size": size, "reason": reason}
        if row is not None:
            details["row"] = row
        super().__init__(
            f"Singular tridiagonal system: {reason}",
            details=details,
        )


# =============================================================================
# Evaluation Errors
# =============================================================================


class IndexOutOfRangeError(BezierError, IndexError):
    """Segment index outside [0, num_segments)."""

    def __init__(self, index: int, num_segments: int):
        super().__init__(
            f"Segment index {index} out of range [0, {num_segments})",
            details={"index": index, "num_segments": num_segments},
        )
        self.index = index
        self.num_segments = num_segments


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(BezierError):
    """Error in configuration loading or validation."""

    pass


class ConfigNotFoundError(ConfigurationError):
    """Configuration file not found."""

    def __init__(self, config_path: str):
        super().__init__(
            f"Configuration file not found: {config_path}",
            details={"path": config_path},
        )


class ConfigValidationError(ConfigurationError):
    """Configuration validation failed."""

    def __init__(self, key: str, reason: str, value: Any = None):
        details = {"key": key, "reason": reason}
        if value is not None:
            details["value"] = str(value)
        super().__init__(
            f"Invalid configuration for '{key}': {reason}",
            details=details,
        )


# =============================================================================
# Data Errors
# =============================================================================


class DataError(BezierError):
    """Base class for data-related errors."""

    pass


class CurveFileError(DataError):
    """Curve file is malformed."""

    def __init__(self, path: str, reason: str, line: Optional[int] = None):
        details = {"path": path, "reason": reason}
        if line is not None:
            details["line"] = line
        super().__init__(
            f"Invalid curve file '{path}': {reason}",
            details=details,
        )


class CurveFileNotFoundError(DataError):
    """Curve file does not exist."""

    def __init__(self, path: str):
        super().__init__(
            f"Curve file not found: {path}",
            details={"path": path},
        )
