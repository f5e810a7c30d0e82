"""
Logging for pybezier.

All messages go to the ``pybezier`` logger, which is configured once from the
environment:

    PYBEZIER_LOG_LEVEL   level name (default WARNING)
    PYBEZIER_LOG_FORMAT  "default" for plain text, "json" for one JSON object per line
    PYBEZIER_LOG_FILE    optional file receiving a copy of every record

Solver and tracker code logs through the LOG_* helpers; timing of fits and
per-query costs goes through profile_scope, timed and TimeTracker.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

LOGGER_NAME = "pybezier"
TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_logger = logging.getLogger(LOGGER_NAME)
_handlers: List[logging.Handler] = []
_configured = False


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def level_from_env() -> int:
    name = os.environ.get("PYBEZIER_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def formatter_from_env() -> logging.Formatter:
    if os.environ.get("PYBEZIER_LOG_FORMAT", "default").lower() == "json":
        return JsonFormatter()
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(
    level: Optional[int] = None,
    formatter: Optional[logging.Formatter] = None,
    log_file: Optional[str] = None,
    force: bool = False,
) -> logging.Logger:
    """Attach handlers to the pybezier logger.

    Arguments left as None are taken from the environment. Without ``force``
    a second call keeps the existing configuration.
    """
    global _configured

    if _configured and not force:
        return _logger

    while _handlers:
        handler = _handlers.pop()
        _logger.removeHandler(handler)
        handler.close()

    _logger.setLevel(level or level_from_env())
    _logger.propagate = False
    formatter = formatter or formatter_from_env()

    targets: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    path = log_file or os.environ.get("PYBEZIER_LOG_FILE")
    if path:
        targets.append(logging.FileHandler(path))

    for handler in targets:
        handler.setFormatter(formatter)
        _logger.addHandler(handler)
        _handlers.append(handler)

    _configured = True
    return _logger


def LOG_DEBUG(msg: str, *args: Any) -> None:
    _logger.debug(msg, *args)


def LOG_INFO(msg: str, *args: Any) -> None:
    _logger.info(msg, *args)


def LOG_WARN(msg: str, *args: Any) -> None:
    _logger.warning(msg, *args)


def LOG_ERROR(msg: str, *args: Any) -> None:
    _logger.error(msg, *args)


class LogContext:
    """Key/value pairs prefixed to messages sent through log_with_context.

    Contexts nest; an inner value shadows an outer one until the inner
    context exits.

    Example:
        with LogContext(tracker="lane_center"):
            log_with_context(logging.DEBUG, "step 3: boundary code 1")
    """

    _stack: List[Dict[str, Any]] = []

    def __init__(self, **values: Any):
        self.values = values

    def __enter__(self) -> "LogContext":
        LogContext._stack.append(self.values)
        return self

    def __exit__(self, *exc: Any) -> None:
        LogContext._stack.pop()

    @classmethod
    def format_context(cls) -> str:
        merged: Dict[str, Any] = {}
        for values in cls._stack:
            merged.update(values)
        return " ".join(f"{k}={v}" for k, v in merged.items())


def log_with_context(level: int, msg: str, *args: Any) -> None:
    prefix = LogContext.format_context()
    _logger.log(level, f"[{prefix}] {msg}" if prefix else msg, *args)


@contextmanager
def profile_scope(name: str, level: int = logging.DEBUG):
    """Log the wall time spent inside the block."""
    start = time.perf_counter()
    try:
        yield
    finally:
        _logger.log(level, "%s took %.6fs", name, time.perf_counter() - start)


def timed(func: F) -> F:
    """Log the wall time of every call to ``func`` at debug level."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        with profile_scope(func.__name__):
            return func(*args, **kwargs)

    return wrapper  # type: ignore


class TimeTracker:
    """Collect per-call durations in milliseconds.

    Example:
        timer = TimeTracker("closest point")
        for loc in locations:
            with timer.measure():
                tracker.calc_closest_point(loc)
        mean_ms, max_ms, count = timer.get_stats()
    """

    def __init__(self, name: str):
        self.name = name
        self.samples_ms: List[float] = []

    def add(self, ms: float) -> None:
        self.samples_ms.append(ms)

    @contextmanager
    def measure(self):
        start = time.perf_counter()
        try:
            yield
        finally:
            self.add((time.perf_counter() - start) * 1000.0)

    def get_stats(self) -> Tuple[float, float, int]:
        """Return (mean_ms, max_ms, count); zeros when nothing was measured."""
        if not self.samples_ms:
            return 0.0, 0.0, 0
        samples = np.asarray(self.samples_ms)
        return float(samples.mean()), float(samples.max()), len(samples)

    def print_stats(self) -> None:
        """Log the statistics at info level."""
        mean_ms, max_ms, count = self.get_stats()
        if count == 0:
            LOG_INFO(f"{self.name}: no timings recorded")
        else:
            LOG_INFO(f"{self.name}: {count} calls, mean {mean_ms:.3f} ms, max {max_ms:.3f} ms")

    def reset(self) -> None:
        self.samples_ms.clear()


setup_logging()
