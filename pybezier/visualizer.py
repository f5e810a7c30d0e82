"""
Matplotlib plots of Bezier curves and tracking results.

Plots use the x-y projection of the 3D curve, which is the usual view of a
ground-vehicle path.
"""

from typing import Optional, Union
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

from pybezier.curve import BezierCurve
from pybezier.logging import LOG_INFO


def plot_curve(
    curve: BezierCurve,
    ax: Optional[plt.Axes] = None,
    samples_per_segment: int = 20,
    show_control_polygon: bool = True,
    tracked_points: Optional[np.ndarray] = None,
    query_points: Optional[np.ndarray] = None,
    title: Optional[str] = None,
    save_path: Optional[Union[str, Path]] = None,
) -> plt.Axes:
    """Plot ``curve`` with its knots and, optionally, its control polygon.

    Args:
        curve: Curve to draw.
        ax: Axes to draw into (default: a new figure).
        samples_per_segment: Sampling density of each segment.
        show_control_polygon: Draw the in/out control vertices and their legs.
        tracked_points: Closest points returned by a tracker, shape (k, 3).
        query_points: Query locations matching ``tracked_points``.
        title: Plot title.
        save_path: Write the figure to this file and close it.

    Returns:
        The axes that were drawn into.
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 6))

    samples = curve.sample(samples_per_segment)
    ax.plot(samples[:, 0], samples[:, 1], "b-", linewidth=2, label="curve")

    points = curve.points
    ax.plot(points[:, 0], points[:, 1], "ko", markersize=5, label="knots")

    if show_control_polygon:
        in_cv = curve.in_cv
        out_cv = curve.out_cv
        for p, a, b in zip(points, in_cv, out_cv):
            ax.plot([a[0], p[0], b[0]], [a[1], p[1], b[1]], color="gray", linestyle="--", linewidth=0.8)
        ax.plot(in_cv[:, 0], in_cv[:, 1], "s", color="orange", markersize=4, label="in_cv")
        ax.plot(out_cv[:, 0], out_cv[:, 1], "s", color="green", markersize=4, label="out_cv")

    if tracked_points is not None and len(tracked_points) > 0:
        tracked = np.asarray(tracked_points, dtype=float).reshape(-1, 3)
        ax.plot(tracked[:, 0], tracked[:, 1], "r.", markersize=6, label="closest points")
        if query_points is not None:
            queries = np.asarray(query_points, dtype=float).reshape(-1, 3)
            ax.plot(queries[:, 0], queries[:, 1], "mx", markersize=5, label="queries")
            for q, p in zip(queries, tracked):
                ax.plot([q[0], p[0]], [q[1], p[1]], "m-", linewidth=0.5, alpha=0.5)

    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_aspect("equal", adjustable="datalim")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best")
    if title:
        ax.set_title(title)

    if save_path is not None:
        ax.figure.savefig(save_path, dpi=100, bbox_inches="tight")
        plt.close(ax.figure)
        LOG_INFO(f"Saved curve plot to {save_path}")

    return ax
