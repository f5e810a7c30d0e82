"""
Command-line interface for pybezier.

Usage:
    pybezier fit knots.txt curve.txt
    pybezier eval curve.txt --t 0.25
    pybezier closest curve.txt 1.0 -1.0 0.0 --frame
    pybezier track curve.txt locations.txt --output run.json
    pybezier plot curve.txt --output curve.png
    pybezier validate config.yml
    pybezier info
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from pybezier import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="pybezier",
        description="pybezier - piecewise cubic Bezier paths and closest-point tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pybezier fit knots.txt curve.txt       Fit a spline through knots, write control points
  pybezier eval curve.txt --t 0.5        Evaluate the curve at a global parameter
  pybezier eval curve.txt --segment 2 --t 0.5
  pybezier closest curve.txt 1 -1 0      Closest point to a location
  pybezier track curve.txt locs.txt      Track a sequence of locations
  pybezier validate config.yml           Validate a configuration file
        """,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (use -vv for debug)",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )
    parser.add_argument(
        "--config", "-f",
        type=Path,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    fit_parser = subparsers.add_parser(
        "fit",
        help="Fit an interpolating spline and write its control points",
        description="Read a curve file and write it back in the 9-column format",
    )
    fit_parser.add_argument("input", type=Path, help="Curve file (3 or 9 columns)")
    fit_parser.add_argument("output", type=Path, help="Output curve file")
    _add_closed_argument(fit_parser)

    eval_parser = subparsers.add_parser(
        "eval",
        help="Evaluate the curve",
        description="Evaluate position (and derivatives for a segment) of a curve",
    )
    eval_parser.add_argument("curve", type=Path, help="Curve file")
    eval_parser.add_argument("--t", type=float, default=0.0, help="Curve parameter in [0, 1] (default: 0.0)")
    eval_parser.add_argument("--segment", "-s", type=int, help="Segment index (t is then local)")
    _add_closed_argument(eval_parser)

    closest_parser = subparsers.add_parser(
        "closest",
        help="Closest point on the curve to a location",
        description="Reset a tracker at the location and return the closest point",
    )
    closest_parser.add_argument("curve", type=Path, help="Curve file")
    closest_parser.add_argument("location", type=float, nargs=3, metavar=("X", "Y", "Z"))
    closest_parser.add_argument("--frame", action="store_true", help="Also report TNB frame and curvature")
    _add_closed_argument(closest_parser)

    track_parser = subparsers.add_parser(
        "track",
        help="Track a sequence of locations",
        description="Run a tracker over a whitespace-separated file of x y z locations",
    )
    track_parser.add_argument("curve", type=Path, help="Curve file")
    track_parser.add_argument("locations", type=Path, help="File with one x y z location per line")
    track_parser.add_argument("--frame", action="store_true", help="Also compute TNB frames")
    track_parser.add_argument("--output", "-o", type=Path, help="Output file for results (JSON format)")
    _add_closed_argument(track_parser)

    plot_parser = subparsers.add_parser(
        "plot",
        help="Plot a curve",
        description="Plot the x-y projection of a curve and its control polygon",
    )
    plot_parser.add_argument("curve", type=Path, help="Curve file")
    plot_parser.add_argument("--output", "-o", type=Path, required=True, help="Image file")
    plot_parser.add_argument("--locations", type=Path, help="Track these locations and plot the results")
    _add_closed_argument(plot_parser)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a configuration file",
        description="Validate a YAML configuration file",
    )
    validate_parser.add_argument("config_file", type=Path, help="Path to configuration file")

    subparsers.add_parser(
        "info",
        help="Show system information",
        description="Display system and dependency information",
    )

    return parser


def _add_closed_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--closed",
        action="store_true",
        help="Treat the path as a closed loop",
    )


def setup_logging(verbose: int, quiet: bool) -> None:
    """Setup logging based on verbosity level."""
    import logging
    from pybezier.logging import setup_logging as _setup_logging

    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    _setup_logging(level=level, force=True)


def _format_vector(v) -> str:
    return " ".join(f"{float(x):.10g}" for x in v)


def _load(args: argparse.Namespace):
    from pybezier.factory import load_curve
    from pybezier.config import init_config, get_config

    manager = init_config(args.config) if args.config else get_config()
    return load_curve(args.curve, closed=args.closed, config=manager.config)


def cmd_fit(args: argparse.Namespace) -> int:
    """Execute the fit command."""
    from pybezier.io import write_curve

    args.curve = args.input
    curve = _load(args)
    write_curve(curve, args.output)
    print(f"Wrote {curve.num_points} points ({curve.num_segments} segments) to {args.output}")
    return 0


def cmd_eval(args: argparse.Namespace) -> int:
    """Execute the eval command."""
    curve = _load(args)
    if args.segment is None:
        print(_format_vector(curve.eval(args.t)))
        return 0

    print(f"position: {_format_vector(curve.eval_segment(args.segment, args.t))}")
    print(f"first derivative: {_format_vector(curve.eval_d(args.segment, args.t))}")
    print(f"second derivative: {_format_vector(curve.eval_dd(args.segment, args.t))}")
    return 0


def cmd_closest(args: argparse.Namespace) -> int:
    """Execute the closest command."""
    from pybezier.tracker import BezierCurveTracker
    from pybezier.config import get_config

    curve = _load(args)
    tracker = BezierCurveTracker(curve, config=get_config().config.tracker)
    tracker.reset(args.location)

    if args.frame:
        frame, curvature, code = tracker.calc_closest_frame(args.location)
        print(f"point: {_format_vector(frame.origin)}")
        print(f"tangent: {_format_vector(frame.tangent)}")
        print(f"normal: {_format_vector(frame.normal)}")
        print(f"binormal: {_format_vector(frame.binormal)}")
        print(f"curvature: {curvature:.10g}")
    else:
        point, code = tracker.calc_closest_point(args.location)
        print(f"point: {_format_vector(point)}")

    print(f"segment: {tracker.current_interval} param: {tracker.current_param:.10g} code: {code}")
    return 0


def _read_locations(path: Path) -> np.ndarray:
    return np.loadtxt(path, dtype=float, ndmin=2).reshape(-1, 3)


def cmd_track(args: argparse.Namespace) -> int:
    """Execute the track command."""
    from pybezier.runner import track_path

    curve = _load(args)
    run = track_path(curve, _read_locations(args.locations), with_frame=args.frame)

    print(f"Tracked {len(run.steps)} locations (mean {run.mean_ms:.3f} ms, max {run.max_ms:.3f} ms)")
    if run.steps:
        final = run.steps[-1]
        print(f"Final point: {_format_vector(final.point)} code: {final.code}")

    if args.output:
        with open(args.output, "w") as f:
            json.dump(run.to_dict(), f, indent=2)
        print(f"Results saved to {args.output}")
    return 0


def cmd_plot(args: argparse.Namespace) -> int:
    """Execute the plot command."""
    import matplotlib

    matplotlib.use("Agg")
    from pybezier.visualizer import plot_curve

    curve = _load(args)
    tracked = queries = None
    if args.locations:
        from pybezier.runner import track_path

        queries = _read_locations(args.locations)
        tracked = track_path(curve, queries).points

    plot_curve(
        curve,
        tracked_points=tracked,
        query_points=queries,
        title=args.curve.name,
        save_path=args.output,
    )
    print(f"Saved plot to {args.output}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Execute the validate command."""
    from pybezier.config import ConfigManager

    manager = ConfigManager(args.config_file)
    config = manager.load(validate=True)
    print(f"Configuration file '{args.config_file}' is valid.")
    print(f"  Max Newton iterations: {config.projection.max_num_iters}")
    print(f"  Squared distance tolerance: {config.projection.sqr_dist_tol}")
    print(f"  Max segment hops: {config.tracker.max_segment_hops}")
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Execute the info command."""
    import platform

    print("pybezier System Information")
    print("=" * 40)
    print(f"pybezier version: {__version__}")
    print(f"Python version: {platform.python_version()}")
    print(f"Platform: {platform.platform()}")
    print()

    print("Dependencies:")
    for dep in ["numpy", "yaml", "matplotlib"]:
        try:
            mod = __import__(dep)
            version = getattr(mod, "__version__", "unknown")
            print(f"  {dep}: {version}")
        except ImportError:
            print(f"  {dep}: NOT INSTALLED")

    return 0


COMMANDS = {
    "fit": cmd_fit,
    "eval": cmd_eval,
    "closest": cmd_closest,
    "track": cmd_track,
    "plot": cmd_plot,
    "validate": cmd_validate,
    "info": cmd_info,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    from pybezier.exceptions import BezierError
    from pybezier.logging import LOG_ERROR

    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.quiet)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        return command(args)
    except BezierError as e:
        LOG_ERROR(f"Error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        LOG_ERROR(f"Error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose >= 2:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
