"""
Command-line interface for headless layout runs.

Usage:
    python -m spatial_classifier.cli --scenario examples/scenario.json --out output/
    python -m spatial_classifier.cli -s examples/scenario.json --move-boundaries 100 50 70
"""

import argparse
import sys
from pathlib import Path

from .canvas import CanvasSize
from .config import default_config, load_config
from .exceptions import InvalidScenarioError
from .exporters import export_results
from .logger.logger import Logger
from .runner import BoundaryChange, run_layout
from .scenario import load_scenario


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Settle a scenario's tasks into AI / SHARED / HUMAN lanes"
    )
    parser.add_argument(
        "--scenario", "-s",
        type=Path,
        required=True,
        help="Path to scenario JSON or YAML file"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file (optional)"
    )
    parser.add_argument(
        "--width", type=float, default=800.0,
        help="Canvas width in px (default: 800)"
    )
    parser.add_argument(
        "--height", type=float, default=600.0,
        help="Canvas height in px (default: 600)"
    )
    parser.add_argument(
        "--boundaries", "-b",
        type=float, nargs=2, default=None, metavar=("LOWER", "UPPER"),
        help="Initial boundary pair in percent (overrides config)"
    )
    parser.add_argument(
        "--move-boundaries",
        type=float, nargs=3, default=None, metavar=("TICK", "LOWER", "UPPER"),
        help="Move boundaries to LOWER/UPPER before tick TICK"
    )
    parser.add_argument(
        "--out", "-o", type=Path, default=None,
        help="Output directory (overrides config)"
    )
    parser.add_argument(
        "--name", "-n", type=str, default=None,
        help="Run name (overrides config)"
    )
    parser.add_argument(
        "--png", action="store_true",
        help="Also write a PNG snapshot of the final frame"
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true",
        help="Suppress output except errors"
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    Logger.initialize()

    try:
        config = load_config(args.config) if args.config else default_config()
    except FileNotFoundError:
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        scenario = load_scenario(args.scenario)
    except FileNotFoundError:
        print(f"Error: Scenario file not found: {args.scenario}", file=sys.stderr)
        sys.exit(1)
    except InvalidScenarioError as e:
        print(f"Error: Invalid scenario: {e}", file=sys.stderr)
        sys.exit(1)

    if args.boundaries is not None:
        config.boundaries.initial = list(args.boundaries)

    changes = []
    if args.move_boundaries is not None:
        tick, lower, upper = args.move_boundaries
        changes.append(BoundaryChange(at_tick=int(tick), boundaries=(lower, upper)))

    out_dir = args.out or Path(config.output.out_dir)
    run_name = args.name or config.output.run_name
    canvas = CanvasSize(args.width, args.height)

    if not args.quiet:
        print("Running lane layout...")
        print(f"  Scenario: {scenario.title} ({len(scenario.tasks)} tasks)")
        print(f"  Canvas: {canvas.width:.0f} x {canvas.height:.0f} px")
        print(f"  Boundaries: {config.boundaries.pair.as_tuple()}")

    result = run_layout(scenario, config, canvas, changes)
    paths = export_results(result, out_dir, run_name, snapshot_png=args.png or config.output.snapshot_png)

    if not args.quiet:
        counts = result.final_scenario.zone_counts()
        print()
        print("=" * 50)
        print("LAYOUT COMPLETE")
        print("=" * 50)
        print(f"  Ticks: {result.ticks} ({'at rest' if result.reached_rest else 'still moving'})")
        print(f"  Zone changes: {len(result.zone_changes)}")
        print(f"  Final boundaries: {result.final_boundaries.as_tuple()}")
        print("  Zones: " + ", ".join(f"{z.value}={n}" for z, n in counts.items()))
        print()
        print("Output files:")
        for key, path in paths.items():
            print(f"  {key}: {path}")

    sys.exit(0)


if __name__ == "__main__":
    main()
