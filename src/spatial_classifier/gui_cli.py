"""
GUI command-line interface entry point.

Usage:
    python -m spatial_classifier.gui_cli examples/scenario.json [-c config.yaml]
"""

import argparse
import sys

from .exceptions import InvalidScenarioError


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Interactive lane layout (Reality Editor)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m spatial_classifier.gui_cli examples/scenario.json
    python -m spatial_classifier.gui_cli examples/scenario.json -c examples/layout.yaml
"""
    )
    parser.add_argument(
        "scenario",
        type=str,
        help="Path to scenario JSON or YAML file"
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to YAML config file (optional)"
    )

    args = parser.parse_args(argv)

    # Import here to avoid DearPyGui import if just checking help
    from .gui.app import run_gui

    try:
        run_gui(args.scenario, args.config)
    except KeyboardInterrupt:
        print("\nGUI closed.")
        sys.exit(0)
    except (OSError, ValueError, InvalidScenarioError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
