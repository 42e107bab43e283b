"""
Command Line Interface Module

Parses command-line arguments for the batch takeoff pipeline.
"""

import argparse
import math
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .calibration.scale_transformer import parse_scale
from .constants import DEFAULT_ZOOM
from .errors import ScaleFormatError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the pipeline."""
    parser = argparse.ArgumentParser(
        prog="quantity_takeoff",
        description="Compute quantity takeoffs from digitized drawing measurements",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m quantity_takeoff.cli -i measurements.json -o ./output
  python -m quantity_takeoff.cli -i measurements.json -o ./output --scale 1:100 --zoom 2
  python -m quantity_takeoff.cli -i measurements.json -o ./output --units imperial --verbose
        """
    )

    # Required arguments
    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Input JSON file of measurements"
    )

    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Output directory path"
    )

    # Optional arguments
    parser.add_argument(
        "--scale",
        help="Default drawing scale for measurements without one (e.g. '1:100')"
    )

    parser.add_argument(
        "--zoom",
        type=float,
        default=DEFAULT_ZOOM,
        help=f"Default capture zoom for measurements without one (default: {DEFAULT_ZOOM})"
    )

    parser.add_argument(
        "--settings",
        help="YAML file of preset overrides (default: config/settings.yaml)"
    )

    parser.add_argument(
        "--project",
        help="Project id (overrides the one in the input file)"
    )

    parser.add_argument(
        "--units",
        choices=["metric", "imperial"],
        default="metric",
        help="Report units (default: metric)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser


def validate_args(args: argparse.Namespace) -> Tuple[bool, str]:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments

    Returns:
        Tuple of (is_valid, error_message)
    """
    # Check input file exists
    input_path = Path(args.input)
    if not input_path.exists():
        return False, f"Input file not found: {args.input}"

    if not input_path.suffix.lower() == ".json":
        return False, f"Input file must be JSON: {args.input}"

    if args.settings and not Path(args.settings).exists():
        return False, f"Settings file not found: {args.settings}"

    # Check/create output directory
    output_path = Path(args.output)
    try:
        output_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return False, f"Cannot create output directory: {e}"

    if args.scale:
        try:
            parse_scale(args.scale)
        except ScaleFormatError as e:
            return False, str(e)

    if not math.isfinite(args.zoom) or args.zoom <= 0:
        return False, f"Zoom must be > 0: {args.zoom}"

    return True, ""


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse and validate command-line arguments.

    Args:
        args: Optional list of arguments (uses sys.argv if None)

    Returns:
        Parsed and validated arguments
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    is_valid, error_msg = validate_args(parsed)
    if not is_valid:
        parser.error(error_msg)

    return parsed


def main():
    """Main entry point for CLI."""
    args = parse_args()

    # Import pipeline and run
    from .pipeline import run_pipeline

    try:
        result = run_pipeline(args)
    except KeyboardInterrupt:
        print("\nProcessing cancelled by user")
        sys.exit(1)
    except (OSError, ValueError) as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    if not result.records and result.total_measurements:
        sys.exit(2)


if __name__ == "__main__":
    main()
