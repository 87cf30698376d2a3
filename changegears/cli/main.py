"""
Command-line interface for the change gear calculator.

Usage:
    python -m changegears make-example [--output example_input.json]
    python -m changegears calculate --input example.json [--output results.json] [--max-rows 20]
    python -m changegears show --input results.json
    python -m changegears link --input example.json [--base-url URL]
    python -m changegears serve [--port 8000]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from changegears import __version__
from changegears.models.inputs import CalculationInputs, LengthUnit, ModuleUnit
from changegears.generator.calculator import ChangeGearCalculator
from changegears.cli.readable_output import print_results, print_readable_output

DEFAULT_BASE_URL = "http://127.0.0.1:8000/calculate"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="changegears",
        description="Change Gear Calculator - find lathe change gear trains for a desired lead.",
    )
    parser.add_argument("--version", action="version", version=f"changegears {__version__}")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log search details to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # make-example command
    example_parser = subparsers.add_parser(
        "make-example",
        help="Generate an example input JSON file",
    )
    example_parser.add_argument(
        "--output", "-o",
        type=Path,
        default=Path("example_input.json"),
        help="Output path for example file (default: example_input.json)",
    )

    # calculate command
    calculate_parser = subparsers.add_parser(
        "calculate",
        help="Calculate change gear trains",
    )
    calculate_parser.add_argument(
        "--input", "-i",
        type=Path,
        required=True,
        help="Path to JSON input file with calculation parameters",
    )
    calculate_parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Path to save JSON output (prints a table if not specified)",
    )
    calculate_parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of a table",
    )
    calculate_parser.add_argument(
        "--max-rows", "-n",
        type=int,
        default=20,
        help="Number of gear trains to show in the table (default: 20)",
    )

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Print a saved JSON result as a table",
    )
    show_parser.add_argument(
        "--input", "-i",
        type=Path,
        required=True,
        help="Path to JSON result file",
    )
    show_parser.add_argument(
        "--max-rows", "-n",
        type=int,
        default=20,
        help="Number of gear trains to show (default: 20)",
    )

    # link command
    link_parser = subparsers.add_parser(
        "link",
        help="Print a bookmark link for a calculation",
    )
    link_parser.add_argument(
        "--input", "-i",
        type=Path,
        required=True,
        help="Path to JSON input file with calculation parameters",
    )
    link_parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Base URL of the calculator (default: {DEFAULT_BASE_URL})",
    )

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start the FastAPI web server",
    )
    serve_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--port", "-p",
        type=int,
        default=8000,
        help="Port to listen on (default: 8000)",
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )

    return parser


def example_inputs() -> CalculationInputs:
    """Metric 3 mm leadscrew cutting a 1.25 mm thread with a 3 shaft train."""
    return CalculationInputs(
        leadscrew_lead=3.0,
        leadscrew_unit=LengthUnit.MM,
        shaft_count=3,
        change_gears=[20, 25, 30, 35, 40, 45, 50, 55, 60, 65, 70, 80],
        input_set_shared=True,
        desired_lead=1.25,
        desired_unit=LengthUnit.MM,
        module=1.0,
        module_unit=ModuleUnit.MODULE,
        addendum=1.2,
        spacer_size=12,
        input_adjacent_size=12,
    )


def load_inputs(path: Path) -> CalculationInputs:
    """Load and validate calculation inputs from a JSON file."""
    with open(path) as f:
        input_data = json.load(f)
    return CalculationInputs(**input_data)


def cmd_make_example(args: argparse.Namespace) -> int:
    """Generate an example input JSON file."""
    output_json = example_inputs().model_dump_json(indent=2)

    with open(args.output, "w") as f:
        f.write(output_json)

    print(f"Created example input file: {args.output}")
    print("\nRun calculation with:")
    print(f"  python -m changegears calculate --input {args.output}")

    return 0


def cmd_calculate(args: argparse.Namespace) -> int:
    """Calculate and rank change gear trains."""
    try:
        inputs = load_inputs(args.input)

        print("\nChange Gear Calculator", file=sys.stderr)
        print(
            f"Leadscrew: {inputs.leadscrew_lead_mm:.4g} mm | Desired: {inputs.desired_lead_mm:.4g} mm | "
            f"Shafts: {inputs.shaft_count}",
            file=sys.stderr,
        )

        calculator = ChangeGearCalculator(inputs)
        result = calculator.generate_result(
            progress=lambda stats: print(stats.status_line(), file=sys.stderr)
        )
        print(result.statistics.status_line(), file=sys.stderr)

        if args.output:
            with open(args.output, "w") as f:
                f.write(result.model_dump_json(indent=2))
            print(f"\nResults saved to {args.output}", file=sys.stderr)
        elif args.json:
            print(result.model_dump_json(indent=2))
        else:
            print_results(result, max_rows=args.max_rows)

        if result.warnings:
            print("\nWarnings:", file=sys.stderr)
            for w in result.warnings:
                print(f"  - {w}", file=sys.stderr)

        return 0

    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {args.input}: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Validation Error: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_show(args: argparse.Namespace) -> int:
    """Print a saved result file."""
    try:
        print_readable_output(args.input, max_rows=args.max_rows)
        return 0
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_link(args: argparse.Namespace) -> int:
    """Print a bookmark link for the input file."""
    try:
        inputs = load_inputs(args.input)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {args.input}: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    base_url = args.base_url.split("?")[0]
    print(f"{base_url}?{inputs.to_query_string()}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the FastAPI web server."""
    try:
        import uvicorn

        print("\nStarting Change Gear Calculator API", file=sys.stderr)
        print(f"UI: http://{args.host}:{args.port}/", file=sys.stderr)
        print(f"Docs: http://{args.host}:{args.port}/docs", file=sys.stderr)
        print("\nPress Ctrl+C to stop\n", file=sys.stderr)

        uvicorn.run(
            "changegears.api.server:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
        )
        return 0

    except ImportError as e:
        print(f"Error: Missing dependency: {e}", file=sys.stderr)
        print("Install with: pip install uvicorn fastapi", file=sys.stderr)
        return 1


def cli(argv=None):
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "make-example": cmd_make_example,
        "calculate": cmd_calculate,
        "show": cmd_show,
        "link": cmd_link,
        "serve": cmd_serve,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


def main():
    """Console script entrypoint wrapper."""
    return cli()


if __name__ == "__main__":
    sys.exit(cli())
