"""
Command-line interface for tyretrack.

Usage:
    python -m tyretrack make-example [--output example_vehicle.json]
    python -m tyretrack slots --type truck --axles 3 [--json]
    python -m tyretrack options --type truck --axles 3
    python -m tyretrack layout --input example_vehicle.json [--output layout.json]
    python -m tyretrack serve [--port 8000]
"""

import argparse
import json
import os
import sys
from pathlib import Path

from pydantic import ValidationError

from tyretrack import __version__
from tyretrack.cli.readable_output import print_layout_summary, print_slot_table
from tyretrack.config import ENV_PREFIX, Settings, configure_logging
from tyretrack.layout import build_vehicle_layout, position_options_for_vehicle, slots_for_vehicle
from tyretrack.models.inputs import TyreCreate, TyrePosition, TyreStatus, VehicleCreate
from tyretrack.storage import FleetStorage


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="tyretrack",
        description="Tyretrack - fleet tyre management. Generates wheel-position layouts "
                    "for vehicles and matches fitted tyres into them.",
    )
    parser.add_argument("--version", action="version", version=f"tyretrack {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # make-example command
    example_parser = subparsers.add_parser(
        "make-example",
        help="Generate an example vehicle + tyres JSON file",
    )
    example_parser.add_argument(
        "--output", "-o",
        type=Path,
        default=Path("example_vehicle.json"),
        help="Output path for example file (default: example_vehicle.json)",
    )

    # slots and options share the vehicle shape arguments
    for name, help_text in (
        ("slots", "Print the wheel slots for a vehicle type and axle count"),
        ("options", "Print the position dropdown options for a vehicle"),
    ):
        shape_parser = subparsers.add_parser(name, help=help_text)
        shape_parser.add_argument(
            "--type", "-t",
            dest="vehicle_type",
            required=True,
            help="Vehicle type, e.g. car, van, truck, trailer, dump_truck",
        )
        shape_parser.add_argument(
            "--axles", "-a",
            type=int,
            default=2,
            help="Number of axles (default: 2)",
        )
        if name == "slots":
            shape_parser.add_argument(
                "--json",
                action="store_true",
                help="Print JSON instead of a table",
            )

    # layout command
    layout_parser = subparsers.add_parser(
        "layout",
        help="Match the tyres in a vehicle file to its wheel slots",
    )
    layout_parser.add_argument(
        "--input", "-i",
        type=Path,
        required=True,
        help="Path to JSON file with 'vehicle' and 'tyres'",
    )
    layout_parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Path to save layout JSON (prints to stdout if not specified)",
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
        "--data-path",
        type=Path,
        default=None,
        help=f"JSON snapshot file or directory (overrides {ENV_PREFIX}DATA_PATH)",
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )

    return parser


def _check_axles(axles: int) -> None:
    if axles < 1:
        raise ValueError(f"axle count must be at least 1, got {axles}")


def cmd_make_example(args: argparse.Namespace) -> int:
    """Generate an example vehicle file: a three-axle truck with ten tyres."""
    vehicle = VehicleCreate(
        registration="KX21 TRK",
        make="Volvo",
        model="FH16",
        year=2021,
        type="truck",
        current_mileage=182000,
        axle_count=3,
    )
    positions = [
        TyrePosition.FRONT_LEFT,
        TyrePosition.FRONT_RIGHT,
        TyrePosition.OUTER_LEFT,
        TyrePosition.INNER_LEFT,
        TyrePosition.INNER_RIGHT,
        TyrePosition.OUTER_RIGHT,
        TyrePosition.REAR_LEFT,
        TyrePosition.REAR_LEFT,
        TyrePosition.REAR_RIGHT,
        TyrePosition.REAR_RIGHT,
    ]
    tyres = [
        TyreCreate(
            brand="Michelin" if i < 2 else "Bridgestone",
            model="X Multi Z" if i < 2 else "M729",
            size="315/80R22.5",
            serial_number=f"SN-{1001 + i}",
            status=TyreStatus.IN_USE,
            position=position,
            tread_depth=round(12.0 - i * 0.9, 1),
            pressure=120.0,
            cost=420.0,
        )
        for i, position in enumerate(positions)
    ]

    example = {
        "vehicle": vehicle.model_dump(mode="json"),
        "tyres": [t.model_dump(mode="json", exclude_none=True) for t in tyres],
    }

    with open(args.output, "w") as f:
        json.dump(example, f, indent=2)

    print(f"Created example vehicle file: {args.output}")
    print("\nMatch its tyres to slots with:")
    print(f"  python -m tyretrack layout --input {args.output}")

    return 0


def cmd_slots(args: argparse.Namespace) -> int:
    """Print the slot schema for a vehicle shape."""
    try:
        _check_axles(args.axles)
        slots = slots_for_vehicle(args.vehicle_type, args.axles)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([s.model_dump(mode="json") for s in slots], indent=2))
    else:
        print_slot_table(args.vehicle_type, args.axles, slots)
    return 0


def cmd_options(args: argparse.Namespace) -> int:
    """Print position dropdown options for a vehicle shape."""
    try:
        _check_axles(args.axles)
        options = position_options_for_vehicle(args.vehicle_type, args.axles)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for option in options:
        print(f"{option.value.value:<12} {option.label}")
    return 0


def cmd_layout(args: argparse.Namespace) -> int:
    """Match a vehicle file's tyres to its slots."""
    try:
        with open(args.input) as f:
            input_data = json.load(f)

        if not isinstance(input_data, dict) or "vehicle" not in input_data:
            raise ValueError("input must be an object with a 'vehicle' key")

        # Records go through an in-memory store so they carry real ids
        storage = FleetStorage()
        vehicle = storage.create_vehicle("local", VehicleCreate(**input_data["vehicle"]))
        for item in input_data.get("tyres", []):
            tyre = TyreCreate(**item)
            storage.create_tyre("local", tyre.model_copy(update={"vehicle_id": vehicle.id}))

        detail = storage.get_vehicle_with_tyres("local", vehicle.id)
        layout = build_vehicle_layout(detail.vehicle, detail.tyres)

        output_json = layout.model_dump_json(indent=2)
        if args.output:
            with open(args.output, "w") as f:
                f.write(output_json)
            print(f"Layout saved to {args.output}", file=sys.stderr)
        else:
            print(output_json)

        print_layout_summary(detail.vehicle, layout, file=sys.stderr)
        return 0

    except FileNotFoundError:
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {args.input}: {e}", file=sys.stderr)
        return 1
    except (ValidationError, ValueError) as e:
        print(f"Validation Error: {e}", file=sys.stderr)
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the FastAPI web server."""
    import uvicorn

    if args.data_path is not None:
        os.environ[f"{ENV_PREFIX}DATA_PATH"] = str(args.data_path)
    try:
        settings = Settings.from_env()
    except ValidationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    configure_logging(settings)

    print("\nStarting Tyretrack API", file=sys.stderr)
    print(f"API: http://{args.host}:{args.port}/api", file=sys.stderr)
    print(f"Docs: http://{args.host}:{args.port}/docs", file=sys.stderr)
    print(f"UI: http://{args.host}:{args.port}/", file=sys.stderr)
    if settings.data_path:
        print(f"Data: {settings.data_path}", file=sys.stderr)
    else:
        print("Data: in memory (set --data-path to persist)", file=sys.stderr)
    print("\nPress Ctrl+C to stop\n", file=sys.stderr)

    uvicorn.run(
        "tyretrack.api.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def cli(argv=None):
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "make-example": cmd_make_example,
        "slots": cmd_slots,
        "options": cmd_options,
        "layout": cmd_layout,
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
