"""
CLI for keeping a world's clock.

Examples:
    python -m almanac.cli.time init --name "Faerun"
    python -m almanac.cli.time step "long rest"
    python -m almanac.cli.time jump 1372-01-01
    python -m almanac.cli.time return
    python -m almanac.cli.time record "The party reached Waterdeep"
"""

import argparse
import json
import logging
import sys

from almanac.cli.utils import init_cli, validate_database_path
from almanac.commands.time_commands import (
    AddRecordCommand,
    CreateWorldCommand,
    JumpTimeCommand,
    ReturnTimeCommand,
    StepTimeCommand,
)
from almanac.core.calendar import CalendarDefinition
from almanac.core.calendar_view import CalendarView
from almanac.core.errors import CalendarError
from almanac.core.expression import ExpressionParser
from almanac.services.db_service import DatabaseService

logger = logging.getLogger(__name__)


def _print_view(view: CalendarView) -> None:
    print(f"  {view.describe()}")
    print(f"  {view}")


def init_world(args) -> int:
    """Create the world clock."""
    db_service = None
    try:
        db_service = DatabaseService(args.database)
        db_service.connect()

        if args.calendar:
            calendar = db_service.get_calendar_config(args.calendar)
            if calendar is None:
                print(f"✗ Calendar not found: {args.calendar}")
                return 1
        else:
            calendar = (
                db_service.get_active_calendar_config()
                or CalendarDefinition.create_default()
            )

        result = CreateWorldCommand(args.name, calendar).execute(db_service)
        if not result.success:
            print(f"✗ Error: {result.message}")
            for err in result.errors.values():
                print(f"  {err}")
            return 1

        print(f"✓ {result.message} using calendar '{calendar.name}'")
        _print_view(result.data["view"])
        return 0
    except Exception as e:
        logger.error(f"Failed to create world: {e}")
        if args.verbose:
            raise
        return 1
    finally:
        if db_service:
            db_service.close()


def show_now(args) -> int:
    """Show the current world time."""
    db_service = None
    try:
        db_service = DatabaseService(args.database)
        db_service.connect()

        world = db_service.get_world()
        if world is None:
            print("✗ No world found. Create one with 'init' first.")
            return 1

        view = world.view
        if args.json:
            print(
                json.dumps(
                    {
                        "world": world.name,
                        "seconds": view.seconds,
                        "datetime": str(view),
                        "era": view.era.name if view.era else None,
                        "era_year": view.era_year,
                        "time_of_day": view.time_of_day.label,
                        "jumped": world.jumped,
                    },
                    indent=2,
                )
            )
        else:
            print(f"\n{world.name}")
            _print_view(view)
            if world.jumped:
                canonical = view.with_instant(world.canonical_time)
                print(f"  (away from the canonical time {canonical})")
        return 0
    except Exception as e:
        logger.error(f"Failed to show world time: {e}")
        return 1
    finally:
        if db_service:
            db_service.close()


def _run_world_command(args, cmd) -> int:
    db_service = None
    try:
        db_service = DatabaseService(args.database)
        db_service.connect()

        result = cmd.execute(db_service)
        if result.success:
            print(f"✓ {result.message}")
            return 0
        else:
            print(f"✗ Error: {result.message}")
            return 1
    except Exception as e:
        logger.error(f"Failed to run {type(cmd).__name__}: {e}")
        return 1
    finally:
        if db_service:
            db_service.close()


def step_time(args) -> int:
    """Step forward in time."""
    return _run_world_command(args, StepTimeCommand(" ".join(args.expr)))


def jump_time(args) -> int:
    """Jump to another time."""
    return _run_world_command(args, JumpTimeCommand(" ".join(args.expr)))


def return_time(args) -> int:
    """Return to the canonical time."""
    return _run_world_command(args, ReturnTimeCommand())


def add_record(args) -> int:
    """Write a record at the current time."""
    return _run_world_command(args, AddRecordCommand(" ".join(args.note)))


def parse_expression(args) -> int:
    """Evaluate an expression without changing the world."""
    db_service = None
    try:
        db_service = DatabaseService(args.database)
        db_service.connect()

        world = db_service.get_world()
        calendar = world.calendar if world else CalendarDefinition.create_default()
        reference = world.time if world and not args.no_reference else None

        text = " ".join(args.expr)
        try:
            instant = ExpressionParser(calendar).parse(text, reference)
        except CalendarError as e:
            print(f"✗ Error: {e}")
            return 1

        view = CalendarView(instant, calendar)
        print(f"✓ {text!r} -> {instant.seconds}")
        _print_view(view)
        return 0
    except Exception as e:
        logger.error(f"Failed to parse expression: {e}")
        return 1
    finally:
        if db_service:
            db_service.close()


def list_records(args) -> int:
    """List the world's records."""
    db_service = None
    try:
        db_service = DatabaseService(args.database)
        db_service.connect()

        world = db_service.get_world()
        if world is None:
            print("✗ No world found. Create one with 'init' first.")
            return 1

        if args.json:
            print(json.dumps([r.to_dict() for r in world.records], indent=2))
        else:
            print(f"\nFound {len(world.records)} record(s):\n")
            for r in world.records:
                print(f"[{world.view.with_instant(r.instant)}] {r.note}")
        return 0
    except Exception as e:
        logger.error(f"Failed to list records: {e}")
        return 1
    finally:
        if db_service:
            db_service.close()


def main():
    parser = argparse.ArgumentParser(description="Keep an Almanac world clock")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    # Init
    init_p = subparsers.add_parser("init", help="Create the world clock")
    init_p.add_argument("--database", "-d")
    init_p.add_argument("--name", "-n", required=True)
    init_p.add_argument(
        "--calendar", "-c", help="Calendar ID (defaults to the active calendar)"
    )
    init_p.set_defaults(func=init_world)

    # Now
    now_p = subparsers.add_parser("now", help="Show the current time")
    now_p.add_argument("--database", "-d")
    now_p.add_argument("--json", action="store_true")
    now_p.set_defaults(func=show_now)

    # Step
    step_p = subparsers.add_parser("step", help="Step forward in time")
    step_p.add_argument("--database", "-d")
    step_p.add_argument("expr", nargs="+", help="e.g. 1d8h, long rest, 8am")
    step_p.set_defaults(func=step_time)

    # Jump
    jump_p = subparsers.add_parser("jump", help="Jump to any time")
    jump_p.add_argument("--database", "-d")
    jump_p.add_argument("expr", nargs="+")
    jump_p.set_defaults(func=jump_time)

    # Return
    return_p = subparsers.add_parser("return", help="Return to the canonical time")
    return_p.add_argument("--database", "-d")
    return_p.set_defaults(func=return_time)

    # Parse
    parse_p = subparsers.add_parser("parse", help="Evaluate an expression")
    parse_p.add_argument("--database", "-d")
    parse_p.add_argument(
        "--no-reference",
        action="store_true",
        help="Evaluate without the world time as reference",
    )
    parse_p.add_argument("expr", nargs="+")
    parse_p.set_defaults(func=parse_expression)

    # Record
    record_p = subparsers.add_parser("record", help="Write a record")
    record_p.add_argument("--database", "-d")
    record_p.add_argument("note", nargs="+")
    record_p.set_defaults(func=add_record)

    # Records
    records_p = subparsers.add_parser("records", help="List records")
    records_p.add_argument("--database", "-d")
    records_p.add_argument("--json", action="store_true")
    records_p.set_defaults(func=list_records)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.database = init_cli(args.verbose, args.database)

    if not validate_database_path(args.database, allow_create=args.command == "init"):
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
