"""
CLI for managing calendar definitions.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from almanac.cli.utils import init_cli, validate_database_path
from almanac.commands.calendar_commands import (
    CreateCalendarCommand,
    DeleteCalendarCommand,
    ReplaceCalendarCommand,
    SetActiveCalendarCommand,
)
from almanac.core.calendar import CalendarDefinition, Era, MonthDefinition, WeekDay
from almanac.core.errors import CalendarConfigError
from almanac.services.db_service import DatabaseService

logger = logging.getLogger(__name__)


def parse_months(value: str) -> List[MonthDefinition]:
    """Parses "Name:Days,Name:Days"."""
    months = []
    for m_str in value.split(","):
        if ":" not in m_str:
            raise ValueError(f"Invalid month format: {m_str}. Use Name:Days")
        name, days = m_str.split(":", 1)
        months.append(MonthDefinition(name=name.strip(), days=int(days.strip())))
    return months


def parse_day_cycle(value: str) -> List[int]:
    """Parses "seconds:minutes:hours", e.g. "60:60:24"."""
    parts = value.split(":")
    if len(parts) != 3:
        raise ValueError(f"Invalid day cycle: {value}. Use S:M:H")
    return [int(p.strip()) for p in parts]


def _bound(value: str) -> Optional[int]:
    value = value.strip()
    return int(value) if value else None


def parse_eras(value: str) -> List[Era]:
    """Parses "Name:start:end,..." where an empty bound is open."""
    eras = []
    for e_str in value.split(","):
        parts = e_str.split(":")
        if len(parts) != 3:
            raise ValueError(f"Invalid era format: {e_str}. Use Name:start:end")
        name, start, end = parts
        eras.append(Era(name=name.strip(), start_year=_bound(start), end_year=_bound(end)))
    return eras


def build_calendar(
    args, base: Optional[CalendarDefinition] = None
) -> CalendarDefinition:
    """
    Builds a calendar from command-line arguments.

    Anything not given on the command line is taken from ``base``, which
    is the default calendar for ``create`` and the stored definition for
    ``update``.
    """
    if base is None:
        base = CalendarDefinition.create_default()

    months = parse_months(args.months) if args.months else list(base.months)
    if args.week:
        week_days = [WeekDay(d.strip()) for d in args.week.split(",")]
    else:
        week_days = list(base.week_days)

    seconds, minutes, hours = (
        parse_day_cycle(args.day_cycle)
        if args.day_cycle
        else [
            base.seconds_per_minute,
            base.minutes_per_hour,
            base.hours_per_day,
        ]
    )
    eras = parse_eras(args.eras) if args.eras else list(base.eras)

    return CalendarDefinition(
        months=months,
        week_days=week_days,
        seconds_per_minute=seconds,
        minutes_per_hour=minutes,
        hours_per_day=hours,
        eras=eras,
        name=args.name or base.name,
    )


def create_calendar(args) -> int:
    """Create a new calendar definition."""
    db_service = None
    try:
        try:
            calendar = build_calendar(args)
        except CalendarConfigError as e:
            for problem in e.problems:
                print(f"✗ Validation error: {problem}")
            return 1
        except ValueError as e:
            print(f"✗ {e}")
            return 1

        db_service = DatabaseService(args.database)
        db_service.connect()

        cmd = CreateCalendarCommand(calendar, activate=args.activate)
        result = cmd.execute(db_service)
        if not result.success:
            print(f"✗ Error: {result.message}")
            return 1

        print(f"✓ Created calendar: {calendar.id}")
        print(f"  Name: {calendar.name}")
        return 0

    except Exception as e:
        logger.error(f"Failed to create calendar: {e}")
        if args.verbose:
            raise
        return 1
    finally:
        if db_service:
            db_service.close()


def update_calendar(args) -> int:
    """Replace a stored calendar definition, keeping its id."""
    db_service = None
    try:
        db_service = DatabaseService(args.database)
        db_service.connect()

        stored = db_service.get_calendar_config(args.id)
        if not stored:
            print(f"✗ Calendar not found: {args.id}")
            return 1

        try:
            built = build_calendar(args, base=stored)
        except CalendarConfigError as e:
            for problem in e.problems:
                print(f"✗ Validation error: {problem}")
            return 1
        except ValueError as e:
            print(f"✗ {e}")
            return 1
        calendar = CalendarDefinition.from_dict({**built.to_dict(), "id": stored.id})

        result = ReplaceCalendarCommand(calendar).execute(db_service)
        if not result.success:
            print(f"✗ Error: {result.message}")
            for problem in result.errors.values():
                print(f"  - {problem}")
            return 1

        print(f"✓ Updated calendar: {calendar.id}")
        if result.data.get("world"):
            print(f"  World '{result.data['world']}' now uses the new definition")
        return 0

    except Exception as e:
        logger.error(f"Failed to update calendar: {e}")
        if args.verbose:
            raise
        return 1
    finally:
        if db_service:
            db_service.close()


def list_calendars(args) -> int:
    """List all calendar definitions."""
    db_service = None
    try:
        db_service = DatabaseService(args.database)
        db_service.connect()

        calendars = db_service.get_all_calendar_configs()

        if args.json:
            print(json.dumps([c.to_dict() for c in calendars], indent=2))
        else:
            print(f"\nFound {len(calendars)} calendar(s):\n")
            for c in calendars:
                active_str = " (ACTIVE)" if db_service.is_calendar_active(c.id) else ""
                print(f"ID: {c.id}{active_str}")
                print(f"  Name: {c.name}")
                print(f"  Months: {c.months_in_year} ({c.days_in_year} days)")
                print(f"  Eras: {len(c.eras)}")
                print()

        return 0
    except Exception as e:
        logger.error(f"Failed to list calendars: {e}")
        return 1
    finally:
        if db_service:
            db_service.close()


def show_calendar(args) -> int:
    """Show details of a calendar definition."""
    db_service = None
    try:
        db_service = DatabaseService(args.database)
        db_service.connect()

        calendar = db_service.get_calendar_config(args.id)
        if not calendar:
            print(f"✗ Calendar not found: {args.id}")
            return 1

        if args.json:
            print(calendar.to_json())
        else:
            print(f"\nCalendar: {calendar.name} ({calendar.id})")
            if db_service.is_calendar_active(calendar.id):
                print("*** ACTIVE CALENDAR ***")
            print(
                f"Day: {calendar.hours_per_day} hours of "
                f"{calendar.minutes_per_hour} minutes of "
                f"{calendar.seconds_per_minute} seconds"
            )
            print("\nMonths:")
            for i, m in enumerate(calendar.months):
                print(f"  {i+1}. {m.name} ({m.days} days)")
            print("\nWeek Days:")
            print(f"  {', '.join(d.name for d in calendar.week_days)}")
            if calendar.eras:
                print("\nEras:")
                for era in calendar.eras:
                    start = era.start_year if era.start_year is not None else "..."
                    end = era.end_year if era.end_year is not None else "..."
                    print(f"  {era.name}: {start} to {end}")

        return 0
    except Exception as e:
        logger.error(f"Failed to show calendar: {e}")
        return 1
    finally:
        if db_service:
            db_service.close()


def set_active_calendar(args) -> int:
    """Set a calendar definition as active."""
    db_service = None
    try:
        db_service = DatabaseService(args.database)
        db_service.connect()

        cmd = SetActiveCalendarCommand(args.id)
        result = cmd.execute(db_service)

        if result.success:
            print(f"✓ Calendar {args.id} is now active.")
            return 0
        else:
            print(f"✗ Error: {result.message}")
            return 1
    except Exception as e:
        logger.error(f"Failed to set active calendar: {e}")
        return 1
    finally:
        if db_service:
            db_service.close()


def delete_calendar(args) -> int:
    """Delete a calendar definition."""
    db_service = None
    try:
        db_service = DatabaseService(args.database)
        db_service.connect()

        if not args.force:
            c = db_service.get_calendar_config(args.id)
            if not c:
                print(f"✗ Calendar not found: {args.id}")
                return 1
            print(f"About to delete calendar: {c.name} ({args.id})")
            if input("Are you sure? (y/n): ").lower() != "y":
                return 0

        cmd = DeleteCalendarCommand(args.id)
        result = cmd.execute(db_service)

        if result.success:
            print(f"✓ Deleted calendar: {args.id}")
            return 0
        else:
            print(f"✗ Error: {result.message}")
            return 1
    except Exception as e:
        logger.error(f"Failed to delete calendar: {e}")
        return 1
    finally:
        if db_service:
            db_service.close()


def main():
    parser = argparse.ArgumentParser(description="Manage Almanac calendars")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    # Create
    create_p = subparsers.add_parser("create", help="Create a new calendar")
    create_p.add_argument("--database", "-d")
    create_p.add_argument("--name", "-n", required=True)
    create_p.add_argument("--months", help="Month definitions (Name:Days,Name:Days)")
    create_p.add_argument("--week", help="Week day names (Day1,Day2,...)")
    create_p.add_argument(
        "--day-cycle", help="Seconds per minute, minutes per hour, hours per day (S:M:H)"
    )
    create_p.add_argument(
        "--eras", help="Eras (Name:start:end,...); leave a bound empty for open"
    )
    create_p.add_argument(
        "--activate", action="store_true", help="Make the new calendar active"
    )
    create_p.set_defaults(func=create_calendar)

    # Update
    update_p = subparsers.add_parser(
        "update", help="Replace a calendar definition, keeping its id"
    )
    update_p.add_argument("--database", "-d")
    update_p.add_argument("--id", required=True)
    update_p.add_argument("--name", "-n")
    update_p.add_argument("--months", help="Month definitions (Name:Days,Name:Days)")
    update_p.add_argument("--week", help="Week day names (Day1,Day2,...)")
    update_p.add_argument(
        "--day-cycle", help="Seconds per minute, minutes per hour, hours per day (S:M:H)"
    )
    update_p.add_argument(
        "--eras", help="Eras (Name:start:end,...); leave a bound empty for open"
    )
    update_p.set_defaults(func=update_calendar)

    # List
    list_p = subparsers.add_parser("list", help="List all calendars")
    list_p.add_argument("--database", "-d")
    list_p.add_argument("--json", action="store_true")
    list_p.set_defaults(func=list_calendars)

    # Show
    show_p = subparsers.add_parser("show", help="Show calendar details")
    show_p.add_argument("--database", "-d")
    show_p.add_argument("--id", required=True)
    show_p.add_argument("--json", action="store_true")
    show_p.set_defaults(func=show_calendar)

    # Set Active
    active_p = subparsers.add_parser("set-active", help="Set calendar as active")
    active_p.add_argument("--database", "-d")
    active_p.add_argument("--id", required=True)
    active_p.set_defaults(func=set_active_calendar)

    # Delete
    del_p = subparsers.add_parser("delete", help="Delete a calendar")
    del_p.add_argument("--database", "-d")
    del_p.add_argument("--id", required=True)
    del_p.add_argument("--force", "-f", action="store_true")
    del_p.set_defaults(func=delete_calendar)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.database = init_cli(args.verbose, args.database)

    if not validate_database_path(args.database, allow_create=args.command == "create"):
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
