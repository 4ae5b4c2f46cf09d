import pathlib
import sys

import pytest

# Ensure project root is in sys.path
repo_root = pathlib.Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

from almanac.core.calendar import (  # noqa: E402
    CalendarDefinition,
    Era,
    MonthDefinition,
    WeekDay,
)


@pytest.fixture
def db_service():
    """
    Provides a fresh in-memory database service for each test.
    """
    from almanac.services.db_service import DatabaseService

    service = DatabaseService(":memory:")
    service.connect()
    yield service
    service.close()


@pytest.fixture
def gregorian_calendar() -> CalendarDefinition:
    """
    Twelve Gregorian months (365 days), Monday-first week, 24/60/60 day.
    No eras.
    """
    default = CalendarDefinition.create_default()
    return CalendarDefinition(
        months=default.months,
        week_days=default.week_days,
        id="test-gregorian",
        name="Gregorian",
    )


@pytest.fixture
def era_calendar(gregorian_calendar) -> CalendarDefinition:
    """
    The Gregorian calendar split into BCE (..-1) and CE (0..).
    """
    return CalendarDefinition(
        months=gregorian_calendar.months,
        week_days=gregorian_calendar.week_days,
        eras=[
            Era(name="BCE", start_year=None, end_year=-1),
            Era(name="CE", start_year=0, end_year=None),
        ],
        id="test-eras",
        name="Eras",
    )


@pytest.fixture
def short_day_calendar() -> CalendarDefinition:
    """
    An alien calendar: three uneven months, a five-day week and a
    16-hour day of 50-minute hours and 40-second minutes.
    """
    return CalendarDefinition(
        months=[
            MonthDefinition(name="Frost", days=10),
            MonthDefinition(name="Thaw", days=7),
            MonthDefinition(name="Bloom", days=13),
        ],
        week_days=[WeekDay(n) for n in ("Ash", "Birch", "Cedar", "Dogwood", "Elm")],
        seconds_per_minute=40,
        minutes_per_hour=50,
        hours_per_day=16,
        id="test-short-day",
        name="Short Day",
    )
