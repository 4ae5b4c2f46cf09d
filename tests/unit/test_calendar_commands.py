"""
Calendar Commands Unit Tests.

Tests for creating, replacing, deleting and activating calendars, and for
how those changes treat the world that runs on a calendar.
"""

import pytest

from almanac.commands.calendar_commands import (
    CreateCalendarCommand,
    DeleteCalendarCommand,
    ReplaceCalendarCommand,
    SetActiveCalendarCommand,
)
from almanac.core.calendar import CalendarDefinition, MonthDefinition, WeekDay
from almanac.core.calendar_view import CalendarView
from almanac.core.instant import Instant, RawDate
from almanac.core.world import Record, World


@pytest.fixture
def moons() -> CalendarDefinition:
    """Two 20-day months and a three-day week."""
    return CalendarDefinition(
        id="moons",
        name="Moons",
        months=[MonthDefinition("Waxing", 20), MonthDefinition("Waning", 20)],
        week_days=[WeekDay("Sun"), WeekDay("Moon"), WeekDay("Star")],
    )


def redefined(calendar: CalendarDefinition, **changes) -> CalendarDefinition:
    """Same id, new contents."""
    return CalendarDefinition.from_dict({**calendar.to_dict(), **changes})


class TestCreateCalendarCommand:
    def test_create(self, db_service, moons):
        result = CreateCalendarCommand(moons).execute(db_service)

        assert result.success
        assert result.data == {"id": "moons", "active": False}
        assert db_service.get_calendar_config("moons") == moons
        assert db_service.get_active_calendar_config() is None

    def test_create_and_activate(self, db_service, moons, gregorian_calendar):
        db_service.insert_calendar_config(gregorian_calendar, is_active=True)

        CreateCalendarCommand(moons, activate=True).execute(db_service)

        assert db_service.get_active_calendar_config().id == "moons"

    def test_duplicate_id(self, db_service, moons):
        db_service.insert_calendar_config(moons)

        command = CreateCalendarCommand(redefined(moons, name="Again"))
        result = command.execute(db_service)

        assert not result.success
        assert "already exists" in result.message
        assert not command.is_executed
        assert db_service.get_calendar_config("moons").name == "Moons"

    def test_undo_restores_previous_active(self, db_service, moons, gregorian_calendar):
        db_service.insert_calendar_config(gregorian_calendar, is_active=True)
        command = CreateCalendarCommand(moons, activate=True)
        command.execute(db_service)

        command.undo(db_service)

        assert db_service.get_calendar_config("moons") is None
        assert db_service.get_active_calendar_config().id == gregorian_calendar.id

    def test_undo_with_nothing_active_before(self, db_service, moons):
        command = CreateCalendarCommand(moons, activate=True)
        command.execute(db_service)

        command.undo(db_service)

        assert db_service.get_all_calendar_configs() == []


class TestReplaceCalendarCommand:
    def test_replace_unused_calendar(self, db_service, moons):
        db_service.insert_calendar_config(moons)
        longer = redefined(moons, months=[{"name": "Year", "days": 300}])

        result = ReplaceCalendarCommand(longer).execute(db_service)

        assert result.success
        assert result.data["world"] is None
        assert db_service.get_calendar_config("moons").days_in_year == 300

    def test_missing_calendar(self, db_service, moons):
        result = ReplaceCalendarCommand(moons).execute(db_service)

        assert not result.success
        assert "not found" in result.message

    def test_world_moves_to_new_definition(self, db_service, moons):
        world = World(name="Krynn", calendar=moons)
        world.update_time("25d")
        db_service.save_world(world)

        # Same seconds, read through a 10-day first month
        shorter = redefined(
            moons,
            months=[{"name": "Waxing", "days": 10}, {"name": "Waning", "days": 30}],
        )
        result = ReplaceCalendarCommand(shorter).execute(db_service)

        assert result.success
        assert result.data["world"] == "Krynn"
        loaded = db_service.get_world()
        assert loaded.calendar == shorter
        assert loaded.time == world.time
        assert loaded.view.raw_date == RawDate(1, 2, 16)

    def test_unknown_era_tags_are_dropped(self, db_service, era_calendar):
        world = World(name="Toril", calendar=era_calendar, time=Instant(10, era=1))
        world.add_record("tagged")
        db_service.save_world(world)

        without_eras = redefined(era_calendar, eras=[])
        assert ReplaceCalendarCommand(without_eras).execute(db_service).success

        loaded = db_service.get_world()
        assert loaded.time.era is None
        assert loaded.records[0].instant.era is None
        assert loaded.view.era is None

    def test_invalid_world_blocks_replace(self, db_service, moons):
        # Current time before the latest record while on the canonical line
        broken = World(
            name="Krynn",
            calendar=moons,
            records=[Record(note="later", instant=Instant(50))],
        )
        db_service.save_world(broken)

        result = ReplaceCalendarCommand(redefined(moons, name="Other")).execute(
            db_service
        )

        assert not result.success
        assert "Krynn" in result.message
        assert result.errors
        assert db_service.get_calendar_config("moons").name == "Moons"

    def test_undo_restores_calendar_and_world(self, db_service, era_calendar):
        world = World(name="Toril", calendar=era_calendar, time=Instant(10, era=1))
        db_service.save_world(world)
        command = ReplaceCalendarCommand(redefined(era_calendar, eras=[]))
        command.execute(db_service)

        command.undo(db_service)

        loaded = db_service.get_world()
        assert loaded.calendar == era_calendar
        assert loaded.time.era == 1
        assert CalendarView(loaded.time, loaded.calendar).era.name == "CE"


class TestDeleteCalendarCommand:
    def test_delete(self, db_service, moons):
        db_service.insert_calendar_config(moons)

        result = DeleteCalendarCommand("moons").execute(db_service)

        assert result.success
        assert db_service.get_calendar_config("moons") is None

    def test_missing_calendar(self, db_service):
        result = DeleteCalendarCommand("nope").execute(db_service)

        assert not result.success
        assert "not found" in result.message

    def test_calendar_in_use_is_kept(self, db_service, moons):
        db_service.save_world(World(name="Krynn", calendar=moons))

        command = DeleteCalendarCommand("moons")
        result = command.execute(db_service)

        assert not result.success
        assert "in use by world 'Krynn'" in result.message
        assert not command.is_executed
        assert db_service.get_calendar_config("moons") is not None

    def test_undo_restores_active_flag(self, db_service, moons):
        db_service.insert_calendar_config(moons, is_active=True)
        command = DeleteCalendarCommand("moons")
        command.execute(db_service)

        command.undo(db_service)

        assert db_service.get_calendar_config("moons") == moons
        assert db_service.is_calendar_active("moons")


class TestSetActiveCalendarCommand:
    def test_set_active(self, db_service, moons, gregorian_calendar):
        db_service.insert_calendar_config(gregorian_calendar, is_active=True)
        db_service.insert_calendar_config(moons)

        result = SetActiveCalendarCommand("moons").execute(db_service)

        assert result.success
        assert db_service.get_active_calendar_config().id == "moons"
        assert not db_service.is_calendar_active(gregorian_calendar.id)

    def test_missing_calendar(self, db_service):
        result = SetActiveCalendarCommand("nope").execute(db_service)

        assert not result.success

    def test_undo_reactivates_previous(self, db_service, moons, gregorian_calendar):
        db_service.insert_calendar_config(gregorian_calendar, is_active=True)
        db_service.insert_calendar_config(moons)
        command = SetActiveCalendarCommand("moons")
        command.execute(db_service)

        command.undo(db_service)

        assert db_service.get_active_calendar_config().id == gregorian_calendar.id

    def test_undo_clears_when_nothing_was_active(self, db_service, moons):
        db_service.insert_calendar_config(moons)
        command = SetActiveCalendarCommand("moons")
        command.execute(db_service)

        command.undo(db_service)

        assert db_service.get_active_calendar_config() is None
