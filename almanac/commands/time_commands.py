"""
Time Commands Module.

Implements the Command pattern for the world clock: creating a world,
stepping and jumping through time, returning to the canonical time line
and writing records. Every command snapshots the world before changing
it so that undo restores the exact previous state.

Classes:
    CreateWorldCommand: Creates the world clock for a database.
    StepTimeCommand: Moves time forward by an expression.
    JumpTimeCommand: Jumps to any time, remembering the canonical time.
    ReturnTimeCommand: Returns to the canonical time.
    AddRecordCommand: Writes a timestamped record.
"""

import logging
from abc import abstractmethod
from typing import Any, Dict, Optional

from almanac.commands.base_command import BaseCommand, CommandResult
from almanac.core.calendar import CalendarDefinition
from almanac.core.world import World
from almanac.services.db_service import DatabaseService

logger = logging.getLogger(__name__)


def _load_world(db_service: DatabaseService) -> World:
    world = db_service.get_world()
    if world is None:
        raise LookupError("No world found. Create one with 'init' first.")
    return world


class _WorldCommand(BaseCommand):
    """
    Shared snapshot/undo handling for commands that modify the world.

    Subclasses implement ``_apply`` and return the success message.
    """

    def __init__(self) -> None:
        super().__init__()
        self._snapshot: Optional[Dict[str, Any]] = None

    @abstractmethod
    def _apply(self, world: World) -> str:
        """Changes ``world`` in place and describes the change."""

    def _run(self, db_service: DatabaseService) -> CommandResult:
        world = _load_world(db_service)
        self._snapshot = world.to_dict()

        message = self._apply(world)
        db_service.save_world(world)
        return self._ok(message, time=world.time, view=world.view)

    def _revert(self, db_service: DatabaseService) -> None:
        assert self._snapshot is not None
        db_service.save_world(World.from_dict(self._snapshot))


class CreateWorldCommand(BaseCommand):
    """
    Creates the world clock, starting at the epoch.

    The world's calendar is stored alongside it if it is not stored yet.
    Undo removes the world, and the calendar too when this command added
    it.
    """

    def __init__(self, name: str, calendar: CalendarDefinition):
        """
        Args:
            name: Display name of the world.
            calendar: The calendar the world uses.
        """
        super().__init__()
        self._world = World(name=name, calendar=calendar)
        self._added_calendar = False

    def _run(self, db_service: DatabaseService) -> CommandResult:
        if db_service.get_world() is not None:
            raise ValueError("A world already exists in this database.")

        problems = self._world.validate()
        if problems:
            return self._fail("World failed validation", problems)

        calendar_id = self._world.calendar.id
        self._added_calendar = db_service.get_calendar_config(calendar_id) is None
        db_service.save_world(self._world)
        return self._ok(
            f"Created world '{self._world.name}'",
            time=self._world.time,
            view=self._world.view,
        )

    def _revert(self, db_service: DatabaseService) -> None:
        with db_service.transaction():
            db_service.delete_world()
            if self._added_calendar:
                db_service.delete_calendar_config(self._world.calendar.id)


class StepTimeCommand(_WorldCommand):
    """Steps forward in the flow of time."""

    def __init__(self, expr: str):
        """
        Args:
            expr: Time expression relative to the current world time.
        """
        super().__init__()
        self._expr = expr

    def _apply(self, world: World) -> str:
        world.update_time(self._expr)
        return f"The time is now {world.view}"


class JumpTimeCommand(_WorldCommand):
    """Temporarily opens a rift to a new location in time."""

    def __init__(self, expr: str):
        super().__init__()
        self._expr = expr

    def _apply(self, world: World) -> str:
        world.jump_time(self._expr)
        return f"You open a rift and step through. The time is now {world.view}"


class ReturnTimeCommand(_WorldCommand):
    """Returns to the canonical time line."""

    def _apply(self, world: World) -> str:
        world.return_time()
        return f"You have returned to {world.view}"


class AddRecordCommand(_WorldCommand):
    """Writes a record at the current world time."""

    def __init__(self, note: str):
        super().__init__()
        self._note = note

    def _apply(self, world: World) -> str:
        record = world.add_record(self._note)
        return f"Recorded at {world.view.with_instant(record.instant)}"
