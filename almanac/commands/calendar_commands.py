"""
Calendar Commands Module.

Undoable changes to the stored calendar definitions. A database holds one
world, and the calendar it runs on is protected: it cannot be deleted,
and replacing it moves the world onto the new definition.

Classes:
    CreateCalendarCommand: Stores a new definition, optionally activating it.
    ReplaceCalendarCommand: Stores a new definition under an existing id.
    DeleteCalendarCommand: Removes a definition no world runs on.
    SetActiveCalendarCommand: Chooses the default calendar for new worlds.
"""

import logging
from typing import Any, Dict, Optional

from almanac.commands.base_command import BaseCommand, CommandResult
from almanac.core.calendar import CalendarDefinition
from almanac.core.world import World
from almanac.services.db_service import DatabaseService

logger = logging.getLogger(__name__)


def _active_id(db_service: DatabaseService) -> Optional[str]:
    active = db_service.get_active_calendar_config()
    return active.id if active else None


class CreateCalendarCommand(BaseCommand):
    """
    Stores a new calendar definition.

    With ``activate`` the definition also becomes the active calendar;
    undo then restores whichever calendar was active before.
    """

    def __init__(self, calendar: CalendarDefinition, activate: bool = False):
        super().__init__()
        self._calendar = calendar
        self._activate = activate
        self._previous_active: Optional[str] = None

    def _run(self, db_service: DatabaseService) -> CommandResult:
        if db_service.get_calendar_config(self._calendar.id) is not None:
            raise ValueError(f"Calendar already exists: {self._calendar.id}")

        self._previous_active = _active_id(db_service)
        with db_service.transaction():
            db_service.insert_calendar_config(self._calendar)
            if self._activate:
                db_service.set_active_calendar_config(self._calendar.id)

        return self._ok(
            f"Created calendar '{self._calendar.name}'",
            id=self._calendar.id,
            active=self._activate,
        )

    def _revert(self, db_service: DatabaseService) -> None:
        with db_service.transaction():
            if self._activate:
                db_service.set_active_calendar_config(self._previous_active)
            db_service.delete_calendar_config(self._calendar.id)


class ReplaceCalendarCommand(BaseCommand):
    """
    Stores a new definition under the id of an existing one.

    If the world runs on that calendar it is moved onto the new
    definition (see ``World.change_calendar``). The replacement is
    refused when the moved world would no longer validate. Undo puts back
    the old definition and the world exactly as they were.
    """

    def __init__(self, calendar: CalendarDefinition):
        super().__init__()
        self._calendar = calendar
        self._previous: Optional[CalendarDefinition] = None
        self._world_snapshot: Optional[Dict[str, Any]] = None

    def _run(self, db_service: DatabaseService) -> CommandResult:
        self._previous = db_service.get_calendar_config(self._calendar.id)
        if self._previous is None:
            raise LookupError(f"Calendar not found: {self._calendar.id}")

        world = None
        self._world_snapshot = None
        if db_service.get_world_calendar_id() == self._calendar.id:
            world = db_service.get_world()
        if world is not None:
            self._world_snapshot = world.to_dict()
            problems = world.change_calendar(self._calendar)
            if problems:
                return self._fail(
                    f"World '{world.name}' does not fit the new calendar", problems
                )

        with db_service.transaction():
            if world is not None:
                db_service.save_world(world)
            else:
                db_service.insert_calendar_config(self._calendar)

        return self._ok(
            f"Replaced calendar '{self._calendar.name}'",
            id=self._calendar.id,
            world=world.name if world else None,
        )

    def _revert(self, db_service: DatabaseService) -> None:
        assert self._previous is not None
        with db_service.transaction():
            if self._world_snapshot is not None:
                db_service.save_world(World.from_dict(self._world_snapshot))
            else:
                db_service.insert_calendar_config(self._previous)


class DeleteCalendarCommand(BaseCommand):
    """
    Deletes a calendar definition.

    The calendar the world runs on cannot be deleted. Undo restores the
    definition together with its active flag.
    """

    def __init__(self, calendar_id: str):
        super().__init__()
        self._calendar_id = calendar_id
        self._deleted: Optional[CalendarDefinition] = None
        self._was_active = False

    def _run(self, db_service: DatabaseService) -> CommandResult:
        self._deleted = db_service.get_calendar_config(self._calendar_id)
        if self._deleted is None:
            raise LookupError(f"Calendar not found: {self._calendar_id}")
        if db_service.get_world_calendar_id() == self._calendar_id:
            world = db_service.get_world()
            world_name = world.name if world else "?"
            return self._fail(
                f"Calendar '{self._deleted.name}' is in use by world '{world_name}'"
            )

        self._was_active = db_service.is_calendar_active(self._calendar_id)
        db_service.delete_calendar_config(self._calendar_id)
        return self._ok(
            f"Deleted calendar '{self._deleted.name}'", id=self._calendar_id
        )

    def _revert(self, db_service: DatabaseService) -> None:
        assert self._deleted is not None
        db_service.insert_calendar_config(self._deleted, is_active=self._was_active)


class SetActiveCalendarCommand(BaseCommand):
    """
    Makes a calendar the active one, used by ``init`` when no calendar is
    named. Undo reactivates the previous calendar, or none.
    """

    def __init__(self, calendar_id: str):
        super().__init__()
        self._calendar_id = calendar_id
        self._previous_active: Optional[str] = None

    def _run(self, db_service: DatabaseService) -> CommandResult:
        self._previous_active = _active_id(db_service)
        db_service.set_active_calendar_config(self._calendar_id)
        return self._ok(f"Calendar {self._calendar_id} is now active", id=self._calendar_id)

    def _revert(self, db_service: DatabaseService) -> None:
        db_service.set_active_calendar_config(self._previous_active)
