"""
World Clock Module.

A world couples a calendar with the world's current time and a log of
timestamped records. Time normally only moves forward; a jump opens a
rift to any other time while remembering the canonical time line so the
party can return to it.

Classes:
    Record: A note stamped with the instant it was written.
    World: Calendar, current time, canonical time and records.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from almanac.core.calendar import CalendarDefinition
from almanac.core.calendar_view import CalendarView
from almanac.core.errors import CalendarError
from almanac.core.expression import ExpressionParser
from almanac.core.instant import Instant

logger = logging.getLogger(__name__)


class TimeTravelError(CalendarError):
    """Raised when a world operation would break the flow of time."""


@dataclass
class Record:
    """
    A note stamped with the in-world instant it was written at.

    Attributes:
        note: Free text.
        instant: In-world time of the record.
        id: Unique identifier.
        created_at: Real-world creation timestamp.
    """

    note: str
    instant: Instant
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "note": self.note,
            "instant": self.instant.to_dict(),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        return cls(
            id=data["id"],
            note=data["note"],
            instant=Instant.from_dict(data["instant"]),
            created_at=data.get("created_at", time.time()),
        )


@dataclass
class World:
    """
    The state of a single world's clock.

    Attributes:
        name: Display name of the world.
        calendar: The world's calendar definition.
        time: The current in-world instant.
        canonical_time: Where the native time line was left when jumping.
            None while on the native time line.
        records: Timestamped notes, oldest first.
    """

    name: str
    calendar: CalendarDefinition
    time: Instant = field(default_factory=Instant)
    canonical_time: Optional[Instant] = None
    records: List[Record] = field(default_factory=list)

    @property
    def view(self) -> CalendarView:
        """The current time read in the world's calendar."""
        return CalendarView(self.time, self.calendar)

    @property
    def jumped(self) -> bool:
        """True while away from the canonical time line."""
        return self.canonical_time is not None

    def update_time(self, expr: str) -> Instant:
        """
        Steps forward in the flow of time.

        Args:
            expr: A time expression evaluated relative to the current time.

        Returns:
            Instant: The new current time.

        Raises:
            TimeTravelError: If the expression resolves to the past.
            CalendarError: If the expression cannot be parsed.
        """
        new_time = ExpressionParser(self.calendar).parse(expr, self.time)
        if new_time < self.time:
            raise TimeTravelError("Can't go back in time!")

        logger.info(f"World '{self.name}' stepped from {self.time.seconds} to {new_time.seconds}")
        self.time = new_time
        return new_time

    def jump_time(self, expr: str) -> Instant:
        """
        Opens a rift to another time, preserving the canonical time.

        Only the first jump records the canonical time, so a chain of
        jumps still returns to where the native time line was left.
        """
        new_time = ExpressionParser(self.calendar).parse(expr, self.time)
        if self.canonical_time is None:
            self.canonical_time = self.time

        logger.info(f"World '{self.name}' jumped to {new_time.seconds}")
        self.time = new_time
        return new_time

    def return_time(self) -> Instant:
        """
        Returns to the canonical time line.

        Raises:
            TimeTravelError: If the world is already on its canonical time.
        """
        if self.canonical_time is None:
            raise TimeTravelError("You are already in the canonical time.")

        self.time = self.canonical_time
        self.canonical_time = None
        logger.info(f"World '{self.name}' returned to {self.time.seconds}")
        return self.time

    def add_record(self, note: str) -> Record:
        """
        Records a note at the current time and advances by one second.

        The one-second step keeps records strictly ordered by instant.
        """
        record = Record(note=note, instant=self.time)
        self.records.append(record)
        self.time = self.view.add_seconds(1)
        return record

    def change_calendar(self, calendar: CalendarDefinition) -> List[str]:
        """
        Moves the world onto another calendar definition.

        Instants are linear seconds and carry over unchanged. Era tags the
        new calendar does not define are dropped, so their era is resolved
        from the year instead.

        Returns:
            List[str]: Validation problems of the moved world; empty if valid.
        """

        def retag(instant: Instant) -> Instant:
            if instant.era is not None and instant.era >= len(calendar.eras):
                return instant.with_era(None)
            return instant

        self.calendar = calendar
        self.time = retag(self.time)
        if self.canonical_time is not None:
            self.canonical_time = retag(self.canonical_time)
        for record in self.records:
            record.instant = retag(record.instant)

        logger.info(f"World '{self.name}' now runs on calendar '{calendar.name}'")
        return self.validate()

    def validate(self) -> List[str]:
        """
        Validates the world.

        Returns:
            List[str]: Validation error messages; empty if valid.
        """
        errors = self.calendar.validate()
        era_count = len(self.calendar.eras)
        instants = [self.time, *(r.instant for r in self.records)]
        if self.canonical_time is not None:
            instants.append(self.canonical_time)
        for tag in sorted({i.era for i in instants if i.era is not None}):
            if tag >= era_count:
                errors.append(
                    f"Era index {tag} is not defined in calendar '{self.calendar.name}'"
                )
        if self.records and not self.jumped:
            latest = max(r.instant for r in self.records)
            if self.time < latest:
                errors.append(
                    f"Current time {self.view} is before the latest record "
                    f"{CalendarView(latest, self.calendar)}"
                )
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "calendar": self.calendar.to_dict(),
            "time": self.time.to_dict(),
            "canonical_time": (
                self.canonical_time.to_dict() if self.canonical_time else None
            ),
            "records": [r.to_dict() for r in self.records],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "World":
        canonical = data.get("canonical_time")
        return cls(
            name=data["name"],
            calendar=CalendarDefinition.from_dict(data["calendar"]),
            time=Instant.from_dict(data.get("time", {"seconds": 0})),
            canonical_time=Instant.from_dict(canonical) if canonical else None,
            records=[Record.from_dict(r) for r in data.get("records", [])],
        )
