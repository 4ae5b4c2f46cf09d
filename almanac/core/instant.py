"""
Instant Module.

Calendar-independent value types. An ``Instant`` is a signed count of
seconds since the epoch (year 1, month 1, day 1, midnight) and is the
only form of time that is ever persisted. ``RawDate``, ``RawTime`` and
``RawDateTime`` are the structured, calendar-free field groups used for
display and serialization.

Classes:
    Instant: Linear point in time, optionally tagged with an era index.
    RawDate: Year, month and day (1-indexed month and day).
    RawTime: Hour, minute and second.
    RawDateTime: A date paired with a time.
    TimeFormat: How an hour value should be interpreted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from almanac.core.errors import InvalidDateError, InvalidTimeError


class TimeFormat(Enum):
    """How to interpret an hour value when building a time of day."""

    EXACT = "exact"
    AM = "am"
    PM = "pm"


@dataclass(frozen=True, order=True)
class Instant:
    """
    A point in time as a signed number of seconds since the epoch.

    Ordering and equality consider only ``seconds``; the optional era
    tag selects a numbering scheme for display and does not move the
    instant on the time axis.

    Attributes:
        seconds: Seconds since year 1, month 1, day 1, 00:00:00.
        era: Optional index into the calendar's era list.
    """

    seconds: int = 0
    era: Optional[int] = field(default=None, compare=False)

    def shifted(self, delta: int) -> "Instant":
        """Returns a new instant ``delta`` seconds later, keeping the era."""
        return Instant(seconds=self.seconds + delta, era=self.era)

    def with_era(self, era: Optional[int]) -> "Instant":
        return Instant(seconds=self.seconds, era=era)

    def seconds_modulo(self, period: int) -> int:
        """
        Gets the seconds this instant represents modulo some period.

        Used by orbital phase calculations. The result is never negative.

        Args:
            period: The period length in seconds (must be positive).

        Returns:
            int: ``seconds mod period``.
        """
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        return self.seconds % period

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"seconds": self.seconds}
        if self.era is not None:
            data["era"] = self.era
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Instant":
        era = data.get("era")
        return cls(seconds=int(data["seconds"]), era=int(era) if era is not None else None)


@dataclass(frozen=True, order=True)
class RawDate:
    """
    A date without a calendar.

    Month and day are 1-indexed, matching what users type and read.
    Zero or negative values are rejected on construction; upper bounds
    depend on a calendar and are checked by
    ``CalendarDefinition.validate_date``.

    Attributes:
        year: Year number (can be zero or negative before the epoch).
        month: Month number, starting at 1.
        day: Day of the month, starting at 1.
    """

    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        if self.month < 1:
            raise InvalidDateError("month", self.month)
        if self.day < 1:
            raise InvalidDateError("day", self.day)

    def __str__(self) -> str:
        sign = "-" if self.year < 0 else ""
        return f"{sign}{abs(self.year):04d}-{self.month:02d}-{self.day:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {"year": self.year, "month": self.month, "day": self.day}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawDate":
        return cls(year=int(data["year"]), month=int(data["month"]), day=int(data["day"]))


@dataclass(frozen=True, order=True)
class RawTime:
    """
    A time of day without a calendar.

    Attributes:
        hour: Hours since midnight.
        minute: Minutes within the hour.
        second: Seconds within the minute.
    """

    hour: int = 0
    minute: int = 0
    second: int = 0

    def __post_init__(self) -> None:
        for name in ("hour", "minute", "second"):
            value = getattr(self, name)
            if value < 0:
                raise InvalidTimeError(name, value)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {"hour": self.hour, "minute": self.minute, "second": self.second}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawTime":
        return cls(
            hour=int(data.get("hour", 0)),
            minute=int(data.get("minute", 0)),
            second=int(data.get("second", 0)),
        )


@dataclass(frozen=True, order=True)
class RawDateTime:
    """A date and a time of day, displayed as ``YYYY-MM-DDTHH:MM:SSZ``."""

    date: RawDate
    time: RawTime = field(default_factory=RawTime)

    def __str__(self) -> str:
        return f"{self.date}T{self.time}Z"

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.to_dict(), "time": self.time.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawDateTime":
        return cls(
            date=RawDate.from_dict(data["date"]),
            time=RawTime.from_dict(data.get("time", {})),
        )
