"""
Calendar System Module.

Provides the immutable description of a world's time structure and the
cycle arithmetic derived from it. Supports irregular month lengths,
arbitrary week lengths, arbitrary second/minute/hour counts, and
overlapping eras that renumber years.

A calendar never owns an instant. Instants are plain second counts
(see ``almanac.core.instant``); a ``CalendarView`` pairs the two.

Classes:
    MonthDefinition: Definition of a calendar month.
    WeekDay: Definition of a single week day.
    Era: A named, possibly open-ended range of years.
    CalendarDefinition: Complete, validated calendar for a world.
"""

import json
import logging
import math
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from almanac.core.errors import CalendarConfigError, InvalidDateError, InvalidTimeError
from almanac.core.instant import RawDate, RawTime, TimeFormat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthDefinition:
    """
    Definition of a calendar month.

    Attributes:
        name: Full month name (e.g., "Hammer", "January").
        days: Number of days in this month (must be > 0).
    """

    name: str
    days: int

    def to_dict(self) -> Dict[str, Any]:
        """
        Converts the MonthDefinition to a dictionary for serialization.

        Returns:
            Dict[str, Any]: Dictionary representation.
        """
        return {"name": self.name, "days": self.days}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonthDefinition":
        """
        Creates a MonthDefinition from a dictionary.

        Args:
            data: Dictionary containing month data.

        Returns:
            MonthDefinition: New instance.
        """
        return cls(name=data["name"], days=int(data["days"]))


@dataclass(frozen=True)
class WeekDay:
    """A single named day of the week."""

    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name}

    @classmethod
    def from_dict(cls, data: Any) -> "WeekDay":
        # Bare strings are accepted for hand-written calendar files.
        if isinstance(data, str):
            return cls(name=data)
        return cls(name=data["name"])


@dataclass(frozen=True)
class Era:
    """
    A contiguous block of years from which time can be referenced.

    Eras may overlap, which makes them useful for reigning monarchs or
    warring gods. An era without a start has always existed; an era
    without an end has not ended yet.

    Attributes:
        name: Display name of the era (e.g., "Common Era").
        start_year: First absolute year of the era, or None.
        end_year: Last absolute year of the era, or None.
    """

    name: str
    start_year: Optional[int] = None
    end_year: Optional[int] = None

    def contains(self, year: int) -> bool:
        """
        Checks whether an absolute year falls inside this era.

        Args:
            year: The absolute year number.

        Returns:
            bool: True if the year is within the era's bounds.
        """
        if self.start_year is None:
            return self.end_year is None or year <= self.end_year
        if year < self.start_year:
            return False
        return self.end_year is None or year <= self.end_year

    @property
    def is_open(self) -> bool:
        """True when the era has neither a start nor an end."""
        return self.start_year is None and self.end_year is None

    def to_dict(self) -> Dict[str, Any]:
        """
        Converts the Era to a dictionary for serialization.

        Returns:
            Dict[str, Any]: Dictionary representation.
        """
        return {
            "name": self.name,
            "start_year": self.start_year,
            "end_year": self.end_year,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Era":
        """
        Creates an Era from a dictionary.

        Args:
            data: Dictionary containing era data. Missing bounds are
                treated as open.

        Returns:
            Era: New instance.
        """
        start = data.get("start_year")
        end = data.get("end_year")
        return cls(
            name=data["name"],
            start_year=int(start) if start is not None else None,
            end_year=int(end) if end is not None else None,
        )


def _eras_cover_every_year(eras: Iterable[Era]) -> bool:
    """Checks that the union of the era ranges is the whole integer line."""
    spans = sorted(
        (
            -math.inf if era.start_year is None else era.start_year,
            math.inf if era.end_year is None else era.end_year,
        )
        for era in eras
    )
    if not spans or spans[0][0] != -math.inf:
        return False

    reach = spans[0][1]
    for start, end in spans[1:]:
        if start > reach + 1:
            return False
        reach = max(reach, end)
    return reach == math.inf


@dataclass(frozen=True)
class CalendarDefinition:
    """
    Complete calendar configuration for a world.

    Defines months, week days, the day cycle and optional eras. The
    definition is immutable and is validated on construction, so every
    cyclic lookup performed later (month walks, week days, era
    resolution) is guaranteed to find a match.

    Attributes:
        months: Ordered month definitions; their days sum to the year.
        week_days: Ordered week day definitions.
        seconds_per_minute: Seconds in one minute.
        minutes_per_hour: Minutes in one hour.
        hours_per_day: Hours in one day.
        eras: Ordered eras; the first containing a year wins.
        id: Unique identifier used by persistence.
        name: Display name (e.g., "Harptos Calendar").
    """

    months: Tuple[MonthDefinition, ...]
    week_days: Tuple[WeekDay, ...]
    seconds_per_minute: int = 60
    minutes_per_hour: int = 60
    hours_per_day: int = 24
    eras: Tuple[Era, ...] = ()
    id: str = field(default_factory=lambda: str(uuid.uuid4()), compare=False)
    name: str = field(default="Calendar", compare=False)

    def __post_init__(self) -> None:
        # Accept any sequence from callers but store tuples.
        object.__setattr__(self, "months", tuple(self.months))
        object.__setattr__(self, "week_days", tuple(self.week_days))
        object.__setattr__(self, "eras", tuple(self.eras))

        problems = self.validate()
        if problems:
            logger.debug(f"Rejected calendar '{self.name}': {problems}")
            raise CalendarConfigError(problems)

    def validate(self) -> List[str]:
        """
        Validates the calendar configuration.

        Returns:
            List[str]: List of validation error messages.
                       Empty list if valid.
        """
        errors: List[str] = []

        if not self.months:
            errors.append("Month list is empty. At least one month is required.")
        else:
            names = [m.name for m in self.months]
            if len(names) != len(set(names)):
                duplicates = {n for n in names if names.count(n) > 1}
                errors.append(f"Duplicate month name(s) found: {duplicates}")

            for month in self.months:
                if month.days <= 0:
                    errors.append(
                        f"Month '{month.name}' has invalid days count: {month.days}"
                    )

        if not self.week_days:
            errors.append("Week day list is empty. At least one day is required.")

        for label, value in (
            ("seconds_per_minute", self.seconds_per_minute),
            ("minutes_per_hour", self.minutes_per_hour),
            ("hours_per_day", self.hours_per_day),
        ):
            if value <= 0:
                errors.append(f"{label} must be positive, got {value}")

        for era in self.eras:
            if (
                era.start_year is not None
                and era.end_year is not None
                and era.start_year > era.end_year
            ):
                errors.append(
                    f"Era '{era.name}' ends ({era.end_year}) "
                    f"before it starts ({era.start_year})"
                )

        if self.eras and not _eras_cover_every_year(self.eras):
            errors.append(
                "Eras do not cover every year. Add an open-ended era "
                "so that every year resolves to an era."
            )

        return errors

    # ------------------------------------------------------------------
    # Cycle lengths
    # ------------------------------------------------------------------

    @property
    def seconds_per_hour(self) -> int:
        return self.seconds_per_minute * self.minutes_per_hour

    @property
    def seconds_per_day(self) -> int:
        return self.seconds_per_hour * self.hours_per_day

    @property
    def minutes_per_day(self) -> int:
        return self.minutes_per_hour * self.hours_per_day

    @property
    def days_in_year(self) -> int:
        """Total number of days in a year (sum of all month lengths)."""
        return sum(m.days for m in self.months)

    @property
    def months_in_year(self) -> int:
        return len(self.months)

    @property
    def days_in_week(self) -> int:
        return len(self.week_days)

    # ------------------------------------------------------------------
    # Unit conversions
    # ------------------------------------------------------------------

    def days_to_seconds(self, days: int) -> int:
        return days * self.seconds_per_day

    def hours_to_seconds(self, hours: int) -> int:
        return hours * self.seconds_per_hour

    def minutes_to_seconds(self, minutes: int) -> int:
        return minutes * self.seconds_per_minute

    def weeks_to_seconds(self, weeks: int) -> int:
        return self.days_to_seconds(weeks * self.days_in_week)

    def years_to_seconds(self, years: int) -> int:
        return self.days_to_seconds(years * self.days_in_year)

    def time_to_seconds(self, time: RawTime) -> int:
        """Seconds elapsed between midnight and the given time of day."""
        return (
            self.hours_to_seconds(time.hour)
            + self.minutes_to_seconds(time.minute)
            + time.second
        )

    def seconds_to_time(self, seconds: int) -> RawTime:
        """
        Splits a second count into a time of day.

        Values outside a single day wrap around, so negative counts land
        on the previous day's clock.

        Args:
            seconds: Seconds relative to some midnight.

        Returns:
            RawTime: The hour, minute and second within the day.
        """
        seconds = seconds % self.seconds_per_day
        hour, seconds = divmod(seconds, self.seconds_per_hour)
        minute, second = divmod(seconds, self.seconds_per_minute)
        return RawTime(hour=hour, minute=minute, second=second)

    def carry_seconds(self, time_of_day: int, delta: int) -> Tuple[int, int]:
        """
        Adds seconds to a time of day and splits off whole days.

        Args:
            time_of_day: Seconds since midnight (0 <= value < day length).
            delta: Seconds to add; may be negative.

        Returns:
            Tuple[int, int]: ``(extra_days, remaining_seconds)`` where the
            remainder is always within the day.
        """
        return divmod(time_of_day + delta, self.seconds_per_day)

    # ------------------------------------------------------------------
    # Month arithmetic
    # ------------------------------------------------------------------

    def months_to_days(self, months: int) -> int:
        """
        Days between the start of a year and the end of the n-th month.

        Counts past the end of the year continue cyclically into the
        following years, so ``months_to_days(months_in_year)`` equals one
        full year.

        Args:
            months: Number of months counted from the first month.

        Returns:
            int: Number of days.
        """
        years, remainder = divmod(months, self.months_in_year)
        return years * self.days_in_year + sum(
            m.days for m in self.months[:remainder]
        )

    def months_to_seconds(self, months: int) -> int:
        """
        Seconds between the start of a year and the end of the n-th month.

        Example:
            calendar.months_to_seconds(3) = January + February + March
        """
        return self.days_to_seconds(self.months_to_days(months))

    def days_to_months(self, days: int) -> Tuple[int, int]:
        """
        Finds the month owning a day count by walking the month list.

        The walk is cyclic: counts beyond the end of the year wrap into
        the next year, so the returned month index is always valid.

        Args:
            days: Days since the start of a year (0-indexed).

        Returns:
            Tuple[int, int]: ``(month_index, day_of_month)``, both 0-indexed.
        """
        remaining = days % self.days_in_year
        for index, month in enumerate(self.months):
            if remaining < month.days:
                return index, remaining
            remaining -= month.days

        # Unreachable: the remainder is always below days_in_year.
        raise CalendarConfigError([f"Day {days} does not fall in any month"])

    def month_span_days(self, start_month: int, count: int) -> int:
        """
        Sums the lengths of ``count`` consecutive months.

        Positive counts sum the months starting at ``start_month`` and
        moving forward; negative counts sum the months immediately before
        it, and the result is negated. Both directions wrap around the
        year.

        Args:
            start_month: 0-indexed month to start from.
            count: Number of months to span.

        Returns:
            int: Signed number of days covered by the span.
        """
        size = self.months_in_year
        full_years, remainder = divmod(abs(count), size)
        total = full_years * self.days_in_year

        if count >= 0:
            indices = range(start_month, start_month + remainder)
        else:
            indices = range(start_month - remainder, start_month)
        total += sum(self.months[i % size].days for i in indices)

        return total if count >= 0 else -total

    # ------------------------------------------------------------------
    # Field validation
    # ------------------------------------------------------------------

    def validate_date(self, date: RawDate) -> RawDate:
        """
        Validates a 1-indexed date against this calendar.

        Args:
            date: The date to check.

        Returns:
            RawDate: The same date, for chaining.

        Raises:
            InvalidDateError: If the month or day is out of bounds.
        """
        if date.month < 1 or date.month > self.months_in_year:
            raise InvalidDateError("month", date.month)
        if date.day < 1 or date.day > self.months[date.month - 1].days:
            raise InvalidDateError("day", date.day)
        return date

    def validate_time(self, time: RawTime) -> RawTime:
        """
        Validates a time of day against this calendar's day cycle.

        Raises:
            InvalidTimeError: If the hour, minute or second is out of bounds.
        """
        if time.hour >= self.hours_per_day:
            raise InvalidTimeError("hour", time.hour)
        if time.minute >= self.minutes_per_hour:
            raise InvalidTimeError("minute", time.minute)
        if time.second >= self.seconds_per_minute:
            raise InvalidTimeError("second", time.second)
        return time

    def time_from_hms(
        self,
        hour: int,
        minute: int = 0,
        second: int = 0,
        fmt: TimeFormat = TimeFormat.EXACT,
    ) -> RawTime:
        """
        Builds a validated time of day.

        ``AM`` and ``PM`` are offsets rather than a twelve-hour clock:
        ``AM`` keeps the hour and ``PM`` adds half of ``hours_per_day``.
        The result is then bounds-checked like any other time, so on a
        24-hour day ``12am`` is 12:00 and ``12pm`` is out of bounds.

        Args:
            hour: Hour component, interpreted according to ``fmt``.
            minute: Minute component.
            second: Second component.
            fmt: How to interpret the hour.

        Returns:
            RawTime: A time within this calendar's day.

        Raises:
            InvalidTimeError: If any component is out of bounds.
        """
        if fmt is TimeFormat.PM:
            hour += self.hours_per_day // 2

        return self.validate_time(RawTime(hour=hour, minute=minute, second=second))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Converts the CalendarDefinition to a dictionary for serialization.

        Returns:
            Dict[str, Any]: Dictionary representation.
        """
        return {
            "id": self.id,
            "name": self.name,
            "months": [m.to_dict() for m in self.months],
            "week_days": [d.to_dict() for d in self.week_days],
            "seconds_per_minute": self.seconds_per_minute,
            "minutes_per_hour": self.minutes_per_hour,
            "hours_per_day": self.hours_per_day,
            "eras": [e.to_dict() for e in self.eras],
        }

    def to_json(self) -> str:
        """
        Converts the CalendarDefinition to a JSON string.

        Returns:
            str: JSON representation.
        """
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalendarDefinition":
        """
        Creates a CalendarDefinition from a dictionary.

        Args:
            data: Dictionary containing calendar data.

        Returns:
            CalendarDefinition: New, validated instance.

        Raises:
            CalendarConfigError: If the data describes an invalid calendar.
        """
        extra: Dict[str, Any] = {}
        if data.get("id"):
            extra["id"] = data["id"]
        if data.get("name"):
            extra["name"] = data["name"]

        return cls(
            months=[MonthDefinition.from_dict(m) for m in data["months"]],
            week_days=[WeekDay.from_dict(d) for d in data["week_days"]],
            seconds_per_minute=int(data.get("seconds_per_minute", 60)),
            minutes_per_hour=int(data.get("minutes_per_hour", 60)),
            hours_per_day=int(data.get("hours_per_day", 24)),
            eras=[Era.from_dict(e) for e in data.get("eras", [])],
            **extra,
        )

    @classmethod
    def from_json(cls, json_str: str) -> "CalendarDefinition":
        """
        Creates a CalendarDefinition from a JSON string.

        Args:
            json_str: JSON string containing calendar data.

        Returns:
            CalendarDefinition: New instance.
        """
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def create_default(cls) -> "CalendarDefinition":
        """
        Creates a default calendar that roughly matches Earth.

        Twelve Gregorian months with exactly 365 days, a Monday-first
        week, a 24/60/60 day and a Common Era split at year 1.

        Returns:
            CalendarDefinition: The default calendar.
        """
        months = [
            MonthDefinition(name=name, days=days)
            for name, days in (
                ("January", 31),
                ("February", 28),
                ("March", 31),
                ("April", 30),
                ("May", 31),
                ("June", 30),
                ("July", 31),
                ("August", 31),
                ("September", 30),
                ("October", 31),
                ("November", 30),
                ("December", 31),
            )
        ]
        week_days = [
            WeekDay(name=name)
            for name in (
                "Monday",
                "Tuesday",
                "Wednesday",
                "Thursday",
                "Friday",
                "Saturday",
                "Sunday",
            )
        ]
        eras = [
            Era(name="Before Common Era", start_year=None, end_year=0),
            Era(name="Common Era", start_year=1, end_year=None),
        ]
        return cls(
            months=months,
            week_days=week_days,
            eras=eras,
            name="Default Calendar",
        )
