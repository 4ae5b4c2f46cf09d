"""
Calendar View Module.

Pairs an ``Instant`` with a ``CalendarDefinition`` to read calendar
fields and to perform calendar-aware arithmetic. The view owns neither
object: the calendar is shared by reference and every arithmetic
operation returns a new ``Instant``.

Internal indexing is 0-based (year offset, month index, day index);
everything exposed to callers is 1-based (Year 1, Month 1, Day 1).

Classes:
    WaitTarget: Convenience targets for ``CalendarView.wait_until``.
    CalendarView: Read and arithmetic operations over an instant.
"""

import logging
from enum import Enum
from typing import Optional, Tuple, Union

from almanac.core.calendar import CalendarDefinition, Era
from almanac.core.eras import EraResolver
from almanac.core.errors import (
    BackwardsWaitError,
    CalendarConfigError,
    InvalidTimeError,
    InvalidWaitError,
)
from almanac.core.instant import Instant, RawDate, RawDateTime, RawTime
from almanac.core.time_of_day import TimeOfDay

logger = logging.getLogger(__name__)


class WaitTarget(Enum):
    """Targets that can be waited for regardless of the day cycle."""

    MIDNIGHT = "midnight"
    MIDDAY = "midday"


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


class CalendarView:
    """
    Read-only pairing of an instant with the calendar it is read in.

    Example:
        >>> cal = CalendarDefinition.create_default()
        >>> view = CalendarView.from_date(2020, 9, 9, cal)
        >>> later = CalendarView(view.add_hours(28), cal)
        >>> later.day, later.hour
        (10, 4)
    """

    def __init__(self, instant: Instant, calendar: CalendarDefinition):
        """
        Args:
            instant: The point in time to read.
            calendar: The calendar that gives the instant its fields.
        """
        self._instant = instant
        self._calendar = calendar

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_seconds(cls, seconds: int, calendar: CalendarDefinition) -> "CalendarView":
        return cls(Instant(seconds), calendar)

    @classmethod
    def from_date(
        cls,
        year: int,
        month: int,
        day: int,
        calendar: CalendarDefinition,
        time: Optional[RawTime] = None,
        era: Optional[int] = None,
    ) -> "CalendarView":
        """
        Creates a view from 1-indexed date components.

        Args:
            year: Absolute year (year 1 starts at the epoch).
            month: Month number, starting at 1.
            day: Day of the month, starting at 1.
            calendar: The calendar the components belong to.
            time: Optional time of day; midnight when omitted.
            era: Optional era index to tag the instant with.

        Returns:
            CalendarView: A view over the composed instant.

        Raises:
            InvalidDateError: If the month or day is out of bounds.
            InvalidTimeError: If the time is out of bounds.
        """
        date = calendar.validate_date(RawDate(year=year, month=month, day=day))
        time_seconds = 0
        if time is not None:
            time_seconds = calendar.time_to_seconds(calendar.validate_time(time))

        day_of_year = calendar.months_to_days(date.month - 1) + (date.day - 1)
        total_days = (date.year - 1) * calendar.days_in_year + day_of_year
        seconds = calendar.days_to_seconds(total_days) + time_seconds
        return cls(Instant(seconds=seconds, era=era), calendar)

    @classmethod
    def from_datetime(
        cls, value: RawDateTime, calendar: CalendarDefinition
    ) -> "CalendarView":
        return cls.from_date(
            value.date.year, value.date.month, value.date.day, calendar, value.time
        )

    @classmethod
    def from_era_date(
        cls,
        era_name: str,
        year: int,
        month: int,
        day: int,
        calendar: CalendarDefinition,
        time: Optional[RawTime] = None,
    ) -> "CalendarView":
        """
        Creates a view from an era-relative year.

        The resulting instant is tagged with the era, so it keeps being
        displayed in that era's numbering even after arithmetic carries
        it past the era's end.

        Raises:
            CalendarConfigError: If the calendar has no era with that name.
        """
        resolver = EraResolver(calendar.eras)
        era = resolver.find(era_name)
        absolute = resolver.absolute_year(era, year)
        return cls.from_date(
            absolute, month, day, calendar, time, era=calendar.eras.index(era)
        )

    # ------------------------------------------------------------------
    # Basic accessors
    # ------------------------------------------------------------------

    @property
    def instant(self) -> Instant:
        return self._instant

    @property
    def calendar(self) -> CalendarDefinition:
        return self._calendar

    @property
    def seconds(self) -> int:
        return self._instant.seconds

    def with_instant(self, instant: Instant) -> "CalendarView":
        """Returns a view of another instant in the same calendar."""
        return CalendarView(instant, self._calendar)

    def seconds_modulo(self, period: int) -> int:
        return self._instant.seconds_modulo(period)

    # ------------------------------------------------------------------
    # Time fields
    # ------------------------------------------------------------------

    @property
    def time_of_day_seconds(self) -> int:
        """Seconds since midnight; never negative."""
        return self.seconds % self._calendar.seconds_per_day

    @property
    def hour(self) -> int:
        return self.time_of_day_seconds // self._calendar.seconds_per_hour

    @property
    def minute(self) -> int:
        return (
            self.time_of_day_seconds // self._calendar.seconds_per_minute
        ) % self._calendar.minutes_per_hour

    @property
    def second(self) -> int:
        return self.time_of_day_seconds % self._calendar.seconds_per_minute

    @property
    def raw_time(self) -> RawTime:
        return RawTime(hour=self.hour, minute=self.minute, second=self.second)

    @property
    def time_of_day(self) -> TimeOfDay:
        return TimeOfDay.from_hour(self.hour, self._calendar.hours_per_day)

    @property
    def is_daylight(self) -> bool:
        return self.time_of_day.is_day

    # ------------------------------------------------------------------
    # Date fields
    # ------------------------------------------------------------------

    @property
    def total_days(self) -> int:
        """Whole days since the epoch, floored toward negative infinity."""
        return self.seconds // self._calendar.seconds_per_day

    def _date_parts(self) -> Tuple[int, int, int, int]:
        """Returns (year_offset, day_of_year, month_index, day_index)."""
        year_offset, day_of_year = divmod(self.total_days, self._calendar.days_in_year)
        month_index, day_index = self._calendar.days_to_months(day_of_year)
        return year_offset, day_of_year, month_index, day_index

    @property
    def year(self) -> int:
        """Absolute year; the epoch is the first day of year 1."""
        return self._date_parts()[0] + 1

    @property
    def day_of_year(self) -> int:
        return self._date_parts()[1] + 1

    @property
    def month(self) -> int:
        return self._date_parts()[2] + 1

    @property
    def day(self) -> int:
        """Day of the month, starting at 1."""
        return self._date_parts()[3] + 1

    @property
    def month_name(self) -> str:
        return self._calendar.months[self._date_parts()[2]].name

    @property
    def week_day(self) -> int:
        """
        Day of the week, starting at 1.

        Computed from the absolute day count so that the week runs on
        uninterrupted across year and era boundaries.
        """
        return self.total_days % self._calendar.days_in_week + 1

    @property
    def week_day_name(self) -> str:
        return self._calendar.week_days[self.week_day - 1].name

    @property
    def raw_date(self) -> RawDate:
        year_offset, _, month_index, day_index = self._date_parts()
        return RawDate(year=year_offset + 1, month=month_index + 1, day=day_index + 1)

    @property
    def raw_datetime(self) -> RawDateTime:
        return RawDateTime(date=self.raw_date, time=self.raw_time)

    # ------------------------------------------------------------------
    # Eras
    # ------------------------------------------------------------------

    @property
    def era(self) -> Optional[Era]:
        """
        The era this instant is numbered in.

        An era tag on the instant takes precedence; otherwise the first
        era containing the absolute year is used. Calendars without eras
        return None.

        Raises:
            CalendarConfigError: If the instant's era tag does not exist
                in this calendar.
        """
        eras = self._calendar.eras
        tag = self._instant.era
        if tag is not None:
            if not 0 <= tag < len(eras):
                raise CalendarConfigError(
                    [f"Era index {tag} is not defined in calendar '{self._calendar.name}'"]
                )
            return eras[tag]
        if not eras:
            return None
        return EraResolver(eras).resolve(self.year)

    @property
    def era_year(self) -> int:
        """The year as displayed in the current era's numbering."""
        era = self.era
        if era is None:
            return self.year
        return EraResolver(self._calendar.eras).displayed_year(self.year, era)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def split_seconds(self, seconds: int) -> Tuple[RawTime, int]:
        """
        Adds seconds to the time of day without touching the date.

        Args:
            seconds: Seconds to add; may be negative.

        Returns:
            Tuple[RawTime, int]: The new time of day and the number of
            whole days carried over, which the caller folds into the date.
        """
        extra_days, remaining = self._calendar.carry_seconds(
            self.time_of_day_seconds, seconds
        )
        return self._calendar.seconds_to_time(remaining), extra_days

    def add_seconds(self, seconds: int) -> Instant:
        time, extra_days = self.split_seconds(seconds)
        midnight = self._calendar.days_to_seconds(self.total_days)
        same_day = Instant(
            seconds=midnight + self._calendar.time_to_seconds(time),
            era=self._instant.era,
        )
        return self.with_instant(same_day).add_days(extra_days)

    def add_minutes(self, minutes: int) -> Instant:
        return self.add_seconds(self._calendar.minutes_to_seconds(minutes))

    def add_hours(self, hours: int) -> Instant:
        return self.add_seconds(self._calendar.hours_to_seconds(hours))

    def add_days(self, days: int) -> Instant:
        if days == 0:
            return self._instant
        return self._instant.shifted(self._calendar.days_to_seconds(days))

    def add_weeks(self, weeks: int) -> Instant:
        return self.add_days(weeks * self._calendar.days_in_week)

    def add_months(self, months: int) -> Instant:
        """
        Moves forward (or backward) by whole months.

        Months have irregular lengths, so the move is converted into the
        number of days spanned by the ``months`` months starting at the
        current one, then applied with ``add_days``. The day of the month
        is preserved whenever it exists in the destination month. When it
        does not (the 31st moved into a 30-day month), the surplus days
        spill into the following month.

        Args:
            months: Number of months to add; may be negative.

        Returns:
            Instant: The moved instant.
        """
        if months == 0:
            return self._instant
        month_index = self._date_parts()[2]
        return self.add_days(self._calendar.month_span_days(month_index, months))

    def add_years(self, years: int) -> Instant:
        """
        Increments the year field, keeping month, day and time of day.

        This recomposes the date rather than adding a fixed number of
        seconds, so the era tag and calendar fields stay consistent.
        """
        if years == 0:
            return self._instant
        date = self.raw_date
        moved = CalendarView.from_date(
            date.year + years,
            date.month,
            date.day,
            self._calendar,
            self.raw_time,
            era=self._instant.era,
        )
        return moved.instant

    # ------------------------------------------------------------------
    # Waiting
    # ------------------------------------------------------------------

    def _wait_target_time(self, target: Union[RawTime, WaitTarget]) -> RawTime:
        if target is WaitTarget.MIDNIGHT:
            return RawTime(hour=0)
        if target is WaitTarget.MIDDAY:
            return RawTime(hour=self._calendar.hours_per_day // 2)
        return target

    def wait_until(
        self, target: Union[RawTime, WaitTarget], same_day: bool = False
    ) -> Instant:
        """
        Progresses time forward to the next occurrence of a time of day.

        Args:
            target: An exact time of day, or a convenience target.
            same_day: If True, refuse to wrap into the next day.

        Returns:
            Instant: The first instant after this one whose time of day
            equals the target. A target equal to the current time wraps
            to the next day.

        Raises:
            InvalidWaitError: If the target is not a valid time of day.
            BackwardsWaitError: If ``same_day`` is set and the target is
                not later today.
        """
        time = self._wait_target_time(target)
        try:
            self._calendar.validate_time(time)
        except InvalidTimeError as e:
            raise InvalidWaitError(f"the time is out of bounds: {e}") from e

        current = self.time_of_day_seconds
        wanted = self._calendar.time_to_seconds(time)

        if wanted > current:
            delta = wanted - current
        elif same_day:
            raise BackwardsWaitError(time, self.raw_time)
        else:
            delta = self._calendar.seconds_per_day - current + wanted

        return self.add_seconds(delta)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def describe(self) -> str:
        """
        Describes the instant in prose.

        Returns:
            str: e.g. "It is 09:00, in the morning on Monday the 1st day
            of January in the year 1".
        """
        era = self.era
        year = f"the year {self.era_year}"
        if era is not None:
            year = f"{year} of the {era.name}"
        return (
            f"It is {self.hour:02d}:{self.minute:02d}, {self.time_of_day.label} "
            f"on {self.week_day_name} the {_ordinal(self.day)} day of "
            f"{self.month_name} in {year}"
        )

    def __str__(self) -> str:
        return str(self.raw_datetime)

    def __repr__(self) -> str:
        return f"CalendarView({self.raw_datetime}, calendar={self._calendar.name!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CalendarView):
            return NotImplemented
        return self._instant == other._instant and self._calendar == other._calendar

    def __hash__(self) -> int:
        return hash(self._instant)
