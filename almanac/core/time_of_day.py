"""
Time of Day Module.

Coarse, human-friendly descriptions of the hour. The day is split into
eight equal buckets scaled by the calendar's hours per day, so a world
with a 16-hour day still gets a dawn and a dusk.
"""

from enum import Enum

from almanac.core.errors import InvalidTimeError


class TimeOfDay(Enum):
    """One eighth of a day, in order starting at midnight."""

    LATE_NIGHT = 0
    DAWN = 1
    SUNRISE = 2
    MORNING = 3
    AFTERNOON = 4
    SUNSET = 5
    DUSK = 6
    NIGHT = 7

    @classmethod
    def from_hour(cls, hour: int, hours_per_day: int) -> "TimeOfDay":
        """
        Gets the time of day for a given hour.

        Args:
            hour: The current hour (0 <= hour < hours_per_day).
            hours_per_day: Hours in a day for the calendar in use.

        Returns:
            TimeOfDay: The bucket containing the hour.

        Raises:
            InvalidTimeError: If the hour is outside the day.
        """
        if hour < 0 or hour >= hours_per_day:
            raise InvalidTimeError("hour", hour)
        return cls(hour * len(cls) // hours_per_day)

    @property
    def label(self) -> str:
        """Prose used when describing the current time."""
        return _LABELS[self]

    @property
    def is_day(self) -> bool:
        """True while the sun is up."""
        return self in _DAYLIGHT

    def __str__(self) -> str:
        return self.label


_LABELS = {
    TimeOfDay.LATE_NIGHT: "late in the night",
    TimeOfDay.DAWN: "at dawn",
    TimeOfDay.SUNRISE: "just after sunrise",
    TimeOfDay.MORNING: "in the morning",
    TimeOfDay.AFTERNOON: "in the afternoon",
    TimeOfDay.SUNSET: "just before sunset",
    TimeOfDay.DUSK: "in the evening",
    TimeOfDay.NIGHT: "at night",
}

_DAYLIGHT = frozenset(
    {TimeOfDay.SUNRISE, TimeOfDay.MORNING, TimeOfDay.AFTERNOON, TimeOfDay.SUNSET}
)
