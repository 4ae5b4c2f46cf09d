"""
Calendar Errors Module.

Exception hierarchy raised by the calendar engine. Every error is
recoverable; callers catch ``CalendarError`` (or a subclass) and present
the message to the user.

Classes:
    CalendarError: Base class for all engine errors.
    CalendarConfigError: A calendar definition is structurally invalid.
    InvalidDateError: A month or day is out of bounds.
    InvalidTimeError: An hour, minute or second is out of bounds.
    InvalidWaitError: A wait target could not be built or reached.
    BackwardsWaitError: A same-day wait would have to go backwards.
    ExpressionError: Base class for expression parsing errors.
    InvalidFormatError: No expression grammar matched the input.
    NoReferencePointError: A relative expression had no reference instant.
"""

from typing import Any, List, Optional


class CalendarError(Exception):
    """Base class for all calendar engine errors."""


class CalendarConfigError(CalendarError):
    """
    Raised when a calendar definition fails validation.

    Attributes:
        problems: Every validation message that was collected.
    """

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "invalid calendar")


class _FieldError(CalendarError):
    """A single named field held a value outside its bounds."""

    def __init__(self, field_name: str, value: Any):
        self.field_name = field_name
        self.value = value
        super().__init__(f"{field_name} {value} is out of bounds")


class InvalidDateError(_FieldError):
    """Raised when a month or day is zero or exceeds the calendar."""


class InvalidTimeError(_FieldError):
    """Raised when an hour, minute or second exceeds the day cycle."""


class InvalidWaitError(CalendarError):
    """Raised when a wait target is invalid or cannot be reached."""


class BackwardsWaitError(InvalidWaitError):
    """
    Raised by a same-day wait whose target is not after the current time.

    Attributes:
        target: The requested time of day.
        current: The time of day the wait started from.
    """

    def __init__(self, target: Any, current: Any):
        self.target = target
        self.current = current
        super().__init__(f"the wait target {target} is before current {current}")


class ExpressionError(CalendarError):
    """Base class for errors raised while parsing a time expression."""

    def __init__(self, message: str, text: Optional[str] = None):
        self.text = text
        super().__init__(message)


class InvalidFormatError(ExpressionError):
    """Raised when no expression grammar matches the input text."""

    def __init__(self, text: str):
        super().__init__(f"invalid format: {text!r}", text)


class NoReferencePointError(ExpressionError):
    """Raised when a relative expression is given without a reference."""

    def __init__(self, text: str):
        super().__init__("relative time given with no reference point", text)
