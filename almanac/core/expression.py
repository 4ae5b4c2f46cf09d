"""
Time Expression Module.

Turns human-typed strings into instants. Parsing happens in two steps:
``lex`` matches the text against an ordered list of grammars and yields
a tagged expression, and ``evaluate`` applies that expression to a
reference instant using ``CalendarView`` arithmetic.

Grammars, in priority order (first match wins):

    1101-02-12          absolute date (no reference needed)
    long rest           keyword: +8 hours
    short rest          keyword: +4 hours
    midday, midnight    keyword: wait until that time
    1y32mo6d3s          relative duration, applied left to right
    8am, 2pm            clock time: wait until that hour

Classes:
    DurationUnit: Unit suffixes of a relative duration.
    Keyword: Named keyword expressions.
    AbsoluteDate, KeywordExpression, RelativeDuration, ClockTime:
        Parsed expression variants.
    ExpressionParser: Lexer and evaluator bound to a calendar.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

from almanac.core.calendar import CalendarDefinition
from almanac.core.calendar_view import CalendarView, WaitTarget
from almanac.core.errors import InvalidFormatError, NoReferencePointError
from almanac.core.instant import Instant, TimeFormat

logger = logging.getLogger(__name__)

_DATE = re.compile(r"(\d+)-(\d+)-(\d+)")
_RELATIVE = re.compile(r"(?:\d+(?:mo|[ywdhms]))+")
# "mo" must come before the single letters or "1mo" would lex as minutes.
_RELATIVE_TERM = re.compile(r"(\d+)(mo|[ywdhms])")
_CLOCK = re.compile(r"(\d+)(am|pm)")


class DurationUnit(Enum):
    """Suffixes accepted in a relative duration."""

    YEAR = "y"
    MONTH = "mo"
    WEEK = "w"
    DAY = "d"
    HOUR = "h"
    MINUTE = "m"
    SECOND = "s"


class Keyword(Enum):
    """Named expressions."""

    LONG_REST = "long rest"
    SHORT_REST = "short rest"
    MIDDAY = "midday"
    MIDNIGHT = "midnight"


REST_HOURS = {Keyword.LONG_REST: 8, Keyword.SHORT_REST: 4}


@dataclass(frozen=True)
class AbsoluteDate:
    """A fixed date, e.g. ``2020-01-04``."""

    year: int
    month: int
    day: int


@dataclass(frozen=True)
class KeywordExpression:
    keyword: Keyword


@dataclass(frozen=True)
class RelativeDuration:
    """A sequence of ``(amount, unit)`` terms, applied left to right."""

    terms: Tuple[Tuple[int, DurationUnit], ...]


@dataclass(frozen=True)
class ClockTime:
    """An hour with an AM or PM offset, e.g. ``8am``."""

    hour: int
    fmt: TimeFormat


ParsedExpression = Union[AbsoluteDate, KeywordExpression, RelativeDuration, ClockTime]


def _lex_date(text: str) -> Optional[ParsedExpression]:
    match = _DATE.fullmatch(text)
    if not match:
        return None
    year, month, day = (int(g) for g in match.groups())
    return AbsoluteDate(year=year, month=month, day=day)


def _lex_keyword(text: str) -> Optional[ParsedExpression]:
    try:
        return KeywordExpression(Keyword(text))
    except ValueError:
        return None


def _lex_relative(text: str) -> Optional[ParsedExpression]:
    if not _RELATIVE.fullmatch(text):
        return None
    terms = tuple(
        (int(amount), DurationUnit(unit))
        for amount, unit in _RELATIVE_TERM.findall(text)
    )
    return RelativeDuration(terms=terms)


def _lex_clock(text: str) -> Optional[ParsedExpression]:
    match = _CLOCK.fullmatch(text)
    if not match:
        return None
    hour, suffix = match.groups()
    return ClockTime(hour=int(hour), fmt=TimeFormat(suffix))


GRAMMARS: List[Callable[[str], Optional[ParsedExpression]]] = [
    _lex_date,
    _lex_keyword,
    _lex_relative,
    _lex_clock,
]


def lex(text: str) -> ParsedExpression:
    """
    Matches text against each grammar in priority order.

    Args:
        text: The expression; surrounding whitespace is ignored.

    Returns:
        ParsedExpression: The first grammar's result.

    Raises:
        InvalidFormatError: If no grammar matches.
    """
    stripped = text.strip()
    for grammar in GRAMMARS:
        parsed = grammar(stripped)
        if parsed is not None:
            logger.debug(f"Lexed {text!r} as {parsed}")
            return parsed
    raise InvalidFormatError(text)


class ExpressionParser:
    """
    Parses time expressions against a calendar.

    Example:
        >>> cal = CalendarDefinition.create_default()
        >>> parser = ExpressionParser(cal)
        >>> start = parser.parse("0001-01-01")
        >>> CalendarView(parser.parse("1y1mo", start), cal).raw_date
        RawDate(year=2, month=2, day=1)
    """

    def __init__(self, calendar: CalendarDefinition):
        """
        Args:
            calendar: The calendar used to evaluate expressions.
        """
        self._calendar = calendar

    @property
    def calendar(self) -> CalendarDefinition:
        return self._calendar

    def parse(self, text: str, reference: Optional[Instant] = None) -> Instant:
        """
        Parses an expression into an instant.

        Args:
            text: The expression to parse.
            reference: The instant relative expressions start from.

        Returns:
            Instant: The resulting instant.

        Raises:
            InvalidFormatError: If the text matches no grammar.
            NoReferencePointError: If a relative expression has no reference.
            InvalidDateError: If an absolute date is out of bounds.
            InvalidTimeError: If a clock time is out of bounds.
        """
        return self.evaluate(lex(text), reference, text)

    def evaluate(
        self,
        expression: ParsedExpression,
        reference: Optional[Instant] = None,
        text: str = "",
    ) -> Instant:
        """
        Applies a parsed expression.

        Args:
            expression: Output of ``lex``.
            reference: The instant relative expressions start from.
            text: Original input, used in error messages.

        Returns:
            Instant: The resulting instant.
        """
        if isinstance(expression, AbsoluteDate):
            return CalendarView.from_date(
                expression.year, expression.month, expression.day, self._calendar
            ).instant

        if reference is None:
            raise NoReferencePointError(text or str(expression))
        view = CalendarView(reference, self._calendar)

        if isinstance(expression, KeywordExpression):
            return self._evaluate_keyword(expression.keyword, view)
        if isinstance(expression, RelativeDuration):
            return self._evaluate_relative(expression, view)
        if isinstance(expression, ClockTime):
            time = self._calendar.time_from_hms(expression.hour, fmt=expression.fmt)
            return view.wait_until(time)

        raise InvalidFormatError(text or str(expression))

    def _evaluate_keyword(self, keyword: Keyword, view: CalendarView) -> Instant:
        if keyword is Keyword.MIDDAY:
            return view.wait_until(WaitTarget.MIDDAY)
        if keyword is Keyword.MIDNIGHT:
            return view.wait_until(WaitTarget.MIDNIGHT)
        return view.add_hours(REST_HOURS[keyword])

    def _evaluate_relative(
        self, expression: RelativeDuration, view: CalendarView
    ) -> Instant:
        operations = {
            DurationUnit.YEAR: CalendarView.add_years,
            DurationUnit.MONTH: CalendarView.add_months,
            DurationUnit.WEEK: CalendarView.add_weeks,
            DurationUnit.DAY: CalendarView.add_days,
            DurationUnit.HOUR: CalendarView.add_hours,
            DurationUnit.MINUTE: CalendarView.add_minutes,
            DurationUnit.SECOND: CalendarView.add_seconds,
        }
        for amount, unit in expression.terms:
            view = view.with_instant(operations[unit](view, amount))
        return view.instant


def parse(
    text: str, calendar: CalendarDefinition, reference: Optional[Instant] = None
) -> Instant:
    """Shortcut for ``ExpressionParser(calendar).parse(text, reference)``."""
    return ExpressionParser(calendar).parse(text, reference)
