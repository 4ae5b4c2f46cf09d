"""
Instant and Raw Value Unit Tests.
"""

import pytest

from almanac.core.errors import InvalidDateError, InvalidTimeError
from almanac.core.instant import Instant, RawDate, RawDateTime, RawTime


class TestInstant:
    def test_default_is_epoch(self):
        assert Instant().seconds == 0
        assert Instant().era is None

    def test_ordering_uses_seconds(self):
        assert Instant(-5) < Instant(0) < Instant(10)
        assert max(Instant(3), Instant(7), Instant(1)) == Instant(7)

    def test_equality_ignores_era_tag(self):
        assert Instant(100, era=1) == Instant(100)
        assert Instant(100, era=1) != Instant(101, era=1)

    def test_shifted_keeps_era(self):
        moved = Instant(10, era=2).shifted(-20)

        assert moved.seconds == -10
        assert moved.era == 2

    def test_with_era(self):
        assert Instant(5).with_era(1).era == 1

    def test_immutable(self):
        instant = Instant(5)
        with pytest.raises(AttributeError):
            instant.seconds = 6

    def test_seconds_modulo(self):
        assert Instant(25).seconds_modulo(10) == 5
        assert Instant(-1).seconds_modulo(10) == 9

    def test_seconds_modulo_rejects_non_positive_period(self):
        with pytest.raises(ValueError):
            Instant(25).seconds_modulo(0)

    def test_dict_round_trip(self):
        assert Instant.from_dict(Instant(-42).to_dict()) == Instant(-42)
        tagged = Instant.from_dict(Instant(7, era=1).to_dict())
        assert tagged.era == 1

    def test_to_dict_omits_missing_era(self):
        assert Instant(3).to_dict() == {"seconds": 3}


class TestRawValues:
    def test_date_display(self):
        assert str(RawDate(2020, 1, 4)) == "2020-01-04"
        assert str(RawDate(1, 10, 12)) == "0001-10-12"

    def test_negative_year_keeps_four_digits(self):
        assert str(RawDate(-1, 3, 9)) == "-0001-03-09"
        assert str(RawDate(-2020, 12, 1)) == "-2020-12-01"
        assert str(RawDate(0, 1, 1)) == "0000-01-01"

    def test_date_rejects_zero_fields(self):
        with pytest.raises(InvalidDateError):
            RawDate(1, 0, 1)
        with pytest.raises(InvalidDateError):
            RawDate(1, 1, 0)

    def test_date_allows_non_positive_years(self):
        assert RawDate(-3, 1, 1).year == -3

    def test_time_display(self):
        assert str(RawTime(8, 5, 0)) == "08:05:00"

    def test_time_rejects_negative_fields(self):
        with pytest.raises(InvalidTimeError):
            RawTime(-1)

    def test_datetime_display(self):
        value = RawDateTime(RawDate(2020, 1, 4), RawTime(23, 59, 1))

        assert str(value) == "2020-01-04T23:59:01Z"

    def test_datetime_dict_round_trip(self):
        value = RawDateTime(RawDate(3, 2, 1), RawTime(1, 2, 3))

        assert RawDateTime.from_dict(value.to_dict()) == value
        assert value.to_dict()["date"] == {"year": 3, "month": 2, "day": 1}
