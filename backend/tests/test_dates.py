"""
DiveLog Backend: Datetime Parsing Tests
=======================================

What we test:
    ✅ Each accepted format, with and without trailing Z
    ✅ Lenient fallback to now, strict mode raising
    ✅ Offset-free formatting
"""

from datetime import datetime

import pytest

from app.exceptions import ValidationError
from app.utils.dates import format_local_datetime, parse_datetime


class TestParseDatetime:

    def test_date_only_is_midnight(self):
        assert parse_datetime("2024-03-01") == datetime(2024, 3, 1, 0, 0, 0)

    def test_trailing_z_is_stripped_without_offset(self):
        assert parse_datetime("2024-03-01T10:15:00Z") == datetime(2024, 3, 1, 10, 15, 0)

    def test_seconds_precision(self):
        assert parse_datetime("2024-03-01T10:15:30") == datetime(2024, 3, 1, 10, 15, 30)

    def test_milliseconds(self):
        assert parse_datetime("2024-03-01T10:15:30.250Z") == datetime(2024, 3, 1, 10, 15, 30, 250000)

    def test_nanoseconds_are_truncated(self):
        assert parse_datetime("2024-03-01T10:15:30.123456789") == datetime(
            2024, 3, 1, 10, 15, 30, 123456
        )

    def test_result_is_naive(self):
        assert parse_datetime("2024-03-01T10:15:00Z").tzinfo is None

    def test_unparseable_falls_back_to_now(self):
        before = datetime.now()
        result = parse_datetime("next tuesday")
        after = datetime.now()
        assert before <= result <= after

    def test_surrounding_whitespace_is_not_trimmed(self):
        before = datetime.now()
        result = parse_datetime(" 2024-03-01 ")
        assert result >= before
        assert result != datetime(2024, 3, 1)

    def test_strict_mode_rejects_padded_value(self):
        with pytest.raises(ValidationError):
            parse_datetime("2024-03-01T10:15:00 ", strict=True)

    def test_strict_mode_rejects_unparseable(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_datetime("01/03/2024", strict=True)
        assert exc_info.value.field == "datetime"

    def test_strict_mode_accepts_valid(self):
        assert parse_datetime("2024-03-01", strict=True) == datetime(2024, 3, 1)


class TestFormatLocalDatetime:

    def test_no_offset_and_no_fraction(self):
        assert format_local_datetime(datetime(2024, 3, 1, 10, 15, 0, 500)) == "2024-03-01T10:15:00"
