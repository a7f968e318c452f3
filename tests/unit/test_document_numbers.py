"""Document number formatting and partition codes."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.carledger.services.sequence_service import (
    day_window,
    format_document_number,
    partition_code_for,
    utc_day,
)

pytestmark = pytest.mark.unit


class TestFormat:
    def test_example(self):
        assert format_document_number("RU", date(2025, 1, 15), 3) == "RU-2025011503"

    def test_seq_grows_past_width(self):
        assert format_document_number("KZ", date(2025, 1, 15), 100) == "KZ-20250115100"

    def test_custom_width(self):
        assert format_document_number("UZ", date(2024, 12, 31), 7, width=4) == "UZ-202412310007"

    @pytest.mark.parametrize("ordinal", [0, -1])
    def test_ordinal_must_be_positive(self, ordinal: int):
        with pytest.raises(ValueError):
            format_document_number("RU", date(2025, 1, 15), ordinal)

    @given(
        code=st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ", min_size=2, max_size=2),
        day=st.dates(min_value=date(2000, 1, 1), max_value=date(2999, 12, 31)),
        ordinal=st.integers(min_value=1, max_value=10**6),
        width=st.integers(min_value=1, max_value=6),
    )
    def test_number_encodes_code_day_and_ordinal(self, code, day, ordinal, width):
        number = format_document_number(code, day, ordinal, width)

        prefix = f"{code}-{day:%Y%m%d}"
        assert number.startswith(prefix)
        seq = number[len(prefix) :]
        assert int(seq) == ordinal
        assert len(seq) == max(width, len(str(ordinal)))


class TestPartitionCode:
    @pytest.mark.parametrize(
        ("key", "code"),
        [
            ("Russia", "RU"),
            ("russia", "RU"),
            (" Russia ", "RU"),
            ("Uzbekistan", "UZ"),
            ("Kazakhstan", "KZ"),
            ("Kyrgyzstan", "KG"),
            ("RU", "RU"),
            ("Germany", "GE"),
            ("ge", "GE"),
        ],
    )
    def test_mapping(self, key: str, code: str):
        assert partition_code_for(key) == code


class TestDays:
    def test_naive_datetime_taken_as_utc(self):
        assert utc_day(datetime(2025, 1, 15, 23, 59)) == date(2025, 1, 15)

    def test_aware_datetime_converted_to_utc(self):
        tashkent = timezone(timedelta(hours=5))
        assert utc_day(datetime(2025, 1, 16, 2, 0, tzinfo=tashkent)) == date(2025, 1, 15)

    def test_plain_date_unchanged(self):
        assert utc_day(date(2025, 1, 15)) == date(2025, 1, 15)

    def test_window_covers_whole_day(self):
        start, end = day_window(date(2025, 1, 15))
        assert start == datetime(2025, 1, 15)
        assert end.date() == date(2025, 1, 15)
        assert end + timedelta(microseconds=1) == datetime(2025, 1, 16)
        assert start.tzinfo is None and end.tzinfo is None

    @given(
        moment=st.datetimes(
            min_value=datetime(2000, 1, 1),
            max_value=datetime(2999, 12, 31),
            timezones=st.just(UTC),
        )
    )
    def test_window_contains_its_moments(self, moment: datetime):
        start, end = day_window(utc_day(moment))
        assert start <= moment.replace(tzinfo=None) <= end
