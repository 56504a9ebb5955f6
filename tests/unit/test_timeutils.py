"""Tests for the shared time helpers."""
import pytest
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


class TestDurations:
    """Tests for duration math and formatting."""

    def test_duration_floors_to_seconds(self):
        from kaizen.utils.timeutils import calculate_duration

        start = datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)

        assert calculate_duration(start, start + timedelta(seconds=59, milliseconds=999)) == 59

    def test_duration_mixes_naive_and_aware(self):
        from kaizen.utils.timeutils import calculate_duration

        start = datetime(2024, 1, 5, 12, 0)
        end = datetime(2024, 1, 5, 13, 0, tzinfo=timezone.utc)

        assert calculate_duration(start, end) == 3600

    def test_ensure_utc_converts_offsets(self):
        from kaizen.utils.timeutils import ensure_utc

        value = datetime(2024, 1, 5, 13, 0, tzinfo=ZoneInfo("Europe/Berlin"))

        assert ensure_utc(value) == datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)
        assert ensure_utc(value).tzinfo == timezone.utc
        assert ensure_utc(None) is None

    @pytest.mark.parametrize("seconds, expected", [
        (0, "00:00:00"),
        (59, "00:00:59"),
        (3725, "01:02:05"),
        (90000, "25:00:00"),
        (-5, "00:00:00"),
    ])
    def test_format_hhmmss(self, seconds, expected):
        from kaizen.utils.timeutils import format_hhmmss

        assert format_hhmmss(seconds) == expected

    @pytest.mark.parametrize("seconds, expected", [
        (None, "0m"),
        (0, "0m"),
        (2700, "45m"),
        (7200, "2h"),
        (9000, "2h 30m"),
    ])
    def test_format_short(self, seconds, expected):
        from kaizen.utils.timeutils import format_short

        assert format_short(seconds) == expected


class TestResolvePastInterval:
    """Tests for turning wall-clock times into a closed interval."""

    NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)

    def test_same_day(self):
        from kaizen.utils.timeutils import resolve_past_interval

        start, end = resolve_past_interval(
            date(2024, 1, 5), time(9, 0), time(10, 30), timezone.utc, now=self.NOW
        )

        assert start == datetime(2024, 1, 5, 9, 0, tzinfo=timezone.utc)
        assert (end - start).total_seconds() == 5400

    def test_crosses_midnight(self):
        from kaizen.utils.timeutils import resolve_past_interval

        start, end = resolve_past_interval(
            date(2024, 1, 5), time(23, 30), time(0, 15), timezone.utc, now=self.NOW
        )

        assert end.date() == date(2024, 1, 6)
        assert (end - start).total_seconds() == 2700

    def test_local_zone_converted_to_utc(self):
        from kaizen.utils.timeutils import resolve_past_interval

        start, _ = resolve_past_interval(
            date(2024, 1, 5), time(9, 0), time(10, 0), ZoneInfo("America/New_York"),
            now=self.NOW,
        )

        assert start == datetime(2024, 1, 5, 14, 0, tzinfo=timezone.utc)

    def test_zone_offset_follows_dst(self):
        from kaizen.utils.timeutils import resolve_past_interval

        zone = ZoneInfo("America/New_York")
        now = datetime(2024, 4, 1, tzinfo=timezone.utc)

        before, _ = resolve_past_interval(
            date(2024, 3, 9), time(9, 0), time(10, 0), zone, now=now
        )
        after, _ = resolve_past_interval(
            date(2024, 3, 11), time(9, 0), time(10, 0), zone, now=now
        )

        assert before == datetime(2024, 3, 9, 14, 0, tzinfo=timezone.utc)
        assert after == datetime(2024, 3, 11, 13, 0, tzinfo=timezone.utc)

    def test_system_zone_when_omitted(self):
        from kaizen.utils.timeutils import resolve_past_interval

        start, end = resolve_past_interval(
            date(2024, 1, 5), time(9, 0), time(10, 30), now=self.NOW
        )

        assert start.tzinfo == timezone.utc
        assert end.tzinfo == timezone.utc
        assert start == datetime(2024, 1, 5, 9, 0).astimezone().astimezone(timezone.utc)
        assert (end - start).total_seconds() == 5400

    def test_equal_times_rejected(self):
        from kaizen.errors import InvalidInputError
        from kaizen.utils.timeutils import resolve_past_interval

        with pytest.raises(InvalidInputError, match="End time must be after start time"):
            resolve_past_interval(
                date(2024, 1, 5), time(9, 0), time(9, 0), timezone.utc, now=self.NOW
            )

    def test_future_rejected(self):
        from kaizen.errors import InvalidInputError
        from kaizen.utils.timeutils import resolve_past_interval

        with pytest.raises(InvalidInputError, match="cannot be in the future"):
            resolve_past_interval(
                date(2024, 1, 10), time(11, 0), time(13, 0), timezone.utc, now=self.NOW
            )
