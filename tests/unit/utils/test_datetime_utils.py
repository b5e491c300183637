# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for datetime utilities."""

from datetime import date, datetime, timezone

from src.utils.datetime import (
    ensure_utc,
    format_iso,
    get_zone,
    last_n_days,
    local_date,
    minutes_between,
    parse_iso,
)


class TestLocalDate:
    """Calendar-day conversion in the reporting timezone."""

    def test_late_evening_stays_on_local_day(self) -> None:
        # 21:30 UTC is 23:30 in Berlin during summer time
        instant = datetime(2025, 6, 10, 21, 30, tzinfo=timezone.utc)

        assert local_date(instant, get_zone("Europe/Berlin")) == date(2025, 6, 10)

    def test_after_local_midnight_moves_to_next_day(self) -> None:
        instant = datetime(2025, 6, 10, 22, 30, tzinfo=timezone.utc)

        assert local_date(instant, get_zone("Europe/Berlin")) == date(2025, 6, 11)
        assert local_date(instant, get_zone("UTC")) == date(2025, 6, 10)

    def test_naive_values_are_treated_as_utc(self) -> None:
        naive = datetime(2025, 1, 1, 23, 0)

        assert local_date(naive, get_zone("Asia/Tokyo")) == date(2025, 1, 2)

    def test_none(self) -> None:
        assert local_date(None, get_zone("UTC")) is None


class TestHelpers:
    """Tests for the remaining helpers."""

    def test_last_n_days_is_oldest_first(self) -> None:
        days = last_n_days(date(2025, 3, 3), 7)

        assert len(days) == 7
        assert days[0] == date(2025, 2, 25)
        assert days[-1] == date(2025, 3, 3)

    def test_ensure_utc_converts_offsets(self) -> None:
        berlin = datetime(2025, 6, 10, 12, 0, tzinfo=get_zone("Europe/Berlin"))

        assert ensure_utc(berlin).hour == 10
        assert ensure_utc(None) is None

    def test_iso_round_trip_accepts_z_suffix(self) -> None:
        parsed = parse_iso("2025-06-10T08:15:00Z")

        assert parsed == datetime(2025, 6, 10, 8, 15, tzinfo=timezone.utc)
        assert format_iso(parsed) == "2025-06-10T08:15:00+00:00"
        assert parse_iso(None) is None

    def test_minutes_between(self) -> None:
        start = datetime(2025, 6, 10, 8, 0, tzinfo=timezone.utc)
        end = datetime(2025, 6, 10, 8, 45, 30, tzinfo=timezone.utc)

        assert minutes_between(start, end) == 45.5
