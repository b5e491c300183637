# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for learning streaks and session durations."""

from datetime import date, datetime, timedelta, timezone

import pytest

from src.domains.study_sessions.service import advance_streak, session_duration_minutes
from src.infrastructure.database.models import LearningStreak

START = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


def streak(current: int, longest: int, last: date | None) -> LearningStreak:
    return LearningStreak(user_id="user-1", current_streak=current, longest_streak=longest, last_activity_date=last)


class TestAdvanceStreak:
    """Tests for advance_streak."""

    def test_first_activity(self) -> None:
        s = streak(0, 0, None)

        assert advance_streak(s, date(2025, 3, 10)) is True
        assert (s.current_streak, s.longest_streak) == (1, 1)

    def test_next_day_extends(self) -> None:
        s = streak(4, 6, date(2025, 3, 9))

        advance_streak(s, date(2025, 3, 10))

        assert (s.current_streak, s.longest_streak) == (5, 6)
        assert s.last_activity_date == date(2025, 3, 10)

    def test_extending_past_longest(self) -> None:
        s = streak(6, 6, date(2025, 3, 9))

        advance_streak(s, date(2025, 3, 10))

        assert s.longest_streak == 7

    def test_gap_resets(self) -> None:
        s = streak(4, 6, date(2025, 3, 7))

        advance_streak(s, date(2025, 3, 10))

        assert (s.current_streak, s.longest_streak) == (1, 6)

    def test_same_day_is_counted_once(self) -> None:
        s = streak(4, 6, date(2025, 3, 10))

        assert advance_streak(s, date(2025, 3, 10)) is False
        assert s.current_streak == 4

    def test_earlier_day_is_ignored(self) -> None:
        s = streak(4, 6, date(2025, 3, 10))

        assert advance_streak(s, date(2025, 3, 8)) is False


class TestSessionDuration:
    """Tests for session_duration_minutes."""

    @pytest.mark.parametrize(
        ("elapsed", "minutes"),
        [
            (timedelta(seconds=0), 1),
            (timedelta(seconds=20), 1),
            (timedelta(seconds=89), 1),
            (timedelta(seconds=90), 2),
            (timedelta(minutes=25, seconds=10), 25),
        ],
    )
    def test_rounding(self, elapsed: timedelta, minutes: int) -> None:
        assert session_duration_minutes(START, START + elapsed) == minutes

    def test_naive_timestamps_are_utc(self) -> None:
        assert session_duration_minutes(START.replace(tzinfo=None), START + timedelta(minutes=3)) == 3
