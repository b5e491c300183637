# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the analytics pipeline service."""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.config.settings import AnalyticsSettings
from src.domains.analytics.fetcher import UserRows
from src.domains.analytics.service import AnalyticsService, AnalyticsUnavailableError
from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models import LearningStreak, Quiz, QuizAttempt, StudySession

TODAY = date(2025, 5, 10)
NOW = datetime(2025, 5, 10, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_fetcher():
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock()
    fetcher.fetch_quiz_history = AsyncMock()
    return fetcher


@pytest.fixture
def service(mock_fetcher) -> AnalyticsService:
    return AnalyticsService(MagicMock(), settings=AnalyticsSettings(timezone="UTC"), fetcher=mock_fetcher)


def populated_rows() -> UserRows:
    quizzes = [
        Quiz(id="quiz-1", user_id="user-1", title="Cells", difficulty="easy", total_questions=10, questions=[],
             created_at=NOW - timedelta(days=3)),
        Quiz(id="quiz-2", user_id="user-1", title="Genes", difficulty="hard", total_questions=10, questions=[],
             created_at=NOW - timedelta(days=1)),
    ]
    attempts = [
        QuizAttempt(id="a1", user_id="user-1", quiz_id="quiz-1", score=6, total_questions=10, time_taken=60,
                    completed_at=NOW - timedelta(days=2)),
        QuizAttempt(id="a2", user_id="user-1", quiz_id="quiz-2", score=9, total_questions=10, time_taken=90,
                    completed_at=NOW - timedelta(hours=2)),
    ]
    sessions = [
        StudySession(user_id="user-1", activity_type="quiz", duration_minutes=20, started_at=NOW - timedelta(days=2)),
        StudySession(user_id="user-1", activity_type="study", duration_minutes=25, started_at=NOW - timedelta(hours=3)),
    ]
    return UserRows(
        user_id="user-1",
        quizzes=quizzes,
        attempts=attempts,
        sessions=sessions,
        streak=LearningStreak(user_id="user-1", current_streak=3, longest_streak=5),
    )


class TestBuildAnalytics:
    """Tests for AnalyticsService.build_analytics."""

    def test_new_user(self, service) -> None:
        analytics = service.build_analytics(UserRows(user_id="user-1"), TODAY, NOW)

        assert analytics.average_score == 0
        assert analytics.quizzes_taken == 0
        assert analytics.total_study_time == 0
        assert analytics.study_streak == 0
        assert len(analytics.weekly_progress) == 7
        assert analytics.heuristics["performance_estimate"] is None
        assert analytics.heuristics["recommended_difficulty"] is None
        assert analytics.knowledge["retention_estimates"] is None

    def test_totals(self, service) -> None:
        analytics = service.build_analytics(populated_rows(), TODAY, NOW)

        assert analytics.total_study_time == 45
        assert analytics.average_score == 75
        assert analytics.quizzes_taken == 2
        assert analytics.study_streak == 3
        assert analytics.weekly_progress[-1].day == TODAY
        assert analytics.weekly_progress[-1].score == 90.0
        assert analytics.recent_activity[0].title == "Genes"
        assert analytics.heuristics["performance_estimate"]["next_score_estimate"] == 75.0

    def test_to_dict(self, service) -> None:
        payload = service.build_analytics(populated_rows(), TODAY, NOW).to_dict()

        assert payload["total_study_time_display"] == "45m"
        assert payload["weekly_progress"][-1]["date"] == "2025-05-10"
        assert "concept_progression" in payload["knowledge"]
        assert payload["generated_at"]


class TestGetUserAnalytics:
    """Tests for AnalyticsService.get_user_analytics."""

    @pytest.mark.asyncio
    async def test_unavailable_database(self, service, mock_fetcher) -> None:
        mock_fetcher.fetch.side_effect = DatabaseError("connection refused")

        with pytest.raises(AnalyticsUnavailableError, match="Failed to load analytics"):
            await service.get_user_analytics("user-1")

    @pytest.mark.asyncio
    async def test_fetches_and_builds(self, service, mock_fetcher) -> None:
        mock_fetcher.fetch.return_value = populated_rows()

        analytics = await service.get_user_analytics("user-1", today=TODAY, now=NOW)

        mock_fetcher.fetch.assert_awaited_once_with("user-1")
        assert analytics.user_id == "user-1"


class TestGetQuizProgress:
    """Tests for AnalyticsService.get_quiz_progress."""

    @pytest.mark.asyncio
    async def test_newest_quiz_first(self, service, mock_fetcher) -> None:
        rows = populated_rows()
        mock_fetcher.fetch_quiz_history.return_value = (rows.quizzes, rows.attempts)

        progress = await service.get_quiz_progress("user-1")

        assert [entry.quiz_id for entry in progress] == ["quiz-2", "quiz-1"]

    @pytest.mark.asyncio
    async def test_unavailable_database_gives_empty_list(self, service, mock_fetcher) -> None:
        mock_fetcher.fetch_quiz_history.side_effect = DatabaseError("timeout")

        assert await service.get_quiz_progress("user-1") == []
