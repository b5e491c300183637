# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics service module.

Runs the reporting pipeline for one user: fetch rows, aggregate them into
metrics, then layer the fixed-threshold heuristics on top.

Usage:
    from src.domains.analytics import AnalyticsService

    service = AnalyticsService(session_factory=get_sessionmaker())

    analytics = await service.get_user_analytics(user_id)
    progress = await service.get_quiz_progress(user_id)
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.config.settings import AnalyticsSettings
from src.domains.analytics import aggregator, heuristics
from src.domains.analytics.aggregator import (
    ActivityEntry,
    ConceptProgress,
    DailyProgress,
    DifficultyStats,
    SubjectStats,
)
from src.domains.analytics.fetcher import RowFetcher, UserRows
from src.domains.analytics.insights import StudyInsight, generate_study_insights
from src.domains.analytics.progress import (
    EARLIEST,
    QuizProgress,
    attempt_percentage,
    build_quiz_progress,
)
from src.domains.analytics.question_types import (
    QuestionTypeAnalytics,
    QuestionTypePerformanceService,
)
from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models import QuizAttempt
from src.utils.datetime import ensure_utc, get_zone, today_in, utc_now
from src.utils.formatting import format_study_time, round_half_up

logger = logging.getLogger(__name__)


class AnalyticsServiceError(Exception):
    """Base exception for analytics service errors."""

    pass


class AnalyticsUnavailableError(AnalyticsServiceError):
    """Raised when the analytics rows cannot be loaded at all."""

    pass


@dataclass
class UserAnalytics:
    """Complete analytics for one user."""

    user_id: str
    total_study_time: int
    average_score: int
    quizzes_taken: int
    study_streak: int
    files_uploaded: int
    study_materials_generated: int
    weekly_progress: list[DailyProgress] = field(default_factory=list)
    difficulty_breakdown: list[DifficultyStats] = field(default_factory=list)
    subject_performance: list[SubjectStats] = field(default_factory=list)
    recent_activity: list[ActivityEntry] = field(default_factory=list)
    concept_progression: list[ConceptProgress] = field(default_factory=list)
    content: dict[str, Any] = field(default_factory=dict)
    knowledge: dict[str, Any] = field(default_factory=dict)
    study_optimization: dict[str, Any] = field(default_factory=dict)
    heuristics: dict[str, Any] = field(default_factory=dict)
    insights: list[StudyInsight] = field(default_factory=list)
    generated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "user_id": self.user_id,
            "total_study_time": self.total_study_time,
            "total_study_time_display": format_study_time(self.total_study_time),
            "average_score": self.average_score,
            "quizzes_taken": self.quizzes_taken,
            "study_streak": self.study_streak,
            "files_uploaded": self.files_uploaded,
            "study_materials_generated": self.study_materials_generated,
            "weekly_progress": [day.to_dict() for day in self.weekly_progress],
            "difficulty_breakdown": [entry.to_dict() for entry in self.difficulty_breakdown],
            "subject_performance": [entry.to_dict() for entry in self.subject_performance],
            "recent_activity": [entry.to_dict() for entry in self.recent_activity],
            "content": self.content,
            "knowledge": {
                "concept_progression": [entry.to_dict() for entry in self.concept_progression],
                **self.knowledge,
            },
            "study_optimization": self.study_optimization,
            "heuristics": self.heuristics,
            "insights": [insight.to_dict() for insight in self.insights],
            "generated_at": self.generated_at.isoformat(),
        }


class AnalyticsService:
    """Service computing learning analytics from a user's rows.

    Attributes:
        session_factory: Factory for database sessions.
        settings: Analytics thresholds, benchmarks and reporting timezone.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: AnalyticsSettings | None = None,
        fetcher: RowFetcher | None = None,
    ) -> None:
        """Initialize the analytics service.

        Args:
            session_factory: Factory for database sessions.
            settings: Analytics settings, defaults from the environment.
            fetcher: Row fetcher, built from the session factory if omitted.
        """
        self.session_factory = session_factory
        self.settings = settings or AnalyticsSettings()
        self.fetcher = fetcher or RowFetcher(session_factory)

    async def get_user_analytics(
        self,
        user_id: str,
        today: date | None = None,
        now: datetime | None = None,
    ) -> UserAnalytics:
        """Compute the full analytics for one user.

        Args:
            user_id: User to report on.
            today: Last day of the weekly window, defaults to today in the
                reporting timezone.
            now: Reference time for alerts, defaults to the current time.

        Returns:
            UserAnalytics with metrics and heuristics.

        Raises:
            AnalyticsUnavailableError: If the database cannot be reached.
        """
        try:
            rows = await self.fetcher.fetch(user_id)
        except DatabaseError as e:
            logger.error("Failed to load analytics for user %s: %s", user_id, str(e))
            raise AnalyticsUnavailableError("Failed to load analytics") from e

        tz = get_zone(self.settings.timezone)
        return self.build_analytics(
            rows,
            today=today or today_in(tz),
            now=now or utc_now(),
        )

    def build_analytics(self, rows: UserRows, today: date, now: datetime) -> UserAnalytics:
        """Aggregate fetched rows and apply the heuristics."""
        tz = get_zone(self.settings.timezone)
        attempts = aggregator.chronological(rows.attempts)
        scores = [attempt_percentage(attempt) for attempt in attempts]
        session_minutes = [session.duration_minutes or 0 for session in rows.sessions]

        total_minutes = aggregator.total_study_time(rows.sessions)
        average = aggregator.average_score(attempts)
        quizzes_taken = aggregator.quizzes_taken(attempts)
        streak = rows.streak.current_streak if rows.streak is not None else 0

        difficulties = aggregator.difficulty_breakdown(rows.quizzes, attempts)
        subjects = aggregator.subject_performance(rows.files, rows.quizzes, attempts, rows.sessions)

        estimates = self._heuristics(
            rows, attempts, scores, average, total_minutes, quizzes_taken, difficulties, subjects, now, tz
        )
        return UserAnalytics(
            user_id=rows.user_id,
            total_study_time=total_minutes,
            average_score=round_half_up(average),
            quizzes_taken=quizzes_taken,
            study_streak=streak,
            files_uploaded=len(rows.files),
            study_materials_generated=len(rows.materials),
            weekly_progress=aggregator.weekly_progress(attempts, rows.sessions, today, tz),
            difficulty_breakdown=difficulties,
            subject_performance=subjects,
            recent_activity=aggregator.recent_activity(
                attempts, rows.files, rows.materials, rows.quizzes
            ),
            concept_progression=aggregator.concept_progression(attempts, rows.quizzes),
            content={
                "complexity": aggregator.content_complexity(rows.files),
                "generation": aggregator.generation_metrics(rows.files, rows.quizzes, rows.materials),
            },
            knowledge={
                "retention_estimates": heuristics.retention_estimates(average) if attempts else None,
                "learning_velocity": heuristics.learning_velocity(
                    quizzes_taken, total_minutes, scores, average
                ),
            },
            study_optimization={
                "session_analytics": heuristics.session_analytics(
                    session_minutes, total_minutes, len(attempts)
                ),
                "learning_patterns": heuristics.learning_patterns(difficulties, subjects, average),
                "recommendations": heuristics.study_recommendations(
                    average, total_minutes, scores, len(rows.files)
                ),
            },
            heuristics=estimates,
            insights=generate_study_insights(subjects, streak, total_minutes),
        )

    def _heuristics(
        self,
        rows: UserRows,
        attempts: list[QuizAttempt],
        scores: list[float],
        average: float,
        total_minutes: int,
        quizzes_taken: int,
        difficulties: list[DifficultyStats],
        subjects: list[SubjectStats],
        now: datetime,
        tz: tzinfo,
    ) -> dict[str, Any]:
        settings = self.settings
        estimate = heuristics.predict_next_score(
            average,
            scores,
            window=settings.recent_window,
            smoothing=settings.smoothing_factor,
        )
        difficulty, reason = heuristics.recommend_difficulty(average)
        return {
            "performance_estimate": estimate.to_dict() if estimate else None,
            "recommended_difficulty": difficulty if attempts else None,
            "difficulty_reason": reason if attempts else None,
            "learning_path": heuristics.learning_path(subjects),
            "learning_pattern": heuristics.learning_pattern(
                total_minutes,
                quizzes_taken,
                average,
                len(attempts),
                len(rows.quizzes),
                len(rows.sessions),
                len(rows.files),
            ),
            "anomalies": heuristics.detect_anomalies(
                scores,
                average,
                [session.duration_minutes or 0 for session in rows.sessions],
                [attempt.completed_at for attempt in attempts],
                tz,
            ),
            "alerts": heuristics.predictive_alerts(
                total_minutes, average, scores, difficulties, quizzes_taken, now
            ),
            "comparative": heuristics.comparative_analytics(
                average,
                total_minutes,
                quizzes_taken,
                scores,
                benchmark_score=settings.benchmark_average_score,
                benchmark_minutes=settings.benchmark_study_minutes,
                benchmark_quizzes=settings.benchmark_quizzes_completed,
                benchmark_improvement=settings.benchmark_improvement,
            ),
        }

    async def get_quiz_progress(self, user_id: str) -> list[QuizProgress]:
        """Progress for every quiz of the user, newest quiz first.

        Returns an empty list when the rows cannot be loaded.
        """
        try:
            quizzes, attempts = await self.fetcher.fetch_quiz_history(user_id)
        except DatabaseError as e:
            logger.warning("Failed to load quiz progress for user %s: %s", user_id, str(e))
            return []

        quizzes = sorted(quizzes, key=lambda q: ensure_utc(q.created_at) or EARLIEST, reverse=True)
        return [build_quiz_progress(quiz, attempts) for quiz in quizzes]

    async def get_question_type_analytics(self, user_id: str) -> QuestionTypeAnalytics:
        """Cumulative and recent question type performance with trends."""
        async with self.session_factory() as session:
            service = QuestionTypePerformanceService(
                session,
                trend_threshold=self.settings.trend_threshold,
                trend_fetch_limit=self.settings.trend_history_limit,
            )
            return await service.get_question_type_analytics(user_id)

    async def get_study_insights(self, user_id: str) -> list[StudyInsight]:
        """Insight cards for the user's dashboard."""
        analytics = await self.get_user_analytics(user_id)
        return analytics.insights
