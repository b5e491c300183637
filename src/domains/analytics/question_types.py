# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Question type performance tracking.

Every graded quiz stores one row per answered question type and folds the
same counts into a running per-user total. The running total is the only
row shared between concurrent submissions of the same user, so it is
updated with a single INSERT ... ON CONFLICT DO UPDATE that increments the
stored values in the database instead of reading them first.

Usage:
    service = QuestionTypePerformanceService(db)
    await service.save_quiz_performance(user_id, quiz_id, analysis)
    analytics = await service.get_question_type_analytics(user_id)
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping

from sqlalchemy import Integer, cast, desc, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.analytics.heuristics import TREND_THRESHOLD, TrendResult, improvement_trends
from src.infrastructure.database.models import (
    CumulativeQuestionTypePerformance,
    QuizQuestionTypePerformance,
)
from src.infrastructure.database.models.base import new_uuid
from src.utils.datetime import format_iso, utc_now
from src.utils.formatting import round_half_up

if TYPE_CHECKING:
    from src.domains.quizzes.grading import TypeStats

logger = logging.getLogger(__name__)

EMPTY_SUMMARY = "No quiz data available yet. Take some quizzes to see your performance!"
TREND_FETCH_LIMIT = 20

QUESTION_TYPE_DISPLAY_NAMES = {
    "multiple_choice": "Multiple Choice",
    "true_false": "True/False",
    "identification": "Identification",
    "fill_in_blanks": "Fill in the Blanks",
    "flashcard": "Flashcard",
    "mixed": "Mixed",
    "unknown": "Unknown",
}


def question_type_display_name(question_type: str) -> str:
    return QUESTION_TYPE_DISPLAY_NAMES.get(question_type, question_type)


@dataclass
class QuestionTypeAnalytics:
    """Cumulative, recent and trend data for one user."""

    user_id: str
    cumulative_performance: list[CumulativeQuestionTypePerformance] = field(default_factory=list)
    recent_performance: list[QuizQuestionTypePerformance] = field(default_factory=list)
    improvement_trends: list[TrendResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "cumulative_performance": [
                {
                    "question_type": row.question_type,
                    "display_name": question_type_display_name(row.question_type),
                    "total_correct": row.total_correct,
                    "total_questions": row.total_questions,
                    "total_percentage": row.total_percentage,
                    "quiz_count": row.quiz_count,
                    "last_updated": format_iso(row.last_updated),
                }
                for row in self.cumulative_performance
            ],
            "recent_performance": [
                {
                    "quiz_id": row.quiz_id,
                    "question_type": row.question_type,
                    "correct_answers": row.correct_answers,
                    "total_questions": row.total_questions,
                    "percentage": row.percentage,
                    "quiz_date": format_iso(row.quiz_date),
                }
                for row in self.recent_performance
            ],
            "improvement_trends": [trend.to_dict() for trend in self.improvement_trends],
            "summary": performance_summary(self.cumulative_performance),
        }


def performance_summary(cumulative: list[CumulativeQuestionTypePerformance]) -> str:
    """Plain-text overview of cumulative performance, best type first."""
    if not cumulative:
        return EMPTY_SUMMARY

    total_questions = sum(row.total_questions for row in cumulative)
    total_correct = sum(row.total_correct for row in cumulative)
    overall = round_half_up(total_correct / total_questions * 100) if total_questions else 0

    lines = [
        f"Overall Performance: {overall}% ({total_correct}/{total_questions} questions)",
        "",
        "Performance by Question Type:",
    ]
    for row in sorted(cumulative, key=lambda r: r.total_percentage, reverse=True):
        lines.append(
            f"• {question_type_display_name(row.question_type)}: {row.total_percentage}% "
            f"({row.total_correct}/{row.total_questions}) across {row.quiz_count} quizzes"
        )
    return "\n".join(lines) + "\n"


class QuestionTypePerformanceService:
    """Stores and reads question type performance for quiz attempts.

    Attributes:
        _db: Async database session.
    """

    def __init__(
        self,
        db: AsyncSession,
        trend_threshold: float = TREND_THRESHOLD,
        trend_fetch_limit: int = TREND_FETCH_LIMIT,
    ) -> None:
        self._db = db
        self.trend_threshold = trend_threshold
        self.trend_fetch_limit = trend_fetch_limit

    async def save_quiz_performance(
        self,
        user_id: str,
        quiz_id: str,
        analysis: Mapping[str, "TypeStats"],
    ) -> int:
        """Store per-type results of one quiz and update the running totals.

        Question types with no answered questions are skipped. Nothing is
        written when no type was answered.

        Args:
            user_id: Owner of the attempt.
            quiz_id: Quiz that was taken.
            analysis: Question type -> counts from grading.

        Returns:
            Number of question types recorded.

        Raises:
            SQLAlchemyError: If any write fails.
        """
        answered = {qtype: stats for qtype, stats in analysis.items() if stats.total > 0}
        if not answered:
            logger.debug("No question type data to save: quiz=%s", quiz_id)
            return 0

        quiz_date = utc_now()
        for question_type, stats in answered.items():
            self._db.add(
                QuizQuestionTypePerformance(
                    user_id=user_id,
                    quiz_id=quiz_id,
                    question_type=question_type,
                    correct_answers=stats.correct,
                    total_questions=stats.total,
                    percentage=stats.percentage,
                    quiz_date=quiz_date,
                )
            )
        try:
            await self._db.flush()
        except SQLAlchemyError as e:
            logger.error("Error saving question type performance for quiz %s: %s", quiz_id, str(e))
            await self._db.rollback()
            raise

        await self.update_cumulative_performance(user_id, answered)
        logger.info(
            "Question type performance saved: user=%s, quiz=%s, types=%d",
            user_id,
            quiz_id,
            len(answered),
        )
        return len(answered)

    def build_cumulative_upsert(self, dialect_name: str, user_id: str, question_type: str, stats: "TypeStats"):
        """Build the atomic increment statement for one question type.

        Inserts the first row for (user, type). On conflict the stored totals
        are incremented by the new counts, the percentage is recomputed from
        the new totals and the quiz count goes up by one.
        """
        insert = sqlite_insert if dialect_name == "sqlite" else pg_insert
        table = CumulativeQuestionTypePerformance.__table__

        stmt = insert(table).values(
            id=new_uuid(),
            user_id=user_id,
            question_type=question_type,
            total_correct=stats.correct,
            total_questions=stats.total,
            total_percentage=stats.percentage,
            quiz_count=1,
            last_updated=utc_now(),
        )
        new_correct = table.c.total_correct + stmt.excluded.total_correct
        new_total = table.c.total_questions + stmt.excluded.total_questions
        return stmt.on_conflict_do_update(
            index_elements=["user_id", "question_type"],
            set_={
                "total_correct": new_correct,
                "total_questions": new_total,
                "total_percentage": cast(func.round(100.0 * new_correct / new_total), Integer),
                "quiz_count": table.c.quiz_count + 1,
                "last_updated": stmt.excluded.last_updated,
            },
        )

    async def update_cumulative_performance(
        self,
        user_id: str,
        analysis: Mapping[str, "TypeStats"],
    ) -> None:
        """Fold one quiz's counts into the user's running totals.

        Raises:
            SQLAlchemyError: If an upsert fails. The transaction is rolled back.
        """
        dialect_name = self._db.get_bind().dialect.name
        try:
            for question_type, stats in analysis.items():
                if stats.total == 0:
                    continue
                await self._db.execute(
                    self.build_cumulative_upsert(dialect_name, user_id, question_type, stats)
                )
            await self._db.commit()
        except SQLAlchemyError as e:
            logger.error("Error updating cumulative performance for user %s: %s", user_id, str(e))
            await self._db.rollback()
            raise

    async def get_cumulative_performance(self, user_id: str) -> list[CumulativeQuestionTypePerformance]:
        """Running totals, best percentage first."""
        stmt = (
            select(CumulativeQuestionTypePerformance)
            .where(CumulativeQuestionTypePerformance.user_id == user_id)
            .order_by(desc(CumulativeQuestionTypePerformance.total_percentage))
        )
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def get_recent_performance(
        self,
        user_id: str,
        limit: int = 10,
    ) -> list[QuizQuestionTypePerformance]:
        """Per-quiz rows, newest first."""
        stmt = (
            select(QuizQuestionTypePerformance)
            .where(QuizQuestionTypePerformance.user_id == user_id)
            .order_by(desc(QuizQuestionTypePerformance.quiz_date))
            .limit(limit)
        )
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def calculate_improvement_trends(self, user_id: str) -> list[TrendResult]:
        """Trend per question type over recent quizzes, [] if the fetch fails."""
        try:
            recent = await self.get_recent_performance(user_id, limit=self.trend_fetch_limit)
        except SQLAlchemyError as e:
            logger.warning("Error calculating improvement trends for user %s: %s", user_id, str(e))
            return []
        return improvement_trends(recent, threshold=self.trend_threshold)

    async def get_question_type_analytics(self, user_id: str) -> QuestionTypeAnalytics:
        """Cumulative totals, recent rows and trends for one user."""
        cumulative = await self.get_cumulative_performance(user_id)
        recent = await self.get_recent_performance(user_id)
        trends = await self.calculate_improvement_trends(user_id)
        return QuestionTypeAnalytics(
            user_id=user_id,
            cumulative_performance=cumulative,
            recent_performance=recent,
            improvement_trends=trends,
        )
