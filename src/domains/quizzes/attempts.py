# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz attempt storage and submission.

This module provides the QuizAttemptService that handles:
- Saving immutable quiz attempts
- Attempt history, best attempt and completion lookups
- Grading a submission and recording question type performance

Example:
    >>> service = QuizAttemptService(db)
    >>> submission = await service.submit_attempt(user_id, quiz_id, answers)
    >>> submission.result.score
    80
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.analytics.question_types import QuestionTypePerformanceService
from src.domains.quizzes.grading import QuizResult, calculate_quiz_results, generate_performance_summary
from src.domains.quizzes.schemas import QuizAttemptData
from src.domains.quizzes.service import QuizNotFoundError, QuizServiceError
from src.infrastructure.database.models import Quiz, QuizAttempt
from src.utils.datetime import utc_now

if TYPE_CHECKING:
    from src.domains.study_sessions.tracker import ActivityTimer

logger = logging.getLogger(__name__)

SIGN_IN_REQUIRED_MESSAGE = "Please sign in to save your quiz results."
SAVE_FAILED_MESSAGE = "Unable to save quiz results. Please ensure you are signed in and try again."


class AuthenticationRequiredError(QuizServiceError):
    """Raised when an attempt is submitted without a signed-in user."""

    pass


class AttemptSaveError(QuizServiceError):
    """Raised when an attempt cannot be stored."""

    pass


@dataclass
class AttemptSubmission:
    """A graded and stored attempt."""

    attempt: QuizAttempt
    result: QuizResult
    question_types_recorded: int

    def to_dict(self) -> dict[str, Any]:
        data = self.result.to_dict()
        data["attempt_id"] = self.attempt.id
        data["question_types_recorded"] = self.question_types_recorded
        return data


class QuizAttemptService:
    """Service for quiz attempts.

    Attributes:
        _db: Async database session.
        _performance: Question type performance recorder.
    """

    def __init__(
        self,
        db: AsyncSession,
        performance: QuestionTypePerformanceService | None = None,
    ) -> None:
        self._db = db
        self._performance = performance or QuestionTypePerformanceService(db)

    async def save_attempt(self, data: QuizAttemptData) -> QuizAttempt:
        """Store a completed attempt.

        Args:
            data: Attempt to store.

        Returns:
            The created QuizAttempt.

        Raises:
            AuthenticationRequiredError: If no user is attached.
            AttemptSaveError: If the database rejects the write.
        """
        if not data.user_id:
            raise AuthenticationRequiredError(SIGN_IN_REQUIRED_MESSAGE)

        attempt = QuizAttempt(
            user_id=data.user_id,
            quiz_id=data.quiz_id,
            score=data.score,
            total_questions=data.total_questions,
            time_taken=data.time_taken,
            answers=data.answers,
            completed_at=utc_now(),
        )
        try:
            self._db.add(attempt)
            await self._db.commit()
            await self._db.refresh(attempt)
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error("Failed to save quiz attempt: quiz=%s, error=%s", data.quiz_id, str(e))
            raise AttemptSaveError(SAVE_FAILED_MESSAGE) from e

        logger.info(
            "Quiz attempt saved: %s (user=%s, quiz=%s, score=%d/%d)",
            attempt.id,
            data.user_id,
            data.quiz_id,
            data.score,
            data.total_questions,
        )
        return attempt

    async def get_attempts(self, user_id: str, quiz_id: str | None = None) -> list[QuizAttempt]:
        """Attempts of the user, newest first, optionally for one quiz."""
        stmt = select(QuizAttempt).where(QuizAttempt.user_id == user_id)
        if quiz_id:
            stmt = stmt.where(QuizAttempt.quiz_id == quiz_id)
        stmt = stmt.order_by(desc(QuizAttempt.completed_at))
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def has_user_taken_quiz(self, user_id: str, quiz_id: str) -> bool:
        """Whether any attempt exists. False when the lookup fails."""
        stmt = (
            select(QuizAttempt.id)
            .where(QuizAttempt.user_id == user_id, QuizAttempt.quiz_id == quiz_id)
            .limit(1)
        )
        try:
            result = await self._db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Error checking quiz attempts: %s", str(e))
            return False
        return result.first() is not None

    async def get_best_attempt(self, user_id: str, quiz_id: str) -> QuizAttempt | None:
        """Highest-scoring attempt, or None when there is none or the lookup fails."""
        stmt = (
            select(QuizAttempt)
            .where(QuizAttempt.user_id == user_id, QuizAttempt.quiz_id == quiz_id)
            .order_by(desc(QuizAttempt.score), desc(QuizAttempt.completed_at))
            .limit(1)
        )
        try:
            result = await self._db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to fetch best quiz attempt: %s", str(e))
            return None
        return result.scalar_one_or_none()

    async def get_completed_quiz_ids(
        self,
        user_id: str,
        retries: int = 3,
        delay: float = 0.5,
    ) -> set[str]:
        """Ids of quizzes the user has attempted.

        The lookup is retried a fixed number of times with a fixed delay.
        An empty set is returned when every try fails.
        """
        stmt = select(QuizAttempt.quiz_id).where(QuizAttempt.user_id == user_id).distinct()
        for attempt_number in range(1, retries + 1):
            try:
                result = await self._db.execute(stmt)
                return set(result.scalars().all())
            except SQLAlchemyError as e:
                await self._db.rollback()
                logger.warning(
                    "Loading completed quizzes failed (try %d/%d): %s",
                    attempt_number,
                    retries,
                    str(e),
                )
                if attempt_number < retries:
                    await asyncio.sleep(delay)

        logger.error("Giving up loading completed quizzes for user %s", user_id)
        return set()

    async def submit_attempt(
        self,
        user_id: str | None,
        quiz_id: str,
        answers: dict[str, str],
        started_at: datetime | None = None,
        timer: "ActivityTimer | None" = None,
    ) -> AttemptSubmission:
        """Grade, store and record a quiz submission.

        Args:
            user_id: Submitting user, None if not signed in.
            quiz_id: Quiz being answered.
            answers: Question id -> answer.
            started_at: When the quiz was started.
            timer: The caller's activity timer. An open session for this
                quiz is ended with the score.

        Returns:
            AttemptSubmission with the stored attempt and grading result.

        Raises:
            AuthenticationRequiredError: If no user is attached.
            QuizNotFoundError: If the quiz does not exist for the user.
            AttemptSaveError: If the attempt or its question type results
                cannot be stored.
        """
        if not user_id:
            raise AuthenticationRequiredError(SIGN_IN_REQUIRED_MESSAGE)

        stmt = select(Quiz).where(Quiz.id == quiz_id, Quiz.user_id == user_id)
        quiz = (await self._db.execute(stmt)).scalar_one_or_none()
        if quiz is None:
            raise QuizNotFoundError(f"Quiz {quiz_id} not found")

        result = calculate_quiz_results(quiz.id, quiz.questions or [], answers, started_at=started_at)
        attempt = await self.save_attempt(
            QuizAttemptData(
                user_id=user_id,
                quiz_id=quiz.id,
                score=result.correct_answers,
                total_questions=result.total_questions,
                time_taken=result.time_spent,
                answers=result.answers_payload(),
            )
        )

        try:
            recorded = await self._performance.save_quiz_performance(
                user_id, quiz_id, result.question_type_analysis
            )
        except SQLAlchemyError as e:
            # ORM instances are expired after the rollback
            logger.error("Failed to record question type performance: quiz=%s, error=%s", quiz_id, str(e))
            raise AttemptSaveError(SAVE_FAILED_MESSAGE) from e

        if timer is not None and timer.is_tracking("quiz", quiz.id):
            await timer.end(metadata={"score": result.score, "quiz_id": quiz.id})

        logger.info("Quiz submitted: %s", generate_performance_summary(result).splitlines()[0])
        return AttemptSubmission(attempt=attempt, result=result, question_types_recorded=recorded)
