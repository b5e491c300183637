# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for per-quiz progress."""

from datetime import datetime, timedelta, timezone

import pytest

from src.domains.analytics.progress import (
    NO_ATTEMPTS_MESSAGE,
    build_quiz_progress,
    correct_answers_for,
    count_correct_answers,
    interpret_progress,
    score_band,
)
from src.infrastructure.database.models import Quiz, QuizAttempt

BASE_TIME = datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc)


def make_quiz(quiz_id: str = "quiz-1", total: int = 30) -> Quiz:
    return Quiz(
        id=quiz_id,
        user_id="user-1",
        title="Cell Biology Quiz",
        difficulty="medium",
        total_questions=total,
        questions=[],
    )


def make_attempt(
    score: int,
    total: int = 30,
    quiz_id: str = "quiz-1",
    minutes_later: int = 0,
    answers=None,
) -> QuizAttempt:
    return QuizAttempt(
        id=f"attempt-{score}-{minutes_later}",
        user_id="user-1",
        quiz_id=quiz_id,
        score=score,
        total_questions=total,
        time_taken=300,
        answers=answers,
        completed_at=BASE_TIME + timedelta(minutes=minutes_later),
    )


class TestBuildQuizProgress:
    """Tests for build_quiz_progress."""

    def test_single_attempt_reports_percentage_and_best(self) -> None:
        """22 of 30 correct is 73%, best score is the raw count."""
        progress = build_quiz_progress(make_quiz(), [make_attempt(22)])

        assert progress.attempts[0].percentage == 73
        assert progress.attempts[0].correct_answers == 22
        assert progress.best_score == 22
        assert progress.average_score == 73
        assert "first attempt" in progress.interpretation.lower()

    def test_no_attempts(self) -> None:
        progress = build_quiz_progress(make_quiz(), [])

        assert progress.attempt_count == 0
        assert progress.average_score == 0
        assert progress.best_score == 0
        assert progress.interpretation == NO_ATTEMPTS_MESSAGE
        assert progress.to_dict()["score_band"] is None

    def test_attempts_listed_newest_first_and_filtered_by_quiz(self) -> None:
        attempts = [
            make_attempt(15, minutes_later=0),
            make_attempt(27, minutes_later=60),
            make_attempt(30, quiz_id="other-quiz", minutes_later=30),
        ]

        progress = build_quiz_progress(make_quiz(), attempts)

        assert progress.attempt_count == 2
        assert [a.correct_answers for a in progress.attempts] == [27, 15]
        assert progress.best_score == 27
        # mean of 15 and 27 is 21 of 30
        assert progress.average_score == 70
        assert progress.interpretation.startswith("Good progress!")
        assert "across 2 attempts" in progress.interpretation

    def test_stored_answer_details_take_precedence(self) -> None:
        answers = {
            "q1": {"answer": "A", "is_correct": True},
            "q2": {"answer": "B", "is_correct": False},
            "q3": {"answer": "C", "isCorrect": True},
        }
        attempt = make_attempt(99, total=3, answers=answers)

        assert count_correct_answers(answers) == 2
        assert correct_answers_for(attempt) == 2

    def test_legacy_percentage_score_is_converted_back(self) -> None:
        """A stored score above the question count was a percentage."""
        attempt = make_attempt(80, total=10)

        assert correct_answers_for(attempt) == 8

    def test_plain_answer_map_falls_back_to_score(self) -> None:
        attempt = make_attempt(4, total=5, answers={"q1": "Mitochondria"})

        assert count_correct_answers(attempt.answers) is None
        assert correct_answers_for(attempt) == 4


class TestInterpretProgress:
    """Tests for the interpretation ladder."""

    @pytest.mark.parametrize(
        ("average", "expected"),
        [
            (85, "Great first attempt!"),
            (65, "Good first attempt!"),
            (40, "Keep studying and try again"),
        ],
    )
    def test_first_attempt_ladder(self, average: int, expected: str) -> None:
        assert interpret_progress(average, 1).startswith(expected)

    @pytest.mark.parametrize(
        ("average", "expected"),
        [
            (95, "Excellent performance!"),
            (90, "Excellent performance!"),
            (80, "Great work!"),
            (70, "Good progress!"),
            (10, "Keep practicing!"),
        ],
    )
    def test_repeat_attempt_ladder(self, average: int, expected: str) -> None:
        message = interpret_progress(average, 3)

        assert message.startswith(expected)
        assert f"Average score: {average}% across 3 attempts." in message

    def test_zero_attempts(self) -> None:
        assert interpret_progress(0, 0) == NO_ATTEMPTS_MESSAGE

    def test_score_band(self) -> None:
        assert score_band(92) == "excellent"
        assert score_band(80) == "great"
        assert score_band(70.5) == "good"
        assert score_band(12) == "needs_work"
