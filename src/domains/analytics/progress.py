# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-quiz attempt history and its plain-language interpretation.

Each quiz is reported with every attempt's correct-answer count,
percentage and time, the average and best score across attempts, and a
canned interpretation chosen from a fixed ladder of score thresholds.

Usage:
    from src.domains.analytics.progress import build_quiz_progress

    progress = build_quiz_progress(quiz, attempts)
    print(progress.interpretation)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable

from src.infrastructure.database.models import Quiz, QuizAttempt
from src.utils.datetime import ensure_utc, format_iso
from src.utils.formatting import round_half_up

NO_ATTEMPTS_MESSAGE = "No attempts yet - try this quiz to see your progress!"
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

# (minimum score, message) checked top to bottom
_FIRST_ATTEMPT_LADDER = (
    (80, "Great first attempt! You can retake to improve further."),
    (60, "Good first attempt! Consider reviewing the material and retaking."),
    (0, "Keep studying and try again - this was only your first attempt!"),
)

_REPEAT_ATTEMPT_LADDER = (
    (90, "Excellent performance!"),
    (80, "Great work!"),
    (70, "Good progress!"),
    (0, "Keep practicing!"),
)

_SCORE_BANDS = (
    (90, "excellent"),
    (80, "great"),
    (70, "good"),
    (0, "needs_work"),
)


@dataclass
class AttemptProgress:
    """One attempt as shown in quiz progress."""

    attempt_id: str
    correct_answers: int
    total_questions: int
    percentage: int
    time_taken: int
    completed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempt_id": self.attempt_id,
            "correct_answers": self.correct_answers,
            "total_questions": self.total_questions,
            "percentage": self.percentage,
            "time_taken": self.time_taken,
            "completed_at": format_iso(self.completed_at),
        }


@dataclass
class QuizProgress:
    """Attempt history and summary for one quiz."""

    quiz_id: str
    quiz_title: str
    total_questions: int
    difficulty: str | None
    attempts: list[AttemptProgress] = field(default_factory=list)
    average_score: int = 0
    best_score: int = 0
    interpretation: str = NO_ATTEMPTS_MESSAGE

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "quiz_id": self.quiz_id,
            "quiz_title": self.quiz_title,
            "total_questions": self.total_questions,
            "difficulty": self.difficulty,
            "attempt_count": self.attempt_count,
            "average_score": self.average_score,
            "best_score": self.best_score,
            "score_band": score_band(self.average_score) if self.attempts else None,
            "interpretation": self.interpretation,
            "attempts": [attempt.to_dict() for attempt in self.attempts],
        }


def _is_correct(entry: dict[str, Any]) -> bool:
    if "is_correct" in entry:
        return bool(entry["is_correct"])
    return bool(entry.get("isCorrect"))


def count_correct_answers(answers: Any) -> int | None:
    """Count correct entries in a stored per-answer payload.

    Accepts a list of answer details or a mapping of question id to answer
    details. Returns None when the payload carries no correctness flags
    (for example a plain question -> answer map).
    """
    if isinstance(answers, list):
        entries = answers
    elif isinstance(answers, dict):
        entries = list(answers.values())
    else:
        return None

    flagged = [
        entry
        for entry in entries
        if isinstance(entry, dict) and ("is_correct" in entry or "isCorrect" in entry)
    ]
    if not flagged:
        return None
    return sum(1 for entry in flagged if _is_correct(entry))


def correct_answers_for(attempt: QuizAttempt) -> int:
    """Derive the number of correct answers for an attempt.

    Uses the stored per-answer details when present. Otherwise the stored
    score is the correct count, except for legacy rows whose score exceeds
    the question count: those stored a percentage, which is converted back.
    """
    counted = count_correct_answers(attempt.answers)
    if counted is not None:
        return counted

    score = attempt.score or 0
    total = attempt.total_questions or 0
    if total > 0 and score > total:
        return round_half_up(score / 100 * total)
    return score


def percentage_of(correct: float, total: int) -> int:
    """Whole-number percentage, 0 when there are no questions."""
    if total <= 0:
        return 0
    return round_half_up(correct / total * 100)


def attempt_percentage(attempt: QuizAttempt) -> float:
    """Unrounded attempt score in percent, used for averaging."""
    total = attempt.total_questions or 0
    if total <= 0:
        return 0.0
    return correct_answers_for(attempt) / total * 100


def score_band(score: float) -> str:
    """Presentation-neutral band for a percentage score."""
    for minimum, band in _SCORE_BANDS:
        if score >= minimum:
            return band
    return _SCORE_BANDS[-1][1]


def interpret_progress(average_score: int, attempt_count: int) -> str:
    """Pick the interpretation string for a quiz's progress.

    Args:
        average_score: Average percentage across attempts.
        attempt_count: Number of attempts taken.

    Returns:
        Human-readable interpretation.
    """
    if attempt_count == 0:
        return NO_ATTEMPTS_MESSAGE

    if attempt_count == 1:
        for minimum, message in _FIRST_ATTEMPT_LADDER:
            if average_score >= minimum:
                return message

    for minimum, headline in _REPEAT_ATTEMPT_LADDER:
        if average_score >= minimum:
            return f"{headline} Average score: {average_score}% across {attempt_count} attempts."
    return NO_ATTEMPTS_MESSAGE


def _completed_sort_key(attempt: QuizAttempt) -> datetime:
    return ensure_utc(attempt.completed_at) or EARLIEST


def build_quiz_progress(quiz: Quiz, attempts: Iterable[QuizAttempt]) -> QuizProgress:
    """Build the progress entry for one quiz.

    Attempts belonging to other quizzes are ignored. Attempts are listed
    newest first.

    Args:
        quiz: The quiz row.
        attempts: Attempt rows, typically every attempt of the user.

    Returns:
        QuizProgress for the quiz.
    """
    quiz_total = quiz.total_questions or len(quiz.questions or [])
    own_attempts = sorted(
        (attempt for attempt in attempts if attempt.quiz_id == quiz.id),
        key=_completed_sort_key,
        reverse=True,
    )

    rows: list[AttemptProgress] = []
    for attempt in own_attempts:
        correct = correct_answers_for(attempt)
        total = attempt.total_questions or quiz_total
        rows.append(
            AttemptProgress(
                attempt_id=attempt.id,
                correct_answers=correct,
                total_questions=total,
                percentage=percentage_of(correct, total),
                time_taken=attempt.time_taken or 0,
                completed_at=attempt.completed_at,
            )
        )

    progress = QuizProgress(
        quiz_id=quiz.id,
        quiz_title=quiz.title,
        total_questions=quiz_total,
        difficulty=quiz.difficulty,
        attempts=rows,
    )
    if rows:
        mean_correct = sum(row.correct_answers for row in rows) / len(rows)
        progress.average_score = percentage_of(mean_correct, quiz_total)
        progress.best_score = max(row.correct_answers for row in rows)
    progress.interpretation = interpret_progress(progress.average_score, len(rows))
    return progress
