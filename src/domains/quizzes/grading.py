# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz answer grading and per-question-type analysis.

Questions are plain dicts as stored in the quiz's JSON column. Keys are
snake_case; camelCase keys from older rows are also read.

Identification answers are matched leniently: besides an exact
case-insensitive match, an answer sharing any word longer than two
characters with a multi-word correct answer is accepted. This accepts some
wrong answers that happen to share a common word.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.domains.analytics.question_types import question_type_display_name
from src.utils.datetime import ensure_utc, utc_now
from src.utils.formatting import round_half_up

TRACKED_QUESTION_TYPES = ("multiple_choice", "true_false", "identification")


def question_field(question: dict[str, Any], name: str, default: Any = None) -> Any:
    """Read a question attribute by snake_case name, falling back to camelCase."""
    if name in question:
        return question[name]
    head, *rest = name.split("_")
    camel = head + "".join(part.title() for part in rest)
    return question.get(camel, default)


def detect_question_type(question: dict[str, Any]) -> str:
    """Infer the question type.

    An explicit type wins. Otherwise two options containing True and False
    (or a True/False correct answer) mean true_false, more than two options
    mean multiple_choice and no options mean identification.
    """
    explicit = question_field(question, "question_type")
    if explicit:
        return explicit

    options = question_field(question, "options") or []
    if len(options) == 2:
        lowered = [str(option).lower() for option in options]
        if "true" in lowered and "false" in lowered:
            return "true_false"
        if question_field(question, "correct_answer") in ("True", "False"):
            return "true_false"
    if len(options) > 2:
        return "multiple_choice"
    if not options:
        return "identification"
    return "unknown"


def _significant_words(text: str) -> list[str]:
    return [word for word in text.split(" ") if len(word) > 2]


def grade_answer(question: dict[str, Any], answer: str) -> bool:
    """Return True if `answer` is accepted for `question`."""
    correct = str(question_field(question, "correct_answer", ""))
    if detect_question_type(question) != "identification":
        return answer == correct

    given = answer.lower().strip()
    expected = correct.lower().strip()
    if given == expected:
        return True

    if " " in expected:
        user_words = _significant_words(given)
        if user_words and any(word in user_words for word in _significant_words(expected)):
            return True
    return False


@dataclass
class TypeStats:
    """Correct/total counts for one question type."""

    correct: int = 0
    total: int = 0
    percentage: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"correct": self.correct, "total": self.total, "percentage": self.percentage}


@dataclass
class AnswerDetail:
    """Grading outcome for one question."""

    answer: str
    is_correct: bool
    correct_answer: str
    question_type: str
    question_text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "is_correct": self.is_correct,
            "correct_answer": self.correct_answer,
            "question_type": self.question_type,
            "question_text": self.question_text,
        }


@dataclass
class QuizResult:
    """Graded quiz submission."""

    quiz_id: str
    score: int
    total_questions: int
    correct_answers: int
    time_spent: int
    answers: dict[str, AnswerDetail] = field(default_factory=dict)
    question_type_analysis: dict[str, TypeStats] = field(default_factory=dict)
    completed_at: datetime = field(default_factory=utc_now)

    def answers_payload(self) -> dict[str, dict[str, Any]]:
        return {question_id: detail.to_dict() for question_id, detail in self.answers.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "quiz_id": self.quiz_id,
            "score": self.score,
            "total_questions": self.total_questions,
            "correct_answers": self.correct_answers,
            "time_spent": self.time_spent,
            "answers": self.answers_payload(),
            "question_type_analysis": {
                question_type: stats.to_dict()
                for question_type, stats in self.question_type_analysis.items()
            },
            "completed_at": self.completed_at.isoformat(),
            "summary": generate_performance_summary(self),
        }


def analyze_question_type_performance(details: dict[str, AnswerDetail]) -> dict[str, TypeStats]:
    """Count correct and total answers per question type.

    The tracked types are always present, with zero counts when unanswered.
    """
    analysis = {question_type: TypeStats() for question_type in TRACKED_QUESTION_TYPES}
    for detail in details.values():
        stats = analysis.setdefault(detail.question_type, TypeStats())
        stats.total += 1
        if detail.is_correct:
            stats.correct += 1

    for stats in analysis.values():
        if stats.total > 0:
            stats.percentage = round_half_up(stats.correct / stats.total * 100)
    return analysis


def calculate_quiz_results(
    quiz_id: str,
    questions: list[dict[str, Any]],
    answers: dict[str, str],
    started_at: datetime | None = None,
    completed_at: datetime | None = None,
) -> QuizResult:
    """Grade a submission.

    Args:
        quiz_id: Quiz being graded.
        questions: The quiz's questions.
        answers: Question id -> submitted answer. Missing answers count as
            empty strings.
        started_at: When the attempt started, for time spent.
        completed_at: Completion time, defaults to now.

    Returns:
        QuizResult with score percentage and per-type analysis.
    """
    finished = completed_at or utc_now()
    details: dict[str, AnswerDetail] = {}
    correct_count = 0

    for index, question in enumerate(questions):
        question_id = str(question_field(question, "id") or f"q{index + 1}")
        answer = answers.get(question_id) or ""
        is_correct = grade_answer(question, answer)
        if is_correct:
            correct_count += 1
        details[question_id] = AnswerDetail(
            answer=answer,
            is_correct=is_correct,
            correct_answer=str(question_field(question, "correct_answer", "")),
            question_type=detect_question_type(question),
            question_text=str(question_field(question, "question_text", "")),
        )

    total = len(questions)
    time_spent = 0
    if started_at is not None:
        time_spent = max(int((finished - ensure_utc(started_at)).total_seconds()), 0)

    return QuizResult(
        quiz_id=quiz_id,
        score=round_half_up(correct_count / total * 100) if total else 0,
        total_questions=total,
        correct_answers=correct_count,
        time_spent=time_spent,
        answers=details,
        question_type_analysis=analyze_question_type_performance(details),
        completed_at=finished,
    )


def weakest_question_type(analysis: dict[str, TypeStats]) -> str | None:
    weakest, lowest = None, 100
    for question_type, stats in analysis.items():
        if stats.total > 0 and stats.percentage < lowest:
            weakest, lowest = question_type, stats.percentage
    return weakest


def strongest_question_type(analysis: dict[str, TypeStats]) -> str | None:
    strongest, highest = None, -1
    for question_type, stats in analysis.items():
        if stats.total > 0 and stats.percentage > highest:
            strongest, highest = question_type, stats.percentage
    return strongest


def generate_performance_summary(result: QuizResult) -> str:
    """Overall score line plus strongest and weakest types when they differ."""
    summary = f"Overall Score: {result.score}% ({result.correct_answers}/{result.total_questions})"

    analysis = result.question_type_analysis
    strongest = strongest_question_type(analysis)
    weakest = weakest_question_type(analysis)
    if strongest and weakest and strongest != weakest:
        summary += (
            f"\n\nStrong: {question_type_display_name(strongest)} "
            f"({analysis[strongest].percentage}%)"
            f"\nNeeds improvement: {question_type_display_name(weakest)} "
            f"({analysis[weakest].percentage}%)"
        )
    return summary
