# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Metric aggregation over a user's raw rows.

Reduces fetched rows into totals, averages and per-category breakdowns.
Every function here is pure: rows in, numbers out. Attempt scores are
percentages derived from each attempt's correct-answer count, averaged
without weighting by question count.

Fixed fallbacks (reading level 12, page count 10) are display
placeholders used when the underlying data is absent. They make no claim
of accuracy.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from pathlib import PurePath
from typing import Any, Iterable, Sequence

from src.domains.analytics.progress import EARLIEST, attempt_percentage
from src.infrastructure.database.models import (
    QuizAttempt,
    Quiz,
    StoredFile,
    StudyMaterial,
    StudySession,
)
from src.utils.datetime import ensure_utc, format_iso, last_n_days, local_date

DEFAULT_DIFFICULTY = "medium"
DEFAULT_SUBJECT = "General"
PLACEHOLDER_READING_LEVEL = 12
PLACEHOLDER_PAGE_COUNT = 10
LONG_FORM_PAGE_THRESHOLD = 20
WEEK_DAYS = 7
RECENT_ACTIVITY_LIMIT = 10


@dataclass
class DailyProgress:
    """Mean score and study time for one calendar day."""

    day: date
    score: float = 0.0
    study_minutes: int = 0
    attempts: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.day.isoformat(),
            "score": round(self.score, 1),
            "study_minutes": self.study_minutes,
            "attempts": self.attempts,
        }


@dataclass
class DifficultyStats:
    """Quiz count and mean score for one difficulty label."""

    difficulty: str
    quiz_count: int = 0
    attempt_count: int = 0
    average_score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "difficulty": self.difficulty,
            "quiz_count": self.quiz_count,
            "attempt_count": self.attempt_count,
            "average_score": round(self.average_score, 1),
        }


@dataclass
class SubjectStats:
    """Performance grouped by subject."""

    subject: str
    scores: list[float] = field(default_factory=list)
    quiz_count: int = 0
    study_minutes: int = 0

    @property
    def average_score(self) -> float:
        return sum(self.scores) / len(self.scores) if self.scores else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "average_score": round(self.average_score, 1),
            "quiz_count": self.quiz_count,
            "study_minutes": self.study_minutes,
        }


@dataclass
class ActivityEntry:
    """One item in the recent activity feed."""

    activity_type: str
    title: str
    occurred_at: datetime | None
    score: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.activity_type,
            "title": self.title,
            "occurred_at": format_iso(self.occurred_at),
            "score": round(self.score, 1) if self.score is not None else None,
        }


@dataclass
class ConceptProgress:
    """Mastery estimate for one quiz topic."""

    concept: str
    mastery_level: float
    time_to_master: int
    confidence_score: float
    last_reviewed: datetime | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "concept": self.concept,
            "mastery_level": round(self.mastery_level, 1),
            "time_to_master": self.time_to_master,
            "confidence_score": round(self.confidence_score, 1),
            "last_reviewed": format_iso(self.last_reviewed),
        }


def chronological(attempts: Iterable[QuizAttempt]) -> list[QuizAttempt]:
    """Attempts ordered oldest first."""
    return sorted(attempts, key=lambda a: ensure_utc(a.completed_at) or EARLIEST)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def total_study_time(sessions: Iterable[StudySession]) -> int:
    """Sum of session durations in minutes."""
    return sum(session.duration_minutes or 0 for session in sessions)


def average_score(attempts: Iterable[QuizAttempt]) -> float:
    """Arithmetic mean of attempt percentages, 0 when there are none."""
    return _mean([attempt_percentage(attempt) for attempt in attempts])


def quizzes_taken(attempts: Iterable[QuizAttempt]) -> int:
    """Number of distinct quizzes attempted."""
    return len({attempt.quiz_id for attempt in attempts})


def weekly_progress(
    attempts: Iterable[QuizAttempt],
    sessions: Iterable[StudySession],
    today: date,
    tz: tzinfo,
    days: int = WEEK_DAYS,
) -> list[DailyProgress]:
    """Bucket the last `days` calendar days, oldest first, ending today.

    Attempts are placed by completion time and sessions by start time,
    both converted into `tz` before taking the date. Always returns exactly
    `days` entries.
    """
    buckets = {day: DailyProgress(day=day) for day in last_n_days(today, days)}
    scores: dict[date, list[float]] = defaultdict(list)

    for attempt in attempts:
        day = local_date(attempt.completed_at, tz)
        if day in buckets:
            scores[day].append(attempt_percentage(attempt))

    for session in sessions:
        day = local_date(session.started_at, tz)
        if day in buckets:
            buckets[day].study_minutes += session.duration_minutes or 0

    for day, day_scores in scores.items():
        buckets[day].score = _mean(day_scores)
        buckets[day].attempts = len(day_scores)

    return list(buckets.values())


def _difficulty_label(quiz: Quiz) -> str:
    return (quiz.difficulty or DEFAULT_DIFFICULTY).lower()


def difficulty_breakdown(
    quizzes: Iterable[Quiz],
    attempts: Iterable[QuizAttempt],
) -> list[DifficultyStats]:
    """Per difficulty: quiz count and mean of each quiz's mean attempt score.

    Quizzes without attempts count towards `quiz_count` and contribute 0 to
    the mean, unless no quiz of that difficulty was attempted, in which case
    the average is 0.
    """
    by_quiz: dict[str, list[float]] = defaultdict(list)
    for attempt in attempts:
        by_quiz[attempt.quiz_id].append(attempt_percentage(attempt))

    stats: dict[str, DifficultyStats] = {}
    totals: dict[str, float] = defaultdict(float)
    for quiz in quizzes:
        label = _difficulty_label(quiz)
        entry = stats.setdefault(label, DifficultyStats(difficulty=label))
        quiz_scores = by_quiz.get(quiz.id, [])
        entry.quiz_count += 1
        entry.attempt_count += len(quiz_scores)
        totals[label] += _mean(quiz_scores)

    for label, entry in stats.items():
        if entry.attempt_count > 0:
            entry.average_score = totals[label] / entry.quiz_count
    return list(stats.values())


def subject_label(file: StoredFile) -> str:
    """Subject of a file, falling back to its name without extension."""
    if file.subject:
        return file.subject
    if file.original_name:
        stem = PurePath(file.original_name).name.split(".")[0]
        if stem:
            return stem
    return DEFAULT_SUBJECT


def subject_performance(
    files: Iterable[StoredFile],
    quizzes: Iterable[Quiz],
    attempts: Iterable[QuizAttempt],
    sessions: Iterable[StudySession],
) -> list[SubjectStats]:
    """Scores, quiz counts and study time grouped by file subject."""
    quizzes_by_file: dict[str, list[Quiz]] = defaultdict(list)
    for quiz in quizzes:
        if quiz.file_id:
            quizzes_by_file[quiz.file_id].append(quiz)

    attempts_by_quiz: dict[str, list[QuizAttempt]] = defaultdict(list)
    for attempt in attempts:
        attempts_by_quiz[attempt.quiz_id].append(attempt)

    minutes_by_file: dict[str, int] = defaultdict(int)
    for session in sessions:
        if session.file_id:
            minutes_by_file[session.file_id] += session.duration_minutes or 0

    groups: dict[str, SubjectStats] = {}
    for file in files:
        label = subject_label(file)
        entry = groups.setdefault(label, SubjectStats(subject=label))
        file_quizzes = quizzes_by_file.get(file.id, [])
        entry.quiz_count += len(file_quizzes)
        entry.study_minutes += minutes_by_file.get(file.id, 0)
        for quiz in file_quizzes:
            entry.scores.extend(attempt_percentage(a) for a in attempts_by_quiz.get(quiz.id, []))
    return list(groups.values())


def recent_activity(
    attempts: Sequence[QuizAttempt],
    files: Sequence[StoredFile],
    materials: Sequence[StudyMaterial],
    quizzes: Iterable[Quiz],
    limit: int = RECENT_ACTIVITY_LIMIT,
) -> list[ActivityEntry]:
    """Merge recent quiz attempts, uploads and study materials, newest first."""
    titles = {quiz.id: quiz.title for quiz in quizzes}

    def newest(rows, stamp, count):
        return sorted(rows, key=lambda r: ensure_utc(stamp(r)) or EARLIEST, reverse=True)[:count]

    entries = [
        ActivityEntry(
            activity_type="quiz",
            title=titles.get(attempt.quiz_id, "Quiz"),
            occurred_at=attempt.completed_at,
            score=attempt_percentage(attempt),
        )
        for attempt in newest(attempts, lambda a: a.completed_at, 10)
    ]
    entries.extend(
        ActivityEntry(activity_type="upload", title=file.original_name or "File", occurred_at=file.uploaded_at)
        for file in newest(files, lambda f: f.uploaded_at, 5)
    )
    entries.extend(
        ActivityEntry(
            activity_type="study_material",
            title=material.title or "Study Guide",
            occurred_at=material.created_at,
        )
        for material in newest(materials, lambda m: m.created_at, 5)
    )

    entries.sort(key=lambda e: ensure_utc(e.occurred_at) or EARLIEST, reverse=True)
    return entries[:limit]


def concept_progression(
    attempts: Sequence[QuizAttempt],
    quizzes: Iterable[Quiz],
    limit: int = 10,
) -> list[ConceptProgress]:
    """Mastery per quiz title from chronologically ordered attempts."""
    titles = {quiz.id: quiz.title for quiz in quizzes}
    grouped: dict[str, list[QuizAttempt]] = {}
    for attempt in chronological(attempts):
        grouped.setdefault(titles.get(attempt.quiz_id, "General Concept"), []).append(attempt)

    result = []
    for concept, concept_attempts in grouped.items():
        scores = [attempt_percentage(a) for a in concept_attempts]
        confidence = min(100.0, scores[-1] - scores[0] + 50) if len(scores) > 1 else 50.0
        result.append(
            ConceptProgress(
                concept=concept,
                mastery_level=_mean(scores),
                # 30 minutes per attempt, an estimate
                time_to_master=len(concept_attempts) * 30,
                confidence_score=confidence,
                last_reviewed=concept_attempts[-1].completed_at,
            )
        )
    return result[:limit]


def content_complexity(files: Sequence[StoredFile]) -> dict[str, Any]:
    """Average reading level and length of uploaded documents."""
    count = max(len(files), 1)
    average_pages = sum(file.page_count or PLACEHOLDER_PAGE_COUNT for file in files) / count
    return {
        "average_reading_level": PLACEHOLDER_READING_LEVEL,
        "average_page_count": round(average_pages, 1),
        "optimal_length": (
            "Long-form content"
            if files and average_pages > LONG_FORM_PAGE_THRESHOLD
            else "Short-form content"
        ),
    }


def generation_metrics(
    files: Sequence[StoredFile],
    quizzes: Sequence[Quiz],
    materials: Sequence[StudyMaterial],
) -> dict[str, Any]:
    """Volume of generated content per uploaded document."""
    question_counts = [quiz.total_questions or len(quiz.questions or []) for quiz in quizzes]
    per_file = len(quizzes) / len(files) if files else 0.0
    return {
        "average_questions_per_quiz": round(_mean(question_counts), 1),
        "quizzes_per_file": round(per_file, 2),
        "study_materials_created": len(materials),
        "files_with_text": sum(1 for file in files if file.content_text),
    }
