# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models for StudyPilot."""

from src.infrastructure.database.models.activity import (
    LearningStreak,
    StudySession,
    UserPreference,
)
from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin, new_uuid
from src.infrastructure.database.models.library import StoredFile, StudyMaterial
from src.infrastructure.database.models.quiz import (
    CumulativeQuestionTypePerformance,
    Quiz,
    QuizAttempt,
    QuizQuestionTypePerformance,
)

__all__ = [
    "Base",
    "JSONType",
    "TimestampMixin",
    "new_uuid",
    "StoredFile",
    "StudyMaterial",
    "Quiz",
    "QuizAttempt",
    "QuizQuestionTypePerformance",
    "CumulativeQuestionTypePerformance",
    "StudySession",
    "LearningStreak",
    "UserPreference",
]
