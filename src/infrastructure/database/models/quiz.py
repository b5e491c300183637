# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quizzes, attempts and question-type performance aggregates."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin, new_uuid
from src.utils.datetime import utc_now


class Quiz(Base, TimestampMixin):
    """A generated set of questions derived from a file."""

    __tablename__ = "quizzes"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    file_id = Column(String(36), ForeignKey("files.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    difficulty = Column(String(20), nullable=False, default="medium")
    subject = Column(String(64), nullable=True)
    total_questions = Column(Integer, nullable=False)
    questions = Column(JSONType, nullable=False, default=list)


class QuizAttempt(Base):
    """One completed run of a quiz.

    Attempts are never updated. `score` holds the raw number of correct
    answers; `answers` holds per-question details.
    """

    __tablename__ = "quiz_attempts"
    __table_args__ = (Index("ix_quiz_attempts_user_completed", "user_id", "completed_at"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    quiz_id = Column(String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    time_taken = Column(Integer, nullable=False, default=0)
    answers = Column(JSONType, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)


class QuizQuestionTypePerformance(Base):
    """Per-quiz, per-question-type result of one attempt."""

    __tablename__ = "quiz_question_type_performance"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    quiz_id = Column(String(36), nullable=False)
    question_type = Column(String(32), nullable=False)
    correct_answers = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    percentage = Column(Integer, nullable=False)
    quiz_date = Column(DateTime(timezone=True), nullable=False, default=utc_now)


class CumulativeQuestionTypePerformance(Base):
    """Running totals per user and question type.

    One row per (user_id, question_type); increments are applied by the
    database in a single upsert statement.
    """

    __tablename__ = "cumulative_question_type_performance"
    __table_args__ = (
        UniqueConstraint("user_id", "question_type", name="uq_cumulative_user_question_type"),
    )

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False)
    question_type = Column(String(32), nullable=False)
    total_correct = Column(Integer, nullable=False, default=0)
    total_questions = Column(Integer, nullable=False, default=0)
    total_percentage = Column(Integer, nullable=False, default=0)
    quiz_count = Column(Integer, nullable=False, default=0)
    last_updated = Column(DateTime(timezone=True), nullable=False, default=utc_now)
