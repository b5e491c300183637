# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial StudyPilot schema.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-06-02
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=None if nullable else sa.text("now()"),
    )


def upgrade() -> None:
    """Create all StudyPilot tables."""
    # =========================================================================
    # LIBRARY
    # =========================================================================

    op.create_table(
        "files",
        _id_column(),
        sa.Column("user_id", sa.String(36), nullable=False, index=True),
        sa.Column("storage_path", sa.String(512), nullable=False, unique=True),
        sa.Column("original_name", sa.String(255), nullable=False),
        sa.Column("mime_type", sa.String(128), nullable=False),
        sa.Column("file_size", sa.BigInteger, nullable=False),
        sa.Column("content_text", sa.Text, nullable=True),
        sa.Column("page_count", sa.Integer, nullable=True),
        sa.Column("subject", sa.String(64), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="uploaded"),
        _timestamp("uploaded_at"),
    )
    op.create_index("ix_files_user_uploaded", "files", ["user_id", "uploaded_at"])

    op.create_table(
        "reviewers",
        _id_column(),
        sa.Column("user_id", sa.String(36), nullable=False, index=True),
        sa.Column(
            "file_id",
            sa.String(36),
            sa.ForeignKey("files.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("material_type", sa.String(20), nullable=False),
        sa.Column("content", postgresql.JSONB, nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    # =========================================================================
    # QUIZZES
    # =========================================================================

    op.create_table(
        "quizzes",
        _id_column(),
        sa.Column("user_id", sa.String(36), nullable=False, index=True),
        sa.Column(
            "file_id",
            sa.String(36),
            sa.ForeignKey("files.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("difficulty", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("subject", sa.String(64), nullable=True),
        sa.Column("total_questions", sa.Integer, nullable=False),
        sa.Column("questions", postgresql.JSONB, nullable=False, server_default="[]"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "quiz_attempts",
        _id_column(),
        sa.Column("user_id", sa.String(36), nullable=False, index=True),
        sa.Column(
            "quiz_id",
            sa.String(36),
            sa.ForeignKey("quizzes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("total_questions", sa.Integer, nullable=False),
        sa.Column("time_taken", sa.Integer, nullable=False, server_default="0"),
        sa.Column("answers", postgresql.JSONB, nullable=True),
        _timestamp("completed_at"),
    )
    op.create_index(
        "ix_quiz_attempts_user_completed", "quiz_attempts", ["user_id", "completed_at"]
    )

    op.create_table(
        "quiz_question_type_performance",
        _id_column(),
        sa.Column("user_id", sa.String(36), nullable=False, index=True),
        sa.Column("quiz_id", sa.String(36), nullable=False),
        sa.Column("question_type", sa.String(32), nullable=False),
        sa.Column("correct_answers", sa.Integer, nullable=False),
        sa.Column("total_questions", sa.Integer, nullable=False),
        sa.Column("percentage", sa.Integer, nullable=False),
        _timestamp("quiz_date"),
    )

    op.create_table(
        "cumulative_question_type_performance",
        _id_column(),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("question_type", sa.String(32), nullable=False),
        sa.Column("total_correct", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_questions", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_percentage", sa.Integer, nullable=False, server_default="0"),
        sa.Column("quiz_count", sa.Integer, nullable=False, server_default="0"),
        _timestamp("last_updated"),
        sa.UniqueConstraint(
            "user_id", "question_type", name="uq_cumulative_user_question_type"
        ),
    )

    # =========================================================================
    # ACTIVITY
    # =========================================================================

    op.create_table(
        "study_sessions",
        _id_column(),
        sa.Column("user_id", sa.String(36), nullable=False, index=True),
        sa.Column("activity_type", sa.String(32), nullable=False),
        sa.Column("resource_id", sa.String(36), nullable=True),
        sa.Column("resource_name", sa.String(255), nullable=True),
        sa.Column("file_id", sa.String(36), nullable=True),
        sa.Column("duration_minutes", sa.Integer, nullable=False, server_default="0"),
        _timestamp("started_at"),
        _timestamp("ended_at", nullable=True),
        sa.Column("metadata", postgresql.JSONB, nullable=True),
    )

    op.create_table(
        "learning_streaks",
        _id_column(),
        sa.Column("user_id", sa.String(36), nullable=False, index=True),
        sa.Column("current_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_activity_date", sa.Date, nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "user_preferences",
        _id_column(),
        sa.Column("user_id", sa.String(36), nullable=False, unique=True),
        sa.Column("preferred_subjects", postgresql.JSONB, nullable=False, server_default="[]"),
        sa.Column("study_goals", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column(
            "difficulty_preference", sa.String(20), nullable=False, server_default="medium"
        ),
        sa.Column("daily_study_target", sa.Integer, nullable=False, server_default="30"),
        sa.Column(
            "notification_settings", postgresql.JSONB, nullable=False, server_default="{}"
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )


def downgrade() -> None:
    """Drop all StudyPilot tables."""
    op.drop_table("user_preferences")
    op.drop_table("learning_streaks")
    op.drop_table("study_sessions")
    op.drop_table("cumulative_question_type_performance")
    op.drop_table("quiz_question_type_performance")
    op.drop_index("ix_quiz_attempts_user_completed", table_name="quiz_attempts")
    op.drop_table("quiz_attempts")
    op.drop_table("quizzes")
    op.drop_table("reviewers")
    op.drop_index("ix_files_user_uploaded", table_name="files")
    op.drop_table("files")
