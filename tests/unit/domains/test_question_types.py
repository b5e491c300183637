# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for question type performance tracking."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import OperationalError

from src.domains.analytics.question_types import (
    EMPTY_SUMMARY,
    QuestionTypePerformanceService,
    performance_summary,
    question_type_display_name,
)
from src.domains.quizzes.grading import TypeStats
from src.infrastructure.database.models import CumulativeQuestionTypePerformance


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.execute = AsyncMock()
    bind = MagicMock()
    bind.dialect.name = "postgresql"
    db.get_bind = MagicMock(return_value=bind)
    return db


@pytest.fixture
def service(mock_db):
    return QuestionTypePerformanceService(mock_db)


class TestCumulativeUpsert:
    """The running total is one atomic statement."""

    def test_postgres_statement_increments_in_the_database(self, service) -> None:
        stmt = service.build_cumulative_upsert("postgresql", "user-1", "true_false", TypeStats(3, 5, 60))

        sql = str(stmt.compile(dialect=postgresql.dialect()))

        assert "ON CONFLICT (user_id, question_type) DO UPDATE" in sql
        assert "cumulative_question_type_performance.total_correct + excluded.total_correct" in sql
        assert "cumulative_question_type_performance.total_questions + excluded.total_questions" in sql
        assert "cumulative_question_type_performance.quiz_count + " in sql
        assert "SELECT" not in sql

    def test_sqlite_statement(self, service) -> None:
        stmt = service.build_cumulative_upsert("sqlite", "user-1", "true_false", TypeStats(3, 5, 60))

        sql = str(stmt.compile(dialect=sqlite.dialect()))

        assert "ON CONFLICT (user_id, question_type) DO UPDATE" in sql


class TestSaveQuizPerformance:
    """Storing one graded quiz."""

    @pytest.mark.asyncio
    async def test_skips_unanswered_types(self, service, mock_db) -> None:
        analysis = {
            "multiple_choice": TypeStats(correct=1, total=2, percentage=50),
            "true_false": TypeStats(),
            "identification": TypeStats(correct=1, total=1, percentage=100),
        }

        recorded = await service.save_quiz_performance("user-1", "quiz-1", analysis)

        assert recorded == 2
        assert mock_db.add.call_count == 2
        # one upsert per answered type
        assert mock_db.execute.await_count == 2
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_nothing_answered_writes_nothing(self, service, mock_db) -> None:
        recorded = await service.save_quiz_performance("user-1", "quiz-1", {"true_false": TypeStats()})

        assert recorded == 0
        mock_db.add.assert_not_called()
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upsert_failure_rolls_back_and_propagates(self, service, mock_db) -> None:
        mock_db.execute.side_effect = OperationalError("upsert", {}, Exception("database is locked"))

        with pytest.raises(OperationalError):
            await service.save_quiz_performance(
                "user-1", "quiz-1", {"true_false": TypeStats(correct=1, total=1, percentage=100)}
            )

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_row_insert_failure_rolls_back_and_propagates(self, service, mock_db) -> None:
        mock_db.flush.side_effect = OperationalError("insert", {}, Exception("no such table"))

        with pytest.raises(OperationalError):
            await service.save_quiz_performance(
                "user-1", "quiz-1", {"true_false": TypeStats(correct=1, total=1, percentage=100)}
            )

        mock_db.rollback.assert_awaited_once()
        mock_db.execute.assert_not_awaited()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_trends_are_empty_when_history_fails(self, service, mock_db) -> None:
        mock_db.execute.side_effect = OperationalError("select", {}, Exception("no such table"))

        assert await service.calculate_improvement_trends("user-1") == []


class TestPerformanceSummary:
    """Plain-text summaries."""

    def test_empty(self) -> None:
        assert performance_summary([]) == EMPTY_SUMMARY

    def test_best_type_first(self) -> None:
        rows = [
            CumulativeQuestionTypePerformance(
                question_type="multiple_choice", total_correct=6, total_questions=10, total_percentage=60, quiz_count=2
            ),
            CumulativeQuestionTypePerformance(
                question_type="true_false", total_correct=9, total_questions=10, total_percentage=90, quiz_count=2
            ),
        ]

        summary = performance_summary(rows)

        assert summary.startswith("Overall Performance: 75% (15/20 questions)")
        lines = summary.splitlines()
        assert lines[3] == "• True/False: 90% (9/10) across 2 quizzes"
        assert lines[4] == "• Multiple Choice: 60% (6/10) across 2 quizzes"

    def test_display_names(self) -> None:
        assert question_type_display_name("fill_in_blanks") == "Fill in the Blanks"
        assert question_type_display_name("essay") == "essay"
