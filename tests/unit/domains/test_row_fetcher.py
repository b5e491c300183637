# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the analytics row fetcher."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.domains.analytics.fetcher import RowFetcher
from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models import LearningStreak, Quiz, QuizAttempt


def result_of(rows: list) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


class FakeSessionFactory:
    """Hands out mock sessions whose execute() answers per queried table."""

    def __init__(self, answers: dict[str, object]) -> None:
        self.answers = answers
        self.opened = 0

    def __call__(self) -> MagicMock:
        self.opened += 1
        session = AsyncMock()

        async def execute(stmt):
            table = stmt.get_final_froms()[0].name
            answer = self.answers.get(table, [])
            if isinstance(answer, Exception):
                raise answer
            return result_of(answer)

        session.execute = execute
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=session)
        context.__aexit__ = AsyncMock(return_value=False)
        return context


def failure(table: str) -> OperationalError:
    return OperationalError(f"SELECT * FROM {table}", {}, Exception(f"no such table: {table}"))


class TestRowFetcher:
    """Tests for RowFetcher.fetch."""

    @pytest.mark.asyncio
    async def test_each_query_uses_its_own_session(self) -> None:
        factory = FakeSessionFactory({})

        rows = await RowFetcher(factory).fetch("user-1")

        assert factory.opened == 6
        assert rows.files == []
        assert rows.attempts == []
        assert rows.streak is None

    @pytest.mark.asyncio
    async def test_rows_are_returned_per_collection(self) -> None:
        quiz = Quiz(id="quiz-1", user_id="user-1", title="Quiz", total_questions=5)
        attempt = QuizAttempt(id="a-1", user_id="user-1", quiz_id="quiz-1", score=3, total_questions=5)
        streak = LearningStreak(user_id="user-1", current_streak=4)
        factory = FakeSessionFactory(
            {"quizzes": [quiz], "quiz_attempts": [attempt], "learning_streaks": [streak]}
        )

        rows = await RowFetcher(factory).fetch("user-1")

        assert rows.quizzes == [quiz]
        assert rows.attempts == [attempt]
        assert rows.streak is streak

    @pytest.mark.asyncio
    async def test_failed_query_becomes_empty_list(self) -> None:
        attempt = QuizAttempt(id="a-1", user_id="user-1", quiz_id="quiz-1", score=3, total_questions=5)
        factory = FakeSessionFactory({"reviewers": failure("reviewers"), "quiz_attempts": [attempt]})

        rows = await RowFetcher(factory).fetch("user-1")

        assert rows.materials == []
        assert rows.attempts == [attempt]

    @pytest.mark.asyncio
    async def test_every_query_failing_raises(self) -> None:
        tables = ["files", "reviewers", "quizzes", "quiz_attempts", "study_sessions", "learning_streaks"]
        factory = FakeSessionFactory({table: failure(table) for table in tables})

        with pytest.raises(DatabaseError):
            await RowFetcher(factory).fetch("user-1")

    @pytest.mark.asyncio
    async def test_connection_errors_are_tolerated(self) -> None:
        factory = FakeSessionFactory({"files": ConnectionRefusedError("refused")})

        rows = await RowFetcher(factory).fetch("user-1")

        assert rows.files == []

    @pytest.mark.asyncio
    async def test_quiz_history(self) -> None:
        quiz = Quiz(id="quiz-1", user_id="user-1", title="Quiz", total_questions=5)
        factory = FakeSessionFactory({"quizzes": [quiz], "quiz_attempts": failure("quiz_attempts")})

        quizzes, attempts = await RowFetcher(factory).fetch_quiz_history("user-1")

        assert quizzes == [quiz]
        assert attempts == []
