# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Concurrent row fetching for analytics.

Loads every row the analytics pipeline needs for one user. Queries run in
parallel, each on its own session since an AsyncSession cannot run
concurrent statements. A failed query is logged and yields an empty list,
so aggregation always receives lists and may under-report but never
crashes on a missing table. Only when every query fails is the store
considered unavailable and DatabaseError raised.

Usage:
    from src.domains.analytics.fetcher import RowFetcher

    fetcher = RowFetcher(get_sessionmaker())
    rows = await fetcher.fetch(user_id)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models import (
    LearningStreak,
    Quiz,
    QuizAttempt,
    StoredFile,
    StudyMaterial,
    StudySession,
)

logger = logging.getLogger(__name__)


@dataclass
class UserRows:
    """Raw rows for one user."""

    user_id: str
    files: list[StoredFile] = field(default_factory=list)
    materials: list[StudyMaterial] = field(default_factory=list)
    quizzes: list[Quiz] = field(default_factory=list)
    attempts: list[QuizAttempt] = field(default_factory=list)
    sessions: list[StudySession] = field(default_factory=list)
    streak: LearningStreak | None = None


def _require_any(results: list[list[Any] | None], user_id: str) -> list[list[Any]]:
    """Replace failed results with empty lists, raising if all failed."""
    if all(rows is None for rows in results):
        raise DatabaseError(f"No analytics rows could be loaded for user {user_id}")
    return [rows if rows is not None else [] for rows in results]


class RowFetcher:
    """Fetches a user's analytics rows concurrently.

    Attributes:
        session_factory: Factory producing one AsyncSession per query.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def fetch(self, user_id: str) -> UserRows:
        """Fetch files, materials, quizzes, attempts, sessions and streak.

        Args:
            user_id: Owner of the rows.

        Returns:
            UserRows with empty lists for failed or empty queries.

        Raises:
            DatabaseError: If every query failed.
        """
        results = await asyncio.gather(
            self._rows("files", StoredFile, user_id, StoredFile.uploaded_at),
            self._rows("reviewers", StudyMaterial, user_id, StudyMaterial.created_at),
            self._rows("quizzes", Quiz, user_id, Quiz.created_at),
            self._rows("quiz_attempts", QuizAttempt, user_id, QuizAttempt.completed_at),
            self._rows("study_sessions", StudySession, user_id, StudySession.started_at),
            self._rows("learning_streaks", LearningStreak, user_id, LearningStreak.updated_at, limit=1),
        )
        files, materials, quizzes, attempts, sessions, streaks = _require_any(results, user_id)

        logger.debug(
            "Fetched analytics rows: user=%s, files=%d, quizzes=%d, attempts=%d, sessions=%d",
            user_id,
            len(files),
            len(quizzes),
            len(attempts),
            len(sessions),
        )

        return UserRows(
            user_id=user_id,
            files=files,
            materials=materials,
            quizzes=quizzes,
            attempts=attempts,
            sessions=sessions,
            streak=streaks[0] if streaks else None,
        )

    async def fetch_quiz_history(self, user_id: str) -> tuple[list[Quiz], list[QuizAttempt]]:
        """Quizzes (newest first) and all attempts of one user."""
        results = await asyncio.gather(
            self._rows("quizzes", Quiz, user_id, Quiz.created_at),
            self._rows("quiz_attempts", QuizAttempt, user_id, QuizAttempt.completed_at),
        )
        quizzes, attempts = _require_any(results, user_id)
        return quizzes, attempts

    async def _rows(
        self,
        table: str,
        model: Any,
        user_id: str,
        order_column: Any,
        limit: int | None = None,
    ) -> list[Any] | None:
        stmt = select(model).where(model.user_id == user_id).order_by(desc(order_column))
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Failed to fetch %s for user %s: %s", table, user_id, str(e))
            return None
