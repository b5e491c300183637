# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for cumulative question type totals.

The running totals are updated with a single upsert that increments the
stored values in the database. The read-then-write variant below shows
the lost update the upsert avoids.
"""

import pytest
from sqlalchemy import select, update

from src.domains.analytics.question_types import QuestionTypePerformanceService
from src.domains.quizzes.grading import TypeStats
from src.infrastructure.database.models import CumulativeQuestionTypePerformance

pytestmark = pytest.mark.integration

USER = "user-1"
TABLE = CumulativeQuestionTypePerformance


async def read_totals(session_factory, question_type: str = "true_false") -> CumulativeQuestionTypePerformance:
    async with session_factory() as db:
        return (
            await db.execute(select(TABLE).where(TABLE.user_id == USER, TABLE.question_type == question_type))
        ).scalar_one()


class TestCumulativeUpsert:
    """Tests for update_cumulative_performance."""

    @pytest.mark.asyncio
    async def test_sequential_updates_accumulate(self, session_factory) -> None:
        async with session_factory() as db:
            service = QuestionTypePerformanceService(db)
            await service.update_cumulative_performance(USER, {"true_false": TypeStats(3, 5, 60)})
            await service.update_cumulative_performance(USER, {"true_false": TypeStats(4, 5, 80)})

        totals = await read_totals(session_factory)

        assert totals.total_correct == 7
        assert totals.total_questions == 10
        assert totals.total_percentage == 70
        assert totals.quiz_count == 2

    @pytest.mark.asyncio
    async def test_one_row_per_user_and_type(self, session_factory) -> None:
        async with session_factory() as db:
            service = QuestionTypePerformanceService(db)
            for _ in range(3):
                await service.update_cumulative_performance(
                    USER,
                    {"true_false": TypeStats(1, 2, 50), "identification": TypeStats(2, 3, 67)},
                )
            rows = (await db.execute(select(TABLE).where(TABLE.user_id == USER))).scalars().all()

        assert len(rows) == 2
        identification = await read_totals(session_factory, "identification")
        assert (identification.total_correct, identification.total_questions) == (6, 9)
        assert identification.total_percentage == 67

    @pytest.mark.asyncio
    async def test_types_without_questions_are_skipped(self, session_factory) -> None:
        async with session_factory() as db:
            await QuestionTypePerformanceService(db).update_cumulative_performance(
                USER, {"true_false": TypeStats(0, 0, 0)}
            )
            rows = (await db.execute(select(TABLE))).scalars().all()

        assert rows == []

    @pytest.mark.asyncio
    async def test_interleaved_submissions_lose_nothing(self, session_factory) -> None:
        """Two submissions whose writes interleave still add up."""
        async with session_factory() as db:
            service = QuestionTypePerformanceService(db)
            await service.update_cumulative_performance(USER, {"true_false": TypeStats(3, 5, 60)})

            first = service.build_cumulative_upsert("sqlite", USER, "true_false", TypeStats(4, 5, 80))
            second = service.build_cumulative_upsert("sqlite", USER, "true_false", TypeStats(5, 5, 100))
            await db.execute(first)
            await db.execute(second)
            await db.commit()

        totals = await read_totals(session_factory)

        assert (totals.total_correct, totals.total_questions, totals.quiz_count) == (12, 15, 3)
        assert totals.total_percentage == 80

    @pytest.mark.asyncio
    async def test_read_then_write_loses_an_update(self, session_factory) -> None:
        """Two writers that both read before either writes keep only the last write."""
        async with session_factory() as db:
            await QuestionTypePerformanceService(db).update_cumulative_performance(
                USER, {"true_false": TypeStats(3, 5, 60)}
            )

        columns = (TABLE.total_correct, TABLE.total_questions, TABLE.quiz_count)
        where = (TABLE.user_id == USER, TABLE.question_type == "true_false")
        async with session_factory() as db:
            seen_by_first = (await db.execute(select(*columns).where(*where))).one()
            seen_by_second = (await db.execute(select(*columns).where(*where))).one()

            for seen, stats in ((seen_by_first, TypeStats(4, 5, 80)), (seen_by_second, TypeStats(5, 5, 100))):
                await db.execute(
                    update(TABLE)
                    .where(*where)
                    .values(
                        total_correct=seen.total_correct + stats.correct,
                        total_questions=seen.total_questions + stats.total,
                        quiz_count=seen.quiz_count + 1,
                    )
                )
            await db.commit()

        totals = await read_totals(session_factory)

        assert (totals.total_correct, totals.total_questions, totals.quiz_count) == (8, 10, 2)
