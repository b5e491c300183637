# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for activity timers and study sessions."""

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from src.domains.study_sessions import SessionTrackerRegistry, StudySessionService
from src.domains.study_sessions.service import InvalidActivityTypeError, StudySessionNotFoundError
from src.infrastructure.database.models import LearningStreak, StudySession
from src.utils.datetime import get_zone

pytestmark = pytest.mark.integration

UTC = get_zone("UTC")


@pytest.fixture
def registry(session_factory) -> SessionTrackerRegistry:
    return SessionTrackerRegistry(session_factory, UTC)


async def all_sessions(session_factory) -> list[StudySession]:
    async with session_factory() as db:
        return list((await db.execute(select(StudySession).order_by(StudySession.started_at))).scalars().all())


class TestActivityTimer:
    """Tests for the idle/active timer."""

    @pytest.mark.asyncio
    async def test_start_then_end(self, registry, session_factory, sample_user_id) -> None:
        timer = registry.get(sample_user_id, "tab-1")

        opened = await timer.start("quiz", resource_id="quiz-1", resource_name="Cells")
        assert timer.is_active
        assert timer.is_tracking("quiz", "quiz-1")

        ended = await timer.end(metadata={"score": 80})

        assert not timer.is_active
        assert ended.id == opened.session_id
        assert ended.duration_minutes == 1
        assert ended.session_metadata == {"score": 80}

    @pytest.mark.asyncio
    async def test_starting_again_ends_the_open_session(self, registry, session_factory, sample_user_id) -> None:
        timer = registry.get(sample_user_id, "tab-1")

        await timer.start("review", resource_id="material-1")
        await timer.start("quiz", resource_id="quiz-1")

        sessions = await all_sessions(session_factory)
        assert [s.activity_type for s in sessions] == ["review", "quiz"]
        assert sessions[0].ended_at is not None
        assert sessions[1].ended_at is None
        assert timer.current.activity_type == "quiz"

    @pytest.mark.asyncio
    async def test_ending_while_idle(self, registry, sample_user_id) -> None:
        assert await registry.get(sample_user_id, "tab-1").end() is None

    @pytest.mark.asyncio
    async def test_timers_are_per_client(self, registry, sample_user_id) -> None:
        assert registry.get(sample_user_id, "tab-1") is registry.get(sample_user_id, "tab-1")
        assert registry.get(sample_user_id, "tab-1") is not registry.get(sample_user_id, "tab-2")
        assert registry.peek(sample_user_id, "tab-3") is None
        assert len(registry) == 2


class TestRegistryFlush:
    """Tests for flushing timers."""

    @pytest.mark.asyncio
    async def test_flush_one_client(self, registry, session_factory, sample_user_id) -> None:
        await registry.get(sample_user_id, "tab-1").start("study")

        closed = await registry.flush(sample_user_id, "tab-1")

        assert closed is not None
        assert registry.peek(sample_user_id, "tab-1") is None
        assert (await all_sessions(session_factory))[0].ended_at is not None

    @pytest.mark.asyncio
    async def test_flush_all(self, registry, session_factory, sample_user_id) -> None:
        await registry.get(sample_user_id, "tab-1").start("study")
        await registry.get(sample_user_id, "tab-2").start("quiz", resource_id="quiz-1")
        registry.get("other-user", "tab-1")

        closed = await registry.flush_all()

        assert closed == 2
        assert len(registry) == 0
        assert all(s.ended_at is not None for s in await all_sessions(session_factory))

    @pytest.mark.asyncio
    async def test_ending_through_the_registry_forgets_the_timer(
        self, registry, session_factory, sample_user_id
    ) -> None:
        await registry.get(sample_user_id, "tab-1").start("study")

        ended = await registry.flush(sample_user_id, "tab-1", metadata={"pages": 4})

        assert ended.session_metadata == {"pages": 4}
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_discard_idle_keeps_open_timers(self, registry, sample_user_id) -> None:
        await registry.get(sample_user_id, "tab-1").start("study")
        registry.get(sample_user_id, "tab-2")

        assert registry.discard_idle(sample_user_id, "tab-1") is False
        assert registry.discard_idle(sample_user_id, "tab-2") is True
        assert registry.discard_idle(sample_user_id, "tab-3") is False
        assert len(registry) == 1
        await registry.flush_all()


class TestStudySessionService:
    """Tests for session persistence and streaks."""

    @pytest.mark.asyncio
    async def test_unknown_activity(self, db_session, sample_user_id) -> None:
        with pytest.raises(InvalidActivityTypeError):
            await StudySessionService(db_session, UTC).start_session(sample_user_id, "gaming")

    @pytest.mark.asyncio
    async def test_end_unknown_session(self, db_session, sample_user_id) -> None:
        with pytest.raises(StudySessionNotFoundError):
            await StudySessionService(db_session, UTC).end_session(sample_user_id, "missing")

    @pytest.mark.asyncio
    async def test_duration_and_streak(self, db_session, sample_user_id) -> None:
        service = StudySessionService(db_session, UTC)
        day_one = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)

        first = await service.start_session(sample_user_id, "study", started_at=day_one)
        first = await service.end_session(sample_user_id, first.id, ended_at=day_one + timedelta(minutes=25))
        second = await service.start_session(sample_user_id, "quiz", started_at=day_one + timedelta(days=1))
        await service.end_session(sample_user_id, second.id, ended_at=day_one + timedelta(days=1, minutes=5))

        streak = (
            await db_session.execute(select(LearningStreak).where(LearningStreak.user_id == sample_user_id))
        ).scalar_one()
        assert first.duration_minutes == 25
        assert streak.current_streak == 2
        assert streak.longest_streak == 2
        assert streak.last_activity_date == date(2025, 3, 11)

    @pytest.mark.asyncio
    async def test_ending_twice_changes_nothing(self, db_session, sample_user_id) -> None:
        service = StudySessionService(db_session, UTC)
        start = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)
        session = await service.start_session(sample_user_id, "study", started_at=start)
        await service.end_session(sample_user_id, session.id, ended_at=start + timedelta(minutes=10))

        again = await service.end_session(sample_user_id, session.id, ended_at=start + timedelta(hours=2))

        assert again.duration_minutes == 10

    @pytest.mark.asyncio
    async def test_record_activity(self, db_session, sample_user_id) -> None:
        session = await StudySessionService(db_session, UTC).record_activity(
            sample_user_id, "upload", resource_id="file-1", resource_name="bio.pdf"
        )

        assert session.duration_minutes == 1
        assert session.ended_at is not None
