# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Study session persistence and learning streaks.

A session row is created with zero minutes when an activity starts and is
completed with its duration when the activity ends. Ending a session also
advances the user's learning streak, counted in calendar days of the
reporting timezone.
"""

import logging
import math
from datetime import date, datetime, timedelta, tzinfo
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import LearningStreak, StudySession
from src.utils.datetime import ensure_utc, local_date, utc_now

logger = logging.getLogger(__name__)

ACTIVITY_TYPES = ("quiz", "upload", "review", "generate", "study")
MIN_SESSION_MINUTES = 1


class StudySessionError(Exception):
    """Base exception for study session errors."""

    pass


class StudySessionNotFoundError(StudySessionError):
    """Raised when a session does not exist for the user."""

    pass


class InvalidActivityTypeError(StudySessionError):
    """Raised for an unknown activity type."""

    pass


def session_duration_minutes(started_at: datetime, ended_at: datetime) -> int:
    """Whole minutes between start and end, rounded, at least one."""
    seconds = (ensure_utc(ended_at) - ensure_utc(started_at)).total_seconds()
    return max(MIN_SESSION_MINUTES, math.floor(seconds / 60 + 0.5))


def advance_streak(streak: LearningStreak, activity_day: date) -> bool:
    """Count `activity_day` into the streak.

    Returns:
        True if the streak changed.
    """
    last = streak.last_activity_date
    if last is not None and activity_day <= last:
        return False

    if last is not None and activity_day - last == timedelta(days=1):
        streak.current_streak = (streak.current_streak or 0) + 1
    else:
        streak.current_streak = 1
    streak.longest_streak = max(streak.longest_streak or 0, streak.current_streak)
    streak.last_activity_date = activity_day
    return True


class StudySessionService:
    """Service for study sessions and streaks.

    Attributes:
        _db: Async database session.
        _tz: Reporting timezone for streak days.
    """

    def __init__(self, db: AsyncSession, tz: tzinfo) -> None:
        self._db = db
        self._tz = tz

    async def start_session(
        self,
        user_id: str,
        activity_type: str,
        resource_id: str | None = None,
        resource_name: str | None = None,
        file_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        started_at: datetime | None = None,
    ) -> StudySession:
        """Create an open session with zero minutes.

        Raises:
            InvalidActivityTypeError: If the activity type is unknown.
        """
        if activity_type not in ACTIVITY_TYPES:
            raise InvalidActivityTypeError(f"Unknown activity type: {activity_type}")

        session = StudySession(
            user_id=user_id,
            activity_type=activity_type,
            resource_id=resource_id,
            resource_name=resource_name,
            file_id=file_id,
            duration_minutes=0,
            started_at=started_at or utc_now(),
            session_metadata=metadata or {},
        )
        self._db.add(session)
        await self._db.commit()
        await self._db.refresh(session)
        logger.debug("Study session started: %s (%s)", session.id, activity_type)
        return session

    async def end_session(
        self,
        user_id: str,
        session_id: str,
        metadata: dict[str, Any] | None = None,
        ended_at: datetime | None = None,
    ) -> StudySession:
        """Close a session and record its duration.

        Ending an already closed session returns it unchanged.

        Raises:
            StudySessionNotFoundError: If the session does not exist.
        """
        stmt = select(StudySession).where(
            StudySession.id == session_id, StudySession.user_id == user_id
        )
        session = (await self._db.execute(stmt)).scalar_one_or_none()
        if session is None:
            raise StudySessionNotFoundError(f"Study session {session_id} not found")
        if session.ended_at is not None:
            return session

        finished = ended_at or utc_now()
        session.ended_at = finished
        session.duration_minutes = session_duration_minutes(session.started_at, finished)
        if metadata:
            session.session_metadata = {**(session.session_metadata or {}), **metadata}

        await self._update_streak(user_id, local_date(finished, self._tz))
        await self._db.commit()
        await self._db.refresh(session)

        logger.info(
            "Study session ended: %s (user=%s, activity=%s, minutes=%d)",
            session.id,
            user_id,
            session.activity_type,
            session.duration_minutes,
        )
        return session

    async def record_activity(
        self,
        user_id: str,
        activity_type: str,
        resource_id: str | None = None,
        resource_name: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> StudySession:
        """Record a one-off activity, such as an upload, as a minimum-length session."""
        now = utc_now()
        session = await self.start_session(
            user_id,
            activity_type,
            resource_id=resource_id,
            resource_name=resource_name,
            metadata=metadata,
            started_at=now,
        )
        return await self.end_session(user_id, session.id, ended_at=now)

    async def get_session_history(self, user_id: str, limit: int = 10) -> list[StudySession]:
        stmt = (
            select(StudySession)
            .where(StudySession.user_id == user_id)
            .order_by(desc(StudySession.started_at))
            .limit(limit)
        )
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def get_streak(self, user_id: str) -> LearningStreak | None:
        stmt = (
            select(LearningStreak)
            .where(LearningStreak.user_id == user_id)
            .order_by(desc(LearningStreak.updated_at))
            .limit(1)
        )
        return (await self._db.execute(stmt)).scalar_one_or_none()

    async def _update_streak(self, user_id: str, activity_day: date) -> LearningStreak:
        streak = await self.get_streak(user_id)
        if streak is None:
            streak = LearningStreak(user_id=user_id, current_streak=0, longest_streak=0)
            self._db.add(streak)
        if advance_streak(streak, activity_day):
            logger.debug("Learning streak for %s: %d days", user_id, streak.current_streak)
        return streak
