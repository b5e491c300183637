# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Activity timers for study session tracking.

An ActivityTimer is either idle or tracking one open study session.
Starting a new activity while tracking ends the open session first, so a
client never has more than one open session. Timers are owned by the
SessionTrackerRegistry, keyed by user and client session, and are flushed
when the client unloads the page and when the application shuts down.

Each timer opens its own database session per transition so it can be
flushed outside of a request.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domains.study_sessions.service import StudySessionError, StudySessionService
from src.infrastructure.database.models import StudySession
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


@dataclass
class OpenSession:
    """The session an ActivityTimer is tracking."""

    session_id: str
    activity_type: str
    started_at: datetime
    resource_id: str | None = None
    resource_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "activity_type": self.activity_type,
            "started_at": self.started_at.isoformat(),
            "resource_id": self.resource_id,
            "resource_name": self.resource_name,
        }


class ActivityTimer:
    """Idle / active state machine for one client session.

    Attributes:
        user_id: Owner of the tracked sessions.
        current: The open session, or None when idle.
    """

    def __init__(
        self,
        user_id: str,
        session_factory: async_sessionmaker[AsyncSession],
        tz: tzinfo,
    ) -> None:
        self.user_id = user_id
        self.current: OpenSession | None = None
        self._session_factory = session_factory
        self._tz = tz
        self._lock = asyncio.Lock()

    @property
    def is_active(self) -> bool:
        return self.current is not None

    def is_tracking(self, activity_type: str, resource_id: str | None = None) -> bool:
        """Whether the open session is of `activity_type` (and for `resource_id` if given)."""
        if self.current is None or self.current.activity_type != activity_type:
            return False
        return resource_id is None or self.current.resource_id in (None, resource_id)

    async def start(
        self,
        activity_type: str,
        resource_id: str | None = None,
        resource_name: str | None = None,
        file_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> OpenSession:
        """Start tracking an activity, ending any open session first."""
        async with self._lock:
            if self.current is not None:
                await self._end_locked(None)

            async with self._session_factory() as db:
                service = StudySessionService(db, self._tz)
                session = await service.start_session(
                    self.user_id,
                    activity_type,
                    resource_id=resource_id,
                    resource_name=resource_name,
                    file_id=file_id,
                    metadata=metadata,
                )

            self.current = OpenSession(
                session_id=session.id,
                activity_type=activity_type,
                started_at=session.started_at,
                resource_id=resource_id,
                resource_name=resource_name,
                metadata=metadata or {},
            )
            return self.current

    async def end(self, metadata: dict[str, Any] | None = None) -> StudySession | None:
        """End the open session. Does nothing when idle."""
        async with self._lock:
            if self.current is None:
                return None
            return await self._end_locked(metadata)

    async def _end_locked(self, metadata: dict[str, Any] | None) -> StudySession | None:
        open_session = self.current
        # idle even if the write fails
        self.current = None
        try:
            async with self._session_factory() as db:
                service = StudySessionService(db, self._tz)
                return await service.end_session(
                    self.user_id,
                    open_session.session_id,
                    metadata=metadata,
                    ended_at=utc_now(),
                )
        except (SQLAlchemyError, StudySessionError) as e:
            logger.error(
                "Error ending study session %s: %s",
                open_session.session_id,
                str(e),
            )
            return None


class SessionTrackerRegistry:
    """Owns one ActivityTimer per (user, client session)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], tz: tzinfo) -> None:
        self._session_factory = session_factory
        self._tz = tz
        self._timers: dict[tuple[str, str], ActivityTimer] = {}

    def __len__(self) -> int:
        return len(self._timers)

    def get(self, user_id: str, client_id: str) -> ActivityTimer:
        """Return the timer for a client session, creating it when missing."""
        key = (user_id, client_id)
        timer = self._timers.get(key)
        if timer is None:
            timer = ActivityTimer(user_id, self._session_factory, self._tz)
            self._timers[key] = timer
        return timer

    def peek(self, user_id: str, client_id: str) -> ActivityTimer | None:
        return self._timers.get((user_id, client_id))

    async def flush(
        self,
        user_id: str,
        client_id: str,
        metadata: dict[str, Any] | None = None,
    ) -> StudySession | None:
        """End any open session for a client and forget its timer."""
        timer = self._timers.pop((user_id, client_id), None)
        if timer is None:
            return None
        return await timer.end(metadata=metadata)

    def discard_idle(self, user_id: str, client_id: str) -> bool:
        """Forget a client's timer if it has no open session."""
        key = (user_id, client_id)
        timer = self._timers.get(key)
        if timer is None or timer.is_active:
            return False
        del self._timers[key]
        return True

    async def flush_all(self) -> int:
        """End every open session. Returns how many were closed."""
        timers = list(self._timers.values())
        self._timers.clear()
        results = await asyncio.gather(*(timer.end() for timer in timers))
        closed = sum(1 for result in results if result is not None)
        if timers:
            logger.info("Flushed %d activity timers, %d open sessions closed", len(timers), closed)
        return closed
