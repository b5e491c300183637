# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Study session tracking domain.

Exports:
    StudySessionService: Session rows and learning streaks.
    ActivityTimer: Idle/active timer for one client session.
    SessionTrackerRegistry: Owner of all timers.
"""

from src.domains.study_sessions.service import (
    ACTIVITY_TYPES,
    InvalidActivityTypeError,
    StudySessionError,
    StudySessionNotFoundError,
    StudySessionService,
    advance_streak,
    session_duration_minutes,
)
from src.domains.study_sessions.tracker import ActivityTimer, OpenSession, SessionTrackerRegistry

__all__ = [
    "ACTIVITY_TYPES",
    "ActivityTimer",
    "InvalidActivityTypeError",
    "OpenSession",
    "SessionTrackerRegistry",
    "StudySessionError",
    "StudySessionNotFoundError",
    "StudySessionService",
    "advance_streak",
    "session_duration_minutes",
]
