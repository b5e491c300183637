# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User study preferences.

Every user has exactly one preference row, created with defaults the
first time it is read.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.preferences.schemas import PreferenceUpdateRequest
from src.infrastructure.database.models import UserPreference

logger = logging.getLogger(__name__)

DEFAULT_STUDY_GOALS: dict[str, int] = {
    "daily_minutes": 30,
    "weekly_quizzes": 5,
    "improvement_target": 10,
}

DEFAULT_NOTIFICATION_SETTINGS: dict[str, bool] = {
    "study_reminders": True,
    "achievement_notifications": True,
    "weekly_summary": True,
}


class PreferenceService:
    """Reads and updates a user's study preferences."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def _find(self, user_id: str) -> UserPreference | None:
        stmt = select(UserPreference).where(UserPreference.user_id == user_id)
        return (await self._db.execute(stmt)).scalar_one_or_none()

    async def get_or_create(self, user_id: str) -> UserPreference:
        """Return the user's preferences, creating the default row if missing."""
        preference = await self._find(user_id)
        if preference is not None:
            return preference

        preference = UserPreference(
            user_id=user_id,
            preferred_subjects=[],
            study_goals=dict(DEFAULT_STUDY_GOALS),
            difficulty_preference="medium",
            daily_study_target=DEFAULT_STUDY_GOALS["daily_minutes"],
            notification_settings=dict(DEFAULT_NOTIFICATION_SETTINGS),
        )
        self._db.add(preference)
        try:
            await self._db.commit()
        except IntegrityError:
            # created concurrently by another request
            await self._db.rollback()
            existing = await self._find(user_id)
            if existing is None:
                raise
            return existing

        await self._db.refresh(preference)
        logger.info("Default preferences created for user %s", user_id)
        return preference

    async def update(self, user_id: str, request: PreferenceUpdateRequest) -> UserPreference:
        """Apply the fields present in the request. Goal and notification maps are merged."""
        preference = await self.get_or_create(user_id)
        changes: dict[str, Any] = request.model_dump(exclude_unset=True)

        if "preferred_subjects" in changes:
            preference.preferred_subjects = changes["preferred_subjects"]
        if "difficulty_preference" in changes:
            preference.difficulty_preference = changes["difficulty_preference"]
        if "daily_study_target" in changes:
            preference.daily_study_target = changes["daily_study_target"]
        if changes.get("study_goals"):
            preference.study_goals = {**(preference.study_goals or {}), **changes["study_goals"]}
        if changes.get("notification_settings"):
            preference.notification_settings = {
                **(preference.notification_settings or {}),
                **changes["notification_settings"],
            }

        await self._db.commit()
        await self._db.refresh(preference)
        return preference
