# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get the authenticated user
- Get shared infrastructure (storage, LLM client, activity timers)
- Get service instances

Example:
    @router.get("/files")
    async def list_files(
        current_user: CurrentUser = Depends(require_auth),
        files: FileService = Depends(get_file_service),
    ):
        ...
"""

import logging
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.api.middleware.auth import CurrentUser, get_current_user
from src.core.config import get_settings
from src.core.intelligence.llm import LLMClient
from src.domains.analytics import AnalyticsService
from src.domains.generation import ContentGenerator
from src.domains.library import FileService
from src.domains.preferences import PreferenceService
from src.domains.quizzes import QuizAttemptService, QuizService
from src.domains.study_materials import StudyMaterialService
from src.domains.study_sessions import SessionTrackerRegistry, StudySessionService
from src.infrastructure.database.connection import (
    DatabaseError,
    close_database,
    get_session,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.storage import ObjectStorage
from src.utils.datetime import get_zone

logger = logging.getLogger(__name__)

_storage: ObjectStorage | None = None
_generator: ContentGenerator | None = None
_tracker_registry: SessionTrackerRegistry | None = None


async def init_services() -> None:
    """Initialize the database, storage, generator and timer registry."""
    global _storage, _generator, _tracker_registry
    settings = get_settings()

    await init_database(settings)
    _storage = ObjectStorage(settings.storage, settings.auth)
    _generator = ContentGenerator(LLMClient(llm_settings=settings.llm))
    _tracker_registry = SessionTrackerRegistry(
        get_sessionmaker(),
        get_zone(settings.analytics.timezone),
    )


async def close_services() -> None:
    """End open study sessions and close connections."""
    global _storage, _generator, _tracker_registry

    if _tracker_registry is not None:
        await _tracker_registry.flush_all()
        _tracker_registry = None

    await close_database()
    _storage = None
    _generator = None


def _not_ready(component: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"{component} not initialized",
    )


# =========================================================================
# Infrastructure Dependencies
# =========================================================================


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession, committed when the request succeeds.
    """
    async with get_session() as session:
        yield session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    try:
        return get_sessionmaker()
    except DatabaseError as e:
        raise _not_ready("Database") from e


def get_storage() -> ObjectStorage:
    if _storage is None:
        raise _not_ready("Storage")
    return _storage


def get_generator() -> ContentGenerator:
    if _generator is None:
        raise _not_ready("Content generator")
    return _generator


def get_tracker_registry() -> SessionTrackerRegistry:
    if _tracker_registry is None:
        raise _not_ready("Session tracker")
    return _tracker_registry


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require an authenticated user.

    Raises:
        HTTPException: 401 if not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


# =========================================================================
# Service Dependencies
# =========================================================================


def get_file_service(
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
) -> FileService:
    return FileService(db, storage, get_settings().storage)


def get_quiz_service(
    db: AsyncSession = Depends(get_db),
    files: FileService = Depends(get_file_service),
    generator: ContentGenerator = Depends(get_generator),
) -> QuizService:
    return QuizService(db, files=files, generator=generator)


def get_attempt_service(db: AsyncSession = Depends(get_db)) -> QuizAttemptService:
    return QuizAttemptService(db)


def get_study_material_service(
    db: AsyncSession = Depends(get_db),
    files: FileService = Depends(get_file_service),
    generator: ContentGenerator = Depends(get_generator),
) -> StudyMaterialService:
    return StudyMaterialService(db, files=files, generator=generator)


def get_study_session_service(db: AsyncSession = Depends(get_db)) -> StudySessionService:
    return StudySessionService(db, get_zone(get_settings().analytics.timezone))


def get_analytics_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AnalyticsService:
    return AnalyticsService(session_factory, get_settings().analytics)


def get_preference_service(db: AsyncSession = Depends(get_db)) -> PreferenceService:
    return PreferenceService(db)
