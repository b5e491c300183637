# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Each module provides a FastAPI router for a specific domain.

Modules:
    files: Upload, list, download and delete library files.
    quizzes: Quiz generation, editing, attempts and per-quiz progress.
    study_materials: Study guide, flashcard and note generation.
    study_sessions: Activity timer and study session history.
    analytics: Learning analytics, question type performance and insights.
    preferences: Study goals and notification settings.
"""

from fastapi import APIRouter

from src.api.v1 import analytics, files, preferences, quizzes, study_materials, study_sessions

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(files.router, prefix="/files", tags=["Files"])
router.include_router(quizzes.router, prefix="/quizzes", tags=["Quizzes"])
router.include_router(study_materials.router, prefix="/study-materials", tags=["Study Materials"])
router.include_router(study_sessions.router, prefix="/study-sessions", tags=["Study Sessions"])
router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
router.include_router(preferences.router, prefix="/preferences", tags=["Preferences"])

__all__ = ["router"]
