# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics API endpoints.

This module provides endpoints for learning analytics:
- GET / - Full analytics for the current user
- GET /quiz-progress - Progress per quiz
- GET /question-types - Question type performance and trends
- GET /insights - Insight cards

Example:
    GET /api/v1/analytics
"""

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import get_analytics_service, require_auth
from src.api.middleware.auth import CurrentUser
from src.domains.analytics import AnalyticsService, AnalyticsUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter()


def _unavailable(e: AnalyticsUnavailableError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get("", summary="Get analytics", description="Full learning analytics for the current user.")
async def get_analytics(
    today: date | None = Query(None, description="Last day of the weekly window."),
    current_user: CurrentUser = Depends(require_auth),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> dict[str, Any]:
    logger.info("Getting analytics for user: %s", current_user.id)
    try:
        result = await analytics.get_user_analytics(current_user.id, today=today)
    except AnalyticsUnavailableError as e:
        raise _unavailable(e) from e
    return result.to_dict()


@router.get("/quiz-progress", summary="Progress per quiz")
async def get_quiz_progress(
    current_user: CurrentUser = Depends(require_auth),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> list[dict[str, Any]]:
    progress = await analytics.get_quiz_progress(current_user.id)
    return [entry.to_dict() for entry in progress]


@router.get("/question-types", summary="Question type performance")
async def get_question_type_analytics(
    current_user: CurrentUser = Depends(require_auth),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> dict[str, Any]:
    result = await analytics.get_question_type_analytics(current_user.id)
    return result.to_dict()


@router.get("/insights", summary="Study insights")
async def get_study_insights(
    current_user: CurrentUser = Depends(require_auth),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> list[dict[str, Any]]:
    try:
        insights = await analytics.get_study_insights(current_user.id)
    except AnalyticsUnavailableError as e:
        raise _unavailable(e) from e
    return [insight.to_dict() for insight in insights]
