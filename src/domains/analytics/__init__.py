# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics domain services.

This module provides the learning analytics pipeline:
- Row fetching (concurrent, failure-tolerant)
- Metric aggregation (totals, averages, breakdowns)
- Fixed-threshold heuristics (trends, estimates, benchmarks)
- Per-quiz progress with interpretations
- Question type performance with atomic running totals

Usage:
    from src.domains.analytics import AnalyticsService

    service = AnalyticsService(session_factory)
    analytics = await service.get_user_analytics(user_id)
"""

from src.domains.analytics.fetcher import RowFetcher, UserRows
from src.domains.analytics.insights import StudyInsight, generate_study_insights
from src.domains.analytics.progress import (
    AttemptProgress,
    QuizProgress,
    build_quiz_progress,
    correct_answers_for,
    interpret_progress,
    score_band,
)
from src.domains.analytics.question_types import (
    QuestionTypeAnalytics,
    QuestionTypePerformanceService,
    performance_summary,
    question_type_display_name,
)
from src.domains.analytics.service import (
    AnalyticsService,
    AnalyticsServiceError,
    AnalyticsUnavailableError,
    UserAnalytics,
)

__all__ = [
    # Fetching
    "RowFetcher",
    "UserRows",
    # Progress
    "AttemptProgress",
    "QuizProgress",
    "build_quiz_progress",
    "correct_answers_for",
    "interpret_progress",
    "score_band",
    # Question types
    "QuestionTypeAnalytics",
    "QuestionTypePerformanceService",
    "performance_summary",
    "question_type_display_name",
    # Service
    "AnalyticsService",
    "AnalyticsServiceError",
    "AnalyticsUnavailableError",
    "UserAnalytics",
    # Insights
    "StudyInsight",
    "generate_study_insights",
]
