# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Study insights derived from summary metrics."""

from dataclasses import dataclass
from typing import Any, Sequence

from src.domains.analytics.aggregator import SubjectStats
from src.utils.formatting import round_to

WEAK_SUBJECT_THRESHOLD = 80
STREAK_ACHIEVEMENT_DAYS = 7
LOW_STUDY_MINUTES = 120


@dataclass
class StudyInsight:
    """One insight card: strength, weakness, recommendation or achievement."""

    insight_type: str
    title: str
    description: str
    actionable: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.insight_type,
            "title": self.title,
            "description": self.description,
            "actionable": self.actionable,
        }


def generate_study_insights(
    subjects: Sequence[SubjectStats],
    study_streak: int,
    total_study_minutes: int,
) -> list[StudyInsight]:
    """Build insight cards from subject scores, streak and study time.

    New users with nothing to report get a single welcome card.
    """
    insights: list[StudyInsight] = []

    if subjects:
        best = max(subjects, key=lambda s: s.average_score)
        best_score = round_to(best.average_score, 1)
        insights.append(
            StudyInsight(
                insight_type="strength",
                title=f"Strong Performance in {best.subject}",
                description=f"You're excelling in {best.subject} with an average score of {best_score:g}%",
            )
        )

        weakest = min(subjects, key=lambda s: s.average_score)
        if weakest.average_score < WEAK_SUBJECT_THRESHOLD:
            weakest_score = round_to(weakest.average_score, 1)
            insights.append(
                StudyInsight(
                    insight_type="weakness",
                    title=f"Focus Needed: {weakest.subject}",
                    description=(
                        f"Your {weakest.subject} average is {weakest_score:g}%. "
                        "Consider additional practice."
                    ),
                    actionable=f"Generate more quizzes for {weakest.subject} topics",
                )
            )

    if study_streak >= STREAK_ACHIEVEMENT_DAYS:
        insights.append(
            StudyInsight(
                insight_type="achievement",
                title="Week-Long Study Streak!",
                description=f"You've maintained a {study_streak}-day study streak. Keep it up!",
            )
        )

    if total_study_minutes < LOW_STUDY_MINUTES:
        insights.append(
            StudyInsight(
                insight_type="recommendation",
                title="Increase Study Time",
                description="Consider spending more time studying to improve your performance.",
                actionable="Aim for at least 30 minutes of study time per day",
            )
        )

    if not insights:
        insights.append(
            StudyInsight(
                insight_type="recommendation",
                title="Welcome to Your Learning Journey!",
                description=(
                    "Start by uploading study materials or taking some quizzes "
                    "to see your analytics here."
                ),
                actionable="Upload your first document or generate a quiz to get started",
            )
        )

    return insights
