# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for study insights."""

from src.domains.analytics.aggregator import SubjectStats
from src.domains.analytics.insights import generate_study_insights


def test_new_user_gets_only_the_study_time_card() -> None:
    insights = generate_study_insights([], study_streak=0, total_study_minutes=0)

    assert [i.insight_type for i in insights] == ["recommendation"]
    assert insights[0].title == "Increase Study Time"


def test_welcome_card_when_nothing_else_applies() -> None:
    insights = generate_study_insights([], study_streak=0, total_study_minutes=500)

    assert len(insights) == 1
    assert insights[0].title == "Welcome to Your Learning Journey!"


def test_strength_weakness_and_streak() -> None:
    subjects = [
        SubjectStats(subject="Science", scores=[92.0, 88.0]),
        SubjectStats(subject="History", scores=[55.0, 60.0]),
    ]

    insights = generate_study_insights(subjects, study_streak=7, total_study_minutes=400)
    by_type = {i.insight_type: i for i in insights}

    assert by_type["strength"].title == "Strong Performance in Science"
    assert "90%" in by_type["strength"].description
    assert by_type["weakness"].title == "Focus Needed: History"
    assert by_type["weakness"].actionable == "Generate more quizzes for History topics"
    assert by_type["achievement"].description == "You've maintained a 7-day study streak. Keep it up!"
    assert "recommendation" not in by_type


def test_no_weakness_card_when_every_subject_is_strong() -> None:
    subjects = [SubjectStats(subject="Science", scores=[95.0])]

    insights = generate_study_insights(subjects, study_streak=0, total_study_minutes=300)

    assert [i.insight_type for i in insights] == ["strength"]
