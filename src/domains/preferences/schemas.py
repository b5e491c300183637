# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Preference API schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PreferenceResponse(BaseModel):
    """A user's study preferences."""

    model_config = ConfigDict(from_attributes=True)

    preferred_subjects: list[str] = Field(default_factory=list)
    study_goals: dict[str, int] = Field(default_factory=dict)
    difficulty_preference: str
    daily_study_target: int = Field(description="Daily study goal in minutes.")
    notification_settings: dict[str, bool] = Field(default_factory=dict)


class PreferenceUpdateRequest(BaseModel):
    """Partial update of preferences."""

    preferred_subjects: list[str] | None = None
    study_goals: dict[str, int] | None = Field(
        default=None,
        description="Keys such as daily_minutes, weekly_quizzes, improvement_target.",
    )
    difficulty_preference: Literal["easy", "medium", "hard"] | None = None
    daily_study_target: int | None = Field(default=None, ge=1, le=24 * 60)
    notification_settings: dict[str, bool] | None = None
