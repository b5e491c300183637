# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Study sessions, learning streaks and user preferences."""

from sqlalchemy import Column, Date, DateTime, Integer, String

from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin, new_uuid
from src.utils.datetime import utc_now


class StudySession(Base):
    """A tracked interval of user activity."""

    __tablename__ = "study_sessions"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    activity_type = Column(String(32), nullable=False)
    resource_id = Column(String(36), nullable=True)
    resource_name = Column(String(255), nullable=True)
    file_id = Column(String(36), nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    # "metadata" is reserved on declarative classes
    session_metadata = Column("metadata", JSONType, nullable=True)


class LearningStreak(Base, TimestampMixin):
    """Consecutive study-day counter for a user."""

    __tablename__ = "learning_streaks"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(Date, nullable=True)


class UserPreference(Base, TimestampMixin):
    """Study goals and notification preferences."""

    __tablename__ = "user_preferences"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, unique=True)
    preferred_subjects = Column(JSONType, nullable=False, default=list)
    study_goals = Column(JSONType, nullable=False, default=dict)
    difficulty_preference = Column(String(20), nullable=False, default="medium")
    daily_study_target = Column(Integer, nullable=False, default=30)
    notification_settings = Column(JSONType, nullable=False, default=dict)
