# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Declarative base and shared column helpers for StudyPilot models.

Primary keys are UUID strings so the same models run on PostgreSQL and on
the in-memory SQLite database used by the integration tests. Payload
columns use JSONB on PostgreSQL and plain JSON elsewhere.
"""

import uuid

from sqlalchemy import JSON, Column, DateTime, inspect
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

from src.utils.datetime import utc_now

JSONType = JSON().with_variant(JSONB(), "postgresql")


def new_uuid() -> str:
    """Generate a string UUID primary key."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Declarative base for all tables."""

    def to_dict(self) -> dict:
        """Column values keyed by attribute name."""
        return {attr.key: getattr(self, attr.key) for attr in inspect(self).mapper.column_attrs}


class TimestampMixin:
    """Adds created_at and updated_at columns."""

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
