# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Study session API schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ActivityType = Literal["quiz", "upload", "review", "generate", "study"]


class SessionStartRequest(BaseModel):
    """Start tracking an activity."""

    client_id: str = Field(description="Identifier of the browser tab or client session.")
    activity_type: ActivityType = Field(description="What the user is doing.")
    resource_id: str | None = Field(default=None, description="Quiz, file or material id.")
    resource_name: str | None = Field(default=None, description="Display name of the resource.")
    file_id: str | None = Field(default=None, description="Related file, if any.")
    metadata: dict[str, Any] | None = None


class SessionEndRequest(BaseModel):
    """End the open activity of a client session."""

    client_id: str = Field(description="Identifier of the browser tab or client session.")
    metadata: dict[str, Any] | None = Field(default=None, description="Extra data to store, e.g. score.")


class SessionFlushRequest(BaseModel):
    """Sent on page unload."""

    client_id: str


class StudySessionResponse(BaseModel):
    """A stored study session."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    activity_type: str
    resource_id: str | None = None
    resource_name: str | None = None
    file_id: str | None = None
    duration_minutes: int
    started_at: datetime
    ended_at: datetime | None = None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="session_metadata")


class ActiveSessionResponse(BaseModel):
    """State of a client's activity timer."""

    active: bool
    session_id: str | None = None
    activity_type: str | None = None
    started_at: datetime | None = None
    resource_id: str | None = None
