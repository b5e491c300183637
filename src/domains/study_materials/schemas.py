# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Study material API schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MaterialType = Literal["summary", "flashcards", "notes"]


class StudyMaterialGenerateRequest(BaseModel):
    """Request to generate study material from a file."""

    file_id: str = Field(description="Source file.")
    material_type: MaterialType = Field(description="Kind of material to generate.")
    focus_areas: list[str] | None = Field(
        default=None,
        description="Topics to emphasize.",
    )


class StudyMaterialRenameRequest(BaseModel):
    """New title for a study material."""

    title: str = Field(min_length=1, max_length=255)


class StudyMaterialResponse(BaseModel):
    """A stored study material."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    file_id: str | None = None
    title: str
    material_type: MaterialType
    content: dict[str, Any]
    created_at: datetime
    is_placeholder: bool = Field(
        default=False,
        description="True when generation failed and generic content was stored.",
    )
