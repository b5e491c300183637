# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""File library API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from src.utils.formatting import format_file_size


class FileResponse(BaseModel):
    """An uploaded document."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="File identifier.")
    original_name: str = Field(description="Name of the uploaded file.")
    mime_type: str = Field(description="MIME type of the file.")
    file_size: int = Field(description="Size in bytes.")
    subject: str | None = Field(default=None, description="Detected subject.")
    status: str = Field(description="uploaded, processed or failed.")
    page_count: int | None = Field(default=None, description="Pages, for PDF documents.")
    has_text: bool = Field(default=False, description="Whether text was extracted.")
    uploaded_at: datetime = Field(description="Upload time.")

    @computed_field
    @property
    def file_size_display(self) -> str:
        return format_file_size(self.file_size)


class DownloadURLResponse(BaseModel):
    """A signed download link."""

    url: str = Field(description="Relative URL valid for a short time.")
    expires_in: int = Field(description="Lifetime in seconds.")
