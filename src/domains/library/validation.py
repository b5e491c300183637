# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Upload validation."""

from src.utils.formatting import format_file_size

SUPPORTED_FILE_TYPES = {
    "application/pdf": ".pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "application/msword": ".doc",
    "text/plain": ".txt",
}

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class FileValidationError(Exception):
    """Raised when an upload is rejected.

    Attributes:
        message: User-facing reason.
        status_code: HTTP status suggested for the rejection.
    """

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def validate_upload(
    mime_type: str,
    size: int,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    allowed_types: list[str] | None = None,
) -> None:
    """Check type and size of an upload.

    Raises:
        FileValidationError: 415 for an unsupported type, 413 when too large,
            400 when empty.
    """
    allowed = allowed_types if allowed_types is not None else list(SUPPORTED_FILE_TYPES)
    if mime_type not in allowed:
        raise FileValidationError(
            "Unsupported file type. Please upload PDF, DOCX, DOC, or TXT files.",
            status_code=415,
        )
    if size <= 0:
        raise FileValidationError("The uploaded file is empty.")
    if size > max_bytes:
        raise FileValidationError(
            f"File size too large. Please upload files smaller than {format_file_size(max_bytes)}.",
            status_code=413,
        )
