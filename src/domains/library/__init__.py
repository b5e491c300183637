# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Library domain package.

This package provides document library functionality including:
- Upload validation and storage
- Text extraction (PDF, DOCX, TXT)
- Subject detection
"""

from src.domains.library.extraction import ExtractedText, TextExtractionError, extract_text
from src.domains.library.service import (
    FileContentUnavailableError,
    FileNotFoundInLibraryError,
    FileService,
    FileServiceError,
)
from src.domains.library.subjects import detect_subject
from src.domains.library.validation import (
    SUPPORTED_FILE_TYPES,
    FileValidationError,
    validate_upload,
)

__all__ = [
    "ExtractedText",
    "FileContentUnavailableError",
    "FileNotFoundInLibraryError",
    "FileService",
    "FileServiceError",
    "FileValidationError",
    "SUPPORTED_FILE_TYPES",
    "TextExtractionError",
    "detect_subject",
    "extract_text",
    "validate_upload",
]
