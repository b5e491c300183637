# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Study materials domain: generated summaries, flashcards and notes."""

from src.domains.study_materials.placeholders import placeholder_content, type_label
from src.domains.study_materials.service import (
    GeneratedMaterial,
    InsufficientContentError,
    StudyMaterialError,
    StudyMaterialNotFoundError,
    StudyMaterialService,
    StudyMaterialValidationError,
)

__all__ = [
    "GeneratedMaterial",
    "InsufficientContentError",
    "StudyMaterialError",
    "StudyMaterialNotFoundError",
    "StudyMaterialService",
    "StudyMaterialValidationError",
    "placeholder_content",
    "type_label",
]
