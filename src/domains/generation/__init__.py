# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content generation domain.

Turns extracted document text into quiz questions and study material
through a single LLM completion per request.
"""

from src.domains.generation.parsing import (
    GenerationParseError,
    extract_json_array,
    filter_question_types,
)
from src.domains.generation.service import (
    MATERIAL_TYPES,
    ContentGenerator,
    GenerationError,
)

__all__ = [
    "ContentGenerator",
    "GenerationError",
    "GenerationParseError",
    "MATERIAL_TYPES",
    "extract_json_array",
    "filter_question_types",
]
