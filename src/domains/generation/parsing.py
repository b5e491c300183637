# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parsing of model output into questions, flashcards and notes."""

import json
import logging
import re
from typing import Any, Iterable

logger = logging.getLogger(__name__)

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


class GenerationParseError(Exception):
    """Raised when model output does not contain a usable JSON array."""

    pass


def extract_json_array(text: str) -> list[Any]:
    """Return the JSON array spanning the first '[' to the last ']'.

    Raises:
        GenerationParseError: If no array is found or it is not valid JSON.
    """
    match = _JSON_ARRAY.search(text or "")
    if not match:
        raise GenerationParseError("Could not parse content from AI response")

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise GenerationParseError(f"Invalid JSON in AI response: {e.msg}") from e

    if not isinstance(parsed, list):
        raise GenerationParseError("AI response is not a JSON array")
    return parsed


def _pick(item: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return default


def normalize_question(item: dict[str, Any], index: int, difficulty: str) -> dict[str, Any]:
    """Convert one generated question into the stored question shape."""
    return {
        "id": f"q{index + 1}",
        "question_text": _pick(item, "question_text", "questionText", default=""),
        "question_type": _pick(item, "question_type", "questionType"),
        "options": _pick(item, "options"),
        "correct_answer": _pick(item, "correct_answer", "correctAnswer", default=""),
        "explanation": _pick(item, "explanation"),
        "difficulty": difficulty,
    }


def filter_question_types(
    questions: Iterable[dict[str, Any]],
    allowed_types: Iterable[str],
) -> list[dict[str, Any]]:
    """Drop questions whose type was not requested."""
    allowed = set(allowed_types)
    kept = []
    dropped = 0
    for question in questions:
        if question.get("question_type") in allowed:
            kept.append(question)
        else:
            dropped += 1
    if dropped:
        logger.warning(
            "Filtered %d questions with unrequested types, allowed: %s",
            dropped,
            ", ".join(sorted(allowed)),
        )
    return kept


def normalize_flashcards(items: list[Any]) -> list[dict[str, str]]:
    """Flashcards as {front, back, difficulty, category}."""
    cards = []
    for item in items:
        if not isinstance(item, dict):
            continue
        cards.append(
            {
                "front": str(_pick(item, "front", "question", default="Question")),
                "back": str(_pick(item, "back", "answer", default="Answer")),
                "difficulty": str(_pick(item, "difficulty", default="basic")),
                "category": str(_pick(item, "category", default="general")),
            }
        )
    return cards


def normalize_notes(items: list[Any]) -> list[str]:
    """Notes as plain strings."""
    notes = []
    for item in items:
        if isinstance(item, str):
            notes.append(item)
        elif isinstance(item, dict):
            notes.append(str(_pick(item, "point", "content", default=json.dumps(item))))
        else:
            notes.append(str(item))
    return notes
