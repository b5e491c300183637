# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content generation service.

Builds a prompt from extracted document text, makes one completion call and
parses the reply. Summaries are returned as free text; questions,
flashcards and notes are parsed from the JSON array in the reply.

Example:
    >>> generator = ContentGenerator(LLMClient())
    >>> questions = await generator.generate_quiz_questions(
    ...     content=text,
    ...     difficulty="medium",
    ...     question_types=["multiple_choice", "true_false"],
    ...     number_of_questions=10,
    ... )
"""

import logging
from typing import Any

from src.core.intelligence.llm import LLMClient, LLMError
from src.domains.generation import prompts
from src.domains.generation.parsing import (
    GenerationParseError,
    extract_json_array,
    filter_question_types,
    normalize_flashcards,
    normalize_notes,
    normalize_question,
)

logger = logging.getLogger(__name__)

MATERIAL_TYPES = ("summary", "flashcards", "notes")


class GenerationError(Exception):
    """Raised when content cannot be generated.

    Attributes:
        message: User-facing error description.
        original_error: The LLM or parsing error.
    """

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ContentGenerator:
    """Generates quiz questions and study material with an LLM.

    Attributes:
        llm: Client used for completions.
    """

    def __init__(self, llm: LLMClient) -> None:
        self.llm = llm

    async def generate_quiz_questions(
        self,
        content: str,
        difficulty: str,
        question_types: list[str],
        number_of_questions: int,
        focus_areas: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Generate quiz questions from document text.

        Questions of types that were not requested are dropped.

        Raises:
            GenerationError: If the call fails or the reply cannot be parsed.
        """
        prompt = prompts.quiz_prompt(
            content, difficulty, question_types, number_of_questions, focus_areas
        )
        try:
            response = await self.llm.complete(prompt, system_prompt=prompts.SYSTEM_PROMPT)
            items = extract_json_array(response.content)
        except (LLMError, GenerationParseError) as e:
            logger.error("Error generating quiz questions: %s", str(e))
            raise GenerationError("Failed to generate quiz questions", e) from e

        questions = [
            normalize_question(item, index, difficulty)
            for index, item in enumerate(items)
            if isinstance(item, dict)
        ]
        kept = filter_question_types(questions, question_types)
        logger.info(
            "Generated quiz questions: requested=%d, received=%d, kept=%d",
            number_of_questions,
            len(items),
            len(kept),
        )
        return kept

    async def generate_study_material(
        self,
        content: str,
        material_type: str,
        focus_areas: list[str] | None = None,
    ) -> dict[str, Any]:
        """Generate a summary, flashcards or notes from document text.

        Returns:
            {"summary": str}, {"flashcards": [...]} or {"notes": [...]}.

        Raises:
            ValueError: If the material type is unknown.
            GenerationError: If the call fails or the reply cannot be parsed.
        """
        if material_type not in MATERIAL_TYPES:
            raise ValueError(f"Unknown material type: {material_type}")

        logger.debug(
            "Generating %s from content of length %d", material_type, len(content)
        )
        builder = {
            "summary": prompts.summary_prompt,
            "flashcards": prompts.flashcards_prompt,
            "notes": prompts.notes_prompt,
        }[material_type]

        try:
            response = await self.llm.complete(
                builder(content, focus_areas),
                system_prompt=prompts.SYSTEM_PROMPT,
            )
            if material_type == "summary":
                return {"summary": response.content}

            items = extract_json_array(response.content)
        except (LLMError, GenerationParseError) as e:
            logger.error("Error generating %s: %s", material_type, str(e))
            raise GenerationError("Failed to generate study material", e) from e

        if material_type == "flashcards":
            return {"flashcards": normalize_flashcards(items)}
        return {"notes": normalize_notes(items)}
