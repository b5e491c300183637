# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz service for generating and managing quizzes.

Quizzes are generated from the extracted text of an uploaded file.
Generation failures propagate to the caller; there is no placeholder quiz.
"""

import logging
from pathlib import PurePath
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.generation import ContentGenerator
from src.domains.library.service import FileService
from src.domains.quizzes.schemas import QuizGenerateRequest, QuizUpdateRequest
from src.infrastructure.database.models import Quiz

logger = logging.getLogger(__name__)


class QuizServiceError(Exception):
    """Base exception for quiz service errors."""

    pass


class QuizNotFoundError(QuizServiceError):
    """Raised when a quiz does not exist or belongs to another user."""

    pass


class QuizValidationError(QuizServiceError):
    """Raised when quiz content is invalid."""

    pass


class QuizGenerationEmptyError(QuizServiceError):
    """Raised when generation produced no usable questions."""

    pass


def validate_questions(questions: list[dict[str, Any]]) -> None:
    """Check an edited question list.

    Raises:
        QuizValidationError: On the first invalid question.
    """
    if not questions:
        raise QuizValidationError("Quiz must have at least one question")

    for index, question in enumerate(questions, start=1):
        if not str(question.get("question_text") or "").strip():
            raise QuizValidationError(f"Question {index} has no text")
        correct = str(question.get("correct_answer") or "").strip()
        if not correct:
            raise QuizValidationError(f"Question {index} has no correct answer")

        options = question.get("options") or []
        if question.get("question_type") == "multiple_choice":
            if len(options) < 2:
                raise QuizValidationError(f"Question {index} needs at least 2 options")
            if correct not in options:
                raise QuizValidationError(f"Question {index}: correct answer must be one of the options")


class QuizService:
    """Service for quiz generation and management.

    Attributes:
        _db: Async database session.
        _files: File library used to read source text.
        _generator: Question generator.
    """

    def __init__(
        self,
        db: AsyncSession,
        files: FileService | None = None,
        generator: ContentGenerator | None = None,
    ) -> None:
        self._db = db
        self._files = files
        self._generator = generator

    async def generate_quiz(self, user_id: str, request: QuizGenerateRequest) -> Quiz:
        """Generate and store a quiz for one of the user's files.

        Raises:
            FileNotFoundInLibraryError: If the file does not exist.
            FileContentUnavailableError: If the file has no text.
            GenerationError: If question generation fails.
            QuizGenerationEmptyError: If no question of a requested type came back.
        """
        if self._files is None or self._generator is None:
            raise QuizServiceError("Quiz generation is not configured")

        file, content = await self._files.get_file_content(user_id, request.file_id)
        questions = await self._generator.generate_quiz_questions(
            content,
            request.difficulty,
            list(request.question_types),
            request.number_of_questions,
            request.focus_areas,
        )
        if not questions:
            raise QuizGenerationEmptyError("No questions could be generated from this file")

        title = request.title or f"{PurePath(file.original_name).stem} Quiz"
        quiz = Quiz(
            user_id=user_id,
            file_id=file.id,
            title=title,
            description=f"Generated from {file.original_name}",
            difficulty=request.difficulty,
            subject=file.subject,
            total_questions=len(questions),
            questions=questions,
        )
        self._db.add(quiz)
        await self._db.commit()
        await self._db.refresh(quiz)

        logger.info(
            "Quiz generated: %s (user=%s, file=%s, questions=%d)",
            quiz.id,
            user_id,
            file.id,
            quiz.total_questions,
        )
        return quiz

    async def list_quizzes(self, user_id: str) -> list[Quiz]:
        stmt = select(Quiz).where(Quiz.user_id == user_id).order_by(desc(Quiz.created_at))
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def get_quiz(self, user_id: str, quiz_id: str) -> Quiz:
        """Get one of the user's quizzes.

        Raises:
            QuizNotFoundError: If missing or owned by someone else.
        """
        stmt = select(Quiz).where(Quiz.id == quiz_id, Quiz.user_id == user_id)
        result = await self._db.execute(stmt)
        quiz = result.scalar_one_or_none()
        if quiz is None:
            raise QuizNotFoundError(f"Quiz {quiz_id} not found")
        return quiz

    async def update_quiz(self, user_id: str, quiz_id: str, request: QuizUpdateRequest) -> Quiz:
        """Apply an edit.

        Raises:
            QuizNotFoundError: If the quiz does not exist.
            QuizValidationError: If the new questions are invalid.
        """
        quiz = await self.get_quiz(user_id, quiz_id)

        if request.questions is not None:
            questions = [q.model_dump() for q in request.questions]
            validate_questions(questions)
            quiz.questions = questions
            quiz.total_questions = len(questions)
        if request.title is not None:
            if not request.title.strip():
                raise QuizValidationError("Quiz title cannot be empty")
            quiz.title = request.title.strip()
        if request.description is not None:
            quiz.description = request.description
        if request.difficulty is not None:
            quiz.difficulty = request.difficulty

        await self._db.commit()
        await self._db.refresh(quiz)
        logger.info("Quiz updated: %s", quiz_id)
        return quiz

    async def delete_quiz(self, user_id: str, quiz_id: str) -> None:
        quiz = await self.get_quiz(user_id, quiz_id)
        await self._db.delete(quiz)
        await self._db.commit()
        logger.info("Quiz deleted: %s (user=%s)", quiz_id, user_id)
