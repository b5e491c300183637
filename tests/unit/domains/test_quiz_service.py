# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for QuizService."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.domains.generation import GenerationError
from src.domains.quizzes.schemas import QuestionData, QuizGenerateRequest, QuizUpdateRequest
from src.domains.quizzes.service import (
    QuizGenerationEmptyError,
    QuizNotFoundError,
    QuizService,
    QuizServiceError,
    QuizValidationError,
    validate_questions,
)
from src.infrastructure.database.models import Quiz, StoredFile


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    return db


@pytest.fixture
def source_file() -> StoredFile:
    return StoredFile(
        id="file-1",
        user_id="user-1",
        storage_path="user-1/bio.pdf",
        original_name="Cell Biology.pdf",
        mime_type="application/pdf",
        file_size=1000,
        subject="Science",
    )


@pytest.fixture
def mock_files(source_file):
    files = MagicMock()
    files.get_file_content = AsyncMock(return_value=(source_file, "Cells are the unit of life."))
    return files


@pytest.fixture
def mock_generator():
    generator = MagicMock()
    generator.generate_quiz_questions = AsyncMock()
    return generator


@pytest.fixture
def service(mock_db, mock_files, mock_generator) -> QuizService:
    return QuizService(mock_db, mock_files, mock_generator)


def existing_quiz(mock_db, quiz: Quiz | None) -> None:
    result = MagicMock()
    result.scalar_one_or_none.return_value = quiz
    mock_db.execute.return_value = result


class TestValidateQuestions:
    """Tests for validate_questions."""

    def test_valid(self, sample_questions) -> None:
        validate_questions(sample_questions)

    def test_empty(self) -> None:
        with pytest.raises(QuizValidationError, match="at least one"):
            validate_questions([])

    def test_answer_not_among_options(self, sample_questions) -> None:
        sample_questions[0]["correct_answer"] = "Chloroplast"

        with pytest.raises(QuizValidationError, match="Question 1"):
            validate_questions(sample_questions)

    def test_blank_text(self, sample_questions) -> None:
        sample_questions[4]["question_text"] = "   "

        with pytest.raises(QuizValidationError, match="Question 5 has no text"):
            validate_questions(sample_questions)

    def test_too_few_options(self, sample_questions) -> None:
        sample_questions[1]["options"] = ["Ribosome"]

        with pytest.raises(QuizValidationError, match="at least 2 options"):
            validate_questions(sample_questions)


class TestGenerateQuiz:
    """Tests for QuizService.generate_quiz."""

    @pytest.mark.asyncio
    async def test_generate(self, service, mock_db, mock_generator, sample_questions) -> None:
        mock_generator.generate_quiz_questions.return_value = sample_questions

        quiz = await service.generate_quiz(
            "user-1",
            QuizGenerateRequest(file_id="file-1", difficulty="hard", number_of_questions=5),
        )

        assert quiz.title == "Cell Biology Quiz"
        assert quiz.subject == "Science"
        assert quiz.total_questions == 5
        assert quiz.difficulty == "hard"
        mock_db.add.assert_called_once_with(quiz)
        args = mock_generator.generate_quiz_questions.await_args.args
        assert args[:2] == ("Cells are the unit of life.", "hard")
        assert args[3] == 5

    @pytest.mark.asyncio
    async def test_generation_errors_propagate(self, service, mock_db, mock_generator) -> None:
        mock_generator.generate_quiz_questions.side_effect = GenerationError("provider down")

        with pytest.raises(GenerationError):
            await service.generate_quiz("user-1", QuizGenerateRequest(file_id="file-1"))

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_usable_questions(self, service, mock_generator) -> None:
        mock_generator.generate_quiz_questions.return_value = []

        with pytest.raises(QuizGenerationEmptyError):
            await service.generate_quiz("user-1", QuizGenerateRequest(file_id="file-1"))

    @pytest.mark.asyncio
    async def test_not_configured(self, mock_db) -> None:
        with pytest.raises(QuizServiceError):
            await QuizService(mock_db).generate_quiz("user-1", QuizGenerateRequest(file_id="file-1"))


class TestUpdateQuiz:
    """Tests for QuizService.update_quiz."""

    @pytest.mark.asyncio
    async def test_replace_questions(self, service, mock_db, sample_questions) -> None:
        quiz = Quiz(id="quiz-1", user_id="user-1", title="Old", total_questions=5, questions=sample_questions)
        existing_quiz(mock_db, quiz)

        updated = await service.update_quiz(
            "user-1",
            "quiz-1",
            QuizUpdateRequest(title=" New title ", questions=[QuestionData(**sample_questions[2])]),
        )

        assert updated.title == "New title"
        assert updated.total_questions == 1
        assert updated.questions[0]["id"] == "q3"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_quiz(self, service, mock_db) -> None:
        existing_quiz(mock_db, None)

        with pytest.raises(QuizNotFoundError):
            await service.update_quiz("user-1", "quiz-404", QuizUpdateRequest(title="x"))
