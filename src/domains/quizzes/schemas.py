# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz API schemas.

Request and response models for quiz generation, editing and attempts.
Questions are stored as JSON; QuestionData is the validated shape.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

QuestionType = Literal["multiple_choice", "true_false", "identification"]
Difficulty = Literal["easy", "medium", "hard"]


class QuestionData(BaseModel):
    """A single quiz question."""

    id: str = Field(description="Question identifier within the quiz (e.g. 'q1').")
    question_text: str = Field(description="The question.")
    question_type: QuestionType = Field(description="Type of question.")
    options: list[str] | None = Field(
        default=None,
        description="Answer options for multiple choice and true/false questions.",
    )
    correct_answer: str = Field(description="The correct answer.")
    explanation: str | None = Field(default=None, description="Why the answer is correct.")
    difficulty: Difficulty | None = Field(default=None, description="Question difficulty.")


class QuizGenerateRequest(BaseModel):
    """Request to generate a quiz from an uploaded file."""

    file_id: str = Field(description="Source file for the questions.")
    title: str | None = Field(
        default=None,
        max_length=255,
        description="Quiz title. Defaults to one derived from the file name.",
    )
    difficulty: Difficulty = Field(default="medium", description="Question difficulty.")
    question_types: list[QuestionType] = Field(
        default_factory=lambda: ["multiple_choice", "true_false", "identification"],
        min_length=1,
        description="Question types to include.",
    )
    number_of_questions: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Number of questions to request.",
    )
    focus_areas: list[str] | None = Field(
        default=None,
        description="Topics the questions should concentrate on.",
    )


class QuizUpdateRequest(BaseModel):
    """Edit a quiz. Omitted fields are unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    difficulty: Difficulty | None = None
    questions: list[QuestionData] | None = Field(
        default=None,
        description="Replacement question list.",
    )


class QuizResponse(BaseModel):
    """A stored quiz."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    file_id: str | None = None
    title: str
    description: str | None = None
    difficulty: str
    subject: str | None = None
    total_questions: int
    questions: list[dict[str, Any]] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class AttemptSubmitRequest(BaseModel):
    """Answers submitted for a quiz."""

    answers: dict[str, str] = Field(
        description="Question id -> answer. Unanswered questions may be omitted.",
    )
    started_at: datetime | None = Field(
        default=None,
        description="When the user started the quiz, for time spent.",
    )


class QuizAttemptData(BaseModel):
    """An attempt ready to be stored."""

    user_id: str | None = Field(description="Owner. None when the caller is not signed in.")
    quiz_id: str
    score: int = Field(ge=0, description="Number of correct answers.")
    total_questions: int = Field(ge=0)
    time_taken: int = Field(default=0, ge=0, description="Seconds spent.")
    answers: dict[str, Any] = Field(default_factory=dict)


class QuizAttemptResponse(BaseModel):
    """A stored attempt."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    quiz_id: str
    score: int
    total_questions: int
    time_taken: int
    answers: dict[str, Any] | None = None
    completed_at: datetime
