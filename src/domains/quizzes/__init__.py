# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quizzes domain package.

This package provides:
- Quiz generation from uploaded files and quiz editing
- Answer grading with per-question-type analysis
- Attempt storage and submission
"""

from src.domains.quizzes.attempts import (
    AttemptSaveError,
    AttemptSubmission,
    AuthenticationRequiredError,
    QuizAttemptService,
)
from src.domains.quizzes.grading import (
    QuizResult,
    TypeStats,
    calculate_quiz_results,
    detect_question_type,
    grade_answer,
)
from src.domains.quizzes.service import (
    QuizGenerationEmptyError,
    QuizNotFoundError,
    QuizService,
    QuizServiceError,
    QuizValidationError,
    validate_questions,
)

__all__ = [
    "AttemptSaveError",
    "AttemptSubmission",
    "AuthenticationRequiredError",
    "QuizAttemptService",
    "QuizGenerationEmptyError",
    "QuizNotFoundError",
    "QuizResult",
    "QuizService",
    "QuizServiceError",
    "QuizValidationError",
    "TypeStats",
    "calculate_quiz_results",
    "detect_question_type",
    "grade_answer",
    "validate_questions",
]
