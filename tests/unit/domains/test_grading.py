# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for quiz grading."""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from src.domains.quizzes.grading import (
    analyze_question_type_performance,
    calculate_quiz_results,
    detect_question_type,
    generate_performance_summary,
    grade_answer,
    question_field,
)


class TestDetectQuestionType:
    """Question type inference."""

    def test_explicit_type_wins(self) -> None:
        assert detect_question_type({"question_type": "identification", "options": ["a", "b", "c"]}) == (
            "identification"
        )

    def test_camel_case_keys_are_read(self) -> None:
        question = {"questionType": "true_false", "correctAnswer": "True"}

        assert detect_question_type(question) == "true_false"
        assert question_field(question, "correct_answer") == "True"

    @pytest.mark.parametrize(
        ("options", "expected"),
        [
            (["True", "False"], "true_false"),
            (["A", "B", "C", "D"], "multiple_choice"),
            ([], "identification"),
            (None, "identification"),
            (["Yes", "No"], "unknown"),
        ],
    )
    def test_inferred_from_options(self, options: Any, expected: str) -> None:
        assert detect_question_type({"options": options, "correct_answer": "Yes"}) == expected


class TestGradeAnswer:
    """Answer matching rules."""

    def test_choice_questions_need_an_exact_match(self) -> None:
        question = {"question_type": "multiple_choice", "correct_answer": "Mitochondria"}

        assert grade_answer(question, "Mitochondria") is True
        assert grade_answer(question, "mitochondria") is False

    def test_identification_is_case_insensitive(self) -> None:
        question = {"question_type": "identification", "correct_answer": "Photosynthesis"}

        assert grade_answer(question, "  photosynthesis ") is True
        assert grade_answer(question, "respiration") is False

    def test_identification_accepts_shared_significant_word(self) -> None:
        """Lenient matching accepts any shared word longer than two characters."""
        question = {"question_type": "identification", "correct_answer": "The French Revolution"}

        assert grade_answer(question, "french revolution") is True
        # a wrong answer sharing a common word is also accepted
        assert grade_answer(question, "the american revolution") is True
        assert grade_answer(question, "war of roses") is False

    def test_identification_single_word_answers_do_not_partially_match(self) -> None:
        question = {"question_type": "identification", "correct_answer": "Nucleus"}

        assert grade_answer(question, "nucleus membrane") is False


class TestCalculateQuizResults:
    """Grading whole submissions."""

    def test_counts_and_analysis(self, sample_questions: list[dict[str, Any]]) -> None:
        answers = {"q1": "Mitochondria", "q2": "Nucleus", "q3": "True", "q4": "False", "q5": "photosynthesis"}

        result = calculate_quiz_results("quiz-1", sample_questions, answers)

        assert result.correct_answers == 4
        assert result.total_questions == 5
        assert result.score == 80
        analysis = result.question_type_analysis
        assert analysis["multiple_choice"].to_dict() == {"correct": 1, "total": 2, "percentage": 50}
        assert analysis["true_false"].to_dict() == {"correct": 2, "total": 2, "percentage": 100}
        assert analysis["identification"].to_dict() == {"correct": 1, "total": 1, "percentage": 100}
        assert result.answers["q2"].is_correct is False
        assert result.answers["q2"].correct_answer == "Ribosome"

    def test_missing_answers_are_wrong(self, sample_questions: list[dict[str, Any]]) -> None:
        result = calculate_quiz_results("quiz-1", sample_questions, {})

        assert result.correct_answers == 0
        assert result.answers["q5"].answer == ""

    def test_time_spent_from_start(self, sample_questions: list[dict[str, Any]]) -> None:
        finished = datetime(2025, 5, 10, 12, 5, tzinfo=timezone.utc)

        result = calculate_quiz_results(
            "quiz-1",
            sample_questions,
            {},
            started_at=finished - timedelta(minutes=4, seconds=10),
            completed_at=finished,
        )

        assert result.time_spent == 250

    def test_empty_quiz(self) -> None:
        result = calculate_quiz_results("quiz-1", [], {})

        assert result.score == 0
        assert result.total_questions == 0

    def test_questions_without_ids_use_positions(self) -> None:
        questions = [{"question_type": "true_false", "options": ["True", "False"], "correct_answer": "True"}]

        result = calculate_quiz_results("quiz-1", questions, {"q1": "True"})

        assert result.correct_answers == 1


class TestSummaries:
    """Per-type analysis and summary text."""

    def test_tracked_types_always_present(self) -> None:
        analysis = analyze_question_type_performance({})

        assert set(analysis) == {"multiple_choice", "true_false", "identification"}
        assert all(stats.total == 0 for stats in analysis.values())

    def test_summary_names_strongest_and_weakest(self, sample_questions: list[dict[str, Any]]) -> None:
        answers = {"q1": "Mitochondria", "q2": "Nucleus", "q3": "True", "q4": "False", "q5": "x"}
        result = calculate_quiz_results("quiz-1", sample_questions, answers)

        summary = generate_performance_summary(result)

        assert summary.startswith("Overall Score: 60% (3/5)")
        assert "Strong: True/False (100%)" in summary
        assert "Needs improvement: Identification (0%)" in summary
