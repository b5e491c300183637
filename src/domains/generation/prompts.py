# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Prompts for content generation."""

SYSTEM_PROMPT = (
    "You are an expert educational content creator. Work only with the document "
    "text you are given and do not ask for more material."
)

# document text beyond this is dropped from prompts
MAX_CONTENT_CHARS = 30000

_TYPE_INSTRUCTIONS = {
    "multiple_choice": "- multiple_choice: 4 options with one correct answer",
    "true_false": '- true_false: options ["True", "False"], correctAnswer "True" or "False"',
    "identification": "- identification: ask for a term or name, answer of 1-3 words",
    "fill_in_blanks": "- fill_in_blanks: a sentence with one blank to fill",
}


def _focus(focus_areas: list[str] | None) -> str:
    if not focus_areas:
        return ""
    return f"Focus on these areas: {', '.join(focus_areas)}.\n"


def _clip(content: str) -> str:
    return content[:MAX_CONTENT_CHARS]


def quiz_prompt(
    content: str,
    difficulty: str,
    question_types: list[str],
    number_of_questions: int,
    focus_areas: list[str] | None = None,
) -> str:
    types = ", ".join(question_types)
    instructions = "\n".join(
        _TYPE_INSTRUCTIONS[qtype] for qtype in question_types if qtype in _TYPE_INSTRUCTIONS
    )
    return (
        f"Generate a quiz from this content:\n\n{_clip(content)}\n\n"
        f"Generate exactly {number_of_questions} {difficulty} questions.\n"
        f"Use only these question types: {types}.\n"
        f"{_focus(focus_areas)}"
        f"Answer formats:\n{instructions}\n\n"
        "Respond with a JSON array of objects with the keys questionText, "
        "questionType, options, correctAnswer and explanation."
    )


def summary_prompt(content: str, focus_areas: list[str] | None = None) -> str:
    return (
        "Write a markdown study guide for this content with learning objectives, "
        "core concepts, key terms, review questions and key takeaways.\n"
        f"{_focus(focus_areas)}\n{_clip(content)}"
    )


def flashcards_prompt(content: str, focus_areas: list[str] | None = None) -> str:
    return (
        "Create 15-25 flashcards from this content.\n"
        f"{_focus(focus_areas)}"
        "Respond with a JSON array of objects with the keys front, back, "
        'difficulty ("basic", "intermediate" or "advanced") and category.\n\n'
        f"{_clip(content)}"
    )


def notes_prompt(content: str, focus_areas: list[str] | None = None) -> str:
    return (
        "Create 12-20 concise study notes from this content.\n"
        f"{_focus(focus_areas)}"
        "Respond with a JSON array of objects with the keys point, category, "
        "memory_aid and context.\n\n"
        f"{_clip(content)}"
    )
