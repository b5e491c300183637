# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Placeholder study material used when generation fails.

The content is generic; only the file name is filled in.
"""

from typing import Any

TYPE_LABELS = {
    "summary": "Study Guide",
    "flashcards": "Flashcards",
    "notes": "Quick Notes",
}


def type_label(material_type: str) -> str:
    return TYPE_LABELS.get(material_type, "Study Material")


def placeholder_summary(file_name: str) -> str:
    return f"""# Study Guide: {file_name}

## Learning Objectives
- Understand the core concepts and principles presented in the material
- Apply knowledge to practical scenarios
- Connect the information into a coherent overview

## Core Concepts
- **Fundamental Principles**: ideas that form the foundation of the topic
- **Key Relationships**: connections between the main ideas
- **Critical Information**: details that support the main concepts

## Critical Thinking Questions
1. How do the main concepts relate to each other?
2. What are the practical applications of this knowledge?
3. What connections exist with other areas of study?

## Study Strategies
- **Active Reading**: question and summarize as you read
- **Spaced Repetition**: review at increasing intervals
- **Concept Mapping**: draw the connections between ideas

## Key Takeaways
- Master the fundamentals first
- Review regularly for long-term retention"""


def placeholder_flashcards(file_name: str) -> list[dict[str, str]]:
    return [
        {
            "front": f"What are the main learning objectives for {file_name}?",
            "back": "To understand the core concepts, apply them to practical scenarios and connect them into a coherent overview.",
            "difficulty": "basic",
            "category": "objectives",
        },
        {
            "front": "How should you approach studying this material effectively?",
            "back": "Use active reading, spaced repetition, practice and concept mapping.",
            "difficulty": "intermediate",
            "category": "strategy",
        },
        {
            "front": "Why is practical application important for learning?",
            "back": "It shows real-world relevance and helps transfer knowledge to new situations.",
            "difficulty": "advanced",
            "category": "application",
        },
        {
            "front": "What study strategies help long-term retention?",
            "back": "Spaced repetition, regular self-assessment and teaching others.",
            "difficulty": "basic",
            "category": "strategy",
        },
    ]


def placeholder_notes(file_name: str) -> list[str]:
    return [
        f"Core concepts from {file_name} form the foundation for understanding the topic",
        "Related topics connect into a network of knowledge",
        "Practical applications show real-world relevance",
        "Regular review and spaced repetition consolidate long-term memory",
        "Focus on principles rather than isolated facts",
        "Self-assessment reveals gaps that need more attention",
        "Teaching others is one of the most effective ways to learn",
    ]


def placeholder_content(material_type: str, file_name: str) -> dict[str, Any]:
    """Placeholder content in the same shape the generator returns."""
    if material_type == "summary":
        return {"summary": placeholder_summary(file_name)}
    if material_type == "flashcards":
        return {"flashcards": placeholder_flashcards(file_name)}
    return {"notes": placeholder_notes(file_name)}
