# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for StudyPilot.

Domains:
    analytics: Learning analytics, quiz progress and question-type trends.
    auth: Access token verification.
    generation: Prompting and parsing for generated content.
    library: Uploaded documents.
    preferences: Study goals and notification preferences.
    quizzes: Quiz management, grading and attempts.
    study_materials: Summaries, flashcards and notes.
    study_sessions: Activity timers, session history and streaks.
"""
