# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User study preferences domain."""

from src.domains.preferences.service import (
    DEFAULT_NOTIFICATION_SETTINGS,
    DEFAULT_STUDY_GOALS,
    PreferenceService,
)

__all__ = [
    "DEFAULT_NOTIFICATION_SETTINGS",
    "DEFAULT_STUDY_GOALS",
    "PreferenceService",
]
