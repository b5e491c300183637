# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for StudyPilot.

Example:
    >>> from src.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from src.core.config.settings import (
    AnalyticsSettings,
    APISettings,
    AuthSettings,
    CORSSettings,
    DatabaseSettings,
    LLMSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "AuthSettings",
    "StorageSettings",
    "LLMSettings",
    "AnalyticsSettings",
    "CORSSettings",
    "APISettings",
]
