# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for StudyPilot.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime operations and calendar-day bucketing
- formatting: Display helpers (file sizes, durations, rounding)
"""

from src.utils.datetime import (
    ensure_utc,
    format_iso,
    get_zone,
    last_n_days,
    local_date,
    minutes_between,
    parse_iso,
    today_in,
    utc_now,
)
from src.utils.formatting import (
    format_clock,
    format_file_size,
    format_study_time,
    round_half_up,
    round_to,
)
from src.utils.logging import bind_context, clear_context, setup_logging

__all__ = [
    # Logging
    "setup_logging",
    "bind_context",
    "clear_context",
    # Datetime
    "utc_now",
    "ensure_utc",
    "get_zone",
    "local_date",
    "today_in",
    "last_n_days",
    "minutes_between",
    "format_iso",
    "parse_iso",
    # Formatting
    "round_half_up",
    "round_to",
    "format_file_size",
    "format_study_time",
    "format_clock",
]
