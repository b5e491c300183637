# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Display formatting helpers shared by the API and analytics layers."""

import math

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's round() uses banker's rounding (round(72.5) == 72). Scores
    shown to learners round .5 upwards, so 72.5 must become 73.

    Example:
        >>> round_half_up(72.5)
        73
        >>> round_half_up(73.33)
        73
    """
    return math.floor(value + 0.5)


def round_to(value: float, digits: int = 2) -> float:
    """Round half up to a fixed number of decimals."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def _trim_number(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return text or "0"


def format_file_size(size_bytes: int) -> str:
    """Format a byte count for display.

    Uses 1024-based units and at most two decimals with trailing zeros
    dropped.

    Example:
        >>> format_file_size(0)
        '0 Bytes'
        >>> format_file_size(5 * 1024 * 1024)
        '5 MB'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if size_bytes <= 0:
        return "0 Bytes"

    index = min(int(math.floor(math.log(size_bytes, 1024))), len(_SIZE_UNITS) - 1)
    # log() can land just below an exact power of 1024
    if index + 1 < len(_SIZE_UNITS) and size_bytes >= 1024 ** (index + 1):
        index += 1
    value = size_bytes / (1024**index)
    return f"{_trim_number(round_to(value, 2))} {_SIZE_UNITS[index]}"


def format_study_time(minutes: float) -> str:
    """Format minutes as "Xh Ym", dropping whichever part is zero.

    Example:
        >>> format_study_time(135)
        '2h 15m'
        >>> format_study_time(120)
        '2h'
    """
    hours, remaining = divmod(round_half_up(minutes), 60)
    if hours == 0:
        return f"{remaining}m"
    if remaining == 0:
        return f"{hours}h"
    return f"{hours}h {remaining}m"


def format_clock(seconds: int) -> str:
    """Format seconds as "m:ss" for quiz timers.

    Example:
        >>> format_clock(125)
        '2:05'
    """
    minutes, secs = divmod(max(int(seconds), 0), 60)
    return f"{minutes}:{secs:02d}"
