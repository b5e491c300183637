# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject detection from document text and file name.

Keywords are matched as whole words, so "it" does not match "with" and
"art" does not match "start". The first subject with a match wins.
"""

import re

DEFAULT_SUBJECT = "General"

SUBJECT_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Mathematics", ("math", "mathematics", "calculus", "algebra", "geometry", "statistics", "arithmetic")),
    ("Science", ("physics", "chemistry", "biology", "science", "lab", "experiment")),
    ("Social Studies", ("history", "social studies", "geography", "politics", "government")),
    ("English", ("english", "literature", "writing", "grammar", "essay", "reading")),
    ("Technology", ("computer", "programming", "code", "software", "technology", "it")),
    ("Business", ("business", "economics", "finance", "marketing", "management")),
    ("Social Sciences", ("psychology", "sociology", "philosophy", "anthropology")),
    ("Arts", ("art", "music", "design", "creative", "drawing", "painting")),
)

_PATTERNS = [
    (subject, re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b"))
    for subject, keywords in SUBJECT_KEYWORDS
]


def detect_subject(content: str | None, file_name: str | None = None) -> str:
    """Return the first subject whose keywords occur in the text or name."""
    text = f"{content or ''} {file_name or ''}".lower()
    # file names often use separators instead of spaces
    text = re.sub(r"[_\-.]+", " ", text)
    for subject, pattern in _PATTERNS:
        if pattern.search(text):
            return subject
    return DEFAULT_SUBJECT
