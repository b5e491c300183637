"""StudyPilot Backend.

AI-assisted study platform: document uploads, generated quizzes and study
materials, quiz attempts and learning analytics.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
