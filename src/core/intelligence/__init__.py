# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Intelligence module for AI-powered content generation.

Example:
    >>> from src.core.intelligence import LLMClient
    >>> client = LLMClient()
    >>> response = await client.complete("Create five quiz questions about ...")
"""

from src.core.intelligence.llm import LLMClient, LLMError, LLMResponse

__all__ = ["LLMClient", "LLMError", "LLMResponse"]
