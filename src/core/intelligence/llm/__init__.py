# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""LLM client package."""

from src.core.intelligence.llm.client import LLMClient, LLMError, LLMResponse

__all__ = ["LLMClient", "LLMError", "LLMResponse"]
