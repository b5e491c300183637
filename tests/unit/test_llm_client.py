# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the LiteLLM client wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import SecretStr

from src.core.config.settings import LLMSettings
from src.core.intelligence.llm import LLMClient, LLMError


def completion_response(content: str) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.choices[0].finish_reason = "stop"
    response.usage.prompt_tokens = 12
    response.usage.completion_tokens = 34
    return response


@pytest.fixture
def llm_settings() -> LLMSettings:
    return LLMSettings(
        LLM_DEFAULT_MODEL="gemini/gemini-2.0-flash",
        GOOGLE_API_KEY=SecretStr("test-google-key"),
    )


class TestLLMClient:
    """Tests for LLMClient.complete."""

    @pytest.mark.asyncio
    async def test_complete_passes_messages_and_key(self, llm_settings: LLMSettings) -> None:
        client = LLMClient(llm_settings=llm_settings)

        with patch(
            "src.core.intelligence.llm.client.acompletion",
            new=AsyncMock(return_value=completion_response("Hello")),
        ) as mock_completion:
            response = await client.complete("Say hello", system_prompt="Be brief")

        assert response.content == "Hello"
        assert response.total_tokens == 46
        kwargs = mock_completion.await_args.kwargs
        assert kwargs["model"] == "gemini/gemini-2.0-flash"
        assert kwargs["api_key"] == "test-google-key"
        assert kwargs["messages"] == [
            {"role": "system", "content": "Be brief"},
            {"role": "user", "content": "Say hello"},
        ]

    @pytest.mark.asyncio
    async def test_provider_errors_become_llm_errors(self, llm_settings: LLMSettings) -> None:
        client = LLMClient(llm_settings=llm_settings)

        with patch(
            "src.core.intelligence.llm.client.acompletion",
            new=AsyncMock(side_effect=RuntimeError("rate limited")),
        ):
            with pytest.raises(LLMError) as exc_info:
                await client.complete("Say hello")

        assert "rate limited" in exc_info.value.message
        assert exc_info.value.model == "gemini/gemini-2.0-flash"

    @pytest.mark.asyncio
    async def test_empty_prompt_is_rejected(self, llm_settings: LLMSettings) -> None:
        client = LLMClient(llm_settings=llm_settings)

        with pytest.raises(ValueError):
            await client.complete("   ")

    def test_other_providers_get_no_explicit_key(self, llm_settings: LLMSettings) -> None:
        client = LLMClient(model="openai/gpt-4o-mini", llm_settings=llm_settings)

        assert client._provider_params() == {}
