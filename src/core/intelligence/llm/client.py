# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Completion client for generated study content.

Every generated artifact (a quiz, a summary, a flashcard deck, a set of
notes) is a single chat completion routed through LiteLLM. The provider
is chosen by the model prefix; Gemini is the default and its key is read
from settings rather than the process environment.

Example:
    >>> client = LLMClient(llm_settings=get_settings().llm)
    >>> reply = await client.complete(quiz_prompt(...), system_prompt=QUIZ_SYSTEM)
    >>> reply.content
    '[{"question_text": ...}]'
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import litellm
from litellm import acompletion

from src.core.config.settings import LLMSettings, get_settings

logger = logging.getLogger(__name__)

# model prefix -> settings attribute holding the provider key
_PROVIDER_KEYS = {
    "gemini/": "google_api_key",
}


@dataclass
class LLMResponse:
    """Text returned by the provider with its token usage.

    Attributes:
        content: Generated text, empty when the provider returned none.
        model: Model that produced the text.
        tokens_input: Prompt tokens billed.
        tokens_output: Completion tokens billed.
        finish_reason: "stop", or "length" when the output was cut off.
    """

    content: str
    model: str
    tokens_input: int = 0
    tokens_output: int = 0
    finish_reason: str = "stop"
    raw_response: Optional[object] = field(default=None, repr=False)

    @property
    def total_tokens(self) -> int:
        return self.tokens_input + self.tokens_output

    @property
    def truncated(self) -> bool:
        return self.finish_reason == "length"


class LLMError(Exception):
    """Raised when the provider call fails.

    Attributes:
        message: Error description.
        model: Model that was called.
        original_error: Exception raised by LiteLLM.
    """

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.model = model
        self.original_error = original_error


def _chat(prompt: str, system_prompt: Optional[str]) -> list[dict[str, str]]:
    messages = [{"role": "system", "content": system_prompt}] if system_prompt else []
    messages.append({"role": "user", "content": prompt})
    return messages


def _to_response(raw: Any, model: str) -> LLMResponse:
    choice = raw.choices[0]
    usage = getattr(raw, "usage", None)
    return LLMResponse(
        content=choice.message.content or "",
        model=model,
        tokens_input=getattr(usage, "prompt_tokens", 0) or 0,
        tokens_output=getattr(usage, "completion_tokens", 0) or 0,
        finish_reason=choice.finish_reason or "stop",
        raw_response=raw,
    )


class LLMClient:
    """LiteLLM wrapper used by the content generator."""

    def __init__(
        self,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        llm_settings: Optional[LLMSettings] = None,
    ) -> None:
        """Initialize the client.

        Args:
            model: LiteLLM model id, defaults to settings.
            timeout: Per-request timeout in seconds, defaults to settings.
            max_retries: Retries LiteLLM performs, defaults to settings.
            llm_settings: LLM configuration, defaults to get_settings().llm.
        """
        self._settings = llm_settings or get_settings().llm
        self._model = model or self._settings.default_model
        self._timeout = timeout or self._settings.request_timeout
        self._max_retries = self._settings.max_retries if max_retries is None else max_retries

        # providers reject parameters they do not know
        litellm.drop_params = True

        logger.info("Content model: %s (timeout=%.0fs, retries=%d)", self._model, self._timeout, self._max_retries)

    @property
    def model(self) -> str:
        return self._model

    def _provider_params(self) -> dict[str, Any]:
        for prefix, attribute in _PROVIDER_KEYS.items():
            key = getattr(self._settings, attribute, None)
            if self._model.startswith(prefix) and key:
                return {"api_key": key.get_secret_value()}
        return {}

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Run one chat completion.

        Raises:
            ValueError: If the prompt is blank.
            LLMError: If the provider call fails after LiteLLM's retries.
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        try:
            raw = await acompletion(
                model=self._model,
                messages=_chat(prompt, system_prompt),
                temperature=self._settings.temperature if temperature is None else temperature,
                max_tokens=max_tokens or self._settings.max_tokens,
                timeout=self._timeout,
                num_retries=self._max_retries,
                **self._provider_params(),
                **kwargs,
            )
            response = _to_response(raw, self._model)
        except Exception as e:
            # LiteLLM raises provider-specific exception types
            logger.error("Completion failed: model=%s, prompt_chars=%d, error=%s", self._model, len(prompt), str(e))
            raise LLMError(f"Completion failed: {e}", model=self._model, original_error=e) from e

        if response.truncated:
            logger.warning("Completion hit the token limit: model=%s, tokens_out=%d", self._model, response.tokens_output)
        logger.debug(
            "Completion done: model=%s, tokens_in=%d, tokens_out=%d",
            self._model,
            response.tokens_input,
            response.tokens_output,
        )
        return response
