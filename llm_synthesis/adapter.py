"""LLM adapters for insight generation.

Provides a base interface and concrete adapters for OpenAI-compatible
APIs and a deterministic mock for testing.
"""

import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from llm_synthesis.errors import LLMAdapterError

SYSTEM_MESSAGE = (
    "You must respond ONLY with valid JSON matching the expected schema. "
    "Do not include markdown, commentary, or explanations."
)


@dataclass(frozen=True)
class LLMCompletion:
    """Raw completion text plus the usage reported by the provider."""

    text: str
    model: str
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier recorded in insight metadata."""

    @abstractmethod
    def generate(self, prompt: str) -> LLMCompletion:
        """Send a prompt to the LLM and return the raw completion.

        Args:
            prompt: The fully formatted prompt string.

        Returns:
            Completion whose text is expected to be a JSON object.

        Raises:
            LLMAdapterError: If the provider call fails.
        """


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs.

    Configured for non-streaming JSON-object output with low temperature
    and a bounded completion size.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        max_tokens: int = 800,
        temperature: float = 0.2,
        timeout_seconds: float = 60.0,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialise the OpenAI adapter.

        Args:
            model: Model identifier.
            max_tokens: Maximum tokens in the completion.
            temperature: Sampling temperature.
            timeout_seconds: Per-request timeout passed to the client.
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            base_url: Optional base URL for OpenAI-compatible endpoints.
        """
        try:
            from openai import OpenAI  # type: ignore[import-untyped]
        except ImportError as exc:
            raise ImportError(
                "openai package is required for OpenAILLMAdapter. "
                "Install it with: pip install openai"
            ) from exc

        resolved_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        client_kwargs: dict = {"api_key": resolved_key, "timeout": timeout_seconds}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def model_name(self) -> str:
        return self._model

    def generate(self, prompt: str) -> LLMCompletion:
        """Call the OpenAI chat completion API.

        Args:
            prompt: The fully formatted prompt string.

        Returns:
            Raw content and token usage from the model response.
        """
        from openai import OpenAIError  # type: ignore[import-untyped]

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_MESSAGE},
                    {"role": "user", "content": prompt},
                ],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                response_format={"type": "json_object"},
                stream=False,
            )
        except OpenAIError as exc:
            raise LLMAdapterError(f"LLM request failed: {exc}") from exc

        if not response.choices:
            raise LLMAdapterError("LLM response did not contain any choices.")

        usage = response.usage
        return LLMCompletion(
            text=response.choices[0].message.content or "",
            model=response.model or self._model,
            input_tokens=usage.prompt_tokens if usage else None,
            output_tokens=usage.completion_tokens if usage else None,
            total_tokens=usage.total_tokens if usage else None,
        )


# ---------------------------------------------------------------------------
# Fixed mock response used for local testing.
# ---------------------------------------------------------------------------
_MOCK_RESPONSE = {
    "executive_summary": "Mock insight for testing purposes.",
    "risks": ["No real risk - this is a test fixture."],
    "opportunities": ["Verify integration with the signal pipeline."],
    "recommendations": ["Replace the mock adapter with a real LLM provider."],
}

_MOCK_RESPONSE_JSON = json.dumps(_MOCK_RESPONSE, indent=2)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed response.

    Used for local testing and CI pipelines where no LLM API
    is available.
    """

    def __init__(self, response: Optional[str] = None) -> None:
        self._response = _MOCK_RESPONSE_JSON if response is None else response
        self.prompts: list = []

    @property
    def model_name(self) -> str:
        return "mock"

    def generate(self, prompt: str) -> LLMCompletion:
        """Return the configured response regardless of input.

        Args:
            prompt: Recorded for inspection, otherwise ignored.

        Returns:
            The fixed completion.
        """
        self.prompts.append(prompt)
        return LLMCompletion(text=self._response, model=self.model_name)
