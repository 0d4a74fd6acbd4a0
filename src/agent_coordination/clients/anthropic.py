"""Anthropic text generator.

Anthropic passes the system prompt separately from the messages and
returns content as a list of blocks; only text blocks are kept.
"""

import os
from typing import Any

from anthropic import Anthropic, APIConnectionError, APITimeoutError
from anthropic import AuthenticationError as AnthropicAuthError
from anthropic import RateLimitError as AnthropicRateLimitError

from ..exceptions import (
    AuthenticationError,
    InvalidResponseError,
    ProviderUnavailableError,
    RateLimitError,
)
from ..types import GenerationOptions
from .base import BaseTextGenerator, with_retry

# supported configuration keys for anthropic
SUPPORTED_CONFIG_KEYS = {
    "top_p",
    "top_k",
    "stop_sequences",
    "timeout",
}


class AnthropicGenerator(BaseTextGenerator):
    """Anthropic API text generator (Claude models)."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-5-20250929",
        client_config: dict | None = None,
    ):
        """Initialize the Anthropic generator.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            model: Model to use. Defaults to Claude Sonnet 4.5.
            client_config: Optional configuration parameters:
                - top_p: float (nucleus sampling)
                - top_k: int (top-k sampling)
                - stop_sequences: list[str]
                - timeout: float (seconds per request)
        """
        super().__init__(client_config)
        self._validate_config(SUPPORTED_CONFIG_KEYS, "Anthropic")
        self.client = Anthropic(
            api_key=api_key or os.environ.get("ANTHROPIC_API_KEY"),
            **self._sdk_kwargs(),
        )
        self.model = model

    @with_retry()
    def generate(self, prompt: str, options: GenerationOptions | None = None) -> str:
        """Generate text from Anthropic."""
        kwargs = self._build_api_kwargs(prompt, options or GenerationOptions())

        try:
            response = self.client.messages.create(**kwargs)
        except AnthropicAuthError as e:
            raise AuthenticationError(f"Anthropic authentication failed: {e}") from e
        except AnthropicRateLimitError as e:
            raise RateLimitError("Anthropic rate limit exceeded") from e
        except (APIConnectionError, APITimeoutError) as e:
            raise ProviderUnavailableError(f"Anthropic API unavailable: {e}") from e

        return self._parse_response(response)

    def _build_api_kwargs(self, prompt: str, options: GenerationOptions) -> dict[str, Any]:
        """Build the API kwargs from options and configuration."""
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": options.max_output_tokens,
            "temperature": options.temperature,
        }
        if options.system_prompt:
            kwargs["system"] = options.system_prompt

        for key in ("top_p", "top_k", "stop_sequences"):
            if key in self.client_config:
                kwargs[key] = self.client_config[key]

        return kwargs

    def _parse_response(self, response: Any) -> str:
        """Concatenate the text blocks of an Anthropic response."""
        try:
            text = "".join(
                block.text for block in response.content if block.type == "text"
            )
        except Exception as e:
            raise InvalidResponseError(f"Failed to parse Anthropic response: {e}") from e
        if not text:
            raise InvalidResponseError("Anthropic response contained no text")
        return text
