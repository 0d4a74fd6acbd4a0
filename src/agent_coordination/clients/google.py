"""Google Gemini text generator using the google-genai SDK.

Gemini takes the system prompt as ``system_instruction`` inside the
generation config and exposes the concatenated answer as ``response.text``.
"""

import os
from typing import Any

from google import genai
from google.genai import types
from google.genai.errors import APIError, ClientError, ServerError

from ..exceptions import (
    AuthenticationError,
    InvalidResponseError,
    ProviderUnavailableError,
    RateLimitError,
)
from ..types import GenerationOptions
from .base import BaseTextGenerator, with_retry

# supported configuration keys for google
SUPPORTED_CONFIG_KEYS = {
    "top_p",
    "top_k",
    "stop_sequences",
    "timeout",
}


class GoogleGenerator(BaseTextGenerator):
    """Google Gemini API text generator."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-2.0-flash",
        client_config: dict | None = None,
    ):
        """Initialize the Google generator.

        Args:
            api_key: Google API key. Defaults to GOOGLE_API_KEY or GEMINI_API_KEY env var.
            model: Model to use. Defaults to gemini-2.0-flash.
            client_config: Optional configuration parameters:
                - top_p: float
                - top_k: int
                - stop_sequences: list[str]
                - timeout: float (seconds per request)
        """
        super().__init__(client_config)
        self._validate_config(SUPPORTED_CONFIG_KEYS, "Google")

        resolved_key = api_key or os.environ.get("GOOGLE_API_KEY") or os.environ.get("GEMINI_API_KEY")
        if not resolved_key:
            raise ValueError("Google API key not found. Set GOOGLE_API_KEY or GEMINI_API_KEY env var.")

        http_options = None
        if self.timeout is not None:
            # google-genai expects milliseconds
            http_options = types.HttpOptions(timeout=int(self.timeout * 1000))

        self.client = genai.Client(api_key=resolved_key, http_options=http_options)
        self.model_name = model

    @with_retry()
    def generate(self, prompt: str, options: GenerationOptions | None = None) -> str:
        """Generate text from Google Gemini."""
        config = self._build_generation_config(options or GenerationOptions())

        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=config,
            )
        except ClientError as e:
            error_msg = str(e).lower()
            if "unauthorized" in error_msg or "authentication" in error_msg or "api key" in error_msg:
                raise AuthenticationError(f"Google authentication failed: {e}") from e
            if getattr(e, "code", None) == 429 or "quota" in error_msg:
                raise RateLimitError("Google rate limit exceeded") from e
            raise InvalidResponseError(f"Invalid request to Google API: {e}") from e
        except ServerError as e:
            raise ProviderUnavailableError(f"Google API unavailable: {e}") from e
        except APIError as e:
            raise InvalidResponseError(f"Google API error: {e}") from e

        return self._parse_response(response)

    def _build_generation_config(self, options: GenerationOptions) -> types.GenerateContentConfig:
        """Build the generation config from options and client configuration."""
        config_kwargs: dict[str, Any] = {
            "max_output_tokens": options.max_output_tokens,
            "temperature": options.temperature,
        }
        if options.system_prompt:
            config_kwargs["system_instruction"] = options.system_prompt

        for key in ("top_p", "top_k", "stop_sequences"):
            if key in self.client_config:
                config_kwargs[key] = self.client_config[key]

        return types.GenerateContentConfig(**config_kwargs)

    def _parse_response(self, response: Any) -> str:
        """Return the text of a Gemini response."""
        try:
            text = response.text
        except Exception as e:
            raise InvalidResponseError(f"Failed to parse Google response: {e}") from e
        if not text:
            raise InvalidResponseError("Google response contained no text")
        return text
