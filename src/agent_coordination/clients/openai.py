"""OpenAI text generator."""

import os
from contextlib import contextmanager

from openai import APIConnectionError, APITimeoutError, OpenAI
from openai import AuthenticationError as OpenAIAuthError
from openai import RateLimitError as OpenAIRateLimitError

from ..exceptions import (
    AuthenticationError,
    ProviderUnavailableError,
    RateLimitError,
)
from .openai_compat import OpenAICompatibleGenerator


class OpenAIGenerator(OpenAICompatibleGenerator):
    """OpenAI chat completions text generator."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o",
        client_config: dict | None = None,
    ):
        """Initialize the OpenAI generator.

        Args:
            api_key: OpenAI API key. Defaults to OPENAI_API_KEY env var.
            model: Model to use. Defaults to gpt-4o.
            client_config: Optional dictionary of configuration parameters.
        """
        super().__init__(api_key, model, client_config)

    def _create_client(self, api_key: str | None) -> OpenAI:
        return OpenAI(
            api_key=api_key or os.environ.get("OPENAI_API_KEY"),
            **self._sdk_kwargs(),
        )

    def _get_supported_config_keys(self) -> set[str]:
        return {
            "top_p",
            "stop",
            "presence_penalty",
            "frequency_penalty",
            "timeout",
        }

    @contextmanager
    def _handle_api_errors(self):
        """Handle OpenAI-specific errors."""
        try:
            yield
        except OpenAIAuthError as e:
            raise AuthenticationError(f"OpenAI authentication failed: {e}") from e
        except OpenAIRateLimitError as e:
            raise RateLimitError("OpenAI rate limit exceeded") from e
        except (APIConnectionError, APITimeoutError) as e:
            raise ProviderUnavailableError(f"OpenAI API unavailable: {e}") from e
