"""Together AI text generator.

Together AI provides an OpenAI-compatible API, so this generator extends
OpenAICompatibleGenerator with Together-specific error handling.
"""

import os
from contextlib import contextmanager

from together import Together
from together.error import AuthenticationError as TogetherAuthError
from together.error import RateLimitError as TogetherRateLimitError

from ..exceptions import (
    AuthenticationError,
    ProviderUnavailableError,
    RateLimitError,
)
from .openai_compat import OpenAICompatibleGenerator


class TogetherGenerator(OpenAICompatibleGenerator):
    """Together AI text generator for open models (Llama, Mistral, ...)."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo",
        client_config: dict | None = None,
    ):
        """Initialize the Together generator.

        Args:
            api_key: Together API key. Defaults to TOGETHER_API_KEY env var.
            model: Model to use. Defaults to Llama 3.1 70B.
            client_config: Optional dictionary of configuration parameters.
        """
        super().__init__(api_key, model, client_config)

    def _create_client(self, api_key: str | None) -> Together:
        return Together(
            api_key=api_key or os.environ.get("TOGETHER_API_KEY"),
            **self._sdk_kwargs(),
        )

    def _get_supported_config_keys(self) -> set[str]:
        return {
            "top_p",
            "top_k",
            "repetition_penalty",
            "stop",
            "timeout",
        }

    @contextmanager
    def _handle_api_errors(self):
        """Handle Together-specific errors."""
        try:
            yield
        except TogetherAuthError as e:
            raise AuthenticationError(f"Together authentication failed: {e}") from e
        except TogetherRateLimitError as e:
            raise RateLimitError("Together rate limit exceeded") from e
        except Exception as e:
            message = str(e).lower()
            if "connection" in message or "timeout" in message:
                raise ProviderUnavailableError(f"Together API unavailable: {e}") from e
            raise
