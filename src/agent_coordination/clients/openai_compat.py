"""Base class for OpenAI-compatible text generators.

This class provides the shared implementation for providers that use the
OpenAI chat completions format (OpenAI, Together, ...).
"""

from abc import abstractmethod
from contextlib import contextmanager
from typing import Any

from ..exceptions import InvalidResponseError
from ..types import GenerationOptions
from .base import BaseTextGenerator, with_retry


class OpenAICompatibleGenerator(BaseTextGenerator):
    """Base class for generators using the OpenAI-compatible API format.

    Subclasses must implement:
    - _create_client(): initialize the provider SDK client
    - _get_supported_config_keys(): return set of supported config parameters
    - _handle_api_errors(): context manager for exception mapping
    """

    def __init__(
        self,
        api_key: str | None,
        model: str,
        client_config: dict | None = None,
    ):
        """Initialize the generator.

        Args:
            api_key: API key for the provider
            model: Model name to use
            client_config: Optional configuration parameters
        """
        super().__init__(client_config)
        self._validate_config(self._get_supported_config_keys(), self.__class__.__name__)
        self.model = model
        self.client = self._create_client(api_key)

    @abstractmethod
    def _create_client(self, api_key: str | None) -> Any:
        """Create the provider's SDK client instance."""

    @abstractmethod
    def _get_supported_config_keys(self) -> set[str]:
        """Return the set of config keys supported by this provider."""

    @abstractmethod
    @contextmanager
    def _handle_api_errors(self):
        """Context manager mapping provider exceptions onto client errors."""

    @with_retry()
    def generate(self, prompt: str, options: GenerationOptions | None = None) -> str:
        """Generate text from the provider.

        Raises:
            AuthenticationError: If API key is invalid
            RateLimitError: If rate limit is exceeded
            ProviderUnavailableError: If API is unavailable
            InvalidResponseError: If the completion carries no text
        """
        options = options or GenerationOptions()
        messages: list[dict[str, str]] = []
        if options.system_prompt:
            messages.append({"role": "system", "content": options.system_prompt})
        messages.append({"role": "user", "content": prompt})

        api_args: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": options.temperature,
            "max_tokens": options.max_output_tokens,
        }

        # apply config overrides for supported keys; timeout goes to the sdk client
        for key, value in self.client_config.items():
            if key != "timeout":
                api_args[key] = value

        with self._handle_api_errors():
            response = self.client.chat.completions.create(**api_args)
        return self._parse_response(response)

    def _parse_response(self, response: Any) -> str:
        """Extract the text of the first choice."""
        try:
            content = response.choices[0].message.content
        except Exception as e:
            raise InvalidResponseError(
                f"Failed to parse {self.__class__.__name__} response: {e}"
            ) from e
        if not content:
            raise InvalidResponseError(f"{self.__class__.__name__} response contained no text")
        return content
