"""Base class for text generator backends.

Every backend inherits from BaseTextGenerator and implements ``generate``:
a pure prompt string goes in, raw text comes out. Provider-specific
negotiation stays inside each backend.
"""

import functools
import random
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, TypeVar

from ..exceptions import ProviderUnavailableError, RateLimitError
from ..logging import get_logger
from ..types import GenerationOptions

logger = get_logger(__name__)

T = TypeVar("T")


def with_retry(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for retrying API calls with exponential backoff.

    Retries on RateLimitError and ProviderUnavailableError. Other exceptions
    are raised immediately.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        initial_delay: Initial delay in seconds between retries (default: 1.0)
        max_delay: Maximum delay in seconds (default: 60.0)
        exponential_base: Base for exponential backoff (default: 2.0)
        jitter: Whether to add random jitter to delay (default: True)

    Returns:
        Decorated function with retry logic.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            delay = initial_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except (RateLimitError, ProviderUnavailableError) as e:
                    if attempt == max_retries:
                        logger.warning(
                            f"max retries ({max_retries}) exceeded for {func.__name__}: {e}"
                        )
                        raise

                    # honour the provider's hint when it sent one
                    retry_after = getattr(e, "retry_after", None)
                    actual_delay = min(retry_after or delay, max_delay)
                    if jitter:
                        actual_delay *= (0.5 + random.random())

                    logger.info(
                        f"retry {attempt + 1}/{max_retries} for {func.__name__} "
                        f"after {actual_delay:.1f}s: {e}"
                    )
                    time.sleep(actual_delay)
                    delay *= exponential_base

            raise RuntimeError("Unexpected retry loop exit")

        return wrapper
    return decorator


class BaseTextGenerator(ABC):
    """Abstract base class for all text generator backends.

    Agents only see ``generate(prompt, options) -> str``. Each backend is
    responsible for building the provider request, applying the configured
    timeout and mapping provider errors onto the client error classes.
    """

    def __init__(self, client_config: dict | None = None):
        """Initialize the generator.

        Args:
            client_config: Optional dictionary of provider parameters
                           (e.g. top_p, stop sequences, timeout).
        """
        self.client_config = client_config or {}

    @property
    def timeout(self) -> float | None:
        """Request timeout in seconds, if configured."""
        return self.client_config.get("timeout")

    @abstractmethod
    def generate(self, prompt: str, options: GenerationOptions | None = None) -> str:
        """Generate text for a prompt.

        Args:
            prompt: The full instruction prompt.
            options: Sampling options; provider defaults apply when omitted.

        Returns:
            The raw generated text.

        Raises:
            AuthenticationError: If API key is invalid
            RateLimitError: If rate limit is exceeded after retries
            ProviderUnavailableError: If API is unavailable after retries
            InvalidResponseError: If the response carries no text
        """

    def _validate_config(self, supported_keys: set[str], provider: str) -> None:
        """Reject configuration keys the provider does not understand."""
        unsupported = set(self.client_config.keys()) - supported_keys
        if unsupported:
            raise ValueError(f"Unsupported config keys for {provider}: {unsupported}")

    def _sdk_kwargs(self) -> dict[str, Any]:
        """Keyword arguments shared by every SDK client constructor."""
        return {"timeout": self.timeout} if self.timeout is not None else {}
