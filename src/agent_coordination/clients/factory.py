"""Factory for creating text generators.

This module provides a centralized way to create text generators based on
provider name, using a registry pattern that makes it easy to add new
providers.
"""

import importlib
import os
from typing import Any

from .base import BaseTextGenerator

# registry of provider configurations
_PROVIDER_REGISTRY: dict[str, dict[str, Any]] = {
    "anthropic": {
        "class_path": "agent_coordination.clients.anthropic.AnthropicGenerator",
        "api_key_env": "ANTHROPIC_API_KEY",
        "default_model": "claude-sonnet-4-5-20250929",
    },
    "openai": {
        "class_path": "agent_coordination.clients.openai.OpenAIGenerator",
        "api_key_env": "OPENAI_API_KEY",
        "default_model": "gpt-4o",
    },
    "together": {
        "class_path": "agent_coordination.clients.together.TogetherGenerator",
        "api_key_env": "TOGETHER_API_KEY",
        "default_model": "meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo",
    },
    "google": {
        "class_path": "agent_coordination.clients.google.GoogleGenerator",
        "api_key_env": "GOOGLE_API_KEY",
        "default_model": "gemini-2.0-flash",
    },
}


def get_available_providers() -> list[str]:
    """Get list of available provider names."""
    return list(_PROVIDER_REGISTRY.keys())


def get_default_model(provider: str) -> str:
    """Get the default model for a provider.

    Raises:
        ValueError: If provider is unknown.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise ValueError(f"Unknown provider: {provider}. Available: {get_available_providers()}")
    return _PROVIDER_REGISTRY[provider]["default_model"]


def create_generator(
    provider: str,
    model: str | None = None,
    client_config: dict | None = None,
    api_key: str | None = None,
) -> BaseTextGenerator:
    """Create a text generator for the specified provider.

    Args:
        provider: The provider name (anthropic, openai, together, google).
        model: Optional model override. If not provided, uses provider default.
        client_config: Optional configuration dict for the generator.
        api_key: Optional API key. If not provided, reads from environment.

    Returns:
        An initialized text generator instance.

    Raises:
        ValueError: If provider is unknown or API key is not available.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise ValueError(f"Unknown provider: {provider}. Available: {get_available_providers()}")

    config = _PROVIDER_REGISTRY[provider]

    resolved_key = api_key or os.getenv(config["api_key_env"])
    if not resolved_key:
        raise ValueError(f"{config['api_key_env']} not set in environment")

    generator_class = _import_generator_class(config["class_path"])

    return generator_class(
        api_key=resolved_key,
        model=model or config["default_model"],
        client_config=client_config,
    )


def _import_generator_class(class_path: str) -> type[BaseTextGenerator]:
    """Dynamically import a generator class from its dotted path.

    Imports are lazy so that only the selected provider's SDK is loaded.
    """
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
