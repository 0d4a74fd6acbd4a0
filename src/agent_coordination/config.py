"""centralized configuration management using pydantic settings.

configuration is loaded from environment variables and an optional .env
file. the cli layers an optional config.yaml on top of these values.
"""

from functools import lru_cache

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """main settings class for the multi-agent system.

    attributes:
        anthropic_api_key: api key for anthropic (claude)
        openai_api_key: api key for openai
        together_api_key: api key for together ai
        google_api_key: api key for google (gemini)
        llm_provider: explicit provider selection (auto-detected if not set)
        llm_model: model to use (provider default if not set)
        log_level: logging level (DEBUG, INFO, WARNING, ERROR)
        request_timeout: timeout in seconds for every text generator call
        default_language: language of generated artifacts when unspecified
        default_language_code: locale assumed for voice commands
        default_user_id: user id used when a caller does not send one
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # api keys for llm providers
    anthropic_api_key: str | None = None
    openai_api_key: str | None = None
    together_api_key: str | None = None
    google_api_key: str | None = None
    gemini_api_key: str | None = None  # alias for google

    # llm configuration
    llm_provider: str | None = Field(default=None, alias="LLM_PROVIDER")
    llm_model: str | None = Field(default=None, alias="LLM_MODEL")
    request_timeout: float = Field(default=60.0, gt=0)

    # system configuration
    log_level: str = Field(default="WARNING", alias="AGENT_COORDINATION_LOG_LEVEL")
    default_language: str = "de"
    default_language_code: str = "de-DE"
    default_user_id: str = "anonymous"

    def get_google_api_key(self) -> str | None:
        """get google api key, checking both GOOGLE_API_KEY and GEMINI_API_KEY."""
        return self.google_api_key or self.gemini_api_key

    def detect_provider(self) -> str | None:
        """auto-detect provider based on available api keys.

        returns:
            provider name or None if no keys are set
        """
        if self.llm_provider:
            return self.llm_provider

        if self.anthropic_api_key:
            return "anthropic"
        if self.openai_api_key:
            return "openai"
        if self.together_api_key:
            return "together"
        if self.get_google_api_key():
            return "google"

        return None

    def get_api_key_for_provider(self, provider: str) -> str | None:
        """get the api key for a specific provider.

        args:
            provider: provider name (anthropic, openai, together, google)

        returns:
            api key or None if not set
        """
        key_map = {
            "anthropic": self.anthropic_api_key,
            "openai": self.openai_api_key,
            "together": self.together_api_key,
            "google": self.get_google_api_key(),
        }
        return key_map.get(provider)


@lru_cache
def get_settings() -> Settings:
    """get the singleton settings instance.

    call get_settings.cache_clear() to reload settings if needed.
    """
    return Settings()


def load_yaml_config(path: str = "config.yaml") -> dict:
    """load configuration from a yaml file if it exists.

    args:
        path: location of the yaml file

    returns:
        the parsed mapping, or an empty dict when the file is missing or empty
    """
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}
