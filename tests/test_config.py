"""Tests for settings and yaml configuration."""

import pytest

from agent_coordination.config import Settings, load_yaml_config

PROVIDER_ENV_VARS = [
    "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "TOGETHER_API_KEY",
    "GOOGLE_API_KEY", "GEMINI_API_KEY", "LLM_PROVIDER", "LLM_MODEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove provider variables so tests do not depend on the machine."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    """Tests for the Settings class."""

    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.request_timeout == 60.0
        assert settings.default_language == "de"
        assert settings.default_language_code == "de-DE"
        assert settings.default_user_id == "anonymous"
        assert settings.detect_provider() is None

    def test_detects_provider_from_keys(self, clean_env):
        clean_env.setenv("TOGETHER_API_KEY", "t-key")
        settings = Settings(_env_file=None)
        assert settings.detect_provider() == "together"
        assert settings.get_api_key_for_provider("together") == "t-key"

    def test_anthropic_has_priority(self, clean_env):
        clean_env.setenv("OPENAI_API_KEY", "o-key")
        clean_env.setenv("ANTHROPIC_API_KEY", "a-key")
        assert Settings(_env_file=None).detect_provider() == "anthropic"

    def test_explicit_provider(self, clean_env):
        clean_env.setenv("LLM_PROVIDER", "google")
        clean_env.setenv("OPENAI_API_KEY", "o-key")
        assert Settings(_env_file=None).detect_provider() == "google"

    def test_gemini_key_alias(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "g-key")
        settings = Settings(_env_file=None)
        assert settings.get_api_key_for_provider("google") == "g-key"

    def test_timeout_must_be_positive(self, clean_env):
        with pytest.raises(ValueError):
            Settings(_env_file=None, request_timeout=0)


class TestYamlConfig:
    """Tests for load_yaml_config."""

    def test_missing_file(self, tmp_path):
        assert load_yaml_config(str(tmp_path / "nope.yaml")) == {}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_yaml_config(str(path)) == {}

    def test_llm_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("llm:\n  provider: openai\n  top_p: 0.9\n")
        assert load_yaml_config(str(path)) == {"llm": {"provider": "openai", "top_p": 0.9}}
