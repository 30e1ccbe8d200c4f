"""Tests for provider configuration resolution and validation."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, PropertyMock, patch

import pytest

from memory_summarizer.config import (
    ConfigResolver,
    Provider,
    ProviderConfig,
    default_url,
    validate_config,
)
from memory_summarizer.errors import ConfigurationError
from memory_summarizer.player2 import Player2LocalDetector
from memory_summarizer.settings import (
    DEEPSEEK_URL,
    DEFAULT_MODEL,
    GOOGLE_URL,
    OPENAI_URL,
    SummarizerSettings,
)

VALID_KEY = "sk-test-0123456789abcdef"


def _config(**overrides) -> ProviderConfig:
    values = dict(
        provider=Provider.OPENAI,
        api_key=VALID_KEY,
        api_url=OPENAI_URL,
        model="gpt-4o-mini",
    )
    values.update(overrides)
    return ProviderConfig(**values)


class TestProvider:
    """Tests for Provider parsing."""

    def test_case_insensitive(self):
        assert Provider.parse("deepseek") is Provider.DEEPSEEK
        assert Provider.parse("GOOGLE") is Provider.GOOGLE

    def test_unknown_falls_back_to_custom(self):
        assert Provider.parse("my-proxy") is Provider.CUSTOM

    def test_str_is_value(self):
        assert str(Provider.PLAYER2) == "Player2"

    def test_default_urls(self):
        assert default_url(Provider.DEEPSEEK) == DEEPSEEK_URL
        assert default_url(Provider.GOOGLE) == GOOGLE_URL
        assert default_url(Provider.CUSTOM) == ""


class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid(self):
        config = _config()
        assert validate_config(config) == config

    def test_empty_key(self):
        with pytest.raises(ConfigurationError, match="empty"):
            validate_config(_config(api_key=""))

    def test_short_key(self):
        with pytest.raises(ConfigurationError, match="too short"):
            validate_config(_config(api_key="sk-123"))

    def test_key_checked_before_url(self):
        with pytest.raises(ConfigurationError, match="API key"):
            validate_config(_config(api_key="", api_url=""))

    def test_empty_url(self):
        with pytest.raises(ConfigurationError, match="URL"):
            validate_config(_config(api_url=""))

    def test_empty_model_uses_default(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = validate_config(_config(model=""))
        assert config.model == DEFAULT_MODEL
        assert "Model name is empty" in caplog.text

    def test_key_prefix_mismatch_only_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = validate_config(_config(provider=Provider.DEEPSEEK, api_key="ds-0123456789abc"))
        assert config.api_key == "ds-0123456789abc"
        assert "doesn't start with 'sk-'" in caplog.text

    def test_custom_provider_no_prefix_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            validate_config(_config(provider=Provider.CUSTOM, api_key="proxy-0123456789"))
        assert "sk-" not in caplog.text


class TestIndependentResolution:
    """Tests for resolving from independent settings."""

    def test_openai_default_url(self):
        settings = SummarizerSettings(provider="OpenAI", api_key=VALID_KEY, model="gpt-4o")
        config = ConfigResolver(settings).resolve()
        assert config.provider is Provider.OPENAI
        assert config.api_url == OPENAI_URL
        assert config.model == "gpt-4o"

    def test_explicit_url_kept(self):
        settings = SummarizerSettings(
            provider="Custom", api_key="proxy-0123456789", api_url="http://proxy/v1", model="m"
        )
        assert ConfigResolver(settings).resolve().api_url == "http://proxy/v1"

    def test_caching_flag_carried(self):
        settings = SummarizerSettings(api_key=VALID_KEY, enable_prompt_caching=True)
        assert ConfigResolver(settings).resolve().caching_enabled is True

    def test_custom_without_url_fails(self):
        settings = SummarizerSettings(provider="Custom", api_key="proxy-0123456789")
        with pytest.raises(ConfigurationError):
            ConfigResolver(settings).resolve()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SUMMARIZER_PROVIDER", "DeepSeek")
        monkeypatch.setenv("SUMMARIZER_API_KEY", VALID_KEY)
        monkeypatch.setenv("SUMMARIZER_MODEL", "deepseek-chat")
        monkeypatch.setenv("SUMMARIZER_PROMPT_CACHING", "yes")
        monkeypatch.delenv("SUMMARIZER_API_URL", raising=False)
        monkeypatch.delenv("SUMMARIZER_USE_EXTERNAL_CONFIG", raising=False)
        settings = SummarizerSettings.from_env()
        assert settings.provider == "DeepSeek"
        assert settings.enable_prompt_caching is True
        assert settings.use_external_config is False


class TestExternalConfig:
    """Tests for importing configuration from an external source."""

    def _resolver(self, source):
        settings = SummarizerSettings(
            provider="OpenAI", api_key=VALID_KEY, model="independent-model", use_external_config=True
        )
        return ConfigResolver(settings, external_source=source)

    def test_external_used_when_valid(self):
        source = MagicMock()
        source.try_load_external_config.return_value = _config(
            provider="DeepSeek", api_key="sk-external-0123456", api_url="", model=""
        )
        config = self._resolver(source).resolve()
        assert config.provider is Provider.DEEPSEEK
        assert config.api_url == DEEPSEEK_URL
        assert config.model == DEFAULT_MODEL
        assert config.api_key == "sk-external-0123456"

    def test_falls_back_when_source_returns_none(self):
        source = MagicMock()
        source.try_load_external_config.return_value = None
        assert self._resolver(source).resolve().model == "independent-model"

    def test_falls_back_when_external_invalid(self):
        source = MagicMock()
        source.try_load_external_config.return_value = _config(api_key="short")
        assert self._resolver(source).resolve().model == "independent-model"

    def test_falls_back_when_source_raises(self):
        source = MagicMock()
        source.try_load_external_config.side_effect = RuntimeError("host exploded")
        assert self._resolver(source).resolve().model == "independent-model"

    def test_source_ignored_when_not_opted_in(self):
        source = MagicMock()
        settings = SummarizerSettings(api_key=VALID_KEY, model="independent-model")
        ConfigResolver(settings, external_source=source).resolve()
        source.try_load_external_config.assert_not_called()


class TestPlayer2Resolution:
    """Tests for the Player2 endpoint selection."""

    def test_local_key_preferred(self):
        settings = SummarizerSettings(provider="Player2", api_key="manual-key-0123456", model="m")
        detector = Player2LocalDetector()
        with patch.object(
            Player2LocalDetector, "local_key", new_callable=PropertyMock, return_value="local-key-0123456"
        ):
            config = ConfigResolver(settings, detector=detector).resolve()
        assert config.api_key == "local-key-0123456"
        assert config.api_url == "http://localhost:4315/v1/chat/completions"

    def test_manual_key_uses_remote(self):
        settings = SummarizerSettings(provider="Player2", api_key="manual-key-0123456", model="m")
        config = ConfigResolver(settings).resolve()
        assert config.api_key == "manual-key-0123456"
        assert config.api_url == "https://api.player2.game/v1/chat/completions"

    def test_no_key_starts_detection(self):
        settings = SummarizerSettings(provider="Player2", model="m")
        schedule = MagicMock()
        resolver = ConfigResolver(settings)
        with pytest.raises(ConfigurationError):
            resolver.resolve(schedule=schedule)
        schedule.assert_called_once()
        schedule.call_args.args[0].close()
        assert resolver.detector.is_running

    def test_no_key_detection_scheduled_once(self):
        settings = SummarizerSettings(provider="Player2", model="m")
        schedule = MagicMock()
        resolver = ConfigResolver(settings)
        for _ in range(3):
            with pytest.raises(ConfigurationError):
                resolver.resolve(schedule=schedule)
        assert schedule.call_count == 1
        schedule.call_args.args[0].close()
