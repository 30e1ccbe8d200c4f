"""Provider configuration: resolution, defaults and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

from memory_summarizer.errors import ConfigurationError
from memory_summarizer.player2 import Player2LocalDetector, Scheduler
from memory_summarizer.settings import (
    DEEPSEEK_URL,
    DEFAULT_MODEL,
    GOOGLE_URL,
    OPENAI_URL,
    PLAYER2_LOCAL_URL,
    PLAYER2_REMOTE_URL,
    SummarizerSettings,
)
from memory_summarizer.text_generators.transport import sanitize_api_key

_LOG = logging.getLogger(__name__)

MIN_KEY_LENGTH = 10


class Provider(str, Enum):
    OPENAI = "OpenAI"
    DEEPSEEK = "DeepSeek"
    GOOGLE = "Google"
    PLAYER2 = "Player2"
    CUSTOM = "Custom"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "str | Provider") -> "Provider":
        """Case-insensitive lookup; unknown names fall back to ``CUSTOM``."""
        if isinstance(value, Provider):
            return value
        wanted = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        _LOG.warning("Unknown provider %r, treating it as Custom", value)
        return cls.CUSTOM


@dataclass(frozen=True)
class ProviderConfig:
    """The active provider connection settings."""

    provider: Provider
    api_key: str
    api_url: str
    model: str
    caching_enabled: bool = False


class ExternalConfigSource(Protocol):
    """Adapter a host registers to share its own LLM configuration."""

    def try_load_external_config(self) -> ProviderConfig | None:
        ...


_DEFAULT_URLS: dict[Provider, str] = {
    Provider.OPENAI: OPENAI_URL,
    Provider.DEEPSEEK: DEEPSEEK_URL,
    Provider.GOOGLE: GOOGLE_URL,
    Provider.PLAYER2: f"{PLAYER2_REMOTE_URL}/chat/completions",
}


def default_url(provider: Provider) -> str:
    """Return the stock endpoint for ``provider`` (empty for Custom)."""
    return _DEFAULT_URLS.get(provider, "")


def validate_config(config: ProviderConfig) -> ProviderConfig:
    """Check ``config`` and return it, substituting the default model if unset.

    Raises ConfigurationError on the first hard failure: empty key, key
    shorter than 10 characters, empty URL. Key-prefix mismatches and a
    missing model only produce warnings.
    """
    key = config.api_key or ""
    if not key:
        raise ConfigurationError("API key is empty")
    if len(key) < MIN_KEY_LENGTH:
        raise ConfigurationError(
            f"API key too short (length: {len(key)}); key: {sanitize_api_key(key)}"
        )

    if config.provider in (Provider.OPENAI, Provider.DEEPSEEK) and not key.startswith("sk-"):
        _LOG.warning(
            "API key doesn't start with 'sk-' for %s: %s. "
            "If using a third-party proxy, select the Custom or Player2 provider.",
            config.provider, sanitize_api_key(key),
        )

    if not config.api_url:
        raise ConfigurationError("API URL is empty")

    if not config.model:
        _LOG.warning("Model name is empty, using default %s", DEFAULT_MODEL)
        config = replace(config, model=DEFAULT_MODEL)

    return config


class ConfigResolver:
    """Resolves the active ``ProviderConfig``.

    An external source, when the settings opt into it, takes precedence;
    otherwise (or when it yields nothing valid) the independent settings are
    used. For Player2 without a key, local app detection is started and the
    configuration stays incomplete until it finishes.
    """

    def __init__(
        self,
        settings: SummarizerSettings | None = None,
        external_source: ExternalConfigSource | None = None,
        detector: Player2LocalDetector | None = None,
    ) -> None:
        self.settings = settings if settings is not None else SummarizerSettings.from_env()
        self.external_source = external_source
        self.detector = detector if detector is not None else Player2LocalDetector()

    def _load_external(self) -> ProviderConfig | None:
        if self.external_source is None:
            _LOG.warning("External config requested but no source registered, using independent config")
            return None
        try:
            loaded = self.external_source.try_load_external_config()
        except Exception as exc:  # noqa: BLE001
            _LOG.warning("External config source failed: %s", exc)
            return None
        if loaded is None:
            _LOG.warning("External config not available, using independent config as fallback")
            return None

        provider = Provider.parse(loaded.provider)
        loaded = replace(
            loaded,
            provider=provider,
            api_url=loaded.api_url or default_url(provider),
            model=loaded.model or DEFAULT_MODEL,
        )
        try:
            return validate_config(loaded)
        except ConfigurationError as exc:
            _LOG.warning("External config invalid (%s), using independent config", exc)
            return None

    def _independent(self, schedule: Scheduler | None) -> ProviderConfig:
        settings = self.settings
        provider = Provider.parse(settings.provider)
        api_key = settings.api_key
        api_url = settings.api_url

        if provider is Provider.PLAYER2:
            local_key = self.detector.local_key
            if local_key:
                api_key = local_key
                api_url = f"{PLAYER2_LOCAL_URL}/chat/completions"
                _LOG.info("Using Player2 local app connection")
            elif api_key:
                api_url = f"{PLAYER2_REMOTE_URL}/chat/completions"
                _LOG.info("Using Player2 remote API with manual key")
            else:
                self.detector.start_detection(schedule)

        return ProviderConfig(
            provider=provider,
            api_key=api_key,
            api_url=api_url or default_url(provider),
            model=settings.model,
            caching_enabled=settings.enable_prompt_caching,
        )

    def resolve(self, schedule: Scheduler | None = None) -> ProviderConfig:
        """Return a validated configuration or raise ConfigurationError.

        ``schedule`` submits a coroutine to run in the background; it is
        needed only to start Player2 local detection.
        """
        if self.settings.use_external_config:
            external = self._load_external()
            if external is not None:
                _LOG.info("Loaded external config (%s/%s)", external.provider, external.model)
                return external

        config = validate_config(self._independent(schedule))
        _LOG.info("Initialized with independent config (%s/%s)", config.provider, config.model)
        _LOG.info("API key: %s", sanitize_api_key(config.api_key))
        _LOG.info("API URL: %s", config.api_url)
        return config
