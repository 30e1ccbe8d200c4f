"""Provider-specific request encoding and response decoding.

Two wire shapes are supported:

- chat-style (OpenAI, DeepSeek, Player2, Custom):
  ``{"model", "messages": [...], "temperature", "max_tokens"}`` answered by
  ``{"choices": [{"message": {"content": ...}}]}``
- generative-style (Google):
  ``{"contents": [{"parts": [{"text": ...}]}], "generationConfig": {...}}``
  answered by ``{"candidates": [{"content": {"parts": [{"text": ...}]}}]}``
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from memory_summarizer.settings import MAX_OUTPUT_TOKENS, SYSTEM_PROMPT, TEMPERATURE

from .json_codec import escape_json_string, extract_json_field

if TYPE_CHECKING:
    from memory_summarizer.config import Provider, ProviderConfig

_LOG = logging.getLogger(__name__)

_CACHE_CONTROL_PROVIDERS = frozenset({"OpenAI", "Custom", "Player2"})


def is_generative_style(provider: "Provider | str") -> bool:
    return str(provider) == "Google"


def _supports_cache_control(provider: str, model: str) -> bool:
    return provider in _CACHE_CONTROL_PROVIDERS and ("gpt-4" in model or "gpt-3.5" in model)


def _encode_generative(model: str, prompt: str) -> str:
    parts = [
        '{"contents":[{"parts":[{"text":"',
        escape_json_string(prompt),
        '"}]}],"generationConfig":{',
        f'"temperature":{TEMPERATURE},',
        f'"maxOutputTokens":{MAX_OUTPUT_TOKENS}',
    ]
    if "flash" in model:
        parts.append(',"thinkingConfig":{"thinkingBudget":0}')
    parts.append("}}")
    return "".join(parts)


def _encode_chat(provider: str, model: str, prompt: str, caching_enabled: bool) -> str:
    parts = [
        '{"model":"', escape_json_string(model), '",',
        '"messages":[',
        '{"role":"system","content":"', escape_json_string(SYSTEM_PROMPT), '"',
    ]
    if caching_enabled:
        if _supports_cache_control(provider, model):
            parts.append(',"cache_control":{"type":"ephemeral"}')
        elif provider == "DeepSeek":
            parts.append(',"cache":true')
    parts += [
        "},",
        '{"role":"user","content":"', escape_json_string(prompt), '"}],',
        f'"temperature":{TEMPERATURE},',
        f'"max_tokens":{MAX_OUTPUT_TOKENS}',
    ]
    if caching_enabled and provider == "DeepSeek":
        parts.append(',"enable_prompt_cache":true')
    parts.append("}")
    return "".join(parts)


def encode_request(
    provider: "Provider | str",
    model: str,
    prompt: str,
    caching_enabled: bool = False,
) -> str:
    """Encode ``prompt`` into the JSON request body ``provider`` expects."""
    provider = str(provider)
    model = model or ""
    if is_generative_style(provider):
        return _encode_generative(model, prompt)
    return _encode_chat(provider, model, prompt, caching_enabled)


def decode_response(provider: "Provider | str", raw_body: str) -> str | None:
    """Extract the generated text from a provider response body.

    Only the first ``"text"`` (Google) or ``"content"`` (chat-style) field is
    consulted. Returns None when the body is empty or the field is missing or
    malformed.
    """
    if not raw_body:
        _LOG.error("Empty response received from %s", provider)
        return None

    field = "text" if is_generative_style(provider) else "content"
    result = extract_json_field(raw_body, field)
    if result is None:
        _LOG.error("%s response has no valid '%s' field", provider, field)
        _LOG.debug("Response: %s", raw_body[:500])
    return result


def build_request_url(config: "ProviderConfig") -> str:
    """Return the URL to POST to, filling Google's model and key placeholders."""
    if is_generative_style(config.provider):
        return (
            config.api_url
            .replace("MODEL_PLACEHOLDER", config.model)
            .replace("API_KEY_PLACEHOLDER", config.api_key)
        )
    return config.api_url


def build_headers(config: "ProviderConfig") -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if not is_generative_style(config.provider):
        headers["Authorization"] = f"Bearer {config.api_key}"
    return headers
