# text_generators/__init__.py
from __future__ import annotations

from typing import TYPE_CHECKING

from .base import TextGeneratorAPI
from .json_codec import escape_json_string, extract_json_field, extract_json_string, unescape_json_string
from .provider_api import ProviderTextGenerator
from .providers import build_headers, build_request_url, decode_response, encode_request
from .transport import Transport, classify_failure, sanitize_api_key

if TYPE_CHECKING:
    from memory_summarizer.config import ProviderConfig

__all__ = [
    "TextGeneratorAPI",
    "ProviderTextGenerator",
    "Transport",
    "classify_failure",
    "sanitize_api_key",
    "encode_request",
    "decode_response",
    "build_request_url",
    "build_headers",
    "escape_json_string",
    "unescape_json_string",
    "extract_json_string",
    "extract_json_field",
]


def get_text_generator(config: ProviderConfig, transport: Transport | None = None) -> TextGeneratorAPI:
    """Return a text-generator instance for the given provider configuration."""
    return ProviderTextGenerator(config, transport)
