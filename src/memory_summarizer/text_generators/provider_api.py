"""Text generator backed by a raw provider HTTP API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from memory_summarizer.errors import MalformedResponseError

from .base import TextGeneratorAPI
from .providers import build_headers, build_request_url, decode_response, encode_request
from .transport import Transport, sanitize_api_key

if TYPE_CHECKING:
    from memory_summarizer.config import ProviderConfig

_LOG = logging.getLogger(__name__)


class ProviderTextGenerator(TextGeneratorAPI):
    """Text-generation backend for the chat-style and Google-style HTTP APIs.

    The request body, URL and headers are derived from the active
    ``ProviderConfig``; the exchange itself (including retries) is delegated
    to a ``Transport``.
    """

    def __init__(self, config: "ProviderConfig", transport: Transport | None = None) -> None:
        self.config = config
        self.transport = transport or Transport()

    async def generate(self, prompt: str) -> str | None:
        config = self.config
        _LOG.debug(
            "Provider=%s model=%s key=%s prompt_len=%d",
            config.provider, config.model, sanitize_api_key(config.api_key), len(prompt),
        )

        body = encode_request(config.provider, config.model, prompt, config.caching_enabled)
        raw = await self.transport.send(
            build_request_url(config),
            build_headers(config),
            body,
            api_key=config.api_key,
        )
        if raw is None:
            return None

        text = decode_response(config.provider, raw)
        if text is None:
            raise MalformedResponseError(
                f"{config.provider} response did not contain a summary"
            )
        return text.strip()
