"""HTTP transport with bounded retries over aiohttp."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

import aiohttp

from memory_summarizer.errors import AuthenticationError, TransientNetworkError
from memory_summarizer.settings import MAX_ATTEMPTS, REQUEST_TIMEOUT, RETRY_BASE_DELAY

_LOG = logging.getLogger(__name__)

_FATAL_STATUSES = frozenset({401, 403})
_TRANSIENT_STATUSES = frozenset({429, 503, 504})
_OVERLOAD_MARKERS = ("overloaded", "UNAVAILABLE")


def sanitize_api_key(key: str | None) -> str:
    """Return a loggable form of ``key`` that never reveals it in full."""
    if not key:
        return "(empty)"
    if len(key) <= 10:
        return key[:3] + "..."
    return f"{key[:7]}...{key[-4:]} (length: {len(key)})"


def classify_failure(status: int, body: str) -> AuthenticationError | TransientNetworkError:
    """Map a non-2xx response to the error that decides whether to retry."""
    if status in _FATAL_STATUSES:
        return AuthenticationError(status, body)
    detail = body[:200]
    if status in _TRANSIENT_STATUSES or any(m in body for m in _OVERLOAD_MARKERS):
        return TransientNetworkError(f"provider busy: {detail}", status=status)
    # Anything else is treated as transient too; the attempt cap bounds it.
    return TransientNetworkError(detail, status=status)


class Transport:
    """POSTs JSON bodies, retrying transient failures with a linear backoff."""

    def __init__(
        self,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        retry_base_delay: float = RETRY_BASE_DELAY,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay
        self.timeout = timeout

    async def _post_once(
        self,
        session: aiohttp.ClientSession,
        url: str,
        headers: Mapping[str, str],
        body: str,
    ) -> tuple[int, str]:
        """Perform a single exchange and return ``(status, body_text)``."""
        async with session.post(url, data=body.encode("utf-8"), headers=dict(headers)) as response:
            return response.status, await response.text(errors="replace")

    async def _attempt(
        self,
        session: aiohttp.ClientSession,
        url: str,
        headers: Mapping[str, str],
        body: str,
    ) -> str:
        try:
            status, text = await self._post_once(session, url, headers, body)
        except asyncio.TimeoutError as exc:
            raise TransientNetworkError(f"timed out after {self.timeout:.0f}s") from exc
        except aiohttp.ClientError as exc:
            raise TransientNetworkError(f"{type(exc).__name__}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise TransientNetworkError(f"undecodable response body: {exc}") from exc

        if 200 <= status < 300:
            return text
        raise classify_failure(status, text)

    async def send(
        self,
        url: str,
        headers: Mapping[str, str],
        body: str,
        *,
        api_key: str | None = None,
    ) -> str | None:
        """Send ``body`` to ``url`` and return the response text.

        Returns None after an authentication failure or once every attempt
        has failed; errors never propagate to the caller.
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            for attempt in range(1, self.max_attempts + 1):
                if attempt > 1:
                    _LOG.info("Retry attempt %d/%d...", attempt, self.max_attempts)
                else:
                    _LOG.info("Calling API: %s...", url[:60])

                try:
                    text = await self._attempt(session, url, headers, body)
                except AuthenticationError as exc:
                    _LOG.error(
                        "Authentication error (%s); API key: %s; response: %s",
                        exc.status, sanitize_api_key(api_key), exc.detail,
                    )
                    return None
                except TransientNetworkError as exc:
                    _LOG.warning(
                        "API error (attempt %d/%d): %s", attempt, self.max_attempts, exc,
                    )
                    if attempt >= self.max_attempts:
                        _LOG.error("Failed after %d attempts. Last error: %s", attempt, exc)
                        return None
                    await asyncio.sleep(self.retry_base_delay * attempt)
                    continue

                if attempt > 1:
                    _LOG.info("Retry successful on attempt %d", attempt)
                return text

        return None
