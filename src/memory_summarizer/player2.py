"""Detection of a locally running Player2 companion app."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Coroutine
from typing import Any

import aiohttp

from memory_summarizer.settings import (
    PLAYER2_CLIENT_ID,
    PLAYER2_HEALTH_TIMEOUT,
    PLAYER2_LOCAL_URL,
    PLAYER2_LOGIN_TIMEOUT,
)
from memory_summarizer.text_generators.json_codec import extract_json_field
from memory_summarizer.text_generators.transport import sanitize_api_key

_LOG = logging.getLogger(__name__)

Scheduler = Callable[[Coroutine[Any, Any, Any]], Any]


class Player2LocalDetector:
    """Finds the local Player2 app and obtains a session key from it.

    Detection runs at most once until ``reset()`` is called; while it runs,
    or after it has finished, ``start_detection`` is a no-op. Callers read
    ``local_key`` to learn the outcome.
    """

    def __init__(
        self,
        base_url: str = PLAYER2_LOCAL_URL,
        client_id: str = PLAYER2_CLIENT_ID,
        on_result: Callable[[bool], None] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client_id = client_id
        self.on_result = on_result
        self._lock = threading.Lock()
        self._local_key: str | None = None
        self._state = "idle"  # idle -> running -> done

    @property
    def local_key(self) -> str | None:
        with self._lock:
            return self._local_key

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._state == "running"

    @property
    def is_finished(self) -> bool:
        with self._lock:
            return self._state == "done"

    def reset(self) -> None:
        with self._lock:
            self._local_key = None
            self._state = "idle"

    def start_detection(self, schedule: Scheduler | None) -> bool:
        """Schedule ``detect()`` on ``schedule``; returns True if it was scheduled."""
        if schedule is None:
            _LOG.warning("Player2 selected but no key and no scheduler for local detection")
            return False
        with self._lock:
            if self._state != "idle":
                return False
            self._state = "running"
        _LOG.info("Player2 selected but no key, trying to detect local app...")
        schedule(self.detect())
        return True

    async def _get_status(self, session: aiohttp.ClientSession, url: str) -> int:
        async with session.get(url) as response:
            return response.status

    async def _post_text(self, session: aiohttp.ClientSession, url: str) -> str:
        async with session.post(
            url, data=b"{}", headers={"Content-Type": "application/json"}
        ) as response:
            response.raise_for_status()
            return await response.text(errors="replace")

    async def _check_health(self) -> bool:
        timeout = aiohttp.ClientTimeout(total=PLAYER2_HEALTH_TIMEOUT)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                status = await self._get_status(session, f"{self.base_url}/health")
        except (aiohttp.ClientError, asyncio.TimeoutError):
            return False
        return status == 200

    async def _fetch_key(self) -> str | None:
        url = f"{self.base_url}/login/web/{self.client_id}"
        timeout = aiohttp.ClientTimeout(total=PLAYER2_LOGIN_TIMEOUT)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                text = await self._post_text(session, url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            _LOG.warning("Failed to get Player2 local key: %s", exc)
            return None
        key = extract_json_field(text, "p2Key")
        if key:
            _LOG.info("Got Player2 local key: %s", sanitize_api_key(key))
        return key or None

    async def detect(self) -> str | None:
        """Probe the local app and return its session key, or None."""
        key: str | None = None
        try:
            _LOG.info("Checking for local Player2 app...")
            if await self._check_health():
                _LOG.info("Player2 local app detected")
                key = await self._fetch_key()
        except Exception as exc:  # noqa: BLE001
            _LOG.warning("Player2 detection error: %s", exc)
            key = None
        finally:
            with self._lock:
                self._local_key = key
                self._state = "done"

        if key is None:
            _LOG.info("Player2 local app not found, will use remote API")
        if self.on_result is not None:
            self.on_result(key is not None)
        return key
