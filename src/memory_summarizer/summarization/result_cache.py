"""Bounded in-memory store of finished summaries."""

from __future__ import annotations

import logging
import threading

from memory_summarizer.settings import CACHE_CLEANUP_THRESHOLD, MAX_CACHE_SIZE

_LOG = logging.getLogger(__name__)


class ResultCache:
    """Fingerprint -> summary map pruned by size, never by age.

    Once the cache holds ``cleanup_threshold`` entries, the next ``put``
    first drops the ``max_size // 2`` entries whose keys sort first
    (ordinal order), then inserts.
    """

    def __init__(
        self,
        max_size: int = MAX_CACHE_SIZE,
        cleanup_threshold: int = CACHE_CLEANUP_THRESHOLD,
    ) -> None:
        if cleanup_threshold < max_size:
            raise ValueError("cleanup_threshold must be >= max_size")
        self.max_size = max_size
        self.cleanup_threshold = cleanup_threshold
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, summary: str) -> None:
        with self._lock:
            if len(self._entries) >= self.cleanup_threshold:
                victims = sorted(self._entries)[: self.max_size // 2]
                for victim in victims:
                    del self._entries[victim]
                _LOG.debug(
                    "Cleaned cache: %d entries removed, %d remaining",
                    len(victims), len(self._entries),
                )
            self._entries[key] = summary

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
