"""Bookkeeping for fingerprints that are still being resolved."""

from __future__ import annotations

import threading
from collections.abc import Callable

SummaryCallback = Callable[[str], None]


class InFlightTracker:
    """Set of fingerprints with an outstanding network call."""

    def __init__(self) -> None:
        self._keys: set[str] = set()
        self._lock = threading.Lock()

    def try_acquire(self, key: str) -> bool:
        """Mark ``key`` in flight; False if it already was."""
        with self._lock:
            if key in self._keys:
                return False
            self._keys.add(key)
            return True

    def release(self, key: str) -> None:
        with self._lock:
            self._keys.discard(key)

    def clear(self) -> None:
        with self._lock:
            self._keys.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)


class CallbackRegistry:
    """Callbacks waiting for a fingerprint's summary, in registration order."""

    def __init__(self) -> None:
        self._callbacks: dict[str, list[SummaryCallback]] = {}
        self._lock = threading.Lock()

    def register(self, key: str, callback: SummaryCallback) -> None:
        with self._lock:
            self._callbacks.setdefault(key, []).append(callback)

    def drain_all(self, key: str) -> list[SummaryCallback]:
        """Remove and return every callback registered for ``key``."""
        with self._lock:
            return self._callbacks.pop(key, [])

    def pending_keys(self) -> list[str]:
        with self._lock:
            return list(self._callbacks)

    def clear(self) -> None:
        with self._lock:
            self._callbacks.clear()
