"""Queue that hands finished work back to the consumer thread."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable

_LOG = logging.getLogger(__name__)

Action = Callable[[], None]


class DeliveryQueue:
    """FIFO of deferred invocations, drained only by the host's pump.

    Background tasks enqueue; the consumer calls ``drain`` once per tick so
    that callback bodies always run on the consumer's thread.
    """

    def __init__(self) -> None:
        self._actions: deque[Action] = deque()
        self._lock = threading.Lock()

    def enqueue(self, action: Action) -> None:
        with self._lock:
            self._actions.append(action)

    def drain(self, max_count: int) -> int:
        """Invoke up to ``max_count`` queued actions; returns how many ran.

        A failing action is logged and does not stop the rest of the batch.
        """
        with self._lock:
            batch = [self._actions.popleft() for _ in range(min(max_count, len(self._actions)))]

        for action in batch:
            try:
                action()
            except Exception:  # noqa: BLE001
                _LOG.exception("Callback error")
        return len(batch)

    def clear(self) -> None:
        with self._lock:
            self._actions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._actions)
