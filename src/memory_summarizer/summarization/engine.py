"""The summarization engine: cache, dedup, background resolution, delivery."""

from __future__ import annotations

import concurrent.futures
import functools
import logging
import threading
from collections.abc import Callable, Sequence

from memory_summarizer.config import ConfigResolver, ProviderConfig
from memory_summarizer.errors import ConfigurationError, MalformedResponseError, SummarizerError
from memory_summarizer.player2 import Player2LocalDetector
from memory_summarizer.settings import (
    CACHE_CLEANUP_THRESHOLD,
    DEFAULT_CALLBACKS_PER_TICK,
    MAX_CACHE_SIZE,
    SummarizerSettings,
)
from memory_summarizer.text_generators import TextGeneratorAPI, Transport, get_text_generator

from .background import BackgroundLoop
from .delivery import DeliveryQueue
from .fingerprint import MemoryEntry, compute_fingerprint
from .pending import CallbackRegistry, InFlightTracker, SummaryCallback
from .prompts import PromptBuilder, build_summary_prompt
from .result_cache import ResultCache

_LOG = logging.getLogger(__name__)


class SummaryEngine:
    """Produces memory summaries without ever blocking the caller.

    ``summarize`` answers from the cache when it can and otherwise schedules
    one background call per fingerprint. Results are handed to registered
    callbacks through a delivery queue the host drains with ``pump`` on its
    own thread.

    Lock order for the completion sequence is cache -> in-flight ->
    callbacks -> delivery; each lock is released before the next is taken.
    """

    def __init__(
        self,
        resolver: ConfigResolver | None = None,
        *,
        settings: SummarizerSettings | None = None,
        generator: TextGeneratorAPI | None = None,
        transport: Transport | None = None,
        prompt_builder: PromptBuilder = build_summary_prompt,
        runner: BackgroundLoop | None = None,
        max_cache_size: int = MAX_CACHE_SIZE,
        cleanup_threshold: int = CACHE_CLEANUP_THRESHOLD,
        on_player2_detection: Callable[[bool], None] | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            resolver: Config resolver; built from ``settings`` (or the
                environment) when omitted
            settings: Independent settings used when no resolver is given
            generator: Fixed text generator; when omitted one is built from
                the resolved configuration
            transport: Transport shared by generators built from config
            prompt_builder: Renders the prompt for an entity's memories
            runner: Background loop for network work
            max_cache_size: Target size of the result cache
            cleanup_threshold: Cache size that triggers pruning
            on_player2_detection: Host hook told whether the local Player2
                app was found; it is invoked from ``pump``
        """
        self._runner = runner or BackgroundLoop()
        self._on_player2_detection = on_player2_detection
        if resolver is None:
            detector = Player2LocalDetector(on_result=self._queue_detection_result)
            resolver = ConfigResolver(settings, detector=detector)
        elif on_player2_detection is not None:
            if resolver.detector.on_result is not None:
                _LOG.warning("Replacing the detector's existing on_result with on_player2_detection")
            resolver.detector.on_result = self._queue_detection_result
        self.resolver = resolver

        self._fixed_generator = generator
        self._transport = transport or Transport()
        self._generator: TextGeneratorAPI | None = None
        self._config: ProviderConfig | None = None
        self._initialized = False

        self._cache = ResultCache(max_cache_size, cleanup_threshold)
        self._in_flight = InFlightTracker()
        self._callbacks = CallbackRegistry()
        self._delivery = DeliveryQueue()
        self._prompt_builder = prompt_builder

        self._futures: set[concurrent.futures.Future] = set()
        self._futures_lock = threading.Lock()

    # ------------------------------------------------------------------ config

    @property
    def config(self) -> ProviderConfig | None:
        return self._config

    def _queue_detection_result(self, found: bool) -> None:
        if self._on_player2_detection is not None:
            self._delivery.enqueue(functools.partial(self._on_player2_detection, found))

    def initialize(self) -> bool:
        """Resolve the provider configuration; returns whether it is usable."""
        try:
            config = self.resolver.resolve(schedule=self._runner.submit)
        except ConfigurationError as exc:
            _LOG.error("Configuration error: %s", exc)
            self._initialized = False
            return False
        except Exception as exc:  # noqa: BLE001
            _LOG.exception("Init failed: %s", exc)
            self._initialized = False
            return False

        self._config = config
        self._generator = self._fixed_generator or get_text_generator(config, self._transport)
        self._initialized = True
        return True

    def is_available(self) -> bool:
        if not self._initialized:
            self.initialize()
        return self._initialized

    def force_reinitialize(self) -> bool:
        """Re-resolve the configuration, re-running a Player2 detection that found nothing."""
        detector = self.resolver.detector
        if detector.is_finished and detector.local_key is None:
            detector.reset()
        self._initialized = False
        return self.initialize()

    def clear_all_configuration(self) -> None:
        """Forget the configuration and every cached, pending or queued item."""
        self._config = None
        self._generator = None
        self._initialized = False
        self.resolver.detector.reset()

        self._cache.clear()
        self._in_flight.clear()
        self._callbacks.clear()
        self._delivery.clear()
        _LOG.info("All API configuration and cache cleared")

    # ------------------------------------------------------------------ API

    @staticmethod
    def fingerprint(entity_id: str, memories: Sequence[MemoryEntry]) -> str:
        return compute_fingerprint(entity_id, memories)

    def summarize(
        self,
        entity_id: str,
        memories: Sequence[MemoryEntry],
        template_name: str = "default",
        *,
        entity_label: str | None = None,
    ) -> str | None:
        """Return the cached summary, or None after scheduling its resolution.

        Repeated calls for a fingerprint that is already in flight do not
        schedule another request.
        """
        if not self.is_available():
            return None

        key = compute_fingerprint(entity_id, memories)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        if not self._in_flight.try_acquire(key):
            return None

        try:
            prompt = self._prompt_builder(entity_label or entity_id, memories, template_name)
            future = self._runner.submit(self._resolve(key, prompt))
        except Exception as exc:  # noqa: BLE001
            self._in_flight.release(key)
            _LOG.exception("Could not schedule summary for %s: %s", key, exc)
            return None

        with self._futures_lock:
            self._futures.add(future)
        future.add_done_callback(self._forget_future)
        return None

    def register_callback(self, fingerprint: str, callback: SummaryCallback) -> None:
        """Call ``callback(summary)`` from ``pump`` once ``fingerprint`` resolves."""
        self._callbacks.register(fingerprint, callback)

    def pump(self, max_per_tick: int = DEFAULT_CALLBACKS_PER_TICK) -> int:
        """Run up to ``max_per_tick`` queued callbacks on the calling thread."""
        return self._delivery.drain(max_per_tick)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for background tasks submitted so far; False on timeout."""
        with self._futures_lock:
            futures = list(self._futures)
        if not futures:
            return True
        _, not_done = concurrent.futures.wait(futures, timeout=timeout)
        return not not_done

    def shutdown(self, timeout: float | None = 5.0) -> None:
        self._runner.stop(timeout)

    @property
    def pending_deliveries(self) -> int:
        return len(self._delivery)

    # ------------------------------------------------------------------ work

    def _forget_future(self, future: concurrent.futures.Future) -> None:
        with self._futures_lock:
            self._futures.discard(future)

    async def _resolve(self, key: str, prompt: str) -> str | None:
        generator = self._generator
        try:
            if generator is None:
                raise ConfigurationError("engine was reset before the request ran")

            summary = await generator.generate(prompt)
            if summary is None:
                _LOG.warning("No summary produced for %s", key)
                return None

            self._cache.put(key, summary)
            self._in_flight.release(key)
            callbacks = self._callbacks.drain_all(key)
            for callback in callbacks:
                self._delivery.enqueue(functools.partial(callback, summary))
            _LOG.debug("Resolved %s, %d callback(s) queued", key, len(callbacks))
            return summary
        except MalformedResponseError as exc:
            _LOG.error("Malformed response for %s: %s", key, exc)
        except SummarizerError as exc:
            _LOG.error("Summarization failed for %s: %s", key, exc)
        except Exception as exc:  # noqa: BLE001
            _LOG.exception("Task failed for %s: %s", key, exc)
        finally:
            self._in_flight.release(key)
        return None
