"""Summarization engine and its runtime structures."""

from .background import BackgroundLoop
from .delivery import DeliveryQueue
from .engine import SummaryEngine
from .fingerprint import MemoryEntry, compute_fingerprint, stable_hash
from .pending import CallbackRegistry, InFlightTracker
from .prompts import build_summary_prompt
from .result_cache import ResultCache

__all__ = [
    "SummaryEngine",
    "MemoryEntry",
    "compute_fingerprint",
    "stable_hash",
    "ResultCache",
    "InFlightTracker",
    "CallbackRegistry",
    "DeliveryQueue",
    "BackgroundLoop",
    "build_summary_prompt",
]
