"""Background LLM summarization of memory records."""

from .config import ConfigResolver, ExternalConfigSource, Provider, ProviderConfig
from .settings import SummarizerSettings
from .summarization import MemoryEntry, SummaryEngine, compute_fingerprint

__all__ = [
    "SummaryEngine",
    "MemoryEntry",
    "compute_fingerprint",
    "ConfigResolver",
    "ExternalConfigSource",
    "Provider",
    "ProviderConfig",
    "SummarizerSettings",
]
