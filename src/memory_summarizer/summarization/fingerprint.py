"""Request fingerprints: stable keys for (entity, ordered memories)."""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class MemoryEntry:
    """A memory record as far as the summarizer is concerned."""

    content: str
    id: str | None = None


def stable_hash(text: str) -> str:
    """Process-independent short digest of ``text``."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def memory_identity(entry: MemoryEntry) -> str:
    return entry.id or stable_hash(entry.content)


def compute_fingerprint(entity_id: str, memories: Sequence[MemoryEntry]) -> str:
    """
    Derive the cache key for summarizing ``memories`` of ``entity_id``.

    Args:
        entity_id: Identifier of the entity the memories belong to
        memories: Memory records in the order they will be summarized

    Returns:
        ``"{entity_id}_{count}_{digest}"``; reordering, adding, removing or
        changing the identity of any memory yields a different key.
    """
    joined = "|".join(memory_identity(m) for m in memories)
    return f"{entity_id}_{len(memories)}_{stable_hash(joined)}"
