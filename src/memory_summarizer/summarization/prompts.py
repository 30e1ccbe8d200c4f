"""Default prompt text for memory summaries."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .fingerprint import MemoryEntry

DEEP_ARCHIVE_TEMPLATE = "deep_archive"


class PromptBuilder(Protocol):
    """Callable that renders the prompt sent to the LLM."""

    def __call__(
        self, entity_label: str, memories: Sequence[MemoryEntry], template_name: str
    ) -> str:
        ...


def _format_memories(memories: Sequence[MemoryEntry], limit: int) -> str:
    return "\n".join(f"{i}. {m.content}" for i, m in enumerate(memories[:limit], start=1))


def build_summary_prompt(
    entity_label: str,
    memories: Sequence[MemoryEntry],
    template_name: str = "default",
) -> str:
    """
    Build the summarization prompt for one entity.

    Args:
        entity_label: Short display name of the entity
        memories: Memories to summarize, oldest first
        template_name: ``"deep_archive"`` for a compact long-term archive;
            anything else produces a regular summary

    Returns:
        Formatted prompt for the LLM
    """
    if template_name == DEEP_ARCHIVE_TEMPLATE:
        memories_text = _format_memories(memories, 15)
        return f"""Create a deep archive of the memories of {entity_label}.

Memories:
{memories_text}

Requirements: keep key events and relationships.
Merge similar experiences and highlight important turning points.
Use no more than 60 words.
Output only the summary, with no explanation or formatting.
"""

    memories_text = _format_memories(memories, 20)
    return f"""Create a memory summary for {entity_label}.

Memories:
{memories_text}

Requirements: focus on the main activities and events.
Merge identical events and note how often they happened.
Use no more than 80 words.
Output only the summary, with no explanation or formatting.
"""
