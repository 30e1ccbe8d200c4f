"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from memory_summarizer.config import ConfigResolver
from memory_summarizer.settings import SummarizerSettings
from memory_summarizer.summarization import MemoryEntry, SummaryEngine
from memory_summarizer.text_generators import TextGeneratorAPI


@pytest.fixture
def settings():
    """Valid independent settings for an OpenAI-style provider."""
    return SummarizerSettings(
        provider="OpenAI",
        api_key="sk-test-0123456789abcdef",
        model="gpt-4o-mini",
    )


@pytest.fixture
def memories():
    """A short, ordered memory list."""
    return [
        MemoryEntry(id="m1", content="ate a meal"),
        MemoryEntry(id="m2", content="chatted with Bob"),
    ]


@pytest.fixture
def mock_generator():
    """A text generator whose generate() returns a fixed summary."""
    generator = AsyncMock(spec=TextGeneratorAPI)
    generator.generate.return_value = "A quiet day of eating and talking."
    return generator


@pytest.fixture
def engine(settings, mock_generator):
    """An engine wired to the mock generator; stopped after the test."""
    eng = SummaryEngine(ConfigResolver(settings), generator=mock_generator)
    yield eng
    eng.shutdown()
