"""Shared test fixtures for the rsvp_reader test suite.

WHY: Most test modules need the same small, hand-checked transcript and
prose samples. Centralizing them here means every module agrees on the
expected paragraph and token layout.

HOW: Module-level constants hold the raw samples; fixtures return the raw
text, the parsed DocumentSnapshot, and a fake ticker for driving the
playback scheduler without an event loop.

RULES:
- SAMPLE_TRANSCRIPT parses to 3 paragraphs and 25 tokens:
    P0 tokens 0-9   "Jane Doe:" Welcome to the show. Today we talk about reading.
    P1 tokens 10-15 "John Smith:" Thanks for having me, Jane.
    P2 tokens 16-24 "Jane Doe:" So, John Smith, tell us how it works.
- Index 18 ("John") merges with "Smith," into one two-token frame
- FakeTicker never fires on its own; tests call scheduler.tick()
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

from rsvp_reader.core.ir import DocumentSnapshot
from rsvp_reader.core.pipeline import build_document


# ---------------------------------------------------------------------------
# Sample inputs
# ---------------------------------------------------------------------------

SAMPLE_TRANSCRIPT = (
    "Jane Doe (00:01): Welcome to the show. Today we talk about reading.\n"
    "John Smith (00:05): Thanks for having me, Jane.\n"
    "Jane Doe (00:09): So, John Smith, tell us how it works.\n"
)

SAMPLE_PROSE = (
    "Speed reading shows one word at a time.\n"
    "\n"
    "Your eyes stay still while the words change."
)

# A transcript whose line breaks were lost and whose page footer was
# pasted along with it.
SCRAPED_TRANSCRIPT = (
    "Privacy Policy\nInterview Transcript\n\n"
    "Jane Doe (00:01): Welcome back. Jane Doe (00:04): ...as I was saying, it works. "
    "John John Smith Smith (00:10): It really does [inaudible 00:12] work. "
    "Subscribe to our blog for more transcripts. Copyright Disclaimer Under Title 17"
)


class FakeTicker:
    """Records started timers instead of scheduling them."""

    def __init__(self) -> None:
        self.started: List[Tuple[float, Callable[[], None]]] = []
        self.handles: List[MagicMock] = []

    def start(self, interval_s: float, callback: Callable[[], None]) -> MagicMock:
        handle = MagicMock()
        self.started.append((interval_s, callback))
        self.handles.append(handle)
        return handle

    @property
    def last_callback(self) -> Optional[Callable[[], None]]:
        return self.started[-1][1] if self.started else None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def transcript_text() -> str:
    return SAMPLE_TRANSCRIPT


@pytest.fixture
def prose_text() -> str:
    return SAMPLE_PROSE


@pytest.fixture
def transcript_doc() -> DocumentSnapshot:
    """SAMPLE_TRANSCRIPT parsed with the full pipeline."""
    return build_document(SAMPLE_TRANSCRIPT)


@pytest.fixture
def prose_doc() -> DocumentSnapshot:
    return build_document(SAMPLE_PROSE)


@pytest.fixture
def fake_ticker() -> FakeTicker:
    return FakeTicker()
