"""Reader session: one document, one playback position.

WHY: Every front end (terminal player, HTTP API, tests) needs the same
operations: load text from somewhere, play, pause, step, jump, and ask
what to draw right now. The session is that single façade, so loading
rules (URL-only input, failed loads leaving state alone) live in one
place.

HOW: Wraps a PlaybackScheduler. Loads parse the whole input into a new
DocumentSnapshot before the scheduler sees it; any exception raised
while fetching or parsing propagates with the previous document and
position untouched. view() assembles a ReaderView from the pure frame
and pivot functions.

RULES:
- submit() treats input that is a single http(s) URL as a URL to fetch
- Blank input clears the session
- The snapshot is swapped in one assignment; readers never see a mix
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import httpx

from rsvp_reader.core.frames import frame_at, paragraph_context, progress
from rsvp_reader.core.ir import (
    DocumentSnapshot,
    ParagraphContext,
    PivotParts,
    Progress,
    ReaderFrame,
)
from rsvp_reader.core.normalizer import parse_url_only_input
from rsvp_reader.core.pipeline import build_document
from rsvp_reader.core.pivot import pivot_parts
from rsvp_reader.playback.scheduler import Listener, PlaybackScheduler, Ticker
from rsvp_reader.sources.files import read_text_file
from rsvp_reader.sources.pdf import extract_pdf_text
from rsvp_reader.sources.web import fetch_url_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReaderView:
    """Everything a front end needs to draw the current frame."""

    frame: ReaderFrame
    pivot: PivotParts
    context: ParagraphContext
    progress: Progress
    is_playing: bool
    words_per_minute: int
    auto_continue: bool


class ReaderSession:
    """A loaded document plus its playback state.

    Args:
        ticker: Timer source for playback; see PlaybackScheduler.
        words_per_minute: Initial reading speed.
        auto_continue: Whether playback runs across paragraph ends.
    """

    def __init__(
        self,
        ticker: Optional[Ticker] = None,
        words_per_minute: int = 350,
        auto_continue: bool = True,
    ) -> None:
        self.scheduler = PlaybackScheduler(
            ticker=ticker,
            words_per_minute=words_per_minute,
            auto_continue=auto_continue,
        )
        self.source_text = ""
        self.source_label: Optional[str] = None

    @property
    def document(self) -> DocumentSnapshot:
        return self.scheduler.document

    @property
    def has_content(self) -> bool:
        return not self.scheduler.document.is_empty

    def add_listener(self, listener: Listener) -> None:
        self.scheduler.add_listener(listener)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_text(self, raw: str, label: Optional[str] = None) -> DocumentSnapshot:
        """Parse raw text and make it the current document."""
        if not (raw or "").strip():
            self.clear()
            return self.document

        document = build_document(raw)
        self.source_text = raw
        self.source_label = label
        self.scheduler.load(document)
        logger.info("Loaded %s: %d tokens", label or "text", document.total_tokens)
        return document

    async def load_url(self, url: str, client: Optional[httpx.AsyncClient] = None) -> DocumentSnapshot:
        text = await fetch_url_text(url, client=client)
        return self.load_text(text, label=url)

    async def submit(self, raw: str, client: Optional[httpx.AsyncClient] = None) -> DocumentSnapshot:
        """Load pasted input: a lone URL is fetched, anything else is parsed."""
        url = parse_url_only_input(raw)
        if url is not None:
            return await self.load_url(url, client=client)
        return self.load_text(raw)

    def load_pdf(self, data: bytes, label: Optional[str] = None) -> DocumentSnapshot:
        return self.load_text(extract_pdf_text(data), label=label or "PDF")

    def load_file(self, path: Union[str, Path]) -> DocumentSnapshot:
        return self.load_text(read_text_file(path), label=Path(path).name)

    def clear(self) -> None:
        self.source_text = ""
        self.source_label = None
        self.scheduler.clear()

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def play(self) -> None:
        self.scheduler.play()

    def pause(self) -> None:
        self.scheduler.pause()

    def toggle(self) -> None:
        self.scheduler.toggle()

    def step(self) -> None:
        self.scheduler.step(1)

    def rewind(self) -> None:
        self.scheduler.step(-1)

    def restart(self) -> None:
        self.scheduler.restart()

    def jump_paragraph(self, delta: int) -> None:
        self.scheduler.jump_paragraph(delta)

    def seek(self, index: int) -> None:
        self.scheduler.seek(index)

    def set_wpm(self, words_per_minute: int) -> None:
        self.scheduler.set_words_per_minute(words_per_minute)

    def set_auto_continue(self, enabled: bool) -> None:
        self.scheduler.set_auto_continue(enabled)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def view(self, index: Optional[int] = None) -> ReaderView:
        """What to draw at index (the current position when omitted)."""
        doc = self.scheduler.document
        if index is None:
            index = self.scheduler.current_index
        frame = frame_at(doc, index)
        return ReaderView(
            frame=frame,
            pivot=pivot_parts(frame.display_text),
            context=paragraph_context(doc, index),
            progress=progress(doc, index),
            is_playing=self.scheduler.is_playing,
            words_per_minute=self.scheduler.words_per_minute,
            auto_continue=self.scheduler.auto_continue,
        )
