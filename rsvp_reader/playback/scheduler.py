"""Advance reader frames over time.

WHY: Reading speed is expressed in words per minute, but frames are not
all one word: a merged "Jane Doe" frame consumes two tokens. Readers who
turn off auto-continue also expect playback to stop on the last frame of
each paragraph and to pick up after it when resumed.

HOW: Two components:
  Ticker             — starts a repeating callback and returns a handle
                       with cancel(); AsyncioTicker is the default,
                       built on loop.call_later
  PlaybackScheduler  — owns the PlaybackState for one DocumentSnapshot
                       and applies the tick and user transitions

Every timer (re)start and stop bumps a generation counter. The callback
carries the generation it was started with, so a tick that was already
queued when playback stopped is ignored.

RULES:
- interval_ms = int(60000 / wpm); wpm <= 0 means no timer at all
- Tick at the last index: stop
- Tick with auto-continue off and the frame ending at or past the
  paragraph's last index: stop without advancing
- Otherwise advance by the frame's advance, clamped to the last index
- Changing wpm while playing restarts the timer without moving
- Playing while parked on a paragraph boundary (auto-continue off)
  first advances past it
- Listeners are called after every state change
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Protocol

from rsvp_reader.core.frames import (
    clamp_index,
    frame_at,
    locate,
    paragraph_bounds,
    paragraph_jump,
    previous_index,
)
from rsvp_reader.core.ir import EMPTY_DOCUMENT, DocumentSnapshot, PlaybackState

logger = logging.getLogger(__name__)

Listener = Callable[["PlaybackScheduler"], None]


# ---------------------------------------------------------------------------
# Tickers
# ---------------------------------------------------------------------------


class TickHandle(Protocol):
    def cancel(self) -> None: ...


class Ticker(Protocol):
    def start(self, interval_s: float, callback: Callable[[], None]) -> TickHandle: ...


class _RepeatingCall:
    """A call_later chain that re-arms itself after each callback."""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval_s: float, callback: Callable[[], None]) -> None:
        self._loop = loop
        self._interval_s = interval_s
        self._callback = callback
        self._cancelled = False
        self._handle = loop.call_later(interval_s, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._callback()
        if not self._cancelled:
            self._handle = self._loop.call_later(self._interval_s, self._fire)

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()


class AsyncioTicker:
    """Ticker on an asyncio event loop (the running loop unless one is given)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def start(self, interval_s: float, callback: Callable[[], None]) -> _RepeatingCall:
        loop = self._loop or asyncio.get_running_loop()
        return _RepeatingCall(loop, interval_s, callback)


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------


class PlaybackScheduler:
    """Playback state machine for one document at a time.

    Args:
        ticker: Timer source; AsyncioTicker() when omitted.
        words_per_minute: Initial reading speed.
        auto_continue: When False, playback stops at each paragraph end.
    """

    def __init__(
        self,
        ticker: Optional[Ticker] = None,
        words_per_minute: int = 350,
        auto_continue: bool = True,
    ) -> None:
        self._ticker = ticker if ticker is not None else AsyncioTicker()
        self._document = EMPTY_DOCUMENT
        self._state = PlaybackState(words_per_minute=words_per_minute)
        self._auto_continue = auto_continue
        self._handle: Optional[TickHandle] = None
        self._generation = 0
        self._listeners: List[Listener] = []

    # -- read-only views ----------------------------------------------------

    @property
    def document(self) -> DocumentSnapshot:
        return self._document

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def words_per_minute(self) -> int:
        return self._state.words_per_minute

    @property
    def auto_continue(self) -> bool:
        return self._auto_continue

    @property
    def interval_ms(self) -> int:
        wpm = self._state.words_per_minute
        if wpm <= 0:
            return 0
        return int(60000 / wpm)

    @property
    def generation(self) -> int:
        return self._generation

    # -- listeners ----------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # -- timer --------------------------------------------------------------

    def _stop_timer(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _start_timer(self) -> None:
        self._stop_timer()
        if self.interval_ms <= 0 or self._document.is_empty:
            return
        generation = self._generation
        self._handle = self._ticker.start(self.interval_ms / 1000.0, lambda: self.tick(generation))

    # -- transitions --------------------------------------------------------

    def load(self, document: DocumentSnapshot) -> None:
        """Replace the document and reset to a stopped state at index 0."""
        self._stop_timer()
        self._state.is_playing = False
        self._document = document
        self._state.current_index = 0
        logger.debug("Scheduler loaded document with %d tokens", document.total_tokens)
        self._notify()

    def clear(self) -> None:
        self.load(EMPTY_DOCUMENT)

    def at_paragraph_boundary(self, index: Optional[int] = None) -> bool:
        """True if the frame at index ends on its paragraph's last token
        and index is not the document's last token."""
        doc = self._document
        if doc.is_empty:
            return False
        if index is None:
            index = self._state.current_index
        _, end = paragraph_bounds(doc, locate(doc, index).paragraph_index)
        advance = frame_at(doc, index).advance
        return index + advance - 1 >= end and index < doc.last_index

    def play(self) -> None:
        if self._document.is_empty or self._state.is_playing:
            return
        if not self._auto_continue and self.at_paragraph_boundary():
            index = self._state.current_index
            advance = frame_at(self._document, index).advance
            self._state.current_index = min(index + advance, self._document.last_index)
        self._state.is_playing = True
        self._start_timer()
        self._notify()

    def pause(self) -> None:
        self._stop_timer()
        if self._state.is_playing:
            self._state.is_playing = False
            self._notify()

    def toggle(self) -> None:
        if self._state.is_playing:
            self.pause()
        else:
            self.play()

    def tick(self, generation: Optional[int] = None) -> None:
        """Apply one timer tick; stale generations are ignored."""
        if generation is not None and generation != self._generation:
            return
        if not self._state.is_playing or self._document.is_empty:
            return

        doc = self._document
        index = self._state.current_index
        if index >= doc.last_index:
            self._halt()
            return

        if not self._auto_continue and self.at_paragraph_boundary(index):
            self._halt()
            return

        advance = frame_at(doc, index).advance
        self._state.current_index = min(index + advance, doc.last_index)
        self._notify()

    def _halt(self) -> None:
        self._stop_timer()
        self._state.is_playing = False
        self._notify()

    def step(self, direction: int = 1) -> None:
        """Move one frame forward (direction > 0) or back."""
        doc = self._document
        if doc.is_empty:
            return
        index = self._state.current_index
        if direction < 0:
            self._state.current_index = clamp_index(doc, previous_index(doc, index))
        else:
            self._state.current_index = clamp_index(doc, index + frame_at(doc, index).advance)
        self._notify()

    def restart(self) -> None:
        if self._document.is_empty:
            return
        self._state.current_index = 0
        self._notify()

    def jump_paragraph(self, delta: int) -> None:
        if self._document.is_empty:
            return
        self._state.current_index = paragraph_jump(self._document, self._state.current_index, delta)
        self._notify()

    def seek(self, index: int) -> None:
        if self._document.is_empty:
            return
        self._state.current_index = clamp_index(self._document, index)
        self._notify()

    def set_words_per_minute(self, words_per_minute: int) -> None:
        self._state.words_per_minute = int(words_per_minute)
        if self._state.is_playing:
            self._start_timer()
        self._notify()

    def set_auto_continue(self, enabled: bool) -> None:
        self._auto_continue = bool(enabled)
        self._notify()
