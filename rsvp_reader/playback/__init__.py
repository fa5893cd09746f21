"""Time-driven playback of a parsed document.

WHY: Frames are shown one at a time at a fixed words-per-minute rate;
the timing loop and its pause policy are separate from parsing.

HOW: scheduler.py holds the PlaybackScheduler state machine and the
Ticker abstraction it is driven by.

RULES:
- One cooperative timeline: all ticks run on the asyncio event loop
- The scheduler never parses; it is handed finished snapshots
"""
