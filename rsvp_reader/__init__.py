"""RSVP Reader — speaker-aware speed reading for pasted text and transcripts.

WHY: Copy-pasted interview and call transcripts arrive with collapsed line
breaks, garbled speaker labels and site boilerplate. Reading them one word
at a time needs a clean, index-addressable token stream where speaker turns
are paragraphs and speaker names read as a single frame.

HOW: Four layers — core (text-analysis pipeline producing an immutable
DocumentSnapshot), playback (frame scheduler on the asyncio loop),
session (the reader façade) and the outer surfaces (sources, formatters,
CLI, HTTP API). Each layer is independently testable.

RULES:
- The core never raises for any input string
- A new document replaces all derived state wholesale
- Outer surfaces only ever hand the core a single raw text string
"""

__version__ = "0.1.0"
