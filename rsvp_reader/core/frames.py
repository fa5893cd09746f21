"""Resolve global token indices into reader frames and context.

WHY: The scheduler and every output surface address the document by a
single global token index. This module turns an index into what the
reader shows: the frame text (two tokens when they form a known name),
the surrounding paragraph, and progress counters.

HOW: DocumentSnapshot.offsets holds each paragraph's first global index,
so locating an index is one bisect. All functions are pure and take the
snapshot as their first argument.

RULES:
- Indices outside [0, last_index] are clamped, never rejected
- An empty document yields ReaderFrame("", 1) and empty context
- Name merging never crosses a paragraph boundary
- Context text is shown as parsed: no merging, no directory replacement
"""

from __future__ import annotations

import re
from bisect import bisect_right
from typing import Tuple

from rsvp_reader.core.ir import (
    DocumentSnapshot,
    ParagraphContext,
    Progress,
    ReaderFrame,
    TokenPosition,
)
from rsvp_reader.core.patterns import is_title_word

_EDGE_PUNCTUATION_RE = re.compile(r"^[^A-Za-z0-9'-]+|[^A-Za-z0-9'-]+$")


def normalize_name_word(word: str) -> str:
    """Strip surrounding punctuation so "Doe:" compares equal to "Doe"."""
    return _EDGE_PUNCTUATION_RE.sub("", word).strip()


def clamp_index(doc: DocumentSnapshot, index: int) -> int:
    return min(max(index, 0), doc.last_index)


def locate(doc: DocumentSnapshot, index: int) -> TokenPosition:
    """Map a global index to (paragraph, local index)."""
    if doc.is_empty:
        return TokenPosition(0, 0)
    index = clamp_index(doc, index)
    paragraph_index = bisect_right(doc.offsets, index) - 1
    return TokenPosition(paragraph_index, index - doc.offsets[paragraph_index])


def frame_at(doc: DocumentSnapshot, index: int) -> ReaderFrame:
    """Return the frame shown at index, merging a two-word speaker name."""
    if doc.is_empty:
        return ReaderFrame("", 1)

    position = locate(doc, index)
    tokens = doc.paragraphs[position.paragraph_index].tokens
    first = tokens[position.local_index]
    if position.local_index + 1 >= len(tokens):
        return ReaderFrame(first, 1)

    second = tokens[position.local_index + 1]
    n1 = normalize_name_word(first)
    n2 = normalize_name_word(second)
    if n1 and n2 and not is_title_word(n1) and not is_title_word(n2):
        if f"{n1} {n2}" in doc.directory:
            return ReaderFrame(f"{first} {second}", 2)
    return ReaderFrame(first, 1)


def previous_index(doc: DocumentSnapshot, index: int) -> int:
    """Index of the frame before index, landing on the start of a merged name.

    index is clamped first, so the result is always a valid index.
    """
    if doc.is_empty:
        return 0
    candidate = max(clamp_index(doc, index) - 1, 0)
    if candidate > 0 and frame_at(doc, candidate - 1).advance == 2:
        return candidate - 1
    return candidate


def paragraph_bounds(doc: DocumentSnapshot, paragraph_index: int) -> Tuple[int, int]:
    """Return (first, last) global indices of a paragraph (clamped)."""
    if doc.is_empty:
        return 0, 0
    paragraph_index = min(max(paragraph_index, 0), len(doc.paragraphs) - 1)
    start = doc.offsets[paragraph_index]
    return start, start + len(doc.paragraphs[paragraph_index].tokens) - 1


def paragraph_jump(doc: DocumentSnapshot, index: int, delta: int) -> int:
    """First index of the paragraph delta paragraphs away from index."""
    if doc.is_empty:
        return 0
    target = locate(doc, index).paragraph_index + delta
    return paragraph_bounds(doc, target)[0]


def paragraph_context(doc: DocumentSnapshot, index: int) -> ParagraphContext:
    if doc.is_empty:
        return ParagraphContext(0, "", "", "")

    position = locate(doc, index)
    tokens = doc.paragraphs[position.paragraph_index].tokens
    local = position.local_index
    return ParagraphContext(
        paragraph_index=position.paragraph_index,
        before=" ".join(tokens[:local]),
        active=tokens[local],
        after=" ".join(tokens[local + 1:]),
    )


def progress(doc: DocumentSnapshot, index: int) -> Progress:
    if doc.is_empty:
        return Progress(0, 0, 0, 0)

    position = locate(doc, index)
    return Progress(
        current=clamp_index(doc, index) + 1,
        total_tokens=doc.total_tokens,
        paragraph=position.paragraph_index + 1,
        total_paragraphs=len(doc.paragraphs),
    )
