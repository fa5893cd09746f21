"""Choose the pivot character of a reader frame.

The pivot is the letter the eye fixates on; it is drawn highlighted and
kept at a fixed screen position. For a length L word it sits just left
of centre: L/2 - 1 for even L, (L-1)/2 for odd L. Multi-word frames
("Jane Doe") count letters only, ignoring spaces.
"""

from __future__ import annotations

from rsvp_reader.core.ir import PivotParts


def pivot_index(word: str) -> int:
    length = len(word)
    if length % 2 == 0:
        return max(length // 2 - 1, 0)
    return (length - 1) // 2


def pivot_index_ignoring_spaces(text: str) -> int:
    """Pivot index into text, counting only non-space characters."""
    if not text:
        return 0
    if " " not in text:
        return pivot_index(text)

    non_space = [i for i, char in enumerate(text) if char != " "]
    if not non_space:
        return 0
    position = min(max(pivot_index("x" * len(non_space)), 0), len(non_space) - 1)
    return non_space[position]


def pivot_parts(text: str) -> PivotParts:
    """Split text into (left, pivot, right) around its pivot character."""
    if not text:
        return PivotParts("", "", "")
    index = pivot_index_ignoring_spaces(text)
    return PivotParts(text[:index], text[index], text[index + 1:])
