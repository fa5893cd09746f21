"""Output formatter registry.

WHY: The CLI and API layers need a single lookup to find the right
formatter by name. Adding a format means one new module and one line
here.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["frames_json"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and API paths)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rsvp_reader.formatters.frames_json import FramesJsonFormatter
from rsvp_reader.formatters.plain_text import PlainTextFormatter

if TYPE_CHECKING:
    from rsvp_reader.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "plain_text": PlainTextFormatter,
    "frames_json": FramesJsonFormatter,
}
