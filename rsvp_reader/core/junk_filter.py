"""Classify boilerplate lines scraped along with transcript text.

WHY: Transcript pages carry navigation menus, newsletter prompts,
copyright notices and social links. When such text is assembled into
paragraphs it pollutes the reading stream with dozens of frames nobody
wants to read.

HOW: An ordered table of JunkRule entries, evaluated top to bottom; the
first matching rule names the classification. Two structural checks
(very short text, short lowercase fragments) run around the table.
Speaker-marker detection runs first and short-circuits everything.

RULES:
- Text containing a timestamped speaker marker is never junk
- Shorter than 3 characters → junk ("too-short")
- Any catalog rule matching → junk (rule name)
- Shorter than 10 characters, no sentence punctuation and no leading
  capital → junk ("fragment")
- Advisory only: callers decide what to drop
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from rsvp_reader.core.patterns import TIMESTAMP_COLON_RE, TIMESTAMPED_MARKER_RE

MIN_LENGTH = 3
FRAGMENT_LENGTH = 10


@dataclass(frozen=True)
class JunkRule:
    """One catalog entry: a name, a pattern, and an optional length cap."""

    name: str
    pattern: Pattern[str]
    max_length: Optional[int] = None

    def matches(self, text: str) -> bool:
        if self.max_length is not None and len(text) >= self.max_length:
            return False
        return self.pattern.search(text) is not None


def _rule(name: str, pattern: str, max_length: Optional[int] = None) -> JunkRule:
    return JunkRule(name, re.compile(pattern, re.IGNORECASE), max_length)


JUNK_RULES: Tuple[JunkRule, ...] = (
    # Subscription and newsletter prompts
    _rule("subscription", r"^(?:thank\s+you\s+for\s+subscribing|subscribe\s+to\s+(?:our|the\s+rev)\s+blog"
                          r"|sign\s+up\s+to\s+get|content\s+delivered\s+straight|hungry\s+for\s+more"
                          r"|luckily\s+for\s+you|we\s+deliver|a\s+confirmation\s+email|confirmation\s+email)"),
    # Legal disclaimers
    _rule("legal", r"^(?:copyright\s+disclaimer|copyright\s+statute|under\s+title\s+17|fair\s+use"
                   r"|allowance\s+is\s+made|might\s+otherwise\s+be\s+infringing|legal\s+security\s+terms"
                   r"|privacy\s+policy|©\s*rev\.com)"),
    # Site navigation
    _rule("navigation", r"^(?:(?:product|industries|resources)\s+back\s+to\s+menu|help\s+center"
                        r"|contact\s+support|transcripts\s+home|blog\s+home|read\s+the\s+transcript\s+here"
                        r"|read\s+trending\s+articles|share\s+this\s+post|transcript\s+library"
                        r"|learning\s+center|free\s+transcripts|case\s+studies)"),
    _rule("navigation-single", r"^(?:log\s+in|get\s+started|request\s+a\s+demo|about\s+rev|pricing|sitemap"
                               r"|reviews|services|integrations|blog|developers|careers|freelancers|press"
                               r"|support|email|partners)\s*$"),
    _rule("topics", r"^topics?:(?:[A-Za-z\s]*$|\s*no\s+items\s+found)"),
    # Social-media labels
    _rule("social", r"^(?:linkedin|facebook|x\s+logo|pinterest|reddit\s+logo|youtube|instagram"
                    r"|spotify|apple)\s*$"),
    # Product and marketing menus
    _rule("marketing", r"^(?:human-verified|human\s+transcription\s+expert|human\s+captions"
                       r"|court\s+reporting\s+self-service|global\s+subtitles|transcription,\s+captions"
                       r"|ai\s+(?:platform\s+features|transcription|notetaker|captions|summaries)"
                       r"|premium\s+tools|multi-file\s+analysis|rev\s+mobile\s+app|save\s+on\s+human"
                       r"|spot\s+inconsistencies|smartdepo|expert\s+insights|latest\s+news\s+about\s+rev"
                       r"|reports\s+&\s+guides|whitepapers|guides\s+and\s+tutorials|discover\s+how\s+rev"
                       r"|trusted\s+feedback|the\s+rough\s+draft|where\s+journalists|we're\s+hiring"
                       r"|ambitious\s+team\s+members|the\s+rev\s+logo|rev's\s+logo$)"),
    _rule("marketing-legal", r"^(?:industries\s+legal|criminal\s+prosecution|eliminate\s+evidence\s+backlogs"
                             r"|criminal\s+defense|cut\s+hours\s+of\s+review|investigators"
                             r"|turn\s+piles\s+of\s+evidence|civil\s+law|build\s+stronger\s+cases"
                             r"|court\s+reporting\s+agencies|a\s+trusted\s+partner"
                             r"|discover\s+our\s+bar\s+association)"),
    _rule("blog-categories", r"^(?:2024\s+election|ai\s+&\s+speech\s+recognition|artificial\s+intelligence"
                             r"|automated\s+transcription|congressional\s+testimony|customer\s+features"
                             r"|historical\s+speeches|how-to\s+guides|rev\s+spotlight"
                             r"|speech\s+to\s+text\s+technology|surveys\s+and\s+data|video\s+editing"
                             r"|accessibility\s+technology|transcription\s+closed\s+captions)"),
    _rule("form-feedback", r"^(?:thank\s+you!\s+your\s+submission|oops!\s+something\s+went\s+wrong)"),
    _rule("page-title", r"\s\|\s+rev$"),
    _rule("inaudible", r"^\[inaudible"),
    _rule("html-entity", r"&(?:amp|#x27|#39);"),
    _rule("phone-number", r"^\d+\(\d{3}\)\s+\d{3}-\d{4}"),
    _rule("view-all", r"^view\s+all", max_length=50),
    _rule("keep-reading", r"^keep\s+reading", max_length=100),
)

_SENTENCE_PUNCTUATION_RE = re.compile(r"[.!?]")
_TIMESTAMP_ANYWHERE_RE = re.compile(r"\([0-9:]+\)")


def has_speaker_marker(text: str) -> bool:
    """True if text contains a "(mm:ss):" or "Name (mm:ss):" marker."""
    return bool(TIMESTAMP_COLON_RE.search(text) or TIMESTAMPED_MARKER_RE.search(text))


def classify(text: str) -> Optional[str]:
    """Return the junk classification of text, or None if it is content.

    WHY: Callers that drop lines want to log which rule fired.
    """
    trimmed = text.strip()

    if has_speaker_marker(trimmed):
        return None

    if len(trimmed) < MIN_LENGTH:
        return "too-short"

    for rule in JUNK_RULES:
        if rule.matches(trimmed):
            return rule.name

    if (
        len(trimmed) < FRAGMENT_LENGTH
        and not _TIMESTAMP_ANYWHERE_RE.search(trimmed)
        and not _SENTENCE_PUNCTUATION_RE.search(trimmed)
        and not trimmed[:1].isupper()
    ):
        return "fragment"

    return None


def is_junk(text: str) -> bool:
    return classify(text) is not None
