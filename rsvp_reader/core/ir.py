"""Intermediate representation dataclasses for parsed documents.

WHY: Raw pasted text has no structure. The frame resolver, scheduler,
formatters and HTTP API all need the same view of a document: ordered
paragraphs of tokens, a speaker-name directory, and cheap global-index
arithmetic. The IR provides that single, well-typed form, decoupling
parsing from presentation.

HOW: The hierarchy, leaves first:
  Paragraph         — one speaker turn or prose paragraph, already tokenized
  SpeakerDirectory  — name key → canonical full speaker name
  DocumentSnapshot  — paragraphs + directory + cumulative token offsets
  TokenPosition, ReaderFrame, PivotParts, ParagraphContext, Progress
                    — per-position values computed on demand
  PlaybackState     — the only mutable record (index, playing, wpm)

RULES:
- Everything except PlaybackState and SpeakerDirectory is frozen
- A SpeakerDirectory is only mutated while a snapshot is being built
- Global token indices are dense: offsets[i] == sum of earlier token counts
- Directory keys are stored as given and looked up case-insensitively
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class Paragraph:
    """One paragraph of the document with its display tokens.

    WHY: The reader shows paragraph context around the current word and
    pauses at paragraph ends, so tokens must stay grouped by paragraph.

    RULES:
    - raw_text: the cleaned paragraph text the tokens were split from
    - tokens: non-empty strings without surrounding whitespace
    - speaker: canonical speaker name when the paragraph opens with a
      speaker head token, else None
    """

    raw_text: str
    tokens: Tuple[str, ...]
    speaker: Optional[str] = None


class SpeakerDirectory:
    """Mapping from short name keys to canonical speaker names.

    WHY: Transcripts introduce "Jane Doe (01:23):" once and then refer to
    "Jane" or "Doe" in running text. The frame resolver needs to know that
    "Jane Doe" is a name so it can show it as a single frame.

    HOW: Entries live in a dict keyed by the case-folded key; each value
    keeps the key as first stored plus its canonical name. A single
    insert_or_extend() operation serves every registration pass, so
    running the same registrations twice leaves the directory unchanged.

    RULES:
    - Lookups are case-insensitive; stored keys keep their first casing
    - Longest canonical name wins for a key; ties keep the existing entry
    - Blank keys and names are ignored
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[str, str]] = {}

    def insert_or_extend(self, key: str, canonical: str) -> bool:
        """Register key → canonical, keeping the longer name on conflict.

        Returns True when the directory changed.
        """
        key = key.strip()
        canonical = canonical.strip()
        if not key or not canonical:
            return False

        folded = key.casefold()
        existing = self._entries.get(folded)
        if existing is not None:
            stored_key, stored_name = existing
            if len(canonical) <= len(stored_name):
                return False
            self._entries[folded] = (stored_key, canonical)
            return True

        self._entries[folded] = (key, canonical)
        return True

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        entry = self._entries.get(key.strip().casefold())
        return entry[1] if entry is not None else default

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return key.strip().casefold() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return (stored_key for stored_key, _ in self._entries.values())

    def items(self) -> List[Tuple[str, str]]:
        return list(self._entries.values())

    def canonical_names(self) -> List[str]:
        """Distinct canonical names in first-registration order."""
        seen: Dict[str, None] = {}
        for _, name in self._entries.values():
            seen.setdefault(name, None)
        return list(seen)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._entries.values())

    def __repr__(self) -> str:
        return f"SpeakerDirectory({self.to_dict()!r})"


@dataclass(frozen=True)
class TokenPosition:
    """Where a global token index lives: paragraph and index inside it."""

    paragraph_index: int
    local_index: int


@dataclass(frozen=True)
class ReaderFrame:
    """Text shown for one reading step and how many tokens it consumes.

    RULES:
    - advance is 1 for a single token, 2 for a merged two-word name
    - display_text is "" only when the document is empty
    """

    display_text: str
    advance: int = 1


@dataclass(frozen=True)
class PivotParts:
    """A frame's text split around its pivot character."""

    left: str
    pivot: str
    right: str

    @property
    def text(self) -> str:
        return self.left + self.pivot + self.right


@dataclass(frozen=True)
class ParagraphContext:
    """Tokens of the current paragraph before, at and after the position.

    Context is shown as parsed: no name merging or directory replacement.
    """

    paragraph_index: int
    before: str
    active: str
    after: str


@dataclass(frozen=True)
class Progress:
    """1-based progress counters for the rendering layer."""

    current: int
    total_tokens: int
    paragraph: int
    total_paragraphs: int


@dataclass(frozen=True)
class DocumentSnapshot:
    """The complete parsed form of one submitted document.

    WHY: The scheduler and every output surface must see a single,
    consistent version of the document. Building a new snapshot per
    submission and swapping the reference means partial updates can
    never be observed.

    HOW: Built by rsvp_reader.core.pipeline.build_document(). offsets is
    computed once from the paragraphs so index lookups are a bisect.

    RULES:
    - paragraphs: ordered, each with at least one token
    - offsets[i]: global index of paragraph i's first token
    - is_transcript: the FormatDetector decision for the source text
    """

    paragraphs: Tuple[Paragraph, ...]
    directory: SpeakerDirectory = field(default_factory=SpeakerDirectory, compare=False)
    is_transcript: bool = False
    offsets: Tuple[int, ...] = ()

    @classmethod
    def from_paragraphs(
        cls,
        paragraphs: List[Paragraph],
        directory: Optional[SpeakerDirectory] = None,
        is_transcript: bool = False,
    ) -> DocumentSnapshot:
        offsets: List[int] = []
        running = 0
        for paragraph in paragraphs:
            offsets.append(running)
            running += len(paragraph.tokens)
        return cls(
            paragraphs=tuple(paragraphs),
            directory=directory if directory is not None else SpeakerDirectory(),
            is_transcript=is_transcript,
            offsets=tuple(offsets),
        )

    @property
    def total_tokens(self) -> int:
        if not self.paragraphs:
            return 0
        return self.offsets[-1] + len(self.paragraphs[-1].tokens)

    @property
    def is_empty(self) -> bool:
        return self.total_tokens == 0

    @property
    def last_index(self) -> int:
        return max(self.total_tokens - 1, 0)

    @property
    def tokens(self) -> List[str]:
        """The flattened global token stream."""
        return [token for paragraph in self.paragraphs for token in paragraph.tokens]


EMPTY_DOCUMENT = DocumentSnapshot.from_paragraphs([])


@dataclass
class PlaybackState:
    """Mutable reading position and playback flags.

    RULES:
    - 0 <= current_index < total_tokens whenever the document has content
    - words_per_minute <= 0 means the scheduler never ticks
    """

    current_index: int = 0
    is_playing: bool = False
    words_per_minute: int = 350
