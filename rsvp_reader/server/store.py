"""In-memory document store with TTL cleanup.

WHY: API clients submit a document once and then request frames by
index many times. Parsing is repeated for no one: the parsed snapshot is
kept under an ID until the client deletes it or stops using it.

HOW: Two components:
  StoredDocument  — dataclass holding the snapshot and its bookkeeping
  DocumentStore   — thread-safe dict-based store with
                    add/get/list/delete and TTL cleanup

RULES:
- All store access is protected by threading.Lock
- Snapshots are immutable, so returning the live StoredDocument is safe
- TTL is measured from the last access, not from creation
- Document IDs are UUID4 hex strings generated at creation time
- add() raises ValueError when max_documents is reached
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from rsvp_reader.config import DEFAULT_DOCUMENT_TTL_S
from rsvp_reader.core.ir import DocumentSnapshot

logger = logging.getLogger(__name__)


@dataclass
class StoredDocument:
    """A parsed document held by the API.

    RULES:
    - id: UUID4 hex string, immutable after creation
    - source: where the text came from ("text", a URL, or a filename)
    - accessed_at: bumped by every DocumentStore.get()
    """

    id: str
    document: DocumentSnapshot
    source: str
    created_at: float
    accessed_at: float


class DocumentStore:
    """Thread-safe in-memory store for parsed documents."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_DOCUMENT_TTL_S,
        max_documents: int = 500,
    ) -> None:
        self._documents: Dict[str, StoredDocument] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_documents = max_documents

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def add(self, document: DocumentSnapshot, source: str) -> StoredDocument:
        with self._lock:
            if len(self._documents) >= self.max_documents:
                raise ValueError(
                    f"Maximum number of stored documents ({self.max_documents}) reached"
                )
            now = time.time()
            stored = StoredDocument(
                id=uuid.uuid4().hex,
                document=document,
                source=source,
                created_at=now,
                accessed_at=now,
            )
            self._documents[stored.id] = stored

        logger.info("Stored document %s from %s (%d tokens)", stored.id, source, document.total_tokens)
        return stored

    def get(self, document_id: str) -> Optional[StoredDocument]:
        """Return the document and bump its access time, or None."""
        with self._lock:
            stored = self._documents.get(document_id)
            if stored is not None:
                stored.accessed_at = time.time()
            return stored

    def list_documents(self) -> List[StoredDocument]:
        with self._lock:
            return sorted(self._documents.values(), key=lambda d: d.created_at)

    def delete(self, document_id: str) -> bool:
        with self._lock:
            stored = self._documents.pop(document_id, None)
        if stored is None:
            return False
        logger.info("Deleted document %s", document_id)
        return True

    def cleanup_expired(self, now: Optional[float] = None) -> int:
        """Remove documents not accessed within the TTL; return how many."""
        now = time.time() if now is None else now
        with self._lock:
            expired = [
                doc_id for doc_id, stored in self._documents.items()
                if now - stored.accessed_at > self._ttl_seconds
            ]
            for doc_id in expired:
                del self._documents[doc_id]

        for doc_id in expired:
            logger.info("Expired document %s", doc_id)
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)
