"""
Meeting Summarizer — In-Memory Keyed Store
===========================================

What:  A narrow put/get store for transcripts, summaries, and share records.
Why:   Durability is out of scope. Hiding the process-local dict behind this
       interface keeps services substitutable by any real storage backend.
How:   A plain dict per record type. All access happens on the event loop
       thread, so no locking is needed.
"""

from typing import Dict, Generic, Iterator, Optional, TypeVar

from meeting_summarizer.exceptions import NotFoundError
from meeting_summarizer.models.records import ShareRecord, SummaryRecord, TranscriptFile

T = TypeVar("T")


class InMemoryStore(Generic[T]):
    """Keyed store for one record type."""

    def __init__(self, resource: str):
        self.resource = resource
        self._items: Dict[str, T] = {}

    def put(self, key: str, value: T) -> None:
        self._items[key] = value

    def get(self, key: str) -> Optional[T]:
        return self._items.get(key)

    def require(self, key: str) -> T:
        """Like get(), but a missing key raises NotFoundError (→ 404)."""
        item = self._items.get(key)
        if item is None:
            raise NotFoundError(resource=self.resource, resource_id=key)
        return item

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)


transcript_store: InMemoryStore[TranscriptFile] = InMemoryStore("file")
summary_store: InMemoryStore[SummaryRecord] = InMemoryStore("summary")
share_store: InMemoryStore[ShareRecord] = InMemoryStore("share record")
