"""In-memory implementation of the index repository."""

from __future__ import annotations

from typing import Dict, Iterable

from .repository import EntryT, IndexRepository


class InMemoryIndexRepository(IndexRepository[EntryT]):
    """Keep index entries in local memory.

    Useful for tests. Data is not persisted across process restarts.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, EntryT] = {}

    # ------------------------------------------------------------------
    def list_entries(self) -> list[EntryT]:
        return [entry.model_copy() for entry in self._entries.values()]

    def get(self, record_id: str) -> EntryT | None:
        entry = self._entries.get(record_id)
        return entry.model_copy() if entry is not None else None

    def upsert(self, entry: EntryT) -> None:
        self._entries[entry.record_id] = entry.model_copy()

    def remove(self, record_id: str) -> bool:
        return self._entries.pop(record_id, None) is not None

    def remove_many(self, record_ids: Iterable[str]) -> int:
        removed = 0
        for record_id in set(record_ids):
            if self._entries.pop(record_id, None) is not None:
                removed += 1
        return removed
