"""Repository abstraction for index persistence."""

from __future__ import annotations

from typing import Iterable, Protocol, TypeVar

EntryT = TypeVar("EntryT")


class IndexRepository(Protocol[EntryT]):
    """Protocol for a flat, id-keyed collection of index entries.

    Entries carry a ``record_id`` attribute; at most one entry exists per id.
    Insertion order is preserved.
    """

    def list_entries(self) -> list[EntryT]:
        """Return all entries in insertion order."""

    def get(self, record_id: str) -> EntryT | None:
        """Return the entry for ``record_id`` if present."""

    def upsert(self, entry: EntryT) -> None:
        """Insert ``entry`` or replace the existing entry with its id."""

    def remove(self, record_id: str) -> bool:
        """Remove the entry for ``record_id``; return whether one existed."""

    def remove_many(self, record_ids: Iterable[str]) -> int:
        """Remove several entries in one write; return how many were removed."""
