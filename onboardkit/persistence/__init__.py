"""Index persistence for drafts and finalized records."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .inmemory import InMemoryIndexRepository
from .jsonfile import JsonIndexRepository
from .models import DraftIndex, DraftIndexEntry, RecordIndex, RecordIndexEntry
from .repository import IndexRepository


def get_index_repository(
    path: Optional[str | Path] = None, kind: str = "draft"
) -> IndexRepository:
    """Factory function to obtain an index repository.

    ``kind`` selects the index file shape (``"draft"`` or ``"record"``).
    When no path is given, an in-memory repository is returned.
    """

    if kind not in ("draft", "record"):
        raise ValueError(f"Unsupported index kind: {kind}")
    if path is None:
        return InMemoryIndexRepository()
    index_type = DraftIndex if kind == "draft" else RecordIndex
    return JsonIndexRepository(path, index_type)


__all__ = [
    "DraftIndex",
    "DraftIndexEntry",
    "RecordIndex",
    "RecordIndexEntry",
    "IndexRepository",
    "InMemoryIndexRepository",
    "JsonIndexRepository",
    "get_index_repository",
]
