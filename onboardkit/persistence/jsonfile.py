"""JSON-file implementation of the index repository."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import DraftWriteError
from ..utils.fs import atomic_write_text
from .models import DraftIndex, RecordIndex
from .repository import IndexRepository

logger = logging.getLogger(__name__)

IndexFileT = TypeVar("IndexFileT", DraftIndex, RecordIndex)


class JsonIndexRepository(IndexRepository):
    """Persist an index as one JSON document.

    Every mutation reads the whole file, modifies it and writes it back.
    This assumes a single writer process. A missing file is an empty index;
    a corrupt file is logged and treated as empty so that listing never
    fails. Callers that need the lost entries back use
    :meth:`onboardkit.drafts.DraftStore.reconcile`.
    """

    def __init__(self, path: str | Path, index_type: Type[IndexFileT] = DraftIndex):
        self.path = Path(path)
        self._index_type = index_type

    # ------------------------------------------------------------------
    # File helpers
    def _load(self) -> BaseModel:
        if not self.path.exists():
            return self._index_type()
        try:
            return self._index_type.model_validate_json(self.path.read_bytes())
        except (ValidationError, ValueError, OSError) as e:
            logger.warning(f"Index file {self.path} is unreadable, starting empty: {e}")
            return self._index_type()

    def _save(self, index: BaseModel) -> None:
        try:
            atomic_write_text(self.path, index.model_dump_json(by_alias=True, indent=2))
        except OSError as e:
            raise DraftWriteError(f"Failed to write index {self.path}: {e}") from e

    # ------------------------------------------------------------------
    # Repository API
    def list_entries(self) -> list:
        return list(self._load().entries)

    def get(self, record_id: str):
        for entry in self._load().entries:
            if entry.record_id == record_id:
                return entry
        return None

    def upsert(self, entry) -> None:
        index = self._load()
        for i, existing in enumerate(index.entries):
            if existing.record_id == entry.record_id:
                index.entries[i] = entry
                break
        else:
            index.entries.append(entry)
        self._save(index)

    def remove(self, record_id: str) -> bool:
        return self.remove_many([record_id]) > 0

    def remove_many(self, record_ids: Iterable[str]) -> int:
        doomed = set(record_ids)
        if not doomed:
            return 0
        index = self._load()
        kept = [e for e in index.entries if e.record_id not in doomed]
        removed = len(index.entries) - len(kept)
        if removed:
            index.entries = kept
            self._save(index)
        return removed
