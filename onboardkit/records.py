"""Read side of the finalized-record index."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import OnboardingConfig, load_config
from .models import utcnow
from .persistence import IndexRepository, RecordIndexEntry, get_index_repository

logger = logging.getLogger(__name__)


class RecordLibrary:
    """Browse finalized records and track whether their files still exist.

    Unlike drafts, finalized records live on shared storage that may be
    temporarily unreachable, so missing files are flagged rather than
    pruned.
    """

    def __init__(self, index: IndexRepository[RecordIndexEntry]) -> None:
        self._index = index

    def get(self, record_id: str) -> RecordIndexEntry | None:
        return self._index.get(record_id)

    def list_all(self) -> list[RecordIndexEntry]:
        """Return entries newest first, refreshing their verification flags."""
        now = utcnow()
        entries = self._index.list_entries()
        for entry in entries:
            exists = bool(entry.json_path) and Path(entry.json_path).exists()
            if exists:
                entry.last_verified = True
                entry.last_verified_at = now
                self._index.upsert(entry)
            elif entry.last_verified:
                logger.warning(f"Record {entry.record_id} not found at {entry.json_path}")
                entry.last_verified = False
                self._index.upsert(entry)
        return sorted(entries, key=lambda e: e.finalized_at, reverse=True)


def get_record_library(config: Optional[OnboardingConfig] = None) -> RecordLibrary:
    config = config or load_config()
    return RecordLibrary(get_index_repository(config.record_index_path, kind="record"))
