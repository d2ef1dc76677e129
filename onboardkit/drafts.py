"""Local storage of in-progress onboarding drafts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Protocol

from pydantic import BaseModel, Field, ValidationError

from .config import OnboardingConfig, load_config
from .constants import DRAFT_FILE_SUFFIX, DRAFT_STATUS
from .errors import DraftFormatError, DraftWriteError, OnboardingError
from .models import OnboardingRecord, utcnow
from .persistence import DraftIndexEntry, IndexRepository, get_index_repository
from .utils.fs import atomic_write_text

logger = logging.getLogger(__name__)


class NamingConvention(Protocol):
    """Maps an employee's name to suggested account identifiers."""

    def generate_email(self, first_name: str, last_name: str) -> str:
        """Return a suggested contact address, or ``""``."""

    def generate_username(self, first_name: str, last_name: str) -> str:
        """Return a suggested account name, or ``""``."""


class ReconcileReport(BaseModel):
    """Outcome of :meth:`DraftStore.reconcile`."""

    removed: List[str] = Field(default_factory=list)
    added: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)


class DraftStore:
    """Read, write and delete drafts, and keep the draft index truthful.

    The draft file is the source of truth. The index is a derived view kept
    only for fast enumeration: every :meth:`list_all` drops entries whose
    file is missing or cannot be parsed and persists the pruned index. A
    listing therefore may write.
    """

    def __init__(
        self,
        drafts_dir: str | Path,
        index: IndexRepository[DraftIndexEntry],
        naming: Optional[NamingConvention] = None,
    ) -> None:
        self.drafts_dir = Path(drafts_dir)
        self._index = index
        self._naming = naming

    @property
    def naming(self) -> Optional[NamingConvention]:
        return self._naming

    def draft_path(self, record_id: str) -> Path:
        return self.drafts_dir / f"{record_id}{DRAFT_FILE_SUFFIX}"

    # ------------------------------------------------------------------
    # Create / save
    def create(
        self, first_name: str, last_name: str, starting_page: int = 0
    ) -> OnboardingRecord:
        """Create a draft for a new employee, persist it and index it."""
        record = OnboardingRecord(
            employee_first_name=first_name,
            employee_last_name=last_name,
            status=DRAFT_STATUS,
        )
        if self._naming is not None:
            record.email_address = self._naming.generate_email(first_name, last_name)
            record.domain_username = self._naming.generate_username(first_name, last_name)
        self.save(record, starting_page)
        logger.info(f"Created draft {record.record_id} for {record.display_name}")
        return record

    def save(self, record: OnboardingRecord, current_page: Optional[int] = None) -> None:
        """Write ``record`` to its draft file and upsert its index entry.

        ``current_page`` is recorded on the index entry when given. Write
        failures raise :class:`DraftWriteError`.
        """
        now = utcnow()
        if now > record.last_modified:
            record.last_modified = now
        path = self.draft_path(record.record_id)
        try:
            atomic_write_text(path, record.to_json())
        except OSError as e:
            raise DraftWriteError(f"Failed to save draft {record.record_id}: {e}") from e

        entry = self._index.get(record.record_id)
        if entry is None:
            entry = DraftIndexEntry(
                record_id=record.record_id,
                employee_name=record.display_name,
                created_at=record.created_at,
                last_modified=record.last_modified,
                draft_file_path=str(path),
                last_page_index=max(current_page or 0, 0),
            )
        else:
            entry.employee_name = record.display_name
            entry.last_modified = record.last_modified
            entry.draft_file_path = str(path)
            if current_page is not None and current_page >= 0:
                entry.last_page_index = current_page
        self._index.upsert(entry)
        logger.debug(f"Saved draft {record.record_id} (page={current_page})")

    def adopt(self, record: OnboardingRecord, page: int = 0) -> None:
        """Persist a record created outside the store as a new local draft.

        If either write fails, the draft file is removed again so no
        half-created draft is left behind.
        """
        path = self.draft_path(record.record_id)
        if path.exists() or self._index.get(record.record_id) is not None:
            raise OnboardingError(f"Draft {record.record_id} already exists")
        try:
            self.save(record, page)
        except DraftWriteError:
            path.unlink(missing_ok=True)
            raise

    # ------------------------------------------------------------------
    # Load / delete
    def load(self, record_id: str) -> OnboardingRecord | None:
        """Load a draft by id; ``None`` when its file does not exist."""
        return self.load_from_path(self.draft_path(record_id))

    def load_from_path(self, path: str | Path) -> OnboardingRecord | None:
        """Load a draft from an explicit file path; ``None`` when missing.

        Corrupt content raises :class:`DraftFormatError`.
        """
        path = Path(path)
        if not path.exists():
            return None
        data = path.read_bytes()
        try:
            return OnboardingRecord.from_json(data)
        except (ValidationError, ValueError) as e:
            raise DraftFormatError(f"Draft file {path} is corrupt: {e}") from e

    def delete(self, record_id: str) -> None:
        """Delete a draft file (if present) and its index entry."""
        try:
            self.draft_path(record_id).unlink(missing_ok=True)
        except OSError as e:
            raise DraftWriteError(f"Failed to delete draft {record_id}: {e}") from e
        self._index.remove(record_id)
        logger.info(f"Deleted draft {record_id}")

    # ------------------------------------------------------------------
    # Listing
    def _is_readable(self, path: Path) -> bool:
        try:
            return self.load_from_path(path) is not None
        except (DraftFormatError, OSError) as e:
            logger.warning(f"Draft file {path} is unreadable: {e}")
            return False

    def _prune_orphans(self) -> tuple[list[DraftIndexEntry], list[str]]:
        kept: list[DraftIndexEntry] = []
        orphans: list[str] = []
        for entry in self._index.list_entries():
            if self._is_readable(Path(entry.draft_file_path)):
                kept.append(entry)
            else:
                orphans.append(entry.record_id)
        if orphans:
            self._index.remove_many(orphans)
            logger.info(f"Removed {len(orphans)} orphaned draft index entries")
        return kept, orphans

    def list_all(self) -> list[DraftIndexEntry]:
        """Return draft entries, most recently modified first.

        Entries whose file is missing or corrupt are removed from the index
        before returning.
        """
        kept, _ = self._prune_orphans()
        return sorted(kept, key=lambda e: e.last_modified, reverse=True)

    def has_any(self) -> bool:
        return len(self.list_all()) > 0

    def reconcile(self) -> ReconcileReport:
        """Bring the index in line with the draft files on disk.

        Drops orphaned entries and indexes valid draft files that have no
        entry, e.g. after the index file was lost or corrupted.
        """
        kept, orphans = self._prune_orphans()
        report = ReconcileReport(removed=orphans)
        indexed = {entry.record_id for entry in kept}
        if not self.drafts_dir.exists():
            return report

        for path in sorted(self.drafts_dir.glob(f"*{DRAFT_FILE_SUFFIX}")):
            try:
                record = self.load_from_path(path)
            except (DraftFormatError, OSError) as e:
                logger.warning(f"Skipping unreadable draft file {path}: {e}")
                report.skipped.append(str(path))
                continue
            if record is None or record.record_id in indexed:
                continue
            if path != self.draft_path(record.record_id):
                logger.warning(f"Skipping {path}: file name does not match id {record.record_id}")
                report.skipped.append(str(path))
                continue
            self._index.upsert(
                DraftIndexEntry(
                    record_id=record.record_id,
                    employee_name=record.display_name,
                    created_at=record.created_at,
                    last_modified=record.last_modified,
                    draft_file_path=str(path),
                )
            )
            indexed.add(record.record_id)
            report.added.append(record.record_id)

        if report.added:
            logger.info(f"Re-indexed {len(report.added)} draft files")
        return report


def get_draft_store(config: Optional[OnboardingConfig] = None) -> DraftStore:
    """Build a file-backed :class:`DraftStore` from configuration."""

    config = config or load_config()
    config.ensure_directories()
    index = get_index_repository(config.draft_index_path, kind="draft")
    return DraftStore(config.drafts_dir, index, naming=config.customer)
