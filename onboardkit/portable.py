"""Portable export and import of a single draft as a zip archive."""

from __future__ import annotations

import logging
import tempfile
import uuid
import zipfile
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .constants import DRAFT_FILE_SUFFIX, DRAFT_STATUS, EXPORT_ARCHIVE_PREFIX
from .drafts import DraftStore
from .errors import DraftFormatError, DraftNotFoundError, DraftWriteError
from .models import OnboardingRecord, utcnow
from .utils.fs import make_safe, unique_path

logger = logging.getLogger(__name__)


def export_archive_stem(record: OnboardingRecord, today: Optional[date] = None) -> str:
    """``Onboarding_Draft_{Last}_{First}_{yyyymmdd}`` for ``record``."""
    stamp = (today or date.today()).strftime("%Y%m%d")
    last = make_safe(record.employee_last_name)
    first = make_safe(record.employee_first_name)
    return f"{EXPORT_ARCHIVE_PREFIX}_{last}_{first}_{stamp}"


def export_draft(
    store: DraftStore,
    record_id: str,
    destination_dir: str | Path,
    today: Optional[date] = None,
) -> Path:
    """Package one draft into a zip archive in ``destination_dir``.

    Existing archives are never overwritten: a numeric suffix is added
    until the name is free. The archive contains a single member named
    ``{record_id}_draft.json``. Returns the path written.
    """

    record = store.load(record_id)
    if record is None:
        raise DraftNotFoundError(f"Draft {record_id} not found.")

    destination = Path(destination_dir)
    destination.mkdir(parents=True, exist_ok=True)
    stem = export_archive_stem(record, today)
    while True:
        archive_path = unique_path(destination, stem, ".zip")
        try:
            zf = zipfile.ZipFile(archive_path, "x", compression=zipfile.ZIP_DEFLATED)
        except FileExistsError:
            # taken since unique_path checked it
            continue
        except OSError as e:
            raise DraftWriteError(f"Failed to export draft {record_id}: {e}") from e
        break

    try:
        with zf:
            zf.write(store.draft_path(record_id), arcname=f"{record_id}{DRAFT_FILE_SUFFIX}")
    except OSError as e:
        archive_path.unlink(missing_ok=True)
        raise DraftWriteError(f"Failed to export draft {record_id}: {e}") from e

    logger.info(f"Exported draft {record_id} to {archive_path}")
    return archive_path


def _read_archived_record(archive_path: Path) -> OnboardingRecord:
    with tempfile.TemporaryDirectory(prefix="onboardkit-import-") as tmp:
        try:
            with zipfile.ZipFile(archive_path) as zf:
                zf.extractall(tmp)
        except zipfile.BadZipFile as e:
            raise DraftFormatError(f"{archive_path} is not a valid archive: {e}") from e

        candidates = sorted(Path(tmp).glob(f"*{DRAFT_FILE_SUFFIX}"))
        if not candidates:
            raise DraftFormatError("No valid draft file found in archive.")
        try:
            return OnboardingRecord.from_json(candidates[0].read_bytes())
        except (ValidationError, ValueError) as e:
            raise DraftFormatError(f"Draft in {archive_path} could not be parsed: {e}") from e


def import_draft(store: DraftStore, archive_path: str | Path) -> OnboardingRecord:
    """Import a portable archive as a new local draft.

    The imported record always receives a fresh identifier so it can never
    overwrite a local draft. Export fields are cleared and the status is
    reset to ``draft``. On any failure no draft file or index entry is left
    behind.
    """

    archive_path = Path(archive_path)
    if not archive_path.is_file():
        raise DraftNotFoundError(f"Archive not found: {archive_path}")

    record = _read_archived_record(archive_path)
    original_id = record.record_id
    record.record_id = str(uuid.uuid4())
    record.status = DRAFT_STATUS
    record.exported_pdf_path = None
    record.exported_json_path = None
    record.finalized_at = None
    record.last_modified = utcnow()

    store.adopt(record, 0)
    logger.info(f"Imported draft {original_id} from {archive_path} as {record.record_id}")
    return record
