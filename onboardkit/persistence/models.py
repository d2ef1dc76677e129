"""Data models for the draft and finalized-record index files."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..constants import SCHEMA_VERSION
from ..models import assume_utc


class _IndexModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("*")
    @classmethod
    def _timestamps_are_utc(cls, value):
        return assume_utc(value)


class DraftIndexEntry(_IndexModel):
    """Lightweight summary of one draft for list display."""

    record_id: str
    employee_name: str = ""
    created_at: datetime
    last_modified: datetime
    draft_file_path: str
    last_page_index: int = 0


class DraftIndex(_IndexModel):
    """Root container of the draft index file."""

    schema_version: str = SCHEMA_VERSION
    entries: List[DraftIndexEntry] = Field(default_factory=list)


class RecordIndexEntry(_IndexModel):
    """Lightweight summary of one finalized record."""

    record_id: str
    employee_name: str = ""
    department: str = ""
    finalized_at: datetime
    start_date: Optional[date] = None
    json_path: str = ""
    pdf_path: str = ""
    last_verified: bool = False
    last_verified_at: Optional[datetime] = None


class RecordIndex(_IndexModel):
    """Root container of the finalized-record index file."""

    schema_version: str = SCHEMA_VERSION
    entries: List[RecordIndexEntry] = Field(default_factory=list)
