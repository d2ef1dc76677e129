"""The onboarding record that every wizard page reads from and writes to."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .constants import DRAFT_STATUS, SCHEMA_VERSION


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def assume_utc(value):
    """Attach UTC to naive datetimes so timestamps always compare."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class OnboardingRecord(BaseModel):
    """Full data set for one new-employee onboarding request.

    Serialized with camelCase keys for draft storage and portable export.
    ``record_id`` is assigned once at creation and never reused.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    # Meta
    record_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    schema_version: str = SCHEMA_VERSION
    status: str = DRAFT_STATUS
    customer_profile: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    finalized_at: Optional[datetime] = None
    last_modified: datetime = Field(default_factory=utcnow)
    exported_pdf_path: Optional[str] = None
    exported_json_path: Optional[str] = None

    # Page 1: employee name
    employee_first_name: str = ""
    employee_last_name: str = ""

    # Page 2: scheduling
    start_date: Optional[date] = None
    appointment_date: Optional[date] = None
    appointment_time: Optional[time] = None
    scheduling_notes: str = ""

    # Page 3: user information
    title: str = ""
    department: str = ""
    direct_reports_to: str = ""
    office_location: str = ""
    work_phone: str = ""
    cell_phone: str = ""
    email_address: str = ""
    email_overridden: bool = False

    # Page 4: requestor
    requestor_name: str = ""
    requestor_title: str = ""
    requestor_phone: str = ""
    requestor_email: str = ""
    request_date: Optional[date] = None

    # Page 5: account setup
    new_account: bool = False
    modify_existing_account: bool = False
    copy_permissions: bool = False
    copy_from_user: str = ""
    domain_username: str = ""
    initial_password: str = ""
    force_password_change: bool = True

    # Page 6: email setup (email_address shared with page 3)
    email_password: str = ""
    email_license_type: str = ""
    new_mailbox: bool = True
    distribution_lists: str = ""
    shared_mailboxes: str = ""
    calendar_delegates: str = ""

    # Page 7: applications
    selected_applications: List[str] = Field(default_factory=list)

    # Page 8: computer setup
    new_computer: bool = True
    existing_computer_name: str = ""
    printers: str = ""
    monitor_count: int = 1
    monitor1_type: str = ""
    monitor2_type: str = ""

    # Page 9: remote access
    vpn_required: bool = False
    vpn_username: str = ""
    vpn_type: str = ""
    monitor1_config: str = ""
    monitor2_config: str = ""
    remote_desktop_options: List[str] = Field(default_factory=list)

    # Page 10: software and access rights
    software_access: List[str] = Field(default_factory=list)
    access_rights: List[str] = Field(default_factory=list)

    # Page 11: additional access and security
    additional_access: List[str] = Field(default_factory=list)
    security_options: List[str] = Field(default_factory=list)

    # Page 12: office telephone and mobile device
    desk_phone_required: bool = False
    extension: str = ""
    phone_model: str = ""
    voicemail_setup_options: List[str] = Field(default_factory=list)
    mobile_device_type: str = ""
    mobile_number: str = ""
    mobile_carrier: str = ""
    mdm_enrollment: bool = False
    mdm_notes: str = ""

    # Page 13: notes
    misc_notes: str = ""

    @field_validator("created_at", "finalized_at", "last_modified")
    @classmethod
    def _timestamps_are_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return assume_utc(value)

    @property
    def display_name(self) -> str:
        """``"Last, First"``, or just the first name when last is blank."""
        if not self.employee_last_name.strip():
            return self.employee_first_name
        return f"{self.employee_last_name}, {self.employee_first_name}"

    @property
    def full_name(self) -> str:
        return f"{self.employee_first_name} {self.employee_last_name}".strip()

    @property
    def is_exported(self) -> bool:
        return bool(self.exported_pdf_path)

    def to_json(self) -> str:
        """Serialize the record to indented camelCase JSON."""
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, data: str | bytes) -> "OnboardingRecord":
        """Deserialize a record from JSON."""
        return cls.model_validate_json(data)
