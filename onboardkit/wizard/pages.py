"""Wizard page contract and the default onboarding pages.

A page owns an editable copy of some record fields. The controller calls
:meth:`WizardPage.load_data` when the page becomes active and
:meth:`WizardPage.save_data` before every navigation. Edits are made with
:meth:`FieldPage.set_value`, which raises the page's change notification.
"""

from __future__ import annotations

import abc
import copy
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from ..config import CustomerProfile, OnboardingConfig, RequestorProfile
from ..models import OnboardingRecord

DataChangedHandler = Callable[["WizardPage"], None]


class WizardPage(metaclass=abc.ABCMeta):
    """Contract every wizard page implements."""

    title: str = ""

    def __init__(self) -> None:
        self._handlers: List[DataChangedHandler] = []
        self._loading = False

    def subscribe(self, handler: DataChangedHandler) -> None:
        """Register a handler for field-change notifications."""
        self._handlers.append(handler)

    def unsubscribe(self, handler: DataChangedHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def raise_data_changed(self) -> None:
        """Notify subscribers; suppressed while the page is loading."""
        if self._loading:
            return
        for handler in list(self._handlers):
            handler(self)

    @abc.abstractmethod
    def load_data(self, record: OnboardingRecord) -> None:
        """Populate the page from ``record``. Must not raise a change event."""
        raise NotImplementedError

    @abc.abstractmethod
    def save_data(self, record: OnboardingRecord) -> OnboardingRecord:
        """Write the page's values into ``record`` and return it."""
        raise NotImplementedError

    def validate(self) -> Optional[str]:
        """Return a user-facing error message, or ``None`` when valid."""
        return None


@runtime_checkable
class UsernameSuggestionTarget(Protocol):
    """A page that accepts an account-name suggestion."""

    def suggest_username(self, first_name: str, last_name: str) -> None: ...


@runtime_checkable
class EmailSyncTarget(Protocol):
    """A page that mirrors the contact address chosen elsewhere."""

    def sync_email(self, email: str) -> None: ...


class FieldPage(WizardPage):
    """Page whose values map one-to-one onto record attributes.

    ``fields`` names the record attributes the page edits. ``required`` maps
    a field to the message shown when it is blank. ``choices`` restricts
    list fields to a set of options.
    """

    fields: Sequence[str] = ()
    required: Dict[str, str] = {}

    def __init__(self, choices: Optional[Dict[str, Sequence[str]]] = None) -> None:
        super().__init__()
        self.choices: Dict[str, List[str]] = {k: list(v) for k, v in (choices or {}).items()}
        self.values: Dict[str, Any] = {}

    def load_data(self, record: OnboardingRecord) -> None:
        self._loading = True
        try:
            self.values = {name: copy.copy(getattr(record, name)) for name in self.fields}
            self._after_load(record)
        finally:
            self._loading = False

    def save_data(self, record: OnboardingRecord) -> OnboardingRecord:
        for name in self._saved_fields():
            if name in self.values:
                setattr(record, name, _clean(self.values[name]))
        return record

    def validate(self) -> Optional[str]:
        for name, message in self.required.items():
            value = self.values.get(name)
            if value is None or not str(value).strip():
                return message
        return None

    def get_value(self, name: str) -> Any:
        return self.values.get(name)

    def read_only_fields(self) -> set[str]:
        return set()

    def set_value(self, name: str, value: Any) -> None:
        """Edit one field as the user would and raise a change event."""
        if name not in self.fields:
            raise KeyError(f"{type(self).__name__} has no field {name!r}")
        if name in self.read_only_fields():
            raise ValueError(f"Field {name!r} is read-only")
        allowed = self.choices.get(name)
        if allowed is not None:
            unknown = [v for v in value if v not in allowed]
            if unknown:
                raise ValueError(f"Unknown options for {name!r}: {unknown}")
            value = list(value)
        value = _validate_field(name, value)
        self.values[name] = value
        self._on_value_changed(name)
        self.raise_data_changed()

    # Hooks ---------------------------------------------------------------
    def _after_load(self, record: OnboardingRecord) -> None:
        pass

    def _on_value_changed(self, name: str) -> None:
        pass

    def _saved_fields(self) -> Sequence[str]:
        return self.fields


_field_adapters: Dict[str, TypeAdapter] = {}


def _validate_field(name: str, value: Any) -> Any:
    """Coerce ``value`` to the record field's type or raise ``ValueError``."""
    adapter = _field_adapters.get(name)
    if adapter is None:
        adapter = TypeAdapter(OnboardingRecord.model_fields[name].annotation)
        _field_adapters[name] = adapter
    try:
        return adapter.validate_python(value)
    except ValidationError as e:
        raise ValueError(f"Invalid value for {name!r}: {value!r}") from e


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return list(value)
    return value


# ----------------------------------------------------------------------
# Default pages


class EmployeeNamePage(FieldPage):
    title = "Employee Name"
    fields = ("employee_first_name", "employee_last_name")
    required = {
        "employee_first_name": "Please enter the employee's first name.",
        "employee_last_name": "Please enter the employee's last name.",
    }


class SchedulingPage(FieldPage):
    title = "Due Dates & Scheduling"
    fields = ("start_date", "appointment_date", "appointment_time", "scheduling_notes")


class UserInformationPage(FieldPage):
    """Employee details. The email is generated from the name until the
    user unlocks ``email_overridden``, after which it is never regenerated."""

    title = "User Information"
    fields = (
        "employee_first_name",
        "employee_last_name",
        "title",
        "department",
        "direct_reports_to",
        "office_location",
        "work_phone",
        "cell_phone",
        "email_address",
        "email_overridden",
    )

    def __init__(self, customer: CustomerProfile) -> None:
        super().__init__()
        self._customer = customer

    def read_only_fields(self) -> set[str]:
        return set() if self.values.get("email_overridden") else {"email_address"}

    def _on_value_changed(self, name: str) -> None:
        if name not in ("employee_first_name", "employee_last_name"):
            return
        if self.values.get("email_overridden"):
            return
        generated = self._customer.generate_email(
            self.values.get("employee_first_name", ""),
            self.values.get("employee_last_name", ""),
        )
        if generated:
            self.values["email_address"] = generated


class RequestorInfoPage(FieldPage):
    """Requestor details, prefilled from the saved requestor profile."""

    title = "Requestor Information"
    fields = (
        "requestor_name",
        "requestor_title",
        "requestor_phone",
        "requestor_email",
        "request_date",
    )

    def __init__(self, requestor: RequestorProfile) -> None:
        super().__init__()
        self._requestor = requestor

    def _after_load(self, record: OnboardingRecord) -> None:
        if record.requestor_name.strip():
            return
        self.values["requestor_name"] = self._requestor.name
        self.values["requestor_title"] = self._requestor.title
        self.values["requestor_phone"] = self._requestor.phone
        self.values["requestor_email"] = self._requestor.email


class AccountSetupPage(FieldPage):
    title = "Account Setup"
    fields = (
        "new_account",
        "modify_existing_account",
        "copy_permissions",
        "copy_from_user",
        "domain_username",
        "initial_password",
        "force_password_change",
    )

    def __init__(self, customer: CustomerProfile) -> None:
        super().__init__()
        self._customer = customer

    def _after_load(self, record: OnboardingRecord) -> None:
        if not record.domain_username:
            self.values["domain_username"] = self._customer.generate_username(
                record.employee_first_name, record.employee_last_name
            )

    def suggest_username(self, first_name: str, last_name: str) -> None:
        """Fill the username from the name, only when the field is empty."""
        if self._loading:
            return
        if str(self.values.get("domain_username") or "").strip():
            return
        self.values["domain_username"] = self._customer.generate_username(first_name, last_name)


class EmailSetupPage(FieldPage):
    """Mailbox setup. The address mirrors the user information page and is
    read-only here unless the record's email override is unlocked."""

    title = "Email Setup"
    fields = (
        "email_address",
        "email_password",
        "email_license_type",
        "new_mailbox",
        "distribution_lists",
        "shared_mailboxes",
        "calendar_delegates",
    )

    def __init__(self) -> None:
        super().__init__()
        self._email_unlocked = False

    def _after_load(self, record: OnboardingRecord) -> None:
        self._email_unlocked = record.email_overridden

    def read_only_fields(self) -> set[str]:
        return set() if self._email_unlocked else {"email_address"}

    def sync_email(self, email: str) -> None:
        self.values["email_address"] = email

    def _saved_fields(self) -> Sequence[str]:
        if self._email_unlocked:
            return self.fields
        return [name for name in self.fields if name != "email_address"]


class ApplicationsPage(FieldPage):
    title = "Applications"
    fields = ("selected_applications",)


class ComputerSetupPage(FieldPage):
    title = "Computer Setup"
    fields = (
        "new_computer",
        "existing_computer_name",
        "printers",
        "monitor_count",
        "monitor1_type",
        "monitor2_type",
    )


class RemoteAccessPage(FieldPage):
    title = "Remote Access"
    fields = (
        "vpn_required",
        "vpn_username",
        "vpn_type",
        "monitor1_config",
        "monitor2_config",
        "remote_desktop_options",
    )


class SoftwareAccessPage(FieldPage):
    title = "Software & Access Rights"
    fields = ("software_access", "access_rights")


class AdditionalAccessPage(FieldPage):
    title = "Additional Access & Security"
    fields = ("additional_access", "security_options")


class PhoneMobilePage(FieldPage):
    title = "Phone & Mobile Device"
    fields = (
        "desk_phone_required",
        "extension",
        "phone_model",
        "voicemail_setup_options",
        "mobile_device_type",
        "mobile_number",
        "mobile_carrier",
        "mdm_enrollment",
        "mdm_notes",
    )


class MiscNotesPage(FieldPage):
    title = "Notes & Finalize"
    fields = ("misc_notes",)


def build_default_pages(config: Optional[OnboardingConfig] = None) -> List[WizardPage]:
    """Return the thirteen onboarding pages in wizard order."""

    config = config or OnboardingConfig()
    customer = config.customer
    return [
        EmployeeNamePage(),
        SchedulingPage(),
        UserInformationPage(customer),
        RequestorInfoPage(config.requestor),
        AccountSetupPage(customer),
        EmailSetupPage(),
        ApplicationsPage({"selected_applications": customer.applications_list}),
        ComputerSetupPage(),
        RemoteAccessPage({"remote_desktop_options": customer.remote_desktop_options}),
        SoftwareAccessPage(
            {
                "software_access": customer.software_access_list,
                "access_rights": customer.access_rights_list,
            }
        ),
        AdditionalAccessPage(
            {
                "additional_access": customer.additional_access_list,
                "security_options": customer.security_options_list,
            }
        ),
        PhoneMobilePage({"voicemail_setup_options": customer.voicemail_setup_options}),
        MiscNotesPage(),
    ]
