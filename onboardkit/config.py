"""Configuration models and their YAML loader."""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .constants import (
    CONFIG_FILENAME,
    DEFAULT_AUTOSAVE_DEBOUNCE_MS,
    DRAFT_INDEX_FILENAME,
    DRAFTS_DIRNAME,
    RECORD_INDEX_FILENAME,
    SCHEMA_VERSION,
)

logger = logging.getLogger(__name__)


class EmailFormat(str, Enum):
    """Rule used to derive account names from an employee's name."""

    FIRST_INITIAL_LAST_NAME = "first_initial_last_name"  # jsmith
    FIRST_DOT_LAST = "first_dot_last"  # john.smith
    FIRST_LAST = "first_last"  # johnsmith


class AppSettings(BaseModel):
    """Application-level settings."""

    schema_version: str = SCHEMA_VERSION
    autosave_debounce_ms: int = DEFAULT_AUTOSAVE_DEBOUNCE_MS
    last_draft_export_directory: str = ""
    last_draft_import_directory: str = ""
    last_viewed_record_id: str = ""


class CustomerProfile(BaseModel):
    """Customer-specific values: naming convention and page option lists."""

    schema_version: str = SCHEMA_VERSION
    customer_name: str = "Arnot Realty"
    email_domain: str = "arnotrealty.com"
    email_format: EmailFormat = EmailFormat.FIRST_INITIAL_LAST_NAME
    mdm_note: str = (
        "MDM enrollment is usually handled in-house. "
        "Engineer involvement only under special circumstances."
    )
    applications_list: List[str] = Field(
        default_factory=lambda: [
            "Microsoft Office 365",
            "Microsoft Teams",
            "Adobe Acrobat",
            "QuickBooks",
            "Dropbox",
            "Chrome",
            "Other (see notes)",
        ]
    )
    vpn_types: List[str] = Field(
        default_factory=lambda: ["GlobalProtect", "Cisco AnyConnect", "SonicWall", "Other"]
    )
    monitor_types: List[str] = Field(
        default_factory=lambda: [
            "Standard (1080p)",
            "Widescreen (1440p)",
            "Ultrawide",
            "Laptop Screen Only",
        ]
    )
    remote_desktop_options: List[str] = Field(
        default_factory=lambda: [
            "Windows Remote Desktop",
            "ScreenConnect / ConnectWise",
            "Other",
        ]
    )
    software_access_list: List[str] = Field(
        default_factory=lambda: [
            "Property Management System",
            "Accounting Software",
            "CRM",
            "Document Management",
            "Other",
        ]
    )
    access_rights_list: List[str] = Field(
        default_factory=lambda: [
            "Standard User",
            "Local Admin",
            "Domain Admin",
            "HR Files",
            "Executive Drive",
            "Financial Records",
            "Other",
        ]
    )
    additional_access_list: List[str] = Field(
        default_factory=lambda: ["VPN Access", "Remote Desktop", "SharePoint", "OneDrive", "Other"]
    )
    security_options_list: List[str] = Field(
        default_factory=lambda: [
            "Multi-Factor Authentication",
            "Password Manager",
            "Encrypted Drive",
            "Other",
        ]
    )
    voicemail_setup_options: List[str] = Field(
        default_factory=lambda: [
            "Set up voicemail greeting",
            "Forward voicemail to email",
            "Transfer existing voicemail box",
        ]
    )

    def generate_username(self, first_name: str, last_name: str) -> str:
        """Suggest a domain username, or ``""`` when either name is blank."""
        if not first_name or not first_name.strip():
            return ""
        if not last_name or not last_name.strip():
            return ""
        first = first_name.strip().lower()
        last = last_name.strip().lower()
        if self.email_format == EmailFormat.FIRST_DOT_LAST:
            return f"{first}.{last}"
        if self.email_format == EmailFormat.FIRST_LAST:
            return f"{first}{last}"
        return f"{first[0]}{last}"

    def generate_email(self, first_name: str, last_name: str) -> str:
        """Suggest an email address, or ``""`` when either name is blank."""
        local = self.generate_username(first_name, last_name)
        if not local:
            return ""
        return f"{local}@{self.email_domain}"


class RequestorProfile(BaseModel):
    """Saved details of the person submitting onboarding requests."""

    schema_version: str = SCHEMA_VERSION
    name: str = ""
    title: str = ""
    phone: str = ""
    email: str = ""
    department: str = ""


class OnboardingConfig(BaseModel):
    """Top-level configuration model."""

    data_dir: Optional[str] = None
    settings: AppSettings = AppSettings()
    customer: CustomerProfile = CustomerProfile()
    requestor: RequestorProfile = RequestorProfile()

    @property
    def root(self) -> Path:
        return Path(self.data_dir).expanduser() if self.data_dir else default_data_dir()

    @property
    def drafts_dir(self) -> Path:
        return self.root / DRAFTS_DIRNAME

    @property
    def draft_index_path(self) -> Path:
        return self.root / DRAFT_INDEX_FILENAME

    @property
    def record_index_path(self) -> Path:
        return self.root / RECORD_INDEX_FILENAME

    def ensure_directories(self) -> None:
        """Create the data and drafts directories if they do not exist."""
        self.drafts_dir.mkdir(parents=True, exist_ok=True)


def default_data_dir() -> Path:
    """Data directory from ``ONBOARDKIT_HOME`` or ``~/.onboardkit``."""
    env_home = os.getenv("ONBOARDKIT_HOME")
    if env_home:
        return Path(env_home).expanduser()
    return Path.home() / ".onboardkit"


def _resolve_config_path(path: Optional[str | Path]) -> Path:
    if path:
        return Path(path)
    env_path = os.getenv("ONBOARDKIT_CONFIG")
    if env_path:
        return Path(env_path)
    return default_data_dir() / CONFIG_FILENAME


def load_config(path: Optional[str | Path] = None) -> OnboardingConfig:
    """Load configuration from a YAML file.

    Args:
        path: Optional path to config file. Falls back to the
            ``ONBOARDKIT_CONFIG`` env variable, then ``config.yaml`` in the
            data directory.

    A missing file yields defaults. A corrupt file is replaced with defaults
    so that a damaged config never prevents the application from starting.
    """

    config_path = _resolve_config_path(path)
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError("top-level YAML value must be a mapping")
            config = OnboardingConfig(**data)
        except (yaml.YAMLError, ValidationError, ValueError, TypeError) as e:
            logger.warning(f"Failed to load config {config_path}: {e}. Using defaults.")
            config = OnboardingConfig()
            save_config(config, config_path)
    else:
        config = OnboardingConfig()

    env_home = os.getenv("ONBOARDKIT_HOME")
    if env_home:
        config.data_dir = env_home
    return config


def save_config(config: OnboardingConfig, path: Optional[str | Path] = None) -> Path:
    """Write ``config`` as YAML and return the path written.

    Write failures propagate to the caller.
    """

    config_path = _resolve_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    return config_path
