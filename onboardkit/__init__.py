"""onboardkit: guided onboarding records with durable local drafts."""

from .autosave import DebouncedSaveTrigger
from .config import OnboardingConfig, load_config, save_config
from .drafts import DraftStore, get_draft_store
from .errors import (
    DraftFormatError,
    DraftNotFoundError,
    DraftWriteError,
    OnboardingError,
    WizardStateError,
)
from .models import OnboardingRecord
from .portable import export_draft, import_draft
from .records import RecordLibrary, get_record_library
from .wizard import WizardController, build_default_pages

__version__ = "0.1.0"
__all__ = [
    "DebouncedSaveTrigger",
    "DraftStore",
    "OnboardingConfig",
    "OnboardingRecord",
    "RecordLibrary",
    "WizardController",
    "build_default_pages",
    "export_draft",
    "import_draft",
    "get_draft_store",
    "get_record_library",
    "load_config",
    "save_config",
    "DraftFormatError",
    "DraftNotFoundError",
    "DraftWriteError",
    "OnboardingError",
    "WizardStateError",
]
