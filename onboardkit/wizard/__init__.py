"""Wizard navigation for onboarding drafts."""

from .controller import WizardController
from .pages import (
    EmailSyncTarget,
    FieldPage,
    UsernameSuggestionTarget,
    WizardPage,
    build_default_pages,
)

__all__ = [
    "WizardController",
    "WizardPage",
    "FieldPage",
    "EmailSyncTarget",
    "UsernameSuggestionTarget",
    "build_default_pages",
]
