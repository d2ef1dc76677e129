"""Exception hierarchy for onboardkit."""

from __future__ import annotations


class OnboardingError(Exception):
    """Base class for all onboardkit errors."""


class DraftNotFoundError(OnboardingError, FileNotFoundError):
    """A draft or portable archive does not exist."""


class DraftFormatError(OnboardingError, ValueError):
    """Serialized draft content is corrupt or unrecognized."""


class DraftWriteError(OnboardingError, OSError):
    """Persisting a draft or index failed; the save did not happen."""


class WizardStateError(OnboardingError, RuntimeError):
    """The wizard was asked to do something its current state forbids."""
