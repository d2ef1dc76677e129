"""Shared constants for onboardkit."""

SCHEMA_VERSION = "1.0"

DEFAULT_AUTOSAVE_DEBOUNCE_MS = 750

DRAFT_STATUS = "draft"
FINALIZED_STATUS = "finalized"

DRAFT_FILE_SUFFIX = "_draft.json"
DRAFT_INDEX_FILENAME = "draft-index.json"
RECORD_INDEX_FILENAME = "record-index.json"
DRAFTS_DIRNAME = "Drafts"
CONFIG_FILENAME = "config.yaml"

EXPORT_ARCHIVE_PREFIX = "Onboarding_Draft"
