"""Filesystem helpers for draft storage and export naming."""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def make_safe(value: str | None) -> str:
    """Strip characters that are invalid in file names and replace spaces.

    Returns ``"Unknown"`` for blank input.
    """
    if not value or not value.strip():
        return "Unknown"
    safe = _INVALID_FILENAME_CHARS.sub("", value).strip().replace(" ", "_")
    return safe or "Unknown"


def unique_path(directory: Path, stem: str, suffix: str) -> Path:
    """Return ``directory/stem+suffix``, adding ``_1``, ``_2``... until unused."""
    candidate = directory / f"{stem}{suffix}"
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem}_{counter}{suffix}"
        counter += 1
    return candidate


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` so readers never observe a partial file.

    The content goes to a temporary sibling first and is then moved over the
    target. Errors propagate; the temporary file is removed on failure.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
