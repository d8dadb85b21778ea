"""
Input sanitization and path safety.

Threat model:
- Path traversal from user input (novel IDs, cover paths)
- Header injection through filenames sent to the REST API
- Credential exposure in logs
"""

import os
import re
from pathlib import Path
from typing import Any

# Novel IDs: alphanumeric, underscore, hyphen only (case preserved)
_NOVEL_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")

# Filenames: strip anything dangerous in a header or on disk
_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

_SENSITIVE_PATTERNS = {"key", "secret", "token", "password"}


def validate_novel_id(raw: str) -> str:
    """
    Validate a novel ID for use as a directory name.

    The ID is returned stripped but otherwise unchanged; anything outside
    [A-Za-z0-9_-] raises ValueError.
    """
    novel_id = raw.strip()
    if not novel_id:
        raise ValueError("Novel ID is empty.")

    if os.path.basename(novel_id) != novel_id or not _NOVEL_ID_RE.fullmatch(novel_id):
        raise ValueError(f"Invalid novel ID: '{raw}'")

    return novel_id


def sanitize_filename(raw: str) -> str:
    """Reduce a path to a bare filename safe to send in an HTTP header."""
    name = _UNSAFE_FILENAME_CHARS.sub("", Path(raw).name).strip().lstrip(".")
    if not name:
        raise ValueError(f"Filename '{raw}' is empty after sanitization.")
    return name


def validate_path_within(path: Path, root: Path) -> bool:
    """
    Ensure `path` resolves to a location within `root`.
    """
    try:
        abs_path = os.path.abspath(str(path))
        abs_root = os.path.abspath(str(root))

        if abs_path != abs_root and not abs_path.startswith(abs_root + os.sep):
            return False

        resolved = path.resolve()
        root_resolved = root.resolve()
        return resolved.is_relative_to(root_resolved)
    except (OSError, ValueError):
        return False


def redact_secrets(settings: dict[str, Any]) -> dict[str, Any]:
    """Copy of a flat settings dict with password/secret/token/key values masked."""
    return {
        key: "***REDACTED***"
        if value and any(p in key.lower() for p in _SENSITIVE_PATTERNS)
        else value
        for key, value in settings.items()
    }
