"""Root-scoped path resolution for file-system projects."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


class PathBlockedError(Exception):
    """Raised when a requested path would escape the project root."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def normalize_path(candidate: str) -> str:
    """Return a forward-slash path without empty or ``.`` segments."""
    parts = [part for part in candidate.replace("\\", "/").split("/") if part not in ("", ".")]
    return "/".join(parts)


def resolve_project_path(root: Path, candidate: str) -> Path:
    """Resolve a project-relative path, refusing anything outside ``root``."""
    resolved_root = root.resolve()
    raw = candidate.replace("\\", "/")
    if raw.startswith("/") or WINDOWS_ABSOLUTE_PATTERN.match(raw):
        raise PathBlockedError(
            reason="Absolute paths are not project-relative.",
            hint="Use a path relative to the project root such as 'src/app.js'.",
        )
    normalized = normalize_path(raw)
    if not normalized:
        raise PathBlockedError(
            reason="Path is empty.",
            hint="Use a path relative to the project root such as 'src/app.js'.",
        )
    if any(part == ".." for part in normalized.split("/")):
        raise PathBlockedError(
            reason="Path traversal is blocked.",
            hint="Remove '..' segments from the path.",
        )
    resolved = (resolved_root / normalized).resolve(strict=False)
    if not resolved.is_relative_to(resolved_root):
        raise PathBlockedError(
            reason="Resolved path escapes the project root.",
            hint="Symlinks pointing outside the project are not followed.",
        )
    return resolved
