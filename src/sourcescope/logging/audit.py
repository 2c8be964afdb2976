"""Structured JSONL log of search sessions."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

_VERBATIM_BOOLS = {"ignore_case", "is_regex", "search_in_content_scripts"}
_VERBATIM_INTS = {"limit", "max_concurrent_files"}
_REDACTED_TEXT = {"query", "file_filter"}


@dataclass(slots=True, frozen=True)
class SearchEvent:
    """Sanitized record of one finished, preempted, or cancelled session."""

    timestamp: str
    session_id: int
    operation: str
    outcome: str
    arguments: dict[str, object]
    counters: dict[str, int]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Describe request arguments without recording query text."""
    sanitized: dict[str, object] = {}
    for key in sorted(arguments):
        value = arguments[key]
        if key in _VERBATIM_BOOLS and isinstance(value, bool):
            sanitized[key] = value
        elif key in _VERBATIM_INTS and isinstance(value, int):
            sanitized[key] = value
        elif key in _REDACTED_TEXT and isinstance(value, str):
            sanitized[f"{key}_present"] = True
            sanitized[f"{key}_length"] = len(value)
        elif value is None or isinstance(value, (int, float, bool)):
            sanitized[key] = value
        elif isinstance(value, str):
            sanitized[f"{key}_present"] = True
            sanitized[f"{key}_length"] = len(value)
        elif isinstance(value, (list, tuple)):
            sanitized[f"{key}_type"] = "list"
            sanitized[f"{key}_length"] = len(value)
        elif isinstance(value, dict):
            sanitized[f"{key}_type"] = "dict"
            sanitized[f"{key}_keys"] = sorted(str(item) for item in value)
        else:
            sanitized[f"{key}_type"] = type(value).__name__
    return sanitized


class JsonlAuditLogger:
    """Append-only JSONL session log and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: SearchEvent) -> None:
        """Append one event as a JSON object line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read the most recent events, optionally bounded below by timestamp."""
        if limit < 1 or not self._path.exists():
            return []
        entries: list[dict[str, object]] = []
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if since is not None:
                    ts = record.get("timestamp")
                    if not isinstance(ts, str) or ts < since:
                        continue
                entries.append(record)
        return entries[-limit:]
