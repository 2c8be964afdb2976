"""Typed models for candidates and indexing state."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class Candidate:
    """Searchable path-like identifier plus the caller's document handle."""

    identifier: str
    handle: object = field(default=None, compare=False, hash=False, repr=False)


@dataclass(slots=True, frozen=True)
class FileRecord:
    """Represents a file tracked by a file-system project index."""

    path: str
    size: int
    mtime_ns: int
    content_hash: str


@dataclass(slots=True, frozen=True)
class IndexDelta:
    """Deterministic change classification for index refresh."""

    added: tuple[str, ...]
    updated: tuple[str, ...]
    unchanged: tuple[str, ...]
    removed: tuple[str, ...]
