"""Deterministic file discovery and incremental change detection."""

from __future__ import annotations

import codecs
import fnmatch
import hashlib
import os
from collections.abc import Iterator
from pathlib import Path

from sourcescope.config import IndexConfig
from sourcescope.index.models import FileRecord, IndexDelta

_BINARY_SNIFF_BYTES = 4096
_HASH_CHUNK_BYTES = 128 * 1024


def discover_files(
    root: Path,
    config: IndexConfig,
    previous_records: dict[str, FileRecord] | None = None,
    stats: dict[str, int] | None = None,
) -> list[FileRecord]:
    """Discover indexable text files sorted by relative path.

    Files whose size and mtime match ``previous_records`` keep their stored
    hash instead of being re-read.
    """
    resolved = root.resolve()
    include_extensions = {extension.lower() for extension in config.include_extensions}
    prior = previous_records or {}
    counters = {
        "seen": 0,
        "excluded_by_glob": 0,
        "excluded_by_extension": 0,
        "binary_excluded": 0,
        "reused": 0,
        "hashed": 0,
        "unreadable": 0,
    }
    records: list[FileRecord] = []
    walked = sorted(_walk_files(resolved, config.exclude_globs), key=lambda item: item[0])
    for relative, entry in walked:
        counters["seen"] += 1
        if should_exclude(relative, config.exclude_globs):
            counters["excluded_by_glob"] += 1
            continue
        if Path(relative).suffix.lower() not in include_extensions:
            counters["excluded_by_extension"] += 1
            continue
        try:
            stat = entry.stat(follow_symlinks=False)
        except OSError:
            continue
        previous = prior.get(relative)
        if (
            previous is not None
            and previous.size == stat.st_size
            and previous.mtime_ns == stat.st_mtime_ns
        ):
            records.append(previous)
            counters["reused"] += 1
            continue
        full_path = Path(entry.path)
        if is_binary_file(full_path):
            counters["binary_excluded"] += 1
            continue
        try:
            content_hash = sha256_file(full_path)
        except OSError:
            counters["unreadable"] += 1
            continue
        counters["hashed"] += 1
        records.append(
            FileRecord(
                path=relative,
                size=stat.st_size,
                mtime_ns=stat.st_mtime_ns,
                content_hash=content_hash,
            )
        )
    if stats is not None:
        stats.update(counters)
    return records


def _walk_files(
    root: Path, exclude_globs: tuple[str, ...]
) -> Iterator[tuple[str, os.DirEntry[str]]]:
    pruned = _excluded_dir_names(exclude_globs)
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                children = list(entries)
        except OSError:
            continue
        for entry in children:
            relative = Path(entry.path).relative_to(root).as_posix()
            if entry.is_dir(follow_symlinks=False):
                if entry.name in pruned and should_exclude(f"{relative}/", exclude_globs):
                    continue
                stack.append(Path(entry.path))
            elif entry.is_file(follow_symlinks=False):
                yield relative, entry


def detect_index_delta(
    previous: dict[str, FileRecord],
    current_records: list[FileRecord],
) -> IndexDelta:
    """Compute deterministic added/updated/unchanged/removed sets."""
    current = record_map(current_records)
    previous_paths = set(previous)
    current_paths = set(current)
    shared = sorted(previous_paths & current_paths)
    return IndexDelta(
        added=tuple(sorted(current_paths - previous_paths)),
        updated=tuple(path for path in shared if previous[path] != current[path]),
        unchanged=tuple(path for path in shared if previous[path] == current[path]),
        removed=tuple(sorted(previous_paths - current_paths)),
    )


def record_map(records: list[FileRecord]) -> dict[str, FileRecord]:
    """Map records by relative path."""
    return {record.path: record for record in records}


def should_exclude(relative_path: str, exclude_globs: tuple[str, ...]) -> bool:
    """Return True when a path matches configured ignore globs."""
    anchored = f"/{relative_path}"
    return any(
        fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(anchored, pattern)
        for pattern in exclude_globs
    )


def _excluded_dir_names(exclude_globs: tuple[str, ...]) -> set[str]:
    """Directory names that ``**/name/**`` globs allow pruning without descending."""
    output: set[str] = set()
    for pattern in exclude_globs:
        if not pattern.startswith("**/") or not pattern.endswith("/**"):
            continue
        name = pattern[3:-3].strip("/")
        if name and not any(char in name for char in "*?[]{}"):
            output.add(name)
    return output


def sha256_file(path: Path) -> str:
    """Compute SHA-256 hash in chunked reads."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_HASH_CHUNK_BYTES), b""):
            digest.update(chunk)
    return digest.hexdigest()


def is_binary_file(path: Path) -> bool:
    """Sniff the leading bytes to exclude binary files."""
    try:
        with path.open("rb") as handle:
            sample = handle.read(_BINARY_SNIFF_BYTES)
    except OSError:
        return True
    if b"\x00" in sample:
        return True
    try:
        codecs.getincrementaldecoder("utf-8")().decode(sample, final=False)
    except UnicodeDecodeError:
        return True
    return False
