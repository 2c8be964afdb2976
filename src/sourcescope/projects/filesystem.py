"""Project backed by a directory on disk."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path

from sourcescope.config import IndexConfig
from sourcescope.index.content import ContentIndex
from sourcescope.index.discovery import detect_index_delta, discover_files
from sourcescope.index.models import Candidate, FileRecord
from sourcescope.logging import utc_timestamp
from sourcescope.projects.base import BaseProject, PathPredicate, ProjectType
from sourcescope.projects.paths import PathBlockedError, resolve_project_path
from sourcescope.search.config import SearchConfig
from sourcescope.search.progress import ProgressSink

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class RefreshResult:
    """Outcome of one discovery pass."""

    added: tuple[str, ...]
    updated: tuple[str, ...]
    removed: tuple[str, ...]
    duration_ms: int
    timestamp: str

    def to_dict(self) -> dict[str, object]:
        return {
            "added": len(self.added),
            "updated": len(self.updated),
            "removed": len(self.removed),
            "duration_ms": self.duration_ms,
            "timestamp": self.timestamp,
        }


class FileSystemProject(BaseProject):
    """Files under ``root`` matching the index configuration."""

    def __init__(
        self,
        root: Path,
        index_config: IndexConfig,
        name: str | None = None,
        project_type: ProjectType = ProjectType.FILE_SYSTEM,
    ) -> None:
        resolved = root.resolve()
        super().__init__(name=resolved.name if name is None else name, project_type=project_type)
        self._root = resolved
        self._index_config = index_config
        self._records: dict[str, FileRecord] = {}
        self._index = ContentIndex()
        self._last_refresh: str | None = None

    @property
    def root(self) -> Path:
        return self._root

    @property
    def last_refresh_timestamp(self) -> str | None:
        return self._last_refresh

    def refresh(self) -> RefreshResult:
        """Rediscover files and reconcile candidates, leaving content unindexed."""
        started = time.perf_counter()
        current = discover_files(self._root, self._index_config, previous_records=self._records)
        return self._apply_discovery(current, started)

    async def refresh_in_thread(self) -> RefreshResult:
        """Run ``refresh`` with the directory walk and hashing off the event loop."""
        started = time.perf_counter()
        current = await asyncio.to_thread(
            discover_files, self._root, self._index_config, dict(self._records)
        )
        return self._apply_discovery(current, started)

    def _apply_discovery(self, current: list[FileRecord], started: float) -> RefreshResult:
        delta = detect_index_delta(previous=self._records, current_records=current)
        for path in delta.removed:
            self._index.discard(path)
        current_paths = {record.path for record in current}
        for identifier in self._candidates.identifiers():
            # files deleted on disk stay listed while they hold unsaved edits
            if identifier not in current_paths and identifier not in self._working_copies:
                self._candidates.remove(identifier)
        for path in delta.added:
            self._candidates.add(Candidate(identifier=path, handle=self._root / path))
        self._records = {record.path: record for record in current}
        self._last_refresh = utc_timestamp()
        return RefreshResult(
            added=delta.added,
            updated=delta.updated,
            removed=delta.removed,
            duration_ms=int((time.perf_counter() - started) * 1000),
            timestamp=self._last_refresh,
        )

    async def index_content(self, progress: ProgressSink) -> None:
        """Refresh the file list and index every file whose content is stale."""
        previous = dict(self._records)
        await self.refresh_in_thread()
        stale = [
            path
            for path, record in self._records.items()
            if path not in self._index or previous.get(path) != record
        ]
        progress.set_total_work(len(stale))
        for path in stale:
            if progress.is_canceled():
                return
            text = await self._read(path)
            if text is None:
                self._index.discard(path)
            else:
                self._index.index(path, text)
            progress.worked(1)
        progress.done()

    async def find_matching_candidates(
        self, config: SearchConfig, path_predicate: PathPredicate, progress: ProgressSink
    ) -> list[str]:
        progress.set_total_work(1)
        indexed = self._index.candidates(config.queries(), config.is_regex)
        output = [path for path in indexed if path in self._candidates and path_predicate(path)]
        progress.done()
        return output

    async def check_content_updated(self, candidate: Candidate) -> None:
        """Re-index a file whose size or mtime changed since discovery."""
        path = candidate.identifier
        record = self._records.get(path)
        try:
            stat = resolve_project_path(self._root, path).stat()
        except (OSError, PathBlockedError):
            return
        if record is not None and (record.size, record.mtime_ns) == (
            stat.st_size,
            stat.st_mtime_ns,
        ):
            return
        text = await self._read(path)
        if text is None:
            return
        self._index.index(path, text)
        if record is not None:
            self._records[path] = FileRecord(
                path=path,
                size=stat.st_size,
                mtime_ns=stat.st_mtime_ns,
                content_hash=record.content_hash,
            )

    async def fetch_content(self, candidate: Candidate) -> str | None:
        return await self._read(candidate.identifier)

    async def _read(self, path: str) -> str | None:
        try:
            full_path = resolve_project_path(self._root, path)
        except PathBlockedError as error:
            logger.debug("refusing to read %s: %s", path, error.reason)
            return None
        try:
            return await asyncio.to_thread(full_path.read_text, encoding="utf-8", errors="replace")
        except OSError as error:
            logger.debug("content unavailable for %s: %s", path, error)
            return None
