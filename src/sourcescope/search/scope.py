"""Project-wide content search with cooperative cancellation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from sourcescope.config import DEFAULT_MAX_CONCURRENT_FILES
from sourcescope.index.models import Candidate
from sourcescope.logging import JsonlAuditLogger, SearchEvent, sanitize_arguments, utc_timestamp
from sourcescope.search.config import SearchConfig
from sourcescope.search.content import FileSearchResult, SearchMatch, search_content
from sourcescope.search.progress import CompositeProgress, ProgressSink

if TYPE_CHECKING:
    from sourcescope.projects.base import SearchableProject

logger = logging.getLogger(__name__)

ResultCallback = Callable[[FileSearchResult], None]
DoneCallback = Callable[[bool], None]


class ScopeState(str, Enum):
    IDLE = "idle"
    INDEXING = "indexing"
    SEARCHING = "searching"
    CANCELLED = "cancelled"


@dataclass(slots=True, frozen=True)
class ScopedFile:
    """A candidate admitted to the content scan, with its owning project."""

    project: SearchableProject = field(compare=False)
    candidate: Candidate
    display_path: str
    dirty: bool
    network: bool

    def sort_key(self) -> tuple[bool, bool, str]:
        """Unsaved files first, then network-backed files, then display path."""
        return (not self.dirty, not self.network, self.display_path)


@dataclass(slots=True)
class SessionCounters:
    admitted: int = 0
    scanned: int = 0
    reported: int = 0
    matches: int = 0
    unavailable: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "admitted": self.admitted,
            "scanned": self.scanned,
            "reported": self.reported,
            "matches": self.matches,
            "unavailable": self.unavailable,
        }


class _SessionProgress:
    """Forwards to a sink and reports cancellation once the session is stale."""

    def __init__(self, scope: SearchScope, session_id: int, sink: ProgressSink) -> None:
        self._scope = scope
        self._session_id = session_id
        self._sink = sink

    def set_total_work(self, total: float) -> None:
        if self.is_current():
            self._sink.set_total_work(total)

    def worked(self, amount: float = 1) -> None:
        if self.is_current():
            self._sink.worked(amount)

    def done(self) -> None:
        if self.is_current():
            self._sink.done()

    def is_current(self) -> bool:
        return self._scope.session_id == self._session_id

    def is_canceled(self) -> bool:
        return not self.is_current() or self._sink.is_canceled()


def intersect_ordered(left: Sequence[str], right: Sequence[str]) -> list[str]:
    """Intersect two ascending lists in one pass."""
    output: list[str] = []
    i = j = 0
    while i < len(left) and j < len(right):
        if left[i] == right[j]:
            output.append(left[i])
            i += 1
            j += 1
        elif left[i] < right[j]:
            i += 1
        else:
            j += 1
    return output


def merge_ordered(left: Sequence[str], right: Sequence[str]) -> list[str]:
    """Merge two ascending lists, keeping one copy of shared items."""
    output: list[str] = []
    i = j = 0
    while i < len(left) and j < len(right):
        if left[i] == right[j]:
            output.append(left[i])
            i += 1
            j += 1
        elif left[i] < right[j]:
            output.append(left[i])
            i += 1
        else:
            output.append(right[j])
            j += 1
    output.extend(left[i:])
    output.extend(right[j:])
    return output


class SearchScope:
    """Searches the content of every eligible project.

    Each ``perform_indexing`` or ``perform_search`` call starts a new session
    and makes every earlier session stale. Stale sessions finish quietly: they
    report no further results and call ``on_done(False)``. A session cancelled
    through its progress sink is ``CANCELLED`` while ``on_done`` runs and
    ``IDLE`` afterwards.
    """

    def __init__(
        self,
        projects: Sequence[SearchableProject] = (),
        max_concurrent_files: int = DEFAULT_MAX_CONCURRENT_FILES,
        search_in_content_scripts: bool = False,
        audit_logger: JsonlAuditLogger | None = None,
    ) -> None:
        if max_concurrent_files < 1:
            raise ValueError("max_concurrent_files must be a positive integer.")
        self._projects: list[SearchableProject] = list(projects)
        self._max_concurrent_files = max_concurrent_files
        self._search_in_content_scripts = search_in_content_scripts
        self._audit_logger = audit_logger
        self._session_id = 0
        self._state = ScopeState.IDLE

    @property
    def session_id(self) -> int:
        return self._session_id

    @property
    def state(self) -> ScopeState:
        return self._state

    @property
    def max_concurrent_files(self) -> int:
        return self._max_concurrent_files

    def add_project(self, project: SearchableProject) -> None:
        if project not in self._projects:
            self._projects.append(project)

    def remove_project(self, project: SearchableProject) -> None:
        if project in self._projects:
            self._projects.remove(project)

    def set_search_in_content_scripts(self, enabled: bool) -> None:
        self._search_in_content_scripts = enabled

    def projects(self) -> list[SearchableProject]:
        """Return projects taking part in indexing and search."""
        return [
            project
            for project in self._projects
            if not project.is_service_project()
            and (self._search_in_content_scripts or not project.is_content_script_project())
        ]

    def stop_search(self) -> None:
        """Invalidate the running session, if any."""
        self._session_id += 1
        self._state = ScopeState.IDLE

    def _start_session(self) -> int:
        self._session_id += 1
        return self._session_id

    def _set_state(self, session_id: int, state: ScopeState) -> None:
        if session_id == self._session_id:
            self._state = state

    async def perform_indexing(self, progress: ProgressSink) -> bool:
        """Build or refresh every eligible project's content index.

        Returns False when the pass was superseded or cancelled.
        """
        session_id = self._start_session()
        session_progress = _SessionProgress(self, session_id, progress)
        completed = await self._index_projects(session_id, session_progress)
        if completed:
            session_progress.done()
        self._set_state(session_id, ScopeState.IDLE)
        return completed

    async def _index_projects(self, session_id: int, progress: _SessionProgress) -> bool:
        self._set_state(session_id, ScopeState.INDEXING)
        projects = self.projects()
        if not projects:
            progress.done()
            return True
        composite = CompositeProgress(progress)
        sub_progresses = [
            composite.create_sub_progress(max(1, len(project.list_candidates())))
            for project in projects
        ]
        for project, sub_progress in zip(projects, sub_progresses, strict=True):
            if progress.is_canceled():
                break
            try:
                await project.index_content(sub_progress)
            except Exception:
                logger.debug("indexing failed for project %r", project.name, exc_info=True)
                sub_progress.done()
        if not progress.is_current():
            return False
        if progress.is_canceled():
            self._set_state(session_id, ScopeState.CANCELLED)
            return False
        return True

    async def perform_search(
        self,
        config: SearchConfig,
        progress: ProgressSink,
        on_result: ResultCallback,
        on_done: DoneCallback,
    ) -> bool:
        """Run one search session and return what ``on_done`` was given."""
        session_id = self._start_session()
        session_progress = _SessionProgress(self, session_id, progress)
        counters = SessionCounters()
        composite = CompositeProgress(session_progress)
        index_progress = composite.create_sub_progress()
        find_progress = composite.create_sub_progress()
        content_progress = composite.create_sub_progress(4)

        completed = await self._index_projects(
            session_id, _SessionProgress(self, session_id, index_progress)
        )
        if completed:
            index_progress.done()
            self._set_state(session_id, ScopeState.SEARCHING)
            files = await self._find_matching_files(session_id, config, find_progress)
            if files is not None:
                counters.admitted = len(files)
                completed = await self._search_files(
                    session_id, config, files, content_progress, on_result, counters
                )
            else:
                completed = False

        if completed:
            outcome = "completed"
            session_progress.done()
            self._set_state(session_id, ScopeState.IDLE)
        elif session_id != self._session_id:
            outcome = "preempted"
        else:
            outcome = "cancelled"
            self._set_state(session_id, ScopeState.CANCELLED)
        self._log_session(session_id, "search", outcome, config, counters)
        on_done(completed)
        if outcome == "cancelled":
            self._set_state(session_id, ScopeState.IDLE)
        return completed

    async def _find_matching_files(
        self, session_id: int, config: SearchConfig, progress: ProgressSink
    ) -> list[ScopedFile] | None:
        projects = self.projects()
        composite = CompositeProgress(progress)
        sub_progresses = [
            composite.create_sub_progress(max(1, len(project.list_candidates())))
            for project in projects
        ]
        gathered = await asyncio.gather(
            *(
                self._project_matching_files(project, config, sub_progress)
                for project, sub_progress in zip(projects, sub_progresses, strict=True)
            ),
            return_exceptions=True,
        )
        per_project: list[list[ScopedFile]] = []
        for project, sub_progress, result in zip(projects, sub_progresses, gathered, strict=True):
            if isinstance(result, Exception):
                logger.debug(
                    "finding files failed for project %r", project.name, exc_info=result
                )
                sub_progress.done()
                continue
            if isinstance(result, BaseException):
                raise result
            per_project.append(result)
        if session_id != self._session_id or progress.is_canceled():
            return None
        if not projects:
            progress.done()

        merged = sorted(
            (item for files in per_project for item in files), key=ScopedFile.sort_key
        )
        seen: set[str] = set()
        output: list[ScopedFile] = []
        for item in merged:
            if item.display_path in seen:
                continue
            seen.add(item.display_path)
            output.append(item)
        return output

    async def _project_matching_files(
        self, project: SearchableProject, config: SearchConfig, progress: ProgressSink
    ) -> list[ScopedFile]:
        path_filtered = self._files_matching_path_filter(project, config, dirty_only=False)
        allowed = set(path_filtered)
        found = await project.find_matching_candidates(config, allowed.__contains__, progress)
        files = intersect_ordered(sorted(found), path_filtered)
        dirty = self._files_matching_path_filter(project, config, dirty_only=True)
        files = merge_ordered(files, dirty)
        output: list[ScopedFile] = []
        for identifier in files:
            candidate = project.candidate(identifier)
            if candidate is None:
                continue
            output.append(
                ScopedFile(
                    project=project,
                    candidate=candidate,
                    display_path=project.display_path(candidate),
                    dirty=project.is_dirty(candidate),
                    network=project.is_network_project(),
                )
            )
        return output

    @staticmethod
    def _files_matching_path_filter(
        project: SearchableProject, config: SearchConfig, dirty_only: bool
    ) -> list[str]:
        output: list[str] = []
        for candidate in project.list_candidates():
            if dirty_only and not project.is_dirty(candidate):
                continue
            if config.file_path_matches(project.display_path(candidate)):
                output.append(candidate.identifier)
        output.sort()
        return output

    async def _search_files(
        self,
        session_id: int,
        config: SearchConfig,
        files: list[ScopedFile],
        progress: ProgressSink,
        on_result: ResultCallback,
        counters: SessionCounters,
    ) -> bool:
        if not files:
            progress.done()
            return True
        progress.set_total_work(len(files))
        semaphore = asyncio.Semaphore(self._max_concurrent_files)

        async def search_one(item: ScopedFile) -> None:
            async with semaphore:
                if session_id != self._session_id or progress.is_canceled():
                    return
                await self._search_in_file(session_id, config, item, progress, on_result, counters)

        await asyncio.gather(*(search_one(item) for item in files))
        if session_id != self._session_id or progress.is_canceled():
            return False
        progress.done()
        return True

    async def _search_in_file(
        self,
        session_id: int,
        config: SearchConfig,
        item: ScopedFile,
        progress: ProgressSink,
        on_result: ResultCallback,
        counters: SessionCounters,
    ) -> None:
        project = item.project
        candidate = item.candidate
        content: str | None
        try:
            if project.is_dirty(candidate):
                content = project.working_copy(candidate)
            else:
                await project.check_content_updated(candidate)
                if session_id != self._session_id:
                    return
                content = await project.fetch_content(candidate)
        except Exception:
            logger.debug("content unavailable for %s", item.display_path, exc_info=True)
            content = None
        if session_id != self._session_id:
            logger.debug("dropping stale result for %s", item.display_path)
            return

        counters.scanned += 1
        progress.worked(1)
        if content is None:
            counters.unavailable += 1
            logger.debug("content unavailable for %s", item.display_path)

        matches: list[SearchMatch]
        if not config.has_content_query():
            matches = []
        elif content is None:
            return
        else:
            matches = search_content(content, config)
            if not matches:
                return
        counters.reported += 1
        counters.matches += len(matches)
        on_result(
            FileSearchResult(candidate=candidate, matches=tuple(matches), project_name=project.name)
        )

    def _log_session(
        self,
        session_id: int,
        operation: str,
        outcome: str,
        config: SearchConfig,
        counters: SessionCounters,
    ) -> None:
        if self._audit_logger is None:
            return
        arguments = config.to_arguments()
        arguments["max_concurrent_files"] = self._max_concurrent_files
        self._audit_logger.append(
            SearchEvent(
                timestamp=utc_timestamp(),
                session_id=session_id,
                operation=operation,
                outcome=outcome,
                arguments=sanitize_arguments(arguments),
                counters=counters.to_dict(),
            )
        )
