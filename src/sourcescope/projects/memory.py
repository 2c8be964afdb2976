"""Project whose documents live in memory."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping

from sourcescope.index.content import ContentIndex
from sourcescope.index.models import Candidate
from sourcescope.projects.base import BaseProject, PathPredicate, ProjectType
from sourcescope.search.config import SearchConfig
from sourcescope.search.content import search_content
from sourcescope.search.progress import ProgressSink


class InMemoryProject(BaseProject):
    """Documents held as strings, such as network resources or snippets.

    Until ``index_content`` has run, ``find_matching_candidates`` falls back
    to scanning stored content directly.
    """

    def __init__(
        self,
        name: str,
        files: Mapping[str, str | None] | None = None,
        project_type: ProjectType = ProjectType.NETWORK,
    ) -> None:
        super().__init__(name=name, project_type=project_type)
        self._contents: dict[str, str | None] = {}
        self._index: ContentIndex | None = None
        for path, content in (files or {}).items():
            self.add_file(path, content)

    @property
    def is_indexed(self) -> bool:
        return self._index is not None

    def add_file(self, path: str, content: str | None, handle: object = None) -> Candidate:
        """Register a document; ``None`` content simulates an unavailable resource.

        Raises ValueError when ``path`` is already registered.
        """
        candidate = Candidate(identifier=path, handle=handle)
        if not self._candidates.add(candidate):
            raise ValueError(f"duplicate document path: {path}")
        self._contents[path] = content
        if self._index is not None and content is not None:
            self._index.index(path, content)
        return candidate

    def remove_file(self, path: str) -> None:
        self._candidates.remove(path)
        self._contents.pop(path, None)
        self.discard_working_copy(path)
        if self._index is not None:
            self._index.discard(path)

    def commit_working_copy(self, identifier: str) -> None:
        """Save unsaved edits as the stored content."""
        text = self._working_copies.pop(identifier, None)
        if text is None:
            return
        self._contents[identifier] = text
        if self._index is not None:
            self._index.index(identifier, text)

    async def check_content_updated(self, candidate: Candidate) -> None:
        await asyncio.sleep(0)

    async def fetch_content(self, candidate: Candidate) -> str | None:
        await asyncio.sleep(0)
        return self._contents.get(candidate.identifier)

    async def index_content(self, progress: ProgressSink) -> None:
        index = ContentIndex()
        paths = self._candidates.identifiers()
        progress.set_total_work(len(paths))
        for path in paths:
            if progress.is_canceled():
                return
            content = self._contents.get(path)
            if content is not None:
                index.index(path, content)
            progress.worked(1)
            await asyncio.sleep(0)
        self._index = index
        progress.done()

    async def find_matching_candidates(
        self, config: SearchConfig, path_predicate: PathPredicate, progress: ProgressSink
    ) -> list[str]:
        paths = [path for path in self._candidates.identifiers() if path_predicate(path)]
        progress.set_total_work(len(paths))
        if self._index is not None:
            allowed = set(self._index.candidates(config.queries(), config.is_regex))
            progress.done()
            return sorted(path for path in paths if path in allowed)

        output: list[str] = []
        content_query = config.has_content_query()
        for path in paths:
            if progress.is_canceled():
                break
            content = self._contents.get(path)
            if content is not None and (not content_query or search_content(content, config)):
                output.append(path)
            progress.worked(1)
        progress.done()
        return sorted(output)
