"""Project and content-provider collaborators consumed by the search scope."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Protocol

from sourcescope.index.candidates import CandidateIndex
from sourcescope.index.models import Candidate
from sourcescope.search.config import SearchConfig
from sourcescope.search.progress import ProgressSink

PathPredicate = Callable[[str], bool]


class ProjectType(str, Enum):
    FILE_SYSTEM = "filesystem"
    NETWORK = "network"
    CONTENT_SCRIPTS = "contentscripts"
    SNIPPETS = "snippets"
    SERVICE = "service"


class ContentProvider(Protocol):
    """Supplies current text for candidates."""

    def is_dirty(self, candidate: Candidate) -> bool: ...

    def working_copy(self, candidate: Candidate) -> str: ...

    async def check_content_updated(self, candidate: Candidate) -> None: ...

    async def fetch_content(self, candidate: Candidate) -> str | None: ...


class ProjectSource(Protocol):
    """A named group of candidates with its own content index."""

    @property
    def name(self) -> str: ...

    def list_candidates(self) -> list[Candidate]: ...

    def candidate(self, identifier: str) -> Candidate | None: ...

    def display_path(self, candidate: Candidate) -> str: ...

    async def index_content(self, progress: ProgressSink) -> None: ...

    async def find_matching_candidates(
        self, config: SearchConfig, path_predicate: PathPredicate, progress: ProgressSink
    ) -> list[str]: ...

    def is_service_project(self) -> bool: ...

    def is_content_script_project(self) -> bool: ...

    def is_network_project(self) -> bool: ...


class SearchableProject(ProjectSource, ContentProvider, Protocol):
    """A project that is also the content provider of its own candidates."""


class BaseProject:
    """Candidate bookkeeping and unsaved working copies shared by projects."""

    def __init__(self, name: str, project_type: ProjectType) -> None:
        self._name = name
        self._type = project_type
        self._candidates = CandidateIndex()
        self._working_copies: dict[str, str] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def project_type(self) -> ProjectType:
        return self._type

    @property
    def candidates(self) -> CandidateIndex:
        return self._candidates

    def list_candidates(self) -> list[Candidate]:
        return self._candidates.all()

    def candidate(self, identifier: str) -> Candidate | None:
        return self._candidates.get(identifier)

    def display_path(self, candidate: Candidate) -> str:
        """Return the path shown to users, prefixed by the project name."""
        if not self._name:
            return candidate.identifier
        return f"{self._name}/{candidate.identifier}"

    def is_service_project(self) -> bool:
        return self._type is ProjectType.SERVICE

    def is_content_script_project(self) -> bool:
        return self._type is ProjectType.CONTENT_SCRIPTS

    def is_network_project(self) -> bool:
        return self._type is ProjectType.NETWORK

    def is_dirty(self, candidate: Candidate) -> bool:
        return candidate.identifier in self._working_copies

    def working_copy(self, candidate: Candidate) -> str:
        """Return unsaved text; raises KeyError for clean candidates."""
        return self._working_copies[candidate.identifier]

    def set_working_copy(self, identifier: str, text: str) -> None:
        """Record unsaved edits for a registered candidate."""
        if identifier not in self._candidates:
            raise KeyError(identifier)
        self._working_copies[identifier] = text

    def discard_working_copy(self, identifier: str) -> None:
        self._working_copies.pop(identifier, None)

    def dirty_identifiers(self) -> list[str]:
        return sorted(self._working_copies)
