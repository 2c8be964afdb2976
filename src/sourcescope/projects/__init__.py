"""Project sources and content providers."""

from .base import (
    BaseProject,
    ContentProvider,
    PathPredicate,
    ProjectSource,
    ProjectType,
    SearchableProject,
)
from .filesystem import FileSystemProject, RefreshResult
from .memory import InMemoryProject
from .paths import PathBlockedError, normalize_path, resolve_project_path

__all__ = [
    "BaseProject",
    "ContentProvider",
    "FileSystemProject",
    "InMemoryProject",
    "PathBlockedError",
    "PathPredicate",
    "ProjectSource",
    "ProjectType",
    "RefreshResult",
    "SearchableProject",
    "normalize_path",
    "resolve_project_path",
]
