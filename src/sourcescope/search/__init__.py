"""Project-wide content search package."""

from .config import FileQuery, SearchConfig
from .content import (
    FileSearchResult,
    SearchMatch,
    create_search_regex,
    perform_search_in_content,
    search_content,
)
from .progress import CompositeProgress, Progress, ProgressSink, SubProgress
from .scope import (
    DoneCallback,
    ResultCallback,
    ScopedFile,
    ScopeState,
    SearchScope,
    intersect_ordered,
    merge_ordered,
)

__all__ = [
    "CompositeProgress",
    "DoneCallback",
    "FileQuery",
    "FileSearchResult",
    "Progress",
    "ProgressSink",
    "ResultCallback",
    "ScopeState",
    "ScopedFile",
    "SearchConfig",
    "SearchMatch",
    "SearchScope",
    "SubProgress",
    "create_search_regex",
    "intersect_ordered",
    "merge_ordered",
    "perform_search_in_content",
    "search_content",
]
