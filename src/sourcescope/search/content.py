"""Per-file line matching for content search."""

from __future__ import annotations

import heapq
import logging
import re
from dataclasses import dataclass

from sourcescope.index.models import Candidate
from sourcescope.search.config import SearchConfig

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SearchMatch:
    """One matching line; ``column`` is the first match of the term on that line."""

    line_number: int
    line_content: str
    column: int


@dataclass(slots=True, frozen=True)
class FileSearchResult:
    """Line matches for one file, ordered by line number."""

    candidate: Candidate
    matches: tuple[SearchMatch, ...]
    project_name: str = ""

    @property
    def match_count(self) -> int:
        return len(self.matches)

    def to_dict(self) -> dict[str, object]:
        return {
            "project": self.project_name,
            "path": self.candidate.identifier,
            "match_count": self.match_count,
            "matches": [
                {
                    "line_number": match.line_number,
                    "column": match.column,
                    "line_content": match.line_content,
                }
                for match in self.matches
            ],
        }


def create_search_regex(
    query: str, case_sensitive: bool, is_regex: bool
) -> re.Pattern[str] | None:
    """Compile one term; an invalid pattern yields None."""
    flags = 0 if case_sensitive else re.IGNORECASE
    source = query if is_regex else re.escape(query)
    try:
        return re.compile(source, flags)
    except re.error as error:
        logger.debug("ignoring invalid search pattern %r: %s", query, error)
        return None


def split_lines(content: str) -> list[str]:
    """Split on ``\\n`` and strip a trailing ``\\r`` from each line."""
    return [line[:-1] if line.endswith("\r") else line for line in content.split("\n")]


def perform_search_in_content(
    content: str, query: str, case_sensitive: bool, is_regex: bool
) -> list[SearchMatch]:
    """Return every line containing ``query``, in line order."""
    if not query:
        return []
    regex = create_search_regex(query, case_sensitive, is_regex)
    if regex is None:
        return []
    matches: list[SearchMatch] = []
    for line_number, line in enumerate(split_lines(content)):
        found = regex.search(line)
        if found is None:
            continue
        matches.append(
            SearchMatch(line_number=line_number, line_content=line, column=found.start())
        )
    return matches


def search_content(content: str, config: SearchConfig) -> list[SearchMatch]:
    """Search each term independently and merge by ascending line number.

    A line matched by several terms appears once per term.
    """
    per_term = [
        perform_search_in_content(content, term, not config.ignore_case, config.is_regex)
        for term in config.queries()
    ]
    return list(heapq.merge(*per_term, key=lambda match: match.line_number))
