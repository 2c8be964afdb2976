"""Ranked open-file filtering over a candidate index."""

from __future__ import annotations

import heapq
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from sourcescope.index.candidates import CandidateIndex
from sourcescope.index.models import Candidate
from sourcescope.scoring.path_score import FilePathScorer

MIN_SCORED_QUERY_LENGTH = 2
DEFAULT_WEIGHT = 1
CONTENT_WEIGHT = 10

_LOCATION_SUFFIX = re.compile(r"^(?P<query>.*?):(?P<line>\d+)(?::(?P<column>\d+))?$", re.DOTALL)

SecondaryKey = Callable[[Candidate], object]


@dataclass(slots=True, frozen=True)
class QueryLocation:
    """Query text with an optional zero-based ``:line:column`` location."""

    query: str
    line: int | None = None
    column: int | None = None
    suffix: str = ""


@dataclass(slots=True, frozen=True)
class RankedEntry:
    """One ranked candidate."""

    candidate: Candidate
    score: float


def parse_location(raw: str) -> QueryLocation:
    """Split a trailing ``:<line>[:<column>]`` suffix off a query.

    Line and column are one-based in the input and zero-based in the result.
    A suffix that is not all digits leaves the whole input as the query.
    """
    text = raw.strip()
    match = _LOCATION_SUFFIX.match(text)
    if match is None:
        return QueryLocation(query=text)
    column_text = match.group("column")
    return QueryLocation(
        query=match.group("query"),
        line=max(0, int(match.group("line")) - 1),
        column=max(0, int(column_text) - 1) if column_text is not None else None,
        suffix=text[len(match.group("query")) :],
    )


def rewrite_query(raw: str) -> str:
    """Return the query with any location suffix removed."""
    return parse_location(raw).query


def match_ranges(indexes: list[int]) -> list[tuple[int, int]]:
    """Turn ascending match offsets into ``(offset, length)`` highlight ranges."""
    return [(offset, 1) for offset in indexes]


def merge_ranges(ranges: list[tuple[int, int]]) -> list[tuple[int, int]]:
    """Coalesce adjacent ``(offset, length)`` ranges."""
    merged: list[tuple[int, int]] = []
    for offset, length in ranges:
        if merged and merged[-1][0] + merged[-1][1] == offset:
            previous_offset, previous_length = merged[-1]
            merged[-1] = (previous_offset, previous_length + length)
            continue
        merged.append((offset, length))
    return merged


class RankedFilterList:
    """Ranks candidates for a query by default score plus fuzzy path score."""

    def __init__(
        self,
        index: CandidateIndex,
        default_scores: Mapping[str, float] | None = None,
        default_weight: int = DEFAULT_WEIGHT,
        content_weight: int = CONTENT_WEIGHT,
        secondary_key: SecondaryKey | None = None,
    ) -> None:
        self._index = index
        self._default_scores: Mapping[str, float] = default_scores or {}
        self._default_weight = default_weight
        self._content_weight = content_weight
        self._secondary_key = secondary_key
        self._query: str | None = None
        self._scorer: FilePathScorer | None = None

    def set_default_scores(self, default_scores: Mapping[str, float] | None) -> None:
        """Replace the recency/usage bias map, keyed by candidate identifier."""
        self._default_scores = default_scores or {}

    def default_score(self, candidate: Candidate) -> float:
        return self._default_scores.get(candidate.identifier, 0)

    def scorer_for(self, query: str) -> FilePathScorer:
        """Return the cached scorer, rebuilding it only when the query changes."""
        if self._scorer is None or self._query != query:
            self._query = query
            self._scorer = FilePathScorer(query)
        return self._scorer

    def item_score(self, candidate: Candidate, query: str) -> float:
        """Score one candidate; path-scored queries give 0 for non-matches."""
        query = rewrite_query(query)
        default = self.default_score(candidate) * self._default_weight
        if len(query) < MIN_SCORED_QUERY_LENGTH:
            return default
        path_score = self.scorer_for(query).score(candidate.identifier)
        if path_score <= 0:
            return 0
        return default + path_score * self._content_weight

    def rank(self, query: str, limit: int) -> list[RankedEntry]:
        """Return at most ``limit`` candidates in descending score order."""
        if limit < 1:
            return []
        query = rewrite_query(query)
        candidates = self._index.all()
        scored: list[tuple[int, RankedEntry]] = []
        if len(query) < MIN_SCORED_QUERY_LENGTH:
            for position, candidate in enumerate(candidates):
                entry = RankedEntry(candidate=candidate, score=self.default_score(candidate))
                scored.append((position, entry))
        else:
            scorer = self.scorer_for(query)
            for position, candidate in enumerate(candidates):
                if not scorer.may_match(candidate.identifier):
                    continue
                path_score = scorer.score(candidate.identifier)
                if path_score <= 0:
                    continue
                total = (
                    self.default_score(candidate) * self._default_weight
                    + path_score * self._content_weight
                )
                scored.append((position, RankedEntry(candidate=candidate, score=total)))

        secondary = self._secondary_key
        if secondary is None:
            best = heapq.nsmallest(limit, scored, key=lambda item: (-item[1].score, item[0]))
        else:
            best = heapq.nsmallest(
                limit,
                scored,
                key=lambda item: (-item[1].score, secondary(item[1].candidate), item[0]),
            )
        return [entry for _, entry in best]

    def highlight(self, candidate: Candidate, query: str) -> list[tuple[int, int]]:
        """Return merged highlight ranges of ``query`` inside the candidate identifier."""
        query = rewrite_query(query)
        if not query:
            return []
        indexes: list[int] = []
        self.scorer_for(query).score(candidate.identifier, indexes)
        return merge_ranges(match_ranges(indexes))

    @staticmethod
    def display_text(entry: RankedEntry, raw_query: str) -> str:
        """Return the entry identifier with the query's location suffix re-attached."""
        return f"{entry.candidate.identifier}{parse_location(raw_query).suffix}"
