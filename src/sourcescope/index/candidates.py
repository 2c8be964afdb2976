"""Insertion-ordered registry of searchable candidates."""

from __future__ import annotations

from collections.abc import Callable, Iterator

from sourcescope.index.models import Candidate

CandidatePredicate = Callable[[Candidate], bool]


class CandidateIndex:
    """Ordered candidate collection keyed by identifier.

    Adding an identifier that is already present keeps the original entry and
    its position. Removing an unknown candidate does nothing.
    """

    def __init__(self, candidates: list[Candidate] | None = None) -> None:
        self._entries: dict[str, Candidate] = {}
        self._filter: CandidatePredicate | None = None
        for candidate in candidates or []:
            self.add(candidate)

    def add(self, candidate: Candidate) -> bool:
        """Register a candidate; return False when the identifier is taken."""
        if candidate.identifier in self._entries:
            return False
        self._entries[candidate.identifier] = candidate
        return True

    def remove(self, candidate: Candidate | str) -> bool:
        """Unregister a candidate or identifier; return False for non-members."""
        identifier = candidate if isinstance(candidate, str) else candidate.identifier
        return self._entries.pop(identifier, None) is not None

    def get(self, identifier: str) -> Candidate | None:
        """Return the registered candidate for an identifier."""
        return self._entries.get(identifier)

    def set_filter(self, predicate: CandidatePredicate | None) -> None:
        """Install the predicate applied by ``all()``; None clears it."""
        self._filter = predicate

    def all(self) -> list[Candidate]:
        """Return candidates in insertion order, filtered by the current predicate."""
        if self._filter is None:
            return list(self._entries.values())
        predicate = self._filter
        return [candidate for candidate in self._entries.values() if predicate(candidate)]

    def identifiers(self) -> list[str]:
        """Return every registered identifier in insertion order, ignoring the filter."""
        return list(self._entries.keys())

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Candidate):
            return item.identifier in self._entries
        if isinstance(item, str):
            return item in self._entries
        return False

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._entries)
