"""Trigram content index used to narrow files before a content scan."""

from __future__ import annotations

from collections import defaultdict

GRAM_SIZE = 3


def fold_text(text: str) -> str | None:
    """Fold text so case-insensitive regex equivalents share one form.

    Returns None when a character has no single-character fold, in which case
    the text cannot be narrowed by grams.
    """
    chars: list[str] = []
    for char in text:
        folded = char.upper().lower()
        if len(folded) != 1:
            return None
        chars.append(folded)
    return "".join(chars)


def trigrams(text: str) -> set[str]:
    """Return the case-folded character trigrams of ``text``."""
    folded = fold_text(text)
    if folded is None:
        return set()
    return {folded[pos : pos + GRAM_SIZE] for pos in range(len(folded) - GRAM_SIZE + 1)}


class ContentIndex:
    """In-memory trigram postings per project.

    ``candidates`` may return files that do not actually match (it is a
    superset filter); a content scan decides the real matches.
    """

    def __init__(self) -> None:
        self._grams_by_path: dict[str, frozenset[str]] = {}
        self._paths_by_gram: dict[str, set[str]] = defaultdict(set)
        self._unnarrowed: set[str] = set()
        self._generation = 0

    @property
    def generation(self) -> int:
        """Return a counter bumped on every mutation."""
        return self._generation

    def index(self, path: str, text: str) -> None:
        """Index or re-index one file."""
        self.discard(path)
        if fold_text(text) is None:
            self._unnarrowed.add(path)
        grams = frozenset(trigrams(text))
        self._grams_by_path[path] = grams
        for gram in grams:
            self._paths_by_gram[gram].add(path)
        self._generation += 1

    def discard(self, path: str) -> None:
        """Drop one file from the index; unknown paths are ignored."""
        grams = self._grams_by_path.pop(path, None)
        if grams is None:
            return
        self._unnarrowed.discard(path)
        for gram in grams:
            postings = self._paths_by_gram.get(gram)
            if postings is None:
                continue
            postings.discard(path)
            if not postings:
                del self._paths_by_gram[gram]
        self._generation += 1

    def paths(self) -> list[str]:
        """Return indexed paths sorted."""
        return sorted(self._grams_by_path)

    def candidates(self, terms: list[str], is_regex: bool) -> list[str]:
        """Return sorted paths that may contain at least one of ``terms``."""
        if is_regex or not terms:
            return self.paths()
        output: set[str] = set()
        for term in terms:
            grams = trigrams(term)
            if not grams:
                # too short to narrow by trigrams
                return self.paths()
            output.update(self._paths_with_all(grams))
        output.update(self._unnarrowed)
        return sorted(output)

    def _paths_with_all(self, grams: set[str]) -> set[str]:
        postings: list[set[str]] = []
        for gram in grams:
            paths = self._paths_by_gram.get(gram)
            if paths is None:
                return set()
            postings.append(paths)
        ordered = sorted(postings, key=len)
        result = set(ordered[0])
        for item in ordered[1:]:
            result &= item
            if not result:
                break
        return result

    def __contains__(self, path: object) -> bool:
        return path in self._grams_by_path

    def __len__(self) -> int:
        return len(self._grams_by_path)
