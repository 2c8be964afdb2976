"""Search request parameters and query parsing."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from sourcescope.scoring.path_score import FilePathScorer

_QUERY_PART = re.compile(
    r'(?P<file>-?f(?:ile)?:(?:[^\\\s]|\\.)+)'
    r'|"(?P<quoted>(?:[^\\"]|\\.)*)"'
    r"|(?P<word>\S+)"
)
_FILE_PREFIX = re.compile(r"^(-)?f(?:ile)?:")


@dataclass(slots=True, frozen=True)
class FileQuery:
    """A ``file:`` or ``-file:`` glob directive."""

    pattern: str
    is_negative: bool = False

    def to_regex(self, ignore_case: bool) -> re.Pattern[str]:
        """Compile the glob; ``*`` matches any run, ``\\`` escapes the next character."""
        parts: list[str] = []
        pos = 0
        while pos < len(self.pattern):
            char = self.pattern[pos]
            if char == "*":
                parts.append(".*")
            elif char == "\\" and pos + 1 < len(self.pattern):
                pos += 1
                parts.append(re.escape(self.pattern[pos]))
            else:
                parts.append(re.escape(char))
            pos += 1
        return re.compile("".join(parts), re.IGNORECASE if ignore_case else 0)


@dataclass(slots=True, frozen=True)
class SearchConfig:
    """Parameters of one project-wide content search."""

    query: Sequence[str]
    ignore_case: bool = True
    is_regex: bool = False
    file_filter: str | None = None
    file_queries: Sequence[FileQuery] = ()
    _file_regexes: tuple[tuple[re.Pattern[str], bool], ...] = field(
        init=False, default=(), compare=False, repr=False
    )
    _filter_scorer: FilePathScorer | None = field(
        init=False, default=None, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        terms = (self.query,) if isinstance(self.query, str) else tuple(self.query)
        object.__setattr__(self, "query", terms)
        object.__setattr__(self, "file_queries", tuple(self.file_queries))
        object.__setattr__(
            self,
            "_file_regexes",
            tuple(
                (item.to_regex(self.ignore_case), item.is_negative) for item in self.file_queries
            ),
        )
        if self.file_filter:
            object.__setattr__(self, "_filter_scorer", FilePathScorer(self.file_filter))

    @classmethod
    def parse(
        cls,
        raw: str,
        ignore_case: bool = True,
        is_regex: bool = False,
        file_filter: str | None = None,
    ) -> SearchConfig:
        """Split raw input into content terms and ``file:`` directives.

        Terms are whitespace separated; double-quoted phrases stay whole. In
        regex mode everything except the file directives is one pattern.
        """
        terms: list[str] = []
        file_queries: list[FileQuery] = []
        regex_parts: list[str] = []
        for match in _QUERY_PART.finditer(raw):
            file_part = match.group("file")
            if file_part is not None:
                prefix = _FILE_PREFIX.match(file_part)
                if prefix is not None:
                    file_queries.append(
                        FileQuery(
                            pattern=file_part[prefix.end() :],
                            is_negative=prefix.group(1) is not None,
                        )
                    )
                    continue
            if is_regex:
                regex_parts.append(match.group(0))
                continue
            quoted = match.group("quoted")
            if quoted is not None:
                terms.append(re.sub(r"\\(.)", r"\1", quoted))
                continue
            terms.append(match.group(0))
        if is_regex and regex_parts:
            terms.append(" ".join(regex_parts))
        return cls(
            query=tuple(terms),
            ignore_case=ignore_case,
            is_regex=is_regex,
            file_filter=file_filter,
            file_queries=tuple(file_queries),
        )

    def queries(self) -> list[str]:
        """Return content terms in order."""
        return list(self.query)

    def has_content_query(self) -> bool:
        """Return True when at least one term is non-empty."""
        return any(term.strip() for term in self.query)

    def file_path_matches(self, path: str) -> bool:
        """Return True when ``path`` satisfies every file directive and the path filter."""
        for regex, is_negative in self._file_regexes:
            if bool(regex.search(path)) == is_negative:
                return False
        if self._filter_scorer is not None:
            scorer = self._filter_scorer
            return scorer.may_match(path) and scorer.score(path) > 0
        return True

    def to_arguments(self) -> dict[str, object]:
        """Return a loggable description of this request."""
        return {
            "query": " ".join(self.query),
            "terms": list(self.query),
            "ignore_case": self.ignore_case,
            "is_regex": self.is_regex,
            "file_filter": self.file_filter,
            "file_queries": [item.pattern for item in self.file_queries],
        }
