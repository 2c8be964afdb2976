from __future__ import annotations

from sourcescope.index import Candidate
from sourcescope.search import (
    FileSearchResult,
    SearchConfig,
    SearchMatch,
    create_search_regex,
    perform_search_in_content,
    search_content,
)

SAMPLE = "\n".join(
    [
        "line zero",
        "line one",
        "line two",
        "a FOO here",
        "line four",
        "line five",
        "line six",
        "then bar\r",
    ]
)


def test_multi_term_results_merge_by_line_number() -> None:
    config = SearchConfig(query=("foo", "bar"), ignore_case=True)
    matches = search_content(SAMPLE, config)

    assert [match.line_number for match in matches] == [3, 7]
    assert matches[0] == SearchMatch(line_number=3, line_content="a FOO here", column=2)
    assert matches[1].line_content == "then bar"


def test_line_matched_by_two_terms_is_reported_per_term() -> None:
    config = SearchConfig(query=("foo", "bar"))
    matches = search_content("foo bar\nnothing\nbar", config)
    assert [(match.line_number, match.column) for match in matches] == [(0, 0), (0, 4), (2, 0)]


def test_case_sensitive_search() -> None:
    assert perform_search_in_content(SAMPLE, "foo", case_sensitive=True, is_regex=False) == []
    matches = perform_search_in_content(SAMPLE, "FOO", case_sensitive=True, is_regex=False)
    assert [match.line_number for match in matches] == [3]


def test_literal_terms_are_escaped_and_regex_terms_are_not() -> None:
    content = "a.b\naxb"
    literal = perform_search_in_content(content, "a.b", case_sensitive=False, is_regex=False)
    pattern = perform_search_in_content(content, "a.b", case_sensitive=False, is_regex=True)
    assert [match.line_number for match in literal] == [0]
    assert [match.line_number for match in pattern] == [0, 1]


def test_invalid_regex_yields_no_matches() -> None:
    assert create_search_regex("(unclosed", case_sensitive=False, is_regex=True) is None
    config = SearchConfig(query=("(unclosed",), is_regex=True)
    assert search_content("(unclosed", config) == []


def test_file_search_result_serializes_matches() -> None:
    result = FileSearchResult(
        candidate=Candidate(identifier="src/a.js"),
        matches=(SearchMatch(line_number=2, line_content="needle", column=0),),
        project_name="web",
    )
    assert result.match_count == 1
    assert result.to_dict() == {
        "project": "web",
        "path": "src/a.js",
        "match_count": 1,
        "matches": [{"line_number": 2, "column": 0, "line_content": "needle"}],
    }
