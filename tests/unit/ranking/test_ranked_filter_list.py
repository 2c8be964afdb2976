from __future__ import annotations

from unittest.mock import patch

from sourcescope.index import Candidate, CandidateIndex
from sourcescope.ranking import RankedFilterList


def _index(*identifiers: str) -> CandidateIndex:
    return CandidateIndex([Candidate(identifier=identifier) for identifier in identifiers])


def test_short_query_orders_by_default_score_without_filtering() -> None:
    index = _index("a.js", "b.js", "c.js", "d.js")
    ranked = RankedFilterList(index, default_scores={"c.js": 3, "b.js": 2, "a.js": 1})

    for query in ("", "z"):
        entries = ranked.rank(query, limit=10)
        assert [entry.candidate.identifier for entry in entries] == [
            "c.js",
            "b.js",
            "a.js",
            "d.js",
        ]


def test_equal_path_scores_break_ties_by_default_score_then_insertion() -> None:
    index = _index("lib/app.js", "src/app.test.js", "src/app.js")
    ranked = RankedFilterList(index)

    plain = ranked.rank("app", limit=10)
    assert [entry.candidate.identifier for entry in plain] == [
        "lib/app.js",
        "src/app.test.js",
        "src/app.js",
    ]
    assert {entry.score for entry in plain} == {780}

    ranked.set_default_scores({"src/app.js": 5, "src/app.test.js": 3})
    biased = ranked.rank("app", limit=10)
    assert [entry.candidate.identifier for entry in biased] == [
        "src/app.js",
        "src/app.test.js",
        "lib/app.js",
    ]
    assert biased[0].score == 785


def test_non_matching_candidates_are_dropped_and_limit_applies() -> None:
    index = _index("src/app.js", "src/util.js", "lib/apply.js", "README.md")
    ranked = RankedFilterList(index)

    entries = ranked.rank("ap", limit=2)
    identifiers = [entry.candidate.identifier for entry in entries]
    assert len(identifiers) == 2
    assert "src/util.js" not in identifiers
    assert "README.md" not in identifiers
    assert ranked.rank("ap", limit=0) == []


def test_location_suffix_is_ignored_when_ranking() -> None:
    index = _index("src/app.js", "lib/other.js")
    ranked = RankedFilterList(index)

    with_suffix = ranked.rank("app:12:4", limit=10)
    without_suffix = ranked.rank("app", limit=10)
    assert with_suffix == without_suffix
    assert ranked.display_text(with_suffix[0], "app:12:4") == "src/app.js:12:4"


def test_scorer_is_cached_until_query_changes() -> None:
    ranked = RankedFilterList(_index("a.js"))
    first = ranked.scorer_for("ab")
    assert ranked.scorer_for("ab") is first
    assert ranked.scorer_for("abc") is not first


def test_secondary_key_orders_equal_scores() -> None:
    index = _index("b/app.js", "a/app.js")
    ranked = RankedFilterList(index, secondary_key=lambda candidate: candidate.identifier)

    entries = ranked.rank("app", limit=10)
    assert [entry.candidate.identifier for entry in entries] == ["a/app.js", "b/app.js"]


def test_highlight_merges_adjacent_offsets() -> None:
    ranked = RankedFilterList(_index("a/foo.js"))
    candidate = Candidate(identifier="a/foo.js")
    assert ranked.highlight(candidate, "foo") == [(2, 3)]
    assert ranked.highlight(candidate, "") == []
    assert ranked.item_score(candidate, "foo") == 780
    assert ranked.item_score(candidate, "zz") == 0


def test_rank_skips_scoring_paths_without_the_query_subsequence() -> None:
    ranked = RankedFilterList(_index("src/app.js", "lib/util.js"))
    scorer = ranked.scorer_for("app")

    with patch.object(scorer, "score", wraps=scorer.score) as score:
        entries = ranked.rank("app", limit=10)

    assert [entry.candidate.identifier for entry in entries] == ["src/app.js"]
    assert [call.args[0] for call in score.call_args_list] == ["src/app.js"]
