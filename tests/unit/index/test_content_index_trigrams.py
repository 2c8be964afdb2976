from __future__ import annotations

from sourcescope.index import ContentIndex, fold_text, trigrams


def test_trigrams_are_case_folded() -> None:
    assert trigrams("abCD") == {"abc", "bcd"}
    assert trigrams("ab") == set()


def test_fold_text_joins_unicode_case_equivalents() -> None:
    assert fold_text("\u212aEY") == "key"
    assert fold_text("\u017fum") == "sum"
    assert fold_text("\u0130stanbul") is None


def test_kelvin_sign_text_is_found_by_ascii_term() -> None:
    index = ContentIndex()
    index.index("a.js", "const \u212aey = 1;")
    index.index("b.js", "const other = 2;")

    assert index.candidates(["key"], is_regex=False) == ["a.js"]


def test_text_without_single_character_fold_is_always_a_candidate() -> None:
    index = ContentIndex()
    index.index("a.js", "\u0130stanbul")
    index.index("b.js", "nothing")

    assert index.candidates(["istanbul"], is_regex=False) == ["a.js"]
    index.discard("a.js")
    assert index.candidates(["istanbul"], is_regex=False) == []


def test_candidates_union_terms_and_intersect_grams() -> None:
    index = ContentIndex()
    index.index("a.js", "const needle = 1;")
    index.index("b.js", "let haystack;")
    index.index("c.js", "NEEDLE and haystack")

    assert index.candidates(["needle"], is_regex=False) == ["a.js", "c.js"]
    assert index.candidates(["needle", "haystack"], is_regex=False) == ["a.js", "b.js", "c.js"]
    assert index.candidates(["needles"], is_regex=False) == []


def test_short_terms_and_regex_return_every_path() -> None:
    index = ContentIndex()
    index.index("b.js", "x")
    index.index("a.js", "y")

    assert index.candidates(["x"], is_regex=False) == ["a.js", "b.js"]
    assert index.candidates(["zzz.*"], is_regex=True) == ["a.js", "b.js"]
    assert index.candidates([], is_regex=False) == ["a.js", "b.js"]


def test_reindex_and_discard_update_postings() -> None:
    index = ContentIndex()
    index.index("a.js", "alpha")
    generation = index.generation

    index.index("a.js", "omega")
    assert index.candidates(["alpha"], is_regex=False) == []
    assert index.candidates(["omega"], is_regex=False) == ["a.js"]
    assert index.generation > generation

    index.discard("a.js")
    index.discard("missing.js")
    assert "a.js" not in index
    assert len(index) == 0
