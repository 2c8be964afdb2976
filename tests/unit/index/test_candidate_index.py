from __future__ import annotations

from sourcescope.index import Candidate, CandidateIndex


def test_insertion_order_and_duplicate_identifiers() -> None:
    index = CandidateIndex()
    first = Candidate(identifier="src/b.js", handle="first")
    assert index.add(first) is True
    assert index.add(Candidate(identifier="src/a.js")) is True
    assert index.add(Candidate(identifier="src/b.js", handle="second")) is False

    assert index.identifiers() == ["src/b.js", "src/a.js"]
    assert index.get("src/b.js") is first
    assert len(index) == 2


def test_remove_is_a_no_op_for_non_members() -> None:
    index = CandidateIndex([Candidate(identifier="a.js")])
    assert index.remove("missing.js") is False
    assert index.remove(Candidate(identifier="a.js")) is True
    assert "a.js" not in index
    assert len(index) == 0


def test_filter_applies_to_all_but_not_identifiers() -> None:
    index = CandidateIndex(
        [Candidate(identifier="src/a.js"), Candidate(identifier="test/a.js")]
    )
    index.set_filter(lambda candidate: candidate.identifier.startswith("src/"))

    assert [candidate.identifier for candidate in index.all()] == ["src/a.js"]
    assert [candidate.identifier for candidate in index] == ["src/a.js"]
    assert index.identifiers() == ["src/a.js", "test/a.js"]

    index.set_filter(None)
    assert len(index.all()) == 2


def test_handle_does_not_affect_equality() -> None:
    assert Candidate(identifier="a.js", handle=1) == Candidate(identifier="a.js", handle=2)
    assert Candidate(identifier="a.js") in CandidateIndex([Candidate(identifier="a.js")])
