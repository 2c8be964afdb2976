from __future__ import annotations

import json
from pathlib import Path

import pytest

from sourcescope.cli import build_arg_parser, main


def _seed(root: Path) -> None:
    (root / "src").mkdir()
    (root / "lib").mkdir()
    (root / "src" / "app.js").write_text("const needle = 1;\n", encoding="utf-8")
    (root / "lib" / "util.js").write_text("export {};\n", encoding="utf-8")


def _rows(output: str) -> list[dict[str, object]]:
    return [json.loads(line) for line in output.splitlines() if line.strip()]


def test_find_prints_ranked_paths(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _seed(tmp_path)

    assert main(["--root", str(tmp_path), "find", "app:3:2"]) == 0
    rows = _rows(capsys.readouterr().out)

    assert [row["path"] for row in rows] == ["src/app.js"]
    assert rows[0]["line"] == 2
    assert rows[0]["column"] == 1
    assert rows[0]["highlight"] == [[4, 3]]


def test_find_limit_and_short_query(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _seed(tmp_path)

    assert main(["--root", str(tmp_path), "find", "", "--limit", "1"]) == 0
    rows = _rows(capsys.readouterr().out)
    assert len(rows) == 1


def test_grep_prints_results_and_writes_audit_log(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _seed(tmp_path)

    assert main(["--root", str(tmp_path), "grep", "NEEDLE"]) == 0
    rows = _rows(capsys.readouterr().out)
    assert [row["path"] for row in rows] == ["src/app.js"]
    assert rows[0]["match_count"] == 1

    audit_path = tmp_path / ".sourcescope" / "audit.jsonl"
    events = _rows(audit_path.read_text(encoding="utf-8"))
    assert events[-1]["outcome"] == "completed"
    assert "NEEDLE" not in audit_path.read_text(encoding="utf-8")


def test_grep_case_sensitive_and_file_filter(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _seed(tmp_path)

    assert main(["--root", str(tmp_path), "grep", "NEEDLE", "--case-sensitive"]) == 0
    assert _rows(capsys.readouterr().out) == []

    assert main(["--root", str(tmp_path), "grep", "export", "--file", "util"]) == 0
    assert [row["path"] for row in _rows(capsys.readouterr().out)] == ["lib/util.js"]


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        build_arg_parser().parse_args([])
