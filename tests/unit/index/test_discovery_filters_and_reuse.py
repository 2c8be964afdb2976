from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from sourcescope.config import IndexConfig
from sourcescope.index import detect_index_delta, discover_files, record_map, should_exclude


def test_discovery_honors_extensions_excludes_and_stable_order(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "docs").mkdir()
    (tmp_path / ".git").mkdir()
    (tmp_path / "src" / "z.js").write_text("z();\n", encoding="utf-8")
    (tmp_path / "src" / "a.js").write_text("a();\n", encoding="utf-8")
    (tmp_path / "docs" / "guide.md").write_text("# Guide\n", encoding="utf-8")
    (tmp_path / "src" / "image.png").write_bytes(b"\x89PNG")
    (tmp_path / ".git" / "config.js").write_text("internal", encoding="utf-8")

    config = IndexConfig(include_extensions=(".js", ".md"), exclude_globs=("**/.git/**",))
    records = discover_files(tmp_path, config=config)

    assert [record.path for record in records] == ["docs/guide.md", "src/a.js", "src/z.js"]


def test_discovery_excludes_binary_file_with_allowed_extension(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "ok.js").write_text("ok();\n", encoding="utf-8")
    (tmp_path / "src" / "bad.js").write_bytes(b"\x00\x01\x02")
    (tmp_path / "src" / "latin.js").write_bytes(b"caf\xe9\xff;")

    stats: dict[str, int] = {}
    records = discover_files(
        tmp_path, config=IndexConfig(include_extensions=(".js",), exclude_globs=()), stats=stats
    )
    assert [record.path for record in records] == ["src/ok.js"]
    assert stats["binary_excluded"] == 2


def test_discovery_reuses_hash_when_size_and_mtime_match(tmp_path: Path) -> None:
    target = tmp_path / "src" / "alpha.js"
    target.parent.mkdir(parents=True)
    target.write_text("alpha();\n", encoding="utf-8")
    (tmp_path / "src" / "beta.js").write_text("beta();\n", encoding="utf-8")
    config = IndexConfig(include_extensions=(".js",), exclude_globs=())
    first = discover_files(tmp_path, config=config)

    (tmp_path / "src" / "beta.js").write_text("beta(changed);\n", encoding="utf-8")
    stats: dict[str, int] = {}
    with patch(
        "sourcescope.index.discovery.sha256_file", return_value="fresh"
    ) as sha_mock:
        second = discover_files(
            tmp_path, config=config, previous_records=record_map(first), stats=stats
        )

    assert second[0] == first[0]
    assert second[1].content_hash == "fresh"
    sha_mock.assert_called_once()
    assert stats["reused"] == 1
    assert stats["hashed"] == 1


def test_detect_index_delta_classifies_paths(tmp_path: Path) -> None:
    for name in ("keep.js", "change.js", "drop.js"):
        (tmp_path / name).write_text(f"{name}\n", encoding="utf-8")
    config = IndexConfig(include_extensions=(".js",), exclude_globs=())
    previous = record_map(discover_files(tmp_path, config=config))

    (tmp_path / "drop.js").unlink()
    (tmp_path / "change.js").write_text("changed content\n", encoding="utf-8")
    (tmp_path / "new.js").write_text("new\n", encoding="utf-8")
    delta = detect_index_delta(previous, discover_files(tmp_path, config=config))

    assert delta.added == ("new.js",)
    assert delta.updated == ("change.js",)
    assert delta.unchanged == ("keep.js",)
    assert delta.removed == ("drop.js",)


def test_should_exclude_matches_root_level_directories() -> None:
    globs = ("**/node_modules/**",)
    assert should_exclude("node_modules/pkg/index.js", globs) is True
    assert should_exclude("web/node_modules/pkg/index.js", globs) is True
    assert should_exclude("src/modules.js", globs) is False


def test_excluded_directories_are_not_walked(tmp_path: Path) -> None:
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.js").write_text("x\n", encoding="utf-8")
    (tmp_path / "app.js").write_text("app\n", encoding="utf-8")

    stats: dict[str, int] = {}
    records = discover_files(
        tmp_path,
        config=IndexConfig(include_extensions=(".js",), exclude_globs=("**/node_modules/**",)),
        stats=stats,
    )
    assert [record.path for record in records] == ["app.js"]
    assert stats["seen"] == 1


def test_discovery_skips_files_that_vanish_before_hashing(tmp_path: Path) -> None:
    (tmp_path / "a.js").write_text("a();\n", encoding="utf-8")
    config = IndexConfig(include_extensions=(".js",), exclude_globs=())
    stats: dict[str, int] = {}

    with patch(
        "sourcescope.index.discovery.sha256_file", side_effect=FileNotFoundError("a.js")
    ):
        records = discover_files(tmp_path, config=config, stats=stats)

    assert records == []
    assert stats["unreadable"] == 1
    assert stats["hashed"] == 0
