from __future__ import annotations

from pathlib import Path

import pytest

from sourcescope.config import ConfigOverrides, load_effective_config


def _write(tmp_path: Path, *lines: str) -> None:
    (tmp_path / "sourcescope.toml").write_text("\n".join(lines), encoding="utf-8")


def test_invalid_field_type_names_the_field(tmp_path: Path) -> None:
    _write(tmp_path, "[search]", 'max_concurrent_files = "many"')
    with pytest.raises(ValueError, match="search.max_concurrent_files"):
        load_effective_config(tmp_path)


def test_boolean_is_not_accepted_as_integer(tmp_path: Path) -> None:
    _write(tmp_path, "[ranking]", "limit = true")
    with pytest.raises(ValueError, match="ranking.limit"):
        load_effective_config(tmp_path)


def test_invalid_section_type(tmp_path: Path) -> None:
    _write(tmp_path, 'search = "not-a-table"')
    with pytest.raises(ValueError, match="section 'search'"):
        load_effective_config(tmp_path)


def test_values_above_cap_are_rejected(tmp_path: Path) -> None:
    _write(tmp_path, "[search]", "max_concurrent_files = 100000")
    with pytest.raises(ValueError, match="<= 256"):
        load_effective_config(tmp_path)


def test_list_fields_require_strings(tmp_path: Path) -> None:
    _write(tmp_path, "[index]", "exclude_globs = [1, 2]")
    with pytest.raises(ValueError, match="index.exclude_globs"):
        load_effective_config(tmp_path)


def test_invalid_override_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.max_concurrent_files"):
        load_effective_config(tmp_path, ConfigOverrides(max_concurrent_files=0))
