"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "sourcescope.toml"

DEFAULT_MAX_CONCURRENT_FILES = 20
MAX_CONCURRENT_FILES_CAP = 256
DEFAULT_RANK_LIMIT = 100
RANK_LIMIT_CAP = 10_000
WEIGHT_CAP = 1_000

DEFAULT_INCLUDE_EXTENSIONS = (
    ".py",
    ".js",
    ".mjs",
    ".ts",
    ".tsx",
    ".jsx",
    ".css",
    ".html",
    ".json",
    ".md",
    ".rst",
    ".toml",
    ".yaml",
    ".yml",
    ".txt",
)
DEFAULT_EXCLUDE_GLOBS = (
    "**/.git/**",
    "**/__pycache__/**",
    "**/.venv/**",
    "**/node_modules/**",
    "**/.sourcescope/**",
)


@dataclass(slots=True, frozen=True)
class IndexConfig:
    """Deterministic file discovery settings."""

    include_extensions: tuple[str, ...]
    exclude_globs: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class SearchSettings:
    """Project-wide content search settings."""

    max_concurrent_files: int = DEFAULT_MAX_CONCURRENT_FILES
    search_in_content_scripts: bool = False
    ignore_case: bool = True
    is_regex: bool = False


@dataclass(slots=True, frozen=True)
class RankingSettings:
    """Open-file ranking settings."""

    limit: int = DEFAULT_RANK_LIMIT
    default_weight: int = 1
    content_weight: int = 10


@dataclass(slots=True, frozen=True)
class ScopeConfig:
    """Fully merged configuration."""

    project_root: Path
    data_dir: Path
    search: SearchSettings
    ranking: RankingSettings
    index: IndexConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "project_root": str(self.project_root),
            "data_dir": str(self.data_dir),
            "search": {
                "max_concurrent_files": self.search.max_concurrent_files,
                "search_in_content_scripts": self.search.search_in_content_scripts,
                "ignore_case": self.search.ignore_case,
                "is_regex": self.search.is_regex,
            },
            "ranking": {
                "limit": self.ranking.limit,
                "default_weight": self.ranking.default_weight,
                "content_weight": self.ranking.content_weight,
            },
            "index": {
                "include_extensions": list(self.index.include_extensions),
                "exclude_globs": list(self.index.exclude_globs),
            },
        }


@dataclass(slots=True, frozen=True)
class ConfigOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    max_concurrent_files: int | None = None
    search_in_content_scripts: bool | None = None
    ignore_case: bool | None = None
    is_regex: bool | None = None
    rank_limit: int | None = None


def default_config(project_root: Path) -> ScopeConfig:
    """Build default config for a given project root."""
    resolved_root = project_root.resolve()
    return ScopeConfig(
        project_root=resolved_root,
        data_dir=resolved_root / ".sourcescope",
        search=SearchSettings(),
        ranking=RankingSettings(),
        index=IndexConfig(
            include_extensions=DEFAULT_INCLUDE_EXTENSIONS,
            exclude_globs=DEFAULT_EXCLUDE_GLOBS,
        ),
    )


def load_config_file(project_root: Path) -> dict[str, object]:
    """Load optional sourcescope.toml from the project root."""
    config_path = project_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def merge_config(
    base: ScopeConfig, file_payload: dict[str, object], overrides: ConfigOverrides
) -> ScopeConfig:
    """Merge defaults, file config, then startup overrides."""
    search_payload = _get_table(file_payload, "search")
    ranking_payload = _get_table(file_payload, "ranking")
    index_payload = _get_table(file_payload, "index")

    search = SearchSettings(
        max_concurrent_files=_optional_positive_int_with_cap(
            search_payload.get("max_concurrent_files"),
            "search.max_concurrent_files",
            base.search.max_concurrent_files,
            MAX_CONCURRENT_FILES_CAP,
        ),
        search_in_content_scripts=_optional_bool(
            search_payload.get("search_in_content_scripts"),
            "search.search_in_content_scripts",
            base.search.search_in_content_scripts,
        ),
        ignore_case=_optional_bool(
            search_payload.get("ignore_case"), "search.ignore_case", base.search.ignore_case
        ),
        is_regex=_optional_bool(
            search_payload.get("is_regex"), "search.is_regex", base.search.is_regex
        ),
    )
    ranking = RankingSettings(
        limit=_optional_positive_int_with_cap(
            ranking_payload.get("limit"), "ranking.limit", base.ranking.limit, RANK_LIMIT_CAP
        ),
        default_weight=_optional_positive_int_with_cap(
            ranking_payload.get("default_weight"),
            "ranking.default_weight",
            base.ranking.default_weight,
            WEIGHT_CAP,
        ),
        content_weight=_optional_positive_int_with_cap(
            ranking_payload.get("content_weight"),
            "ranking.content_weight",
            base.ranking.content_weight,
            WEIGHT_CAP,
        ),
    )

    include_extensions = base.index.include_extensions
    if "include_extensions" in index_payload:
        include_extensions = _tuple_of_strings(
            index_payload["include_extensions"], "index", "include_extensions"
        )
    exclude_globs = base.index.exclude_globs
    if "exclude_globs" in index_payload:
        exclude_globs = _tuple_of_strings(index_payload["exclude_globs"], "index", "exclude_globs")

    merged = ScopeConfig(
        project_root=base.project_root,
        data_dir=base.data_dir,
        search=search,
        ranking=ranking,
        index=IndexConfig(
            include_extensions=include_extensions,
            exclude_globs=exclude_globs,
        ),
    )
    return apply_overrides(merged, overrides)


def apply_overrides(config: ScopeConfig, overrides: ConfigOverrides) -> ScopeConfig:
    """Apply startup overrides at highest precedence."""
    search = SearchSettings(
        max_concurrent_files=_optional_positive_int_with_cap(
            overrides.max_concurrent_files,
            "overrides.max_concurrent_files",
            config.search.max_concurrent_files,
            MAX_CONCURRENT_FILES_CAP,
        ),
        search_in_content_scripts=_optional_bool(
            overrides.search_in_content_scripts,
            "overrides.search_in_content_scripts",
            config.search.search_in_content_scripts,
        ),
        ignore_case=_optional_bool(
            overrides.ignore_case, "overrides.ignore_case", config.search.ignore_case
        ),
        is_regex=_optional_bool(overrides.is_regex, "overrides.is_regex", config.search.is_regex),
    )
    ranking = RankingSettings(
        limit=_optional_positive_int_with_cap(
            overrides.rank_limit, "overrides.rank_limit", config.ranking.limit, RANK_LIMIT_CAP
        ),
        default_weight=config.ranking.default_weight,
        content_weight=config.ranking.content_weight,
    )
    data_dir = overrides.data_dir or config.data_dir
    return ScopeConfig(
        project_root=config.project_root,
        data_dir=data_dir.resolve(),
        search=search,
        ranking=ranking,
        index=config.index,
    )


def load_effective_config(
    project_root: Path, overrides: ConfigOverrides | None = None
) -> ScopeConfig:
    """Load effective config using merge order defaults -> file -> overrides."""
    resolved_root = project_root.resolve()
    base = default_config(resolved_root)
    payload = load_config_file(resolved_root)
    return merge_config(base, payload, overrides or ConfigOverrides())


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
