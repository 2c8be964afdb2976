"""Command-line entrypoint: ranked file lookup and content search over a directory."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TextIO

from sourcescope.config import ConfigOverrides, ScopeConfig, load_effective_config
from sourcescope.logging import JsonlAuditLogger
from sourcescope.projects import FileSystemProject
from sourcescope.ranking import RankedFilterList, parse_location
from sourcescope.search import FileSearchResult, Progress, SearchConfig, SearchScope


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for both sub-commands."""
    parser = argparse.ArgumentParser(prog="sourcescope")
    parser.add_argument("--root", required=False, default=".")
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--debug", action="store_true")
    commands = parser.add_subparsers(dest="command", required=True)

    find = commands.add_parser("find", help="rank file paths against a fuzzy query")
    find.add_argument("query")
    find.add_argument("--limit", type=int, required=False, default=None)

    grep = commands.add_parser("grep", help="search file contents")
    grep.add_argument("query")
    grep.add_argument("--regex", action="store_true", default=None)
    grep.add_argument("--case-sensitive", action="store_true")
    grep.add_argument("--file", dest="file_filter", required=False, default=None)
    grep.add_argument("--max-concurrent-files", type=int, required=False, default=None)
    grep.add_argument("--content-scripts", action="store_true", default=None)
    return parser


def run_find(config: ScopeConfig, query: str, out_stream: TextIO) -> int:
    """Print ranked paths as JSON lines."""
    project = FileSystemProject(root=config.project_root, index_config=config.index, name="")
    project.refresh()
    ranked = RankedFilterList(
        project.candidates,
        default_weight=config.ranking.default_weight,
        content_weight=config.ranking.content_weight,
    )
    location = parse_location(query)
    for entry in ranked.rank(location.query, config.ranking.limit):
        row: dict[str, object] = {
            "path": entry.candidate.identifier,
            "score": entry.score,
            "highlight": ranked.highlight(entry.candidate, location.query),
        }
        if location.line is not None:
            row["line"] = location.line
        if location.column is not None:
            row["column"] = location.column
        out_stream.write(f"{json.dumps(row, sort_keys=True)}\n")
    return 0


async def run_grep(config: ScopeConfig, search: SearchConfig, out_stream: TextIO) -> bool:
    """Print per-file search results as JSON lines; return the completion flag."""
    project = FileSystemProject(root=config.project_root, index_config=config.index, name="")
    scope = SearchScope(
        [project],
        max_concurrent_files=config.search.max_concurrent_files,
        search_in_content_scripts=config.search.search_in_content_scripts,
        audit_logger=JsonlAuditLogger(path=config.data_dir / "audit.jsonl"),
    )

    def on_result(result: FileSearchResult) -> None:
        out_stream.write(f"{json.dumps(result.to_dict(), sort_keys=True)}\n")

    finished: list[bool] = []
    await scope.perform_search(search, Progress(), on_result, finished.append)
    return bool(finished and finished[0])


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the sourcescope command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="[%(name)s] %(levelname)s: %(message)s",
            stream=sys.stderr,
        )
    overrides = ConfigOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        rank_limit=getattr(args, "limit", None),
        max_concurrent_files=getattr(args, "max_concurrent_files", None),
        search_in_content_scripts=getattr(args, "content_scripts", None),
        ignore_case=False if getattr(args, "case_sensitive", False) else None,
        is_regex=getattr(args, "regex", None),
    )
    config = load_effective_config(Path(args.root), overrides)
    if args.command == "find":
        return run_find(config, args.query, sys.stdout)

    search = SearchConfig.parse(
        args.query,
        ignore_case=config.search.ignore_case,
        is_regex=config.search.is_regex,
        file_filter=args.file_filter,
    )
    completed = asyncio.run(run_grep(config, search, sys.stdout))
    return 0 if completed else 1


if __name__ == "__main__":
    sys.exit(main())
