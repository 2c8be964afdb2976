"""Open-file ranking package."""

from .filtered_list import (
    CONTENT_WEIGHT,
    DEFAULT_WEIGHT,
    MIN_SCORED_QUERY_LENGTH,
    QueryLocation,
    RankedEntry,
    RankedFilterList,
    match_ranges,
    merge_ranges,
    parse_location,
    rewrite_query,
)

__all__ = [
    "CONTENT_WEIGHT",
    "DEFAULT_WEIGHT",
    "MIN_SCORED_QUERY_LENGTH",
    "QueryLocation",
    "RankedEntry",
    "RankedFilterList",
    "match_ranges",
    "merge_ranges",
    "parse_location",
    "rewrite_query",
]
