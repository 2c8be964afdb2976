"""Fuzzy path scoring package."""

from .path_score import FilePathScorer, filter_regex, fold_case, score_path

__all__ = ["FilePathScorer", "filter_regex", "fold_case", "score_path"]
