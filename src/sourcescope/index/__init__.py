"""Candidate registry, file discovery, and content indexing package."""

from .candidates import CandidateIndex, CandidatePredicate
from .content import ContentIndex, fold_text, trigrams
from .discovery import detect_index_delta, discover_files, record_map, should_exclude
from .models import Candidate, FileRecord, IndexDelta

__all__ = [
    "Candidate",
    "CandidateIndex",
    "CandidatePredicate",
    "ContentIndex",
    "FileRecord",
    "IndexDelta",
    "detect_index_delta",
    "fold_text",
    "discover_files",
    "record_map",
    "should_exclude",
    "trigrams",
]
