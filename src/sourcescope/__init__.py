"""Fuzzy file-path ranking and project-wide source search."""

__version__ = "0.1.0"
