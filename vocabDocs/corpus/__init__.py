from __future__ import annotations

"""Corpus writing, navigation artifacts and integrity checks."""

from .builder import CorpusWriter, WriteReport, search_index, snapshot_corpus, validate_corpus
from .navigation import branch_menus, expand_for, navigation_tree

__all__ = [
    "CorpusWriter",
    "WriteReport",
    "search_index",
    "snapshot_corpus",
    "validate_corpus",
    "branch_menus",
    "expand_for",
    "navigation_tree",
]
