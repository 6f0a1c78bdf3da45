from __future__ import annotations

"""Vocabulary loading, merging and hierarchy resolution."""

from .hierarchy import (
    HierarchyIndex,
    ancestors,
    dangling_references,
    direct_children,
    properties_for_type,
    types_for_property,
)
from .loader import load, load_document
from .merge import MergeOptions, filter_by_source, merge
from .model import ExtendedVocabulary, Relationship, Thing, Vocabulary, empty_vocabulary

__all__ = [
    "ExtendedVocabulary",
    "HierarchyIndex",
    "MergeOptions",
    "Relationship",
    "Thing",
    "Vocabulary",
    "ancestors",
    "dangling_references",
    "direct_children",
    "empty_vocabulary",
    "filter_by_source",
    "load",
    "load_document",
    "merge",
    "properties_for_type",
    "types_for_property",
]
