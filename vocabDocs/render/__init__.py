from __future__ import annotations

"""Document rendering and output profiles."""

from .document import Document, Link, PropertyRow, Section, slug_for
from .formats import PROFILES, serialize
from .renderer import DocumentRenderer, render_property, render_type

__all__ = [
    "Document",
    "DocumentRenderer",
    "Link",
    "PROFILES",
    "PropertyRow",
    "Section",
    "render_property",
    "render_type",
    "serialize",
    "slug_for",
]
