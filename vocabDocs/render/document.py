from __future__ import annotations

"""Format-neutral document model produced by the renderer."""

from dataclasses import dataclass, field
from typing import Any

from vocabDocs.errors import DanglingReferenceWarning

TYPE = "type"
PROPERTY = "property"

COLLECTIONS = {TYPE: "things", PROPERTY: "properties"}

# Section kinds
BREADCRUMB = "breadcrumb"
DESCRIPTION = "description"
PROPERTY_TABLE = "property_table"
LINK_LIST = "link_list"
CODE = "code"


@dataclass(frozen=True)
class Link:
    """A cross-reference by name; the concrete href is chosen per output profile."""

    name: str
    kind: str = TYPE
    resolved: bool = True
    extension: bool = False


@dataclass(frozen=True)
class PropertyRow:
    property: Link
    ranges: tuple[Link, ...]
    summary: str


@dataclass(frozen=True)
class Section:
    kind: str
    title: str | None = None
    text: str = ""
    links: tuple[Link, ...] = ()
    rows: tuple[PropertyRow, ...] = ()
    origin: Link | None = None
    language: str | None = None
    more: int = 0


@dataclass(frozen=True)
class Document:
    kind: str
    name: str
    frontmatter: dict[str, Any]
    sections: tuple[Section, ...]
    warnings: tuple[DanglingReferenceWarning, ...] = ()
    ancestors: tuple[str, ...] = field(default=())

    @property
    def collection(self) -> str:
        return COLLECTIONS[self.kind]

    @property
    def slug(self) -> str:
        return slug_for(self.name, self.kind)


def slug_for(name: str, kind: str) -> str:
    """Stable corpus path for an entity, independent of its hierarchy position."""

    return f"{COLLECTIONS[kind]}/{name}"


def href(target: Link, *, from_kind: str, ext: str) -> str:
    """Relative link from a document of ``from_kind`` to ``target``."""

    if target.kind == from_kind:
        return f"{target.name}.{ext}"
    return f"../{COLLECTIONS[target.kind]}/{target.name}.{ext}"


__all__ = [
    "TYPE",
    "PROPERTY",
    "COLLECTIONS",
    "BREADCRUMB",
    "DESCRIPTION",
    "PROPERTY_TABLE",
    "LINK_LIST",
    "CODE",
    "Link",
    "PropertyRow",
    "Section",
    "Document",
    "slug_for",
    "href",
]
