from __future__ import annotations

"""In-memory vocabulary model shared by loader, merger and renderer."""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterator, Mapping

BASE = "base"
EXTENSION = "extension"


@dataclass(frozen=True)
class Thing:
    """A vocabulary type (``rdfs:Class``)."""

    name: str
    id: str
    description: str = ""
    rich_description: str = ""
    sub_class_of: tuple[str, ...] = ()
    source: str = BASE

    @property
    def primary_parent(self) -> str | None:
        return self.sub_class_of[0] if self.sub_class_of else None

    def with_source(self, source: str) -> "Thing":
        return self if self.source == source else replace(self, source=source)


@dataclass(frozen=True)
class Relationship:
    """A vocabulary property (``rdf:Property``)."""

    name: str
    id: str
    description: str = ""
    rich_description: str = ""
    from_types: tuple[str, ...] = ()
    to_types: tuple[str, ...] = ()
    sub_property_of: str | None = None
    inverse_of: str | None = None
    superseded_by: str | None = None
    source: str = BASE

    def with_source(self, source: str) -> "Relationship":
        return self if self.source == source else replace(self, source=source)


def _frozen(mapping: Mapping[str, object] | None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Vocabulary:
    """Entities parsed from one source document."""

    things: Mapping[str, Thing] = field(default_factory=dict)
    relationships: Mapping[str, Relationship] = field(default_factory=dict)
    context: str = ""
    warnings: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "things", _frozen(self.things))
        object.__setattr__(self, "relationships", _frozen(self.relationships))


@dataclass(frozen=True)
class ExtendedVocabulary:
    """Base and extension merged into one read-only snapshot."""

    things: Mapping[str, Thing] = field(default_factory=dict)
    relationships: Mapping[str, Relationship] = field(default_factory=dict)
    base_context: str = "https://schema.org"
    extension_context: str = "https://schema.org.ai"
    root: str = "Thing"

    def __post_init__(self) -> None:
        object.__setattr__(self, "things", _frozen(self.things))
        object.__setattr__(self, "relationships", _frozen(self.relationships))

    def context_for(self, source: str) -> str:
        return self.extension_context if source == EXTENSION else self.base_context

    def entity_id(self, name: str, source: str) -> str:
        return f"{self.context_for(source)}/{name}"

    def type_names(self) -> list[str]:
        return sorted(self.things)

    def property_names(self) -> list[str]:
        return sorted(self.relationships)

    def iter_things(self) -> Iterator[Thing]:
        for name in self.type_names():
            yield self.things[name]

    def iter_relationships(self) -> Iterator[Relationship]:
        for name in self.property_names():
            yield self.relationships[name]


def empty_vocabulary(context: str = "") -> Vocabulary:
    return Vocabulary(context=context)


__all__ = [
    "BASE",
    "EXTENSION",
    "Thing",
    "Relationship",
    "Vocabulary",
    "ExtendedVocabulary",
    "empty_vocabulary",
]
