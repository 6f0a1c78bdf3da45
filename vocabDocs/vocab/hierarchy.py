from __future__ import annotations

"""Class hierarchy queries over a frozen :class:`ExtendedVocabulary`.

Only the *primary* parent (first entry of ``subClassOf``) forms the ancestor
chain used for breadcrumbs and inherited-property tables. Secondary parents
still list the type among their direct children.
"""

from dataclasses import dataclass
from typing import Iterable

from vocabDocs.errors import CycleDetected, DanglingReferenceWarning
from vocabDocs.utils.log_json import JsonLogger
from vocabDocs.vocab.model import ExtendedVocabulary, Relationship, Thing

_logger = JsonLogger("hierarchy")


@dataclass(frozen=True)
class InheritedProperties:
    type: str
    properties: tuple[Relationship, ...]


@dataclass(frozen=True)
class TypeProperties:
    direct: tuple[Relationship, ...]
    inherited: tuple[InheritedProperties, ...]

    def farthest_first(self) -> tuple[InheritedProperties, ...]:
        """Inherited buckets ordered from the root down to the nearest parent."""

        return tuple(reversed(self.inherited))

    def names(self) -> list[str]:
        names = [prop.name for prop in self.direct]
        for bucket in self.inherited:
            names.extend(prop.name for prop in bucket.properties)
        return names


def _sorted_props(props: Iterable[Relationship]) -> tuple[Relationship, ...]:
    return tuple(sorted(props, key=lambda prop: prop.name))


def _require(vocab: ExtendedVocabulary, name: str) -> Thing:
    try:
        return vocab.things[name]
    except KeyError:
        raise KeyError(f"Unknown type: {name}") from None


def _walk(vocab: ExtendedVocabulary, name: str) -> tuple[str, ...]:
    current = _require(vocab, name)
    chain: list[str] = []
    seen = {name}
    while current.primary_parent:
        parent = current.primary_parent
        if parent in seen:
            raise CycleDetected([name, *chain, parent])
        following = vocab.things.get(parent)
        if following is None:
            break
        chain.append(parent)
        seen.add(parent)
        current = following
    return tuple(chain)


class HierarchyIndex:
    """Precomputed, name-sorted hierarchy tables for one vocabulary snapshot.

    Build it once per run and call :meth:`validate` before fanning rendering
    out to worker threads; afterwards every query is a read of immutable
    tables.
    """

    def __init__(self, vocab: ExtendedVocabulary) -> None:
        self.vocab = vocab
        children: dict[str, list[str]] = {}
        for thing in vocab.iter_things():
            for parent in thing.sub_class_of:
                children.setdefault(parent, []).append(thing.name)
        self._children = {parent: tuple(sorted(names)) for parent, names in children.items()}
        by_domain: dict[str, list[Relationship]] = {}
        for rel in vocab.iter_relationships():
            for domain in rel.from_types:
                by_domain.setdefault(domain, []).append(rel)
        self._by_domain = {domain: _sorted_props(props) for domain, props in by_domain.items()}
        self._chains: dict[str, tuple[str, ...]] = {}

    @property
    def root(self) -> str:
        return self.vocab.root

    def validate(self) -> "HierarchyIndex":
        """Resolve every ancestor chain, raising :class:`CycleDetected` on a loop."""

        chains: dict[str, tuple[str, ...]] = {}
        for name in self.vocab.type_names():
            chains[name] = _walk(self.vocab, name)
        self._chains = chains
        _logger.info("hierarchy.validate.ok", types=len(chains))
        return self

    def ancestors(self, name: str) -> list[str]:
        chain = self._chains.get(name)
        if chain is None:
            chain = _walk(self.vocab, name)
        return list(chain)

    def breadcrumb(self, name: str) -> list[str]:
        """Root-to-leaf path ending with ``name`` itself."""

        return list(reversed(self.ancestors(name))) + [name]

    def direct_children(self, name: str) -> list[str]:
        return list(self._children.get(name, ()))

    def direct_properties(self, name: str) -> tuple[Relationship, ...]:
        return self._by_domain.get(name, ())

    def properties_for_type(self, name: str) -> TypeProperties:
        _require(self.vocab, name)
        direct = self.direct_properties(name)
        seen = {prop.name for prop in direct}
        inherited: list[InheritedProperties] = []
        for ancestor in self.ancestors(name):
            props = tuple(prop for prop in self.direct_properties(ancestor) if prop.name not in seen)
            if not props:
                continue
            seen.update(prop.name for prop in props)
            inherited.append(InheritedProperties(type=ancestor, properties=props))
        return TypeProperties(direct=direct, inherited=tuple(inherited))

    def types_for_property(self, name: str) -> list[str]:
        """Every type on which ``name`` is available, directly or by inheritance."""

        rel = self.vocab.relationships.get(name)
        if rel is None:
            raise KeyError(f"Unknown property: {name}")
        domains = set(rel.from_types)
        result = []
        for type_name in self.vocab.type_names():
            if type_name in domains or domains.intersection(self.ancestors(type_name)):
                result.append(type_name)
        return result

    def roots(self) -> list[str]:
        """The configured root first, then every other type without a known parent."""

        orphans = [
            thing.name
            for thing in self.vocab.iter_things()
            if thing.name != self.root
            and not any(parent in self.vocab.things for parent in thing.sub_class_of)
        ]
        head = [self.root] if self.root in self.vocab.things else []
        return head + orphans


def ancestors(vocab: ExtendedVocabulary, name: str) -> list[str]:
    """Primary-parent chain of ``name``, nearest first, ending at a root."""

    return list(_walk(vocab, name))


def direct_children(vocab: ExtendedVocabulary, name: str) -> list[str]:
    return sorted(thing.name for thing in vocab.things.values() if name in thing.sub_class_of)


def properties_for_type(vocab: ExtendedVocabulary, name: str) -> TypeProperties:
    return HierarchyIndex(vocab).properties_for_type(name)


def types_for_property(vocab: ExtendedVocabulary, name: str) -> list[str]:
    return HierarchyIndex(vocab).types_for_property(name)


def dangling_references(vocab: ExtendedVocabulary) -> list[DanglingReferenceWarning]:
    """Collect references to types or properties missing from ``vocab``."""

    found: list[DanglingReferenceWarning] = []
    for thing in vocab.iter_things():
        for parent in thing.sub_class_of:
            if parent not in vocab.things:
                found.append(DanglingReferenceWarning(thing.name, "subClassOf", parent))
    for rel in vocab.iter_relationships():
        for field_name, names in (("domainIncludes", rel.from_types), ("rangeIncludes", rel.to_types)):
            for target in names:
                if target not in vocab.things:
                    found.append(DanglingReferenceWarning(rel.name, field_name, target))
        for field_name, target in (
            ("subPropertyOf", rel.sub_property_of),
            ("inverseOf", rel.inverse_of),
            ("supersededBy", rel.superseded_by),
        ):
            if target and target not in vocab.relationships:
                found.append(DanglingReferenceWarning(rel.name, field_name, target))
    return found


__all__ = [
    "InheritedProperties",
    "TypeProperties",
    "HierarchyIndex",
    "ancestors",
    "direct_children",
    "properties_for_type",
    "types_for_property",
    "dangling_references",
]
