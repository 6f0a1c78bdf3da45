from __future__ import annotations

"""Turn resolved vocabulary entities into format-neutral documents.

Rendering is a pure function of the frozen vocabulary: no timestamps, and
every collection is name-sorted before it reaches a section.
"""

import json
from typing import Iterable

from vocabDocs.errors import DanglingReferenceWarning
from vocabDocs.render.document import (
    BREADCRUMB,
    CODE,
    DESCRIPTION,
    LINK_LIST,
    PROPERTY,
    PROPERTY_TABLE,
    TYPE,
    Document,
    Link,
    PropertyRow,
    Section,
)
from vocabDocs.vocab.hierarchy import HierarchyIndex
from vocabDocs.vocab.model import EXTENSION, ExtendedVocabulary, Relationship
from vocabDocs.vocab.sanitize import plain_text, term_refs

ELLIPSIS = "..."


def truncate(text: str, limit: int) -> str:
    """Cap ``text`` at ``limit`` characters, ending with an ellipsis when cut."""

    if len(text) <= limit:
        return text
    return text[: max(0, limit - len(ELLIPSIS))].rstrip() + ELLIPSIS


class _Warnings:
    def __init__(self) -> None:
        self._seen: dict[DanglingReferenceWarning, None] = {}

    def add(self, warning: DanglingReferenceWarning) -> None:
        self._seen.setdefault(warning, None)

    def freeze(self) -> tuple[DanglingReferenceWarning, ...]:
        return tuple(self._seen)


class DocumentRenderer:
    """Render type and property documents from one :class:`HierarchyIndex`.

    ``published_types``/``published_properties`` restrict which entities get
    a link; known entities outside the published set are rendered as plain
    labels (without a warning) so a partial corpus never links to missing
    pages. ``None`` publishes everything.
    """

    def __init__(
        self,
        index: HierarchyIndex,
        *,
        summary_chars: int = 100,
        inherited_by_limit: int = 50,
        published_types: Iterable[str] | None = None,
        published_properties: Iterable[str] | None = None,
    ) -> None:
        self.index = index
        self.vocab: ExtendedVocabulary = index.vocab
        self.summary_chars = summary_chars
        self.inherited_by_limit = inherited_by_limit
        self._published_types = frozenset(published_types) if published_types is not None else None
        self._published_properties = (
            frozenset(published_properties) if published_properties is not None else None
        )

    # Links -------------------------------------------------------------
    def _type_link(self, name: str, warnings: _Warnings, *, owner: str, field: str) -> Link:
        thing = self.vocab.things.get(name)
        if thing is None:
            warnings.add(DanglingReferenceWarning(owner, field, name))
            return Link(name=name, kind=TYPE, resolved=False)
        published = self._published_types is None or name in self._published_types
        return Link(name=name, kind=TYPE, resolved=published, extension=thing.source == EXTENSION)

    def _property_link(self, name: str, warnings: _Warnings, *, owner: str, field: str) -> Link:
        rel = self.vocab.relationships.get(name)
        if rel is None:
            warnings.add(DanglingReferenceWarning(owner, field, name))
            return Link(name=name, kind=PROPERTY, resolved=False)
        published = self._published_properties is None or name in self._published_properties
        return Link(name=name, kind=PROPERTY, resolved=published, extension=rel.source == EXTENSION)

    def _term_links(self, owner: str, text: str, warnings: _Warnings) -> tuple[Link, ...]:
        links = []
        for name in term_refs(text):
            if name in self.vocab.things:
                links.append(self._type_link(name, warnings, owner=owner, field="description"))
            elif name in self.vocab.relationships:
                links.append(self._property_link(name, warnings, owner=owner, field="description"))
            else:
                warnings.add(DanglingReferenceWarning(owner, "description", name))
                links.append(Link(name=name, resolved=False))
        return tuple(links)

    def _description(self, name: str, plain: str, rich: str, warnings: _Warnings) -> Section:
        text = rich or plain
        return Section(
            kind=DESCRIPTION,
            title=name,
            text=text,
            links=self._term_links(name, text, warnings),
        )

    def _summary(self, rel: Relationship) -> str:
        first_line = (rel.rich_description or rel.description).split("\n", 1)[0]
        return truncate(plain_text(first_line), self.summary_chars)

    def _rows(self, props: Iterable[Relationship], warnings: _Warnings) -> tuple[PropertyRow, ...]:
        rows = []
        for rel in sorted(props, key=lambda prop: prop.name):
            ranges = tuple(
                self._type_link(target, warnings, owner=rel.name, field="rangeIncludes")
                for target in rel.to_types
            )
            rows.append(
                PropertyRow(
                    property=self._property_link(rel.name, warnings, owner=rel.name, field="name"),
                    ranges=ranges,
                    summary=self._summary(rel),
                )
            )
        return tuple(rows)

    # Types -------------------------------------------------------------
    def render_type(self, name: str) -> Document:
        thing = self.vocab.things.get(name)
        if thing is None:
            raise KeyError(f"Unknown type: {name}")
        warnings = _Warnings()
        chain = self.index.ancestors(name)
        children = self.index.direct_children(name)
        props = self.index.properties_for_type(name)
        context = self.vocab.context_for(thing.source)

        frontmatter: dict[str, object] = {
            "$id": f"{context}/{thing.name}",
            "$context": context,
            "$type": "Class",
            "$source": thing.source,
            "name": thing.name,
            "description": thing.description,
        }
        if thing.sub_class_of:
            frontmatter["subClassOf"] = list(thing.sub_class_of)
        frontmatter["parents"] = list(chain)
        if children:
            frontmatter["children"] = list(children)

        for parent in thing.sub_class_of:
            if parent not in self.vocab.things:
                warnings.add(DanglingReferenceWarning(name, "subClassOf", parent))

        sections: list[Section] = [
            Section(
                kind=BREADCRUMB,
                text=name,
                links=tuple(
                    self._type_link(a, warnings, owner=name, field="parents") for a in reversed(chain)
                ),
            ),
            self._description(name, thing.description, thing.rich_description, warnings),
        ]
        if props.direct:
            sections.append(
                Section(kind=PROPERTY_TABLE, title="Properties", rows=self._rows(props.direct, warnings))
            )
        for bucket in props.inherited:
            sections.append(
                Section(
                    kind=PROPERTY_TABLE,
                    title="Inherited Properties",
                    origin=self._type_link(bucket.type, warnings, owner=name, field="parents"),
                    rows=self._rows(bucket.properties, warnings),
                )
            )
        if children:
            sections.append(
                Section(
                    kind=LINK_LIST,
                    title="Subtypes",
                    links=tuple(
                        self._type_link(child, warnings, owner=name, field="children")
                        for child in children
                    ),
                )
            )
        if thing.source == EXTENSION:
            sections.append(
                Section(
                    kind=CODE,
                    title="Usage",
                    language="json",
                    text=_usage_example(context, thing.name),
                )
            )
        return Document(
            kind=TYPE,
            name=name,
            frontmatter=frontmatter,
            sections=tuple(sections),
            warnings=warnings.freeze(),
            ancestors=tuple(chain),
        )

    # Properties --------------------------------------------------------
    def render_property(self, name: str) -> Document:
        rel = self.vocab.relationships.get(name)
        if rel is None:
            raise KeyError(f"Unknown property: {name}")
        warnings = _Warnings()
        context = self.vocab.context_for(rel.source)

        frontmatter: dict[str, object] = {
            "$id": f"{context}/{rel.name}",
            "$context": context,
            "$type": "Property",
            "$source": rel.source,
            "name": rel.name,
            "description": rel.description,
        }
        if rel.from_types:
            frontmatter["domainIncludes"] = list(rel.from_types)
        if rel.to_types:
            frontmatter["rangeIncludes"] = list(rel.to_types)
        if rel.sub_property_of:
            frontmatter["subPropertyOf"] = rel.sub_property_of
        if rel.inverse_of:
            frontmatter["inverseOf"] = rel.inverse_of
        if rel.superseded_by:
            frontmatter["supersededBy"] = rel.superseded_by

        sections: list[Section] = [
            self._description(name, rel.description, rel.rich_description, warnings)
        ]
        if rel.from_types:
            sections.append(
                Section(
                    kind=LINK_LIST,
                    title="Used On",
                    text="This property is used on the following types:",
                    links=tuple(
                        self._type_link(t, warnings, owner=name, field="domainIncludes")
                        for t in sorted(rel.from_types)
                    ),
                )
            )
        direct = set(rel.from_types)
        inherited = [t for t in self.index.types_for_property(name) if t not in direct]
        if inherited:
            shown = inherited[: self.inherited_by_limit]
            sections.append(
                Section(
                    kind=LINK_LIST,
                    title="Inherited By",
                    text="This property is also available on these types through inheritance:",
                    links=tuple(
                        self._type_link(t, warnings, owner=name, field="inheritedBy") for t in shown
                    ),
                    more=len(inherited) - len(shown),
                )
            )
        if rel.to_types:
            sections.append(
                Section(
                    kind=LINK_LIST,
                    title="Expected Types",
                    text="Values are expected to be one of:",
                    links=tuple(
                        self._type_link(t, warnings, owner=name, field="rangeIncludes")
                        for t in sorted(rel.to_types)
                    ),
                )
            )
        for title, field_name, target in (
            ("Inverse Property", "inverseOf", rel.inverse_of),
            ("Parent Property", "subPropertyOf", rel.sub_property_of),
            ("Superseded By", "supersededBy", rel.superseded_by),
        ):
            if target:
                sections.append(
                    Section(
                        kind=LINK_LIST,
                        title=title,
                        links=(self._property_link(target, warnings, owner=name, field=field_name),),
                    )
                )
        return Document(
            kind=PROPERTY,
            name=name,
            frontmatter=frontmatter,
            sections=tuple(sections),
            warnings=warnings.freeze(),
        )


def _usage_example(context: str, name: str) -> str:
    example = {"@context": context, "@type": name, "name": f"Example {name}"}
    return json.dumps(example, indent=2)


def render_type(vocab: ExtendedVocabulary, name: str) -> Document:
    return DocumentRenderer(HierarchyIndex(vocab)).render_type(name)


def render_property(vocab: ExtendedVocabulary, name: str) -> Document:
    return DocumentRenderer(HierarchyIndex(vocab)).render_property(name)


__all__ = ["DocumentRenderer", "render_type", "render_property", "truncate", "ELLIPSIS"]
