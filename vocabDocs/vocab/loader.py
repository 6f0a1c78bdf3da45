from __future__ import annotations

"""Parse JSON-LD-like vocabulary documents into :class:`Vocabulary` values."""

import json
import re
from collections import Counter
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from vocabDocs.errors import ParseError
from vocabDocs.utils.log_json import JsonLogger
from vocabDocs.vocab.model import BASE, Relationship, Thing, Vocabulary
from vocabDocs.vocab.sanitize import sanitize_description

_logger = JsonLogger("loader")

CLASS_KINDS = {"Class"}
PROPERTY_KINDS = {"Property"}

_LABEL_KEYS = ("rdfs:label", "name", "label")
_COMMENT_KEYS = ("rdfs:comment", "description", "comment")
_SUBCLASS_KEYS = ("rdfs:subClassOf", "subClassOf")
_DOMAIN_KEYS = ("schema:domainIncludes", "domainIncludes", "from")
_RANGE_KEYS = ("schema:rangeIncludes", "rangeIncludes", "to")
_SUBPROPERTY_KEYS = ("rdfs:subPropertyOf", "subPropertyOf")
_INVERSE_KEYS = ("schema:inverseOf", "inverseOf")
_SUPERSEDED_KEYS = ("schema:supersededBy", "supersededBy")
_ID_KEYS = ("@id", "$id", "id")
_TYPE_KEYS = ("@type", "$type", "type")

_LOCAL_NAME_RE = re.compile(r"[/#:]")


def local_name(value: str) -> str:
    """Reduce ``schema:Person`` or ``https://schema.org/Person`` to ``Person``."""

    text = str(value).strip().rstrip("/#")
    if not text:
        return ""
    return _LOCAL_NAME_RE.split(text)[-1]


def _first(entity: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in entity and entity[key] is not None:
            return entity[key]
    return None


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _literal(value: Any) -> str:
    """Pick the English (or first) string out of a JSON-LD literal value."""

    candidates = _as_list(value)
    if not candidates:
        return ""
    fallback: str | None = None
    for item in candidates:
        if isinstance(item, Mapping):
            text = item.get("@value")
            if text is None:
                continue
            language = str(item.get("@language") or "en").lower()
            if language.startswith("en"):
                return str(text)
            fallback = fallback if fallback is not None else str(text)
        elif item is not None:
            return str(item)
    return fallback or ""


def _refs(value: Any) -> tuple[str, ...]:
    """Coerce a scalar or list of references into an ordered tuple of names."""

    names: list[str] = []
    for item in _as_list(value):
        if isinstance(item, Mapping):
            raw = _first(item, ("@id", "$id", "id", "name"))
        else:
            raw = item
        if raw is None:
            continue
        name = local_name(str(raw))
        if name and name not in names:
            names.append(name)
    return tuple(names)


def _single_ref(value: Any) -> str | None:
    refs = _refs(value)
    return refs[0] if refs else None


def _entity_kinds(entity: Mapping[str, Any]) -> list[str]:
    return [local_name(str(kind)) for kind in _as_list(_first(entity, _TYPE_KEYS))]


def _entity_id(raw_id: Any, name: str, context: str) -> str:
    if raw_id:
        text = str(raw_id).strip()
        if "://" in text:
            return text
        if ":" in text and context:
            return f"{context}/{local_name(text)}"
        return text
    return f"{context}/{name}" if context else name


def _entity_name(entity: Mapping[str, Any]) -> str:
    name = _literal(_first(entity, _LABEL_KEYS)).strip()
    if name:
        return name
    raw_id = _first(entity, _ID_KEYS)
    return local_name(str(raw_id)) if raw_id else ""


def _iter_entities(raw: Any) -> Iterable[tuple[Mapping[str, Any], str | None]]:
    """Yield ``(entity, default_kind)`` pairs from any supported layout."""

    if isinstance(raw, Mapping):
        if "@graph" in raw:
            for entity in _as_list(raw["@graph"]):
                yield entity, None
            return
        if any(key in raw for key in ("things", "types", "properties", "relationships")):
            for key in ("things", "types"):
                for entity in _as_list(raw.get(key)):
                    yield entity, "Class"
            for key in ("properties", "relationships"):
                for entity in _as_list(raw.get(key)):
                    yield entity, "Property"
            return
        yield raw, None
        return
    for entity in _as_list(raw):
        yield entity, None


def _parse_thing(entity: Mapping[str, Any], name: str, context: str, source: str) -> Thing:
    plain, rich = sanitize_description(_literal(_first(entity, _COMMENT_KEYS)))
    parents = _refs(_first(entity, _SUBCLASS_KEYS))
    return Thing(
        name=name,
        id=_entity_id(_first(entity, _ID_KEYS), name, context),
        description=plain,
        rich_description=rich,
        sub_class_of=parents,
        source=source,
    )


def _parse_relationship(
    entity: Mapping[str, Any], name: str, context: str, source: str
) -> Relationship:
    plain, rich = sanitize_description(_literal(_first(entity, _COMMENT_KEYS)))
    return Relationship(
        name=name,
        id=_entity_id(_first(entity, _ID_KEYS), name, context),
        description=plain,
        rich_description=rich,
        from_types=_refs(_first(entity, _DOMAIN_KEYS)),
        to_types=_refs(_first(entity, _RANGE_KEYS)),
        sub_property_of=_single_ref(_first(entity, _SUBPROPERTY_KEYS)),
        inverse_of=_single_ref(_first(entity, _INVERSE_KEYS)),
        superseded_by=_single_ref(_first(entity, _SUPERSEDED_KEYS)),
        source=source,
    )


def load(raw: Any, *, source: str = BASE, context: str = "") -> Vocabulary:
    """Build a :class:`Vocabulary` from an already-parsed JSON-LD document.

    Unknown entity kinds and malformed entities are skipped; duplicate names
    keep the last definition. Every such event is recorded in
    :attr:`Vocabulary.warnings`.
    """

    context = str(context or "").rstrip("/")
    things: dict[str, Thing] = {}
    relationships: dict[str, Relationship] = {}
    warnings: list[str] = []
    skipped_kinds: Counter[str] = Counter()

    for position, (entity, default_kind) in enumerate(_iter_entities(raw)):
        try:
            if not isinstance(entity, Mapping):
                raise ParseError(f"entity #{position} is not an object")
            kinds = _entity_kinds(entity) or ([default_kind] if default_kind else [])
            is_class = bool(CLASS_KINDS.intersection(kinds))
            is_property = bool(PROPERTY_KINDS.intersection(kinds))
            if not (is_class or is_property):
                skipped_kinds[",".join(kinds) or "<untyped>"] += 1
                continue
            name = _entity_name(entity)
            if not name:
                raise ParseError(f"entity #{position} has no name")
            if is_class:
                if name in things:
                    warnings.append(f"duplicate type '{name}': last definition wins")
                things[name] = _parse_thing(entity, name, context, source)
            else:
                if name in relationships:
                    warnings.append(f"duplicate property '{name}': last definition wins")
                relationships[name] = _parse_relationship(entity, name, context, source)
        except ParseError as exc:
            warnings.append(f"skipped malformed entity: {exc}")
            _logger.warning("vocab.load.entity_skipped", source=source, reason=str(exc))

    for kind, count in sorted(skipped_kinds.items()):
        warnings.append(f"skipped {count} entities of unsupported kind '{kind}'")

    _logger.info(
        "vocab.load.complete",
        source=source,
        types=len(things),
        properties=len(relationships),
        warnings=len(warnings),
    )
    return Vocabulary(
        things=things,
        relationships=relationships,
        context=context,
        warnings=tuple(warnings),
    )


def load_document(path: Path) -> Any | None:
    """Read a JSON-LD file; a missing file yields ``None``."""

    path = Path(path)
    if not path.exists():
        _logger.info("vocab.document.missing", path=str(path))
        return None
    return json.loads(path.read_text(encoding="utf-8"))


__all__ = ["load", "load_document", "local_name"]
