from __future__ import annotations

"""Combine a base vocabulary with local extensions."""

from dataclasses import dataclass
from typing import Mapping, TypeVar

from vocabDocs.errors import ConflictError
from vocabDocs.utils.log_json import JsonLogger
from vocabDocs.vocab.model import (
    BASE,
    EXTENSION,
    ExtendedVocabulary,
    Relationship,
    Thing,
    Vocabulary,
)

_logger = JsonLogger("merge")

EXTENSION_WINS = "extension-wins"
BASE_WINS = "base-wins"
ERROR_ON_CONFLICT = "error-on-conflict"
STRATEGIES = (EXTENSION_WINS, BASE_WINS, ERROR_ON_CONFLICT)

_E = TypeVar("_E", Thing, Relationship)


@dataclass(frozen=True)
class MergeOptions:
    base_context: str = "https://schema.org"
    extension_context: str = "https://schema.org.ai"
    conflict_strategy: str = EXTENSION_WINS
    root: str = "Thing"

    def __post_init__(self) -> None:
        if self.conflict_strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown conflict strategy '{self.conflict_strategy}' "
                f"(expected one of {', '.join(STRATEGIES)})"
            )


def _union(
    base: Mapping[str, _E],
    extension: Mapping[str, _E],
    strategy: str,
) -> tuple[dict[str, _E], list[str]]:
    merged: dict[str, _E] = {name: entity.with_source(BASE) for name, entity in base.items()}
    collisions: list[str] = []
    for name, entity in extension.items():
        if name in merged:
            collisions.append(name)
            if strategy == BASE_WINS:
                continue
        merged[name] = entity.with_source(EXTENSION)
    return merged, collisions


def merge(
    base: Vocabulary,
    extension: Vocabulary | None = None,
    options: MergeOptions | None = None,
) -> ExtendedVocabulary:
    """Union ``base`` and ``extension`` by name under ``options.conflict_strategy``.

    ``error-on-conflict`` raises :class:`ConflictError` naming every collision
    (types and properties) and produces no vocabulary. Inputs are left
    untouched; every surviving entity carries its ``source`` tag.
    """

    options = options or MergeOptions()
    ext_things = extension.things if extension is not None else {}
    ext_relationships = extension.relationships if extension is not None else {}

    things, type_collisions = _union(base.things, ext_things, options.conflict_strategy)
    relationships, prop_collisions = _union(
        base.relationships, ext_relationships, options.conflict_strategy
    )
    collisions = type_collisions + prop_collisions
    if collisions and options.conflict_strategy == ERROR_ON_CONFLICT:
        _logger.error("vocab.merge.conflict", names=sorted(collisions), count=len(collisions))
        raise ConflictError(collisions)
    if collisions:
        _logger.info(
            "vocab.merge.collisions_resolved",
            strategy=options.conflict_strategy,
            count=len(collisions),
        )

    vocab = ExtendedVocabulary(
        things=things,
        relationships=relationships,
        base_context=options.base_context.rstrip("/"),
        extension_context=options.extension_context.rstrip("/"),
        root=options.root,
    )
    _logger.info(
        "vocab.merge.complete",
        types=len(vocab.things),
        properties=len(vocab.relationships),
        extension_types=sum(1 for t in vocab.things.values() if t.source == EXTENSION),
        extension_properties=sum(1 for r in vocab.relationships.values() if r.source == EXTENSION),
    )
    return vocab


def filter_by_source(
    vocab: ExtendedVocabulary, source: str
) -> tuple[list[Thing], list[Relationship]]:
    """Return the name-sorted types and properties carrying ``source``."""

    things = [thing for thing in vocab.iter_things() if thing.source == source]
    relationships = [rel for rel in vocab.iter_relationships() if rel.source == source]
    return things, relationships


__all__ = [
    "EXTENSION_WINS",
    "BASE_WINS",
    "ERROR_ON_CONFLICT",
    "STRATEGIES",
    "MergeOptions",
    "merge",
    "filter_by_source",
]
