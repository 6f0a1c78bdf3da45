from __future__ import annotations

import pytest

from vocabDocs.errors import ConflictError
from vocabDocs.vocab.hierarchy import direct_children
from vocabDocs.vocab.loader import load
from vocabDocs.vocab.merge import (
    BASE_WINS,
    ERROR_ON_CONFLICT,
    MergeOptions,
    filter_by_source,
    merge,
)
from vocabDocs.vocab.model import BASE, EXTENSION


def _pair():
    base = load({"types": [{"name": "Thing"}, {"name": "X", "description": "A", "subClassOf": ["Thing"]}]})
    extension = load(
        {"types": [{"name": "X", "description": "B", "subClassOf": ["Thing"]}]}, source=EXTENSION
    )
    return base, extension


def test_extension_wins_by_default() -> None:
    base, extension = _pair()
    vocab = merge(base, extension)
    assert vocab.things["X"].description == "B"
    assert vocab.things["X"].source == EXTENSION
    assert vocab.things["Thing"].source == BASE
    # inputs are left untouched
    assert base.things["X"].description == "A"


def test_base_wins_keeps_base_definition() -> None:
    base, extension = _pair()
    vocab = merge(base, extension, MergeOptions(conflict_strategy=BASE_WINS))
    assert vocab.things["X"].description == "A"
    assert vocab.things["X"].source == BASE


def test_error_on_conflict_names_every_collision() -> None:
    base = load({"types": [{"name": "X"}], "properties": [{"name": "name"}]})
    extension = load({"types": [{"name": "X"}], "properties": [{"name": "name"}]}, source=EXTENSION)
    with pytest.raises(ConflictError) as excinfo:
        merge(base, extension, MergeOptions(conflict_strategy=ERROR_ON_CONFLICT))
    assert excinfo.value.names == ("X", "name")


def test_unknown_strategy_rejected() -> None:
    with pytest.raises(ValueError):
        MergeOptions(conflict_strategy="newest-wins")


def test_missing_extension_is_allowed() -> None:
    base, _ = _pair()
    vocab = merge(base, None)
    assert sorted(vocab.things) == ["Thing", "X"]


def test_contexts_are_normalized() -> None:
    base, extension = _pair()
    vocab = merge(base, extension, MergeOptions(base_context="https://schema.org/"))
    assert vocab.base_context == "https://schema.org"
    assert vocab.entity_id("X", EXTENSION) == "https://schema.org.ai/X"


def test_extension_override_scenario() -> None:
    base = load({"types": [{"name": "Thing"}]})
    extension = load(
        {"types": [{"name": "Agent", "subClassOf": ["Thing"], "description": "An autonomous actor"}]},
        source=EXTENSION,
    )
    vocab = merge(base, extension)
    assert vocab.things["Agent"].source == EXTENSION
    assert "Agent" in direct_children(vocab, "Thing")


def test_filter_by_source(vocab) -> None:
    things, relationships = filter_by_source(vocab, EXTENSION)
    assert [t.name for t in things] == ["Agent", "Person", "Tool"]
    assert [r.name for r in relationships] == ["operator", "tools"]
