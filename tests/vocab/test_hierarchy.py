from __future__ import annotations

import pytest

from vocabDocs.errors import CycleDetected, DanglingReferenceWarning
from vocabDocs.vocab.hierarchy import (
    HierarchyIndex,
    ancestors,
    dangling_references,
    direct_children,
    properties_for_type,
    types_for_property,
)


def test_minimal_hierarchy_scenario(make_vocab) -> None:
    vocab = make_vocab(
        {"Thing": [], "CreativeWork": ["Thing"], "Article": ["CreativeWork"]},
        {"headline": (["Article"], [])},
    )
    assert ancestors(vocab, "Article") == ["CreativeWork", "Thing"]
    assert [p.name for p in properties_for_type(vocab, "Article").direct] == ["headline"]
    assert properties_for_type(vocab, "Thing").inherited == ()


def test_cycle_is_detected(make_vocab) -> None:
    vocab = make_vocab({"A": ["B"], "B": ["A"]})
    with pytest.raises(CycleDetected) as excinfo:
        ancestors(vocab, "A")
    assert excinfo.value.chain == ("A", "B", "A")
    with pytest.raises(CycleDetected):
        HierarchyIndex(vocab).validate()

    with pytest.raises(CycleDetected) as excinfo:
        ancestors(make_vocab({"A": ["A"]}), "A")
    assert excinfo.value.chain == ("A", "A")


def test_every_chain_ends_at_a_root(index) -> None:
    roots = set(index.roots())
    for name in index.vocab.type_names():
        chain = index.ancestors(name)
        top = chain[-1] if chain else name
        assert top in roots


def test_fixture_hierarchy(index) -> None:
    assert index.ancestors("Article") == ["CreativeWork", "Thing"]
    assert index.breadcrumb("Rating") == ["Thing", "Intangible", "Rating"]
    assert index.direct_children("Thing") == [
        "Agent",
        "CreativeWork",
        "Intangible",
        "Organization",
        "Person",
    ]
    assert index.direct_children("Intangible") == ["Rating", "Tool"]
    assert index.roots() == ["Thing", "Text"]


def test_unknown_parent_ends_chain_and_is_dangling(make_vocab) -> None:
    vocab = make_vocab({"Thing": [], "Orphan": ["Missing"]})
    index = HierarchyIndex(vocab).validate()
    assert index.ancestors("Orphan") == []
    assert "Orphan" in index.roots()
    assert dangling_references(vocab) == [DanglingReferenceWarning("Orphan", "subClassOf", "Missing")]


def test_partition_invariant_holds_for_every_type(index) -> None:
    vocab = index.vocab
    for name in vocab.type_names():
        props = index.properties_for_type(name)
        names = props.names()
        assert len(names) == len(set(names))
        direct = {p.name for p in props.direct}
        for bucket in props.inherited:
            assert not direct.intersection(p.name for p in bucket.properties)
            assert bucket.properties
        scope = {name, *index.ancestors(name)}
        expected = {rel.name for rel in vocab.iter_relationships() if scope.intersection(rel.from_types)}
        assert set(names) == expected


def test_nearest_declaration_wins(make_vocab) -> None:
    vocab = make_vocab(
        {"Thing": [], "Mid": ["Thing"], "Leaf": ["Mid"]},
        {"name": (["Thing", "Mid"], []), "x": (["Leaf"], []), "y": (["Mid"], [])},
    )
    props = properties_for_type(vocab, "Leaf")
    assert [p.name for p in props.direct] == ["x"]
    assert [(b.type, [p.name for p in b.properties]) for b in props.inherited] == [
        ("Mid", ["name", "y"]),
    ]
    assert [b.type for b in props.farthest_first()] == ["Mid"]


def test_inherited_buckets_are_nearest_first(index) -> None:
    props = index.properties_for_type("Article")
    assert [p.name for p in props.direct] == ["articleBody"]
    assert [(b.type, [p.name for p in b.properties]) for b in props.inherited] == [
        ("CreativeWork", ["author", "headline"]),
        ("Thing", ["description", "name"]),
    ]


def test_only_primary_parent_contributes_inheritance(make_vocab) -> None:
    vocab = make_vocab(
        {"Thing": [], "A": ["Thing"], "B": ["Thing"], "C": ["A", "B"]},
        {"pa": (["A"], []), "pb": (["B"], [])},
    )
    assert properties_for_type(vocab, "C").names() == ["pa"]
    assert direct_children(vocab, "B") == ["C"]
    assert types_for_property(vocab, "pb") == ["B"]


def test_types_for_property(index) -> None:
    assert index.types_for_property("author") == ["Article", "CreativeWork"]
    assert "Text" not in index.types_for_property("name")
    assert len(index.types_for_property("name")) == 9


def test_unknown_names_raise_key_error(index) -> None:
    with pytest.raises(KeyError):
        index.properties_for_type("Nope")
    with pytest.raises(KeyError):
        index.types_for_property("nope")
