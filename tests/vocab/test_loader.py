from __future__ import annotations

import json
from pathlib import Path

from vocabDocs.vocab.loader import load, load_document, local_name
from vocabDocs.vocab.model import BASE, EXTENSION


def test_load_schemaorg_graph(base_raw) -> None:
    vocab = load(base_raw, source=BASE, context="https://schema.org")

    assert sorted(vocab.things) == [
        "Article",
        "CreativeWork",
        "Intangible",
        "Organization",
        "Person",
        "Rating",
        "Text",
        "Thing",
    ]
    assert len(vocab.relationships) == 8
    assert vocab.things["Thing"].id == "https://schema.org/Thing"
    assert vocab.things["Article"].sub_class_of == ("CreativeWork",)
    assert vocab.things["Thing"].sub_class_of == ()
    author = vocab.relationships["author"]
    assert author.from_types == ("CreativeWork",)
    assert author.to_types == ("Person", "Organization")
    assert vocab.relationships["alumniOf"].inverse_of == "alumni"
    assert all(thing.source == BASE for thing in vocab.things.values())


def test_unsupported_kinds_are_reported_once_per_kind(base_raw) -> None:
    vocab = load(base_raw)
    assert "Monday" not in vocab.things
    assert vocab.warnings == ("skipped 1 entities of unsupported kind 'DayOfWeek'",)


def test_descriptions_are_sanitized(base_raw) -> None:
    article = load(base_raw).things["Article"]
    assert article.description == (
        "An article, such as a news article or piece of investigative report. "
        "See also NewsArticle and blog posts."
    )
    assert article.rich_description == (
        "An article, such as a news article or piece of investigative report.\n"
        "See also [[NewsArticle]] and [blog posts](/BlogPosting)."
    )


def test_extension_layout_with_dollar_keys(extension_raw) -> None:
    vocab = load(extension_raw, source=EXTENSION, context="https://schema.org.ai")
    assert sorted(vocab.things) == ["Agent", "Person", "Tool"]
    assert vocab.things["Agent"].id == "https://schema.org.ai/Agent"
    assert vocab.things["Tool"].sub_class_of == ("Intangible",)
    assert vocab.relationships["operator"].to_types == ("Person", "Organization")
    assert vocab.warnings == ()


def test_missing_name_is_skipped_with_warning() -> None:
    vocab = load({"types": [{"description": "no name"}, {"name": "Thing"}]})
    assert list(vocab.things) == ["Thing"]
    assert vocab.warnings == ("skipped malformed entity: entity #0 has no name",)


def test_duplicate_names_keep_last_definition() -> None:
    vocab = load({"types": [{"name": "A", "description": "one"}, {"name": "A", "description": "two"}]})
    assert vocab.things["A"].description == "two"
    assert vocab.warnings == ("duplicate type 'A': last definition wins",)


def test_english_label_is_preferred() -> None:
    raw = {
        "@graph": [
            {
                "@type": "rdfs:Class",
                "rdfs:label": [
                    {"@language": "de", "@value": "Ding"},
                    {"@language": "en", "@value": "Thing"},
                ],
            }
        ]
    }
    assert list(load(raw).things) == ["Thing"]


def test_repeated_parents_are_deduplicated() -> None:
    vocab = load({"types": [{"name": "A", "subClassOf": ["A", "B", "B"]}]})
    assert vocab.things["A"].sub_class_of == ("A", "B")


def test_local_name() -> None:
    assert local_name("schema:Person") == "Person"
    assert local_name("https://schema.org/Person") == "Person"
    assert local_name("http://www.w3.org/2000/01/rdf-schema#Class") == "Class"
    assert local_name("Thing") == "Thing"


def test_load_document(tmp_path: Path) -> None:
    assert load_document(tmp_path / "missing.jsonld") is None
    path = tmp_path / "ext.jsonld"
    path.write_text(json.dumps({"types": [{"name": "Agent"}]}), encoding="utf-8")
    assert load_document(path) == {"types": [{"name": "Agent"}]}
