"""Export the merged vocabulary as RDF (Turtle, sorted N-Triples, manifest)."""
from __future__ import annotations

import hashlib
import json
from pathlib import Path

from rdflib import Graph, Literal, Namespace, URIRef
from rdflib.namespace import RDF, RDFS

from vocabDocs.vocab.model import EXTENSION, ExtendedVocabulary

SCHEMA = Namespace("https://schema.org/")
VOCABDOCS = Namespace("https://schema.org.ai/meta#")


def _term(vocab: ExtendedVocabulary, name: str, *, kind: str) -> URIRef:
    pool = vocab.things if kind == "type" else vocab.relationships
    entity = pool.get(name)
    if entity is None:
        return SCHEMA[name]
    return URIRef(vocab.entity_id(name, entity.source))


def vocabulary_graph(vocab: ExtendedVocabulary) -> Graph:
    """Return an RDFS graph of ``vocab`` with provenance annotations."""

    g = Graph()
    g.bind("schema", SCHEMA)
    g.bind("rdfs", RDFS)
    g.bind("vd", VOCABDOCS)
    ext_ns = vocab.extension_context.rstrip("/") + "/"
    g.bind("ext", Namespace(ext_ns))

    for thing in vocab.iter_things():
        node = _term(vocab, thing.name, kind="type")
        g.add((node, RDF.type, RDFS.Class))
        g.add((node, RDFS.label, Literal(thing.name)))
        if thing.description:
            g.add((node, RDFS.comment, Literal(thing.description)))
        for parent in thing.sub_class_of:
            g.add((node, RDFS.subClassOf, _term(vocab, parent, kind="type")))
        g.add((node, VOCABDOCS.source, Literal(thing.source)))

    for rel in vocab.iter_relationships():
        node = _term(vocab, rel.name, kind="property")
        g.add((node, RDF.type, RDF.Property))
        g.add((node, RDFS.label, Literal(rel.name)))
        if rel.description:
            g.add((node, RDFS.comment, Literal(rel.description)))
        for domain in rel.from_types:
            g.add((node, SCHEMA.domainIncludes, _term(vocab, domain, kind="type")))
        for target in rel.to_types:
            g.add((node, SCHEMA.rangeIncludes, _term(vocab, target, kind="type")))
        if rel.sub_property_of:
            g.add((node, RDFS.subPropertyOf, _term(vocab, rel.sub_property_of, kind="property")))
        if rel.inverse_of:
            g.add((node, SCHEMA.inverseOf, _term(vocab, rel.inverse_of, kind="property")))
        if rel.superseded_by:
            g.add((node, SCHEMA.supersededBy, _term(vocab, rel.superseded_by, kind="property")))
        g.add((node, VOCABDOCS.source, Literal(rel.source)))
    return g


def export_vocabulary(vocab: ExtendedVocabulary, out_dir: Path, *, stem: str = "vocabulary") -> dict:
    """Write Turtle and N-Triples renderings of ``vocab`` with checksums."""

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    graph = vocabulary_graph(vocab)

    ttl_path = out_dir / f"{stem}.ttl"
    nt_path = out_dir / f"{stem}.nt"
    _write_graph(graph, ttl_path, fmt="turtle")
    _write_graph(graph, nt_path, fmt="nt")

    manifest = {
        path.name: _checksum_entry(path) for path in (ttl_path, nt_path)
    }
    manifest["summary"] = {
        "triples": len(graph),
        "types": len(vocab.things),
        "properties": len(vocab.relationships),
        "extension_types": sum(1 for t in vocab.things.values() if t.source == EXTENSION),
    }
    (out_dir / f"{stem}.manifest.json").write_text(
        json.dumps(manifest, indent=2, sort_keys=True), encoding="utf-8"
    )
    return manifest


def _checksum_entry(path: Path) -> dict:
    data = path.read_bytes()
    return {
        "size": len(data),
        "sha256": hashlib.sha256(data).hexdigest(),
    }


def _write_graph(graph: Graph, path: Path, *, fmt: str) -> None:
    data = graph.serialize(format=fmt, encoding="utf-8")
    if fmt == "nt":
        text = data.decode("utf-8")
        lines = [line for line in text.splitlines() if line.strip()]
        lines.sort()
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    else:
        path.write_bytes(data)


__all__ = ["SCHEMA", "VOCABDOCS", "vocabulary_graph", "export_vocabulary"]
