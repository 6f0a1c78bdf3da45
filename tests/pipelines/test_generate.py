from __future__ import annotations

import json
from pathlib import Path

import pytest

from vocabDocs.config.site_config import SiteConfig
from vocabDocs.corpus.builder import validate_corpus
from vocabDocs.errors import ConflictError, CycleDetected
from vocabDocs.pipelines.generate import build_vocabulary, generate_site, select_types


def _files(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file() and p.name != "manifest.json"
    }


def test_default_selection(tmp_path: Path, base_raw, extension_raw) -> None:
    out = tmp_path / "content"
    report = generate_site(base_raw, extension_raw, out_dir=out)

    assert report.types == 9
    assert report.properties == 10
    assert report.skipped == 0
    assert "type 'Action' not found in vocabulary" in report.warnings
    assert "skipped 1 entities of unsupported kind 'DayOfWeek'" in report.warnings
    assert not (out / "things" / "Text.mdx").exists()
    assert (out / "things" / "Agent.mdx").exists()
    assert validate_corpus(out) == []

    summary = json.loads((out / "generation-report.json").read_text(encoding="utf-8"))
    assert summary["processed"] == 19
    assert summary["vocabulary"]["types"] == 10
    assert summary["write"]["documents"] == 19


def test_unpublished_types_are_not_linked(tmp_path: Path, base_raw, extension_raw) -> None:
    out = tmp_path / "content"
    generate_site(base_raw, extension_raw, out_dir=out)
    name_page = (out / "properties" / "name.md").read_text(encoding="utf-8")
    assert "- Text" in name_page.splitlines()
    assert "Text.md" not in name_page


def test_explicit_types_pull_in_ancestors(tmp_path: Path, base_raw, extension_raw) -> None:
    out = tmp_path / "content"
    report = generate_site(base_raw, extension_raw, out_dir=out, types=["Article", "Missing"])
    assert sorted(p.stem for p in (out / "things").glob("*.mdx")) == ["Article", "CreativeWork", "Thing"]
    assert report.properties == 7
    assert "type 'Missing' not found in vocabulary" in report.warnings
    assert validate_corpus(out) == []


def test_select_types(base_raw, extension_raw) -> None:
    index, _ = build_vocabulary(base_raw, extension_raw)
    assert select_types(index, extensions_only=True)[0] == ["Agent", "Intangible", "Person", "Thing", "Tool"]
    assert len(select_types(index, all_types=True)[0]) == 10
    assert select_types(index, types=["Rating"]) == (["Intangible", "Rating", "Thing"], [])


def test_generation_is_idempotent(tmp_path: Path, base_raw, extension_raw) -> None:
    out = tmp_path / "content"
    generate_site(base_raw, extension_raw, out_dir=out, all_types=True)
    first = _files(out)
    generate_site(base_raw, extension_raw, out_dir=out, all_types=True)
    assert _files(out) == first


def test_cycle_aborts_before_output(tmp_path: Path) -> None:
    raw = {"types": [{"name": "Thing"}, {"name": "A", "subClassOf": ["B"]}, {"name": "B", "subClassOf": ["A"]}]}
    out = tmp_path / "content"
    with pytest.raises(CycleDetected):
        generate_site(raw, None, out_dir=out)
    assert not out.exists()


def test_self_parent_aborts_before_output(tmp_path: Path) -> None:
    raw = {"types": [{"name": "Thing"}, {"name": "A", "subClassOf": ["A"]}]}
    out = tmp_path / "content"
    with pytest.raises(CycleDetected) as excinfo:
        generate_site(raw, None, out_dir=out, all_types=True)
    assert excinfo.value.chain == ("A", "A")
    assert not out.exists()
    assert not list(tmp_path.iterdir())


def test_conflict_strategy_override(tmp_path: Path, base_raw, extension_raw) -> None:
    out = tmp_path / "content"
    with pytest.raises(ConflictError) as excinfo:
        generate_site(base_raw, extension_raw, out_dir=out, conflict_strategy="error-on-conflict")
    assert excinfo.value.names == ("Person",)
    assert not out.exists()


def test_config_drives_profiles_and_contexts(tmp_path: Path, base_raw) -> None:
    config = SiteConfig()
    config.output.profiles = ("json",)
    config.vocabulary.base_context = "https://example.org/vocab"
    out = tmp_path / "content"
    generate_site(base_raw, None, config=config, out_dir=out, types=["Person"])
    payload = json.loads((out / "things" / "Person.json").read_text(encoding="utf-8"))
    assert payload["frontmatter"]["$id"] == "https://example.org/vocab/Person"
    assert not list((out / "things").glob("*.mdx"))
