from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from vocabDocs.cli.__main__ import cli


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch) -> None:
    monkeypatch.delenv("VOCABDOCS_CONFIG", raising=False)


def _generate(runner: CliRunner, fixtures_dir: Path, out: Path, *extra: str):
    return runner.invoke(
        cli,
        [
            "generate",
            "--base",
            str(fixtures_dir / "schemaorg-sample.jsonld"),
            "--extension-file",
            str(fixtures_dir / "extensions.jsonld"),
            "--out",
            str(out),
            *extra,
        ],
    )


def test_generate_validate_snapshot(tmp_path: Path, fixtures_dir: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    out = tmp_path / "content"

    result = _generate(runner, fixtures_dir, out)
    assert result.exit_code == 0, result.output
    assert "Generated 9 types and 10 properties (57 files)" in result.output
    assert "Skipped: 0" in result.output

    result = runner.invoke(cli, ["validate", "--dir", str(out)])
    assert result.exit_code == 0, result.output
    assert "passed validation" in result.output

    result = runner.invoke(cli, ["snapshot", "--dir", str(out), "--out", str(tmp_path / "snaps")])
    assert result.exit_code == 0, result.output
    assert "Snapshot created at" in result.output
    assert len(list((tmp_path / "snaps").iterdir())) == 1


def test_generate_json_report(tmp_path: Path, fixtures_dir: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = _generate(CliRunner(), fixtures_dir, tmp_path / "content", "--json", "-t", "Article")
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["types"] == 3
    assert payload["skipped"] == 0


def test_generate_profiles_and_extensions_only(tmp_path: Path, fixtures_dir: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "content"
    result = _generate(CliRunner(), fixtures_dir, out, "--extensions", "--profile", "html")
    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in (out / "things").glob("*.html")) == [
        "Agent.html",
        "Intangible.html",
        "Person.html",
        "Thing.html",
        "Tool.html",
    ]


def test_selection_flags_are_exclusive(tmp_path: Path, fixtures_dir: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = _generate(CliRunner(), fixtures_dir, tmp_path / "content", "--all", "--extensions")
    assert result.exit_code == 2
    assert "mutually exclusive" in result.output


def test_generate_requires_a_base(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["generate", "--out", str(tmp_path / "content")])
    assert result.exit_code == 1
    assert "No base vocabulary" in result.output


def test_generate_reports_conflicts(tmp_path: Path, fixtures_dir: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = _generate(
        CliRunner(), fixtures_dir, tmp_path / "content", "--conflict-strategy", "error-on-conflict"
    )
    assert result.exit_code == 1
    assert "Naming conflict between base and extension: Person" in result.output


def test_generate_live_uses_client(tmp_path: Path, fixtures_dir: Path, base_raw, monkeypatch) -> None:
    calls: list[str] = []

    class FakeClient:
        def __init__(self, *, cache_dir=None):
            self.cache_dir = cache_dir

        def __enter__(self):
            return self

        def __exit__(self, *exc_info):
            return None

        def get_vocabulary(self, url=None):
            calls.append(url)
            return base_raw

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("vocabDocs.cli.sources.SchemaOrgClient", FakeClient)
    result = CliRunner().invoke(cli, ["generate", "--live", "--out", str(tmp_path / "content"), "-t", "Person"])
    assert result.exit_code == 0, result.output
    assert calls == ["https://schema.org/version/latest/schemaorg-current-https.jsonld"]
    assert (tmp_path / "content" / "things" / "Person.mdx").exists()


def test_config_file_is_applied(tmp_path: Path, fixtures_dir: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = tmp_path / "site.yml"
    config.write_text(
        "output:\n  out_dir: site-out\n  profiles: [json]\n"
        f"sources:\n  base_path: {fixtures_dir / 'schemaorg-sample.jsonld'}\n",
        encoding="utf-8",
    )
    result = CliRunner().invoke(cli, ["generate", "-t", "Thing"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "site-out" / "things" / "Thing.json").exists()


def test_invalid_config_is_reported(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    bad = tmp_path / "bad.yml"
    bad.write_text("vocabulary:\n  conflict_strategy: newest-wins\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(bad), "validate"])
    assert result.exit_code == 1
    assert "Unknown conflict_strategy" in result.output


def test_validate_reports_problems(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["validate", "--dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "validation issue(s) detected" in result.output


def test_inspect_type_and_property(tmp_path: Path, fixtures_dir: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    args = [
        "--base",
        str(fixtures_dir / "schemaorg-sample.jsonld"),
        "--extension-file",
        str(fixtures_dir / "extensions.jsonld"),
    ]
    runner = CliRunner()
    result = runner.invoke(cli, ["inspect", "Article", *args])
    assert result.exit_code == 0, result.output
    assert "Thing > CreativeWork > Article" in result.output
    assert "articleBody" in result.output
    assert "Expected Type" in result.output

    result = runner.invoke(cli, ["inspect", "alumniOf", *args])
    assert result.exit_code == 0, result.output
    assert "inverseOf" in result.output

    result = runner.invoke(cli, ["inspect", "Nope", *args])
    assert result.exit_code == 1
    assert "Unknown type or property: Nope" in result.output


def test_export_ttl(tmp_path: Path, fixtures_dir: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "rdf"
    result = CliRunner().invoke(
        cli,
        [
            "export-ttl",
            "--base",
            str(fixtures_dir / "schemaorg-sample.jsonld"),
            "--out",
            str(out),
        ],
    )
    assert result.exit_code == 0, result.output
    assert (out / "vocabulary.ttl").exists()
    assert (out / "vocabulary.nt").exists()
    assert "triples" in result.output


def test_validate_json_flags_tampered_file(tmp_path: Path, fixtures_dir: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    out = tmp_path / "content"
    assert _generate(runner, fixtures_dir, out).exit_code == 0

    result = runner.invoke(cli, ["validate", "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"dir": "content", "issues": []}

    (out / "things" / "Person.md").write_text("changed\n", encoding="utf-8")
    result = runner.invoke(cli, ["validate", "--json", "--dir", str(out)])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["issues"] == ["things/Person.md: checksum mismatch"]


def test_corpus_commands_need_an_existing_directory(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    for command in ("validate", "snapshot"):
        result = CliRunner().invoke(cli, [command])
        assert result.exit_code == 1
        assert "Corpus directory not found: content" in result.output


def test_log_level_is_validated() -> None:
    result = CliRunner().invoke(cli, ["--log-level", "chatty", "validate"])
    assert result.exit_code == 2
