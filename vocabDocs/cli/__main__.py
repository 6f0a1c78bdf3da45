from __future__ import annotations

"""Top-level CLI for generating and inspecting vocabulary documentation."""

import json
from pathlib import Path

import click

from vocabDocs import __version__
from vocabDocs.cli.corpus import snapshot_cmd, validate_cmd
from vocabDocs.cli.inspect_cmd import inspect_cmd
from vocabDocs.cli.sources import (
    base_option,
    extension_option,
    live_option,
    load_inputs,
    site_config,
    strategy_option,
)
from vocabDocs.config.site_config import OUTPUT_PROFILES, load_site_config
from vocabDocs.errors import VocabDocsError
from vocabDocs.pipelines.generate import build_vocabulary, generate_site
from vocabDocs.utils.log_json import configure_logging
from vocabDocs.vocab.graph import export_vocabulary


@click.group()
@click.version_option(__version__)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Site configuration YAML (defaults to $VOCABDOCS_CONFIG or ./site.yml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Threshold for the JSON event log written to stderr.",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Path | None, log_level: str) -> None:
    """vocabDocs command line."""

    configure_logging(log_level)
    try:
        config = load_site_config(config_file)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@base_option
@live_option
@extension_option
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory for the corpus (defaults to output.out_dir).",
)
@click.option(
    "--profile",
    "profiles",
    multiple=True,
    type=click.Choice(OUTPUT_PROFILES),
    help="Output profiles to write (repeatable; defaults to output.profiles).",
)
@click.option("--all", "all_types", is_flag=True, default=False, help="Document every type.")
@click.option(
    "--extensions",
    "extensions_only",
    is_flag=True,
    default=False,
    help="Document extension types only.",
)
@click.option(
    "-t",
    "--types",
    "types",
    multiple=True,
    help="Type names to document (repeatable).",
)
@strategy_option
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the report as JSON.")
@click.pass_context
def generate(
    ctx: click.Context,
    base_path: Path | None,
    live: bool,
    extension_path: Path | None,
    out_dir: Path | None,
    profiles: tuple[str, ...],
    all_types: bool,
    extensions_only: bool,
    types: tuple[str, ...],
    conflict_strategy: str | None,
    as_json: bool,
) -> None:
    """Generate the documentation corpus."""

    if sum((all_types, extensions_only, bool(types))) > 1:
        raise click.UsageError("--all, --extensions and --types are mutually exclusive")
    config = site_config(ctx)
    base_raw, extension_raw = load_inputs(config, base_path, extension_path, live)
    try:
        report = generate_site(
            base_raw,
            extension_raw,
            config=config,
            out_dir=out_dir,
            types=list(types) or None,
            all_types=all_types,
            extensions_only=extensions_only,
            profiles=list(profiles) or None,
            conflict_strategy=conflict_strategy,
        )
    except (VocabDocsError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    if as_json:
        click.echo(json.dumps(report.as_dict(), indent=2, sort_keys=True))
        return
    for failure in report.failures:
        click.echo(f"skipped: {failure}", err=True)
    click.echo(
        f"Generated {report.types} types and {report.properties} properties "
        f"({report.files} files) in {report.out_dir}"
    )
    click.echo(f"Skipped: {report.skipped}, warnings: {len(report.warnings)}")


@cli.command(name="export-ttl")
@base_option
@live_option
@extension_option
@strategy_option
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("dist") / "vocabulary",
    show_default=True,
    help="Output directory for Turtle and N-Triples files.",
)
@click.pass_context
def export_ttl(
    ctx: click.Context,
    base_path: Path | None,
    live: bool,
    extension_path: Path | None,
    conflict_strategy: str | None,
    out_dir: Path,
) -> None:
    """Export the merged vocabulary as RDF."""

    config = site_config(ctx)
    base_raw, extension_raw = load_inputs(config, base_path, extension_path, live)
    try:
        index, _ = build_vocabulary(
            base_raw, extension_raw, config=config, conflict_strategy=conflict_strategy
        )
    except (VocabDocsError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    manifest = export_vocabulary(index.vocab, out_dir)
    summary = manifest["summary"]
    click.echo(f"vocabulary: {summary['triples']} triples -> {out_dir / 'vocabulary.ttl'}")


cli.add_command(validate_cmd)
cli.add_command(snapshot_cmd)
cli.add_command(inspect_cmd)


def main() -> None:  # pragma: no cover - CLI entrypoint
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
