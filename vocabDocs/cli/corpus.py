from __future__ import annotations

"""``validate`` and ``snapshot``: checks and archives for a written corpus."""

import json
from pathlib import Path

import click

from vocabDocs.cli.sources import site_config
from vocabDocs.corpus import snapshot_corpus, validate_corpus

corpus_dir_option = click.option(
    "--dir",
    "data_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Corpus directory (defaults to output.out_dir).",
)


def _corpus_dir(ctx: click.Context, data_dir: Path | None) -> Path:
    path = data_dir or Path(site_config(ctx).output.out_dir)
    if not path.is_dir():
        raise click.ClickException(f"Corpus directory not found: {path}")
    return path


@click.command("validate")
@corpus_dir_option
@click.option("--json", "as_json", is_flag=True, default=False, help="Print issues as JSON.")
@click.pass_context
def validate_cmd(ctx: click.Context, data_dir: Path | None, as_json: bool) -> None:
    """Check frontmatter, checksums and internal links of a generated corpus."""

    data_dir = _corpus_dir(ctx, data_dir)
    problems = validate_corpus(data_dir)
    if as_json:
        click.echo(json.dumps({"dir": str(data_dir), "issues": problems}, indent=2))
        ctx.exit(1 if problems else 0)
    for problem in problems:
        click.echo(f"- {problem}", err=True)
    if problems:
        raise click.ClickException(f"{len(problems)} validation issue(s) detected")
    click.echo(f"Corpus under {data_dir} passed validation")


@click.command("snapshot")
@corpus_dir_option
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("dist") / "corpus",
    show_default=True,
    help="Directory receiving timestamped snapshots.",
)
@click.pass_context
def snapshot_cmd(ctx: click.Context, data_dir: Path | None, out_dir: Path) -> None:
    """Copy a generated corpus into ``OUT/<UTC timestamp>``."""

    data_dir = _corpus_dir(ctx, data_dir)
    try:
        target = snapshot_corpus(data_dir, out_dir)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    files = sum(1 for path in target.rglob("*") if path.is_file())
    click.echo(f"Snapshot created at {target} ({files} files)")


__all__ = ["validate_cmd", "snapshot_cmd"]
