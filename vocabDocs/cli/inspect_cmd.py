from __future__ import annotations

"""``inspect``: print the resolved hierarchy view of one type or property."""

from pathlib import Path

import click
from tabulate import tabulate

from vocabDocs.cli.sources import (
    base_option,
    extension_option,
    live_option,
    load_inputs,
    site_config,
    strategy_option,
)
from vocabDocs.errors import VocabDocsError
from vocabDocs.pipelines.generate import build_vocabulary
from vocabDocs.vocab.hierarchy import HierarchyIndex


def _echo_type(index: HierarchyIndex, name: str) -> None:
    thing = index.vocab.things[name]
    click.echo(f"{name} ({thing.source})")
    click.echo(" > ".join(index.breadcrumb(name)))
    click.echo("")
    click.echo(
        tabulate(
            [(depth, ancestor) for depth, ancestor in enumerate(index.ancestors(name), start=1)],
            headers=["Depth", "Ancestor"],
        )
    )
    children = index.direct_children(name)
    if children:
        click.echo("")
        click.echo(tabulate([(child,) for child in children], headers=["Subtype"]))
    props = index.properties_for_type(name)
    rows = [(p.name, ", ".join(p.to_types) or "Any", name) for p in props.direct]
    for bucket in props.inherited:
        rows.extend((p.name, ", ".join(p.to_types) or "Any", bucket.type) for p in bucket.properties)
    if rows:
        click.echo("")
        click.echo(tabulate(rows, headers=["Property", "Expected Type", "From"]))


def _echo_property(index: HierarchyIndex, name: str) -> None:
    rel = index.vocab.relationships[name]
    click.echo(f"{name} ({rel.source})")
    rows = [
        ("domainIncludes", ", ".join(rel.from_types)),
        ("rangeIncludes", ", ".join(rel.to_types)),
        ("subPropertyOf", rel.sub_property_of or ""),
        ("inverseOf", rel.inverse_of or ""),
        ("supersededBy", rel.superseded_by or ""),
        ("available on", str(len(index.types_for_property(name)))),
    ]
    click.echo(tabulate([row for row in rows if row[1]], headers=["Field", "Value"]))


@click.command("inspect")
@click.argument("name")
@base_option
@live_option
@extension_option
@strategy_option
@click.pass_context
def inspect_cmd(
    ctx: click.Context,
    name: str,
    base_path: Path | None,
    live: bool,
    extension_path: Path | None,
    conflict_strategy: str | None,
) -> None:
    """Show ancestors, subtypes and properties for NAME."""

    config = site_config(ctx)
    base_raw, extension_raw = load_inputs(config, base_path, extension_path, live)
    try:
        index, _ = build_vocabulary(
            base_raw, extension_raw, config=config, conflict_strategy=conflict_strategy
        )
    except (VocabDocsError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    if name in index.vocab.things:
        _echo_type(index, name)
    elif name in index.vocab.relationships:
        _echo_property(index, name)
    else:
        raise click.ClickException(f"Unknown type or property: {name}")


__all__ = ["inspect_cmd"]
