from __future__ import annotations

"""Shared options and input loading for commands that read vocabularies."""

from pathlib import Path
from typing import Any

import click

from api_clients.schemaorg_client import SchemaOrgClient, SchemaOrgError
from vocabDocs.config.site_config import CONFLICT_STRATEGIES, SiteConfig
from vocabDocs.vocab.loader import load_document

base_option = click.option(
    "--base",
    "base_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Base vocabulary JSON-LD file (defaults to sources.base_path).",
)
live_option = click.option(
    "--live",
    is_flag=True,
    default=False,
    help="Fetch the base vocabulary from sources.base_url instead of a file.",
)
extension_option = click.option(
    "--extension-file",
    "extension_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Extension vocabulary JSON-LD file (defaults to sources.extensions_path).",
)
strategy_option = click.option(
    "--conflict-strategy",
    type=click.Choice(CONFLICT_STRATEGIES),
    default=None,
    help="How to resolve names defined in both base and extension.",
)


def site_config(ctx: click.Context) -> SiteConfig:
    obj = ctx.find_root().obj or {}
    return obj.get("config") or SiteConfig()


def _read(path: Path) -> Any | None:
    try:
        return load_document(path)
    except ValueError as exc:
        raise click.ClickException(f"{path}: invalid JSON ({exc})") from exc


def load_inputs(
    config: SiteConfig, base_path: Path | None, extension_path: Path | None, live: bool
) -> tuple[Any, Any | None]:
    """Return the raw base and extension documents for a command.

    A missing default extension file is allowed; an explicitly named one is
    not.
    """

    if live:
        try:
            with SchemaOrgClient(cache_dir=Path(config.sources.cache_dir)) as client:
                base_raw = client.get_vocabulary(config.sources.base_url)
        except SchemaOrgError as exc:
            raise click.ClickException(str(exc)) from exc
    else:
        path = base_path or (Path(config.sources.base_path) if config.sources.base_path else None)
        if path is None:
            raise click.ClickException("No base vocabulary: pass --base or --live")
        base_raw = _read(path)
        if base_raw is None:
            raise click.ClickException(f"Base vocabulary not found: {path}")

    extension_raw = _read(extension_path or Path(config.sources.extensions_path))
    if extension_raw is None and extension_path is not None:
        raise click.ClickException(f"Extension vocabulary not found: {extension_path}")
    return base_raw, extension_raw


__all__ = [
    "base_option",
    "extension_option",
    "live_option",
    "load_inputs",
    "site_config",
    "strategy_option",
]
