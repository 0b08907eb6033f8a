"""Manage the bundle download cache."""

from __future__ import annotations

import click

from pandoc_tools.commands._context import get_context_objects
from pandoc_tools.core.cache import DownloadCache


@click.group("cache", short_help="Manage the download cache.")
def cache_group() -> None:
    """Manage the temporary cache of downloaded Pandoc bundles."""
    pass


@cache_group.command("clear")
@click.argument("version", required=False)
@click.pass_context
def clear(ctx: click.Context, version: str | None) -> None:
    """Remove cached bundles, only those of VERSION when given."""
    config, console, _, _ = get_context_objects(ctx)

    removed = DownloadCache(config.download_cache_dir).clear(version)
    console.print(f"Removed {removed} cached bundle(s)")
