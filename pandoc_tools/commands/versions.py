"""Inspect installed and available Pandoc versions."""

from __future__ import annotations

import json

import click
import httpx
from rich.table import Table

from pandoc_tools.commands._context import fail, get_context_objects, get_manager
from pandoc_tools.core.errors import PandocToolsError


@click.group("versions", short_help="Inspect installed and available versions.")
def versions_group() -> None:
    """Inspect installed and available Pandoc versions.

    Installed versions live in one directory per version under the data
    directory; available versions come from the Pandoc GitHub releases.
    """
    pass


@versions_group.command("list")
@click.pass_context
def list_installed(ctx: click.Context) -> None:
    """List installed versions, nightly first then newest first."""
    config, console, _, _ = get_context_objects(ctx)
    manager = get_manager(ctx)

    installed = manager.installed_versions() or []
    active = manager.active_version if installed else ""

    if config.output_format == "json":
        print(json.dumps({"installed": installed, "active": active or None}, indent=2))
        return

    if not installed:
        console.print("[yellow]No Pandoc version installed.[/yellow]")
        return

    if config.output_format == "plain":
        for version in installed:
            console.print(version)
        return

    table = Table(title="Installed Pandoc versions", show_header=True)
    table.add_column("Version", style="cyan")
    table.add_column("Active", justify="center", style="green")
    table.add_column("Location", style="dim")
    for version in installed:
        table.add_row(
            version,
            "*" if version == active else "",
            str(manager.state.home(version)),
        )
    console.print(table)


@versions_group.command("available")
@click.option("--limit", "-l", type=int, default=None, help="Show only the N newest releases")
@click.option("--refresh", is_flag=True, help="Fetch the release listing again")
@click.pass_context
def list_available(ctx: click.Context, limit: int | None, refresh: bool) -> None:
    """List Pandoc releases that can be installed."""
    config, console, _, debug = get_context_objects(ctx)
    manager = get_manager(ctx)

    try:
        versions = manager.available_releases(refresh=refresh)
    except (PandocToolsError, httpx.HTTPError) as e:
        raise fail(console, e, debug) from e

    if limit is not None:
        versions = versions[:limit]

    if config.output_format == "json":
        print(json.dumps(versions, indent=2))
        return

    installed = set(manager.installed_versions() or [])
    for version in versions:
        if version in installed and config.output_format == "rich":
            console.print(f"{version} [green](installed)[/green]")
        else:
            console.print(version)


@versions_group.command("locate")
@click.argument("version", default="default")
@click.pass_context
def locate(ctx: click.Context, version: str) -> None:
    """Print the install directory of VERSION (the active one by default)."""
    _, console, _, debug = get_context_objects(ctx)
    manager = get_manager(ctx)

    try:
        install_dir = manager.locate(version)
    except (PandocToolsError, httpx.HTTPError) as e:
        raise fail(console, e, debug) from e

    if install_dir is None:
        console.print(f"[yellow]Pandoc {version} is not installed[/yellow]")
        ctx.exit(1)
    click.echo(str(install_dir))


@versions_group.command("check")
@click.argument("version")
@click.option("--ask", is_flag=True, help="Offer to install VERSION when missing")
@click.pass_context
def check(ctx: click.Context, version: str, ask: bool) -> None:
    """Check whether VERSION is installed (exit code 1 when not)."""
    _, console, _, debug = get_context_objects(ctx)
    manager = get_manager(ctx)

    try:
        if ask:
            installed = manager.ensure_installed(version)
        else:
            installed = manager.is_installed(version)
    except (PandocToolsError, httpx.HTTPError) as e:
        raise fail(console, e, debug) from e

    if installed:
        console.print(f"[green]Pandoc {version} is installed[/green]")
    else:
        console.print(f"[yellow]Pandoc {version} is not installed[/yellow]")
        ctx.exit(1)
