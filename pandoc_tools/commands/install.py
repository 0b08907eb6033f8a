"""Install, update and uninstall Pandoc versions."""

from __future__ import annotations

import click
import httpx

from pandoc_tools.commands._context import fail, get_context_objects, get_manager
from pandoc_tools.core.errors import PandocToolsError


@click.command("install")
@click.argument("version", default="latest")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Reinstall even if the version is already installed",
)
@click.pass_context
def install(ctx: click.Context, version: str, force: bool) -> None:
    """Install a Pandoc release.

    VERSION is "latest" (default), "nightly" or a release number such as
    2.19.2. Releases are installed in one directory per version.
    """
    _, console, _, debug = get_context_objects(ctx)
    manager = get_manager(ctx)

    try:
        with console.status(f"Installing Pandoc {version}..."):
            install_dir = manager.install(version, force=force)
    except (PandocToolsError, httpx.HTTPError) as e:
        raise fail(console, e, debug) from e

    if install_dir is None:
        console.print(
            f"[yellow]Pandoc {version} already installed.[/yellow] "
            "Use --force to overwrite."
        )
    else:
        console.print(f"[green]Pandoc {version} installed in {install_dir}[/green]")


@click.command("update")
@click.pass_context
def update(ctx: click.Context) -> None:
    """Install the latest Pandoc release if needed."""
    _, console, _, debug = get_context_objects(ctx)
    manager = get_manager(ctx)

    try:
        install_dir = manager.update()
    except (PandocToolsError, httpx.HTTPError) as e:
        raise fail(console, e, debug) from e

    if install_dir is None:
        console.print("[yellow]Latest Pandoc release already installed.[/yellow]")
    else:
        console.print(f"[green]Updated to {install_dir.name}[/green]")


@click.command("nightly")
@click.option(
    "--n-last",
    "-n",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Install the n-th from last successful nightly build",
)
@click.pass_context
def nightly(ctx: click.Context, n_last: int) -> None:
    """Install the last Pandoc nightly build, replacing the previous one."""
    _, console, _, debug = get_context_objects(ctx)
    manager = get_manager(ctx)

    try:
        with console.status("Retrieving nightly build..."):
            install_dir = manager.install_nightly(n_last)
    except (PandocToolsError, httpx.HTTPError) as e:
        raise fail(console, e, debug) from e

    commit = manager.nightly.nightly_version() or "unknown commit"
    console.print(f"[green]Pandoc nightly ({commit}) installed in {install_dir}[/green]")


@click.command("uninstall")
@click.argument("version")
@click.pass_context
def uninstall(ctx: click.Context, version: str) -> None:
    """Remove an installed Pandoc version."""
    _, console, _, debug = get_context_objects(ctx)
    manager = get_manager(ctx)

    try:
        removed = manager.uninstall(version)
    except (PandocToolsError, httpx.HTTPError) as e:
        raise fail(console, e, debug) from e

    if removed:
        console.print(f"[green]Pandoc {version} uninstalled[/green]")
    else:
        console.print(f"[yellow]Pandoc {version} is not installed[/yellow]")
