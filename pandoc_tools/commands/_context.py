"""Shared helpers for CLI commands."""

from __future__ import annotations

import click
from rich.console import Console

from pandoc_tools.core.config import AppConfig
from pandoc_tools.core.manager import PandocManager


def get_context_objects(ctx: click.Context) -> tuple[AppConfig, Console, bool, bool]:
    """Extract context objects from Click context."""
    config = ctx.obj["config"]
    console = ctx.obj["console"]
    verbose = ctx.obj.get("verbose", False)
    debug = ctx.obj.get("debug", False)
    return config, console, verbose, debug


def get_manager(ctx: click.Context) -> PandocManager:
    """Return the session manager, creating it on first use."""
    manager = ctx.obj.get("manager")
    if manager is None:
        manager = PandocManager(ctx.obj["config"])
        ctx.obj["manager"] = manager
        ctx.call_on_close(manager.close)
    return manager


def fail(console: Console, error: Exception, debug: bool = False) -> click.Abort:
    """Report an error and build the Abort to raise."""
    console.print(f"[red]Error: {error}[/red]")
    if debug:
        import traceback
        console.print(traceback.format_exc())
    return click.Abort()
