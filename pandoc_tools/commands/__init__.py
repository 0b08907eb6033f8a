"""CLI command implementations for pandoc_tools.

This module contains all command-line interface implementations:
- install / update / nightly / uninstall: Manage installed Pandoc versions
- versions: Inspect installed and available versions
- cache: Manage the bundle download cache
"""

from pandoc_tools.commands.cache import cache_group
from pandoc_tools.commands.install import install, nightly, uninstall, update
from pandoc_tools.commands.versions import versions_group

__all__ = ["cache_group", "install", "nightly", "uninstall", "update", "versions_group"]
