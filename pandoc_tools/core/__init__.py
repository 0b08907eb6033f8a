"""Core functionality for pandoc_tools.

This module provides the release resolution and installation engine:
- Platform detection
- Release catalog and bundle matching
- Download cache and installer
- Nightly channel
- Installed versions and active version
"""

from pandoc_tools.core.errors import PandocToolsError
from pandoc_tools.core.manager import PandocManager
from pandoc_tools.core.types import (
    OS,
    Arch,
    Release,
    ReleaseAsset,
    ReleaseBundle,
    VersionKind,
    VersionSpec,
)

__all__ = [
    # Types
    "OS",
    "Arch",
    "Release",
    "ReleaseAsset",
    "ReleaseBundle",
    "VersionKind",
    "VersionSpec",
    # Engine
    "PandocManager",
    "PandocToolsError",
]
