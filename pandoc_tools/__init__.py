"""Pandoc Tools - install and manage Pandoc binary releases.

This package resolves Pandoc version requests ("latest", "nightly" or a
release number) to the matching GitHub release bundle for the host
platform, installs it in a per-version directory and keeps track of the
active version.

Key modules:
- core: Release catalog, bundle matching, installation and install state
- commands: CLI command implementations
"""

__version__ = "0.1.0"
__author__ = "Pandoc Tools Team"

# Re-export commonly used types
from pandoc_tools.core.types import (
    OS,
    Arch,
    Release,
    ReleaseBundle,
    VersionSpec,
)

__all__ = [
    "__version__",
    "__author__",
    "OS",
    "Arch",
    "Release",
    "ReleaseBundle",
    "VersionSpec",
]
