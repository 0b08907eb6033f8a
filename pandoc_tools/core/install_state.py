"""Installed versions and the active-version pointer.

Installed versions live in one directory per version under a versions root;
a non-empty directory means the version is installed. The active version is
held in memory only, on the InstallState instance that owns it.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Iterable
from pathlib import Path

import structlog
from packaging.version import InvalidVersion, Version

from pandoc_tools.core.errors import ExternalVersionMisuse, VersionNotInstalled
from pandoc_tools.core.types import LATEST, NIGHTLY, parse_version

logger = structlog.get_logger()

DEFAULT = "default"


class InstallState:
    """View over the versions root plus the active-version pointer.

    Args:
        versions_root: Directory holding one sub-directory per version
        external_versions: Aliases for Pandoc binaries not managed here
        alias_resolver: Maps a name to a concrete version or external alias;
            the default maps "default" to the active version and "latest"
            to the most recent installed release
        default_active: Computes the initial active version; the most recent
            installed release when not given
    """

    def __init__(
        self,
        versions_root: Path,
        external_versions: Iterable[str] = (),
        alias_resolver: Callable[[str], str] | None = None,
        default_active: Callable[[], str] | None = None,
    ) -> None:
        self.versions_root = versions_root
        self.external_versions = frozenset(external_versions)
        self._alias_resolver = alias_resolver
        self._default_active = default_active
        self._active_version: str | None = None

    def home(self, version: str | None = None) -> Path:
        """Install directory of a version, or the versions root for None."""
        if version is None:
            return self.versions_root
        if version != NIGHTLY:
            # Only version numbers name directories, never arbitrary paths
            parse_version(version)
        return self.versions_root / version

    def is_external(self, name: str) -> bool:
        """Check if a name refers to a Pandoc not managed here."""
        return name in self.external_versions

    def resolve(self, name: str) -> str:
        """Resolve aliases to a concrete version or external alias."""
        if self._alias_resolver is not None:
            return self._alias_resolver(name)
        if name == DEFAULT:
            return self.active_version
        if name == LATEST:
            return self.installed_latest() or ""
        return name

    def installed_versions(self) -> list[str] | None:
        """List installed versions.

        Returns:
            "nightly" first when installed, then releases newest first;
            None when nothing is installed
        """
        if not self.versions_root.is_dir():
            return None

        names = [path.name for path in self.versions_root.iterdir() if path.is_dir()]
        if not names:
            return None

        releases: list[tuple[Version, str]] = []
        for name in names:
            if name == NIGHTLY:
                continue
            try:
                releases.append((Version(name), name))
            except InvalidVersion:
                logger.debug("versions_dir_skipped", name=name)

        ordered = [name for _, name in sorted(releases, reverse=True)]
        if NIGHTLY in names:
            ordered.insert(0, NIGHTLY)
        return ordered or None

    def installed_latest(self) -> str | None:
        """Most recent installed release; nightly is never considered."""
        releases = [v for v in self.installed_versions() or [] if v != NIGHTLY]
        if not releases:
            return None
        return max(releases, key=Version)

    def has_install(self, version: str) -> bool:
        """Check for a non-empty install directory."""
        install_dir = self.home(version)
        return install_dir.is_dir() and any(install_dir.iterdir())

    def is_installed(self, version: str, error: bool = False) -> bool:
        """Check whether a version is installed.

        Args:
            version: Version to check
            error: Raise instead of returning False

        Returns:
            True if installed

        Raises:
            ExternalVersionMisuse: For external aliases
            VersionNotInstalled: If not installed and ``error`` is set
        """
        if self.is_external(version):
            raise ExternalVersionMisuse(
                version,
                "Only versions installed with pandoc-tools can be checked, not external versions.",
            )
        installed = version in (self.installed_versions() or [])
        if not installed and error:
            raise VersionNotInstalled(version)
        return installed

    @property
    def active_version(self) -> str:
        """Active version, "" when none; computed lazily on first access."""
        if self._active_version is None:
            if self._default_active is not None:
                self._active_version = self._default_active()
            else:
                self._active_version = self.installed_latest() or ""
            logger.debug("active_version_initialized", version=self._active_version)
        return self._active_version

    def activate(self, version: str) -> str:
        """Make a version the active one.

        Returns:
            The resolved version now active

        Raises:
            VersionNotInstalled: If a managed version is not installed
        """
        resolved = self.resolve(version)
        if not self.is_external(resolved):
            self.is_installed(resolved, error=True)
        self._active_version = resolved
        logger.info("active_version_changed", version=resolved)
        return resolved

    def is_active(self, version: str) -> bool:
        """Check if a version, after alias resolution, is the active one."""
        resolved = self.resolve(version)
        return bool(resolved) and resolved == self.active_version

    def uninstall(self, version: str) -> bool:
        """Delete an installed version.

        When the removed version was active, the most recent remaining
        release becomes active, or nothing when none remains.

        Args:
            version: Version or alias to remove

        Returns:
            True if a directory was deleted
        """
        resolved = self.resolve(version)
        was_active = bool(resolved) and resolved == self.active_version

        removed = False
        if resolved and not self.is_external(resolved):
            install_dir = self.home(resolved)
            if install_dir.is_dir():
                shutil.rmtree(install_dir)
                removed = True
                logger.info("pandoc_uninstalled", version=resolved)

        if was_active:
            self._active_version = self.installed_latest() or ""
            logger.info("active_version_changed", version=self._active_version)

        return removed

    def locate(self, version: str | None = DEFAULT) -> Path | None:
        """Locate the install directory of a version.

        Args:
            version: Version or alias, None for the versions root

        Returns:
            Install directory, or None if the version is not installed

        Raises:
            ExternalVersionMisuse: For external aliases
        """
        if version is None:
            return self.home(None)

        resolved = self.resolve(version)
        if not resolved:
            logger.warning("no_pandoc_version_available")
            return None
        if self.is_external(resolved):
            raise ExternalVersionMisuse(
                resolved,
                f"'{resolved}' is an externally installed Pandoc; use its binary directly.",
            )

        install_dir = self.home(resolved)
        if not install_dir.is_dir():
            return None
        return install_dir
