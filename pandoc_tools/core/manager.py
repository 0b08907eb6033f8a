"""Session object tying the release engine together."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import click
import structlog

from pandoc_tools.core.bundle import resolve_asset
from pandoc_tools.core.cache import DownloadCache
from pandoc_tools.core.catalog import ReleaseCatalog
from pandoc_tools.core.config import AppConfig
from pandoc_tools.core.errors import NonInteractiveInputRequired
from pandoc_tools.core.github import GitHubClient
from pandoc_tools.core.install_state import InstallState
from pandoc_tools.core.installer import Installer
from pandoc_tools.core.nightly import NightlyManager
from pandoc_tools.core.platform import detect_arch, detect_os
from pandoc_tools.core.types import OS, Arch, ReleaseBundle, VersionSpec

logger = structlog.get_logger()


def _prompt_install(version: str) -> bool:
    return click.confirm(
        f"Version '{version}' is not yet installed. Would you like to install it?",
        default=False,
    )


class PandocManager:
    """Owns all per-session state: memoized catalog and active version.

    Two managers never share state, so independent sessions (or tests)
    cannot interfere with each other.

    Args:
        config: Application configuration
        client: Release source, built from config when not given
        os: Target OS, detected when not given
        arch: Target architecture, detected when not given
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        client: GitHubClient | None = None,
        os: OS | None = None,
        arch: Arch | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.client = client or GitHubClient(self.config.github)
        self.os = os or detect_os()
        self.arch = arch or detect_arch(self.os)

        self.catalog = ReleaseCatalog(self.client, snapshot=self.config.release_snapshot)
        self.cache = DownloadCache(self.config.download_cache_dir)
        self.state = InstallState(
            self.config.versions_dir,
            external_versions=self.config.external_versions,
        )
        self.nightly = NightlyManager(
            self.client,
            self.cache,
            self.state,
            self.os,
            workflow=self.config.github.nightly_workflow,
        )
        self.installer = Installer(
            self.catalog,
            self.client,
            self.cache,
            self.state,
            self.os,
            self.arch,
            nightly=self.nightly,
        )

    def parse(self, version: str) -> VersionSpec:
        """Turn a raw version string into a version spec."""
        return VersionSpec.parse(version, self.state.external_versions)

    def install(self, version: str = "latest", force: bool = False) -> Path | None:
        """Install a version ("latest", "nightly" or a number).

        Returns:
            Install directory, None when already installed
        """
        return self.installer.install(self.parse(version), force=force)

    def update(self) -> Path | None:
        """Install the latest release if not already installed."""
        logger.info("pandoc_updating")
        return self.install("latest")

    def install_nightly(self, n_last: int = 1) -> Path:
        return self.nightly.install_nightly(n_last)

    def resolve_asset(self, version: str = "latest") -> ReleaseBundle:
        return resolve_asset(self.catalog, self.parse(version), self.os, self.arch)

    def available_releases(self, refresh: bool = False) -> list[str]:
        """Installable releases, newest first; ``refresh`` re-reads the listing."""
        if refresh:
            self.catalog.refresh()
        return self.catalog.available_versions()

    def installed_versions(self) -> list[str] | None:
        return self.state.installed_versions()

    def installed_latest(self) -> str | None:
        return self.state.installed_latest()

    def is_installed(self, version: str, error: bool = False) -> bool:
        return self.state.is_installed(version, error=error)

    def ensure_installed(
        self,
        version: str,
        interactive: bool | None = None,
        confirm: Callable[[str], bool] | None = None,
    ) -> bool:
        """Offer to install a missing version.

        Args:
            version: Version to check
            interactive: Whether a user can answer; detected from stdin when None
            confirm: Prompt callback, click.confirm based by default

        Returns:
            True if the version is installed afterwards

        Raises:
            NonInteractiveInputRequired: If a prompt is needed without a user
        """
        if self.state.is_installed(version):
            return True

        if interactive is None:
            interactive = sys.stdin is not None and sys.stdin.isatty()
        if not interactive:
            raise NonInteractiveInputRequired()

        ask = confirm or _prompt_install
        if not ask(version):
            return False
        self.install(version)
        return True

    def uninstall(self, version: str) -> bool:
        return self.state.uninstall(version)

    def activate(self, version: str) -> str:
        return self.state.activate(version)

    def is_active(self, version: str) -> bool:
        return self.state.is_active(version)

    @property
    def active_version(self) -> str:
        return self.state.active_version

    def locate(self, version: str | None = "default") -> Path | None:
        return self.state.locate(version)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> PandocManager:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
