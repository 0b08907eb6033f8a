"""Installation of Pandoc release bundles."""

from __future__ import annotations

import os
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

import structlog

from pandoc_tools.core.bundle import resolve_asset
from pandoc_tools.core.cache import DownloadCache
from pandoc_tools.core.catalog import ReleaseCatalog
from pandoc_tools.core.errors import ExternalVersionMisuse, ExtractionFailure
from pandoc_tools.core.github import GitHubClient
from pandoc_tools.core.install_state import InstallState
from pandoc_tools.core.types import OS, Arch, VersionKind, VersionSpec

if TYPE_CHECKING:
    from pandoc_tools.core.nightly import NightlyManager

logger = structlog.get_logger()

# Executables some bundles nest under bin/; pandoc-citeproc shipped until 2.11
NESTED_BINARIES = ("pandoc", "pandoc-citeproc")


def binary_name(os_: OS) -> str:
    """File name of the pandoc executable on an OS."""
    return "pandoc.exe" if os_ == OS.WINDOWS else "pandoc"


def extract_tarball(archive: Path, destination: Path) -> None:
    """Extract a .tar.gz bundle, keeping its directory structure.

    Raises:
        ExtractionFailure: If the archive cannot be read or written out
    """
    destination.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive, "r:gz") as tar:
            tar.extractall(destination, filter="data")
    except (tarfile.TarError, OSError) as e:
        raise ExtractionFailure(f"Cannot extract {archive.name}: {e}") from e


def extract_zip_flat(archive: Path, destination: Path) -> None:
    """Extract every file of a zip bundle directly into ``destination``.

    Directory structure inside the archive is discarded so binaries always
    end up at the top of the install directory.

    Raises:
        ExtractionFailure: If the archive cannot be read or written out
    """
    destination.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                name = PurePosixPath(info.filename.replace("\\", "/")).name
                if not name:
                    continue
                target = destination / name
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                mode = (info.external_attr >> 16) & 0o777
                if mode:
                    target.chmod(mode)
    except (zipfile.BadZipFile, OSError) as e:
        raise ExtractionFailure(f"Cannot extract {archive.name}: {e}") from e


def link_nested_binaries(install_dir: Path) -> list[Path]:
    """Symlink executables found under a nested bin/ to the top level.

    Returns:
        Links created
    """
    links = []
    for name in NESTED_BINARIES:
        link = install_dir / name
        if link.exists() or link.is_symlink():
            continue
        nested = sorted(
            path for path in install_dir.rglob(name)
            if path.parent.name == "bin" and path.parent != install_dir
        )
        if not nested:
            continue
        link.symlink_to(nested[0].relative_to(install_dir))
        links.append(link)
        logger.debug("binary_linked", link=str(link), target=str(nested[0]))
    return links


def ensure_executable(binary: Path) -> bool:
    """Set the user execute bit when missing.

    Returns:
        True if the mode was changed
    """
    if not binary.exists() or os.access(binary, os.X_OK):
        return False
    binary.chmod(binary.stat().st_mode | stat.S_IXUSR)
    logger.debug("executable_bit_set", path=str(binary))
    return True


class Installer:
    """Installs released Pandoc versions into per-version directories.

    Args:
        catalog: Release catalog
        client: Client used to download bundles
        cache: Download cache
        state: Install state owning the versions root
        os: Host operating system
        arch: Host architecture token
        nightly: Manager handling "nightly" requests
    """

    def __init__(
        self,
        catalog: ReleaseCatalog,
        client: GitHubClient,
        cache: DownloadCache,
        state: InstallState,
        os: OS,
        arch: Arch,
        nightly: NightlyManager | None = None,
    ) -> None:
        self.catalog = catalog
        self.client = client
        self.cache = cache
        self.state = state
        self.os = os
        self.arch = arch
        self.nightly = nightly

    def _already_installed(self, version: str) -> bool:
        if self.state.has_install(version):
            logger.info(
                "pandoc_already_installed",
                version=version,
                hint="Use force to overwrite.",
            )
            return True
        return False

    def install(self, spec: VersionSpec, force: bool = False) -> Path | None:
        """Install a Pandoc release.

        Args:
            spec: Version request
            force: Reinstall even if already installed

        Returns:
            Install directory, or None when already installed

        Raises:
            ExternalVersionMisuse: For external aliases
        """
        if spec.kind is VersionKind.NIGHTLY:
            if self.nightly is None:
                raise ExternalVersionMisuse(spec.value, "Nightly builds are not available here")
            return self.nightly.install_nightly()
        if not spec.is_managed:
            raise ExternalVersionMisuse(
                spec.value, f"Cannot install '{spec.value}', it is an external Pandoc."
            )

        # Explicit versions are checked before any request to GitHub
        if not force and spec.kind is VersionKind.SPECIFIC and self._already_installed(spec.value):
            return None

        bundle = resolve_asset(self.catalog, spec, self.os, self.arch)

        if not force and spec.kind is VersionKind.LATEST and self._already_installed(bundle.version):
            return None

        version = bundle.version
        install_dir = self.state.home(version)
        if force:
            # Forced reinstalls always download the bundle again
            self.cache.discard(version, bundle.filename)
            if install_dir.exists():
                shutil.rmtree(install_dir)

        logger.info("pandoc_installing", version=version, bundle=bundle.filename)
        archive = self.cache.with_cached_download(
            version,
            bundle.filename,
            lambda: self.client.download(bundle.url, Path(bundle.filename)),
        )

        if bundle.is_tarball:
            extract_tarball(archive, install_dir)
        else:
            extract_zip_flat(archive, install_dir)
        link_nested_binaries(install_dir)

        # macOS bundles have shipped without the executable bit
        if self.os == OS.MACOS:
            ensure_executable(install_dir / binary_name(self.os))

        logger.info("pandoc_installed", version=version, path=str(install_dir))
        return install_dir
