"""Download cache for Pandoc bundles."""

from __future__ import annotations

import contextlib
import shutil
from collections.abc import Callable
from pathlib import Path

import structlog

from pandoc_tools.core.errors import CacheDirectoryError

logger = structlog.get_logger()


class DownloadCache:
    """Temp-directory cache of downloaded bundles.

    Cache layout:
    <tmp>/pandoc-tools-download/
    ├── 3.1.2/
    │   └── pandoc-3.1.2-linux-amd64.tar.gz
    └── nightly/
        └── {head_sha}.zip

    Entries are never evicted here; the temp directory lifecycle of the OS
    takes care of them.
    """

    def __init__(self, base_dir: Path):
        """Initialize download cache.

        Args:
            base_dir: Directory holding one sub-directory per version
        """
        self.base_dir = base_dir

    def path_for(self, version: str) -> Path:
        """Directory caching bundles of a version."""
        if not version or version in (".", "..") or "/" in version or "\\" in version:
            raise ValueError(f"Invalid version for cache directory: {version!r}")
        return self.base_dir / version

    def has(self, version: str, bundle_name: str) -> bool:
        """Check if a bundle is cached."""
        return (self.path_for(version) / bundle_name).is_file()

    def with_cached_download(
        self,
        version: str,
        bundle_name: str,
        fetch: Callable[[], object],
    ) -> Path:
        """Return a cached bundle, calling ``fetch`` only on a miss.

        ``fetch`` runs with the version cache directory as working directory
        and must write ``bundle_name`` there. The previous working directory
        is restored however ``fetch`` exits. When ``fetch`` fails, whatever
        it left under ``bundle_name`` is removed so the next call downloads
        again.

        Args:
            version: Version the bundle belongs to
            bundle_name: Bundle file name
            fetch: Callback downloading the bundle into the cwd

        Returns:
            Absolute path of the bundle

        Raises:
            CacheDirectoryError: If the cache directory cannot be created
        """
        cache_dir = self.path_for(version)
        try:
            cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheDirectoryError(
                f"Cannot create download cache {cache_dir}: {e}", version=version
            ) from e

        cached = self.has(version, bundle_name)
        with contextlib.chdir(cache_dir):
            if cached:
                logger.info("bundle_cached", version=version, bundle=bundle_name)
            else:
                logger.info("bundle_downloading", version=version, bundle=bundle_name)
                try:
                    fetch()
                except BaseException:
                    Path(bundle_name).unlink(missing_ok=True)
                    raise
            return Path(bundle_name).absolute()

    def discard(self, version: str, bundle_name: str) -> bool:
        """Remove one cached bundle.

        Returns:
            True if a file was removed
        """
        bundle = self.path_for(version) / bundle_name
        if not bundle.is_file():
            return False
        bundle.unlink()
        logger.info("bundle_discarded", version=version, bundle=bundle_name)
        return True

    def clear(self, version: str | None = None) -> int:
        """Remove cached bundles.

        Args:
            version: Only clear this version, everything when None

        Returns:
            Number of bundle files removed
        """
        target = self.base_dir if version is None else self.path_for(version)
        if not target.exists():
            return 0

        removed = sum(1 for path in target.rglob("*") if path.is_file())
        shutil.rmtree(target)
        if removed > 0:
            logger.info("cache_cleanup", removed=removed, path=str(target))
        return removed
