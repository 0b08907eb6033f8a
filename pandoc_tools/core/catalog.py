"""Release catalog with in-process memoization."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

import httpx
import structlog
from packaging.version import InvalidVersion, Version
from pydantic import ValidationError

from pandoc_tools.core.errors import CatalogUnavailable, VersionNotFound
from pandoc_tools.core.types import Release

logger = structlog.get_logger()

# Bundles are not packaged uniformly across platforms before this release
MIN_SUPPORTED_VERSION = Version("2.0.3")

SNAPSHOT_SUFFIX = ".json"


class ReleaseSource(Protocol):
    """Anything able to list releases in GitHub's format."""

    def list_releases(self, limit: int | None = None) -> list[dict[str, Any]]: ...


class ReleaseCatalog:
    """Known Pandoc releases, fetched once per catalog instance.

    When a snapshot file is configured it replaces the network entirely;
    it must be a JSON array in the GitHub release format.
    """

    def __init__(self, source: ReleaseSource, snapshot: Path | None = None):
        """Initialize release catalog.

        Args:
            source: Release source queried on first use
            snapshot: Optional serialized release listing
        """
        self.source = source
        self.snapshot = snapshot
        self._releases: list[Release] | None = None

    def _usable_snapshot(self) -> Path | None:
        if self.snapshot is None:
            return None
        if self.snapshot.suffix == SNAPSHOT_SUFFIX and self.snapshot.is_file():
            return self.snapshot
        logger.warning(
            "release_snapshot_ignored",
            path=str(self.snapshot),
            reason=f"expected an existing {SNAPSHOT_SUFFIX} file",
        )
        return None

    def _load_snapshot(self, path: Path) -> list[dict[str, Any]]:
        logger.info("release_snapshot_used", file=path.name)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogUnavailable(f"Cannot read release snapshot {path}: {e}") from e
        if not isinstance(data, list):
            raise CatalogUnavailable(f"Release snapshot {path} is not a list of releases")
        return data

    def _fetch(self) -> list[dict[str, Any]]:
        logger.info("catalog_fetching", source=type(self.source).__name__)
        try:
            return self.source.list_releases()
        except (httpx.HTTPError, ValueError) as e:
            raise CatalogUnavailable(f"Cannot fetch Pandoc releases: {e}") from e

    def list_releases(self) -> list[Release]:
        """Return all releases, newest first.

        Returns:
            Releases in the order the source listed them

        Raises:
            CatalogUnavailable: If the listing cannot be obtained
        """
        if self._releases is not None:
            return self._releases

        snapshot = self._usable_snapshot()
        raw = self._load_snapshot(snapshot) if snapshot else self._fetch()

        try:
            releases = [Release.model_validate(item) for item in raw]
        except ValidationError as e:
            raise CatalogUnavailable(f"Malformed release listing: {e}") from e

        self._releases = releases
        logger.debug("catalog_fetched", releases=len(releases))
        return releases

    def refresh(self) -> None:
        """Forget the memoized listing so the next call fetches again."""
        self._releases = None

    def latest(self) -> Release:
        """Newest release."""
        releases = self.list_releases()
        if not releases:
            raise CatalogUnavailable("Release listing is empty")
        return releases[0]

    def get_release(self, version: str) -> Release:
        """Find the release tagged ``version``.

        Raises:
            VersionNotFound: If no release has that tag
        """
        for release in self.list_releases():
            if release.tag == version:
                return release
        raise VersionNotFound(version)

    def available_versions(self) -> list[str]:
        """Installable versions, newest first.

        Tags below MIN_SUPPORTED_VERSION, and tags that are not version
        numbers, are excluded.
        """
        versions = []
        for release in self.list_releases():
            try:
                parsed = Version(release.tag)
            except InvalidVersion:
                logger.debug("catalog_tag_skipped", tag=release.tag)
                continue
            if parsed >= MIN_SUPPORTED_VERSION:
                versions.append(release.tag)
        return versions
