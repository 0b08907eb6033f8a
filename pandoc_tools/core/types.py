"""Core type definitions for pandoc_tools."""

from __future__ import annotations

from enum import StrEnum
from urllib.parse import urlsplit

from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, ConfigDict, Field

from pandoc_tools.core.errors import InvalidVersionSpec

NIGHTLY = "nightly"
LATEST = "latest"


class OS(StrEnum):
    """Operating systems Pandoc publishes bundles for."""
    LINUX = "linux"
    MACOS = "macOS"
    WINDOWS = "windows"


class Arch(StrEnum):
    """Architecture tokens as spelled in Pandoc bundle names."""
    X86_64 = "x86_64"
    AMD64 = "amd64"
    ARM64 = "arm64"


class ReleaseAsset(BaseModel):
    """Downloadable file attached to a release."""
    name: str = Field(..., description="Asset file name")
    download_url: str = Field(
        ..., alias="browser_download_url", description="Direct download URL"
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Release(BaseModel):
    """Published release with its assets, in listed order."""
    tag: str = Field(..., alias="tag_name", description="Release tag (the version)")
    assets: tuple[ReleaseAsset, ...] = Field(default=(), description="Release assets")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @property
    def asset_names(self) -> list[str]:
        """Names of all assets in listed order."""
        return [asset.name for asset in self.assets]


class ReleaseBundle(BaseModel):
    """Concrete artifact selected for a version request."""
    version: str = Field(..., description="Resolved version")
    url: str = Field(..., description="Bundle download URL")

    model_config = ConfigDict(frozen=True)

    @property
    def filename(self) -> str:
        """Bundle file name taken from the URL path."""
        return urlsplit(self.url).path.rsplit("/", 1)[-1]

    @property
    def is_tarball(self) -> bool:
        return self.filename.endswith(".tar.gz")


class WorkflowRun(BaseModel):
    """One run of a GitHub Actions workflow."""
    id: int = Field(..., description="Run ID")
    conclusion: str | None = Field(None, description="Run conclusion (success, failure...)")
    head_sha: str = Field(..., description="Commit the run was built from")
    artifacts_url: str = Field(..., description="URL listing the run artifacts")

    model_config = ConfigDict(extra="ignore")


class WorkflowArtifact(BaseModel):
    """Artifact uploaded by a workflow run."""
    name: str = Field(..., description="Artifact name")
    archive_download_url: str = Field(..., description="Zip download URL")

    model_config = ConfigDict(extra="ignore")


class VersionKind(StrEnum):
    """Kinds of version requests."""
    LATEST = "latest"
    SPECIFIC = "specific"
    NIGHTLY = "nightly"
    EXTERNAL = "external"


class VersionSpec(BaseModel):
    """A version request, resolved once from user input.

    ``value`` holds the version string for specific requests, the alias for
    external ones, and the keyword otherwise.
    """
    kind: VersionKind
    value: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def latest(cls) -> VersionSpec:
        return cls(kind=VersionKind.LATEST, value=LATEST)

    @classmethod
    def nightly(cls) -> VersionSpec:
        return cls(kind=VersionKind.NIGHTLY, value=NIGHTLY)

    @classmethod
    def specific(cls, version: str) -> VersionSpec:
        parse_version(version)
        return cls(kind=VersionKind.SPECIFIC, value=version)

    @classmethod
    def external(cls, name: str) -> VersionSpec:
        return cls(kind=VersionKind.EXTERNAL, value=name)

    @classmethod
    def parse(cls, text: str, external_versions: frozenset[str] | set[str] = frozenset()) -> VersionSpec:
        """Classify a raw version string.

        Args:
            text: User supplied version ("latest", "nightly", an alias or a number)
            external_versions: Aliases for Pandoc binaries not managed here

        Returns:
            The matching version spec

        Raises:
            InvalidVersionSpec: If text is none of the above
        """
        text = text.strip()
        if text == LATEST:
            return cls.latest()
        if text == NIGHTLY:
            return cls.nightly()
        if text in external_versions:
            return cls.external(text)
        return cls.specific(text)

    @property
    def is_managed(self) -> bool:
        return self.kind is not VersionKind.EXTERNAL

    def __str__(self) -> str:
        return self.value


def parse_version(version: str) -> Version:
    """Parse a Pandoc version number.

    Raises:
        InvalidVersionSpec: If the string is not a version number
    """
    try:
        return Version(version)
    except InvalidVersion as e:
        raise InvalidVersionSpec(
            f"'{version}' is not a valid Pandoc version", version=version
        ) from e
