"""Exception types raised by pandoc-tools.

Every failure the release resolution and installation engine can detect has
its own exception class so callers can react to the condition rather than
the message. All of them derive from PandocToolsError.
"""

from __future__ import annotations


class PandocToolsError(Exception):
    """Base class for all pandoc-tools errors.

    Attributes:
        version: Version involved in the failure, if any
    """

    def __init__(self, message: str, *, version: str | None = None):
        self.version = version
        super().__init__(message)


class UnsupportedPlatform(PandocToolsError):
    """Raised when the host operating system is not recognised."""

    def __init__(self, system: str):
        self.system = system
        super().__init__(f"Unknown operating system: {system!r}")


class UnsupportedArchitecture(PandocToolsError):
    """Raised when no bundle is published for the host architecture."""

    def __init__(self, machine: str, os: str):
        self.machine = machine
        self.os = os
        super().__init__(
            f"No binary bundle available for architecture {machine!r} on {os}"
        )


class CatalogUnavailable(PandocToolsError):
    """Raised when the release listing cannot be obtained."""


class InvalidVersionSpec(PandocToolsError):
    """Raised when a version request is neither a keyword nor a version."""


class VersionNotFound(PandocToolsError):
    """Raised when no release carries the requested tag."""

    def __init__(self, version: str):
        super().__init__(f"Pandoc version {version} can't be found.", version=version)


class VersionTooOld(PandocToolsError):
    """Raised for versions below the minimum supported release."""

    def __init__(self, version: str, minimum: str):
        self.minimum = minimum
        super().__init__(
            f"Only version above {minimum} can be installed with this package "
            f"(requested {version})",
            version=version,
        )


class ArchitectureNotSupportedForVersion(PandocToolsError):
    """Raised when a platform/architecture pair has no bundle for a version."""

    def __init__(self, version: str, os: str, arch: str, since: str):
        self.os = os
        self.arch = arch
        self.since = since
        super().__init__(
            f"Pandoc binaries for {arch} on {os} are available for {since} "
            f"and above only (requested {version})",
            version=version,
        )


class KnownBrokenRelease(PandocToolsError):
    """Raised for releases whose binaries were withdrawn."""

    def __init__(self, version: str, replacement: str):
        self.replacement = replacement
        super().__init__(
            f"Pandoc {version} had a serious regression so binaries are no more "
            f"available. Download {replacement} instead.",
            version=version,
        )


class BundleNotFound(PandocToolsError):
    """Raised when no release asset matches the platform and version."""

    def __init__(self, message: str, *, version: str | None = None,
                 os: str | None = None, arch: str | None = None):
        self.os = os
        self.arch = arch
        super().__init__(message, version=version)


class NightlyBuildNotFound(BundleNotFound):
    """Raised when no usable nightly build could be located."""


class CacheDirectoryError(PandocToolsError):
    """Raised when the download cache directory cannot be created."""


class ExtractionFailure(PandocToolsError):
    """Raised when a downloaded bundle cannot be unpacked."""


class VersionNotInstalled(PandocToolsError):
    """Raised when a version is required but not installed."""

    def __init__(self, version: str):
        super().__init__(f"Version '{version}' is not yet installed", version=version)


class ExternalVersionMisuse(PandocToolsError):
    """Raised when an external alias is used where a managed version is needed."""

    def __init__(self, name: str, message: str | None = None):
        super().__init__(
            message
            or f"'{name}' refers to an external Pandoc, not a version managed by pandoc-tools.",
            version=name,
        )


class NonInteractiveInputRequired(PandocToolsError):
    """Raised when a prompt is needed but the session is not interactive."""

    def __init__(self) -> None:
        super().__init__("User input required, but session is not interactive.")
