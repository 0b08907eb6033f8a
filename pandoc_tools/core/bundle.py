"""Selection of the release asset matching a version and platform.

Pandoc bundle names changed over time:

- no architecture in the name (``pandoc-2.5-macOS.zip``)
- architecture after the OS (``pandoc-2.12-linux-arm64.tar.gz``)
- architecture before the OS, macOS only, from 3.1.2
  (``pandoc-3.1.2-arm64-macOS.zip``)

Each change is encoded as an explicit version gate below.
"""

from __future__ import annotations

import re

import structlog
from packaging.version import Version

from pandoc_tools.core.catalog import MIN_SUPPORTED_VERSION, ReleaseCatalog
from pandoc_tools.core.errors import (
    ArchitectureNotSupportedForVersion,
    BundleNotFound,
    ExternalVersionMisuse,
    KnownBrokenRelease,
    VersionTooOld,
)
from pandoc_tools.core.types import (
    OS,
    Arch,
    ReleaseBundle,
    VersionKind,
    VersionSpec,
    parse_version,
)

logger = structlog.get_logger()

LINUX_ARM64_SINCE = Version("2.12")
MACOS_ARM64_SINCE = Version("3.1.2")

# Withdrawn releases and the release to use instead
BROKEN_RELEASES = {"2.2.3": "2.2.3.1"}


def bundle_extension(os: OS) -> str:
    """Archive extension used for an OS."""
    return ".tar.gz" if os == OS.LINUX else ".zip"


def bundle_pattern(version: str, os: OS, arch: Arch) -> str:
    """Build the regular expression matching a bundle name.

    Args:
        version: Concrete Pandoc version
        os: Target operating system
        arch: Target architecture token

    Returns:
        Regular expression to search asset names with
    """
    r_os = f"(-{re.escape(str(os))})?"
    r_arch = f"(-{re.escape(str(arch))})?"
    r_os_arch = r_os + r_arch

    if os == OS.MACOS:
        if parse_version(version) < MACOS_ARM64_SINCE:
            r_os_arch = r_os
        else:
            r_os_arch = r_arch + r_os

    return "pandoc-" + re.escape(version) + r"(-\d)?" + r_os_arch + re.escape(bundle_extension(os))


def check_version_support(version: str, os: OS, arch: Arch) -> None:
    """Reject versions known to have no usable bundle for a platform.

    Raises:
        ArchitectureNotSupportedForVersion: arm64 before its first bundle
        KnownBrokenRelease: For withdrawn releases
        VersionTooOld: Below the minimum supported version
    """
    parsed = parse_version(version)
    if os == OS.LINUX and arch == Arch.ARM64 and parsed < LINUX_ARM64_SINCE:
        raise ArchitectureNotSupportedForVersion(version, str(os), str(arch), str(LINUX_ARM64_SINCE))
    if os == OS.MACOS and arch == Arch.ARM64 and parsed < MACOS_ARM64_SINCE:
        raise ArchitectureNotSupportedForVersion(version, str(os), str(arch), str(MACOS_ARM64_SINCE))
    if version in BROKEN_RELEASES:
        raise KnownBrokenRelease(version, BROKEN_RELEASES[version])
    if parsed < MIN_SUPPORTED_VERSION:
        raise VersionTooOld(version, str(MIN_SUPPORTED_VERSION))


def resolve_asset(
    catalog: ReleaseCatalog,
    spec: VersionSpec,
    os: OS,
    arch: Arch,
) -> ReleaseBundle:
    """Resolve a version request to a downloadable bundle.

    Args:
        catalog: Release catalog to search
        spec: Latest or specific version request
        os: Target operating system
        arch: Target architecture token

    Returns:
        Resolved version and bundle URL

    Raises:
        BundleNotFound: If no asset name matches
    """
    if spec.kind is VersionKind.LATEST:
        release = catalog.latest()
        version = release.tag
    elif spec.kind is VersionKind.SPECIFIC:
        version = spec.value
        check_version_support(version, os, arch)
        release = catalog.get_release(version)
    else:
        raise ExternalVersionMisuse(
            spec.value, f"Cannot resolve a release bundle for '{spec.value}'"
        )

    if parse_version(version) < MIN_SUPPORTED_VERSION:
        raise VersionTooOld(version, str(MIN_SUPPORTED_VERSION))

    pattern = bundle_pattern(version, os, arch)
    regex = re.compile(pattern)
    for asset in release.assets:
        if regex.search(asset.name):
            logger.debug("bundle_resolved", version=version, asset=asset.name)
            return ReleaseBundle(version=version, url=asset.download_url)

    logger.debug("bundle_unmatched", pattern=pattern, assets=release.asset_names)
    raise BundleNotFound(
        f"No release bundle with name '{pattern}' available for Pandoc {version} on {os} ({arch}).",
        version=version,
        os=str(os),
        arch=str(arch),
    )
