"""Host platform detection.

Architecture tokens follow the naming used in Pandoc bundle names, which
differs per operating system: the same x86-64 machine is ``amd64`` on
Linux but ``x86_64`` on Windows and macOS.
"""

from __future__ import annotations

import platform

from pandoc_tools.core.errors import UnsupportedArchitecture, UnsupportedPlatform
from pandoc_tools.core.types import OS, Arch

_SYSTEMS = {
    "darwin": OS.MACOS,
    "linux": OS.LINUX,
    "windows": OS.WINDOWS,
}

_ARCHITECTURES: dict[OS, dict[str, Arch]] = {
    OS.WINDOWS: {
        "x86-64": Arch.X86_64,
        "x86_64": Arch.X86_64,
        "amd64": Arch.X86_64,
    },
    OS.LINUX: {
        "x86_64": Arch.AMD64,
        "amd64": Arch.AMD64,
        "aarch64": Arch.ARM64,
        "arm64": Arch.ARM64,
    },
    OS.MACOS: {
        "x86_64": Arch.X86_64,
        "aarch64": Arch.ARM64,
        "arm64": Arch.ARM64,
    },
}


def detect_os(system: str | None = None) -> OS:
    """Map the host kernel name to an OS.

    Args:
        system: Raw kernel name, defaults to platform.system()

    Returns:
        Normalized operating system

    Raises:
        UnsupportedPlatform: If the kernel name is unknown
    """
    raw = platform.system() if system is None else system
    try:
        return _SYSTEMS[raw.lower()]
    except KeyError:
        raise UnsupportedPlatform(raw) from None


def detect_arch(os: OS, machine: str | None = None) -> Arch:
    """Map the host machine type to the bundle architecture token for an OS.

    Args:
        os: Operating system the token is needed for
        machine: Raw machine type, defaults to platform.machine()

    Returns:
        Architecture token

    Raises:
        UnsupportedArchitecture: If no bundle exists for this machine type
    """
    raw = platform.machine() if machine is None else machine
    arch = _ARCHITECTURES[OS(os)].get(raw.lower())
    if arch is None:
        raise UnsupportedArchitecture(raw, str(os))
    return arch
