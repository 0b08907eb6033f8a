"""Tests for platform.py module."""

from unittest.mock import patch

import pytest

from pandoc_tools.core.errors import UnsupportedArchitecture, UnsupportedPlatform
from pandoc_tools.core.platform import detect_arch, detect_os
from pandoc_tools.core.types import OS, Arch


class TestDetectOS:
    """Test detect_os function."""

    @pytest.mark.parametrize(
        "system,expected",
        [
            ("Darwin", OS.MACOS),
            ("Linux", OS.LINUX),
            ("Windows", OS.WINDOWS),
            ("linux", OS.LINUX),
        ],
    )
    def test_known_systems(self, system, expected):
        """Test kernel names map to the bundle OS names."""
        assert detect_os(system) == expected

    def test_unknown_system(self):
        """Test unknown kernels are rejected."""
        with pytest.raises(UnsupportedPlatform, match="FreeBSD"):
            detect_os("FreeBSD")

    def test_defaults_to_host(self):
        """Test the host kernel name is used when none is given."""
        with patch("pandoc_tools.core.platform.platform.system", return_value="Darwin"):
            assert detect_os() == OS.MACOS


class TestDetectArch:
    """Test detect_arch function."""

    def test_x86_64_label_differs_per_os(self):
        """Test the same machine gets the label each OS's bundles use."""
        assert detect_arch(OS.LINUX, "x86_64") == Arch.AMD64
        assert detect_arch(OS.MACOS, "x86_64") == Arch.X86_64
        assert detect_arch(OS.WINDOWS, "AMD64") == Arch.X86_64
        assert detect_arch(OS.WINDOWS, "x86-64") == Arch.X86_64

    @pytest.mark.parametrize("machine", ["aarch64", "arm64"])
    def test_arm64(self, machine):
        """Test arm64 on linux and macOS."""
        assert detect_arch(OS.LINUX, machine) == Arch.ARM64
        assert detect_arch(OS.MACOS, machine) == Arch.ARM64

    def test_windows_arm64_unsupported(self):
        """Test no arm64 bundle exists for Windows."""
        with pytest.raises(UnsupportedArchitecture):
            detect_arch(OS.WINDOWS, "ARM64")

    @pytest.mark.parametrize("machine", ["i686", "ppc64le", "s390x", "armv7l"])
    def test_unsupported_linux_machines(self, machine):
        """Test unlisted machine types fail."""
        with pytest.raises(UnsupportedArchitecture, match=machine):
            detect_arch(OS.LINUX, machine)

    def test_defaults_to_host(self):
        """Test the host machine type is used when none is given."""
        with patch("pandoc_tools.core.platform.platform.machine", return_value="aarch64"):
            assert detect_arch(OS.LINUX) == Arch.ARM64
