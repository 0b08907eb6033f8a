"""Pytest configuration and shared fixtures for pandoc_tools tests."""

import io
import re
import sys
import tarfile
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from pandoc_tools.core.config import AppConfig, GitHubConfig
from pandoc_tools.core.manager import PandocManager

DOWNLOAD_BASE = "https://github.com/jgm/pandoc/releases/download"


def _release(tag: str, *names: str) -> dict[str, Any]:
    return {
        "tag_name": tag,
        "name": f"pandoc {tag}",
        "assets": [
            {"name": name, "browser_download_url": f"{DOWNLOAD_BASE}/{tag}/{name}"}
            for name in names
        ],
    }


@pytest.fixture
def raw_releases() -> list[dict[str, Any]]:
    """Release listing in GitHub API format, newest first."""
    return [
        _release(
            "3.1.2",
            "pandoc-3.1.2-1-amd64.deb",
            "pandoc-3.1.2-linux-amd64.tar.gz",
            "pandoc-3.1.2-linux-arm64.tar.gz",
            "pandoc-3.1.2-arm64-macOS.pkg",
            "pandoc-3.1.2-arm64-macOS.zip",
            "pandoc-3.1.2-x86_64-macOS.pkg",
            "pandoc-3.1.2-x86_64-macOS.zip",
            "pandoc-3.1.2-windows-x86_64.msi",
            "pandoc-3.1.2-windows-x86_64.zip",
        ),
        _release(
            "3.1.1",
            "pandoc-3.1.1-linux-amd64.tar.gz",
            "pandoc-3.1.1-linux-arm64.tar.gz",
            "pandoc-3.1.1-macOS.pkg",
            "pandoc-3.1.1-macOS.zip",
            "pandoc-3.1.1-windows-x86_64.zip",
        ),
        _release(
            "2.11.4",
            "pandoc-2.11.4-linux-amd64.tar.gz",
            "pandoc-2.11.4-macOS.zip",
            "pandoc-2.11.4-windows-x86_64.zip",
        ),
        _release(
            "2.2.3.1",
            "pandoc-2.2.3.1-linux.tar.gz",
            "pandoc-2.2.3.1-macOS.zip",
            "pandoc-2.2.3.1-windows-x86_64.zip",
        ),
        _release("2.2.3", "pandoc-2.2.3-linux.tar.gz"),
        _release(
            "2.0.3",
            "pandoc-2.0.3-linux.tar.gz",
            "pandoc-2.0.3-macOS.zip",
            "pandoc-2.0.3-windows.zip",
        ),
        _release("1.19.2.1", "pandoc-1.19.2.1-windows.msi"),
    ]


@pytest.fixture
def release_source(raw_releases: list[dict[str, Any]]) -> Mock:
    """Release source returning the sample listing."""
    source = Mock()
    source.list_releases.return_value = raw_releases
    return source


@pytest.fixture
def test_config(tmp_path: Path) -> AppConfig:
    """Configuration confined to a temporary directory."""
    return AppConfig(
        config_dir=tmp_path / "config",
        data_dir=tmp_path / "data",
        download_cache_dir=tmp_path / "downloads",
        release_snapshot=None,
        github=GitHubConfig(token=None),
    )


@pytest.fixture
def make_tarball() -> Callable[[Path, dict[str, bytes]], Path]:
    """Build a .tar.gz archive from a {member: content} mapping."""

    def build(path: Path, files: dict[str, bytes]) -> Path:
        with tarfile.open(path, "w:gz") as tar:
            for name, content in files.items():
                info = tarfile.TarInfo(name)
                info.size = len(content)
                info.mode = 0o755 if name.endswith(("/pandoc", "/pandoc-citeproc")) else 0o644
                tar.addfile(info, io.BytesIO(content))
        return path

    return build


@pytest.fixture
def make_zip() -> Callable[[Path, dict[str, bytes]], Path]:
    """Build a zip archive from a {member: content} mapping, without modes."""

    def build(path: Path, files: dict[str, bytes]) -> Path:
        with zipfile.ZipFile(path, "w") as zf:
            for name, content in files.items():
                zf.writestr(name, content)
        return path

    return build


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient.

    ``payloads`` maps download URLs to the bytes written by ``download``.
    """

    def __init__(self, releases: list[dict[str, Any]] | None = None) -> None:
        self.releases = releases or []
        self.payloads: dict[str, bytes] = {}
        self.runs: list[dict[str, Any]] = []
        self.artifacts: dict[str, list[dict[str, Any]]] = {}
        self.downloads: list[str] = []
        self.release_calls = 0
        self.closed = False

    def list_releases(self, limit: int | None = None) -> list[dict[str, Any]]:
        self.release_calls += 1
        return self.releases

    def list_workflow_runs(self, workflow: str, per_page: int = 15) -> list[dict[str, Any]]:
        return self.runs[:per_page]

    def list_artifacts(self, artifacts_url: str) -> list[dict[str, Any]]:
        return self.artifacts.get(artifacts_url, [])

    def download(self, url: str, destination: Path) -> Path:
        self.downloads.append(url)
        Path(destination).write_bytes(self.payloads[url])
        return destination

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client(raw_releases: list[dict[str, Any]]) -> FakeGitHubClient:
    """GitHub client double serving the sample releases."""
    return FakeGitHubClient(raw_releases)


@pytest.fixture
def mock_console() -> Mock:
    """Mock Rich console recording printed lines without markup.

    Printed text is echoed to stdout so CliRunner output carries it too.
    """
    console = Mock()

    status_cm = Mock()
    status_cm.__enter__ = Mock(return_value=status_cm)
    status_cm.__exit__ = Mock(return_value=None)
    console.status.return_value = status_cm

    console.printed_lines = []

    def track_print(text="", **kwargs):
        clean_text = re.sub(r"\[/?[^\]]*\]", "", str(text))
        console.printed_lines.append(clean_text)
        print(clean_text, file=sys.stdout)

    console.print.side_effect = track_print
    return console


@pytest.fixture
def mock_manager() -> Mock:
    """Mock PandocManager for command tests."""
    manager = Mock(spec=PandocManager)
    manager.nightly = Mock()
    manager.state = Mock()
    return manager


@pytest.fixture
def cli_obj(test_config: AppConfig, mock_console: Mock, mock_manager: Mock) -> dict[str, Any]:
    """Click context object shared by all commands."""
    return {
        "config": test_config,
        "console": mock_console,
        "manager": mock_manager,
        "verbose": False,
        "debug": False,
    }


# Pytest configuration
def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest settings."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    """Modify test collection to add markers automatically."""
    for item in items:
        # Add unit marker to all tests by default
        if not any(marker.name in ['integration', 'slow'] for marker in item.iter_markers()):
            item.add_marker(pytest.mark.unit)
