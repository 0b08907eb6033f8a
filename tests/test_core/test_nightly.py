"""Tests for nightly.py module."""

import stat

import pytest

from pandoc_tools.core.cache import DownloadCache
from pandoc_tools.core.errors import NightlyBuildNotFound
from pandoc_tools.core.install_state import InstallState
from pandoc_tools.core.nightly import MARKER_FILE, NightlyManager, read_marker
from pandoc_tools.core.types import OS

API = "https://api.github.com/repos/jgm/pandoc/actions"


def _run(run_id: int, sha: str, conclusion: str | None = "success") -> dict:
    return {
        "id": run_id,
        "conclusion": conclusion,
        "head_sha": sha,
        "artifacts_url": f"{API}/runs/{run_id}/artifacts",
    }


@pytest.fixture
def versions_root(tmp_path):
    return tmp_path / "versions"


@pytest.fixture
def publish(fake_client, tmp_path, make_zip):
    """Register a nightly run whose linux artifact builds from ``sha``."""

    def register(run_id, sha, conclusion="success", artifact="nightly-linux"):
        fake_client.runs.append(_run(run_id, sha, conclusion))
        url = f"{API}/artifacts/{run_id}/zip"
        fake_client.artifacts[f"{API}/runs/{run_id}/artifacts"] = [
            {"name": "nightly-windows", "archive_download_url": f"{url}-windows"},
            {"name": artifact, "archive_download_url": url},
        ]
        archive = make_zip(tmp_path / f"{sha}.zip", {
            "nightly-linux/pandoc": b"#!/bin/sh\n",
            "nightly-linux/README.nightly.txt": f"Built from {sha}\n".encode(),
        })
        fake_client.payloads[url] = archive.read_bytes()
        return url

    return register


@pytest.fixture
def nightly(fake_client, tmp_path, versions_root):
    return NightlyManager(
        client=fake_client,
        cache=DownloadCache(tmp_path / "downloads"),
        state=InstallState(versions_root),
        os=OS.LINUX,
    )


class TestReadMarker:
    """Test read_marker function."""

    def test_missing(self, tmp_path):
        assert read_marker(tmp_path) is None

    def test_built_from(self, tmp_path):
        (tmp_path / MARKER_FILE).write_text("Built from 4f2c9a1\nmore text\n")
        assert read_marker(tmp_path) == "4f2c9a1"

    def test_other_content(self, tmp_path):
        (tmp_path / MARKER_FILE).write_text("custom build\n")
        assert read_marker(tmp_path) == "custom build"


class TestNightlyManager:
    """Test NightlyManager."""

    def test_artifact_name(self, nightly):
        assert nightly.artifact_name == "nightly-linux"
        nightly.os = OS.MACOS
        assert nightly.artifact_name == "nightly-macos"

    def test_install_latest_successful(self, nightly, publish, fake_client, versions_root):
        """Test failed runs are skipped."""
        publish(3, "ccc", conclusion="failure")
        url = publish(2, "bbb")
        publish(1, "aaa")

        install_dir = nightly.install_nightly()

        assert install_dir == versions_root / "nightly"
        assert fake_client.downloads == [url]
        assert nightly.nightly_version() == "bbb"
        assert (install_dir / "pandoc").stat().st_mode & stat.S_IXUSR

    def test_unchanged_commit_skips_download(self, nightly, publish, fake_client):
        publish(2, "bbb")
        nightly.install_nightly()

        nightly.install_nightly()

        assert len(fake_client.downloads) == 1

    def test_new_commit_replaces_install(self, nightly, publish, fake_client, versions_root):
        """Test the previous nightly is removed as a whole."""
        publish(1, "aaa")
        nightly.install_nightly()
        (versions_root / "nightly" / "leftover.txt").write_text("old")

        fake_client.runs.clear()
        publish(2, "bbb")
        nightly.install_nightly()

        assert nightly.nightly_version() == "bbb"
        assert not (versions_root / "nightly" / "leftover.txt").exists()
        assert len(fake_client.downloads) == 2

    def test_n_last(self, nightly, publish):
        publish(4, "ddd")
        publish(3, "ccc", conclusion="cancelled")
        publish(2, "bbb")
        publish(1, "aaa")

        nightly.install_nightly(n_last=2)

        assert nightly.nightly_version() == "bbb"

    def test_n_last_beyond_available(self, nightly, publish):
        """Test asking past the oldest successful run falls back to it."""
        publish(2, "bbb")
        publish(1, "aaa")

        nightly.install_nightly(n_last=10)

        assert nightly.nightly_version() == "aaa"

    def test_n_last_must_be_positive(self, nightly):
        with pytest.raises(ValueError):
            nightly.install_nightly(n_last=0)

    def test_no_successful_run(self, nightly, publish):
        publish(1, "aaa", conclusion="failure")
        publish(2, "bbb", conclusion=None)

        with pytest.raises(NightlyBuildNotFound, match="nightly.yml"):
            nightly.install_nightly()

    def test_missing_artifact(self, nightly, publish):
        publish(1, "aaa", artifact="nightly-macos")

        with pytest.raises(NightlyBuildNotFound, match="nightly-linux"):
            nightly.install_nightly()

    def test_not_installed(self, nightly):
        assert nightly.nightly_version() is None
