"""Single-slot nightly channel.

Only one nightly build is installed at a time. It is identified by the
commit it was built from, read back from the ``README.nightly.txt`` marker
shipped inside the nightly artifact, and is replaced as a whole whenever a
newer successful build exists.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

import structlog
from pydantic import ValidationError

from pandoc_tools.core.cache import DownloadCache
from pandoc_tools.core.errors import NightlyBuildNotFound
from pandoc_tools.core.github import GitHubClient
from pandoc_tools.core.install_state import InstallState
from pandoc_tools.core.installer import binary_name, ensure_executable, extract_zip_flat
from pandoc_tools.core.types import NIGHTLY, OS, WorkflowArtifact, WorkflowRun

logger = structlog.get_logger()

MARKER_FILE = "README.nightly.txt"
_MARKER_RE = re.compile(r"^Built from (\S*)\s*$")


def read_marker(install_dir: Path) -> str | None:
    """Commit identity recorded in a nightly install, if any."""
    marker = install_dir / MARKER_FILE
    if not marker.is_file():
        return None
    with open(marker, encoding="utf-8") as f:
        first_line = f.readline()
    match = _MARKER_RE.match(first_line)
    return match.group(1) if match else first_line.strip()


class NightlyManager:
    """Installs the most recent successful nightly build."""

    def __init__(
        self,
        client: GitHubClient,
        cache: DownloadCache,
        state: InstallState,
        os: OS,
        workflow: str = "nightly.yml",
    ) -> None:
        self.client = client
        self.cache = cache
        self.state = state
        self.os = os
        self.workflow = workflow

    @property
    def install_dir(self) -> Path:
        return self.state.home(NIGHTLY)

    @property
    def artifact_name(self) -> str:
        """Name of the nightly artifact built for this OS."""
        return f"nightly-{str(self.os).lower()}"

    def nightly_version(self) -> str | None:
        """Commit of the installed nightly, None if not installed."""
        return read_marker(self.install_dir)

    def _select_run(self, n_last: int) -> WorkflowRun:
        raw_runs = self.client.list_workflow_runs(self.workflow, per_page=max(15, n_last + 5))
        try:
            runs = [WorkflowRun.model_validate(run) for run in raw_runs]
        except ValidationError as e:
            raise NightlyBuildNotFound(f"Malformed workflow run listing: {e}", version=NIGHTLY) from e

        successful = [run for run in runs if run.conclusion == "success"]
        if not successful:
            raise NightlyBuildNotFound(
                f"No successful run of {self.workflow} found", version=NIGHTLY, os=str(self.os)
            )
        # Fewer successful runs than requested: fall back to the oldest one
        return successful[min(len(successful), n_last) - 1]

    def _find_artifact(self, run: WorkflowRun) -> WorkflowArtifact:
        for raw in self.client.list_artifacts(run.artifacts_url):
            artifact = WorkflowArtifact.model_validate(raw)
            if artifact.name == self.artifact_name:
                return artifact
        raise NightlyBuildNotFound(
            f"Nightly run {run.id} has no artifact named '{self.artifact_name}'",
            version=NIGHTLY,
            os=str(self.os),
        )

    def install_nightly(self, n_last: int = 1) -> Path:
        """Install the ``n_last``-th most recent successful nightly build.

        Args:
            n_last: 1 for the latest successful build, 2 for the one before...

        Returns:
            Nightly install directory

        Raises:
            NightlyBuildNotFound: If no usable build exists
        """
        if n_last < 1:
            raise ValueError("n_last must be a positive integer")

        logger.info("nightly_lookup", workflow=self.workflow)
        run = self._select_run(n_last)
        artifact = self._find_artifact(run)

        install_dir = self.install_dir
        if install_dir.exists():
            current = self.nightly_version()
            if current == run.head_sha:
                logger.info("nightly_unchanged", commit=current)
                return install_dir
            logger.info("nightly_removing", commit=current)
            shutil.rmtree(install_dir)

        bundle_name = f"{run.head_sha}.zip"
        logger.info("nightly_installing", commit=run.head_sha, run=run.id)
        archive = self.cache.with_cached_download(
            NIGHTLY,
            bundle_name,
            lambda: self.client.download(artifact.archive_download_url, Path(bundle_name)),
        )

        extract_zip_flat(archive, install_dir)

        # Nightly artifacts lose the executable bit on both platforms
        if self.os in (OS.MACOS, OS.LINUX):
            ensure_executable(install_dir / binary_name(self.os))

        logger.info("nightly_installed", commit=self.nightly_version())
        return install_dir
