"""GitHub REST client used as the Pandoc release source."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
import structlog

from pandoc_tools import __version__
from pandoc_tools.core.config import GitHubConfig

logger = structlog.get_logger()


class GitHubClient:
    """Minimal GitHub client for releases and workflow artifacts.

    Only the endpoints needed to list Pandoc releases, list nightly workflow
    runs and download files are covered. HTTP failures are raised as
    ``httpx.HTTPError``; callers decide how to report them.
    """

    def __init__(
        self,
        config: GitHubConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize GitHub client.

        Args:
            config: Optional GitHub configuration
            transport: Optional httpx transport, used by tests
        """
        self.config = config or GitHubConfig()
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {
                "User-Agent": f"pandoc-tools/{__version__}",
                "Accept": "application/vnd.github+json",
            }
            if self.config.token:
                headers["Authorization"] = f"Bearer {self.config.token}"
            self._client = httpx.Client(
                base_url=self.config.api_url,
                timeout=self.config.timeout,
                follow_redirects=True,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = self.client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    def list_releases(self, limit: int | None = None) -> list[dict[str, Any]]:
        """List repository releases, newest first.

        Follows ``Link: rel="next"`` pagination until exhausted or until
        ``limit`` releases were collected.

        Args:
            limit: Maximum number of releases, all when None

        Returns:
            Raw release objects as returned by the API
        """
        releases: list[dict[str, Any]] = []
        url: str | None = f"{self.config.repo_path}/releases"
        params: dict[str, Any] | None = {"per_page": self.config.per_page}

        while url:
            response = self.client.get(url, params=params)
            response.raise_for_status()
            page: list[dict[str, Any]] = response.json()
            releases.extend(page)
            logger.debug("github_releases_page", url=str(response.url), count=len(page))

            if limit is not None and len(releases) >= limit:
                return releases[:limit]

            url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            params = None

        return releases

    def list_workflow_runs(self, workflow: str, per_page: int = 15) -> list[dict[str, Any]]:
        """List the most recent runs of a workflow.

        Args:
            workflow: Workflow file name (e.g. nightly.yml)
            per_page: Number of runs to fetch

        Returns:
            Raw workflow run objects, newest first
        """
        data = self._get_json(
            f"{self.config.repo_path}/actions/workflows/{workflow}/runs",
            params={"per_page": min(per_page, 100)},
        )
        runs: list[dict[str, Any]] = data.get("workflow_runs", [])
        logger.debug("github_workflow_runs", workflow=workflow, count=len(runs))
        return runs

    def list_artifacts(self, artifacts_url: str) -> list[dict[str, Any]]:
        """List the artifacts of a workflow run.

        Args:
            artifacts_url: ``artifacts_url`` field of a workflow run

        Returns:
            Raw artifact objects
        """
        data = self._get_json(artifacts_url)
        return data.get("artifacts", [])

    def download(self, url: str, destination: Path) -> Path:
        """Stream a file to disk.

        The body is written to ``<destination>.part`` and renamed once
        complete, so an interrupted transfer never leaves ``destination``.

        Args:
            url: Absolute or API-relative URL
            destination: Target file, relative paths resolve against the cwd

        Returns:
            The destination path
        """
        destination = Path(destination)
        partial = destination.with_name(destination.name + ".part")
        try:
            with self.client.stream("GET", url) as response:
                response.raise_for_status()
                with open(partial, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
            partial.replace(destination)
        finally:
            partial.unlink(missing_ok=True)

        logger.debug("github_download", url=url, path=str(destination))
        return destination

    def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> GitHubClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
