"""Configuration management for pandoc-tools."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

import structlog
from pydantic import BaseModel, Field, field_validator

logger = structlog.get_logger()

SNAPSHOT_ENV_VAR = "PANDOC_CACHE_GITHUB"
TOKEN_ENV_VARS = ("GITHUB_PAT", "GITHUB_TOKEN")


def _snapshot_from_env() -> Path | None:
    value = os.environ.get(SNAPSHOT_ENV_VAR)
    return Path(value).expanduser() if value else None


def _token_from_env() -> str | None:
    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


class GitHubConfig(BaseModel):
    """GitHub release source configuration."""

    api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )
    owner: str = Field(default="jgm", description="Repository owner")
    repo: str = Field(default="pandoc", description="Repository name")
    nightly_workflow: str = Field(
        default="nightly.yml",
        description="Workflow file producing nightly builds"
    )
    token: str | None = Field(
        default_factory=_token_from_env,
        description="API token, required to download nightly artifacts"
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    per_page: int = Field(default=100, description="Page size for listings")

    @property
    def repo_path(self) -> str:
        """API path of the repository."""
        return f"/repos/{self.owner}/{self.repo}"

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout value."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator("per_page")
    @classmethod
    def validate_per_page(cls, v: int) -> int:
        """Validate page size, GitHub caps it at 100."""
        if not 1 <= v <= 100:
            raise ValueError("per_page must be between 1 and 100")
        return v


class AppConfig(BaseModel):
    """Application configuration."""

    # Directory settings
    config_dir: Path = Field(
        default=Path.home() / ".config" / "pandoc-tools",
        description="Configuration directory"
    )
    data_dir: Path = Field(
        default=Path.home() / ".local" / "share" / "pandoc-tools",
        description="Data directory holding installed versions"
    )
    download_cache_dir: Path = Field(
        default=Path(tempfile.gettempdir()) / "pandoc-tools-download",
        description="Per-session bundle download cache"
    )

    # Version settings
    external_versions: list[str] = Field(
        default=["system"],
        description="Aliases for Pandoc binaries not managed by pandoc-tools"
    )
    release_snapshot: Path | None = Field(
        default_factory=_snapshot_from_env,
        description="Serialized release listing used instead of GitHub"
    )

    github: GitHubConfig = Field(default_factory=GitHubConfig)

    # Output settings
    output_format: str = Field(
        default="rich",
        description="Output format (rich, json, plain)"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @property
    def versions_dir(self) -> Path:
        """Root directory with one sub-directory per installed version."""
        return self.data_dir / "versions"

    @classmethod
    def load(cls, config_file: Path | None = None) -> AppConfig:
        """Load configuration from file.

        Args:
            config_file: Path to config file, uses default if None

        Returns:
            Application configuration
        """
        if config_file is None:
            config_file = Path.home() / ".config" / "pandoc-tools" / "config.json"

        if config_file.exists():
            with open(config_file) as f:
                data = json.load(f)
                return cls(**data)

        # Return defaults
        return cls()

    def save(self, config_file: Path | None = None) -> None:
        """Save configuration to file.

        The GitHub token is never written out.

        Args:
            config_file: Path to config file, uses default if None
        """
        if config_file is None:
            config_file = self.config_dir / "config.json"

        config_file.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(mode="json", exclude={"github": {"token"}})
        with open(config_file, "w") as f:
            json.dump(data, f, indent=2, default=str)

        logger.info("config_saved", path=str(config_file))

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        """Validate output format."""
        valid_formats = {"rich", "json", "plain"}
        if v not in valid_formats:
            raise ValueError(f"Invalid output format: {v}. Valid formats: {valid_formats}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Valid levels: {valid_levels}")
        return v

    @field_validator("external_versions")
    @classmethod
    def validate_external_versions(cls, v: list[str]) -> list[str]:
        """Reserved keywords cannot be external aliases."""
        reserved = {"latest", "nightly", "default"}
        clash = reserved.intersection(v)
        if clash:
            raise ValueError(f"Reserved names cannot be external versions: {sorted(clash)}")
        return v
