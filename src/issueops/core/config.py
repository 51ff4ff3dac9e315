"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .errors import ConfigError


class StorageBackend(str, Enum):
    LOCAL = "local"
    GITHUB = "github"
    MEMORY = "memory"


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class GitHubConfig(BaseModel):
    owner: str = ""
    repo: str = ""
    branch: str = ""  # Empty means the repository default branch
    path_prefix: str = ""  # Directory inside the repo holding domain state
    token_env: str = "GITHUB_TOKEN"  # Name of env var holding the token
    api_url: str = "https://api.github.com"
    timeout_seconds: float = 30.0

    @property
    def token(self) -> str:
        return os.environ.get(self.token_env, "")


class StorageConfig(BaseModel):
    backend: StorageBackend = StorageBackend.LOCAL
    root: str = "domains"  # Local directory for the local backend
    github: GitHubConfig = Field(default_factory=GitHubConfig)


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    storage: StorageConfig = Field(default_factory=StorageConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    log_limit: int = 100  # Default number of entries for log reads

    model_config = {"env_prefix": "ISSUEOPS_", "env_nested_delimiter": "__"}

    def validate_storage(self) -> None:
        """Fail fast when the selected backend cannot be constructed."""
        if self.storage.backend != StorageBackend.GITHUB:
            return

        gh = self.storage.github
        if not gh.owner or not gh.repo:
            raise ConfigError(
                "GitHub storage requires storage.github.owner and "
                "storage.github.repo."
            )
        if not gh.token:
            raise ConfigError(
                f"GitHub storage requires a token in ${gh.token_env}."
            )


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge *overrides* into *base* table by table; scalars in *overrides* win."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Nested dict merged over the file, so
            ``{"storage": {"root": ...}}`` keeps the other ``[storage]`` keys.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        data = _deep_merge(data, overrides)

    return Settings(**data)
