"""Configuration and manifest store.

This module loads and saves the per-machine ``.dfm.toml`` file that holds
the ordered list of active repositories, the target directory and the
manifest of tracked paths. The file is validated with a Pydantic model
and written atomically.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from dfm.core.paths import get_config_path, path_join

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Base exception for configuration-related errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the dfm directory does not exist."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the configuration content is invalid."""


class ConfigFile(BaseModel):
    """On-disk representation of ``.dfm.toml``.

    Attributes:
        repos: Active repository names, in precedence order (last wins).
        target: Absolute path of the directory kept in sync.
        manifest: Target-relative paths currently tracked by dfm.
    """

    model_config = ConfigDict(extra="forbid")

    repos: Annotated[
        list[str],
        Field(default_factory=list, description="Active repositories, lowest precedence first"),
    ]
    target: Annotated[str | None, Field(description="Directory to place files in")] = None
    manifest: Annotated[
        list[str],
        Field(default_factory=list, description="Tracked target-relative paths"),
    ]

    @field_validator("repos")
    @classmethod
    def validate_repos(cls, repos: list[str]) -> list[str]:
        """Repository names must be plain directory names."""
        for repo in repos:
            if repo in ("", ".", "..") or "/" in repo:
                msg = f"invalid repository name: {repo!r}"
                raise ValueError(msg)
        return repos

    @field_validator("target")
    @classmethod
    def validate_target(cls, target: str | None) -> str | None:
        """The target must be an absolute path."""
        if target is not None and not os.path.isabs(target):
            msg = f"target must be an absolute path: {target!r}"
            raise ValueError(msg)
        return target

    @field_validator("manifest")
    @classmethod
    def validate_manifest(cls, manifest: list[str]) -> list[str]:
        """Manifest entries must be relative and stay inside the target."""
        for entry in manifest:
            if not entry or os.path.isabs(entry) or ".." in entry.split("/"):
                msg = f"invalid manifest entry: {entry!r}"
                raise ValueError(msg)
        return manifest


@dataclass
class Config:
    """In-memory configuration of one dfm directory.

    Attributes:
        directory: The dfm directory holding the repositories.
        target: Directory kept in sync, normally the home directory.
        repos: Active repository names, lowest precedence first.
        manifest: Tracked target-relative paths.
    """

    directory: Path
    target: Path = field(default_factory=Path.home)
    repos: list[str] = field(default_factory=list)
    manifest: set[str] = field(default_factory=set)

    @property
    def path(self) -> Path:
        """Path of the configuration file."""
        return get_config_path(self.directory)

    def repo_path(self, repo: str, relative: str = "") -> str:
        """Return the absolute path of a file inside a repository."""
        return path_join(str(self.directory), repo, relative)

    def target_path(self, relative: str = "") -> str:
        """Return the absolute path of a file inside the target."""
        return path_join(str(self.target), relative)

    def has_repo(self, repo: str) -> bool:
        """Check if repo is one of the active repositories."""
        return repo in self.repos

    def apply_overrides(
        self,
        repos: list[str] | None = None,
        target: str | Path | None = None,
    ) -> None:
        """Apply settings given on the command line.

        Args:
            repos: Replacement repository list, if given.
            target: Replacement target directory, made absolute.
        """
        if repos is not None:
            self.repos = list(repos)
        if target:
            self.target = Path(os.path.abspath(target))


def load_config(directory: Path) -> Config:
    """Load the configuration of a dfm directory.

    A missing ``.dfm.toml`` is the same as an empty one. Missing keys take
    their defaults: no repositories, the home directory as target and an
    empty manifest.

    Args:
        directory: The dfm directory.

    Returns:
        Loaded Config.

    Raises:
        ConfigNotFoundError: If the directory does not exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    directory = Path(os.path.abspath(directory))
    if not directory.is_dir():
        raise ConfigNotFoundError(f"dfm directory not found: {directory}")

    config_path = get_config_path(directory)
    data: dict[str, Any] = {}
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        logger.debug("No configuration file at %s, using defaults", config_path)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read {config_path}: {e}") from e

    try:
        file = ConfigFile.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {config_path}: {e}") from e

    config = Config(directory=directory, repos=file.repos, manifest=set(file.manifest))
    if file.target is not None:
        config.target = Path(file.target)
    return config


def save_config(config: Config) -> Path:
    """Save a configuration to its ``.dfm.toml`` file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace(). The manifest is
    written sorted so the file diffs cleanly.

    Args:
        config: The Config to save.

    Returns:
        Path where the configuration was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    from tempfile import NamedTemporaryFile

    config_path = config.path
    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            prefix=".dfm.",
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write {config_path}: {e}") from e

    logger.debug("Saved configuration with %d tracked file(s)", len(config.manifest))
    return config_path


def _config_to_dict(config: Config) -> dict[str, Any]:
    """Convert a Config to a dictionary suitable for TOML serialization."""
    return {
        "repos": list(config.repos),
        "target": str(config.target),
        "manifest": sorted(config.manifest),
    }
