"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules. Engine tests
run against an in-memory filesystem rooted at DFM_DIR and TARGET.
"""

from pathlib import Path

import pytest
from dfm.core.config import Config
from dfm.core.engine import Dfm, EngineOptions
from dfm.core.errors import FileError
from dfm.filesystem.memory import MemoryFilesystem
from dfm.models.operation import Operation

DFM_DIR = "/dots"
TARGET = "/home/user"


class RecordingLogger:
    """Per-file logger that keeps every entry for assertions."""

    def __init__(self) -> None:
        self.entries: list[tuple[Operation, str, str, FileError | None]] = []

    def __call__(
        self,
        operation: Operation,
        relative: str,
        repo: str,
        reason: FileError | None,
    ) -> None:
        self.entries.append((operation, relative, repo, reason))

    def paths(self, operation: Operation) -> list[str]:
        """Relative paths logged with the given operation, in order."""
        return [entry[1] for entry in self.entries if entry[0] == operation]


@pytest.fixture
def fs() -> MemoryFilesystem:
    """In-memory filesystem with an empty dfm directory and target."""
    memory = MemoryFilesystem()
    memory.makedirs(DFM_DIR)
    memory.makedirs(TARGET)
    return memory


@pytest.fixture
def config() -> Config:
    """Configuration with a single active repo named 'files'."""
    return Config(directory=Path(DFM_DIR), target=Path(TARGET), repos=["files"])


@pytest.fixture
def log() -> RecordingLogger:
    """Recording per-file logger."""
    return RecordingLogger()


@pytest.fixture
def engine(fs: MemoryFilesystem, config: Config, log: RecordingLogger) -> Dfm:
    """Engine bound to the in-memory filesystem."""
    return Dfm(config, fs=fs, log=log)


@pytest.fixture
def dry_engine(fs: MemoryFilesystem, config: Config, log: RecordingLogger) -> Dfm:
    """Engine bound to the in-memory filesystem in dry-run mode."""
    return Dfm(config, fs=fs, options=EngineOptions(dry_run=True), log=log)
