"""Filesystem capability for dfm.

This module provides the Filesystem interface used by the engine and its
two implementations: the operating system backend and an in-memory
backend for tests.
"""

from dfm.filesystem.base import Filesystem
from dfm.filesystem.local import OsFilesystem
from dfm.filesystem.memory import MemoryFilesystem
from dfm.filesystem.models import PathType

__all__ = [
    "Filesystem",
    "MemoryFilesystem",
    "OsFilesystem",
    "PathType",
]
