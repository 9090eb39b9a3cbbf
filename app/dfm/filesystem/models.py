"""Filesystem domain models.

This module defines the entry types the filesystem capability reports
for a path, independent of the backing store.
"""

from enum import Enum


class PathType(str, Enum):
    """Type of filesystem entry.

    Attributes:
        DIRECTORY: Regular directory.
        FILE: Regular file.
        SYMLINK: Symbolic link (valid or dangling).
        OTHER: Anything else (device, socket, fifo).
    """

    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"
    OTHER = "other"
