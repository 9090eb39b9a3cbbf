"""Data models for dfm.

This module exports the core data structures used throughout the application.
"""

from dfm.models.operation import FileLogger, Operation, null_logger

__all__ = [
    "FileLogger",
    "Operation",
    "null_logger",
]
