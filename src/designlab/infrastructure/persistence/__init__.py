"""
Persistence adapters for run artifacts.
"""

from designlab.infrastructure.persistence.filesystem import (
    FilesystemRunStore,
    find_most_recent_run,
)

__all__ = [
    "FilesystemRunStore",
    "find_most_recent_run",
]
