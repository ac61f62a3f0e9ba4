"""
Isolation guards - Keep concurrent design candidates out of each other's files.
"""

from designlab.guards.isolation.path import IsolationGuard

__all__ = [
    "IsolationGuard",
]
