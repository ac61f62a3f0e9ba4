"""
Composite guards - Guard composition patterns.
"""

from designlab.guards.composite.base import CompositeGuard, ensure_valid

__all__ = [
    "CompositeGuard",
    "ensure_valid",
]
