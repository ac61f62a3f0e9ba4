"""
Guards for Design Lab.

Guards are deterministic validators that pass or fail with feedback.

Organization by validation profile:
- static/: Schema and range checks over decoded agent output
- isolation/: Path-based access control between design candidates
- composite/: Guard composition and enforcement helpers
"""

from designlab.guards.composite import CompositeGuard, ensure_valid
from designlab.guards.isolation import IsolationGuard
from designlab.guards.static import SchemaGuard, ScoreBoundsGuard

__all__ = [
    # Static guards (pure, fast)
    "SchemaGuard",
    "ScoreBoundsGuard",
    # Access control
    "IsolationGuard",
    # Composition patterns
    "CompositeGuard",
    "ensure_valid",
]
