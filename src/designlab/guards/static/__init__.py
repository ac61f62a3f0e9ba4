"""
Static guards - Pure validation of decoded payloads with no side effects.
"""

from designlab.guards.static.schema import SchemaGuard, ScoreBoundsGuard

__all__ = [
    "SchemaGuard",
    "ScoreBoundsGuard",
]
