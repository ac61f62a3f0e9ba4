"""
Schemas for agent output and their JSON Schema export.
"""

from designlab.schemas.export import export_schemas
from designlab.schemas.models import (
    Component,
    DesignArtifact,
    QualitativeReview,
    Risk,
    ScoreEntry,
    ScoreSheet,
    Tradeoff,
)

__all__ = [
    "Component",
    "DesignArtifact",
    "QualitativeReview",
    "Risk",
    "ScoreEntry",
    "ScoreSheet",
    "Tradeoff",
    "export_schemas",
]
