"""Structured output schemas for agent replies.

These are OUTPUT schemas for validating what agents return - NOT domain
models. Each schema converts into the domain type the pipeline works with.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from designlab.domain.models import ReviewFindings, Score

RiskLevel = Literal["low", "medium", "high"]


# =============================================================================
# Design Artifact
# =============================================================================


class Component(BaseModel):
    """A building block of the proposed system."""

    name: str
    description: str
    responsibilities: list[str]
    interfaces: list[str] | None = None


class Tradeoff(BaseModel):
    """A design decision and the alternatives it was weighed against."""

    aspect: str
    choice: str
    rationale: str
    alternatives: list[str] = Field(default_factory=list)


class Risk(BaseModel):
    """A known risk with its severity."""

    description: str
    severity: RiskLevel
    mitigation: str | None = None


class DesignArtifact(BaseModel):
    """A complete design proposal produced by one model."""

    model_config = ConfigDict(extra="forbid")

    id: str
    title: str
    summary: str
    assumptions: list[str] = Field(default_factory=list)
    architecture_overview: str
    architecture: str
    components: list[Component] = Field(default_factory=list)
    data_flow: str
    tradeoffs: list[Tradeoff] = Field(default_factory=list)
    risks: list[Risk] = Field(default_factory=list)
    open_questions: list[str] = Field(default_factory=list)
    additional_notes: str | None = None


# =============================================================================
# Qualitative Review
# =============================================================================


class QualitativeReview(BaseModel):
    """A reviewer's free-text assessment of one design."""

    model_config = ConfigDict(extra="forbid")

    design_id: str
    reviewer_model: str
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    missing_considerations: list[str] = Field(default_factory=list)
    risk_assessment: RiskLevel
    overall_impression: str
    suggested_improvements: list[str] = Field(default_factory=list)

    def to_findings(self) -> ReviewFindings:
        return ReviewFindings(
            reviewer_model=self.reviewer_model,
            strengths=tuple(self.strengths),
            weaknesses=tuple(self.weaknesses),
            risk_assessment=self.risk_assessment,
        )


# =============================================================================
# Quantitative Score
# =============================================================================


class ScoreEntry(BaseModel):
    """One criterion score as returned by a scoring agent."""

    name: str
    value: float
    weight: float = 1.0
    variance: float = 0.0
    comment: str | None = None
    model: str | None = None

    def to_score(self, model: str | None = None) -> Score:
        """Convert to a domain Score, attributing it to `model` if given."""
        return Score(
            name=self.name,
            value=self.value,
            weight=self.weight,
            variance=self.variance,
            comment=self.comment,
            model=model or self.model,
        )


class ScoreSheet(BaseModel):
    """Wrapper form some agents use: {"scores": [...]}."""

    scores: list[ScoreEntry]
