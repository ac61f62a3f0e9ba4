"""
Domain models for Design Lab.

Scores, rankings and run outcomes are immutable (frozen dataclasses).
SessionState is the one mutable model: it belongs to a single
CompletionMonitor call and is discarded when that call returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# SESSIONS
# =============================================================================


class SessionStatus(Enum):
    """Status reported by the agent-invocation service for a session."""

    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class MessagePart:
    """One fragment of a session message."""

    type: str  # "text", "reasoning", "tool", ...
    text: str = ""


@dataclass(frozen=True)
class SessionMessage:
    """A message observed in a session's history."""

    role: str  # "user" | "assistant"
    parts: tuple[MessagePart, ...] = ()


@dataclass
class SessionState:
    """Polling state for one session, private to one monitor call."""

    session_id: str
    last_observed_count: int = 0
    consecutive_stable_observations: int = 0
    elapsed: float = 0.0
    polls: int = 0


# =============================================================================
# ISOLATION
# =============================================================================


class OperationKind(Enum):
    """Closed set of tool operations the isolation guard understands."""

    READ = "read"
    WRITE = "write"
    COMMAND = "command"


@dataclass(frozen=True)
class ToolCall:
    """A single tool invocation requested by an agent.

    For READ/WRITE the target is a filesystem path; for COMMAND it is the
    literal command text.
    """

    operation: OperationKind
    target: str


@dataclass(frozen=True)
class IsolationScope:
    """Which sub-path of the artifact tree the current actor may touch."""

    root_path: str
    owner_id: str | None = None


@dataclass(frozen=True)
class ToolPermissions:
    """Tool access granted to an agent session."""

    read: bool = True
    write: bool = False
    command: bool = False


@dataclass(frozen=True)
class SamplingOptions:
    """Generation parameters forwarded to the model."""

    temperature: float = 0.7
    top_p: float = 0.9
    max_tokens: int = 4000


# =============================================================================
# GUARD RESULT
# =============================================================================


@dataclass(frozen=True)
class GuardResult:
    """Outcome of a structural guard check."""

    passed: bool
    feedback: str = ""
    guard_name: str | None = None
    value: Any = None  # validated payload, set when passed


# =============================================================================
# SCORING
# =============================================================================


@dataclass(frozen=True)
class ScoringCriterion:
    """A named, weighted, bounded evaluation dimension."""

    name: str
    description: str = ""
    min: float = 0
    max: float = 10
    weight: float = 1.0


@dataclass(frozen=True)
class Score:
    """One reviewer's numeric judgement on one criterion."""

    name: str
    value: float
    weight: float = 1.0
    variance: float | None = None
    comment: str | None = None
    model: str | None = None


@dataclass(frozen=True)
class AggregatedScore:
    """Consensus value for one criterion across all reviewers."""

    name: str
    value: float
    weight: float
    variance: float
    comment: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "weight": self.weight,
            "variance": self.variance,
            "comment": self.comment,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AggregatedScore:
        return cls(
            name=data["name"],
            value=data["value"],
            weight=data["weight"],
            variance=data["variance"],
            comment=data["comment"],
        )


class ConsensusLevel(Enum):
    """How much reviewers agreed, derived from mean variance."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# =============================================================================
# RANKING
# =============================================================================


@dataclass(frozen=True)
class ReviewFindings:
    """The parts of a qualitative review the ranking summary counts."""

    reviewer_model: str
    strengths: tuple[str, ...] = ()
    weaknesses: tuple[str, ...] = ()
    risk_assessment: str = "medium"


@dataclass(frozen=True)
class QualitativeSummary:
    """Frequency statistics over one candidate's qualitative reviews."""

    total_strengths: int = 0
    total_weaknesses: int = 0
    common_strengths: tuple[str, ...] = ()
    common_weaknesses: tuple[str, ...] = ()
    risk_levels: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_strengths": self.total_strengths,
            "total_weaknesses": self.total_weaknesses,
            "common_strengths": list(self.common_strengths),
            "common_weaknesses": list(self.common_weaknesses),
            "risk_levels": dict(self.risk_levels),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QualitativeSummary:
        return cls(
            total_strengths=data["total_strengths"],
            total_weaknesses=data["total_weaknesses"],
            common_strengths=tuple(data["common_strengths"]),
            common_weaknesses=tuple(data["common_weaknesses"]),
            risk_levels=dict(data["risk_levels"]),
        )


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate design ready for ranking."""

    design_id: str
    generated_by: str
    aggregated_scores: tuple[AggregatedScore, ...]
    overall_score: float
    reviews: tuple[ReviewFindings, ...] = ()


@dataclass(frozen=True)
class RankedDesign:
    """A candidate with its final position in the consensus ordering."""

    design_id: str
    aggregated_scores: tuple[AggregatedScore, ...]
    overall_score: float
    rank: int
    generated_by: str
    consensus: ConsensusLevel
    mean_variance: float
    qualitative_summary: QualitativeSummary = field(default_factory=QualitativeSummary)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the ranking.json entry format."""
        return {
            "design_id": self.design_id,
            "rank": self.rank,
            "overall_score": self.overall_score,
            "generated_by": self.generated_by,
            "consensus": self.consensus.value,
            "mean_variance": self.mean_variance,
            "aggregated_scores": [s.to_dict() for s in self.aggregated_scores],
            "qualitative_summary": self.qualitative_summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RankedDesign:
        return cls(
            design_id=data["design_id"],
            aggregated_scores=tuple(
                AggregatedScore.from_dict(s) for s in data["aggregated_scores"]
            ),
            overall_score=data["overall_score"],
            rank=data["rank"],
            generated_by=data["generated_by"],
            consensus=ConsensusLevel(data["consensus"]),
            mean_variance=data["mean_variance"],
            qualitative_summary=QualitativeSummary.from_dict(
                data["qualitative_summary"]
            ),
        )


@dataclass(frozen=True)
class RankingSummary:
    """Run-level statistics shown alongside the ranking."""

    total_designs: int
    total_reviewers: int
    average_variance: float
    consensus: ConsensusLevel


# =============================================================================
# RUN OUTCOMES
# =============================================================================


class Phase(Enum):
    """Pipeline phases that invoke an agent."""

    TOPIC = "topic"
    GENERATION = "generation"
    REVIEW = "review"
    SCORING = "scoring"


@dataclass(frozen=True)
class ModelOutcome:
    """Result of one model invocation within a phase."""

    phase: Phase
    model: str
    success: bool
    candidate_id: str | None = None
    output_path: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class RunSummary:
    """What a completed run produced."""

    run_dir: str
    topic: str
    rankings: tuple[RankedDesign, ...]
    outcomes: tuple[ModelOutcome, ...]

    @property
    def failures(self) -> tuple[ModelOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.success)

    @property
    def failure_count(self) -> int:
        return len(self.failures)


@dataclass(frozen=True)
class StoredRun:
    """Raw contents of a persisted run directory, keyed by candidate id."""

    run_dir: str
    task: dict[str, Any]
    designs: dict[str, dict[str, Any]]
    reviews: dict[str, list[dict[str, Any]]]
    scores: dict[str, list[list[dict[str, Any]]]]  # one list per scoring model
