"""
Domain layer for Design Lab.

Contains scoring, ranking and extraction logic with no external dependencies.
"""

from designlab.domain.aggregation import (
    aggregate,
    calculate_overall_score,
    classify_consensus,
)
from designlab.domain.exceptions import (
    AgentInvocationError,
    CompletionCancelled,
    CompletionTimeout,
    ConfigurationError,
    DesignLabError,
    DuplicateRunError,
    ExtractionError,
    IsolationViolation,
    SchemaValidationError,
)
from designlab.domain.extraction import extract_json
from designlab.domain.interfaces import AgentClientInterface, GuardInterface
from designlab.domain.models import (
    AggregatedScore,
    ConsensusLevel,
    GuardResult,
    IsolationScope,
    ModelOutcome,
    OperationKind,
    Phase,
    RankedDesign,
    RunSummary,
    Score,
    ScoredCandidate,
    ScoringCriterion,
    SessionState,
    SessionStatus,
    ToolCall,
)
from designlab.domain.ranking import RankingEngine

__all__ = [
    # Models
    "AggregatedScore",
    "ConsensusLevel",
    "GuardResult",
    "IsolationScope",
    "ModelOutcome",
    "OperationKind",
    "Phase",
    "RankedDesign",
    "RunSummary",
    "Score",
    "ScoredCandidate",
    "ScoringCriterion",
    "SessionState",
    "SessionStatus",
    "ToolCall",
    # Interfaces
    "AgentClientInterface",
    "GuardInterface",
    # Scoring
    "aggregate",
    "calculate_overall_score",
    "classify_consensus",
    "RankingEngine",
    "extract_json",
    # Exceptions
    "AgentInvocationError",
    "CompletionCancelled",
    "CompletionTimeout",
    "ConfigurationError",
    "DesignLabError",
    "DuplicateRunError",
    "ExtractionError",
    "IsolationViolation",
    "SchemaValidationError",
]
