"""
Design Lab: competing design proposals from several models, cross-reviewed,
scored and ranked.

Example:
    from designlab import DesignLabOrchestrator, DesignTask, load_config
    from designlab.infrastructure import FilesystemRunStore, OpenAISessionClient

    config = load_config(".")
    orchestrator = DesignLabOrchestrator.from_config(
        config, OpenAISessionClient(), FilesystemRunStore(config.output.base_dir)
    )
    summary = orchestrator.run(DesignTask("A URL shortener with analytics"))
"""

from designlab.application import (
    AgentInvoker,
    CompletionMonitor,
    DesignLabOrchestrator,
    DesignTask,
    RunAggregator,
)
from designlab.config import DesignLabConfig, load_config
from designlab.domain import (
    AggregatedScore,
    ConsensusLevel,
    DesignLabError,
    RankedDesign,
    RankingEngine,
    RunSummary,
    Score,
    ScoringCriterion,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Application
    "AgentInvoker",
    "CompletionMonitor",
    "DesignLabOrchestrator",
    "DesignTask",
    "RunAggregator",
    # Configuration
    "DesignLabConfig",
    "load_config",
    # Domain
    "AggregatedScore",
    "ConsensusLevel",
    "DesignLabError",
    "RankedDesign",
    "RankingEngine",
    "RunSummary",
    "Score",
    "ScoringCriterion",
]
