"""
Application layer for Design Lab.

Contains the use cases that coordinate domain objects: waiting on agent
sessions, invoking agents and running the full pipeline.
"""

from designlab.application.aggregator import RunAggregator
from designlab.application.monitor import CompletionMonitor
from designlab.application.orchestrator import (
    Candidate,
    DesignLabOrchestrator,
    DesignTask,
)
from designlab.application.session import AgentInvoker, assistant_output

__all__ = [
    "AgentInvoker",
    "Candidate",
    "CompletionMonitor",
    "DesignLabOrchestrator",
    "DesignTask",
    "RunAggregator",
    "assistant_output",
]
