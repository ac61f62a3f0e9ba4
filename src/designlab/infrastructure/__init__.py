"""
Infrastructure layer for Design Lab.

Contains adapters for external concerns (persistence, agent services, registry).
"""

from designlab.infrastructure.llm import MockAgentClient, OpenAISessionClient
from designlab.infrastructure.persistence import FilesystemRunStore, find_most_recent_run
from designlab.infrastructure.registry import AgentClientRegistry

__all__ = [
    # Persistence
    "FilesystemRunStore",
    "find_most_recent_run",
    # Agent clients
    "MockAgentClient",
    "OpenAISessionClient",
    # Registry
    "AgentClientRegistry",
]
