"""
Agent client adapters.
"""

from designlab.infrastructure.llm.mock import MockAgentClient, MockReply
from designlab.infrastructure.llm.openai_sessions import (
    OpenAISessionClient,
    OpenAISessionClientConfig,
)

__all__ = [
    "MockAgentClient",
    "MockReply",
    "OpenAISessionClient",
    "OpenAISessionClientConfig",
]
