"""
Agent client registry with entry points discovery.

Agent clients are looked up by name (the CLI's --client option). External
packages can register clients in their pyproject.toml:

    [project.entry-points."designlab.agent_clients"]
    my-service = "mypackage.clients:MyAgentClient"
"""

import warnings
from importlib.metadata import entry_points
from typing import Any

from designlab.domain.interfaces import AgentClientInterface
from designlab.infrastructure.llm.openai_sessions import OpenAISessionClient

ENTRY_POINT_GROUP = "designlab.agent_clients"


class AgentClientRegistry:
    """
    Registry for AgentClientInterface implementations.

    The built-in "openai" client is always available; others are discovered
    from the 'designlab.agent_clients' entry point group on first access.

    Example usage:
        client = AgentClientRegistry.create("openai", base_url="http://localhost:11434/v1")
    """

    _builtin: dict[str, type[AgentClientInterface]] = {"openai": OpenAISessionClient}
    _clients: dict[str, type[AgentClientInterface]] = dict(_builtin)
    _loaded: bool = False

    @classmethod
    def _load_entry_points(cls) -> None:
        """Load clients from entry points (lazy, called once)."""
        if cls._loaded:
            return

        for ep in entry_points(group=ENTRY_POINT_GROUP):
            try:
                cls._clients.setdefault(ep.name, ep.load())
            except Exception as e:
                warnings.warn(
                    f"Failed to load agent client '{ep.name}' from entry point: {e}",
                    stacklevel=2,
                )

        cls._loaded = True

    @classmethod
    def register(cls, name: str, client_class: type[AgentClientInterface]) -> None:
        """Manually register a client class (useful for testing)."""
        cls._clients[name] = client_class

    @classmethod
    def get(cls, name: str) -> type[AgentClientInterface]:
        """
        Get a client class by name.

        Raises:
            KeyError: If no client is registered under name
        """
        cls._load_entry_points()
        if name not in cls._clients:
            available = ", ".join(cls._clients) or "(none)"
            raise KeyError(f"Agent client '{name}' not found. Available clients: {available}")
        return cls._clients[name]

    @classmethod
    def create(cls, name: str, **config: Any) -> AgentClientInterface:
        """Instantiate a client by name, passing config to its constructor."""
        return cls.get(name)(**config)

    @classmethod
    def available(cls) -> list[str]:
        cls._load_entry_points()
        return list(cls._clients)

    @classmethod
    def clear(cls) -> None:
        """Reset to the built-in clients and allow entry points to reload."""
        cls._clients = dict(cls._builtin)
        cls._loaded = False
