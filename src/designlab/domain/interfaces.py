"""
Domain interfaces (Ports) for Design Lab.

These abstract base classes define the contracts that adapters must satisfy.
They have no external dependencies.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from designlab.domain.models import (
        GuardResult,
        RankedDesign,
        SamplingOptions,
        SessionMessage,
        SessionStatus,
        StoredRun,
        ToolCall,
        ToolPermissions,
    )

# Hook called before every tool invocation an agent makes; raises to deny.
ToolGuardHook = Callable[["ToolCall"], None]


class AgentClientInterface(ABC):
    """
    Port for the external agent-invocation service.

    A session is a remote conversation with one model. Prompts are sent
    asynchronously: send_prompt returns once the service has accepted the
    prompt, and completion is observed through get_status/get_messages.
    """

    @abstractmethod
    def create_session(self, parent_id: str | None, title: str) -> str:
        """
        Create a new session.

        Args:
            parent_id: Session to nest under, if the service supports it
            title: Human-readable session title

        Returns:
            The new session id
        """
        pass

    @abstractmethod
    def send_prompt(
        self,
        session_id: str,
        text: str,
        *,
        model: str,
        tools: "ToolPermissions",
        sampling: "SamplingOptions | None" = None,
        tool_guard: ToolGuardHook | None = None,
    ) -> None:
        """
        Submit a prompt to a session.

        Args:
            session_id: Target session
            text: Prompt body
            model: Model identifier, "provider/model" form accepted
            tools: Tool access granted to the agent
            sampling: Temperature, top_p and token limit; adapter defaults if None
            tool_guard: Hook the service must call before each tool use
        """
        pass

    @abstractmethod
    def get_status(self, session_id: str) -> "SessionStatus":
        """Return whether the session is still producing output."""
        pass

    @abstractmethod
    def get_messages(self, session_id: str) -> list["SessionMessage"]:
        """Return the session's message history, oldest first."""
        pass


class GuardInterface(ABC):
    """
    Port for payload validation.

    Guards are deterministic validators that pass or fail with feedback.
    """

    @abstractmethod
    def validate(self, payload: Any) -> "GuardResult":
        """
        Validate a decoded payload.

        Args:
            payload: JSON-decoded agent output

        Returns:
            GuardResult; on success its value holds the validated payload
        """
        pass


class RunStoreInterface(ABC):
    """
    Port for persisting a run's artifacts.

    Paths are returned as strings so callers can hand them to the
    isolation guard before writing.
    """

    @abstractmethod
    def create_run(self, run_name: str) -> str:
        """
        Create an empty run directory.

        Raises:
            DuplicateRunError: If the directory already exists
        """
        pass

    @abstractmethod
    def design_path(self, run_dir: str, candidate_id: str) -> str:
        """Path the candidate's design JSON is written to."""
        pass

    @abstractmethod
    def designs_root(self, run_dir: str) -> str:
        """Directory holding every candidate's design files."""
        pass

    @abstractmethod
    def write_task(self, run_dir: str, task: dict[str, Any]) -> str:
        pass

    @abstractmethod
    def write_design(
        self, run_dir: str, candidate_id: str, design: dict[str, Any], markdown: str
    ) -> str:
        pass

    @abstractmethod
    def write_review(
        self, run_dir: str, candidate_id: str, model_key: str, review: dict[str, Any]
    ) -> str:
        pass

    @abstractmethod
    def write_scores(
        self, run_dir: str, candidate_id: str, model_key: str, scores: list[dict[str, Any]]
    ) -> str:
        pass

    @abstractmethod
    def write_ranking(self, run_dir: str, rankings: Sequence["RankedDesign"]) -> str:
        pass

    @abstractmethod
    def write_report(self, run_dir: str, markdown: str) -> str:
        pass

    @abstractmethod
    def load_ranking(self, run_dir: str) -> list["RankedDesign"]:
        pass

    @abstractmethod
    def load_run(self, run_dir: str) -> "StoredRun":
        pass
