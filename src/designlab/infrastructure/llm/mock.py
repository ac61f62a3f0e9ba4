"""
Mock agent client for testing without an LLM.

Replies come from a scripted list or a responder callable. Each session
reports RUNNING for a configurable number of polls before its reply
appears, so completion monitoring is exercised end to end.
"""

import itertools
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from designlab.domain.interfaces import AgentClientInterface, ToolGuardHook
from designlab.domain.models import (
    MessagePart,
    SamplingOptions,
    SessionMessage,
    SessionStatus,
    ToolCall,
    ToolPermissions,
)


@dataclass(frozen=True)
class MockReply:
    """A scripted reply, optionally preceded by tool calls."""

    text: str
    tool_calls: tuple[ToolCall, ...] = ()


Responder = Callable[[str, str], "str | MockReply"]


@dataclass(frozen=True)
class SentPrompt:
    """Record of one send_prompt call."""

    session_id: str
    model: str
    text: str
    tools: ToolPermissions
    sampling: SamplingOptions | None


@dataclass
class _MockSession:
    title: str
    parent_id: str | None
    messages: list[SessionMessage] = field(default_factory=list)
    pending: SessionMessage | None = None
    running_polls_left: int = 0


class MockAgentClient(AgentClientInterface):
    """Returns scripted replies for testing."""

    def __init__(
        self,
        responses: Sequence[str | MockReply] | Responder,
        running_polls: int = 1,
    ):
        """
        Args:
            responses: Replies returned in sequence, or a callable
                (model, prompt) -> reply
            running_polls: get_status calls that report RUNNING before the
                reply is appended
        """
        if callable(responses):
            self._responder: Responder = responses
        else:
            scripted = list(responses)
            self._responder = lambda _model, _prompt: self._next_scripted(scripted)
        self._running_polls = running_polls
        self._sessions: dict[str, _MockSession] = {}
        self._ids = itertools.count(1)
        self._scripted_index = 0
        self._lock = threading.Lock()
        self.sent: list[SentPrompt] = []

    def _next_scripted(self, scripted: list[str | MockReply]) -> str | MockReply:
        if self._scripted_index >= len(scripted):
            raise RuntimeError("MockAgentClient exhausted responses")
        reply = scripted[self._scripted_index]
        self._scripted_index += 1
        return reply

    def create_session(self, parent_id: str | None, title: str) -> str:
        with self._lock:
            session_id = f"mock-session-{next(self._ids)}"
            self._sessions[session_id] = _MockSession(title=title, parent_id=parent_id)
        return session_id

    def send_prompt(
        self,
        session_id: str,
        text: str,
        *,
        model: str,
        tools: ToolPermissions,
        sampling: SamplingOptions | None = None,
        tool_guard: ToolGuardHook | None = None,
    ) -> None:
        with self._lock:
            session = self._sessions[session_id]
            self.sent.append(SentPrompt(session_id, model, text, tools, sampling))
            reply = self._responder(model, text)

        if isinstance(reply, str):
            reply = MockReply(reply)
        for call in reply.tool_calls:
            if tool_guard is not None:
                tool_guard(call)

        with self._lock:
            session.messages.append(SessionMessage("user", (MessagePart("text", text),)))
            session.pending = SessionMessage("assistant", (MessagePart("text", reply.text),))
            session.running_polls_left = self._running_polls

    def get_status(self, session_id: str) -> SessionStatus:
        with self._lock:
            session = self._sessions[session_id]
            if session.running_polls_left > 0:
                session.running_polls_left -= 1
                return SessionStatus.RUNNING
            if session.pending is not None:
                session.messages.append(session.pending)
                session.pending = None
            return SessionStatus.IDLE

    def get_messages(self, session_id: str) -> list[SessionMessage]:
        with self._lock:
            return list(self._sessions[session_id].messages)

    @property
    def session_count(self) -> int:
        """Number of sessions created so far."""
        return len(self._sessions)

    def prompts_for(self, model: str) -> list[str]:
        """Prompt texts sent to one model, in order."""
        return [p.text for p in self.sent if p.model == model]
