"""Tests for AgentInvoker and assistant_output."""

import os
import subprocess
import sys
import textwrap
import threading
from pathlib import Path

import pytest

from designlab.application.monitor import CompletionMonitor
from designlab.application.session import AgentInvoker, assistant_output
from designlab.domain.exceptions import AgentInvocationError, IsolationViolation
from designlab.domain.extraction import extract_json
from designlab.domain.models import (
    IsolationScope,
    MessagePart,
    OperationKind,
    SamplingOptions,
    SessionMessage,
    SessionStatus,
    ToolCall,
    ToolPermissions,
)
from designlab.guards import IsolationGuard
from designlab.infrastructure.llm.mock import MockAgentClient, MockReply

SRC_ROOT = Path(__file__).parent.parent.parent / "src"


class FlakyStatusClient(MockAgentClient):
    """Mock whose status endpoint drops the connection."""

    def get_status(self, session_id: str) -> SessionStatus:
        raise ConnectionError("connection reset")


class SignOffClient(MockAgentClient):
    """Mock whose agent follows its answer with a second, prose-only message."""

    def get_messages(self, session_id: str) -> list[SessionMessage]:
        return [
            *super().get_messages(session_id),
            SessionMessage("assistant", (MessagePart("text", "Saved the design. Done!"),)),
        ]


def _invoker(client: MockAgentClient, send_timeout: float = 5.0) -> AgentInvoker:
    monitor = CompletionMonitor(client, poll_interval=0, max_wait=5.0)
    return AgentInvoker(client, monitor, send_timeout=send_timeout)


def _invoke(invoker: AgentInvoker, **kwargs) -> str:  # noqa: ANN003
    return invoker.invoke(
        model=kwargs.pop("model", "test/model"),
        prompt=kwargs.pop("prompt", "Say hi"),
        title="Test",
        tools=kwargs.pop("tools", ToolPermissions()),
        **kwargs,
    )


class TestAssistantOutput:
    """Tests for extracting the reply text."""

    def test_every_assistant_message_kept(self) -> None:
        messages = [
            SessionMessage("user", (MessagePart("text", "Q"),)),
            SessionMessage("assistant", (MessagePart("text", "first"),)),
            SessionMessage("assistant", (MessagePart("text", "second"),)),
        ]

        assert assistant_output(messages) == "first\n\nsecond"

    def test_payload_in_earlier_message_still_extracted(self) -> None:
        messages = [
            SessionMessage("user", (MessagePart("text", "Design it"),)),
            SessionMessage("assistant", (MessagePart("text", '{"title": "Queue"}'),)),
            SessionMessage("assistant", (MessagePart("text", "Let me know if you need more."),)),
        ]

        assert extract_json(assistant_output(messages)) == {"title": "Queue"}

    def test_joins_text_parts_only(self) -> None:
        message = SessionMessage(
            "assistant",
            (
                MessagePart("reasoning", "thinking..."),
                MessagePart("text", "line one"),
                MessagePart("tool", ""),
                MessagePart("text", "line two"),
            ),
        )

        assert assistant_output([message]) == "line one\n\nline two"

    def test_no_assistant_message(self) -> None:
        with pytest.raises(AgentInvocationError, match="No assistant response"):
            assistant_output([SessionMessage("user", (MessagePart("text", "Q"),))])


class TestInvoke:
    """Tests for AgentInvoker.invoke()."""

    def test_returns_reply(self) -> None:
        client = MockAgentClient(["Hello there"])

        assert _invoke(_invoker(client)) == "Hello there"

    def test_forwards_model_tools_and_sampling(self) -> None:
        client = MockAgentClient(["ok"])
        sampling = SamplingOptions(0.3, 0.9, 2000)
        tools = ToolPermissions(read=True, write=False)

        _invoke(_invoker(client), model="openai/gpt-4o", tools=tools, sampling=sampling)

        sent = client.sent[0]
        assert sent.model == "openai/gpt-4o"
        assert sent.tools == tools
        assert sent.sampling == sampling

    def test_one_session_per_invocation(self) -> None:
        client = MockAgentClient(["a", "b"])
        invoker = _invoker(client)

        _invoke(invoker)
        _invoke(invoker)

        assert client.session_count == 2

    def test_send_failure_wrapped(self) -> None:
        """Unexpected errors from the service become AgentInvocationError."""

        def responder(model: str, prompt: str) -> str:
            raise ConnectionError("refused")

        with pytest.raises(AgentInvocationError, match="Failed to send prompt") as exc_info:
            _invoke(_invoker(MockAgentClient(responder)))

        assert exc_info.value.model == "test/model"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_send_timeout(self) -> None:
        release = threading.Event()

        def responder(model: str, prompt: str) -> str:
            release.wait(5)
            return "late"

        try:
            with pytest.raises(AgentInvocationError, match="not accepted within"):
                _invoke(_invoker(MockAgentClient(responder), send_timeout=0.05))
        finally:
            release.set()

    def test_isolation_violation_propagates_unwrapped(self, tmp_path) -> None:  # noqa: ANN001
        """A denied tool call surfaces as IsolationViolation, not a generic error."""
        designs = tmp_path / "designs"
        scope = IsolationScope(root_path=str(designs), owner_id="alpha")
        client = MockAgentClient(
            [MockReply("{}", tool_calls=(ToolCall(OperationKind.READ, str(designs / "beta.json")),))]
        )

        with pytest.raises(IsolationViolation, match="Cannot read from other designs"):
            _invoke(_invoker(client), tool_guard=IsolationGuard().hook(scope))

    def test_reply_spans_every_assistant_message(self) -> None:
        client = SignOffClient(['{"title": "Cache"}'])

        reply = _invoke(_invoker(client))

        assert extract_json(reply) == {"title": "Cache"}
        assert reply.endswith("Done!")

    def test_polling_failure_wrapped(self) -> None:
        """Transport errors while waiting become AgentInvocationError."""
        with pytest.raises(AgentInvocationError, match="failed: connection reset") as exc_info:
            _invoke(_invoker(FlakyStatusClient(["never read"])), model="test/flaky")

        assert exc_info.value.model == "test/flaky"
        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestSendTimeout:
    """A prompt the service never accepts must not pin the process."""

    def test_blocked_send_abandoned(self) -> None:
        never = threading.Event()

        def responder(model: str, prompt: str) -> str:
            never.wait()
            return "unreachable"

        with pytest.raises(AgentInvocationError, match="not accepted within"):
            _invoke(_invoker(MockAgentClient(responder), send_timeout=0.05))

    def test_interpreter_exits_with_send_still_blocked(self) -> None:
        script = textwrap.dedent(
            """
            import threading

            from designlab.application.monitor import CompletionMonitor
            from designlab.application.session import AgentInvoker
            from designlab.domain.exceptions import AgentInvocationError
            from designlab.domain.models import ToolPermissions
            from designlab.infrastructure.llm.mock import MockAgentClient

            never = threading.Event()

            def responder(model, prompt):
                never.wait()
                return "unreachable"

            client = MockAgentClient(responder)
            invoker = AgentInvoker(client, CompletionMonitor(client), send_timeout=0.1)
            try:
                invoker.invoke(model="m/x", prompt="p", title="t", tools=ToolPermissions())
            except AgentInvocationError:
                print("abandoned")
            """
        )
        pythonpath = os.pathsep.join([str(SRC_ROOT), os.environ.get("PYTHONPATH", "")])
        env = {**os.environ, "PYTHONPATH": pythonpath}

        result = subprocess.run(
            [sys.executable, "-c", script], capture_output=True, text=True, timeout=30, env=env
        )

        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "abandoned"
