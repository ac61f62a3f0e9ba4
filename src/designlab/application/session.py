"""
AgentInvoker: one prompt, one session, one reply.

Creates a session, sends the prompt with a send-side timeout, waits for
the session to settle through CompletionMonitor and returns the text the
assistant produced.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from typing import Any

from designlab.application.monitor import CompletionMonitor
from designlab.domain.exceptions import AgentInvocationError, DesignLabError
from designlab.domain.interfaces import AgentClientInterface, ToolGuardHook
from designlab.domain.models import SamplingOptions, SessionMessage, ToolPermissions

logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT = 180.0


def assistant_output(messages: Sequence[SessionMessage]) -> str:
    """
    Text parts of every assistant message, oldest first, separated by blank lines.

    Agents that use tools often put the payload in an early message and
    finish with a short sign-off, so no assistant message is dropped.

    Raises:
        AgentInvocationError: If the session holds no assistant message
    """
    replies = [m for m in messages if m.role == "assistant"]
    if not replies:
        raise AgentInvocationError("No assistant response found")
    return "\n\n".join(
        part.text for m in replies for part in m.parts if part.type == "text" and part.text
    )


def _call_with_timeout(fn: Callable[[], Any], timeout: float) -> bool:
    """
    Run fn on a daemon thread and wait up to timeout seconds.

    Returns:
        True if fn finished in time; a call still running is abandoned and
        does not keep the interpreter alive

    Raises:
        Whatever fn raised
    """
    errors: list[BaseException] = []

    def target() -> None:
        try:
            fn()
        except BaseException as e:
            errors.append(e)

    worker = threading.Thread(target=target, name="send-prompt", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        return False
    if errors:
        raise errors[0]
    return True


class AgentInvoker:
    """Runs a single prompt against a model and returns its reply text."""

    def __init__(
        self,
        client: AgentClientInterface,
        monitor: CompletionMonitor,
        send_timeout: float = DEFAULT_SEND_TIMEOUT,
    ):
        """
        Args:
            client: Agent-invocation service
            monitor: Completion monitor bound to the same client
            send_timeout: Seconds allowed for the service to accept a prompt
        """
        self._client = client
        self._monitor = monitor
        self._send_timeout = send_timeout

    def invoke(
        self,
        *,
        model: str,
        prompt: str,
        title: str,
        tools: ToolPermissions,
        sampling: SamplingOptions | None = None,
        tool_guard: ToolGuardHook | None = None,
        parent_id: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> str:
        """
        Run one prompt to completion.

        Returns:
            Text of the assistant's messages

        Raises:
            AgentInvocationError: The service failed at any step
            CompletionTimeout: The session never stabilized
            CompletionCancelled: cancel_event was set while waiting
        """
        logger.debug("Invoking %s: %s", model, title)
        session_id = self._create_session(model, parent_id, title)
        self._send(session_id, model, prompt, tools, sampling, tool_guard)
        try:
            self._monitor.await_completion(session_id, cancel_event)
            messages = self._client.get_messages(session_id)
        except DesignLabError:
            raise
        except Exception as e:
            raise AgentInvocationError(
                f"Session {session_id} for {model} failed: {e}", model=model
            ) from e
        return assistant_output(messages)

    def _create_session(self, model: str, parent_id: str | None, title: str) -> str:
        try:
            return self._client.create_session(parent_id, title)
        except DesignLabError:
            raise
        except Exception as e:
            raise AgentInvocationError(
                f"Failed to create session for {model}: {e}", model=model
            ) from e

    def _send(
        self,
        session_id: str,
        model: str,
        prompt: str,
        tools: ToolPermissions,
        sampling: SamplingOptions | None,
        tool_guard: ToolGuardHook | None,
    ) -> None:
        def send() -> None:
            self._client.send_prompt(
                session_id,
                prompt,
                model=model,
                tools=tools,
                sampling=sampling,
                tool_guard=tool_guard,
            )

        try:
            accepted = _call_with_timeout(send, self._send_timeout)
        except DesignLabError:
            raise
        except Exception as e:
            raise AgentInvocationError(f"Failed to send prompt to {model}: {e}", model=model) from e
        if not accepted:
            raise AgentInvocationError(
                f"Prompt to {model} not accepted within {self._send_timeout:.0f}s",
                model=model,
            )
