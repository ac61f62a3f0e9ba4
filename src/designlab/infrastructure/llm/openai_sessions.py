"""
Agent sessions over an OpenAI-compatible chat completions API.

Each session keeps its own message history. send_prompt starts the
completion on a background thread and returns at once; the session reports
RUNNING until the reply has been appended, which is what CompletionMonitor
waits for. Works with OpenAI, Ollama (``/v1``) and other compatible servers.
"""

import itertools
import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Any, cast

from openai import OpenAI

from designlab.domain.exceptions import AgentInvocationError, ConfigurationError
from designlab.domain.interfaces import AgentClientInterface, ToolGuardHook
from designlab.domain.models import (
    MessagePart,
    SamplingOptions,
    SessionMessage,
    SessionStatus,
    ToolPermissions,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are one of several independent experts taking part in a design lab. "
    "Follow the output format requested in each prompt exactly."
)


@dataclass
class OpenAISessionClientConfig:
    """Configuration for OpenAISessionClient.

    This typed config ensures unknown fields are rejected at construction time.
    """

    base_url: str | None = None
    api_key_env: str = "OPENAI_API_KEY"
    timeout: float = 180.0


@dataclass
class _Session:
    title: str
    parent_id: str | None
    messages: list[SessionMessage] = field(default_factory=list)
    worker: threading.Thread | None = None
    error: Exception | None = None
    model: str | None = None


def provider_model_id(model: str) -> str:
    """Drop the provider prefix: "openai/gpt-4o" -> "gpt-4o"."""
    return model.split("/", 1)[-1]


class OpenAISessionClient(AgentClientInterface):
    """
    Emulates agent sessions with plain chat completions.

    The endpoint offers no tool execution, so agents get no file access and
    a tool_guard hook is never triggered.
    """

    def __init__(self, config: OpenAISessionClientConfig | None = None, **kwargs: Any):
        """
        Args:
            config: Typed configuration object (preferred)
            **kwargs: Fields of OpenAISessionClientConfig
        """
        if config is None:
            config = OpenAISessionClientConfig(**kwargs)

        api_key = os.environ.get(config.api_key_env)
        if not api_key:
            if config.base_url is None:
                raise ConfigurationError(
                    f"Environment variable {config.api_key_env} is not set"
                )
            api_key = "unused"  # local servers ignore the key

        self._client = OpenAI(base_url=config.base_url, api_key=api_key, timeout=config.timeout)
        self._sessions: dict[str, _Session] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create_session(self, parent_id: str | None, title: str) -> str:
        with self._lock:
            session_id = f"session-{next(self._ids)}"
            self._sessions[session_id] = _Session(title=title, parent_id=parent_id)
        logger.debug("Created %s: %s", session_id, title)
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
            if session.worker is not None and session.worker.is_alive():
                raise AgentInvocationError(f"Session {session_id} is busy", model=model)
            session.messages.append(SessionMessage("user", (MessagePart("text", text),)))
            session.model = model
            session.error = None
            session.worker = threading.Thread(
                target=self._complete,
                args=(session, model, sampling or SamplingOptions()),
                name=f"completion-{session_id}",
                daemon=True,
            )
            session.worker.start()

    def _complete(self, session: _Session, model: str, sampling: SamplingOptions) -> None:
        with self._lock:
            history = [
                {"role": m.role, "content": "\n".join(p.text for p in m.parts if p.type == "text")}
                for m in session.messages
            ]
        messages = [{"role": "system", "content": SYSTEM_PROMPT}, *history]
        try:
            response = self._client.chat.completions.create(
                model=provider_model_id(model),
                messages=cast(Any, messages),
                temperature=sampling.temperature,
                top_p=sampling.top_p,
                max_tokens=sampling.max_tokens,
            )
        except Exception as e:
            logger.error("Completion for %s failed: %s", model, e)
            with self._lock:
                session.error = e
            return

        content = response.choices[0].message.content or ""
        with self._lock:
            session.messages.append(
                SessionMessage("assistant", (MessagePart("text", content),))
            )

    def get_status(self, session_id: str) -> SessionStatus:
        with self._lock:
            session = self._sessions[session_id]
            if session.error is not None:
                raise AgentInvocationError(
                    f"Completion failed: {session.error}", model=session.model
                )
            if session.worker is not None and session.worker.is_alive():
                return SessionStatus.RUNNING
            return SessionStatus.IDLE

    def get_messages(self, session_id: str) -> list[SessionMessage]:
        with self._lock:
            return list(self._sessions[session_id].messages)
