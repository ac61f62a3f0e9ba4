"""Tests for OpenAISessionClient with the completions endpoint stubbed out."""

import threading
from types import SimpleNamespace
from typing import Any

import pytest

from designlab.domain.exceptions import AgentInvocationError, ConfigurationError
from designlab.domain.models import SamplingOptions, SessionStatus, ToolPermissions
from designlab.infrastructure.llm.openai_sessions import (
    OpenAISessionClient,
    OpenAISessionClientConfig,
    provider_model_id,
)


class FakeCompletions:
    """Stands in for client.chat.completions."""

    def __init__(self, reply: str = "done", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.release = threading.Event()
        self.release.set()

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        self.release.wait(5)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake() -> FakeCompletions:
    return FakeCompletions()


@pytest.fixture
def client(monkeypatch, fake) -> OpenAISessionClient:  # noqa: ANN001
    monkeypatch.setenv("DESIGNLAB_TEST_KEY", "sk-test")
    instance = OpenAISessionClient(OpenAISessionClientConfig(api_key_env="DESIGNLAB_TEST_KEY"))
    instance._client = SimpleNamespace(chat=SimpleNamespace(completions=fake))  # type: ignore[assignment]
    return instance


def _wait_idle(client: OpenAISessionClient, sid: str) -> None:
    for _ in range(500):
        if client.get_status(sid) is SessionStatus.IDLE:
            return
        threading.Event().wait(0.01)
    raise AssertionError("session never went idle")


class TestConstruction:
    def test_missing_key_without_base_url(self, monkeypatch) -> None:  # noqa: ANN001
        monkeypatch.delenv("DESIGNLAB_MISSING_KEY", raising=False)

        with pytest.raises(ConfigurationError, match="DESIGNLAB_MISSING_KEY"):
            OpenAISessionClient(api_key_env="DESIGNLAB_MISSING_KEY")

    def test_local_server_needs_no_key(self, monkeypatch) -> None:  # noqa: ANN001
        monkeypatch.delenv("DESIGNLAB_MISSING_KEY", raising=False)

        OpenAISessionClient(base_url="http://localhost:11434/v1", api_key_env="DESIGNLAB_MISSING_KEY")

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(TypeError):
            OpenAISessionClient(temperature=0.1)

    def test_provider_prefix_dropped(self) -> None:
        assert provider_model_id("openai/gpt-4o") == "gpt-4o"
        assert provider_model_id("gpt-4o") == "gpt-4o"
        assert provider_model_id("ollama/qwen2.5:7b") == "qwen2.5:7b"


class TestSessions:
    """Tests for the emulated session lifecycle."""

    def test_reply_appended(self, client, fake) -> None:
        sid = client.create_session(None, "Design")

        client.send_prompt(sid, "Propose a design", model="openai/gpt-4o", tools=ToolPermissions())
        _wait_idle(client, sid)

        messages = client.get_messages(sid)
        assert [m.role for m in messages] == ["user", "assistant"]
        assert messages[-1].parts[0].text == "done"
        assert fake.calls[0]["model"] == "gpt-4o"

    def test_sampling_forwarded(self, client, fake) -> None:
        sid = client.create_session(None, "Score")

        client.send_prompt(
            sid, "Score it", model="m", tools=ToolPermissions(), sampling=SamplingOptions(0.3, 0.8, 2000)
        )
        _wait_idle(client, sid)

        call = fake.calls[0]
        assert (call["temperature"], call["top_p"], call["max_tokens"]) == (0.3, 0.8, 2000)
        assert call["messages"][0]["role"] == "system"
        assert call["messages"][-1] == {"role": "user", "content": "Score it"}

    def test_running_while_completion_in_flight(self, client, fake) -> None:
        fake.release.clear()
        sid = client.create_session(None, "Slow")
        client.send_prompt(sid, "Wait", model="m", tools=ToolPermissions())

        try:
            assert client.get_status(sid) is SessionStatus.RUNNING
            with pytest.raises(AgentInvocationError, match="busy"):
                client.send_prompt(sid, "Again", model="m", tools=ToolPermissions())
        finally:
            fake.release.set()
        _wait_idle(client, sid)

    def test_completion_error_surfaces_on_status(self, client, fake) -> None:
        fake.error = RuntimeError("rate limited")
        sid = client.create_session(None, "Failing")
        client.send_prompt(sid, "Hi", model="openai/gpt-4o", tools=ToolPermissions())

        with pytest.raises(AgentInvocationError, match="rate limited") as exc_info:
            _wait_idle(client, sid)

        assert exc_info.value.model == "openai/gpt-4o"
