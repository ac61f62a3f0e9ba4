"""Shared pytest fixtures for designlab tests."""

import json
import re
from collections.abc import Callable
from typing import Any

import pytest

from designlab.application import DesignLabOrchestrator
from designlab.config import DesignLabConfig
from designlab.domain.models import Score, ScoringCriterion
from designlab.infrastructure.llm.mock import MockAgentClient, MockReply
from designlab.infrastructure.persistence.filesystem import FilesystemRunStore


@pytest.fixture
def criteria() -> list[ScoringCriterion]:
    """Two equally weighted 0-10 criteria."""
    return [
        ScoringCriterion(name="clarity", description="Clear?", min=0, max=10, weight=1.0),
        ScoringCriterion(name="feasibility", description="Feasible?", min=0, max=10, weight=1.0),
    ]


@pytest.fixture
def make_score() -> Callable[..., Score]:
    """Factory for Score values with a default model."""

    def _make(name: str, value: float, model: str = "judge", comment: str | None = None) -> Score:
        return Score(name=name, value=value, model=model, comment=comment)

    return _make


@pytest.fixture
def config_data() -> dict[str, Any]:
    """Minimal valid config: two design models, one judge, no polling delay."""
    return {
        "design_models": ["test/alpha", "test/beta"],
        "review_models": ["test/judge"],
        "review": {
            "quantitative": {
                "criteria": [
                    {"name": "clarity", "description": "Clear?", "min": 0, "max": 10},
                    {"name": "feasibility", "description": "Feasible?", "min": 0, "max": 10},
                ]
            }
        },
        "execution": {"poll_interval": 0, "max_wait_seconds": 5},
    }


@pytest.fixture
def config(config_data: dict[str, Any]) -> DesignLabConfig:
    return DesignLabConfig.model_validate(config_data)


@pytest.fixture
def design_payload() -> Callable[[str], dict[str, Any]]:
    """Factory for a schema-valid design artifact."""

    def _make(design_id: str) -> dict[str, Any]:
        return {
            "id": design_id,
            "title": f"{design_id.title()} Design",
            "summary": f"The {design_id} approach.",
            "assumptions": ["Traffic is read-heavy"],
            "architecture_overview": "Stateless API in front of a key-value store.",
            "architecture": "API service, cache, primary store.",
            "components": [
                {
                    "name": "api",
                    "description": "HTTP front end",
                    "responsibilities": ["Validate requests"],
                }
            ],
            "data_flow": "Client -> API -> store",
            "tradeoffs": [
                {"aspect": "storage", "choice": "key-value", "rationale": "Simple lookups"}
            ],
            "risks": [{"description": "Hot keys", "severity": "medium"}],
            "open_questions": [],
        }

    return _make


@pytest.fixture
def review_payload() -> Callable[..., dict[str, Any]]:
    """Factory for a schema-valid qualitative review."""

    def _make(
        strengths: list[str] | None = None,
        weaknesses: list[str] | None = None,
        risk: str = "low",
    ) -> dict[str, Any]:
        return {
            "design_id": "ignored",
            "reviewer_model": "ignored",
            "strengths": strengths if strengths is not None else ["Simple"],
            "weaknesses": weaknesses if weaknesses is not None else ["No caching"],
            "missing_considerations": [],
            "risk_assessment": risk,
            "overall_impression": "Solid",
            "suggested_improvements": [],
        }

    return _make


_DESIGN_ID = re.compile(r'"id": "([^"]+)"')


@pytest.fixture
def lab_responder(
    design_payload: Callable[[str], dict[str, Any]],
    review_payload: Callable[..., dict[str, Any]],
) -> Callable[..., Callable[[str, str], str | MockReply]]:
    """
    Factory for a responder that plays every agent role.

    Designs echo the model's short name as their id. Scores come from the
    `scores` mapping keyed by design id; reviews are fixed.
    """

    def _make(
        scores: dict[str, dict[str, float]],
        topic: str = "url shortener",
    ) -> Callable[[str, str], str | MockReply]:
        def respond(model: str, prompt: str) -> str | MockReply:
            if prompt.startswith("You name design tasks"):
                return topic
            if prompt.startswith("You are an expert system architect"):
                design_id = model.rsplit("/", 1)[-1]
                return f"Here is my design:\n```json\n{json.dumps(design_payload(design_id))}\n```"
            design_id = _DESIGN_ID.search(prompt).group(1)  # type: ignore[union-attr]
            if prompt.startswith("You are an expert reviewer"):
                return json.dumps(review_payload())
            if prompt.startswith("You are an expert evaluator"):
                entries = [
                    {"name": name, "value": value, "comment": f"{name} for {design_id}"}
                    for name, value in scores[design_id].items()
                ]
                return json.dumps(entries)
            raise AssertionError(f"Unexpected prompt: {prompt[:60]}")

        return respond

    return _make


@pytest.fixture
def run_store(tmp_path) -> FilesystemRunStore:  # noqa: ANN001
    """Run store rooted in a temporary directory."""
    return FilesystemRunStore(tmp_path / "runs")


@pytest.fixture
def make_orchestrator(
    config: DesignLabConfig, run_store: FilesystemRunStore
) -> Callable[..., DesignLabOrchestrator]:
    """Factory wiring an orchestrator to a MockAgentClient."""

    def _make(
        client: MockAgentClient, cfg: DesignLabConfig | None = None, **kwargs: Any
    ) -> DesignLabOrchestrator:
        return DesignLabOrchestrator.from_config(cfg or config, client, run_store, **kwargs)

    return _make
