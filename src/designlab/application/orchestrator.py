"""
DesignLabOrchestrator: generate, review, score, aggregate, rank, persist.

A failure for one model in any phase is logged and recorded as a
ModelOutcome; the other models carry on and the run finishes with partial
results. Two conditions stop a run outright: an existing run directory
(DuplicateRunError, before any design model is invoked) and cancellation
(CompletionCancelled, re-raised as soon as it is observed).
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from designlab.application.aggregator import RunAggregator
from designlab.application.monitor import CompletionMonitor
from designlab.application.session import AgentInvoker
from designlab.config.schema import DesignLabConfig
from designlab.domain.exceptions import CompletionCancelled, DesignLabError
from designlab.domain.extraction import extract_json
from designlab.domain.interfaces import AgentClientInterface, RunStoreInterface
from designlab.domain.models import (
    IsolationScope,
    ModelOutcome,
    OperationKind,
    Phase,
    RankedDesign,
    ReviewFindings,
    RunSummary,
    Score,
    ToolCall,
)
from designlab.domain.naming import sanitize_for_filename, unique_model_keys
from designlab.domain.prompts import (
    AgentProfile,
    design_profile,
    review_profile,
    scoring_profile,
    topic_profile,
)
from designlab.domain.ranking import RankingEngine
from designlab.guards import (
    CompositeGuard,
    IsolationGuard,
    SchemaGuard,
    ScoreBoundsGuard,
    ensure_valid,
)
from designlab.schemas.models import DesignArtifact, QualitativeReview, ScoreEntry
from designlab.visualization.markdown_exporter import now_iso, render_design_markdown

logger = logging.getLogger(__name__)

NOT_SPECIFIED = "None specified"
TOPIC_REQUIREMENTS_CHARS = 500
FALLBACK_TOPIC = "design"


@dataclass(frozen=True)
class DesignTask:
    """What the designs should address."""

    requirements: str
    constraints: str = ""
    non_functional_requirements: str = ""

    def prompt_variables(self) -> dict[str, str]:
        return {
            "requirements": self.requirements,
            "constraints": self.constraints or NOT_SPECIFIED,
            "non_functional_requirements": self.non_functional_requirements or NOT_SPECIFIED,
        }


@dataclass(frozen=True)
class Candidate:
    """A design that was generated and persisted."""

    candidate_id: str
    model: str
    design: DesignArtifact


@dataclass
class _Collected:
    """Per-candidate review findings and score lists, in model order."""

    reviews: dict[str, list[ReviewFindings]] = field(default_factory=dict)
    scores: dict[str, list[list[Score]]] = field(default_factory=dict)


class DesignLabOrchestrator:
    """
    Runs the full design lab pipeline for one task.

    Holds no per-run state: every run gets its own run directory, isolation
    scopes and collected results, so one orchestrator may serve many runs.
    """

    def __init__(
        self,
        config: DesignLabConfig,
        invoker: AgentInvoker,
        store: RunStoreInterface,
        isolation_guard: IsolationGuard | None = None,
        ranking_engine: RankingEngine | None = None,
        today: Callable[[], date] = date.today,
    ):
        """
        Args:
            config: Validated configuration
            invoker: Runs one prompt to completion
            store: Persists run artifacts
            isolation_guard: Defaults to one built from hooks.design_isolation
            ranking_engine: Defaults to RankingEngine()
            today: Date source for run directory names
        """
        self._config = config
        self._invoker = invoker
        self._store = store
        self._guard = isolation_guard or IsolationGuard(
            enabled=config.hooks.design_isolation.enabled
        )
        self._aggregator = RunAggregator(config, store, ranking_engine)
        self._today = today

        self._criteria = config.criteria
        self._design_guard = SchemaGuard(DesignArtifact)
        self._review_guard = SchemaGuard(QualitativeReview)
        self._score_guard = CompositeGuard(
            SchemaGuard(list[ScoreEntry], name="Scores"),
            ScoreBoundsGuard(self._criteria),
        )

    @classmethod
    def from_config(
        cls,
        config: DesignLabConfig,
        client: AgentClientInterface,
        store: RunStoreInterface,
        **kwargs: Any,
    ) -> DesignLabOrchestrator:
        """Build the monitor and invoker from config.execution."""
        execution = config.execution
        monitor = CompletionMonitor(
            client,
            poll_interval=execution.poll_interval,
            stability_threshold=execution.stability_threshold,
            max_wait=execution.max_wait_seconds,
        )
        invoker = AgentInvoker(client, monitor, send_timeout=execution.send_timeout_seconds)
        return cls(config, invoker, store, **kwargs)

    # =========================================================================
    # RUN
    # =========================================================================

    def run(
        self,
        task: DesignTask,
        topic: str | None = None,
        parent_session_id: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> RunSummary:
        """
        Execute generate -> review -> score -> aggregate -> rank -> persist.

        Args:
            task: Requirements handed to every agent
            topic: Run topic; generated by the topic model when omitted
            parent_session_id: Session to nest agent sessions under
            cancel_event: Set to abandon the run between polls

        Returns:
            RunSummary with rankings and every model outcome

        Raises:
            DuplicateRunError: The run directory already exists
            CompletionCancelled: cancel_event was set
        """
        outcomes: list[ModelOutcome] = []
        topic_slug = self._resolve_topic(task, topic, parent_session_id, cancel_event, outcomes)

        run_dir = self._store.create_run(f"{self._today().isoformat()}-{topic_slug}")
        logger.info("Created run directory %s", run_dir)

        task_record: dict[str, Any] = {
            "requirements": task.requirements,
            "constraints": task.constraints,
            "non_functional_requirements": task.non_functional_requirements,
            "topic": topic_slug,
            "created": now_iso(),
            "design_models": list(self._config.design_models),
            "review_models": self._config.qualitative_models,
            "scoring_models": self._config.scoring_models,
        }
        self._store.write_task(run_dir, task_record)

        candidates = self._generate(run_dir, task, parent_session_id, cancel_event, outcomes)
        task_record["candidates"] = {c.candidate_id: c.model for c in candidates}
        self._store.write_task(run_dir, task_record)

        collected = _Collected(
            reviews={c.candidate_id: [] for c in candidates},
            scores={c.candidate_id: [] for c in candidates},
        )
        self._review(run_dir, task, candidates, parent_session_id, cancel_event, outcomes, collected)
        self._score(run_dir, task, candidates, parent_session_id, cancel_event, outcomes, collected)

        scored = [
            self._aggregator.score_candidate(
                c.candidate_id,
                c.model,
                collected.scores[c.candidate_id],
                collected.reviews[c.candidate_id],
            )
            for c in candidates
        ]
        rankings = self._aggregator.publish(run_dir, topic_slug, scored, outcomes)

        summary = RunSummary(
            run_dir=run_dir,
            topic=topic_slug,
            rankings=tuple(rankings),
            outcomes=tuple(outcomes),
        )
        logger.info(
            "Run %s complete: %d designs ranked, %d failures",
            run_dir,
            len(rankings),
            summary.failure_count,
        )
        return summary

    def aggregate_run(self, run_dir: str) -> list[RankedDesign]:
        """Re-aggregate a persisted run; see RunAggregator.aggregate_run."""
        return self._aggregator.aggregate_run(run_dir)

    # =========================================================================
    # PHASES
    # =========================================================================

    def _resolve_topic(
        self,
        task: DesignTask,
        topic: str | None,
        parent_id: str | None,
        cancel_event: threading.Event | None,
        outcomes: list[ModelOutcome],
    ) -> str:
        if topic:
            slug = sanitize_for_filename(topic)
        else:
            model = self._config.topic_model
            profile = topic_profile()
            try:
                text = self._invoke(
                    profile,
                    model,
                    "Topic Generation",
                    {"requirements": task.requirements[:TOPIC_REQUIREMENTS_CHARS]},
                    parent_id,
                    cancel_event,
                )
                lines = text.strip().splitlines()
                slug = sanitize_for_filename(lines[0]) if lines else ""
                outcomes.append(ModelOutcome(Phase.TOPIC, model, success=True))
            except CompletionCancelled:
                raise
            except DesignLabError as e:
                outcomes.append(self._failure(Phase.TOPIC, model, None, e))
                slug = ""
        return slug or sanitize_for_filename(task.requirements) or FALLBACK_TOPIC

    def _generate(
        self,
        run_dir: str,
        task: DesignTask,
        parent_id: str | None,
        cancel_event: threading.Event | None,
        outcomes: list[ModelOutcome],
    ) -> list[Candidate]:
        settings = self._config.design
        profile = design_profile(
            settings.agent_prompt, settings.temperature, settings.top_p, settings.max_tokens
        )
        keys = unique_model_keys(self._config.design_models)
        designs_root = self._store.designs_root(run_dir)

        def generate_one(model: str) -> tuple[ModelOutcome, Candidate | None]:
            candidate_id = keys[model]
            scope = IsolationScope(root_path=designs_root, owner_id=candidate_id)
            logger.info("Starting design generation for %s as %s", model, candidate_id)
            try:
                text = self._invoke(
                    profile,
                    model,
                    f"Design Generation - {model}",
                    task.prompt_variables(),
                    parent_id,
                    cancel_event,
                    tool_guard=self._guard.hook(scope),
                )
                payload = extract_json(text)
                if isinstance(payload, dict):
                    payload = {**payload, "id": candidate_id}
                design: DesignArtifact = ensure_valid(self._design_guard, payload)

                target = self._store.design_path(run_dir, candidate_id)
                self._guard.enforce(ToolCall(OperationKind.WRITE, target), scope)
                path = self._store.write_design(
                    run_dir,
                    candidate_id,
                    design.model_dump(mode="json", exclude_none=True),
                    render_design_markdown(design, model),
                )
            except CompletionCancelled:
                raise
            except (DesignLabError, OSError) as e:
                return self._failure(Phase.GENERATION, model, candidate_id, e), None

            logger.info("Design from %s saved to %s", model, path)
            outcome = ModelOutcome(
                Phase.GENERATION, model, success=True, candidate_id=candidate_id, output_path=path
            )
            return outcome, Candidate(candidate_id, model, design)

        candidates = []
        for outcome, candidate in self._map(generate_one, self._config.design_models):
            outcomes.append(outcome)
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def _review(
        self,
        run_dir: str,
        task: DesignTask,
        candidates: Sequence[Candidate],
        parent_id: str | None,
        cancel_event: threading.Event | None,
        outcomes: list[ModelOutcome],
        collected: _Collected,
    ) -> None:
        models = self._config.qualitative_models
        if not models or not candidates:
            return
        profile = review_profile()
        keys = unique_model_keys(models)

        def review_one(job: tuple[Candidate, str]) -> tuple[ModelOutcome, ReviewFindings | None]:
            candidate, model = job
            try:
                text = self._invoke(
                    profile,
                    model,
                    f"Review - {candidate.candidate_id} - {model}",
                    self._design_variables(task, candidate),
                    parent_id,
                    cancel_event,
                )
                payload = extract_json(text)
                if isinstance(payload, dict):
                    payload = {
                        **payload,
                        "design_id": candidate.candidate_id,
                        "reviewer_model": model,
                    }
                review: QualitativeReview = ensure_valid(self._review_guard, payload)
                path = self._store.write_review(
                    run_dir,
                    candidate.candidate_id,
                    keys[model],
                    review.model_dump(mode="json"),
                )
            except CompletionCancelled:
                raise
            except (DesignLabError, OSError) as e:
                return self._failure(Phase.REVIEW, model, candidate.candidate_id, e), None

            outcome = ModelOutcome(
                Phase.REVIEW,
                model,
                success=True,
                candidate_id=candidate.candidate_id,
                output_path=path,
            )
            return outcome, review.to_findings()

        jobs = [(c, m) for c in candidates for m in models]
        for (candidate, _), (outcome, findings) in zip(jobs, self._map(review_one, jobs), strict=True):
            outcomes.append(outcome)
            if findings is not None:
                collected.reviews[candidate.candidate_id].append(findings)

    def _score(
        self,
        run_dir: str,
        task: DesignTask,
        candidates: Sequence[Candidate],
        parent_id: str | None,
        cancel_event: threading.Event | None,
        outcomes: list[ModelOutcome],
        collected: _Collected,
    ) -> None:
        models = self._config.scoring_models
        if not models or not candidates:
            return
        profile = scoring_profile(self._criteria)
        keys = unique_model_keys(models)

        def score_one(job: tuple[Candidate, str]) -> tuple[ModelOutcome, list[Score] | None]:
            candidate, model = job
            try:
                text = self._invoke(
                    profile,
                    model,
                    f"Scoring - {candidate.candidate_id} - {model}",
                    self._design_variables(task, candidate),
                    parent_id,
                    cancel_event,
                )
                payload = extract_json(text)
                if isinstance(payload, dict) and "scores" in payload:
                    payload = payload["scores"]
                entries: list[ScoreEntry] = ensure_valid(self._score_guard, payload)
                attributed = [e.model_copy(update={"model": model}) for e in entries]
                path = self._store.write_scores(
                    run_dir,
                    candidate.candidate_id,
                    keys[model],
                    [e.model_dump(mode="json", exclude_none=True) for e in attributed],
                )
            except CompletionCancelled:
                raise
            except (DesignLabError, OSError) as e:
                return self._failure(Phase.SCORING, model, candidate.candidate_id, e), None

            outcome = ModelOutcome(
                Phase.SCORING,
                model,
                success=True,
                candidate_id=candidate.candidate_id,
                output_path=path,
            )
            return outcome, [e.to_score() for e in attributed]

        jobs = [(c, m) for c in candidates for m in models]
        for (candidate, _), (outcome, scores) in zip(jobs, self._map(score_one, jobs), strict=True):
            outcomes.append(outcome)
            if scores is not None:
                collected.scores[candidate.candidate_id].append(scores)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _invoke(
        self,
        profile: AgentProfile,
        model: str,
        title: str,
        variables: dict[str, str],
        parent_id: str | None,
        cancel_event: threading.Event | None,
        tool_guard: Callable[[ToolCall], None] | None = None,
    ) -> str:
        return self._invoker.invoke(
            model=model,
            prompt=profile.template.render(**variables),
            title=title,
            tools=profile.tools,
            sampling=profile.sampling,
            tool_guard=tool_guard,
            parent_id=parent_id,
            cancel_event=cancel_event,
        )

    def _design_variables(self, task: DesignTask, candidate: Candidate) -> dict[str, str]:
        design_json = json.dumps(candidate.design.model_dump(mode="json", exclude_none=True), indent=2)
        return {**task.prompt_variables(), "design_json": design_json}

    def _map[T, R](self, fn: Callable[[T], R], items: Sequence[T]) -> list[R]:
        """Apply fn to items, results in input order regardless of completion order."""
        workers = min(self._config.execution.max_parallel, len(items))
        if workers <= 1:
            return [fn(item) for item in items]
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="design-lab") as pool:
            return list(pool.map(fn, items))

    def _failure(
        self, phase: Phase, model: str, candidate_id: str | None, error: Exception
    ) -> ModelOutcome:
        logger.error(
            "%s failed for model %s%s: %s",
            phase.value,
            model,
            f" ({candidate_id})" if candidate_id else "",
            error,
        )
        return ModelOutcome(
            phase, model, success=False, candidate_id=candidate_id, error=str(error)
        )
