"""
RunAggregator: turn collected scores and reviews into a published ranking.

Used at the end of every run and on its own to re-aggregate a persisted run
without invoking any agent.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from pydantic import ValidationError

from designlab.config.schema import DesignLabConfig
from designlab.domain.aggregation import UNKNOWN_MODEL, aggregate, calculate_overall_score
from designlab.domain.interfaces import RunStoreInterface
from designlab.domain.models import (
    ModelOutcome,
    RankedDesign,
    ReviewFindings,
    Score,
    ScoredCandidate,
)
from designlab.domain.ranking import RankingEngine
from designlab.schemas.models import QualitativeReview, ScoreEntry
from designlab.visualization.markdown_exporter import (
    ResultsReportData,
    now_iso,
    render_results_markdown,
)

logger = logging.getLogger(__name__)


class RunAggregator:
    """Aggregates, ranks and persists results for one run directory."""

    def __init__(
        self,
        config: DesignLabConfig,
        store: RunStoreInterface,
        ranking_engine: RankingEngine | None = None,
    ):
        self._config = config
        self._store = store
        self._ranking = ranking_engine or RankingEngine()
        self._criteria = config.criteria

    def score_candidate(
        self,
        candidate_id: str,
        model: str,
        score_lists: Iterable[Sequence[Score]],
        findings: Iterable[ReviewFindings],
    ) -> ScoredCandidate:
        aggregated = aggregate(self._criteria, score_lists)
        return ScoredCandidate(
            design_id=candidate_id,
            generated_by=model,
            aggregated_scores=tuple(aggregated),
            overall_score=calculate_overall_score(aggregated),
            reviews=tuple(findings),
        )

    def publish(
        self,
        run_dir: str,
        topic: str,
        scored: Sequence[ScoredCandidate],
        outcomes: Sequence[ModelOutcome] = (),
    ) -> list[RankedDesign]:
        """Rank candidates, then write results/ranking.json and results/results.md."""
        rankings = self._ranking.rank(scored)
        reviewers = set(self._config.qualitative_models) | set(self._config.scoring_models)
        summary = self._ranking.summarize(rankings, reviewer_count=len(reviewers))

        self._store.write_ranking(run_dir, rankings)
        report = ResultsReportData(
            topic=topic,
            generated_at=now_iso(),
            rankings=rankings,
            summary=summary,
            failures=[o for o in outcomes if not o.success],
        )
        self._store.write_report(run_dir, render_results_markdown(report))
        logger.info("Published ranking of %d designs to %s", len(rankings), run_dir)
        return rankings

    def aggregate_run(self, run_dir: str) -> list[RankedDesign]:
        """
        Re-aggregate a persisted run from its designs, reviews and scores.

        Invalid review or score files are skipped with a warning so one
        corrupt file does not block the rest of the run.
        """
        stored = self._store.load_run(run_dir)
        generated_by: dict[str, str] = stored.task.get("candidates", {})
        scored = []
        for candidate_id in stored.designs:
            findings = []
            for raw in stored.reviews.get(candidate_id, []):
                try:
                    findings.append(QualitativeReview.model_validate(raw).to_findings())
                except ValidationError as e:
                    logger.warning("Skipping invalid review for %s: %s", candidate_id, e)
            score_lists = []
            for raw_list in stored.scores.get(candidate_id, []):
                try:
                    entries = [ScoreEntry.model_validate(s) for s in raw_list]
                except ValidationError as e:
                    logger.warning("Skipping invalid score file for %s: %s", candidate_id, e)
                    continue
                score_lists.append([e.to_score() for e in entries])
            scored.append(
                self.score_candidate(
                    candidate_id,
                    generated_by.get(candidate_id, UNKNOWN_MODEL),
                    score_lists,
                    findings,
                )
            )
        return self.publish(run_dir, stored.task.get("topic", ""), scored)
