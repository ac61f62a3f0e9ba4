"""Tests for Markdown rendering of designs and results."""

import pytest

from designlab.domain.models import (
    AggregatedScore,
    ConsensusLevel,
    ModelOutcome,
    Phase,
    QualitativeSummary,
    RankedDesign,
    RankingSummary,
)
from designlab.schemas.models import DesignArtifact
from designlab.visualization.markdown_exporter import (
    ResultsReportData,
    render_design_markdown,
    render_results_markdown,
)


def _ranked(design_id: str, rank: int, overall: float) -> RankedDesign:
    return RankedDesign(
        design_id=design_id,
        aggregated_scores=(
            AggregatedScore("clarity", overall, 1.0, 0.5, ""),
            AggregatedScore("feasibility", overall, 1.0, 0.5, ""),
        ),
        overall_score=overall,
        rank=rank,
        generated_by=f"test/{design_id}",
        consensus=ConsensusLevel.HIGH,
        mean_variance=0.5,
        qualitative_summary=QualitativeSummary(
            2, 1, ("Simple",), ("No caching",), {"low": 1, "medium": 1}
        ),
    )


@pytest.fixture
def report() -> ResultsReportData:
    return ResultsReportData(
        topic="url-shortener",
        generated_at="2026-01-02T10:00:00",
        rankings=[_ranked("alpha", 1, 8.5), _ranked("beta", 2, 6.5)],
        summary=RankingSummary(2, 1, 0.5, ConsensusLevel.HIGH),
    )


class TestRenderDesignMarkdown:
    def test_sections(self, design_payload) -> None:
        design = DesignArtifact.model_validate(design_payload("alpha"))

        text = render_design_markdown(design, "test/alpha")

        assert text.startswith("# Alpha Design\n")
        assert "**Model**: test/alpha" in text
        for heading in ("## Summary", "## Components", "## Data Flow", "## Tradeoffs", "## Risks"):
            assert heading in text
        assert "### Hot keys (Severity: medium)" in text
        assert "## Additional Notes" not in text

    def test_empty_lists_render_none(self, design_payload) -> None:
        payload = design_payload("alpha")
        payload["open_questions"] = []

        text = render_design_markdown(DesignArtifact.model_validate(payload), "m")

        assert "## Open Questions\n\n- None" in text


class TestRenderResultsMarkdown:
    """Tests for results.md."""

    def test_ranking_table(self, report) -> None:
        text = render_results_markdown(report)

        assert "**Topic**: url-shortener" in text
        assert "| 1 | alpha | test/alpha | 8.50 | 0.50 | high |" in text
        assert "| 2 | beta | test/beta | 6.50 | 0.50 | high |" in text

    def test_score_breakdown(self, report) -> None:
        text = render_results_markdown(report)

        assert "| Design | clarity | feasibility |" in text
        assert "| beta | 6.50 | 6.50 |" in text

    def test_winner_and_findings(self, report) -> None:
        text = render_results_markdown(report)

        assert "### Winner: alpha" in text
        assert "**Risk assessments**: low: 1, medium: 1" in text

    def test_failures_listed(self, report) -> None:
        report.failures = [ModelOutcome(Phase.SCORING, "test/judge", False, "beta", error="timeout")]

        text = render_results_markdown(report)

        assert "- scoring / test/judge (beta): timeout" in text

    def test_no_rankings(self) -> None:
        data = ResultsReportData(
            topic="t",
            generated_at="now",
            rankings=[],
            summary=RankingSummary(0, 0, 0.0, ConsensusLevel.LOW),
        )

        text = render_results_markdown(data)

        assert "## Score Breakdown" not in text
        assert "- Designs ranked: 0" in text
