"""
Markdown rendering for designs and run results.

Produces the human-readable companions of the JSON artifacts:
designs/<id>.md and results/results.md.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from designlab.domain.models import ModelOutcome, RankedDesign, RankingSummary
    from designlab.schemas.models import DesignArtifact


@dataclass
class ResultsReportData:
    """Everything results.md shows."""

    topic: str
    generated_at: str
    rankings: Sequence[RankedDesign]
    summary: RankingSummary
    failures: Sequence[ModelOutcome] = ()


def _bullets(items: Sequence[str]) -> list[str]:
    return [f"- {item}" for item in items] or ["- None"]


def render_design_markdown(design: DesignArtifact, model: str) -> str:
    """Render one design proposal as a Markdown document."""
    lines = [
        f"# {design.title}",
        "",
        f"**Design ID**: {design.id}",
        f"**Model**: {model}",
        "",
        "## Summary",
        "",
        design.summary,
        "",
        "## Assumptions",
        "",
        *_bullets(design.assumptions),
        "",
        "## Architecture Overview",
        "",
        design.architecture_overview,
        "",
        "## Architecture",
        "",
        design.architecture,
        "",
        "## Components",
        "",
    ]
    for component in design.components:
        lines += [f"### {component.name}", "", component.description, "", "**Responsibilities**:"]
        lines += _bullets(component.responsibilities)
        if component.interfaces:
            lines += ["", "**Interfaces**:", *_bullets(component.interfaces)]
        lines.append("")

    lines += ["## Data Flow", "", design.data_flow, "", "## Tradeoffs", ""]
    for tradeoff in design.tradeoffs:
        lines += [
            f"### {tradeoff.aspect}",
            "",
            f"**Choice**: {tradeoff.choice}",
            "",
            f"**Rationale**: {tradeoff.rationale}",
            "",
        ]
        if tradeoff.alternatives:
            lines += [f"**Alternatives**: {', '.join(tradeoff.alternatives)}", ""]

    lines += ["## Risks", ""]
    for risk in design.risks:
        lines += [f"### {risk.description} (Severity: {risk.severity})", ""]
        if risk.mitigation:
            lines += [f"**Mitigation**: {risk.mitigation}", ""]

    lines += ["## Open Questions", "", *_bullets(design.open_questions), ""]
    if design.additional_notes:
        lines += ["## Additional Notes", "", design.additional_notes, ""]
    return "\n".join(lines)


def render_results_markdown(data: ResultsReportData) -> str:
    """Render the ranking table, per-criterion breakdown and findings."""
    lines = [
        "# Design Lab Results",
        "",
        f"**Topic**: {data.topic}",
        f"Generated: {data.generated_at}",
        "",
        "## Summary",
        "",
        f"- Designs ranked: {data.summary.total_designs}",
        f"- Reviewers: {data.summary.total_reviewers}",
        f"- Average variance: {data.summary.average_variance:.2f}",
        f"- Consensus: {data.summary.consensus.value}",
        "",
        "## Ranking",
        "",
        "| Rank | Design | Model | Overall | Variance | Consensus |",
        "|------|--------|-------|---------|----------|-----------|",
    ]
    for r in data.rankings:
        lines.append(
            f"| {r.rank} | {r.design_id} | {r.generated_by} | {r.overall_score:.2f} "
            f"| {r.mean_variance:.2f} | {r.consensus.value} |"
        )

    if data.rankings:
        criteria = [s.name for s in data.rankings[0].aggregated_scores]
        lines += [
            "",
            "## Score Breakdown",
            "",
            "| Design | " + " | ".join(criteria) + " |",
            "|--------|" + "---|" * len(criteria),
        ]
        for r in data.rankings:
            values = {s.name: s.value for s in r.aggregated_scores}
            cells = " | ".join(
                f"{values[c]:.2f}" if c in values else "N/A" for c in criteria
            )
            lines.append(f"| {r.design_id} | {cells} |")

        winner = data.rankings[0]
        lines += [
            "",
            "## Key Observations",
            "",
            f"### Winner: {winner.design_id}",
            "",
            f"- **Overall Score**: {winner.overall_score:.2f}",
            f"- **Mean Variance**: {winner.mean_variance:.2f} ({winner.consensus.value} consensus)",
            "",
        ]
        for r in data.rankings[:3]:
            summary = r.qualitative_summary
            lines += [
                f"#### {r.rank}. {r.design_id}",
                "",
                "**Common strengths**:",
                *_bullets(summary.common_strengths),
                "",
                "**Common weaknesses**:",
                *_bullets(summary.common_weaknesses),
                "",
            ]
            if summary.risk_levels:
                risks = ", ".join(f"{k}: {v}" for k, v in sorted(summary.risk_levels.items()))
                lines += [f"**Risk assessments**: {risks}", ""]

    if data.failures:
        lines += ["## Failures", ""]
        for failure in data.failures:
            target = f" ({failure.candidate_id})" if failure.candidate_id else ""
            lines.append(f"- {failure.phase.value} / {failure.model}{target}: {failure.error}")
        lines.append("")

    return "\n".join(lines)


def now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")
