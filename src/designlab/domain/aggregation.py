"""
Score aggregation across reviewers.

Turns the raw per-reviewer Score lists for one candidate into one
AggregatedScore per configured criterion, then into a single overall score
and a consensus label.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from designlab.domain.models import (
    AggregatedScore,
    ConsensusLevel,
    Score,
    ScoringCriterion,
)

logger = logging.getLogger(__name__)

NO_SCORES_COMMENT = "No scores provided"
NO_COMMENTS = "No comments"
UNKNOWN_MODEL = "unknown"

HIGH_CONSENSUS_BELOW = 0.5
MEDIUM_CONSENSUS_BELOW = 1.5


def _round2(value: float) -> float:
    return round(value, 2)


def _comment_line(scores: Sequence[Score]) -> str:
    comments = [
        f"[{s.model or UNKNOWN_MODEL}] {s.comment}" for s in scores if s.comment
    ]
    return "; ".join(comments) if comments else NO_COMMENTS


def aggregate_criterion(
    criterion: ScoringCriterion, scores: Sequence[Score]
) -> AggregatedScore:
    """
    Aggregate every reviewer's score for one criterion.

    The criterion weight is applied uniformly, so the weighted average equals
    the arithmetic mean; variance is the population variance of the raw
    values around it. Both are rounded to two decimals.
    """
    if not scores:
        return AggregatedScore(
            name=criterion.name,
            value=criterion.min,
            weight=criterion.weight,
            variance=0.0,
            comment=NO_SCORES_COMMENT,
        )

    total_weight = criterion.weight * len(scores)
    if total_weight > 0:
        average = sum(s.value * criterion.weight for s in scores) / total_weight
    else:
        average = sum(s.value for s in scores) / len(scores)
    variance = sum((s.value - average) ** 2 for s in scores) / len(scores)

    return AggregatedScore(
        name=criterion.name,
        value=_round2(average),
        weight=criterion.weight,
        variance=_round2(variance),
        comment=_comment_line(scores),
    )


def aggregate(
    criteria: Sequence[ScoringCriterion],
    per_reviewer_scores: Iterable[Sequence[Score]],
) -> list[AggregatedScore]:
    """
    Aggregate scores from all reviewers, one entry per criterion.

    Output order follows the criteria order. Scores whose name matches no
    configured criterion are ignored.

    Args:
        criteria: Configured scoring criteria
        per_reviewer_scores: One Score list per reviewer

    Returns:
        AggregatedScore list, never containing NaN
    """
    by_name: dict[str, list[Score]] = {c.name: [] for c in criteria}
    for reviewer_scores in per_reviewer_scores:
        for score in reviewer_scores:
            bucket = by_name.get(score.name)
            if bucket is None:
                logger.debug("Ignoring score for unknown criterion '%s'", score.name)
                continue
            bucket.append(score)

    return [aggregate_criterion(c, by_name[c.name]) for c in criteria]


def calculate_overall_score(scores: Sequence[AggregatedScore]) -> float:
    """Weighted mean of aggregated values; 0 when total weight is zero."""
    total_weight = sum(s.weight for s in scores)
    if total_weight == 0:
        return 0.0
    return _round2(sum(s.value * s.weight for s in scores) / total_weight)


def mean_variance(scores: Sequence[AggregatedScore]) -> float:
    """Mean of per-criterion variances; 0 for no criteria."""
    if not scores:
        return 0.0
    return sum(s.variance for s in scores) / len(scores)


def classify_consensus(variance: float) -> ConsensusLevel:
    """Map a mean variance onto high/medium/low agreement."""
    if variance < HIGH_CONSENSUS_BELOW:
        return ConsensusLevel.HIGH
    if variance < MEDIUM_CONSENSUS_BELOW:
        return ConsensusLevel.MEDIUM
    return ConsensusLevel.LOW
