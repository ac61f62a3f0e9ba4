"""
Consensus ranking of scored candidates.

RankingEngine orders candidates by overall score and attaches the
qualitative summary computed from each candidate's free-text reviews.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from designlab.domain.aggregation import classify_consensus, mean_variance
from designlab.domain.models import (
    QualitativeSummary,
    RankedDesign,
    RankingSummary,
    ReviewFindings,
    ScoredCandidate,
)

COMMON_ITEM_THRESHOLD = 0.5


def _common_items(groups: Sequence[Sequence[str]], review_count: int) -> tuple[str, ...]:
    """Items present in at least half of the reviews, in first-seen order."""
    counts: Counter[str] = Counter()
    order: list[str] = []
    for items in groups:
        for item in dict.fromkeys(items):
            if item not in counts:
                order.append(item)
            counts[item] += 1
    threshold = review_count * COMMON_ITEM_THRESHOLD
    return tuple(item for item in order if counts[item] >= threshold)


def summarize_reviews(reviews: Sequence[ReviewFindings]) -> QualitativeSummary:
    """Count strengths, weaknesses and risk levels across reviews."""
    if not reviews:
        return QualitativeSummary()

    risk_levels: dict[str, int] = {}
    for review in reviews:
        risk_levels[review.risk_assessment] = risk_levels.get(review.risk_assessment, 0) + 1

    return QualitativeSummary(
        total_strengths=sum(len(r.strengths) for r in reviews),
        total_weaknesses=sum(len(r.weaknesses) for r in reviews),
        common_strengths=_common_items([r.strengths for r in reviews], len(reviews)),
        common_weaknesses=_common_items([r.weaknesses for r in reviews], len(reviews)),
        risk_levels=risk_levels,
    )


class RankingEngine:
    """Produces a total ordering of candidates by overall score."""

    def rank(self, candidates: Sequence[ScoredCandidate]) -> list[RankedDesign]:
        """
        Rank candidates by overall score, highest first.

        The sort is stable: candidates with equal scores keep their input
        order. Ranks are 1..N with no gaps or shared ranks.
        """
        ordered = sorted(candidates, key=lambda c: c.overall_score, reverse=True)
        rankings = []
        for position, candidate in enumerate(ordered, start=1):
            variance = mean_variance(candidate.aggregated_scores)
            rankings.append(
                RankedDesign(
                    design_id=candidate.design_id,
                    aggregated_scores=tuple(candidate.aggregated_scores),
                    overall_score=candidate.overall_score,
                    rank=position,
                    generated_by=candidate.generated_by,
                    consensus=classify_consensus(variance),
                    mean_variance=round(variance, 2),
                    qualitative_summary=summarize_reviews(candidate.reviews),
                )
            )
        return rankings

    def summarize(
        self, rankings: Sequence[RankedDesign], reviewer_count: int
    ) -> RankingSummary:
        """Run-level averages over all ranked designs."""
        if rankings:
            average = sum(r.mean_variance for r in rankings) / len(rankings)
        else:
            average = 0.0
        return RankingSummary(
            total_designs=len(rankings),
            total_reviewers=reviewer_count,
            average_variance=round(average, 2),
            consensus=classify_consensus(average),
        )
