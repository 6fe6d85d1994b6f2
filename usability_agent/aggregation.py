"""
Summary statistics over a set of scored principles.

Pure reduction: depends only on the principles, never on raw audit data.
"""
from __future__ import annotations

import statistics
from collections.abc import Iterable, Sequence

from .models import Principle, Rating, RatingDistribution, UsabilitySummary

CRITICAL_BELOW = 40

EXCELLENT_FROM = 80
GOOD_FROM = 60

STRENGTH_FROM = 90
WEAKNESS_BELOW = 70
TOP_N = 3


def rating_for(score: float) -> Rating:
    if score >= EXCELLENT_FROM:
        return "excellent"
    if score >= GOOD_FROM:
        return "good"
    return "needs_improvement"


def sort_by_score(principles: Iterable[Principle], descending: bool = True) -> list[Principle]:
    # sorted() is stable, so ties keep criteria-table order.
    return sorted(principles, key=lambda p: p.score, reverse=descending)


def summarize(principles: Sequence[Principle]) -> UsabilitySummary:
    principles = list(principles)
    scores = [p.score for p in principles]

    if not scores:
        return UsabilitySummary(
            max=0, min=0, median=0.0, std_dev=0.0,
            highlighted=[], critical_issues=[],
            average=0, rating=rating_for(0),
            distribution=RatingDistribution(),
            strengths=[], weaknesses=[], recommendations=[],
        )

    median = float(statistics.median(scores))
    std_dev = float(statistics.pstdev(scores))
    average = int(sum(scores) / len(scores) + 0.5)

    distribution = RatingDistribution(
        excellent=sum(1 for s in scores if s >= EXCELLENT_FROM),
        good=sum(1 for s in scores if GOOD_FROM <= s < EXCELLENT_FROM),
        needs_improvement=sum(1 for s in scores if s < GOOD_FROM),
    )

    strengths = [p.name for p in sort_by_score(principles) if p.score >= STRENGTH_FROM][:TOP_N]
    weaknesses = [
        p.name for p in sort_by_score(principles, descending=False) if p.score < WEAKNESS_BELOW
    ][:TOP_N]
    recommendations = [p.feedback for p in principles if p.score < WEAKNESS_BELOW][:TOP_N]

    return UsabilitySummary(
        max=max(scores),
        min=min(scores),
        median=median,
        std_dev=std_dev,
        highlighted=[p for p in principles if p.score >= median + std_dev],
        critical_issues=[p for p in principles if p.score < CRITICAL_BELOW],
        average=average,
        rating=rating_for(average),
        distribution=distribution,
        strengths=strengths,
        weaknesses=weaknesses,
        recommendations=recommendations,
    )
