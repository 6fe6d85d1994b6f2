from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .aggregation import summarize
from .criteria import DEFAULT_CRITERIA, DESCRIPTIONS, Criterion
from .extractors import extract_metrics
from .models import AuditBundle, Principle, UsabilityReport

logger = logging.getLogger(__name__)


def calculate_principles(
    bundle: AuditBundle | Mapping[str, Any] | None,
    url: str,
    criteria: Sequence[Criterion] = DEFAULT_CRITERIA,
    descriptions: Mapping[str, str] = DESCRIPTIONS,
) -> list[Principle]:
    """Score every criterion against one bundle, in criteria-table order.

    Total by construction: extractors default on missing or malformed data,
    so there is no error path here.
    """
    bundle = AuditBundle.from_payload(bundle)
    url = url if isinstance(url, str) else ""
    metrics = extract_metrics(bundle, url)
    return _principles_from_metrics(metrics, criteria, descriptions)


def _principles_from_metrics(
    metrics: Mapping[str, float],
    criteria: Sequence[Criterion],
    descriptions: Mapping[str, str],
) -> list[Principle]:
    principles: list[Principle] = []
    for criterion in criteria:
        score = criterion.score(metrics)
        principles.append(Principle(
            key=criterion.key,
            name=criterion.name,
            score=score,
            description=descriptions.get(criterion.key, ""),
            feedback=criterion.give_feedback(score),
        ))
        logger.debug("criterion %s scored %d", criterion.key, score)
    return principles


def evaluate(
    bundle: AuditBundle | Mapping[str, Any] | None,
    url: str | None = None,
    criteria: Sequence[Criterion] = DEFAULT_CRITERIA,
    descriptions: Mapping[str, str] = DESCRIPTIONS,
) -> UsabilityReport:
    """Principles, summary statistics and the metric snapshot for one bundle."""
    bundle = AuditBundle.from_payload(bundle)
    if not isinstance(url, str) or not url:
        url = bundle.website_url

    metrics = extract_metrics(bundle, url)
    principles = _principles_from_metrics(metrics, criteria, descriptions)

    return UsabilityReport(
        website_url=url,
        analysis_date=bundle.analysis_date,
        principles=principles,
        summary=summarize(principles),
        metrics={name: round(value, 2) for name, value in metrics.items()},
    )
