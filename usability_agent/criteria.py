"""
The ten usability criteria, modelled on Nielsen's heuristics.

Each criterion is a weighted combination of extracted metrics plus a
three-tier feedback table. The table is built once by ``build_criteria`` and
passed by reference to the scoring engine.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from collections.abc import Mapping

from .extractors import METRIC_NAMES, extract_metrics
from .models import AuditBundle


def round_score(value: float) -> int:
    """Round half up (2.5 -> 3) and clamp into [0, 100]."""
    # Rounding to 6 places first keeps float noise like 67.49999999999999 from
    # flipping a .5 boundary.
    rounded = int(math.floor(round(float(value), 6) + 0.5))
    return max(0, min(100, rounded))


@dataclass(frozen=True)
class FeedbackTiers:
    poor: str
    acceptable: str
    good: str
    poor_below: int = 60
    good_from: int = 80

    def select(self, score: float) -> str:
        if score < self.poor_below:
            return self.poor
        if score < self.good_from:
            return self.acceptable
        return self.good


@dataclass(frozen=True)
class Criterion:
    key: str
    name: str
    terms: tuple[tuple[str, float], ...]
    feedback: FeedbackTiers
    weight: float = 1.0

    def __post_init__(self):
        unknown = [metric for metric, _ in self.terms if metric not in METRIC_NAMES]
        if unknown:
            raise ValueError(f"Criterion '{self.key}' uses unknown metrics: {', '.join(unknown)}")
        total = sum(w for _, w in self.terms)
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Criterion '{self.key}' weights sum to {total}, expected 1.0")

    def combine(self, metrics: Mapping[str, float]) -> float:
        return sum(metrics[metric] * w for metric, w in self.terms)

    def evaluate(self, bundle: AuditBundle, url: str) -> float:
        return self.combine(extract_metrics(bundle, url))

    def score(self, metrics: Mapping[str, float]) -> int:
        return round_score(self.combine(metrics))

    def give_feedback(self, score: float) -> str:
        return self.feedback.select(score)


DESCRIPTIONS: Mapping[str, str] = MappingProxyType({
    "system_status": "How clearly the site shows users what is happening",
    "real_world_match": "Use of language and concepts familiar to users",
    "user_control": "Freedom to navigate and to undo mistakes",
    "consistency": "Following consistent standards across the site",
    "error_prevention": "Design that prevents problems before they occur",
    "recognition_over_recall": "Reducing memory load with an easily recognizable interface",
    "flexibility_efficiency": "Shortcuts and accelerators for experienced users",
    "aesthetic_design": "A simple interface free of unnecessary elements",
    "error_diagnosis": "Clear, helpful error messages",
    "help_documentation": "Help and documentation that are easy to reach",
})


def build_criteria() -> tuple[Criterion, ...]:
    criteria = (
        Criterion(
            key="system_status",
            name="Visibility of system status",
            terms=(("overall_performance", 0.6), ("first_contentful_paint", 0.4)),
            feedback=FeedbackTiers(
                poor=(
                    "The site responds slowly and gives little indication of what is happening. "
                    "Improve load speed and add indicators that show users the current state."
                ),
                acceptable=(
                    "System status is reasonably clear, but progress indicators and clearer "
                    "notifications during operations would help."
                ),
                good=(
                    "The site responds quickly and keeps users informed, so they always "
                    "understand what is going on."
                ),
                poor_below=50,
            ),
        ),
        Criterion(
            key="real_world_match",
            name="Match between system and the real world",
            terms=(("accessibility", 0.5), ("best_practices", 0.5)),
            feedback=FeedbackTiers(
                poor=(
                    "The site should use language and concepts that are more familiar to its users. "
                    "Review the terminology and symbols used across the interface."
                ),
                acceptable=(
                    "The site's wording is understandable for most users, with a few places in the "
                    "interface that could be improved."
                ),
                good=(
                    "The site feels familiar, using clear language and concepts that map to the "
                    "real world."
                ),
            ),
        ),
        Criterion(
            key="user_control",
            name="User control and freedom",
            terms=(("accessibility", 0.7), ("best_practices", 0.3)),
            feedback=FeedbackTiers(
                poor=(
                    "User control needs significant work, especially options to undo and cancel actions."
                ),
                acceptable=(
                    "Users have acceptable control, but undo options and clearly marked exits "
                    "could be improved."
                ),
                good=(
                    "Users can navigate freely and clearly undo or cancel what they do."
                ),
            ),
        ),
        Criterion(
            key="consistency",
            name="Consistency and standards",
            terms=(("best_practices", 0.6), ("html_quality", 0.4)),
            feedback=FeedbackTiers(
                poor=(
                    "The site does not follow many modern web standards. Make design and behaviour "
                    "more consistent across pages."
                ),
                acceptable=(
                    "Most pages are consistent, with minor styling differences. Review established "
                    "best practices."
                ),
                good=(
                    "The site follows modern web standards and keeps design and behaviour consistent."
                ),
            ),
        ),
        Criterion(
            key="error_prevention",
            name="Error prevention",
            terms=(("html_quality", 0.4), ("security", 0.3), ("cumulative_layout_shift", 0.3)),
            feedback=FeedbackTiers(
                poor=(
                    "There is a lot of room to prevent errors. Strengthen input validation and ask "
                    "for confirmation before important actions."
                ),
                acceptable=(
                    "The site offers reasonable protection against errors, but input validation and "
                    "guidance could be clearer."
                ),
                good=(
                    "The design prevents errors before they happen, with suitable validation and "
                    "confirmation steps."
                ),
            ),
        ),
        Criterion(
            key="recognition_over_recall",
            name="Recognition rather than recall",
            terms=(("intuitive_ui", 0.6), ("accessibility", 0.4)),
            feedback=FeedbackTiers(
                poor=(
                    "Elements should be clearer to reduce cognitive load; the site relies heavily "
                    "on users remembering things."
                ),
                acceptable=(
                    "The interface is acceptable and could improve by making important elements more "
                    "visible and self-explanatory."
                ),
                good=(
                    "The interface is easy to recognize, with visible elements that remove the need "
                    "to remember steps."
                ),
            ),
        ),
        Criterion(
            key="flexibility_efficiency",
            name="Flexibility and efficiency of use",
            terms=(("overall_performance", 0.5), ("largest_contentful_paint", 0.5)),
            feedback=FeedbackTiers(
                poor=(
                    "Performance and efficiency are weak. Speed up loading and add shortcuts for "
                    "frequent users."
                ),
                acceptable=(
                    "Efficiency is acceptable; more shortcuts and personalization for returning users "
                    "would help."
                ),
                good=(
                    "The site is flexible and efficient, with several fast ways to complete "
                    "repeated tasks."
                ),
            ),
        ),
        Criterion(
            key="aesthetic_design",
            name="Aesthetic and minimalist design",
            terms=(("cumulative_layout_shift", 0.4), ("overall_performance", 0.3), ("html_quality", 0.3)),
            feedback=FeedbackTiers(
                poor=(
                    "The design needs major work on simplicity, reducing clutter and unnecessary elements."
                ),
                acceptable=(
                    "The design is generally appealing, with room to simplify some pages."
                ),
                good=(
                    "The design is clean and minimal, focusing on important content without "
                    "visual excess."
                ),
            ),
        ),
        Criterion(
            key="error_diagnosis",
            name="Help users recognize, diagnose, and recover from errors",
            terms=(("html_quality", 0.3), ("accessibility", 0.3), ("best_practices", 0.4)),
            feedback=FeedbackTiers(
                poor=(
                    "Error messages need to be much clearer and should offer practical solutions."
                ),
                acceptable=(
                    "Error messages are acceptable but could be more specific and suggest direct fixes."
                ),
                good=(
                    "Error messages are clear and useful, helping users understand and fix problems quickly."
                ),
            ),
        ),
        Criterion(
            key="help_documentation",
            name="Help and documentation",
            terms=(("seo", 0.4), ("security", 0.2), ("accessibility", 0.4)),
            feedback=FeedbackTiers(
                poor=(
                    "The site lacks sufficient help content. Add clear, easy-to-find user guides."
                ),
                acceptable=(
                    "Help and documentation are available, and more examples and detail would improve them."
                ),
                good=(
                    "The site offers thorough, easy-to-reach documentation with clear instructions."
                ),
            ),
        ),
    )

    keys = [c.key for c in criteria]
    if len(set(keys)) != len(keys):
        raise ValueError("Criterion keys must be unique")
    return criteria


DEFAULT_CRITERIA: tuple[Criterion, ...] = build_criteria()
