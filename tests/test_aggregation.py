"""Tests for summary statistics over principles."""
import math

import pytest

from usability_agent.aggregation import rating_for, sort_by_score, summarize
from usability_agent.models import Principle


def principles(scores):
    return [
        Principle(key=f'p{i}', name=f'Principle {i}', score=s, description='', feedback=f'fix {i}')
        for i, s in enumerate(scores)
    ]


REFERENCE = [90, 80, 70, 60, 50, 40, 30, 20, 85, 75]


class TestSummarize:
    def test_reference_statistics(self):
        summary = summarize(principles(REFERENCE))
        assert summary.max == 90
        assert summary.min == 20
        assert summary.median == 65
        assert summary.std_dev == pytest.approx(math.sqrt(525))
        assert summary.average == 60
        assert summary.rating == 'good'

    def test_critical_issues(self):
        summary = summarize(principles(REFERENCE))
        assert [p.score for p in summary.critical_issues] == [30, 20]

    def test_highlighted(self):
        summary = summarize(principles(REFERENCE))
        assert [p.score for p in summary.highlighted] == [90]

    def test_distribution(self):
        distribution = summarize(principles(REFERENCE)).distribution
        assert (distribution.excellent, distribution.good, distribution.needs_improvement) == (3, 3, 4)

    def test_strengths_weaknesses_recommendations(self):
        summary = summarize(principles(REFERENCE))
        assert summary.strengths == ['Principle 0']
        assert summary.weaknesses == ['Principle 7', 'Principle 6', 'Principle 5']
        # Recommendations follow criteria order, not score order.
        assert summary.recommendations == ['fix 3', 'fix 4', 'fix 5']

    def test_empty(self):
        summary = summarize([])
        assert summary.max == 0
        assert summary.min == 0
        assert summary.median == 0
        assert summary.std_dev == 0
        assert summary.highlighted == []
        assert summary.critical_issues == []
        assert summary.rating == 'needs_improvement'

    def test_uniform_scores_all_highlighted(self):
        summary = summarize(principles([70] * 4))
        assert summary.std_dev == 0
        assert len(summary.highlighted) == 4
        assert summary.critical_issues == []

    def test_single_principle(self):
        summary = summarize(principles([35]))
        assert summary.median == 35
        assert summary.std_dev == 0
        assert [p.score for p in summary.highlighted] == [35]
        assert [p.score for p in summary.critical_issues] == [35]

    def test_boundary_is_not_critical(self):
        summary = summarize(principles([40, 39]))
        assert [p.score for p in summary.critical_issues] == [39]

    def test_subsets_preserve_input_order(self):
        summary = summarize(principles([30, 90, 50, 50, 90, 20, 50]))
        assert [p.key for p in summary.critical_issues] == ['p0', 'p5']
        assert [p.key for p in summary.highlighted] == ['p1', 'p4']


class TestHelpers:
    @pytest.mark.parametrize('score,expected', [
        (100, 'excellent'), (80, 'excellent'), (79, 'good'),
        (60, 'good'), (59, 'needs_improvement'), (0, 'needs_improvement'),
    ])
    def test_rating_for(self, score, expected):
        assert rating_for(score) == expected

    def test_sort_is_stable(self):
        ordered = sort_by_score(principles([50, 80, 50, 80]))
        assert [p.key for p in ordered] == ['p1', 'p3', 'p0', 'p2']
