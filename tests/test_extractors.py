"""Tests for the metric extractors."""
import math

import pytest

from usability_agent.extractors import (
    METRIC_NAMES,
    accessibility,
    best_practices,
    cumulative_layout_shift,
    extract_metrics,
    first_contentful_paint,
    html_quality,
    intuitive_ui,
    largest_contentful_paint,
    overall_performance,
    security,
    seo,
)
from usability_agent.models import AuditBundle


def bundle(payload):
    return AuditBundle.from_payload(payload)


class TestFirstContentfulPaint:
    @pytest.mark.parametrize('numeric_value,expected', [
        (0, 100), (1000, 100), (1500, 80), (2000, 80),
        (2500, 60), (3500, 40), (4000, 40), (5000, 20),
    ])
    def test_buckets(self, make_perf_bundle, numeric_value, expected):
        b = bundle(make_perf_bundle(audits={
            'first-contentful-paint': {'score': 0.1, 'numericValue': numeric_value},
        }))
        assert first_contentful_paint(b) == expected

    def test_score_used_without_numeric_value(self, make_perf_bundle):
        b = bundle(make_perf_bundle(audits={'first-contentful-paint': {'score': 0.42}}))
        assert first_contentful_paint(b) == pytest.approx(42)

    def test_missing_audit(self, empty_bundle):
        assert first_contentful_paint(bundle(empty_bundle)) == 0

    def test_audit_without_values(self, make_perf_bundle):
        b = bundle(make_perf_bundle(audits={'first-contentful-paint': {}}))
        assert first_contentful_paint(b) == 0


class TestPaintAndShift:
    def test_defaults(self, empty_bundle):
        b = bundle(empty_bundle)
        assert largest_contentful_paint(b) == pytest.approx(70)
        assert cumulative_layout_shift(b) == 75

    def test_present_scores(self, make_perf_bundle):
        b = bundle(make_perf_bundle(audits={
            'largest-contentful-paint': {'score': 0.55},
            'cumulative-layout-shift': {'score': 0.0},
        }))
        assert largest_contentful_paint(b) == pytest.approx(55)
        # A real zero is a measurement, not a missing value.
        assert cumulative_layout_shift(b) == 0


class TestOverallPerformance:
    def test_no_performance_category(self, empty_bundle, make_perf_bundle):
        assert overall_performance(bundle(empty_bundle)) == 0
        only_audits = make_perf_bundle(audits={'speed-index': {'score': 0.9}})
        assert overall_performance(bundle(only_audits)) == 0

    def test_category_only(self, make_perf_bundle):
        assert overall_performance(bundle(make_perf_bundle(performance=0.3))) == pytest.approx(30)
        assert overall_performance(bundle(make_perf_bundle(performance=0.8))) == pytest.approx(80)

    def test_weighted_audits(self, full_bundle):
        assert overall_performance(bundle(full_bundle)) == pytest.approx(92)

    def test_renormalized_over_present_audits(self, make_perf_bundle):
        b = bundle(make_perf_bundle(performance=0.1, audits={
            'first-contentful-paint': {'score': 1.0},
            'largest-contentful-paint': {'score': 0.5},
        }))
        assert overall_performance(b) == pytest.approx(75)


class TestAccessibility:
    def test_missing_category(self, empty_bundle):
        assert accessibility(bundle(empty_bundle)) == 0

    def test_penalty_per_failing_audit(self, make_perf_bundle):
        b = bundle(make_perf_bundle(accessibility=0.9, audits={
            'aria-roles': {'score': 0},
            'color-contrast': {'score': 0},
            'aria-required-attr': {'score': 1},
        }))
        assert accessibility(b) == pytest.approx(60)

    def test_absent_audit_is_not_failing(self, make_perf_bundle):
        b = bundle(make_perf_bundle(accessibility=0.9, audits={'aria-roles': {}}))
        assert accessibility(b) == pytest.approx(90)

    def test_clamped_at_zero(self, make_perf_bundle):
        b = bundle(make_perf_bundle(accessibility=0.2, audits={
            'aria-roles': {'score': 0},
            'color-contrast': {'score': 0},
            'aria-required-attr': {'score': 0},
        }))
        assert accessibility(b) == 0


class TestCategoryDefaults:
    def test_defaults(self, empty_bundle):
        b = bundle(empty_bundle)
        assert best_practices(b) == 70
        assert seo(b) == 65

    def test_present(self, make_perf_bundle):
        b = bundle(make_perf_bundle(best_practices=0.5, seo=1.0))
        assert best_practices(b) == pytest.approx(50)
        assert seo(b) == pytest.approx(100)


class TestHtmlQuality:
    def test_default(self, empty_bundle):
        assert html_quality(bundle(empty_bundle)) == 75

    def test_penalties(self, html_bundle):
        assert html_quality(bundle(html_bundle)) == 81

    def test_empty_message_list(self):
        assert html_quality(bundle({'htmlValidationData': {'messages': []}})) == 100

    def test_floor(self):
        messages = [{'type': 'error', 'message': str(i)} for i in range(30)]
        assert html_quality(bundle({'htmlValidationData': {'messages': messages}})) == 0


class TestSecurity:
    def _posture(self, tls_valid=True, score=90):
        page = {'url': 'https://example.com/'}
        if tls_valid is not None:
            page['tlsValid'] = tls_valid
        stats = {} if score is None else {'securityScore': score}
        return {'securityData': {'results': [{'page': page, 'stats': stats}]}}

    def test_without_results(self, empty_bundle):
        b = bundle(empty_bundle)
        assert security(b, 'https://example.com') == 85
        assert security(b, 'http://example.com') == 50

    def test_empty_results(self):
        b = bundle({'securityData': {'results': []}})
        assert security(b, 'https://example.com') == 85

    def test_plain_http_with_results(self):
        assert security(bundle(self._posture()), 'http://example.com') == 50

    def test_invalid_tls(self):
        assert security(bundle(self._posture(tls_valid=False)), 'https://example.com') == 60
        assert security(bundle(self._posture(tls_valid=None)), 'https://example.com') == 60

    def test_reported_score(self):
        assert security(bundle(self._posture(score=72)), 'https://example.com') == 72
        assert security(bundle(self._posture(score=140)), 'https://example.com') == 100

    def test_missing_score(self):
        assert security(bundle(self._posture(score=None)), 'https://example.com') == 85

    def test_scheme_match_is_case_insensitive(self, empty_bundle):
        assert security(bundle(empty_bundle), 'HTTPS://Example.com') == 85


class TestIntuitiveUI:
    def test_defaults(self, empty_bundle):
        # fcp 0, cls 75, fid 75
        assert intuitive_ui(bundle(empty_bundle)) == pytest.approx(52.5)

    def test_full(self, full_bundle):
        assert intuitive_ui(bundle(full_bundle)) == pytest.approx(91)


class TestExtractMetrics:
    def test_all_metrics_bounded(self, empty_bundle, full_bundle, html_bundle):
        for payload in (empty_bundle, full_bundle, html_bundle):
            metrics = extract_metrics(bundle(payload), 'https://example.com')
            assert tuple(metrics) == METRIC_NAMES
            for value in metrics.values():
                assert math.isfinite(value)
                assert 0 <= value <= 100

    def test_malformed_values_are_absent(self):
        b = bundle({'pageSpeedData': {
            'categories': {'performance': {'score': 'fast'}, 'seo': None},
            'audits': {'first-contentful-paint': {'score': float('nan'), 'numericValue': 'x'}},
        }})
        metrics = extract_metrics(b, 'https://example.com')
        assert metrics['overall_performance'] == 0
        assert metrics['seo'] == 65
        assert metrics['first_contentful_paint'] == 0
