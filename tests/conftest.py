"""
Shared audit bundle fixtures for scoring engine tests.
"""
import pytest


@pytest.fixture
def empty_bundle():
    """A bundle with no upstream data at all."""
    return {}


@pytest.fixture
def full_bundle():
    """A well-performing HTTPS site with every provider present."""
    return {
        'websiteUrl': 'https://example.com/',
        'analysisDate': '2024-05-01T12:00:00+00:00',
        'pageSpeedData': {
            'lighthouseResult': {
                'categories': {
                    'performance': {'score': 0.9},
                    'accessibility': {'score': 0.95},
                    'best-practices': {'score': 0.92},
                    'seo': {'score': 0.88},
                },
                'audits': {
                    'first-contentful-paint': {'score': 0.95, 'numericValue': 900},
                    'largest-contentful-paint': {'score': 0.9, 'numericValue': 1800},
                    'cumulative-layout-shift': {'score': 1.0, 'numericValue': 0.01},
                    'speed-index': {'score': 0.85},
                    'total-blocking-time': {'score': 0.8},
                    'max-potential-fid': {'score': 0.7},
                    'aria-roles': {'score': 1},
                    'color-contrast': {'score': 1},
                },
            },
        },
        'htmlValidationData': {
            'messages': [
                {'type': 'error', 'message': 'Stray end tag "div".'},
                {'type': 'warning', 'message': 'Section lacks heading.'},
                {'type': 'info', 'message': 'Trailing slash on void elements has no effect.'},
            ],
        },
        'securityData': {
            'results': [{
                'task': {'domain': 'example.com'},
                'page': {'url': 'https://example.com/', 'tlsValid': True, 'statusCode': 200},
                'stats': {'securityScore': 90},
            }],
            'total': 1,
        },
    }


@pytest.fixture
def html_bundle():
    """Only HTML validation data: 3 errors, 2 warnings, 1 info message."""
    return {
        'htmlValidationData': {
            'messages': [
                {'type': 'error', 'message': 'e1'},
                {'type': 'error', 'message': 'e2'},
                {'type': 'error', 'message': 'e3'},
                {'type': 'warning', 'message': 'w1'},
                {'type': 'warning', 'message': 'w2'},
                {'type': 'info', 'message': 'i1'},
            ],
        },
    }


def perf_bundle(performance=None, audits=None, **categories):
    """Build a bundle carrying only PageSpeed categories and audits."""
    cats = {name.replace('_', '-'): {'score': score} for name, score in categories.items()}
    if performance is not None:
        cats['performance'] = {'score': performance}
    return {'pageSpeedData': {'categories': cats, 'audits': audits or {}}}


@pytest.fixture
def make_perf_bundle():
    return perf_bundle
