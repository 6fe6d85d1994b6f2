"""
Metric extractors.

Each extractor pulls one normalized 0-100 sub-score out of an AuditBundle.
Missing or malformed upstream data is a normal state: every extractor has a
fallback value and none of them raise.
"""
from __future__ import annotations

from .models import AuditBundle, AuditMetric, CategoryScore

# First Contentful Paint buckets, in milliseconds.
FCP_BUCKETS: tuple[tuple[float, float], ...] = (
    (1000, 100.0),
    (2000, 80.0),
    (3000, 60.0),
    (4000, 40.0),
)
FCP_SLOWEST = 20.0

# Weights of the lab audits blended into the overall performance score.
PERFORMANCE_AUDIT_WEIGHTS: dict[str, float] = {
    "first-contentful-paint": 0.25,
    "largest-contentful-paint": 0.25,
    "cumulative-layout-shift": 0.25,
    "speed-index": 0.15,
    "total-blocking-time": 0.10,
}

CRITICAL_ACCESSIBILITY_AUDITS = ("aria-required-attr", "aria-roles", "color-contrast")
CRITICAL_ACCESSIBILITY_PENALTY = 15.0

HTML_ERROR_PENALTY = 5.0
HTML_WARNING_PENALTY = 2.0

DEFAULT_CLS = 75.0
DEFAULT_BEST_PRACTICES = 70.0
DEFAULT_SEO = 65.0
DEFAULT_HTML_QUALITY = 75.0
DEFAULT_LCP_SCORE = 0.7
DEFAULT_FID_SCORE = 0.75

SECURITY_HTTPS_DEFAULT = 85.0
SECURITY_NOT_HTTPS = 50.0
SECURITY_TLS_INVALID = 60.0


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def _audit(bundle: AuditBundle, key: str) -> AuditMetric | None:
    if bundle.performance_audit is None:
        return None
    return bundle.performance_audit.audits.get(key)


def _audit_score(bundle: AuditBundle, key: str) -> float | None:
    audit = _audit(bundle, key)
    return audit.score if audit is not None else None


def _category(bundle: AuditBundle, name: str) -> CategoryScore | None:
    if bundle.performance_audit is None:
        return None
    return getattr(bundle.performance_audit.categories, name, None)


def _category_percent(bundle: AuditBundle, name: str, default: float) -> float:
    category = _category(bundle, name)
    if category is None or category.score is None:
        return default
    return _clamp(category.score * 100)


def _is_https(url: str) -> bool:
    return isinstance(url, str) and url.strip().lower().startswith("https://")


def first_contentful_paint(bundle: AuditBundle) -> float:
    audit = _audit(bundle, "first-contentful-paint")
    if audit is None:
        return 0.0

    if audit.numeric_value is not None:
        for limit_ms, score in FCP_BUCKETS:
            if audit.numeric_value <= limit_ms:
                return score
        return FCP_SLOWEST

    if audit.score is not None:
        return _clamp(audit.score * 100)
    return 0.0


def largest_contentful_paint(bundle: AuditBundle) -> float:
    score = _audit_score(bundle, "largest-contentful-paint")
    return _clamp((DEFAULT_LCP_SCORE if score is None else score) * 100)


def cumulative_layout_shift(bundle: AuditBundle) -> float:
    score = _audit_score(bundle, "cumulative-layout-shift")
    return DEFAULT_CLS if score is None else _clamp(score * 100)


def overall_performance(bundle: AuditBundle) -> float:
    """Weighted blend of the lab audits, re-normalized over the audits present.

    The performance category gates the metric: without it the site is scored 0.
    When no lab audit carries a score, the category score itself is used.
    """
    category = _category(bundle, "performance")
    if category is None:
        return 0.0

    total = 0.0
    weight_sum = 0.0
    for key, weight in PERFORMANCE_AUDIT_WEIGHTS.items():
        score = _audit_score(bundle, key)
        if score is None:
            continue
        total += score * 100 * weight
        weight_sum += weight

    if weight_sum > 0:
        return _clamp(total / weight_sum)
    if category.score is None:
        return 0.0
    return _clamp(category.score * 100)


def accessibility(bundle: AuditBundle) -> float:
    category = _category(bundle, "accessibility")
    if category is None or category.score is None:
        return 0.0

    failing = sum(
        1 for key in CRITICAL_ACCESSIBILITY_AUDITS
        if _audit_score(bundle, key) == 0
    )
    return _clamp(category.score * 100 - CRITICAL_ACCESSIBILITY_PENALTY * failing)


def best_practices(bundle: AuditBundle) -> float:
    return _category_percent(bundle, "best_practices", DEFAULT_BEST_PRACTICES)


def seo(bundle: AuditBundle) -> float:
    return _category_percent(bundle, "seo", DEFAULT_SEO)


def html_quality(bundle: AuditBundle) -> float:
    validation = bundle.html_validation
    if validation is None or validation.messages is None:
        return DEFAULT_HTML_QUALITY

    errors = sum(1 for m in validation.messages if m.type == "error")
    warnings = sum(1 for m in validation.messages if m.type == "warning")
    return _clamp(100 - HTML_ERROR_PENALTY * errors - HTML_WARNING_PENALTY * warnings)


def security(bundle: AuditBundle, url: str) -> float:
    https = _is_https(url)
    posture = bundle.security_posture
    if posture is None or not posture.results:
        return SECURITY_HTTPS_DEFAULT if https else SECURITY_NOT_HTTPS

    first = posture.results[0]
    if not https:
        return SECURITY_NOT_HTTPS
    if first.page is None or first.page.tls_valid is not True:
        return SECURITY_TLS_INVALID
    if first.stats is None or first.stats.security_score is None:
        return SECURITY_HTTPS_DEFAULT
    return _clamp(first.stats.security_score)


def intuitive_ui(bundle: AuditBundle) -> float:
    fid = _audit_score(bundle, "max-potential-fid")
    fid_percent = (DEFAULT_FID_SCORE if fid is None else fid) * 100
    return _clamp(
        first_contentful_paint(bundle) * 0.3
        + cumulative_layout_shift(bundle) * 0.4
        + fid_percent * 0.3
    )


def extract_metrics(bundle: AuditBundle, url: str) -> dict[str, float]:
    """Run every extractor once; criteria combine from this snapshot."""
    return {
        "first_contentful_paint": first_contentful_paint(bundle),
        "largest_contentful_paint": largest_contentful_paint(bundle),
        "cumulative_layout_shift": cumulative_layout_shift(bundle),
        "overall_performance": overall_performance(bundle),
        "accessibility": accessibility(bundle),
        "best_practices": best_practices(bundle),
        "seo": seo(bundle),
        "html_quality": html_quality(bundle),
        "security": security(bundle, url),
        "intuitive_ui": intuitive_ui(bundle),
    }


METRIC_NAMES: tuple[str, ...] = (
    "first_contentful_paint",
    "largest_contentful_paint",
    "cumulative_layout_shift",
    "overall_performance",
    "accessibility",
    "best_practices",
    "seo",
    "html_quality",
    "security",
    "intuitive_ui",
)
