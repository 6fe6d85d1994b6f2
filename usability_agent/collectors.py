"""
Audit data providers and bundle assembly.

Three providers feed the scoring engine: PageSpeed Insights (Lighthouse
categories and audits), an HTML validator (W3C Nu checker or the local
structural checks) and a synthesized security posture. They run
concurrently; each may fail on its own and the bundle is assembled from
whatever succeeded.
"""
from __future__ import annotations

import logging
import socket
import ssl
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

import httpx

from .config import Settings
from .errors import CollectorError
from .html_validator import validate_html
from .models import AuditBundle

logger = logging.getLogger(__name__)

PSI_CATEGORIES = ("performance", "accessibility", "best-practices", "seo")

SECURITY_HEADERS = (
    "content-security-policy",
    "strict-transport-security",
    "x-frame-options",
    "x-content-type-options",
)
SECURITY_SCORE_HTTPS = 85
SECURITY_SCORE_HTTP = 60


@dataclass
class CollectionResult:
    bundle: AuditBundle
    warnings: list[str] = field(default_factory=list)
    timings_ms: dict[str, int] = field(default_factory=dict)


def _json_body(res: httpx.Response, source: str) -> dict[str, Any]:
    try:
        data = res.json()
    except ValueError as e:
        raise CollectorError(source, f"invalid JSON response ({e})") from e
    if not isinstance(data, dict):
        raise CollectorError(source, "unexpected response shape")
    return data


def fetch_pagespeed(
    url: str,
    settings: Settings,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    if not settings.pagespeed_api_key:
        raise CollectorError("pagespeed", "PAGESPEED_API_KEY is not configured")

    params = [
        ("url", url),
        ("key", settings.pagespeed_api_key),
        ("strategy", settings.pagespeed_strategy),
    ] + [("category", c) for c in PSI_CATEGORIES]

    timeout = settings.collector_timeout_ms / 1000
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            res = client.get(
                settings.pagespeed_endpoint,
                params=params,
                headers={"accept": "application/json"},
            )
    except httpx.HTTPError as e:
        raise CollectorError("pagespeed", f"request failed ({e})") from e

    if res.status_code == 429:
        raise CollectorError("pagespeed", "API rate limit exceeded")
    if res.status_code < 200 or res.status_code >= 300:
        raise CollectorError("pagespeed", f"API returned {res.status_code}")

    data = _json_body(res, "pagespeed")
    if not isinstance(data.get("lighthouseResult"), dict):
        raise CollectorError("pagespeed", "response has no lighthouseResult")
    return data


def _normalize_nu_message(msg: dict[str, Any]) -> dict[str, str]:
    # The Nu checker reports warnings as type "info" with subType "warning".
    msg_type = str(msg.get("type") or "info")
    if msg_type == "info" and msg.get("subType") == "warning":
        msg_type = "warning"
    elif msg_type == "non-document-error":
        msg_type = "error"
    return {"type": msg_type, "message": str(msg.get("message") or "")}


def fetch_nu_validation(
    url: str,
    settings: Settings,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    timeout = settings.collector_timeout_ms / 1000
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True, transport=transport) as client:
            res = client.get(
                settings.nu_validator_url,
                params={"doc": url, "out": "json"},
                headers={"user-agent": settings.user_agent, "accept": "application/json"},
            )
    except httpx.HTTPError as e:
        raise CollectorError("html_validation", f"Nu checker request failed ({e})") from e

    if res.status_code < 200 or res.status_code >= 300:
        raise CollectorError("html_validation", f"Nu checker returned {res.status_code}")

    data = _json_body(res, "html_validation")
    messages = data.get("messages")
    if not isinstance(messages, list):
        raise CollectorError("html_validation", "Nu checker response has no messages")
    return {"messages": [_normalize_nu_message(m) for m in messages if isinstance(m, dict)]}


def _fetch_html(url: str, settings: Settings, transport: httpx.BaseTransport | None) -> httpx.Response:
    timeout = settings.collector_timeout_ms / 1000
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True, transport=transport) as client:
            return client.get(
                url,
                headers={
                    "user-agent": settings.user_agent,
                    "accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                },
            )
    except httpx.HTTPError as e:
        raise CollectorError("html_validation", f"unable to fetch page ({e})") from e


def fetch_local_validation(
    url: str,
    settings: Settings,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    res = _fetch_html(url, settings, transport)
    if res.status_code >= 400:
        raise CollectorError("html_validation", f"page returned {res.status_code}")
    return {"messages": validate_html(res.text)}


def fetch_html_validation(
    url: str,
    settings: Settings,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    if settings.html_validator == "nu":
        try:
            return fetch_nu_validation(url, settings, transport)
        except CollectorError as e:
            logger.warning("%s; falling back to local HTML checks", e)
    return fetch_local_validation(url, settings, transport)


def _tls_valid(hostname: str, timeout_ms: int) -> bool:
    timeout = timeout_ms / 1000
    try:
        ctx = ssl.create_default_context()
        with socket.create_connection((hostname, 443), timeout=timeout) as sock:
            with ctx.wrap_socket(sock, server_hostname=hostname) as ssock:
                return bool(ssock.getpeercert())
    except (OSError, ssl.SSLError, ValueError):
        return False


def estimate_security_posture(
    url: str,
    settings: Settings,
    transport: httpx.BaseTransport | None = None,
    tls_probe: Callable[[str, int], bool] = _tls_valid,
) -> dict[str, Any]:
    """Synthesize a urlscan-style security record for the URL.

    HTTPS sites start from a higher base score; the TLS flag comes from a real
    handshake, and the common security headers are reported present/missing.
    """
    parsed = urlparse(url)
    hostname = parsed.hostname or ""
    if not hostname:
        raise CollectorError("security", f"no hostname in '{url}'")
    https = parsed.scheme.lower() == "https"

    tls_valid = tls_probe(hostname, settings.collector_timeout_ms) if https else False

    status_code = None
    headers: dict[str, str] = {}
    try:
        res = _fetch_html(url, settings, transport)
        status_code = res.status_code
        lowered = {k.lower() for k in res.headers.keys()}
        headers = {h: ("present" if h in lowered else "missing") for h in SECURITY_HEADERS}
    except CollectorError as e:
        logger.info("security headers unavailable for %s: %s", url, e)

    return {
        "results": [{
            "task": {"domain": hostname},
            "page": {"url": url, "tlsValid": tls_valid, "statusCode": status_code},
            "stats": {"securityScore": SECURITY_SCORE_HTTPS if https else SECURITY_SCORE_HTTP},
            "headers": headers,
        }],
        "total": 1,
    }


def collect_bundle(
    url: str,
    settings: Settings,
    transport: httpx.BaseTransport | None = None,
    analysis_date: str | None = None,
    tls_probe: Callable[[str, int], bool] = _tls_valid,
) -> CollectionResult:
    timings: dict[str, int] = {}
    warnings: list[str] = []

    def timed(name: str, fn):
        start = time.perf_counter()
        try:
            return fn()
        finally:
            timings[name] = int((time.perf_counter() - start) * 1000)

    providers: dict[str, Callable[[], dict[str, Any]]] = {
        "pageSpeedData": lambda: fetch_pagespeed(url, settings, transport),
        "htmlValidationData": lambda: fetch_html_validation(url, settings, transport),
        "securityData": lambda: estimate_security_posture(url, settings, transport, tls_probe),
    }

    payload: dict[str, Any] = {
        "websiteUrl": url,
        "analysisDate": analysis_date or datetime.now(timezone.utc).isoformat(),
    }

    with ThreadPoolExecutor(max_workers=len(providers)) as pool:
        futures = {pool.submit(timed, name, fn): name for name, fn in providers.items()}
        for fut in as_completed(futures):
            name = futures[fut]
            try:
                payload[name] = fut.result()
            except CollectorError as e:
                logger.warning("collector failed: %s", e)
                warnings.append(str(e))
                payload[name] = None

    return CollectionResult(
        bundle=AuditBundle.from_payload(payload),
        warnings=sorted(warnings),
        timings_ms=timings,
    )
