from __future__ import annotations

import logging
import re
import socket
from dataclasses import dataclass
from urllib.parse import urlparse, urlunparse

import httpx

from .errors import InvalidURLError, UnreachableSiteError

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z\d+.-]*://")
_HOSTNAME_RE = re.compile(r"^[a-z0-9]+([\-.][a-z0-9]+)*\.[a-z]{2,}$", re.IGNORECASE)


@dataclass(frozen=True)
class Reachability:
    reachable: bool
    message: str | None = None


def normalize_url(raw: str) -> str:
    value = (raw or "").strip()
    if not value:
        raise InvalidURLError("Please provide a URL.")

    if not _SCHEME_RE.match(value):
        value = "https://" + value

    parsed = urlparse(value)
    if parsed.scheme.lower() not in ("http", "https"):
        raise InvalidURLError("Please use an http(s) website URL.")

    hostname = parsed.hostname or ""
    if len(hostname) < 3 or "." not in hostname or not _HOSTNAME_RE.match(hostname):
        raise InvalidURLError("Please enter a valid website domain, such as example.com.")

    normalized = parsed._replace(scheme=parsed.scheme.lower(), netloc=parsed.netloc.lower(), fragment="")
    return urlunparse(normalized)


def _resolves(hostname: str) -> bool:
    try:
        return bool(socket.getaddrinfo(hostname, None))
    except (socket.gaierror, UnicodeError, OSError):
        return False


def check_reachable(
    url: str,
    timeout_ms: int = 8000,
    user_agent: str | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Reachability:
    """Probe the site with a HEAD request, falling back to DNS resolution."""
    timeout = timeout_ms / 1000
    headers = {"user-agent": user_agent} if user_agent else {}
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True, transport=transport) as client:
            client.head(url, headers=headers)
        return Reachability(reachable=True)
    except httpx.TimeoutException:
        return Reachability(
            reachable=False,
            message="Timed out connecting to the site. Check that the URL is correct.",
        )
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.info("HEAD probe failed for %s (%s); trying DNS", url, e)

    hostname = urlparse(url).hostname or ""
    if hostname and _resolves(hostname):
        return Reachability(reachable=True)
    return Reachability(
        reachable=False,
        message="We could not confirm that this site exists. Is the URL correct?",
    )


def require_reachable(url: str, timeout_ms: int = 8000, **kwargs) -> None:
    result = check_reachable(url, timeout_ms=timeout_ms, **kwargs)
    if not result.reachable:
        raise UnreachableSiteError(url, result.message or "Site is not reachable.")
