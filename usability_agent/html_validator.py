"""
Local structural HTML checks.

Used when the W3C Nu checker is disabled or unavailable. Produces messages in
the same ``{type, message}`` shape the Nu checker returns.
"""
from __future__ import annotations

import re

COMMON_TAGS = ("div", "span", "p", "a", "h1", "h2", "h3", "ul", "li", "table", "tr", "td")

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_DEPRECATED_RE = re.compile(r"<(?:font|center|strike|marquee|blink)\b[^>]*>", re.IGNORECASE)
_VIEWPORT_RE = re.compile(r"<meta[^>]+name\s*=\s*[\"']?viewport", re.IGNORECASE)
_DOCTYPE_RE = re.compile(r"<!doctype\s+html", re.IGNORECASE)


def _tag_counts(html: str, tag: str) -> tuple[int, int]:
    opened = len(re.findall(rf"<{tag}(?:\s[^>]*)?>", html, re.IGNORECASE))
    closed = len(re.findall(rf"</{tag}\s*>", html, re.IGNORECASE))
    return opened, closed


def validate_html(html: str) -> list[dict[str, str]]:
    html = html or ""
    errors: list[dict[str, str]] = []
    warnings: list[dict[str, str]] = []
    info: list[dict[str, str]] = []

    title = _TITLE_RE.search(html)
    if title is None:
        errors.append({"type": "error", "message": "The page is missing a <title> element."})

    if not _VIEWPORT_RE.search(html):
        warnings.append({"type": "warning", "message": "The page has no viewport meta tag for mobile devices."})
    if not _DOCTYPE_RE.search(html):
        warnings.append({"type": "warning", "message": "The page is missing a DOCTYPE declaration."})
    if _DEPRECATED_RE.search(html):
        warnings.append({"type": "warning", "message": "The page uses deprecated HTML elements."})

    for tag in COMMON_TAGS:
        opened, closed = _tag_counts(html, tag)
        if opened != closed:
            errors.append({
                "type": "error",
                "message": f"Unbalanced <{tag}> element: {opened} opened and {closed} closed.",
            })

    if title is not None and title.group(1).strip():
        info.append({"type": "info", "message": f'Page title: "{title.group(1).strip()}"'})

    return errors + warnings + info
