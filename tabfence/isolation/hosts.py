"""Hostname helpers for navigation policy lookups."""

from __future__ import annotations

import urllib.parse


def domain_of(url: str) -> str:
    """Return the lowercase hostname of ``url`` or "" when it has none.

    Scheme, port, path and query never influence policy. A trailing root dot
    is dropped so ``example.com.`` and ``example.com`` share one policy.
    """
    try:
        parsed = urllib.parse.urlsplit(str(url or "").strip())
        return (parsed.hostname or "").lower().rstrip(".")
    except ValueError:
        return ""


def normalize_hostname(value: object) -> str:
    """Reduce a bare host (``Example.com:8080``) or a full URL to its domain."""
    host = str(value or "").strip()
    if "://" not in host:
        host = "//" + host
    return domain_of(host)
