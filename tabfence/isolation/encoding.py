"""Confirmation page URL codec."""

from __future__ import annotations

import urllib.parse
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ConfirmationRequest:
    url: str
    group_id: str
    tab_id: Optional[int]


def encode_url(url: str) -> str:
    """Percent-encode ``url`` for embedding as a query value.

    Unlike a browser's component encoder this also escapes ``! ' ( ) *`` so the
    result stays intact when the whole confirmation URL is encoded again.
    """
    return urllib.parse.quote(str(url), safe="")


def build_confirmation_url(page_url: str, destination: str, group_id: object, tab_id: int) -> str:
    return f"{page_url}?url={encode_url(destination)}&groupId={encode_url(group_id)}&tabId={int(tab_id)}"


def parse_confirmation_url(url: str) -> ConfirmationRequest:
    query = urllib.parse.urlsplit(url).query
    values = dict(urllib.parse.parse_qsl(query, keep_blank_values=True))
    if "url" not in values:
        raise ValueError(f"not a confirmation URL: {url}")

    tab_id: Optional[int]
    try:
        tab_id = int(values.get("tabId", ""))
    except ValueError:
        tab_id = None
    return ConfirmationRequest(url=values["url"], group_id=values.get("groupId", ""), tab_id=tab_id)
