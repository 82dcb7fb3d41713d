"""UI message protocol: coercion of inbound messages and outbound builders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

from tabfence.isolation.hosts import normalize_hostname
from tabfence.isolation.records import GroupId


@dataclass(frozen=True)
class NeverAskRequest:
    hostname: str
    never_ask: bool


@dataclass(frozen=True)
class RedirectRequest:
    tab_id: int
    redirect_url: str
    original_url: str
    exempt: bool = False
    move_group: bool = False
    group_id: Optional[GroupId] = None


@dataclass(frozen=True)
class InvalidateExemptRequest:
    tab_id: int


@dataclass(frozen=True)
class ActiveGroupRequest:
    window_id: int
    group_id: Optional[GroupId]


Request = Union[NeverAskRequest, RedirectRequest, InvalidateExemptRequest, ActiveGroupRequest]


def safe_id(value: object, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"{field} must be an integer, got {value!r}")


def safe_url(value: object, field: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise ValueError(f"{field} must be a non-empty URL")


def parse_message(message: object) -> Optional[Request]:
    """Coerce a raw UI message; unknown methods return None."""
    if not isinstance(message, dict):
        raise ValueError("message must be an object")
    method = message.get("method")

    if method == "neverAsk":
        hostname = normalize_hostname(message.get("hostname"))
        if not hostname:
            raise ValueError("neverAsk requires a hostname")
        return NeverAskRequest(hostname=hostname, never_ask=bool(message.get("neverAsk")))

    if method == "redirectTab":
        return RedirectRequest(
            tab_id=safe_id(message.get("tabId"), "tabId"),
            redirect_url=safe_url(message.get("redirectUrl"), "redirectUrl"),
            original_url=str(message.get("originalUrl") or ""),
            exempt=bool(message.get("exempt", False)),
            move_group="groupId" in message,
            group_id=message.get("groupId"),
        )

    if method == "invalidateExempt":
        return InvalidateExemptRequest(tab_id=safe_id(message.get("tabId"), "tabId"))

    if method == "activeGroup":
        return ActiveGroupRequest(
            window_id=safe_id(message.get("windowId"), "windowId"),
            group_id=message.get("groupId"),
        )

    return None


def connected_message() -> Dict[str, object]:
    return {"method": "connected"}


def move_tab_group_message(tab_id: int, group_id: Optional[GroupId]) -> Dict[str, object]:
    return {"method": "moveTabGroup", "tabId": tab_id, "groupId": group_id}
