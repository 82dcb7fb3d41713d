"""Typed records exchanged between the engine, its adapters and the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

from .keys import NO_TAB_ID, TOP_LEVEL_FRAME_ID

# Groups are opaque: only equality matters.
GroupId = Union[int, str]

PROCEED = "proceed"
REDIRECT = "redirect"


@dataclass(frozen=True)
class PageSettings:
    group: GroupId
    never_ask: bool = False

    @classmethod
    def from_stored(cls, value: object) -> Optional["PageSettings"]:
        if not isinstance(value, dict) or "group" not in value:
            return None
        return cls(group=value["group"], never_ask=bool(value.get("neverAsk", False)))

    def to_stored(self) -> Dict[str, object]:
        return {"group": self.group, "neverAsk": self.never_ask}


@dataclass(frozen=True)
class PageRecord:
    domain: str
    settings: PageSettings


@dataclass(frozen=True)
class Navigation:
    url: str
    tab_id: Optional[int]
    frame_id: int = TOP_LEVEL_FRAME_ID

    @property
    def is_top_level(self) -> bool:
        return self.frame_id == TOP_LEVEL_FRAME_ID

    @property
    def has_tab(self) -> bool:
        return self.tab_id is not None and self.tab_id != NO_TAB_ID


@dataclass(frozen=True)
class Decision:
    action: str
    reason: str
    redirect_url: Optional[str] = None

    @classmethod
    def proceed(cls, reason: str) -> "Decision":
        return cls(action=PROCEED, reason=reason)

    @classmethod
    def redirect(cls, url: str) -> "Decision":
        return cls(action=REDIRECT, reason="group_mismatch", redirect_url=url)

    @property
    def is_redirect(self) -> bool:
        return self.action == REDIRECT

    def blocking_response(self) -> Dict[str, str]:
        """Render as the host's blocking webRequest response."""
        if self.is_redirect and self.redirect_url:
            return {"redirectUrl": self.redirect_url}
        return {}
