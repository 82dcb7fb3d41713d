"""Per-tab domains the user has allowed to skip the confirmation step."""

from __future__ import annotations

from typing import Dict, Set


class ExemptionTracker:
    """In-memory only; entries last until ``invalidate`` or ``clear``."""

    def __init__(self) -> None:
        self._tabs: Dict[int, Set[str]] = {}

    def grant(self, tab_id: int, domain: str) -> None:
        self._tabs.setdefault(tab_id, set()).add(domain)

    def is_exempt(self, tab_id: int, domain: str) -> bool:
        return domain in self._tabs.get(tab_id, ())

    def invalidate(self, tab_id: int) -> None:
        self._tabs.pop(tab_id, None)

    def clear(self) -> None:
        self._tabs.clear()