"""Execution of a confirmed redirect."""

from __future__ import annotations

from .adapters import BrowserHost
from .log import log


class Redirector:
    def __init__(self, host: BrowserHost) -> None:
        self.host = host

    async def redirect_tab(self, tab_id: int, redirect_url: str, original_url: str) -> None:
        """Load ``redirect_url`` in place, then drop ``original_url`` from history.

        The history delete only runs once the tab update has been issued so it
        cannot race the navigation it is cleaning up after.
        """
        await self.host.update_tab(tab_id, redirect_url, load_replace=True)
        log(f"tab {tab_id} -> {redirect_url}")
        if original_url:
            await self.host.delete_history_url(original_url)
