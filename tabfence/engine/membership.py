"""Group membership of tabs and the active group of each window."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional

from tabfence.isolation.keys import TAB_GROUP_KEY, WINDOW_ACTIVE_GROUP_KEY
from tabfence.isolation.records import GroupId

from .adapters import SessionStore, TabInfo
from .log import log
from .messages import move_tab_group_message
from .redirects import Redirector


class GroupMembershipManager:
    """Reads and writes tab/window group values in the session store.

    A missing value is a valid state: the tab is ungoverned or the window has
    no group for new tabs to inherit. Writes are plain last-writer-wins sets.
    """

    def __init__(
        self,
        session: SessionStore,
        redirector: Redirector,
        broadcast_fn: Callable[[Dict[str, object]], object],
    ) -> None:
        self.session = session
        self.redirector = redirector
        self.broadcast_fn = broadcast_fn

    async def current_group(self, tab_id: int) -> Optional[GroupId]:
        return await self.session.get_tab_value(tab_id, TAB_GROUP_KEY)

    async def window_group(self, window_id: int) -> Optional[GroupId]:
        return await self.session.get_window_value(window_id, WINDOW_ACTIVE_GROUP_KEY)

    async def set_window_group(self, window_id: int, group_id: Optional[GroupId]) -> None:
        await self.session.set_window_value(window_id, WINDOW_ACTIVE_GROUP_KEY, group_id)
        log(f"window {window_id} active group -> {group_id!r}")

    async def on_tab_created(self, tab_id: int, window_id: int) -> Optional[GroupId]:
        group_id = await self.window_group(window_id)
        if group_id is None:
            return None
        await self.session.set_tab_value(tab_id, TAB_GROUP_KEY, group_id)
        log(f"tab {tab_id} inherits group {group_id!r} from window {window_id}")
        return group_id

    async def on_tab_activated(self, tab_id: int, window_id: int) -> bool:
        group_id = await self.current_group(tab_id)
        active_group_id = await self.window_group(window_id)
        if group_id == active_group_id:
            return False
        await self.set_window_group(window_id, group_id)
        return True

    async def move_tab_to_group(
        self,
        tab_id: int,
        group_id: Optional[GroupId],
        redirect_url: str,
        original_url: str = "",
    ) -> None:
        """Assign ``tab_id`` to ``group_id``, then load the pending destination.

        The assignment is written first so it holds even when the redirect
        fails; connected channels are told about the move either way.
        """
        await self.session.set_tab_value(tab_id, TAB_GROUP_KEY, group_id)
        log(f"tab {tab_id} moved to group {group_id!r}")
        try:
            await self.redirector.redirect_tab(tab_id, redirect_url, original_url)
        finally:
            self.broadcast_fn(move_tab_group_message(tab_id, group_id))

    async def reconcile_windows(self, tabs: Iterable[TabInfo]) -> int:
        """Push each active tab's group into its window's active group."""
        updated = 0
        for tab in tabs:
            if not tab.active:
                continue
            group_id = await self.current_group(tab.tab_id)
            if group_id is None:
                continue
            await self.set_window_group(tab.window_id, group_id)
            updated += 1
        return updated
