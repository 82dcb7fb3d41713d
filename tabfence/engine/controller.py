"""Process-level controller wiring host events to the isolation engine.

Flow:
- start(): subscribe to settings changes, seed default UI settings, sync each
  window's active group from its focused tab
- on_before_request(): decide proceed/redirect for a navigation
- on_tab_created() / on_tab_activated(): keep tab and window groups in step
- on_message(): neverAsk toggles and confirmation answers from the UI
- on_connect() / on_channel_message() / on_window_removed(): UI channels
- shutdown(): drop listeners, channels and exemptions
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from tabfence.isolation.keys import CONFIRM_PAGE_PATH
from tabfence.isolation.records import Decision, GroupId, Navigation

from .adapters import BrowserHost, Channel, SessionStore, SettingsChanges, SettingsStore
from .config import DEFAULT_SETTINGS, merge_settings, missing_setting_keys
from .confirmation import ConfirmationResolver
from .log import log
from .membership import GroupMembershipManager
from .messages import NeverAskRequest, RedirectRequest, parse_message
from .navigation import decide
from .pages import PageSettingsRepository
from .redirects import Redirector
from .relay import NotificationRelay
from .state import IsolationState


class IsolationController:
    def __init__(
        self,
        settings: SettingsStore,
        session: SessionStore,
        host: BrowserHost,
        state: Optional[IsolationState] = None,
        confirm_page_url: Optional[str] = None,
    ) -> None:
        self.settings = settings
        self.host = host
        self.state = state if state is not None else IsolationState()
        self.pages = PageSettingsRepository(settings)
        self.redirector = Redirector(host)
        self.relay = NotificationRelay(self.state, set_active_group_fn=self._set_active_group)
        self.membership = GroupMembershipManager(session, self.redirector, broadcast_fn=self.relay.broadcast)
        self.confirmation = ConfirmationResolver(self.state.exemptions, self.membership, self.redirector)
        self._confirm_page_url = confirm_page_url
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def confirm_page_url(self) -> str:
        return self._confirm_page_url or self.host.extension_url(CONFIRM_PAGE_PATH)

    async def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.settings.on_change(self.on_setting_change)
        await self.ensure_default_settings()
        await self.prepare()
        log("start")

    async def shutdown(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.state.reset()
        log("shutdown")

    async def ensure_default_settings(self) -> Dict:
        keys = list(DEFAULT_SETTINGS)
        before = await self.settings.get(keys)
        merged = merge_settings(before)
        missing = missing_setting_keys(before, keys)
        if missing:
            # Fresh install writes every default; otherwise only the gaps.
            await self.settings.set({key: merged[key] for key in missing})
            log(f"default settings filled: {', '.join(missing)}")
        self.state.open_sidebar_on_click = bool(merged["openSidebarOnClick"])
        return merged

    async def prepare(self) -> int:
        tabs = await self.host.query_tabs()
        return await self.membership.reconcile_windows(tabs)

    async def on_before_request(self, navigation: Navigation) -> Decision:
        decision = await decide(
            navigation,
            exemptions=self.state.exemptions,
            lookup_settings_fn=self.pages.get,
            lookup_group_fn=self.membership.current_group,
            confirm_page_url=self.confirm_page_url,
        )
        log(f"decide tab={navigation.tab_id} url={navigation.url} -> {decision.action} ({decision.reason})")
        return decision

    async def on_tab_created(self, tab_id: int, window_id: int) -> Optional[GroupId]:
        return await self.membership.on_tab_created(tab_id, window_id)

    async def on_tab_activated(self, tab_id: int, window_id: int) -> bool:
        return await self.membership.on_tab_activated(tab_id, window_id)

    def on_window_removed(self, window_id: int) -> None:
        self.relay.disconnect(window_id)

    def on_connect(self, channel: Channel) -> int:
        return self.relay.connect(channel)

    async def on_channel_message(self, message: Dict[str, object]) -> None:
        await self.relay.on_channel_message(message)

    async def on_message(self, message: Dict[str, object]) -> None:
        request = parse_message(message)
        if isinstance(request, NeverAskRequest):
            await self.pages.set_never_ask(request.hostname, request.never_ask)
        elif isinstance(request, RedirectRequest):
            await self.confirmation.resolve(request)
        else:
            log(f"message ignored: {message.get('method')!r}")

    async def on_clicked(self) -> None:
        if self.state.open_sidebar_on_click:
            await self.host.open_sidebar()
        await self.host.open_popup()

    def on_setting_change(self, changes: SettingsChanges, area: str = "local") -> None:
        change = changes.get("openSidebarOnClick")
        if change is None:
            return
        self.state.open_sidebar_on_click = bool(change.get("newValue"))
        log(f"openSidebarOnClick -> {self.state.open_sidebar_on_click} ({area})")

    async def _set_active_group(self, window_id: int, group_id: Optional[GroupId]) -> None:
        await self.membership.set_window_group(window_id, group_id)
