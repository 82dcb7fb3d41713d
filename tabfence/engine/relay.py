"""Fan-out of state-change events to connected popup/sidebar channels."""

from __future__ import annotations

from typing import Awaitable, Callable, Dict, Optional

from tabfence.isolation.records import GroupId

from .adapters import Channel
from .log import log
from .messages import ActiveGroupRequest, InvalidateExemptRequest, connected_message, parse_message
from .state import IsolationState

SetActiveGroupFn = Callable[[int, Optional[GroupId]], Awaitable[None]]


class NotificationRelay:
    """One channel per window, indexed by the window id in the channel name."""

    def __init__(self, state: IsolationState, set_active_group_fn: SetActiveGroupFn) -> None:
        self.state = state
        self.set_active_group_fn = set_active_group_fn

    def connect(self, channel: Channel) -> int:
        try:
            window_id = int(str(channel.name).strip())
        except ValueError:
            raise ValueError(f"channel name must be a window id, got {channel.name!r}") from None

        previous = self.state.channels.get(window_id)
        if previous is not None and previous is not channel:
            log(f"channel replaced for window {window_id}")
        self.state.channels[window_id] = channel
        channel.post_message(connected_message())
        return window_id

    def disconnect(self, window_id: int) -> None:
        if self.state.channels.pop(window_id, None) is not None:
            log(f"channel dropped for window {window_id}")

    def broadcast(self, message: Dict[str, object]) -> int:
        delivered = 0
        for window_id, channel in list(self.state.channels.items()):
            try:
                channel.post_message(message)
            except Exception as exc:
                log(f"warn: post to window {window_id} failed ({exc})")
                continue
            delivered += 1
        return delivered

    async def on_channel_message(self, message: Dict[str, object]) -> None:
        request = parse_message(message)
        if isinstance(request, InvalidateExemptRequest):
            self.state.exemptions.invalidate(request.tab_id)
            log(f"exemptions cleared for tab {request.tab_id}")
        elif isinstance(request, ActiveGroupRequest):
            await self.set_active_group_fn(request.window_id, request.group_id)
        else:
            log(f"channel message ignored: {message.get('method')!r}")
