"""Process-level mutable state owned by the controller."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from .adapters import Channel
from .exemptions import ExemptionTracker


@dataclass
class IsolationState:
    exemptions: ExemptionTracker = field(default_factory=ExemptionTracker)
    channels: Dict[int, Channel] = field(default_factory=dict)
    open_sidebar_on_click: bool = False

    def reset(self) -> None:
        self.exemptions.clear()
        self.channels.clear()
        self.open_sidebar_on_click = False
