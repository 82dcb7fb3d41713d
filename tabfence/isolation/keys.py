"""Storage keys and fixed names shared by the engine and its adapters."""

from __future__ import annotations

# Session-scoped values (per tab / per window).
TAB_GROUP_KEY = "group-id"
WINDOW_ACTIVE_GROUP_KEY = "active-group-id"

# Persisted per-domain policy records live under "page:<hostname>".
PAGE_KEY_PREFIX = "page:"

# Extension page the host renders for a pending group crossing.
CONFIRM_PAGE_PATH = "/background/confirm.html"

# Host conventions for navigations that are not attached to a tab.
NO_TAB_ID = -1
TOP_LEVEL_FRAME_ID = 0
