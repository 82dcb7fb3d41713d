"""Shared navigation-isolation semantics used by the engine and the CLI."""

from .encoding import ConfirmationRequest, build_confirmation_url, encode_url, parse_confirmation_url
from .hosts import domain_of, normalize_hostname
from .keys import (
    CONFIRM_PAGE_PATH,
    NO_TAB_ID,
    PAGE_KEY_PREFIX,
    TAB_GROUP_KEY,
    TOP_LEVEL_FRAME_ID,
    WINDOW_ACTIVE_GROUP_KEY,
)
from .records import (
    PROCEED,
    REDIRECT,
    Decision,
    GroupId,
    Navigation,
    PageRecord,
    PageSettings,
)

__all__ = [
    "ConfirmationRequest",
    "build_confirmation_url",
    "encode_url",
    "parse_confirmation_url",
    "domain_of",
    "normalize_hostname",
    "CONFIRM_PAGE_PATH",
    "NO_TAB_ID",
    "PAGE_KEY_PREFIX",
    "TAB_GROUP_KEY",
    "TOP_LEVEL_FRAME_ID",
    "WINDOW_ACTIVE_GROUP_KEY",
    "PROCEED",
    "REDIRECT",
    "Decision",
    "GroupId",
    "Navigation",
    "PageRecord",
    "PageSettings",
]
