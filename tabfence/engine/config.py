"""Engine configuration and global UI setting defaults."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable, Optional

DEFAULT_SETTINGS: Dict = {
    "reverseTabDisplay": False,
    "openSidebarOnClick": False,
}

DEFAULT_SETTINGS_PATH = Path("~/.config/tabfence/settings.json")
DEFAULT_CONFIRM_PAGE_URL = "moz-extension://tabfence/background/confirm.html"


def settings_path() -> Path:
    raw = os.environ.get("TABFENCE_SETTINGS_PATH", "").strip()
    return Path(raw or str(DEFAULT_SETTINGS_PATH)).expanduser()


def confirm_page_url() -> str:
    raw = os.environ.get("TABFENCE_CONFIRM_PAGE_URL", "").strip()
    return raw or DEFAULT_CONFIRM_PAGE_URL


def merge_settings(stored: Optional[Dict], defaults: Dict = DEFAULT_SETTINGS) -> Dict:
    """Fill keys missing from ``stored`` with defaults; explicit values win."""
    merged = dict(defaults)
    if stored:
        merged.update({key: value for key, value in stored.items() if key in defaults})
    return merged


def missing_setting_keys(stored: Optional[Dict], keys: Iterable[str]) -> list:
    stored = stored or {}
    return [key for key in keys if key not in stored]
