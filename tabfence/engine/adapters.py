"""Host-facing adapter interfaces and the stores the engine ships with.

The engine only talks to the host through these seams:
- SettingsStore: persisted key/value settings with a change feed
- SessionStore: per-tab / per-window values that live as long as the session
- BrowserHost: tab updates, history cleanup, tab queries and UI chrome
- Channel: one connected popup/sidebar surface
"""

from __future__ import annotations

import copy
import json
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from .log import log

SettingsChanges = Dict[str, Dict[str, object]]
ChangeListener = Callable[[SettingsChanges, str], None]


@dataclass(frozen=True)
class TabInfo:
    tab_id: int
    window_id: int
    active: bool = False


class SettingsStore(Protocol):
    async def get(self, keys: Optional[Iterable[str]] = None) -> Dict[str, object]: ...

    async def set(self, values: Dict[str, object]) -> None: ...

    def on_change(self, listener: ChangeListener) -> Callable[[], None]: ...


class SessionStore(Protocol):
    async def get_tab_value(self, tab_id: int, key: str) -> object: ...

    async def set_tab_value(self, tab_id: int, key: str, value: object) -> None: ...

    async def get_window_value(self, window_id: int, key: str) -> object: ...

    async def set_window_value(self, window_id: int, key: str, value: object) -> None: ...


class BrowserHost(Protocol):
    async def update_tab(self, tab_id: int, url: str, *, load_replace: bool = True) -> None: ...

    async def delete_history_url(self, url: str) -> None: ...

    async def query_tabs(self) -> List[TabInfo]: ...

    async def open_sidebar(self) -> None: ...

    async def open_popup(self) -> None: ...

    def extension_url(self, path: str) -> str: ...


class Channel(Protocol):
    name: str

    def post_message(self, message: Dict[str, object]) -> None: ...


class _ChangeFeed:
    area = "local"

    def __init__(self) -> None:
        self._listeners: List[ChangeListener] = []

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, before: Dict[str, object], values: Dict[str, object]) -> None:
        changes: SettingsChanges = {}
        for key, value in values.items():
            change: Dict[str, object] = {"newValue": copy.deepcopy(value)}
            if key in before:
                change["oldValue"] = copy.deepcopy(before[key])
            changes[key] = change
        if not changes:
            return
        for listener in list(self._listeners):
            listener(changes, self.area)


def _select(data: Dict[str, object], keys: Optional[Iterable[str]]) -> Dict[str, object]:
    if keys is None:
        return copy.deepcopy(data)
    if isinstance(keys, str):
        keys = [keys]
    return {key: copy.deepcopy(data[key]) for key in keys if key in data}


class MemorySettingsStore(_ChangeFeed):
    def __init__(self, initial: Optional[Dict[str, object]] = None) -> None:
        super().__init__()
        self._data: Dict[str, object] = copy.deepcopy(initial or {})

    async def get(self, keys: Optional[Iterable[str]] = None) -> Dict[str, object]:
        return _select(self._data, keys)

    async def set(self, values: Dict[str, object]) -> None:
        before = {key: self._data[key] for key in values if key in self._data}
        self._data.update(copy.deepcopy(values))
        self._emit(before, values)


class JsonFileSettingsStore(_ChangeFeed):
    """Settings persisted as one JSON object in a single owner-only file."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, object]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"settings file must hold a JSON object: {self.path}")
        return data

    def _save(self, data: Dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        os.chmod(tmp, stat.S_IRUSR | stat.S_IWUSR)
        os.replace(tmp, self.path)

    async def get(self, keys: Optional[Iterable[str]] = None) -> Dict[str, object]:
        return _select(self._load(), keys)

    async def set(self, values: Dict[str, object]) -> None:
        data = self._load()
        before = {key: data[key] for key in values if key in data}
        data.update(values)
        self._save(data)
        log(f"settings write: {', '.join(sorted(values))} -> {self.path}")
        self._emit(before, values)


class MemorySessionStore:
    """Session values kept in process memory; gone when the process exits."""

    def __init__(self) -> None:
        self._tabs: Dict[int, Dict[str, object]] = {}
        self._windows: Dict[int, Dict[str, object]] = {}

    @staticmethod
    def _put(table: Dict[int, Dict[str, object]], owner: int, key: str, value: object) -> None:
        if value is None:
            table.get(owner, {}).pop(key, None)
            return
        table.setdefault(owner, {})[key] = value

    async def get_tab_value(self, tab_id: int, key: str) -> object:
        return self._tabs.get(tab_id, {}).get(key)

    async def set_tab_value(self, tab_id: int, key: str, value: object) -> None:
        self._put(self._tabs, tab_id, key, value)

    async def get_window_value(self, window_id: int, key: str) -> object:
        return self._windows.get(window_id, {}).get(key)

    async def set_window_value(self, window_id: int, key: str, value: object) -> None:
        self._put(self._windows, window_id, key, value)
