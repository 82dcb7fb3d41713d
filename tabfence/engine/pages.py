"""Per-domain policy records on top of the key/value settings store."""

from __future__ import annotations

from typing import List, Optional

from tabfence.isolation.hosts import normalize_hostname
from tabfence.isolation.keys import PAGE_KEY_PREFIX
from tabfence.isolation.records import PageRecord, PageSettings

from .adapters import SettingsStore
from .log import log


def _storage_key(domain: str) -> str:
    return f"{PAGE_KEY_PREFIX}{domain}"


class PageSettingsRepository:
    """Typed access to ``PageSettings`` keyed by domain.

    The storage key encoding stays private to this class; callers only see
    domains and ``PageRecord`` values.
    """

    def __init__(self, store: SettingsStore) -> None:
        self.store = store

    async def get(self, domain: str) -> Optional[PageSettings]:
        key = _storage_key(normalize_hostname(domain))
        stored = await self.store.get([key])
        if key not in stored:
            return None
        return PageSettings.from_stored(stored[key])

    async def put(self, record: PageRecord) -> None:
        domain = normalize_hostname(record.domain)
        if not domain:
            raise ValueError("page settings need a hostname")
        await self.store.set({_storage_key(domain): record.settings.to_stored()})

    async def set_never_ask(self, domain: str, value: bool) -> bool:
        """Flip ``neverAsk`` on an existing record; returns False when none exists."""
        domain = normalize_hostname(domain)
        key = _storage_key(domain)
        stored = await self.store.get([key])
        if key not in stored or not isinstance(stored[key], dict):
            log(f"neverAsk ignored: no policy for {domain or '(empty host)'}")
            return False

        updated = dict(stored[key])
        updated["neverAsk"] = bool(value)
        await self.store.set({key: updated})
        log(f"neverAsk={bool(value)} for {domain}")
        return True

    async def records(self) -> List[PageRecord]:
        out = []
        for key, value in (await self.store.get()).items():
            if not key.startswith(PAGE_KEY_PREFIX):
                continue
            settings = PageSettings.from_stored(value)
            if settings is None:
                continue
            out.append(PageRecord(domain=key[len(PAGE_KEY_PREFIX):], settings=settings))
        out.sort(key=lambda record: record.domain)
        return out
