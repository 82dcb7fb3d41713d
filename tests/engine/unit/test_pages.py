import asyncio

import pytest

from tabfence.engine.adapters import MemorySettingsStore
from tabfence.engine.pages import PageSettingsRepository
from tabfence.isolation.records import PageRecord, PageSettings


def test_get_returns_none_without_record():
    repo = PageSettingsRepository(MemorySettingsStore())

    assert asyncio.run(repo.get("example.com")) is None


def test_put_then_get_uses_domain_as_identity():
    store = MemorySettingsStore()
    repo = PageSettingsRepository(store)

    asyncio.run(repo.put(PageRecord(domain="Example.com", settings=PageSettings(group="work"))))

    assert asyncio.run(repo.get("example.com")) == PageSettings(group="work", never_ask=False)
    assert asyncio.run(store.get()) == {"page:example.com": {"group": "work", "neverAsk": False}}


def test_put_requires_hostname():
    repo = PageSettingsRepository(MemorySettingsStore())

    with pytest.raises(ValueError):
        asyncio.run(repo.put(PageRecord(domain="  ", settings=PageSettings(group=1))))


def test_set_never_ask_updates_existing_record_only():
    store = MemorySettingsStore({"page:example.com": {"group": 4, "neverAsk": False, "title": "keep"}})
    repo = PageSettingsRepository(store)

    assert asyncio.run(repo.set_never_ask("example.com", True)) is True
    assert asyncio.run(store.get(["page:example.com"])) == {
        "page:example.com": {"group": 4, "neverAsk": True, "title": "keep"}
    }


def test_set_never_ask_without_record_is_ignored():
    store = MemorySettingsStore()
    writes = []
    store.on_change(lambda changes, area: writes.append(changes))
    repo = PageSettingsRepository(store)

    assert asyncio.run(repo.set_never_ask("example.com", True)) is False
    assert writes == []
    assert asyncio.run(store.get()) == {}


def test_records_lists_page_entries_sorted_and_skips_other_keys():
    store = MemorySettingsStore(
        {
            "page:b.com": {"group": 2},
            "page:a.com": {"group": 1, "neverAsk": True},
            "page:broken.com": "nope",
            "openSidebarOnClick": True,
        }
    )

    records = asyncio.run(PageSettingsRepository(store).records())

    assert records == [
        PageRecord(domain="a.com", settings=PageSettings(group=1, never_ask=True)),
        PageRecord(domain="b.com", settings=PageSettings(group=2)),
    ]
