#!/usr/bin/env python3
"""Inspect and edit navigation-isolation policies from the command line.

Commands:
- check <url> [--group G] [--tab-id N]: decide a top-level navigation
- show <hostname>: print the domain's policy record
- set-policy <hostname> <group> [--never-ask]: create or replace a record
- never-ask <hostname> on|off: toggle neverAsk on an existing record
- list: print every policy record

Env:
- TABFENCE_SETTINGS_PATH: settings JSON file (default ~/.config/tabfence/settings.json)
- TABFENCE_CONFIRM_PAGE_URL: confirmation page used in redirect URLs
- TABFENCE_VERBOSE: log decisions and writes to stderr
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from tabfence.isolation.encoding import parse_confirmation_url
from tabfence.isolation.hosts import normalize_hostname
from tabfence.isolation.keys import TAB_GROUP_KEY
from tabfence.isolation.records import Navigation, PageRecord, PageSettings

from .adapters import JsonFileSettingsStore, MemorySessionStore
from .config import confirm_page_url, settings_path
from .exemptions import ExemptionTracker
from .log import log, set_verbose
from .navigation import decide
from .pages import PageSettingsRepository

USAGE = (
    "usage: tabfence [--verbose] [--json] [--settings PATH] "
    "{check <url> [--group G] [--tab-id N] | show <host> | set-policy <host> <group> [--never-ask] "
    "| never-ask <host> on|off | list}"
)
COMMANDS = {"check", "show", "set-policy", "never-ask", "list"}
ON_VALUES = {"1", "true", "yes", "y", "on"}
OFF_VALUES = {"0", "false", "no", "n", "off"}


def _parse_group(value: str) -> object:
    value = value.strip()
    if value.lstrip("-").isdigit():
        return int(value)
    return value


def _parse_switch(value: str) -> bool:
    v = value.strip().lower()
    if v in ON_VALUES:
        return True
    if v in OFF_VALUES:
        return False
    raise SystemExit(f"expected on|off, got: {value}")


def parse_args(argv: List[str]) -> Dict:
    opts: Dict = {
        "verbose": False,
        "json": False,
        "settings": None,
        "group": None,
        "tab_id": 1,
        "never_ask": False,
        "positional": [],
    }
    args = list(argv[1:])
    idx = 0
    while idx < len(args):
        arg = args[idx]
        if arg in ("-v", "--verbose"):
            opts["verbose"] = True
        elif arg == "--json":
            opts["json"] = True
        elif arg == "--never-ask":
            opts["never_ask"] = True
        elif arg in ("--settings", "--group", "--tab-id"):
            if idx + 1 >= len(args):
                raise SystemExit(f"{arg} requires a value")
            idx += 1
            opts[arg.lstrip("-").replace("-", "_")] = args[idx]
        elif arg in ("-h", "--help"):
            print(USAGE, file=sys.stderr)
            raise SystemExit(0)
        elif arg.startswith("--"):
            raise SystemExit(f"unknown option: {arg}")
        else:
            opts["positional"].append(arg)
        idx += 1

    if not opts["positional"] or opts["positional"][0] not in COMMANDS:
        raise SystemExit(USAGE)
    try:
        opts["tab_id"] = int(opts["tab_id"])
    except ValueError:
        raise SystemExit(f"invalid --tab-id value: {opts['tab_id']}") from None
    return opts


def _emit(payload: Dict, as_json: bool, text: str) -> None:
    if as_json:
        print(json.dumps(payload, sort_keys=True))
    else:
        print(text)


def _record_payload(record: PageRecord) -> Dict:
    return {"domain": record.domain, "group": record.settings.group, "neverAsk": record.settings.never_ask}


async def cmd_check(store: JsonFileSettingsStore, opts: Dict, url: str) -> int:
    session = MemorySessionStore()
    tab_id = opts["tab_id"]
    if opts["group"] is not None:
        await session.set_tab_value(tab_id, TAB_GROUP_KEY, _parse_group(opts["group"]))

    pages = PageSettingsRepository(store)

    async def lookup_group(tab: int) -> Optional[object]:
        return await session.get_tab_value(tab, TAB_GROUP_KEY)

    decision = await decide(
        Navigation(url=url, tab_id=tab_id),
        exemptions=ExemptionTracker(),
        lookup_settings_fn=pages.get,
        lookup_group_fn=lookup_group,
        confirm_page_url=confirm_page_url(),
    )
    payload: Dict = {"action": decision.action, "reason": decision.reason, "redirectUrl": decision.redirect_url}
    text = f"{decision.action} ({decision.reason})"
    if decision.redirect_url:
        target = parse_confirmation_url(decision.redirect_url)
        payload["targetGroup"] = target.group_id
        text += f"\n  -> {decision.redirect_url}\n  target group: {target.group_id}"
    _emit(payload, opts["json"], text)
    return 0


async def cmd_show(store: JsonFileSettingsStore, opts: Dict, hostname: str) -> int:
    domain = normalize_hostname(hostname)
    settings = await PageSettingsRepository(store).get(domain)
    if settings is None:
        _emit({"domain": domain, "policy": None}, opts["json"], f"{domain}: no policy")
        return 0
    record = PageRecord(domain=domain, settings=settings)
    _emit(
        _record_payload(record),
        opts["json"],
        f"{domain}: group={settings.group} neverAsk={str(settings.never_ask).lower()}",
    )
    return 0


async def cmd_set_policy(store: JsonFileSettingsStore, opts: Dict, hostname: str, group: str) -> int:
    record = PageRecord(
        domain=normalize_hostname(hostname),
        settings=PageSettings(group=_parse_group(group), never_ask=opts["never_ask"]),
    )
    await PageSettingsRepository(store).put(record)
    _emit(_record_payload(record), opts["json"], f"{record.domain}: group={record.settings.group}")
    return 0


async def cmd_never_ask(store: JsonFileSettingsStore, opts: Dict, hostname: str, flag: bool) -> int:
    domain = normalize_hostname(hostname)
    changed = await PageSettingsRepository(store).set_never_ask(domain, flag)
    _emit(
        {"domain": domain, "neverAsk": flag, "changed": changed},
        opts["json"],
        f"{domain}: neverAsk={str(flag).lower()}" if changed else f"{domain}: no policy, nothing changed",
    )
    return 0 if changed else 1


async def cmd_list(store: JsonFileSettingsStore, opts: Dict) -> int:
    records = await PageSettingsRepository(store).records()
    if opts["json"]:
        print(json.dumps([_record_payload(record) for record in records], sort_keys=True))
        return 0
    for record in records:
        print(f"{record.domain}\tgroup={record.settings.group}\tneverAsk={str(record.settings.never_ask).lower()}")
    return 0


def _expect(positional: List[str], count: int) -> List[str]:
    if len(positional) != count + 1:
        raise SystemExit(USAGE)
    return positional[1:]


def main(argv: List[str]) -> int:
    try:
        opts = parse_args(argv)
    except SystemExit as exc:
        if exc.code in (0, None):
            return 0
        print(exc.code, file=sys.stderr)
        return 2

    if opts["verbose"]:
        set_verbose(True)
    path = Path(opts["settings"]).expanduser() if opts["settings"] else settings_path()
    store = JsonFileSettingsStore(path)
    log(f"settings: {path}")

    command = opts["positional"][0]
    try:
        if command == "check":
            (url,) = _expect(opts["positional"], 1)
            return asyncio.run(cmd_check(store, opts, url))
        if command == "show":
            (hostname,) = _expect(opts["positional"], 1)
            return asyncio.run(cmd_show(store, opts, hostname))
        if command == "set-policy":
            hostname, group = _expect(opts["positional"], 2)
            return asyncio.run(cmd_set_policy(store, opts, hostname, group))
        if command == "never-ask":
            hostname, value = _expect(opts["positional"], 2)
            return asyncio.run(cmd_never_ask(store, opts, hostname, _parse_switch(value)))
        _expect(opts["positional"], 0)
        return asyncio.run(cmd_list(store, opts))
    except SystemExit as exc:
        print(exc.code, file=sys.stderr)
        return 2
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


def run() -> int:
    return main(sys.argv)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
