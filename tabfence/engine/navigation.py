"""Allow/redirect decision for top-level navigations."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

from tabfence.isolation.encoding import build_confirmation_url
from tabfence.isolation.hosts import domain_of
from tabfence.isolation.records import Decision, GroupId, Navigation, PageSettings

from .exemptions import ExemptionTracker
from .log import log

LookupSettingsFn = Callable[[str], Awaitable[Optional[PageSettings]]]
LookupGroupFn = Callable[[int], Awaitable[Optional[GroupId]]]


async def decide(
    navigation: Navigation,
    *,
    exemptions: ExemptionTracker,
    lookup_settings_fn: LookupSettingsFn,
    lookup_group_fn: LookupGroupFn,
    confirm_page_url: str,
) -> Decision:
    """Return the decision for ``navigation``; the first matching rule wins.

    Order: frame/tab filter, exemption, no policy, neverAsk, ungoverned tab,
    same group, otherwise redirect to the confirmation page.
    """
    if not navigation.is_top_level:
        return Decision.proceed("filter:not_top_level")
    if not navigation.has_tab:
        return Decision.proceed("filter:no_tab")

    tab_id = int(navigation.tab_id)
    domain = domain_of(navigation.url)

    if exemptions.is_exempt(tab_id, domain):
        return Decision.proceed("exempt")

    settings = await lookup_settings_fn(domain)
    if settings is None:
        return Decision.proceed("no_policy")
    if settings.never_ask:
        return Decision.proceed("never_ask")

    group_id = await lookup_group_fn(tab_id)
    if group_id is None:
        return Decision.proceed("ungoverned")
    if group_id == settings.group:
        return Decision.proceed("same_group")

    url = build_confirmation_url(confirm_page_url, navigation.url, settings.group, tab_id)
    log(f"intercept tab {tab_id}: {domain} wants group {settings.group!r}, tab is in {group_id!r}")
    return Decision.redirect(url)
