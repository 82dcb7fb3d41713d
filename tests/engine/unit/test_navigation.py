import asyncio

from tabfence.engine.exemptions import ExemptionTracker
from tabfence.engine.navigation import decide
from tabfence.isolation.records import Navigation, PageSettings

CONFIRM = "moz-extension://x/background/confirm.html"


def _run(navigation, settings=None, group=None, exemptions=None):
    lookups = []

    async def lookup_settings(domain):
        lookups.append(("settings", domain))
        return settings

    async def lookup_group(tab_id):
        lookups.append(("group", tab_id))
        return group

    decision = asyncio.run(
        decide(
            navigation,
            exemptions=exemptions or ExemptionTracker(),
            lookup_settings_fn=lookup_settings,
            lookup_group_fn=lookup_group,
            confirm_page_url=CONFIRM,
        )
    )
    return decision, lookups


def test_filtered_navigations_never_touch_the_stores():
    for navigation in (
        Navigation(url="https://a.com/", tab_id=1, frame_id=5),
        Navigation(url="https://a.com/", tab_id=-1),
    ):
        decision, lookups = _run(navigation, settings=PageSettings(group="g2"), group="g1")
        assert not decision.is_redirect
        assert lookups == []


def test_exemption_short_circuits_before_settings_lookup():
    exemptions = ExemptionTracker()
    exemptions.grant(1, "a.com")

    decision, lookups = _run(Navigation(url="https://a.com/x", tab_id=1), PageSettings(group="g2"), "g1", exemptions)

    assert decision.reason == "exempt"
    assert lookups == []


def test_lookup_order_is_settings_then_group():
    decision, lookups = _run(Navigation(url="https://A.com:444/x", tab_id=1), PageSettings(group="g2"), "g1")

    assert decision.is_redirect
    assert lookups == [("settings", "a.com"), ("group", 1)]


def test_no_policy_and_never_ask_skip_group_lookup():
    decision, lookups = _run(Navigation(url="https://a.com/", tab_id=1), None, "g1")
    assert decision.reason == "no_policy"
    assert lookups == [("settings", "a.com")]

    decision, lookups = _run(Navigation(url="https://a.com/", tab_id=1), PageSettings(group="g2", never_ask=True), "g1")
    assert decision.reason == "never_ask"
    assert lookups == [("settings", "a.com")]


def test_group_comparison_is_plain_equality():
    decision, _ = _run(Navigation(url="https://a.com/", tab_id=1), PageSettings(group=2), 2)
    assert decision.reason == "same_group"

    decision, _ = _run(Navigation(url="https://a.com/", tab_id=1), PageSettings(group=2), "2")
    assert decision.is_redirect


def test_redirect_url_carries_destination_group_and_tab():
    decision, _ = _run(Navigation(url="https://a.com/(x)", tab_id=9), PageSettings(group="g2"), "g1")

    assert decision.redirect_url == f"{CONFIRM}?url=https%3A%2F%2Fa.com%2F%28x%29&groupId=g2&tabId=9"


def test_trailing_dot_host_shares_the_exemption_and_policy_lookup():
    exemptions = ExemptionTracker()
    exemptions.grant(7, "example.com")

    decision, lookups = _run(Navigation(url="https://example.com./", tab_id=7), PageSettings(group="g2"), "g1", exemptions)
    assert decision.reason == "exempt"
    assert lookups == []

    decision, lookups = _run(Navigation(url="https://Example.com./", tab_id=8), PageSettings(group="g2"), "g1", exemptions)
    assert decision.is_redirect
    assert lookups[0] == ("settings", "example.com")
