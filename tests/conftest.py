"""Collection-time checks for isolation policy citations."""

from pathlib import Path
from typing import List

import pytest

from tests.isolation_policy import POLICIES, POLICY_BOUND_FILES


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "policy(policy_id): cite the isolation behaviour (tests/isolation_policy.py) a test pins down",
    )


def _file_name(item) -> str:
    path = getattr(item, "path", None) or getattr(item, "fspath", "")
    return Path(str(path)).name


def _citation_problems(item) -> List[str]:
    cited = []
    problems = []
    for marker in item.iter_markers(name="policy"):
        if marker.kwargs or len(marker.args) != 1 or not isinstance(marker.args[0], str):
            problems.append(f"{item.nodeid}: policy marker takes exactly one 'ISO-xxx' string")
            continue
        policy_id = marker.args[0]
        if policy_id not in POLICIES:
            problems.append(f"{item.nodeid}: cites unregistered policy {policy_id}")
            continue
        cited.append(policy_id)

    name = _file_name(item)
    if name not in POLICY_BOUND_FILES:
        return problems
    allowed = POLICY_BOUND_FILES[name]
    if not cited and not problems:
        problems.append(f"{item.nodeid}: tests in {name} must cite an isolation policy")
    if allowed is not None:
        for policy_id in cited:
            if policy_id not in allowed:
                problems.append(f"{item.nodeid}: {name} may only cite {', '.join(sorted(allowed))}, not {policy_id}")
    return problems


def pytest_collection_modifyitems(config, items):
    problems = []
    for item in items:
        problems.extend(_citation_problems(item))
    if problems:
        raise pytest.UsageError("isolation policy citations are invalid:\n  " + "\n  ".join(problems))
