"""Consistency of the isolation policy registry with the code and the contract tests."""

import ast
from pathlib import Path
from typing import Dict, Set

from tests.isolation_policy import POLICIES, POLICY_BOUND_FILES

REPO_ROOT = Path(__file__).resolve().parents[3]
TESTS_DIR = REPO_ROOT / "tests"
CONTRACT_FILE = Path(__file__).with_name("test_navigation_policy_contract.py")


def _cited_policies(path: Path) -> Dict[str, Set[str]]:
    """Map each test function in ``path`` to the policy ids its decorators cite."""
    tree = ast.parse(path.read_text(encoding="utf-8"))
    cited: Dict[str, Set[str]] = {}
    for node in tree.body:
        if not isinstance(node, ast.FunctionDef) or not node.name.startswith("test_"):
            continue
        ids = set()
        for decorator in node.decorator_list:
            if (
                isinstance(decorator, ast.Call)
                and isinstance(decorator.func, ast.Attribute)
                and decorator.func.attr == "policy"
                and decorator.args
                and isinstance(decorator.args[0], ast.Constant)
            ):
                ids.add(decorator.args[0].value)
        cited[node.name] = ids
    return cited


def test_policy_ids_are_contiguous_from_one():
    expected = [f"ISO-{n:03d}" for n in range(1, len(POLICIES) + 1)]

    assert sorted(POLICIES) == expected
    assert all(policy.policy_id == pid for pid, policy in POLICIES.items())


def test_each_policy_names_an_existing_owning_module():
    for pid, policy in POLICIES.items():
        assert policy.module.startswith("tabfence."), pid
        source = REPO_ROOT / (policy.module.replace(".", "/") + ".py")
        assert source.is_file(), f"{pid} points at missing module {policy.module}"


def test_policy_statements_are_distinct():
    statements = [policy.statement.strip().lower() for policy in POLICIES.values()]

    assert len(statements) == len(set(statements))


def test_every_policy_is_pinned_by_the_navigation_contract():
    cited = set().union(*_cited_policies(CONTRACT_FILE).values())

    missing = sorted(set(POLICIES) - cited)
    assert not missing, f"no navigation contract test cites: {', '.join(missing)}"


def test_bound_files_exist_and_cite_only_allowed_policies():
    for name, allowed in POLICY_BOUND_FILES.items():
        paths = list(TESTS_DIR.rglob(name))
        assert len(paths) == 1, f"{name} should exist exactly once under tests/"
        for test_name, ids in _cited_policies(paths[0]).items():
            assert ids, f"{name}::{test_name} cites no policy"
            if allowed is not None:
                assert ids <= allowed, f"{name}::{test_name} cites {sorted(ids - allowed)}"
