#!/usr/bin/env python3
"""Tests for rule precedence and chained application."""

from __future__ import annotations

import re
import sys
from pathlib import Path

_this_dir = Path(__file__).resolve().parent
_repo_root = _this_dir.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

from ccpatch.model import PatchState, Priority, TargetKind
from ccpatch.planner import apply_plan, plan_patch_set
from ccpatch.rule_base import ExactRule, PatchSet, RegexRule


SCRIPT = TargetKind.SCRIPT


def _gate_regex(group: str = "site") -> RegexRule:
    return RegexRule(
        name="gate (regex)",
        group=group,
        pattern=re.compile(r"if\(!\w+\)return null;"),
        transform=lambda m: "",
        version_gated=False,
    )


def test_exact_supersedes_regex_in_same_group():
    patch_set = PatchSet(
        name="t",
        title="T",
        rules=[
            _gate_regex(),
            ExactRule(name="gate", group="site", search=("if(!A)return null;",), replacement=""),
        ],
    )
    content = "f(){if(!A)return null;go()}"
    plan = plan_patch_set(patch_set, content, SCRIPT)

    assert [o.rule for o in plan.selected] == ["gate"]
    assert [o.rule for o in plan.superseded] == ["gate (regex)"]

    out, steps = apply_plan(plan, content)
    assert out == "f(){go()}"
    assert [s.rule for s in steps] == ["gate"]


def test_groups_are_independent():
    patch_set = PatchSet(
        name="t",
        title="T",
        rules=[
            ExactRule(name="a", group="one", search=("AAA",), replacement="a"),
            _gate_regex(group="two"),
        ],
    )
    plan = plan_patch_set(patch_set, "AAA;if(!x)return null;", SCRIPT)
    assert {o.rule for o in plan.selected} == {"a", "gate (regex)"}
    assert plan.superseded == []


def test_same_tier_rules_chain_on_previous_output():
    patch_set = PatchSet(
        name="t",
        title="T",
        rules=[
            ExactRule(name="drop x", group="g", search=("x",), replacement=""),
            ExactRule(name="y to w", group="g", search=("y",), replacement="w"),
        ],
    )
    plan = plan_patch_set(patch_set, "xy", SCRIPT)
    assert len(plan.selected) == 2
    out, steps = apply_plan(plan, "xy")
    assert out == "w", f"Got {out!r}"
    assert [s.replacements for s in steps] == [1, 1]


def test_rule_consumed_by_earlier_rule_is_skipped():
    patch_set = PatchSet(
        name="t",
        title="T",
        rules=[
            ExactRule(name="whole", group="g", search=("abc",), replacement="Z"),
            ExactRule(name="part", group="g", search=("b",), replacement="B"),
        ],
    )
    plan = plan_patch_set(patch_set, "abc", SCRIPT)
    out, steps = apply_plan(plan, "abc")
    assert out == "Z"
    assert [s.rule for s in steps] == ["whole"]


def test_nothing_found():
    patch_set = PatchSet(name="t", title="T", rules=[_gate_regex()])
    plan = plan_patch_set(patch_set, "clean()", SCRIPT)
    assert not plan.has_work
    assert plan.count(PatchState.ABSENT) == 1
    assert apply_plan(plan, "clean()") == ("clean()", [])


def test_priority_order():
    assert Priority.EXACT < Priority.MARKER < Priority.REGEX < Priority.HEURISTIC


if __name__ == "__main__":
    print("Testing planner...\n")

    tests = [
        test_exact_supersedes_regex_in_same_group,
        test_groups_are_independent,
        test_same_tier_rules_chain_on_previous_output,
        test_rule_consumed_by_earlier_rule_is_skipped,
        test_nothing_found,
        test_priority_order,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"  FAIL: {test.__name__}: {e}")
            failed += 1

    print(f"\n{'='*40}")
    print(f"Results: {passed} passed, {failed} failed")

    sys.exit(1 if failed > 0 else 0)
