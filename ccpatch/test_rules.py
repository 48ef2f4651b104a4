#!/usr/bin/env python3
"""Tests for the rule shapes and the three patch sets.

Fixtures are cut-down bundles built around the real minified call sites.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

_this_dir = Path(__file__).resolve().parent
_repo_root = _this_dir.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest

from ccpatch.engine import UnsafeReplacementError, native_view, splice
from ccpatch.model import PatchState, Priority, TargetKind
from ccpatch.planner import apply_plan, plan_patch_set
from ccpatch.rule_base import (
    ExactRule,
    MarkerCallRule,
    PatchSet,
    RegexRule,
    evaluate_rule,
    get_patch_set,
)
from ccpatch.rules import subagents, thinking


SCRIPT = TargetKind.SCRIPT
NATIVE = TargetKind.NATIVE


def _patch(patch_set: PatchSet, content: str, kind: TargetKind) -> str:
    plan = plan_patch_set(patch_set, content, kind)
    assert plan.has_work, "Expected at least one rule to apply"
    out, _ = apply_plan(plan, content)
    return out


# ---------------------------------------------------------------------------
# Rule shapes
# ---------------------------------------------------------------------------

GATE_RULE = RegexRule(
    name="remove short-circuit gate",
    group="gate",
    pattern=re.compile(r'(case"[^"]+":)if\(![$\w]+&&![$\w]+\)return null;'),
    transform=lambda m: m.group(1),
    version_gated=False,
)


def test_gate_removal():
    content = 'case"x":if(!A&&!B)return null;return f(y);'
    outcome = evaluate_rule(GATE_RULE, content, SCRIPT)
    assert outcome.state is PatchState.FOUND
    out = splice(content, outcome.spans, SCRIPT)
    assert out == 'case"x":return f(y);', f"Got {out!r}"
    assert evaluate_rule(GATE_RULE, out, SCRIPT).state is not PatchState.FOUND


def test_marker_call_native_span():
    rule = MarkerCallRule(name="m", group="g", marker='key:"marker"')
    content = 'x=1;foo({a:1,key:"marker"});y'
    outcome = evaluate_rule(rule, content, NATIVE)
    assert outcome.found
    [span] = outcome.spans
    assert content[span.start:span.end] == 'foo({a:1,key:"marker"})'
    assert span.replacement == "0"

    out = splice(content, outcome.spans, NATIVE)
    assert len(out) == len(content)
    assert out == "x=1;0" + " " * 22 + ";y", f"Got {out!r}"


def test_marker_call_script_replacements():
    rule = MarkerCallRule(name="m", group="g", marker='key:"marker"')

    chained = 'a(),foo({key:"marker"}),b()'
    out = splice(chained, evaluate_rule(rule, chained, SCRIPT).spans, SCRIPT)
    assert out == "a(),b()", f"Got {out!r}"

    statement = 'if(x)foo({key:"marker"});'
    out = splice(statement, evaluate_rule(rule, statement, SCRIPT).spans, SCRIPT)
    assert out == "if(x)void 0;", f"Got {out!r}"


def test_exact_rule_states():
    rule = ExactRule(name="e", group="g", search=("old1", "old2"), replacement="new")
    assert evaluate_rule(rule, "a old1 b old2 c old1", SCRIPT).spans.__len__() == 3
    assert evaluate_rule(rule, "a new b", SCRIPT).state is PatchState.ALREADY_APPLIED
    assert evaluate_rule(rule, "a new old1", SCRIPT).state is PatchState.FOUND
    assert evaluate_rule(rule, "nothing", SCRIPT).state is PatchState.ABSENT


def test_exact_rule_kinds_and_version_gate():
    rule = ExactRule(
        name="e", group="g", search=("old",), replacement="new",
        version="9.9.9", kinds=frozenset({SCRIPT}), version_gated=True,
    )
    assert evaluate_rule(rule, "old", SCRIPT).state is PatchState.ABSENT
    assert evaluate_rule(rule, 'VERSION:"9.9.9";old', SCRIPT).found
    assert evaluate_rule(rule, 'VERSION:"9.9.9";old', NATIVE).state is PatchState.ABSENT


def test_registry_rejects_unknown_name():
    with pytest.raises(ValueError):
        get_patch_set("nope")


# ---------------------------------------------------------------------------
# npm deprecation
# ---------------------------------------------------------------------------

DEPRECATION_BUNDLE = (
    'var x={VERSION:"2.1.20"};function Q(){'
    'A&&(B(),bW({key:"npm-deprecation-warning",text:"Claude Code has switched from npm to native installer. '
    'Run `claude install` (or see https://x.y) for more options.",color:"warning",priority:"high"}),C())}'
)


def test_deprecation_script_removes_call():
    patch_set = get_patch_set("npm-deprecation")
    out = _patch(patch_set, DEPRECATION_BUNDLE, SCRIPT)
    assert "npm-deprecation-warning" not in out
    assert "A&&(B(),C())" in out, f"Got {out!r}"
    assert patch_set.is_already_patched(out, SCRIPT)


def test_deprecation_native_keeps_length():
    patch_set = get_patch_set("npm-deprecation")
    out = _patch(patch_set, DEPRECATION_BUNDLE, NATIVE)
    assert len(out) == len(DEPRECATION_BUNDLE)
    assert ",0 " in out
    assert "npm-deprecation-warning" not in out


def test_deprecation_idempotent():
    patch_set = get_patch_set("npm-deprecation")
    out = _patch(patch_set, DEPRECATION_BUNDLE, SCRIPT)
    plan = plan_patch_set(patch_set, out, SCRIPT)
    assert not plan.has_work
    assert plan.count(PatchState.ALREADY_APPLIED) == 1


def test_deprecation_not_found_on_foreign_content():
    patch_set = get_patch_set("npm-deprecation")
    content = 'console.log("hello")'
    plan = plan_patch_set(patch_set, content, SCRIPT)
    assert not plan.has_work
    assert not patch_set.is_already_patched(content, SCRIPT)


# ---------------------------------------------------------------------------
# thinking
# ---------------------------------------------------------------------------

def test_thinking_v2062_literals():
    patch_set = get_patch_set("thinking")
    content = (
        'VERSION:"2.0.62";' + thinking.BANNER_SEARCH_V2062
        + ";switch(t){" + thinking.THINKING_SEARCH_V2062 + "}"
    )
    out = _patch(patch_set, content, SCRIPT)
    assert thinking.BANNER_REPLACEMENT_V2062 in out
    assert thinking.THINKING_REPLACEMENT_V2062 in out

    plan = plan_patch_set(patch_set, out, SCRIPT)
    assert not plan.has_work, "Patched bundle must not report new sites"
    assert patch_set.is_already_patched(out, SCRIPT)


V2114_BUNDLE = (
    'VERSION:"2.1.14";switch(x){'
    'case"redacted_thinking":if(!D&&!H)return null;return q3.createElement(ru2,{addMargin:Q});'
    'case"thinking":{if(!D&&!H)return null;return q3.createElement(Zx,{addMargin:Q,param:A,'
    "isTranscriptMode:D,verbose:H,hideInTranscript:D&&!K})}}"
)


def test_thinking_v2114_regex():
    patch_set = get_patch_set("thinking")
    out = _patch(patch_set, V2114_BUNDLE, SCRIPT)
    assert 'case"redacted_thinking":return q3.createElement(ru2,{addMargin:Q});' in out
    assert (
        'case"thinking":{return q3.createElement(Zx,{addMargin:Q,param:A,'
        "isTranscriptMode:!0,verbose:H,hideInTranscript:!1})}"
    ) in out, f"Got {out!r}"
    assert not plan_patch_set(patch_set, out, SCRIPT).has_work
    assert patch_set.is_already_patched(out, SCRIPT)


def test_thinking_version_gate_blocks_other_builds():
    patch_set = get_patch_set("thinking")
    content = V2114_BUNDLE.replace('VERSION:"2.1.14"', 'VERSION:"2.1.99"')
    plan = plan_patch_set(patch_set, content, SCRIPT)
    assert not plan.has_work
    assert not patch_set.is_already_patched(content, SCRIPT)


V2130_BUNDLE = (
    'VERSION:"2.1.30";'
    'case"redacted_thinking":{if(!a&&!b)return null;let f;return f}'
    'case"thinking":{if(!a&&!b)return null;let T=1,k;'
    "k=R.createElement(Th,{addMargin:Y,param:q,isTranscriptMode:a,hideInTranscript:T});return k}"
)


def test_thinking_v2130_script():
    patch_set = get_patch_set("thinking")
    out = _patch(patch_set, V2130_BUNDLE, SCRIPT)
    assert 'case"redacted_thinking":{let f;return f}' in out
    assert (
        'case"thinking":{let T=1,k;'
        "k=R.createElement(Th,{addMargin:Y,param:q,isTranscriptMode:!0,hideInTranscript:!1});return k}"
    ) in out, f"Got {out!r}"


def test_thinking_v2130_native_keeps_length():
    patch_set = get_patch_set("thinking")
    out = _patch(patch_set, V2130_BUNDLE, NATIVE)
    assert len(out) == len(V2130_BUNDLE)
    assert "isTranscriptMode:!0,hideInTranscript:!1" in out
    assert "return null" not in out
    assert patch_set.is_already_patched(out, NATIVE)
    assert not plan_patch_set(patch_set, out, NATIVE).has_work


def test_thinking_native_exact_supersedes_heuristic():
    patch_set = get_patch_set("thinking")
    content = native_view(
        "\x00bun\x00"
        + thinking.REDACTED_THINKING_CALL_SITE_SEARCH_V2117_NATIVE
        + thinking.THINKING_CALL_SITE_SEARCH_V2117_NATIVE
    )
    plan = plan_patch_set(patch_set, content, NATIVE)
    selected = {o.rule for o in plan.selected}
    superseded = {o.rule for o in plan.superseded}
    assert selected == {
        "v2.1.17 native redacted_thinking call site",
        "v2.1.17 native thinking call site",
    }, f"Selected {selected}"
    assert "native redacted_thinking call site (regex)" in superseded
    assert all(o.priority is Priority.HEURISTIC for o in plan.superseded)

    out, steps = apply_plan(plan, content)
    assert len(out) == len(content)
    assert len(steps) == 2
    assert thinking.THINKING_CALL_SITE_REPLACEMENT_V2117_NATIVE in out
    assert not plan_patch_set(patch_set, out, NATIVE).has_work


def test_thinking_native_heuristic_on_unknown_build():
    patch_set = get_patch_set("thinking")
    content = (
        '\x00case"redacted_thinking":if(!X&&!E&&!W)return null;return z1.createElement(a_9,{addMargin:A});'
        'case"thinking":{if(!X&&!E)return null;return z1.createElement(QQ,{addMargin:A,param:H,'
        "isTranscriptMode:X,verbose:E,hideInTranscript:X&&!(!K||J===K)})}"
    )
    out = _patch(patch_set, content, NATIVE)
    assert len(out) == len(content)
    assert 'case"redacted_thinking":return z1.createElement(a_9,{addMargin:A});' in out
    assert "isTranscriptMode:!0,verbose:E,hideInTranscript:!1})}" in out
    assert patch_set.is_already_patched(out, NATIVE)


def test_thinking_table_is_well_formed():
    names = [rule.name for rule in thinking.THINKING_RULES]
    assert len(names) == len(set(names)), "Rule names must be unique"
    for rule in thinking.THINKING_RULES:
        if isinstance(rule, ExactRule):
            assert rule.version, f"{rule.name} has no build version"
            assert all(s != rule.replacement for s in rule.search), rule.name


# ---------------------------------------------------------------------------
# subagent models
# ---------------------------------------------------------------------------

GENERAL_PURPOSE = 'Y01={agentType:"general-purpose",whenToUse:"x",tools:["*"],source:"built-in",baseDir:"built-in"}'

SUBAGENT_BUNDLE = (
    'VERSION:"2.0.33";var Sw={};'
    + GENERAL_PURPOSE + ";"
    + "X={agentType:\"Explore\",systemPrompt:`" + subagents.EXPLORE_SEARCH_V2033
    + subagents.PLAN_SEARCH_V2033 + ";"
)


def test_subagent_models_rewrite_all_roles():
    models = {"Plan": "opus", "Explore": "sonnet", "general-purpose": "haiku"}
    patch_set = get_patch_set("subagent-models", models=models)
    assert patch_set.backup_suffix == ".subagent-models.backup"

    out = _patch(patch_set, SUBAGENT_BUNDLE, SCRIPT)
    assert 'baseDir:"built-in",model:"opus"}' in out
    assert 'baseDir:"built-in",model:"sonnet"}});var a3A;' in out
    assert 'Y01={agentType:"general-purpose",whenToUse:"x",tools:["*"],source:"built-in",baseDir:"built-in",model:"haiku"}' in out
    assert patch_set.is_already_patched(out, SCRIPT)
    assert not plan_patch_set(patch_set, out, SCRIPT).has_work


def test_subagent_exact_supersedes_regex():
    patch_set = get_patch_set("subagent-models", models={"Plan": "opus"})
    plan = plan_patch_set(patch_set, SUBAGENT_BUNDLE, SCRIPT)
    assert [o.rule for o in plan.selected] == ["Plan agent model"]
    assert [o.rule for o in plan.superseded] == ["Plan agent model (regex)"]


def test_subagent_same_model_is_already_applied():
    patch_set = get_patch_set("subagent-models", models={"Plan": "sonnet"})
    plan = plan_patch_set(patch_set, SUBAGENT_BUNDLE, SCRIPT)
    assert not plan.has_work
    assert plan.count(PatchState.ALREADY_APPLIED) == 2
    assert patch_set.is_already_patched(SUBAGENT_BUNDLE, SCRIPT)


def test_subagent_general_purpose_replaces_existing_model():
    patch_set = get_patch_set("subagent-models", models={"general-purpose": "opus"})
    content = 'Y01={agentType:"general-purpose",tools:["*"],model:"sonnet"}'
    out = _patch(patch_set, content, SCRIPT)
    assert out == 'Y01={agentType:"general-purpose",tools:["*"],model:"opus"}', f"Got {out!r}"


def test_subagent_native_longer_model_refused():
    patch_set = get_patch_set("subagent-models", models={"Plan": "claude-opus-long-name"})
    plan = plan_patch_set(patch_set, SUBAGENT_BUNDLE, NATIVE)
    assert plan.has_work
    with pytest.raises(UnsafeReplacementError):
        apply_plan(plan, SUBAGENT_BUNDLE)


if __name__ == "__main__":
    print("Testing rules...\n")

    tests = [
        test_gate_removal,
        test_marker_call_native_span,
        test_marker_call_script_replacements,
        test_exact_rule_states,
        test_exact_rule_kinds_and_version_gate,
        test_registry_rejects_unknown_name,
        test_deprecation_script_removes_call,
        test_deprecation_native_keeps_length,
        test_deprecation_idempotent,
        test_deprecation_not_found_on_foreign_content,
        test_thinking_v2062_literals,
        test_thinking_v2114_regex,
        test_thinking_version_gate_blocks_other_builds,
        test_thinking_v2130_script,
        test_thinking_v2130_native_keeps_length,
        test_thinking_native_exact_supersedes_heuristic,
        test_thinking_native_heuristic_on_unknown_build,
        test_thinking_table_is_well_formed,
        test_subagent_models_rewrite_all_roles,
        test_subagent_exact_supersedes_regex,
        test_subagent_same_model_is_already_applied,
        test_subagent_general_purpose_replaces_existing_model,
        test_subagent_native_longer_model_refused,
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
