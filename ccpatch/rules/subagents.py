"""Subagent model rules.

The built-in subagents are plain object literals in the bundle:

    X={agentType:"Plan",...,model:"sonnet"}

The configured model replaces the value of `model:` in each definition.
Rules are built per run from the configured roles; unconfigured roles are
left alone.
"""

from __future__ import annotations

import re
from typing import Callable

from ..detect import subagent_models_already_patched
from ..model import TargetKind
from ..rule_base import ExactRule, PatchSet, RegexRule


ROLES = ("Plan", "Explore", "general-purpose")

# v2.0.33 literals; {model} is filled from configuration
PLAN_SEARCH_V2033 = (
    'a3A={agentType:"Plan",whenToUse:Sw.whenToUse,disallowedTools:Sw.disallowedTools,'
    'systemPrompt:Sw.systemPrompt,source:"built-in",tools:Sw.tools,baseDir:"built-in",model:"sonnet"}'
)
EXPLORE_SEARCH_V2033 = (
    "Complete the user's search request efficiently and report your findings clearly.`,"
    'source:"built-in",baseDir:"built-in",model:"haiku"}});var a3A;'
)

MODEL_VALUE_RE = re.compile(r',model:"[^"]+"')


def _with_model(literal: str, model: str) -> str:
    return MODEL_VALUE_RE.sub(lambda _m: f',model:"{model}"', literal)


def definition_re(role: str) -> re.Pattern[str]:
    """A flat `name={agentType:"<role>",...}` object literal (no nested braces)."""
    return re.compile(r'[$\w]+=\{agentType:"' + re.escape(role) + r'"[^}]*\}')


def set_model(model: str) -> Callable[[re.Match[str]], str]:
    """Transform that sets model:"<model>" in a matched definition, adding it if missing."""

    def transform(m: re.Match[str]) -> str:
        text = m.group(0)
        if ',model:"' in text:
            return MODEL_VALUE_RE.sub(lambda _m: f',model:"{model}"', text)
        return text[:-1] + f',model:"{model}"}}'

    return transform


def build_subagent_rules(models: dict[str, str]) -> list:
    rules: list = []

    plan = models.get("Plan")
    if plan:
        rules.append(ExactRule(
            name="Plan agent model",
            group="plan-model",
            search=(PLAN_SEARCH_V2033,),
            replacement=_with_model(PLAN_SEARCH_V2033, plan),
            version="2.0.33",
        ))
        rules.append(RegexRule(
            name="Plan agent model (regex)",
            group="plan-model",
            pattern=definition_re("Plan"),
            transform=set_model(plan),
            version_gated=False,
        ))

    explore = models.get("Explore")
    if explore:
        # The Explore prompt is a template literal, so only the literal form is safe
        rules.append(ExactRule(
            name="Explore agent model",
            group="explore-model",
            search=(EXPLORE_SEARCH_V2033,),
            replacement=_with_model(EXPLORE_SEARCH_V2033, explore),
            version="2.0.33",
        ))

    general = models.get("general-purpose")
    if general:
        rules.append(RegexRule(
            name="general-purpose agent model (regex)",
            group="general-purpose-model",
            pattern=definition_re("general-purpose"),
            transform=set_model(general),
            version_gated=False,
        ))

    return rules


def build_subagent_patch_set(models: dict[str, str]) -> PatchSet:
    def detector(content: str, kind: TargetKind) -> bool:
        return subagent_models_already_patched(content, models)

    return PatchSet(
        name="subagent-models",
        title="Subagent models",
        rules=build_subagent_rules(models),
        detector=detector,
        backup_suffix=".subagent-models.backup",
    )
