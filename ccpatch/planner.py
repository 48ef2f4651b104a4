"""Evaluate a patch set against content and apply the winning rules.

Several rules may find the same logical site (an exact literal for this
build and a structural regex that also happens to match). Per group only the
found rules of the best priority tier are applied; the rest are reported as
superseded. Selected rules are applied in table order, each one re-located on
the output of the previous one.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .engine import splice
from .model import PatchOutcome, PatchState, TargetKind
from .rule_base import PatchRule, PatchSet, evaluate_rule


@dataclass
class PatchPlan:
    """Fresh evaluation of every rule in a patch set."""

    patch_set: PatchSet
    kind: TargetKind
    outcomes: list[PatchOutcome] = field(default_factory=list)

    @property
    def selected(self) -> list[PatchOutcome]:
        return [o for o in self.outcomes if o.selected]

    @property
    def superseded(self) -> list[PatchOutcome]:
        return [o for o in self.outcomes if o.found and not o.selected]

    @property
    def has_work(self) -> bool:
        return any(o.selected for o in self.outcomes)

    def count(self, state: PatchState) -> int:
        return sum(1 for o in self.outcomes if o.state is state)


@dataclass
class AppliedStep:
    rule: str
    replacements: int


def select_outcomes(outcomes: list[PatchOutcome]) -> None:
    """Mark the found outcomes of the best priority tier in each group as selected."""
    best: dict[str, int] = {}
    for o in outcomes:
        if o.found:
            best[o.group] = min(best.get(o.group, o.priority), o.priority)

    for o in outcomes:
        o.selected = o.found and o.priority == best[o.group]


def plan_patch_set(patch_set: PatchSet, content: str, kind: TargetKind) -> PatchPlan:
    outcomes = [evaluate_rule(rule, content, kind) for rule in patch_set.rules]
    select_outcomes(outcomes)
    return PatchPlan(patch_set=patch_set, kind=kind, outcomes=outcomes)


def apply_plan(plan: PatchPlan, content: str) -> tuple[str, list[AppliedStep]]:
    """Apply the selected rules in order and return (new content, steps taken).

    Raises UnsafeReplacementError / SizeMismatchError from the engine; nothing
    is written here.
    """
    steps: list[AppliedStep] = []
    current = content
    rules: list[PatchRule] = plan.patch_set.rules

    for rule, outcome in zip(rules, plan.outcomes):
        if not outcome.selected:
            continue
        # An earlier rule in the chain may already have rewritten this site
        spans = rule.locate(current, plan.kind)
        if not spans:
            continue
        current = splice(current, spans, plan.kind, label=rule.name)
        steps.append(AppliedStep(rule=rule.name, replacements=len(spans)))

    return current, steps
