"""Patch rule protocol and registry of patch sets.

A rule knows how to find one kind of patch site and what to put there. It
never edits content itself: locate() returns spans and the engine splices
them. Rules are static configuration, built once per run and never mutated.

Three shapes cover every known site:

- ExactRule: version-specific literal search -> literal replacement
- MarkerCallRule: stable marker string -> enclosing call expression
- RegexRule: structural regex tolerant of minifier renames

The registry maps patch set names (the CLI's positional argument) to
builders.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Protocol, runtime_checkable

from .engine import native_view
from .model import PatchOutcome, PatchState, Priority, Span, TargetKind
from .scanner import DEFAULT_WINDOW, iter_marker_calls


ALL_KINDS = frozenset({TargetKind.SCRIPT, TargetKind.NATIVE})
SCRIPT_ONLY = frozenset({TargetKind.SCRIPT})
NATIVE_ONLY = frozenset({TargetKind.NATIVE})

VERSION_TAG_RE = re.compile(r'VERSION:"(\d+\.\d+\.\d+)"')


def has_version_tag(content: str, version: str) -> bool:
    return f'VERSION:"{version}"' in content


def bundle_version(content: str) -> str | None:
    """The first VERSION:"x.y.z" tag in the bundle, if any."""
    m = VERSION_TAG_RE.search(content)
    return m.group(1) if m else None


@runtime_checkable
class PatchRule(Protocol):
    """Protocol for all patch rules."""

    name: str
    group: str
    priority: Priority
    version: str | None
    version_gated: bool
    kinds: frozenset[TargetKind]

    def locate(self, content: str, kind: TargetKind) -> list[Span]: ...

    def is_applied(self, content: str, kind: TargetKind) -> bool: ...


# ---------------------------------------------------------------------------
# Concrete rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExactRule:
    """Replace any of several literal variants with one literal replacement."""

    name: str
    group: str
    search: tuple[str, ...]
    replacement: str
    version: str | None = None
    kinds: frozenset[TargetKind] = ALL_KINDS
    priority: Priority = Priority.EXACT
    version_gated: bool = False

    def _view(self, kind: TargetKind) -> tuple[list[str], str]:
        if kind is TargetKind.NATIVE:
            return [native_view(s) for s in self.search], native_view(self.replacement)
        return list(self.search), self.replacement

    def locate(self, content: str, kind: TargetKind) -> list[Span]:
        searches, replacement = self._view(kind)
        spans: list[Span] = []
        for search in searches:
            if search == replacement:
                continue
            idx = content.find(search)
            while idx != -1:
                spans.append(Span(idx, idx + len(search), replacement))
                idx = content.find(search, idx + len(search))
        return spans

    def is_applied(self, content: str, kind: TargetKind) -> bool:
        searches, replacement = self._view(kind)
        if replacement not in content:
            return False
        return all(s == replacement or s not in content for s in searches)


@dataclass(frozen=True)
class RegexRule:
    """Rewrite every match of a structural regex through transform(match).

    Matches the transform leaves unchanged count as already applied.
    """

    name: str
    group: str
    pattern: re.Pattern[str]
    transform: Callable[[re.Match[str]], str]
    version: str | None = None
    kinds: frozenset[TargetKind] = ALL_KINDS
    priority: Priority = Priority.REGEX
    version_gated: bool = True
    applied_pattern: re.Pattern[str] | None = None

    def locate(self, content: str, kind: TargetKind) -> list[Span]:
        spans: list[Span] = []
        for m in self.pattern.finditer(content):
            replacement = self.transform(m)
            if replacement != m.group(0):
                spans.append(Span(m.start(), m.end(), replacement))
        return spans

    def is_applied(self, content: str, kind: TargetKind) -> bool:
        for m in self.pattern.finditer(content):
            if self.transform(m) == m.group(0):
                return True
        if self.applied_pattern is not None:
            return self.applied_pattern.search(content) is not None
        return False


@dataclass(frozen=True)
class MarkerCallRule:
    """Neutralise the call expression that contains a stable marker string.

    Scripts: `,callee({...})` in a comma chain is removed outright, any other
    call becomes `void 0`. Native binaries: the call becomes `0` padded with
    spaces to its original length.
    """

    name: str
    group: str
    marker: str
    window: int = DEFAULT_WINDOW
    open_token: str = "({"
    script_replacement: str = "void 0"
    native_replacement: str = "0"
    version: str | None = None
    kinds: frozenset[TargetKind] = ALL_KINDS
    priority: Priority = Priority.MARKER
    version_gated: bool = False
    applied_check: Callable[[str], bool] | None = None

    def locate(self, content: str, kind: TargetKind) -> list[Span]:
        marker = native_view(self.marker) if kind is TargetKind.NATIVE else self.marker
        spans: list[Span] = []
        for site in iter_marker_calls(content, marker, self.window, self.open_token):
            if kind is TargetKind.NATIVE:
                spans.append(Span(site.callee_start, site.end, self.native_replacement))
            elif site.comma_index is not None:
                spans.append(Span(site.comma_index, site.end, ""))
            else:
                spans.append(Span(site.callee_start, site.end, self.script_replacement))
        return spans

    def is_applied(self, content: str, kind: TargetKind) -> bool:
        if self.applied_check is None:
            return False
        return self.applied_check(content)


def evaluate_rule(rule: PatchRule, content: str, kind: TargetKind) -> PatchOutcome:
    """Test one rule against content and report found / already-applied / absent."""
    outcome = PatchOutcome(
        rule=rule.name,
        group=rule.group,
        priority=rule.priority,
        state=PatchState.ABSENT,
    )
    if kind not in rule.kinds:
        return outcome
    if rule.version_gated and rule.version and not has_version_tag(content, rule.version):
        return outcome

    spans = rule.locate(content, kind)
    if spans:
        outcome.state = PatchState.FOUND
        outcome.spans = spans
    elif rule.is_applied(content, kind):
        outcome.state = PatchState.ALREADY_APPLIED
    return outcome


# ---------------------------------------------------------------------------
# Patch sets: one logical behaviour each
# ---------------------------------------------------------------------------

@dataclass
class PatchSet:
    """A named, ordered table of rules plus its idempotence detector."""

    name: str
    title: str
    rules: list[PatchRule] = field(default_factory=list)
    detector: Callable[[str, TargetKind], bool] | None = None
    backup_suffix: str = ".backup"

    def known_replacements(self) -> list[str]:
        """Literal replacements of every exact rule, for already-applied detection."""
        seen: list[str] = []
        for rule in self.rules:
            if isinstance(rule, ExactRule) and rule.replacement not in seen:
                seen.append(rule.replacement)
        return seen

    def is_already_patched(self, content: str, kind: TargetKind) -> bool:
        if self.detector is None:
            return False
        return self.detector(content, kind)


def _thinking(**kwargs) -> PatchSet:
    from .rules.thinking import build_thinking_patch_set
    return build_thinking_patch_set()


def _npm_deprecation(**kwargs) -> PatchSet:
    from .rules.deprecation import build_deprecation_patch_set
    return build_deprecation_patch_set()


def _subagent_models(**kwargs) -> PatchSet:
    from .rules.subagents import build_subagent_patch_set
    return build_subagent_patch_set(kwargs.get("models") or {})


PATCH_SETS: dict[str, Callable[..., PatchSet]] = {
    "thinking": _thinking,
    "npm-deprecation": _npm_deprecation,
    "subagent-models": _subagent_models,
}


def get_patch_set(name: str, **kwargs) -> PatchSet:
    """Build a patch set by name."""
    if name not in PATCH_SETS:
        raise ValueError(
            f"Unknown patch: {name}. Available: {', '.join(PATCH_SETS.keys())}"
        )
    return PATCH_SETS[name](**kwargs)
