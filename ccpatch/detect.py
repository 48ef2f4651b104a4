"""Already-applied heuristics.

These run only when no rule reports a patch site, to tell "already patched"
apart from "unrecognised build". They never trigger or block a write.
"""

from __future__ import annotations

import re

from .engine import native_view
from .model import TargetKind


# Patched thinking call site forces transcript mode and disables hideInTranscript
PATCHED_THINKING_RES = (
    re.compile(r'case"thinking":\{[\s\S]{0,1400}?isTranscriptMode:!0[\s\S]{0,1400}?hideInTranscript:!1'),
    re.compile(r'case"thinking":return[\s\S]{0,1400}?isTranscriptMode:!0[\s\S]{0,1400}?hideInTranscript:!1'),
)

# Redacted thinking returns straight away once the gate is gone
UNGATED_REDACTED_RE = re.compile(r'case"redacted_thinking":\{?(?:let |return)[\s\S]{0,500}?addMargin:')
GATED_REDACTED_RE = re.compile(r'case"redacted_thinking":\{?if\(!')

DEPRECATION_MARKER = 'key:"npm-deprecation-warning"'

BUNDLE_VERSION_RE = re.compile(r'VERSION:"\d+\.\d+\.\d+"')


def thinking_already_patched(
    content: str,
    kind: TargetKind,
    known_replacements: list[str] | tuple[str, ...] = (),
) -> bool:
    for literal in known_replacements:
        if kind is TargetKind.NATIVE:
            literal = native_view(literal)
        if literal in content:
            return True

    if any(r.search(content) for r in PATCHED_THINKING_RES):
        return True

    return bool(UNGATED_REDACTED_RE.search(content)) and not GATED_REDACTED_RE.search(content)


def looks_like_bundle(content: str) -> bool:
    return BUNDLE_VERSION_RE.search(content) is not None


def deprecation_already_patched(content: str) -> bool:
    """The banner call is gone from a recognisable Claude Code bundle."""
    return DEPRECATION_MARKER not in content and looks_like_bundle(content)


def subagent_models_already_patched(content: str, models: dict[str, str]) -> bool:
    """Every configured agent definition already carries its configured model."""
    if not models:
        return False
    for role, model in models.items():
        pattern = re.compile(
            r'agentType:"' + re.escape(role) + r'"[\s\S]{0,6000}?model:"' + re.escape(model) + '"'
        )
        if not pattern.search(content):
            return False
    return True
