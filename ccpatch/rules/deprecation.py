"""npm deprecation banner rule.

Recent npm builds queue a notification keyed "npm-deprecation-warning"
("Claude Code has switched from npm to native installer..."). The key string
is the only stable anchor; the notification call around it is located by
scanning backwards for `({` and bounding the argument list.
"""

from __future__ import annotations

from ..detect import DEPRECATION_MARKER, deprecation_already_patched
from ..model import TargetKind
from ..rule_base import MarkerCallRule, PatchSet


DEPRECATION_RULES = [
    MarkerCallRule(
        name="npm deprecation notification call",
        group="npm-deprecation-notification",
        marker=DEPRECATION_MARKER,
        applied_check=deprecation_already_patched,
    ),
]


def _detector(content: str, kind: TargetKind) -> bool:
    return deprecation_already_patched(content)


def build_deprecation_patch_set() -> PatchSet:
    return PatchSet(
        name="npm-deprecation",
        title="npm deprecation warning",
        rules=list(DEPRECATION_RULES),
        detector=_detector,
    )
