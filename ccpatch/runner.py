"""End-to-end run of one patch set against one target.

read -> plan -> apply in memory -> encode -> length guard -> backup -> write
-> re-sign. Every check that can fail happens before the backup and the
write, so a refused run leaves the target byte-identical.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .backup import backup_path_for, ensure_backup, restore_backup
from .codesign import adhoc_codesign, needs_codesign
from .engine import (
    PatchError,
    SizeMismatchError,
    decode_content,
    encode_content,
    ensure_same_length,
)
from .model import Target
from .planner import AppliedStep, PatchPlan, apply_plan, plan_patch_set
from .rule_base import PatchSet


class RunStatus(str, Enum):
    PATCHED = "patched"
    WOULD_PATCH = "would-patch"
    ALREADY_APPLIED = "already-applied"
    NOT_FOUND = "not-found"
    UNSAFE = "unsafe"
    SIZE_MISMATCH = "size-mismatch"
    RESTORED = "restored"
    WOULD_RESTORE = "would-restore"
    NO_BACKUP = "no-backup"


EXIT_CODES = {
    RunStatus.PATCHED: 0,
    RunStatus.WOULD_PATCH: 0,
    RunStatus.ALREADY_APPLIED: 0,
    RunStatus.NOT_FOUND: 1,
    RunStatus.UNSAFE: 1,
    RunStatus.SIZE_MISMATCH: 1,
    RunStatus.RESTORED: 0,
    RunStatus.WOULD_RESTORE: 0,
    RunStatus.NO_BACKUP: 1,
}


@dataclass
class RunResult:
    status: RunStatus
    target: Target
    plan: PatchPlan | None = None
    steps: list[AppliedStep] = field(default_factory=list)
    backup: Path | None = None
    backup_created: bool = False
    signed: bool | None = None  # None when no signing was needed
    message: str = ""

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.status]


def patch_target(
    target: Target,
    patch_set: PatchSet,
    dry_run: bool = False,
    sign: bool = True,
) -> RunResult:
    """Apply patch_set to target (or report what would happen when dry_run)."""
    original = target.path.read_bytes()
    content = decode_content(original, target.kind)

    plan = plan_patch_set(patch_set, content, target.kind)
    if not plan.has_work:
        if patch_set.is_already_patched(content, target.kind):
            return RunResult(RunStatus.ALREADY_APPLIED, target, plan)
        return RunResult(RunStatus.NOT_FOUND, target, plan)

    try:
        patched_text, steps = apply_plan(plan, content)
        patched = encode_content(patched_text, target.kind)
        if target.is_native:
            ensure_same_length(original, patched)
    except SizeMismatchError as e:
        return RunResult(RunStatus.SIZE_MISMATCH, target, plan, message=str(e))
    except PatchError as e:
        return RunResult(RunStatus.UNSAFE, target, plan, message=str(e))

    if patched == original:
        return RunResult(RunStatus.ALREADY_APPLIED, target, plan, steps)

    if dry_run:
        return RunResult(RunStatus.WOULD_PATCH, target, plan, steps)

    backup, created = ensure_backup(target.path, patch_set.backup_suffix)
    target.path.write_bytes(patched)

    signed = None
    if sign and needs_codesign(target):
        signed = adhoc_codesign(target.path)

    return RunResult(
        RunStatus.PATCHED,
        target,
        plan,
        steps,
        backup=backup,
        backup_created=created,
        signed=signed,
    )


def restore_target(target: Target, suffix: str, dry_run: bool = False) -> RunResult:
    """Put the pristine backup back. The backup still carries the original signature."""
    backup = backup_path_for(target.path, suffix)
    if not backup.exists():
        return RunResult(RunStatus.NO_BACKUP, target, backup=backup)
    if dry_run:
        return RunResult(RunStatus.WOULD_RESTORE, target, backup=backup)

    restore_backup(target.path, suffix)
    return RunResult(RunStatus.RESTORED, target, backup=backup)
