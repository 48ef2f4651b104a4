#!/usr/bin/env python3
"""End-to-end runs against files on disk: write guards, backups and restore."""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path

_this_dir = Path(__file__).resolve().parent
_repo_root = _this_dir.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest

from ccpatch.backup import backup_path_for, ensure_backup, restore_backup
from ccpatch.codesign import codesign_command, needs_codesign
from ccpatch.model import Target, TargetKind
from ccpatch.rule_base import ExactRule, PatchSet, get_patch_set
from ccpatch.runner import RunStatus, patch_target, restore_target


BUNDLE = (
    '#!/usr/bin/env node\nvar V={VERSION:"2.1.20"};'
    'A&&(B(),bW({key:"npm-deprecation-warning",text:"switched (to native)",color:"warning"}),C());\n'
).encode("utf-8")


def _script(tmp: str, data: bytes = BUNDLE) -> Target:
    path = Path(tmp) / "cli.js"
    path.write_bytes(data)
    return Target(path=path, kind=TargetKind.SCRIPT, method="test")


def test_patch_writes_and_backs_up_once():
    with tempfile.TemporaryDirectory() as tmp:
        target = _script(tmp)
        result = patch_target(target, get_patch_set("npm-deprecation"), sign=False)

        assert result.status is RunStatus.PATCHED
        assert result.exit_code == 0
        assert result.backup_created
        assert result.backup == Path(tmp) / "cli.js.backup"
        assert result.backup.read_bytes() == BUNDLE
        assert b"npm-deprecation-warning" not in target.path.read_bytes()

        again = patch_target(target, get_patch_set("npm-deprecation"), sign=False)
        assert again.status is RunStatus.ALREADY_APPLIED
        assert again.exit_code == 0
        assert result.backup.read_bytes() == BUNDLE, "Backup must never be overwritten"


def test_dry_run_leaves_file_alone():
    with tempfile.TemporaryDirectory() as tmp:
        target = _script(tmp)
        result = patch_target(target, get_patch_set("npm-deprecation"), dry_run=True)

        assert result.status is RunStatus.WOULD_PATCH
        assert [s.rule for s in result.steps] == ["npm deprecation notification call"]
        assert target.path.read_bytes() == BUNDLE
        assert not backup_path_for(target.path, ".backup").exists()


def test_patch_then_restore_is_byte_identical():
    with tempfile.TemporaryDirectory() as tmp:
        target = _script(tmp)
        patch_target(target, get_patch_set("npm-deprecation"), sign=False)
        assert target.path.read_bytes() != BUNDLE

        dry = restore_target(target, ".backup", dry_run=True)
        assert dry.status is RunStatus.WOULD_RESTORE
        assert target.path.read_bytes() != BUNDLE

        restored = restore_target(target, ".backup")
        assert restored.status is RunStatus.RESTORED
        assert target.path.read_bytes() == BUNDLE


def test_restore_without_backup():
    with tempfile.TemporaryDirectory() as tmp:
        target = _script(tmp)
        result = restore_target(target, ".subagent-models.backup")
        assert result.status is RunStatus.NO_BACKUP
        assert result.exit_code == 1
        with pytest.raises(FileNotFoundError):
            restore_backup(target.path, ".subagent-models.backup")


def test_unrecognised_content_is_not_found():
    with tempfile.TemporaryDirectory() as tmp:
        data = b'#!/usr/bin/env node\nconsole.log("hello")\n'
        target = _script(tmp, data)
        result = patch_target(target, get_patch_set("npm-deprecation"), sign=False)

        assert result.status is RunStatus.NOT_FOUND
        assert result.exit_code == 1
        assert target.path.read_bytes() == data
        assert not backup_path_for(target.path, ".backup").exists()


def test_native_overlong_replacement_refused_before_write():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "claude"
        data = b"\x7fELF\x00\x00" + b"abc" + b"\x00"
        path.write_bytes(data)
        target = Target(path=path, kind=TargetKind.NATIVE)

        patch_set = PatchSet(
            name="t",
            title="T",
            rules=[ExactRule(name="grow", group="g", search=("abc",), replacement="abcd")],
        )
        result = patch_target(target, patch_set, sign=False)

        assert result.status is RunStatus.UNSAFE
        assert result.exit_code == 1
        assert "replacement length 4 > match length 3" in result.message
        assert path.read_bytes() == data
        assert not backup_path_for(path, ".backup").exists()


def test_native_patch_preserves_size():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "2.1.20"
        data = b"\x7fELF\x00" + BUNDLE + b"\x00\xff"
        path.write_bytes(data)
        target = Target(path=path, kind=TargetKind.NATIVE)

        result = patch_target(target, get_patch_set("npm-deprecation"), sign=False)
        assert result.status is RunStatus.PATCHED
        assert len(path.read_bytes()) == len(data)
        # version-style names keep their full name in the backup
        assert result.backup == Path(tmp) / "2.1.20.backup"


def test_ensure_backup_reports_existing():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "cli.js"
        path.write_bytes(b"one")
        backup, created = ensure_backup(path, ".backup")
        assert created
        path.write_bytes(b"two")
        backup, created = ensure_backup(path, ".backup")
        assert not created
        assert backup.read_bytes() == b"one"


def test_codesign_only_for_native_on_macos():
    native = Target(path=Path("/x/claude"), kind=TargetKind.NATIVE)
    script = Target(path=Path("/x/cli.js"), kind=TargetKind.SCRIPT)
    assert needs_codesign(native, platform="darwin")
    assert not needs_codesign(native, platform="linux")
    assert not needs_codesign(script, platform="darwin")
    assert codesign_command(Path("/x/claude")) == ["codesign", "--force", "--deep", "--sign", "-", "/x/claude"]


if __name__ == "__main__":
    print("Testing runner...\n")

    tests = [
        test_patch_writes_and_backs_up_once,
        test_dry_run_leaves_file_alone,
        test_patch_then_restore_is_byte_identical,
        test_restore_without_backup,
        test_unrecognised_content_is_not_found,
        test_native_overlong_replacement_refused_before_write,
        test_native_patch_preserves_size,
        test_ensure_backup_reports_existing,
        test_codesign_only_for_native_on_macos,
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
