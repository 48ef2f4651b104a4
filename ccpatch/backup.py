"""Backup and restore of patched targets.

A backup sits next to the target as `<name><suffix>`. It is made once, from
the pristine file, and never overwritten, so restoring always returns the
original install no matter how many times the patch was re-run.
"""

from __future__ import annotations

import shutil
from pathlib import Path


def backup_path_for(path: Path, suffix: str) -> Path:
    # with_suffix would clobber version-style names like 2.1.17
    return path.with_name(path.name + suffix)


def ensure_backup(path: Path, suffix: str) -> tuple[Path, bool]:
    """Copy path to its backup if none exists yet. Returns (backup path, created)."""
    backup = backup_path_for(path, suffix)
    if backup.exists():
        return backup, False
    shutil.copy2(path, backup)
    return backup, True


def restore_backup(path: Path, suffix: str) -> Path:
    """Copy the backup over path. Raises FileNotFoundError if there is no backup."""
    backup = backup_path_for(path, suffix)
    if not backup.exists():
        raise FileNotFoundError(f"Backup file not found at: {backup}")
    # copyfile keeps the target's own mode bits
    shutil.copyfile(backup, path)
    return backup
