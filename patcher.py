#!/usr/bin/env python3
"""Patch an installed Claude Code (npm cli.js or native binary).

Patches:
  thinking         show thinking / redacted thinking blocks inline instead of behind ctrl+o
  npm-deprecation  drop the "switched from npm to native installer" notification
  subagent-models  set the model used by the Plan / Explore / general-purpose subagents
                   from ~/.claude/subagent-models.json

Usage:
    uv run patcher.py thinking [--dry-run] [--verbose]
    uv run patcher.py npm-deprecation --file /path/to/cli.js
    uv run patcher.py subagent-models [--config models.json]
    uv run patcher.py thinking --restore
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.console import Console

from ccpatch.config import env_cli_path, load_subagent_models
from ccpatch.discovery import resolve_target
from ccpatch.formatter import (
    print_discovery_failure,
    print_example_config,
    print_header,
    print_models,
    print_plan,
    print_result,
    print_target,
)
from ccpatch.rule_base import PATCH_SETS, get_patch_set
from ccpatch.runner import patch_target, restore_target


console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ccpatch",
        description="Patch hardcoded UI behaviour in an installed Claude Code.",
    )
    parser.add_argument("patch", choices=list(PATCH_SETS), help="Which patch to apply")
    parser.add_argument("--dry-run", action="store_true", help="Preview changes without writing anything")
    parser.add_argument("--restore", action="store_true", help="Restore the target from its backup")
    parser.add_argument("--file", type=str, default=None, help="Patch this cli.js or native claude binary (skip auto-detection)")
    parser.add_argument("--config", type=Path, default=None, help="subagent-models only: model configuration JSON (default: ~/.claude/subagent-models.json)")
    parser.add_argument("--verbose", action="store_true", help="Show every rule and its outcome")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config is not None and args.patch != "subagent-models":
        parser.error("--config only applies to subagent-models")

    patch_set = get_patch_set(args.patch)
    print_header(patch_set.title)

    discovery = resolve_target(args.file, env_cli_path())
    target = discovery.target
    if target is None:
        print_discovery_failure(discovery)
        return 1
    print_target(target)

    if args.restore:
        result = restore_target(target, patch_set.backup_suffix, dry_run=args.dry_run)
        print_result(result)
        return result.exit_code

    if args.patch == "subagent-models":
        config = load_subagent_models(args.config)
        if config is None:
            print_example_config()
            return 0
        print_models(config)
        patch_set = get_patch_set(args.patch, models=config.models)

    console.print(f"Reading {'claude binary' if target.is_native else 'cli.js'}...")
    result = patch_target(target, patch_set, dry_run=args.dry_run)

    if args.verbose and result.plan is not None:
        print_plan(result.plan)
    print_result(result)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
