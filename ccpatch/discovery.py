"""Locate the installed Claude Code distributable.

An explicit path (--file, then CLAUDE_CODE_CLI_PATH) always wins. Otherwise
npm-style installs are preferred over the native binary, in this order:

1. local install under ~/.claude/local or ~/.config/claude/local
2. `npm root -g`
3. the lib/node_modules next to the `node` on PATH
4. `claude` on PATH (its cli.js, or the executable itself when native)
5. the native installer's ~/.local/bin/claude and ~/.local/share/claude/versions

Every path tried is recorded with the method that produced it so a failed
search can be explained.
"""

from __future__ import annotations

import re
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .config import CLI_PATH_ENV
from .model import Target, TargetKind
from .target import classify_target


PACKAGE_CLI = Path("@anthropic-ai") / "claude-code" / "cli.js"

VERSION_NAME_RE = re.compile(r"(\d+)\.(\d+)\.(\d+)")


@dataclass
class Attempt:
    path: Path
    method: str


@dataclass
class Discovery:
    """Result of a search: the target (if any) and every path tried."""

    target: Target | None = None
    attempts: list[Attempt] = field(default_factory=list)

    def by_method(self) -> dict[str, list[Path]]:
        grouped: dict[str, list[Path]] = {}
        for attempt in self.attempts:
            grouped.setdefault(attempt.method, []).append(attempt.path)
        return grouped

    def check(self, path: Path | None, method: str, want: TargetKind | None = None) -> Target | None:
        """Record path and return it as a Target if it exists and classifies (as want)."""
        if path is None:
            return None
        self.attempts.append(Attempt(path, method))
        if not path.exists():
            return None
        try:
            real = path.resolve(strict=True)
        except OSError:
            real = path
        if not real.is_file():
            return None
        kind = classify_target(real)
        if kind is TargetKind.UNKNOWN or (want is not None and kind is not want):
            return None
        self.target = Target(path=real, kind=kind, method=method)
        return self.target


def npm_global_root() -> Path | None:
    try:
        proc = subprocess.run(
            ["npm", "root", "-g"], capture_output=True, text=True, check=True, timeout=15
        )
    except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired):
        return None
    out = proc.stdout.strip()
    return Path(out) if out else None


def version_key(name: str) -> tuple[int, ...]:
    m = VERSION_NAME_RE.search(name)
    return tuple(int(g) for g in m.groups()) if m else (0,)


def native_candidates(home: Path) -> list[Path]:
    candidates = [home / ".local" / "bin" / "claude"]
    versions_dir = home / ".local" / "share" / "claude" / "versions"
    try:
        entries = [p for p in versions_dir.iterdir() if ".backup" not in p.name]
    except OSError:
        entries = []
    entries.sort(key=lambda p: version_key(p.name), reverse=True)
    return candidates + entries


def _lib_cli_beside(bin_path: Path) -> Path:
    """<prefix>/bin/x -> <prefix>/lib/node_modules/@anthropic-ai/claude-code/cli.js"""
    return bin_path.parent.parent / "lib" / "node_modules" / PACKAGE_CLI


def find_installation(
    home: Path | None = None,
    which: Callable[[str], str | None] = shutil.which,
    npm_root: Callable[[], Path | None] = npm_global_root,
) -> Discovery:
    home = home or Path.home()
    found = Discovery()
    script = TargetKind.SCRIPT

    for local in (
        home / ".claude" / "local" / "node_modules" / PACKAGE_CLI,
        home / ".config" / "claude" / "local" / "node_modules" / PACKAGE_CLI,
    ):
        if found.check(local, "local installation", script):
            return found

    root = npm_root()
    if root is not None and found.check(root / PACKAGE_CLI, "npm root -g", script):
        return found

    node = which("node")
    if node and found.check(_lib_cli_beside(Path(node).resolve()), "derived from node on PATH", script):
        return found

    claude = which("claude")
    if claude:
        real = Path(claude).resolve()
        if real.name == "cli.js" and found.check(real, "which claude", script):
            return found
        if found.check(_lib_cli_beside(real), "which claude", script):
            return found
        if found.check(real, "which claude (native)", TargetKind.NATIVE):
            return found

    for candidate in native_candidates(home):
        if found.check(candidate, "native/binary default paths", TargetKind.NATIVE):
            return found

    return found


def resolve_override(path: str | Path, method: str) -> Discovery:
    found = Discovery()
    found.check(Path(path).expanduser().absolute(), method)
    return found


def resolve_target(
    file_arg: str | None = None,
    env_path: str | None = None,
    **search,
) -> Discovery:
    """Honour --file, then the environment override, then search."""
    if file_arg:
        return resolve_override(file_arg, "--file")
    if env_path:
        return resolve_override(env_path, CLI_PATH_ENV)
    return find_installation(**search)
