"""Ad hoc re-signing of patched native binaries on macOS.

Editing a signed Mach-O invalidates its signature and Gatekeeper kills the
process on launch. An ad hoc signature is enough to run it again.
"""

from __future__ import annotations

import shlex
import subprocess
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .model import Target


console = Console()
err_console = Console(stderr=True)


def codesign_command(path: Path) -> list[str]:
    return ["codesign", "--force", "--deep", "--sign", "-", str(path)]


def needs_codesign(target: Target, platform: str | None = None) -> bool:
    platform = platform or sys.platform
    return target.is_native and platform == "darwin"


def adhoc_codesign(path: Path) -> bool:
    """Re-sign path. Returns False (after a warning) when codesign fails or is missing."""
    cmd = codesign_command(path)
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
    except (OSError, subprocess.CalledProcessError) as e:
        detail = (getattr(e, "stderr", None) or str(e)).strip()
        err_console.print("[yellow]macOS codesign failed. The patched binary may be killed when executed.[/yellow]")
        if detail:
            err_console.print(f"[dim]{escape(detail)}[/dim]")
        err_console.print(f"[yellow]Try manually:[/yellow] {escape(shlex.join(cmd))}")
        return False
    console.print("[green]macOS codesign: re-signed patched native binary (ad-hoc)[/green]")
    return True
