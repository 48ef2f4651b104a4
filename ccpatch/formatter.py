"""Console output for discovery, plans and run results."""

from __future__ import annotations

import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import EXAMPLE_MODELS, KNOWN_MODELS, SUBAGENT_ROLES, ModelConfig
from .discovery import Discovery
from .model import PatchState, Target
from .planner import PatchPlan
from .runner import RunResult, RunStatus


console = Console()
err_console = Console(stderr=True)


TROUBLESHOOTING = (
    "Verify Claude Code is installed: claude --version",
    "For local install: check ~/.claude/local or ~/.config/claude/local",
    'For global install: ensure "npm install -g @anthropic-ai/claude-code" succeeded',
    "For native/binary install: check ~/.local/bin/claude and ~/.local/share/claude/versions",
    "Or point at the file directly with --file PATH or CLAUDE_CODE_CLI_PATH",
)


def print_header(title: str) -> None:
    console.print(f"[bold]Claude Code {title} patcher[/bold]\n")


def print_target(target: Target) -> None:
    console.print(f"Found Claude Code at: {escape(str(target.path))}")
    console.print(f"Installation type: {target.label} [dim]({target.method})[/dim]\n")


def print_discovery_failure(discovery: Discovery) -> None:
    err_console.print("[red]Error: could not find a Claude Code installation[/red]\n")

    grouped = discovery.by_method()
    if grouped:
        err_console.print("Searched using the following methods:\n")
        for method, paths in grouped.items():
            err_console.print(f"  [bold]\\[{escape(method)}][/bold]")
            for p in paths:
                err_console.print(f"    - {escape(str(p))}")

    err_console.print("\n[bold]Troubleshooting:[/bold]")
    for i, hint in enumerate(TROUBLESHOOTING, 1):
        err_console.print(f"  {i}. {escape(hint)}")


def print_plan(plan: PatchPlan) -> None:
    """Per-rule outcome table (--verbose)."""
    table = Table(title=f"{plan.patch_set.title}: rule outcomes", show_header=True)
    table.add_column("Rule", style="bold")
    table.add_column("Group")
    table.add_column("Tier", justify="right")
    table.add_column("State")
    table.add_column("Sites", justify="right")

    for o in plan.outcomes:
        if o.selected:
            state = "[green]selected[/green]"
        elif o.found:
            state = "[yellow]superseded[/yellow]"
        elif o.state is PatchState.ALREADY_APPLIED:
            state = "[yellow]already applied[/yellow]"
        else:
            state = "[dim]absent[/dim]"
        table.add_row(
            escape(o.rule),
            o.group,
            o.priority.name.lower(),
            state,
            str(len(o.spans)) if o.spans else "",
        )

    console.print(table)


def print_steps(result: RunResult) -> None:
    for step in result.steps:
        suffix = f" x{step.replacements}" if step.replacements > 1 else ""
        console.print(f"  [green]✓[/green] {escape(step.rule)}{suffix}")


def print_result(result: RunResult) -> None:
    status = result.status

    if status is RunStatus.WOULD_PATCH:
        console.print("[bold]DRY RUN - no changes will be made[/bold]\n")
        console.print("Patches that would be applied:")
        print_steps(result)
        console.print("\nRun without --dry-run to apply patches.")

    elif status is RunStatus.PATCHED:
        if result.backup_created:
            console.print(f"[green]Backup created:[/green] {escape(str(result.backup))}")
        elif result.backup is not None:
            console.print(f"[dim]Keeping existing backup: {escape(str(result.backup))}[/dim]")
        console.print("Applied patches:")
        print_steps(result)
        console.print("\n[green]Patches applied! Please restart Claude Code for changes to take effect.[/green]")
        if result.backup is not None:
            console.print("[dim]To restore the original, run with --restore[/dim]")

    elif status is RunStatus.ALREADY_APPLIED:
        console.print("[yellow]Patches already applied, nothing to do.[/yellow]")

    elif status is RunStatus.NOT_FOUND:
        err_console.print("[red]Error: pattern not found, the Claude Code version may have changed.[/red]")
        err_console.print("The file was not modified. Run with --verbose to see which rules were tried.")

    elif status is RunStatus.UNSAFE:
        err_console.print(f"[red]Error: {escape(result.message)}[/red]")
        err_console.print("The file was not modified.")

    elif status is RunStatus.SIZE_MISMATCH:
        err_console.print(f"[red]{escape(result.message)}[/red]")
        err_console.print(
            "This would likely corrupt the native binary. "
            "Use an npm/local cli.js install or shorter replacement values."
        )

    elif status is RunStatus.WOULD_RESTORE:
        console.print(f"[bold]DRY RUN[/bold] would restore from: {escape(str(result.backup))}")

    elif status is RunStatus.RESTORED:
        console.print(f"[green]Restored successfully from {escape(str(result.backup))}[/green]")
        console.print("\nPlease restart Claude Code for changes to take effect.")

    elif status is RunStatus.NO_BACKUP:
        err_console.print(f"[red]Error: backup file not found at: {escape(str(result.backup))}[/red]")
        err_console.print("\nTip: the backup is created when you first apply the patch.")


def print_models(config: ModelConfig) -> None:
    console.print(f"Found model configuration in: {escape(str(config.path))}\n")
    console.print("[bold]Model configuration:[/bold]")
    for role in SUBAGENT_ROLES:
        console.print(f"  {role}: {escape(config.models.get(role, '(not set)'))}")
    console.print()


def print_example_config() -> None:
    console.print("[yellow]No model configuration found[/yellow]\n")
    console.print("To configure subagent models, create ~/.claude/subagent-models.json:\n")
    console.print(escape(json.dumps(EXAMPLE_MODELS, indent=2)), highlight=False)
    console.print(f"\nValid model values include: {', '.join(KNOWN_MODELS)}")
