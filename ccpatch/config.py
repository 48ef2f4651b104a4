"""Environment settings and the subagent-models.json sidecar."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console


err_console = Console(stderr=True)

CLI_PATH_ENV = "CLAUDE_CODE_CLI_PATH"

SUBAGENT_ROLES = ("Plan", "Explore", "general-purpose")

EXAMPLE_MODELS = {
    "Plan": "sonnet",
    "Explore": "haiku",
    "general-purpose": "sonnet",
}

KNOWN_MODELS = ("haiku", "sonnet", "opus")


@dataclass
class ModelConfig:
    path: Path
    models: dict[str, str]


def env_cli_path() -> str | None:
    return os.environ.get(CLI_PATH_ENV) or None


def config_candidates(home: Path | None = None) -> list[Path]:
    home = home or Path.home()
    return [
        home / ".claude" / "subagent-models.json",
        home / ".config" / "claude" / "subagent-models.json",
    ]


def is_safe_model(value: object) -> bool:
    """Model names end up inside a JS string literal: ASCII, no quotes or backslashes."""
    if not isinstance(value, str) or not value:
        return False
    return value.isascii() and '"' not in value and "\\" not in value and value.isprintable()


def parse_models(data: object, source: Path) -> dict[str, str]:
    """Keep the recognised roles with usable values, warning about everything else."""
    if not isinstance(data, dict):
        err_console.print(f"[yellow]Warning: {source} must contain a JSON object, ignoring it[/yellow]")
        return {}

    models: dict[str, str] = {}
    for key, value in data.items():
        if key not in SUBAGENT_ROLES:
            err_console.print(
                f"[yellow]Warning: unknown subagent {key!r} in {source} "
                f"(expected one of {', '.join(SUBAGENT_ROLES)})[/yellow]"
            )
            continue
        if not is_safe_model(value):
            err_console.print(f"[yellow]Warning: invalid model for {key} in {source}: {value!r}[/yellow]")
            continue
        models[key] = value
    return models


def load_subagent_models(config_path: Path | None = None, home: Path | None = None) -> ModelConfig | None:
    """First candidate file with at least one usable role, or None."""
    candidates = [config_path] if config_path else config_candidates(home)

    for path in candidates:
        if not path.exists():
            if config_path:
                err_console.print(f"[yellow]Warning: config file not found: {path}[/yellow]")
            continue
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            err_console.print(f"[yellow]Warning: could not parse {path}: {e}[/yellow]")
            continue
        models = parse_models(data, path)
        if models:
            return ModelConfig(path=path, models=models)

    return None
