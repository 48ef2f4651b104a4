"""Shared records for the patching pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path


class TargetKind(str, Enum):
    """How a target file is read, matched and written back."""

    SCRIPT = "script"
    NATIVE = "native-binary"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Target:
    """An installed Claude Code distributable."""

    path: Path
    kind: TargetKind
    method: str = ""  # discovery method that produced it

    @property
    def is_native(self) -> bool:
        return self.kind is TargetKind.NATIVE

    @property
    def label(self) -> str:
        return "native/binary" if self.is_native else "npm/local (cli.js)"


class PatchState(str, Enum):
    FOUND = "found"
    ALREADY_APPLIED = "already-applied"
    ABSENT = "absent"


class Priority(IntEnum):
    """Precedence between rules rewriting the same site. Lower wins."""

    EXACT = 0
    MARKER = 1
    REGEX = 2
    HEURISTIC = 3


@dataclass(frozen=True)
class Span:
    """One located edit: replace content[start:end] with replacement."""

    start: int
    end: int
    replacement: str

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass
class PatchOutcome:
    """Result of testing one rule against the current content."""

    rule: str
    group: str
    priority: Priority
    state: PatchState
    spans: list[Span] = field(default_factory=list)
    selected: bool = False

    @property
    def found(self) -> bool:
        return self.state is PatchState.FOUND
