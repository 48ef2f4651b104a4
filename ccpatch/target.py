"""Classify a file as a text script or a native executable.

Only the first few KB are read; the classifier never raises on unreadable
files and reports them as unknown instead.
"""

from __future__ import annotations

from pathlib import Path

from .model import TargetKind


PREFIX_BYTES = 4096

SCRIPT_SUFFIXES = (".js", ".mjs", ".cjs")

# ELF, PE/COFF, Mach-O 32/64 (both byte orders) and universal (fat) headers
NATIVE_MAGICS = (
    b"\x7fELF",
    b"MZ",
    b"\xfe\xed\xfa\xce",
    b"\xfe\xed\xfa\xcf",
    b"\xce\xfa\xed\xfe",
    b"\xcf\xfa\xed\xfe",
    b"\xca\xfe\xba\xbe",
)


def read_prefix(path: Path, max_bytes: int = PREFIX_BYTES) -> bytes | None:
    """Read up to max_bytes from the start of path, or None if unreadable/empty."""
    try:
        with open(path, "rb") as f:
            prefix = f.read(max_bytes)
    except OSError:
        return None
    return prefix or None


def classify_prefix(prefix: bytes) -> TargetKind:
    if b"\x00" in prefix:
        return TargetKind.NATIVE
    if prefix.startswith(NATIVE_MAGICS):
        return TargetKind.NATIVE
    if prefix.startswith(b"#!"):
        return TargetKind.SCRIPT
    return TargetKind.UNKNOWN


def classify_target(path: Path) -> TargetKind:
    """Decide whether path is a script bundle, a native binary, or unknown."""
    if path.name.endswith(SCRIPT_SUFFIXES):
        return TargetKind.SCRIPT

    prefix = read_prefix(path)
    if prefix is None:
        return TargetKind.UNKNOWN
    return classify_prefix(prefix)
