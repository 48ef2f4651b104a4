"""Replacement engine: splice located spans into content.

Scripts are edited freely. Native executables are edited in place: every
replacement is right-padded with spaces to the exact length of the text it
replaces, so no offset inside the binary moves. Anything that would change
the byte length raises before the caller gets a chance to write.
"""

from __future__ import annotations

from .model import Span, TargetKind


SCRIPT_ENCODING = "utf-8"
NATIVE_ENCODING = "latin-1"  # one char per byte


class PatchError(Exception):
    """Base class for failures that must abort a run before writing."""


class UnsafeReplacementError(PatchError):
    """A replacement cannot be applied without corrupting the target."""


class SizeMismatchError(PatchError):
    """Native output length differs from the original."""


def decode_content(data: bytes, kind: TargetKind) -> str:
    if kind is TargetKind.NATIVE:
        return data.decode(NATIVE_ENCODING)
    return data.decode(SCRIPT_ENCODING, errors="surrogateescape")


def encode_content(text: str, kind: TargetKind) -> bytes:
    if kind is TargetKind.NATIVE:
        return text.encode(NATIVE_ENCODING)
    return text.encode(SCRIPT_ENCODING, errors="surrogateescape")


def native_view(literal: str) -> str:
    """The latin-1 view of literal's UTF-8 bytes, as it appears in a decoded binary."""
    return literal.encode("utf-8").decode(NATIVE_ENCODING)


def pad_right(replacement: str, length: int, label: str = "") -> str:
    """Pad replacement with spaces to exactly length characters."""
    if len(replacement) > length:
        where = f" ({label})" if label else ""
        raise UnsafeReplacementError(
            f"Native/binary patch too large for in-place replacement{where}: "
            f"replacement length {len(replacement)} > match length {length}"
        )
    return replacement + " " * (length - len(replacement))


def splice(content: str, spans: list[Span], kind: TargetKind, label: str = "") -> str:
    """Apply spans to content. Spans are located on content and must not overlap."""
    if not spans:
        return content

    ordered = sorted(spans, key=lambda s: s.start)
    parts: list[str] = []
    cursor = 0

    for span in ordered:
        if span.start < cursor:
            raise UnsafeReplacementError(
                f"Overlapping replacements at offset {span.start} ({label or 'unnamed rule'})"
            )
        replacement = span.replacement
        if kind is TargetKind.NATIVE:
            replacement = pad_right(replacement, span.length, label)
        parts.append(content[cursor:span.start])
        parts.append(replacement)
        cursor = span.end

    parts.append(content[cursor:])
    out = "".join(parts)

    if kind is TargetKind.NATIVE and len(out) != len(content):
        raise SizeMismatchError(
            f"Refusing to patch native/binary: size changed ({len(content)} -> {len(out)})."
        )
    return out


def ensure_same_length(original: bytes, patched: bytes) -> None:
    """Guard a native write: the patched buffer must be exactly as long as the original."""
    if len(original) != len(patched):
        raise SizeMismatchError(
            f"Refusing to write: native/binary patch would change file size "
            f"({len(original)} -> {len(patched)})."
        )
