"""Balanced-parenthesis scanning over minified JavaScript.

The bundle is never parsed. A call expression is bounded by walking forward
from its opening parenthesis, counting nesting depth only outside string
literals. A regex cannot do this once literals contain parentheses or escaped
quotes.

Limitations: template `${...}` substitutions are treated as literal text and
regex literals are not recognised.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Iterator


QUOTES = frozenset("'\"`")

IDENT_CHARS = frozenset(string.ascii_letters + string.digits + "_$.")

DEFAULT_WINDOW = 2500


def find_matching_close(text: str, open_index: int) -> int:
    """Return the index of the ')' matching the '(' at open_index, or -1."""
    if not (0 <= open_index < len(text)) or text[open_index] != "(":
        raise ValueError(f"No '(' at index {open_index}")

    depth = 0
    quote: str | None = None  # active literal delimiter
    escaped = False

    for i in range(open_index, len(text)):
        ch = text[i]

        if quote is not None:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue

        if ch in QUOTES:
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i

    return -1


@dataclass(frozen=True)
class CallSite:
    """A call expression `callee(...)` located around a marker."""

    callee: str
    callee_start: int
    open_index: int
    close_index: int
    comma_index: int | None = None  # leading comma in a comma-operator chain

    @property
    def end(self) -> int:
        return self.close_index + 1

    @property
    def start(self) -> int:
        """Start of the removable text, including a leading comma if any."""
        return self.comma_index if self.comma_index is not None else self.callee_start

    def text(self, content: str) -> str:
        return content[self.callee_start:self.end]


def _skip_whitespace_back(text: str, i: int) -> int:
    while i >= 0 and text[i].isspace():
        i -= 1
    return i


def call_site_at(text: str, open_index: int, marker_index: int = -1) -> CallSite | None:
    """Build the CallSite whose argument list opens at open_index.

    When marker_index is given, the call must enclose it.
    """
    close_index = find_matching_close(text, open_index)
    if close_index == -1 or close_index < marker_index:
        return None

    i = _skip_whitespace_back(text, open_index - 1)
    ident_end = i + 1
    while i >= 0 and text[i] in IDENT_CHARS:
        i -= 1
    ident_start = i + 1
    if ident_start >= ident_end:
        return None

    j = _skip_whitespace_back(text, ident_start - 1)
    comma_index = j if j >= 0 and text[j] == "," else None

    return CallSite(
        callee=text[ident_start:ident_end],
        callee_start=ident_start,
        open_index=open_index,
        close_index=close_index,
        comma_index=comma_index,
    )


def locate_marker_call(
    text: str,
    marker: str,
    start: int = 0,
    window: int = DEFAULT_WINDOW,
    open_token: str = "({",
) -> CallSite | None:
    """Find the call expression that contains the first marker at/after start.

    Searches backward from the marker (at most `window` characters) for the
    nearest `open_token`, then bounds the call with find_matching_close.
    """
    marker_index = text.find(marker, start)
    if marker_index == -1:
        return None

    window_start = max(0, marker_index - window)
    open_index = text.rfind(open_token, window_start, marker_index + len(marker))
    if open_index == -1:
        return None

    # open_token may carry a prefix before its '('
    paren = text.find("(", open_index, open_index + len(open_token))
    if paren == -1:
        return None
    return call_site_at(text, paren, marker_index)


def iter_marker_calls(
    text: str,
    marker: str,
    window: int = DEFAULT_WINDOW,
    open_token: str = "({",
) -> Iterator[CallSite]:
    """Yield every non-overlapping call site enclosing an occurrence of marker."""
    pos = 0
    last_end = -1
    while True:
        marker_index = text.find(marker, pos)
        if marker_index == -1:
            return
        site = locate_marker_call(text, marker, marker_index, window, open_token)
        if site is None:
            pos = marker_index + len(marker)
            continue
        if site.start >= last_end:
            yield site
            last_end = site.end
        pos = max(site.end, marker_index + len(marker))
