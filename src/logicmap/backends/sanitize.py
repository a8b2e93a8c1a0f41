"""
Text sanitizers shared by the Mermaid and outline backends.

Every literal string that ends up inside generated diagram text goes through
one of these functions, and every node identifier is minted by
`make_node_id`.

Known limitation:
    `make_node_id` performs no collision detection. Two differently spelled
    raw ids ("a-b", "a.b") sanitize to the same node id and are merged by
    the renderer. `logicmap.analyzer` reports such collisions.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional, TypeVar

from logicmap.constants import MERMAID_LINE_BREAK
from logicmap.model import CodeRef

T = TypeVar("T")

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_]")
_LINE_BREAKS = re.compile(r"\r\n|\r|\n")
_BACKTICK_RUN = re.compile(r"`+")

_FULL_WIDTH_BRACKETS = {
    "(": "（",
    ")": "）",
    "[": "【",
    "]": "】",
}


def make_node_id(prefix: str, raw: str) -> str:
    """
    Build a Mermaid-safe node id from a human-readable id.

    Every character outside [A-Za-z0-9_] becomes "_", a leading digit gets
    a "_" in front, and an empty result becomes "x" so the id is never the
    bare prefix.

    Examples:
        make_node_id("mod_", "order-center")  -> "mod_order_center"
        make_node_id("mod_", "2fa")           -> "mod__2fa"
        make_node_id("mod_", "")              -> "mod_x"
    """
    body = _UNSAFE_ID_CHARS.sub("_", str(raw))
    if body[:1].isdigit():
        body = f"_{body}"
    return f"{prefix}{body or 'x'}"


def escape_label(text: str) -> str:
    """Escape text for a double-quoted Mermaid label."""
    out = str(text).replace("\\", "\\\\").replace('"', "'")
    out = out.replace("\r\n", "\n").replace("\r", "\n")
    return out.replace("\n", MERMAID_LINE_BREAK)


def escape_outline_text(text: str) -> str:
    """
    Escape text for mind-map output.

    Mind-map syntax reserves () and [] for node shapes, so ASCII brackets
    are swapped for their full-width forms after label escaping.
    """
    out = escape_label(text)
    for ascii_char, wide_char in _FULL_WIDTH_BRACKETS.items():
        out = out.replace(ascii_char, wide_char)
    return out


def format_code_ref(ref: Optional[CodeRef]) -> str:
    """Format a code reference as file[:function][:line]; "" when absent."""
    if ref is None or not ref.file:
        return ""
    parts = [ref.file]
    if ref.function:
        parts.append(ref.function)
    if isinstance(ref.line, int):
        parts.append(str(ref.line))
    return ":".join(parts)


def dedupe(items: Iterable[T]) -> List[T]:
    """Drop empty entries and duplicates, keeping first-seen order."""
    seen = set()
    out: List[T] = []
    for item in items:
        if not item or item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out


def inline_code(text: str) -> str:
    """
    Wrap text in a Markdown code span.

    Line breaks become spaces so the span stays on one line. The fence is
    one backtick longer than the longest backtick run inside the text.
    """
    t = _LINE_BREAKS.sub(" ", str(text))
    longest = max((len(run) for run in _BACKTICK_RUN.findall(t)), default=0)
    if not longest:
        return f"`{t}`"
    fence = "`" * (longest + 1)
    return f"{fence} {t} {fence}"
