"""Ordered line accumulation for the text backends."""
from __future__ import annotations

from typing import List

from logicmap.constants import MAX_HEADING_LEVEL


class LineBuilder:
    """
    Collects output lines in traversal order and joins them once.

    Backends create one builder per call, so nothing is shared between
    calls and a caller never sees partially written output.
    """

    def __init__(self, header: str | None = None, indent: str = "  "):
        self._lines: List[str] = []
        self._indent = indent
        if header is not None:
            self._lines.append(header)

    def add(self, text: str, level: int = 0) -> "LineBuilder":
        self._lines.append(f"{self._indent * max(0, level)}{text}")
        return self

    def bullet(self, text: str, level: int = 0) -> "LineBuilder":
        """Append a Markdown list item nested `level` deep."""
        return self.add(f"- {text}", level)

    def heading(self, text: str, level: int) -> "LineBuilder":
        """Append a Markdown heading, clamping the depth to 1..6."""
        depth = min(MAX_HEADING_LEVEL, max(1, level))
        self._lines.append(f"{'#' * depth} {text}")
        return self

    def __len__(self) -> int:
        return len(self._lines)

    def render(self, trailing_newline: bool = False) -> str:
        text = "\n".join(self._lines)
        return text + "\n" if trailing_newline else text
