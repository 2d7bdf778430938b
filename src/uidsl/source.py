"""Source text representation and span tracking for diagnostics."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Span:
    """A half-open ``[start, end)`` range of offsets into the source string.

    Offsets are ``str`` indices (code points), not UTF-8 byte offsets; use
    :meth:`SourceText.byte_offset` where bytes are needed.
    """

    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"

    def __len__(self) -> int:
        return self.end - self.start

    def join(self, other: Span) -> Span:
        return Span(min(self.start, other.start), max(self.end, other.end))


class SourceText:
    """Source text with offset to line/column mapping."""

    def __init__(self, content: str, name: str = "<string>") -> None:
        self.name = name
        self.content = content
        self.lines = content.split("\n")
        self._line_starts = [0]
        for i, ch in enumerate(content):
            if ch == "\n":
                self._line_starts.append(i + 1)

    @classmethod
    def from_path(cls, path: Path) -> SourceText:
        return cls(path.read_text(), str(path))

    def line_col(self, offset: int) -> tuple[int, int]:
        """Return the 1-indexed ``(line, column)`` of an offset."""
        offset = max(0, min(offset, len(self.content)))
        idx = bisect_right(self._line_starts, offset) - 1
        return idx + 1, offset - self._line_starts[idx] + 1

    def offset(self, line: int, col: int) -> int:
        """Inverse of :meth:`line_col`, clamped to the text."""
        if line < 1:
            return 0
        if line > len(self._line_starts):
            return len(self.content)
        start = self._line_starts[line - 1]
        return min(start + max(col, 1) - 1, start + len(self.line_at(line)))

    def byte_offset(self, offset: int) -> int:
        """UTF-8 byte offset of a ``str`` offset."""
        offset = max(0, min(offset, len(self.content)))
        return len(self.content[:offset].encode("utf-8"))

    def utf16_col(self, offset: int) -> int:
        """0-indexed column of an offset in UTF-16 code units, as LSP counts."""
        line, col = self.line_col(offset)
        return len(self.line_at(line)[:col - 1].encode("utf-16-le")) // 2

    def line_at(self, n: int) -> str:
        """Return the 1-indexed line, or empty string if out of range."""
        if 1 <= n <= len(self.lines):
            return self.lines[n - 1]
        return ""

    def span_text(self, span: Span) -> str:
        """Extract the text covered by a span."""
        return self.content[span.start:span.end]
