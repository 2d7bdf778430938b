"""Parse errors and Rust-style colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from uidsl.source import SourceText, Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


class ParseErrorKind(Enum):
    """Every way a parse can fail, with its diagnostic code and help text."""

    INVALID_TOKEN = (
        "E100",
        "unrecognized input",
    )
    EXPECT_IDENT = (
        "E201",
        "expected an identifier. e.g. name, button, flex",
    )
    EXPECT_VALUE = (
        "E202",
        "expected a value. e.g. myident, Component(), 123, 123.456, "
        '"mytext..", [4,5,], {key=value}, true, false, ${0.name}',
    )
    INVALID_CSS_VALUE = (
        "E203",
        'invalid CSS value. e.g. 123px, 1.0em, 50%, 123.456, "mytext..", '
        "auto, #ff0000, rgb(0,0,0)",
    )
    INVALID_CSS_SELECTOR = (
        "E204",
        "invalid CSS selector. e.g. #myid, .myclass, TagName, A > B, A:hover",
    )
    EXPECT_KEY_VALUE = (
        "E205",
        "expected a key-value pair. e.g. key=value,key2=value2",
    )
    EXPECT_PARAMETER = (
        "E206",
        'expected a parameter. e.g. (param1,2,"text"), (key=1,key2=2)',
    )
    EXPECT_BRACE_BLOCK = (
        "E207",
        "expected a brace block. e.g. '{ ... }'",
    )
    EXPECT_PARENT_BLOCK = (
        "E208",
        "expected a parenthesized block. e.g. '( .. )'",
    )
    UNKNOWN_START = (
        "E209",
        "unexpected start of statement. #id { }, .class { }, Tag { }, "
        "Name: Component(), Component()",
    )
    ID_ALREADY_DEFINED = (
        "E210",
        "id already defined",
    )

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message


@dataclass(frozen=True)
class DiagnosticLabel:
    """A source span with an optional inline message under its carets."""

    span: Span
    message: str = ""


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class ParseError(Exception):
    """The single failure produced by a parse, located by a source span."""

    def __init__(self, kind: ParseErrorKind, span: Span, detail: str = "") -> None:
        self.kind = kind
        self.span = span
        self.detail = detail
        message = f"{kind.message} ({detail})" if detail else kind.message
        super().__init__(f"{kind.code} at {span}: {message}")

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            code=self.kind.code,
            message=self.kind.message,
            labels=[DiagnosticLabel(span=self.span, message=self.detail)],
        )


class ResolveError(LookupError):
    """A ``${...}`` reference that no enclosing scope can satisfy."""

    def __init__(self, path: list[int | str]) -> None:
        self.path = path
        super().__init__(f"unresolved reference ${{{'.'.join(str(p) for p in path)}}}")


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format, optionally with ANSI colors."""

    def __init__(self, *, color: bool = True, context_lines: int = 0) -> None:
        self.color = color
        self.context_lines = context_lines

    def _paint(self, text: str, code: str) -> str:
        return f"{code}{text}{_RESET}" if self.color else text

    def _gutter(self, line_no: int | None = None) -> str:
        number = f"{line_no:>4}" if line_no is not None else "    "
        return "  " + self._paint(f"{number} |", _BLUE)

    def render(self, diag: Diagnostic, source: SourceText) -> str:
        color = _COLORS[diag.severity]
        out = [
            self._paint(f"{diag.severity.value}[{diag.code}]", color)
            + self._paint(f": {diag.message}", _BOLD)
        ]
        for label in diag.labels:
            out.extend(self._render_label(label, source, color))
        out.extend(f"  {self._paint('=', _BLUE)} note: {note}" for note in diag.notes)
        return "\n".join(out)

    def _render_label(self, label: DiagnosticLabel, source: SourceText, color: str) -> list[str]:
        line_no, col = source.line_col(label.span.start)
        end_line, end_col = source.line_col(label.span.end)
        if end_line != line_no:
            end_col = len(source.line_at(line_no)) + 1

        out = [
            f"  {self._paint('-->', _BLUE)} {source.name}:{line_no}:{col}",
            self._gutter(),
        ]
        first = max(1, line_no - self.context_lines)
        out.extend(f"{self._gutter(n)} {source.line_at(n)}" for n in range(first, line_no + 1))

        carets = "^" * max(1, end_col - col)
        out.append(f"{self._gutter()} {' ' * (col - 1)}{self._paint(carets, color)}")
        if label.message:
            out.append(f"{self._gutter()}   {self._paint(label.message, color)}")
        return out


def render_error(source: str, span: Span, context_lines: int = 2) -> str:
    """Render a caret-annotated snippet of ``source`` around ``span``.

    ``span`` holds ``str`` offsets, so columns count characters, not bytes.
    Shows up to ``context_lines`` preceding lines, the offending line, and a
    ``^`` underline over the span's columns on that line::

           1 | Flex {
           2 |     padding: 1px
           3 | Button(
             |       ^
    """
    text = SourceText(source)
    line_no, col = text.line_col(span.start)
    line = text.line_at(line_no)

    out: list[str] = []
    for prev in range(max(1, line_no - context_lines), line_no):
        out.append(f"{prev:>4} | {text.line_at(prev)}")
    out.append(f"{line_no:>4} | {line}")

    col_start = col - 1
    end_line, end_col = text.line_col(span.end)
    col_end = end_col - 1 if end_line == line_no else len(line)
    col_end = max(col_end, col_start + 1)
    out.append("     | " + " " * col_start + "^" * (col_end - col_start))
    return "\n".join(out) + "\n"
