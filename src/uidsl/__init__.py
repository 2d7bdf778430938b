"""Parser and tooling for the uidl declarative UI-description language."""

__version__ = "0.1.0"

from uidsl.ast_nodes import Component, Document, Style, Value  # noqa: E402
from uidsl.errors import ParseError, ParseErrorKind, ResolveError, render_error  # noqa: E402
from uidsl.parser import parse  # noqa: E402

__all__ = [
    "Component",
    "Document",
    "ParseError",
    "ParseErrorKind",
    "ResolveError",
    "Style",
    "Value",
    "__version__",
    "parse",
    "render_error",
]
