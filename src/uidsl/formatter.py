"""AST-walking pretty-printer for uidl source.

Produces canonical formatting for .uidl files. Comments are trivia and are
not kept in the AST, so they do not survive formatting.

Top-level items are emitted as styles, then definitions, then components:
a ``#id`` or ``.class`` rule written after a component attaches to it.
"""

from __future__ import annotations

from decimal import Decimal

from uidsl.ast_nodes import (
    Args,
    ArrayValue,
    BoolValue,
    Component,
    ComponentValue,
    CssIdent,
    CssNumber,
    CssString,
    CssValue,
    Definition,
    Document,
    Em,
    FloatValue,
    HexColor,
    IdentValue,
    IntValue,
    Keyword,
    MapValue,
    NamedArgs,
    Parameters,
    Percent,
    Pt,
    Px,
    RelativeValue,
    Rgb,
    Rgba,
    Style,
    StyleProperty,
    StringValue,
    Value,
)
from uidsl.selector import format_selector

_STRING_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}


def _quote(text: str) -> str:
    return '"' + "".join(_STRING_ESCAPES.get(ch, ch) for ch in text) + '"'


def _format_float(value: float) -> str:
    """A float literal the lexer reads back as FLOAT (no exponent form)."""
    text = repr(value)
    if "e" in text or "E" in text:
        # exact positional digits of the shortest repr
        text = format(Decimal(text), "f")
    if "." not in text:
        text += ".0"
    return text


def _format_number(value: float) -> str:
    """A CSS number: integral values lose their ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return _format_float(value)


class UidlFormatter:
    """Format a parsed Document back to canonical source text."""

    def __init__(self, indent: int = 4) -> None:
        self.indent = indent

    # ── Public API ─────────────────────────────────────────────

    def format(self, document: Document) -> str:
        """Format a document to canonical source text."""
        parts: list[str] = []
        parts.extend(self._format_style(s) for s in document.styles)
        parts.extend(self._format_definition(d) for d in document.definitions)
        parts.extend(self._format_component(c, 0) for c in document.components)
        if not parts:
            return ""
        return "\n\n".join(parts) + "\n"

    # ── Styles ─────────────────────────────────────────────────

    def _format_style(self, style: Style) -> str:
        lines = [f"{format_selector(style.selector)} {{"]
        pad = " " * self.indent
        for prop in style.properties:
            lines.append(pad + self.format_property(prop))
        lines.append("}")
        return "\n".join(lines)

    def format_property(self, prop: StyleProperty) -> str:
        """One declaration, e.g. ``border: 1px solid #000000;``."""
        values = " ".join(self._format_css_value(v) for v in prop.values)
        return f"{prop.key}: {values};"

    def _format_css_value(self, value: CssValue) -> str:
        if isinstance(value, Px):
            return _format_number(value.value) + "px"
        if isinstance(value, Em):
            return _format_number(value.value) + "em"
        if isinstance(value, Pt):
            return _format_number(value.value) + "pt"
        if isinstance(value, Percent):
            return _format_number(value.value) + "%"
        if isinstance(value, CssNumber):
            return _format_number(value.value)
        if isinstance(value, CssString):
            return _quote(value.value)
        if isinstance(value, CssIdent):
            return value.name
        if isinstance(value, Keyword):
            return value.keyword.value
        if isinstance(value, HexColor):
            return f"#{value.hex}"
        if isinstance(value, Rgb):
            return f"rgb({value.r}, {value.g}, {value.b})"
        if isinstance(value, Rgba):
            return f"rgba({value.r}, {value.g}, {value.b}, {value.a})"
        raise TypeError(f"not a CSS value: {value!r}")

    # ── Components ─────────────────────────────────────────────

    def _format_definition(self, definition: Definition) -> str:
        return f"{definition.name}: {self._format_component(definition.component, 0)}"

    def _format_component(self, component: Component, depth: int) -> str:
        head = component.name + self._format_params(component.params, depth)
        if component.id is not None:
            head += f"#{component.id}"
        head += "".join(f".{c}" for c in component.classes)

        if not component.properties and not component.children:
            return head

        pad = " " * (self.indent * (depth + 1))
        lines = [head + " {"]
        for key, value in component.properties.items():
            lines.append(f"{pad}{key}: {self._format_value(value, depth + 1)}")
        for child in component.children:
            lines.append(pad + self._format_component(child, depth + 1))
        lines.append(" " * (self.indent * depth) + "}")
        return "\n".join(lines)

    def _format_params(self, params: Parameters, depth: int) -> str:
        if isinstance(params, NamedArgs):
            inner = ", ".join(
                f"{k}={self._format_value(v, depth)}" for k, v in params.values.items()
            )
        elif isinstance(params, Args):
            inner = ", ".join(self._format_value(v, depth) for v in params.values)
        else:
            raise TypeError(f"not a parameter block: {params!r}")
        return f"({inner})"

    # ── Values ─────────────────────────────────────────────────

    def _format_value(self, value: Value, depth: int) -> str:
        if isinstance(value, StringValue):
            return _quote(value.value)
        if isinstance(value, BoolValue):
            return "true" if value.value else "false"
        if isinstance(value, IntValue):
            return str(value.value)
        if isinstance(value, FloatValue):
            return _format_float(value.value)
        if isinstance(value, IdentValue):
            return value.name
        if isinstance(value, RelativeValue):
            return str(value)
        if isinstance(value, ArrayValue):
            return "[" + ", ".join(self._format_value(v, depth) for v in value.items) + "]"
        if isinstance(value, MapValue):
            entries = ", ".join(
                f"{k}={self._format_value(v, depth)}" for k, v in value.entries.items()
            )
            return "{" + entries + "}"
        if isinstance(value, ComponentValue):
            return self._format_component(value.component, depth)
        raise TypeError(f"not a value: {value!r}")
