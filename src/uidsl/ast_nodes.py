"""AST node definitions for the uidl language."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from uidsl.selector import Selector
from uidsl.source import Span

# ── Values ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class IdentValue:
    name: str


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class IntValue:
    value: int


@dataclass(frozen=True)
class FloatValue:
    value: float


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class ArrayValue:
    items: list[Value]


@dataclass(frozen=True)
class MapValue:
    entries: dict[str, Value]


@dataclass(frozen=True)
class ComponentValue:
    """A component literal passed as a value, e.g. ``FlexItem(1.0, Button("OK"))``."""

    component: Component


@dataclass(frozen=True)
class RelativeValue:
    """A ``${path}`` placeholder, resolved later against a scope chain."""

    path: list[int | str]

    def __str__(self) -> str:
        return "${" + ".".join(str(p) for p in self.path) + "}"


Number = Union[IntValue, FloatValue]

Value = Union[
    IdentValue, BoolValue, IntValue, FloatValue, StringValue,
    ArrayValue, MapValue, ComponentValue, RelativeValue,
]


def as_number(value: Value) -> float | None:
    """Numeric payload of an Int or Float value, else ``None``."""
    if isinstance(value, (IntValue, FloatValue)):
        return value.value
    return None


# ── Parameters ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Args:
    """Positional parameters: ``Button("OK", 2)``."""

    values: list[Value] = field(default_factory=list)

    def get(self, index: int | None = None, name: str | None = None) -> Value | None:
        if index is not None and 0 <= index < len(self.values):
            return self.values[index]
        return None

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class NamedArgs:
    """Named parameters: ``Slider(min=0, max=10)``."""

    values: dict[str, Value] = field(default_factory=dict)

    def get(self, index: int | None = None, name: str | None = None) -> Value | None:
        if name is not None:
            return self.values.get(name)
        return None

    def __len__(self) -> int:
        return len(self.values)


Parameters = Union[Args, NamedArgs]


# ── Styles ───────────────────────────────────────────────────────


class CssKeyword(Enum):
    AUTO = "auto"
    NONE = "none"
    INHERIT = "inherit"


@dataclass(frozen=True)
class Keyword:
    keyword: CssKeyword


@dataclass(frozen=True)
class Px:
    value: float


@dataclass(frozen=True)
class Em:
    value: float


@dataclass(frozen=True)
class Pt:
    value: float


@dataclass(frozen=True)
class Percent:
    value: float


@dataclass(frozen=True)
class CssNumber:
    value: float


@dataclass(frozen=True)
class CssIdent:
    name: str


@dataclass(frozen=True)
class CssString:
    value: str


@dataclass(frozen=True)
class HexColor:
    hex: str  # without the leading '#'

    def rgba(self) -> tuple[int, int, int, int]:
        digits = self.hex
        if len(digits) in (3, 4):
            digits = "".join(c * 2 for c in digits)
        if len(digits) == 6:
            digits += "ff"
        r, g, b, a = (int(digits[i:i + 2], 16) for i in range(0, 8, 2))
        return r, g, b, a


@dataclass(frozen=True)
class Rgb:
    r: int
    g: int
    b: int


@dataclass(frozen=True)
class Rgba:
    r: int
    g: int
    b: int
    a: int


CssValue = Union[
    Keyword, Px, Em, Pt, Percent, CssNumber, CssIdent, CssString,
    HexColor, Rgb, Rgba,
]


def css_number(value: CssValue) -> float | None:
    """Numeric payload of a length, percentage or number, else ``None``."""
    if isinstance(value, (Px, Em, Pt, Percent, CssNumber)):
        return value.value
    return None


@dataclass(frozen=True)
class StyleProperty:
    key: str
    values: list[CssValue]

    def first_number(self) -> float | None:
        return css_number(self.values[0]) if self.values else None


@dataclass(frozen=True)
class Style:
    selector: Selector
    properties: list[StyleProperty]
    span: Span | None = field(default=None, compare=False, repr=False)


# ── Components ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Component:
    name: str
    params: Parameters = field(default_factory=Args)
    id: str | None = None
    classes: list[str] = field(default_factory=list)
    children: list[Component] = field(default_factory=list)
    properties: dict[str, Value] = field(default_factory=dict)
    span: Span | None = field(default=None, compare=False, repr=False)

    def walk(self, ancestors: tuple[Component, ...] = ()) -> Iterator[tuple[tuple[Component, ...], Component]]:
        """Yield ``(ancestors, component)`` depth-first, self first."""
        yield ancestors, self
        inner = ancestors + (self,)
        for child in self.children:
            yield from child.walk(inner)


@dataclass(frozen=True)
class Definition:
    """A named root component: ``Main: Flex(Vertical) { ... }``."""

    name: str
    component: Component
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Document:
    styles: list[Style] = field(default_factory=list)
    components: list[Component] = field(default_factory=list)
    definitions: list[Definition] = field(default_factory=list)

    def get_definition(self, name: str) -> Definition | None:
        for definition in self.definitions:
            if definition.name == name:
                return definition
        return None

    def walk(self) -> Iterator[tuple[tuple[Component, ...], Component]]:
        """Every component with its ancestor chain (outermost first)."""
        for definition in self.definitions:
            yield from definition.component.walk()
        for component in self.components:
            yield from component.walk()

    def find_by_id(self, element_id: str) -> tuple[tuple[Component, ...], Component] | None:
        for ancestors, component in self.walk():
            if component.id == element_id:
                return ancestors, component
        return None
