"""Resolution of ``${path}`` references against nested parameter scopes.

A definition such as::

    Labelled: Flex(Horizontal) {
        Label(${0})
        Button(${1.text})
    }

is instantiated as ``Labelled("Name", {text="OK"})``. While building the
body, the caller's parameters form the next-outer scope, and each
reference is looked up there. When the value found is itself a reference
(a definition forwarding its own argument), lookup continues one scope
further out until a concrete value turns up.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from uidsl.ast_nodes import (
    Args,
    ArrayValue,
    Component,
    ComponentValue,
    Document,
    MapValue,
    Parameters,
    RelativeValue,
    Value,
)
from uidsl.errors import ResolveError

logger = logging.getLogger("uidsl.scope")

MAIN_COMPONENT_NAME = "Main"


def _get_segment(params: Parameters, segment: int | str) -> Value | None:
    if isinstance(segment, int):
        return params.get(index=segment)
    return params.get(name=segment)


def _index_into(value: Value, segment: int | str) -> Value | None:
    """Step one path segment into a composite value, without chaining."""
    if isinstance(value, ArrayValue) and isinstance(segment, int):
        if 0 <= segment < len(value.items):
            return value.items[segment]
        return None
    if isinstance(value, MapValue) and isinstance(segment, str):
        return value.entries.get(segment)
    if isinstance(value, ComponentValue):
        return _get_segment(value.component.params, segment)
    return None


class ScopeChain:
    """An immutable stack of parameter scopes, outermost first."""

    def __init__(self, scopes: Sequence[Parameters] = ()) -> None:
        self.scopes: tuple[Parameters, ...] = tuple(scopes)

    def __repr__(self) -> str:
        return f"ScopeChain(depth={len(self.scopes)})"

    def __len__(self) -> int:
        return len(self.scopes)

    def push(self, params: Parameters) -> ScopeChain:
        """A new chain with ``params`` as the innermost scope."""
        return ScopeChain(self.scopes + (params,))

    def get(self, index: int | None = None, name: str | None = None) -> Value | None:
        """Look up a parameter in the innermost scope, chasing references outward.

        The innermost scope is addressed by position or by name, whichever
        mode it holds. A ``RelativeValue`` found there is re-resolved against
        the next-outer scope, repeatedly, until a concrete value is found.
        Returns ``None`` when the value is missing or the scopes run out.
        """
        if not self.scopes:
            return None
        depth = len(self.scopes) - 1
        value = self.scopes[depth].get(index, name)
        if isinstance(value, RelativeValue):
            return self._resolve_at(depth - 1, value.path)
        return value

    def resolve_path(self, path: Sequence[int | str]) -> Value | None:
        """Resolve a reference path starting at the innermost scope.

        The first segment goes through the chain; the remaining segments
        index into the value it yields.
        """
        return self._resolve_at(len(self.scopes) - 1, path)

    def resolve(self, value: Value) -> Value:
        """Replace a ``RelativeValue`` by what it refers to.

        Other values are returned unchanged. Raises ``ResolveError`` when
        the reference cannot be satisfied.
        """
        if not isinstance(value, RelativeValue):
            return value
        resolved = self.resolve_path(value.path)
        if resolved is None:
            raise ResolveError(value.path)
        return resolved

    # ── Internals ────────────────────────────────────────────────

    def _lookup(self, depth: int, segment: int | str) -> Value | None:
        if depth < 0:
            return None
        value = _get_segment(self.scopes[depth], segment)
        if isinstance(value, RelativeValue):
            logger.debug("scope %d: %s forwards to %s", depth, segment, value)
            return self._resolve_at(depth - 1, value.path)
        return value

    def _resolve_at(self, depth: int, path: Sequence[int | str]) -> Value | None:
        if not path:
            return None
        value = self._lookup(depth, path[0])
        for segment in path[1:]:
            if value is None:
                return None
            value = _index_into(value, segment)
        return value


@dataclass(frozen=True)
class ComponentScope:
    """One frame of a consumer's walk over a ``Document``.

    Children that name a root definition are expanded into the
    definition's body, with the call site's parameters pushed as a new
    scope and its ``#id``/``.class`` carried over to the expanded element.
    """

    document: Document
    component: Component
    chain: ScopeChain
    name: str = MAIN_COMPONENT_NAME
    wrap_id: str | None = None
    wrap_classes: tuple[str, ...] = field(default=())

    @classmethod
    def for_main(
        cls, document: Document, params: Parameters | None = None,
        name: str = MAIN_COMPONENT_NAME,
    ) -> ComponentScope | None:
        """Scope for the root definition ``name``, called with ``params``.

        Returns ``None`` if the document has no such definition.
        """
        definition = document.get_definition(name)
        if definition is None:
            return None
        return cls(
            document=document,
            component=definition.component,
            chain=ScopeChain([params if params is not None else Args()]),
            name=name,
        )

    def enter(self, child: Component) -> ComponentScope:
        """Scope for ``child``, expanding it if it names a definition."""
        definition = self.document.get_definition(child.name)
        if definition is None:
            return ComponentScope(self.document, child, self.chain, self.name)
        logger.debug("expanding %s with %d argument(s)", child.name, len(child.params))
        return ComponentScope(
            document=self.document,
            component=definition.component,
            chain=self.chain.push(child.params),
            name=definition.name,
            wrap_id=child.id,
            wrap_classes=tuple(child.classes),
        )

    def get(self, index: int | None = None, name: str | None = None) -> Value | None:
        """A parameter of the current component, its own block innermost."""
        return self.chain.push(self.component.params).get(index, name)

    def resolve(self, value: Value) -> Value:
        """Resolve a property value written inside the current definition."""
        return self.chain.resolve(value)

    @property
    def element_id(self) -> str | None:
        return self.wrap_id or self.component.id

    @property
    def element_classes(self) -> list[str]:
        classes = list(self.wrap_classes)
        for cls_name in self.component.classes:
            if cls_name not in classes:
                classes.append(cls_name)
        return classes

    def children(self) -> Iterator[Component]:
        return iter(self.component.children)
