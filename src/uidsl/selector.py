"""CSS-like selectors and their matching against a component tree.

Elements are matched by duck typing: anything with ``name``, ``id`` and
``classes`` attributes (a parsed ``Component``, or a consumer's own view
of one). Ancestor chains are ordered outermost first, so the immediate
parent is ``ancestors[-1]``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Union


class PseudoClass(Enum):
    HOVER = "hover"
    ACTIVE = "active"
    FOCUS = "focus"
    DISABLED = "disabled"


class Element(Protocol):
    name: str
    id: str | None
    classes: Sequence[str]


@dataclass
class ElementState:
    """Live interaction state used to gate pseudo-classes."""

    hovered: bool = False
    active: bool = False
    focused: bool = False
    disabled: bool = False

    def has(self, pseudo: PseudoClass) -> bool:
        match pseudo:
            case PseudoClass.HOVER:
                return self.hovered
            case PseudoClass.ACTIVE:
                return self.active
            case PseudoClass.FOCUS:
                return self.focused
            case PseudoClass.DISABLED:
                return self.disabled
        return False

    def active_pseudo_classes(self) -> list[PseudoClass]:
        return [p for p in PseudoClass if self.has(p)]

    @classmethod
    def from_pseudo_classes(cls, pseudos: Iterable[PseudoClass]) -> ElementState:
        active = set(pseudos)
        return cls(
            hovered=PseudoClass.HOVER in active,
            active=PseudoClass.ACTIVE in active,
            focused=PseudoClass.FOCUS in active,
            disabled=PseudoClass.DISABLED in active,
        )


# ── Selector kinds ───────────────────────────────────────────────


@dataclass(frozen=True)
class Tag:
    name: str


@dataclass(frozen=True)
class Id:
    name: str


@dataclass(frozen=True)
class Class:
    name: str


SelectorKind = Union[Tag, Id, Class]


def _kind_matches(kind: SelectorKind, element: Element) -> bool:
    if isinstance(kind, Tag):
        return element.name == kind.name
    if isinstance(kind, Id):
        return element.id == kind.name
    return kind.name in element.classes


# ── Element state ────────────────────────────────────────────────

StateOf = Callable[[Element], ElementState | None]


def _structural(element: Element) -> ElementState | None:
    return None


def state_lookup(
    element: Element,
    state: ElementState | None = None,
    state_of: StateOf | None = None,
) -> StateOf:
    """Per-element state for one match against ``element``.

    With neither ``state`` nor ``state_of`` every lookup yields ``None`` and
    pseudo-classes are not checked. Otherwise ``state`` is the target's own
    state, ``state_of`` answers for any element, and an element neither
    covers has no flags set.
    """
    if state is None and state_of is None:
        return _structural

    def lookup(el: Element) -> ElementState:
        if el is element and state is not None:
            return state
        if state_of is not None:
            return state_of(el) or ElementState()
        return ElementState()

    return lookup


@dataclass(frozen=True)
class MatchCondition:
    """One way a selector matches structurally, and what it still needs.

    ``pseudo_class`` must hold on the element itself;
    ``ancestor_pseudo_classes`` must hold on the ancestors the match went
    through.
    """

    pseudo_class: PseudoClass | None = None
    ancestor_pseudo_classes: tuple[PseudoClass, ...] = ()

    @property
    def unconditional(self) -> bool:
        return self.pseudo_class is None and not self.ancestor_pseudo_classes


def _through_ancestor(
    targets: list[MatchCondition], ancestor: list[MatchCondition],
) -> list[MatchCondition]:
    """Combine target conditions with those of a matching ancestor compound."""
    combined: dict[MatchCondition, None] = {}
    for t in targets:
        for a in ancestor:
            needed = t.ancestor_pseudo_classes + a.ancestor_pseudo_classes
            if a.pseudo_class is not None:
                needed += (a.pseudo_class,)
            combined[MatchCondition(t.pseudo_class, tuple(dict.fromkeys(needed)))] = None
    return list(combined)


# ── Selectors ────────────────────────────────────────────────────


class _Matcher:
    def matches(
        self, ancestors: Sequence[Element], element: Element,
        state: ElementState | None = None, *, state_of: StateOf | None = None,
    ) -> bool:
        """Whether the selector applies to ``element`` under ``ancestors``.

        Without ``state``/``state_of`` the match is structural. With them,
        each compound's pseudo-class is checked against the state of the
        element that compound matched, ancestors included.
        """
        return self._matches(ancestors, element, state_lookup(element, state, state_of))


@dataclass(frozen=True)
class SimpleSelector(_Matcher):
    """A compound like ``Button#submit.primary:hover``; every kind must match."""

    kinds: list[SelectorKind] = field(default_factory=list)
    pseudo_class: PseudoClass | None = None

    def _kinds_match(self, element: Element) -> bool:
        return all(_kind_matches(kind, element) for kind in self.kinds)

    def _matches(self, ancestors: Sequence[Element], element: Element, lookup: StateOf) -> bool:
        if not self._kinds_match(element):
            return False
        state = lookup(element)
        if self.pseudo_class is not None and state is not None:
            return state.has(self.pseudo_class)
        return True

    def match_conditions(self, ancestors: Sequence[Element], element: Element) -> list[MatchCondition]:
        if not self._kinds_match(element):
            return []
        return [MatchCondition(self.pseudo_class)]

    def get_pseudo_class(self) -> PseudoClass | None:
        return self.pseudo_class


@dataclass(frozen=True)
class GroupSelector(_Matcher):
    """``.button, .link``: matches if any member does."""

    selectors: list[Selector]

    def _matches(self, ancestors: Sequence[Element], element: Element, lookup: StateOf) -> bool:
        return any(sel._matches(ancestors, element, lookup) for sel in self.selectors)

    def match_conditions(self, ancestors: Sequence[Element], element: Element) -> list[MatchCondition]:
        """Conditions of every matching member."""
        found: dict[MatchCondition, None] = {}
        for sel in self.selectors:
            found.update(dict.fromkeys(sel.match_conditions(ancestors, element)))
        return list(found)

    def get_pseudo_class(self) -> PseudoClass | None:
        for sel in self.selectors:
            pseudo = sel.get_pseudo_class()
            if pseudo is not None:
                return pseudo
        return None


@dataclass(frozen=True)
class DescendantSelector(_Matcher):
    """``.container .button``: some proper ancestor matches ``ancestor``."""

    ancestor: Selector
    target: Selector

    def _matches(self, ancestors: Sequence[Element], element: Element, lookup: StateOf) -> bool:
        if not self.target._matches(ancestors, element, lookup):
            return False
        # Innermost ancestor first
        for depth in range(len(ancestors) - 1, -1, -1):
            if self.ancestor._matches(ancestors[:depth], ancestors[depth], lookup):
                return True
        return False

    def match_conditions(self, ancestors: Sequence[Element], element: Element) -> list[MatchCondition]:
        targets = self.target.match_conditions(ancestors, element)
        if not targets:
            return []
        via: list[MatchCondition] = []
        for depth in range(len(ancestors) - 1, -1, -1):
            via.extend(self.ancestor.match_conditions(ancestors[:depth], ancestors[depth]))
        return _through_ancestor(targets, list(dict.fromkeys(via)))

    def get_pseudo_class(self) -> PseudoClass | None:
        return self.target.get_pseudo_class()


@dataclass(frozen=True)
class ChildSelector(_Matcher):
    """``.container > .button``: the immediate parent matches ``parent``."""

    parent: Selector
    target: Selector

    def _matches(self, ancestors: Sequence[Element], element: Element, lookup: StateOf) -> bool:
        if not ancestors or not self.target._matches(ancestors, element, lookup):
            return False
        return self.parent._matches(ancestors[:-1], ancestors[-1], lookup)

    def match_conditions(self, ancestors: Sequence[Element], element: Element) -> list[MatchCondition]:
        if not ancestors:
            return []
        targets = self.target.match_conditions(ancestors, element)
        if not targets:
            return []
        return _through_ancestor(targets, self.parent.match_conditions(ancestors[:-1], ancestors[-1]))

    def get_pseudo_class(self) -> PseudoClass | None:
        return self.target.get_pseudo_class()


Selector = Union[SimpleSelector, GroupSelector, DescendantSelector, ChildSelector]


def format_selector(selector: Selector) -> str:
    """Render a selector back to source form."""
    if isinstance(selector, SimpleSelector):
        parts = []
        for kind in selector.kinds:
            if isinstance(kind, Tag):
                parts.append(kind.name)
            elif isinstance(kind, Id):
                parts.append(f"#{kind.name}")
            else:
                parts.append(f".{kind.name}")
        if selector.pseudo_class is not None:
            parts.append(f":{selector.pseudo_class.value}")
        return "".join(parts)
    if isinstance(selector, GroupSelector):
        return ", ".join(format_selector(s) for s in selector.selectors)
    if isinstance(selector, DescendantSelector):
        return f"{format_selector(selector.ancestor)} {format_selector(selector.target)}"
    return f"{format_selector(selector.parent)} > {format_selector(selector.target)}"
