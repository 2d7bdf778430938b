"""Style cascade: which rules apply to an element, and which declaration wins."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from uidsl.ast_nodes import Style, StyleProperty
from uidsl.selector import (
    Element,
    ElementState,
    MatchCondition,
    PseudoClass,
    StateOf,
    state_lookup,
)

logger = logging.getLogger("uidsl.cascade")


@dataclass
class CascadedStyle:
    """Winning declarations per property key, layered by pseudo-class.

    The ``None`` layer holds declarations from rules without a
    pseudo-class; each other layer holds the declarations that apply only
    while the element is in that state. ``conditional`` lists the rules that
    only apply while some ancestor is in a pseudo-class state; they are not
    part of any layer.
    """

    layers: dict[PseudoClass | None, dict[str, StyleProperty]] = field(default_factory=dict)
    conditional: list[Style] = field(default_factory=list)

    @property
    def base(self) -> dict[str, StyleProperty]:
        return self.layers.get(None, {})

    def for_state(self, pseudo: PseudoClass) -> dict[str, StyleProperty]:
        return self.layers.get(pseudo, {})

    def pseudo_classes(self) -> list[PseudoClass]:
        return [p for p in PseudoClass if p in self.layers]

    def effective(self, state: ElementState | None = None) -> dict[str, StyleProperty]:
        """A flat view: the base layer overlaid with every active pseudo layer."""
        result = dict(self.base)
        if state is not None:
            for pseudo in state.active_pseudo_classes():
                result.update(self.for_state(pseudo))
        return result

    def get(self, key: str, state: ElementState | None = None) -> StyleProperty | None:
        return self.effective(state).get(key)


def matching_styles(
    styles: Iterable[Style],
    element: Element,
    ancestors: Sequence[Element] = (),
    state: ElementState | None = None,
    *,
    state_of: StateOf | None = None,
) -> list[Style]:
    """Styles whose selector matches ``element``, in declaration order."""
    return [s for s in styles if s.selector.matches(ancestors, element, state, state_of=state_of)]


def _layer_keys(conditions: list[MatchCondition]) -> list[PseudoClass | None]:
    """Layers a rule belongs to, given the ways its selector matched.

    Any unconditional match puts the rule in the base layer alone;
    otherwise it joins the layer of every pseudo-class the element itself
    needs. Matches that depend on ancestor state contribute no layer.
    """
    own = [c for c in conditions if not c.ancestor_pseudo_classes]
    if any(c.pseudo_class is None for c in own):
        return [None]
    needed = {c.pseudo_class for c in own}
    return [p for p in PseudoClass if p in needed]


def cascade(
    styles: Iterable[Style],
    element: Element,
    ancestors: Sequence[Element] = (),
    state: ElementState | None = None,
    *,
    state_of: StateOf | None = None,
) -> CascadedStyle:
    """Apply matching styles in declaration order, last write wins per key.

    ``ancestors`` is ordered outermost first. Without ``state`` or
    ``state_of``, rules with a pseudo-class on the element go into that
    pseudo-class's layer, and rules that need an ancestor in some state are
    listed in ``conditional`` instead of being applied. With them, every
    compound is checked against its own element's state.
    """
    result = CascadedStyle()
    gated = state is not None or state_of is not None
    lookup = state_lookup(element, state, state_of)
    matched = 0
    for style in styles:
        conditions = style.selector.match_conditions(ancestors, element)
        if gated:
            if not style.selector.matches(ancestors, element, state, state_of=state_of):
                continue
            own = lookup(element)
            # ancestor requirements were just checked against live state
            conditions = [
                MatchCondition(c.pseudo_class) for c in conditions
                if c.pseudo_class is None or own.has(c.pseudo_class)
            ]
        if not conditions:
            continue
        matched += 1

        keys = _layer_keys(conditions)
        if keys != [None] and any(c.ancestor_pseudo_classes for c in conditions):
            result.conditional.append(style)
        for key in keys:
            layer = result.layers.setdefault(key, {})
            for prop in style.properties:
                layer[prop.key] = prop
    logger.debug(
        "%s: %d matching rule(s), %d layer(s), %d conditional",
        element.name, matched, len(result.layers), len(result.conditional),
    )
    return result
