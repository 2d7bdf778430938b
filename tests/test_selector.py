"""Tests for selector matching."""

from __future__ import annotations

from uidsl.ast_nodes import Component
from uidsl.parser import parse
from uidsl.selector import (
    ChildSelector,
    Class,
    ElementState,
    GroupSelector,
    Id,
    MatchCondition,
    PseudoClass,
    SimpleSelector,
    Tag,
    format_selector,
)


def el(name: str, id: str | None = None, *classes: str) -> Component:
    return Component(name=name, id=id, classes=list(classes))


def sel(source: str):
    return parse(source + " { }").styles[0].selector


class TestSimpleSelector:
    def test_tag(self):
        assert sel("Button").matches([], el("Button"))
        assert not sel("Button").matches([], el("Label"))

    def test_id(self):
        assert sel("#ok").matches([], el("Button", "ok"))
        assert not sel("#ok").matches([], el("Button", "cancel"))
        assert not sel("#ok").matches([], el("Button"))

    def test_all_kinds_must_match(self):
        selector = sel("Button.primary.large")
        assert selector.matches([], el("Button", None, "large", "primary"))
        assert not selector.matches([], el("Button", None, "primary"))
        assert not selector.matches([], el("Label", None, "primary", "large"))

    def test_empty_kinds_match_everything(self):
        assert SimpleSelector([]).matches([], el("Anything"))


class TestPseudoClass:
    def test_structural_without_state(self):
        selector = sel("Button:hover")
        assert selector.matches([], el("Button"))
        assert selector.get_pseudo_class() == PseudoClass.HOVER

    def test_gated_with_state(self):
        selector = sel("Button:hover")
        assert not selector.matches([], el("Button"), ElementState())
        assert selector.matches([], el("Button"), ElementState(hovered=True))

    def test_no_pseudo_ignores_state(self):
        assert sel("Button").matches([], el("Button"), ElementState(active=True))

    def test_state_from_pseudo_classes(self):
        state = ElementState.from_pseudo_classes([PseudoClass.FOCUS, PseudoClass.DISABLED])
        assert state.focused and state.disabled
        assert not state.hovered
        assert state.active_pseudo_classes() == [PseudoClass.FOCUS, PseudoClass.DISABLED]

    def test_combinator_reports_target_pseudo(self):
        assert sel(".a > .b:active").get_pseudo_class() == PseudoClass.ACTIVE
        assert sel(".a:active > .b").get_pseudo_class() is None


class TestCombinators:
    def test_descendant_any_depth(self):
        selector = sel(".container .button")
        target = el("Button", None, "button")
        chain = [el("Window", None, "container"), el("Flex"), el("Flex")]
        assert selector.matches(chain, target)

    def test_descendant_needs_proper_ancestor(self):
        selector = sel(".x .x")
        assert not selector.matches([], el("A", None, "x"))

    def test_child_immediate_parent_only(self):
        selector = sel(".container > .button")
        target = el("Button", None, "button")
        assert selector.matches([el("Flex", None, "container")], target)
        assert not selector.matches([el("Flex", None, "container"), el("Flex")], target)

    def test_child_without_parent(self):
        assert not sel("A > B").matches([], el("B"))

    def test_nested_combinators(self):
        selector = sel("Window Flex > Button")
        chain = [el("Window"), el("Panel"), el("Flex")]
        assert selector.matches(chain, el("Button"))
        assert not selector.matches([el("Panel"), el("Flex")], el("Button"))

    def test_descendant_ancestor_chain_is_sliced(self):
        # `A > B C`: C has some ancestor B whose own parent is A
        selector = sel("A > B C")
        assert selector.matches([el("A"), el("B"), el("X")], el("C"))
        assert not selector.matches([el("Z"), el("B"), el("A")], el("C"))

    def test_group(self):
        selector = sel(".a, #b")
        assert selector.matches([], el("X", None, "a"))
        assert selector.matches([], el("X", "b"))
        assert not selector.matches([], el("X"))

    def test_group_conditions_cover_every_member(self):
        selector = sel(".a:hover, .b")
        assert selector.match_conditions([], el("X", None, "a")) == [MatchCondition(PseudoClass.HOVER)]
        assert selector.match_conditions([], el("X", None, "b")) == [MatchCondition()]
        both = selector.match_conditions([], el("X", None, "a", "b"))
        assert both == [MatchCondition(PseudoClass.HOVER), MatchCondition()]
        assert selector.match_conditions([], el("X")) == []


class TestAncestorPseudoClass:
    def test_structural_match_ignores_ancestor_state(self):
        selector = sel(".panel:hover .btn")
        assert selector.matches([el("Flex", None, "panel")], el("Button", None, "btn"))

    def test_conditions_record_ancestor_pseudo(self):
        selector = sel(".panel:hover .btn")
        conditions = selector.match_conditions([el("Flex", None, "panel")], el("Button", None, "btn"))
        assert conditions == [MatchCondition(None, (PseudoClass.HOVER,))]
        assert not conditions[0].unconditional

    def test_target_state_does_not_satisfy_ancestor(self):
        selector = sel(".panel:hover .btn")
        chain = [el("Flex", None, "panel")]
        assert not selector.matches(chain, el("Button", None, "btn"), ElementState(hovered=True))

    def test_state_of_gates_each_compound(self):
        panel = el("Flex", None, "panel")
        button = el("Button", None, "btn")
        selector = sel(".panel:hover .btn")
        hovered = {id(panel): ElementState(hovered=True)}
        assert selector.matches([panel], button, state_of=lambda e: hovered.get(id(e)))
        assert not selector.matches([panel], button, state_of=lambda e: None)

    def test_child_parent_state(self):
        parent = el("A")
        child = el("B")
        selector = sel("A:focus > B")
        states = {id(parent): ElementState(focused=True)}
        assert selector.matches([parent], child, state_of=lambda e: states.get(id(e)))
        assert not selector.matches([parent], child, ElementState(focused=True))
        assert selector.match_conditions([parent], child) == [
            MatchCondition(None, (PseudoClass.FOCUS,)),
        ]

    def test_own_state_overrides_state_of_for_target(self):
        selector = sel("A > B:hover")
        parent, child = el("A"), el("B")
        assert selector.matches(
            [parent], child, ElementState(hovered=True), state_of=lambda e: None,
        )

    def test_unconditional(self):
        assert MatchCondition().unconditional
        assert not MatchCondition(PseudoClass.HOVER).unconditional


class TestFormatSelector:
    def test_round_trip(self):
        for text in [".a.b#id", "Button:hover", "A B > C", ".a, .b:focus", "#x"]:
            assert format_selector(sel(text)) == text

    def test_constructed(self):
        selector = GroupSelector([
            ChildSelector(SimpleSelector([Tag("A")]), SimpleSelector([Id("b")])),
            SimpleSelector([Class("c")], PseudoClass.DISABLED),
        ])
        assert format_selector(selector) == "A > #b, .c:disabled"
