"""Parser for the uidl UI-description language.

Recursive descent over immutable token cursors. Every ``_parse_*`` method
takes a cursor and returns ``(cursor_after, node)`` or raises
``ParseError``; a failed alternative leaves the caller's cursor untouched,
so speculative parsing needs no undo logic.
"""

from __future__ import annotations

import logging

from uidsl.ast_nodes import (
    Args,
    ArrayValue,
    BoolValue,
    Component,
    ComponentValue,
    CssIdent,
    CssKeyword,
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
from uidsl.cursor import TokenCursor
from uidsl.errors import ParseError, ParseErrorKind
from uidsl.lexer import tokenize
from uidsl.selector import (
    Class,
    ChildSelector,
    DescendantSelector,
    GroupSelector,
    Id,
    PseudoClass,
    Selector,
    SelectorKind,
    SimpleSelector,
    Tag,
)
from uidsl.source import Span
from uidsl.tokens import BRACES, BRACKETS, PARENS, Token, TokenKind

logger = logging.getLogger("uidsl.parser")

_PSEUDO_CLASSES = {p.value: p for p in PseudoClass}
_CSS_KEYWORDS = {k.value: k for k in CssKeyword}
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

# Errors that only say "this is not the shape we tried"; when every
# parameter alternative fails with one of these, report ExpectParameter.
_SHAPE_ERRORS = frozenset({
    ParseErrorKind.EXPECT_VALUE,
    ParseErrorKind.EXPECT_KEY_VALUE,
})


def _is_name(text: str) -> bool:
    return (
        text.isascii()
        and (text[0].isalpha() or text[0] == "_")
        and all(c.isalnum() or c in "_-" for c in text)
    )


class Parser:
    """Parses a significant-token list into a uidl ``Document``."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens

    def _span(self, start: TokenCursor, end: TokenCursor) -> Span:
        """Span from the token at ``start`` to the last token before ``end``."""
        first = start.span().start
        if end.index <= start.index:
            return Span(first, first)
        return Span(first, self.tokens[end.index - 1].span.end)

    # ── Top-level parsing ────────────────────────────────────────

    def parse(self) -> Document:
        """Parse the entire token stream into a Document."""
        cursor = TokenCursor(self.tokens)
        styles: list[Style] = []
        components: list[Component] = []
        definitions: list[Definition] = []

        while not cursor.is_eof():
            if cursor.at(TokenKind.IDENT, TokenKind.COLON, TokenKind.IDENT, TokenKind.LPAREN):
                cursor, definition = self._parse_definition(cursor)
                definitions.append(definition)
            elif self._is_style_start(cursor):
                cursor, style = self._parse_style_item(cursor)
                styles.append(style)
            elif cursor.at(TokenKind.IDENT, TokenKind.LPAREN):
                cursor, component = self._parse_component(cursor)
                components.append(component)
            else:
                raise ParseError(ParseErrorKind.UNKNOWN_START, cursor.span())

        logger.debug(
            "parsed %d style(s), %d component(s), %d definition(s) from %d tokens",
            len(styles), len(components), len(definitions), len(self.tokens),
        )
        return Document(styles=styles, components=components, definitions=definitions)

    @staticmethod
    def _is_style_start(cursor: TokenCursor) -> bool:
        first, second = cursor.peek(2)
        if first.kind in (TokenKind.HASH, TokenKind.CLASS):
            return True
        return first.kind is TokenKind.IDENT and second.kind is not TokenKind.LPAREN

    def _parse_definition(self, cursor: TokenCursor) -> tuple[TokenCursor, Definition]:
        start = cursor
        cursor, (name, _colon) = cursor.consume(2)
        cursor, component = self._parse_component(cursor)
        return cursor, Definition(name.value, component, self._span(start, cursor))

    # ── Components ───────────────────────────────────────────────

    def _parse_component(self, cursor: TokenCursor) -> tuple[TokenCursor, Component]:
        start = cursor
        span = cursor.span()
        cursor, name = cursor.consume_one()
        if name.kind is not TokenKind.IDENT:
            raise ParseError(ParseErrorKind.EXPECT_IDENT, span)

        split = cursor.consume_delimited_inner(PARENS)
        if split is None:
            raise ParseError(ParseErrorKind.EXPECT_PARENT_BLOCK, cursor.span())
        cursor, param_block = split
        params = self._parse_parameters(param_block)

        cursor, element_id, classes = self._parse_attached_selectors(cursor)

        children: list[Component] = []
        properties: dict[str, Value] = {}
        if cursor.at(TokenKind.LBRACE):
            split = cursor.consume_delimited_inner(BRACES)
            if split is None:
                raise ParseError(ParseErrorKind.EXPECT_BRACE_BLOCK, cursor.span(), "unclosed '{'")
            cursor, body = split
            while not body.is_eof():
                if body.at(TokenKind.IDENT, TokenKind.LPAREN):
                    body, child = self._parse_component(body)
                    children.append(child)
                elif body.at(TokenKind.IDENT, TokenKind.COLON):
                    body, (key, _colon) = body.consume(2)
                    body, value = self._parse_value(body)
                    properties[key.value] = value
                else:
                    raise ParseError(ParseErrorKind.EXPECT_BRACE_BLOCK, body.span())

        return cursor, Component(
            name=name.value,
            params=params,
            id=element_id,
            classes=classes,
            children=children,
            properties=properties,
            span=self._span(start, cursor),
        )

    def _parse_attached_selectors(
        self, cursor: TokenCursor,
    ) -> tuple[TokenCursor, str | None, list[str]]:
        """``#id`` and ``.class`` tokens written right after a parameter block."""
        element_id: str | None = None
        classes: list[str] = []
        while True:
            tok = cursor.peek()[0]
            if tok.kind is TokenKind.HASH:
                if element_id is not None:
                    raise ParseError(
                        ParseErrorKind.ID_ALREADY_DEFINED, tok.span,
                        f"'#{tok.value}' follows '#{element_id}'",
                    )
                element_id = tok.value
            elif tok.kind is TokenKind.CLASS:
                if tok.value not in classes:
                    classes.append(tok.value)
            else:
                return cursor, element_id, classes
            cursor = cursor.skip(1)

    # ── Parameters ───────────────────────────────────────────────

    def _parse_parameters(self, block: TokenCursor) -> Parameters:
        """Parse a ``(...)`` interior as named args, falling back to positional."""
        if block.is_eof():
            return Args([])
        try:
            return NamedArgs(self._parse_inner_map(block.fork()))
        except ParseError as map_error:
            try:
                return Args(self._parse_inner_array(block.fork()))
            except ParseError as args_error:
                furthest = max(args_error, map_error, key=lambda e: e.span.start)
                if furthest.kind not in _SHAPE_ERRORS:
                    raise furthest from None
                raise ParseError(
                    ParseErrorKind.EXPECT_PARAMETER, furthest.span, furthest.detail,
                ) from None

    def _parse_inner_map(self, cursor: TokenCursor) -> dict[str, Value]:
        entries: dict[str, Value] = {}
        while not cursor.is_eof():
            if not cursor.at(TokenKind.IDENT, TokenKind.EQUAL):
                raise ParseError(ParseErrorKind.EXPECT_KEY_VALUE, cursor.span())
            cursor, (key, _eq) = cursor.consume(2)
            cursor, value = self._parse_value(cursor)
            entries[key.value] = value
            cursor, _ = cursor.ignore(TokenKind.COMMA)
        return entries

    def _parse_inner_array(self, cursor: TokenCursor) -> list[Value]:
        values: list[Value] = []
        while not cursor.is_eof():
            cursor, value = self._parse_value(cursor)
            values.append(value)
            cursor, _ = cursor.ignore(TokenKind.COMMA)
        return values

    # ── Values ───────────────────────────────────────────────────

    def _parse_value(self, cursor: TokenCursor) -> tuple[TokenCursor, Value]:
        # Component literal; once `Ident (` is seen no other alternative applies
        if cursor.at(TokenKind.IDENT, TokenKind.LPAREN):
            cursor, component = self._parse_component(cursor)
            return cursor, ComponentValue(component)

        split = cursor.consume_delimited_inner(BRACES)
        if split is not None:
            return split.next, MapValue(self._parse_inner_map(split.result))

        split = cursor.consume_delimited_inner(BRACKETS)
        if split is not None:
            return split.next, ArrayValue(self._parse_inner_array(split.result))

        span = cursor.span()
        cursor, tok = cursor.consume_one()
        match tok.kind:
            case TokenKind.STRING:
                return cursor, StringValue(tok.value)
            case TokenKind.IDENT:
                return cursor, IdentValue(tok.value)
            case TokenKind.INTEGER:
                return cursor, IntValue(tok.value)
            case TokenKind.FLOAT:
                return cursor, FloatValue(tok.value)
            case TokenKind.BOOLEAN:
                return cursor, BoolValue(tok.value)
            case TokenKind.RELATIVE:
                return cursor, RelativeValue(self._parse_relative_path(tok))
        raise ParseError(ParseErrorKind.EXPECT_VALUE, span)

    def _parse_relative_path(self, tok: Token) -> list[int | str]:
        """Split ``${0.title}`` into ``[0, "title"]``."""
        path: list[int | str] = []
        for part in tok.value.split("."):
            part = part.strip()
            if part.isascii() and part.isdigit():
                path.append(int(part))
            elif part and _is_name(part):
                path.append(part)
            else:
                raise ParseError(
                    ParseErrorKind.EXPECT_VALUE, tok.span,
                    f"invalid reference path '${{{tok.value}}}'",
                )
        return path

    # ── Styles ───────────────────────────────────────────────────

    def _parse_style_item(self, cursor: TokenCursor) -> tuple[TokenCursor, Style]:
        start = cursor
        split = cursor.split_until(lambda t: t.kind is TokenKind.LBRACE)
        if split is None:
            raise ParseError(ParseErrorKind.EXPECT_BRACE_BLOCK, cursor.span())
        cursor, selector_run = split
        selector = self._parse_selector(selector_run)

        split = cursor.consume_delimited_inner(BRACES)
        if split is None:
            raise ParseError(ParseErrorKind.EXPECT_BRACE_BLOCK, cursor.span(), "unclosed '{'")
        cursor, block = split
        properties = self._parse_style_properties(block)
        return cursor, Style(selector, properties, self._span(start, cursor))

    def _parse_style_properties(self, cursor: TokenCursor) -> list[StyleProperty]:
        """``key: v1 v2 ...;`` declarations separated by semicolons."""
        properties: list[StyleProperty] = []
        while True:
            cursor = cursor.ignore_until(lambda t: t.kind is not TokenKind.SEMICOLON)
            if cursor.is_eof():
                return properties
            if not cursor.at(TokenKind.IDENT, TokenKind.COLON):
                raise ParseError(ParseErrorKind.EXPECT_IDENT, cursor.span())
            cursor, (key, _colon) = cursor.consume(2)

            split = cursor.split_until(lambda t: t.kind is TokenKind.SEMICOLON)
            if split is None:
                values_run, cursor = cursor, cursor.skip(len(cursor))
            else:
                cursor, values_run = split
            if values_run.is_eof():
                raise ParseError(
                    ParseErrorKind.INVALID_CSS_VALUE, values_run.span(),
                    f"missing value for '{key.value}'",
                )
            values = [self._css_value(tok) for tok in values_run]
            properties.append(StyleProperty(key.value, values))

    def _css_value(self, tok: Token) -> CssValue:
        match tok.kind:
            case TokenKind.PX:
                return Px(tok.value)
            case TokenKind.EM:
                return Em(tok.value)
            case TokenKind.PT:
                return Pt(tok.value)
            case TokenKind.PERCENT:
                return Percent(tok.value)
            case TokenKind.INTEGER | TokenKind.FLOAT:
                return CssNumber(float(tok.value))
            case TokenKind.STRING:
                return CssString(tok.value)
            case TokenKind.RGB:
                return Rgb(*tok.value)
            case TokenKind.RGBA:
                return Rgba(*tok.value)
            case TokenKind.HASH:
                if len(tok.value) in (3, 4, 6, 8) and set(tok.value) <= _HEX_DIGITS:
                    return HexColor(tok.value)
                raise ParseError(
                    ParseErrorKind.INVALID_CSS_VALUE, tok.span,
                    f"'#{tok.value}' is not a hex color",
                )
            case TokenKind.IDENT:
                if tok.value in _CSS_KEYWORDS:
                    return Keyword(_CSS_KEYWORDS[tok.value])
                return CssIdent(tok.value)
        raise ParseError(ParseErrorKind.INVALID_CSS_VALUE, tok.span)

    # ── Selectors ────────────────────────────────────────────────

    def _parse_selector(self, cursor: TokenCursor) -> Selector:
        """``a, b`` groups of complex selectors."""
        members: list[Selector] = []
        while True:
            cursor, selector = self._parse_complex_selector(cursor)
            members.append(selector)
            if cursor.is_eof():
                break
            cursor, _ = cursor.ignore(TokenKind.COMMA)
        if len(members) == 1:
            return members[0]
        return GroupSelector(members)

    def _parse_complex_selector(self, cursor: TokenCursor) -> tuple[TokenCursor, Selector]:
        """Compounds joined by ``>`` (child) or whitespace (descendant), left-associative."""
        cursor, selector = self._parse_compound_selector(cursor)
        while not cursor.is_eof() and not cursor.at(TokenKind.COMMA):
            if cursor.at(TokenKind.GT):
                cursor, right = self._parse_compound_selector(cursor.skip(1))
                selector = ChildSelector(selector, right)
            elif cursor.peek()[0].preceded_by_space:
                cursor, right = self._parse_compound_selector(cursor)
                selector = DescendantSelector(selector, right)
            else:
                raise ParseError(ParseErrorKind.INVALID_CSS_SELECTOR, cursor.span())
        return cursor, selector

    def _parse_compound_selector(self, cursor: TokenCursor) -> tuple[TokenCursor, SimpleSelector]:
        """``Tag#id.class:pseudo`` with no whitespace between the parts."""
        kinds: list[SelectorKind] = []
        while not cursor.is_eof():
            tok = cursor.peek()[0]
            if kinds and tok.preceded_by_space:
                break
            if tok.kind is TokenKind.IDENT and not kinds:
                kinds.append(Tag(tok.value))
            elif tok.kind is TokenKind.HASH:
                if any(isinstance(k, Id) for k in kinds):
                    raise ParseError(
                        ParseErrorKind.ID_ALREADY_DEFINED, tok.span,
                        "a selector may name only one id",
                    )
                kinds.append(Id(tok.value))
            elif tok.kind is TokenKind.CLASS:
                kinds.append(Class(tok.value))
            else:
                break
            cursor = cursor.skip(1)

        if not kinds:
            raise ParseError(ParseErrorKind.INVALID_CSS_SELECTOR, cursor.span())

        pseudo_class = None
        if cursor.at(TokenKind.COLON) and not cursor.peek()[0].preceded_by_space:
            cursor = cursor.skip(1)
            name_span = cursor.span()
            cursor, name = cursor.consume_one()
            if name.kind is not TokenKind.IDENT or name.preceded_by_space:
                raise ParseError(
                    ParseErrorKind.INVALID_CSS_SELECTOR, name_span, "expected a pseudo-class name",
                )
            pseudo_class = _PSEUDO_CLASSES.get(name.value)
            if pseudo_class is None:
                raise ParseError(
                    ParseErrorKind.INVALID_CSS_SELECTOR, name.span,
                    f"unknown pseudo-class ':{name.value}'",
                )
        return cursor, SimpleSelector(kinds, pseudo_class)


def parse(source: str) -> Document:
    """Tokenize and parse uidl source text.

    Returns a complete ``Document`` or raises a single ``ParseError``.
    """
    return Parser(tokenize(source)).parse()
