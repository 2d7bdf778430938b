"""Tests for the immutable token cursor."""

from __future__ import annotations

import pytest

from uidsl.cursor import TokenCursor
from uidsl.lexer import tokenize
from uidsl.tokens import BRACES, NONE_TOKEN, PARENS, TokenKind


def cursor(source: str) -> TokenCursor:
    return TokenCursor(tokenize(source))


def values(c: TokenCursor) -> list[object]:
    return [t.value for t in c]


class TestCursorBasics:
    def test_eof_token_excluded(self):
        c = cursor("a b")
        assert len(c) == 2
        assert not c.is_eof()
        assert c.skip(2).is_eof()

    def test_empty(self):
        c = cursor("")
        assert c.is_eof()
        assert c.peek() == (NONE_TOKEN,)

    def test_skip_is_bounded(self):
        c = cursor("a")
        assert c.skip(10).is_eof()
        assert c.skip(10).index == 1

    def test_fork_is_independent(self):
        c = cursor("a b c")
        forked = c.fork()
        moved = forked.skip(2)
        assert c.index == 0
        assert forked.index == 0
        assert moved.index == 2

    def test_span_at_end_points_past_last_token(self):
        c = cursor("ab").skip(1)
        assert c.span().start == 2


class TestCursorConsume:
    def test_consume_returns_tokens_and_new_cursor(self):
        c = cursor("a b c")
        rest, (first, second) = c.consume(2)
        assert (first.value, second.value) == ("a", "b")
        assert values(rest) == ["c"]
        # receiver unchanged
        assert values(c) == ["a", "b", "c"]

    def test_consume_pads_with_sentinel(self):
        c = cursor("a")
        rest, taken = c.consume(3)
        assert taken[0].value == "a"
        assert taken[1:] == (NONE_TOKEN, NONE_TOKEN)
        assert rest.is_eof()

    def test_at(self):
        c = cursor("Button(")
        assert c.at(TokenKind.IDENT, TokenKind.LPAREN)
        assert not c.at(TokenKind.IDENT, TokenKind.LBRACE)
        assert not c.at(TokenKind.IDENT, TokenKind.LPAREN, TokenKind.RPAREN)

    def test_ignore_matches(self):
        rest, matched = cursor(", a").ignore(TokenKind.COMMA)
        assert matched
        assert values(rest) == ["a"]

    def test_ignore_no_match_returns_same_cursor(self):
        c = cursor("a")
        rest, matched = c.ignore(TokenKind.COMMA)
        assert not matched
        assert rest is c

    def test_ignore_oneof(self):
        rest, matched = cursor("; a").ignore_oneof([TokenKind.COMMA, TokenKind.SEMICOLON])
        assert matched
        assert values(rest) == ["a"]


class TestCursorScanning:
    def test_ignore_until(self):
        c = cursor("a b { c }").ignore_until(lambda t: t.kind is TokenKind.LBRACE)
        assert c.peek()[0].kind is TokenKind.LBRACE

    def test_ignore_until_runs_to_end(self):
        assert cursor("a b").ignore_until(lambda t: False).is_eof()

    def test_split_until(self):
        split = cursor(".a > .b { x }").split_until(lambda t: t.kind is TokenKind.LBRACE)
        assert split is not None
        assert values(split.result) == ["a", ">", "b"]
        assert split.next.peek()[0].kind is TokenKind.LBRACE

    def test_split_until_missing(self):
        assert cursor("a b").split_until(lambda t: t.kind is TokenKind.LBRACE) is None

    def test_collect_until(self):
        def take_ident(c):
            rest, tok = c.consume_one()
            if tok.kind is not TokenKind.IDENT:
                return c, None
            return rest, tok.value

        rest, items = cursor("a b c ; d").collect_until(take_ident)
        assert items == ["a", "b", "c"]
        assert rest.peek()[0].kind is TokenKind.SEMICOLON


class TestDelimitedInner:
    def test_simple_block(self):
        split = cursor('("OK") rest').consume_delimited_inner(PARENS)
        assert split is not None
        assert values(split.result) == ["OK"]
        assert values(split.next) == ["rest"]

    def test_nested_block(self):
        split = cursor("{ a { b } c } d").consume_delimited_inner(BRACES)
        assert values(split.result) == ["a", "{", "b", "}", "c"]
        assert values(split.next) == ["d"]

    def test_empty_block(self):
        split = cursor("()").consume_delimited_inner(PARENS)
        assert split.result.is_eof()
        assert split.next.is_eof()

    def test_unbalanced_fails(self):
        assert cursor("( a ( b )").consume_delimited_inner(PARENS) is None

    def test_not_at_open_fails(self):
        assert cursor("a ( b )").consume_delimited_inner(PARENS) is None

    def test_inner_cursor_is_bounded(self):
        split = cursor("(a) b").consume_delimited_inner(PARENS)
        inner = split.result.skip(1)
        assert inner.is_eof()
        # span at the end of a bounded cursor is its closing delimiter
        assert inner.span() == split.next.tokens[2].span

    def test_same_delimiters_rejected(self):
        with pytest.raises(AssertionError):
            cursor("(").consume_delimited_inner((TokenKind.LPAREN, TokenKind.LPAREN))
