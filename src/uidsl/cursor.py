"""Immutable, cheaply forkable cursor over a token stream.

A cursor is a ``(tokens, start, end)`` triple over a shared token list.
Every operation returns a new cursor and leaves the receiver untouched, so
a grammar alternative can be tried on a fork and simply discarded when it
fails. There is no rollback bookkeeping anywhere in the parser.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import NamedTuple, TypeVar

from uidsl.source import Span
from uidsl.tokens import NONE_TOKEN, Token, TokenKind

T = TypeVar("T")


class SplitCursor(NamedTuple):
    """Result of carving a bounded sub-cursor out of a cursor."""

    next: TokenCursor    # positioned after the carved region
    result: TokenCursor  # the carved region itself


class TokenCursor:
    """A read-only window ``tokens[start:end]`` into a token list."""

    __slots__ = ("tokens", "start", "end")

    def __init__(self, tokens: Sequence[Token], start: int = 0, end: int | None = None) -> None:
        if end is None:
            end = len(tokens)
            if end and tokens[-1].kind is TokenKind.EOF:
                end -= 1
        self.tokens = tokens
        self.start = start
        self.end = end

    def __repr__(self) -> str:
        return f"TokenCursor({self.start}..{self.end})"

    def __len__(self) -> int:
        return self.end - self.start

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens[self.start:self.end])

    # ── Position ─────────────────────────────────────────────────

    @property
    def index(self) -> int:
        """Index of the current token in the root token list."""
        return self.start

    def fork(self) -> TokenCursor:
        """An independent cursor at the same position."""
        return TokenCursor(self.tokens, self.start, self.end)

    def is_eof(self) -> bool:
        return self.start >= self.end

    def span(self) -> Span:
        """Span of the current token.

        At the end of a bounded cursor this is the token that bounds it
        (a closing delimiter, or the EOF token of the root stream).
        """
        if self.start < len(self.tokens):
            return self.tokens[self.start].span
        if self.tokens:
            end = self.tokens[-1].span.end
            return Span(end, end)
        return Span(0, 0)

    def skip(self, size: int) -> TokenCursor:
        return TokenCursor(self.tokens, min(self.start + size, self.end), self.end)

    # ── Taking tokens ────────────────────────────────────────────

    def peek(self, size: int = 1) -> tuple[Token, ...]:
        """The next ``size`` tokens, padded with ``NONE_TOKEN`` past the end."""
        taken = min(size, len(self))
        window = tuple(self.tokens[self.start:self.start + taken])
        return window + (NONE_TOKEN,) * (size - taken)

    def consume(self, size: int = 1) -> tuple[TokenCursor, tuple[Token, ...]]:
        """Take ``size`` tokens; callers treat ``NONE_TOKEN`` padding as absent."""
        return self.skip(size), self.peek(size)

    def consume_one(self) -> tuple[TokenCursor, Token]:
        return self.skip(1), self.peek(1)[0]

    def at(self, *kinds: TokenKind) -> bool:
        """True if the next tokens have exactly these kinds."""
        return tuple(t.kind for t in self.peek(len(kinds))) == kinds

    def ignore(self, *kinds: TokenKind) -> tuple[TokenCursor, bool]:
        """Skip the next tokens iff they match ``kinds``."""
        if self.at(*kinds):
            return self.skip(len(kinds)), True
        return self, False

    def ignore_oneof(self, kinds: Sequence[TokenKind]) -> tuple[TokenCursor, bool]:
        if self.peek(1)[0].kind in kinds:
            return self.skip(1), True
        return self, False

    def ignore_until(self, pred: Callable[[Token], bool]) -> TokenCursor:
        """Advance to the first token satisfying ``pred`` (or the end)."""
        idx = self.start
        while idx < self.end and not pred(self.tokens[idx]):
            idx += 1
        return TokenCursor(self.tokens, idx, self.end)

    def split_until(self, pred: Callable[[Token], bool]) -> SplitCursor | None:
        """Carve out the run of tokens before the first one satisfying ``pred``.

        Returns ``None`` if no token satisfies ``pred``.
        """
        for idx in range(self.start, self.end):
            if pred(self.tokens[idx]):
                return SplitCursor(
                    TokenCursor(self.tokens, idx, self.end),
                    TokenCursor(self.tokens, self.start, idx),
                )
        return None

    def consume_delimited_inner(self, delimiters: tuple[TokenKind, TokenKind]) -> SplitCursor | None:
        """Carve out the inside of a balanced ``open ... close`` block.

        Returns ``None`` if the cursor is not positioned at ``open`` or the
        stream ends before the matching ``close``.
        """
        open_kind, close_kind = delimiters
        assert open_kind is not close_kind
        assert TokenKind.NONE not in delimiters

        if self.is_eof() or self.tokens[self.start].kind is not open_kind:
            return None
        depth = 0
        for idx in range(self.start, self.end):
            kind = self.tokens[idx].kind
            if kind is open_kind:
                depth += 1
            elif kind is close_kind:
                depth -= 1
                if depth == 0:
                    return SplitCursor(
                        TokenCursor(self.tokens, idx + 1, self.end),
                        TokenCursor(self.tokens, self.start + 1, idx),
                    )
        return None

    def collect_until(
        self, check: Callable[[TokenCursor], tuple[TokenCursor, T | None]],
    ) -> tuple[TokenCursor, list[T]]:
        """Repeatedly apply ``check`` until it yields ``None`` or input ends.

        ``check`` returns the cursor to continue from together with an item,
        or ``None`` to stop; exceptions propagate to the caller.
        """
        items: list[T] = []
        cursor = self
        while not cursor.is_eof():
            cursor, item = check(cursor)
            if item is None:
                break
            items.append(item)
        return cursor, items
