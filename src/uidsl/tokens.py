"""Token kinds and token representation for the uidl lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Union

from uidsl.source import Span


class TokenKind(Enum):
    # Literals
    IDENT = auto()
    STRING = auto()
    INTEGER = auto()
    FLOAT = auto()
    BOOLEAN = auto()

    # Units and colors
    PX = auto()
    EM = auto()
    PT = auto()
    PERCENT = auto()
    RGB = auto()
    RGBA = auto()

    # Selector atoms
    HASH = auto()   # #id or #hexcolor
    CLASS = auto()  # .name

    # Late-bound ${path}
    RELATIVE = auto()

    # Punctuation
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COLON = auto()
    COMMA = auto()
    SEMICOLON = auto()
    LT = auto()
    GT = auto()
    EQUAL = auto()
    PIPE = auto()

    # Trivia
    WHITESPACE = auto()
    COMMENT = auto()

    # Special
    EOF = auto()
    NONE = auto()  # padding returned past the end of a cursor


TokenValue = Union[str, int, float, bool, tuple]


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: TokenValue
    span: Span
    preceded_by_space: bool = False

    @property
    def is_trivia(self) -> bool:
        return self.kind in TRIVIA


NONE_TOKEN = Token(TokenKind.NONE, "", Span(0, 0))

TRIVIA: frozenset[TokenKind] = frozenset({
    TokenKind.WHITESPACE,
    TokenKind.COMMENT,
})

KEYWORDS: dict[str, TokenKind] = {
    "true": TokenKind.BOOLEAN,
    "false": TokenKind.BOOLEAN,
}

PUNCTUATION: dict[str, TokenKind] = {
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    "=": TokenKind.EQUAL,
    "|": TokenKind.PIPE,
}

UNITS: dict[str, TokenKind] = {
    "px": TokenKind.PX,
    "em": TokenKind.EM,
    "pt": TokenKind.PT,
    "%": TokenKind.PERCENT,
}

# Delimiter pairs for TokenCursor.consume_delimited_inner
BRACES = (TokenKind.LBRACE, TokenKind.RBRACE)
BRACKETS = (TokenKind.LBRACKET, TokenKind.RBRACKET)
PARENS = (TokenKind.LPAREN, TokenKind.RPAREN)
