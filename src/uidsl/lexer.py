"""Lexer for the uidl UI-description language.

Produces a lossless stream of tokens from source text: whitespace and
comments are emitted as trivia tokens so that the spans of all tokens
cover the source exactly once. The parser works on the significant tokens
returned by :func:`tokenize`, each of which records whether trivia
preceded it.
"""

from __future__ import annotations

import re

from uidsl.errors import ParseError, ParseErrorKind
from uidsl.source import Span
from uidsl.tokens import KEYWORDS, PUNCTUATION, UNITS, Token, TokenKind

_RGBA_RE = re.compile(r"rgba\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)")
_RGB_RE = re.compile(r"rgb\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)")
_UNIT_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?(px|em|pt|%)")
_NUMBER_RE = re.compile(r"-?[0-9]+(\.[0-9]+)?")
_RELATIVE_RE = re.compile(r"\$\{([^}]+)\}")

_ESCAPES = {'n': '\n', 'r': '\r', 't': '\t', '\\': '\\', '"': '"', '0': '\0'}


def _is_ident_start(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == '_')


def _is_ident_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch in '_-')


class Lexer:
    """Tokenizes uidl source code."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self.tokens: list[Token] = []
        self._after_trivia = False

    def lex(self) -> list[Token]:
        """Tokenize the entire source, trivia included, ending with EOF."""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in ' \t\r\n':
                self._lex_whitespace()
            elif ch == '/' and self._peek(1) == '/':
                self._lex_line_comment()
            elif ch == '/' and self._peek(1) == '*':
                self._lex_block_comment()
            elif ch == '"':
                self._lex_string()
            elif ch.isdigit() or (ch == '-' and self._peek(1).isdigit()):
                self._lex_number()
            elif ch == 'r' and self._lex_color():
                pass
            elif _is_ident_start(ch):
                self._lex_identifier()
            elif ch == '#':
                self._lex_prefixed(TokenKind.HASH, lambda c: _is_ident_char(c) and c != '-')
            elif ch == '.':
                self._lex_prefixed(TokenKind.CLASS, _is_ident_start)
            elif ch == '$':
                self._lex_relative()
            elif ch in PUNCTUATION:
                self.pos += 1
                self._emit(PUNCTUATION[ch], ch, self.pos - 1)
            else:
                self._error(f"unexpected character {ch!r}", self.pos, self.pos + 1)

        self._emit(TokenKind.EOF, "", self.pos)
        return self.tokens

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def _emit(self, kind: TokenKind, value: object, start: int) -> Token:
        trivia = kind in (TokenKind.WHITESPACE, TokenKind.COMMENT)
        tok = Token(
            kind, value, Span(start, self.pos),
            preceded_by_space=self._after_trivia and not trivia,
        )
        self.tokens.append(tok)
        self._after_trivia = trivia
        return tok

    def _error(self, message: str, start: int, end: int) -> None:
        raise ParseError(ParseErrorKind.INVALID_TOKEN, Span(start, end), message)

    # ── Trivia ───────────────────────────────────────────────────

    def _lex_whitespace(self) -> None:
        start = self.pos
        while self.pos < len(self.source) and self.source[self.pos] in ' \t\r\n':
            self.pos += 1
        self._emit(TokenKind.WHITESPACE, self.source[start:self.pos], start)

    def _lex_line_comment(self) -> None:
        start = self.pos
        while self.pos < len(self.source) and self.source[self.pos] != '\n':
            self.pos += 1
        self._emit(TokenKind.COMMENT, self.source[start:self.pos], start)

    def _lex_block_comment(self) -> None:
        start = self.pos
        end = self.source.find('*/', start + 2)
        if end < 0:
            self._error("unterminated block comment", start, start + 2)
        self.pos = end + 2
        self._emit(TokenKind.COMMENT, self.source[start:self.pos], start)

    # ── Strings ──────────────────────────────────────────────────

    def _lex_string(self) -> None:
        start = self.pos
        self.pos += 1  # skip opening "
        text = []
        while self.pos < len(self.source) and self.source[self.pos] != '"':
            if self.source[self.pos] == '\\':
                text.append(self._lex_escape_sequence())
            else:
                text.append(self.source[self.pos])
                self.pos += 1

        if self.pos >= len(self.source):
            self._error("unterminated string literal", start, self.pos)

        self.pos += 1  # skip closing "
        self._emit(TokenKind.STRING, ''.join(text), start)

    def _lex_escape_sequence(self) -> str:
        self.pos += 1  # skip backslash
        if self.pos >= len(self.source):
            self._error("unexpected end of escape sequence", self.pos - 1, self.pos)
        ch = self.source[self.pos]
        if ch not in _ESCAPES:
            self._error(f"unknown escape sequence: \\{ch}", self.pos - 1, self.pos + 1)
        self.pos += 1
        return _ESCAPES[ch]

    # ── Numbers and colors ───────────────────────────────────────

    def _lex_number(self) -> None:
        start = self.pos
        m = _UNIT_RE.match(self.source, self.pos)
        if m:
            self.pos = m.end()
            unit = m.group(1)
            self._emit(UNITS[unit], float(m.group(0)[:-len(unit)]), start)
            return

        m = _NUMBER_RE.match(self.source, self.pos)
        self.pos = m.end()
        if m.group(1):
            self._emit(TokenKind.FLOAT, float(m.group(0)), start)
        else:
            self._emit(TokenKind.INTEGER, int(m.group(0)), start)

    def _lex_color(self) -> bool:
        """Lex ``rgb(...)`` / ``rgba(...)`` as a single token, if present."""
        start = self.pos
        for kind, pattern in ((TokenKind.RGBA, _RGBA_RE), (TokenKind.RGB, _RGB_RE)):
            m = pattern.match(self.source, self.pos)
            if m is None:
                continue
            channels = tuple(int(g) for g in m.groups())
            if any(c > 255 for c in channels):
                self._error("color channel out of range 0..255", start, m.end())
            self.pos = m.end()
            self._emit(kind, channels, start)
            return True
        return False

    # ── Identifiers and prefixed names ───────────────────────────

    def _lex_identifier(self) -> None:
        start = self.pos
        while self.pos < len(self.source) and _is_ident_char(self.source[self.pos]):
            self.pos += 1
        word = self.source[start:self.pos]

        if word in KEYWORDS:
            self._emit(KEYWORDS[word], word == "true", start)
            return
        self._emit(TokenKind.IDENT, word, start)

    def _lex_prefixed(self, kind: TokenKind, first_char) -> None:
        """Lex ``#name`` or ``.name``; the value excludes the prefix."""
        start = self.pos
        if not first_char(self._peek(1)):
            self._error(f"unexpected character {self.source[start]!r}", start, start + 1)
        self.pos += 2
        while self.pos < len(self.source) and _is_ident_char(self.source[self.pos]):
            self.pos += 1
        self._emit(kind, self.source[start + 1:self.pos], start)

    def _lex_relative(self) -> None:
        start = self.pos
        m = _RELATIVE_RE.match(self.source, self.pos)
        if m is None:
            self._error("expected '${path}'", start, start + 1)
        self.pos = m.end()
        self._emit(TokenKind.RELATIVE, m.group(1), start)


def tokenize(source: str) -> list[Token]:
    """Lex ``source`` and drop trivia, keeping the trailing EOF token."""
    return [t for t in Lexer(source).lex() if not t.is_trivia]
