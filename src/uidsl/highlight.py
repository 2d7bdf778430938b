"""Pygments lexer for the uidl UI-description language."""

from pygments.lexer import RegexLexer, bygroups, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)


class UidlLexer(RegexLexer):
    """Pygments lexer for uidl component trees and style rules."""

    name = "uidl"
    aliases = ["uidl"]
    filenames = ["*.uidl"]
    mimetypes = ["text/x-uidl"]

    tokens = {
        "root": [
            # Whitespace
            (r"\s+", Text),
            # Comments
            (r"//.*$", Comment.Single),
            (r"/\*[\s\S]*?\*/", Comment.Multiline),
            # Strings with escape support
            (r'"', String, "string"),
            # Late-bound references ${0.title}
            (r"\$\{[^}]*\}", String.Interpol),
            # Colors
            (r"rgba?\([^)]*\)", Number.Hex),
            # Lengths before bare numbers
            (r"-?[0-9]+(\.[0-9]+)?(px|em|pt|%)", Number),
            (r"-?[0-9]+\.[0-9]+", Number.Float),
            (r"-?[0-9]+", Number.Integer),
            # Boolean constants
            (r"\b(true|false)\b", Keyword.Constant),
            # CSS keywords
            (words(("auto", "none", "inherit"), prefix=r"\b", suffix=r"\b"), Keyword.Pseudo),
            # Pseudo-classes
            (
                r"(:)(hover|active|focus|disabled)\b",
                bygroups(Punctuation, Name.Decorator),
            ),
            # Ids, hex colors, classes
            (r"#[A-Za-z0-9_][A-Za-z0-9_-]*", Name.Variable),
            (r"\.[A-Za-z_][A-Za-z0-9_-]*", Name.Class),
            # Root definitions: Name: Component(
            (
                r"([A-Za-z_][A-Za-z0-9_-]*)(\s*)(:)(?=\s*[A-Za-z_][A-Za-z0-9_-]*\s*\()",
                bygroups(Name.Function, Text, Punctuation),
            ),
            # Component names
            (r"[A-Za-z_][A-Za-z0-9_-]*(?=\s*\()", Name.Tag),
            # Property keys (word followed by colon)
            (r"[A-Za-z_][A-Za-z0-9_-]*(?=\s*:)", Name.Attribute),
            # Named parameters (word followed by =)
            (r"[A-Za-z_][A-Za-z0-9_-]*(?=\s*=)", Name.Attribute),
            # Identifiers
            (r"[A-Za-z_][A-Za-z0-9_-]*", Name),
            # Operators
            (r"[>=|<]", Operator),
            # Punctuation
            (r"[(),;\[\]{}:]", Punctuation),
        ],
        # String state: handles escape sequences
        "string": [
            (r'\\[nrt\\"0]', String.Escape),
            (r'[^"\\]+', String),
            (r'"', String, "#pop"),
        ],
    }
