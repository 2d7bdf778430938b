"""Tests for the Pygments lexer."""

from __future__ import annotations

from pygments.token import Comment, Keyword, Name, Number, Operator, Punctuation, String, Text

from uidsl.highlight import UidlLexer


def _tokens(source: str) -> list[tuple[object, str]]:
    """Non-whitespace (token type, text) pairs."""
    return [(t, v) for t, v in UidlLexer().get_tokens(source) if t is not Text]


class TestUidlLexer:
    def test_metadata(self):
        assert UidlLexer.name == "uidl"
        assert "*.uidl" in UidlLexer.filenames

    def test_definition_and_components(self):
        toks = _tokens('Main: Flex(Vertical) { Label("hi") }')
        assert toks[0] == (Name.Function, "Main")
        assert toks[1] == (Punctuation, ":")
        assert (Name.Tag, "Flex") in toks
        assert (Name, "Vertical") in toks
        assert (Name.Tag, "Label") in toks
        assert (String, "hi") in toks

    def test_style_rule(self):
        toks = _tokens(".a:hover > #b { width: 50%; color: #ff0000 }")
        assert toks[0] == (Name.Class, ".a")
        assert toks[2] == (Name.Decorator, "hover")
        assert (Operator, ">") in toks
        assert (Name.Variable, "#b") in toks
        assert (Name.Attribute, "width") in toks
        assert (Number, "50%") in toks
        assert (Name.Variable, "#ff0000") in toks

    def test_values(self):
        toks = _tokens("V(${0.title}, true, 1.5, -3, rgb(1,2,3), auto, key=1)")
        assert (String.Interpol, "${0.title}") in toks
        assert (Keyword.Constant, "true") in toks
        assert (Number.Float, "1.5") in toks
        assert (Number.Integer, "-3") in toks
        assert (Number.Hex, "rgb(1,2,3)") in toks
        assert (Keyword.Pseudo, "auto") in toks
        assert (Name.Attribute, "key") in toks

    def test_comments(self):
        toks = _tokens("// line\n/* block\n comment */ A()")
        assert toks[0] == (Comment.Single, "// line")
        assert toks[1] == (Comment.Multiline, "/* block\n comment */")

    def test_string_escapes(self):
        toks = _tokens('"a\\n"')
        assert (String.Escape, "\\n") in toks
