"""Tests for the uidl LSP server."""

from __future__ import annotations

from lsprotocol import types as lsp

from uidsl.errors import Severity
from uidsl.lsp import (
    _SEVERITY_MAP,
    _analyze,
    _component_names,
    _document_symbols,
    _get_word_at,
    _state,
    completion,
    formatting,
    hover,
    span_to_range,
)
from uidsl.parser import parse
from uidsl.source import SourceText, Span

SOURCE = (
    ".primary { color: #ff0000 }\n"
    "Card: Flex(Vertical)#card { Label(${0}) Button(\"OK\") }\n"
    "Main: Flex(Horizontal) { Card(\"title\").wide }\n"
)


def _doc_id(uri: str) -> lsp.TextDocumentIdentifier:
    return lsp.TextDocumentIdentifier(uri=uri)


class TestSpanConversion:
    def test_single_line(self):
        r = span_to_range(Span(1, 4), SourceText("abcdef"))
        assert (r.start.line, r.start.character) == (0, 1)
        assert (r.end.line, r.end.character) == (0, 4)

    def test_multiline(self):
        r = span_to_range(Span(1, 4), SourceText("ab\ncd"))
        assert (r.start.line, r.start.character) == (0, 1)
        assert (r.end.line, r.end.character) == (1, 1)

    def test_missing_span(self):
        r = span_to_range(None, SourceText("abc"))
        assert r.start == lsp.Position(0, 0)
        assert r.end == lsp.Position(0, 0)

    def test_columns_count_utf16_units(self):
        # é is one UTF-16 unit, the emoji two
        r = span_to_range(Span(2, 3), SourceText("é😀x"))
        assert (r.start.line, r.start.character) == (0, 3)
        assert (r.end.line, r.end.character) == (0, 4)

    def test_non_ascii_on_later_line(self):
        r = span_to_range(Span(4, 5), SourceText("a\n😀😀b"))
        assert (r.start.line, r.start.character) == (1, 4)


class TestSeverityMap:
    def test_error_maps(self):
        assert _SEVERITY_MAP[Severity.ERROR] == lsp.DiagnosticSeverity.Error

    def test_warning_maps(self):
        assert _SEVERITY_MAP[Severity.WARNING] == lsp.DiagnosticSeverity.Warning

    def test_note_maps(self):
        assert _SEVERITY_MAP[Severity.NOTE] == lsp.DiagnosticSeverity.Information


class TestGetWordAt:
    def test_word_middle(self):
        assert _get_word_at("Flex(Vertical)", 0, 2) == "Flex"

    def test_word_end(self):
        assert _get_word_at("Flex", 0, 4) == "Flex"

    def test_hyphenated(self):
        assert _get_word_at("  font-size: 1px", 0, 4) == "font-size"

    def test_second_line(self):
        assert _get_word_at("A()\nButton:hover", 1, 9) == "hover"

    def test_out_of_range(self):
        assert _get_word_at("", 0, 0) == ""
        assert _get_word_at("abc", 3, 0) == ""


class TestAnalyze:
    def test_valid(self):
        ds = _analyze("file:///ok.uidl", SOURCE)
        assert ds.document is not None
        assert ds.diagnostics == []
        _state.pop("file:///ok.uidl", None)

    def test_parse_error_diagnostic(self):
        ds = _analyze("file:///bad.uidl", "A()\nButton(=)\n")
        assert ds.document is None
        assert len(ds.diagnostics) == 1
        diag = ds.diagnostics[0]
        assert diag.code == "E206"
        assert diag.message.startswith("[E206]")
        assert diag.severity == lsp.DiagnosticSeverity.Error
        assert diag.range.start == lsp.Position(line=1, character=7)
        assert diag.range.end == lsp.Position(line=1, character=8)
        _state.pop("file:///bad.uidl", None)

    def test_lex_error_detail(self):
        ds = _analyze("file:///lex.uidl", "A(@)")
        assert ds.diagnostics[0].code == "E100"
        assert "'@'" in ds.diagnostics[0].message
        _state.pop("file:///lex.uidl", None)

    def test_caches_state(self):
        uri = "file:///cached.uidl"
        ds = _analyze(uri, "A()")
        assert _state.get(uri) is ds
        _state.pop(uri, None)


class TestSymbols:
    def test_component_names(self):
        assert _component_names(parse(SOURCE)) == ["Button", "Card", "Flex", "Label", "Main"]

    def test_document_symbols(self):
        text = SourceText(SOURCE)
        symbols = _document_symbols(parse(SOURCE), text)
        assert [s.name for s in symbols] == [".primary", "Card", "Main"]
        assert symbols[0].kind == lsp.SymbolKind.Property
        assert symbols[0].detail == "1 declaration(s)"

        card = symbols[1]
        assert card.kind == lsp.SymbolKind.Class
        assert card.detail == "Flex"
        body = card.children[0]
        assert body.name == "Flex"
        assert body.detail == "#card"
        assert [c.name for c in body.children] == ["Label", "Button"]

    def test_component_detail_classes(self):
        symbols = _document_symbols(parse(SOURCE), SourceText(SOURCE))
        main_body = symbols[2].children[0]
        assert main_body.children[0].detail == ".wide"
        assert main_body.children[0].children is None

    def test_symbol_ranges(self):
        symbols = _document_symbols(parse(SOURCE), SourceText(SOURCE))
        assert symbols[0].range.start == lsp.Position(line=0, character=0)
        assert symbols[1].range.start.line == 1
        assert symbols[2].range.start.line == 2


class TestHover:
    def _hover(self, uri: str, line: int, character: int) -> lsp.Hover | None:
        return hover(lsp.HoverParams(
            text_document=_doc_id(uri),
            position=lsp.Position(line=line, character=character),
        ))

    def test_definition(self):
        uri = "file:///hover.uidl"
        _analyze(uri, SOURCE)
        result = self._hover(uri, 2, 27)
        assert result is not None
        assert "**definition** `Card`" in result.contents.value
        assert "2 child component(s)" in result.contents.value
        _state.pop(uri, None)

    def test_pseudo_class(self):
        uri = "file:///hover_pseudo.uidl"
        _analyze(uri, "Button:focus { }")
        result = self._hover(uri, 0, 9)
        assert result is not None
        assert ":focus" in result.contents.value
        _state.pop(uri, None)

    def test_unknown_word(self):
        uri = "file:///hover_none.uidl"
        _analyze(uri, SOURCE)
        assert self._hover(uri, 0, 13) is None
        _state.pop(uri, None)

    def test_unknown_document(self):
        assert self._hover("file:///never-opened.uidl", 0, 0) is None


def _complete_labels(uri: str) -> set[str]:
    result = completion(lsp.CompletionParams(
        text_document=_doc_id(uri),
        position=lsp.Position(line=0, character=0),
    ))
    return {item.label for item in result.items}


class TestCompletion:
    def test_component_names(self):
        uri = "file:///complete.uidl"
        _analyze(uri, SOURCE)
        labels = _complete_labels(uri)
        for name in ("Card", "Main", "Flex", "Label", "Button"):
            assert name in labels
        _state.pop(uri, None)

    def test_keywords(self):
        labels = _complete_labels("file:///unopened.uidl")
        for word in ("hover", "active", "focus", "disabled", "auto", "true", "false"):
            assert word in labels

    def test_broken_document_still_completes(self):
        uri = "file:///complete_broken.uidl"
        _analyze(uri, "Flex(")
        assert "hover" in _complete_labels(uri)
        _state.pop(uri, None)


class TestFormatting:
    def _format(self, uri: str, tab_size: int = 4) -> list[lsp.TextEdit] | None:
        return formatting(lsp.DocumentFormattingParams(
            text_document=_doc_id(uri),
            options=lsp.FormattingOptions(tab_size=tab_size, insert_spaces=True),
        ))

    def test_replaces_document(self):
        uri = "file:///fmt.uidl"
        _analyze(uri, "Flex(Vertical){Label( \"a\" )}")
        edits = self._format(uri, tab_size=2)
        assert edits is not None and len(edits) == 1
        assert edits[0].new_text == 'Flex(Vertical) {\n  Label("a")\n}\n'
        assert edits[0].range.start == lsp.Position(0, 0)
        assert edits[0].range.end == lsp.Position(0, 28)
        _state.pop(uri, None)

    def test_already_formatted(self):
        uri = "file:///fmt_clean.uidl"
        _analyze(uri, 'Label("a")\n')
        assert self._format(uri) is None
        _state.pop(uri, None)

    def test_broken_document(self):
        uri = "file:///fmt_broken.uidl"
        _analyze(uri, "Flex(")
        assert self._format(uri) is None
        _state.pop(uri, None)
