"""uidl Language Server: pygls-based LSP for .uidl files.

Provides diagnostics, hover, completion, document symbols, and
formatting via stdio transport.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from uidsl import __version__
from uidsl.ast_nodes import Component, CssKeyword, Definition, Document, Style
from uidsl.errors import Diagnostic, ParseError, Severity
from uidsl.formatter import UidlFormatter
from uidsl.lexer import tokenize
from uidsl.parser import Parser
from uidsl.selector import PseudoClass, format_selector
from uidsl.source import SourceText, Span

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
    Severity.NOTE: lsp.DiagnosticSeverity.Information,
}

_VALUE_KEYWORDS = ["true", "false"]
_CSS_KEYWORDS = [k.value for k in CssKeyword]
_PSEUDO_CLASSES = [p.value for p in PseudoClass]
_WORD_RE = re.compile(r"[A-Za-z0-9_-]+")

_ZERO_RANGE = lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0))


def _position(source: SourceText, offset: int) -> lsp.Position:
    line, _ = source.line_col(offset)
    return lsp.Position(line=line - 1, character=source.utf16_col(offset))


def span_to_range(span: Span | None, source: SourceText) -> lsp.Range:
    """Convert a ``str``-offset Span to an LSP Range (UTF-16 columns)."""
    if span is None:
        return _ZERO_RANGE
    return lsp.Range(start=_position(source, span.start), end=_position(source, span.end))


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    text: SourceText | None = None
    document: Document | None = None
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "uidsl-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _parse_diag(d: Diagnostic, text: SourceText) -> lsp.Diagnostic:
    """Convert a uidsl Diagnostic to an LSP Diagnostic."""
    span_range = _ZERO_RANGE
    detail = ""
    if d.labels:
        span_range = span_to_range(d.labels[0].span, text)
        detail = d.labels[0].message
    msg = f"[{d.code}] {d.message}"
    if detail:
        msg += f" ({detail})"
    return lsp.Diagnostic(
        range=span_range,
        severity=_SEVERITY_MAP.get(d.severity, lsp.DiagnosticSeverity.Error),
        source="uidsl",
        code=d.code,
        message=msg,
    )


def _analyze(uri: str, source: str) -> DocumentState:
    """Parse the document, cache results, return state."""
    text = SourceText(source, uri)
    ds = DocumentState(source=source, text=text)

    try:
        ds.document = Parser(tokenize(source)).parse()
    except ParseError as e:
        ds.diagnostics = [_parse_diag(e.to_diagnostic(), text)]
    except Exception as e:
        ds.diagnostics = [lsp.Diagnostic(
            range=_ZERO_RANGE,
            severity=lsp.DiagnosticSeverity.Error, source="uidsl",
            message=f"[internal] parser error: {e}",
        )]

    _state[uri] = ds
    return ds


def _get_word_at(source: str, line: int, character: int) -> str:
    """The identifier touching the 0-indexed position, or ``""``."""
    lines = source.splitlines()
    if not 0 <= line < len(lines):
        return ""
    for m in _WORD_RE.finditer(lines[line]):
        if m.start() <= character <= m.end():
            return m.group()
    return ""


def _component_names(document: Document) -> list[str]:
    names = {d.name for d in document.definitions}
    names.update(component.name for _, component in document.walk())
    return sorted(names)


# ── LSP Feature Handlers ─────────────────────────────────────────


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    ds = _analyze(uri, params.text_document.text)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: the last change holds the whole text
    source = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, source)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.document is None:
        return None

    word = _get_word_at(ds.source, params.position.line, params.position.character)
    if not word:
        return None

    definition = ds.document.get_definition(word)
    if definition is not None:
        body = definition.component
        content = f"**definition** `{definition.name}` expands to `{body.name}`"
        if body.children:
            content += f" with {len(body.children)} child component(s)"
        return lsp.Hover(contents=lsp.MarkupContent(
            kind=lsp.MarkupKind.Markdown,
            value=content,
        ))

    if word in _PSEUDO_CLASSES:
        return lsp.Hover(contents=lsp.MarkupContent(
            kind=lsp.MarkupKind.Markdown,
            value=f"**pseudo-class** `:{word}`",
        ))

    return None


@server.feature(
    lsp.TEXT_DOCUMENT_COMPLETION,
    lsp.CompletionOptions(trigger_characters=[":", "("]),
)
def completion(params: lsp.CompletionParams) -> lsp.CompletionList:
    ds = _state.get(params.text_document.uri)
    items: list[lsp.CompletionItem] = []

    if ds is not None and ds.document is not None:
        for name in _component_names(ds.document):
            items.append(lsp.CompletionItem(
                label=name,
                kind=lsp.CompletionItemKind.Class,
            ))

    for pseudo in _PSEUDO_CLASSES:
        items.append(lsp.CompletionItem(
            label=pseudo,
            kind=lsp.CompletionItemKind.Keyword,
            detail="pseudo-class",
        ))
    for kw in _CSS_KEYWORDS:
        items.append(lsp.CompletionItem(
            label=kw,
            kind=lsp.CompletionItemKind.Value,
            detail="CSS keyword",
        ))
    for kw in _VALUE_KEYWORDS:
        items.append(lsp.CompletionItem(
            label=kw,
            kind=lsp.CompletionItemKind.Keyword,
        ))

    return lsp.CompletionList(is_incomplete=False, items=items)


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.document is None or ds.text is None:
        return []
    return _document_symbols(ds.document, ds.text)


def _document_symbols(document: Document, text: SourceText) -> list[lsp.DocumentSymbol]:
    symbols: list[lsp.DocumentSymbol] = []
    for style in document.styles:
        symbols.append(_style_to_symbol(style, text))
    for definition in document.definitions:
        symbols.append(_definition_to_symbol(definition, text))
    for component in document.components:
        symbols.append(_component_to_symbol(component, text))
    return symbols


def _style_to_symbol(style: Style, text: SourceText) -> lsp.DocumentSymbol:
    rng = span_to_range(style.span, text)
    return lsp.DocumentSymbol(
        name=format_selector(style.selector),
        kind=lsp.SymbolKind.Property,
        range=rng,
        selection_range=rng,
        detail=f"{len(style.properties)} declaration(s)",
    )


def _definition_to_symbol(definition: Definition, text: SourceText) -> lsp.DocumentSymbol:
    rng = span_to_range(definition.span, text)
    body = _component_to_symbol(definition.component, text)
    return lsp.DocumentSymbol(
        name=definition.name,
        kind=lsp.SymbolKind.Class,
        range=rng,
        selection_range=rng,
        detail=definition.component.name,
        children=[body],
    )


def _component_to_symbol(component: Component, text: SourceText) -> lsp.DocumentSymbol:
    rng = span_to_range(component.span, text)
    detail = "".join(
        [f"#{component.id}" if component.id else ""] + [f".{c}" for c in component.classes]
    )
    children = [_component_to_symbol(child, text) for child in component.children]
    return lsp.DocumentSymbol(
        name=component.name,
        kind=lsp.SymbolKind.Object,
        range=rng,
        selection_range=rng,
        detail=detail or None,
        children=children if children else None,
    )


@server.feature(lsp.TEXT_DOCUMENT_FORMATTING)
def formatting(params: lsp.DocumentFormattingParams) -> list[lsp.TextEdit] | None:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.document is None or ds.text is None:
        return None

    formatted = UidlFormatter(indent=params.options.tab_size).format(ds.document)
    if formatted == ds.source:
        return None

    # Replace entire document
    return [lsp.TextEdit(
        range=lsp.Range(
            start=lsp.Position(0, 0),
            end=_position(ds.text, len(ds.source)),
        ),
        new_text=formatted,
    )]


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the uidl language server on stdio."""
    server.start_io()
