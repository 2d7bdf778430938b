"""uidsl command line tools."""

from __future__ import annotations

import dataclasses
import logging
import sys
from enum import Enum
from pathlib import Path

import click

from uidsl import __version__
from uidsl.ast_nodes import Document
from uidsl.cascade import cascade
from uidsl.config import ConfigError, UidslConfig, load_project_config
from uidsl.errors import DiagnosticRenderer, ParseError
from uidsl.formatter import UidlFormatter
from uidsl.lexer import Lexer, tokenize
from uidsl.parser import Parser
from uidsl.selector import ElementState, PseudoClass, format_selector
from uidsl.source import SourceText

logger = logging.getLogger("uidsl.cli")


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load_config(start: Path) -> tuple[UidslConfig, Path | None]:
    try:
        return load_project_config(start)
    except ConfigError as e:
        click.echo(f"error: invalid config: {e}", err=True)
        raise SystemExit(1) from None


def _renderer(config: UidslConfig) -> DiagnosticRenderer:
    return DiagnosticRenderer(
        color=config.diagnostics.color,
        context_lines=config.diagnostics.context_lines,
    )


def _parse_source(source: SourceText, config: UidslConfig) -> Document | None:
    """Parse ``source``, printing a diagnostic and returning None on failure."""
    try:
        return Parser(tokenize(source.content)).parse()
    except ParseError as e:
        click.echo(_renderer(config).render(e.to_diagnostic(), source), err=True)
        return None


def _collect_files(target: Path, patterns: list[str]) -> list[Path]:
    if target.is_file():
        return [target]
    found: set[Path] = set()
    for pattern in patterns:
        found.update(p for p in target.glob(pattern) if p.is_file())
    return sorted(found)


@click.group()
@click.version_option(__version__, prog_name="uidsl")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """Tools for the uidl UI-description language."""
    _configure_logging(verbose)


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
def check(path: str) -> None:
    """Parse .uidl files and report errors."""
    target = Path(path)
    config, project_dir = _load_config(target)
    if project_dir is not None:
        logger.debug("using config from %s", project_dir)

    files = _collect_files(target, config.check.include)
    if not files:
        click.echo("warning: no .uidl files found", err=True)
        return

    failed = 0
    for uidl_file in files:
        logger.debug("checking %s", uidl_file)
        if _parse_source(SourceText.from_path(uidl_file), config) is None:
            failed += 1

    if failed:
        click.echo(f"{failed} of {len(files)} file(s) failed to parse", err=True)
        raise SystemExit(1)
    click.echo(f"checked {len(files)} file(s): no errors")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def view(file: str) -> None:
    """View the AST of a uidl source file."""
    config, _ = _load_config(Path(file))
    document = _parse_source(SourceText.from_path(Path(file)), config)
    if document is None:
        raise SystemExit(1)
    _dump_ast(document)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--trivia", is_flag=True, help="Include whitespace and comment tokens.")
def tokens(file: str, trivia: bool) -> None:
    """Dump the token stream of a uidl source file."""
    source = SourceText.from_path(Path(file))
    try:
        toks = Lexer(source.content).lex() if trivia else tokenize(source.content)
    except ParseError as e:
        config, _ = _load_config(Path(file))
        click.echo(_renderer(config).render(e.to_diagnostic(), source), err=True)
        raise SystemExit(1)

    for idx, tok in enumerate(toks):
        line, col = source.line_col(tok.span.start)
        spaced = " space" if tok.preceded_by_space else ""
        click.echo(
            f"[{idx}] {tok.kind.name} {tok.value!r} "
            f"span=({tok.span.start},{tok.span.end}) at={line}:{col}{spaced}"
        )


@main.command(name="format")
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--check", is_flag=True, help="Check formatting without modifying files.")
@click.option("--stdin", "use_stdin", is_flag=True, help="Read from stdin, write to stdout.")
def format_cmd(path: str, check: bool, use_stdin: bool) -> None:
    """Format uidl source files."""
    target = Path(path)
    config, _ = _load_config(target)
    formatter = UidlFormatter(indent=config.format.indent)

    if use_stdin:
        source = SourceText(sys.stdin.read(), "<stdin>")
        document = _parse_source(source, config)
        if document is None:
            raise SystemExit(1)
        formatted = formatter.format(document)
        if check:
            if formatted != source.content:
                raise SystemExit(1)
        else:
            sys.stdout.write(formatted)
        return

    files = _collect_files(target, config.check.include)
    if not files:
        click.echo("no .uidl files found", err=True)
        return

    needs_formatting = False
    had_errors = False
    for uidl_file in files:
        source = SourceText.from_path(uidl_file)
        document = _parse_source(source, config)
        if document is None:
            had_errors = True
            continue

        formatted = formatter.format(document)
        if formatted != source.content:
            if check:
                click.echo(f"would reformat {uidl_file}")
                needs_formatting = True
            else:
                uidl_file.write_text(formatted)
                click.echo(f"formatted {uidl_file}")

    if had_errors or (check and needs_formatting):
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("element_id")
@click.option(
    "--state", "states", multiple=True,
    type=click.Choice([p.value for p in PseudoClass]),
    help="Treat the element as being in this state (repeatable).",
)
def styles(file: str, element_id: str, states: tuple[str, ...]) -> None:
    """Show the cascaded style of the component with ELEMENT_ID."""
    config, _ = _load_config(Path(file))
    document = _parse_source(SourceText.from_path(Path(file)), config)
    if document is None:
        raise SystemExit(1)

    found = document.find_by_id(element_id)
    if found is None:
        click.echo(f"error: no component with id '{element_id}'", err=True)
        raise SystemExit(1)
    ancestors, component = found

    formatter = UidlFormatter(indent=config.format.indent)
    result = cascade(document.styles, component, ancestors)
    if states:
        state = ElementState.from_pseudo_classes(PseudoClass(s) for s in states)
        for prop in result.effective(state).values():
            click.echo(formatter.format_property(prop))
        return

    for prop in result.base.values():
        click.echo(formatter.format_property(prop))
    for pseudo in result.pseudo_classes():
        click.echo(f":{pseudo.value}")
        for prop in result.for_state(pseudo).values():
            click.echo("  " + formatter.format_property(prop))
    for style in result.conditional:
        click.echo(f"when {format_selector(style.selector)}")
        for prop in style.properties:
            click.echo("  " + formatter.format_property(prop))


@main.command()
def lsp() -> None:
    """Start the uidl language server."""
    from uidsl.lsp import main as lsp_main

    lsp_main()


def _dump_ast(node: object, depth: int = 0) -> None:
    """Print an indented tree of AST nodes, spans and empty fields omitted."""
    pad = "  " * depth
    if not dataclasses.is_dataclass(node):
        click.echo(f"{pad}{node!r}")
        return

    click.echo(f"{pad}{type(node).__name__}")
    for f in dataclasses.fields(node):
        value = getattr(node, f.name)
        if f.name == "span" or value is None or value == [] or value == {}:
            continue
        if isinstance(value, Enum):
            click.echo(f"{pad}  {f.name}: {value.value}")
        elif isinstance(value, list):
            click.echo(f"{pad}  {f.name}:")
            for item in value:
                _dump_ast(item, depth + 2)
        elif isinstance(value, dict):
            click.echo(f"{pad}  {f.name}:")
            for key, item in value.items():
                click.echo(f"{pad}    {key}:")
                _dump_ast(item, depth + 3)
        elif dataclasses.is_dataclass(value):
            click.echo(f"{pad}  {f.name}:")
            _dump_ast(value, depth + 2)
        else:
            click.echo(f"{pad}  {f.name}: {value!r}")
