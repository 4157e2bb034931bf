"""
dartwidgets CLI commands.

Each command runs part of the pipeline on one source (or several, for
``check``) and prints the result. Commands exit with code 1 when a run is
unusable, or when ``check --strict`` finds errors.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer

from dartwidgets.cli.utils import display_name, load_cli_config, read_input
from dartwidgets.cli_ui import (
    print_component_table,
    print_diagnostics,
    print_error,
    print_header,
    print_info,
    print_success,
    print_theme_summary,
    print_token_table,
    print_tree_summary,
    print_warning,
    print_widget_tree,
)
from dartwidgets.core.components import ComponentDetectionConfig, detect_components
from dartwidgets.core.diagnostics import DiagnosticReport
from dartwidgets.core.errors import Diagnostic, to_user_message
from dartwidgets.core.ir.ast import node_to_dict, unparse
from dartwidgets.core.lexer import tokenize
from dartwidgets.core.parser import parse
from dartwidgets.core.pipeline import AnalysisResult, analyze_source
from dartwidgets.core.theme import extract_themes
from dartwidgets.core.widget_tree import analyze_tree


def tokens_command(
    file: str = typer.Argument(..., help="Dart source file, or - for stdin"),
    format: str = typer.Option("table", "--format", "-f", help="Output format: 'table' or 'json'"),
) -> None:
    """
    Show the token stream of a source file.
    """
    source, _ = read_input(file)
    lexed = tokenize(source)

    if format == "json":
        tokens = [
            {
                "type": t.type.name,
                "value": t.value,
                "raw": t.raw,
                "line": t.line,
                "column": t.column,
            }
            for t in lexed.tokens
        ]
        typer.echo(json.dumps(tokens, indent=2))
    else:
        print_token_table(lexed.tokens)

    print_diagnostics(DiagnosticReport.fold(lexed))


def parse_command(
    file: str = typer.Argument(..., help="Dart source file, or - for stdin"),
    format: str = typer.Option("json", "--format", "-f", help="Output format: 'json' or 'source'"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to dartwidgets.toml"),
) -> None:
    """
    Parse a source file and print its AST.

    'source' prints the program re-rendered as Dart, which is handy for
    seeing what survived error recovery.
    """
    source, path = read_input(file)
    settings = load_cli_config(config, path)

    lexed = tokenize(source)
    parsed = parse(lexed.tokens, max_depth=settings.max_depth)

    if format == "source":
        typer.echo(unparse(parsed.program))
    else:
        typer.echo(json.dumps(node_to_dict(parsed.program), indent=2, default=str))

    print_diagnostics(DiagnosticReport.fold(lexed, parsed))
    if parsed.program.is_empty and parsed.errors:
        raise typer.Exit(code=1)


def widgets_command(
    file: str = typer.Argument(..., help="Dart source file, or - for stdin"),
    format: str = typer.Option("tree", "--format", "-f", help="Output format: 'tree' or 'json'"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to dartwidgets.toml"),
    summary: bool = typer.Option(False, "--summary", "-s", help="Show tree statistics"),
) -> None:
    """
    Extract the widget tree from a source file.

    JSON output carries the widgets together with the {errors, warnings}
    bundle; tree output prints diagnostics to stderr.
    """
    source, path = read_input(file)
    settings = load_cli_config(config, path)
    result = analyze_source(source, config=settings, path=path)

    if format == "json":
        payload = {
            "widgets": [w.to_dict() for w in result.widgets],
            **result.report.to_bundle(),
        }
        if summary:
            payload["summary"] = analyze_tree(result.widgets).to_dict()
        typer.echo(json.dumps(payload, indent=2, default=str))
    else:
        if result.widgets:
            print_widget_tree(result.widgets, title=display_name(path))
        if summary:
            print_tree_summary(analyze_tree(result.widgets))
        print_diagnostics(result.report)

    if not result.usable:
        print_error("No widgets could be extracted")
        raise typer.Exit(code=1)


def _print_vscode(name: str, diagnostics: list[Diagnostic]) -> None:
    """Print diagnostics as file:line:col: severity: message."""
    for d in diagnostics:
        typer.echo(f"{name}:{d.line or 1}:{d.column or 1}: {d.severity}: {to_user_message(d)}", err=True)


def _print_human(name: str, result: AnalysisResult) -> None:
    for d in result.report.errors:
        print_error(f"{name}: {to_user_message(d)}")
    for warning in result.report.warnings:
        print_warning(f"{name}: {warning}")
    if result.usable:
        print_success(f"{name}: {result.extracted.widget_count} widgets")


def check_command(
    files: list[str] = typer.Argument(..., help="Dart source files (- for stdin)"),
    strict: bool = typer.Option(False, "--strict", help="Fail on any error, not just unusable files"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: 'human' or 'vscode'"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to dartwidgets.toml"),
) -> None:
    """
    Check that source files yield widget trees.

    Fails when a file is unusable (nothing could be recovered), or with
    --strict when any error diagnostic is found.
    """
    failed = False
    for file in files:
        source, path = read_input(file)
        settings = load_cli_config(config, path)
        result = analyze_source(source, config=settings, path=path)
        name = display_name(path)

        if format == "vscode":
            _print_vscode(name, result.report.diagnostics)
        else:
            _print_human(name, result)

        if not result.usable:
            failed = True
            if format != "vscode":
                print_error(f"{name}: no widgets could be extracted")
        elif strict and result.report.has_errors:
            failed = True

    if failed:
        raise typer.Exit(code=1)


def components_command(
    file: str = typer.Argument(..., help="Dart source file, or - for stdin"),
    format: str = typer.Option("table", "--format", "-f", help="Output format: 'table' or 'json'"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to dartwidgets.toml"),
    min_instances: int = typer.Option(2, "--min-instances", help="Repeats needed to form a component"),
    min_confidence: float = typer.Option(0.7, "--min-confidence", help="Confidence threshold (0-1)"),
) -> None:
    """
    Find repeated widget structures that could become reusable components.
    """
    source, path = read_input(file)
    settings = load_cli_config(config, path)
    result = analyze_source(source, config=settings, path=path)
    detection = detect_components(
        result.widgets,
        ComponentDetectionConfig(min_instances=min_instances, min_confidence=min_confidence),
    )

    if format == "json":
        typer.echo(json.dumps(detection.to_dict(), indent=2, default=str))
    else:
        print_header(
            f"Components in {display_name(path)}",
            f"{detection.total_instances} of {detection.widget_count} widgets "
            f"({detection.coverage:.1f}%) in {detection.unique_patterns} patterns",
        )
        if detection.patterns:
            print_component_table(detection)
        else:
            print_info("No repeated components found")
        print_diagnostics(result.report)

    if not result.usable:
        print_error("No widgets could be extracted")
        raise typer.Exit(code=1)


def themes_command(
    file: str = typer.Argument(..., help="Dart source file, or - for stdin"),
    format: str = typer.Option("table", "--format", "-f", help="Output format: 'table' or 'json'"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to dartwidgets.toml"),
) -> None:
    """
    Show ThemeData declarations and resolve Theme.of(context) references.

    References resolve against the first MaterialApp theme, or the first
    ThemeData when no app wires one in.
    """
    source, path = read_input(file)
    settings = load_cli_config(config, path)
    result = analyze_source(source, config=settings, path=path)
    extraction = extract_themes(result.program)
    report = DiagnosticReport.fold(result.report, extraction)

    if format == "json":
        typer.echo(json.dumps({**extraction.to_dict(), **report.to_bundle()}, indent=2, default=str))
    else:
        print_header(f"Themes in {display_name(path)}")
        if not extraction.themes:
            print_info("No ThemeData found")
        print_theme_summary(extraction)
        print_diagnostics(report)

    if result.program.is_empty and result.report.errors:
        raise typer.Exit(code=1)
