"""
Rich console output for the dartwidgets CLI.

Widget trees render as ``rich.tree.Tree``, tokens as a ``rich.table.Table``.
Diagnostics and status lines go to stderr so JSON on stdout stays clean.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from rich import box
from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from dartwidgets.core.components import ComponentDetectionResult
from dartwidgets.core.diagnostics import DiagnosticReport
from dartwidgets.core.errors import to_user_message
from dartwidgets.core.ir.widgets import ExpressionRef, ValueObject, Widget
from dartwidgets.core.lexer import Token
from dartwidgets.core.theme import ThemeExtraction
from dartwidgets.core.widget_tree import TreeAnalysis

console = Console()
err_console = Console(stderr=True)

# Style definitions
STYLES = {
    "title": Style(color="bright_cyan", bold=True),
    "subtitle": Style(color="bright_black"),
    "success": Style(color="green", bold=True),
    "error": Style(color="red", bold=True),
    "warning": Style(color="yellow"),
    "info": Style(color="cyan"),
    "muted": Style(color="bright_black"),
    "widget": Style(color="bright_cyan", bold=True),
    "unknown": Style(color="yellow", bold=True),
    "slot": Style(color="magenta"),
}

# Properties worth showing inline in tree output
SUMMARY_LIMIT = 3
VALUE_WIDTH = 32


def print_header(title: str, subtitle: str = "") -> None:
    """Print a styled header."""
    console.print(Text(title, style=STYLES["title"]))
    if subtitle:
        console.print(Text(subtitle, style=STYLES["subtitle"]))


def print_success(message: str) -> None:
    """Print a success message."""
    err_console.print(Text(f"✓ {message}", style=STYLES["success"]))


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(Text(f"✗ {message}", style=STYLES["error"]))


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(Text(f"⚠ {message}", style=STYLES["warning"]))


def print_info(message: str) -> None:
    """Print an info message."""
    err_console.print(Text(f"ℹ {message}", style=STYLES["info"]))


def print_diagnostics(report: DiagnosticReport) -> None:
    """Errors first, then warnings, each with its category prefix."""
    for diagnostic in report.errors:
        print_error(to_user_message(diagnostic))
    for warning in report.warnings:
        print_warning(warning)


# =============================================================================
# Widgets
# =============================================================================


def format_value(value: Any) -> str:
    """Short display form of a resolved property value."""
    if isinstance(value, ExpressionRef):
        text = value.expression
    elif isinstance(value, ValueObject):
        text = f"{value.qualified_name}(…)"
    elif isinstance(value, str):
        text = repr(value)
    elif isinstance(value, list):
        text = f"[{len(value)} items]"
    else:
        text = str(value)
    if len(text) > VALUE_WIDTH:
        text = text[: VALUE_WIDTH - 1] + "…"
    return text


def widget_label(widget: Widget) -> Text:
    label = Text()
    if widget.slot:
        label.append(f"{widget.slot}: ", style=STYLES["slot"])
    if widget.is_unknown:
        label.append(f"Unknown({widget.qualified_name})", style=STYLES["unknown"])
    else:
        label.append(widget.qualified_name, style=STYLES["widget"])

    shown = list(widget.properties.items())[:SUMMARY_LIMIT]
    if shown:
        summary = ", ".join(f"{key}={format_value(value)}" for key, value in shown)
        if len(widget.properties) > SUMMARY_LIMIT:
            summary += ", …"
        label.append(f" {summary}")
    label.append(f"  #{widget.id}", style=STYLES["muted"])
    return label


def build_widget_tree(widgets: Iterable[Widget], title: str = "widgets") -> Tree:
    """Rich tree of one or more root widgets, built without recursion."""
    tree = Tree(Text(title, style=STYLES["title"]))
    stack: list[tuple[Tree, Widget]] = [(tree, w) for w in reversed(list(widgets))]
    while stack:
        parent, widget = stack.pop()
        branch = parent.add(widget_label(widget))
        stack.extend((branch, child) for child in reversed(widget.children))
    return tree


def print_widget_tree(widgets: Iterable[Widget], title: str = "widgets") -> None:
    console.print(build_widget_tree(widgets, title))


def print_tree_summary(analysis: TreeAnalysis) -> None:
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Metric", style=STYLES["muted"])
    table.add_column("Value")
    table.add_row("Widgets", str(analysis.total_nodes))
    table.add_row("Max depth", str(analysis.max_depth))
    table.add_row("Containers", str(len(analysis.container_widgets)))
    table.add_row("Leaves", str(len(analysis.leaf_widgets)))
    if analysis.unknown_widgets:
        table.add_row("Unknown", str(len(analysis.unknown_widgets)))
    console.print(table)


# =============================================================================
# Tokens
# =============================================================================


def build_token_table(tokens: list[Token]) -> Table:
    table = Table(title="Tokens", box=box.SIMPLE_HEAD)
    table.add_column("Pos", style=STYLES["muted"])
    table.add_column("Type", style=STYLES["info"])
    table.add_column("Value")
    for token in tokens:
        table.add_row(f"{token.line}:{token.column}", token.type.name, Text(token.raw))
    return table


def print_token_table(tokens: list[Token]) -> None:
    console.print(build_token_table(tokens))


# =============================================================================
# Components and themes
# =============================================================================


def build_component_table(result: ComponentDetectionResult) -> Table:
    table = Table(title="Components", box=box.SIMPLE_HEAD)
    table.add_column("Name", style=STYLES["widget"])
    table.add_column("Type")
    table.add_column("Uses", justify="right")
    table.add_column("Variants")
    table.add_column("Confidence", justify="right", style=STYLES["muted"])
    for pattern in result.patterns:
        variants = ", ".join(f"{v.name} ×{v.usage_count}" for v in pattern.variants)
        table.add_row(
            pattern.name,
            pattern.type,
            str(pattern.usage_count),
            variants,
            f"{pattern.confidence:.2f}",
        )
    return table


def print_component_table(result: ComponentDetectionResult) -> None:
    console.print(build_component_table(result))


def build_theme_table(extraction: ThemeExtraction) -> Table:
    table = Table(title="Themes", box=box.SIMPLE_HEAD)
    table.add_column("Line", style=STYLES["muted"])
    table.add_column("Brightness")
    table.add_column("Primary", style=STYLES["info"])
    table.add_column("Secondary")
    table.add_column("Surface")
    for theme in extraction.themes:
        scheme = theme.color_scheme
        table.add_row(
            str(theme.source_span.line),
            theme.brightness.value,
            scheme.primary,
            scheme.secondary,
            scheme.surface,
        )
    return table


def build_reference_table(extraction: ThemeExtraction) -> Table:
    table = Table(title="Theme references", box=box.SIMPLE_HEAD)
    table.add_column("Pos", style=STYLES["muted"])
    table.add_column("Reference")
    table.add_column("Value")
    for resolution in extraction.resolutions:
        span = resolution.reference.span
        value = resolution.value
        shown = Text("unresolved", style=STYLES["warning"]) if value is None else Text(format_value(value))
        table.add_row(f"{span.line}:{span.column}", resolution.reference.path, shown)
    return table


def print_theme_summary(extraction: ThemeExtraction) -> None:
    if extraction.themes:
        console.print(build_theme_table(extraction))
    if extraction.modes:
        mode = extraction.default_mode.value
        dark = "with dark theme" if extraction.modes[0].dark_theme else "light only"
        console.print(Text(f"MaterialApp theme mode: {mode} ({dark})", style=STYLES["subtitle"]))
    if extraction.resolutions:
        console.print(build_reference_table(extraction))
