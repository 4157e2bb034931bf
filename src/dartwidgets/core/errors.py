"""
Error types for dartwidgets.

Two kinds of failure live here:

- ``Diagnostic`` records. The lexer, parser and extractor never raise for
  bad input; every problem they find becomes a categorized, position-carrying
  diagnostic returned next to the best-effort product.
- ``DartWidgetsError`` exceptions. These are reserved for the outer surfaces
  (config loading, reading source files in the CLI) where aborting is the
  right answer.

Diagnostic messages come from a single template table keyed by
``(category, code)``; ``to_user_message`` adds the category prefix shown to
users.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorCategory(StrEnum):
    """Error categories shared by the core and its downstream collaborators."""

    SYNTAX = "SYNTAX"
    WIDGET = "WIDGET"
    THEME = "THEME"
    CONVERSION = "CONVERSION"
    VARIABLE = "VARIABLE"
    FIGMA_API = "FIGMA_API"
    VALIDATION = "VALIDATION"


class Severity(StrEnum):
    """How bad a diagnostic is. Only errors make a stage unsuccessful."""

    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """
    A recoverable problem found while lexing, parsing or extracting.

    Attributes:
        category: Error category
        code: Stable machine-readable code within the category
        severity: error or warning
        message: Rendered message (without category prefix)
        line: 1-indexed line, when known
        column: 1-indexed column, when known
        lexeme: Offending source text, when there is one
        context: Category-specific details (widget_type, field, value, ...)
    """

    category: ErrorCategory
    code: str
    severity: Severity = Severity.ERROR
    message: str
    line: int | None = None
    column: int | None = None
    lexeme: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def __str__(self) -> str:
        location = f"{self.line}:{self.column}: " if self.line is not None else ""
        return f"{location}[{self.category}] {self.code}: {self.message}"


# =============================================================================
# Message templates
# =============================================================================

# (category, code) -> (default severity, message template)
MESSAGE_TEMPLATES: dict[tuple[ErrorCategory, str], tuple[Severity, str]] = {
    # Lexer
    (ErrorCategory.SYNTAX, "UNEXPECTED_CHARACTER"): (
        Severity.ERROR,
        "Unexpected character {lexeme!r}",
    ),
    (ErrorCategory.SYNTAX, "UNTERMINATED_STRING"): (
        Severity.ERROR,
        "Unterminated string literal",
    ),
    (ErrorCategory.SYNTAX, "UNTERMINATED_COMMENT"): (
        Severity.ERROR,
        "Unterminated block comment",
    ),
    (ErrorCategory.SYNTAX, "MALFORMED_NUMBER"): (
        Severity.ERROR,
        "Malformed number literal {lexeme!r}",
    ),
    # Parser
    (ErrorCategory.SYNTAX, "UNEXPECTED_TOKEN"): (
        Severity.ERROR,
        "Unexpected token {lexeme!r}",
    ),
    (ErrorCategory.SYNTAX, "EXPECTED_EXPRESSION"): (
        Severity.ERROR,
        "Expected an expression, got {lexeme!r}",
    ),
    (ErrorCategory.SYNTAX, "EXPECTED_PROPERTY_NAME"): (
        Severity.ERROR,
        "Expected property name after '.', got {lexeme!r}",
    ),
    (ErrorCategory.SYNTAX, "MISMATCHED_DELIMITER"): (
        Severity.ERROR,
        "Expected {expected!r} to close {opener!r} from line {opened_line}, got {lexeme!r}",
    ),
    (ErrorCategory.SYNTAX, "UNCLOSED_DELIMITER"): (
        Severity.ERROR,
        "Unclosed {opener!r} opened at line {opened_line}, column {opened_column}",
    ),
    # Extractor
    (ErrorCategory.WIDGET, "UNKNOWN_WIDGET"): (
        Severity.WARNING,
        "Unknown widget type: {widget_type}",
    ),
    (ErrorCategory.WIDGET, "MALFORMED_ARGUMENTS"): (
        Severity.WARNING,
        "Argument {field!r} of {widget_type} could not be mapped",
    ),
    (ErrorCategory.VALIDATION, "UNMAPPED_POSITIONAL"): (
        Severity.WARNING,
        "{widget_type} has no slot for positional argument {index}; kept as {field!r}",
    ),
    (ErrorCategory.VALIDATION, "DUPLICATE_PROPERTY"): (
        Severity.WARNING,
        "Property {field!r} given more than once to {widget_type}; last value wins",
    ),
    (ErrorCategory.VALIDATION, "NESTING_TOO_DEEP"): (
        Severity.ERROR,
        "Nesting deeper than {max_depth} levels; inner expression skipped",
    ),
    # Theme analysis
    (ErrorCategory.THEME, "UNRESOLVED_COLOR"): (
        Severity.WARNING,
        "Cannot interpret colour {lexeme!r}; Material default kept",
    ),
    (ErrorCategory.THEME, "UNRESOLVED_THEME_REFERENCE"): (
        Severity.WARNING,
        "Theme reference {lexeme!r} does not resolve against the active theme",
    ),
}


class _Placeholders(dict[str, Any]):
    """format_map helper so a missing context key never breaks rendering."""

    def __missing__(self, key: str) -> str:
        return "?"


def make_diagnostic(
    category: ErrorCategory,
    code: str,
    *,
    line: int | None = None,
    column: int | None = None,
    lexeme: str | None = None,
    severity: Severity | None = None,
    **context: Any,
) -> Diagnostic:
    """
    Build a Diagnostic whose message comes from the template table.

    Unknown (category, code) pairs fall back to a generic template so that
    downstream collaborators can use codes the core does not know about.
    """
    default_severity, template = MESSAGE_TEMPLATES.get(
        (category, code), (Severity.ERROR, "{detail}")
    )
    values = _Placeholders(context)
    values["lexeme"] = lexeme if lexeme is not None else ""
    if "detail" not in values:
        values["detail"] = code.replace("_", " ").lower()
    return Diagnostic(
        category=category,
        code=code,
        severity=severity or default_severity,
        message=template.format_map(values),
        line=line,
        column=column,
        lexeme=lexeme,
        context=context,
    )


def to_user_message(diagnostic: Diagnostic) -> str:
    """Render a diagnostic with its category prefix for presentation."""
    ctx = diagnostic.context
    category = diagnostic.category
    message = diagnostic.message

    if category == ErrorCategory.SYNTAX:
        location = f" at line {diagnostic.line}" if diagnostic.line else ""
        return f"Syntax error{location}: {message}"
    if category == ErrorCategory.WIDGET:
        widget = f" in {ctx['widget_type']}" if ctx.get("widget_type") else ""
        return f"Widget error{widget}: {message}"
    if category == ErrorCategory.THEME:
        path = f" ({ctx['theme_path']})" if ctx.get("theme_path") else ""
        return f"Theme error{path}: {message}"
    if category == ErrorCategory.CONVERSION:
        node_type = f" for {ctx['node_type']}" if ctx.get("node_type") else ""
        return f"Conversion error{node_type}: {message}"
    if category == ErrorCategory.VARIABLE:
        name = f" '{ctx['variable_name']}'" if ctx.get("variable_name") else ""
        return f"Variable error{name}: {message}"
    if category == ErrorCategory.FIGMA_API:
        return f"Figma API error: {message}"
    field = f" in {ctx['field']}" if ctx.get("field") else ""
    return f"Validation error{field}: {message}"


# =============================================================================
# Exceptions (outer surfaces only)
# =============================================================================


class DartWidgetsError(Exception):
    """Base exception for failures outside the lexer/parser/extractor core."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ConfigError(DartWidgetsError):
    """
    Raised when a configuration file cannot be loaded.

    Examples:
    - Invalid TOML
    - Wrong value types (max_depth that is not a positive integer)
    - Custom widget entries without a name
    """


class SourceReadError(DartWidgetsError):
    """Raised when a source file cannot be read."""


@dataclass
class ErrorContext:
    """
    Source location attached to an exception.

    Attributes:
        file: Path of the offending file
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source lines around the error
    """

    file: Path
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        location = f"{self.file}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format snippet lines with line numbers and a caret under the column."""
        if not self.snippet:
            return ""

        formatted = []
        # Snippets start two lines above the error line
        start_line = max(1, self.line - 2)
        for i, text in enumerate(self.snippet.split("\n")):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + text)
            if line_num == self.line:
                formatted.append(" " * (len(prefix) + self.column - 1) + "^^^")

        return "\n".join(formatted)


def snippet_around(source: str, line: int, radius: int = 2) -> str:
    """Return the lines of ``source`` within ``radius`` of ``line``."""
    lines = source.split("\n")
    first = max(1, line - radius)
    last = min(len(lines), line + radius)
    return "\n".join(lines[first - 1 : last])


def make_config_error(
    message: str,
    file: Path | None = None,
    line: int | None = None,
    column: int | None = None,
    source: str | None = None,
) -> ConfigError:
    """
    Create a ConfigError, attaching location context when it is known.

    Args:
        message: Error description
        file: Config file path
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        source: Full config text, used to cut a snippet

    Returns:
        ConfigError with context attached when file and line are given
    """
    if file and line:
        snippet = snippet_around(source, line) if source is not None else None
        return ConfigError(
            message,
            ErrorContext(file=file, line=line, column=column or 1, snippet=snippet),
        )
    return ConfigError(message)
