"""
Source-to-widgets pipeline.

Runs tokenize → parse → extract on one in-memory source string and folds
the stage diagnostics into a single report. Each call allocates its own
buffers, so independent sources can be analyzed concurrently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .catalog import WidgetCatalog
from .config import DartWidgetsConfig
from .diagnostics import DiagnosticReport, DiagnosticsMixin
from .errors import Diagnostic, SourceReadError
from .extractor import ExtractionResult, extract_widgets
from .ir.ast import Program
from .ir.widgets import Widget
from .lexer import LexResult, Token, tokenize
from .parser import ParseResult, parse

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult(DiagnosticsMixin):
    """
    Products of every stage plus the folded report.

    ``usable`` is false only when nothing could be recovered: no widgets and
    an empty program.
    """

    lexed: LexResult
    parsed: ParseResult
    extracted: ExtractionResult
    report: DiagnosticReport
    path: Path | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def tokens(self) -> list[Token]:
        return self.lexed.tokens

    @property
    def program(self) -> Program:
        return self.parsed.program

    @property
    def widgets(self) -> list[Widget]:
        return self.extracted.widgets

    @property
    def tree(self) -> Widget | None:
        return self.extracted.tree

    @property
    def usable(self) -> bool:
        return bool(self.widgets) or not self.program.is_empty


def analyze_source(
    source: str,
    config: DartWidgetsConfig | None = None,
    path: Path | None = None,
) -> AnalysisResult:
    """
    Run the full pipeline on source text.

    Args:
        source: Dart source text
        config: Parser/extractor settings (defaults when omitted)
        path: Where the source came from, for reporting only

    Returns:
        AnalysisResult; never raises for malformed source
    """
    config = config or DartWidgetsConfig()
    catalog = WidgetCatalog.from_config(config)

    lexed = tokenize(source)
    # Lexer diagnostics are folded below, so pass the bare token list
    parsed = parse(lexed.tokens, max_depth=config.max_depth)
    extracted = extract_widgets(parsed.program, catalog=catalog)

    report = DiagnosticReport.fold(lexed, parsed, extracted)
    logger.debug(
        "Analyzed %s: %d widgets, %d errors, %d warnings",
        path or "<source>",
        extracted.widget_count,
        len(report.errors),
        len(report.warnings),
    )
    return AnalysisResult(
        lexed=lexed,
        parsed=parsed,
        extracted=extracted,
        report=report,
        path=path,
        diagnostics=report.diagnostics,
    )


def read_source(path: Path) -> str:
    """
    Read a source file as UTF-8.

    Raises:
        SourceReadError: If the file cannot be read or decoded
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(f"Cannot read {path}: {e}") from e


def analyze_file(path: Path, config: DartWidgetsConfig | None = None) -> AnalysisResult:
    """Read ``path`` and run the pipeline on it."""
    return analyze_source(read_source(path), config=config, path=path)
