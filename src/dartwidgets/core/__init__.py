"""Core dartwidgets functionality: lexer, parser, IR, widget extraction, components, themes, diagnostics."""

from . import ir
from .catalog import WidgetCatalog, WidgetSpec
from .components import ComponentDetectionConfig, ComponentDetectionResult, ComponentDetector, detect_components
from .config import CustomWidgetConfig, DartWidgetsConfig, find_config, load_config, resolve_config
from .diagnostics import DiagnosticReport, DiagnosticsMixin
from .errors import (
    ConfigError,
    DartWidgetsError,
    Diagnostic,
    ErrorCategory,
    ErrorContext,
    Severity,
    SourceReadError,
    make_diagnostic,
    to_user_message,
)
from .extractor import ExtractionResult, WidgetExtractor, extract_widgets
from .lexer import LexResult, Lexer, Token, TokenType, tokenize
from .parser import ParseResult, Parser, parse, parse_source
from .pipeline import AnalysisResult, analyze_file, analyze_source
from .theme import ThemeAnalyzer, ThemeExtraction, ThemeResolver, extract_themes, resolve_theme_references
from .widget_tree import analyze_tree, validate_tree

__all__ = [
    "ir",
    "AnalysisResult",
    "ComponentDetectionConfig",
    "ComponentDetectionResult",
    "ComponentDetector",
    "ConfigError",
    "CustomWidgetConfig",
    "DartWidgetsConfig",
    "DartWidgetsError",
    "Diagnostic",
    "DiagnosticReport",
    "DiagnosticsMixin",
    "ErrorCategory",
    "ErrorContext",
    "ExtractionResult",
    "LexResult",
    "Lexer",
    "ParseResult",
    "Parser",
    "Severity",
    "SourceReadError",
    "Token",
    "ThemeAnalyzer",
    "ThemeExtraction",
    "ThemeResolver",
    "TokenType",
    "WidgetCatalog",
    "WidgetExtractor",
    "WidgetSpec",
    "analyze_file",
    "analyze_source",
    "analyze_tree",
    "detect_components",
    "extract_themes",
    "extract_widgets",
    "find_config",
    "load_config",
    "make_diagnostic",
    "parse",
    "parse_source",
    "resolve_config",
    "resolve_theme_references",
    "to_user_message",
    "tokenize",
    "validate_tree",
]
