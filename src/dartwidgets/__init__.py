"""
dartwidgets - Flutter widget trees from Dart source.

Lexes and parses the constructor-call subset of Dart used to describe
widget trees, then extracts a typed widget tree with diagnostics. Malformed
input never aborts a run; problems come back as categorized diagnostics.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.errors import ConfigError, DartWidgetsError, Diagnostic, ErrorCategory, SourceReadError
from .core.extractor import extract_widgets
from .core.lexer import tokenize
from .core.parser import parse, parse_source
from .core.pipeline import analyze_source

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "tokenize",
    "parse",
    "parse_source",
    "extract_widgets",
    "analyze_source",
    "Diagnostic",
    "ErrorCategory",
    "DartWidgetsError",
    "ConfigError",
    "SourceReadError",
]
