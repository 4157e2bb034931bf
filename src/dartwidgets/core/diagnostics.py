"""
Stage result protocol and diagnostic folding.

Each pipeline stage returns its product together with the diagnostics it
recorded. Nothing accumulates in shared state: callers that want a combined
view fold the stage results into a ``DiagnosticReport``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from .errors import Diagnostic, ErrorCategory, Severity, to_user_message

logger = logging.getLogger(__name__)


class HasDiagnostics(Protocol):
    diagnostics: list[Diagnostic]


class DiagnosticsMixin:
    """
    Derived views over a ``diagnostics`` list.

    ``success`` is true iff no error-severity diagnostic was recorded.
    Placeholders and unmapped arguments are warnings, so they never make a
    stage unsuccessful.
    """

    diagnostics: list[Diagnostic]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[str]:
        return [to_user_message(d) for d in self.diagnostics if d.severity == Severity.WARNING]

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class DiagnosticReport(DiagnosticsMixin):
    """
    Diagnostics folded across a full run, in stage order.

    This is what the presentation layer consumes; see ``to_bundle``.
    """

    diagnostics: list[Diagnostic] = field(default_factory=list)

    @classmethod
    def fold(cls, *results: HasDiagnostics) -> DiagnosticReport:
        """Combine the diagnostics of several stage results, keeping order."""
        diagnostics: list[Diagnostic] = []
        for result in results:
            diagnostics.extend(result.diagnostics)
        return cls(diagnostics=diagnostics)

    @classmethod
    def from_diagnostics(cls, diagnostics: Iterable[Diagnostic]) -> DiagnosticReport:
        return cls(diagnostics=list(diagnostics))

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def by_category(self) -> dict[ErrorCategory, list[Diagnostic]]:
        grouped: dict[ErrorCategory, list[Diagnostic]] = {}
        for diagnostic in self.diagnostics:
            grouped.setdefault(diagnostic.category, []).append(diagnostic)
        return grouped

    def count_by_category(self) -> dict[str, int]:
        return {str(category): len(items) for category, items in self.by_category().items()}

    def to_bundle(self) -> dict[str, list[str]]:
        """Return the ``{errors, warnings}`` bundle handed to the UI collaborator."""
        return {
            "errors": [to_user_message(d) for d in self.errors],
            "warnings": self.warnings,
        }

    def log(self, log: logging.Logger | None = None) -> None:
        """Write every diagnostic to the log (errors at WARNING, warnings at INFO)."""
        target = log or logger
        for diagnostic in self.diagnostics:
            level = logging.WARNING if diagnostic.is_error else logging.INFO
            target.log(
                level,
                "[%s] %s: %s",
                diagnostic.category,
                diagnostic.code,
                diagnostic.message,
                extra={"diagnostic": diagnostic.model_dump()},
            )
