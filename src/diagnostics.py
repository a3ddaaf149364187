# SPDX-License-Identifier: GPL-3.0-only
"""Diagnostics reported back to the host runtime."""

from dataclasses import dataclass
from typing import Optional

from src.types import DiagnosticSeverity


@dataclass(frozen=True)
class Diagnostic:
    """A single user-facing error or warning."""

    severity: DiagnosticSeverity
    summary: str
    detail: str = ""
    attribute: Optional[str] = None

    def __str__(self):
        text = f"{self.severity.value}: {self.summary}"
        if self.attribute:
            text += f" [{self.attribute}]"
        if self.detail:
            text += f": {self.detail}"
        return text


class Diagnostics(list):
    """Ordered collection of diagnostics."""

    def add_error(self, summary: str, detail: str = "", attribute: str = None):
        """Append an error diagnostic."""
        self.append(
            Diagnostic(DiagnosticSeverity.ERROR, summary, str(detail), attribute)
        )

    def add_warning(self, summary: str, detail: str = "", attribute: str = None):
        """Append a warning diagnostic."""
        self.append(
            Diagnostic(DiagnosticSeverity.WARNING, summary, str(detail), attribute)
        )

    def errors(self):
        """Return the error diagnostics."""
        return [d for d in self if d.severity is DiagnosticSeverity.ERROR]

    def warnings(self):
        """Return the warning diagnostics."""
        return [d for d in self if d.severity is DiagnosticSeverity.WARNING]

    def has_error(self) -> bool:
        """Return True if any error diagnostic was recorded."""
        return any(d.severity is DiagnosticSeverity.ERROR for d in self)
