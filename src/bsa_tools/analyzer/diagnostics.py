"""
Analyzer Diagnostics
====================

Diagnostics are the only way the lexer and parser report problems. They
are plain observations attached to a range of the source; they never
carry recovery instructions and never abort analysis.

Positions follow the Language Server Protocol conventions so results can
be published to an editor verbatim:

- line and character are zero-based
- a range is half-open: [start, end)
- severities use the LSP numbering (Error=1 ... Hint=4)

Example
-------
>>> from bsa_tools.analyzer.diagnostics import Diagnostic, Severity
>>> diag = Diagnostic.for_span("Missing symbol for #ifdef", Severity.ERROR, 3, 0, 6)
>>> diag.format("main.src")
'main.src:4:1: error: Missing symbol for #ifdef'
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bsa_tools.analyzer.lexer import Token


# =============================================================================
# Severity
# =============================================================================

class Severity(IntEnum):
    """Diagnostic severity, numbered as in the Language Server Protocol."""

    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4

    @property
    def label(self) -> str:
        """Lower-case name used in formatted reports."""
        return self.name.lower()


# =============================================================================
# Positions and Ranges
# =============================================================================

@dataclass(frozen=True, order=True)
class Position:
    """
    A zero-based position in a document.

    Attributes:
        line: Line number (0-indexed)
        character: Character offset within the line (0-indexed)
    """
    line: int
    character: int

    def __str__(self) -> str:
        """Format as 1-based 'line:column' for humans."""
        return f"{self.line + 1}:{self.character + 1}"


@dataclass(frozen=True)
class Range:
    """A half-open range [start, end) between two positions."""
    start: Position
    end: Position

    def contains(self, position: Position) -> bool:
        """Return True if position lies inside the range (end exclusive)."""
        return self.start <= position < self.end


# =============================================================================
# Diagnostic
# =============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """
    A problem found in the source text.

    Attributes:
        severity: How serious the problem is
        range: The source span the problem refers to
        message: Human-readable description
        source: Name of the tool that produced it
    """
    severity: Severity
    range: Range
    message: str
    source: str = "bsa"

    @classmethod
    def for_span(
        cls,
        message: str,
        severity: Severity,
        line: int,
        start: int,
        end: int,
    ) -> "Diagnostic":
        """Create a diagnostic for characters [start, end) of one line."""
        return cls(
            severity=severity,
            range=Range(Position(line, start), Position(line, end)),
            message=message,
        )

    @classmethod
    def for_tokens(
        cls,
        message: str,
        severity: Severity,
        start_token: "Token",
        end_token: "Token",
    ) -> "Diagnostic":
        """Create a diagnostic spanning from start_token to end_token."""
        return cls(
            severity=severity,
            range=Range(
                Position(start_token.line, start_token.start),
                Position(end_token.line, end_token.end),
            ),
            message=message,
        )

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def format(self, filename: str = "<input>") -> str:
        """
        Format as a compiler-style report line.

        Example:
            main.src:12:5: error: Invalid indirect index register
        """
        return f"{filename}:{self.range.start}: {self.severity.label}: {self.message}"
