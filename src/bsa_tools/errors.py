"""
BSA Tools Error Hierarchy
=========================

This module defines the exception hierarchy for BSA Tools. All exceptions
inherit from BsaError, allowing callers to catch every tool-related error
with a single except clause if desired.

Exception Hierarchy
-------------------
BsaError (base)
├── DocumentError - a source file cannot be read or decoded
└── AnalysisCancelled - a document parse was cancelled between lines

Design Philosophy
-----------------
Problems in the *source text* are never raised. The lexer and parser
report them as Diagnostic objects and keep going, so that one malformed
line cannot stop analysis of the rest of the document. Exceptions are
reserved for the host boundary: files that cannot be opened and callers
that abandon a parse.
"""

from pathlib import Path
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class BsaError(Exception):
    """
    Base exception for all BSA Tools errors.

        try:
            result = load_and_parse("program.src")
        except BsaError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Document Exceptions
# =============================================================================

class DocumentError(BsaError):
    """
    A source document cannot be loaded.

    Raised when:
    - The file does not exist or cannot be opened
    - The file is not valid text in the configured encoding

    Attributes:
        path: The file that failed to load
        reason: Short description of the failure
    """

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"cannot read '{self.path}': {reason}")


class AnalysisCancelled(BsaError):
    """
    Document parsing was cancelled by the caller.

    parse_document() checks the caller's cancellation callback between
    lines and raises this exception as soon as it reports true. Results
    for lines already parsed are discarded.

    Attributes:
        line_number: First line that was not parsed (zero-based)
    """

    def __init__(self, line_number: int, message: Optional[str] = None):
        self.line_number = line_number
        super().__init__(message or f"analysis cancelled before line {line_number}")
