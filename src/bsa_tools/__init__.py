"""
BSA Tools - Source Analysis for the BSA 6502 / 45GS02 Assembler
================================================================

This package provides the analysis core behind editor tooling for the BSA
assembler dialect used on the MEGA65, C64 and other 6502-family machines.
It turns raw source text into tokens, diagnostics and cross-reference
tables (symbol and macro definitions and uses).

Main Components
---------------
- **analyzer**: Line lexer, expression parser and statement parser
    Converts each source line into tokens and per-line parse results,
    then folds them into a document-wide result.

- **cpu**: Instruction set tables
    Mnemonics for the 6502, 65C02, 45GS02 and 65816 families.

- **cli**: Command-line tools (bsacheck)
    Reports diagnostics and the symbol outline for source files.

Quick Start
-----------
Parse a document:
    >>> from bsa_tools.analyzer import parse_document
    >>> result = parse_document("start: lda #7\\n  jmp start")
    >>> [tok.text for tok in result.symbol_definitions]
    ['start']
    >>> sorted(result.symbol_uses)
    ['start']

Or use the command-line tool:
    $ bsacheck program.src --symbols
"""

__version__ = "0.1.0"
__author__ = "BSA Tools Contributors"

from bsa_tools.errors import (
    BsaError,
    DocumentError,
    AnalysisCancelled,
)
from bsa_tools.config import AnalyzerConfig
from bsa_tools.analyzer import (
    Diagnostic,
    Severity,
    Position,
    Range,
    Token,
    TokenType,
    LexResult,
    Lexer,
    lex_line,
    LineParser,
    ParseResult,
    merge_results,
    parse_line,
    parse_document,
)

__all__ = [
    "__version__",
    # Errors
    "BsaError",
    "DocumentError",
    "AnalysisCancelled",
    # Configuration
    "AnalyzerConfig",
    # Analyzer
    "Diagnostic",
    "Severity",
    "Position",
    "Range",
    "Token",
    "TokenType",
    "LexResult",
    "Lexer",
    "lex_line",
    "LineParser",
    "ParseResult",
    "merge_results",
    "parse_line",
    "parse_document",
]
