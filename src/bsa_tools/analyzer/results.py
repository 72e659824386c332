"""
Parse Results and Aggregation
=============================

A ParseResult holds everything the parser learns about a line: its
diagnostics and the cross-reference tables for symbols and macros. The
same structure describes a whole document once the per-line results have
been folded together with merge_results().

Tables
------
| Attribute            | Shape                  | Contents                     |
|----------------------|------------------------|------------------------------|
| diagnostics          | list[Diagnostic]       | problems, in encounter order |
| symbol_definitions   | list[Token]            | labels and assignment targets|
| symbol_uses          | dict[str, list[Token]] | uses keyed by symbol name    |
| symbol_uses_by_line  | dict[int, list[Token]] | uses keyed by line number    |
| macro_definitions    | list[Token]            | macro header names           |
| macro_uses           | dict[str, list[Token]] | macro calls keyed by name    |
| macro_uses_by_line   | dict[int, list[Token]] | macro calls keyed by line    |

Names are case-sensitive. Local labels (``10$``) and the pseudo-names
``*`` and ``&`` are never entered into the symbol tables.
"""

from dataclasses import dataclass, field

from bsa_tools.analyzer.diagnostics import Diagnostic, Severity
from bsa_tools.analyzer.lexer import Token


@dataclass
class ParseResult:
    """Diagnostics and cross-reference tables for a line or a document."""
    diagnostics: list[Diagnostic] = field(default_factory=list)
    symbol_definitions: list[Token] = field(default_factory=list)
    symbol_uses: dict[str, list[Token]] = field(default_factory=dict)
    symbol_uses_by_line: dict[int, list[Token]] = field(default_factory=dict)
    macro_definitions: list[Token] = field(default_factory=list)
    macro_uses: dict[str, list[Token]] = field(default_factory=dict)
    macro_uses_by_line: dict[int, list[Token]] = field(default_factory=dict)

    # =========================================================================
    # Recording
    # =========================================================================

    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def add_symbol_definition(self, token: Token) -> None:
        """Record a label or assignment target. Local labels are ignored."""
        if token.is_local_label or token.is_pseudo_name:
            return
        self.symbol_definitions.append(token)

    def add_symbol_use(self, token: Token) -> None:
        """Record a symbol reference. Local labels and * or & are ignored."""
        if token.is_local_label or token.is_pseudo_name:
            return
        self.symbol_uses.setdefault(token.text, []).append(token)
        self.symbol_uses_by_line.setdefault(token.line, []).append(token)

    def add_macro_definition(self, token: Token) -> None:
        self.macro_definitions.append(token)

    def add_macro_use(self, token: Token) -> None:
        self.macro_uses.setdefault(token.text, []).append(token)
        self.macro_uses_by_line.setdefault(token.line, []).append(token)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def errors(self) -> list[Diagnostic]:
        """Diagnostics with Error severity."""
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    def has_errors(self) -> bool:
        """Check if any Error-severity diagnostic was recorded."""
        return any(d.severity == Severity.ERROR for d in self.diagnostics)

    def is_empty(self) -> bool:
        """True when nothing at all was recorded."""
        return not (
            self.diagnostics
            or self.symbol_definitions
            or self.symbol_uses
            or self.macro_definitions
            or self.macro_uses
        )


def _extend_by_key(target: dict, source: dict) -> None:
    for key, tokens in source.items():
        target.setdefault(key, []).extend(tokens)


def merge_results(first: ParseResult, second: ParseResult) -> ParseResult:
    """
    Fold second into first and return first.

    Lists are concatenated and the keyed tables are merged by appending
    second's tokens after first's under the same key. Nothing is
    deduplicated, so folding line results in line order preserves
    encounter order everywhere. second is left unchanged.

    Args:
        first: Accumulated result, modified in place
        second: Result to append

    Returns:
        first, for chaining in a fold
    """
    first.diagnostics.extend(second.diagnostics)
    first.symbol_definitions.extend(second.symbol_definitions)
    _extend_by_key(first.symbol_uses, second.symbol_uses)
    _extend_by_key(first.symbol_uses_by_line, second.symbol_uses_by_line)
    first.macro_definitions.extend(second.macro_definitions)
    _extend_by_key(first.macro_uses, second.macro_uses)
    _extend_by_key(first.macro_uses_by_line, second.macro_uses_by_line)
    return first
