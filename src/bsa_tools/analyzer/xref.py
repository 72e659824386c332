"""
Cross-Reference Queries
=======================

Editor features built on a document ParseResult:

- token_at: the symbol or macro token under a position
- find_definitions: go to definition
- find_references: find all references / document highlights
- document_symbols: outline of labels, assignments and macros
- find_duplicate_definitions: warnings for names defined more than once

A name is looked up in the table matching where it was found: tokens
from the macro tables resolve against macro definitions, everything else
against symbol definitions.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from bsa_tools.analyzer.diagnostics import Diagnostic, Severity
from bsa_tools.analyzer.lexer import Token
from bsa_tools.analyzer.results import ParseResult


class SymbolKind(Enum):
    """What a definition or reference names."""

    SYMBOL = auto()  # Label, assignment target or !addr name
    MACRO = auto()   # Macro defined with 'macro name(...)'


@dataclass(frozen=True)
class DocumentSymbol:
    """One entry of the document outline."""
    name: str
    kind: SymbolKind
    token: Token


def _contains(token: Token, line: int, character: int) -> bool:
    return token.line == line and token.start <= character < token.end


def token_at(
    result: ParseResult,
    line: int,
    character: int,
) -> Optional[tuple[Token, SymbolKind]]:
    """
    Find the symbol or macro token at a position.

    Both uses and definitions are searched, so the query works on a label
    as well as on a reference to it.

    Returns:
        (token, kind) or None if no recorded token covers the position
    """
    candidates = [
        (result.symbol_uses_by_line.get(line, []), SymbolKind.SYMBOL),
        (result.symbol_definitions, SymbolKind.SYMBOL),
        (result.macro_uses_by_line.get(line, []), SymbolKind.MACRO),
        (result.macro_definitions, SymbolKind.MACRO),
    ]
    for tokens, kind in candidates:
        for token in tokens:
            if _contains(token, line, character):
                return token, kind
    return None


def find_definitions(result: ParseResult, line: int, character: int) -> list[Token]:
    """Definitions of the name under the position, in document order."""
    found = token_at(result, line, character)
    if found is None:
        return []

    token, kind = found
    definitions = (
        result.macro_definitions if kind == SymbolKind.MACRO else result.symbol_definitions
    )
    return [d for d in definitions if d.text == token.text]


def find_references(
    result: ParseResult,
    line: int,
    character: int,
    include_declaration: bool = False,
) -> list[Token]:
    """
    All uses of the name under the position.

    Args:
        result: Document result
        line: Zero-based line
        character: Zero-based character offset
        include_declaration: Also return the definitions, ahead of the uses

    Returns:
        Tokens in document order (definitions first when included)
    """
    found = token_at(result, line, character)
    if found is None:
        return []

    token, kind = found
    uses = result.macro_uses if kind == SymbolKind.MACRO else result.symbol_uses
    references = list(uses.get(token.text, []))
    if include_declaration:
        references = find_definitions(result, line, character) + references
    return references


def document_symbols(result: ParseResult) -> list[DocumentSymbol]:
    """Symbol definitions followed by macro definitions, in encounter order."""
    symbols = [
        DocumentSymbol(token.text, SymbolKind.SYMBOL, token)
        for token in result.symbol_definitions
    ]
    symbols.extend(
        DocumentSymbol(token.text, SymbolKind.MACRO, token)
        for token in result.macro_definitions
    )
    return symbols


def find_duplicate_definitions(result: ParseResult) -> list[Diagnostic]:
    """
    Warn about every repeated definition of a symbol or macro.

    The first definition is not reported; each later one gets a warning
    pointing back at it. Symbols and macros have separate namespaces.
    """
    warnings = []
    for definitions in (result.symbol_definitions, result.macro_definitions):
        first_seen: dict[str, Token] = {}
        for token in definitions:
            first = first_seen.setdefault(token.text, token)
            if first is token:
                continue
            warnings.append(Diagnostic.for_tokens(
                f"Multiple definition of '{token.text}' "
                f"(first defined on line {first.line + 1})",
                Severity.WARNING,
                token,
                token,
            ))
    return warnings
