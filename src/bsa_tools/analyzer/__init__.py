"""
BSA Source Analyzer
===================

This package turns BSA assembly source into diagnostics and
cross-reference tables. It checks syntax and records where symbols and
macros are defined and used; it does not assemble, expand macros,
evaluate expressions or follow includes.

Analysis Pipeline
-----------------
Each line is analyzed on its own:

1. **Lexer**: splits the line into classified tokens
2. **LineParser**: matches the tokens against the statement shapes
   (directives, macro headers, labels, assignments, macro calls,
   pseudo-ops, instructions) and parses operand expressions
3. **merge_results**: folds the line results into the document result

Main Components
---------------
- **Lexer / lex_line**: Line tokenizer
- **ExpressionParser**: Precedence-climbing operand expressions
- **LineParser / parse_line / parse_document**: Statement parsing
- **ParseResult / merge_results**: Per-line and document results
- **xref**: Definition, reference and outline queries

Example Usage
-------------
>>> from bsa_tools.analyzer import parse_document
>>> result = parse_document('''
... value = $20
...     lda #value
... ''')
>>> [tok.text for tok in result.symbol_definitions]
['value']
>>> result.diagnostics
[]
"""

from bsa_tools.analyzer.diagnostics import (
    Severity,
    Position,
    Range,
    Diagnostic,
)
from bsa_tools.analyzer.lexer import (
    TokenType,
    Token,
    LexResult,
    Lexer,
    lex_line,
)
from bsa_tools.analyzer.results import (
    ParseResult,
    merge_results,
)
from bsa_tools.analyzer.expressions import (
    ExpressionParser,
    BINARY_PRIORITIES,
    UNARY_OPERATORS,
    UNARY_PRIORITY,
)
from bsa_tools.analyzer.parser import (
    LineParser,
    parse_line,
    parse_document,
    parse_file,
)
from bsa_tools.analyzer.xref import (
    SymbolKind,
    DocumentSymbol,
    token_at,
    find_definitions,
    find_references,
    document_symbols,
    find_duplicate_definitions,
)

__all__ = [
    # Diagnostics
    "Severity",
    "Position",
    "Range",
    "Diagnostic",
    # Lexer
    "TokenType",
    "Token",
    "LexResult",
    "Lexer",
    "lex_line",
    # Results
    "ParseResult",
    "merge_results",
    # Expressions
    "ExpressionParser",
    "BINARY_PRIORITIES",
    "UNARY_OPERATORS",
    "UNARY_PRIORITY",
    # Parser
    "LineParser",
    "parse_line",
    "parse_document",
    "parse_file",
    # Cross-reference
    "SymbolKind",
    "DocumentSymbol",
    "token_at",
    "find_definitions",
    "find_references",
    "document_symbols",
    "find_duplicate_definitions",
]
