"""
Expression Parser
=================

Operand expressions are parsed by precedence climbing over the token list
of a single line. The parser only checks syntax and records the symbols
an expression refers to; it never computes a value.

Operator Precedence (highest to lowest)
---------------------------------------
| Priority | Operators          | Description                |
|----------|--------------------|----------------------------|
| 12       | + - ! ~ < >        | Unary (prefix)             |
| 11       | * /                | Multiplicative             |
| 10       | + -                | Additive                   |
| 9        | << >>              | Shift                      |
| 8        | < <= > >=          | Relational                 |
| 7        | == !=              | Equality                   |
| 6        | &                  | Bitwise AND                |
| 5        | ^                  | Bitwise XOR                |
| 4        | |                  | Bitwise OR                 |
| 3        | &&                 | Logical AND                |
| 2        | ||                 | Logical OR                 |

Binary operators associate to the left. The unary ``<`` and ``>`` select
the low and high byte of their operand.

Terms
-----
- Numbers in any notation
- Single-character string literals ('A')
- Symbol names, local labels (10$) and the pseudo-names * and &
- Parenthesised or bracketed sub-expressions: (expr) or [expr]

The * and & pseudo-names and local labels are not recorded as symbol
uses.
"""

from typing import Optional

from bsa_tools.analyzer.diagnostics import Diagnostic, Severity
from bsa_tools.analyzer.lexer import Token, TokenType
from bsa_tools.analyzer.results import ParseResult


# =============================================================================
# Operator Tables
# =============================================================================

BINARY_PRIORITIES = {
    "*": 11, "/": 11,
    "+": 10, "-": 10,
    "<<": 9, ">>": 9,
    "<": 8, "<=": 8, ">": 8, ">=": 8,
    "==": 7, "!=": 7,
    "&": 6,
    "^": 5,
    "|": 4,
    "&&": 3,
    "||": 2,
}

UNARY_OPERATORS = frozenset({"+", "-", "!", "~", "<", ">"})

# Unary operators bind tighter than any binary operator
UNARY_PRIORITY = 12

# Opening bracket -> required closing bracket
BRACKET_PAIRS = {"(": ")", "[": "]"}


class ExpressionParser:
    """
    Token cursor plus the expression sub-grammar.

    The cursor is an index into an immutable token list. Statement parsing
    builds on this class so both share the same cursor and the same
    ParseResult.

    Attributes:
        tokens: Tokens of the line being parsed
        line_number: Zero-based line number
        result: Receives diagnostics and symbol uses
    """

    def __init__(
        self,
        tokens: list[Token],
        line_number: int = 0,
        result: Optional[ParseResult] = None,
    ):
        self.tokens = tokens
        self.line_number = line_number
        self.result = result if result is not None else ParseResult()
        self._pos = 0

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    @property
    def pos(self) -> int:
        """Index of the next unconsumed token."""
        return self._pos

    @property
    def is_done(self) -> bool:
        """True once every token on the line has been consumed."""
        return self._pos >= len(self.tokens)

    def _current(self) -> Optional[Token]:
        """Get current token, or None at end of line."""
        if self._pos >= len(self.tokens):
            return None
        return self.tokens[self._pos]

    def _peek(self, offset: int = 1) -> Optional[Token]:
        """Look ahead at token."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return None
        return self.tokens[pos]

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self.tokens[self._pos]
        self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        """Check if current token is one of the given types."""
        token = self._current()
        return token is not None and token.type in types

    def _check_operator(self, *texts: str) -> bool:
        """Check if current token is one of the given operators."""
        token = self._current()
        return token is not None and token.is_operator(*texts)

    def _match(self, *types: TokenType) -> Optional[Token]:
        """Match and consume if current token is one of the types."""
        if self._check(*types):
            return self._advance()
        return None

    def _match_operator(self, *texts: str) -> Optional[Token]:
        """Match and consume if current token is one of the operators."""
        if self._check_operator(*texts):
            return self._advance()
        return None

    def _skip_to_eol(self) -> None:
        """Consume the rest of the line after an error."""
        self._pos = len(self.tokens)

    def _last_token(self) -> Optional[Token]:
        return self.tokens[-1] if self.tokens else None

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def _error(self, message: str, start: Token, end: Optional[Token] = None) -> None:
        """Record an error spanning from start to end (inclusive)."""
        self.result.add_diagnostic(
            Diagnostic.for_tokens(message, Severity.ERROR, start, end or start)
        )

    def _error_here(self, message: str, fallback: Optional[Token] = None) -> None:
        """
        Record an error at the current token.

        At end of line the error is placed on fallback, or on the last
        token of the line when no fallback is given.
        """
        token = self._current() or fallback or self._last_token()
        if token is None:
            self.result.add_diagnostic(Diagnostic.for_span(
                message, Severity.ERROR, self.line_number, 0, 0
            ))
            return
        self._error(message, token)

    # =========================================================================
    # Expressions
    # =========================================================================

    def expect_expression(self, min_priority: int = 0) -> bool:
        """
        Parse an expression at the cursor.

        Binary operators are folded in while their priority exceeds
        min_priority; each right operand is parsed at the operator's own
        priority, which makes operators of equal priority left-associative.

        Args:
            min_priority: Only operators binding tighter than this are consumed

        Returns:
            True if a complete expression was consumed. On False the cursor
            is left at the first token that could not be used.
        """
        if not self._expect_term():
            return False

        while True:
            op = self._current()
            if op is None or op.type != TokenType.OPERATOR:
                break
            priority = BINARY_PRIORITIES.get(op.text)
            if priority is None or priority <= min_priority:
                break

            self._advance()
            if not self.expect_expression(priority):
                self._error("Missing operand", op)
                return False

        return True

    def _expect_term(self) -> bool:
        """Parse a single operand, a unary operation or a bracketed group."""
        token = self._current()
        if token is None:
            return False

        if token.type == TokenType.NUMBER:
            self._advance()
            return True

        if token.type == TokenType.STRING:
            # Only a character constant has a numeric value
            if len(token.text) != 1:
                return False
            self._advance()
            return True

        if token.type == TokenType.NAME:
            self._advance()
            if not token.is_pseudo_name:
                self.result.add_symbol_use(token)
            return True

        if token.type != TokenType.OPERATOR:
            return False

        if token.text in UNARY_OPERATORS:
            self._advance()
            return self.expect_expression(UNARY_PRIORITY)

        if token.text in BRACKET_PAIRS:
            return self._expect_group()

        if token.text == ",":
            return False

        self._error(f"Unexpected {token.text}", token)
        return False

    def _expect_group(self) -> bool:
        """Parse (expr) or [expr]; the closing bracket must match the opening one."""
        opener = self._advance()
        closer = BRACKET_PAIRS[opener.text]

        if self._check_operator(closer):
            self._error("Illegal operand", opener, self._advance())
            return False

        if not self.expect_expression():
            return False

        if not self._match_operator(closer):
            self._error_here(f"Missing closing {closer}")
            return False

        return True
