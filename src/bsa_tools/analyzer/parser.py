"""
BSA Statement Parser
====================

This module parses one tokenized line of BSA source into a ParseResult.
A line is matched against a fixed sequence of statement shapes, and the
first shape that recognises the line consumes it.

Statement Shapes (in order)
---------------------------
1. Solo keywords: #else, #endif, endmac alone on the line
2. #if expression
3. #ifdef symbol
4. #error free text
5. Any other '#' directive (reported as unrecognised)
6. Macro definition header: macro name(arg, arg, ...)
7. Label: name or name:, optionally followed by one of
   8. Assignment: name = expr, * = expr, & = expr
   9. Macro use: name(expr, expr, ...)
   10. Pseudo-op: .byte 1,2,"three"
   11. Instruction: lda ($fb),y

Error Recovery
--------------
A shape that recognises its leading tokens but then fails reports one
specific diagnostic and consumes the rest of the line, so no later shape
is tried. If no shape consumes the whole line, a single "syntax error"
is reported at the first token.

Example
-------
>>> from bsa_tools.analyzer.parser import parse_line
>>> result = parse_line("loop: lda table,x", 0)
>>> [t.text for t in result.symbol_definitions]
['loop']
>>> sorted(result.symbol_uses)
['table']
"""

import logging
import re
from pathlib import Path
from typing import Callable, Optional

from bsa_tools.analyzer.expressions import ExpressionParser
from bsa_tools.analyzer.lexer import PSEUDO_OP_KEYWORDS, Token, TokenType, lex_line
from bsa_tools.analyzer.results import ParseResult, merge_results
from bsa_tools.cpu import (
    ACCUMULATOR_NAMES,
    BIT_BRANCH_INSTRUCTIONS,
    INDEX_REGISTERS,
    INDIRECT_INDEX_REGISTERS,
    LONG_INDIRECT_REGISTERS,
    POST_INDIRECT_REGISTERS,
)
from bsa_tools.errors import AnalysisCancelled, DocumentError

logger = logging.getLogger(__name__)


# =============================================================================
# Static Tables
# =============================================================================

# Keywords that must stand alone on their line
SOLO_KEYWORDS = frozenset({"#else", "#endif", "endmac"})

# Argument shape of each pseudo-op; anything not listed takes a list
PSEUDO_OP_SHAPES = {
    ".nam": "text",
    ".subttl": "text",
    ".cpu": "text",
    ".bhex": "rest",
    ".include": "filename",
    "!src": "filename",
    ".case": "case",
    ".fill": "fill",
    "!addr": "addr",
}

# Line breaks accepted by parse_document
LINE_BREAK = re.compile(r"\r\n?|\n")


class LineParser(ExpressionParser):
    """
    Parser for one line of BSA source.

    The line is lexed on construction. parse() runs the statement shapes
    and returns the ParseResult, which also carries the lexer's
    diagnostics.

    Each parse_* method follows the same contract: it returns False and
    leaves the cursor untouched when the line does not have its shape,
    and True once it has consumed tokens. A shape that fails after
    committing reports a diagnostic and consumes the rest of the line.

    Usage:
        parser = LineParser("  sta $d020", 12)
        result = parser.parse()
    """

    def __init__(self, text: str, line_number: int = 0):
        lexed = lex_line(text, line_number)
        super().__init__(lexed.tokens, line_number)
        self.text = text
        self.result.diagnostics.extend(lexed.diagnostics)

        self._pseudo_op_handlers: dict[str, Callable[[Token], bool]] = {
            "list": self._parse_list_arguments,
            "text": self._parse_text_arguments,
            "rest": self._parse_rest_argument,
            "filename": self._parse_filename_argument,
            "case": self._parse_case_argument,
            "fill": self._parse_fill_arguments,
            "addr": self._parse_addr_arguments,
        }

    def parse(self) -> ParseResult:
        """Parse the line and return its result."""
        if self.is_done:
            return self.result

        handled = (
            self.parse_solo_keywords()
            or self.parse_if_directive()
            or self.parse_ifdef_directive()
            or self.parse_error_directive()
            or self.handle_unrecognized_hash_directive()
            or self.parse_macro_definition_start()
        )
        if not handled:
            self.parse_label()
            if not self.is_done:
                (
                    self.parse_assignment()
                    or self.parse_macro_use()
                    or self.parse_pseudo_op()
                    or self.parse_opcode()
                )

        if not self.is_done:
            self._error("syntax error", self.tokens[0])
            self._skip_to_eol()

        return self.result

    # =========================================================================
    # Conditional Assembly
    # =========================================================================

    def _find_keyword(self, *keywords: str) -> Optional[int]:
        """Index of the first KEYWORD token among keywords, or None."""
        for index, token in enumerate(self.tokens):
            if token.is_keyword(*keywords):
                return index
        return None

    def _report_surrounding_text(self, index: int) -> None:
        """Report tokens before and after the keyword at index."""
        keyword = self.tokens[index]
        if index > 0:
            self._error(
                f"Unexpected text before {keyword.text}",
                self.tokens[0], self.tokens[index - 1],
            )
        if index < len(self.tokens) - 1:
            self._error(
                f"Unexpected text after {keyword.text}",
                self.tokens[index + 1], self.tokens[-1],
            )

    def parse_solo_keywords(self) -> bool:
        """#else, #endif and endmac must be the only thing on their line."""
        index = self._find_keyword(*SOLO_KEYWORDS)
        if index is None:
            return False

        self._report_surrounding_text(index)
        self._skip_to_eol()
        return True

    def _reject_text_before(self, index: int) -> bool:
        """
        Report and consume the line if the directive at index does not
        start it.
        """
        if index == 0:
            return False
        self._error(
            f"Unexpected text before {self.tokens[index].text}",
            self.tokens[0], self.tokens[index - 1],
        )
        self._skip_to_eol()
        return True

    def parse_if_directive(self) -> bool:
        """#if expression"""
        index = self._find_keyword("#if")
        if index is None:
            return False
        if self._reject_text_before(index):
            return True

        keyword = self._advance()
        if not self.expect_expression():
            self._error("Missing or invalid expression for #if", keyword)
        elif not self.is_done:
            self._error(
                "Unexpected text after #if expression",
                self._current(), self.tokens[-1],
            )
        self._skip_to_eol()
        return True

    def parse_ifdef_directive(self) -> bool:
        """#ifdef symbol"""
        index = self._find_keyword("#ifdef")
        if index is None:
            return False
        if self._reject_text_before(index):
            return True

        keyword = self._advance()
        symbol = self._match(TokenType.NAME)
        if symbol is None or symbol.is_pseudo_name:
            self._error("Missing symbol for #ifdef", keyword)
        else:
            self.result.add_symbol_use(symbol)
            if not self.is_done:
                self._error(
                    "Unexpected text after #ifdef symbol",
                    self._current(), self.tokens[-1],
                )
        self._skip_to_eol()
        return True

    def parse_error_directive(self) -> bool:
        """#error message text; the text is not checked."""
        index = self._find_keyword("#error")
        if index is None:
            return False

        if not self._reject_text_before(index):
            self._skip_to_eol()
        return True

    def handle_unrecognized_hash_directive(self) -> bool:
        """Any other line starting with '#' is an unknown directive."""
        if not self._check_operator("#"):
            return False

        hash_token = self._advance()
        self._error("Unrecognized assembler directive", hash_token)
        self._skip_to_eol()
        return True

    # =========================================================================
    # Macros
    # =========================================================================

    def parse_macro_definition_start(self) -> bool:
        """
        macro name(param, param, ...)

        The macro name is recorded only when the whole header is valid.
        """
        if not self._check(TokenType.KEYWORD) or self._current().text != "macro":
            return False

        keyword = self._advance()
        self._parse_macro_header(keyword)
        self._skip_to_eol()
        return True

    def _parse_macro_header(self, keyword: Token) -> None:
        name = self._match(TokenType.NAME)
        if name is None or name.is_local_label or name.is_pseudo_name:
            self._error_here("Missing name for macro", keyword)
            return

        if not self._match_operator("("):
            self._error_here("Missing ( after macro name", name)
            return

        if not self._match_operator(")"):
            while True:
                if self.is_done:
                    self._error_here("Missing ) after macro parameters")
                    return
                if not self._match(TokenType.NAME):
                    self._error_here("Missing parameter name in macro definition")
                    return
                if self._match_operator(")"):
                    break
                if not self._match_operator(","):
                    self._error_here("Missing ) after macro parameters")
                    return

        if not self.is_done:
            self._error(
                "Unexpected text after macro definition",
                self._current(), self.tokens[-1],
            )
            return

        self.result.add_macro_definition(name)

    def parse_macro_use(self) -> bool:
        """
        name(arg, arg, ...)

        The macro use is recorded only when the call is complete and
        nothing follows it.
        """
        token = self._current()
        if token is None or token.type != TokenType.NAME or token.is_pseudo_name:
            return False

        name = self._advance()
        if not self._match_operator("("):
            self._error("Unexpected name", name)
            self._skip_to_eol()
            return True

        if self._parse_macro_arguments():
            if self.is_done:
                self.result.add_macro_use(name)
            else:
                self._error(
                    "Unexpected text after macro call",
                    self._current(), self.tokens[-1],
                )
        self._skip_to_eol()
        return True

    def _parse_macro_arguments(self) -> bool:
        if self._match_operator(")"):
            return True

        while True:
            if self.is_done:
                self._error_here("Expected , or ) in macro call")
                return False
            if not self._expect_argument():
                self._error_here("Invalid macro argument")
                return False
            if self._match_operator(")"):
                return True
            if not self._match_operator(","):
                self._error_here("Expected , or ) in macro call")
                return False

    def _expect_argument(self) -> bool:
        """A string literal of any length, or an expression."""
        token = self._current()
        if token is not None and token.type == TokenType.STRING:
            following = self._peek()
            if following is None or following.is_operator(",", ")"):
                self._advance()
                return True
        return self.expect_expression()

    # =========================================================================
    # Labels and Assignments
    # =========================================================================

    def parse_label(self) -> bool:
        """
        name or name:

        A name directly followed by '(' or '=' is left for the macro use
        and assignment shapes.
        """
        token = self._current()
        if token is None or token.type != TokenType.NAME or token.is_pseudo_name:
            return False

        following = self._peek()
        if following is not None and following.is_operator("(", "="):
            return False

        self._advance()
        self._match_operator(":")
        self.result.add_symbol_definition(token)
        return True

    def parse_assignment(self) -> bool:
        """
        name = expr, * = expr (program counter) or & = expr (BSS pointer)

        Without '=' after the target nothing is consumed.
        """
        target = self._current()
        if target is None or target.type != TokenType.NAME:
            return False

        following = self._peek()
        if following is None or not following.is_operator("="):
            return False

        self._advance()
        self._advance()
        if not self.expect_expression() or not self.is_done:
            self._error("Invalid assignment", target, self.tokens[-1])
            self._skip_to_eol()
            return True

        if not target.is_pseudo_name:
            self.result.add_symbol_definition(target)
        return True

    # =========================================================================
    # Pseudo-operations
    # =========================================================================

    def parse_pseudo_op(self) -> bool:
        """.directive arguments, checked against the directive's argument shape."""
        token = self._current()
        if token is None or token.type != TokenType.KEYWORD:
            return False
        if token.text not in PSEUDO_OP_KEYWORDS:
            return False

        directive = self._advance()
        shape = PSEUDO_OP_SHAPES.get(directive.text, "list")
        if not self._pseudo_op_handlers[shape](directive):
            self._skip_to_eol()
        return True

    def _parse_list_arguments(self, directive: Token) -> bool:
        if self.is_done:
            return True

        while True:
            if not self._expect_argument():
                self._error_here(f"Invalid argument for {directive.text}", directive)
                return False
            if self.is_done:
                return True
            if not self._match_operator(","):
                self._error(
                    f"Unexpected text after {directive.text} arguments",
                    self._current(), self.tokens[-1],
                )
                return False

    def _parse_text_arguments(self, directive: Token) -> bool:
        self._skip_to_eol()
        return True

    def _parse_rest_argument(self, directive: Token) -> bool:
        self._match(TokenType.REST_OF_LINE)
        return True

    def _parse_filename_argument(self, directive: Token) -> bool:
        if self._match(TokenType.STRING) and self.is_done:
            return True
        self._error_here(f"Missing quoted filename after {directive.text}", directive)
        return False

    def _parse_case_argument(self, directive: Token) -> bool:
        if self._match_operator("+", "-") and self.is_done:
            return True
        self._error_here(f"Missing '+' or '-' after {directive.text}", directive)
        return False

    def _parse_fill_arguments(self, directive: Token) -> bool:
        """.fill count [(value)]"""
        if not self.expect_expression():
            self._error_here(f"Invalid count for {directive.text}", directive)
            return False

        if self._match_operator("("):
            if not self.expect_expression() or not self._match_operator(")"):
                self._error_here(f"Invalid fill value for {directive.text}", directive)
                return False

        if not self.is_done:
            self._error(
                f"Unexpected text after {directive.text} arguments",
                self._current(), self.tokens[-1],
            )
            return False
        return True

    def _parse_addr_arguments(self, directive: Token) -> bool:
        """!addr name = expr"""
        name = self._match(TokenType.NAME)
        if (
            name is None
            or name.is_pseudo_name
            or not self._match_operator("=")
            or not self.expect_expression()
            or not self.is_done
        ):
            self._error_here(f"Invalid address definition for {directive.text}", directive)
            return False

        self.result.add_symbol_definition(name)
        return True

    # =========================================================================
    # Instructions and Addressing Modes
    # =========================================================================

    def parse_opcode(self) -> bool:
        """
        Instruction with its operand.

        Operand forms:
            (none)          sec
            a               asl a
            #expr           lda #$41
            expr            jmp start
            expr,reg        lda table,x
            expr,expr       bbr3 $fe,target
            (expr)          jmp (vector)
            (expr,reg)      lda ($fb,x)
            (expr),reg      lda ($fb),y
            [expr]          jml [vector]
            [expr],z        lda [$fb],z
        """
        if not self._check(TokenType.OPCODE):
            return False

        opcode = self._advance()
        if self.is_done:
            return True

        if self._check_operator("#"):
            ok = self._parse_immediate_operand()
        elif self._check_operator("(", "["):
            ok = self._parse_indirect_operand()
        else:
            ok = self._parse_direct_operand(opcode)

        if ok and not self.is_done:
            self._error(
                "Unexpected text after operand",
                self._current(), self.tokens[-1],
            )
        self._skip_to_eol()
        return True

    def _parse_immediate_operand(self) -> bool:
        hash_token = self._advance()
        if not self.expect_expression():
            self._error_here("Invalid immediate operand", hash_token)
            return False
        return True

    def _parse_indirect_operand(self) -> bool:
        opener = self._advance()
        closer = ")" if opener.text == "(" else "]"

        if not self.expect_expression():
            self._error_here("Invalid operand", opener)
            return False

        if opener.text == "(" and self._match_operator(","):
            if not self._match_register(INDIRECT_INDEX_REGISTERS):
                self._error_here("Invalid indirect index register")
                return False

        if not self._match_operator(closer):
            self._error_here(f"Expected {closer}")
            return False

        if self._match_operator(","):
            allowed = POST_INDIRECT_REGISTERS if closer == ")" else LONG_INDIRECT_REGISTERS
            if not self._match_register(allowed):
                self._error_here("Invalid index indirect register")
                return False

        return True

    def _parse_direct_operand(self, opcode: Token) -> bool:
        token = self._current()
        if (
            token.type == TokenType.NAME
            and token.text.lower() in ACCUMULATOR_NAMES
            and self._peek() is None
        ):
            self._advance()
            return True

        if not self.expect_expression():
            self._error_here("Invalid operand", opcode)
            return False

        if self._match_operator(","):
            # bbrN/bbsN take a branch target here, never an index register
            if opcode.text in BIT_BRANCH_INSTRUCTIONS or not self._match_register(INDEX_REGISTERS):
                if not self.expect_expression():
                    self._error_here("Invalid operand")
                    return False

        return True

    def _match_register(self, registers: frozenset) -> Optional[Token]:
        """Consume a register name from registers (any case)."""
        token = self._current()
        if (
            token is not None
            and token.type == TokenType.NAME
            and token.text.lower() in registers
        ):
            return self._advance()
        return None


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_line(text: str, line_number: int = 0) -> ParseResult:
    """
    Lex and parse one line of source.

    Args:
        text: The line, without its line break
        line_number: Zero-based line number

    Returns:
        ParseResult for the line
    """
    return LineParser(text, line_number).parse()


def parse_document(
    text: str,
    cancel: Optional[Callable[[], bool]] = None,
) -> ParseResult:
    """
    Parse a whole document.

    The text is split on \\n, \\r\\n and \\r. Lines are parsed independently
    in order and their results folded with merge_results().

    Args:
        text: Complete document text
        cancel: Optional callback polled before each line; when it returns
                True the parse is abandoned

    Returns:
        ParseResult for the whole document

    Raises:
        AnalysisCancelled: If cancel returned True
    """
    result = ParseResult()
    lines = LINE_BREAK.split(text)

    for line_number, line in enumerate(lines):
        if cancel is not None and cancel():
            logger.debug(f"Parse cancelled at line {line_number}")
            raise AnalysisCancelled(line_number)
        merge_results(result, parse_line(line, line_number))

    logger.debug(
        f"Parsed {len(lines)} lines: {len(result.diagnostics)} diagnostics, "
        f"{len(result.symbol_definitions)} symbols, "
        f"{len(result.macro_definitions)} macros"
    )
    return result


def parse_file(
    path: Path | str,
    encoding: str = "utf-8",
    cancel: Optional[Callable[[], bool]] = None,
) -> ParseResult:
    """
    Read and parse a source file.

    Args:
        path: Source file to read
        encoding: Text encoding of the file
        cancel: Optional cancellation callback, see parse_document()

    Returns:
        ParseResult for the file

    Raises:
        DocumentError: If the file cannot be read or decoded
        AnalysisCancelled: If cancel returned True
    """
    path = Path(path)
    try:
        text = path.read_bytes().decode(encoding)
    except OSError as e:
        raise DocumentError(path, e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise DocumentError(path, f"not valid {encoding} text ({e.reason} at byte {e.start})") from e
    except LookupError as e:
        raise DocumentError(path, f"unknown encoding '{encoding}'") from e

    logger.debug(f"Parsing {path} ({len(text)} characters)")
    return parse_document(text, cancel)
