"""
BSA Assembly Language Lexer
===========================

This module implements the line lexer for the BSA assembler dialect. It
converts one line of source text into a list of classified tokens plus
any lexical diagnostics.

Token Types
-----------
- STRING: Quoted literal ('A', "hello"); text holds the decoded contents
- NUMBER: $hex, %binary, @octal, decimal with optional fraction
- NAME: Symbols, local labels (10$) and the pseudo-names * (program counter)
  and & (BSS pointer) when they stand where an operand is expected
- KEYWORD: #if, #ifdef, #else, #endif, #error, macro, endmac, .word, !src, ...
- OPERATOR: Operators and punctuation (+, <<, &&, (, ], #, =, ',', ...)
- OPCODE: Instruction mnemonics (lda, bbr3, lbne, ldq, xce, ...)
- REST_OF_LINE: Unparsed argument text of .bhex and #error

Productions are tried in a fixed order at every position, and the first
one that matches wins:

| Order | Production   | Example        |
|-------|--------------|----------------|
| 1     | star comment | * header       |
| 2     | line comment | ; note         |
| 3     | string       | "text"         |
| 4     | opcode       | LDA            |
| 5     | keyword      | .word          |
| 6     | operator     | >>             |
| 7     | name         | loop, 10$, *   |
| 8     | number       | $c000          |

Comments
--------
A semicolon starts a comment anywhere. An asterisk is a comment only when
it is the first non-blank character of the line and is not followed by
"=" (``* = $2001`` sets the program counter).

Pseudo-names
------------
``*`` and ``&`` are NAME tokens where an operand or assignment target
belongs (``jmp *+3``, ``& = $c000``) and OPERATOR tokens after a term
(``2 * 3``, ``flags & $0f``).

Example
-------
>>> from bsa_tools.analyzer.lexer import lex_line
>>> result = lex_line("loop: lda #$41  ; load 'A'", 0)
>>> [(tok.type.name, tok.text) for tok in result.tokens]
[('NAME', 'loop'), ('OPERATOR', ':'), ('OPCODE', 'lda'), ('OPERATOR', '#'), ('NUMBER', '$41')]
"""

from dataclasses import dataclass, field
from enum import Enum, auto
import string

from bsa_tools.analyzer.diagnostics import Diagnostic, Severity
from bsa_tools.cpu import MNEMONICS


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token types for the BSA assembly language.

    Each token type represents a category of lexical element that can
    appear on a source line.
    """

    STRING = auto()        # Quoted string or character literal
    NUMBER = auto()        # Numeric literal (all formats)
    NAME = auto()          # Symbol, local label or pseudo-name
    KEYWORD = auto()       # Directive or macro keyword
    OPERATOR = auto()      # Operator or punctuation
    OPCODE = auto()        # Instruction mnemonic
    REST_OF_LINE = auto()  # Unparsed tail of a .bhex or #error line


# =============================================================================
# Static Tables
# =============================================================================

# Conditional assembly and macro keywords
DIRECTIVE_KEYWORDS = frozenset({
    "#if", "#ifdef", "#else", "#endif", "#error", "macro", "endmac",
})

# Pseudo-operations
PSEUDO_OP_KEYWORDS = frozenset({
    ".word", ".bigw", ".hex4", ".dec4", ".wor", ".byte", ".byt", ".pet",
    ".disp", ".bhex", ".lits", ".quad", ".real", ".real4", ".fill", ".bss",
    ".store", ".cpu", ".base", ".org", ".load", ".include", ".size", ".ski",
    ".pag", ".nam", ".subttl", ".end", ".case", "!src", "!addr",
})

KEYWORDS = DIRECTIVE_KEYWORDS | PSEUDO_OP_KEYWORDS

# Keywords whose argument text is captured verbatim as a REST_OF_LINE token
REST_OF_LINE_KEYWORDS = frozenset({".bhex", "#error"})

# Operators and punctuation, longest first so that ">>" wins over ">"
OPERATORS = tuple(sorted(
    {
        "==", "!=", ">=", "<=", ">>", "<<", "&&", "||",
        ":", "^", "<", ">", "(", ")", "[", "]", "+", "-",
        "*", "/", "!", "~", "&", "|", ",", "#", "=",
    },
    key=len,
    reverse=True,
))

# Pseudo-names that stand for the program counter and the BSS pointer
PSEUDO_NAMES = frozenset({"*", "&"})


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single classified lexical unit.

    Every token carries a canonical text payload appropriate to its type:

    | Type         | text                                  |
    |--------------|---------------------------------------|
    | STRING       | decoded contents, quotes removed      |
    | NUMBER       | literal spelling ($ff, %0100, 1.5)    |
    | NAME         | identifier spelling (case preserved)  |
    | KEYWORD      | lower-cased keyword (.word, #ifdef)   |
    | OPERATOR     | operator spelling                     |
    | OPCODE       | lower-cased mnemonic                  |
    | REST_OF_LINE | raw remaining text of the line        |

    Attributes:
        type: The TokenType classification
        line: Line number in the document (0-indexed)
        start: First character offset (0-indexed)
        end: Offset one past the last character
        text: Canonical text payload
    """
    type: TokenType
    line: int
    start: int
    end: int
    text: str

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, {self.line}:{self.start}-{self.end})"

    @property
    def is_local_label(self) -> bool:
        """True for NAME tokens of the form digits followed by '$' (10$)."""
        return (
            self.type == TokenType.NAME
            and len(self.text) > 1
            and self.text.endswith("$")
            and self.text[:-1].isdigit()
        )

    @property
    def is_pseudo_name(self) -> bool:
        """True for the program counter (*) and BSS pointer (&) names."""
        return self.type == TokenType.NAME and self.text in PSEUDO_NAMES

    def is_operator(self, *texts: str) -> bool:
        """Return True if this is an OPERATOR token spelled as one of texts."""
        return self.type == TokenType.OPERATOR and self.text in texts

    def is_keyword(self, *texts: str) -> bool:
        """Return True if this is a KEYWORD token spelled as one of texts."""
        return self.type == TokenType.KEYWORD and self.text in texts


@dataclass
class LexResult:
    """Tokens and lexical diagnostics for one line."""
    tokens: list[Token] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes one line of BSA assembly source.

    The lexer keeps two cursors into the line: ``_start`` marks the first
    character of the token being scanned and ``_pos`` the scan position.
    Each production inspects the text at ``_start`` and either consumes
    characters (advancing ``_pos``) or declines by returning False.

    The lexer never raises. An unrecognised character produces a
    "syntax error" diagnostic and stops tokenizing the rest of the line;
    an unterminated string produces a warning and runs to end of line.

    Usage:
        lexer = Lexer(line_text, line_number)
        result = lexer.tokenize()

    Attributes:
        text: The line being tokenized (without its line break)
        line_number: Zero-based line number used in tokens and diagnostics
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits + "_."

    # Characters that make up a keyword or mnemonic word
    WORD_CHARS = string.ascii_letters + string.digits + "_"

    # Escape sequences in strings; any other escaped character stands for itself
    ESCAPE_SEQUENCES = {
        "n": "\n",      # Newline
        "r": "\r",      # Carriage return
        "t": "\t",      # Tab
        "0": "\0",      # Null
    }

    def __init__(self, text: str, line_number: int = 0):
        """
        Initialize the lexer with one line of source.

        Args:
            text: The line to tokenize
            line_number: Zero-based line number in the document
        """
        self.text = text
        self.line_number = line_number

        # Token start and scan position
        self._start = 0
        self._pos = 0

        self._tokens: list[Token] = []
        self._diagnostics: list[Diagnostic] = []

    def tokenize(self) -> LexResult:
        """
        Tokenize the whole line.

        Returns:
            LexResult with the tokens in left-to-right order and any
            lexical diagnostics
        """
        self._skip_whitespace()
        if self._lex_star_comment():
            return self._result()

        while not self._at_end():
            if self._skip_whitespace():
                continue

            self._start = self._pos
            matched = (
                self._lex_line_comment()
                or self._lex_string()
                or self._lex_opcode()
                or self._lex_keyword()
                or self._lex_operator()
                or self._lex_name()
                or self._lex_number()
            )
            if not matched:
                self._pos = self._start + 1
                self._add_diagnostic("syntax error", Severity.ERROR)
                break

        return self._result()

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if the scan position has reached the end of the line."""
        return self._pos >= len(self.text)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at the character at the scan position + offset.

        Returns empty string if past end of line.
        """
        pos = self._pos + offset
        if pos >= len(self.text):
            return ""
        return self.text[pos]

    def _scan_while(self, chars: str, pos: int) -> int:
        """Return the first offset at or after pos whose character is not in chars."""
        # Note: '' in chars is True, so the bounds check must come first
        while pos < len(self.text) and self.text[pos] in chars:
            pos += 1
        return pos

    def _skip_whitespace(self) -> bool:
        """
        Skip blanks before the next token.

        Returns:
            True if any whitespace was skipped
        """
        start = self._pos
        while not self._at_end() and self._peek().isspace():
            self._pos += 1
        self._start = self._pos
        return self._pos > start

    # =========================================================================
    # Token and Diagnostic Creation
    # =========================================================================

    def _add_token(self, token_type: TokenType, text: str) -> None:
        """Record a token spanning [_start, _pos)."""
        self._tokens.append(Token(
            type=token_type,
            line=self.line_number,
            start=self._start,
            end=self._pos,
            text=text,
        ))

    def _add_diagnostic(self, message: str, severity: Severity) -> None:
        """Record a diagnostic spanning [_start, _pos)."""
        self._diagnostics.append(Diagnostic.for_span(
            message, severity, self.line_number, self._start, self._pos
        ))

    def _result(self) -> LexResult:
        return LexResult(tokens=self._tokens, diagnostics=self._diagnostics)

    # =========================================================================
    # Comments
    # =========================================================================

    def _lex_star_comment(self) -> bool:
        """
        Skip a star comment covering the whole line.

        Only called at the first non-blank character. "*" followed by
        optional blanks and "=" is a program counter assignment instead.
        """
        if self._peek() != "*":
            return False

        after = self._pos + 1
        while after < len(self.text) and self.text[after].isspace():
            after += 1
        if after < len(self.text) and self.text[after] == "=":
            return False

        self._pos = len(self.text)
        return True

    def _lex_line_comment(self) -> bool:
        """Skip a semicolon comment to end of line."""
        if self._peek() != ";":
            return False
        self._pos = len(self.text)
        return True

    # =========================================================================
    # Literals
    # =========================================================================

    def _lex_string(self) -> bool:
        """
        Scan a single- or double-quoted string literal.

        A backslash escapes the next character. BSA string literals cannot
        span lines, so an unterminated literal ends at the end of the line
        with a warning.
        """
        quote = self._peek()
        if quote not in ("'", '"'):
            return False

        self._pos += 1  # consume opening quote
        chars = []
        terminated = False
        while not self._at_end():
            char = self._peek()
            if char == quote:
                self._pos += 1  # consume closing quote
                terminated = True
                break

            if char == "\\" and self._pos + 1 < len(self.text):
                escaped = self._peek(1)
                chars.append(self.ESCAPE_SEQUENCES.get(escaped, escaped))
                self._pos += 2
            else:
                chars.append(char)
                self._pos += 1

        if not terminated:
            self._add_diagnostic("unterminated string literal", Severity.WARNING)

        self._add_token(TokenType.STRING, "".join(chars))
        return True

    def _lex_number(self) -> bool:
        """
        Scan a numeric literal.

        Formats:
            $c000   hexadecimal
            %0101   binary
            @177    octal
            12, 1.5, 10., .25   decimal with optional fraction
        """
        char = self._peek()
        prefixed = {"$": string.hexdigits, "%": "01", "@": "01234567"}

        if char in prefixed:
            end = self._scan_while(prefixed[char], self._pos + 1)
            if end == self._pos + 1:
                return False
        else:
            end = self._scan_while(string.digits, self._pos)
            if end < len(self.text) and self.text[end] == ".":
                end = self._scan_while(string.digits, end + 1)
            if end == self._pos or self.text[self._pos:end] == ".":
                return False

        self._pos = end
        self._add_token(TokenType.NUMBER, self.text[self._start:end])
        return True

    # =========================================================================
    # Words
    # =========================================================================

    def _lex_opcode(self) -> bool:
        """Scan an instruction mnemonic, matched case-insensitively as a whole word."""
        if not self._peek() or self._peek() not in string.ascii_letters:
            return False

        end = self._scan_while(self.WORD_CHARS, self._pos)
        word = self.text[self._pos:end].lower()
        if word not in MNEMONICS:
            return False

        self._pos = end
        self._add_token(TokenType.OPCODE, word)
        return True

    def _lex_keyword(self) -> bool:
        """
        Scan a directive keyword, matched case-insensitively as a whole word.

        For .bhex and #error the rest of the line is captured immediately
        as a single REST_OF_LINE token and lexing of the line ends.
        """
        char = self._peek()
        if not char or char not in "#.!" + string.ascii_letters:
            return False

        word_start = self._pos + 1 if char in "#.!" else self._pos
        end = self._scan_while(self.WORD_CHARS, word_start)
        word = self.text[self._pos:end].lower()
        if end == word_start or word not in KEYWORDS:
            return False

        self._pos = end
        self._add_token(TokenType.KEYWORD, word)

        if word in REST_OF_LINE_KEYWORDS and not self._at_end():
            self._start = self._pos
            self._pos = len(self.text)
            self._add_token(TokenType.REST_OF_LINE, self.text[self._start:])
        return True

    def _lex_operator(self) -> bool:
        """
        Scan an operator or punctuation character, longest match first.

        A '*' or '&' in operand position is left for the name production.
        """
        for op in OPERATORS:
            if self.text.startswith(op, self._pos):
                if op in PSEUDO_NAMES and self._expects_operand():
                    return False
                self._pos += len(op)
                self._add_token(TokenType.OPERATOR, op)
                return True
        return False

    def _expects_operand(self) -> bool:
        """
        Check if the scan position is where an operand or assignment
        target belongs rather than a binary operator.

        That is at the start of the line, after an opcode or keyword, after
        any operator except a closing bracket, and directly before a
        single '=' (``start * = $1000``).
        """
        after = self._scan_while(" \t", self._pos + 1)
        if self.text.startswith("=", after) and not self.text.startswith("==", after):
            return True

        if not self._tokens:
            return True
        previous = self._tokens[-1]
        if previous.type in (TokenType.OPCODE, TokenType.KEYWORD):
            return True
        return previous.type == TokenType.OPERATOR and previous.text not in (")", "]")

    def _lex_name(self) -> bool:
        """
        Scan a name.

        Names are identifiers (a letter or underscore followed by letters,
        digits, underscores and dots), local labels (digits followed by
        '$') or the pseudo-names '*' and '&'. The operator production
        takes '*' and '&' first unless they stand in operand position.
        """
        char = self._peek()
        if not char:
            return False

        if char in PSEUDO_NAMES:
            end = self._pos + 1
        elif char in self.IDENT_START or char.isalpha():
            end = self._pos + 1
            while end < len(self.text) and (
                self.text[end] in self.IDENT_CHARS or self.text[end].isalnum()
            ):
                end += 1
        elif char.isdigit():
            end = self._scan_while(string.digits, self._pos)
            if end >= len(self.text) or self.text[end] != "$":
                return False
            end += 1
        else:
            return False

        self._pos = end
        self._add_token(TokenType.NAME, self.text[self._start:end])
        return True


# =============================================================================
# Convenience Function
# =============================================================================

def lex_line(text: str, line_number: int = 0) -> LexResult:
    """
    Tokenize one line of source.

    Args:
        text: The line text, without its line break
        line_number: Zero-based line number

    Returns:
        LexResult with tokens and lexical diagnostics
    """
    return Lexer(text, line_number).tokenize()
