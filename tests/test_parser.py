# =============================================================================
# test_parser.py - Statement Parser Unit Tests
# =============================================================================
# Tests for the BSA statement parser.
#
# Test coverage includes:
#   - Solo keywords, #if, #ifdef, #error and unknown '#' directives
#   - Macro definition headers and macro calls
#   - Labels, assignments and local labels
#   - Pseudo-op argument shapes
#   - Instruction addressing modes and their diagnostics
#   - Generic syntax errors
#   - Whole-document parsing, files and cancellation
# =============================================================================

import pytest
from bsa_tools.analyzer.diagnostics import Severity
from bsa_tools.analyzer.lexer import TokenType
from bsa_tools.analyzer.parser import LineParser, parse_document, parse_file, parse_line
from bsa_tools.errors import AnalysisCancelled, DocumentError


# =============================================================================
# Helper Functions
# =============================================================================

def messages(result) -> list:
    return [d.message for d in result.diagnostics]


def assert_clean(source: str):
    """Parse a line and assert it produced no diagnostics."""
    result = parse_line(source, 7)
    assert messages(result) == [], source
    return result


def assert_single_error(source: str, message: str):
    """Parse a line and assert exactly one diagnostic containing message."""
    result = parse_line(source, 7)
    assert len(result.diagnostics) == 1, messages(result)
    assert message in result.diagnostics[0].message
    return result


def span(diagnostic) -> tuple:
    return (diagnostic.range.start.character, diagnostic.range.end.character)


# =============================================================================
# Empty Lines and Comments
# =============================================================================

class TestEmptyLines:
    """Lines without statements."""

    def test_empty_string(self):
        result = parse_line("", 0)
        assert result.is_empty()

    def test_star_comment(self):
        assert parse_line("   * star comment", 0).is_empty()

    def test_semicolon_comment(self):
        assert parse_line("   ; line comment", 0).is_empty()

    def test_parser_done_on_comment_line(self):
        parser = LineParser("   ; just a line comment", 7)
        assert parser.is_done


# =============================================================================
# Solo Keywords
# =============================================================================

class TestSoloKeywords:
    """#else, #endif and endmac."""

    def test_does_nothing_when_absent(self):
        parser = LineParser("sym: lda #$ff", 7)
        assert parser.parse_solo_keywords() is False
        assert parser.pos == 0
        assert parser.result.diagnostics == []

    @pytest.mark.parametrize("source", [
        "  #else    ; line comment",
        "#endif",
        "  endmac",
        "ENDMAC",
    ])
    def test_alone_on_line(self, source):
        assert_clean(source)

    def test_text_after_keyword(self):
        result = assert_single_error("  endmac name", "after")
        assert result.diagnostics[0].message == "Unexpected text after endmac"
        assert span(result.diagnostics[0]) == (9, 13)

    def test_text_before_keyword(self):
        result = assert_single_error("sym: endmac", "before")
        assert span(result.diagnostics[0]) == (0, 4)

    def test_label_before_keyword_not_defined(self):
        result = parse_line("sym: #endif", 7)
        assert result.symbol_definitions == []

    def test_text_before_and_after(self):
        result = parse_line("x #else y", 7)
        assert messages(result) == [
            "Unexpected text before #else",
            "Unexpected text after #else",
        ]


# =============================================================================
# Conditional Assembly
# =============================================================================

class TestIfDirective:
    """#if expression"""

    def test_does_nothing_when_absent(self):
        parser = LineParser("sym: lda #$ff", 7)
        assert parser.parse_if_directive() is False
        assert parser.pos == 0

    def test_valid_statement(self):
        result = assert_clean("#if sym")
        uses = result.symbol_uses["sym"]
        assert len(uses) == 1
        assert uses[0].line == 7
        assert uses[0].start == 4

    def test_complex_expression(self):
        assert_clean("#if >(sym + $c000 << 4) - %0100")

    def test_missing_expression(self):
        result = assert_single_error("#if", "Missing or invalid expression")
        assert result.diagnostics[0].message == "Missing or invalid expression for #if"

    def test_text_before_keyword(self):
        result = assert_single_error("sym #if", "before")
        assert result.symbol_definitions == []

    def test_text_after_expression(self):
        assert_single_error("#if sym foo", "after")


class TestIfdefDirective:
    """#ifdef symbol"""

    def test_does_nothing_when_absent(self):
        parser = LineParser("sym: lda #$ff", 7)
        assert parser.parse_ifdef_directive() is False
        assert parser.pos == 0

    def test_valid_statement(self):
        result = assert_clean("#ifdef sym")
        uses = result.symbol_uses["sym"]
        assert len(uses) == 1
        assert uses[0].start == 7

    def test_indented_with_comment(self):
        assert_clean("   #ifdef SYMBOL_NAME    ; with a line comment")

    @pytest.mark.parametrize("source", ["#ifdef", "#ifdef   ; comment"])
    def test_missing_symbol(self, source):
        result = parse_line(source, 0)
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].message == "Missing symbol for #ifdef"
        assert span(result.diagnostics[0]) == (0, 6)

    def test_text_before_keyword(self):
        assert_single_error("sym #ifdef", "before")

    def test_text_after_symbol(self):
        result = assert_single_error("#ifdef sym foo", "after")
        assert span(result.diagnostics[0]) == (11, 14)

    def test_local_label_not_recorded(self):
        result = assert_clean("#ifdef 10$")
        assert result.symbol_uses == {}


class TestErrorDirective:
    """#error free text"""

    @pytest.mark.parametrize("source", [
        "#error some text",
        "   #error         ; comment",
        "#error",
        "#error unbalanced ( and 'quote",
    ])
    def test_accepts_any_text(self, source):
        assert_clean(source)

    def test_text_before(self):
        assert_single_error("label #error oops", "Unexpected text before #error")


class TestUnrecognizedDirective:
    """Other '#' lines."""

    def test_does_nothing_without_hash(self):
        parser = LineParser("sym: lda #$ff", 7)
        assert parser.handle_unrecognized_hash_directive() is False
        assert parser.pos == 0

    def test_unrecognized_word(self):
        result = parse_line("#unrecognized", 0)
        assert messages(result) == ["Unrecognized assembler directive"]
        assert span(result.diagnostics[0]) == (0, 1)

    def test_rest_of_line_ignored(self):
        result = parse_line("#$ff lda sym:", 7)
        assert len(result.diagnostics) == 1
        assert result.symbol_uses == {}


# =============================================================================
# Macros
# =============================================================================

class TestMacroDefinition:
    """macro name(params)"""

    def test_does_nothing_when_absent(self):
        parser = LineParser("sym: lda #$ff", 7)
        assert parser.parse_macro_definition_start() is False
        assert parser.pos == 0

    @pytest.mark.parametrize("source", [
        "macro name()",
        "macro name(arg1)",
        "macro name(arg1, arg2, arg3)",
        "MACRO name ( arg1 )   ; comment",
    ])
    def test_valid_header(self, source):
        result = assert_clean(source)
        assert len(result.macro_definitions) == 1
        assert result.macro_definitions[0].line == 7
        assert result.macro_definitions[0].text == "name"

    def test_parameters_are_not_symbols(self):
        result = assert_clean("macro name(arg1, arg2)")
        assert result.symbol_definitions == []
        assert result.symbol_uses == {}

    @pytest.mark.parametrize("source,message", [
        ("macro (arg1, arg2, arg3)", "Missing name"),
        ("macro", "Missing name"),
        ("macro name arg1, arg2, arg3)", "Missing ("),
        ("macro name(arg1, arg2, arg3", "Missing )"),
        ("macro name(", "Missing )"),
        ("macro name(arg1,)", "Missing parameter name"),
        ("macro name(arg1 arg2)", "Missing )"),
        ("macro name(arg1, arg2, arg3) etc", "Unexpected"),
    ])
    def test_invalid_header(self, source, message):
        result = assert_single_error(source, message)
        assert result.macro_definitions == []


class TestMacroUse:
    """name(args)"""

    def test_non_macro_use(self):
        parser = LineParser("lda #7", 7)
        assert parser.parse_macro_use() is False
        assert parser.pos == 0
        assert parser.result.macro_uses == {}

    @pytest.mark.parametrize("source", [
        "foo()",
        "foo(7)",
        "foo(<(sym999 / $123a))",
        "foo(123, abc, $bd00-%0100)",
        'foo("a string", 1)',
    ])
    def test_valid_call(self, source):
        parser = LineParser(source, 7)
        assert parser.parse_macro_use() is True
        assert parser.is_done
        assert parser.result.diagnostics == []
        assert "foo" in parser.result.macro_uses
        assert parser.result.macro_uses_by_line[7][0].text == "foo"

    def test_arguments_record_symbol_uses(self):
        result = assert_clean("foo(123, abc, $bd00-%0100)")
        assert list(result.symbol_uses) == ["abc"]

    def test_name_without_parens(self):
        parser = LineParser("foo", 7)
        parser.parse_macro_use()
        assert parser.is_done
        assert "Unexpected name" in parser.result.diagnostics[0].message

    @pytest.mark.parametrize("source", ["foo(", "foo(1 2)", "foo(1,"])
    def test_missing_separator(self, source):
        parser = LineParser(source, 7)
        parser.parse_macro_use()
        assert parser.is_done
        assert "Expected , or )" in parser.result.diagnostics[0].message
        assert parser.result.macro_uses == {}

    def test_invalid_argument_expression(self):
        parser = LineParser("foo(2 +)", 7)
        parser.parse_macro_use()
        assert parser.is_done
        assert len(parser.result.diagnostics) == 3
        assert "Invalid macro argument" in parser.result.diagnostics[2].message
        assert "foo" not in parser.result.macro_uses

    def test_text_after_call(self):
        parser = LineParser("foo() lda #7", 7)
        parser.parse_macro_use()
        assert parser.is_done
        assert "Unexpected text" in parser.result.diagnostics[0].message
        assert parser.result.macro_uses == {}


# =============================================================================
# Labels and Assignments
# =============================================================================

class TestLabel:
    """Optional leading label."""

    @pytest.mark.parametrize("source,pos,defined", [
        ("", 0, 0),
        ("foo", 1, 1),
        ("foo:", 2, 1),
        ("foo()", 0, 0),
        ("foo = 1", 0, 0),
        ("lda #7", 0, 0),
        (".word 0", 0, 0),
        ("foo bar()", 1, 1),
        ("foo: bar()", 2, 1),
        ("foo lda #7", 1, 1),
        ("foo: lda #7", 2, 1),
        ("10$ lda #7", 1, 0),
    ])
    def test_parse_label(self, source, pos, defined):
        parser = LineParser(source, 7)
        parser.parse_label()
        assert parser.pos == pos
        assert len(parser.result.symbol_definitions) == defined

    def test_label_definition_recorded(self):
        result = assert_clean("foo: lda #7")
        assert [t.text for t in result.symbol_definitions] == ["foo"]

    def test_label_only_with_comment(self):
        result = assert_clean("foo   ; comment")
        assert result.symbol_definitions[0].text == "foo"

    def test_local_label_excluded(self):
        result = assert_clean("10$ lda #7")
        assert result.symbol_definitions == []

    def test_label_kept_when_rest_of_line_fails(self):
        result = parse_line("foo: lda ($7a,a)", 7)
        assert len(result.diagnostics) == 1
        assert [t.text for t in result.symbol_definitions] == ["foo"]


class TestAssignment:
    """name = expr, * = expr, & = expr"""

    def test_assign_to_name(self):
        result = assert_clean("foo = $b4")
        assert result.symbol_definitions[0].text == "foo"

    def test_assign_expression_records_uses(self):
        result = assert_clean("screen = base + $400")
        assert list(result.symbol_uses) == ["base"]

    def test_assign_to_star(self):
        result = assert_clean("* = $c000")
        assert result.symbol_definitions == []

    def test_assign_to_ampersand(self):
        result = assert_clean("& = $c000")
        assert result.symbol_definitions == []

    def test_label_before_star_assignment(self):
        result = assert_clean("start * = $1000")
        assert [t.text for t in result.symbol_definitions] == ["start"]

    def test_missing_expression(self):
        result = assert_single_error("foo =", "Invalid assignment")
        assert result.symbol_definitions == []

    def test_trailing_text(self):
        result = assert_single_error("foo = 1 2", "Invalid assignment")
        assert result.symbol_definitions == []

    def test_backtracks_without_equals(self):
        parser = LineParser("foo lda #1", 7)
        assert parser.parse_assignment() is False
        assert parser.pos == 0


class TestPseudoNameStatements:
    """'*' and '&' are operands, never labels, macros or symbols."""

    def test_program_counter_target_is_name_token(self):
        parser = LineParser("* = $c000", 7)
        assert parser.tokens[0].type == TokenType.NAME
        assert parser.parse_assignment() is True
        assert parser.is_done
        assert parser.result.symbol_definitions == []

    def test_program_counter_in_expression(self):
        result = assert_clean("* = * + 2")
        assert result.symbol_uses == {}

    @pytest.mark.parametrize("source", ["jmp *+3", "lda #&", "bne *", ".word *, & + 1"])
    def test_operands_not_recorded(self, source):
        result = assert_clean(source)
        assert result.symbol_uses == {}
        assert result.symbol_definitions == []

    def test_not_a_label(self):
        result = assert_single_error("& foo", "syntax error")
        assert span(result.diagnostics[0]) == (0, 1)
        assert result.symbol_definitions == []

    def test_not_a_macro_name(self):
        result = assert_single_error("macro *()", "Missing name for macro")
        assert result.macro_definitions == []

    def test_not_an_ifdef_symbol(self):
        result = assert_single_error("#ifdef *", "Missing symbol for #ifdef")
        assert result.symbol_uses == {}

    def test_not_an_addr_name(self):
        result = assert_single_error("!addr * = 1", "Invalid address definition")
        assert result.symbol_definitions == []


# =============================================================================
# Pseudo-operations
# =============================================================================

class TestPseudoOps:
    """Directive argument shapes."""

    @pytest.mark.parametrize("source", [
        ".word 0",
        ".byte 1, 2, 3",
        '.byte "hello", 13, 0',
        ".end",
        ".org $c000",
        ".nam anything at all ( ]",
        ".subttl Sprite routines",
        ".cpu 45gs02",
        ".bhex 01,2b,c4",
        ".bhex",
        '.include "macros.src"',
        '!src "lib.src"',
        ".case +",
        ".case -",
        ".fill 10",
        ".fill 256 ($ea)",
    ])
    def test_valid_directives(self, source):
        assert_clean(source)

    def test_list_records_symbol_uses(self):
        result = assert_clean(".word start, end - 1")
        assert set(result.symbol_uses) == {"start", "end"}

    def test_label_before_directive(self):
        result = assert_clean("table .byte 1, 2")
        assert [t.text for t in result.symbol_definitions] == ["table"]

    def test_addr_defines_symbol(self):
        result = assert_clean("!addr border = $d020")
        assert [t.text for t in result.symbol_definitions] == ["border"]

    @pytest.mark.parametrize("source,message", [
        (".byte 1,", "Invalid argument for .byte"),
        (".word ==", "Invalid argument for .word"),
        (".byte 1 2", "Unexpected text after .byte arguments"),
        (".include macros.src", "Missing quoted filename after .include"),
        ('.include "a" "b"', "Missing quoted filename after .include"),
        ("!src", "Missing quoted filename after !src"),
        (".case x", "Missing '+' or '-' after .case"),
        (".case", "Missing '+' or '-' after .case"),
        (".fill", "Invalid count for .fill"),
        (".fill 10 ($ea", "Invalid fill value for .fill"),
        (".fill 10 2", "Unexpected text after .fill arguments"),
        ("!addr = 1", "Invalid address definition for !addr"),
        ("!addr x 1", "Invalid address definition for !addr"),
    ])
    def test_invalid_arguments(self, source, message):
        result = parse_line(source, 7)
        assert message in messages(result)
        assert result.has_errors()

    def test_invalid_addr_defines_nothing(self):
        result = parse_line("!addr x = ", 7)
        assert result.symbol_definitions == []


# =============================================================================
# Instructions and Addressing Modes
# =============================================================================

class TestAddressingModes:
    """Opcode operands."""

    @pytest.mark.parametrize("source", [
        "sec",
        "  rts   ; return",
        "asl a",
        "asl A",
        "lda #$41",
        "lda #'A'",
        "lda #<table",
        "lda $d020",
        "lda table,x",
        "sta $0400,y",
        "lda ($fb),y",
        "lda ($fb),z",
        "lda ($fb,x)",
        "lda ($05,sp),y",
        "jmp (vector)",
        "jmp (vector,x)",
        "lda [$fb],z",
        "jml [vector]",
        "bbr3 $fe,target",
        "lbne loop",
        "ldq ($fb),z",
        "inc",
    ])
    def test_valid_operands(self, source):
        assert_clean(source)

    def test_accumulator_not_a_symbol(self):
        result = assert_clean("asl a")
        assert result.symbol_uses == {}

    def test_index_register_not_a_symbol(self):
        result = assert_clean("lda table,x")
        assert list(result.symbol_uses) == ["table"]

    def test_indirect_registers_not_symbols(self):
        result = assert_clean("lda (ptr,sp),y")
        assert list(result.symbol_uses) == ["ptr"]

    def test_bit_branch_target_is_a_symbol(self):
        result = assert_clean("bbs7 flags,x")
        assert set(result.symbol_uses) == {"flags", "x"}

    def test_immediate_records_uses(self):
        result = assert_clean("lda #>message")
        assert "message" in result.symbol_uses

    def test_invalid_indirect_register(self):
        result = assert_single_error("lda ($7a,a)", "Invalid indirect index register")
        assert span(result.diagnostics[0]) == (9, 10)

    @pytest.mark.parametrize("source,message", [
        ("lda #", "Invalid immediate operand"),
        ("lda #,x", "Invalid immediate operand"),
        ("lda ($fb", "Expected )"),
        ("lda ($fb,x", "Expected )"),
        ("lda [$fb)", "Expected ]"),
        ("lda [$fb,x]", "Expected ]"),
        ("lda ($fb,z)", "Invalid indirect index register"),
        ("lda ($fb),s", "Invalid index indirect register"),
        ("lda [$fb],y", "Invalid index indirect register"),
        ("lda (", "Invalid operand"),
        ("lda ,x", "Invalid operand"),
        ("lda table,", "Invalid operand"),
        ("lda table,x extra", "Unexpected text after operand"),
        ("jmp (vector) + 1", "Unexpected text after operand"),
    ])
    def test_invalid_operands(self, source, message):
        assert_single_error(source, message)


# =============================================================================
# Generic Syntax Errors
# =============================================================================

class TestSyntaxError:
    """Lines no statement shape can consume."""

    def test_leading_operator(self):
        result = assert_single_error(": lda", "syntax error")
        assert span(result.diagnostics[0]) == (0, 1)

    def test_label_then_number(self):
        result = assert_single_error("foo 12", "syntax error")
        assert span(result.diagnostics[0]) == (0, 3)
        assert result.diagnostics[0].severity == Severity.ERROR

    def test_name_after_label(self):
        result = assert_single_error("foo bar", "Unexpected name")
        assert span(result.diagnostics[0]) == (4, 7)

    def test_lexer_error_reported_once(self):
        result = parse_line(" $gadf", 7)
        assert messages(result) == ["syntax error"]

    def test_lexer_warning_passed_through(self):
        result = parse_line('lda #"x', 7)
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].severity == Severity.WARNING
        assert not result.has_errors()


# =============================================================================
# End-to-End Line Scenarios
# =============================================================================

class TestLineScenarios:
    """Complete lines as they appear in real programs."""

    def test_empty_line(self):
        result = parse_line("", 0)
        assert result.diagnostics == []
        assert result.symbol_definitions == []

    def test_label_and_instruction(self):
        result = parse_line("foo: lda #7", 0)
        assert [t.text for t in result.symbol_definitions] == ["foo"]
        assert result.diagnostics == []

    def test_ifdef_without_symbol(self):
        result = parse_line("#ifdef", 0)
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].message == "Missing symbol for #ifdef"
        assert span(result.diagnostics[0]) == (0, 6)

    def test_macro_header(self):
        result = parse_line("macro name(arg1, arg2, arg3)", 0)
        assert [t.text for t in result.macro_definitions] == ["name"]
        assert result.diagnostics == []

    def test_malformed_macro_call(self):
        result = parse_line("foo(2 +)", 0)
        assert len(result.diagnostics) == 3
        assert "foo" not in result.macro_uses

    def test_invalid_indirect_register(self):
        result = parse_line("lda ($7a,a)", 0)
        assert len(result.diagnostics) == 1
        assert "Invalid indirect index register" in result.diagnostics[0].message


# =============================================================================
# Documents
# =============================================================================

class TestParseDocument:
    """Whole-document parsing."""

    def test_empty_document(self):
        result = parse_document("")
        assert result.is_empty()

    def test_line_numbers(self):
        source = "start: lda #1\n  jmp start\n  .byte 1,"
        result = parse_document(source)
        assert result.symbol_definitions[0].line == 0
        assert result.symbol_uses["start"][0].line == 1
        assert result.diagnostics[0].range.start.line == 2

    @pytest.mark.parametrize("separator", ["\n", "\r\n", "\r"])
    def test_line_breaks(self, separator):
        result = parse_document(separator.join(["a = 1", "b = a", "c = b"]))
        assert [t.line for t in result.symbol_definitions] == [0, 1, 2]
        assert sorted(result.symbol_uses_by_line) == [1, 2]

    def test_uses_accumulate_in_order(self):
        result = parse_document("  jmp loop\n  bne loop\nloop: rts")
        assert [t.line for t in result.symbol_uses["loop"]] == [0, 1]

    def test_errors_do_not_stop_later_lines(self):
        result = parse_document("lda ($7a,a)\nok = 1")
        assert len(result.diagnostics) == 1
        assert [t.text for t in result.symbol_definitions] == ["ok"]

    def test_macro_tables(self):
        source = "macro wait(n)\n  dex\n  endmac\n  wait(3)\n  wait(4)"
        result = parse_document(source)
        assert [t.text for t in result.macro_definitions] == ["wait"]
        assert [t.line for t in result.macro_uses["wait"]] == [3, 4]
        assert sorted(result.macro_uses_by_line) == [3, 4]

    def test_cancel_before_first_line(self):
        with pytest.raises(AnalysisCancelled) as exc_info:
            parse_document("a = 1\nb = 2", cancel=lambda: True)
        assert exc_info.value.line_number == 0

    def test_cancel_between_lines(self):
        calls = []

        def cancel():
            calls.append(1)
            return len(calls) > 2

        with pytest.raises(AnalysisCancelled) as exc_info:
            parse_document("a = 1\nb = 2\nc = 3\nd = 4", cancel=cancel)
        assert exc_info.value.line_number == 2

    def test_cancel_never_set(self):
        result = parse_document("a = 1\nb = 2", cancel=lambda: False)
        assert len(result.symbol_definitions) == 2


class TestParseFile:
    """Reading source files."""

    def test_parse_file(self, tmp_path):
        source = tmp_path / "main.src"
        source.write_text("start: lda #1\r\n  jmp start\r\n")
        result = parse_file(source)
        assert result.symbol_definitions[0].text == "start"
        assert result.symbol_uses["start"][0].line == 1

    def test_encoding(self, tmp_path):
        source = tmp_path / "latin.src"
        source.write_bytes("  .byte \"\xe9\"\n".encode("latin-1"))
        result = parse_file(source, encoding="latin-1")
        assert result.diagnostics == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentError) as exc_info:
            parse_file(tmp_path / "missing.src")
        assert exc_info.value.path.name == "missing.src"

    def test_undecodable_file(self, tmp_path):
        source = tmp_path / "bad.src"
        source.write_bytes(b"  lda #\xff\xfe\n")
        with pytest.raises(DocumentError) as exc_info:
            parse_file(source)
        assert "utf-8" in str(exc_info.value)

    def test_unknown_encoding(self, tmp_path):
        source = tmp_path / "main.src"
        source.write_text("rts\n")
        with pytest.raises(DocumentError):
            parse_file(source, encoding="no-such-codec")
