"""
BSA Tools CPU Package
=====================

This package contains the instruction set tables the analyzer needs to
recognise opcodes. BSA targets the whole 6502 family: the NMOS 6502, the
65C02, the 45GS02 used in the MEGA65 (including its 32-bit "quad"
instructions and long branches) and the 65802/65816.

Modules:
    mnemonics: Mnemonic sets, branch instruction sets and index register
               names, plus small lookup helpers.

Only spellings are recorded here. Opcode bytes, cycle counts and legal
addressing modes per instruction are outside the scope of the analyzer.

Usage:
    from bsa_tools.cpu import MNEMONICS, is_mnemonic
"""

from bsa_tools.cpu.mnemonics import (
    # Instruction sets per CPU
    MOS6502_MNEMONICS,
    WDC65C02_MNEMONICS,
    CSG45GS02_MNEMONICS,
    WDC65816_MNEMONICS,
    MNEMONICS,
    # Instruction categories
    LONG_BRANCH_INSTRUCTIONS,
    BIT_BRANCH_INSTRUCTIONS,
    # Operand register names
    INDEX_REGISTERS,
    INDIRECT_INDEX_REGISTERS,
    POST_INDIRECT_REGISTERS,
    LONG_INDIRECT_REGISTERS,
    ACCUMULATOR_NAMES,
    # Lookup functions
    is_mnemonic,
)

__all__ = [
    "MOS6502_MNEMONICS",
    "WDC65C02_MNEMONICS",
    "CSG45GS02_MNEMONICS",
    "WDC65816_MNEMONICS",
    "MNEMONICS",
    "LONG_BRANCH_INSTRUCTIONS",
    "BIT_BRANCH_INSTRUCTIONS",
    "INDEX_REGISTERS",
    "INDIRECT_INDEX_REGISTERS",
    "POST_INDIRECT_REGISTERS",
    "LONG_INDIRECT_REGISTERS",
    "ACCUMULATOR_NAMES",
    "is_mnemonic",
]
