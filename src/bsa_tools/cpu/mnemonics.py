"""
6502 Family Instruction Mnemonics
=================================

Instruction spellings recognised by the BSA assembler, grouped by the CPU
that introduced them. BSA accepts every mnemonic regardless of the .CPU
setting at the lexical level; checking an instruction against the selected
CPU belongs to the assembler proper.

| Set                  | CPU               | Notes                          |
|----------------------|-------------------|--------------------------------|
| MOS6502_MNEMONICS    | NMOS 6502         | 56 documented instructions     |
| WDC65C02_MNEMONICS   | 65C02 / 65SC02    | BRA, STZ, TSB, BBRn, RMBn, ... |
| CSG45GS02_MNEMONICS  | 4510 / 45GS02     | Z register, MAP, quad, LBxx    |
| WDC65816_MNEMONICS   | 65802 / 65816     | long jumps, block moves        |

All tables hold lower-case spellings. Source text is matched
case-insensitively.
"""

# =============================================================================
# Instruction Sets
# =============================================================================

MOS6502_MNEMONICS = frozenset({
    "adc", "and", "asl", "bcc", "bcs", "beq", "bit", "bmi",
    "bne", "bpl", "brk", "bvc", "bvs", "clc", "cld", "cli",
    "clv", "cmp", "cpx", "cpy", "dec", "dex", "dey", "eor",
    "inc", "inx", "iny", "jmp", "jsr", "lda", "ldx", "ldy",
    "lsr", "nop", "ora", "pha", "php", "pla", "plp", "rol",
    "ror", "rti", "rts", "sbc", "sec", "sed", "sei", "sta",
    "stx", "sty", "tax", "tay", "tsx", "txa", "txs", "tya",
})

WDC65C02_MNEMONICS = frozenset(
    {"bra", "phx", "phy", "plx", "ply", "stz", "trb", "tsb"}
    | {f"bbr{bit}" for bit in range(8)}
    | {f"bbs{bit}" for bit in range(8)}
    | {f"rmb{bit}" for bit in range(8)}
    | {f"smb{bit}" for bit in range(8)}
)

# Long branches use a 16-bit relative offset
LONG_BRANCH_INSTRUCTIONS = frozenset({
    "lbcc", "lbcs", "lbeq", "lbmi", "lbne", "lbpl", "lbra", "lbvc", "lbvs",
})

# 32-bit instructions operating on the Q pseudo-register (A, X, Y, Z)
_QUAD_MNEMONICS = frozenset({
    "adcq", "andq", "aslq", "asrq", "bitq", "cmpq", "cpq", "deq",
    "eorq", "inq", "ldq", "lsrq", "orq", "rolq", "rorq", "sbcq", "stq",
})

CSG45GS02_MNEMONICS = frozenset(
    {
        "asr", "asw", "aug", "bsr", "cle", "cpz", "dew", "dez",
        "eom", "inw", "inz", "ldz", "map", "neg", "phw", "phz",
        "plz", "row", "rtn", "see", "tab", "taz", "tba", "tsy",
        "tys", "tza",
    }
    | LONG_BRANCH_INSTRUCTIONS
    | _QUAD_MNEMONICS
)

WDC65816_MNEMONICS = frozenset({
    "brl", "cop", "jml", "jsl", "mvn", "mvp", "pea", "pei",
    "per", "phb", "phd", "phk", "plb", "pld", "rep", "rtl",
    "sep", "stp", "tcd", "tcs", "tdc", "tsc", "txy", "tyx",
    "wai", "wdm", "xba", "xce",
})

MNEMONICS = (
    MOS6502_MNEMONICS
    | WDC65C02_MNEMONICS
    | CSG45GS02_MNEMONICS
    | WDC65816_MNEMONICS
)


# =============================================================================
# Instruction Categories
# =============================================================================

# Zero-page bit test and branch: "bbr3 zp,target"
BIT_BRANCH_INSTRUCTIONS = frozenset(
    {f"bbr{bit}" for bit in range(8)} | {f"bbs{bit}" for bit in range(8)}
)


# =============================================================================
# Operand Register Names
# =============================================================================

# expr,x  expr,y  expr,z  expr,s  expr,sp
INDEX_REGISTERS = frozenset({"x", "y", "z", "s", "sp"})

# (expr,x)  (expr,y)  (expr,sp)
INDIRECT_INDEX_REGISTERS = frozenset({"x", "y", "sp"})

# (expr),x  (expr),y  (expr),z
POST_INDIRECT_REGISTERS = frozenset({"x", "y", "z"})

# [expr],z
LONG_INDIRECT_REGISTERS = frozenset({"z"})

# asl a
ACCUMULATOR_NAMES = frozenset({"a"})


# =============================================================================
# Lookup Functions
# =============================================================================

def is_mnemonic(text: str) -> bool:
    """Return True if text is an instruction mnemonic (any case)."""
    return text.lower() in MNEMONICS

