"""Decoder: Maps 16-bit CHIP-8 opcodes to registry keys.

Decoding mirrors the nibble structure of the instruction set:

    opcode --(bits 15-12)--> PRIMARY table
                                |
              0x0, 0x8, 0xE ----+--(bits 3-0)--> secondary table
              0xF --------------+--(bits 7-0)--> secondary table

Every slot of every table holds an instruction key understood by the
InstructionRegistry. Slots with no instruction hold OP_NULL, so unknown
opcodes decode to a no-op instead of an error.

Operand fields are extracted once per decode:
    x   = bits 11-8 (register index)
    y   = bits 7-4  (register index)
    kk  = bits 7-0  (byte immediate)
    nnn = bits 11-0 (address)
    n   = bits 3-0  (nibble, sprite height)
"""

from dataclasses import dataclass
from typing import Callable, List, Set, Union


OP_NULL = "OP_NULL"


@dataclass(frozen=True)
class Operands:
    """Operand fields of one opcode.

    Attributes:
        x: Vx register index
        y: Vy register index
        kk: 8-bit immediate
        nnn: 12-bit address
        n: 4-bit nibble
    """
    x: int
    y: int
    kk: int
    nnn: int
    n: int

    @classmethod
    def from_opcode(cls, opcode: int) -> "Operands":
        return cls(
            x=(opcode & 0x0F00) >> 8,
            y=(opcode & 0x00F0) >> 4,
            kk=opcode & 0x00FF,
            nnn=opcode & 0x0FFF,
            n=opcode & 0x000F,
        )


@dataclass(frozen=True)
class DecodeResult:
    """Result of decoding one opcode.

    Attributes:
        key: Instruction key (e.g., "OP_ADD_REG", or OP_NULL)
        operands: Extracted operand fields
        opcode: The raw 16-bit instruction word
    """
    key: str
    operands: Operands
    opcode: int

    @property
    def is_null(self) -> bool:
        return self.key == OP_NULL


def _table(size: int, **slots: str) -> List[str]:
    """Build a secondary table of `size` OP_NULL slots with some filled.

    Slots are given as keyword arguments named `_<hex index>`.
    """
    table = [OP_NULL] * size
    for name, key in slots.items():
        table[int(name[1:], 16)] = key
    return table


def _lookup(table: List[str], index: int) -> str:
    return table[index] if index < len(table) else OP_NULL


# 00E0, 00EE keyed by low nibble
TABLE_0 = _table(0xE + 1, _0="OP_CLS", _E="OP_RET")

# 8xy? keyed by low nibble
TABLE_8 = _table(
    0xE + 1,
    _0="OP_LD_REG",
    _1="OP_OR",
    _2="OP_AND",
    _3="OP_XOR",
    _4="OP_ADD_REG",
    _5="OP_SUB",
    _6="OP_SHR",
    _7="OP_SUBN",
    _E="OP_SHL",
)

# ExA1, Ex9E keyed by low nibble
TABLE_E = _table(0xE + 1, _1="OP_SKNP", _E="OP_SKP")

# Fx?? keyed by low byte
TABLE_F = _table(
    0x65 + 1,
    _07="OP_LD_VX_DT",
    _0A="OP_LD_VX_K",
    _15="OP_LD_DT_VX",
    _18="OP_LD_ST_VX",
    _1E="OP_ADD_I",
    _29="OP_LD_F",
    _33="OP_LD_B",
    _55="OP_LD_MEM_VX",
    _65="OP_LD_VX_MEM",
)


class Decoder:
    """Table-driven opcode decoder.

    The primary table is indexed by the high nibble. Its entries are
    either an instruction key or a bound method that resolves the key
    through one of the secondary tables.

    Attributes:
        valid_keys: Every key the decoder can emit
    """

    def __init__(self):
        """Initialize the primary dispatch table."""
        self._primary: List[Union[str, Callable[[int], str]]] = [
            self._decode_table0,  # 0x0
            "OP_JP",              # 0x1
            "OP_CALL",            # 0x2
            "OP_SE_IMM",          # 0x3
            "OP_SNE_IMM",         # 0x4
            "OP_SE_REG",          # 0x5
            "OP_LD_IMM",          # 0x6
            "OP_ADD_IMM",         # 0x7
            self._decode_table8,  # 0x8
            "OP_SNE_REG",         # 0x9
            "OP_LD_I",            # 0xA
            "OP_JP_V0",           # 0xB
            "OP_RND",             # 0xC
            "OP_DRW",             # 0xD
            self._decode_tableE,  # 0xE
            self._decode_tableF,  # 0xF
        ]
        self.valid_keys: Set[str] = self._collect_keys()

    def decode(self, opcode: int) -> DecodeResult:
        """Decode a 16-bit instruction word.

        Args:
            opcode: Instruction word (only the low 16 bits are used)

        Returns:
            DecodeResult naming the handler and carrying the operand fields
        """
        opcode &= 0xFFFF
        entry = self._primary[opcode >> 12]
        key = entry if isinstance(entry, str) else entry(opcode)
        return DecodeResult(key, Operands.from_opcode(opcode), opcode)

    def _decode_table0(self, opcode: int) -> str:
        return _lookup(TABLE_0, opcode & 0x000F)

    def _decode_table8(self, opcode: int) -> str:
        return _lookup(TABLE_8, opcode & 0x000F)

    def _decode_tableE(self, opcode: int) -> str:
        return _lookup(TABLE_E, opcode & 0x000F)

    def _decode_tableF(self, opcode: int) -> str:
        return _lookup(TABLE_F, opcode & 0x00FF)

    def _collect_keys(self) -> Set[str]:
        keys = {entry for entry in self._primary if isinstance(entry, str)}
        for table in (TABLE_0, TABLE_8, TABLE_E, TABLE_F):
            keys.update(table)
        return keys
