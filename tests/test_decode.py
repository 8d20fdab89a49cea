"""Tests for the table-driven opcode Decoder."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from chip8_vm.decode import Decoder, DecodeResult, Operands, OP_NULL, TABLE_F
from chip8_vm.registry import InstructionRegistry


@pytest.fixture
def decoder():
    return Decoder()


class TestOperands:
    """Test operand field extraction."""

    def test_fields(self):
        """Every field is cut from the documented bit range."""
        ops = Operands.from_opcode(0xD123)
        assert ops.x == 0x1
        assert ops.y == 0x2
        assert ops.n == 0x3
        assert ops.kk == 0x23
        assert ops.nnn == 0x123

    def test_decode_result_carries_operands(self, decoder):
        result = decoder.decode(0x6A5F)
        assert isinstance(result, DecodeResult)
        assert result.opcode == 0x6A5F
        assert result.operands.x == 0xA
        assert result.operands.kk == 0x5F


class TestPrimaryTable:
    """Opcodes resolved by the high nibble alone."""

    @pytest.mark.parametrize("opcode,key", [
        (0x1228, "OP_JP"),
        (0x2ABC, "OP_CALL"),
        (0x3A12, "OP_SE_IMM"),
        (0x4A12, "OP_SNE_IMM"),
        (0x5AB0, "OP_SE_REG"),
        (0x6A12, "OP_LD_IMM"),
        (0x7A12, "OP_ADD_IMM"),
        (0x9AB0, "OP_SNE_REG"),
        (0xA123, "OP_LD_I"),
        (0xB123, "OP_JP_V0"),
        (0xCA12, "OP_RND"),
        (0xDAB5, "OP_DRW"),
    ])
    def test_primary(self, decoder, opcode, key):
        assert decoder.decode(opcode).key == key


class TestSecondaryTables:
    """Opcodes resolved through the 0x0, 0x8, 0xE and 0xF tables."""

    @pytest.mark.parametrize("opcode,key", [
        (0x00E0, "OP_CLS"),
        (0x00EE, "OP_RET"),
        (0x8AB0, "OP_LD_REG"),
        (0x8AB1, "OP_OR"),
        (0x8AB2, "OP_AND"),
        (0x8AB3, "OP_XOR"),
        (0x8AB4, "OP_ADD_REG"),
        (0x8AB5, "OP_SUB"),
        (0x8AB6, "OP_SHR"),
        (0x8AB7, "OP_SUBN"),
        (0x8ABE, "OP_SHL"),
        (0xEA9E, "OP_SKP"),
        (0xEAA1, "OP_SKNP"),
        (0xFA07, "OP_LD_VX_DT"),
        (0xFA0A, "OP_LD_VX_K"),
        (0xFA15, "OP_LD_DT_VX"),
        (0xFA18, "OP_LD_ST_VX"),
        (0xFA1E, "OP_ADD_I"),
        (0xFA29, "OP_LD_F"),
        (0xFA33, "OP_LD_B"),
        (0xFA55, "OP_LD_MEM_VX"),
        (0xFA65, "OP_LD_VX_MEM"),
    ])
    def test_secondary(self, decoder, opcode, key):
        assert decoder.decode(opcode).key == key

    @pytest.mark.parametrize("opcode", [
        0x0123,  # 0nnn SYS
        0x000F,
        0x8AB8,
        0x8ABF,
        0xEA00,
        0xEA9F,
        0xF000,
        0xF066,
        0xF0FF,
    ])
    def test_unallocated_slots_are_null(self, decoder, opcode):
        """Unknown encodings decode to the no-op, never an error."""
        result = decoder.decode(opcode)
        assert result.key == OP_NULL
        assert result.is_null is True

    def test_f_table_size(self):
        """The 0xF table covers low bytes 0x00-0x65."""
        assert len(TABLE_F) == 0x66

    def test_opcode_masked_to_16_bits(self, decoder):
        assert decoder.decode(0x1_6A12).key == "OP_LD_IMM"


class TestKeyCoverage:
    """Decoder and registry agree on the instruction set."""

    def test_thirty_five_instructions(self, decoder):
        keys = decoder.valid_keys - {OP_NULL}
        assert len(keys) == 35

    def test_every_key_has_a_handler(self, decoder):
        assert decoder.valid_keys == InstructionRegistry().get_valid_keys()

    def test_every_16_bit_word_decodes(self, decoder):
        """No opcode falls outside the tables."""
        registry_keys = InstructionRegistry().get_valid_keys()
        for opcode in range(0x10000):
            assert decoder.decode(opcode).key in registry_keys
