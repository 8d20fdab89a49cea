"""Integration tests running small CHIP-8 programs."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from chip8_vm import Chip8CPU, Chip8Config, StackOverflow


def assemble(*words):
    """Pack 16-bit instruction words into a big-endian program image."""
    return b"".join(word.to_bytes(2, "big") for word in words)


@pytest.fixture
def cpu():
    return Chip8CPU(Chip8Config(seed=0))


class TestCountingLoop:
    """Count V0 from 0 to 10, then spin."""

    PROGRAM = assemble(
        0x6000,  # 200: LD V0, 0
        0x7001,  # 202: ADD V0, 1
        0x300A,  # 204: SE V0, 10
        0x1202,  # 206: JP 202
        0x1208,  # 208: JP 208
    )

    def test_result(self, cpu):
        cpu.load_rom(self.PROGRAM)
        # 1 init + 9 * 3 loop + 2 final = 30 cycles
        cpu.run(30)
        assert cpu.get_register(0) == 10
        assert cpu.get_pc() == 0x208

    def test_spin_loop_is_stable(self, cpu):
        cpu.load_rom(self.PROGRAM)
        cpu.run(35)
        assert cpu.get_pc() == 0x208
        assert cpu.get_register(0) == 10


class TestSubroutine:
    """CALL into a subroutine and RET back."""

    def test_call_ret(self, cpu):
        cpu.load_rom(assemble(
            0x2206,  # 200: CALL 206
            0x6101,  # 202: LD V1, 1
            0x1204,  # 204: JP 204
            0x6005,  # 206: LD V0, 5
            0x00EE,  # 208: RET
        ))
        cpu.run(4)
        assert cpu.get_register(0) == 5
        assert cpu.get_register(1) == 1
        assert cpu.state.sp == 0
        assert cpu.get_pc() == 0x204

    def test_unbounded_recursion_overflows(self, cpu):
        """A routine calling itself overflows on the 17th CALL."""
        cpu.load_rom(assemble(0x2200))
        cpu.run(16)
        assert cpu.state.sp == 16
        with pytest.raises(StackOverflow):
            cpu.cycle()
        assert cpu.state.sp == 16
        assert cpu.get_pc() == 0x200
        assert cpu.halted is True


class TestDisplayPrograms:
    """Programs that draw to the screen."""

    def test_draw_digit_seven(self, cpu):
        cpu.load_rom(assemble(
            0x6007,  # LD V0, 7
            0xF029,  # LD F, V0
            0x6100,  # LD V1, 0
            0x6200,  # LD V2, 0
            0xD125,  # DRW V1, V2, 5
        ))
        cpu.run(5)
        rows = cpu.state.render_text()
        assert rows[0][:8] == "####...."
        assert rows[1][:8] == "...#...."
        assert rows[2][:8] == "..#....."
        assert rows[3][:8] == ".#......"
        assert rows[4][:8] == ".#......"
        assert cpu.get_register(0xF) == 0

    def test_clear_after_draw(self, cpu):
        cpu.load_rom(assemble(0xA050, 0xD005, 0x00E0))
        cpu.run(2)
        assert any(cpu.framebuffer)
        cpu.cycle()
        assert not any(cpu.framebuffer)


class TestMemoryPrograms:
    """Programs using BCD and register transfer."""

    def test_bcd_round_trip_through_registers(self, cpu):
        cpu.load_rom(assemble(
            0x60FE,  # LD V0, 254
            0xA300,  # LD I, 300
            0xF033,  # LD B, V0
            0xF265,  # LD V2, [I]
        ))
        cpu.run(4)
        assert [cpu.get_register(i) for i in range(3)] == [2, 5, 4]
        assert cpu.state.index == 0x300


class TestTimerPrograms:
    """Programs that poll the delay timer."""

    def test_delay_loop(self):
        """Busy-wait on the delay timer until it reaches zero."""
        cpu = Chip8CPU(Chip8Config(instructions_per_second=240, timer_hz=60))
        cpu.load_rom(assemble(
            0x6003,  # 200: LD V0, 3
            0xF015,  # 202: LD DT, V0
            0xF107,  # 204: LD V1, DT
            0x3100,  # 206: SE V1, 0
            0x1204,  # 208: JP 204
            0x120A,  # 20A: JP 20A
        ))
        for _ in range(5):
            cpu.run_frame()
        assert cpu.get_pc() == 0x20A
        assert cpu.get_register(1) == 0
        assert cpu.state.delay_timer == 0


class TestKeyWaitProgram:
    """Programs that wait for input."""

    def test_waits_until_key(self, cpu):
        cpu.load_rom(assemble(0xF30A, 0x1202))
        cpu.run(10)
        assert cpu.get_pc() == 0x200
        cpu.press_key(0xB)
        cpu.run(2)
        assert cpu.get_register(3) == 0xB
        assert cpu.get_pc() == 0x202
