"""Chip8State: Machine state for the CHIP-8 interpreter.

This module defines every piece of mutable data the interpreter owns,
together with bounds-checked accessors that instructions go through.

State Components:
    - Memory: 4096 bytes, glyph set at 0x50, programs from 0x200
    - Registers: V0-VF (16 unsigned 8-bit cells, VF doubles as flags)
    - Index: I register (unsigned 16-bit memory pointer)
    - PC: Program counter (starts at 0x200)
    - Stack: 16 return addresses plus stack pointer
    - Timers: delay and sound (unsigned 8-bit, decremented at 60 Hz)
    - Framebuffer: 64x32 lit/unlit cells, row-major
    - Keypad: 16 key-down flags

Unlike a purely functional state object, Chip8State is mutated in place:
every instruction touches at most a handful of cells of a 4 KiB machine.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List
from copy import deepcopy

from .errors import InvalidROM, MemoryOutOfRange, StackOverflow, StackUnderflow


MEMORY_SIZE = 4096
REGISTER_COUNT = 16
STACK_DEPTH = 16
KEY_COUNT = 16
VF = 0xF

VIDEO_WIDTH = 64
VIDEO_HEIGHT = 32

START_ADDRESS = 0x200
FONTSET_START_ADDRESS = 0x50
GLYPH_SIZE = 5
MAX_ROM_SIZE = MEMORY_SIZE - START_ADDRESS

# Built-in hexadecimal glyphs, 5 rows each, high nibble used
FONTSET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


def _fresh_memory() -> bytearray:
    memory = bytearray(MEMORY_SIZE)
    memory[FONTSET_START_ADDRESS:FONTSET_START_ADDRESS + len(FONTSET)] = FONTSET
    return memory


@dataclass
class Chip8State:
    """Complete CHIP-8 machine state.

    Attributes:
        memory: 4096-byte address space with the glyph set preloaded
        registers: V0-VF as a 16-byte array
        index: I register
        pc: Program counter
        stack: Return address slots
        sp: Number of occupied stack slots (0..16)
        delay_timer: Delay timer value
        sound_timer: Sound timer value (nonzero means tone on)
        framebuffer: 64*32 cells, 1 = lit, row-major
        keypad: Key-down flags for keys 0x0-0xF
    """
    memory: bytearray = field(default_factory=_fresh_memory)
    registers: bytearray = field(default_factory=lambda: bytearray(REGISTER_COUNT))
    index: int = 0
    pc: int = START_ADDRESS
    stack: List[int] = field(default_factory=lambda: [0] * STACK_DEPTH)
    sp: int = 0
    delay_timer: int = 0
    sound_timer: int = 0
    framebuffer: bytearray = field(default_factory=lambda: bytearray(VIDEO_WIDTH * VIDEO_HEIGHT))
    keypad: List[bool] = field(default_factory=lambda: [False] * KEY_COUNT)

    # =========================================================================
    # Memory
    # =========================================================================

    def check_range(self, address: int, length: int = 1) -> None:
        """Ensure [address, address + length) lies inside memory.

        Raises:
            MemoryOutOfRange: Naming the first address that falls outside
        """
        if address < 0:
            raise MemoryOutOfRange(address)
        end = address + length
        if end > MEMORY_SIZE:
            raise MemoryOutOfRange(max(address, MEMORY_SIZE))

    def read_byte(self, address: int) -> int:
        self.check_range(address)
        return self.memory[address]

    def write_byte(self, address: int, value: int) -> None:
        self.check_range(address)
        self.memory[address] = value & 0xFF

    def read_bytes(self, address: int, length: int) -> bytes:
        """Read a contiguous block, checking the whole range first."""
        self.check_range(address, length)
        return bytes(self.memory[address:address + length])

    def write_bytes(self, address: int, data: Iterable[int]) -> None:
        """Write a contiguous block; nothing is written if any byte is out of range."""
        data = bytes(data)
        self.check_range(address, len(data))
        self.memory[address:address + len(data)] = data

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word (an opcode)."""
        self.check_range(address, 2)
        return (self.memory[address] << 8) | self.memory[address + 1]

    def load_program(self, image: bytes) -> None:
        """Copy a program image verbatim into memory at 0x200.

        Raises:
            InvalidROM: If the image is larger than program memory
        """
        if len(image) > MAX_ROM_SIZE:
            raise InvalidROM(
                f"ROM is {len(image)} bytes, program memory holds {MAX_ROM_SIZE}"
            )
        self.memory[START_ADDRESS:START_ADDRESS + len(image)] = image

    # =========================================================================
    # Call stack
    # =========================================================================

    def push(self, address: int) -> None:
        if self.sp >= STACK_DEPTH:
            raise StackOverflow(f"Call stack full ({STACK_DEPTH} entries)")
        self.stack[self.sp] = address
        self.sp += 1

    def pop(self) -> int:
        if self.sp == 0:
            raise StackUnderflow("Return with empty call stack")
        self.sp -= 1
        return self.stack[self.sp]

    # =========================================================================
    # Timers, display, keypad
    # =========================================================================

    def tick_timers(self) -> None:
        """Decrement both timers by one, never below zero."""
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    def clear_screen(self) -> None:
        self.framebuffer[:] = bytes(len(self.framebuffer))

    def pixel(self, x: int, y: int) -> bool:
        """Whether the pixel at column x, row y is lit."""
        return bool(self.framebuffer[y * VIDEO_WIDTH + x])

    def render_text(self, on: str = "#", off: str = ".") -> List[str]:
        """Render the framebuffer as one string per row."""
        rows = []
        for y in range(VIDEO_HEIGHT):
            row = self.framebuffer[y * VIDEO_WIDTH:(y + 1) * VIDEO_WIDTH]
            rows.append("".join(on if cell else off for cell in row))
        return rows

    def first_pressed_key(self) -> int:
        """Lowest-indexed key currently down, or -1 if none."""
        for key, down in enumerate(self.keypad):
            if down:
                return key
        return -1

    # =========================================================================
    # Introspection
    # =========================================================================

    def snapshot(self) -> dict:
        """Create a copy of the CPU-side state for inspection.

        Returns:
            Dictionary of registers, index, pc, stack and timers
        """
        return {
            "registers": list(self.registers),
            "index": self.index,
            "pc": self.pc,
            "sp": self.sp,
            "stack": deepcopy(self.stack[:self.sp]),
            "delay_timer": self.delay_timer,
            "sound_timer": self.sound_timer,
            # Memory and framebuffer excluded (large, inspected directly)
        }

    def validate(self) -> bool:
        """Validate state integrity.

        Checks:
            - Array sizes match the machine
            - Index and PC fit in 16 bits, timers in 8 bits
            - Stack pointer and stack entries are in range

        Returns:
            True if state is valid, False otherwise
        """
        if len(self.memory) != MEMORY_SIZE or len(self.registers) != REGISTER_COUNT:
            return False
        if len(self.framebuffer) != VIDEO_WIDTH * VIDEO_HEIGHT:
            return False
        if len(self.keypad) != KEY_COUNT or len(self.stack) != STACK_DEPTH:
            return False

        if not 0 <= self.index <= 0xFFFF or not 0 <= self.pc <= 0xFFFF:
            return False
        if not 0 <= self.sp <= STACK_DEPTH:
            return False
        if any(not 0 <= addr <= 0xFFFF for addr in self.stack):
            return False

        for timer in (self.delay_timer, self.sound_timer):
            if not 0 <= timer <= 0xFF:
                return False

        return True

    def dump_registers(self) -> Dict[str, int]:
        """Get register values keyed V0..VF."""
        return {f"V{i:X}": value for i, value in enumerate(self.registers)}

    def __str__(self) -> str:
        regs = " ".join(f"V{i:X}={v:02X}" for i, v in enumerate(self.registers))
        return (
            f"PC={self.pc:04X} I={self.index:04X} SP={self.sp} "
            f"DT={self.delay_timer} ST={self.sound_timer} {regs}"
        )


def create_initial_state(program: bytes = b"") -> Chip8State:
    """Create a fresh machine, optionally with a program loaded.

    Args:
        program: Program image copied to 0x200

    Returns:
        New Chip8State ready for the first cycle
    """
    state = Chip8State()
    if program:
        state.load_program(program)
    return state
