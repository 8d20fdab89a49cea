"""chip8-vm: A CHIP-8 Virtual Machine Interpreter.

This package implements the canonical 35-instruction CHIP-8 machine:
4 KiB of memory, sixteen 8-bit registers, a 16-level call stack, two
60 Hz timers, a 64x32 monochrome display and a 16-key hex keypad.

Architecture:
    MEMORY -> FETCH -> DECODE -> KEY -> REGISTRY -> EXECUTE -> STATE
               |          |        |        |
           [PC += 2]  [nibble   [OP_*]  [35 handlers
                       tables]           + OP_NULL]

Modules:
    state: Chip8State machine state and glyph set
    decode: Nested nibble dispatch tables
    registry: Instruction handlers
    sprite: XOR sprite drawing with wraparound
    entropy: Random byte source for RND
    config: Chip8Config run-time settings
    keymap: Host keyboard to keypad mapping
    cpu: Main Chip8CPU orchestrator
"""

__version__ = "0.1.0"

from .errors import Chip8Error, InvalidROM, StackOverflow, StackUnderflow, MemoryOutOfRange
from .state import Chip8State
from .config import Chip8Config
from .entropy import RandomByteSource
from .decode import Decoder, DecodeResult, Operands
from .registry import InstructionRegistry
from .cpu import Chip8CPU

__all__ = [
    "Chip8CPU",
    "Chip8Config",
    "Chip8State",
    "Decoder",
    "DecodeResult",
    "Operands",
    "InstructionRegistry",
    "RandomByteSource",
    "Chip8Error",
    "InvalidROM",
    "StackOverflow",
    "StackUnderflow",
    "MemoryOutOfRange",
]
