"""Exceptions surfaced by the CHIP-8 core to its driver.

Every fatal condition derives from Chip8Error so a driver can stop the
cycle loop with a single except clause. Unknown opcodes are deliberately
absent here: they decode to a no-op instead of faulting.
"""

from typing import Optional


class Chip8Error(RuntimeError):
    """Base class for fatal interpreter errors."""


class InvalidROM(Chip8Error):
    """Program image does not fit in program memory or cannot be read."""


class StackOverflow(Chip8Error):
    """CALL executed with the call stack already full."""


class StackUnderflow(Chip8Error):
    """RET executed with an empty call stack."""


class MemoryOutOfRange(Chip8Error):
    """Instruction-derived memory address outside [0, 4096).

    Attributes:
        address: First offending address
    """

    def __init__(self, address: int, message: Optional[str] = None):
        self.address = address
        super().__init__(message or f"Memory address out of range: 0x{address:04X}")
