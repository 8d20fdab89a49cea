"""Chip8CPU: Orchestrator for the CHIP-8 interpreter.

This module wires the pipeline together:
    MEMORY -> FETCH -> DECODE -> KEY -> REGISTRY -> EXECUTE -> STATE

The CPU exposes only the operations a host driver needs: load a program,
step one cycle, tick the timers, feed the keypad and read the display.
Pacing is the driver's job; run_frame() is a convenience that runs one
timer period's worth of cycles.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from .config import Chip8Config
from .decode import Decoder, DecodeResult
from .entropy import RandomByteSource
from .errors import Chip8Error, InvalidROM
from .registry import InstructionRegistry
from .state import Chip8State, KEY_COUNT, create_initial_state

logger = logging.getLogger(__name__)


class Chip8CPU:
    """CHIP-8 virtual machine.

    Attributes:
        config: Run-time settings
        decoder: Table-driven opcode decoder
        registry: Instruction handlers
        state: Current machine state
        cycle_count: Number of cycles executed since the last reset
        halted: Set once a fatal error stops the machine
        last_error: Message of the error that halted the machine
    """

    def __init__(
        self,
        config: Optional[Chip8Config] = None,
        entropy: Optional[RandomByteSource] = None
    ):
        """Initialize the CPU with a fresh machine.

        Args:
            config: Run-time settings (defaults if omitted)
            entropy: Random byte source; seeded from config.seed if omitted
        """
        self.config = config or Chip8Config()
        self.decoder = Decoder()
        self.registry = InstructionRegistry(
            entropy if entropy is not None else RandomByteSource(self.config.seed)
        )
        self.state: Chip8State = create_initial_state()
        self.cycle_count = 0
        self.halted = False
        self.last_error: Optional[str] = None

    def reset(self) -> None:
        """Return to power-on state. The loaded program is discarded."""
        self.state = create_initial_state()
        self.cycle_count = 0
        self.halted = False
        self.last_error = None
        logger.debug("Machine reset")

    # =========================================================================
    # Loader
    # =========================================================================

    def load_rom(self, data: bytes) -> None:
        """Copy a program image into memory at 0x200.

        Raises:
            InvalidROM: If the image does not fit in program memory
        """
        self.state.load_program(bytes(data))
        logger.debug("Loaded %d byte program", len(data))

    def load_rom_file(self, path: Union[str, Path]) -> None:
        """Read a program image from disk and load it.

        Raises:
            InvalidROM: If the file cannot be read or is too large
        """
        rom_path = Path(path)
        try:
            data = rom_path.read_bytes()
        except OSError as e:
            raise InvalidROM(f"Cannot read ROM {rom_path}: {e}") from e
        self.load_rom(data)

    # =========================================================================
    # Execution
    # =========================================================================

    def cycle(self) -> DecodeResult:
        """Execute a single instruction cycle.

        Performs: FETCH -> PC += 2 -> DECODE -> EXECUTE

        Returns:
            DecodeResult of the executed instruction

        Raises:
            RuntimeError: If the CPU is halted
            Chip8Error: On a fatal fault; the CPU is halted and the PC is
                left on the faulting instruction
        """
        if self.halted:
            raise RuntimeError("CPU is halted")

        state = self.state
        pc = state.pc
        try:
            opcode = state.read_word(pc)
            state.pc = (pc + 2) & 0xFFFF
            decoded = self.decoder.decode(opcode)
            self.registry.execute(state, decoded.key, decoded.operands)
        except Chip8Error as e:
            state.pc = pc
            self.halted = True
            self.last_error = str(e)
            logger.error("Halted at PC=0x%04X: %s", pc, e)
            raise

        self.cycle_count += 1
        return decoded

    def run(self, cycles: int) -> int:
        """Execute `cycles` instruction cycles.

        Stops early only by raising; see cycle().

        Returns:
            Number of cycles executed
        """
        for _ in range(cycles):
            self.cycle()
        return cycles

    def tick_timers(self) -> None:
        """Decrement delay and sound timers (call at config.timer_hz)."""
        self.state.tick_timers()

    def run_frame(self) -> None:
        """Run one timer period: cycles_per_tick cycles, then one tick."""
        self.run(self.config.cycles_per_tick)
        self.tick_timers()

    # =========================================================================
    # Keypad
    # =========================================================================

    def press_key(self, key: int) -> None:
        self.state.keypad[self._check_key(key)] = True

    def release_key(self, key: int) -> None:
        self.state.keypad[self._check_key(key)] = False

    def set_keys(self, keys: Iterable[int]) -> None:
        """Replace the keypad state: exactly `keys` are down."""
        down = {self._check_key(key) for key in keys}
        self.state.keypad[:] = [key in down for key in range(KEY_COUNT)]

    @staticmethod
    def _check_key(key: int) -> int:
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"Invalid key: {key}")
        return key

    # =========================================================================
    # Outputs
    # =========================================================================

    @property
    def framebuffer(self) -> memoryview:
        """Read-only view of the 64x32 display, row-major, 1 = lit."""
        return memoryview(self.state.framebuffer).toreadonly()

    @property
    def sound_active(self) -> bool:
        return self.state.sound_timer > 0

    def get_register(self, index: int) -> int:
        return self.state.registers[index]

    def dump_registers(self) -> Dict[str, int]:
        return self.state.dump_registers()

    def get_pc(self) -> int:
        return self.state.pc

    def get_summary(self) -> Dict:
        """Get execution summary.

        Returns:
            Dictionary with cycle count, halt status and CPU-side state
        """
        return {
            "cycles": self.cycle_count,
            "halted": self.halted,
            "pc": self.state.pc,
            "index": self.state.index,
            "registers": self.dump_registers(),
            "delay_timer": self.state.delay_timer,
            "sound_timer": self.state.sound_timer,
            "error": self.last_error,
        }
