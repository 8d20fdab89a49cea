"""InstructionRegistry: The 35 CHIP-8 instructions as registered handlers.

Each instruction is a handler keyed by the name the Decoder emits. The
registry is frozen once populated so the instruction set cannot change
at runtime.

Registry Keys:
    OP_CLS        00E0  Clear the display
    OP_RET        00EE  Return from subroutine
    OP_JP         1nnn  Jump to nnn
    OP_CALL       2nnn  Call subroutine at nnn
    OP_SE_IMM     3xkk  Skip if Vx == kk
    OP_SNE_IMM    4xkk  Skip if Vx != kk
    OP_SE_REG     5xy0  Skip if Vx == Vy
    OP_LD_IMM     6xkk  Vx = kk
    OP_ADD_IMM    7xkk  Vx += kk
    OP_LD_REG     8xy0  Vx = Vy
    OP_OR         8xy1  Vx |= Vy
    OP_AND        8xy2  Vx &= Vy
    OP_XOR        8xy3  Vx ^= Vy
    OP_ADD_REG    8xy4  Vx += Vy, VF = carry
    OP_SUB        8xy5  Vx -= Vy, VF = NOT borrow
    OP_SHR        8xy6  Vx >>= 1, VF = bit shifted out
    OP_SUBN       8xy7  Vx = Vy - Vx, VF = NOT borrow
    OP_SHL        8xyE  Vx <<= 1, VF = bit shifted out
    OP_SNE_REG    9xy0  Skip if Vx != Vy
    OP_LD_I       Annn  I = nnn
    OP_JP_V0      Bnnn  Jump to nnn + V0
    OP_RND        Cxkk  Vx = random byte AND kk
    OP_DRW        Dxyn  Draw n-byte sprite at (Vx, Vy), VF = collision
    OP_SKP        Ex9E  Skip if key Vx is down
    OP_SKNP       ExA1  Skip if key Vx is up
    OP_LD_VX_DT   Fx07  Vx = delay timer
    OP_LD_VX_K    Fx0A  Wait for a key, Vx = key
    OP_LD_DT_VX   Fx15  Delay timer = Vx
    OP_LD_ST_VX   Fx18  Sound timer = Vx
    OP_ADD_I      Fx1E  I += Vx
    OP_LD_F       Fx29  I = glyph address of digit Vx
    OP_LD_B       Fx33  BCD of Vx at I, I+1, I+2
    OP_LD_MEM_VX  Fx55  Store V0..Vx at I
    OP_LD_VX_MEM  Fx65  Load V0..Vx from I
    OP_NULL       ----  No operation (unallocated encodings)

Each handler has the signature (Chip8State, Operands) -> None. By the time
a handler runs the PC already points at the next instruction, so a skip
is PC += 2 and a jump overwrites PC. Handlers check every failure
condition before they mutate anything.
"""

from typing import Callable, Dict, Optional, Set

from .decode import Operands, OP_NULL
from .entropy import RandomByteSource
from .sprite import draw_sprite
from .state import Chip8State, VF, FONTSET_START_ADDRESS, GLYPH_SIZE


Handler = Callable[[Chip8State, Operands], None]


class InstructionRegistry:
    """Frozen registry of instruction handlers.

    Attributes:
        entropy: Random byte source used by OP_RND
        _handlers: Dictionary mapping instruction keys to handlers
        _frozen: Whether the registry is locked against modifications
    """

    def __init__(self, entropy: Optional[RandomByteSource] = None):
        """Initialize registry with all instruction handlers.

        Args:
            entropy: Anything with a next_byte() method; a fresh
                unseeded RandomByteSource if omitted
        """
        self.entropy = entropy if entropy is not None else RandomByteSource()
        self._handlers: Dict[str, Handler] = {}
        self._frozen = False
        self._register_all_handlers()
        self.freeze()

    def _register_all_handlers(self) -> None:
        """Register all instruction handlers."""
        # Display and flow control
        self.register("OP_CLS", self._op_cls)
        self.register("OP_RET", self._op_ret)
        self.register("OP_JP", self._op_jp)
        self.register("OP_CALL", self._op_call)
        self.register("OP_JP_V0", self._op_jp_v0)

        # Conditional skips
        self.register("OP_SE_IMM", self._op_se_imm)
        self.register("OP_SNE_IMM", self._op_sne_imm)
        self.register("OP_SE_REG", self._op_se_reg)
        self.register("OP_SNE_REG", self._op_sne_reg)

        # Register loads and arithmetic
        self.register("OP_LD_IMM", self._op_ld_imm)
        self.register("OP_ADD_IMM", self._op_add_imm)
        self.register("OP_LD_REG", self._op_ld_reg)
        self.register("OP_OR", self._op_or)
        self.register("OP_AND", self._op_and)
        self.register("OP_XOR", self._op_xor)
        self.register("OP_ADD_REG", self._op_add_reg)
        self.register("OP_SUB", self._op_sub)
        self.register("OP_SHR", self._op_shr)
        self.register("OP_SUBN", self._op_subn)
        self.register("OP_SHL", self._op_shl)
        self.register("OP_RND", self._op_rnd)

        # Index register and memory
        self.register("OP_LD_I", self._op_ld_i)
        self.register("OP_ADD_I", self._op_add_i)
        self.register("OP_LD_F", self._op_ld_f)
        self.register("OP_LD_B", self._op_ld_b)
        self.register("OP_LD_MEM_VX", self._op_ld_mem_vx)
        self.register("OP_LD_VX_MEM", self._op_ld_vx_mem)

        # Display
        self.register("OP_DRW", self._op_drw)

        # Keypad
        self.register("OP_SKP", self._op_skp)
        self.register("OP_SKNP", self._op_sknp)
        self.register("OP_LD_VX_K", self._op_ld_vx_k)

        # Timers
        self.register("OP_LD_VX_DT", self._op_ld_vx_dt)
        self.register("OP_LD_DT_VX", self._op_ld_dt_vx)
        self.register("OP_LD_ST_VX", self._op_ld_st_vx)

        # Special
        self.register(OP_NULL, self._op_null)

    def register(self, key: str, handler: Handler) -> None:
        """Register an instruction handler.

        Args:
            key: Instruction key (e.g., "OP_ADD_REG")
            handler: Function taking (state, operands)

        Raises:
            RuntimeError: If registry is frozen
            ValueError: If key already registered
        """
        if self._frozen:
            raise RuntimeError("Cannot register handlers: registry is frozen")
        if key in self._handlers:
            raise ValueError(f"Handler already registered: {key}")
        self._handlers[key] = handler

    def freeze(self) -> None:
        """Freeze the registry to prevent further modifications."""
        self._frozen = True

    def is_frozen(self) -> bool:
        return self._frozen

    def get_valid_keys(self) -> Set[str]:
        return set(self._handlers.keys())

    def execute(self, state: Chip8State, key: str, operands: Operands) -> None:
        """Execute a registered instruction against the state.

        Raises:
            KeyError: If key not in registry
            Chip8Error: Whatever the instruction itself raises
        """
        if key not in self._handlers:
            raise KeyError(f"Unknown instruction key: {key}")
        self._handlers[key](state, operands)

    # =========================================================================
    # Flow Control
    # =========================================================================

    def _op_cls(self, state: Chip8State, ops: Operands) -> None:
        """00E0 - CLS: Turn every pixel off."""
        state.clear_screen()

    def _op_ret(self, state: Chip8State, ops: Operands) -> None:
        """00EE - RET: Pop the return address into PC.

        Raises:
            StackUnderflow: If the stack is empty
        """
        state.pc = state.pop()

    def _op_jp(self, state: Chip8State, ops: Operands) -> None:
        """1nnn - JP addr."""
        state.pc = ops.nnn

    def _op_call(self, state: Chip8State, ops: Operands) -> None:
        """2nnn - CALL addr: Push the address of the next instruction, jump.

        Raises:
            StackOverflow: If all 16 stack slots are in use
        """
        state.push(state.pc)
        state.pc = ops.nnn

    def _op_jp_v0(self, state: Chip8State, ops: Operands) -> None:
        """Bnnn - JP V0, addr: Jump to nnn + V0."""
        state.pc = (ops.nnn + state.registers[0]) & 0xFFFF

    # =========================================================================
    # Conditional Skips
    # =========================================================================

    def _op_se_imm(self, state: Chip8State, ops: Operands) -> None:
        """3xkk - SE Vx, byte."""
        if state.registers[ops.x] == ops.kk:
            state.pc += 2

    def _op_sne_imm(self, state: Chip8State, ops: Operands) -> None:
        """4xkk - SNE Vx, byte."""
        if state.registers[ops.x] != ops.kk:
            state.pc += 2

    def _op_se_reg(self, state: Chip8State, ops: Operands) -> None:
        """5xy0 - SE Vx, Vy."""
        if state.registers[ops.x] == state.registers[ops.y]:
            state.pc += 2

    def _op_sne_reg(self, state: Chip8State, ops: Operands) -> None:
        """9xy0 - SNE Vx, Vy."""
        if state.registers[ops.x] != state.registers[ops.y]:
            state.pc += 2

    # =========================================================================
    # Register Loads and Arithmetic
    # =========================================================================

    def _op_ld_imm(self, state: Chip8State, ops: Operands) -> None:
        """6xkk - LD Vx, byte."""
        state.registers[ops.x] = ops.kk

    def _op_add_imm(self, state: Chip8State, ops: Operands) -> None:
        """7xkk - ADD Vx, byte. Wraps, VF unaffected."""
        state.registers[ops.x] = (state.registers[ops.x] + ops.kk) & 0xFF

    def _op_ld_reg(self, state: Chip8State, ops: Operands) -> None:
        """8xy0 - LD Vx, Vy."""
        state.registers[ops.x] = state.registers[ops.y]

    def _op_or(self, state: Chip8State, ops: Operands) -> None:
        """8xy1 - OR Vx, Vy."""
        state.registers[ops.x] |= state.registers[ops.y]

    def _op_and(self, state: Chip8State, ops: Operands) -> None:
        """8xy2 - AND Vx, Vy."""
        state.registers[ops.x] &= state.registers[ops.y]

    def _op_xor(self, state: Chip8State, ops: Operands) -> None:
        """8xy3 - XOR Vx, Vy."""
        state.registers[ops.x] ^= state.registers[ops.y]

    def _op_add_reg(self, state: Chip8State, ops: Operands) -> None:
        """8xy4 - ADD Vx, Vy.

        VF is set to 1 when the unwrapped sum exceeds 255, else 0. The flag
        is written last, so with x == F the flag is what VF ends up holding.
        """
        total = state.registers[ops.x] + state.registers[ops.y]
        state.registers[ops.x] = total & 0xFF
        state.registers[VF] = 1 if total > 0xFF else 0

    def _op_sub(self, state: Chip8State, ops: Operands) -> None:
        """8xy5 - SUB Vx, Vy. VF = 1 if Vx > Vy (no borrow)."""
        vx = state.registers[ops.x]
        vy = state.registers[ops.y]
        state.registers[ops.x] = (vx - vy) & 0xFF
        state.registers[VF] = 1 if vx > vy else 0

    def _op_shr(self, state: Chip8State, ops: Operands) -> None:
        """8xy6 - SHR Vx. VF = bit 0 before the shift; Vy is ignored."""
        vx = state.registers[ops.x]
        state.registers[ops.x] = vx >> 1
        state.registers[VF] = vx & 0x01

    def _op_subn(self, state: Chip8State, ops: Operands) -> None:
        """8xy7 - SUBN Vx, Vy: Vx = Vy - Vx. VF = 1 if Vy > Vx."""
        vx = state.registers[ops.x]
        vy = state.registers[ops.y]
        state.registers[ops.x] = (vy - vx) & 0xFF
        state.registers[VF] = 1 if vy > vx else 0

    def _op_shl(self, state: Chip8State, ops: Operands) -> None:
        """8xyE - SHL Vx. VF = bit 7 before the shift; Vy is ignored."""
        vx = state.registers[ops.x]
        state.registers[ops.x] = (vx << 1) & 0xFF
        state.registers[VF] = (vx & 0x80) >> 7

    def _op_rnd(self, state: Chip8State, ops: Operands) -> None:
        """Cxkk - RND Vx, byte."""
        state.registers[ops.x] = self.entropy.next_byte() & ops.kk

    # =========================================================================
    # Index Register and Memory
    # =========================================================================

    def _op_ld_i(self, state: Chip8State, ops: Operands) -> None:
        """Annn - LD I, addr."""
        state.index = ops.nnn

    def _op_add_i(self, state: Chip8State, ops: Operands) -> None:
        """Fx1E - ADD I, Vx. No overflow flag."""
        state.index = (state.index + state.registers[ops.x]) & 0xFFFF

    def _op_ld_f(self, state: Chip8State, ops: Operands) -> None:
        """Fx29 - LD F, Vx: Point I at the glyph for the low nibble of Vx."""
        digit = state.registers[ops.x] & 0x0F
        state.index = FONTSET_START_ADDRESS + GLYPH_SIZE * digit

    def _op_ld_b(self, state: Chip8State, ops: Operands) -> None:
        """Fx33 - LD B, Vx: Store hundreds, tens, ones of Vx at I..I+2.

        Raises:
            MemoryOutOfRange: If I+2 is past the end of memory
        """
        value = state.registers[ops.x]
        state.write_bytes(state.index, (value // 100, (value // 10) % 10, value % 10))

    def _op_ld_mem_vx(self, state: Chip8State, ops: Operands) -> None:
        """Fx55 - LD [I], Vx: Store V0..Vx at I. I is left unchanged.

        Raises:
            MemoryOutOfRange: If I+x is past the end of memory
        """
        state.write_bytes(state.index, state.registers[:ops.x + 1])

    def _op_ld_vx_mem(self, state: Chip8State, ops: Operands) -> None:
        """Fx65 - LD Vx, [I]: Load V0..Vx from I. I is left unchanged.

        Raises:
            MemoryOutOfRange: If I+x is past the end of memory
        """
        state.registers[:ops.x + 1] = state.read_bytes(state.index, ops.x + 1)

    # =========================================================================
    # Display
    # =========================================================================

    def _op_drw(self, state: Chip8State, ops: Operands) -> None:
        """Dxyn - DRW Vx, Vy, nibble. VF = 1 on collision, else 0."""
        collision = draw_sprite(
            state, state.registers[ops.x], state.registers[ops.y], ops.n
        )
        state.registers[VF] = 1 if collision else 0

    # =========================================================================
    # Keypad
    # =========================================================================

    def _op_skp(self, state: Chip8State, ops: Operands) -> None:
        """Ex9E - SKP Vx."""
        if state.keypad[state.registers[ops.x] & 0x0F]:
            state.pc += 2

    def _op_sknp(self, state: Chip8State, ops: Operands) -> None:
        """ExA1 - SKNP Vx."""
        if not state.keypad[state.registers[ops.x] & 0x0F]:
            state.pc += 2

    def _op_ld_vx_k(self, state: Chip8State, ops: Operands) -> None:
        """Fx0A - LD Vx, K: Wait for a key press.

        With no key down the PC is wound back so this instruction runs
        again on the next cycle.
        """
        key = state.first_pressed_key()
        if key < 0:
            state.pc -= 2
        else:
            state.registers[ops.x] = key

    # =========================================================================
    # Timers
    # =========================================================================

    def _op_ld_vx_dt(self, state: Chip8State, ops: Operands) -> None:
        """Fx07 - LD Vx, DT."""
        state.registers[ops.x] = state.delay_timer

    def _op_ld_dt_vx(self, state: Chip8State, ops: Operands) -> None:
        """Fx15 - LD DT, Vx."""
        state.delay_timer = state.registers[ops.x]

    def _op_ld_st_vx(self, state: Chip8State, ops: Operands) -> None:
        """Fx18 - LD ST, Vx."""
        state.sound_timer = state.registers[ops.x]

    # =========================================================================
    # Special
    # =========================================================================

    def _op_null(self, state: Chip8State, ops: Operands) -> None:
        """Unallocated encoding: no operation."""
