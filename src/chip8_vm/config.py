"""Chip8Config: Run-time settings for driving the interpreter."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Chip8Config:
    """Interpreter settings.

    Attributes:
        instructions_per_second: Target instruction rate of the driver
        timer_hz: Rate at which delay and sound timers tick down
        seed: Seed for the RND instruction (None = nondeterministic)
    """

    DEFAULT_INSTRUCTIONS_PER_SECOND = 600
    DEFAULT_TIMER_HZ = 60

    instructions_per_second: int = DEFAULT_INSTRUCTIONS_PER_SECOND
    timer_hz: int = DEFAULT_TIMER_HZ
    seed: Optional[int] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Check that both rates are positive.

        Raises:
            ValueError: On a zero or negative rate
        """
        if self.instructions_per_second <= 0:
            raise ValueError(
                f"instructions_per_second must be positive, got {self.instructions_per_second}"
            )
        if self.timer_hz <= 0:
            raise ValueError(f"timer_hz must be positive, got {self.timer_hz}")

    @property
    def cycles_per_tick(self) -> int:
        """Instructions executed between two timer ticks (at least 1)."""
        return max(1, round(self.instructions_per_second / self.timer_hz))
