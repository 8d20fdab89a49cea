"""Random byte source for the RND instruction."""

import random
from typing import Optional


class RandomByteSource:
    """Uniform random bytes in [0, 255].

    Uses a private random.Random so seeding one machine never disturbs
    the process-wide generator or another machine.

    Attributes:
        seed: Seed the generator was created with (None = OS entropy)
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def next_byte(self) -> int:
        return self._rng.randint(0, 255)

    def reseed(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng.seed(seed)
