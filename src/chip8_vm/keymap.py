"""Host keyboard to CHIP-8 keypad mapping.

The 4x4 hex keypad is laid onto the left block of a QWERTY keyboard:

    1 2 3 C        1 2 3 4
    4 5 6 D   <-   Q W E R
    7 8 9 E        A S D F
    A 0 B F        Z X C V
"""

from typing import Dict, Iterable, List

KEY_MAP: Dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}


def host_key_to_chip8(key: str) -> int:
    """Map one host key character to a keypad index.

    Raises:
        KeyError: If the character is not part of the layout
    """
    try:
        return KEY_MAP[key.lower()]
    except KeyError:
        raise KeyError(f"Unmapped host key: {key!r}") from None


def host_keys_to_chip8(keys: Iterable[str]) -> List[int]:
    return [host_key_to_chip8(key) for key in keys]
