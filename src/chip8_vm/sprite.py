"""Sprite drawing for the DRW instruction.

Sprites are up to 15 bytes tall and always 8 pixels wide, one bit per
pixel with the most significant bit on the left. Pixels are XORed onto
the framebuffer; erasing a lit pixel is a collision.
"""

from .state import Chip8State, VIDEO_WIDTH, VIDEO_HEIGHT


def draw_sprite(state: Chip8State, x: int, y: int, height: int) -> bool:
    """XOR a sprite from memory[I] onto the framebuffer.

    The start coordinate wraps onto the screen, and every pixel position
    then wraps independently so a sprite crossing an edge reappears on the
    opposite side.

    Args:
        state: Machine state (reads index and memory, writes framebuffer)
        x: Start column (any value, taken modulo 64)
        y: Start row (any value, taken modulo 32)
        height: Number of sprite rows to draw

    Returns:
        True if any lit pixel was turned off

    Raises:
        MemoryOutOfRange: If the sprite bytes extend past memory; the
            framebuffer is left untouched in that case
    """
    rows = state.read_bytes(state.index, height)
    origin_x = x % VIDEO_WIDTH
    origin_y = y % VIDEO_HEIGHT
    framebuffer = state.framebuffer
    collision = False

    for row, sprite_byte in enumerate(rows):
        if not sprite_byte:
            continue
        line = ((origin_y + row) % VIDEO_HEIGHT) * VIDEO_WIDTH
        for col in range(8):
            if sprite_byte & (0x80 >> col):
                offset = line + (origin_x + col) % VIDEO_WIDTH
                if framebuffer[offset]:
                    collision = True
                framebuffer[offset] ^= 1

    return collision
