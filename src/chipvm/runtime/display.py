from typing import Sequence

from chipvm.common.hwconf import DISPLAY_WIDTH, DISPLAY_HEIGHT, SPRITE_WIDTH


Snapshot = tuple[tuple[bool, ...], ...]


class Display:
    ''' Monochrome framebuffer with XOR sprite compositing '''
    WIDTH = DISPLAY_WIDTH
    HEIGHT = DISPLAY_HEIGHT

    gfx: bytearray  # One byte per pixel, 0 or 1, row-major

    def __init__(self):
        self.gfx = bytearray(self.WIDTH * self.HEIGHT)

    def clear(self):
        self.gfx[:] = bytes(len(self.gfx))

    def pixel(self, x: int, y: int) -> bool:
        return self.gfx[(y % self.HEIGHT) * self.WIDTH + (x % self.WIDTH)] == 1

    def blit(self, x: int, y: int, rows: Sequence[int]) -> bool:
        ''' XOR sprite rows at (x, y), wrapping on both axes.
            Returns True if any lit pixel was turned off. '''
        collided = False

        for row, bits in enumerate(rows):
            py = (y + row) % self.HEIGHT

            for col in range(SPRITE_WIDTH):
                if not bits & (0x80 >> col):
                    continue

                px = (x + col) % self.WIDTH
                offset = py * self.WIDTH + px

                if self.gfx[offset]:
                    collided = True

                self.gfx[offset] ^= 1

        return collided

    def lit_count(self) -> int:
        return sum(self.gfx)

    def snapshot(self) -> Snapshot:
        w = self.WIDTH
        return tuple(
            tuple(bool(p) for p in self.gfx[r * w:(r + 1) * w])
            for r in range(self.HEIGHT)
        )

    def to_text(self, on: str = '█', off: str = ' ') -> str:
        return '\n'.join(
            ''.join(on if p else off for p in row)
            for row in self.snapshot()
        )
