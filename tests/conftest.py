import random

import pytest

from pixelizer.buffer import PixelBuffer

PALETTE_3 = [
    (220, 40, 40, 255),
    (40, 180, 60, 255),
    (30, 60, 200, 255),
]


def _tiled(cells_x, cells_y, block_size, colors=PALETTE_3):
    """Pixel art upscaled by ``block_size``; neighbouring cells never share a color."""

    base = [colors[(cx + cy) % len(colors)] for cy in range(cells_y) for cx in range(cells_x)]
    pixels = []
    for y in range(cells_y * block_size):
        for x in range(cells_x * block_size):
            pixels.append(base[(y // block_size) * cells_x + x // block_size])
    return PixelBuffer.from_pixels(cells_x * block_size, cells_y * block_size, pixels)


def _noise(width, height, seed=0):
    rng = random.Random(seed)
    pixels = [
        (rng.randrange(256), rng.randrange(256), rng.randrange(256), 255)
        for _ in range(width * height)
    ]
    return PixelBuffer.from_pixels(width, height, pixels)


@pytest.fixture
def make_tiled():
    return _tiled


@pytest.fixture
def make_noise():
    return _noise


@pytest.fixture
def rng():
    return random.Random(1234)
