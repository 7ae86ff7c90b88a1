from __future__ import annotations

from typing import List, Sequence

from ..buffer import PixelBuffer
from .palette import nearest_color, normalize_palette

# (dx, dy, weight) for the classic Floyd-Steinberg kernel.
FLOYD_STEINBERG = (
    (1, 0, 7 / 16),
    (-1, 1, 3 / 16),
    (0, 1, 5 / 16),
    (1, 1, 1 / 16),
)


def dither(
    image: PixelBuffer,
    palette: Sequence[Sequence[int]],
    include_alpha: bool = True,
) -> PixelBuffer:
    """Floyd-Steinberg error diffusion onto ``palette`` in raster order.

    Accumulated values are clamped to [0, 255] before each palette lookup.
    Alpha error is only diffused when ``include_alpha`` is set.
    """

    entries = normalize_palette(palette)
    width, height = image.size
    channels = 4 if include_alpha else 3
    pixels: List[List[float]] = [list(pixel) for pixel in image.pixels()]
    out = bytearray(len(image.data))

    def add_error(x: int, y: int, error: Sequence[float]) -> None:
        for dx, dy, weight in FLOYD_STEINBERG:
            nx = x + dx
            ny = y + dy
            if nx < 0 or nx >= width or ny >= height:
                continue
            target = pixels[ny * width + nx]
            for channel in range(channels):
                target[channel] += error[channel] * weight

    for y in range(height):
        for x in range(width):
            index = y * width + x
            old = [min(255.0, max(0.0, value)) for value in pixels[index]]
            new = nearest_color([int(value + 0.5) for value in old], entries, include_alpha)
            out[index * 4:index * 4 + 4] = bytes(new)
            error = [old[channel] - new[channel] for channel in range(4)]
            add_error(x, y, error)

    return PixelBuffer(width, height, bytes(out))
