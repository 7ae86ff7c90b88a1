from __future__ import annotations

import math
from typing import Sequence

from ..buffer import Color, PixelBuffer, clamp_channel
from ..config import MAX_COLOR_DISTANCE
from ..errors import InvalidConfig


def detect_background(image: PixelBuffer) -> Color:
    """Average the four corner pixels channel by channel."""

    right = image.width - 1
    bottom = image.height - 1
    corners = [
        image.pixel(0, 0),
        image.pixel(0, bottom),
        image.pixel(right, 0),
        image.pixel(right, bottom),
    ]
    return tuple(clamp_channel(sum(c[channel] for c in corners) / 4) for channel in range(4))


def remove_anti_aliasing(
    image: PixelBuffer,
    background: Sequence[int],
    threshold: float = 30,
    include_alpha: bool = True,
) -> PixelBuffer:
    """Snap pixels closer than ``threshold`` to ``background`` onto it exactly.

    A mostly transparent background is left alone: soft edges against it are
    not halos of a solid backdrop.
    """

    if not 0 <= threshold <= MAX_COLOR_DISTANCE:
        raise InvalidConfig(f"threshold must be within [0, {MAX_COLOR_DISTANCE:g}], got {threshold}")

    bg = tuple(background[:4]) if len(background) >= 4 else tuple(background[:3]) + (255,)
    if bg[3] < 128:
        return image

    channels = 4 if include_alpha else 3
    bg_bytes = bytes(bg)
    data = image.data
    out = image.copy()
    for i in range(0, len(data), 4):
        squared = 0
        for channel in range(channels):
            diff = data[i + channel] - bg[channel]
            squared += diff * diff
        if math.sqrt(squared) < threshold:
            out[i:i + 4] = bg_bytes
    return PixelBuffer(image.width, image.height, bytes(out))
