from __future__ import annotations

import logging

from PIL import Image

from ..buffer import PixelBuffer, clamp_channel
from ..errors import InvalidConfig

logger = logging.getLogger(__name__)


def _block_mean(image: PixelBuffer, start_x: int, start_y: int, block_w: int, block_h: int):
    data = image.data
    width = image.width
    sums = [0, 0, 0, 0]
    for y in range(start_y, start_y + block_h):
        row = (y * width + start_x) * 4
        for offset in range(row, row + block_w * 4, 4):
            sums[0] += data[offset]
            sums[1] += data[offset + 1]
            sums[2] += data[offset + 2]
            sums[3] += data[offset + 3]
    count = block_w * block_h
    return [clamp_channel(total / count) for total in sums]


def downsample_by_block(image: PixelBuffer, block_size: int) -> PixelBuffer:
    """Average every full ``block_size`` square into one output pixel.

    Partial blocks along the right and bottom edges are dropped.
    """

    if block_size < 1:
        raise InvalidConfig(f"block_size must be >= 1, got {block_size}")
    out_w = image.width // block_size
    out_h = image.height // block_size
    if out_w < 1 or out_h < 1:
        raise InvalidConfig(
            f"block_size {block_size} is larger than the {image.width}x{image.height} image"
        )

    out = bytearray(out_w * out_h * 4)
    for by in range(out_h):
        for bx in range(out_w):
            index = (by * out_w + bx) * 4
            out[index:index + 4] = bytes(
                _block_mean(image, bx * block_size, by * block_size, block_size, block_size)
            )
    return PixelBuffer(out_w, out_h, bytes(out))


def resample_to_width(image: PixelBuffer, target_width: int) -> PixelBuffer:
    """Nearest-neighbor resize to ``target_width`` keeping the aspect ratio."""

    if target_width < 1:
        raise InvalidConfig(f"target_width must be >= 1, got {target_width}")
    target_height = max(1, int(target_width * image.height / image.width + 0.5))
    if (target_width, target_height) == image.size:
        return image
    resized = image.to_image().resize((target_width, target_height), Image.Resampling.NEAREST)
    return PixelBuffer.from_image(resized)


def limit_size(image: PixelBuffer, max_dimension: int) -> PixelBuffer:
    """Shrink ``image`` so its longer side fits ``max_dimension``."""

    if max_dimension < 1:
        raise InvalidConfig(f"max_dimension must be >= 1, got {max_dimension}")
    longer = max(image.width, image.height)
    if longer <= max_dimension:
        return image
    scale = max_dimension / longer
    new_size = (max(1, int(image.width * scale)), max(1, int(image.height * scale)))
    logger.info("Scaling %dx%d input down to %dx%d", image.width, image.height, *new_size)
    resized = image.to_image().resize(new_size, Image.Resampling.NEAREST)
    return PixelBuffer.from_image(resized)


def pixelate_blocks(image: PixelBuffer, block_size: int) -> PixelBuffer:
    """Flatten each block to its mean color at the original resolution.

    Unlike :func:`downsample_by_block`, partial edge blocks are averaged over
    the pixels they do contain.
    """

    if block_size < 1:
        raise InvalidConfig(f"block_size must be >= 1, got {block_size}")
    width, height = image.size
    out = image.copy()
    for y in range(0, height, block_size):
        block_h = min(block_size, height - y)
        for x in range(0, width, block_size):
            block_w = min(block_size, width - x)
            color = bytes(_block_mean(image, x, y, block_w, block_h))
            for yy in range(y, y + block_h):
                row = (yy * width + x) * 4
                out[row:row + block_w * 4] = color * block_w
    return PixelBuffer(width, height, bytes(out))
