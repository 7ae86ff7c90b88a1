from __future__ import annotations

import math

from ..buffer import PixelBuffer, clamp_channel
from ..errors import InvalidConfig

KERNEL_RADIUS = 1
SPATIAL_SIGMA = 1.0
COLOR_SIGMA_SCALE = 30.0


def apply_prefilter(image: PixelBuffer, strength: float) -> PixelBuffer:
    """Edge-preserving 3x3 bilateral smoothing of the RGB channels.

    Alpha and the one pixel wide border are copied through unchanged.
    ``strength`` scales the color sigma; zero disables the filter.
    """

    if not 0.0 <= strength <= 1.0:
        raise InvalidConfig(f"prefilter strength must be within [0, 1], got {strength}")
    if strength == 0:
        return image

    width, height = image.size
    if width <= 2 * KERNEL_RADIUS or height <= 2 * KERNEL_RADIUS:
        return image

    color_sigma = COLOR_SIGMA_SCALE * strength
    color_denominator = 2 * color_sigma * color_sigma
    offsets = [
        (dx, dy, math.exp(-(dx * dx + dy * dy) / (2 * SPATIAL_SIGMA * SPATIAL_SIGMA)))
        for dy in range(-KERNEL_RADIUS, KERNEL_RADIUS + 1)
        for dx in range(-KERNEL_RADIUS, KERNEL_RADIUS + 1)
    ]

    src = image.data
    out = image.copy()
    for y in range(KERNEL_RADIUS, height - KERNEL_RADIUS):
        for x in range(KERNEL_RADIUS, width - KERNEL_RADIUS):
            center = (y * width + x) * 4
            cr, cg, cb = src[center], src[center + 1], src[center + 2]
            sum_r = sum_g = sum_b = sum_weight = 0.0

            for dx, dy, spatial_weight in offsets:
                neighbor = ((y + dy) * width + (x + dx)) * 4
                nr, ng, nb = src[neighbor], src[neighbor + 1], src[neighbor + 2]
                distance_sq = (cr - nr) ** 2 + (cg - ng) ** 2 + (cb - nb) ** 2
                weight = spatial_weight * math.exp(-distance_sq / color_denominator)
                sum_r += nr * weight
                sum_g += ng * weight
                sum_b += nb * weight
                sum_weight += weight

            # The center pixel always contributes weight 1.
            out[center] = clamp_channel(sum_r / sum_weight)
            out[center + 1] = clamp_channel(sum_g / sum_weight)
            out[center + 2] = clamp_channel(sum_b / sum_weight)

    return PixelBuffer(width, height, bytes(out))
