from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..buffer import Color, PaletteEntry, PixelBuffer, clamp_channel
from ..config import DEFAULT_PALETTE_COLOR
from ..errors import InvalidConfig

ColorEntry = Tuple[Color, int]


class ColorBox:
    """One bucket of the median-cut split: distinct colors with pixel counts.

    ``split_channel`` is the first channel, in R, G, B, A order, whose range
    equals ``largest_range``. With ``channels=3`` alpha is carried along but
    never chosen for a split.
    """

    def __init__(self, entries: List[ColorEntry], channels: int = 4) -> None:
        self.entries = entries
        self.channels = channels
        self.min = [255] * channels
        self.max = [0] * channels
        self.largest_range = 0
        self.split_channel = 0
        self._compute_min_max()

    def _compute_min_max(self) -> None:
        for color, _ in self.entries:
            for channel in range(self.channels):
                value = color[channel]
                if value < self.min[channel]:
                    self.min[channel] = value
                if value > self.max[channel]:
                    self.max[channel] = value

        ranges = [max(0, hi - lo) for lo, hi in zip(self.min, self.max)]
        self.largest_range = max(ranges)
        self.split_channel = ranges.index(self.largest_range)

    @property
    def can_split(self) -> bool:
        return len(self.entries) >= 2

    def split(self) -> Optional[Tuple["ColorBox", "ColorBox"]]:
        if not self.can_split:
            return None
        channel = self.split_channel
        ordered = sorted(self.entries, key=lambda entry: entry[0][channel])

        # Cut at the color boundary closest to the pixel median; both halves
        # keep at least one distinct color.
        half = sum(count for _, count in ordered) // 2
        cut = 1
        best_gap = None
        running = 0
        for index in range(1, len(ordered)):
            running += ordered[index - 1][1]
            gap = abs(running - half)
            if best_gap is None or gap < best_gap:
                best_gap = gap
                cut = index
        return ColorBox(ordered[:cut], self.channels), ColorBox(ordered[cut:], self.channels)

    def average_color(self) -> Color:
        sums = [0, 0, 0, 0]
        total = 0
        for color, count in self.entries:
            for channel in range(4):
                sums[channel] += color[channel] * count
            total += count
        return tuple(clamp_channel(value / total) for value in sums)


def _as_rgba(color: Sequence[int]) -> Color:
    if len(color) >= 4:
        return color[0], color[1], color[2], color[3]
    return color[0], color[1], color[2], 255


def normalize_palette(palette: Iterable[Sequence[int]]) -> List[PaletteEntry]:
    """Validate palette entries of 3 (RGB) or 4 (RGBA) channels."""

    entries: List[PaletteEntry] = []
    for entry in palette:
        values = tuple(int(channel) for channel in entry)
        if len(values) not in (3, 4):
            raise InvalidConfig(f"Palette entries need 3 or 4 channels, got {entry!r}")
        if any(channel < 0 or channel > 255 for channel in values):
            raise InvalidConfig(f"Palette channel out of range in {entry!r}")
        entries.append(values)
    if not entries:
        raise InvalidConfig("Palette must contain at least one color")
    return entries


def build_palette(
    pixels: Iterable[Sequence[int]],
    color_count: int,
    include_alpha: bool = True,
) -> List[Color]:
    """Median-cut ``pixels`` into at most ``color_count`` representative colors."""

    if color_count < 1:
        raise InvalidConfig(f"color_count must be >= 1, got {color_count}")

    counts: Counter = Counter(_as_rgba(pixel) for pixel in pixels)
    if not counts:
        return [DEFAULT_PALETTE_COLOR]

    channels = 4 if include_alpha else 3
    boxes = [ColorBox(list(counts.items()), channels)]

    while len(boxes) < color_count:
        best_index = -1
        for index, box in enumerate(boxes):
            if not box.can_split:
                continue
            if best_index < 0 or box.largest_range > boxes[best_index].largest_range:
                best_index = index
        if best_index < 0:
            break

        box = boxes.pop(best_index)
        boxes.extend(box.split())

    return [box.average_color() for box in boxes]


def nearest_palette_index(
    color: Sequence[int],
    palette: Sequence[Sequence[int]],
    include_alpha: bool = True,
) -> int:
    """Index of the closest palette entry; the first of equal distances wins.

    RGB-only entries are compared on RGB alone.
    """

    best_index = 0
    best_distance = float("inf")
    r, g, b, a = _as_rgba(color)
    for index, entry in enumerate(palette):
        distance = (entry[0] - r) ** 2 + (entry[1] - g) ** 2 + (entry[2] - b) ** 2
        if include_alpha and len(entry) > 3:
            distance += (entry[3] - a) ** 2
        if distance < best_distance:
            best_distance = distance
            best_index = index
    return best_index


def nearest_color(
    color: Sequence[int],
    palette: Sequence[Sequence[int]],
    include_alpha: bool = True,
) -> Color:
    entry = palette[nearest_palette_index(color, palette, include_alpha)]
    if len(entry) > 3:
        return _as_rgba(entry)
    return entry[0], entry[1], entry[2], _as_rgba(color)[3]


def map_to_palette(
    image: PixelBuffer,
    palette: Sequence[Sequence[int]],
    include_alpha: bool = True,
) -> PixelBuffer:
    """Replace every pixel by its nearest palette color."""

    lookup: Dict[Color, bytes] = {}
    out = bytearray(len(image.data))
    for i, pixel in enumerate(image.pixels()):
        mapped = lookup.get(pixel)
        if mapped is None:
            mapped = bytes(nearest_color(pixel, palette, include_alpha))
            lookup[pixel] = mapped
        out[i * 4:i * 4 + 4] = mapped
    return PixelBuffer(image.width, image.height, bytes(out))


def quantize_to_fixed_palette(
    image: PixelBuffer,
    palette: Iterable[Sequence[int]],
    include_alpha: bool = True,
) -> PixelBuffer:
    return map_to_palette(image, normalize_palette(palette), include_alpha)


def quantize_with_palette(
    image: PixelBuffer,
    color_count_or_palette: Union[int, Iterable[Sequence[int]]],
    include_alpha: bool = True,
) -> Tuple[PixelBuffer, List[PaletteEntry]]:
    if isinstance(color_count_or_palette, int):
        palette: List[PaletteEntry] = build_palette(image.pixels(), color_count_or_palette, include_alpha)
    else:
        palette = normalize_palette(color_count_or_palette)
    return map_to_palette(image, palette, include_alpha), palette


def quantize(
    image: PixelBuffer,
    color_count_or_palette: Union[int, Iterable[Sequence[int]]],
    include_alpha: bool = True,
) -> PixelBuffer:
    """Reduce ``image`` to a median-cut palette of the given size or to a fixed palette."""

    quantized, _ = quantize_with_palette(image, color_count_or_palette, include_alpha)
    return quantized
