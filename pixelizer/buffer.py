from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple, Union

from PIL import Image

from .errors import InvalidDimensions

Color = Tuple[int, int, int, int]
PaletteEntry = Union[Tuple[int, int, int], Tuple[int, int, int, int]]


def clamp_channel(value: float) -> int:
    return min(255, max(0, int(value + 0.5)))


@dataclass(frozen=True)
class PixelBuffer:
    """Row-major RGBA pixels with no row padding.

    ``data`` is stored as immutable ``bytes``; stages that need to write pixels
    work on a ``bytearray`` copy and wrap the result in a new buffer.
    """

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise InvalidDimensions(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise InvalidDimensions(
                f"Expected {expected} bytes for {self.width}x{self.height} RGBA, got {len(self.data)}"
            )
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def blank(cls, width: int, height: int, color: Color = (0, 0, 0, 0)) -> "PixelBuffer":
        if width < 1 or height < 1:
            raise InvalidDimensions(f"Image dimensions must be positive, got {width}x{height}")
        return cls(width, height, bytes(color) * (width * height))

    @classmethod
    def from_pixels(cls, width: int, height: int, pixels: Iterable[Sequence[int]]) -> "PixelBuffer":
        data = bytearray()
        for pixel in pixels:
            data.extend(clamp_channel(channel) for channel in pixel[:4])
            if len(pixel) == 3:
                data.append(255)
        return cls(width, height, bytes(data))

    @classmethod
    def from_image(cls, img: Image.Image) -> "PixelBuffer":
        rgba = img.convert("RGBA")
        width, height = rgba.size
        return cls(width, height, rgba.tobytes())

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), self.data)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def index(self, x: int, y: int) -> int:
        return (y * self.width + x) * 4

    def pixel(self, x: int, y: int) -> Color:
        i = self.index(x, y)
        data = self.data
        return data[i], data[i + 1], data[i + 2], data[i + 3]

    def pixels(self) -> Iterator[Color]:
        data = self.data
        for i in range(0, len(data), 4):
            yield data[i], data[i + 1], data[i + 2], data[i + 3]

    def pixel_list(self) -> List[Color]:
        return list(self.pixels())

    def copy(self) -> bytearray:
        """Return a writable copy of the pixel data."""
        return bytearray(self.data)
