import pytest

from pixelizer.buffer import PixelBuffer
from pixelizer.errors import InvalidConfig
from pixelizer.processing.dither import dither

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def _gradient(width, height):
    pixels = []
    for y in range(height):
        for x in range(width):
            value = int(255 * x / (width - 1))
            pixels.append((value, value, value, 255))
    return PixelBuffer.from_pixels(width, height, pixels)


def test_output_uses_only_palette_colors():
    result = dither(_gradient(16, 4), [BLACK, WHITE])

    assert result.size == (16, 4)
    assert set(result.pixels()) <= {BLACK, WHITE}


def test_mid_gray_mixes_both_inks():
    image = PixelBuffer.blank(8, 8, (128, 128, 128, 255))

    result = dither(image, [BLACK, WHITE])
    whites = sum(1 for pixel in result.pixels() if pixel == WHITE)

    assert 24 <= whites <= 40


def test_error_is_pushed_to_the_right_neighbor():
    image = PixelBuffer.from_pixels(2, 1, [(100, 100, 100, 255), (100, 100, 100, 255)])

    result = dither(image, [BLACK, WHITE])

    # 100 maps to black; 7/16 of its error lifts the next pixel to ~144.
    assert result.pixel_list() == [BLACK, WHITE]


def test_palette_colored_image_is_unchanged():
    palette = [BLACK, WHITE, (255, 0, 0, 255)]
    image = PixelBuffer.from_pixels(3, 2, [palette[i % 3] for i in range(6)])

    assert dither(image, palette) == image


def test_rgb_palette_keeps_source_alpha():
    image = PixelBuffer.blank(3, 3, (250, 250, 250, 90))

    result = dither(image, [(0, 0, 0), (255, 255, 255)])

    assert set(result.pixels()) == {(255, 255, 255, 90)}


def test_empty_palette_is_rejected():
    with pytest.raises(InvalidConfig):
        dither(PixelBuffer.blank(2, 2), [])
