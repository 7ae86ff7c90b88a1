import random

import pytest

from pixelizer.buffer import PixelBuffer
from pixelizer.errors import InvalidConfig
from pixelizer.processing.palette import (
    ColorBox,
    build_palette,
    nearest_color,
    nearest_palette_index,
    normalize_palette,
    quantize,
    quantize_to_fixed_palette,
    quantize_with_palette,
)

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def _random_pixels(count, seed=5):
    rng = random.Random(seed)
    return [tuple(rng.randrange(256) for _ in range(3)) + (255,) for _ in range(count)]


def test_black_and_white_each_get_their_own_box():
    palette = build_palette([BLACK, WHITE], 2)

    assert sorted(palette) == [BLACK, WHITE]


@pytest.mark.parametrize("color_count", [1, 2, 5, 16, 64])
def test_palette_never_exceeds_color_count(color_count):
    palette = build_palette(_random_pixels(200), color_count)

    assert 1 <= len(palette) <= color_count


def test_palette_reproduces_distinct_colors_when_budget_allows():
    colors = [(10, 20, 30, 255), (200, 10, 10, 255), (10, 200, 10, 128), (5, 5, 250, 255), WHITE]
    pixels = [colors[i % len(colors)] for i in range(37)] + [colors[0]] * 9
    image = PixelBuffer.from_pixels(len(pixels), 1, pixels)

    palette = build_palette(image.pixels(), 8)

    assert sorted(palette) == sorted(colors)
    assert quantize(image, 8) == image


def test_single_box_average_is_weighted_by_pixel_count():
    assert build_palette([BLACK, BLACK, BLACK, WHITE], 1) == [(64, 64, 64, 255)]


def test_single_color_input_yields_single_entry():
    assert build_palette([(7, 8, 9, 10)] * 20, 16) == [(7, 8, 9, 10)]


def test_empty_input_yields_opaque_black():
    assert build_palette([], 4) == [BLACK]


def test_invalid_color_count_is_rejected():
    with pytest.raises(InvalidConfig):
        build_palette([BLACK], 0)


def test_split_channel_prefers_first_channel_on_ties():
    box = ColorBox([((0, 0, 0, 255), 1), ((10, 10, 0, 255), 1)])

    assert box.largest_range == 10
    assert box.split_channel == 0


def test_split_channel_follows_largest_range():
    box = ColorBox([((0, 0, 0, 255), 1), ((0, 20, 5, 250), 1)])

    assert box.split_channel == 1


def test_three_channel_box_never_splits_on_alpha():
    box = ColorBox([((0, 0, 0, 0), 1), ((0, 0, 3, 255), 1)], channels=3)

    assert box.largest_range == 3
    assert box.split_channel == 2


def test_box_splits_at_median_of_sorted_colors():
    entries = [((30, 0, 0, 255), 1), ((10, 0, 0, 255), 4), ((20, 0, 0, 255), 1)]

    left, right = ColorBox(entries).split()

    assert [color for color, _ in left.entries] == [(10, 0, 0, 255)]
    assert [color for color, _ in right.entries] == [(20, 0, 0, 255), (30, 0, 0, 255)]


def test_majority_color_keeps_its_own_box():
    pixels = [(0, 0, 0, 255), (100, 100, 100, 255)] + [(200, 200, 200, 255)] * 3

    palette = build_palette(pixels, 2)

    assert sorted(palette) == [(50, 50, 50, 255), (200, 200, 200, 255)]


def test_box_split_follows_pixel_counts():
    entries = [((0, 0, 0, 255), 1), ((10, 0, 0, 255), 1), ((20, 0, 0, 255), 6)]

    left, right = ColorBox(entries).split()

    assert [color for color, _ in left.entries] == [(0, 0, 0, 255), (10, 0, 0, 255)]
    assert [color for color, _ in right.entries] == [(20, 0, 0, 255)]


def test_single_entry_box_refuses_to_split():
    assert ColorBox([(BLACK, 10)]).split() is None


def test_nearest_palette_index_breaks_ties_by_order():
    palette = [(0, 0, 0, 255), (10, 0, 0, 255)]

    assert nearest_palette_index((5, 0, 0, 255), palette) == 0


def test_nearest_palette_index_alpha_flag():
    palette = [(0, 0, 0, 0), (0, 0, 0, 255)]

    assert nearest_palette_index((0, 0, 0, 255), palette) == 1
    assert nearest_palette_index((0, 0, 0, 255), palette, include_alpha=False) == 0


def test_rgb_palette_entries_keep_source_alpha():
    image = PixelBuffer.from_pixels(2, 1, [(250, 10, 10, 100), (5, 5, 240, 30)])

    result = quantize_to_fixed_palette(image, [(255, 0, 0), (0, 0, 255)])

    assert result.pixel_list() == [(255, 0, 0, 100), (0, 0, 255, 30)]


def test_rgba_palette_entries_impose_alpha():
    assert nearest_color((250, 10, 10, 100), [(255, 0, 0, 255)]) == (255, 0, 0, 255)


def test_fixed_palette_quantization_is_idempotent():
    palette = [BLACK, WHITE, (255, 0, 0, 255), (0, 0, 255, 128)]
    rng = random.Random(2)
    image = PixelBuffer.from_pixels(6, 5, [rng.choice(palette) for _ in range(30)])

    once = quantize_to_fixed_palette(image, palette)

    assert once == image
    assert quantize_to_fixed_palette(once, palette) == once


def test_quantize_accepts_count_or_palette():
    image = PixelBuffer.from_pixels(4, 1, _random_pixels(4))

    by_count, palette = quantize_with_palette(image, 2)
    by_palette = quantize(image, [BLACK, WHITE])

    assert len(palette) == 2
    assert set(by_count.pixels()) <= set(palette)
    assert set(by_palette.pixels()) <= {BLACK, WHITE}


@pytest.mark.parametrize("palette", [[], [(1, 2)], [(0, 0, 300)], [(1, 2, 3, 4, 5)]])
def test_invalid_palettes_are_rejected(palette):
    with pytest.raises(InvalidConfig):
        normalize_palette(palette)
