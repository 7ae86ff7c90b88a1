from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from functools import reduce
from typing import List, Optional, Sequence

from ..buffer import PixelBuffer
from ..config import SETTINGS, PixelizerSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SizeStatistics:
    mode: int
    gcd: int
    variance: float
    samples: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class Candidate:
    size: int
    confidence: float


@dataclass(frozen=True)
class DetectionResult:
    block_size: int
    confidence: float


def gcd(a: int, b: int) -> int:
    while b:
        a, b = b, a % b
    return a


def sample_positions(dimension: int, sample_count: int = 10) -> List[int]:
    """Evenly spaced scanline positions across ``dimension`` pixels.

    The last position would land one past the edge, so it is pulled back onto
    the final row or column.
    """

    count = min(sample_count, dimension)
    if count <= 1:
        return [0]
    positions = []
    for i in range(count):
        pos = min(dimension - 1, (dimension * i) // (count - 1))
        if not positions or positions[-1] != pos:
            positions.append(pos)
    return positions


def analyze_scanline(image: PixelBuffer, pos: int, horizontal: bool) -> List[int]:
    """Run-length encode one row (``horizontal``) or column of exact RGBA colors."""

    data = image.data
    width = image.width
    length = width if horizontal else image.height
    segments: List[int] = []
    current: Optional[bytes] = None
    run = 0

    for i in range(length):
        index = (pos * width + i) * 4 if horizontal else (i * width + pos) * 4
        color = data[index:index + 4]
        if color == current:
            run += 1
        else:
            if run:
                segments.append(run)
            current = color
            run = 1

    if run:
        segments.append(run)
    return segments


def calculate_size_statistics(sizes: Sequence[int]) -> SizeStatistics:
    if not sizes:
        return SizeStatistics(mode=1, gcd=1, variance=0.0, samples=[])

    frequency = Counter(sizes)
    # Equal counts resolve to the longer run length.
    mode = max(frequency.items(), key=lambda item: (item[1], item[0]))[0]
    common = reduce(gcd, sizes)
    mean = sum(sizes) / len(sizes)
    variance = sum((size - mean) ** 2 for size in sizes) / len(sizes)
    return SizeStatistics(mode=mode, gcd=common, variance=variance, samples=list(sizes))


def analyze_scanlines(image: PixelBuffer, horizontal: bool, sample_count: int = 10) -> SizeStatistics:
    dimension = image.height if horizontal else image.width
    sizes: List[int] = []
    for pos in sample_positions(dimension, sample_count):
        sizes.extend(analyze_scanline(image, pos, horizontal))
    return calculate_size_statistics(sizes)


def find_candidates(
    horizontal: SizeStatistics,
    vertical: SizeStatistics,
    max_gcd_block: int = 16,
) -> List[Candidate]:
    candidates: List[Candidate] = []

    if horizontal.mode == vertical.mode and horizontal.mode > 1:
        candidates.append(Candidate(size=horizontal.mode, confidence=0.9))

    common = gcd(horizontal.gcd, vertical.gcd)
    if 1 < common <= max_gcd_block:
        candidates.append(Candidate(size=common, confidence=0.7))

    if not candidates:
        candidates.append(Candidate(size=1, confidence=0.1))

    return sorted(candidates, key=lambda c: c.confidence, reverse=True)


def block_variance(image: PixelBuffer, start_x: int, start_y: int, block_size: int) -> float:
    """Per-pixel squared deviation from the block mean, summed over RGBA."""

    data = image.data
    width = image.width
    values: List[List[int]] = [[], [], [], []]
    for y in range(start_y, start_y + block_size):
        row = (y * width + start_x) * 4
        for offset in range(row, row + block_size * 4, 4):
            for channel in range(4):
                values[channel].append(data[offset + channel])

    count = len(values[0])
    if count == 0:
        return 0.0

    total = 0.0
    for channel_values in values:
        mean = sum(channel_values) / count
        total += sum((value - mean) ** 2 for value in channel_values)
    return total / count


def validate_block_size(
    image: PixelBuffer,
    block_size: int,
    rng: Optional[random.Random] = None,
    max_samples: int = 100,
) -> float:
    """Score how uniform ``block_size`` cells are, from 0 (noisy) to 1 (flat).

    Sampled blocks are aligned to the candidate grid so a correctly sized
    grid never straddles two logical pixels.
    """

    width, height = image.size
    if block_size < 1 or block_size > width or block_size > height:
        return 0.0

    rng = rng or random.Random()
    sample_count = min(max_samples, (width * height) // (block_size * block_size))
    if sample_count <= 0:
        return 0.0

    columns = width // block_size
    rows = height // block_size
    total = 0.0
    for _ in range(sample_count):
        start_x = rng.randrange(columns) * block_size
        start_y = rng.randrange(rows) * block_size
        total += block_variance(image, start_x, start_y, block_size)

    average = total / sample_count
    return max(0.0, 1.0 - average / 10000.0)


def validate_candidates(
    image: PixelBuffer,
    candidates: Sequence[Candidate],
    rng: Optional[random.Random] = None,
    max_samples: int = 100,
) -> DetectionResult:
    best = DetectionResult(block_size=1, confidence=0.0)
    for candidate in candidates:
        if candidate.size > image.width or candidate.size > image.height:
            logger.debug("Skipping block size %d larger than image", candidate.size)
            continue
        score = validate_block_size(image, candidate.size, rng=rng, max_samples=max_samples)
        confidence = score * candidate.confidence
        logger.debug(
            "Block size %d: validation %.3f, prior %.2f, final %.3f",
            candidate.size,
            score,
            candidate.confidence,
            confidence,
        )
        if confidence > best.confidence:
            best = DetectionResult(block_size=candidate.size, confidence=confidence)
    return best


def detect(
    image: PixelBuffer,
    rng: Optional[random.Random] = None,
    settings: PixelizerSettings = SETTINGS,
) -> DetectionResult:
    """Detect the side length of the logical pixels in ``image``."""

    horizontal = analyze_scanlines(image, horizontal=True, sample_count=settings.scanline_samples)
    vertical = analyze_scanlines(image, horizontal=False, sample_count=settings.scanline_samples)
    candidates = find_candidates(horizontal, vertical, max_gcd_block=settings.max_gcd_block)
    logger.debug(
        "Scanline stats: horizontal mode=%d gcd=%d, vertical mode=%d gcd=%d, candidates=%s",
        horizontal.mode,
        horizontal.gcd,
        vertical.mode,
        vertical.gcd,
        [(c.size, c.confidence) for c in candidates],
    )
    result = validate_candidates(image, candidates, rng=rng, max_samples=settings.validation_samples)
    logger.debug("Detected block size %d (confidence %.3f)", result.block_size, result.confidence)
    return result


def suggest_target_width(image: PixelBuffer) -> int:
    longer = max(image.width, image.height)
    if longer > 1000:
        return 128
    if longer > 500:
        return 64
    if longer > 200:
        return 32
    return 24
