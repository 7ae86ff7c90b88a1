from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from ..buffer import Color, PaletteEntry, PixelBuffer
from ..config import MAX_COLOR_DISTANCE, SETTINGS, PixelizerSettings
from ..errors import InvalidConfig
from .background import detect_background, remove_anti_aliasing
from .detection import DetectionResult, detect, suggest_target_width
from .dither import dither
from .palette import build_palette, map_to_palette, normalize_palette
from .prefilter import apply_prefilter
from .resample import downsample_by_block, limit_size, resample_to_width

logger = logging.getLogger(__name__)

MODES = ("auto", "manual")


@dataclass(frozen=True)
class PipelineConfig:
    """Options for ``run_pipeline``.

    Defaults follow the process-wide ``SETTINGS``; use ``from_settings`` to build
    a config from another ``PixelizerSettings`` instance.
    """

    mode: str = "auto"
    target_width: Optional[int] = None
    color_count: int = SETTINGS.color_count
    prefilter_strength: float = SETTINGS.prefilter_strength
    dithering: bool = False
    fixed_palette: Optional[Sequence[Sequence[int]]] = None
    remove_background: bool = True
    aa_threshold: float = SETTINGS.aa_threshold
    include_alpha: bool = SETTINGS.alpha_distance
    max_dimension: Optional[int] = SETTINGS.max_dimension

    def __post_init__(self) -> None:
        mode = str(self.mode).lower()
        if mode not in MODES:
            raise InvalidConfig(f"Unsupported mode {self.mode!r}; expected one of {MODES}")
        object.__setattr__(self, "mode", mode)

        if self.target_width is not None and self.target_width < 1:
            raise InvalidConfig(f"target_width must be >= 1, got {self.target_width}")
        if self.color_count < 1:
            raise InvalidConfig(f"color_count must be >= 1, got {self.color_count}")
        if not 0.0 <= self.prefilter_strength <= 1.0:
            raise InvalidConfig(
                f"prefilter_strength must be within [0, 1], got {self.prefilter_strength}"
            )
        if not 0 <= self.aa_threshold <= MAX_COLOR_DISTANCE:
            raise InvalidConfig(
                f"aa_threshold must be within [0, {MAX_COLOR_DISTANCE:g}], got {self.aa_threshold}"
            )
        if self.max_dimension is not None and self.max_dimension < 1:
            raise InvalidConfig(f"max_dimension must be >= 1, got {self.max_dimension}")
        if self.fixed_palette is not None:
            object.__setattr__(self, "fixed_palette", tuple(normalize_palette(self.fixed_palette)))

    @classmethod
    def from_settings(cls, settings: PixelizerSettings = SETTINGS, **overrides) -> "PipelineConfig":
        config = cls(
            color_count=settings.color_count,
            prefilter_strength=settings.prefilter_strength,
            aa_threshold=settings.aa_threshold,
            include_alpha=settings.alpha_distance,
            max_dimension=settings.max_dimension,
        )
        return replace(config, **overrides) if overrides else config


@dataclass(frozen=True)
class PipelineResult:
    result: PixelBuffer
    palette: List[PaletteEntry]
    detection: Optional[DetectionResult] = None
    base_size: Tuple[int, int] = (0, 0)
    background: Optional[Color] = None
    stages: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ModeSuggestion:
    mode: str
    target_width: Optional[int]
    detection: DetectionResult


def _base_grid(
    image: PixelBuffer,
    config: PipelineConfig,
    rng: Optional[random.Random],
    settings: PixelizerSettings,
) -> Tuple[PixelBuffer, Optional[DetectionResult], List[str]]:
    if config.mode == "manual":
        width = config.target_width or suggest_target_width(image)
        logger.debug("Manual mode: resampling to width %d", width)
        return resample_to_width(image, width), None, [f"resample:{width}"]

    detection = detect(image, rng=rng, settings=settings)
    if detection.block_size > 1:
        logger.debug(
            "Auto mode: block size %d (confidence %.3f)", detection.block_size, detection.confidence
        )
        return (
            downsample_by_block(image, detection.block_size),
            detection,
            [f"detect:{detection.block_size}", f"downsample:{detection.block_size}"],
        )

    width = config.target_width or settings.default_target_width
    logger.debug("Auto mode: no block size found, resampling to width %d", width)
    return resample_to_width(image, width), detection, ["detect:1", f"resample:{width}"]


def suggest_mode(
    image: PixelBuffer,
    rng: Optional[random.Random] = None,
    settings: PixelizerSettings = SETTINGS,
) -> ModeSuggestion:
    """Recommend auto mode when the image shows a confident block grid.

    Detection runs on a copy capped at ``settings.analysis_max_dimension``.
    Without a confident grid, manual mode is suggested together with a
    target width for that copy.
    """

    analysed = limit_size(image, settings.analysis_max_dimension)
    detection = detect(analysed, rng=rng, settings=settings)
    if detection.confidence > settings.auto_confidence_threshold and detection.block_size > 1:
        logger.info(
            "Suggesting auto mode: block size %d (confidence %.3f)",
            detection.block_size,
            detection.confidence,
        )
        return ModeSuggestion("auto", None, detection)

    width = suggest_target_width(analysed)
    logger.info("Suggesting manual mode at width %d (confidence %.3f)", width, detection.confidence)
    return ModeSuggestion("manual", width, detection)


def run_pipeline(
    image: PixelBuffer,
    config: Optional[PipelineConfig] = None,
    rng: Optional[random.Random] = None,
    settings: PixelizerSettings = SETTINGS,
) -> PipelineResult:
    """Turn ``image`` into pixel art according to ``config``.

    Stages: size cap, base grid (block detection or fixed width), background
    cleanup, bilateral prefilter, palette quantization and optional
    Floyd-Steinberg dithering. ``image`` itself is never modified.
    """

    config = config or PipelineConfig.from_settings(settings)
    logger.info(
        "Pixelizing %dx%d image [%s, %s]",
        image.width,
        image.height,
        config.mode,
        "fixed palette" if config.fixed_palette else f"{config.color_count} colors",
    )

    working = image
    if config.max_dimension is not None:
        working = limit_size(working, config.max_dimension)

    base, detection, stages = _base_grid(working, config, rng, settings)
    base_size = base.size

    background: Optional[Color] = None
    if config.remove_background:
        background = detect_background(base)
        base = remove_anti_aliasing(
            base, background, threshold=config.aa_threshold, include_alpha=config.include_alpha
        )
        stages.append("background")

    if config.prefilter_strength > 0:
        base = apply_prefilter(base, config.prefilter_strength)
        stages.append("prefilter")

    if config.fixed_palette is not None:
        palette: List[PaletteEntry] = list(config.fixed_palette)
    else:
        palette = build_palette(base.pixels(), config.color_count, include_alpha=config.include_alpha)
    stages.append("quantize")

    if config.dithering:
        result = dither(base, palette, include_alpha=config.include_alpha)
        stages.append("dither")
    else:
        result = map_to_palette(base, palette, include_alpha=config.include_alpha)

    logger.info("Produced %dx%d image with %d palette colors", result.width, result.height, len(palette))
    return PipelineResult(
        result=result,
        palette=palette,
        detection=detection,
        base_size=base_size,
        background=background,
        stages=stages,
    )
