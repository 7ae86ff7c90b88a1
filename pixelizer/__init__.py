"""Convert raster images into pixel art."""

from . import processing
from .buffer import Color, PixelBuffer
from .config import SETTINGS, PixelizerSettings, configure_logging
from .errors import InvalidConfig, InvalidDimensions, PixelizerError
from .processing import (
    DetectionResult,
    ModeSuggestion,
    PipelineConfig,
    PipelineResult,
    apply_prefilter,
    build_palette,
    detect,
    detect_background,
    dither,
    downsample_by_block,
    quantize,
    quantize_to_fixed_palette,
    remove_anti_aliasing,
    resample_to_width,
    run_pipeline,
    suggest_mode,
)

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "processing",
    "Color",
    "PixelBuffer",
    "SETTINGS",
    "PixelizerSettings",
    "configure_logging",
    "InvalidConfig",
    "InvalidDimensions",
    "PixelizerError",
    "DetectionResult",
    "ModeSuggestion",
    "PipelineConfig",
    "PipelineResult",
    "apply_prefilter",
    "build_palette",
    "detect",
    "detect_background",
    "dither",
    "downsample_by_block",
    "quantize",
    "quantize_to_fixed_palette",
    "remove_anti_aliasing",
    "resample_to_width",
    "run_pipeline",
    "suggest_mode",
]
