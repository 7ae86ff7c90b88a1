"""Image analysis and color reduction stages of the pixelizer."""

from .background import detect_background, remove_anti_aliasing
from .detection import Candidate, DetectionResult, SizeStatistics, detect, suggest_target_width
from .dither import dither
from .palette import (
    ColorBox,
    build_palette,
    map_to_palette,
    nearest_color,
    nearest_palette_index,
    quantize,
    quantize_to_fixed_palette,
)
from .pipeline import ModeSuggestion, PipelineConfig, PipelineResult, run_pipeline, suggest_mode
from .prefilter import apply_prefilter
from .resample import downsample_by_block, limit_size, pixelate_blocks, resample_to_width

__all__ = [
    "detect_background",
    "remove_anti_aliasing",
    "Candidate",
    "DetectionResult",
    "SizeStatistics",
    "detect",
    "suggest_target_width",
    "dither",
    "ColorBox",
    "build_palette",
    "map_to_palette",
    "nearest_color",
    "nearest_palette_index",
    "quantize",
    "quantize_to_fixed_palette",
    "ModeSuggestion",
    "PipelineConfig",
    "PipelineResult",
    "run_pipeline",
    "suggest_mode",
    "apply_prefilter",
    "downsample_by_block",
    "limit_size",
    "pixelate_blocks",
    "resample_to_width",
]
