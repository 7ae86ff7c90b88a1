import logging
import os
from dataclasses import dataclass
from typing import Tuple


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class PixelizerSettings:
    color_count: int
    prefilter_strength: float
    aa_threshold: float
    default_target_width: int
    max_dimension: int
    scanline_samples: int
    validation_samples: int
    max_gcd_block: int
    alpha_distance: bool
    analysis_max_dimension: int
    auto_confidence_threshold: float
    log_level: str

    @classmethod
    def from_env(cls) -> "PixelizerSettings":
        return cls(
            color_count=int(os.getenv("PIXELIZER_COLOR_COUNT", "32")),
            prefilter_strength=float(os.getenv("PIXELIZER_PREFILTER_STRENGTH", "0.3")),
            aa_threshold=float(os.getenv("PIXELIZER_AA_THRESHOLD", "30")),
            default_target_width=int(os.getenv("PIXELIZER_TARGET_WIDTH", "64")),
            max_dimension=int(os.getenv("PIXELIZER_MAX_DIMENSION", "2000")),
            scanline_samples=int(os.getenv("PIXELIZER_SCANLINES", "10")),
            validation_samples=int(os.getenv("PIXELIZER_VALIDATION_SAMPLES", "100")),
            max_gcd_block=int(os.getenv("PIXELIZER_MAX_GCD_BLOCK", "16")),
            alpha_distance=_env_bool("PIXELIZER_ALPHA_DISTANCE", "true"),
            analysis_max_dimension=int(os.getenv("PIXELIZER_ANALYSIS_MAX_DIMENSION", "800")),
            auto_confidence_threshold=float(os.getenv("PIXELIZER_AUTO_CONFIDENCE", "0.7")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


SETTINGS = PixelizerSettings.from_env()


# Single-entry palette returned when there is nothing to quantize.
DEFAULT_PALETTE_COLOR: Tuple[int, int, int, int] = (0, 0, 0, 255)

# Largest Euclidean distance between two RGBA colors, rounded up.
MAX_COLOR_DISTANCE = 510.0


def configure_logging() -> logging.Logger:
    logging.basicConfig(level=SETTINGS.log_level)
    return logging.getLogger("pixelizer")
