"""
Core module - shared types, configuration, errors and image primitives.
"""

from bitplanes.core.config import (
    Parameters,
    load_config,
    save_config,
    params_from_env,
    MIN_NUM_PIXELS_TO_WORK,
)
from bitplanes.core.errors import (
    BitplanesError,
    InvalidRegionError,
    InsufficientTextureError,
    DegenerateHessianError,
    TemplateNotSetError,
)
from bitplanes.core.timer import Timer, time_code
from bitplanes.core.types import Roi, OptimizerStatus, Result
from bitplanes.core.video import VideoReader, VideoProperties

__all__ = [
    "Parameters",
    "load_config",
    "save_config",
    "params_from_env",
    "MIN_NUM_PIXELS_TO_WORK",
    "BitplanesError",
    "InvalidRegionError",
    "InsufficientTextureError",
    "DegenerateHessianError",
    "TemplateNotSetError",
    "Timer",
    "time_code",
    "Roi",
    "OptimizerStatus",
    "Result",
    "VideoReader",
    "VideoProperties",
]
