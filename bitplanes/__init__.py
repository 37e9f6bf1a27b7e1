"""
Bitplanes - illumination-robust planar template tracking
========================================================

Tracks the projective motion of a rectangular template across video frames
using the bitplanes descriptor (8 binary neighbour comparisons per pixel)
and inverse-compositional Gauss-Newton alignment over an image pyramid.

Main modules:
- bitplanes.tracking: Motion model, descriptor sampling, trackers
- bitplanes.core: Parameters, result types, errors, image primitives

Quick start:
    >>> from bitplanes import PyramidTracker, Parameters
    >>> tracker = PyramidTracker(Parameters(num_levels=3))
    >>> tracker.set_template(first_frame, (120, 110, 300, 230))
    >>> result = tracker.track(next_frame)
    >>> print(result.status.label, result.transform)
"""

__version__ = "0.1.0"

# Convenience imports
from bitplanes.core import (
    Parameters,
    Result,
    OptimizerStatus,
    Roi,
    BitplanesError,
    InvalidRegionError,
    InsufficientTextureError,
    DegenerateHessianError,
    TemplateNotSetError,
)
from bitplanes.tracking import Homography, Tracker, PyramidTracker

__all__ = [
    "__version__",
    "Parameters",
    "Result",
    "OptimizerStatus",
    "Roi",
    "BitplanesError",
    "InvalidRegionError",
    "InsufficientTextureError",
    "DegenerateHessianError",
    "TemplateNotSetError",
    "Homography",
    "Tracker",
    "PyramidTracker",
]
