"""
Tracking module - bitplanes template alignment.

This module provides:
- Homography: the projective motion model
- ChannelSampler: bitplanes descriptor and Jacobian of a template
- Tracker: single-resolution inverse-compositional Gauss-Newton tracker
- PyramidTracker: coarse-to-fine tracker with warm starts
- Corner track I/O and overlay drawing

Example:
    >>> from bitplanes.tracking import PyramidTracker
    >>> tracker = PyramidTracker()
    >>> tracker.set_template(first_frame, (120, 110, 300, 230))
    >>> for frame in video:
    ...     result = tracker.track(frame)
"""

from bitplanes.tracking.motion import MotionModel, Homography, HessianFactor
from bitplanes.tracking.sampler import ChannelSampler
from bitplanes.tracking.convergence import test_converged
from bitplanes.tracking.tracker import Tracker
from bitplanes.tracking.pyramid import (
    PyramidTracker,
    reduce_parameters,
    make_parameters_pyramid,
    auto_num_levels,
)
from bitplanes.tracking.overlay import rect_to_points, draw_tracking_result
from bitplanes.tracking.track_io import (
    read_persp_file,
    write_persp_file,
    parse_persp_line,
)

__all__ = [
    "MotionModel",
    "Homography",
    "HessianFactor",
    "ChannelSampler",
    "test_converged",
    "Tracker",
    "PyramidTracker",
    "reduce_parameters",
    "make_parameters_pyramid",
    "auto_num_levels",
    "rect_to_points",
    "draw_tracking_result",
    "read_persp_file",
    "write_persp_file",
    "parse_persp_line",
]
