"""
Coarse-to-fine tracking over an image pyramid.

Each pyramid level owns a Tracker built for that resolution. Coarse levels
widen the capture range; the estimate is handed down level by level, with
the transform rescaled to the finer level's pixel units each time.
"""

from dataclasses import replace

import numpy as np

from bitplanes.core import imaging
from bitplanes.core.config import MIN_NUM_PIXELS_TO_WORK, Parameters
from bitplanes.core.errors import TemplateNotSetError
from bitplanes.core.types import Result, Roi
from bitplanes.tracking.motion import Homography, MotionModel
from bitplanes.tracking.tracker import Tracker

# Parameters used at every level coarser than the input resolution.
REDUCED_SIGMA = 0.8
REDUCED_MAX_ITERATIONS = 25
REDUCED_TOLERANCE_FACTOR = 10.0


def reduce_parameters(params: Parameters) -> Parameters:
    """Looser, cheaper parameters for a coarse pyramid level."""
    return replace(
        params,
        max_iterations=REDUCED_MAX_ITERATIONS,
        parameter_tolerance=params.parameter_tolerance * REDUCED_TOLERANCE_FACTOR,
        function_tolerance=params.function_tolerance * REDUCED_TOLERANCE_FACTOR,
        sigma=REDUCED_SIGMA,
    )


def make_parameters_pyramid(params: Parameters, num_levels: int) -> list[Parameters]:
    """Level 0 keeps `params`; every coarser level uses reduce_parameters()."""
    if num_levels < 1:
        raise ValueError(f"num_levels must be >= 1, got {num_levels}")
    reduced = reduce_parameters(params)
    return [params] + [reduced] * (num_levels - 1)


def auto_num_levels(roi: Roi, image_shape: tuple[int, ...]) -> int:
    """
    Number of levels whose template still has enough pixels to work with.

    A level is added while the halved template keeps at least
    MIN_NUM_PIXELS_TO_WORK pixels and still fits inside the halved image
    with a 1-pixel border.
    """
    levels = 1
    rows, cols = image_shape[:2]
    while True:
        roi = roi.halved()
        rows, cols = (rows + 1) // 2, (cols + 1) // 2
        if roi.area < MIN_NUM_PIXELS_TO_WORK or not roi.contains((rows, cols), border=1):
            return levels
        levels += 1


class PyramidTracker:
    """
    Multi-resolution bitplanes tracker with warm starts between frames.

    Example:
        >>> tracker = PyramidTracker(Parameters(num_levels=3))
        >>> tracker.set_template(frames[0], (120, 110, 300, 230))
        >>> for frame in frames[1:]:
        ...     result = tracker.track(frame)  # starts from the last estimate
        ...     print(result.status.label, result.num_iterations)
    """

    def __init__(
        self,
        params: Parameters | None = None,
        motion_model: type[MotionModel] = Homography,
    ):
        self.params = params or Parameters()
        self.motion_model = motion_model
        self._pyramid: list[Tracker] = []
        self._T_init = np.eye(3)

        if self.params.verbose:
            print(f"AlgorithmParameters:\n{self.params}")

    @property
    def num_levels(self) -> int:
        return len(self._pyramid)

    @property
    def trackers(self) -> list[Tracker]:
        """Per-level trackers, finest (index 0) to coarsest."""
        return list(self._pyramid)

    @property
    def transform(self) -> np.ndarray:
        """Warm start used by track() when no T_init is given."""
        return self._T_init.copy()

    def set_template(self, image: np.ndarray, roi: Roi | tuple) -> None:
        """
        Set the template on every pyramid level.

        Args:
            image: Reference image (grayscale or BGR uint8)
            roi: (x, y, width, height) of the template at full resolution
        """
        I = imaging.as_gray(image)
        roi = Roi.coerce(roi)

        if self.params.auto_levels:
            num_levels = auto_num_levels(roi, I.shape)
        else:
            num_levels = self.params.num_levels

        level_params = make_parameters_pyramid(self.params, num_levels)
        pyramid = [Tracker(p, self.motion_model) for p in level_params]

        pyramid[0].set_template(I, roi)
        for tracker in pyramid[1:]:
            I = imaging.downsample(I)
            roi = roi.halved()
            tracker.set_template(I, roi)

        self._pyramid = pyramid
        self._T_init = np.eye(3)

    def track(self, image: np.ndarray, T_init: np.ndarray | None = None) -> Result:
        """
        Track the template from the coarsest level down to full resolution.

        Args:
            image: Input image (grayscale or BGR uint8)
            T_init: Initial full-resolution transform; the previous
                estimate is used if None

        Returns:
            Result of the finest level, transform in full-resolution pixels
        """
        if not self._pyramid:
            raise TemplateNotSetError("Template not set. Call set_template() first.")

        if T_init is None:
            T_init = self._T_init

        levels = len(self._pyramid)
        T = self.motion_model.scale(T_init, 1.0 / (1 << (levels - 1)))

        pyramid_images = [imaging.as_gray(image).copy()]
        for _ in range(1, levels):
            pyramid_images.append(imaging.downsample(pyramid_images[-1]))

        for level in range(levels - 1, -1, -1):
            result = self._pyramid[level].track(pyramid_images[level], T)
            T = result.transform
            if level != 0:
                T = self.motion_model.scale(T, 2.0)

        result.transform = T
        self._T_init = T.copy()
        return result
