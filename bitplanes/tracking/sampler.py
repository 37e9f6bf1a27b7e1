"""
Bitplanes channel data for a single template.

The template region is described by an 8-bit local binary pattern per
sampled pixel. Each bit is treated as its own image channel ("bit plane"),
so one sampled pixel contributes 8 residuals and 8 Jacobian rows. Row
8*j + b always belongs to sampled pixel j and bit b, both in the Jacobian
built by set() and in the residuals computed while tracking.
"""

import numpy as np

from bitplanes.core import imaging
from bitplanes.core.types import Roi
from bitplanes.tracking.motion import Homography, MotionModel

NUM_BITS = len(imaging.NEIGHBOR_OFFSETS)


class ChannelSampler:
    """
    Samples the bitplanes descriptor of a template and its Jacobian.

    Example:
        >>> sampler = ChannelSampler(Homography, subsampling=2)
        >>> T, T_inv = sampler.get_normed_coordinate(roi)
        >>> sampler.set(image, roi, T[0, 0], T_inv[0, 2], T_inv[1, 2])
        >>> g, ssd = sampler.linearize(sampler.warp_image(frame, H, roi))
    """

    def __init__(self, motion_model: type[MotionModel] = Homography, subsampling: int = 1):
        if subsampling < 1:
            raise ValueError(f"subsampling must be >= 1, got {subsampling}")
        self.motion_model = motion_model
        self.subsampling = subsampling

        self.pixels = np.zeros(0, dtype=np.uint8)
        self.jacobian = np.zeros((0, motion_model.dof), dtype=np.float32)
        self.hessian = np.zeros((motion_model.dof, motion_model.dof))
        self._jacobian_t = np.zeros((motion_model.dof, 0))
        self._template_bits = np.zeros((0, NUM_BITS), dtype=np.uint8)
        self._grid: tuple[np.ndarray, np.ndarray] | None = None

    def sample_grid(self, roi: Roi) -> tuple[np.ndarray, np.ndarray]:
        """
        Local (row, col) indices of the sampled pixels, row-major.

        The outermost ring of the region is skipped so every sample has a
        full 8-neighbourhood inside the region.
        """
        rows = np.arange(1, roi.height - 1, self.subsampling)
        cols = np.arange(1, roi.width - 1, self.subsampling)
        gy, gx = np.meshgrid(rows, cols, indexing="ij")
        return gy.ravel(), gx.ravel()

    def num_samples(self, roi: Roi) -> int:
        rows = len(range(1, roi.height - 1, self.subsampling))
        cols = len(range(1, roi.width - 1, self.subsampling))
        return rows * cols

    def set(
        self,
        image: np.ndarray,
        roi: Roi,
        scale: float = 1.0,
        c1: float = 0.0,
        c2: float = 0.0,
    ) -> None:
        """
        Compute pixel codes, the stacked Jacobian and the Hessian.

        Args:
            image: Smoothed grayscale template image
            roi: Template region; needs a 1-pixel border inside the image
            scale, c1, c2: Coordinate normalization passed to the warp Jacobian
        """
        codes = imaging.lbp(image, roi)
        ys, xs = self.sample_grid(roi)
        n = len(ys)

        self.pixels = codes[ys, xs].copy()
        self._template_bits = imaging.unpack_codes(self.pixels)

        Jw = self.motion_model.warp_jacobian(xs + roi.x, ys + roi.y, scale, c1, c2)

        jacobian = np.empty((n, NUM_BITS, self.motion_model.dof), dtype=np.float32)
        for bit in range(NUM_BITS):
            plane = ((codes >> bit) & 1).astype(np.float32)
            gx = 0.5 * (plane[ys, xs + 1] - plane[ys, xs - 1])
            gy = 0.5 * (plane[ys + 1, xs] - plane[ys - 1, xs])
            jacobian[:, bit, :] = gx[:, None] * Jw[:, 0, :] + gy[:, None] * Jw[:, 1, :]

        self.jacobian = jacobian.reshape(n * NUM_BITS, self.motion_model.dof)
        self._jacobian_t = np.ascontiguousarray(self.jacobian.T, dtype=np.float64)
        self.hessian = self._jacobian_t @ self._jacobian_t.T
        self._grid = (ys, xs)

    def compute_residuals(self, warped: np.ndarray) -> np.ndarray:
        """
        Bitwise residuals of a warped region against the template.

        Args:
            warped: Region-sized image from warp_image()

        Returns:
            float32 vector of -1/0/+1 values, length 8 * num_samples
        """
        if self._grid is None:
            return np.zeros(0, dtype=np.float32)
        ys, xs = self._grid
        bits = imaging.bit_planes(warped, ys, xs)
        residuals = bits.astype(np.int8) - self._template_bits.astype(np.int8)
        return residuals.astype(np.float32).ravel()

    def project(self, residuals: np.ndarray) -> np.ndarray:
        """Cost gradient J^T r for a residual vector from compute_residuals()."""
        return self._jacobian_t @ residuals.astype(np.float64)

    def linearize(self, warped: np.ndarray) -> tuple[np.ndarray, float]:
        """Return (gradient J^T r, sum of squared residuals)."""
        residuals = self.compute_residuals(warped)
        return self.project(residuals), float(residuals @ residuals)

    def warp_image(
        self,
        src: np.ndarray,
        transform: np.ndarray,
        roi: Roi,
        border: float = 0.0,
    ) -> np.ndarray:
        """Resample the template region of `src` through `transform`."""
        return imaging.warp(src, transform, roi, border)

    def get_normed_coordinate(self, roi: Roi) -> tuple[np.ndarray, np.ndarray]:
        """
        Similarity transform conditioning the sampled coordinates.

        Moves the centroid of the sampled pixels to the origin and scales so
        their mean distance from it is sqrt(2). Returns (T, T_inv); both are
        identity for models that need no normalization.
        """
        T = np.eye(3)
        T_inv = np.eye(3)
        if not self.motion_model.normalize_coordinates:
            return T, T_inv

        ys, xs = self.sample_grid(roi)
        if len(ys) == 0:
            return T, T_inv

        px = (xs + roi.x).astype(np.float64)
        py = (ys + roi.y).astype(np.float64)
        cx, cy = px.mean(), py.mean()
        m = np.hypot(px - cx, py - cy).mean()
        s = np.sqrt(2.0) / max(m, 1e-6)

        T = np.array([
            [s, 0.0, -s * cx],
            [0.0, s, -s * cy],
            [0.0, 0.0, 1.0],
        ])
        T_inv = np.array([
            [1.0 / s, 0.0, cx],
            [0.0, 1.0 / s, cy],
            [0.0, 0.0, 1.0],
        ])
        return T, T_inv
