"""
Single-resolution bitplanes template tracker.

Implements inverse-compositional Gauss-Newton alignment: the Jacobian and
Hessian come from the template once in set_template(), and every track()
iteration only re-warps the input image, recomputes residuals and solves
with the cached factorization.
"""

import numpy as np

from bitplanes.core import imaging
from bitplanes.core.config import Parameters
from bitplanes.core.errors import (
    DegenerateHessianError,
    InsufficientTextureError,
    InvalidRegionError,
    TemplateNotSetError,
)
from bitplanes.core.timer import Timer
from bitplanes.core.types import OptimizerStatus, Result, Roi
from bitplanes.tracking.convergence import SQRT_EPS, test_converged
from bitplanes.tracking.motion import Homography, HessianFactor, MotionModel
from bitplanes.tracking.sampler import ChannelSampler

# Starting "previous error" so the first relative-reduction test never fires.
_FLOAT_MAX = float(np.finfo(np.float32).max)


class Tracker:
    """
    Tracks one template at one image resolution.

    Example:
        >>> tracker = Tracker(Parameters(subsampling=2))
        >>> tracker.set_template(first_frame, (120, 110, 300, 230))
        >>> result = tracker.track(next_frame)
        >>> H = result.transform
    """

    def __init__(
        self,
        params: Parameters | None = None,
        motion_model: type[MotionModel] = Homography,
    ):
        self.params = params or Parameters()
        self.motion_model = motion_model
        self.sampler = ChannelSampler(motion_model, self.params.subsampling)

        self.roi: Roi | None = None
        self.T_norm = np.eye(3)
        self.T_norm_inv = np.eye(3)
        self.gradient = np.zeros(motion_model.dof)
        self.residuals = np.zeros(0, dtype=np.float32)
        self._factor: HessianFactor | None = None

    @property
    def is_ready(self) -> bool:
        return self._factor is not None

    def set_template(self, image: np.ndarray, roi: Roi | tuple) -> None:
        """
        Set the template to track.

        Args:
            image: Reference image (grayscale or BGR uint8)
            roi: (x, y, width, height) of the template in `image`

        Raises:
            InvalidRegionError: If roi lacks a 1-pixel border inside the image
            InsufficientTextureError: If the template cannot constrain the motion
        """
        gray = imaging.as_gray(image)
        roi = Roi.coerce(roi)
        if not roi.contains(gray.shape, border=1):
            raise InvalidRegionError(
                f"Template region {roi.to_tuple()} must lie inside the "
                f"{gray.shape[1]}x{gray.shape[0]} image with a 1-pixel border"
            )

        # Previous template data is discarded even if this one fails
        self._factor = None

        if self.sampler.num_samples(roi) == 0:
            raise InsufficientTextureError(
                f"Template region {roi.to_tuple()} has no pixels to sample "
                f"at subsampling {self.params.subsampling}"
            )

        smoothed = self._smooth(gray)
        self.T_norm, self.T_norm_inv = self.sampler.get_normed_coordinate(roi)
        self.sampler.set(
            smoothed, roi,
            self.T_norm[0, 0], self.T_norm_inv[0, 2], self.T_norm_inv[1, 2],
        )

        factor = self.motion_model.factorize(self.sampler.hessian)
        if factor is None:
            raise InsufficientTextureError(
                f"Template region {roi.to_tuple()} is too uniform to track "
                "(singular Hessian)"
            )

        self.roi = roi
        self._factor = factor

    def track(self, image: np.ndarray, T_init: np.ndarray | None = None) -> Result:
        """
        Estimate the transform that maps the template into `image`.

        Args:
            image: Input image (grayscale or BGR uint8), not modified
            T_init: Initial 3x3 transform (identity if None), not modified

        Returns:
            Result with the estimated transform and optimizer statistics
        """
        if self._factor is None or self.roi is None:
            raise TemplateNotSetError("Template not set. Call set_template() first.")

        timer = Timer()
        I = self._smooth(imaging.as_gray(image))

        T = np.eye(3) if T_init is None else np.array(T_init, dtype=np.float64)
        result = Result(transform=T)

        p_tol = self.params.parameter_tolerance
        f_tol = self.params.function_tolerance
        max_iterations = self.params.max_iterations
        verbose = self.params.verbose

        g_norm = self._linearize(I, T)
        tol_opt = 1e-4 * f_tol
        rel_factor = max(SQRT_EPS, g_norm)

        if verbose:
            print("\n                                        First-Order         Norm of \n"
                  " Iteration  Func-count    Residual       optimality            step")
            print(f" {0:5d}       {1:5d}   {self._sum_sq():13.6g}    {g_norm:12.3g}")

        if g_norm < tol_opt * rel_factor:
            if verbose:
                print(f"initial value is optimal {g_norm:g} < {tol_opt * rel_factor:g}")
            result.final_ssd_error = self._sum_sq()
            result.first_order_optimality = g_norm
            result.num_iterations = 1
            result.status = OptimizerStatus.FIRST_ORDER_OPTIMALITY
            result.time_ms = timer.stop()
            return result

        status = None
        old_sum_sq = _FLOAT_MAX
        it = 1
        while status is None:
            it += 1
            if it > max_iterations:
                break

            dp = self._factor.solve(self.gradient)
            if not np.all(np.isfinite(dp)):
                raise DegenerateHessianError(
                    f"Solve produced a non-finite step at iteration {it}"
                )

            sum_sq = self._sum_sq()
            dp_norm = float(np.linalg.norm(dp))
            p_norm = float(np.linalg.norm(self.motion_model.matrix_to_params(T)))

            if verbose:
                print(f" {it:5d}       {1 + it:5d}   {sum_sq:13.6g}    {g_norm:12.3g}    {dp_norm:12.6g}")

            status = test_converged(
                dp_norm, p_norm, p_tol,
                g_norm, tol_opt, rel_factor,
                sum_sq, old_sum_sq, f_tol,
                SQRT_EPS, it, max_iterations,
            )
            old_sum_sq = sum_sq

            T_update = self.T_norm_inv @ self.motion_model.params_to_matrix(dp) @ self.T_norm
            T = T_update @ T

            if status is None:
                g_norm = self._linearize(I, T)

        result.transform = T
        result.num_iterations = it
        # With a budget of one iteration the loop body never runs
        result.final_ssd_error = old_sum_sq if old_sum_sq != _FLOAT_MAX else self._sum_sq()
        result.first_order_optimality = g_norm
        result.status = status or OptimizerStatus.MAX_ITERATIONS
        result.time_ms = timer.stop()

        if verbose:
            print(f"{result.status.label} reached\n\n")

        return result

    def _linearize(self, I: np.ndarray, T: np.ndarray) -> float:
        """Warp, recompute residuals and the gradient; return |gradient|_inf."""
        warped = self.sampler.warp_image(I, T, self.roi, 0.0)
        self.residuals = self.sampler.compute_residuals(warped)
        self.gradient = self.sampler.project(self.residuals)
        return float(np.abs(self.gradient).max()) if self.gradient.size else 0.0

    def _sum_sq(self) -> float:
        return float(self.residuals @ self.residuals)

    def _smooth(self, image: np.ndarray) -> np.ndarray:
        return imaging.blur(image, self.params.sigma)
