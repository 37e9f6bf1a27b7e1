"""
Parametric planar motion models.

A motion model maps a minimal parameter vector (Lie algebra coordinates)
to a 3x3 transform and back, gives the per-pixel warp Jacobian, and solves
the Gauss-Newton normal equations for a parameter step.

Only the homography is implemented. Translation or affine models would
subclass MotionModel with their own dof and generators.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
from scipy import linalg

# Hessians with a larger condition number are treated as singular.
MAX_CONDITION = 1e12


@dataclass(frozen=True)
class HessianFactor:
    """Cholesky factor of a Gram Hessian J^T J, reusable across solves."""
    cho: tuple

    def solve(self, gradient: np.ndarray) -> np.ndarray:
        """Gauss-Newton step dp with (J^T J) dp = -gradient."""
        return -linalg.cho_solve(self.cho, np.asarray(gradient, dtype=np.float64))


class MotionModel(ABC):
    """Capability interface for a family of planar transforms."""

    dof: int = 0

    # Condition the Jacobian with a centroid/scale normalization of the ROI.
    normalize_coordinates: bool = False

    @staticmethod
    @abstractmethod
    def params_to_matrix(p: np.ndarray) -> np.ndarray:
        """Exponential map: parameter vector -> 3x3 transform."""

    @staticmethod
    @abstractmethod
    def matrix_to_params(T: np.ndarray) -> np.ndarray:
        """Logarithm map: 3x3 transform -> parameter vector."""

    @staticmethod
    @abstractmethod
    def scale(T: np.ndarray, s: float) -> np.ndarray:
        """Re-express T in the pixel units of an image scaled by s."""

    @staticmethod
    @abstractmethod
    def warp_jacobian(x, y, s: float = 1.0, c1: float = 0.0, c2: float = 0.0) -> np.ndarray:
        """Derivative of the warped pixel w.r.t. the parameters, shape (..., 2, dof)."""

    @classmethod
    def factorize(cls, hessian: np.ndarray) -> HessianFactor | None:
        """
        Factorize a Gram Hessian J^T J.

        Returns None when the matrix is not finite, not positive definite,
        or too badly conditioned to give a meaningful step.
        """
        H = np.asarray(hessian, dtype=np.float64)
        if H.shape != (cls.dof, cls.dof) or not np.all(np.isfinite(H)):
            return None
        with np.errstate(divide="ignore", invalid="ignore"):
            cond = np.linalg.cond(H)
        if not np.isfinite(cond) or cond > MAX_CONDITION:
            return None
        try:
            return HessianFactor(linalg.cho_factor(H))
        except linalg.LinAlgError:
            return None

    @classmethod
    def solve(cls, hessian: np.ndarray, gradient: np.ndarray) -> np.ndarray | None:
        """Solve (J^T J) dp = -g. Returns None if the system is degenerate."""
        factor = cls.factorize(hessian)
        if factor is None:
            return None
        return factor.solve(gradient)


class Homography(MotionModel):
    """
    8-dof projective transform parameterized on sl(3).

    p[0:2] translation, p[2] rotation, p[3] isotropic scale,
    p[4:6] shear/aspect, p[6:8] perspective.
    """

    dof = 8
    normalize_coordinates = True

    @staticmethod
    def params_to_matrix(p: np.ndarray) -> np.ndarray:
        p = np.asarray(p, dtype=np.float64)
        A = np.array([
            [p[3] / 3 + p[4], p[2] + p[5], p[0]],
            [-p[2], p[3] / 3 - p[4], p[1]],
            [p[6], p[7], -2 * p[3] / 3],
        ])
        return linalg.expm(A)

    @staticmethod
    def matrix_to_params(T: np.ndarray) -> np.ndarray:
        # Only valid near the identity; callers never pass anything else.
        L = np.real(linalg.logm(np.asarray(T, dtype=np.float64)))
        return np.array([
            L[0, 2],
            L[1, 2],
            -L[1, 0],
            -1.5 * L[2, 2],
            L[0, 0] + 0.5 * L[2, 2],
            L[1, 0] + L[0, 1],
            L[2, 0],
            L[2, 1],
        ])

    @staticmethod
    def scale(T: np.ndarray, s: float) -> np.ndarray:
        S = np.diag([s, s, 1.0])
        S_inv = np.diag([1.0 / s, 1.0 / s, 1.0])
        return S @ np.asarray(T, dtype=np.float64) @ S_inv

    @staticmethod
    def warp_jacobian(x, y, s: float = 1.0, c1: float = 0.0, c2: float = 0.0) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        dx = c1 - x
        dy = c2 - y
        zero = np.zeros_like(dx)
        inv_s = np.full_like(dx, 1.0 / s)

        row_x = np.stack([
            inv_s, zero, -dy, -dx, -dx, -dy, -s * dx * dx, -s * dx * dy,
        ], axis=-1)
        row_y = np.stack([
            zero, inv_s, dx, -dy, dy, zero, -s * dx * dy, -s * dy * dy,
        ], axis=-1)
        return np.stack([row_x, row_y], axis=-2)
