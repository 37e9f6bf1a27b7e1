"""
Shared fixtures: synthetic textured images for tracking tests.
"""

import cv2
import numpy as np
import pytest


def make_texture(shape=(240, 320), sigma=2.5, seed=7) -> np.ndarray:
    """Smoothed random texture scaled to the full uint8 range."""
    rng = np.random.default_rng(seed)
    noise = rng.random(shape).astype(np.float32)
    smooth = cv2.GaussianBlur(noise, (0, 0), sigma)
    smooth = (smooth - smooth.min()) / (smooth.max() - smooth.min())
    return (smooth * 255.0).round().astype(np.uint8)


def warp_by(image: np.ndarray, T_true: np.ndarray) -> np.ndarray:
    """Image whose pixel T_true @ x shows the content of `image` at x."""
    h, w = image.shape[:2]
    return cv2.warpPerspective(image, T_true, (w, h), flags=cv2.INTER_LINEAR)


def small_homography(tx=1.5, ty=-1.0, angle_deg=0.5, center=(160.0, 120.0)) -> np.ndarray:
    """Rotation about `center` followed by a translation."""
    R = cv2.getRotationMatrix2D(center, angle_deg, 1.0)
    T = np.vstack([R, [0.0, 0.0, 1.0]])
    T[0, 2] += tx
    T[1, 2] += ty
    return T


def corner_error(roi, T_est, T_true) -> float:
    """Largest distance between the ROI corners mapped by two transforms."""
    from bitplanes.tracking.overlay import rect_to_points
    return float(np.abs(rect_to_points(roi, T_est) - rect_to_points(roi, T_true)).max())


@pytest.fixture
def texture():
    return make_texture()


@pytest.fixture
def roi():
    return (80, 60, 160, 120)
