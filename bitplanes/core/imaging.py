"""
Image primitives used by the tracker.

Thin wrappers around OpenCV for smoothing, pyramid downsampling and
projective resampling, plus the vectorized local binary pattern used to
build the bitplanes descriptor.
"""

import cv2
import numpy as np

from bitplanes.core.errors import InvalidRegionError
from bitplanes.core.types import Roi

# 8-neighbourhood offsets (dy, dx); bit k of a code compares neighbour k.
#
#   0 1 2
#   3 . 4
#   5 6 7
NEIGHBOR_OFFSETS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)


def as_gray(image: np.ndarray) -> np.ndarray:
    """
    Return a 2-D uint8 view of `image`, converting BGR/BGRA input.

    Raises:
        ValueError: If the image is not uint8 or has an unsupported shape
    """
    image = np.asarray(image)
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got {image.dtype}")

    if image.ndim == 2:
        return image
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    if image.ndim == 3 and image.shape[2] == 1:
        return image[:, :, 0]

    raise ValueError(f"Unsupported image shape: {image.shape}")


def blur(image: np.ndarray, sigma: float) -> np.ndarray:
    """Isotropic Gaussian smoothing. Returns a copy when sigma <= 0."""
    if sigma <= 0:
        return image.copy()
    return cv2.GaussianBlur(image, (0, 0), sigma)


def downsample(image: np.ndarray) -> np.ndarray:
    """Halve both dimensions with Gaussian anti-aliasing."""
    return cv2.pyrDown(image)


def warp(
    src: np.ndarray,
    transform: np.ndarray,
    roi: Roi,
    border: float = 0.0,
) -> np.ndarray:
    """
    Resample `src` over `roi` through a projective transform.

    Destination pixel (x, y) takes the bilinear sample of `src` at
    normalize(transform @ [x + roi.x, y + roi.y, 1]). Samples that fall
    outside `src` take the value `border`.
    """
    xs = np.arange(roi.x, roi.x + roi.width, dtype=np.float64)
    ys = np.arange(roi.y, roi.y + roi.height, dtype=np.float64)
    gx, gy = np.meshgrid(xs, ys)

    T = np.asarray(transform, dtype=np.float64)
    u = T[0, 0] * gx + T[0, 1] * gy + T[0, 2]
    v = T[1, 0] * gx + T[1, 1] * gy + T[1, 2]
    w = T[2, 0] * gx + T[2, 1] * gy + T[2, 2]

    map_x = (u / w).astype(np.float32)
    map_y = (v / w).astype(np.float32)

    return cv2.remap(
        src, map_x, map_y,
        interpolation=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=border,
    )


def lbp(image: np.ndarray, roi: Roi) -> np.ndarray:
    """
    Local binary pattern code of every pixel in `roi`.

    Bit k is set when neighbour k (see NEIGHBOR_OFFSETS) is >= the centre.
    The region needs a 1-pixel border inside the image.
    """
    if not roi.contains(image.shape, border=1):
        raise InvalidRegionError(
            f"Region {roi.to_tuple()} needs a 1-pixel border inside image of shape {image.shape[:2]}"
        )

    x, y, w, h = roi.to_tuple()
    center = image[y:y + h, x:x + w]
    codes = np.zeros((h, w), dtype=np.uint8)
    for bit, (dy, dx) in enumerate(NEIGHBOR_OFFSETS):
        neighbor = image[y + dy:y + dy + h, x + dx:x + dx + w]
        codes |= (neighbor >= center).astype(np.uint8) << bit
    return codes


def bit_planes(image: np.ndarray, ys: np.ndarray, xs: np.ndarray) -> np.ndarray:
    """
    Neighbour comparison bits at explicit pixel positions.

    Args:
        image: 2-D image
        ys, xs: Row/column indices, each at least 1 pixel from the image edge

    Returns:
        (n, 8) uint8 array of 0/1 values, column k is bit k
    """
    center = image[ys, xs]
    bits = np.empty((len(ys), len(NEIGHBOR_OFFSETS)), dtype=np.uint8)
    for bit, (dy, dx) in enumerate(NEIGHBOR_OFFSETS):
        bits[:, bit] = image[ys + dy, xs + dx] >= center
    return bits


def unpack_codes(codes: np.ndarray) -> np.ndarray:
    """Split uint8 codes into an (n, 8) array of bits, bit 0 first."""
    return np.unpackbits(codes.reshape(-1, 1), axis=1, bitorder="little")
