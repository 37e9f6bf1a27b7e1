"""
Drawing helpers for visualizing tracking results.
"""

import cv2
import numpy as np

from bitplanes.core.types import Roi


def rect_to_points(roi: Roi | tuple, transform: np.ndarray) -> np.ndarray:
    """
    Map the corners of a template region through a transform.

    Returns:
        (4, 2) float array: top-left, top-right, bottom-right, bottom-left
    """
    roi = Roi.coerce(roi)
    x1, y1 = float(roi.x), float(roi.y)
    x2, y2 = float(roi.x + roi.width), float(roi.y + roi.height)

    corners = np.array([
        [x1, y1, 1.0],
        [x2, y1, 1.0],
        [x2, y2, 1.0],
        [x1, y2, 1.0],
    ])
    mapped = corners @ np.asarray(transform, dtype=np.float64).T
    return mapped[:, :2] / mapped[:, 2:3]


def draw_tracking_result(
    frame: np.ndarray,
    roi: Roi | tuple,
    transform: np.ndarray,
    color: tuple[int, int, int] = (0, 0, 255),
    thickness: int = 4,
) -> np.ndarray:
    """
    Draw the tracked template outline and its diagonals.

    Args:
        frame: Grayscale or BGR frame (not modified)
        roi: Template region in the reference frame
        transform: Estimated transform for this frame
        color: BGR line color
        thickness: Line thickness in pixels

    Returns:
        BGR copy of the frame with the overlay
    """
    if frame.ndim == 2:
        canvas = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    else:
        canvas = frame.copy()

    pts = [tuple(int(round(v)) for v in p) for p in rect_to_points(roi, transform)]
    for a, b in ((0, 1), (1, 2), (2, 3), (3, 0), (0, 2), (1, 3)):
        cv2.line(canvas, pts[a], pts[b], color, thickness, cv2.LINE_AA)

    return canvas
