"""
Corner track I/O.

Tracked template corners are stored one frame per line in the
perspective track format:

    FRAME [ [x1, y1], [x2, y2], [x3, y3], [x4, y4] ]

Coordinates are either pixels or normalized to 0-1 by the frame size,
which is what stabilization tools reading perspective tracks expect.
"""

import re
from pathlib import Path
from typing import Iterator

import numpy as np

# Pattern for one [x, y] pair
POINT_PATTERN = re.compile(r'\[\s*(-?[\d.eE+-]+)\s*,\s*(-?[\d.eE+-]+)\s*\]')

# Leading frame number
FRAME_PATTERN = re.compile(r'^\s*(-?\d+)\s')


def format_persp_line(frame: int, corners: np.ndarray) -> str:
    """Format one frame of corners (4x2) as a track line."""
    pairs = ", ".join(f"[{x}, {y}]" for x, y in np.asarray(corners, dtype=float))
    return f"{frame} [ {pairs} ]"


def parse_persp_line(line: str) -> tuple[int, np.ndarray] | None:
    """
    Parse a single line of perspective track data.

    Returns:
        Tuple of (frame_number, corners as (n, 2) array) or None if the
        line doesn't match
    """
    line = line.strip()
    if not line:
        return None

    match = FRAME_PATTERN.match(line + " ")
    if not match:
        return None

    points = POINT_PATTERN.findall(line)
    if not points:
        return None

    corners = np.array([[float(x), float(y)] for x, y in points])
    return int(match.group(1)), corners


def write_persp_file(
    path: str | Path,
    data: dict[int, np.ndarray],
    size: tuple[int, int] | None = None,
) -> None:
    """
    Write corner tracks to a file.

    Args:
        path: Output path
        data: Mapping frame -> (4, 2) corner array in pixels
        size: (width, height) to normalize coordinates to 0-1; pixels if None
    """
    path = Path(path)
    with open(path, 'w') as f:
        for frame, corners in sorted(data.items()):
            corners = np.asarray(corners, dtype=float)
            if size is not None:
                corners = corners / np.array(size, dtype=float)
            f.write(format_persp_line(frame, corners) + "\n")


def iter_persp_file(path: str | Path) -> Iterator[tuple[int, np.ndarray]]:
    """Iterate over (frame, corners) entries of a track file."""
    path = Path(path)
    with open(path, 'r') as f:
        for line in f:
            parsed = parse_persp_line(line)
            if parsed:
                yield parsed


def read_persp_file(
    path: str | Path,
    size: tuple[int, int] | None = None,
) -> dict[int, np.ndarray]:
    """
    Read corner tracks from a file.

    Args:
        path: Path to the track file
        size: (width, height) to scale normalized coordinates back to pixels

    Returns:
        Dictionary mapping frame numbers to (n, 2) corner arrays
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Track file not found: {path}")

    data = {}
    for frame, corners in iter_persp_file(path):
        if size is not None:
            corners = corners * np.array(size, dtype=float)
        data[frame] = corners
    return data
