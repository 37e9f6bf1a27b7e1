"""
Shared value types: template regions, optimizer status and tracking results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np


@dataclass(frozen=True)
class Roi:
    """
    Axis-aligned template region in pixel coordinates.

    Example:
        >>> roi = Roi.coerce((120, 110, 300, 230))
        >>> roi.halved()
        Roi(x=60, y=55, width=150, height=115)
    """
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def coerce(cls, value: "Roi | tuple | list") -> "Roi":
        """Accept a Roi or an (x, y, w, h) sequence."""
        if isinstance(value, Roi):
            return value
        x, y, w, h = (int(v) for v in value)
        return cls(x, y, w, h)

    @property
    def area(self) -> int:
        return self.width * self.height

    def halved(self) -> "Roi":
        """Region at the next coarser pyramid level (integer halving)."""
        return Roi(self.x // 2, self.y // 2, self.width // 2, self.height // 2)

    def contains(self, shape: tuple[int, ...], border: int = 0) -> bool:
        """True if the region lies inside an image of `shape` with `border` spare pixels."""
        rows, cols = shape[:2]
        return (
            self.width > 0 and self.height > 0 and
            self.x >= border and self.y >= border and
            self.x + self.width <= cols - border and
            self.y + self.height <= rows - border
        )

    def to_tuple(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


class OptimizerStatus(Enum):
    """Why the Gauss-Newton loop stopped."""
    NOT_STARTED = "NotStarted"
    MAX_ITERATIONS = "MaxIterations"
    FIRST_ORDER_OPTIMALITY = "FirstOrderOptimality"
    SMALL_RELATIVE_REDUCTION = "SmallRelativeReduction"
    SMALL_ABS_ERROR = "SmallAbsError"
    SMALL_PARAMETER_UPDATE = "SmallParameterUpdate"
    SMALL_ABS_PARAMETERS = "SmallAbsParameters"

    @property
    def label(self) -> str:
        return self.value

    @property
    def converged(self) -> bool:
        """True for the statuses that mean the optimizer met a tolerance."""
        return self not in (OptimizerStatus.NOT_STARTED, OptimizerStatus.MAX_ITERATIONS)


@dataclass
class Result:
    """
    Outcome of one track() call.

    A MAX_ITERATIONS status is a best-effort estimate, not an error.
    """
    status: OptimizerStatus = OptimizerStatus.NOT_STARTED
    num_iterations: int = -1
    final_ssd_error: float = -1.0
    first_order_optimality: float = -1.0
    time_ms: float = -1.0
    transform: np.ndarray = field(default_factory=lambda: np.eye(3))

    def to_dict(self) -> dict[str, Any]:
        """Convert to plain Python values."""
        return {
            "status": self.status.label,
            "num_iterations": self.num_iterations,
            "final_ssd_error": float(self.final_ssd_error),
            "first_order_optimality": float(self.first_order_optimality),
            "time_ms": float(self.time_ms),
            "transform": self.transform.tolist(),
        }

    def __str__(self) -> str:
        rows = "\n".join(
            " ".join(f"{v: .6g}" for v in row) for row in self.transform
        )
        return (
            f"OptimizerStatus: {self.status.label}\n"
            f"NumIterations: {self.num_iterations}\n"
            f"FinalSsdError: {self.final_ssd_error:g}\n"
            f"FirstOrderOptimality: {self.first_order_optimality:g}\n"
            f"TimeMilliSeconds: {self.time_ms:g}\n"
            f"T:\n{rows}"
        )
