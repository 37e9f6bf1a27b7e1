"""
Wall-clock timing helpers.
"""

import time
from typing import Any, Callable


class Timer:
    """
    Simple millisecond timer. Starts on construction.

    Example:
        >>> timer = Timer()
        >>> run_something()
        >>> print(f"took {timer.stop():.2f} ms")
    """

    def __init__(self):
        self._start = 0.0
        self.start()

    def start(self) -> None:
        """(Re)start timing."""
        self._start = time.perf_counter()

    def elapsed(self) -> float:
        """Milliseconds since the last start(), keeps running."""
        return (time.perf_counter() - self._start) * 1000.0

    def stop(self) -> float:
        """Milliseconds since the last start(). Restarts the timer."""
        now = time.perf_counter()
        ms = (now - self._start) * 1000.0
        self._start = now
        return ms


def time_code(n_rep: int, func: Callable[..., Any], *args: Any) -> float:
    """
    Run func(*args) n_rep times and return the average time in milliseconds.

    Example:
        >>> t = time_code(100, tracker.track, frame)
    """
    if n_rep < 1:
        raise ValueError(f"n_rep must be >= 1, got {n_rep}")

    timer = Timer()
    for _ in range(n_rep):
        func(*args)
    return timer.stop() / n_rep
