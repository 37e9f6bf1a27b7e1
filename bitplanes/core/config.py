"""
Configuration management for the bitplanes tracker.

Algorithm parameters live in a dataclass that can be loaded from and saved
to JSON files, and overridden with environment variables.
"""

import json
import os
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path
from typing import Any

# Minimum template area (in pixels) for a pyramid level to be worth running.
MIN_NUM_PIXELS_TO_WORK = int(100 * 100 / 16.0)

AUTO_LEVELS = -1


@dataclass(frozen=True)
class Parameters:
    """
    Tracker parameters. Immutable for the lifetime of a tracker.

    Example:
        params = Parameters(num_levels=3, subsampling=2)
        tracker = PyramidTracker(params)
    """
    num_levels: int = AUTO_LEVELS  # -1 picks the count from the template size
    max_iterations: int = 50
    parameter_tolerance: float = 5e-6
    function_tolerance: float = 5e-5
    sigma: float = 1.2  # pre-smoothing; <= 0 disables it
    verbose: bool = False
    subsampling: int = 1  # process every n-th template pixel

    def __post_init__(self):
        if self.num_levels != AUTO_LEVELS and self.num_levels < 1:
            raise ValueError(
                f"num_levels must be >= 1 or {AUTO_LEVELS} (auto), got {self.num_levels}"
            )
        if self.subsampling < 1:
            raise ValueError(f"subsampling must be >= 1, got {self.subsampling}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")

    @property
    def auto_levels(self) -> bool:
        return self.num_levels == AUTO_LEVELS

    @classmethod
    def load(cls, path: str | Path) -> "Parameters":
        """Load parameters from a JSON file."""
        return load_config(path)

    def save(self, path: str | Path) -> None:
        """Save parameters to a JSON file."""
        save_config(self, path)

    def to_dict(self) -> dict:
        return asdict(self)

    def __str__(self) -> str:
        return "\n".join([
            "MultiChannelFunction = BitPlanes",
            f"ParameterTolerance = {self.parameter_tolerance:g}",
            f"FunctionTolerance = {self.function_tolerance:g}",
            f"NumLevels = {self.num_levels}",
            f"MaxIterations = {self.max_iterations}",
            f"sigma = {self.sigma:g}",
            f"verbose = {int(self.verbose)}",
            f"subsampling = {self.subsampling}",
        ])


def load_config(path: str | Path) -> Parameters:
    """
    Load parameters from a JSON file.

    Missing keys keep their defaults; unknown keys are ignored.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        json.JSONDecodeError: If the JSON is invalid
        ValueError: If a value is out of range
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    known = {f.name for f in fields(Parameters)}
    return Parameters(**{k: v for k, v in data.items() if k in known})


def save_config(params: Parameters, path: str | Path) -> None:
    """Save parameters to a JSON file."""
    path = Path(path)
    with open(path, "w") as f:
        json.dump(params.to_dict(), f, indent=2)


def create_example_config(path: str | Path = "bitplanes_config.json") -> Parameters:
    """Write a configuration file with the parameters used for video demos."""
    params = Parameters(
        num_levels=3,
        max_iterations=50,
        parameter_tolerance=1e-5,
        function_tolerance=1e-4,
        verbose=False,
    )
    params.save(path)
    print(f"Created example configuration: {path}")
    return params


def get_env_config(prefix: str = "BITPLANES_") -> dict[str, Any]:
    """
    Get configuration from environment variables.

    All environment variables starting with the prefix will be included.
    Variable names are converted to lowercase with the prefix removed.

    Example:
        BITPLANES_VERBOSE=true -> {"verbose": "true"}
    """
    config = {}
    for key, value in os.environ.items():
        if key.startswith(prefix):
            config_key = key[len(prefix):].lower()
            config[config_key] = value
    return config


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def params_from_env(
    base: Parameters | None = None,
    prefix: str = "BITPLANES_",
) -> Parameters:
    """
    Apply environment overrides on top of `base` (defaults if None).

    Example:
        BITPLANES_NUM_LEVELS=3 BITPLANES_SIGMA=0.8 -> num_levels=3, sigma=0.8
    """
    base = base or Parameters()
    env = get_env_config(prefix)
    overrides: dict[str, Any] = {}

    for f in fields(Parameters):
        if f.name not in env:
            continue
        raw = env[f.name]
        current = getattr(base, f.name)
        if isinstance(current, bool):
            overrides[f.name] = _parse_bool(raw)
        elif isinstance(current, int):
            overrides[f.name] = int(raw)
        else:
            overrides[f.name] = float(raw)

    return replace(base, **overrides)
