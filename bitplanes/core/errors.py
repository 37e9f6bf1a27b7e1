"""
Error types raised by the bitplanes tracker.

All errors derive from BitplanesError so callers can catch the whole family,
and from the matching builtin where one fits (ValueError, RuntimeError).
"""


class BitplanesError(Exception):
    """Base class for tracker errors."""


class InvalidRegionError(BitplanesError, ValueError):
    """The template region does not fit inside the image with a 1-pixel border."""


class InsufficientTextureError(BitplanesError):
    """The template yields a singular or near-singular Hessian."""


class DegenerateHessianError(BitplanesError):
    """The linear solve failed while tracking."""


class TemplateNotSetError(BitplanesError, RuntimeError):
    """track() was called before set_template()."""
