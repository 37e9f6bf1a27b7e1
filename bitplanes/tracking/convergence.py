"""
Stopping rules for the Gauss-Newton loop.
"""

import numpy as np

from bitplanes.core.types import OptimizerStatus

# Thresholds are computed in single precision.
SQRT_EPS = float(np.sqrt(np.finfo(np.float32).eps))


def test_converged(
    dp_norm: float,
    p_norm: float,
    x_tol: float,
    g_norm: float,
    tol_opt: float,
    rel_factor: float,
    new_f: float,
    old_f: float,
    f_tol: float,
    sqrt_eps: float,
    it: int,
    max_iterations: int,
) -> OptimizerStatus | None:
    """
    Evaluate the stopping rules in priority order; the first match wins.

    Args:
        dp_norm: Norm of the parameter step
        p_norm: Norm of the current parameters
        x_tol: Parameter tolerance
        g_norm: Infinity norm of the gradient
        tol_opt: First-order optimality tolerance
        rel_factor: Scale applied to tol_opt
        new_f: Current sum of squared residuals
        old_f: Previous sum of squared residuals
        f_tol: Function tolerance
        sqrt_eps: Square root of machine epsilon
        it: Current iteration
        max_iterations: Iteration budget

    Returns:
        The terminal status, or None to keep iterating
    """
    if it > max_iterations:
        return OptimizerStatus.MAX_ITERATIONS

    if g_norm < tol_opt * rel_factor:
        return OptimizerStatus.FIRST_ORDER_OPTIMALITY

    if dp_norm < x_tol:
        return OptimizerStatus.SMALL_ABS_PARAMETERS

    if dp_norm < x_tol * (sqrt_eps * p_norm):
        return OptimizerStatus.SMALL_PARAMETER_UPDATE

    if abs(old_f - new_f) < f_tol * old_f:
        return OptimizerStatus.SMALL_RELATIVE_REDUCTION

    return None


# Keep pytest from collecting the function when imported into test modules.
test_converged.__test__ = False
