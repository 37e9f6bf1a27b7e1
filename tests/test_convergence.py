"""
Tests for the Gauss-Newton stopping rules.
"""

import numpy as np

from bitplanes.core.types import OptimizerStatus
from bitplanes.tracking.convergence import SQRT_EPS, test_converged

FLOAT_MAX = float(np.finfo(np.float32).max)


def _check(**overrides):
    """Call test_converged with values that trigger no rule unless overridden."""
    args = dict(
        dp_norm=1.0, p_norm=1.0, x_tol=1e-6,
        g_norm=10.0, tol_opt=1e-8, rel_factor=10.0,
        new_f=50.0, old_f=100.0, f_tol=1e-4,
        sqrt_eps=SQRT_EPS, it=2, max_iterations=50,
    )
    args.update(overrides)
    return test_converged(**args)


class TestConvergence:
    """Tests for test_converged."""

    def test_sqrt_eps(self):
        """Test single precision epsilon."""
        assert SQRT_EPS == np.sqrt(np.finfo(np.float32).eps).item()

    def test_keep_going(self):
        """Test that no rule fires on a normal iteration."""
        assert _check() is None

    def test_first_iteration_ignores_relative_reduction(self):
        """Test that the initial previous error never looks converged."""
        assert _check(old_f=FLOAT_MAX, new_f=10.0) is None

    def test_max_iterations(self):
        """Test the iteration budget."""
        assert _check(it=51) is OptimizerStatus.MAX_ITERATIONS
        assert _check(it=50) is None

    def test_first_order_optimality(self):
        """Test the gradient norm rule."""
        assert _check(g_norm=1e-8) is OptimizerStatus.FIRST_ORDER_OPTIMALITY

    def test_small_abs_parameters(self):
        """Test the absolute step rule."""
        assert _check(dp_norm=1e-7) is OptimizerStatus.SMALL_ABS_PARAMETERS

    def test_small_parameter_update(self):
        """Test the step relative to the parameter norm."""
        status = _check(dp_norm=2e-3, x_tol=1e-3, p_norm=1e4)
        assert status is OptimizerStatus.SMALL_PARAMETER_UPDATE

    def test_small_relative_reduction(self):
        """Test the relative cost change rule."""
        assert _check(new_f=99.999, old_f=100.0) is OptimizerStatus.SMALL_RELATIVE_REDUCTION

    def test_zero_cost_is_not_relative_reduction(self):
        """Test that a zero previous error does not satisfy the strict inequality."""
        assert _check(new_f=0.0, old_f=0.0) is None

    def test_priority_order(self):
        """Test that earlier rules win when several apply."""
        everything = dict(
            dp_norm=1e-9, x_tol=1e-6, g_norm=1e-12,
            new_f=100.0, old_f=100.0,
        )
        assert _check(it=51, **everything) is OptimizerStatus.MAX_ITERATIONS
        assert _check(**everything) is OptimizerStatus.FIRST_ORDER_OPTIMALITY

        del everything["g_norm"]
        assert _check(**everything) is OptimizerStatus.SMALL_ABS_PARAMETERS

        status = _check(dp_norm=2e-3, x_tol=1e-3, p_norm=1e4, new_f=100.0, old_f=100.0)
        assert status is OptimizerStatus.SMALL_PARAMETER_UPDATE
