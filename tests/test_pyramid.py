"""
Tests for coarse-to-fine tracking.
"""

import pytest
import numpy as np

from conftest import corner_error, small_homography, warp_by


class TestParametersPyramid:
    """Tests for per-level parameters."""

    def test_reduce_parameters(self):
        """Test the coarse level settings."""
        from bitplanes.core.config import Parameters
        from bitplanes.tracking import reduce_parameters

        params = Parameters(parameter_tolerance=1e-5, function_tolerance=1e-4, subsampling=2)
        reduced = reduce_parameters(params)

        assert reduced.sigma == 0.8
        assert reduced.max_iterations == 25
        assert reduced.parameter_tolerance == pytest.approx(1e-4)
        assert reduced.function_tolerance == pytest.approx(1e-3)
        assert reduced.subsampling == 2
        assert params.sigma == 1.2

    def test_make_parameters_pyramid(self):
        """Test that only the finest level keeps the given parameters."""
        from bitplanes.core.config import Parameters
        from bitplanes.tracking import make_parameters_pyramid, reduce_parameters

        params = Parameters(num_levels=3)
        levels = make_parameters_pyramid(params, 3)

        assert len(levels) == 3
        assert levels[0] is params
        assert levels[1] == levels[2] == reduce_parameters(params)

    def test_make_parameters_pyramid_invalid(self):
        """Test that at least one level is required."""
        from bitplanes.core.config import Parameters
        from bitplanes.tracking import make_parameters_pyramid

        with pytest.raises(ValueError):
            make_parameters_pyramid(Parameters(), 0)


class TestAutoLevels:
    """Tests for automatic level selection."""

    def test_large_template(self):
        """Test that halving stops below the minimum template size."""
        from bitplanes.core.types import Roi
        from bitplanes.tracking import auto_num_levels

        # 160x120 -> 80x60 -> 40x30 -> 20x15 (too small)
        assert auto_num_levels(Roi(80, 60, 160, 120), (240, 320)) == 3

    def test_small_template(self):
        """Test that a small template gets a single level."""
        from bitplanes.core.types import Roi
        from bitplanes.tracking import auto_num_levels

        assert auto_num_levels(Roi(10, 10, 40, 40), (240, 320)) == 1

    def test_edge_template(self):
        """Test that levels stop where the halved region would touch the border."""
        from bitplanes.core.types import Roi
        from bitplanes.tracking import auto_num_levels

        assert auto_num_levels(Roi(1, 1, 200, 200), (240, 320)) == 1


class TestPyramidTracker:
    """Tests for PyramidTracker class."""

    def test_initialization(self, capsys):
        """Test a fresh pyramid tracker."""
        from bitplanes.core.config import Parameters
        from bitplanes.tracking import PyramidTracker

        tracker = PyramidTracker(Parameters(num_levels=2, verbose=True))
        assert tracker.num_levels == 0
        np.testing.assert_array_equal(tracker.transform, np.eye(3))
        assert "AlgorithmParameters" in capsys.readouterr().out

    def test_track_before_template(self, texture):
        """Test that tracking needs a template."""
        from bitplanes.core.errors import TemplateNotSetError
        from bitplanes.tracking import PyramidTracker

        with pytest.raises(TemplateNotSetError):
            PyramidTracker().track(texture)

    def test_set_template_levels(self, texture, roi):
        """Test the per-level regions."""
        from bitplanes.core.config import Parameters
        from bitplanes.core.types import Roi
        from bitplanes.tracking import PyramidTracker

        tracker = PyramidTracker(Parameters(num_levels=3))
        tracker.set_template(texture, roi)

        assert tracker.num_levels == 3
        rois = [t.roi for t in tracker.trackers]
        assert rois == [Roi(80, 60, 160, 120), Roi(40, 30, 80, 60), Roi(20, 15, 40, 30)]
        assert tracker.trackers[1].params.sigma == 0.8

    def test_auto_levels(self, texture, roi):
        """Test that the default parameters pick the level count."""
        from bitplanes.tracking import PyramidTracker

        tracker = PyramidTracker()
        tracker.set_template(texture, roi)
        assert tracker.num_levels == 3

    def test_single_level_matches_tracker(self, texture, roi):
        """Test that one level behaves exactly like the plain tracker."""
        from bitplanes.core.config import Parameters
        from bitplanes.tracking import PyramidTracker, Tracker

        moved = warp_by(texture, small_homography())
        params = Parameters(num_levels=1)

        pyramid = PyramidTracker(params)
        pyramid.set_template(texture, roi)
        single = Tracker(params)
        single.set_template(texture, roi)

        a = pyramid.track(moved, np.eye(3))
        b = single.track(moved, np.eye(3))

        assert a.status is b.status
        assert a.num_iterations == b.num_iterations
        np.testing.assert_array_equal(a.transform, b.transform)

    def test_recovers_large_shift(self, texture, roi):
        """Test that coarse levels extend the capture range."""
        from bitplanes.core.config import Parameters
        from bitplanes.tracking import PyramidTracker

        T_true = small_homography(tx=5.0, ty=3.0, angle_deg=0.0)
        tracker = PyramidTracker(Parameters(num_levels=3))
        tracker.set_template(texture, roi)
        result = tracker.track(warp_by(texture, T_true))

        assert corner_error(roi, result.transform, T_true) < 1.0

    def test_warm_start(self, texture, roi):
        """Test that the last estimate seeds the next frame."""
        from bitplanes.core.config import Parameters
        from bitplanes.tracking import PyramidTracker

        T_true = small_homography()
        moved = warp_by(texture, T_true)

        tracker = PyramidTracker(Parameters(num_levels=2))
        tracker.set_template(texture, roi)
        first = tracker.track(moved)
        np.testing.assert_allclose(tracker.transform, first.transform)

        second = tracker.track(moved)
        assert corner_error(roi, second.transform, T_true) < 1.0

    def test_set_template_resets_warm_start(self, texture, roi):
        """Test that a new template restarts from the identity."""
        from bitplanes.core.config import Parameters
        from bitplanes.tracking import PyramidTracker

        tracker = PyramidTracker(Parameters(num_levels=2))
        tracker.set_template(texture, roi)
        tracker.track(warp_by(texture, small_homography()))
        assert not np.allclose(tracker.transform, np.eye(3))

        tracker.set_template(texture, roi)
        np.testing.assert_array_equal(tracker.transform, np.eye(3))
