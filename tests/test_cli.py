"""
Tests for the command line interface.
"""

import pytest
import numpy as np

from conftest import make_texture, small_homography, warp_by


def _write_video(path, frames, fps=10.0):
    import cv2

    h, w = frames[0].shape[:2]
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), fps, (w, h))
    if not writer.isOpened():
        pytest.skip("No MJPG video writer available")
    for frame in frames:
        writer.write(cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR))
    writer.release()


class TestCli:
    """Tests for bitplanes CLI entry point."""

    def test_no_command(self, capsys):
        """Test that running without a command prints help."""
        from bitplanes.__main__ import main

        assert main([]) == 0
        assert "track" in capsys.readouterr().out

    def test_config_command(self, tmp_path):
        """Test writing the example configuration."""
        from bitplanes.__main__ import main
        from bitplanes.core.config import load_config

        path = tmp_path / "config.json"
        assert main(["config", "-o", str(path)]) == 0
        assert load_config(path).num_levels == 3

    def test_track_needs_region(self, tmp_path, capsys):
        """Test that a template region is required."""
        from bitplanes.__main__ import main

        assert main(["track", str(tmp_path / "in.avi")]) == 2
        assert "--roi" in capsys.readouterr().err

    def test_track_missing_config(self, tmp_path):
        """Test a config path that doesn't exist."""
        from bitplanes.__main__ import main

        argv = [
            "track", str(tmp_path / "in.avi"),
            "--roi", "80", "60", "160", "120",
            "-c", str(tmp_path / "missing.json"),
        ]
        assert main(argv) == 2

    def test_build_parameters(self, tmp_path, monkeypatch):
        """Test precedence: file, then environment, then flags."""
        import argparse
        from bitplanes.__main__ import build_parameters
        from bitplanes.core.config import Parameters

        path = tmp_path / "params.json"
        Parameters(num_levels=2, sigma=0.5, subsampling=2).save(path)
        monkeypatch.setenv("BITPLANES_SIGMA", "0.9")

        args = argparse.Namespace(
            config=str(path), levels=None, max_iterations=7,
            subsampling=None, sigma=None, verbose=False,
        )
        params = build_parameters(args)
        assert params.num_levels == 2
        assert params.sigma == 0.9
        assert params.subsampling == 2
        assert params.max_iterations == 7

    def test_track_video(self, tmp_path):
        """Test tracking a short synthetic video to a corner file."""
        from bitplanes.__main__ import main
        from bitplanes.tracking.track_io import read_persp_file

        base = make_texture()
        frames = [base] + [
            warp_by(base, small_homography(tx=0.5 * i, ty=0.25 * i, angle_deg=0.0))
            for i in range(1, 4)
        ]
        video = tmp_path / "in.avi"
        _write_video(video, frames)
        output = tmp_path / "corners.txt"

        argv = [
            "track", str(video),
            "--roi", "80", "60", "160", "120",
            "-l", "2",
            "-o", str(output),
            "-q",
        ]
        assert main(argv) == 0

        data = read_persp_file(output)
        assert sorted(data) == [1, 2, 3, 4]
        np.testing.assert_allclose(data[1], [[80, 60], [240, 60], [240, 180], [80, 180]])
        assert np.all(np.isfinite(data[4]))
