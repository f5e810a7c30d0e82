"""
Tests for the command-line interface.
"""

from __future__ import annotations

import json

import numpy as np
import pytest

from pybezier.cli import COMMANDS, create_parser, main


@pytest.fixture
def corner_file(tmp_path, corner_knots):
    path = tmp_path / "corner.txt"
    np.savetxt(path, corner_knots, header="3 3", comments="")
    return path


class TestParser:
    """Tests for argument parsing."""

    def test_commands(self):
        assert set(COMMANDS) == {"fit", "eval", "closest", "track", "plot", "validate", "info"}
        assert create_parser().parse_args(["info"]).command == "info"

    def test_negative_location(self):
        args = create_parser().parse_args(["closest", "curve.txt", "1", "-1", "0"])
        assert args.location == [1.0, -1.0, 0.0]
        assert not args.closed

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])
        assert excinfo.value.code == 0
        assert "pybezier" in capsys.readouterr().out


class TestCommands:
    """Tests for the individual commands."""

    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_info(self, capsys):
        assert main(["info"]) == 0
        out = capsys.readouterr().out
        assert "pybezier version" in out
        assert "numpy" in out

    def test_validate(self, capsys, temp_config_file):
        assert main(["validate", str(temp_config_file)]) == 0
        out = capsys.readouterr().out
        assert "is valid" in out
        assert "Max Newton iterations: 80" in out

    def test_validate_missing_file(self, capsys, tmp_path):
        assert main(["validate", str(tmp_path / "missing.yml")]) == 1
        assert "Error" in capsys.readouterr().err

    def test_fit(self, capsys, knots_file, tmp_path):
        output = tmp_path / "curve.txt"
        assert main(["fit", str(knots_file), str(output)]) == 0
        assert "Wrote 7 points (6 segments)" in capsys.readouterr().out
        assert output.read_text().splitlines()[0] == "7 9"

    def test_eval_global(self, capsys, knots_file):
        assert main(["eval", str(knots_file), "--t", "0"]) == 0
        assert capsys.readouterr().out.strip() == "0 0 0"

    def test_eval_segment(self, capsys, knots_file):
        assert main(["eval", str(knots_file), "--segment", "0", "--t", "1"]) == 0
        out = capsys.readouterr().out
        assert "position: 2 0.8 0" in out
        assert "first derivative:" in out
        assert "second derivative:" in out

    def test_eval_bad_segment(self, capsys, knots_file):
        assert main(["eval", str(knots_file), "--segment", "9"]) == 1
        assert "Error" in capsys.readouterr().err

    def test_closest(self, capsys, corner_file):
        assert main(["closest", str(corner_file), "1", "-1", "0"]) == 0
        out = capsys.readouterr().out
        assert "point:" in out
        assert "segment: 0" in out
        assert "code: 0" in out

    def test_closest_frame(self, capsys, corner_file):
        assert main(["closest", str(corner_file), "1", "-1", "0", "--frame"]) == 0
        out = capsys.readouterr().out
        assert "tangent:" in out
        assert "curvature:" in out

    @pytest.mark.integration
    def test_track(self, capsys, knots_file, locations_file, tmp_path):
        output = tmp_path / "run.json"
        assert main(["track", str(knots_file), str(locations_file), "-o", str(output)]) == 0
        assert "Tracked 60 locations" in capsys.readouterr().out
        data = json.loads(output.read_text())
        assert data["num_steps"] == 60

    @pytest.mark.integration
    def test_plot(self, capsys, knots_file, locations_file, tmp_path):
        output = tmp_path / "curve.png"
        assert main(["plot", str(knots_file), "-o", str(output), "--locations", str(locations_file)]) == 0
        assert output.exists()
        assert "Saved plot" in capsys.readouterr().out

    def test_missing_curve_file(self, capsys, tmp_path):
        assert main(["eval", str(tmp_path / "missing.txt")]) == 1
