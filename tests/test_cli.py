"""Tests for the command-line interface."""

import pytest

from landmass.cli import main
from landmass.persistence import load_terrain


class TestMain:
    """Tests for the landmass entry point."""

    def test_generates_and_saves(self, tmp_path) -> None:
        """A run writes a loadable terrain file."""
        output = tmp_path / "out" / "island.npz"

        main(["--config", "small", "--size", "64", "--seed", "7", "--output", str(output)])

        result, metadata = load_terrain(output)
        assert result.height.shape == (64, 64)
        assert metadata["seed"] == 7

    def test_unknown_config_exits(self, tmp_path) -> None:
        """Unknown config names exit with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", "no-such-config", "--output", str(tmp_path / "x.npz")])
        assert exc_info.value.code == 1

    def test_invalid_override_exits(self, tmp_path) -> None:
        """Invalid overrides exit with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", "small", "--size", "0", "--output", str(tmp_path / "x.npz")])
        assert exc_info.value.code == 1
