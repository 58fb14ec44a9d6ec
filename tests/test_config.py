"""Tests for terrain configuration."""

import pytest
from pydantic import ValidationError

from landmass.config import (
    ElevationConfig,
    HydrologyConfig,
    TerrainConfig,
    config_from_mapping,
    find_config,
    list_configs,
    load_config,
)
from landmass.exceptions import ConfigError, TerrainError


class TestTerrainConfig:
    """Tests for TerrainConfig."""

    def test_defaults(self):
        """Test default values."""
        config = TerrainConfig(seed=1, map_size=64)
        assert config.island.land_fraction == 0.45
        assert config.elevation.peak_elevation == 300.0
        assert config.hydrology.river_spacing == 80
        assert config.hydrology.min_river_length == 20
        assert config.relief.river_damping == 0.3
        assert config.moisture.coast_distance_cap == 100.0

    def test_frozen(self):
        """Configs are immutable."""
        config = TerrainConfig(seed=1, map_size=64)
        with pytest.raises(ValidationError):
            config.seed = 2

    def test_rejects_nan(self):
        """Non-finite numbers are rejected."""
        with pytest.raises(ValidationError):
            HydrologyConfig(meander_strength=float("nan"))

    @pytest.mark.parametrize(
        "coastal_end, midland_end",
        [(0.5, 0.5), (0.0, 0.7), (0.8, 0.4), (0.3, 1.0)],
    )
    def test_rejects_bad_band_edges(self, coastal_end, midland_end):
        """Band edges must be ordered strictly inside (0, 1)."""
        with pytest.raises(ValidationError, match="band edges"):
            ElevationConfig(coastal_end=coastal_end, midland_end=midland_end)

    def test_bad_band_edges_from_mapping(self):
        """Equal band edges surface as a ConfigError."""
        with pytest.raises(ConfigError):
            config_from_mapping(
                {
                    "seed": 1,
                    "map_size": 10,
                    "elevation": {"coastal_end": 0.4, "midland_end": 0.4},
                }
            )


class TestConfigFromMapping:
    """Tests for config_from_mapping."""

    def test_nested_tables(self):
        """Nested mappings populate sub-configs."""
        config = config_from_mapping(
            {"seed": 42, "map_size": 100, "hydrology": {"river_spacing": 20}}
        )
        assert config.seed == 42
        assert config.hydrology.river_spacing == 20
        assert config.hydrology.min_river_length == 20

    def test_missing_seed(self):
        """Missing seed is a ConfigError."""
        with pytest.raises(ConfigError, match="seed"):
            config_from_mapping({"map_size": 100})

    def test_missing_map_size(self):
        """Missing map_size is a ConfigError."""
        with pytest.raises(ConfigError, match="map_size"):
            config_from_mapping({"seed": 1})

    @pytest.mark.parametrize("size", [0, -10])
    def test_non_positive_map_size(self, size):
        """map_size must be positive."""
        with pytest.raises(ConfigError):
            config_from_mapping({"seed": 1, "map_size": size})

    def test_config_error_is_terrain_error(self):
        """ConfigError belongs to the package hierarchy."""
        with pytest.raises(TerrainError):
            config_from_mapping({})


class TestLoadConfig:
    """Tests for TOML loading."""

    def test_top_level_fields(self, tmp_path):
        """Fields may sit at the top level."""
        path = tmp_path / "island.toml"
        path.write_text('seed = 7\nmap_size = 32\n\n[island]\nland_fraction = 0.3\n')

        config = load_config(path)

        assert config.seed == 7
        assert config.map_size == 32
        assert config.island.land_fraction == 0.3

    def test_terrain_table(self, tmp_path):
        """Fields may sit under a [terrain] table."""
        path = tmp_path / "island.toml"
        path.write_text("[terrain]\nseed = 3\nmap_size = 16\n")

        assert load_config(path).map_size == 16

    def test_malformed_toml(self, tmp_path):
        """Broken TOML is a ConfigError."""
        path = tmp_path / "broken.toml"
        path.write_text("seed = = 1\n")

        with pytest.raises(ConfigError, match="Malformed"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        """Missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")


class TestFindConfig:
    """Tests for bundled config lookup."""

    def test_bundled_configs_listed(self):
        """Bundled configs are discoverable."""
        names = list_configs()
        assert "default" in names
        assert "small" in names

    def test_find_by_name(self):
        """Names resolve to files that load."""
        config = load_config(find_config("small"))
        assert config.map_size == 100
        assert config.hydrology.river_spacing == 20

    def test_default_loads(self):
        """The default config is valid."""
        config = load_config(find_config("default"))
        assert config.map_size == 512

    def test_unknown_name(self):
        """Unknown names raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            find_config("does-not-exist")

    def test_explicit_path(self, tmp_path):
        """Paths are returned as-is when they exist."""
        path = tmp_path / "custom.toml"
        path.write_text("seed = 1\nmap_size = 8\n")
        assert find_config(str(path)) == path
