"""End-to-end tests for terrain generation."""

import numpy as np
import pytest
from structlog.testing import capture_logs

from landmass.config import TerrainConfig, config_from_mapping
from landmass.generator import TerrainGenerator, TerrainResult, generate_terrain
from landmass.hydrology import find_peaks
from landmass.types import Point


class TestGenerateTerrain:
    """Tests for the full pipeline on a 100x100 island."""

    def test_dimensions(self, small_result: TerrainResult) -> None:
        """All grids share the configured shape."""
        expected = (100, 100)
        assert small_result.height.shape == expected
        assert small_result.flow_accumulation.shape == expected
        assert small_result.moisture.shape == expected
        assert small_result.land_mask.shape == expected
        assert small_result.size == 100

    def test_mixed_land_and_water(self, small_result: TerrainResult) -> None:
        """The island has both land and water."""
        assert np.any(small_result.height > 0)
        assert np.any(small_result.height <= 0)

    def test_sign_matches_island_mask(self, small_result: TerrainResult) -> None:
        """Positive height exactly on land cells."""
        np.testing.assert_array_equal(small_result.height > 0, small_result.land_mask)

    def test_border_is_water(self, small_result: TerrainResult) -> None:
        """Map edges are water."""
        height = small_result.height
        assert np.all(height[0, :] <= 0)
        assert np.all(height[-1, :] <= 0)
        assert np.all(height[:, 0] <= 0)
        assert np.all(height[:, -1] <= 0)

    def test_river_reaches_water(self, small_result: TerrainResult) -> None:
        """At least one river ends in water."""
        height = small_result.height
        assert small_result.rivers
        mouths = [river.mouth.cell() for river in small_result.rivers]
        assert any(height[y, x] <= 0 for x, y in mouths)

    def test_river_invariants(self, small_result: TerrainResult) -> None:
        """Rivers are long enough, ordered, and never revisit a cell."""
        min_length = small_result.config.hydrology.min_river_length
        for index, river in enumerate(small_result.rivers):
            assert river.id == index
            assert len(river.points) >= min_length
            assert river.strahler >= 1
            cells = [point.cell() for point in river.points]
            assert len(set(cells)) == len(cells)

    def test_river_steps_are_adjacent(self, small_result: TerrainResult) -> None:
        """Consecutive river points are 8-neighbors."""
        for river in small_result.rivers:
            for a, b in zip(river.points, river.points[1:]):
                assert max(abs(a.x - b.x), abs(a.y - b.y)) == 1

    def test_only_mouth_in_water(self, small_result: TerrainResult) -> None:
        """Rivers run over land until their last point."""
        height = small_result.height
        for river in small_result.rivers:
            for point in river.points[:-1]:
                x, y = point.cell()
                assert height[y, x] > 0

    def test_moisture_bounds(self, small_result: TerrainResult) -> None:
        """Moisture lies in [0, 1] and water is saturated."""
        moisture = small_result.moisture
        assert moisture.min() >= 0.0
        assert moisture.max() <= 1.0
        assert np.all(moisture[small_result.height <= 0] == 1.0)

    def test_flow_accumulation_floor(self, small_result: TerrainResult) -> None:
        """Every cell contributes one unit of flow."""
        assert small_result.flow_accumulation.min() >= 1.0

    def test_deterministic(self, small_config: TerrainConfig, small_result: TerrainResult) -> None:
        """Same config produces identical output."""
        again = generate_terrain(small_config)

        np.testing.assert_array_equal(again.height, small_result.height)
        np.testing.assert_array_equal(again.flow_accumulation, small_result.flow_accumulation)
        np.testing.assert_array_equal(again.moisture, small_result.moisture)
        assert [r.points for r in again.rivers] == [r.points for r in small_result.rivers]
        assert [r.strahler for r in again.rivers] == [r.strahler for r in small_result.rivers]

    def test_different_seed_different_output(self, small_config: TerrainConfig) -> None:
        """Changing the seed changes the island."""
        data = small_config.model_dump()
        data["seed"] = 43
        other = generate_terrain(config_from_mapping(data))
        assert not np.array_equal(other.land_mask, generate_terrain(small_config).land_mask)


class TestDegenerateMaps:
    """Tests for maps without land."""

    @pytest.fixture
    def water_config(self) -> TerrainConfig:
        return config_from_mapping(
            {"seed": 1, "map_size": 10, "island": {"land_fraction": 0.0}}
        )

    def test_all_water_no_rivers(self, water_config: TerrainConfig) -> None:
        """A map without land yields no rivers and does not raise."""
        result = generate_terrain(water_config)

        assert not np.any(result.land_mask)
        assert np.all(result.height <= 0)
        assert result.rivers == []
        assert np.all(result.moisture == 1.0)

    def test_all_water_no_peaks(self, water_config: TerrainConfig) -> None:
        """Peak detection finds nothing on open water."""
        result = generate_terrain(water_config)
        assert find_peaks(result.height, result.land_mask, window_size=3) == []

    def test_no_qualifying_peak_falls_back_to_center(self, small_config: TerrainConfig) -> None:
        """Land without a high enough peak traces from the map center."""
        config = config_from_mapping(
            {
                **small_config.model_dump(),
                "hydrology": {
                    **small_config.hydrology.model_dump(),
                    "min_peak_elevation": small_config.elevation.peak_elevation + 1000.0,
                },
            }
        )

        with capture_logs() as logs:
            result = generate_terrain(config)

        assert np.any(result.land_mask)
        assert any(entry["event"] == "no_peaks_found" for entry in logs)
        assert len(result.rivers) <= 1
        for river in result.rivers:
            assert river.source == Point(x=50, y=50)
            assert len(river.points) >= config.hydrology.min_river_length

    def test_single_cell_map(self) -> None:
        """A 1x1 map generates without error."""
        result = generate_terrain(config_from_mapping({"seed": 0, "map_size": 1}))
        assert result.height.shape == (1, 1)
        assert result.rivers == []


class TestTerrainGenerator:
    """Tests for the generator object."""

    def test_generate_is_repeatable(self, small_config: TerrainConfig) -> None:
        """One generator gives the same result on every call."""
        generator = TerrainGenerator(small_config)
        a = generator.generate()
        b = generator.generate()
        np.testing.assert_array_equal(a.height, b.height)

    def test_generators_share_nothing(self, small_config: TerrainConfig) -> None:
        """Each generator owns its random source and noise table."""
        a = TerrainGenerator(small_config)
        b = TerrainGenerator(small_config)
        assert a.rng is not b.rng
        assert a.noise is not b.noise
        np.testing.assert_array_equal(a.noise.perm, b.noise.perm)
