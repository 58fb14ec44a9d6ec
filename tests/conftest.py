"""Shared test fixtures for terrain tests."""

import pytest

from landmass.config import TerrainConfig, config_from_mapping
from landmass.generator import TerrainResult, generate_terrain
from landmass.noise import PerlinNoise2D
from landmass.rng import SeededRandom


@pytest.fixture
def noise() -> PerlinNoise2D:
    """Noise primitive seeded with 42."""
    return PerlinNoise2D(SeededRandom(42))


@pytest.fixture(scope="session")
def small_config() -> TerrainConfig:
    """100x100 island used by the end-to-end tests."""
    return config_from_mapping(
        {
            "seed": 42,
            "map_size": 100,
            "island": {"land_fraction": 0.5},
            "hydrology": {"river_spacing": 20},
        }
    )


@pytest.fixture(scope="session")
def small_result(small_config: TerrainConfig) -> TerrainResult:
    """Generated terrain for ``small_config``, shared across tests.

    Tests must not mutate it.
    """
    return generate_terrain(small_config)
