"""Main terrain generation orchestration."""

import numpy as np
import structlog
from numpy.typing import NDArray

from .config import TerrainConfig
from .distance import compute_distance_field
from .fields import (
    apply_detail_relief,
    compute_moisture,
    enforce_land_floor,
    make_elevation_profile,
    max_land_distance,
)
from .hydrology import compute_flow_accumulation, find_peaks
from .island import build_island_mask, find_coastline_cells
from .noise import PerlinNoise2D
from .rivers import carve_river_valleys, generate_rivers, rasterize_rivers
from .rng import SeededRandom
from .types import River

logger = structlog.get_logger()


class TerrainResult:
    """Result of terrain generation.

    All grids have shape (map_size, map_size) and are indexed [y, x].
    """

    def __init__(
        self,
        height: NDArray[np.float64],
        flow_accumulation: NDArray[np.float64],
        moisture: NDArray[np.float64],
        rivers: list[River],
        land_mask: NDArray[np.bool_],
        config: TerrainConfig,
    ):
        self.height = height
        self.flow_accumulation = flow_accumulation
        self.moisture = moisture
        self.rivers = rivers
        self.land_mask = land_mask
        self.config = config

    @property
    def size(self) -> int:
        return self.height.shape[0]


class TerrainGenerator:
    """Runs the terrain pipeline for one configuration.

    The generator owns its random source and noise table; two generators
    never share state.
    """

    def __init__(self, config: TerrainConfig):
        self.config = config
        self.rng = SeededRandom(config.seed)
        self.noise = PerlinNoise2D(self.rng)

    def generate(self) -> TerrainResult:
        """Generate terrain, rivers and moisture.

        Returns:
            TerrainResult with every grid populated.
        """
        config = self.config
        size = config.map_size

        logger.info("terrain_generation_started", seed=config.seed, map_size=size)

        # Stage A: Island shape
        land_mask = build_island_mask(size, self.noise, config.island)
        coastline = find_coastline_cells(land_mask)
        logger.info(
            "island_mask_built",
            land_fraction=round(float(np.mean(land_mask)), 4),
            coastline_cells=len(coastline),
        )

        # Stage B: Elevation profile
        dist_to_coast, _ = compute_distance_field(size, coastline)
        height = make_elevation_profile(land_mask, dist_to_coast, config.elevation)
        logger.debug(
            "elevation_profile_built",
            max_land_distance=max_land_distance(land_mask, dist_to_coast),
            max_height=float(np.max(height)),
        )

        # Stage C: River sources
        hydrology = config.hydrology
        peaks = find_peaks(
            height,
            land_mask,
            window_size=hydrology.river_spacing,
            min_elevation=hydrology.min_peak_elevation,
        )
        if peaks:
            candidates = peaks
        else:
            candidates = [(size // 2, size // 2)]
            logger.warning("no_peaks_found", fallback_source=candidates[0])

        # Stage D: Rivers
        rivers = generate_rivers(height, candidates, self.noise, hydrology)
        logger.info(
            "rivers_traced",
            peaks=len(peaks),
            rivers=len(rivers),
            max_order=max((r.strahler for r in rivers), default=0),
        )

        # Stage E: Valleys and detail relief
        carve_river_valleys(height, rivers, config.valley)
        raised = enforce_land_floor(height, land_mask, config.elevation.land_floor)

        river_grid = rasterize_rivers(rivers, size)
        apply_detail_relief(height, land_mask, river_grid, self.noise, config.relief)
        raised += enforce_land_floor(height, land_mask, config.elevation.land_floor)
        if raised:
            logger.debug("land_floor_enforced", cells=raised)

        # Stage F: Flow and moisture
        flow_accumulation = compute_flow_accumulation(height)
        moisture = compute_moisture(height, flow_accumulation, rivers, config.moisture)

        _log_terrain_stats(height, flow_accumulation, moisture)

        return TerrainResult(
            height=height,
            flow_accumulation=flow_accumulation,
            moisture=moisture,
            rivers=rivers,
            land_mask=land_mask,
            config=config,
        )


def generate_terrain(config: TerrainConfig) -> TerrainResult:
    """Generate complete terrain from configuration.

    Args:
        config: Terrain generation configuration.

    Returns:
        TerrainResult with heights, flow, moisture and rivers.
    """
    return TerrainGenerator(config).generate()


def _log_terrain_stats(
    height: NDArray[np.float64],
    flow_accumulation: NDArray[np.float64],
    moisture: NDArray[np.float64],
) -> None:
    """Log terrain generation statistics."""
    land = height > 0
    land_count = int(np.count_nonzero(land))

    stats = {
        "cells": int(height.size),
        "land_cells": land_count,
        "min_height": round(float(np.min(height)), 2),
        "max_height": round(float(np.max(height)), 2),
        "max_flow": float(np.max(flow_accumulation)),
    }
    if land_count > 0:
        stats["mean_land_moisture"] = round(float(np.mean(moisture[land])), 3)

    logger.info("terrain_generation_completed", **stats)
