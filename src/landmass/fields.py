"""Field generation for terrain: elevation profile, relief and moisture."""

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from .config import ElevationConfig, MoistureConfig, ReliefConfig
from .distance import compute_distance_field, find_boundary
from .noise import PerlinNoise2D, smoothstep
from .rivers import rasterize_rivers
from .types import River


def max_land_distance(
    land_mask: NDArray[np.bool_],
    distance_to_coast: NDArray[np.float64],
) -> float:
    """Largest finite coast distance over land, floored at 1."""
    land_distances = distance_to_coast[land_mask & np.isfinite(distance_to_coast)]
    if land_distances.size == 0:
        return 1.0
    return max(1.0, float(np.max(land_distances)))


def make_elevation_profile(
    land_mask: NDArray[np.bool_],
    distance_to_coast: NDArray[np.float64],
    config: ElevationConfig,
) -> NDArray[np.float64]:
    """Map coast distance to a base height grid.

    Water deepens mildly away from the coast. Land rises through three
    smoothstep bands of normalized coast distance ``t``: coastal lowlands
    (up to ``coastal_fraction`` of the peak), rolling midlands (up to
    ``midland_fraction``) and highlands (up to the full peak). The whole
    land profile sits on ``land_floor`` so coastline cells stay above zero.

    Args:
        land_mask: Boolean mask where True = land.
        distance_to_coast: Distance from each cell to the coastline cells.
        config: Elevation profile parameters.

    Returns:
        2D height array in meters; ``<= 0`` exactly on water cells.
    """
    peak = config.peak_elevation
    t = np.minimum(1.0, distance_to_coast / max_land_distance(land_mask, distance_to_coast))

    coastal = smoothstep(0.0, config.coastal_end, t) * config.coastal_fraction * peak
    midland = (
        config.coastal_fraction * peak
        + smoothstep(config.coastal_end, config.midland_end, t)
        * (config.midland_fraction - config.coastal_fraction)
        * peak
    )
    highland = (
        config.midland_fraction * peak
        + smoothstep(config.midland_end, 1.0, t) * (1.0 - config.midland_fraction) * peak
    )
    land = config.land_floor + np.select(
        [t < config.coastal_end, t < config.midland_end],
        [coastal, midland],
        default=highland,
    )

    water = -config.ocean_base_depth - (
        np.minimum(distance_to_coast, config.ocean_depth_cap) * config.ocean_depth_slope
    )

    return np.where(land_mask, land, water).astype(np.float64)


def enforce_land_floor(
    elevation: NDArray[np.float64],
    land_mask: NDArray[np.bool_],
    land_floor: float,
) -> int:
    """Raise land cells that sank below ``land_floor``, in place.

    Returns:
        Number of cells that were raised.
    """
    sunk = land_mask & (elevation < land_floor)
    elevation[sunk] = land_floor
    return int(np.count_nonzero(sunk))


def near_mask(mask: NDArray[np.bool_], radius: float) -> NDArray[np.bool_]:
    """Cells with a True cell inside the square window of +/- ``radius`` cells."""
    reach = int(radius)
    window = ndimage.maximum_filter(
        mask.astype(np.uint8), size=2 * reach + 1, mode="constant", cval=0
    )
    return window > 0


def distance_to_coast_from_height(elevation: NDArray[np.float64]) -> NDArray[np.float64]:
    """Distance to land cells that touch water, read off a height grid."""
    coastline = find_boundary(elevation, lambda h: h > 0)
    distance, _ = compute_distance_field(elevation.shape[0], coastline)
    return distance


def apply_detail_relief(
    elevation: NDArray[np.float64],
    land_mask: NDArray[np.bool_],
    river_grid: NDArray[np.bool_],
    noise: PerlinNoise2D,
    config: ReliefConfig,
) -> None:
    """Add distance-scaled noise to land, damped near rivers, in place.

    Amplitude is proportional to local height (at least 1 m), so peaks get
    rougher than lowlands and river corridors stay smooth.

    Args:
        elevation: Elevation field, modified in place.
        land_mask: Boolean mask where True = land.
        river_grid: Rasterized rivers.
        noise: Seeded noise primitive.
        config: Relief parameters.
    """
    size = elevation.shape[0]
    coords = np.arange(size, dtype=np.float64)
    xx, yy = np.meshgrid(coords, coords)

    detail = noise.sample(xx * config.noise_scale, yy * config.noise_scale)
    near_river = near_mask(river_grid, config.near_river_radius)
    damping = np.where(near_river, config.river_damping, 1.0)
    amplitude = np.maximum(1.0, elevation) * config.noise_amplitude * damping

    elevation[land_mask] += (detail * amplitude)[land_mask]


def compute_moisture(
    elevation: NDArray[np.float64],
    flow_accumulation: NDArray[np.float64],
    rivers: Sequence[River],
    config: MoistureConfig | None = None,
) -> NDArray[np.float64]:
    """Generate moisture field.

    Land moisture averages three terms: elevation dryness, river proximity
    (a flat bonus near rivers, otherwise scaled flow accumulation) and
    coastal proximity. Water is fully wet.

    Args:
        elevation: Final height grid.
        flow_accumulation: D8 flow accumulation.
        rivers: Final river set.
        config: Moisture parameters; defaults when omitted.

    Returns:
        2D moisture array in range [0, 1].
    """
    if config is None:
        config = MoistureConfig()

    near_river = near_mask(rasterize_rivers(rivers, elevation.shape[0]), config.river_radius)

    elevation_effect = np.maximum(0.0, 1.0 - elevation / config.dryness_elevation)

    river_effect = np.where(
        near_river,
        config.river_bonus,
        np.minimum(1.0, flow_accumulation / config.flow_normalizer),
    )

    coast_distance = np.minimum(
        distance_to_coast_from_height(elevation), config.coast_distance_cap
    )
    coastal_effect = 1.0 - coast_distance / config.coast_distance_cap

    moisture = (elevation_effect + river_effect + coastal_effect) / 3.0
    moisture = np.where(elevation <= 0, 1.0, moisture)

    return np.clip(moisture, 0.0, 1.0).astype(np.float64)
