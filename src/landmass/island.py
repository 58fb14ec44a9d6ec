"""Island shaping: noisy radial land mask and coastline extraction."""

import numpy as np
from numpy.typing import NDArray

from .config import IslandConfig
from .distance import find_boundary
from .noise import PerlinNoise2D, fbm


def normalized_center_distance(size: int) -> NDArray[np.float64]:
    """Distance of every cell from the map center.

    0 at the center, 1 at the middle of each edge, about 1.41 at corners.

    Args:
        size: Map side length.

    Returns:
        2D array of normalized distances.
    """
    half = size / 2
    coords = np.arange(size, dtype=np.float64)
    xx, yy = np.meshgrid(coords, coords)
    dx = (xx - half) / half
    dy = (yy - half) / half
    return np.sqrt(dx * dx + dy * dy)


def build_island_mask(
    size: int,
    noise: PerlinNoise2D,
    config: IslandConfig,
) -> NDArray[np.bool_]:
    """Create the land/water mask from noise and a squared radial penalty.

    A cell is land when ``noise01 * land_fraction - distance**2 * 0.5 > 0``.
    The penalty alone guarantees water along the map edge whenever
    ``land_fraction <= 0.5``; ``land_fraction`` steers mean coverage but is
    not an exact fraction.

    Args:
        size: Map side length.
        noise: Seeded noise primitive.
        config: Island shaping parameters.

    Returns:
        Boolean mask where True = land.
    """
    coords = np.arange(size, dtype=np.float64)
    xx, yy = np.meshgrid(coords, coords)

    coast_noise = fbm(
        noise,
        xx,
        yy,
        base_scale=config.noise_scale,
        octaves=config.noise_octaves,
        persistence=config.persistence,
    )
    # Shift from [-1, 1] to [0, 1]
    coast_noise = coast_noise * 0.5 + 0.5

    distance = normalized_center_distance(size)
    edge_penalty = distance * distance * 0.5

    land_value = coast_noise * config.land_fraction - edge_penalty
    return land_value > 0


def find_coastline_cells(land_mask: NDArray[np.bool_]) -> list[tuple[int, int]]:
    """Find land cells that touch water along an edge (4-connected).

    Args:
        land_mask: Boolean mask where True = land.

    Returns:
        List of (x, y) coordinates in row-major order.
    """
    return find_boundary(land_mask, lambda mask: mask)


def land_fraction(land_mask: NDArray[np.bool_]) -> float:
    """Fraction of cells that are land."""
    if land_mask.size == 0:
        return 0.0
    return float(np.mean(land_mask))
