"""Harbor site selection on generated terrain."""

import numpy as np
from numpy.typing import NDArray

from .generator import TerrainResult
from .hydrology import D8_DX, D8_DY
from .types import Point

SHELTER_HEIGHT = 5.0
RIVER_ACCESS_FLOW = 100.0
RIVER_MOUTH_RADIUS = 20.0


def _count_neighbors(mask: NDArray[np.bool_]) -> NDArray[np.int64]:
    """Number of 8-neighbors where ``mask`` is True (out of bounds counts as False)."""
    size_y, size_x = mask.shape
    padded = np.pad(mask, 1, mode="constant", constant_values=False)
    counts = np.zeros(mask.shape, dtype=np.int64)
    for dx, dy in zip(D8_DX, D8_DY):
        counts += padded[1 + dy : 1 + dy + size_y, 1 + dx : 1 + dx + size_x]
    return counts


def score_harbors(result: TerrainResult) -> NDArray[np.float64]:
    """Score every cell as a harbor site.

    Only water cells touching land (8-connected) are candidates; every
    other cell scores ``-inf``. A candidate scores twice its depth, plus 10
    per sheltering neighbor higher than 5 m, plus 50 when flow accumulation
    exceeds 100, plus ``100 * strahler / 3`` for each river whose mouth lies
    closer than 20 cells.

    Args:
        result: Generated terrain.

    Returns:
        2D array of harbor scores.
    """
    height = result.height
    size = height.shape[0]

    water = height <= 0
    candidates = water & (_count_neighbors(height > 0) > 0)

    score = np.where(height < 0, np.abs(height) * 2.0, 0.0)
    score += _count_neighbors(height > SHELTER_HEIGHT) * 10.0
    score += np.where(result.flow_accumulation > RIVER_ACCESS_FLOW, 50.0, 0.0)

    coords = np.arange(size, dtype=np.float64)
    xx, yy = np.meshgrid(coords, coords)
    for river in result.rivers:
        mouth = river.mouth
        near_mouth = np.hypot(xx - mouth.x, yy - mouth.y) < RIVER_MOUTH_RADIUS
        score += np.where(near_mouth, 100.0 * river.strahler / 3.0, 0.0)

    return np.where(candidates, score, -np.inf)


def find_best_harbor(result: TerrainResult) -> Point:
    """Find the best harbor location.

    Ties resolve to the first cell in row-major order. Returns (0, 0)
    when the map has no coastal water.

    Args:
        result: Generated terrain.

    Returns:
        Point of the best harbor cell.
    """
    scores = score_harbors(result)
    if not np.any(np.isfinite(scores)):
        return Point(x=0, y=0)

    y, x = np.unravel_index(int(np.argmax(scores)), scores.shape)
    return Point(x=int(x), y=int(y))
