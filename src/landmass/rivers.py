"""Explicit rivers: source sampling, downhill tracing, stream order, valleys.

Rivers are traced independently from each source with a private visited
set; confluences and stream orders are resolved afterwards in one
sequential pass.
"""

from collections.abc import Sequence

import numpy as np
import structlog
from numpy.typing import NDArray

from .config import HydrologyConfig, ValleyConfig
from .distance import NEIGHBORS_8, compute_distance_field, rasterize_line, rasterize_polylines
from .noise import PerlinNoise2D
from .types import Point, River

logger = structlog.get_logger()


def sample_ridge_sources(
    points: Sequence[tuple[int, int]],
    spacing: float,
) -> list[tuple[int, int]]:
    """Thin candidate sources to a deterministic, spaced sequence.

    Points are stably sorted by y and kept when they lie at least
    ``spacing`` rows below the previously kept point.

    Args:
        points: Candidate (x, y) sources, e.g. peaks in scan order.
        spacing: Minimum row distance between kept sources.

    Returns:
        Kept (x, y) sources in ascending y order.
    """
    sources: list[tuple[int, int]] = []
    last_y = -np.inf

    for x, y in sorted(points, key=lambda p: p[1]):
        if y - last_y >= spacing:
            sources.append((x, y))
            last_y = y

    return sources


def trace_river(
    elevation: NDArray[np.float64],
    source: tuple[int, int],
    noise: PerlinNoise2D | None = None,
    meander_strength: float = 0.3,
    meander_scale: float = 0.02,
    meander_weight: float = 10.0,
    max_steps: int | None = None,
) -> list[tuple[int, int]]:
    """Trace a river from its source by greedy steepest descent.

    Each step scores the unvisited in-bounds neighbors as elevation drop
    plus a meander bias sampled from noise at the current cell, and moves to
    the first neighbor with the highest score. A move needs a score above
    zero, so a positive bias can climb a little and a negative one can hold
    the river in place. The trace stops when no neighbor scores above zero,
    after stepping onto water (height <= 0), or after ``max_steps`` (default
    three times the map size).

    Args:
        elevation: Elevation field.
        source: (x, y) start cell.
        noise: Noise for the meander bias; no bias when None.
        meander_strength: Bias weight (0 disables meandering).
        meander_scale: Noise frequency of the bias.
        meander_weight: Meters of drop per unit of weighted noise.
        max_steps: Safety bound on the number of steps.

    Returns:
        (x, y) cells from source to mouth, never repeating a cell.
    """
    size = elevation.shape[0]
    if max_steps is None:
        max_steps = size * 3

    x, y = int(source[0]), int(source[1])
    path = [(x, y)]
    visited = {(x, y)}

    meander = noise is not None and meander_strength > 0

    for _ in range(max_steps):
        here = float(elevation[y, x])
        bias = 0.0
        if meander:
            bias = noise(x * meander_scale, y * meander_scale) * meander_strength * meander_weight

        best: tuple[int, int] | None = None
        best_score = 0.0

        for dx, dy, _ in NEIGHBORS_8:
            nx = x + dx
            ny = y + dy
            if nx < 0 or nx >= size or ny < 0 or ny >= size:
                continue
            if (nx, ny) in visited:
                continue

            score = here - float(elevation[ny, nx]) + bias
            if score > best_score:
                best_score = score
                best = (nx, ny)

        if best is None:
            break

        path.append(best)
        if elevation[best[1], best[0]] <= 0:
            break

        visited.add(best)
        x, y = best

    return path


def merge_rivers(
    paths: Sequence[Sequence[tuple[int, int]]],
    config: HydrologyConfig,
) -> list[River]:
    """Build River records, detect confluences and assign stream order.

    Stream order is a length/confluence heuristic: 1 by default, at least 2
    when the course is longer than ``strahler_order2_length`` or passes a
    confluence, 3 when longer than ``strahler_order3_length``.

    A river becomes a tributary of the highest-ranked river it shares its
    first qualifying confluence with, where rank is (length, -id) and only
    higher-ranked rivers qualify. Each river has at most one parent.

    Args:
        paths: Traced (x, y) courses, source to mouth.
        config: Hydrology configuration.

    Returns:
        Rivers with ids equal to their index in ``paths``.
    """
    cell_to_rivers: dict[tuple[int, int], list[int]] = {}
    for i, path in enumerate(paths):
        for cell in path:
            members = cell_to_rivers.setdefault(cell, [])
            if i not in members:
                members.append(i)

    confluences = {cell: ids for cell, ids in cell_to_rivers.items() if len(ids) > 1}

    rivers = [
        River(id=i, points=[Point(x=x, y=y) for x, y in path])
        for i, path in enumerate(paths)
    ]

    for river, path in zip(rivers, paths):
        if len(path) > config.strahler_order3_length:
            river.strahler = 3
        elif len(path) > config.strahler_order2_length:
            river.strahler = 2

        if any(cell in confluences for cell in path):
            river.strahler = max(river.strahler, 2)

    def rank(i: int) -> tuple[int, int]:
        return (len(paths[i]), -i)

    for i, path in enumerate(paths):
        for cell in path:
            ids = confluences.get(cell)
            if ids is None:
                continue
            higher = [j for j in ids if rank(j) > rank(i)]
            if higher:
                parent = max(higher, key=rank)
                rivers[parent].tributaries.add(i)
                break

    if confluences:
        logger.debug("confluences_found", count=len(confluences))

    return rivers


def generate_rivers(
    elevation: NDArray[np.float64],
    candidates: Sequence[tuple[int, int]],
    noise: PerlinNoise2D | None,
    config: HydrologyConfig,
) -> list[River]:
    """Trace rivers from candidate sources and merge them.

    Args:
        elevation: Elevation field.
        candidates: (x, y) source candidates (peaks or a fallback point).
        noise: Noise for the meander bias.
        config: Hydrology configuration.

    Returns:
        Rivers that reached at least ``min_river_length`` points.
    """
    sources = sample_ridge_sources(candidates, config.river_spacing)

    paths: list[list[tuple[int, int]]] = []
    for source in sources:
        path = trace_river(
            elevation,
            source,
            noise,
            meander_strength=config.meander_strength,
            meander_scale=config.meander_scale,
            meander_weight=config.meander_weight,
        )
        if len(path) < config.min_river_length:
            logger.debug("river_discarded", source=source, length=len(path))
            continue
        paths.append(path)

    return merge_rivers(paths, config)


def rasterize_rivers(rivers: Sequence[River], size: int) -> NDArray[np.bool_]:
    """Burn river courses into a boolean grid.

    Each segment is drawn with Bresenham's algorithm and widened to a
    square of half-width ``strahler // 2``.

    Args:
        rivers: Rivers to draw.
        size: Grid side length.

    Returns:
        Boolean grid where True = river cell.
    """
    grid = np.zeros((size, size), dtype=bool)

    for river in rivers:
        half = river.strahler // 2
        for i in range(len(river.points) - 1):
            for x, y in rasterize_line(river.points[i], river.points[i + 1]):
                if not (0 <= x < size and 0 <= y < size):
                    continue
                grid[
                    max(0, y - half) : y + half + 1,
                    max(0, x - half) : x + half + 1,
                ] = True

    return grid


def river_owner_labels(
    rivers: Sequence[River],
    cells: Sequence[tuple[int, int]],
    cell_sources: Sequence[int],
) -> list[int]:
    """Owning river id for each rasterized river cell.

    The owner of a cell on a river course is the highest-order river
    passing through it, first assignment winning ties. Cells that only lie
    between course points belong to the river that drew them.
    """
    owners: dict[tuple[int, int], int] = {}
    for river in rivers:
        for point in river.points:
            cell = point.cell()
            existing = owners.get(cell)
            if existing is None or river.strahler > rivers[existing].strahler:
                owners[cell] = river.id

    return [owners.get(cell, rivers[src].id) for cell, src in zip(cells, cell_sources)]


def carve_river_valleys(
    elevation: NDArray[np.float64],
    rivers: Sequence[River],
    config: ValleyConfig,
) -> NDArray[np.float64]:
    """Carve parabolic valleys around rivers, in place.

    Every cell closer than ``width = width_base + s * width_per_order`` to a
    river is lowered by ``depth * (1 - (d / width)**2)`` with
    ``depth = depth_base + s * depth_per_order``, where ``s`` is the stream
    order of the river that owns the nearest river cell.

    Args:
        elevation: Elevation field, modified in place.
        rivers: Final river set with ids equal to list positions.
        config: Valley profile parameters.

    Returns:
        Distance from every cell to the nearest river cell.
    """
    size = elevation.shape[0]
    cells, cell_sources = rasterize_polylines(size, [river.points for river in rivers])
    labels = river_owner_labels(rivers, cells, cell_sources)
    distance, owner = compute_distance_field(size, cells, labels=labels)

    if not cells:
        return distance

    order_by_id = np.array([river.strahler for river in rivers], dtype=np.float64)
    order = np.where(owner >= 0, order_by_id[np.maximum(owner, 0)], 1.0)

    width = config.width_base + order * config.width_per_order
    depth = config.depth_base + order * config.depth_per_order

    within = distance < width
    t = np.where(within, distance / width, 1.0)
    carve = depth * (1.0 - t * t)
    elevation[within] -= carve[within]

    return distance
