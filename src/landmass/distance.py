"""Distance fields over the grid: multi-source BFS and polyline rasterization.

Used for distance to coastline (elevation zoning, coastal moisture) and
distance to rivers (valley carving, relief damping, river moisture).
"""

import math
from collections import deque
from collections.abc import Callable, Iterable, Sequence

import numpy as np
from numpy.typing import NDArray

from .types import Point, round_half_up

SQRT2 = math.sqrt(2.0)

# Neighbor order: W, E, N, S, NW, NE, SW, SE as (dx, dy, step length).
# First reach wins, so this order is part of the output.
NEIGHBORS_8: tuple[tuple[int, int, float], ...] = (
    (-1, 0, 1.0),
    (1, 0, 1.0),
    (0, -1, 1.0),
    (0, 1, 1.0),
    (-1, -1, SQRT2),
    (1, -1, SQRT2),
    (-1, 1, SQRT2),
    (1, 1, SQRT2),
)


def compute_distance_field(
    size: int,
    seeds: Iterable[tuple[int, int]],
    obstacles: NDArray[np.bool_] | None = None,
    labels: Sequence[int] | None = None,
) -> tuple[NDArray[np.float64], NDArray[np.int64] | None]:
    """Multi-source breadth-first distance from a set of seed cells.

    Seeds start at distance 0 and are queued in the order given. Expansion is
    8-connected (axis steps cost 1, diagonal steps sqrt 2) and each cell is
    finalized the first time it is reached.

    Args:
        size: Grid side length.
        seeds: (x, y) seed cells; out-of-bounds and repeated seeds are ignored.
        obstacles: Optional mask of cells that are never entered.
        labels: Optional label per seed, propagated to every cell the seed
            reaches first.

    Returns:
        Tuple of (distance grid with ``inf`` for unreached cells, label grid
        with ``-1`` for unreached cells or None when no labels were given).
    """
    distance = np.full((size, size), np.inf, dtype=np.float64)
    dist_flat = distance.reshape(-1)
    visited = bytearray(size * size)
    blocked = obstacles.reshape(-1) if obstacles is not None else None

    owner: NDArray[np.int64] | None = None
    owner_flat = None
    if labels is not None:
        owner = np.full((size, size), -1, dtype=np.int64)
        owner_flat = owner.reshape(-1)

    queue: deque[tuple[int, int, float]] = deque()

    for i, (sx, sy) in enumerate(seeds):
        sx, sy = int(sx), int(sy)
        if not (0 <= sx < size and 0 <= sy < size):
            continue
        idx = sy * size + sx
        if visited[idx]:
            continue
        visited[idx] = 1
        dist_flat[idx] = 0.0
        if owner_flat is not None:
            owner_flat[idx] = labels[i]
        queue.append((sx, sy, 0.0))

    while queue:
        x, y, dist = queue.popleft()
        current_owner = owner_flat[y * size + x] if owner_flat is not None else -1

        for dx, dy, step in NEIGHBORS_8:
            nx = x + dx
            ny = y + dy
            if nx < 0 or nx >= size or ny < 0 or ny >= size:
                continue
            nidx = ny * size + nx
            if visited[nidx]:
                continue
            if blocked is not None and blocked[nidx]:
                continue

            new_dist = dist + step
            dist_flat[nidx] = new_dist
            visited[nidx] = 1
            if owner_flat is not None:
                owner_flat[nidx] = current_owner
            queue.append((nx, ny, new_dist))

    return distance, owner


def rasterize_line(p0: Point, p1: Point) -> list[tuple[int, int]]:
    """Cells on the segment between two points (Bresenham).

    Endpoints are rounded to cells first; both endpoints are included.

    Args:
        p0: Segment start.
        p1: Segment end.

    Returns:
        List of (x, y) cells from p0 to p1.
    """
    x0 = round_half_up(p0.x)
    y0 = round_half_up(p0.y)
    x1 = round_half_up(p1.x)
    y1 = round_half_up(p1.y)

    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    cells = []
    while True:
        cells.append((x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x0 += sx
        if e2 < dx:
            err += dx
            y0 += sy
    return cells


def rasterize_polylines(
    size: int,
    polylines: Sequence[Sequence[Point]],
) -> tuple[list[tuple[int, int]], list[int]]:
    """Rasterize polylines into unique in-bounds cells.

    Args:
        size: Grid side length.
        polylines: Point sequences; single-point polylines contribute nothing.

    Returns:
        Tuple of (cells in first-seen order, index of the polyline that
        contributed each cell).
    """
    seen = bytearray(size * size)
    cells: list[tuple[int, int]] = []
    sources: list[int] = []

    for line_index, polyline in enumerate(polylines):
        for i in range(len(polyline) - 1):
            for x, y in rasterize_line(polyline[i], polyline[i + 1]):
                if not (0 <= x < size and 0 <= y < size):
                    continue
                idx = y * size + x
                if seen[idx]:
                    continue
                seen[idx] = 1
                cells.append((x, y))
                sources.append(line_index)

    return cells, sources


def compute_distance_to_polylines(
    size: int,
    polylines: Sequence[Sequence[Point]],
) -> NDArray[np.float64]:
    """Distance from every cell to the nearest rasterized polyline cell.

    Args:
        size: Grid side length.
        polylines: Point sequences (e.g. river courses).

    Returns:
        Distance grid, ``inf`` everywhere when there are no segments.
    """
    cells, _ = rasterize_polylines(size, polylines)
    distance, _ = compute_distance_field(size, cells)
    return distance


def mask_cells(mask: NDArray[np.bool_]) -> list[tuple[int, int]]:
    """(x, y) of every True cell in row-major order."""
    ys, xs = np.nonzero(mask)
    return [(int(x), int(y)) for y, x in zip(ys, xs)]


def find_boundary(
    grid: NDArray,
    predicate: Callable[[NDArray], NDArray[np.bool_]],
) -> list[tuple[int, int]]:
    """Find region-A cells that touch region B along an edge.

    Args:
        grid: Values to classify.
        predicate: Vectorized test returning True for region A.

    Returns:
        List of (x, y) boundary cells in row-major order.
    """
    region_a = np.asarray(predicate(grid), dtype=bool)
    region_b = ~region_a
    touches_b = np.zeros_like(region_a)
    touches_b[:, 1:] |= region_b[:, :-1]
    touches_b[:, :-1] |= region_b[:, 1:]
    touches_b[1:, :] |= region_b[:-1, :]
    touches_b[:-1, :] |= region_b[1:, :]
    return mask_cells(region_a & touches_b)
