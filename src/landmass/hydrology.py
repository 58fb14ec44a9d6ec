"""Hydrology: D8 flow direction, flow accumulation and peak detection."""

import numpy as np
from numpy.typing import NDArray

# D8 directions: NW, N, NE, E, SE, S, SW, W (clockwise from north-west).
# Ties resolve to the first direction in this order.
D8_DX = np.array([-1, 0, 1, 1, 1, 0, -1, -1], dtype=np.int64)
D8_DY = np.array([-1, -1, -1, 0, 1, 1, 1, 0], dtype=np.int64)

# No-data value for flow direction
FLOW_NODATA = -1


def compute_d8_flow_direction(
    elevation: NDArray[np.float64],
) -> NDArray[np.int8]:
    """Compute D8 flow direction for each cell (vectorized).

    Each cell points to the neighbor with the largest elevation drop
    (unweighted for diagonals). -1 marks cells without a strictly lower
    neighbor (flats and pits).

    Args:
        elevation: Elevation field.

    Returns:
        Flow direction array (0-7 indexing D8_DX/D8_DY, -1 for no flow).
    """
    height, width = elevation.shape

    # Out-of-bounds neighbors read as +inf, so their drop is -inf
    padded = np.pad(
        elevation.astype(np.float64), 1, mode="constant", constant_values=np.inf
    )

    drops = np.empty((8, height, width), dtype=np.float64)
    for d in range(8):
        dy, dx = D8_DY[d], D8_DX[d]
        neighbor = padded[1 + dy : 1 + dy + height, 1 + dx : 1 + dx + width]
        drops[d] = elevation - neighbor

    max_drop = np.max(drops, axis=0)
    flow_dir = np.argmax(drops, axis=0).astype(np.int8)
    flow_dir[max_drop <= 0] = FLOW_NODATA

    return flow_dir


def compute_flow_accumulation(
    elevation: NDArray[np.float64],
    flow_dir: NDArray[np.int8] | None = None,
    base_flow: float = 1.0,
) -> NDArray[np.float64]:
    """Accumulate unit flow downstream along D8 directions.

    Cells are visited from highest to lowest elevation (stable for ties),
    each passing its total to its downstream neighbor. Flow only moves to
    strictly lower cells, so every donor is visited before its receiver.

    Args:
        elevation: Elevation field.
        flow_dir: Precomputed D8 directions; computed when omitted.
        base_flow: Flow contributed by every cell.

    Returns:
        Flow accumulation array (>= base_flow everywhere).
    """
    if flow_dir is None:
        flow_dir = compute_d8_flow_direction(elevation)

    height, width = elevation.shape
    ys, xs = np.mgrid[0:height, 0:width]
    has_flow = flow_dir != FLOW_NODATA
    safe_dir = np.where(has_flow, flow_dir, 0)
    target = (ys + D8_DY[safe_dir]) * width + (xs + D8_DX[safe_dir])
    downstream = np.where(has_flow, target, -1).reshape(-1).tolist()

    order = np.argsort(-elevation.reshape(-1), kind="stable").tolist()
    accumulation = [base_flow] * (height * width)

    for i in order:
        j = downstream[i]
        if j >= 0:
            accumulation[j] += accumulation[i]

    return np.array(accumulation, dtype=np.float64).reshape(height, width)


def find_peaks(
    elevation: NDArray[np.float64],
    land_mask: NDArray[np.bool_],
    window_size: int = 80,
    min_elevation: float = 50.0,
) -> list[tuple[int, int]]:
    """Find windowed local elevation maxima to use as river sources.

    The grid is scanned on a stride of half the window so neighboring
    windows do not report the same summit twice.

    Args:
        elevation: Elevation field.
        land_mask: Boolean mask where True = land.
        window_size: Full width of the comparison window.
        min_elevation: Lowest elevation a peak may have.

    Returns:
        List of (x, y) peaks in scan order; empty when nothing qualifies.
    """
    size = elevation.shape[0]
    half = max(1, window_size // 2)
    peaks: list[tuple[int, int]] = []

    for y in range(half, size - half, half):
        for x in range(half, size - half, half):
            if not land_mask[y, x]:
                continue

            center = elevation[y, x]
            if center < min_elevation:
                continue

            window = elevation[
                max(0, y - half) : min(size, y + half + 1),
                max(0, x - half) : min(size, x + half + 1),
            ]
            if not np.any(window > center):
                peaks.append((x, y))

    return peaks
