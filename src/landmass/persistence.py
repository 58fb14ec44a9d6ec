"""Terrain persistence: save and load generated results."""

import json
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import structlog

from .config import config_from_mapping
from .exceptions import ConfigError, MapFormatError
from .generator import TerrainResult
from .types import Point, River

logger = structlog.get_logger()

FORMAT_VERSION = 1

_GRIDS = ("height", "flow_accumulation", "moisture", "land_mask")


def save_terrain(path: Path, result: TerrainResult) -> None:
    """Save a terrain result to disk.

    Uses numpy's compressed .npz format; rivers, config and metadata are
    stored as UTF-8 JSON.

    Args:
        path: Output path (should end with .npz).
        result: Generated terrain.
    """
    rivers_data = [
        {
            "id": river.id,
            "points": [[point.x, point.y] for point in river.points],
            "strahler": river.strahler,
            "tributaries": sorted(river.tributaries),
        }
        for river in result.rivers
    ]

    metadata = {
        "version": FORMAT_VERSION,
        "seed": result.config.seed,
        "map_size": result.config.map_size,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }

    np.savez_compressed(
        path,
        height=result.height,
        flow_accumulation=result.flow_accumulation,
        moisture=result.moisture,
        land_mask=result.land_mask,
        rivers=np.frombuffer(json.dumps(rivers_data).encode("utf-8"), dtype=np.uint8),
        config=np.frombuffer(result.config.model_dump_json().encode("utf-8"), dtype=np.uint8),
        metadata=np.frombuffer(json.dumps(metadata).encode("utf-8"), dtype=np.uint8),
    )

    file_size = path.stat().st_size / 1024
    logger.info("terrain_saved", path=str(path), size_kb=round(file_size, 1))


def load_terrain(path: Path) -> tuple[TerrainResult, dict]:
    """Load a terrain result from disk.

    Args:
        path: Path to .npz file.

    Returns:
        Tuple of (TerrainResult, metadata dict).

    Raises:
        FileNotFoundError: If file doesn't exist.
        MapFormatError: If file format is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Terrain file not found: {path}")

    try:
        data = np.load(path, allow_pickle=False)
    except (OSError, ValueError) as e:
        raise MapFormatError(f"Cannot read terrain file {path}: {e}") from e

    with data:
        missing = [name for name in (*_GRIDS, "rivers", "config") if name not in data]
        if missing:
            raise MapFormatError(f"Invalid terrain file: missing {', '.join(missing)}")

        grids = {name: data[name] for name in _GRIDS}
        rivers_data = _read_json(data, "rivers")
        config_data = _read_json(data, "config")
        metadata = _read_json(data, "metadata") if "metadata" in data else {}

    try:
        config = config_from_mapping(config_data)
    except ConfigError as e:
        raise MapFormatError(f"Invalid terrain file: {e}") from e

    expected = (config.map_size, config.map_size)
    for name, grid in grids.items():
        if grid.shape != expected:
            raise MapFormatError(
                f"Invalid terrain file: {name} has shape {grid.shape}, expected {expected}"
            )

    try:
        rivers = [
            River(
                id=int(entry["id"]),
                points=[Point(x=x, y=y) for x, y in entry["points"]],
                strahler=int(entry["strahler"]),
                tributaries={int(t) for t in entry["tributaries"]},
            )
            for entry in rivers_data
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise MapFormatError(f"Invalid terrain file: malformed river record ({e})") from e

    result = TerrainResult(
        height=grids["height"].astype(np.float64),
        flow_accumulation=grids["flow_accumulation"].astype(np.float64),
        moisture=grids["moisture"].astype(np.float64),
        rivers=rivers,
        land_mask=grids["land_mask"].astype(bool),
        config=config,
    )

    logger.info("terrain_loaded", path=str(path), map_size=config.map_size, rivers=len(rivers))
    return result, metadata


def _read_json(data, key: str):
    try:
        return json.loads(data[key].tobytes().decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MapFormatError(f"Invalid terrain file: {key} is not valid JSON") from e
