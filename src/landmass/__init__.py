"""Deterministic island terrain and hydrology generation.

This package builds an island from a seed: an elevation field shaped by
distance to the coast, explicit rivers with stream orders and carved
valleys, D8 flow accumulation and a moisture field.
"""

from .config import TerrainConfig, find_config, list_configs, load_config
from .exceptions import ConfigError, MapFormatError, TerrainError
from .generator import TerrainGenerator, TerrainResult, generate_terrain
from .harbor import find_best_harbor
from .persistence import load_terrain, save_terrain
from .types import Point, River
from .validation import ValidationResult, validate_terrain

__all__ = [
    "ConfigError",
    "MapFormatError",
    "Point",
    "River",
    "TerrainConfig",
    "TerrainError",
    "TerrainGenerator",
    "TerrainResult",
    "ValidationResult",
    "find_best_harbor",
    "find_config",
    "generate_terrain",
    "list_configs",
    "load_config",
    "load_terrain",
    "save_terrain",
    "validate_terrain",
]
