"""Terrain generation configuration models and TOML loading."""

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from .exceptions import ConfigError


class IslandConfig(BaseModel, frozen=True, allow_inf_nan=False):
    """Island mask parameters."""

    land_fraction: float = Field(
        default=0.45, description="Noise weight against the radial penalty (mean coverage)"
    )
    noise_scale: float = Field(default=0.006, description="Base noise frequency per cell")
    noise_octaves: int = Field(default=4, ge=1, description="Octaves for the coastline noise")
    persistence: float = Field(default=0.5, description="Amplitude multiplier per octave")


class ElevationConfig(BaseModel, frozen=True, allow_inf_nan=False):
    """Coast-distance elevation profile."""

    peak_elevation: float = Field(default=300.0, description="Height of the highest land in meters")
    coastal_end: float = Field(default=0.3, description="Normalized distance where lowlands end")
    midland_end: float = Field(default=0.7, description="Normalized distance where midlands end")
    coastal_fraction: float = Field(
        default=0.15, description="Fraction of peak reached at the end of the lowlands"
    )
    midland_fraction: float = Field(
        default=0.40, description="Fraction of peak reached at the end of the midlands"
    )
    land_floor: float = Field(
        default=1.0, gt=0, description="Minimum land height; keeps land strictly above sea level"
    )
    ocean_base_depth: float = Field(default=5.0, description="Depth of water touching the coast")
    ocean_depth_slope: float = Field(default=0.3, description="Extra depth per cell from the coast")
    ocean_depth_cap: float = Field(default=50.0, description="Distance beyond which depth stops growing")

    @model_validator(mode="after")
    def check_band_edges(self) -> "ElevationConfig":
        if not 0 < self.coastal_end < self.midland_end < 1:
            raise ValueError("band edges must satisfy 0 < coastal_end < midland_end < 1")
        return self


class HydrologyConfig(BaseModel, frozen=True, allow_inf_nan=False):
    """Peak detection and river tracing parameters."""

    min_peak_elevation: float = Field(default=50.0, description="Lowest elevation a peak may have")
    river_spacing: int = Field(
        default=80, ge=1, description="Peak window size and min spacing between river sources"
    )
    meander_strength: float = Field(default=0.3, description="Weight of the meander bias (0-1)")
    meander_scale: float = Field(default=0.02, description="Noise frequency of the meander bias")
    meander_weight: float = Field(default=10.0, description="Meters of drop per unit of bias")
    min_river_length: int = Field(default=20, ge=1, description="Shortest river kept, in points")
    strahler_order2_length: int = Field(
        default=100, description="Rivers longer than this get at least order 2"
    )
    strahler_order3_length: int = Field(
        default=200, description="Rivers longer than this get order 3"
    )


class ValleyConfig(BaseModel, frozen=True, allow_inf_nan=False):
    """Valley carving profile around rivers."""

    width_base: float = Field(default=5.0, description="Valley half-width for order 0")
    width_per_order: float = Field(default=10.0, description="Extra half-width per stream order")
    depth_base: float = Field(default=5.0, description="Valley depth for order 0")
    depth_per_order: float = Field(default=3.0, description="Extra depth per stream order")


class ReliefConfig(BaseModel, frozen=True, allow_inf_nan=False):
    """Detail noise added to land after carving."""

    noise_scale: float = Field(default=0.005, description="Detail noise frequency per cell")
    noise_amplitude: float = Field(
        default=0.15, description="Noise amplitude as a fraction of local height"
    )
    near_river_radius: float = Field(
        default=10.0, ge=0, description="Half-width of the square window of reduced relief"
    )
    river_damping: float = Field(default=0.3, description="Amplitude multiplier near rivers")


class MoistureConfig(BaseModel, frozen=True, allow_inf_nan=False):
    """Moisture field parameters."""

    dryness_elevation: float = Field(
        default=400.0, gt=0, description="Height at which the elevation term reaches zero"
    )
    river_radius: float = Field(
        default=20.0, ge=0, description="Half-width of the square window of the river bonus"
    )
    river_bonus: float = Field(default=0.8, description="River term inside the radius")
    flow_normalizer: float = Field(
        default=1000.0, gt=0, description="Flow accumulation that saturates the river term"
    )
    coast_distance_cap: float = Field(
        default=100.0, gt=0, description="Coast distance beyond which the coastal term is zero"
    )


class TerrainConfig(BaseModel, frozen=True, allow_inf_nan=False):
    """Complete terrain generation configuration."""

    seed: int = Field(description="Random seed for reproducibility")
    map_size: int = Field(gt=0, description="Side length of the square map in cells")

    island: IslandConfig = Field(default_factory=IslandConfig)
    elevation: ElevationConfig = Field(default_factory=ElevationConfig)
    hydrology: HydrologyConfig = Field(default_factory=HydrologyConfig)
    valley: ValleyConfig = Field(default_factory=ValleyConfig)
    relief: ReliefConfig = Field(default_factory=ReliefConfig)
    moisture: MoistureConfig = Field(default_factory=MoistureConfig)


def config_from_mapping(data: Mapping[str, Any]) -> TerrainConfig:
    """Validate raw configuration data into a TerrainConfig.

    Args:
        data: Parsed configuration, e.g. from TOML.

    Returns:
        Validated, immutable TerrainConfig.

    Raises:
        ConfigError: If required fields are missing or values are invalid.
    """
    try:
        return TerrainConfig.model_validate(dict(data))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid terrain configuration: {problems}") from e


def load_config(config_path: Path) -> TerrainConfig:
    """Load configuration from a TOML file.

    The file may hold the fields at the top level or under a ``[terrain]``
    table.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed TerrainConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If the TOML is malformed or fails validation.
    """
    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Malformed TOML in {config_path}: {e}") from e
    if "terrain" in data and isinstance(data["terrain"], dict):
        data = data["terrain"]
    return config_from_mapping(data)


def find_config(name: str) -> Path:
    """Find a config file by name.

    Searches in the following order:
    1. Exact path if name contains path separator or ends in .toml
    2. configs/{name}.toml
    3. configs/{name}

    Args:
        name: Config name or path.

    Returns:
        Path to the config file.

    Raises:
        FileNotFoundError: If config file is not found.
    """
    if "/" in name or name.endswith(".toml"):
        path = Path(name)
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {name}")

    configs_dir = _configs_dir()

    config_path = configs_dir / f"{name}.toml"
    if config_path.exists():
        return config_path

    config_path = configs_dir / name
    if config_path.exists():
        return config_path

    raise FileNotFoundError(
        f"Config '{name}' not found in {configs_dir}. "
        f"Available configs: {list_configs()}"
    )


def list_configs() -> list[str]:
    """List available config names."""
    configs_dir = _configs_dir()
    if not configs_dir.exists():
        return []
    return sorted(p.stem for p in configs_dir.glob("*.toml"))


def _configs_dir() -> Path:
    return Path(__file__).parent.parent.parent / "configs"
