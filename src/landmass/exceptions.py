"""Custom exceptions for terrain generation."""


class TerrainError(Exception):
    """Base exception for terrain errors."""

    pass


class ConfigError(TerrainError):
    """Raised when a terrain configuration is missing fields or invalid."""

    pass


class MapFormatError(TerrainError):
    """Raised when a saved terrain file cannot be decoded."""

    pass
