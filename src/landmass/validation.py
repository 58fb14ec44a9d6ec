"""Post-generation validation of terrain results."""

import numpy as np
import structlog
from numpy.typing import NDArray
from scipy import ndimage

from .generator import TerrainResult
from .types import River

logger = structlog.get_logger()


class ValidationResult:
    """Result of terrain validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


def validate_terrain(result: TerrainResult) -> ValidationResult:
    """Validate generated terrain against its structural invariants.

    Args:
        result: Output of terrain generation.

    Returns:
        ValidationResult with any errors/warnings.
    """
    validation = ValidationResult()
    size = result.config.map_size

    # Check 1: Every grid is map_size x map_size
    if not _check_shapes(result, size, validation):
        _log_validation(validation)
        return validation

    # Check 2: Water/land sign convention
    _check_sign_invariant(result.height, result.land_mask, validation)

    # Check 3: Moisture bounds
    _check_moisture(result.moisture, validation)

    # Check 4: River courses
    _check_rivers(result.rivers, result.config.hydrology.min_river_length, validation)

    # Check 5: Tributary links form a forest
    _check_tributaries(result.rivers, validation)

    # Check 6: Land masses
    _check_land_components(result.land_mask, validation)

    _log_validation(validation)
    return validation


def _log_validation(validation: ValidationResult) -> None:
    if validation.passed:
        logger.info("terrain_validation_passed", warnings=len(validation.warnings))
    else:
        logger.warning("terrain_validation_failed", errors=len(validation.errors))
        for error in validation.errors:
            logger.error("terrain_validation_error", message=error)

    for warning in validation.warnings:
        logger.warning("terrain_validation_warning", message=warning)


def _check_shapes(result: TerrainResult, size: int, validation: ValidationResult) -> bool:
    """Check that all grids share the configured shape."""
    expected = (size, size)
    grids = {
        "height": result.height,
        "flow_accumulation": result.flow_accumulation,
        "moisture": result.moisture,
        "land_mask": result.land_mask,
    }

    ok = True
    for name, grid in grids.items():
        if grid.shape != expected:
            validation.add_error(f"{name} has shape {grid.shape}, expected {expected}")
            ok = False
    return ok


def _check_sign_invariant(
    height: NDArray[np.float64],
    land_mask: NDArray[np.bool_],
    validation: ValidationResult,
) -> None:
    """Check that height <= 0 exactly on water cells."""
    if not np.all(np.isfinite(height)):
        validation.add_error("Height grid contains non-finite values")
        return

    mismatched = int(np.count_nonzero((height > 0) != land_mask))
    if mismatched > 0:
        validation.add_error(f"{mismatched} cells disagree with the island mask")


def _check_moisture(moisture: NDArray[np.float64], validation: ValidationResult) -> None:
    """Check moisture lies in [0, 1]."""
    out_of_range = int(np.count_nonzero(~((moisture >= 0.0) & (moisture <= 1.0))))
    if out_of_range > 0:
        validation.add_error(f"{out_of_range} moisture values outside [0, 1]")


def _check_rivers(
    rivers: list[River],
    min_length: int,
    validation: ValidationResult,
) -> None:
    """Check ids, lengths, stream orders and revisits."""
    for index, river in enumerate(rivers):
        if river.id != index:
            validation.add_error(f"River at position {index} has id {river.id}")
        if len(river.points) < min_length:
            validation.add_error(
                f"River {river.id} has {len(river.points)} points, minimum is {min_length}"
            )
        if river.strahler < 1:
            validation.add_error(f"River {river.id} has stream order {river.strahler}")

        cells = [point.cell() for point in river.points]
        if len(set(cells)) != len(cells):
            validation.add_error(f"River {river.id} revisits a cell")


def _check_tributaries(rivers: list[River], validation: ValidationResult) -> None:
    """Check tributary links: valid ids, one parent each, no cycles."""
    parent: dict[int, int] = {}
    for river in rivers:
        for child in sorted(river.tributaries):
            if not 0 <= child < len(rivers) or child == river.id:
                validation.add_error(f"River {river.id} lists invalid tributary {child}")
                continue
            if child in parent:
                validation.add_error(
                    f"River {child} is a tributary of both {parent[child]} and {river.id}"
                )
                continue
            parent[child] = river.id

    for start in parent:
        seen = {start}
        node = start
        while node in parent:
            node = parent[node]
            if node in seen:
                validation.add_error(f"Tributary links of river {start} form a cycle")
                break
            seen.add(node)


def _check_land_components(
    land_mask: NDArray[np.bool_],
    validation: ValidationResult,
) -> None:
    """Check how many separate land masses there are."""
    structure = ndimage.generate_binary_structure(2, 2)  # 8-connected
    labeled, num_features = ndimage.label(land_mask, structure=structure)

    if num_features == 0:
        validation.add_warning("No land found")
    elif num_features > 1:
        sizes = ndimage.sum(land_mask, labeled, range(1, num_features + 1))
        largest_frac = float(np.max(sizes)) / float(np.sum(land_mask))
        if largest_frac < 0.99:
            validation.add_warning(
                f"Multiple land masses: {num_features} components, "
                f"largest is {largest_frac:.1%} of land"
            )
