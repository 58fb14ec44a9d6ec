"""Core types shared across the terrain pipeline."""

import math
from dataclasses import dataclass, field

from pydantic import BaseModel


class Point(BaseModel, frozen=True):
    """Immutable 2D coordinate in cell units.

    Traced river points are integral; other producers may use sub-cell
    positions. +X is east, +Y is south.
    """

    x: float
    y: float

    def cell(self) -> tuple[int, int]:
        """Nearest grid cell, rounding halves up."""
        return (round_half_up(self.x), round_half_up(self.y))

    def __str__(self) -> str:
        return f"({self.x:g}, {self.y:g})"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +inf."""
    return math.floor(value + 0.5)


@dataclass
class River:
    """A traced river course.

    Rivers live in a flat list and refer to each other by ``id`` (the list
    index), so tributary links never form object cycles.
    """

    id: int
    points: list[Point]  # source -> mouth
    strahler: int = 1
    tributaries: set[int] = field(default_factory=set)

    @property
    def source(self) -> Point:
        return self.points[0]

    @property
    def mouth(self) -> Point:
        return self.points[-1]

    @property
    def is_headwater(self) -> bool:
        return not self.tributaries

    def __len__(self) -> int:
        return len(self.points)
