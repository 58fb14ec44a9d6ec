"""Tests for shared terrain types."""

import pytest
from pydantic import ValidationError

from landmass.types import Point, River, round_half_up


class TestPoint:
    """Tests for Point."""

    def test_hashable_by_value(self):
        """Equal points collapse in a set."""
        assert len({Point(x=3, y=4), Point(x=3.0, y=4.0), Point(x=4, y=3)}) == 2

    def test_frozen(self):
        """Points are immutable."""
        point = Point(x=1, y=2)
        with pytest.raises(ValidationError):
            point.x = 5

    def test_cell_rounds_half_up(self):
        """Sub-cell positions snap to the nearest cell, halves upward."""
        assert Point(x=2.5, y=-0.5).cell() == (3, 0)
        assert Point(x=1.49, y=7).cell() == (1, 7)

    def test_str(self):
        assert str(Point(x=3, y=4.5)) == "(3, 4.5)"


class TestRiver:
    """Tests for River."""

    def test_endpoints(self):
        """Source is the first point, mouth the last."""
        river = River(id=0, points=[Point(x=0, y=0), Point(x=1, y=0), Point(x=2, y=1)])
        assert river.source == Point(x=0, y=0)
        assert river.mouth == Point(x=2, y=1)
        assert len(river) == 3

    def test_headwater(self):
        """A river without tributaries is a headwater."""
        river = River(id=1, points=[Point(x=0, y=0)])
        assert river.is_headwater
        river.tributaries.add(0)
        assert not river.is_headwater


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(-0.5) == 0
    assert round_half_up(-1.5) == -1
