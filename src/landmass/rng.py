"""Seeded pseudo-random stream.

A plain linear congruential generator. Every generation call owns its own
instance, so two generators never share state.
"""

import math

_MULTIPLIER = 1664525
_INCREMENT = 1013904223
_MODULUS = 4294967296  # 2**32


class SeededRandom:
    """Deterministic uniform stream in [0, 1) driven by an integer seed."""

    def __init__(self, seed: int) -> None:
        self.seed = int(seed) % _MODULUS
        self._state = self.seed

    def next(self) -> float:
        """Advance the stream and return a float in [0, 1)."""
        self._state = (self._state * _MULTIPLIER + _INCREMENT) % _MODULUS
        return self._state / _MODULUS

    def next_range(self, low: float, high: float) -> float:
        return low + self.next() * (high - low)

    def next_int(self, low: int, high: int) -> int:
        """Return an integer in [low, high] inclusive."""
        return math.floor(self.next_range(low, high + 1))

    def reset(self) -> None:
        """Rewind to the first value of the stream."""
        self._state = self.seed
