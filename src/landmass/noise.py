"""Coherent noise for terrain generation.

Provides a seeded 2D gradient (Perlin) noise primitive, fBm octave
summation and the smoothstep blend used by the elevation profile.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .rng import SeededRandom

# Eight unit gradients: axes then diagonals
_GRADIENTS = np.array(
    [
        [1.0, 0.0],
        [-1.0, 0.0],
        [0.0, 1.0],
        [0.0, -1.0],
        [1.0, 1.0],
        [-1.0, 1.0],
        [1.0, -1.0],
        [-1.0, -1.0],
    ],
    dtype=np.float64,
)
_GRADIENTS /= np.linalg.norm(_GRADIENTS, axis=1, keepdims=True)


def _fade(t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Quintic fade curve of improved Perlin noise."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(
    a: NDArray[np.float64], b: NDArray[np.float64], t: NDArray[np.float64]
) -> NDArray[np.float64]:
    return a + t * (b - a)


def make_permutation(rng: SeededRandom) -> NDArray[np.int64]:
    """Build a doubled 256-entry permutation table from the random stream.

    Fisher-Yates shuffle, consuming 255 values from ``rng``.

    Args:
        rng: Random source; advanced in place.

    Returns:
        Array of 512 ints (the permutation repeated twice).
    """
    perm = list(range(256))
    for i in range(255, 0, -1):
        j = int(rng.next() * (i + 1))
        perm[i], perm[j] = perm[j], perm[i]
    table = np.array(perm, dtype=np.int64)
    return np.concatenate([table, table])


class PerlinNoise2D:
    """Seeded 2D gradient noise, callable on scalars or arrays.

    Output lies in roughly [-0.71, 0.71] and is exactly zero on integer
    lattice points.
    """

    def __init__(self, rng: SeededRandom) -> None:
        self.perm = make_permutation(rng)

    def __call__(self, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64] | float:
        scalar = np.ndim(x) == 0 and np.ndim(y) == 0
        result = self.sample(np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64))
        if scalar:
            return float(result)
        return result

    def sample(
        self, x: NDArray[np.float64], y: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        """Evaluate noise at array coordinates."""
        x_floor = np.floor(x)
        y_floor = np.floor(y)
        xi0 = x_floor.astype(np.int64) & 255
        yi0 = y_floor.astype(np.int64) & 255
        xi1 = (xi0 + 1) & 255
        yi1 = (yi0 + 1) & 255

        xf = x - x_floor
        yf = y - y_floor
        u = _fade(xf)
        v = _fade(yf)

        p = self.perm
        g00 = _GRADIENTS[p[p[xi0] + yi0] & 7]
        g01 = _GRADIENTS[p[p[xi0] + yi1] & 7]
        g10 = _GRADIENTS[p[p[xi1] + yi0] & 7]
        g11 = _GRADIENTS[p[p[xi1] + yi1] & 7]

        d00 = g00[..., 0] * xf + g00[..., 1] * yf
        d01 = g01[..., 0] * xf + g01[..., 1] * (yf - 1.0)
        d10 = g10[..., 0] * (xf - 1.0) + g10[..., 1] * yf
        d11 = g11[..., 0] * (xf - 1.0) + g11[..., 1] * (yf - 1.0)

        return _lerp(_lerp(d00, d10, u), _lerp(d01, d11, u), v)


def fbm(
    noise: PerlinNoise2D,
    x: ArrayLike,
    y: ArrayLike,
    base_scale: float,
    octaves: int = 4,
    persistence: float = 0.5,
    lacunarity: float = 2.0,
) -> NDArray[np.float64]:
    """Sum octaves of noise at doubling frequency and decaying amplitude.

    Args:
        noise: Noise primitive.
        x: Sample x coordinates in cells.
        y: Sample y coordinates in cells.
        base_scale: Frequency of the first octave (cycles per cell).
        octaves: Number of noise layers to sum.
        persistence: Amplitude multiplier between octaves.
        lacunarity: Frequency multiplier between octaves.

    Returns:
        Noise values normalized by the total amplitude, roughly in [-1, 1].
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    result = np.zeros(np.broadcast(x, y).shape, dtype=np.float64)

    amplitude = 1.0
    frequency = base_scale
    max_amplitude = 0.0

    for _ in range(max(int(octaves), 1)):
        result += noise.sample(x * frequency, y * frequency) * amplitude
        max_amplitude += amplitude
        amplitude *= persistence
        frequency *= lacunarity

    if max_amplitude == 0.0:
        return result
    return result / max_amplitude


def smoothstep(edge0: float, edge1: float, x: ArrayLike) -> NDArray[np.float64]:
    """Smooth Hermite interpolation between 0 and 1.

    Args:
        edge0: Lower edge of transition.
        edge1: Upper edge of transition.
        x: Input values.

    Returns:
        Smoothly interpolated values in [0, 1].
    """
    t = np.clip((np.asarray(x, dtype=np.float64) - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)
