"""
Seeded coherent noise shared by every terrain stage.

Wraps an OpenSimplex generator so that heightmaps, composition masks,
rock outlines and erosion channels all sample from one deterministic field.
"""

from typing import Union

import numpy as np
from opensimplex import OpenSimplex

from ..utils.random import derive_seed
from .alea_prng import AleaPRNG

ArrayLike = Union[float, np.ndarray]


class NoiseField:
    """Deterministic 2D/3D noise sampler with values in [-1, 1]."""

    def __init__(self, seed: int):
        """
        Initialize the noise field.

        Args:
            seed: Integer seed for the OpenSimplex permutation tables
        """
        self.seed = int(seed)
        self._simplex = OpenSimplex(seed=self.seed)

    @classmethod
    def from_prng(cls, prng: AleaPRNG) -> "NoiseField":
        """Create a noise field seeded from the next value of ``prng``."""
        return cls(derive_seed(prng))

    def sample2d(self, x: float, y: float) -> float:
        """Sample 2D noise at a point."""
        return min(1.0, max(-1.0, self._simplex.noise2(float(x), float(y))))

    def sample3d(self, x: float, y: float, z: float) -> float:
        """Sample 3D noise at a point."""
        return min(1.0, max(-1.0, self._simplex.noise3(float(x), float(y), float(z))))

    def sample2d_grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """
        Sample 2D noise on the grid spanned by two coordinate vectors.

        Args:
            xs: X coordinates, one per column
            ys: Y coordinates, one per row

        Returns:
            Array of shape (len(ys), len(xs))
        """
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        if xs.size == 0 or ys.size == 0:
            return np.zeros((ys.size, xs.size), dtype=np.float64)
        return np.clip(self._simplex.noise2array(xs, ys), -1.0, 1.0)

    def fractal2d(
        self,
        x: float,
        y: float,
        octaves: int = 4,
        falloff: float = 1.2,
        frequency: float = 1.0,
    ) -> float:
        """
        Multi-octave noise with amplitude 1/f^falloff for octave f.

        The sum is normalized by the total amplitude so the result stays
        in [-1, 1].

        Args:
            x: X coordinate
            y: Y coordinate
            octaves: Number of octaves, f = 1..octaves
            falloff: Amplitude exponent p
            frequency: Base frequency multiplier

        Returns:
            Noise value in [-1, 1]
        """
        total = 0.0
        norm = 0.0
        for f in range(1, max(1, octaves) + 1):
            amplitude = 1.0 / (f**falloff)
            total += self.sample2d(x * frequency * f, y * frequency * f) * amplitude
            norm += amplitude
        return total / norm
