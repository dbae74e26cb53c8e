"""
Heightmap generation for terrain depth layers.

Builds a square grid of normalized heights from multi-octave noise, then
shapes it: peaks are sharpened, heights fade out towards the left and right
edges, and the composition mask carves the scene layout. Foreground layers
get occasional cliff sharpening and background layers are blurred.
"""

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
import structlog
from scipy.ndimage import gaussian_filter

from .alea_prng import AleaPRNG
from .composition import CompositionMask
from .noise_field import NoiseField

logger = structlog.get_logger()


@dataclass
class HeightmapConfig:
    """Configuration for heightmap generation."""

    resolution: int = 100  # Cells per side
    base_frequency: float = 0.05  # Noise frequency per grid cell
    octaves: int = 3
    complexity: float = 1.0  # Frequency multiplier for every octave
    amplitude_falloff: float = 1.2  # p in amplitude 1/f^p
    peak_exponent: float = 1.5
    height_gain: float = 1.0

    # Cliff sharpening on foreground layers
    cliff_probability: float = 0.4
    max_cliff_height: float = 0.6
    cliff_sharpness: float = 0.9
    cliff_depth_limit: float = 0.5

    # Background smoothing
    smoothing_depth: float = 0.7
    smoothing_sigma: float = 1.0


def edge_envelope(t: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """Horizontal falloff: 0 at both edges, 1 at the center."""
    return 0.7 * np.sin(np.pi * t) + 0.3 * (1 - np.abs(2 * t - 1)) ** 2


class HeightmapBuilder:
    """Builds heightmaps with values in [0, 1]."""

    def __init__(
        self,
        config: Optional[HeightmapConfig] = None,
        noise: Optional[NoiseField] = None,
        prng: Optional[AleaPRNG] = None,
    ):
        """
        Initialize the heightmap builder.

        Args:
            config: Heightmap configuration
            noise: Noise field to sample
            prng: Generator for per-cell cliff decisions
        """
        self.config = config or HeightmapConfig()
        self.prng = prng or AleaPRNG("heightmap")
        self.noise = noise or NoiseField.from_prng(self.prng)

    def _lim(self, value: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Limit values to the 0-1 range."""
        return np.clip(value, 0.0, 1.0)

    def build(
        self,
        mask: Optional[CompositionMask] = None,
        depth: float = 0.0,
        scale: float = 1.0,
    ) -> np.ndarray:
        """
        Build one heightmap.

        Args:
            mask: Composition mask to apply, or None for no masking
            depth: Layer depth, 0 foreground to 1 background
            scale: Layer scale applied to noise coordinates

        Returns:
            Float array of shape (resolution, resolution) indexed [y, x]
        """
        res = max(0, int(self.config.resolution))
        if res == 0:
            return np.zeros((0, 0), dtype=np.float64)

        heights = self._octave_noise(res, depth, scale)

        # Normalize from [-1, 1] and sharpen peaks
        heights = self._lim((heights + 1.0) * 0.5)
        heights = heights**self.config.peak_exponent

        t = np.arange(res) / max(1, res - 1)
        heights = heights * edge_envelope(t)[np.newaxis, :]

        if mask is not None:
            coords = np.arange(res) / res
            heights = heights * mask.mask_grid(coords, coords)

        if depth < self.config.cliff_depth_limit:
            heights = self._add_cliffs(heights)

        if depth > self.config.smoothing_depth:
            heights = gaussian_filter(heights, sigma=self.config.smoothing_sigma, mode="nearest")

        heights = self._lim(heights * self.config.height_gain)

        logger.debug(
            "Heightmap built",
            depth=depth,
            resolution=res,
            mean=float(np.mean(heights)),
            max=float(np.max(heights)),
        )
        return heights

    def _octave_noise(self, res: int, depth: float, scale: float) -> np.ndarray:
        """Sum of noise octaves normalized to [-1, 1]."""
        cfg = self.config
        coords = np.arange(res, dtype=np.float64) * cfg.base_frequency * scale

        total = np.zeros((res, res), dtype=np.float64)
        norm = 0.0
        for f in range(1, max(1, cfg.octaves) + 1):
            amplitude = 1.0 / (f**cfg.amplitude_falloff)
            if f > 2:
                # Fine detail fades with distance
                amplitude *= 1.0 - depth
            freq = f * cfg.complexity
            total += self.noise.sample2d_grid(coords * freq, coords * freq) * amplitude
            norm += amplitude

        if norm <= 0:
            return total
        return total / norm

    def _add_cliffs(self, heights: np.ndarray) -> np.ndarray:
        """Sharpen a random subset of high cells into cliff steps."""
        cfg = self.config
        top = cfg.max_cliff_height
        if top >= 1.0:
            return heights

        res = heights.shape[0]
        shaped = heights.copy()
        for y in range(res):
            for x in range(res):
                if not self.prng.chance(cfg.cliff_probability):
                    continue
                h = shaped[y, x]
                if h <= top:
                    continue
                t = (h - top) / (1.0 - top)
                sharpness = t**cfg.cliff_sharpness
                vertical_noise = self.noise.sample2d(x / res * 20, y / res * 20) * 0.1
                shaped[y, x] = top + sharpness * (1.0 - top + vertical_noise)
        return shaped
