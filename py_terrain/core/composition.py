"""
Scene composition masks.

A composition mode is drawn once per generation and decides the overall
silhouette of the scene: an open valley channel down the middle, a curving
coastline, or a run of vertical cliff bands.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping, Optional, Union

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .noise_field import NoiseField

logger = structlog.get_logger()

ArrayLike = Union[float, np.ndarray]

DEFAULT_WEIGHTS = {"coastal": 0.4, "valley": 0.3, "cliff": 0.3}


class CompositionMode(str, Enum):
    """Scene layouts."""

    VALLEY = "valley"
    COASTAL = "coastal"
    CLIFF = "cliff"


@dataclass(frozen=True)
class CompositionParams:
    """Mode and shape parameters for one generation."""

    mode: CompositionMode = CompositionMode.VALLEY
    center_opening: float = 0.6  # Width of the valley channel / cliff spacing
    cliff_steepness: float = 0.9  # Exponent on the cliff bands
    smoothing: float = 0.2
    vertical_bias: float = 0.8  # Noise-free share of the cliff mask
    water_visibility: float = 0.4  # Coastal fade distance
    coastal_curve: float = 0.3  # Coastline sinusoid amplitude
    valley_floor: float = 0.0  # Mask value left at the valley center


def smoothstep(edge0: float, edge1: float, x: ArrayLike) -> ArrayLike:
    """
    Hermite interpolation between two edges.

    Degenerate edges (edge0 == edge1) collapse into a hard step.
    """
    if edge1 == edge0:
        result = np.where(np.asarray(x) < edge0, 0.0, 1.0)
    else:
        t = np.clip((np.asarray(x) - edge0) / (edge1 - edge0), 0.0, 1.0)
        result = t * t * (3.0 - 2.0 * t)
    return result if isinstance(x, np.ndarray) else float(result)


def choose_composition(
    prng: AleaPRNG,
    weights: Optional[Mapping[str, float]] = None,
    base: Optional[CompositionParams] = None,
) -> CompositionParams:
    """
    Draw a composition mode and its mode-specific parameters.

    Args:
        prng: Generator to draw from
        weights: Relative weight per mode name (coastal, valley, cliff)
        base: Defaults that non-drawn parameters are taken from

    Returns:
        CompositionParams for this generation
    """
    base = base or CompositionParams()
    weights = weights or DEFAULT_WEIGHTS
    known = {m.value for m in CompositionMode}
    unknown = [name for name in weights if name not in known]
    if unknown:
        raise ValueError(f"Unknown composition modes: {unknown}")

    mode = CompositionMode(prng.weighted_choice(weights))

    if mode is CompositionMode.COASTAL:
        params = replace(
            base,
            mode=mode,
            water_visibility=0.3 + prng.random() * 0.2,
            coastal_curve=0.2 + prng.random() * 0.3,
        )
    elif mode is CompositionMode.VALLEY:
        params = replace(base, mode=mode, center_opening=0.2 + prng.random() * 0.2)
    else:
        params = replace(base, mode=mode, center_opening=0.15 + prng.random() * 0.15)

    logger.debug("Composition chosen", mode=mode.value, center_opening=params.center_opening)
    return params


class CompositionMask:
    """Per-cell multiplier for the active composition mode."""

    def __init__(self, params: CompositionParams, noise: NoiseField):
        """
        Initialize the mask.

        Args:
            params: Composition parameters
            noise: Noise field used by the cliff mode
        """
        self.params = params
        self.noise = noise

    def mask_at(self, x: float, y: float) -> float:
        """
        Mask value at normalized coordinates.

        Args:
            x: Horizontal position in [0, 1]
            y: Vertical position in [0, 1]

        Returns:
            Multiplier in [0, 1]
        """
        p = self.params

        if p.mode is CompositionMode.VALLEY:
            s = smoothstep(p.center_opening / 2, p.center_opening, abs(x - 0.5))
            mask = p.valley_floor + (1.0 - p.valley_floor) * s
        elif p.mode is CompositionMode.COASTAL:
            coast_x = math.sin(y * math.pi) * p.coastal_curve
            mask = smoothstep(0.0, p.water_visibility, abs(x - (0.5 + coast_x)))
        else:
            vertical = abs(math.sin(x * math.pi * 2)) ** p.cliff_steepness
            bias = p.vertical_bias + (1 - p.vertical_bias) * self.noise.sample2d(x * 10, y * 10)
            mask = vertical * bias

        return min(1.0, max(0.0, mask))

    def mask_grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """
        Mask values on the grid spanned by two normalized coordinate vectors.

        Args:
            xs: Normalized x coordinates, one per column
            ys: Normalized y coordinates, one per row

        Returns:
            Array of shape (len(ys), len(xs)) in [0, 1]
        """
        p = self.params
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        gx, gy = np.meshgrid(xs, ys)

        if p.mode is CompositionMode.VALLEY:
            s = smoothstep(p.center_opening / 2, p.center_opening, np.abs(gx - 0.5))
            mask = p.valley_floor + (1.0 - p.valley_floor) * s
        elif p.mode is CompositionMode.COASTAL:
            coast_x = np.sin(gy * np.pi) * p.coastal_curve
            mask = smoothstep(0.0, p.water_visibility, np.abs(gx - (0.5 + coast_x)))
        else:
            vertical = np.abs(np.sin(gx * np.pi * 2)) ** p.cliff_steepness
            bias = p.vertical_bias + (1 - p.vertical_bias) * self.noise.sample2d_grid(xs * 10, ys * 10)
            mask = vertical * bias

        return np.clip(mask, 0.0, 1.0)
