"""
Procedural surface detail for terrain features.

This module implements:
- Rock formations with noisy outlines, cracks, interior texture and
  weathering streaks
- Erosion patterns (water, wind, geological) with a per-kind channel
  generation policy
- Per-tick evolution of erosion age/activity and rock color modulation

All detail objects are immutable. Ticks return replacement objects.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import structlog

from ..config.terrain_palette import DEFAULT_PALETTE, HSLColor
from .alea_prng import AleaPRNG
from .geometry import Point2D, centroid, point_in_polygon
from .noise_field import NoiseField

logger = structlog.get_logger()

Polyline = Tuple[Point2D, ...]

ROCK_SEGMENTS = 12
ROCK_VERTICAL_SQUASH = 0.8
AGE_RATE = 0.001  # Age units per millisecond of delta time
GEOLOGICAL_SATURATION_AGE = 10.0


class ErosionKind(str, Enum):
    """Erosion agents."""

    WATER = "water"
    WIND = "wind"
    GEOLOGICAL = "geological"


@dataclass(frozen=True)
class RockFormation:
    """A rock outcrop attached to a feature."""

    boundary: Polyline
    cracks: Tuple[Polyline, ...]
    texture: Tuple[Point2D, ...]
    weathering: Tuple[Polyline, ...]
    base_color: HSLColor
    color: HSLColor
    position: Point2D
    size: float
    age: float


@dataclass(frozen=True)
class ErosionPattern:
    """A set of erosion channels sharing one agent and one evolving state."""

    channels: Tuple[Polyline, ...]
    depth: float
    kind: ErosionKind
    age: float
    activity: float


def erosion_activity(kind: ErosionKind, age: float, noise: Optional[NoiseField] = None) -> float:
    """
    Activity of an erosion pattern at a given age, in [0, 1].

    Args:
        kind: Erosion agent
        age: Pattern age
        noise: Noise field, required for wind

    Returns:
        Activity level
    """
    kind = ErosionKind(kind)
    if kind is ErosionKind.WATER:
        activity = 0.5 + 0.3 * math.sin(age * 2)
    elif kind is ErosionKind.WIND:
        gust = noise.sample2d(age, 0) if noise is not None else 0.0
        activity = 0.3 + 0.4 * gust
    else:
        activity = min(1.0, age / GEOLOGICAL_SATURATION_AGE)
    return min(1.0, max(0.0, activity))


def advance_erosion(
    pattern: ErosionPattern, delta_time: float, noise: Optional[NoiseField] = None
) -> ErosionPattern:
    """Age a pattern by one tick and recompute its activity."""
    age = pattern.age + max(0.0, delta_time) * AGE_RATE
    return replace(pattern, age=age, activity=erosion_activity(pattern.kind, age, noise))


def modulate_rock_color(rock: RockFormation, time: float) -> RockFormation:
    """Slow lightness oscillation, always derived from the base color."""
    h, s, l = rock.base_color
    l = min(100.0, max(0.0, l * (1 + math.sin(time * 0.001) * 0.1)))
    return replace(rock, color=(h, s, l))


class DetailGenerator:
    """Generates rock formations and erosion patterns for features."""

    def __init__(
        self,
        noise: NoiseField,
        prng: AleaPRNG,
        max_texture_samples: int = 200,
        erosion_scale: float = 1.0,
        rock_color: Optional[HSLColor] = None,
    ):
        """
        Initialize the detail generator.

        Args:
            noise: Shared noise field
            prng: Generator for all random draws
            max_texture_samples: Cap on texture candidates per rock
            erosion_scale: Multiplier on erosion channel depth
            rock_color: Base rock color, defaults to the cliff palette entry
        """
        self.noise = noise
        self.prng = prng
        self.max_texture_samples = max(0, int(max_texture_samples))
        self.erosion_scale = max(0.0, erosion_scale)
        self.rock_color = rock_color or DEFAULT_PALETTE.rock_color

    def rock_formations(self, points: Sequence[Point2D], size: float) -> List[RockFormation]:
        """
        Scatter rocks along a feature boundary.

        Args:
            points: Feature boundary points
            size: Feature size

        Returns:
            Between 3 and 7 rock formations, or none for an empty boundary
        """
        if not points or size <= 0:
            return []

        formations = []
        for i in range(self.prng.randint(3, 7)):
            position = self.prng.choice(points)
            rock_size = size * (0.2 + self.prng.random() * 0.3)
            outline = self._rock_outline(position, rock_size, i)

            formations.append(
                RockFormation(
                    boundary=outline,
                    cracks=self._rock_walks(outline, rock_size, self.prng.randint(3, 6), None, 0.2),
                    texture=self._rock_texture(outline, rock_size),
                    weathering=self._rock_walks(outline, rock_size, self.prng.randint(4, 7), 4, 0.15),
                    base_color=self.rock_color,
                    color=self.rock_color,
                    position=position,
                    size=rock_size,
                    age=self.prng.random(),
                )
            )

        return formations

    def _rock_outline(self, position: Point2D, rock_size: float, index: int) -> Polyline:
        """Radial outline with coarse and fine noise on the radius."""
        outline = []
        for j in range(ROCK_SEGMENTS):
            angle = j / ROCK_SEGMENTS * math.pi * 2
            radius = rock_size * (0.8 + self.prng.random() * 0.4)
            radius *= 1 + self.noise.sample2d(angle * 3, index) * 0.3
            radius *= 1 + self.noise.sample2d(angle * 8, index + 1) * 0.2
            outline.append(
                Point2D(
                    position.x + math.cos(angle) * radius,
                    position.y + math.sin(angle) * radius * ROCK_VERTICAL_SQUASH,
                )
            )
        return tuple(outline)

    def _rock_walks(
        self,
        outline: Polyline,
        rock_size: float,
        count: int,
        steps: Optional[int],
        wobble: float,
    ) -> Tuple[Polyline, ...]:
        """Short noisy walks from outline points (cracks and weathering)."""
        walks = []
        for _ in range(count):
            start = self.prng.choice(outline)
            angle = self.prng.random() * math.pi * 2
            n_steps = steps if steps is not None else self.prng.randint(4, 6)
            walks.append(self._walk(start, angle, rock_size, n_steps, 0.1, rock_size * wobble))
        return tuple(walks)

    def _rock_texture(self, outline: Polyline, rock_size: float) -> Tuple[Point2D, ...]:
        """Interior speckles by rejection sampling against the outline."""
        center = centroid(outline)
        candidates = min(int(rock_size * 2), self.max_texture_samples)
        texture = []
        for _ in range(candidates):
            angle = self.prng.random() * math.pi * 2
            distance = self.prng.random() * rock_size * 0.8
            point = Point2D(center.x + math.cos(angle) * distance, center.y + math.sin(angle) * distance)
            if point_in_polygon(point, outline):
                texture.append(point)
        return tuple(texture)

    def erosion_patterns(self, feature_kind: str, points: Sequence[Point2D], size: float) -> List[ErosionPattern]:
        """
        Erosion patterns for a feature, following its kind's policy.

        Ridges and cliffs erode geologically, valleys and slopes by water,
        plateaus by wind.

        Args:
            feature_kind: Feature kind value (ridge, cliff, valley, slope, plateau)
            points: Feature boundary points
            size: Feature size

        Returns:
            List of erosion patterns
        """
        if len(points) < 2 or size <= 0:
            return []

        if feature_kind in ("ridge", "cliff"):
            patterns = self.geological_patterns(points, size)
        elif feature_kind == "valley":
            patterns = self.valley_water_patterns(points, size)
        elif feature_kind == "slope":
            patterns = self.coastal_water_patterns(points, size)
        elif feature_kind == "plateau":
            patterns = self.wind_patterns(points, size)
        else:
            raise ValueError(f"Unknown feature kind: {feature_kind}")

        logger.debug("Erosion patterns generated", kind=feature_kind, patterns=len(patterns))
        return patterns

    def geological_patterns(self, points: Sequence[Point2D], size: float) -> List[ErosionPattern]:
        """Long channels with tributaries branching at right angles."""
        patterns = []
        steps = 10
        for _ in range(self.prng.randint(3, 6)):
            current = self.prng.choice(points)
            angle = self.prng.random() * math.pi * 2
            main = [current]
            channels = []

            for _ in range(steps):
                wobble = self.noise.sample2d(current.x * 0.02, current.y * 0.02) * size * 0.1
                current = Point2D(
                    current.x + math.cos(angle + wobble) * (size / steps),
                    current.y + math.sin(angle + wobble) * (size / steps),
                )
                main.append(current)

                if self.prng.chance(0.3):
                    channels.append(self._walk(current, angle + math.pi / 2, size * 0.3, 5, 0.05, size * 0.3 * 0.2))

            channels.append(tuple(main))
            patterns.append(self._pattern(channels, 0.5 + self.prng.random() * 0.5, ErosionKind.GEOLOGICAL))

        return patterns

    def valley_water_patterns(self, points: Sequence[Point2D], size: float) -> List[ErosionPattern]:
        """A main channel along the valley floor plus branching tributaries."""
        main = [points[0]]
        current = points[0]
        for point in points[1:]:
            offset = self.noise.sample2d(current.x * 0.02, current.y * 0.02) * size * 0.15
            current = Point2D(point.x + offset, point.y + offset * 0.5)
            main.append(current)

        patterns = [self._pattern([tuple(main)], 0.8, ErosionKind.WATER)]

        length = size * 0.4
        for _ in range(self.prng.randint(2, 4)):
            start = points[int(self.prng.random() * (len(points) - 1))]
            branches = []
            for _ in range(self.prng.randint(2, 4)):
                angle = (math.pi / 3) * (self.prng.random() - 0.5)
                branches.append(self._walk(start, angle, length, 5, 0.05, length * 0.2))
            patterns.append(self._pattern(branches, 0.4 + self.prng.random() * 0.3, ErosionKind.WATER))

        return patterns

    def coastal_water_patterns(self, points: Sequence[Point2D], size: float) -> List[ErosionPattern]:
        """Wave lines following the shore plus undercut channels."""
        patterns = []
        n = len(points)

        for i in range(self.prng.randint(3, 6)):
            wave = [points[0]]
            for idx in range(1, n):
                point = points[idx]
                t = idx / n
                wave_height = math.sin(t * math.pi * 4) * size * 0.05
                jitter = self.noise.sample2d(point.x * 0.05, i) * size * 0.03
                wave.append(Point2D(point.x, point.y + wave_height + jitter))
            patterns.append(self._pattern([tuple(wave)], 0.2 + self.prng.random() * 0.3, ErosionKind.WATER))

        length = size * 0.3
        for _ in range(self.prng.randint(2, 4)):
            start = points[int(self.prng.random() * (n - 1))]
            patterns.append(
                self._pattern([self._undercut(start, length)], 0.4 + self.prng.random() * 0.3, ErosionKind.WATER)
            )

        return patterns

    def wind_patterns(self, points: Sequence[Point2D], size: float) -> List[ErosionPattern]:
        """Smooth directional streaks."""
        patterns = []
        for _ in range(self.prng.randint(4, 7)):
            start = self.prng.choice(points)
            angle = self.prng.random() * math.pi * 2
            streak = self._walk(start, angle, size, 8, 0.03, size * 0.1)
            patterns.append(self._pattern([streak], 0.3 + self.prng.random() * 0.4, ErosionKind.WIND))
        return patterns

    def _walk(
        self,
        start: Point2D,
        angle: float,
        length: float,
        steps: int,
        frequency: float,
        wobble: float,
    ) -> Polyline:
        """Random walk whose heading is bent by noise at each step."""
        current = start
        walk = [current]
        for _ in range(steps):
            bend = self.noise.sample2d(current.x * frequency, current.y * frequency) * wobble
            current = Point2D(
                current.x + math.cos(angle + bend) * (length / steps),
                current.y + math.sin(angle + bend) * (length / steps),
            )
            walk.append(current)
        return tuple(walk)

    def _undercut(self, start: Point2D, length: float) -> Polyline:
        """Curved channel that swings out and back over its length."""
        steps = 6
        base_angle = math.pi / 2 * (self.prng.random() - 0.5)
        current = start
        path = [current]
        for i in range(steps):
            t = i / steps
            angle = base_angle + math.sin(t * math.pi) * math.pi / 4
            bend = self.noise.sample2d(current.x * 0.05, current.y * 0.05) * length * 0.2
            current = Point2D(
                current.x + math.cos(angle + bend) * (length / steps),
                current.y + math.sin(angle + bend) * (length / steps),
            )
            path.append(current)
        return tuple(path)

    def _pattern(self, channels, depth: float, kind: ErosionKind) -> ErosionPattern:
        age = self.prng.random()
        return ErosionPattern(
            channels=tuple(channels),
            depth=depth * self.erosion_scale,
            kind=kind,
            age=age,
            activity=erosion_activity(kind, age, self.noise),
        )
