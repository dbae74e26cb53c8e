"""
Landform feature extraction.

This module handles:
- Segmenting a heightmap into connected blobs of similar elevation
- Mapping blob cells from grid to world coordinates
- The Feature value type shared by the rest of the pipeline
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
import structlog

from ..config.terrain_palette import HSLColor
from .composition import CompositionMode
from .details import ErosionPattern, RockFormation
from .geometry import Bounds, Landform, Point2D, VectorPath, point_in_polygon

logger = structlog.get_logger()

# Flood fill defaults
HEIGHT_THRESHOLD = 0.2
REGION_EPSILON = 0.2
MIN_BLOB_POINTS = 6  # blobs of five cells or fewer are noise

NEIGHBOR_OFFSETS = (
    (1, 0),
    (-1, 0),
    (0, 1),
    (0, -1),
    (1, 1),
    (-1, -1),
    (1, -1),
    (-1, 1),
)


class FeatureKind(str, Enum):
    """Feature kinds used for palettes and erosion policy."""

    RIDGE = "ridge"
    VALLEY = "valley"
    PLATEAU = "plateau"
    CLIFF = "cliff"
    SLOPE = "slope"


def kind_for_landform(landform: Landform, mode: Optional[CompositionMode] = None) -> FeatureKind:
    """
    Feature kind of a classified landform within a scene.

    Flat landforms read as valley floors in valley scenes and as shore
    slopes in coastal scenes.
    """
    landform = Landform(landform)
    if landform is Landform.CLIFF:
        return FeatureKind.CLIFF
    if landform is Landform.MOUNTAIN:
        return FeatureKind.RIDGE
    if mode is CompositionMode.VALLEY:
        return FeatureKind.VALLEY
    if mode is CompositionMode.COASTAL:
        return FeatureKind.SLOPE
    return FeatureKind.PLATEAU


@dataclass
class Blob:
    """A connected region of heightmap cells."""

    cells: List[Tuple[int, int]]  # (x, y) grid cells in fill order
    points: List[Point2D]  # same cells in world space
    base_height: float  # height of the seed cell

    @property
    def size(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class Feature:
    """A landform with its outline, detail and color."""

    kind: FeatureKind
    landform: Landform
    boundary: Tuple[Point2D, ...]
    path: VectorPath
    position: Point2D
    size: float
    bounds: Bounds
    elevation_layer: float
    color: HSLColor
    rock_formations: Tuple[RockFormation, ...] = field(default=())
    erosion_patterns: Tuple[ErosionPattern, ...] = field(default=())

    @property
    def reference_height(self) -> float:
        """Top edge of the feature in world space."""
        return self.bounds.min_y

    def contains(self, point: Point2D) -> bool:
        """Whether ``point`` lies inside the boundary (even-odd rule)."""
        return point_in_polygon(point, self.boundary)


class FeatureExtractor:
    """Segments heightmaps into blobs by 8-connected flood fill."""

    def __init__(
        self,
        width: float,
        height: float,
        threshold: float = HEIGHT_THRESHOLD,
        region_epsilon: float = REGION_EPSILON,
        min_points: int = MIN_BLOB_POINTS,
    ):
        """
        Initialize the extractor.

        Args:
            width: Scene width in world units
            height: Scene height in world units
            threshold: A cell must exceed this height to seed a blob
            region_epsilon: Max height difference between a cell and its blob's seed
            min_points: Smallest blob to keep
        """
        self.width = width
        self.height = height
        self.threshold = threshold
        self.region_epsilon = region_epsilon
        self.min_points = min_points

    def extract(self, heightmap: np.ndarray) -> List[Blob]:
        """
        Extract blobs from a heightmap.

        Args:
            heightmap: Array indexed [y, x]

        Returns:
            Blobs in scan order, small blobs dropped
        """
        heightmap = np.asarray(heightmap, dtype=np.float64)
        if heightmap.ndim != 2 or heightmap.size == 0:
            return []

        rows, cols = heightmap.shape
        visited = np.zeros((rows, cols), dtype=bool)
        blobs = []
        dropped = 0

        for y in range(rows):
            for x in range(cols):
                if visited[y, x] or heightmap[y, x] <= self.threshold:
                    continue

                blob = self._flood_fill(heightmap, x, y, visited)
                if blob.size >= self.min_points:
                    blobs.append(blob)
                else:
                    dropped += 1

        logger.debug("Blobs extracted", kept=len(blobs), dropped=dropped)
        return blobs

    def _flood_fill(self, heightmap: np.ndarray, start_x: int, start_y: int, visited: np.ndarray) -> Blob:
        """Depth-first fill from a seed cell."""
        rows, cols = heightmap.shape
        base_height = float(heightmap[start_y, start_x])
        cells = []
        points = []

        visited[start_y, start_x] = True
        stack = [(start_x, start_y)]

        while stack:
            x, y = stack.pop()
            cells.append((x, y))
            points.append(Point2D(x / cols * self.width, y / rows * self.height))

            for dx, dy in NEIGHBOR_OFFSETS:
                nx, ny = x + dx, y + dy
                if nx < 0 or nx >= cols or ny < 0 or ny >= rows or visited[ny, nx]:
                    continue
                if abs(heightmap[ny, nx] - base_height) < self.region_epsilon:
                    visited[ny, nx] = True
                    stack.append((nx, ny))

        return Blob(cells=cells, points=points, base_height=base_height)
