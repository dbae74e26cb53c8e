"""
Computational geometry for terrain features.

This module handles:
- Point and bounds value types
- Landform classification from a blob's point cloud
- Convex hulls (Graham scan)
- Even-odd point-in-polygon tests
- Closed vector paths per landform (jagged cliffs, smooth mountains,
  flat-topped plateaus)

Paths are plain data; turning them into drawing primitives is left to the
renderer.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .alea_prng import AleaPRNG

# Classification thresholds
CLIFF_SLOPE_VARIANCE = 0.8
MOUNTAIN_VERTICAL_RANGE = 0.6

# Cliff path jaggedness
JAG_PROBABILITY = 0.3
JAG_AMPLITUDE = 20.0

# Plateau top band height in world units
PLATEAU_TOP_BAND = 10.0


@dataclass(frozen=True)
class Point2D:
    """A point in world space."""

    x: float
    y: float

    def midpoint(self, other: "Point2D") -> "Point2D":
        return Point2D((self.x + other.x) / 2, (self.y + other.y) / 2)


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point2D:
        return Point2D((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)


class Landform(str, Enum):
    """Silhouette classes produced by shape analysis."""

    CLIFF = "cliff"
    MOUNTAIN = "mountain"
    PLATEAU = "plateau"


@dataclass(frozen=True)
class PathSegment:
    """
    One drawing command.

    ``op`` is one of "move", "line", "bezier" or "close". A bezier carries
    (control1, control2, end); move and line carry a single point; close
    carries none.
    """

    op: str
    points: Tuple[Point2D, ...] = ()


@dataclass(frozen=True)
class VectorPath:
    """Renderer-agnostic vector path."""

    segments: Tuple[PathSegment, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.segments

    @property
    def is_closed(self) -> bool:
        return bool(self.segments) and self.segments[-1].op == "close"

    def anchor_points(self) -> List[Point2D]:
        """End points of every move, line and bezier segment, in order."""
        return [seg.points[-1] for seg in self.segments if seg.points]

    @classmethod
    def combine(cls, paths: Iterable["VectorPath"]) -> "VectorPath":
        """Concatenate several paths into one multi-contour path."""
        segments: List[PathSegment] = []
        for path in paths:
            segments.extend(path.segments)
        return cls(tuple(segments))


def to_point(value) -> Point2D:
    """Coerce a Point2D, (x, y) pair or object with x/y attributes."""
    if isinstance(value, Point2D):
        return value
    if hasattr(value, "x") and hasattr(value, "y"):
        return Point2D(float(value.x), float(value.y))
    x, y = value
    return Point2D(float(x), float(y))


def bounds(points: Sequence[Point2D]) -> Bounds:
    """Bounding box of a non-empty point sequence."""
    if not points:
        raise ValueError("Cannot compute bounds of an empty point set")
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return Bounds(min(xs), min(ys), max(xs), max(ys))


def centroid(points: Sequence[Point2D]) -> Point2D:
    """Mean of a non-empty point sequence."""
    if not points:
        raise ValueError("Cannot compute centroid of an empty point set")
    n = len(points)
    return Point2D(sum(p.x for p in points) / n, sum(p.y for p in points) / n)


def vertical_range(points: Sequence[Point2D], scene_height: float) -> float:
    """Vertical extent of the points as a fraction of the scene height."""
    if not points or scene_height <= 0:
        return 0.0
    ys = [p.y for p in points]
    return (max(ys) - min(ys)) / scene_height


def slope_variance(points: Sequence[Point2D]) -> float:
    """
    Variance of |dy/dx| between consecutive points, scaled into [0, 1].

    Steps with dx == 0 are skipped. Returns 0 when no slope can be measured.
    """
    slopes = []
    for prev, curr in zip(points, points[1:]):
        dx = curr.x - prev.x
        if dx != 0:
            slopes.append(abs((curr.y - prev.y) / dx))

    if not slopes:
        return 0.0

    mean = sum(slopes) / len(slopes)
    variance = sum((s - mean) ** 2 for s in slopes) / len(slopes)
    return min(1.0, variance * 2)


def classify(points: Sequence[Point2D], scene_height: float) -> Landform:
    """
    Classify a point cloud as cliff, mountain or plateau.

    Args:
        points: Blob points in extraction order
        scene_height: Scene height used to normalize the vertical range

    Returns:
        Landform
    """
    if slope_variance(points) > CLIFF_SLOPE_VARIANCE:
        return Landform.CLIFF
    if vertical_range(points, scene_height) > MOUNTAIN_VERTICAL_RANGE:
        return Landform.MOUNTAIN
    return Landform.PLATEAU


def _cross(o: Point2D, a: Point2D, b: Point2D) -> float:
    return (a.x - o.x) * (b.y - o.y) - (a.y - o.y) * (b.x - o.x)


def convex_hull(points: Sequence[Point2D]) -> List[Point2D]:
    """
    Convex hull by Graham scan.

    Starts from the point with minimal y (ties broken by minimal x), sorts
    the rest by polar angle around it and keeps only left turns. Inputs
    with fewer than three points are returned unchanged.

    Args:
        points: Input points

    Returns:
        Hull vertices in scan order
    """
    points = list(points)
    if len(points) < 3:
        return points

    start_index = min(range(len(points)), key=lambda i: (points[i].y, points[i].x))
    start = points[start_index]
    rest = points[:start_index] + points[start_index + 1:]

    rest.sort(
        key=lambda p: (
            math.atan2(p.y - start.y, p.x - start.x),
            (p.x - start.x) ** 2 + (p.y - start.y) ** 2,
        )
    )

    hull = [start]
    for point in rest:
        while len(hull) > 1 and _cross(hull[-2], hull[-1], point) <= 0:
            hull.pop()
        hull.append(point)

    return hull


def point_in_polygon(point: Point2D, polygon: Sequence[Point2D]) -> bool:
    """Even-odd ray casting test."""
    inside = False
    n = len(polygon)
    if n < 3:
        return False

    j = n - 1
    for i in range(n):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y
        if (yi > point.y) != (yj > point.y):
            x_cross = (xj - xi) * (point.y - yi) / (yj - yi) + xi
            if point.x < x_cross:
                inside = not inside
        j = i

    return inside


def build_path(
    hull: Sequence[Point2D], landform: Landform, prng: Optional[AleaPRNG] = None
) -> VectorPath:
    """
    Closed vector path tracing a hull in the style of its landform.

    Args:
        hull: Ordered boundary points
        landform: Landform deciding the path style
        prng: Generator for cliff jaggedness

    Returns:
        VectorPath, empty for an empty hull
    """
    if not hull:
        return VectorPath()

    landform = Landform(landform)
    if landform is Landform.CLIFF:
        segments = _cliff_segments(hull, prng or AleaPRNG("cliff"))
    elif landform is Landform.MOUNTAIN:
        segments = _mountain_segments(hull)
    else:
        segments = _plateau_segments(hull)

    segments.append(PathSegment("close"))
    return VectorPath(tuple(segments))


def _cliff_segments(points: Sequence[Point2D], prng: AleaPRNG) -> List[PathSegment]:
    """Straight runs with randomly jagged midpoints."""
    segments = [PathSegment("move", (points[0],))]
    for prev, curr in zip(points, points[1:]):
        if prng.chance(JAG_PROBABILITY):
            mx = (prev.x + curr.x) / 2
            my = prev.y + (prng.random() - 0.5) * JAG_AMPLITUDE
            segments.append(PathSegment("line", (Point2D(mx, my),)))
        segments.append(PathSegment("line", (curr,)))
    return segments


def _mountain_segments(points: Sequence[Point2D]) -> List[PathSegment]:
    """Bezier curves with control points at neighboring midpoints."""
    segments = [PathSegment("move", (points[0],))]
    n = len(points)
    for i in range(1, n):
        prev = points[i - 1]
        curr = points[i]
        nxt = points[(i + 1) % n]
        segments.append(PathSegment("bezier", (prev.midpoint(curr), curr.midpoint(nxt), curr)))
    return segments


def _plateau_segments(points: Sequence[Point2D]) -> List[PathSegment]:
    """Flat top run along the highest band, then straight sides."""
    top_limit = points[0].y + PLATEAU_TOP_BAND
    top = [p for p in points if p.y < top_limit]
    sides = [p for p in points if p.y >= top_limit]

    segments = [PathSegment("move", (top[0],))]
    segments.extend(PathSegment("line", (p,)) for p in top[1:])
    segments.extend(PathSegment("line", (p,)) for p in sides)
    return segments
