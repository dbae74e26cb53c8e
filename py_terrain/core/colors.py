"""
Color composition for terrain layers, features and rocks.

Produces renderer-agnostic gradient descriptors: an axis and an ordered list
of color stops. Background layers fade out through the alpha channel.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ..config.terrain_palette import DEFAULT_PALETTE, HSLColor, TerrainPalette
from .details import RockFormation
from .geometry import Bounds, Landform, Point2D

# Lightness offsets for feature gradient stops
STOP_LIGHTNESS = 15.0
LIGHTING_LIGHTNESS = 10.0
ATMOSPHERIC_FADE = 0.3


@dataclass(frozen=True)
class Lighting:
    """Lighting input supplied by the host scene."""

    intensity: float = 1.0


@dataclass(frozen=True)
class GradientStop:
    """One gradient stop."""

    offset: float
    color: HSLColor
    alpha: float = 1.0


@dataclass(frozen=True)
class Gradient:
    """Linear gradient from ``start`` to ``end``."""

    start: Point2D
    end: Point2D
    stops: Tuple[GradientStop, ...]


def adjust_color(color: HSLColor, h: float = 0.0, s: float = 0.0, l: float = 0.0) -> HSLColor:
    """Shift an HSL color, wrapping hue and clamping saturation and lightness."""
    hue, sat, light = color
    return (
        (hue + h) % 360,
        max(0.0, min(100.0, sat + s)),
        max(0.0, min(100.0, light + l)),
    )


def depth_alpha(depth: float) -> float:
    """Atmospheric fade for a layer depth."""
    return 1.0 - depth * ATMOSPHERIC_FADE


def terrain_type_for_depth(depth: float) -> str:
    """Palette key of a depth layer."""
    if depth > 0.8:
        return "mountain"
    if depth > 0.6:
        return "plateau"
    if depth > 0.4:
        return "valley"
    if depth > 0.2:
        return "riverbank"
    return "coastal"


class ColorCompositor:
    """Looks up palettes and builds gradients."""

    def __init__(self, palette: Optional[TerrainPalette] = None):
        self.palette = palette or DEFAULT_PALETTE

    def landform_color(self, landform: Landform, depth: float) -> HSLColor:
        """Landform base color, desaturated and lightened with depth."""
        landform = Landform(landform)
        base = self.palette.landforms.get(landform.value, self.palette.landforms["mountain"])
        return adjust_color(base, s=-depth * 10, l=depth * 5)

    def feature_color(self, kind: str) -> HSLColor:
        """Palette color of a feature kind."""
        return self.palette.features[kind].color

    def feature_gradient(
        self,
        bounds: Bounds,
        color: HSLColor,
        depth: float,
        lighting: Optional[Lighting] = None,
    ) -> Gradient:
        """
        Vertical gradient across a feature.

        The top stop is lightened and the bottom stop darkened, both further
        by the lighting intensity. Alpha fades with depth.

        Args:
            bounds: Feature bounds
            color: Feature base color
            depth: Layer depth
            lighting: Scene lighting

        Returns:
            Gradient with stops at 0, 0.5 and 1
        """
        intensity = (lighting or Lighting()).intensity
        alpha = depth_alpha(depth)
        light = adjust_color(color, l=STOP_LIGHTNESS + intensity * LIGHTING_LIGHTNESS)
        dark = adjust_color(color, l=-STOP_LIGHTNESS - intensity * LIGHTING_LIGHTNESS)

        center_x = bounds.center.x
        return Gradient(
            start=Point2D(center_x, bounds.min_y),
            end=Point2D(center_x, bounds.max_y),
            stops=(
                GradientStop(0.0, light, alpha),
                GradientStop(0.5, tuple(color), alpha),
                GradientStop(1.0, dark, alpha),
            ),
        )

    def layer_gradient(
        self,
        terrain_type: str,
        depth: float,
        scene_height: float,
        lighting: Optional[Lighting] = None,
    ) -> Gradient:
        """
        Backdrop gradient of a whole depth layer.

        Args:
            terrain_type: Palette key of the layer
            depth: Layer depth
            scene_height: Scene height in world units
            lighting: Scene lighting

        Returns:
            Gradient with highlight, base and shadow stops
        """
        intensity = (lighting or Lighting()).intensity
        colors = self.palette.terrain_types[terrain_type]
        alpha = depth_alpha(depth)

        return Gradient(
            start=Point2D(0.0, depth * scene_height),
            end=Point2D(0.0, (depth + 0.2) * scene_height),
            stops=(
                GradientStop(0.0, adjust_color(colors.highlight, l=intensity * LIGHTING_LIGHTNESS), alpha),
                GradientStop(0.3, tuple(colors.base), alpha),
                GradientStop(1.0, tuple(colors.shadow), alpha),
            ),
        )

    def rock_gradient(self, rock: RockFormation) -> Gradient:
        """Gradient for a rock formation from its current color."""
        return Gradient(
            start=Point2D(rock.position.x, rock.position.y - rock.size),
            end=Point2D(rock.position.x, rock.position.y + rock.size),
            stops=(
                GradientStop(0.0, adjust_color(rock.color, l=10), 0.9),
                GradientStop(0.5, tuple(rock.color), 0.8),
                GradientStop(1.0, adjust_color(rock.color, l=-10), 0.7),
            ),
        )
