"""
Color palettes for terrain layers, features, and landforms.

Colors are HSL triples: hue in degrees, saturation and lightness in percent.
"""

from typing import Dict, Tuple

from pydantic import BaseModel, Field

HSLColor = Tuple[float, float, float]


class TerrainTypeColors(BaseModel):
    """Three-tone palette for one terrain type."""

    base: HSLColor = Field(description="Midtone color")
    shadow: HSLColor = Field(description="Darker tone for the bottom of a gradient")
    highlight: HSLColor = Field(description="Lighter tone for the top of a gradient")


class FeatureStyle(BaseModel):
    """Palette entry for one feature kind."""

    color: HSLColor = Field(description="Base feature color")
    shadow_intensity: float = Field(default=0.3, description="Relative shadow strength")
    roughness: float = Field(default=0.5, description="Surface roughness hint for renderers")


class TerrainPalette(BaseModel):
    """All palettes used by the color compositor."""

    terrain_types: Dict[str, TerrainTypeColors] = Field(
        default={
            "mountain": TerrainTypeColors(base=(220, 15, 35), shadow=(220, 20, 25), highlight=(220, 10, 45)),
            "valley": TerrainTypeColors(base=(150, 20, 45), shadow=(150, 25, 35), highlight=(150, 15, 55)),
            "plateau": TerrainTypeColors(base=(30, 25, 40), shadow=(30, 30, 30), highlight=(30, 20, 50)),
            "coastal": TerrainTypeColors(base=(45, 30, 50), shadow=(45, 35, 40), highlight=(45, 25, 60)),
            "riverbank": TerrainTypeColors(base=(140, 25, 45), shadow=(140, 30, 35), highlight=(140, 20, 55)),
        },
        description="Layer palettes keyed by terrain type",
    )

    features: Dict[str, FeatureStyle] = Field(
        default={
            "ridge": FeatureStyle(color=(210, 15, 40), shadow_intensity=0.3, roughness=0.7),
            "valley": FeatureStyle(color=(150, 20, 45), shadow_intensity=0.4, roughness=0.5),
            "plateau": FeatureStyle(color=(35, 25, 50), shadow_intensity=0.2, roughness=0.3),
            "cliff": FeatureStyle(color=(200, 15, 35), shadow_intensity=0.5, roughness=0.8),
            "slope": FeatureStyle(color=(160, 20, 45), shadow_intensity=0.3, roughness=0.4),
        },
        description="Feature palettes keyed by feature kind",
    )

    landforms: Dict[str, HSLColor] = Field(
        default={
            "cliff": (220, 15, 35),
            "mountain": (210, 20, 40),
            "plateau": (200, 25, 45),
        },
        description="Silhouette base colors keyed by landform",
    )

    rock_feature: str = Field(default="cliff", description="Feature palette entry used for rocks")

    @property
    def rock_color(self) -> HSLColor:
        """Base color for rock formations."""
        return self.features[self.rock_feature].color


# Default palette shared by the compositor
DEFAULT_PALETTE = TerrainPalette()
