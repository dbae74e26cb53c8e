"""
Configuration modules for terrain generation.
"""

from .config import TerrainSettings, settings
from .log_config import configure_logging
from .terrain_palette import (
    DEFAULT_PALETTE,
    FeatureStyle,
    HSLColor,
    TerrainPalette,
    TerrainTypeColors,
)
from .terrain_params import TerrainParams

__all__ = [
    "TerrainSettings",
    "settings",
    "configure_logging",
    "DEFAULT_PALETTE",
    "FeatureStyle",
    "HSLColor",
    "TerrainPalette",
    "TerrainTypeColors",
    "TerrainParams",
]
