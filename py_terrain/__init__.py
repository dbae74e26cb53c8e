"""
Procedural layered 2D terrain generation.
"""

# core must load before utils: utils.random imports the core generator
from .core import TerrainOptions, TerrainSystem
from .config import TerrainParams, configure_logging, settings

__version__ = "0.1.0"

__all__ = ["TerrainSystem", "TerrainOptions", "TerrainParams", "configure_logging", "settings", "__version__"]
