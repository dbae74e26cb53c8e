"""
Core terrain generation functionality.
"""

from .alea_prng import AleaPRNG
from .noise_field import NoiseField
from .composition import CompositionMask, CompositionMode, CompositionParams, choose_composition
from .heightmap_builder import HeightmapBuilder, HeightmapConfig
from .geometry import Bounds, Landform, PathSegment, Point2D, VectorPath, classify, convex_hull, point_in_polygon
from .details import DetailGenerator, ErosionKind, ErosionPattern, RockFormation
from .features import Blob, Feature, FeatureExtractor, FeatureKind
from .colors import ColorCompositor, Gradient, GradientStop, Lighting
from .terrain_system import (
    DepthLayer,
    DepthLayerSpec,
    GenerationResult,
    GenerationStatus,
    SystemState,
    TerrainOptions,
    TerrainSystem,
)

__all__ = ['AleaPRNG', 'NoiseField',
           'CompositionMask', 'CompositionMode', 'CompositionParams', 'choose_composition',
           'HeightmapBuilder', 'HeightmapConfig',
           'Bounds', 'Landform', 'PathSegment', 'Point2D', 'VectorPath', 'classify', 'convex_hull',
           'point_in_polygon',
           'DetailGenerator', 'ErosionKind', 'ErosionPattern', 'RockFormation',
           'Blob', 'Feature', 'FeatureExtractor', 'FeatureKind',
           'ColorCompositor', 'Gradient', 'GradientStop', 'Lighting',
           'DepthLayer', 'DepthLayerSpec', 'GenerationResult', 'GenerationStatus', 'SystemState',
           'TerrainOptions', 'TerrainSystem']
