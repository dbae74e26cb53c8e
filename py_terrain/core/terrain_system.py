"""
Layered terrain system.

Owns the depth layers of a scene and runs the full pipeline:

    noise -> heightmap -> composition mask -> blobs -> outlines -> detail -> color

Generation is synchronous. Once ready the system answers point queries,
advances erosion and rock colors per tick, and accepts hand-placed features.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import structlog

from ..config import settings as default_settings
from ..config.config import TerrainSettings
from ..config.terrain_palette import TerrainPalette
from ..config.terrain_params import TerrainParams
from ..utils.random import create_prng
from .alea_prng import AleaPRNG
from .colors import ColorCompositor, Gradient, Lighting, terrain_type_for_depth
from .composition import (
    DEFAULT_WEIGHTS,
    CompositionMask,
    CompositionParams,
    choose_composition,
)
from .details import DetailGenerator, RockFormation, advance_erosion, modulate_rock_color
from .features import Feature, FeatureExtractor, FeatureKind, kind_for_landform
from .geometry import (
    Landform,
    Point2D,
    VectorPath,
    bounds,
    build_path,
    centroid,
    classify,
    convex_hull,
    to_point,
)
from .heightmap_builder import HeightmapBuilder, HeightmapConfig
from .noise_field import NoiseField

logger = structlog.get_logger()

TEMPLATE_SEGMENTS = 20
MIN_FEATURE_SIZE = 1.0
DEFAULT_CLIFF_STEEPNESS = 0.9


class SystemState(str, Enum):
    """Lifecycle of a terrain system."""

    UNINITIALIZED = "uninitialized"
    GENERATING = "generating"
    READY = "ready"


class GenerationStatus(str, Enum):
    """Outcome of a generation run."""

    GENERATED = "generated"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class DepthLayerSpec:
    """Placement of one depth layer."""

    depth: float
    scale: float
    y_offset: float


DEFAULT_DEPTH_LAYERS = (
    DepthLayerSpec(depth=0.0, scale=1.0, y_offset=0.0),
    DepthLayerSpec(depth=0.3, scale=0.85, y_offset=50.0),
    DepthLayerSpec(depth=0.6, scale=0.7, y_offset=100.0),
)


@dataclass(frozen=True)
class DepthLayer:
    """One terrain slice at a simulated distance from the viewer."""

    depth: float
    scale: float
    y_offset: float
    terrain_type: str
    features: Tuple[Feature, ...] = ()

    @property
    def path(self) -> VectorPath:
        """All feature outlines combined into one path."""
        return VectorPath.combine(feature.path for feature in self.features)


@dataclass(frozen=True)
class GenerationResult:
    """Layers produced by one generation, and whether it fell back."""

    status: GenerationStatus
    layers: Tuple[DepthLayer, ...]
    composition: CompositionParams
    params: TerrainParams
    seed: Any
    blob_count: int
    skipped_blobs: int = 0

    @property
    def generated(self) -> bool:
        return self.status is GenerationStatus.GENERATED

    @property
    def feature_count(self) -> int:
        return sum(len(layer.features) for layer in self.layers)


@dataclass
class TerrainOptions:
    """Generation options for a terrain system."""

    resolution: int = 100
    base_frequency: float = 0.05
    octaves: int = 3
    complexity: float = 1.0
    amplitude_falloff: float = 1.2
    height_threshold: float = 0.2
    region_epsilon: float = 0.2
    min_blob_points: int = 6
    max_texture_samples: int = 200
    composition_weights: Dict[str, float] = None
    depth_layers: Sequence[DepthLayerSpec] = DEFAULT_DEPTH_LAYERS

    def __post_init__(self):
        if self.composition_weights is None:
            self.composition_weights = dict(DEFAULT_WEIGHTS)

        specs = []
        for spec in self.depth_layers:
            if not isinstance(spec, DepthLayerSpec):
                spec = DepthLayerSpec(*spec)
            specs.append(replace(spec, depth=min(1.0, max(0.0, spec.depth))))
        if not specs:
            raise ValueError("At least one depth layer is required")
        self.depth_layers = tuple(sorted(specs, key=lambda s: s.depth))

    @classmethod
    def from_settings(cls, settings: TerrainSettings) -> "TerrainOptions":
        """Options with defaults taken from library settings."""
        return cls(
            resolution=settings.resolution,
            base_frequency=settings.base_frequency,
            octaves=settings.octaves,
            complexity=settings.complexity,
            amplitude_falloff=settings.amplitude_falloff,
            height_threshold=settings.height_threshold,
            region_epsilon=settings.region_epsilon,
            min_blob_points=settings.min_blob_points,
            max_texture_samples=settings.max_texture_samples,
            composition_weights=settings.composition_weights,
        )


class TerrainSystem:
    """Generates and serves layered 2D terrain."""

    def __init__(
        self,
        width: float,
        height: float,
        water_level: float,
        params: Optional[Union[TerrainParams, Mapping[str, Any]]] = None,
        seed: Optional[Union[str, int]] = None,
        prng: Optional[AleaPRNG] = None,
        options: Optional[TerrainOptions] = None,
        palette: Optional[TerrainPalette] = None,
    ):
        """
        Initialize the terrain system and generate the first terrain.

        Args:
            width: Scene width in world units
            height: Scene height in world units
            water_level: Height reported where no terrain exists
            params: Partial parameter overrides
            seed: Seed for the generator
            prng: Generator to use instead of seeding a new one
            options: Generation options, defaults from settings
            palette: Color palette, defaults to the built-in palette
        """
        self.width = self._positive_dimension("width", width)
        self.height = self._positive_dimension("height", height)
        self.water_level = float(water_level)
        self.params = TerrainParams.from_overrides(params)
        self.options = options or TerrainOptions.from_settings(default_settings)
        self.compositor = ColorCompositor(palette)

        if prng is not None:
            self.seed = prng.seed
            self._prng = prng
        else:
            self.seed = seed if seed is not None else default_settings.default_seed
            self._prng = create_prng(self.seed)

        self.state = SystemState.UNINITIALIZED
        self.composition: Optional[CompositionParams] = None
        self.last_result: Optional[GenerationResult] = None
        self._layers: List[DepthLayer] = []
        self._noise: Optional[NoiseField] = None
        self._details: Optional[DetailGenerator] = None

        self.generate_terrain()

    @staticmethod
    def _positive_dimension(name: str, value: float) -> float:
        if value < 1:
            logger.warning("Scene dimension too small, clamping", dimension=name, value=value)
            return 1
        return value

    @property
    def layers(self) -> Tuple[DepthLayer, ...]:
        """Depth layers, foreground first."""
        return tuple(self._layers)

    def get_depth_layers(self) -> List[DepthLayer]:
        """Depth layers as a new list, foreground first."""
        return list(self._layers)

    def generate_terrain(self) -> GenerationResult:
        """
        Run the full pipeline and replace all layers.

        Returns:
            GenerationResult, with FALLBACK status when no usable feature was found
        """
        self.state = SystemState.GENERATING
        opts = self.options
        logger.info(
            "Generating terrain",
            width=self.width,
            height=self.height,
            seed=self.seed,
            layers=len(opts.depth_layers),
        )

        noise = NoiseField.from_prng(self._prng)
        composition = choose_composition(
            self._prng, opts.composition_weights, self._composition_defaults()
        )
        mask = CompositionMask(composition, noise)
        builder = HeightmapBuilder(self._heightmap_config(), noise, self._prng)
        extractor = FeatureExtractor(
            self.width,
            self.height,
            threshold=opts.height_threshold,
            region_epsilon=opts.region_epsilon,
            min_points=opts.min_blob_points,
        )
        details = DetailGenerator(
            noise,
            self._prng,
            max_texture_samples=opts.max_texture_samples,
            erosion_scale=self.params.erosion_scale,
            rock_color=self.compositor.palette.rock_color,
        )

        self._noise = noise
        self._details = details
        self.composition = composition

        layers = []
        blob_count = 0
        skipped = 0
        for spec in opts.depth_layers:
            heightmap = builder.build(mask, depth=spec.depth, scale=spec.scale)
            blobs = extractor.extract(heightmap)
            blob_count += len(blobs)

            features = []
            for blob in blobs:
                feature = self._build_feature(blob.points, spec.depth)
                if feature is None:
                    skipped += 1
                else:
                    features.append(feature)

            logger.debug("Layer generated", depth=spec.depth, blobs=len(blobs), features=len(features))
            layers.append(
                DepthLayer(
                    depth=spec.depth,
                    scale=spec.scale,
                    y_offset=spec.y_offset,
                    terrain_type=terrain_type_for_depth(spec.depth),
                    features=tuple(features),
                )
            )

        if any(layer.features for layer in layers):
            status = GenerationStatus.GENERATED
        else:
            status = GenerationStatus.FALLBACK
            logger.warning("No usable terrain features, using empty terrain", blobs=blob_count)

        self._layers = layers
        result = GenerationResult(
            status=status,
            layers=tuple(layers),
            composition=composition,
            params=self.params,
            seed=self.seed,
            blob_count=blob_count,
            skipped_blobs=skipped,
        )
        self.last_result = result
        self.state = SystemState.READY

        logger.info(
            "Terrain generated",
            status=status.value,
            mode=composition.mode.value,
            features=result.feature_count,
        )
        return result

    def regenerate(
        self,
        seed: Optional[Union[str, int]] = None,
        params: Optional[Union[TerrainParams, Mapping[str, Any]]] = None,
    ) -> GenerationResult:
        """
        Generate new terrain, optionally reseeding or changing parameters.

        Without a seed the current generator continues, so each call yields
        different terrain.
        """
        if seed is not None:
            self.seed = seed
            self._prng = create_prng(seed)
        if params is not None:
            self.params = TerrainParams.from_overrides(params)
        return self.generate_terrain()

    def _composition_defaults(self) -> CompositionParams:
        """Composition parameters that are not drawn per generation."""
        steepness = DEFAULT_CLIFF_STEEPNESS
        if "cliff_steepness" in self.params.model_fields_set:
            steepness = self.params.cliff_steepness
        return CompositionParams(cliff_steepness=steepness, valley_floor=self.params.valley_floor)

    def _heightmap_config(self) -> HeightmapConfig:
        opts = self.options
        return HeightmapConfig(
            resolution=opts.resolution,
            base_frequency=opts.base_frequency,
            octaves=opts.octaves,
            complexity=opts.complexity,
            amplitude_falloff=opts.amplitude_falloff,
            height_gain=self.params.height_gain,
        )

    def _build_feature(
        self,
        points: Sequence[Point2D],
        depth: float,
        landform: Optional[Landform] = None,
    ) -> Optional[Feature]:
        """
        Turn a point cloud into a finished feature.

        Returns None when the outline degenerates to fewer than three points.
        """
        if landform is None:
            landform = classify(points, self.height)

        hull = convex_hull(points)
        if len(hull) < 3:
            logger.warning("Degenerate feature outline skipped", points=len(points), hull=len(hull))
            return None

        box = bounds(hull)
        size = max(box.width, box.height)
        kind = kind_for_landform(landform, self.composition.mode if self.composition else None)

        rock_scale = {FeatureKind.RIDGE: 1.0, FeatureKind.CLIFF: 1.0, FeatureKind.PLATEAU: 0.5}
        rocks = []
        if kind in rock_scale:
            rocks = self._details.rock_formations(hull, size * rock_scale[kind])

        return Feature(
            kind=kind,
            landform=landform,
            boundary=tuple(hull),
            path=build_path(hull, landform, self._prng),
            position=centroid(hull),
            size=size,
            bounds=box,
            elevation_layer=depth,
            color=self.compositor.landform_color(landform, depth),
            rock_formations=tuple(rocks),
            erosion_patterns=tuple(self._details.erosion_patterns(kind.value, hull, size)),
        )

    def _clamp_query(self, x: float, y: float) -> Point2D:
        return Point2D(min(self.width, max(0.0, float(x))), min(self.height, max(0.0, float(y))))

    def _topmost_feature(self, point: Point2D) -> Optional[Feature]:
        """Foreground layers first; within a layer the latest feature wins."""
        for layer in self._layers:
            for feature in reversed(layer.features):
                if feature.contains(point):
                    return feature
        return None

    def height_at(self, x: float, y: float) -> float:
        """Reference height of the topmost feature at a point, else the water level."""
        feature = self._topmost_feature(self._clamp_query(x, y))
        if feature is None:
            return self.water_level
        return feature.reference_height

    def terrain_type_at(self, x: float, y: float) -> str:
        """Landform name of the topmost feature at a point, else "water"."""
        feature = self._topmost_feature(self._clamp_query(x, y))
        if feature is None:
            return "water"
        return feature.landform.value

    def is_point_on_ground(self, x: float, y: float) -> bool:
        """Whether a point is at or below the terrain surface."""
        point = self._clamp_query(x, y)
        return point.y >= self.height_at(point.x, point.y)

    def update(self, time: float, delta_time: float) -> None:
        """
        Advance erosion state and rock colors by one tick.

        Geometry is never touched.

        Args:
            time: Current time in milliseconds
            delta_time: Time since the previous tick in milliseconds
        """
        if self.state is not SystemState.READY:
            return

        self._layers = [
            replace(
                layer,
                features=tuple(self._tick_feature(feature, time, delta_time) for feature in layer.features),
            )
            for layer in self._layers
        ]

    def _tick_feature(self, feature: Feature, time: float, delta_time: float) -> Feature:
        return replace(
            feature,
            erosion_patterns=tuple(
                advance_erosion(pattern, delta_time, self._noise) for pattern in feature.erosion_patterns
            ),
            rock_formations=tuple(modulate_rock_color(rock, time) for rock in feature.rock_formations),
        )

    def add_terrain_feature(
        self, landform: Union[Landform, str], position, size: float
    ) -> Optional[Feature]:
        """
        Place a feature by hand on the foreground layer.

        Args:
            landform: cliff, mountain or plateau
            position: Center point, a Point2D or (x, y) pair
            size: Template radius in world units

        Returns:
            The new feature
        """
        landform = Landform(landform)
        center = to_point(position)
        if size <= 0:
            logger.warning("Feature size must be positive, clamping", size=size)
            size = MIN_FEATURE_SIZE

        foreground = self._layers[0]
        feature = self._build_feature(
            self._template_points(landform, center, size), foreground.depth, landform=landform
        )
        if feature is None:
            return None

        self._layers[0] = replace(foreground, features=foreground.features + (feature,))
        logger.info(
            "Terrain feature added",
            landform=landform.value,
            x=center.x,
            y=center.y,
            size=size,
        )
        return feature

    @staticmethod
    def _template_points(landform: Landform, center: Point2D, size: float) -> List[Point2D]:
        """Radial outline whose radius wobbles in a landform-specific way."""
        points = []
        for i in range(TEMPLATE_SEGMENTS + 1):
            angle = i / TEMPLATE_SEGMENTS * math.pi * 2
            if landform is Landform.CLIFF:
                radius = size * (0.8 + abs(math.sin(angle * 3)) * 0.4)
            elif landform is Landform.MOUNTAIN:
                radius = size * (0.9 + math.cos(angle * 2) * 0.2)
            else:
                radius = size * (0.95 + math.sin(angle * 4) * 0.1)
            points.append(
                Point2D(center.x + math.cos(angle) * radius, center.y + math.sin(angle) * radius)
            )
        return points

    def layer_gradient(self, index: int, lighting: Optional[Lighting] = None) -> Gradient:
        """Backdrop gradient of the layer at ``index``."""
        layer = self._layers[index]
        return self.compositor.layer_gradient(layer.terrain_type, layer.depth, self.height, lighting)

    def feature_gradient(self, feature: Feature, lighting: Optional[Lighting] = None) -> Gradient:
        """Fill gradient of a feature."""
        return self.compositor.feature_gradient(
            feature.bounds, feature.color, feature.elevation_layer, lighting
        )

    def rock_gradient(self, rock: RockFormation) -> Gradient:
        """Fill gradient of a rock formation."""
        return self.compositor.rock_gradient(rock)
